"""Alembic migrations for the ledger schema, driven from ``[tool.alembic]``."""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import TYPE_CHECKING, Final

from alembic import command
from alembic.config import Config

from pointledger.config import get_database_uri

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

PROJECT_ROOT: Final[Path] = Path(__file__).resolve().parents[5]
PYPROJECT_PATH: Final[Path] = PROJECT_ROOT / "pyproject.toml"
MIGRATIONS_PATH: Final[Path] = Path(__file__).resolve().parent

_NOT_MAIN_OPTIONS: Final[frozenset[str]] = frozenset({"script_location", "prepend_sys_path"})


def _alembic_options() -> dict[str, str]:
    try:
        with PYPROJECT_PATH.open("rb") as pyproject_file:
            document = tomllib.load(pyproject_file)
    except FileNotFoundError:
        return {}
    section = document.get("tool", {}).get("alembic", {})
    return {str(key): str(value) for key, value in section.items()}


def _script_path(script_location: str | None) -> Path:
    """Resolve the migration scripts; an installed wheel falls back to this package."""

    if script_location is None:
        return MIGRATIONS_PATH
    candidate = Path(script_location)
    path = candidate if candidate.is_absolute() else PROJECT_ROOT / candidate
    return path if path.exists() else MIGRATIONS_PATH


def _build_config() -> Config:
    options = _alembic_options()
    config = Config()
    config.set_main_option("script_location", str(_script_path(options.get("script_location"))))
    for key, value in options.items():
        if key not in _NOT_MAIN_OPTIONS:
            config.set_main_option(key, value)
    return config


def upgrade_head(*, engine: Engine | None = None, database_uri: str | None = None) -> None:
    """Upgrade the ledger schema to the latest revision."""

    config = _build_config()
    if engine is not None:
        log.info("Upgrading ledger schema on %s", engine.url.render_as_string())
        with engine.begin() as connection:
            config.attributes["connection"] = connection
            command.upgrade(config, "head")
        return
    config.set_main_option("sqlalchemy.url", database_uri or get_database_uri())
    command.upgrade(config, "head")
