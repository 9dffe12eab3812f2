"""Dispatcher settings.

Settings can be passed programmatically or read from the ``[tool.signalon]``
table of a ``pyproject.toml``::

    [tool.signalon]
    default_emitter = "UI"
    strict = false
"""

import tomllib
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from signalon.exceptions import SettingsError
from signalon.topics import DEFAULT_EMITTER, is_valid_name

log = logger.bind(source=__name__)


class DispatcherSettings(BaseModel):
    """Behaviour switches of a :class:`~signalon.Dispatcher`.

    Attributes:
        default_emitter: Emitter name used for topics given without an
            ``emitter:`` prefix and for the dispatcher's own emissions.
        strict: Raise :class:`~signalon.exceptions.SignalError` subclasses
            instead of logging and returning None.

    Raises:
        SettingsError: If fields fail pydantic validation.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    default_emitter: str = DEFAULT_EMITTER
    strict: bool = False

    def __init__(self, **data: Any) -> None:
        """Wrap pydantic ValidationError into SettingsError."""
        try:
            super().__init__(**data)
        except ValidationError as exc:
            raise SettingsError(str(exc)) from exc

    @field_validator("default_emitter")
    @classmethod
    def _check_emitter(cls, value: str) -> str:
        if not is_valid_name(value):
            raise ValueError(f"invalid emitter name {value!r}")
        return value


def load_settings(pyproject_path: Path) -> DispatcherSettings:
    """Read settings from the ``[tool.signalon]`` table of *pyproject_path*.

    Args:
        pyproject_path: Path to a ``pyproject.toml`` file.

    Returns:
        Parsed settings; defaults when the table is absent.

    Raises:
        SettingsError: If the table holds unknown keys or invalid values.
    """
    with open(pyproject_path, "rb") as fh:
        config = tomllib.load(fh)

    table = config.get("tool", {}).get("signalon", {})
    if not table:
        log.info("No [tool.signalon] table in {}; using defaults", pyproject_path)
    return DispatcherSettings(**table)
