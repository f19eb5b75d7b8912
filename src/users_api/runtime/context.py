"""Application-wide access to the active configuration.

The configuration lives in a context variable so tests and tasks can swap it
for a block of code without touching module globals.
"""

import os
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from src.users_api.runtime.config.config_data import ConfigData
from src.users_api.runtime.config.loader import load_config


@dataclass(frozen=True)
class AppContext:
    """Application-wide state shared through the context variable."""

    config: ConfigData


def config_path() -> Path:
    return Path(os.environ.get("USERS_API_CONFIG", "config.yaml"))


_app_context: ContextVar[AppContext] = ContextVar(
    "app_context", default=AppContext(config=load_config(config_path()))
)


def get_context() -> AppContext:
    return _app_context.get()


def get_config() -> ConfigData:
    return _app_context.get().config


def set_config(config: ConfigData) -> None:
    """Replace the configuration for the rest of the current context."""
    _app_context.set(replace(get_context(), config=config))


def override_config(base: ConfigData, **sections: dict[str, Any]) -> ConfigData:
    """Return a copy of ``base`` with fields of the named sections replaced.

    Example:
        override_config(config, app={"environment": "production"})
    """
    updates = {}
    for name, values in sections.items():
        if name not in ConfigData.model_fields:
            raise ValueError(f"Unknown configuration section: {name}")
        updates[name] = getattr(base, name).model_copy(update=values, deep=True)
    return base.model_copy(update=updates, deep=True)


@contextmanager
def with_context(
    config: ConfigData | None = None, **sections: dict[str, Any]
) -> Iterator[ConfigData]:
    """Temporarily activate a configuration.

    ``config`` replaces the active configuration outright; keyword sections
    are then applied on top of it (or on top of the active configuration when
    ``config`` is omitted). The previous configuration is restored on exit.
    """
    if config is not None and not isinstance(config, ConfigData):
        raise ValueError(f"config must be ConfigData or None, got {type(config)}")

    active = override_config(config or get_config(), **sections)
    token = _app_context.set(replace(get_context(), config=active))
    try:
        yield active
    finally:
        _app_context.reset(token)
