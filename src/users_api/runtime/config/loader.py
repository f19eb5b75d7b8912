"""Load ``config.yaml`` into :class:`ConfigData`.

Placeholders of the form ``${NAME}``, ``${NAME:-fallback}`` and
``${NAME:?hint}`` are resolved from the process environment before the YAML
is parsed. Full-line comments are left untouched so they can document the
placeholder syntax.
"""

import os
import re
from collections.abc import MutableMapping
from pathlib import Path

import yaml
from loguru import logger
from pydantic_core import ValidationError

from src.users_api.runtime.config.config_data import ConfigData

PLACEHOLDER = re.compile(
    r"\$\{(?P<name>[A-Za-z_][A-Za-z0-9_]*)(?:(?P<op>:-|:\?)(?P<arg>[^}]*))?\}"
)


def _resolve(match: re.Match) -> str:
    name, op, arg = match.group("name", "op", "arg")
    value = os.environ.get(name)
    if value is not None:
        return value
    if op == ":-":
        return arg
    if op == ":?":
        raise ValueError(f"Environment variable {name} is required: {arg}")
    raise ValueError(f"Environment variable {name} is not set")


def expand_placeholders(text: str) -> str:
    """Resolve every placeholder outside full-line ``#`` comments."""
    return "".join(
        line if line.lstrip().startswith("#") else PLACEHOLDER.sub(_resolve, line)
        for line in text.splitlines(keepends=True)
    )


def promote_environment_overrides(
    environment: str, environ: MutableMapping[str, str] | None = None
) -> list[str]:
    """Copy ``<ENVIRONMENT>_NAME`` variables onto ``NAME``.

    Returns the names that were promoted.
    """
    environ = os.environ if environ is None else environ
    prefix = environment.upper() + "_"
    promoted = []
    for key in [k for k in environ if k.startswith(prefix)]:
        target = key.removeprefix(prefix)
        environ[target] = environ[key]
        promoted.append(target)

    if promoted:
        logger.info("Promoted {} overrides: {}", environment, sorted(promoted))
    return promoted


def read_config(path: Path) -> ConfigData:
    """Parse ``path`` after placeholder expansion.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If a required variable is missing, the YAML is malformed,
            or the values do not form a valid configuration.
    """
    environment = os.environ.get("APP_ENVIRONMENT", "development")
    promote_environment_overrides(environment)

    raw = path.read_text()
    try:
        document = yaml.safe_load(expand_placeholders(raw))
    except yaml.YAMLError as e:
        raise ValueError(f"{path} is not valid YAML: {e}") from e

    if not isinstance(document, dict):
        raise ValueError(f"{path} must contain a mapping with a 'config' key")

    try:
        config = ConfigData.model_validate(document.get("config") or {})
    except ValidationError as e:
        raise ValueError(f"{path} holds an invalid configuration: {e}") from e

    logger.info("Loaded {} configuration from {}", config.app.environment, path)
    return config


def load_config(path: Path) -> ConfigData:
    """Like :func:`read_config`, but an absent file yields the defaults."""
    if not path.is_file():
        logger.warning("No configuration at {}; using defaults", path)
        return ConfigData()
    return read_config(path)
