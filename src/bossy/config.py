"""CLI configuration: env assignments, YAML env files, log level."""

import logging
import os

import yaml

LOG_ENV_VAR = "BOSSY_LOG"


def parse_env_assignments(items: list[str]) -> dict[str, str]:
    """Parse ["KEY=value", ...] into a dict. Later duplicates win.

    The value may itself contain "=" and may be empty; the key may not.
    """
    env = {}
    for item in items:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise ValueError(f"expected KEY=VALUE, got {item!r}")
        env[key] = value
    return env


def _env_value(value) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


def load_env_file(path: str) -> dict[str, str]:
    """Load a YAML mapping of environment variables.

    Scalar values are stringified; nested lists/mappings are rejected.
    An empty file is an empty mapping.
    """
    with open(path) as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"{path}: invalid YAML: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping of variables, got {type(data).__name__}")

    env = {}
    for key, value in data.items():
        if isinstance(value, (dict, list)):
            raise ValueError(f"{path}: value for {key!r} must be a scalar")
        env[str(key)] = _env_value(value)
    return env


def log_level(verbosity: int = 0, environ: dict[str, str] | None = None) -> int:
    """Resolve the stdlib log level for the CLI.

    -v → INFO, -vv → DEBUG. Without -v, BOSSY_LOG (a level name) is used,
    falling back to WARNING.
    """
    if verbosity >= 2:
        return logging.DEBUG
    if verbosity == 1:
        return logging.INFO

    environ = os.environ if environ is None else environ
    name = environ.get(LOG_ENV_VAR, "").strip().upper()
    if not name:
        return logging.WARNING
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        raise ValueError(f"{LOG_ENV_VAR}: unknown log level {name!r}")
    return level
