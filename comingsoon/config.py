#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import json
import logging
import os
from dataclasses import dataclass, fields, replace
from datetime import date, datetime
from typing import Mapping, Optional

import yaml

DEFAULT_BACKEND_URL = 'http://localhost:8000'
LOG_FORMAT = '[%(asctime).19s] [%(name)s] [%(levelname)s] %(message)s'

# Environment variable -> SiteConfig field
ENV_OVERRIDES = {
    'COMINGSOON_BACKEND_URL': 'backend_url',
    'COMINGSOON_LAUNCH_DATE': 'launch_date',
    'COMINGSOON_LOG_LEVEL': 'log_level',
    'COMINGSOON_LOG_FILE': 'log_file',
}

NUMBER = (int, float)

# SiteConfig field -> accepted value types
FIELD_TYPES = {
    'backend_url': str,
    'launch_date': str,
    'countdown_days': int,
    'tick_interval': NUMBER,
    'timeout': NUMBER,
    'source': str,
    'log_level': str,
    'log_file': str,
}
OPTIONAL_FIELDS = ('launch_date', 'log_file')


class ConfigError(Exception):
    """Configuration file or value is invalid."""
    pass


@dataclass(frozen=True)
class SiteConfig:
    """Resolved settings for the coming-soon page.

    Attributes:
        backend_url: Base URL of the subscription API (no trailing slash)
        launch_date: Pinned launch date string, or None to count down
            ``countdown_days`` from startup
        countdown_days: Fallback countdown length in days
        tick_interval: Seconds between countdown refreshes
        timeout: HTTP request timeout in seconds
        source: Value sent as ``source`` with every signup
        log_level: Logging level name
        log_file: Log file path, or None for stderr
    """

    backend_url: str = DEFAULT_BACKEND_URL
    launch_date: Optional[str] = None
    countdown_days: int = 30
    tick_interval: float = 1.0
    timeout: float = 10.0
    source: str = 'coming-soon'
    log_level: str = 'info'
    log_file: Optional[str] = 'comingsoon.log'

    @property
    def level(self) -> int:
        """Logging level constant for ``log_level``."""
        return parse_log_level(self.log_level)

    def with_overrides(self, **overrides) -> 'SiteConfig':
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        if 'backend_url' in changes:
            changes['backend_url'] = normalize_url(changes['backend_url'])
        return replace(self, **changes)


def normalize_url(url: str) -> str:
    """Strip whitespace and trailing slashes from a base URL."""
    return url.strip().rstrip('/')


def parse_log_level(name) -> int:
    """Convert a level name such as 'debug' to its logging constant

    Raises:
        ConfigError: If the name is not a standard logging level
    """
    level = getattr(logging, str(name).upper(), None)
    if not isinstance(level, int):
        raise ConfigError(f'Unknown log level: {name!r}')
    return level


def read_config_file(path: str) -> dict:
    """Load a JSON or YAML configuration file

    The format is picked from the extension: ``.yaml``/``.yml`` files are
    parsed with PyYAML, everything else as JSON.

    Raises:
        ConfigError: If the file cannot be read or is not a mapping
    """
    try:
        with open(path, 'r', encoding='utf-8') as fp:
            if path.endswith(('.yaml', '.yml')):
                conf = yaml.safe_load(fp)
            else:
                conf = json.load(fp)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise ConfigError(f'Could not load config {path}: {e}') from e

    if conf is None:
        return {}
    if not isinstance(conf, dict):
        raise ConfigError(f'Config {path} must contain a mapping, got {type(conf).__name__}')
    return conf


def _check_types(values: dict) -> dict:
    """Coerce or reject config values of the wrong type

    PyYAML reads an unquoted ``launch_date: 2026-12-01`` as a date; those
    are turned back into ISO strings.

    Raises:
        ConfigError: If a value has the wrong type
    """
    checked = dict(values)

    launch_date = checked.get('launch_date')
    if isinstance(launch_date, (date, datetime)):
        checked['launch_date'] = launch_date.isoformat()

    for key, value in checked.items():
        allowed = FIELD_TYPES[key]
        if value is None and key in OPTIONAL_FIELDS:
            continue
        # bool is an int subclass but never a valid number here
        if isinstance(value, bool) or not isinstance(value, allowed):
            raise ConfigError(
                f'Config value {key!r} must be {_type_names(allowed)}, '
                f'got {type(value).__name__}')
        if allowed == NUMBER:
            checked[key] = float(value)

    for key in ('tick_interval', 'timeout'):
        if key in checked and checked[key] <= 0:
            raise ConfigError(f'Config value {key!r} must be positive')
    if checked.get('countdown_days', 0) < 0:
        raise ConfigError("Config value 'countdown_days' must not be negative")

    return checked


def _type_names(allowed) -> str:
    if not isinstance(allowed, tuple):
        allowed = (allowed,)
    return ' or '.join(t.__name__ for t in allowed)


def load_config(path: Optional[str] = None,
                env: Optional[Mapping[str, str]] = None) -> SiteConfig:
    """Resolve the site configuration

    Precedence is environment over file over defaults. Empty environment
    values are treated as unset.

    Args:
        path: Optional JSON/YAML config file
        env: Environment mapping (defaults to os.environ)

    Returns:
        SiteConfig instance
    """
    if env is None:
        env = os.environ

    conf = read_config_file(path) if path else {}

    known = {f.name for f in fields(SiteConfig)}
    unknown = set(conf) - known
    if unknown:
        logging.getLogger(__name__).warning(
            'Ignoring unknown config keys: %s', ', '.join(sorted(unknown)))
    values = {k: v for k, v in conf.items() if k in known}

    for var, key in ENV_OVERRIDES.items():
        value = env.get(var)
        if value:
            values[key] = value

    config = SiteConfig(**_check_types(values))

    config = replace(config, backend_url=normalize_url(config.backend_url))
    # Fail early on a bad level rather than at logging setup
    parse_log_level(config.log_level)
    return config


def configure_logging(level=logging.INFO, log_file=None, log_format=LOG_FORMAT):
    """Attach a single handler to the ``comingsoon`` logger

    Args:
        level: Logging level (e.g., logging.INFO, logging.DEBUG)
        log_file: File path string (None for stderr)
        log_format: Format string for log messages

    Returns:
        Configured logger instance
    """
    if isinstance(log_file, str):
        handler = logging.FileHandler(
            log_file,
            mode='a',
            encoding='utf-8',
            errors='replace'
        )
    else:
        handler = logging.StreamHandler(log_file)  # Default to stderr if None

    handler.setFormatter(logging.Formatter(log_format))

    logger = logging.getLogger('comingsoon')
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False

    return logger
