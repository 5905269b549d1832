"""
Centralized logging configuration for filtergen.

This module configures the ``filtergen`` logger hierarchy once at startup so
every module can keep using ``logging.getLogger(__name__)``.

Settings are resolved from, lowest to highest precedence:
    1. DEFAULT_CONFIG
    2. FILTERGEN_LOG_LEVEL, FILTERGEN_LOG_FORMAT, FILTERGEN_LOG_FILE
    3. Runtime overrides (the CLI's --log-level and --log-format)

Usage:
    >>> import logging
    >>> from filtergen.logging_config import init_logging, rule_context
    >>> init_logging(overrides={'level': 'DEBUG', 'format': 'json'})
    >>> with rule_context(0):
    ...     logging.getLogger('filtergen.rules').debug("tagged with rule_index=0")
"""
import contextvars
import copy
import json
import logging
import os
import sys
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

ROOT_LOGGER_NAME = 'filtergen'

DEFAULT_CONFIG = {
    'level': 'WARNING',
    'format': 'plain',  # 'plain' or 'json'
    'handlers': {
        'console': {'enabled': True},
        'file': {'enabled': False, 'path': 'logs/filtergen.log'},
    },
}

# Environment variable -> key path in the configuration
ENV_VAR_MAPPING = {
    'FILTERGEN_LOG_LEVEL': ('level',),
    'FILTERGEN_LOG_FORMAT': ('format',),
    'FILTERGEN_LOG_FILE': ('handlers', 'file', 'path'),
}

PLAIN_FORMAT = '%(asctime)s %(levelname)-8s [%(component)s] [rule=%(rule_index)s] %(message)s'
PLAIN_DATEFMT = '%Y-%m-%d %H:%M:%S'

_rule_index: contextvars.ContextVar[Optional[int]] = contextvars.ContextVar('rule_index', default=None)


@contextmanager
def rule_context(rule_index: int) -> Iterator[None]:
    """
    Attach a rule index to every log record emitted inside the block.

    Example:
        >>> with rule_context(3):
        ...     logger.debug("generating filters")
    """
    token = _rule_index.set(rule_index)
    try:
        yield
    finally:
        _rule_index.reset(token)


class JSONFormatter(logging.Formatter):
    """Render each record as a single-line JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'component': getattr(record, 'component', record.name),
            'message': record.getMessage(),
        }
        rule_index = getattr(record, 'rule_index', None)
        if isinstance(rule_index, int):
            payload['rule_index'] = rule_index
        if record.exc_info:
            payload['exception'] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


class ContextFilter(logging.Filter):
    """Stamp ``component`` and ``rule_index`` onto records."""

    def filter(self, record: logging.LogRecord) -> bool:
        rule_index = _rule_index.get()
        record.rule_index = '-' if rule_index is None else rule_index
        if not hasattr(record, 'component'):
            # 'filtergen.rules' -> 'rules'
            record.component = record.name.rsplit('.', 1)[-1]
        return True


def _deep_update(target: Dict[str, Any], updates: Dict[str, Any]) -> None:
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _deep_update(target[key], value)
        else:
            target[key] = value


def _env_settings() -> Dict[str, Any]:
    """Collect FILTERGEN_LOG_* variables into a nested settings dict."""
    settings: Dict[str, Any] = {}
    for env_var, key_path in ENV_VAR_MAPPING.items():
        value = os.environ.get(env_var)
        if not value:
            continue
        node = settings
        for key in key_path[:-1]:
            node = node.setdefault(key, {})
        node[key_path[-1]] = value
    if os.environ.get('FILTERGEN_LOG_FILE'):
        # naming a log file implies writing to it
        settings['handlers']['file']['enabled'] = True
    return settings


def _level(name: Any) -> int:
    return getattr(logging, str(name).upper(), logging.WARNING)


def _build_handlers(config: Dict[str, Any]):
    formatter: logging.Formatter
    if str(config['format']).lower() == 'json':
        formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(fmt=PLAIN_FORMAT, datefmt=PLAIN_DATEFMT)

    handlers = []
    if config['handlers']['console'].get('enabled'):
        # stderr so that generated XML on stdout stays clean
        handlers.append(logging.StreamHandler(sys.stderr))
    file_config = config['handlers']['file']
    if file_config.get('enabled'):
        path = Path(file_config['path'])
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path, encoding='utf-8'))

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(ContextFilter())
    return handlers


def init_logging(overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Initialize the filtergen logger hierarchy.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        overrides: Runtime settings, e.g. ``{'level': 'DEBUG'}``

    Returns:
        The effective configuration dictionary
    """
    config = copy.deepcopy(DEFAULT_CONFIG)
    _deep_update(config, _env_settings())
    if overrides:
        _deep_update(config, overrides)

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()
    for handler in _build_handlers(config):
        root_logger.addHandler(handler)
    root_logger.setLevel(_level(config['level']))
    root_logger.propagate = False

    root_logger.debug(f"Logging initialized: level={config['level']}, format={config['format']}")
    return config
