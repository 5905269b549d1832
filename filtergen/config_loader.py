"""
Configuration loader for filter rules.

This module reads the YAML rule configuration and converts it into the
Config data model consumed by the generation pipeline.

Configuration format:
    version: v1alpha1            # optional
    consts:
      spammers:
        values: [spam@example.com, "Bulk Sender"]
    rules:
      - filters:
          from: [boss@example.com]
          subject: ["build failed"]
          consts:
            from: [spammers]
        actions:
          archive: true
          category: updates
          labels: [work, ci]

Usage:
    >>> from filtergen.config_loader import load_config
    >>> config = load_config("config/filters.yaml")
    >>> len(config.rules)
    2

Structural problems raise ConfigurationError naming the offending path
(e.g. 'rules[2].actions.archive'). Category values are not checked here;
the generator reports unknown categories together with the rule index.
"""
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Union

import yaml

from filtergen.error_handling import ConfigurationError
from filtergen.models import Actions, Config, Const, Filters, MatchFilters, Rule

logger = logging.getLogger(__name__)

SUPPORTED_VERSIONS = ("v1alpha1",)

# Config key -> MatchFilters attribute
MATCH_FILTER_KEYS = {
    'from': 'from_',
    'to': 'to',
    'subject': 'subject',
    'has': 'has',
}

# Config key -> Actions attribute
ACTION_FLAG_KEYS = {
    'archive': 'archive',
    'delete': 'delete',
    'markRead': 'mark_read',
    'markImportant': 'mark_important',
}

TOP_LEVEL_KEYS = {'version', 'consts', 'rules'}
RULE_KEYS = {'filters', 'actions'}
FILTER_KEYS = set(MATCH_FILTER_KEYS) | {'consts'}
ACTION_KEYS = set(ACTION_FLAG_KEYS) | {'category', 'labels'}


def _require_mapping(value: Any, path: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigurationError(f"{path}: expected a mapping, got {type(value).__name__}")
    return value


def _check_keys(data: Mapping[str, Any], allowed: set, path: str) -> None:
    unknown = [str(k) for k in data if k not in allowed]
    if unknown:
        raise ConfigurationError(
            f"{path}: unknown key(s) {', '.join(sorted(unknown))}; "
            f"allowed: {', '.join(sorted(allowed))}"
        )


def _string_list(value: Any, path: str) -> List[str]:
    """
    Validate a list of non-empty strings.

    A single string is accepted as a one-element list.
    """
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        raise ConfigurationError(f"{path}: expected a list of strings, got {type(value).__name__}")

    result = []
    for i, item in enumerate(value):
        if not isinstance(item, str):
            raise ConfigurationError(f"{path}[{i}]: expected a string, got {type(item).__name__}")
        if not item:
            raise ConfigurationError(f"{path}[{i}]: value cannot be empty")
        result.append(item)
    return result


def parse_match_filters(data: Any, path: str) -> MatchFilters:
    """Convert a raw condition mapping into MatchFilters."""
    data = _require_mapping(data, path)
    _check_keys(data, set(MATCH_FILTER_KEYS), path)
    values = {
        attr: _string_list(data.get(key), f"{path}.{key}")
        for key, attr in MATCH_FILTER_KEYS.items()
    }
    return MatchFilters(**values)


def parse_filters(data: Any, path: str) -> Filters:
    """Convert a raw 'filters' mapping (literal conditions plus 'consts') into Filters."""
    data = _require_mapping(data, path)
    _check_keys(data, FILTER_KEYS, path)
    match = parse_match_filters(
        {k: v for k, v in data.items() if k != 'consts'}, path
    )
    consts = parse_match_filters(data.get('consts'), f"{path}.consts")
    return Filters(match=match, consts=consts)


def parse_actions(data: Any, path: str) -> Actions:
    """Convert a raw 'actions' mapping into Actions."""
    data = _require_mapping(data, path)
    _check_keys(data, ACTION_KEYS, path)

    flags = {}
    for key, attr in ACTION_FLAG_KEYS.items():
        value = data.get(key, False)
        if value is None:
            value = False
        if not isinstance(value, bool):
            raise ConfigurationError(f"{path}.{key}: expected true or false, got {value!r}")
        flags[attr] = value

    category = data.get('category')
    if category is not None and not isinstance(category, str):
        raise ConfigurationError(f"{path}.category: expected a string, got {type(category).__name__}")

    return Actions(
        category=category or None,
        labels=_string_list(data.get('labels'), f"{path}.labels"),
        **flags
    )


def parse_rule(data: Any, path: str) -> Rule:
    data = _require_mapping(data, path)
    _check_keys(data, RULE_KEYS, path)
    return Rule(
        filters=parse_filters(data.get('filters'), f"{path}.filters"),
        actions=parse_actions(data.get('actions'), f"{path}.actions"),
    )


def parse_consts(data: Any, path: str = 'consts') -> Dict[str, Const]:
    """Convert the raw 'consts' mapping, preserving declaration order."""
    data = _require_mapping(data, path)
    consts: Dict[str, Const] = {}
    for name, body in data.items():
        const_path = f"{path}.{name}"
        if not isinstance(name, str) or not name:
            raise ConfigurationError(f"{path}: constant names must be non-empty strings, got {name!r}")
        body = _require_mapping(body, const_path)
        _check_keys(body, {'values'}, const_path)
        consts[name] = Const(values=_string_list(body.get('values'), f"{const_path}.values"))
    return consts


def parse_config(data: Any) -> Config:
    """
    Validate a raw configuration mapping and convert it into a Config.

    Args:
        data: Mapping as produced by yaml.safe_load

    Returns:
        Config ready for generate_rules()

    Raises:
        ConfigurationError: If the structure is invalid
    """
    data = _require_mapping(data, '<root>')
    _check_keys(data, TOP_LEVEL_KEYS, '<root>')

    version = data.get('version')
    if version is not None:
        version = str(version)
        if version not in SUPPORTED_VERSIONS:
            raise ConfigurationError(
                f"version: unsupported version '{version}'; "
                f"supported: {', '.join(SUPPORTED_VERSIONS)}"
            )

    rules_data = data.get('rules') or []
    if not isinstance(rules_data, list):
        raise ConfigurationError(f"rules: expected a list, got {type(rules_data).__name__}")

    consts = parse_consts(data.get('consts'))
    rules = [parse_rule(r, f"rules[{i}]") for i, r in enumerate(rules_data)]

    logger.debug(f"Parsed configuration with {len(rules)} rules and {len(consts)} consts")
    return Config(rules=rules, consts=consts, version=version)


def load_config(path: Union[str, Path]) -> Config:
    """
    Load a rule configuration from a YAML file.

    Args:
        path: Path to the YAML file

    Returns:
        Parsed Config

    Raises:
        FileNotFoundError: If the file does not exist
        ConfigurationError: If the YAML is malformed or the structure invalid
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        raise ConfigurationError(f"Configuration file is empty: {path}")

    config = parse_config(data)
    logger.info(f"Loaded {len(config.rules)} rules from {path}")
    return config
