"""
Test fixtures and helpers for filtergen tests.

This module provides:
- Sample configuration dictionaries and YAML files
- Model builders for rules
- Logging reset between tests
"""
import logging

import pytest
import yaml

from filtergen.models import Actions, Config, Const, Filters, MatchFilters, Rule


# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def config_dict():
    """Return a complete rule configuration as loaded from YAML."""
    return {
        'version': 'v1alpha1',
        'consts': {
            'friends': {'values': ['alice@example.com', 'bob@example.com']},
            'spammers': {'values': ['Bulk Sender']},
        },
        'rules': [
            {
                'filters': {
                    'from': ['boss@example.com'],
                    'consts': {'from': ['friends']},
                },
                'actions': {
                    'markImportant': True,
                    'labels': ['work'],
                },
            },
            {
                'filters': {
                    'subject': ['build failed', 'deploy'],
                },
                'actions': {
                    'archive': True,
                    'category': 'updates',
                    'labels': ['ci', 'alerts'],
                },
            },
        ],
    }


@pytest.fixture
def config_file(tmp_path, config_dict):
    """Write config_dict to a temporary YAML file and return its path."""
    path = tmp_path / "filters.yaml"
    with open(path, 'w') as f:
        yaml.dump(config_dict, f, sort_keys=False)
    return path


@pytest.fixture
def write_config(tmp_path):
    """Return a helper that writes arbitrary data to a YAML config file."""
    def _write(data, name="filters.yaml"):
        path = tmp_path / name
        with open(path, 'w') as f:
            if isinstance(data, str):
                f.write(data)
            else:
                yaml.dump(data, f, sort_keys=False)
        return path
    return _write


# ============================================================================
# Model Fixtures
# ============================================================================

def make_rule(from_=None, to=None, subject=None, has=None, consts=None, **actions) -> Rule:
    """Build a Rule from keyword arguments; extra keywords become Actions fields."""
    return Rule(
        filters=Filters(
            match=MatchFilters(
                from_=list(from_ or []),
                to=list(to or []),
                subject=list(subject or []),
                has=list(has or []),
            ),
            consts=consts or MatchFilters(),
        ),
        actions=Actions(**actions),
    )


@pytest.fixture
def rule_builder():
    """Return the make_rule helper."""
    return make_rule


@pytest.fixture
def consts():
    """Constants used by pipeline tests, in declaration order."""
    return {
        'friends': Const(values=['alice@example.com', 'bob@example.com']),
        'team': Const(values=['carol@example.com']),
    }


@pytest.fixture
def sample_config(consts):
    """A two-rule Config exercising consts, categories and label splitting."""
    return Config(
        consts=consts,
        rules=[
            make_rule(from_=['boss@example.com'], mark_important=True, labels=['work']),
            make_rule(
                subject=['build failed'],
                consts=MatchFilters(from_=['team']),
                archive=True,
                labels=['ci', 'alerts'],
            ),
        ],
    )


# ============================================================================
# Logging
# ============================================================================

@pytest.fixture(autouse=True)
def reset_logging():
    """Reset the filtergen logger after each test."""
    yield
    root_logger = logging.getLogger('filtergen')
    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)
    root_logger.setLevel(logging.NOTSET)
    root_logger.propagate = True
