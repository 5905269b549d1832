"""
filtergen: translate declarative mail rules into Gmail filters.

Example:
    >>> from filtergen import load_config, generate_rules, entries_to_xml
    >>> entries = generate_rules(load_config("filters.yaml"))
    >>> xml = entries_to_xml(entries)
"""

__version__ = '0.1.0'

from filtergen.config_loader import load_config, parse_config
from filtergen.error_handling import (
    ConfigurationError,
    EmptyActionSetError,
    EmptyFilterSetError,
    EmptyValueError,
    FilterGenError,
    GenerationError,
    RuleGenerationError,
    UnknownCategoryError,
    UnresolvedConstantError,
)
from filtergen.models import (
    Actions,
    Category,
    Config,
    Const,
    Entry,
    Filters,
    MatchFilters,
    Property,
    PropertyName,
    Rule,
    SmartLabel,
)
from filtergen.rules import generate_rule, generate_rules
from filtergen.xml_export import entries_to_xml, parse_xml, write_xml
