"""
Rule generation pipeline.

This module translates a Config into entries that map one-to-one onto Gmail
filters. Each rule goes through the same stages:

    1. Filters: literal conditions, then constant-backed conditions resolved
       against the configuration's constants, become filter properties
    2. Actions: flags, category and labels become action properties
    3. Assembly: filter and action properties are combined into entries,
       one entry per label because Gmail allows a single label per filter

Integration Pattern:
    >>> from filtergen.rules import generate_rules
    >>> entries = generate_rules(config)
    >>> for entry in entries:
    ...     print(entry.to_pairs())

Every stage is a pure function of its inputs; the constants mapping is only
read. A failing rule aborts the whole run with RuleGenerationError.
"""

import logging
from typing import Dict, List, Mapping, Sequence

from filtergen.error_handling import (
    EmptyActionSetError,
    EmptyFilterSetError,
    EmptyValueError,
    GenerationError,
    RuleGenerationError,
    UnresolvedConstantError,
    log_error_with_context,
)
from filtergen.logging_config import rule_context
from filtergen.models import (
    CATEGORY_TO_SMART_LABEL,
    SMART_LABEL_PREFIX,
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
)

logger = logging.getLogger(__name__)

# Condition classes in output order: (MatchFilters attribute, config name, property)
CONDITION_CLASSES = (
    ("from_", "from", PropertyName.FROM),
    ("to", "to", PropertyName.TO),
    ("subject", "subject", PropertyName.SUBJECT),
    ("has", "has", PropertyName.HAS),
)

TRUE_VALUE = "true"


def quote(patterns: Sequence[str]) -> List[str]:
    """Wrap patterns containing a space in double quotes."""
    return [f'"{p}"' if " " in p else p for p in patterns]


def join_or(patterns: Sequence[str]) -> str:
    """
    Combine patterns into a single "any of" match expression.

    Args:
        patterns: Patterns to combine

    Returns:
        '' for no patterns, the pattern itself for one pattern, otherwise a
        brace-delimited, space-separated list with spaced patterns quoted

    Example:
        >>> join_or(["a@x.com"])
        'a@x.com'
        >>> join_or(["a@x.com", "build failed"])
        '{a@x.com "build failed"}'
    """
    if not patterns:
        return ""
    if len(patterns) == 1:
        return patterns[0]
    return "{%s}" % " ".join(quote(patterns))


def resolve_consts(names: Sequence[str], consts: Mapping[str, Const]) -> List[str]:
    """
    Expand constant references into their values.

    Args:
        names: Constant names in reference order
        consts: Constants by name

    Returns:
        Values of all referenced constants, concatenated in reference order

    Raises:
        UnresolvedConstantError: On the first name missing from consts
    """
    resolved: List[str] = []
    for name in names:
        const = consts.get(name)
        if const is None:
            raise UnresolvedConstantError(name)
        resolved.extend(const.values)
    return resolved


def resolve_filter_consts(filters: MatchFilters, consts: Mapping[str, Const]) -> MatchFilters:
    """
    Resolve every condition class of a constant-backed MatchFilters.

    Raises:
        UnresolvedConstantError: With the failing condition class attached
    """
    resolved: Dict[str, List[str]] = {}
    for attr, condition, _ in CONDITION_CLASSES:
        try:
            resolved[attr] = resolve_consts(getattr(filters, attr), consts)
        except UnresolvedConstantError as e:
            raise UnresolvedConstantError(e.name, condition=condition) from e
    return MatchFilters(**resolved)


def _require_values(name: PropertyName, values: Sequence[str]) -> None:
    if any(not value for value in values):
        raise EmptyValueError(name.value)


def generate_match_filters(filters: MatchFilters) -> List[Property]:
    """Return one property per non-empty condition class, in from/to/subject/has order."""
    properties = []
    for attr, _, name in CONDITION_CLASSES:
        patterns = getattr(filters, attr)
        if patterns:
            _require_values(name, patterns)
            properties.append(Property(name, join_or(patterns)))
    return properties


def generate_filters(filters: Filters, consts: Mapping[str, Const]) -> List[Property]:
    """
    Generate the filter properties of a rule.

    Literal conditions come first, followed by the resolved constant-backed
    conditions. The two groups are never merged, so the same condition class
    can appear twice.

    Raises:
        UnresolvedConstantError: If a referenced constant is missing
        EmptyValueError: If a literal or resolved pattern is empty
    """
    properties = generate_match_filters(filters.match)
    resolved = resolve_filter_consts(filters.consts, consts)
    properties.extend(generate_match_filters(resolved))
    # TODO: negated conditions map onto hasTheWord/doesNotHaveTheWord once supported
    return properties


def category_to_smart_label(category) -> str:
    """
    Return the smartLabelToApply value for a category.

    Raises:
        UnknownCategoryError: If the category is not supported
    """
    smart_label = CATEGORY_TO_SMART_LABEL[Category.parse(category)]
    return f"{SMART_LABEL_PREFIX}{smart_label.value}"


def generate_actions(actions: Actions) -> List[Property]:
    """
    Generate the action properties of a rule.

    Order: archive, delete, mark important, mark read, category, then one
    label property per label in declared order.

    Raises:
        UnknownCategoryError: If the category is not supported
        EmptyValueError: If a label is empty
    """
    properties = []
    if actions.archive:
        properties.append(Property(PropertyName.ARCHIVE, TRUE_VALUE))
    if actions.delete:
        properties.append(Property(PropertyName.DELETE, TRUE_VALUE))
    if actions.mark_important:
        properties.append(Property(PropertyName.MARK_IMPORTANT, TRUE_VALUE))
    if actions.mark_read:
        properties.append(Property(PropertyName.MARK_READ, TRUE_VALUE))
    if actions.category:
        properties.append(Property(PropertyName.APPLY_CATEGORY, category_to_smart_label(actions.category)))
    _require_values(PropertyName.APPLY_LABEL, actions.labels)
    for label in actions.labels:
        properties.append(Property(PropertyName.APPLY_LABEL, label))
    return properties


def combine_filters_actions(filters: Sequence[Property], actions: Sequence[Property]) -> List[Entry]:
    """
    Combine filter and action properties into exported entries.

    Gmail allows only one label per filter, so every label after the first
    closes the current entry and starts a new one carrying the same filters.
    Non-label actions stay in the entry that is open when they are reached,
    including ones listed after a label; they are not repeated into later
    entries. A rule without labels yields exactly one entry.

    Example:
        actions [archive, label=a, delete, label=b] produce
        [filters + archive + label=a + delete, filters + label=b]
    """
    entries: List[Entry] = []
    current = list(filters)
    has_label = False
    for action in actions:
        if action.is_label():
            if has_label:
                entries.append(Entry(current))
                current = list(filters)
            has_label = True
        current.append(action)
    entries.append(Entry(current))
    return entries


def generate_rule(rule: Rule, consts: Mapping[str, Const]) -> List[Entry]:
    """
    Generate the entries of a single rule.

    Raises:
        GenerationError: Raised with a ``stage`` attribute ("filters" or
            "actions") telling which stage failed
    """
    try:
        filters = generate_filters(rule.filters, consts)
        if not filters:
            raise EmptyFilterSetError()
    except GenerationError as e:
        e.stage = "filters"
        raise

    try:
        actions = generate_actions(rule.actions)
        if not actions:
            raise EmptyActionSetError()
    except GenerationError as e:
        e.stage = "actions"
        raise

    entries = combine_filters_actions(filters, actions)
    logger.debug(
        f"Rule generated {len(entries)} entr{'y' if len(entries) == 1 else 'ies'} "
        f"from {len(filters)} filter(s) and {len(actions)} action(s)"
    )
    return entries


def generate_rules(config: Config) -> List[Entry]:
    """
    Generate the entries of every rule in the configuration.

    Entries of rule i precede those of rule i+1. Processing stops at the
    first failing rule and nothing is returned for the run.

    Args:
        config: Parsed configuration

    Returns:
        All generated entries in order

    Raises:
        RuleGenerationError: Wrapping the first rule failure with its index and stage
    """
    entries: List[Entry] = []
    for index, rule in enumerate(config.rules):
        with rule_context(index):
            try:
                entries.extend(generate_rule(rule, config.consts))
            except GenerationError as e:
                stage = e.stage or "filters"
                log_error_with_context(e, "Generating rule", context={'rule_index': index, 'stage': stage})
                raise RuleGenerationError(index, stage, e) from e

    logger.info(f"Generated {len(entries)} entries from {len(config.rules)} rules")
    return entries
