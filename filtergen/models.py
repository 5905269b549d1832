"""
Data models for the filter generation pipeline.

This module contains the value types that flow through rule generation:

    Config -> Rule -> (Filters, Actions) -> Property lists -> Entry

Integration Pattern:
    A Config is produced by the configuration loader (or built directly in
    code) and handed to the generation pipeline:

    1. Loading: config = load_config("filters.yaml")
    2. Generation: entries = generate_rules(config)
    3. Export: xml = entries_to_xml(entries)

    Example:
        >>> from filtergen.models import Actions, Filters, MatchFilters, Rule, Config
        >>> rule = Rule(
        ...     filters=Filters(match=MatchFilters(from_=["boss@example.com"])),
        ...     actions=Actions(labels=["work"]),
        ... )
        >>> config = Config(rules=[rule])
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple, Union

from filtergen.error_handling import UnknownCategoryError


class PropertyName(str, Enum):
    """
    Property names understood by the Gmail filter XML format.

    DOES_NOT_HAVE is part of the vocabulary but never produced by the
    generator; negated conditions are not supported yet.
    """
    FROM = "from"
    TO = "to"
    SUBJECT = "subject"
    HAS = "hasTheWord"
    DOES_NOT_HAVE = "doesNotHaveTheWord"
    MARK_IMPORTANT = "shouldAlwaysMarkAsImportant"
    APPLY_LABEL = "label"
    APPLY_CATEGORY = "smartLabelToApply"
    DELETE = "shouldTrash"
    ARCHIVE = "shouldArchive"
    MARK_READ = "shouldMarkAsRead"


class SmartLabel(str, Enum):
    """Smart label names recognized by Gmail."""
    PERSONAL = "personal"
    GROUP = "group"
    NOTIFICATION = "notification"
    PROMO = "promo"
    SOCIAL = "social"


class Category(Enum):
    """
    Gmail inbox categories that a rule can assign.

    Values are the names used in configuration files.
    """
    PERSONAL = "personal"
    SOCIAL = "social"
    UPDATES = "updates"
    FORUMS = "forums"
    PROMOTIONS = "promotions"

    @classmethod
    def parse(cls, value: Union["Category", str]) -> "Category":
        """
        Convert a configuration value into a Category.

        Args:
            value: Category member or exact category name

        Returns:
            Matching Category member

        Raises:
            UnknownCategoryError: If the value does not name a category
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value)
            except ValueError:
                pass
        raise UnknownCategoryError(value)


# Prefix Gmail expects in front of smart label values
SMART_LABEL_PREFIX = "^smartlabel_"

CATEGORY_TO_SMART_LABEL: Dict[Category, SmartLabel] = {
    Category.PERSONAL: SmartLabel.PERSONAL,
    Category.SOCIAL: SmartLabel.SOCIAL,
    Category.UPDATES: SmartLabel.NOTIFICATION,
    Category.FORUMS: SmartLabel.GROUP,
    Category.PROMOTIONS: SmartLabel.PROMO,
}


@dataclass(frozen=True)
class Property:
    """
    A single name/value pair of an exported filter.

    Fields:
        name: Property name from the closed Gmail vocabulary
        value: Property value; never empty ("true" for boolean actions)
    """
    name: PropertyName
    value: str

    def __post_init__(self):
        """Validate property after initialization."""
        if not isinstance(self.name, PropertyName):
            raise ValueError(f"Property name must be PropertyName, got {type(self.name).__name__}")
        if not isinstance(self.value, str) or not self.value:
            raise ValueError(f"Property '{self.name.value}' value cannot be empty")

    def is_label(self) -> bool:
        return self.name is PropertyName.APPLY_LABEL

    def to_pair(self) -> Tuple[str, str]:
        return (self.name.value, self.value)


@dataclass(frozen=True)
class Entry:
    """
    One exported Gmail filter: an ordered, immutable sequence of properties.

    Entries are the final output of the pipeline. Property names may repeat
    (e.g. several filter classes), so this is a sequence, not a mapping.
    """
    properties: Tuple[Property, ...] = ()

    def __post_init__(self):
        # Accept any iterable but always store a tuple
        object.__setattr__(self, "properties", tuple(self.properties))

    def __iter__(self) -> Iterator[Property]:
        return iter(self.properties)

    def __len__(self) -> int:
        return len(self.properties)

    def get(self, name: PropertyName) -> List[str]:
        """Return the values of all properties with the given name, in order."""
        return [p.value for p in self.properties if p.name is name]

    def labels(self) -> List[str]:
        return self.get(PropertyName.APPLY_LABEL)

    def to_pairs(self) -> List[Tuple[str, str]]:
        return [p.to_pair() for p in self.properties]


@dataclass
class MatchFilters:
    """
    Match conditions of a rule, one pattern list per condition class.

    Each non-empty list becomes exactly one property whose value matches
    any of the patterns.

    Fields:
        from_: Sender patterns
        to: Recipient patterns
        subject: Subject patterns
        has: Free-text "has the words" patterns
    """
    from_: List[str] = field(default_factory=list)
    to: List[str] = field(default_factory=list)
    subject: List[str] = field(default_factory=list)
    has: List[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.from_ or self.to or self.subject or self.has)


@dataclass
class Filters:
    """
    Filter specification of a rule.

    Fields:
        match: Conditions with literal patterns
        consts: Conditions naming constants, resolved at generation time
    """
    match: MatchFilters = field(default_factory=MatchFilters)
    consts: MatchFilters = field(default_factory=MatchFilters)


@dataclass
class Actions:
    """
    Actions applied by a rule.

    Label order is preserved and determines how a rule fans out into
    several exported entries.
    """
    archive: bool = False
    delete: bool = False
    mark_read: bool = False
    mark_important: bool = False
    category: Optional[Union[Category, str]] = None
    labels: List[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (
            self.archive or self.delete or self.mark_read or self.mark_important
            or self.category or self.labels
        )


@dataclass
class Rule:
    """A filter specification paired with the actions to apply."""
    filters: Filters = field(default_factory=Filters)
    actions: Actions = field(default_factory=Actions)


@dataclass
class Const:
    """A named, reusable list of literal patterns."""
    values: List[str] = field(default_factory=list)


@dataclass
class Config:
    """
    Complete generator input.

    Fields:
        rules: Rules in output order
        consts: Constants by name (insertion order preserved)
        version: Configuration format version, if declared
    """
    rules: List[Rule] = field(default_factory=list)
    consts: Dict[str, Const] = field(default_factory=dict)
    version: Optional[str] = None
