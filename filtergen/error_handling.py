"""
Error handling utilities for filter generation.

This module provides:
- The exception hierarchy raised by the generation pipeline and loaders
- Error categorization and error codes
- Standardized error logging with operation context

All generation errors are validation errors: they are raised immediately,
never retried, and the pipeline produces no partial output when one occurs.
"""

import logging
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class ErrorCode:
    """Standard error codes for different error categories."""
    # Configuration errors (1xxx)
    CONFIG_INVALID = "E1001"
    CONFIG_NOT_FOUND = "E1002"

    # Generation errors (2xxx)
    UNRESOLVED_CONSTANT = "E2001"
    EMPTY_FILTER_SET = "E2002"
    EMPTY_ACTION_SET = "E2003"
    UNKNOWN_CATEGORY = "E2004"
    RULE_GENERATION_FAILED = "E2005"
    EMPTY_VALUE = "E2006"

    # Export errors (3xxx)
    EXPORT_FAILED = "E3001"

    # Unknown errors (9xxx)
    UNKNOWN_ERROR = "E9001"


class FilterGenError(Exception):
    """Base exception for all filter generation errors."""
    pass


class ConfigurationError(FilterGenError):
    """Exception raised when configuration or filter XML input is malformed."""
    pass


class GenerationError(FilterGenError):
    """
    Base exception for errors raised while generating a single rule.

    Attributes:
        stage: Pipeline stage that raised the error, set by generate_rule
    """
    stage: Optional[str] = None


class UnresolvedConstantError(GenerationError):
    """
    A rule references a constant that is not defined.

    Attributes:
        name: The missing constant name
        condition: Condition class the reference appeared in, once known
    """

    def __init__(self, name: str, condition: Optional[str] = None):
        self.name = name
        self.condition = condition
        if condition:
            message = f"failed to resolve const '{name}' in '{condition}' clause"
        else:
            message = f"failed to resolve const '{name}'"
        super().__init__(message)


class EmptyFilterSetError(GenerationError):
    """A rule produced no filter properties."""

    def __init__(self, message: str = "at least one filter has to be specified"):
        super().__init__(message)


class EmptyActionSetError(GenerationError):
    """A rule produced no action properties."""

    def __init__(self, message: str = "at least one action has to be specified"):
        super().__init__(message)


class EmptyValueError(GenerationError):
    """
    A pattern or label that would produce an empty property value.

    Attributes:
        property_name: Gmail property the value was meant for
    """

    def __init__(self, property_name: str):
        self.property_name = property_name
        super().__init__(f"empty value for '{property_name}'")


class UnknownCategoryError(GenerationError):
    """
    A category outside the supported set was requested.

    Attributes:
        category: The offending value as supplied
    """

    def __init__(self, category: Any):
        self.category = category
        super().__init__(f"unrecognized category '{category}'")


class RuleGenerationError(FilterGenError):
    """
    Wraps a failure of one rule with its position in the configuration.

    Attributes:
        rule_index: Zero-based index of the failing rule
        stage: Stage that failed ("filters" or "actions")
        cause: The underlying exception
    """

    def __init__(self, rule_index: int, stage: str, cause: Exception):
        self.rule_index = rule_index
        self.stage = stage
        self.cause = cause
        super().__init__(f"error generating rule #{rule_index} ({stage}): {cause}")


def error_code_for(error: Exception) -> str:
    """
    Return the standard error code for an exception.

    Args:
        error: The exception to categorize

    Returns:
        Error code string from ErrorCode

    Example:
        >>> error_code_for(EmptyFilterSetError())
        'E2002'
    """
    if isinstance(error, RuleGenerationError):
        # Report the root cause; the wrapper only adds position
        return error_code_for(error.cause)
    if isinstance(error, UnresolvedConstantError):
        return ErrorCode.UNRESOLVED_CONSTANT
    elif isinstance(error, EmptyFilterSetError):
        return ErrorCode.EMPTY_FILTER_SET
    elif isinstance(error, EmptyActionSetError):
        return ErrorCode.EMPTY_ACTION_SET
    elif isinstance(error, UnknownCategoryError):
        return ErrorCode.UNKNOWN_CATEGORY
    elif isinstance(error, EmptyValueError):
        return ErrorCode.EMPTY_VALUE
    elif isinstance(error, GenerationError):
        return ErrorCode.RULE_GENERATION_FAILED
    elif isinstance(error, ConfigurationError):
        return ErrorCode.CONFIG_INVALID
    elif isinstance(error, FileNotFoundError):
        return ErrorCode.CONFIG_NOT_FOUND
    elif isinstance(error, OSError):
        return ErrorCode.EXPORT_FAILED
    else:
        return ErrorCode.UNKNOWN_ERROR


def log_error_with_context(
    error: Exception,
    operation: str,
    error_code: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None,
    level: int = logging.ERROR,
    include_traceback: bool = False
) -> None:
    """
    Log an error with standardized context information.

    Args:
        error: The exception that occurred
        operation: Description of the operation that failed
        error_code: Standard error code (default: derived from the error)
        context: Additional context dictionary (rule index, file path, etc.)
        level: Logging level (default: ERROR)
        include_traceback: Whether to include full traceback (default: False)

    Example:
        >>> try:
        ...     generate_rules(config)
        ... except RuleGenerationError as e:
        ...     log_error_with_context(
        ...         e, "Generating filters",
        ...         context={'rule_index': e.rule_index}
        ...     )
    """
    code = error_code or error_code_for(error)
    error_type = type(error).__name__

    context_str = ""
    if context:
        context_items = [f"{k}={v}" for k, v in context.items() if v is not None]
        if context_items:
            context_str = f" | Context: {', '.join(context_items)}"

    log_message = f"[{code}] {operation} failed: {error_type}: {error}{context_str}"
    logger.log(level, log_message, exc_info=include_traceback)
