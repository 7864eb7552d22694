"""Core type definitions for objvalid.

This module defines the names of the built-in constraints. Every built-in
constraint descriptor carries one of these names, and the message bundles use
the same names as template keys.

Custom constraints are free to use any plain string as their name; the
engine never dispatches on the name, it only reports it.
"""

from enum import Enum


class ConstraintName(str, Enum):
    """Names of the built-in constraints.

    The value doubles as the default message key in the bundled templates
    (see ``objvalid/messages/messages.json``).
    """
    # Nullness
    NULL = "Null"
    NOT_NULL = "NotNull"

    # Equality and membership
    EQUALS = "Equals"
    NOT_EQUALS = "NotEquals"
    IN = "In"
    NOT_IN = "NotIn"
    KEY_IN = "KeyIn"
    VALID = "Valid"

    # Comparison
    LESS = "Less"
    LESS_OR_EQUAL = "LessOrEqual"
    GREATER = "Greater"
    GREATER_OR_EQUAL = "GreaterOrEqual"
    BETWEEN = "Between"
    NOT_BETWEEN = "NotBetween"

    # Boolean
    TRUE = "True"
    FALSE = "False"

    # Containers
    EMPTY = "Empty"
    NOT_EMPTY = "NotEmpty"
    SIZE = "Size"
    CONTAINS = "Contains"
    CONTAINS_ALL = "ContainsAll"
    CONTAINS_ANY = "ContainsAny"
    NOT_CONTAIN = "NotContain"
    NOT_CONTAIN_ALL = "NotContainAll"
    NOT_CONTAIN_ANY = "NotContainAny"

    # Text
    BLANK = "Blank"
    NOT_BLANK = "NotBlank"
    LETTER = "Letter"
    DIGIT = "Digit"
    LETTER_OR_DIGIT = "LetterOrDigit"
    UPPER_CASE = "UpperCase"
    LOWER_CASE = "LowerCase"
    MATCHES = "Matches"
    NOT_MATCH = "NotMatch"
    CONTAINS_REGEX = "ContainsRegex"
    NOT_CONTAIN_REGEX = "NotContainRegex"
    STARTS_WITH = "StartsWith"
    ENDS_WITH = "EndsWith"
    EMAIL = "Email"

    # Numeric digits
    INTEGER_DIGITS = "IntegerDigits"
    DECIMAL_DIGITS = "DecimalDigits"

    # Temporal
    TODAY = "Today"
    NOT_TODAY = "NotToday"
    PAST = "Past"
    FUTURE = "Future"


__all__ = [
    "ConstraintName",
]
