"""Constraint descriptors and the built-in constraint catalog.

A constraint is an immutable, named predicate-parameter pair. The engine only
needs three things from it: a ``test`` callable, a flag telling whether the
constraint is about nullness, and a name plus parameters to report when the
test fails. Everything in this module is a plain factory function returning a
``Constraint``; there is no registry and no dispatch on the name.

Equality between descriptors is structural over ``name`` and ``params`` only,
so two violations recorded by separate calls compare equal when the caller
passed the same arguments.

Examples:
    >>> c = size(min=5)
    >>> c.parameters
    {'min': 5}
    >>> c.message_key
    'Size.min'
    >>> c == size(min=5)
    True
    >>> c == size(min=3, max=1)
    False
"""

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Optional, Tuple, Union

from dateutil import tz

from objvalid.types import ConstraintName

Predicate = Callable[[Any], bool]

# Anything a descriptor name can be: a built-in name or a caller's own label
Name = Union[ConstraintName, str]

EMAIL_PATTERN = re.compile(
    r"^[A-Za-z0-9._%+\-]+@[A-Za-z0-9](?:[A-Za-z0-9\-]*[A-Za-z0-9])?"
    r"(?:\.[A-Za-z0-9](?:[A-Za-z0-9\-]*[A-Za-z0-9])?)*\.[A-Za-z]{2,}$"
)


def _always(value: Any) -> bool:
    return True


def _name_value(name: Name) -> str:
    return name.value if isinstance(name, ConstraintName) else name


@dataclass(frozen=True)
class Constraint:
    """A named predicate with its parameters.

    Attributes:
        name: Constraint name (a ``ConstraintName`` for built-ins)
        params: Ordered ``(name, value)`` pairs describing the constraint
        test: Predicate evaluated against a present value
        checks_null: Whether the constraint runs against absent values
        message_key: Template key used by the message resolver

    Only ``name`` and ``params`` take part in equality.
    """
    name: Name
    params: Tuple[Tuple[str, Any], ...] = ()
    test: Predicate = field(default=_always, compare=False, repr=False)
    checks_null: bool = field(default=False, compare=False, repr=False)
    message_key: Optional[str] = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        if self.message_key is None:
            object.__setattr__(self, "message_key", _name_value(self.name))

    @property
    def parameters(self) -> Dict[str, Any]:
        """Parameters as a dict, in declaration order."""
        return dict(self.params)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        return {
            "constraint": _name_value(self.name),
            "parameters": self.parameters,
        }

    def __str__(self) -> str:
        if not self.params:
            return _name_value(self.name)
        args = ", ".join(f"{k}={v!r}" for k, v in self.params)
        return f"{_name_value(self.name)}({args})"

    def __hash__(self) -> int:
        # Parameter values may be unhashable (lists, dicts); equal descriptors
        # still share name and parameter names.
        return hash((_name_value(self.name), tuple(k for k, _ in self.params)))


def constraint(name: Name, test: Predicate, **params: Any) -> Constraint:
    """Build a custom constraint from a name, a predicate and keyword parameters.

    Examples:
        >>> even = constraint("Even", lambda v: v % 2 == 0)
        >>> even.test(4)
        True
        >>> constraint("Multiple", lambda v: v % 3 == 0, of=3).parameters
        {'of': 3}
    """
    return Constraint(name=name, params=tuple(params.items()), test=test)


def _bounded_key(name: ConstraintName, min: Optional[int], max: Optional[int]) -> str:
    # Single-bound variants get their own template
    if min is not None and max is None:
        return f"{name.value}.min"
    if max is not None and min is None:
        return f"{name.value}.max"
    return name.value


def _bounds(min: Optional[int], max: Optional[int]) -> Tuple[Tuple[str, Any], ...]:
    params = []
    if min is not None:
        params.append(("min", min))
    if max is not None:
        params.append(("max", max))
    return tuple(params)


def _in_bounds(count: int, min: Optional[int], max: Optional[int]) -> bool:
    if min is not None and count < min:
        return False
    if max is not None and count > max:
        return False
    return True


def _count(container: Any) -> int:
    try:
        return len(container)
    except TypeError:
        return sum(1 for _ in container)


def _elements(container: Any) -> Any:
    """Return something supporting ``in`` for the container's elements."""
    if hasattr(container, "__contains__"):
        return container
    return list(container)


def _contains(elements: Any, item: Any) -> bool:
    """Membership test that accepts unhashable items.

    Sets and mappings raise ``TypeError`` for unhashable items; those are
    compared element by element instead.
    """
    try:
        return item in elements
    except TypeError:
        return any(item == e for e in elements)


def _hashable(value: Any) -> bool:
    try:
        hash(value)
    except TypeError:
        return False
    return True


def distinct(values: Iterable[Any]) -> Union[FrozenSet[Any], Tuple[Any, ...]]:
    """Collapse ``values`` into the recorded form of a varargs argument list.

    Returns a ``frozenset`` when every value is hashable, otherwise a tuple
    with duplicates removed and first-seen order kept.

    Examples:
        >>> distinct([2, 1, 2]) == frozenset({1, 2})
        True
        >>> distinct([{"a": 1}, {"a": 1}, {"b": 2}])
        ({'a': 1}, {'b': 2})
    """
    values = tuple(values)
    if all(_hashable(v) for v in values):
        return frozenset(values)
    unique: List[Any] = []
    for value in values:
        if not any(value == u for u in unique):
            unique.append(value)
    return tuple(unique)


# Nullness


def null() -> Constraint:
    return Constraint(ConstraintName.NULL, test=lambda v: v is None, checks_null=True)


def not_null() -> Constraint:
    return Constraint(ConstraintName.NOT_NULL, test=lambda v: v is not None, checks_null=True)


# Equality and membership


def equals(value: Any) -> Constraint:
    return Constraint(ConstraintName.EQUALS, (("value", value),), test=lambda v: v == value)


def not_equals(value: Any) -> Constraint:
    return Constraint(ConstraintName.NOT_EQUALS, (("value", value),), test=lambda v: v != value)


def one_of(values: Iterable[Any]) -> Constraint:
    """Membership in ``values``; the collection is recorded exactly as given."""
    return Constraint(ConstraintName.IN, (("values", values),), test=lambda v: _contains(values, v))


def none_of(values: Iterable[Any]) -> Constraint:
    return Constraint(ConstraintName.NOT_IN, (("values", values),), test=lambda v: not _contains(values, v))


def key_in(values: Iterable[Any]) -> Constraint:
    """At least one key of a mapping must be in ``values``.

    An empty mapping has no matching key and fails.
    """
    return Constraint(
        ConstraintName.KEY_IN,
        (("values", values),),
        test=lambda v: any(_contains(values, k) for k in v.keys()),
    )


def valid(predicate: Predicate) -> Constraint:
    """Caller-supplied predicate. Carries no parameters."""
    return Constraint(ConstraintName.VALID, test=predicate)


# Comparison


def less(value: Any) -> Constraint:
    return Constraint(ConstraintName.LESS, (("value", value),), test=lambda v: v < value)


def less_or_equal(value: Any) -> Constraint:
    return Constraint(ConstraintName.LESS_OR_EQUAL, (("value", value),), test=lambda v: v <= value)


def greater(value: Any) -> Constraint:
    return Constraint(ConstraintName.GREATER, (("value", value),), test=lambda v: v > value)


def greater_or_equal(value: Any) -> Constraint:
    return Constraint(ConstraintName.GREATER_OR_EQUAL, (("value", value),), test=lambda v: v >= value)


def between(start: Any, end: Any) -> Constraint:
    """Inclusive range check."""
    return Constraint(
        ConstraintName.BETWEEN,
        (("start", start), ("end", end)),
        test=lambda v: start <= v <= end,
    )


def not_between(start: Any, end: Any) -> Constraint:
    return Constraint(
        ConstraintName.NOT_BETWEEN,
        (("start", start), ("end", end)),
        test=lambda v: not (start <= v <= end),
    )


# Boolean


def true() -> Constraint:
    return Constraint(ConstraintName.TRUE, test=lambda v: v is True)


def false() -> Constraint:
    return Constraint(ConstraintName.FALSE, test=lambda v: v is False)


# Containers


def empty() -> Constraint:
    return Constraint(ConstraintName.EMPTY, test=lambda v: _count(v) == 0)


def not_empty() -> Constraint:
    return Constraint(ConstraintName.NOT_EMPTY, test=lambda v: _count(v) > 0)


def size(min: Optional[int] = None, max: Optional[int] = None) -> Constraint:
    """Element count within ``[min, max]``; omitted bounds are open.

    Only the supplied bounds are recorded as parameters.
    """
    return Constraint(
        ConstraintName.SIZE,
        _bounds(min, max),
        test=lambda v: _in_bounds(_count(v), min, max),
        message_key=_bounded_key(ConstraintName.SIZE, min, max),
    )


def contains(value: Any) -> Constraint:
    return Constraint(ConstraintName.CONTAINS, (("value", value),), test=lambda v: _contains(_elements(v), value))


def contains_all(values: Iterable[Any]) -> Constraint:
    def test(v: Any) -> bool:
        elements = _elements(v)
        return all(_contains(elements, e) for e in values)

    return Constraint(ConstraintName.CONTAINS_ALL, (("values", values),), test=test)


def contains_any(values: Iterable[Any]) -> Constraint:
    def test(v: Any) -> bool:
        elements = _elements(v)
        return any(_contains(elements, e) for e in values)

    return Constraint(ConstraintName.CONTAINS_ANY, (("values", values),), test=test)


def not_contain(value: Any) -> Constraint:
    return Constraint(ConstraintName.NOT_CONTAIN, (("value", value),), test=lambda v: not _contains(_elements(v), value))


def not_contain_all(values: Iterable[Any]) -> Constraint:
    def test(v: Any) -> bool:
        elements = _elements(v)
        return not all(_contains(elements, e) for e in values)

    return Constraint(ConstraintName.NOT_CONTAIN_ALL, (("values", values),), test=test)


def not_contain_any(values: Iterable[Any]) -> Constraint:
    def test(v: Any) -> bool:
        elements = _elements(v)
        return not any(_contains(elements, e) for e in values)

    return Constraint(ConstraintName.NOT_CONTAIN_ANY, (("values", values),), test=test)


# Text


def _pattern_text(pattern: Union[str, "re.Pattern[str]"]) -> str:
    return pattern.pattern if isinstance(pattern, re.Pattern) else pattern


def blank() -> Constraint:
    return Constraint(ConstraintName.BLANK, test=lambda v: v.strip() == "")


def not_blank() -> Constraint:
    return Constraint(ConstraintName.NOT_BLANK, test=lambda v: v.strip() != "")


def letter() -> Constraint:
    return Constraint(ConstraintName.LETTER, test=lambda v: all(c.isalpha() for c in v))


def digit() -> Constraint:
    return Constraint(ConstraintName.DIGIT, test=lambda v: all(c.isdigit() for c in v))


def letter_or_digit() -> Constraint:
    return Constraint(ConstraintName.LETTER_OR_DIGIT, test=lambda v: all(c.isalnum() for c in v))


def upper_case() -> Constraint:
    return Constraint(ConstraintName.UPPER_CASE, test=lambda v: v == v.upper())


def lower_case() -> Constraint:
    return Constraint(ConstraintName.LOWER_CASE, test=lambda v: v == v.lower())


def matches(pattern: Union[str, "re.Pattern[str]"]) -> Constraint:
    """The whole value must match ``pattern``."""
    text = _pattern_text(pattern)
    return Constraint(
        ConstraintName.MATCHES,
        (("pattern", text),),
        test=lambda v: re.fullmatch(pattern, v) is not None,
    )


def not_match(pattern: Union[str, "re.Pattern[str]"]) -> Constraint:
    text = _pattern_text(pattern)
    return Constraint(
        ConstraintName.NOT_MATCH,
        (("pattern", text),),
        test=lambda v: re.fullmatch(pattern, v) is None,
    )


def contains_regex(pattern: Union[str, "re.Pattern[str]"]) -> Constraint:
    text = _pattern_text(pattern)
    return Constraint(
        ConstraintName.CONTAINS_REGEX,
        (("pattern", text),),
        test=lambda v: re.search(pattern, v) is not None,
    )


def not_contain_regex(pattern: Union[str, "re.Pattern[str]"]) -> Constraint:
    text = _pattern_text(pattern)
    return Constraint(
        ConstraintName.NOT_CONTAIN_REGEX,
        (("pattern", text),),
        test=lambda v: re.search(pattern, v) is None,
    )


def starts_with(prefix: str) -> Constraint:
    return Constraint(ConstraintName.STARTS_WITH, (("prefix", prefix),), test=lambda v: v.startswith(prefix))


def ends_with(suffix: str) -> Constraint:
    return Constraint(ConstraintName.ENDS_WITH, (("suffix", suffix),), test=lambda v: v.endswith(suffix))


def email() -> Constraint:
    return Constraint(ConstraintName.EMAIL, test=lambda v: EMAIL_PATTERN.match(v) is not None)


# Numeric digits


def _digits(value: Any) -> Tuple[int, int]:
    """Return ``(integer_digits, decimal_digits)`` of a number."""
    try:
        _, digits, exponent = Decimal(str(value)).as_tuple()
    except InvalidOperation:
        raise ValueError(f"Cannot count digits of {value!r}") from None
    if not isinstance(exponent, int):
        # NaN and infinities
        raise ValueError(f"Cannot count digits of {value!r}")
    return max(len(digits) + exponent, 1), max(-exponent, 0)


def integer_digits(min: Optional[int] = None, max: Optional[int] = None) -> Constraint:
    return Constraint(
        ConstraintName.INTEGER_DIGITS,
        _bounds(min, max),
        test=lambda v: _in_bounds(_digits(v)[0], min, max),
        message_key=_bounded_key(ConstraintName.INTEGER_DIGITS, min, max),
    )


def decimal_digits(min: Optional[int] = None, max: Optional[int] = None) -> Constraint:
    return Constraint(
        ConstraintName.DECIMAL_DIGITS,
        _bounds(min, max),
        test=lambda v: _in_bounds(_digits(v)[1], min, max),
        message_key=_bounded_key(ConstraintName.DECIMAL_DIGITS, min, max),
    )


# Temporal


def _local_date(value: Union[date, datetime]) -> date:
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone(tz.tzlocal()).date()
        return value.date()
    return value


def _compare_now(value: Union[date, datetime]) -> int:
    """Negative when ``value`` is before now, positive when after, 0 otherwise."""
    if isinstance(value, datetime):
        now = datetime.now(value.tzinfo) if value.tzinfo is not None else datetime.now()
    else:
        now = date.today()
    return (value > now) - (value < now)


def today() -> Constraint:
    return Constraint(ConstraintName.TODAY, test=lambda v: _local_date(v) == date.today())


def not_today() -> Constraint:
    return Constraint(ConstraintName.NOT_TODAY, test=lambda v: _local_date(v) != date.today())


def past() -> Constraint:
    return Constraint(ConstraintName.PAST, test=lambda v: _compare_now(v) < 0)


def future() -> Constraint:
    return Constraint(ConstraintName.FUTURE, test=lambda v: _compare_now(v) > 0)


__all__ = [
    "Constraint",
    "Predicate",
    "constraint",
    "distinct",
    "null",
    "not_null",
    "equals",
    "not_equals",
    "one_of",
    "none_of",
    "key_in",
    "valid",
    "less",
    "less_or_equal",
    "greater",
    "greater_or_equal",
    "between",
    "not_between",
    "true",
    "false",
    "empty",
    "not_empty",
    "size",
    "contains",
    "contains_all",
    "contains_any",
    "not_contain",
    "not_contain_all",
    "not_contain_any",
    "blank",
    "not_blank",
    "letter",
    "digit",
    "letter_or_digit",
    "upper_case",
    "lower_case",
    "matches",
    "not_match",
    "contains_regex",
    "not_contain_regex",
    "starts_with",
    "ends_with",
    "email",
    "integer_digits",
    "decimal_digits",
    "today",
    "not_today",
    "past",
    "future",
]
