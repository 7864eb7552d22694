"""Validation engine for object graphs.

This module provides the ``validate`` entry point together with the three
pieces it is built from:

- ``ValidationSession``: the ordered list of violations for one top-level call
- ``Validator``: a scope bound to one object of the graph and its path prefix
- ``Property``: a value read off the scoped object, with the fluent checks

A validation block is any callable taking a ``Validator``. Inside the block
the caller binds properties and chains checks; nested objects and container
elements are handled by passing another block to ``Property.validate`` or
``Property.validate_for_each``.

Usage:
    >>> def check_employee(v):
    ...     v.property("id").is_not_null()
    ...     v.property("address").validate(
    ...         lambda a: a.property("city").is_not_blank()
    ...     )
    >>> employee = {"id": 1, "address": {"city": "Lisbon"}}
    >>> validate(employee, check_employee) is employee
    True

Every check follows the same protocol: a ``None`` value passes every
constraint except the nullness pair without evaluating it, a failing
constraint appends a violation to the session, and the check returns the
same ``Property`` so further checks still run. Only the top-level
``validate`` call raises; nested scopes just append to the shared list.

Cyclic graphs are not detected. Descending into one recurses until Python
raises ``RecursionError``, which propagates to the caller.
"""

import logging
from collections.abc import Mapping
from typing import Any, Callable, Iterable, List, Optional, TypeVar

from typing_extensions import Self

from objvalid import constraints as c
from objvalid.constraints import Constraint, Predicate
from objvalid.errors import ConstraintViolation, ConstraintViolationError
from objvalid.paths import ROOT, child, indexed, keyed

logger = logging.getLogger(__name__)

T = TypeVar("T")

Block = Callable[["Validator"], Any]
"""Type alias for validation blocks.

Blocks receive the ``Validator`` scoped to the object being validated. Their
return value is ignored.
"""

Accessor = Callable[[Any], Any]


def read_property(obj: Any, name: str) -> Any:
    """Read ``name`` off ``obj``.

    Mappings are read with ``get`` so missing keys count as absent; other
    objects are read with ``getattr``. Any property of ``None`` is ``None``.
    """
    if obj is None:
        return None
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name)


class ValidationSession:
    """Accumulation context for one top-level ``validate`` call.

    Attributes:
        root: The object passed to ``validate``
        violations: Violations in the order they were recorded
    """

    def __init__(self, root: Any):
        self.root = root
        self.violations: List[ConstraintViolation] = []

    def add(self, violation: ConstraintViolation) -> None:
        self.violations.append(violation)

    def scope(self, obj: Any, path: str = ROOT) -> "Validator":
        """Open a scope over ``obj`` whose properties are prefixed with ``path``."""
        return Validator(self, obj, path)

    def raise_if_invalid(self) -> None:
        """Raise ``ConstraintViolationError`` when any violation was recorded."""
        if self.violations:
            raise ConstraintViolationError(self.violations)


class Validator:
    """A validation scope bound to one object of the graph.

    Attributes:
        session: The session collecting violations
        obj: The object being validated (may be ``None`` for absent elements)
        path: Path of ``obj`` within the root object (empty for the root)
    """

    def __init__(self, session: ValidationSession, obj: Any, path: str = ROOT):
        self.session = session
        self.obj = obj
        self.path = path

    def property(self, name: str, accessor: Optional[Accessor] = None) -> "Property":
        """Bind a property of the scoped object.

        Args:
            name: Property name, also used as the path segment
            accessor: Optional ``accessor(obj) -> value`` replacing the default lookup

        Returns:
            A ``Property`` holding the value read now; it is never re-read
        """
        if self.obj is None:
            value = None
        elif accessor is not None:
            value = accessor(self.obj)
        else:
            value = read_property(self.obj, name)
        return Property(self.session, child(self.path, name), value)

    def value(self) -> "Property":
        """Bind the scoped object itself, at the scope's own path.

        Useful for containers of plain values:

            v.property("tags").validate_for_each(lambda t: t.value().is_not_blank())
        """
        return Property(self.session, self.path, self.obj)

    def __repr__(self) -> str:
        return f"Validator(path={self.path!r}, obj={self.obj!r})"


class Property:
    """A bound property value with chainable checks.

    Every check returns ``self``. A failed check records a violation and
    does not stop later checks.

    Attributes:
        session: The session collecting violations
        path: Full path of the property
        value: Value read at binding time
    """

    def __init__(self, session: ValidationSession, path: str, value: Any):
        self.session = session
        self.path = path
        self.value = value

    def check(self, constraint: Constraint) -> Self:
        """Evaluate ``constraint`` against the bound value.

        Absent values pass vacuously unless the constraint checks nullness.
        Exceptions raised by the predicate propagate.
        """
        if self.value is None and not constraint.checks_null:
            return self
        if not constraint.test(self.value):
            self.session.add(
                ConstraintViolation(property=self.path, value=self.value, constraint=constraint)
            )
        return self

    # Nullness

    def is_null(self) -> Self:
        return self.check(c.null())

    def is_not_null(self) -> Self:
        return self.check(c.not_null())

    # Equality and membership

    def is_equal_to(self, value: Any) -> Self:
        return self.check(c.equals(value))

    def is_not_equal_to(self, value: Any) -> Self:
        return self.check(c.not_equals(value))

    def is_in(self, *values: Any) -> Self:
        """Value must be one of ``values``.

        Recorded as a ``frozenset``, or as a de-duplicated tuple when some
        value is unhashable.
        """
        return self.check(c.one_of(c.distinct(values)))

    def is_in_iterable(self, values: Iterable[Any]) -> Self:
        """Value must be in ``values``; recorded as a list, order and duplicates kept."""
        return self.check(c.one_of(list(values)))

    def is_not_in(self, *values: Any) -> Self:
        return self.check(c.none_of(c.distinct(values)))

    def is_not_in_iterable(self, values: Iterable[Any]) -> Self:
        return self.check(c.none_of(list(values)))

    def key_is_in(self, *keys: Any) -> Self:
        """Mapping must have at least one key among ``keys``."""
        return self.check(c.key_in(c.distinct(keys)))

    def key_is_in_iterable(self, keys: Iterable[Any]) -> Self:
        return self.check(c.key_in(list(keys)))

    def is_valid(self, predicate: Predicate) -> Self:
        """Value must satisfy a caller-supplied predicate."""
        return self.check(c.valid(predicate))

    # Comparison

    def is_less_than(self, value: Any) -> Self:
        return self.check(c.less(value))

    def is_less_than_or_equal_to(self, value: Any) -> Self:
        return self.check(c.less_or_equal(value))

    def is_greater_than(self, value: Any) -> Self:
        return self.check(c.greater(value))

    def is_greater_than_or_equal_to(self, value: Any) -> Self:
        return self.check(c.greater_or_equal(value))

    def is_between(self, start: Any, end: Any) -> Self:
        return self.check(c.between(start, end))

    def is_not_between(self, start: Any, end: Any) -> Self:
        return self.check(c.not_between(start, end))

    # Boolean

    def is_true(self) -> Self:
        return self.check(c.true())

    def is_false(self) -> Self:
        return self.check(c.false())

    # Containers

    def is_empty(self) -> Self:
        return self.check(c.empty())

    def is_not_empty(self) -> Self:
        return self.check(c.not_empty())

    def has_size(self, min: Optional[int] = None, max: Optional[int] = None) -> Self:
        return self.check(c.size(min, max))

    def contains(self, value: Any) -> Self:
        return self.check(c.contains(value))

    def contains_all(self, *values: Any) -> Self:
        return self.check(c.contains_all(c.distinct(values)))

    def contains_all_iterable(self, values: Iterable[Any]) -> Self:
        return self.check(c.contains_all(list(values)))

    def contains_any(self, *values: Any) -> Self:
        return self.check(c.contains_any(c.distinct(values)))

    def contains_any_iterable(self, values: Iterable[Any]) -> Self:
        return self.check(c.contains_any(list(values)))

    def does_not_contain(self, value: Any) -> Self:
        return self.check(c.not_contain(value))

    def does_not_contain_all(self, *values: Any) -> Self:
        return self.check(c.not_contain_all(c.distinct(values)))

    def does_not_contain_all_iterable(self, values: Iterable[Any]) -> Self:
        return self.check(c.not_contain_all(list(values)))

    def does_not_contain_any(self, *values: Any) -> Self:
        return self.check(c.not_contain_any(c.distinct(values)))

    def does_not_contain_any_iterable(self, values: Iterable[Any]) -> Self:
        return self.check(c.not_contain_any(list(values)))

    # Text

    def is_blank(self) -> Self:
        return self.check(c.blank())

    def is_not_blank(self) -> Self:
        return self.check(c.not_blank())

    def is_letter(self) -> Self:
        return self.check(c.letter())

    def is_digit(self) -> Self:
        return self.check(c.digit())

    def is_letter_or_digit(self) -> Self:
        return self.check(c.letter_or_digit())

    def is_upper_case(self) -> Self:
        return self.check(c.upper_case())

    def is_lower_case(self) -> Self:
        return self.check(c.lower_case())

    def matches(self, pattern: Any) -> Self:
        return self.check(c.matches(pattern))

    def does_not_match(self, pattern: Any) -> Self:
        return self.check(c.not_match(pattern))

    def contains_regex(self, pattern: Any) -> Self:
        return self.check(c.contains_regex(pattern))

    def does_not_contain_regex(self, pattern: Any) -> Self:
        return self.check(c.not_contain_regex(pattern))

    def starts_with(self, prefix: str) -> Self:
        return self.check(c.starts_with(prefix))

    def ends_with(self, suffix: str) -> Self:
        return self.check(c.ends_with(suffix))

    def is_email(self) -> Self:
        return self.check(c.email())

    # Numeric digits

    def has_integer_digits(self, min: Optional[int] = None, max: Optional[int] = None) -> Self:
        return self.check(c.integer_digits(min, max))

    def has_decimal_digits(self, min: Optional[int] = None, max: Optional[int] = None) -> Self:
        return self.check(c.decimal_digits(min, max))

    # Temporal

    def is_today(self) -> Self:
        return self.check(c.today())

    def is_not_today(self) -> Self:
        return self.check(c.not_today())

    def is_past(self) -> Self:
        return self.check(c.past())

    def is_future(self) -> Self:
        return self.check(c.future())

    # Descent

    def validate(self, block: Block) -> Self:
        """Run ``block`` against the bound value as a nested object.

        Skipped entirely when the value is ``None``. Paths of the nested
        properties are prefixed with this property's path.
        """
        if self.value is not None:
            block(self.session.scope(self.value, self.path))
        return self

    def validate_for_each(self, block: Block) -> Self:
        """Run ``block`` once per element of the bound container.

        Sequences, sets and other iterables yield ``path[index]`` scopes in
        iteration order; mappings yield one ``path[key]`` scope per value.
        Nothing happens when the container is ``None``.
        """
        if self.value is None:
            return self
        if isinstance(self.value, Mapping):
            for key, element in self.value.items():
                block(self.session.scope(element, keyed(self.path, key)))
        else:
            for index, element in enumerate(self.value):
                block(self.session.scope(element, indexed(self.path, index)))
        return self

    def validate_keys(self, block: Block) -> Self:
        """Run ``block`` once per key of the bound mapping, at ``path[key]``."""
        if self.value is None:
            return self
        for key in self.value.keys():
            block(self.session.scope(key, keyed(self.path, key)))
        return self

    def __repr__(self) -> str:
        return f"Property(path={self.path!r}, value={self.value!r})"


def validate(root: T, block: Block) -> T:
    """Validate ``root`` with ``block`` and return it unchanged.

    Args:
        root: The object to validate
        block: Callable receiving the ``Validator`` scoped to ``root``

    Returns:
        ``root`` itself, so the call can be used inline

    Raises:
        ConstraintViolationError: If any constraint anywhere in the graph failed

    Examples:
        >>> validate({"id": None}, lambda v: v.property("id").is_not_null())
        Traceback (most recent call last):
            ...
        objvalid.errors.ConstraintViolationError: 1 constraint violation(s): id (NotNull)
    """
    session = ValidationSession(root)
    block(session.scope(root))
    logger.debug(
        "Validated %s: %d violation(s)", type(root).__name__, len(session.violations)
    )
    session.raise_if_invalid()
    return root


__all__ = [
    "Accessor",
    "Block",
    "Property",
    "ValidationSession",
    "Validator",
    "read_property",
    "validate",
]
