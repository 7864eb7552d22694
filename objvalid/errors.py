"""Violation records and exception types for objvalid.

Two tiers of failure exist and they never mix:

- Data-driven failures (a property violates a constraint) are recorded as
  ``ConstraintViolation`` values and surfaced once, in aggregate, as a
  ``ConstraintViolationError`` raised by the top-level ``validate`` call.
- Configuration failures (for example a message template that exists in no
  bundle) raise their own exception types such as ``MissingTemplateError``.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

from objvalid.constraints import Constraint

if TYPE_CHECKING:
    from objvalid.i18n import ConstraintViolationMessage, MessageResolver


@dataclass(frozen=True)
class ConstraintViolation:
    """A single failed constraint.

    Attributes:
        property: Dotted/bracketed path of the value within the root object
        value: The rejected value (``None`` when the value was absent)
        constraint: The constraint that failed

    Examples:
        >>> from objvalid.constraints import size
        >>> v = ConstraintViolation(property="tags", value=["a"], constraint=size(min=2))
        >>> v.to_dict()
        {'property': 'tags', 'value': ['a'], 'constraint': 'Size', 'parameters': {'min': 2}}
    """
    property: str
    value: Any
    constraint: Constraint

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        result: Dict[str, Any] = {"property": self.property}
        if self.value is not None:
            result["value"] = self.value
        result.update(self.constraint.to_dict())
        return result

    def __hash__(self) -> int:
        # The rejected value is left out; it is often a list or dict.
        return hash((self.property, self.constraint))


class ConstraintViolationError(Exception):
    """Raised by ``validate`` when at least one constraint failed.

    Carries every violation collected across the whole object graph, in the
    order they were recorded.

    Attributes:
        violations: Ordered list of ``ConstraintViolation`` records
    """

    def __init__(self, violations: Sequence[ConstraintViolation]):
        self.violations: List[ConstraintViolation] = list(violations)
        summary = ", ".join(f"{v.property} ({v.constraint})" for v in self.violations)
        super().__init__(f"{len(self.violations)} constraint violation(s): {summary}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        return {"violations": [v.to_dict() for v in self.violations]}

    def map_to_locale(
        self,
        locale: Optional[str] = None,
        resolver: Optional["MessageResolver"] = None,
    ) -> List["ConstraintViolationMessage"]:
        """Resolve a message for every violation, preserving order.

        Args:
            locale: Locale tag such as ``"pt_BR"``; the resolver default when omitted
            resolver: Resolver to use; a resolver over the bundled messages when omitted
        """
        from objvalid.i18n import MessageResolver

        resolver = resolver or MessageResolver()
        return resolver.map_to_message(self.violations, locale)


class MissingTemplateError(Exception):
    """Raised when no bundle holds a template for a constraint.

    This is a configuration defect of the embedding application, not a
    validation result.

    Attributes:
        message_key: The template key that was looked up
        locale: The requested locale tag
        searched: The locale tags that were searched, in order
    """

    def __init__(self, message_key: str, locale: str, searched: Sequence[str]):
        self.message_key = message_key
        self.locale = locale
        self.searched = list(searched)
        tiers = ", ".join(repr(tag) for tag in self.searched)
        super().__init__(
            f"No message template for '{message_key}' (locale '{locale}', searched {tiers})"
        )


__all__ = [
    "ConstraintViolation",
    "ConstraintViolationError",
    "MissingTemplateError",
]
