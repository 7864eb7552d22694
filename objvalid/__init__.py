"""objvalid: declarative validation for object graphs.

objvalid walks a root object and its nested objects, collections and maps,
evaluates named constraints against each addressed property, and reports
every violation at once:
- Fluent, chainable checks per property
- Dotted and bracketed property paths (``address.city.id``, ``dependents[2].id``)
- Null-vacuous constraints: only the nullness checks run on absent values
- Localized violation messages with locale fallback

Basic usage:
    >>> from objvalid import validate, ConstraintViolationError
    >>> def check(v):
    ...     v.property("id").is_not_null().is_equal_to(1).is_in(1, 2, 3)
    ...     v.property("name").is_not_null().is_not_blank()
    >>> try:
    ...     validate({"id": None, "name": None}, check)
    ... except ConstraintViolationError as exc:
    ...     print([(v.property, str(v.constraint)) for v in exc.violations])
    [('id', 'NotNull'), ('name', 'NotNull')]
"""

__version__ = "0.1.0"
__author__ = "objvalid Team"

# Version info
VERSION = (0, 1, 0)

# Core exports
from objvalid.constraints import Constraint
from objvalid.errors import ConstraintViolation, ConstraintViolationError, MissingTemplateError
from objvalid.i18n import ConstraintViolationMessage, MessageResolver, MessageStore
from objvalid.validation import Property, ValidationSession, Validator, validate

# Package metadata
__all__ = [
    "__version__",
    "VERSION",
    "Constraint",
    "ConstraintViolation",
    "ConstraintViolationError",
    "ConstraintViolationMessage",
    "MessageResolver",
    "MessageStore",
    "MissingTemplateError",
    "Property",
    "ValidationSession",
    "Validator",
    "validate",
]
