"""Property path composition.

Paths are plain strings used only for reporting. They are built left to
right from the root, whose prefix is the empty string:

    >>> child("", "address")
    'address'
    >>> child("address", "city")
    'address.city'
    >>> indexed("dependents", 2)
    'dependents[2]'
    >>> keyed("attributes", "color")
    'attributes[color]'

No escaping is applied; names containing ``.``, ``[`` or ``]`` produce
ambiguous paths.
"""

from typing import Any

ROOT = ""


def child(parent: str, name: str) -> str:
    """Append a property name, dot-separated unless ``parent`` is the root."""
    if not parent:
        return name
    return f"{parent}.{name}"


def indexed(parent: str, index: int) -> str:
    """Append a zero-based element index."""
    return f"{parent}[{index}]"


def keyed(parent: str, key: Any) -> str:
    """Append a mapping key using its ``str()`` representation."""
    return f"{parent}[{key}]"


__all__ = [
    "ROOT",
    "child",
    "indexed",
    "keyed",
]
