r"""Field assertions on JSON response bodies.

A ``FieldAssertion`` pairs a dotted field path with a matcher. Only two
matchers exist: exact equality (``equal_to``) and presence of a
non-null value (``not_null``).
"""

from __future__ import annotations

__all__ = [
    "MISSING",
    "FieldAssertion",
    "Matcher",
    "equal_to",
    "extract_path",
    "not_null",
]

from dataclasses import dataclass
from typing import Any


class _Missing:
    def __repr__(self) -> str:
        return "<missing>"


# Sentinel returned by extract_path when a field does not exist
MISSING: Any = _Missing()


@dataclass(frozen=True)
class Matcher:
    """Predicate applied to one extracted field value.

    Attributes:
        expected: The expected value, only used by equality matchers.
        require_value: If True, match any present non-null value instead
            of comparing with ``expected``.
    """

    expected: Any = None
    require_value: bool = False

    def matches(self, actual: Any) -> bool:
        if actual is MISSING:
            return False
        if self.require_value:
            return actual is not None
        return actual == self.expected

    def describe(self) -> str:
        if self.require_value:
            return "a non-null value"
        return repr(self.expected)


def equal_to(expected: Any) -> Matcher:
    """Return a matcher for exact equality with ``expected``.

    Example:
        ```pycon
        >>> from crudprobe.assertions import equal_to
        >>> equal_to("John Doe").matches("John Doe")
        True
        >>> equal_to("John Doe").matches("Jane Doe")
        False

        ```
    """
    return Matcher(expected=expected)


def not_null() -> Matcher:
    """Return a matcher for a present, non-null value.

    Example:
        ```pycon
        >>> from crudprobe.assertions import not_null
        >>> not_null().matches("42")
        True
        >>> not_null().matches(None)
        False

        ```
    """
    return Matcher(require_value=True)


@dataclass(frozen=True)
class FieldAssertion:
    """Assertion on one field of a JSON body.

    Attributes:
        path: Dotted path to the field, e.g. ``"id"`` or
            ``"address.city"``. Numeric segments index into lists.
        matcher: The matcher the field value must satisfy.
    """

    path: str
    matcher: Matcher

    def check(self, body: Any) -> tuple[bool, Any]:
        """Evaluate the assertion against a parsed JSON body.

        Returns:
            A tuple ``(matched, actual)`` where ``actual`` is the
            extracted value or ``MISSING``.
        """
        actual = extract_path(body, self.path)
        return self.matcher.matches(actual), actual


def extract_path(body: Any, path: str) -> Any:
    """Extract a value from a parsed JSON document by dotted path.

    Args:
        body: The parsed JSON document.
        path: Dotted path. An empty path returns the whole body.

    Returns:
        The value at ``path``, or ``MISSING`` if any segment is absent.

    Example:
        ```pycon
        >>> from crudprobe.assertions import extract_path
        >>> extract_path({"id": "7", "tags": [{"k": "a"}]}, "tags.0.k")
        'a'
        >>> extract_path({"id": "7"}, "name")
        <missing>

        ```
    """
    if not path:
        return body
    current = body
    for segment in path.split("."):
        if isinstance(current, dict):
            if segment not in current:
                return MISSING
            current = current[segment]
        elif isinstance(current, list) and segment.lstrip("-").isdigit():
            index = int(segment)
            if not -len(current) <= index < len(current):
                return MISSING
            current = current[index]
        else:
            return MISSING
    return current
