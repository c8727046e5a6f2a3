r"""Mutable state shared by the steps of one scenario run."""

from __future__ import annotations

__all__ = ["ScenarioContext"]

from dataclasses import dataclass
from typing import Any

from crudprobe.config import FALLBACK_STUDENT_ID


@dataclass
class ScenarioContext:
    """Identifier of the student under test.

    Starts with the fallback identifier and is overwritten by the create
    step when it succeeds.

    Attributes:
        student_id: Identifier used by every step after create, as it
            appears in request paths.
        id_value: The identifier exactly as the service returned it,
            e.g. ``42`` for a numeric id. Response bodies are checked
            against this value.
        fallback_used: True while ``student_id`` is still the fallback.

    Example:
        ```pycon
        >>> from crudprobe.scenario import ScenarioContext
        >>> ctx = ScenarioContext()
        >>> ctx.student_id, ctx.fallback_used
        ('test-id-123', True)
        >>> ctx.set_student_id(42)
        >>> ctx.student_id, ctx.id_value, ctx.fallback_used
        ('42', 42, False)

        ```
    """

    student_id: str = FALLBACK_STUDENT_ID
    fallback_used: bool = True
    id_value: Any = None

    def __post_init__(self) -> None:
        if not self.student_id:
            msg = "student_id must be a non-empty string"
            raise ValueError(msg)
        if self.id_value is None:
            self.id_value = self.student_id

    def set_student_id(self, student_id: object) -> None:
        value = "" if student_id is None else str(student_id)
        if not value:
            msg = "student_id must be a non-empty string"
            raise ValueError(msg)
        self.student_id = value
        self.id_value = student_id
        self.fallback_used = False
