"""Interaction modes offered by the tutoring chat."""

from enum import Enum
from typing import Any


class InteractionMode(str, Enum):
    """How the assistant should behave for one chat turn.

    ``tutor``, ``checker`` and ``explainer`` speak to students; ``grade`` and
    ``parent_explainer`` speak to parents.
    """

    TUTOR = "tutor"
    CHECKER = "checker"
    EXPLAINER = "explainer"
    GRADE = "grade"
    PARENT_EXPLAINER = "parent_explainer"

    @classmethod
    def parse(cls, value: Any) -> "InteractionMode":
        """Return the mode named by *value*, falling back to ``tutor``."""
        if isinstance(value, str):
            try:
                return cls(value)
            except ValueError:
                pass
        return cls.TUTOR

    @property
    def is_parent(self) -> bool:
        return self in _PARENT_MODES

    @property
    def temperature(self) -> float:
        return _TEMPERATURES[self]

    @property
    def system_template(self) -> str:
        return "parent_system.jinja" if self.is_parent else "student_system.jinja"

    @property
    def mode_template(self) -> str:
        return f"{self.value}_mode.jinja"


_PARENT_MODES = frozenset({InteractionMode.GRADE, InteractionMode.PARENT_EXPLAINER})

_TEMPERATURES = {
    InteractionMode.TUTOR: 0.4,
    InteractionMode.CHECKER: 0.2,
    InteractionMode.EXPLAINER: 0.5,
    InteractionMode.GRADE: 0.2,
    InteractionMode.PARENT_EXPLAINER: 0.4,
}
