"""Errors that abort the construction of the decay tables.

All of them derive from `DecayModesError`, which is a `ValueError`. None of
the errors leaves partially built tables behind: the `.DecayDatabase` is only
created once every section and every consistency check has passed.
"""

from enum import Enum, auto
from typing import Optional


class Violation(Enum):
    """The kind of rule that a decay-mode line violates."""

    CHARGE = auto()
    ISOSPIN = auto()
    PARITY = auto()
    ANGULAR_MOMENTUM = auto()
    QUANTUM_NUMBER = auto()
    MISSING_DAUGHTER = auto()
    DAUGHTER_COUNT = auto()
    MANLEY_SALESKI = auto()


class DecayModesError(ValueError):
    def __init__(
        self,
        message: str,
        violation: Optional[Violation] = None,
        line_number: Optional[int] = None,
        line: Optional[str] = None,
    ) -> None:
        if line_number is not None:
            message += f' (line {line_number}: "{line}")'
        super().__init__(message)
        self.violation = violation
        self.line_number = line_number
        self.line = line


class LoadFailure(DecayModesError):
    """Malformed record, duplicate section or unresolvable name."""


class InvalidDecay(DecayModesError):
    """A decay mode violates a conservation law."""


class MissingDecays(DecayModesError):
    """An unstable particle ends up without decay modes."""


class ManleySaleskiViolation(InvalidDecay):
    """The pole mass does not exceed the threshold of one of the decay modes."""
