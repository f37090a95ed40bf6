"""Decay types, decay tables and the builder that creates them.

The main entry point is `build_decay_database`, which turns a
`.ParticleCatalogue` and decay-mode records into a `.DecayDatabase`. The
database owns every `.DecayType` and `.DecayTable` and is read-only after it
has been built.
"""

__all__ = [
    "DecayBranch",
    "DecayDatabase",
    "DecayModesError",
    "DecayTable",
    "DecayType",
    "DecayTypeKind",
    "InvalidDecay",
    "Line",
    "LoadFailure",
    "ManleySaleskiViolation",
    "MissingDecays",
    "Violation",
    "build_decay_database",
    "parse_decay_modes",
]

from .builder import Line, build_decay_database, parse_decay_modes
from .database import DecayDatabase
from .decay_type import DecayType, DecayTypeKind
from .exceptions import (
    DecayModesError,
    InvalidDecay,
    LoadFailure,
    ManleySaleskiViolation,
    MissingDecays,
    Violation,
)
from .table import DecayBranch, DecayTable
