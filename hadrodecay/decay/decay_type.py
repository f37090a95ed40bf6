"""Canonical decay types shared by all decay tables.

A `DecayType` is identified by its daughters and the orbital angular momentum
:math:`L`. It is classified into one of the `DecayTypeKind` variants, which
determine how the :mod:`.spectral` module computes the mass-dependent width.
The `DecayTypeRegistry` makes sure that there is only one `DecayType` instance
for each combination, so that decay branches can be merged by identity.
"""

import logging
from enum import Enum, auto
from itertools import combinations
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

import attr

from hadrodecay.particle import Particle

from .exceptions import InvalidDecay, Violation


class DecayTypeKind(Enum):
    TWO_BODY_STABLE = auto()
    TWO_BODY_SEMISTABLE = auto()
    TWO_BODY_UNSTABLE = auto()
    TWO_BODY_DILEPTON = auto()
    THREE_BODY = auto()
    THREE_BODY_DILEPTON = auto()

    @property
    def is_dilepton(self) -> bool:
        return self in (
            DecayTypeKind.TWO_BODY_DILEPTON,
            DecayTypeKind.THREE_BODY_DILEPTON,
        )


@attr.s(frozen=True, eq=False)
class DecayType:
    """Immutable decay channel, compared by identity.

    For `~DecayTypeKind.TWO_BODY_SEMISTABLE`, the stable daughter comes first.
    Only `~DecayTypeKind.THREE_BODY_DILEPTON` types store their mother, because
    their width depends on it.
    """

    kind: DecayTypeKind = attr.ib()
    daughters: Tuple[Particle, ...] = attr.ib(converter=tuple)
    angular_momentum: int = attr.ib()
    mother: Optional[Particle] = attr.ib(default=None)

    def __repr__(self) -> str:
        daughters = " ".join(p.name for p in self.daughters)
        return (
            f"{self.__class__.__name__}({self.kind.name}, [{daughters}],"
            f" L={self.angular_momentum})"
        )

    @property
    def daughter_names(self) -> Tuple[str, ...]:
        return tuple(p.name for p in self.daughters)

    def has_daughters(self, daughters: Sequence[Particle]) -> bool:
        """Check whether the daughters match, regardless of their order."""
        return sorted(self.daughter_names) == sorted(p.name for p in daughters)


def is_dilepton(pid1: int, pid2: int) -> bool:
    return pid1 == -pid2 and abs(pid1) in (11, 13)


def has_lepton_pair(pid1: int, pid2: int, pid3: int) -> bool:
    return any(
        is_dilepton(a, b) for a, b in combinations([pid1, pid2, pid3], 2)
    )


def classify(daughters: Sequence[Particle]) -> DecayTypeKind:
    if len(daughters) == 2:
        first, second = daughters
        if is_dilepton(first.pid, second.pid):
            return DecayTypeKind.TWO_BODY_DILEPTON
        if first.is_stable() and second.is_stable():
            return DecayTypeKind.TWO_BODY_STABLE
        if first.is_stable() or second.is_stable():
            return DecayTypeKind.TWO_BODY_SEMISTABLE
        return DecayTypeKind.TWO_BODY_UNSTABLE
    if len(daughters) == 3:
        if has_lepton_pair(*(p.pid for p in daughters)):
            return DecayTypeKind.THREE_BODY_DILEPTON
        return DecayTypeKind.THREE_BODY
    raise InvalidDecay(
        f"Cannot create a decay type with {len(daughters)} daughters"
        f" ({' '.join(p.name for p in daughters)}), only two or three",
        violation=Violation.DAUGHTER_COUNT,
    )


_RegistryKey = Tuple[Tuple[str, ...], int, Optional[str]]


class DecayTypeRegistry:
    """Arena of all `DecayType` instances created while building the tables."""

    def __init__(self) -> None:
        self.__types: List[DecayType] = list()
        self.__index: Dict[_RegistryKey, DecayType] = dict()

    def __iter__(self) -> Iterator[DecayType]:
        return iter(self.__types)

    def __len__(self) -> int:
        return len(self.__types)

    def get_or_create(
        self,
        daughters: Sequence[Particle],
        angular_momentum: int,
        mother: Optional[Particle] = None,
    ) -> DecayType:
        """Return the unique `DecayType` for these daughters and :math:`L`."""
        kind = classify(daughters)
        mother_name = None
        if kind is DecayTypeKind.THREE_BODY_DILEPTON:
            if mother is None:
                raise ValueError("Dalitz decay types need a mother particle")
            mother_name = mother.name
        key = (
            tuple(sorted(p.name for p in daughters)),
            angular_momentum,
            mother_name,
        )
        decay_type = self.__index.get(key)
        if decay_type is not None:
            return decay_type
        ordered = list(daughters)
        if kind is DecayTypeKind.TWO_BODY_SEMISTABLE and ordered[1].is_stable():
            ordered.reverse()
        decay_type = DecayType(
            kind=kind,
            daughters=ordered,
            angular_momentum=angular_momentum,
            mother=mother if mother_name is not None else None,
        )
        logging.debug(f"New decay type {decay_type}")
        self.__types.append(decay_type)
        self.__index[key] = decay_type
        return decay_type
