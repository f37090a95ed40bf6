"""Decay branches and the per-species decay tables."""

import logging
from typing import Iterator, List, Tuple

import attr

from hadrodecay.default_settings import LARGE_RENORMALIZATION, REALLY_SMALL
from hadrodecay.particle import Particle

from .decay_type import DecayType


@attr.s(frozen=True, eq=False)
class DecayBranch:
    """A `DecayType` with its branching weight, compared by type identity."""

    decay_type: DecayType = attr.ib()
    weight: float = attr.ib(converter=float)

    @property
    def daughters(self) -> Tuple[Particle, ...]:
        return self.decay_type.daughters

    @property
    def angular_momentum(self) -> int:
        return self.decay_type.angular_momentum

    def __eq__(self, other: object) -> bool:
        if isinstance(other, DecayBranch):
            return (
                self.decay_type is other.decay_type
                and self.weight == other.weight
            )
        return NotImplemented

    def __hash__(self) -> int:
        return hash((id(self.decay_type), self.weight))


class DecayTable:
    """Immutable, ordered collection of `DecayBranch` es of one species.

    Unstable species always have a non-empty table. A stable species usually
    has an empty one, but keeps any modes listed for it, so `is_empty` does
    not imply `Particle.is_stable` the other way around.
    """

    def __init__(self, branches: Tuple[DecayBranch, ...] = ()) -> None:
        self.__branches = tuple(branches)

    def __iter__(self) -> Iterator[DecayBranch]:
        return iter(self.__branches)

    def __len__(self) -> int:
        return len(self.__branches)

    def __getitem__(self, index: int) -> DecayBranch:
        return self.__branches[index]

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({list(self.__branches)})"

    def is_empty(self) -> bool:
        return not self.__branches

    @property
    def total_weight(self) -> float:
        return sum(branch.weight for branch in self.__branches)


class DecayTableAccumulator:
    """Mutable decay table that only exists while the tables are being built.

    Modes with the same `DecayType` instance are merged by adding their
    weights. Call `freeze` to obtain the final `DecayTable`.
    """

    def __init__(self) -> None:
        self.__decay_types: List[DecayType] = list()
        self.__weights: List[float] = list()

    def __len__(self) -> int:
        return len(self.__decay_types)

    def __iter__(self) -> Iterator[Tuple[DecayType, float]]:
        return zip(self.__decay_types, self.__weights)

    def is_empty(self) -> bool:
        return not self.__decay_types

    @property
    def total_weight(self) -> float:
        return sum(self.__weights)

    def add_mode(self, decay_type: DecayType, weight: float) -> None:
        for i, existing in enumerate(self.__decay_types):
            if existing is decay_type:
                self.__weights[i] += weight
                return
        self.__decay_types.append(decay_type)
        self.__weights.append(weight)

    def renormalize(
        self,
        name: str,
        large_renormalization: float = LARGE_RENORMALIZATION,
        really_small: float = REALLY_SMALL,
    ) -> bool:
        """Scale the weights so that they sum to one.

        Returns `True` if the sum of the weights deviated from one by more
        than ``large_renormalization``. Sums within ``really_small`` of one
        are left untouched.
        """
        weight_sum = self.total_weight
        if weight_sum <= 0.0:
            raise ValueError(
                f"Cannot renormalize decay modes of {name}: sum of weights is"
                f" {weight_sum}"
            )
        if abs(weight_sum - 1.0) < really_small:
            logging.debug(f"Renormalization of {name} not needed")
            return False
        is_large = abs(weight_sum - 1.0) > large_renormalization
        logging.debug(
            f"Renormalizing decay modes of {name}: sum of weights is"
            f" {weight_sum}"
        )
        self.__weights = [weight / weight_sum for weight in self.__weights]
        return is_large

    def freeze(self) -> DecayTable:
        return DecayTable(
            tuple(
                DecayBranch(decay_type, weight)
                for decay_type, weight in zip(
                    self.__decay_types, self.__weights
                )
            )
        )
