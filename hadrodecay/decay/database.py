"""The `DecayDatabase` owns all decay types and decay tables.

It is created by the :mod:`.builder` once all decay-mode sections have been
read and checked, and afterwards it is only read. The only mutable state are
lazily computed kinematic thresholds, see `.LazyValues`.
"""

import logging
from typing import Dict, FrozenSet, List, Mapping, Sequence, Tuple, Union

from hadrodecay._cache import LazyValues
from hadrodecay.default_settings import SpectralSettings
from hadrodecay.particle import Particle, ParticleCatalogue

from .decay_type import DecayType
from .table import DecayTable

_EMPTY_TABLE = DecayTable()


class DecayDatabase:
    def __init__(
        self,
        catalogue: ParticleCatalogue,
        decay_types: Sequence[DecayType],
        tables: Mapping[str, DecayTable],
        settings: SpectralSettings,
        large_renormalizations: int = 0,
    ) -> None:
        self.__catalogue = catalogue
        self.__decay_types = tuple(decay_types)
        self.__tables: Dict[str, DecayTable] = dict(tables)
        self.__settings = settings
        self.__large_renormalizations = large_renormalizations
        self.__min_mass_kinematic: LazyValues[str, float] = LazyValues()
        self.__possible_resonances: LazyValues[
            FrozenSet[str], Tuple[Particle, ...]
        ] = LazyValues()

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}({len(self.__tables)} decay tables,"
            f" {len(self.__decay_types)} decay types)"
        )

    @property
    def catalogue(self) -> ParticleCatalogue:
        return self.__catalogue

    @property
    def decay_types(self) -> Tuple[DecayType, ...]:
        return self.__decay_types

    @property
    def settings(self) -> SpectralSettings:
        return self.__settings

    @property
    def large_renormalizations(self) -> int:
        """Number of species of which the weights changed by more than 1%."""
        return self.__large_renormalizations

    def decay_table(self, particle: Union[Particle, str]) -> DecayTable:
        """Get the decay table of a species, which is empty if it is stable."""
        name = particle if isinstance(particle, str) else particle.name
        if name not in self.__catalogue:
            raise KeyError(f'No particle with name "{name}" in the catalogue')
        return self.__tables.get(name, _EMPTY_TABLE)

    def min_mass_kinematic(self, particle: Union[Particle, str]) -> float:
        """Lowest mass a species can have, the lowest threshold of its decays.

        For stable species, this is the pole mass.
        """
        if isinstance(particle, str):
            particle = self.__catalogue[particle]
        return self.__min_mass_kinematic.get(
            particle.name, lambda: self.__compute_min_mass(particle)
        )

    def __compute_min_mass(self, particle: Particle) -> float:
        if particle.is_stable():
            return particle.mass
        table = self.decay_table(particle)
        min_mass = min(
            self.threshold(branch.decay_type) for branch in table
        )
        logging.debug(f"Minimal kinematic mass of {particle.name}: {min_mass}")
        return min_mass

    def threshold(self, decay_type: DecayType) -> float:
        """Sum of the minimal masses of the daughters."""
        return sum(self.min_mass_kinematic(p) for p in decay_type.daughters)

    def list_possible_resonances(
        self, particle_a: Particle, particle_b: Particle
    ) -> Tuple[Particle, ...]:
        """Unstable species that have a two-body decay into exactly a and b."""
        key = frozenset([particle_a.name, particle_b.name])
        return self.__possible_resonances.get(
            key, lambda: self.__find_resonances(particle_a, particle_b)
        )

    def __find_resonances(
        self, particle_a: Particle, particle_b: Particle
    ) -> Tuple[Particle, ...]:
        logging.debug(
            "Filling map of compatible resonances for"
            f" {particle_a.name} {particle_b.name}"
        )
        incoming = [particle_a, particle_b]
        resonances: List[Particle] = list()
        for resonance in self.__catalogue.values():
            if resonance.is_stable():
                continue
            if resonance.name in (particle_a.name, particle_b.name):
                continue
            # quick checks before looking at the decay modes
            if resonance.charge != particle_a.charge + particle_b.charge:
                continue
            if (
                resonance.baryon_number
                != particle_a.baryon_number + particle_b.baryon_number
            ):
                continue
            if (
                resonance.strangeness
                != particle_a.strangeness + particle_b.strangeness
            ):
                continue
            if any(
                branch.decay_type.has_daughters(incoming)
                for branch in self.decay_table(resonance)
            ):
                resonances.append(resonance)
        return tuple(resonances)
