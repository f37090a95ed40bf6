# pylint: disable=invalid-name
"""Sample resonance masses from their spectral functions.

Candidate masses are drawn from the non-relativistic Breit-Wigner (Cauchy)
distribution, truncated to the kinematically allowed range, and accepted with
a probability proportional to

.. math::
    \\frac{\\mathcal{A}(m)}{\\mathcal{A}_\\mathrm{simple}(m)}\\, p_\\mathrm{cm}
    B_L^2(p_\\mathrm{cm}).

The maximum of this ratio is not known analytically. It is estimated with a
scale factor that is increased whenever a candidate exceeds the current
maximum, after which the sampling starts over. The scale factors are stored
per species in a `SamplerEnvelope`, so that they improve over many calls.
"""

import logging
import threading
from typing import Optional, Tuple, Union

import numpy as np

from ._cache import LazyValues
from .kinematics import blatt_weisskopf_sqr, breakup_momentum, sample_cauchy
from .particle import Particle
from .spectral import ParticleLike, SpectralFunctions


class SamplerEnvelope:
    """Scale factors of the rejection-sampling maximum of one species.

    There is one factor for sampling a single resonance next to a stable
    particle and one for sampling a pair of resonances. The factors only ever
    increase. Updates are serialized with a lock, so the envelope can be shared
    between threads.
    """

    def __init__(self) -> None:
        self.__single_factor = 1.0
        self.__pair_factor = 1.0
        self.__lock = threading.Lock()

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(single={self.__single_factor},"
            f" pair={self.__pair_factor})"
        )

    @property
    def single_factor(self) -> float:
        return self.__single_factor

    @property
    def pair_factor(self) -> float:
        return self.__pair_factor

    def increase_single_factor(self, factor: float) -> None:
        with self.__lock:
            self.__single_factor = max(self.__single_factor, factor)

    def increase_pair_factor(self, factor: float) -> None:
        with self.__lock:
            self.__pair_factor = max(self.__pair_factor, factor)


class ResonanceMassSampler:
    """Rejection sampler for one or two resonance masses.

    Args:
        spectral: Spectral functions of all species.
        seed: Seed or `numpy.random.Generator` for the random numbers.
        envelopes: Envelopes to share with another sampler, see
            `ResonanceMassSampler.envelopes`.

    A sampler owns its random number generator and should therefore not be
    shared between threads. Samplers of different threads can share their
    envelopes instead.
    """

    def __init__(
        self,
        spectral: SpectralFunctions,
        seed: Union[None, int, np.random.Generator] = None,
        envelopes: Optional[LazyValues[str, SamplerEnvelope]] = None,
    ) -> None:
        self.__spectral = spectral
        if isinstance(seed, np.random.Generator):
            self.__rng = seed
        else:
            self.__rng = np.random.default_rng(seed)
        if envelopes is None:
            envelopes = LazyValues()
        self.__envelopes = envelopes

    @property
    def spectral(self) -> SpectralFunctions:
        return self.__spectral

    @property
    def envelopes(self) -> LazyValues[str, SamplerEnvelope]:
        return self.__envelopes

    def envelope(self, particle: ParticleLike) -> SamplerEnvelope:
        name = particle if isinstance(particle, str) else particle.name
        return self.__envelopes.get(name, SamplerEnvelope)

    def __resonance(self, particle: ParticleLike) -> Particle:
        if isinstance(particle, str):
            particle = self.__spectral.database.catalogue[particle]
        if particle.is_stable():
            raise ValueError(
                f"Cannot sample the mass of {particle.name}, because it is"
                " stable"
            )
        return particle

    def __spectral_ratio(self, particle: Particle, m: float) -> float:
        return self.__spectral.spectral_function(
            particle, m
        ) / self.__spectral.spectral_function_simple(particle, m)

    def __sample_cauchy(
        self, particle: Particle, m_min: float, m_max: float
    ) -> float:
        return sample_cauchy(
            self.__rng, particle.mass, particle.width / 2.0, m_min, m_max
        )

    def __barrier(self, p_cm: float, angular_momentum: int) -> float:
        return p_cm * blatt_weisskopf_sqr(
            p_cm,
            angular_momentum,
            self.__spectral.settings.interaction_radius,
        )

    def sample_mass(
        self,
        particle: ParticleLike,
        cms_energy: float,
        angular_momentum: int = 0,
        mass_stable: float = 0.0,
    ) -> float:
        """Sample the mass of a resonance that is produced with a stable
        particle.

        Args:
            particle: The resonance.
            cms_energy: Center-of-mass energy of the two-body final state.
            angular_momentum: Relative angular momentum :math:`L` of the final
                state.
            mass_stable: Mass of the stable particle.

        Raises:
            ValueError: if the energy is too low to produce the resonance.
        """
        resonance = self.__resonance(particle)
        envelope = self.envelope(resonance)
        max_mass = float(np.nextafter(cms_energy - mass_stable, 0.0))
        min_mass = self.__spectral.min_mass_spectral(resonance)
        if max_mass < min_mass:
            raise ValueError(
                f"Center-of-mass energy {cms_energy} is not sufficient to"
                f" produce {resonance.name} (minimal mass {min_mass}) with a"
                f" particle of mass {mass_stable}"
            )
        p_cm_max = breakup_momentum(cms_energy, mass_stable, min_mass)
        barrier_max = self.__barrier(p_cm_max, angular_momentum)
        # the largest spectral ratio usually, but not always, lies at max_mass
        ratio_max = max(1.0, self.__spectral_ratio(resonance, max_mass))
        while True:
            factor = envelope.single_factor
            maximum = barrier_max * ratio_max * factor
            while True:
                mass = self.__sample_cauchy(resonance, min_mass, max_mass)
                p_cm = breakup_momentum(cms_energy, mass_stable, mass)
                value = self.__spectral_ratio(
                    resonance, mass
                ) * self.__barrier(p_cm, angular_momentum)
                if value >= self.__rng.uniform(0.0, maximum):
                    break
            if value <= maximum:
                return mass
            logging.debug(
                f"Maximum is being increased in sample_mass: {factor}"
                f" {value / maximum} {resonance.name} {mass_stable}"
                f" {cms_energy} {mass}"
            )
            envelope.increase_single_factor(factor * value / maximum)

    def sample_mass_pair(
        self,
        particle1: ParticleLike,
        particle2: ParticleLike,
        cms_energy: float,
        angular_momentum: int = 0,
    ) -> Tuple[float, float]:
        """Sample the masses of two resonances produced together.

        The scale factor of the envelope of the first resonance is used.

        Raises:
            ValueError: if the energy is too low to produce both resonances.
        """
        resonance1 = self.__resonance(particle1)
        resonance2 = self.__resonance(particle2)
        envelope = self.envelope(resonance1)
        min_mass_1 = self.__spectral.min_mass_spectral(resonance1)
        min_mass_2 = self.__spectral.min_mass_spectral(resonance2)
        max_mass_1 = float(np.nextafter(cms_energy - min_mass_2, 0.0))
        max_mass_2 = float(np.nextafter(cms_energy - min_mass_1, 0.0))
        if max_mass_1 < min_mass_1:
            raise ValueError(
                f"Center-of-mass energy {cms_energy} is not sufficient to"
                f" produce {resonance1.name} and {resonance2.name} (minimal"
                f" masses {min_mass_1} and {min_mass_2})"
            )
        p_cm_max = breakup_momentum(cms_energy, min_mass_1, min_mass_2)
        barrier_max = self.__barrier(p_cm_max, angular_momentum)
        while True:
            factor = envelope.pair_factor
            maximum = barrier_max * factor
            while True:
                mass_1 = self.__sample_cauchy(resonance1, min_mass_1, max_mass_1)
                mass_2 = self.__sample_cauchy(resonance2, min_mass_2, max_mass_2)
                p_cm = breakup_momentum(cms_energy, mass_1, mass_2)
                value = (
                    self.__spectral_ratio(resonance1, mass_1)
                    * self.__spectral_ratio(resonance2, mass_2)
                    * self.__barrier(p_cm, angular_momentum)
                )
                if value >= self.__rng.uniform(0.0, maximum):
                    break
            if value <= maximum:
                return mass_1, mass_2
            logging.debug(
                f"Maximum is being increased in sample_mass_pair: {factor}"
                f" {value / maximum} {resonance1.name} {resonance2.name}"
                f" {cms_energy} {mass_1} {mass_2}"
            )
            envelope.increase_pair_factor(factor * value / maximum)
