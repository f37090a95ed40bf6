# pylint: disable=invalid-name
r"""Mass-dependent widths and spectral functions.

The `SpectralFunctions` engine evaluates the total width :math:`\Gamma(m)` of
a species as the sum of the partial widths of its decay branches, and the
normalized relativistic Breit-Wigner

.. math::
    \mathcal{A}(m) = \frac{1}{N} \frac{2}{\pi}
    \frac{m^2\Gamma(m)}{(m^2 - M^2)^2 + m^2\Gamma(m)^2}.

The normalization :math:`N` is computed with `scipy.integrate.quad` after
substituting :math:`m = M + \Gamma_0 \tan x`, which maps the semi-infinite
mass range onto a finite interval.

All derived quantities (minimal masses, normalizations and tabulated
phase-space integrals) are computed on first use and cached. They can be
computed up-front with `SpectralFunctions.warm_up`.
"""

import logging
import math
from functools import partial
from itertools import combinations
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Union

import numpy as np
from scipy.integrate import dblquad, quad

from ._cache import LazyValues
from .decay import DecayBranch, DecayDatabase, DecayType, DecayTypeKind
from .decay.decay_type import is_dilepton
from .default_settings import SpectralSettings, WhichDecayModes
from .kinematics import (
    Tabulation,
    blatt_weisskopf_sqr,
    breakup_momentum,
    breit_wigner,
    breit_wigner_nonrel,
    post_ff_sqr,
)
from .particle import Particle

ParticleLike = Union[Particle, str]


def _kallen(x: float, y: float, z: float) -> float:
    return x * x + y * y + z * z - 2.0 * (x * y + x * z + y * z)


def _dilepton_factor(m: float, lepton_mass: float) -> float:
    r"""Lepton phase space :math:`\beta (1 + 2 m_l^2/m^2)` of a dilepton."""
    ratio_sqr = (lepton_mass / m) ** 2
    if ratio_sqr >= 0.25:
        return 0.0
    return math.sqrt(1.0 - 4.0 * ratio_sqr) * (1.0 + 2.0 * ratio_sqr)


def _kroll_wada(
    dilepton_mass: float, mother_mass: float, other_mass: float, lepton_mass: float
) -> float:
    """Kroll-Wada shape of a Dalitz decay, with point-like form factor."""
    mother_sqr = mother_mass * mother_mass
    other_sqr = other_mass * other_mass
    kallen = _kallen(mother_sqr, other_sqr, dilepton_mass * dilepton_mass)
    if kallen <= 0.0:
        return 0.0
    phase_space = kallen / (mother_sqr - other_sqr) ** 2
    return (
        _dilepton_factor(dilepton_mass, lepton_mass)
        * phase_space ** 1.5
        / dilepton_mass
    )


class SpectralFunctions:
    """Spectral-function engine on top of a `.DecayDatabase`.

    Args:
        database: The decay tables that define the widths.
        settings: Numerical settings, by default those of the ``database``.

    Instances are safe to share between threads: every lazily computed value
    is guarded by a lock per species or decay type, see `.LazyValues`.
    """

    def __init__(
        self,
        database: DecayDatabase,
        settings: Optional[SpectralSettings] = None,
    ) -> None:
        self.__database = database
        if settings is None:
            settings = database.settings
        self.__settings = settings
        self.__min_mass_spectral: LazyValues[str, float] = LazyValues()
        self.__norm_factors: LazyValues[str, float] = LazyValues()
        self.__tabulations: LazyValues[DecayType, Tabulation] = LazyValues()

    @property
    def database(self) -> DecayDatabase:
        return self.__database

    @property
    def settings(self) -> SpectralSettings:
        return self.__settings

    def __particle(self, particle: ParticleLike) -> Particle:
        if isinstance(particle, str):
            return self.__database.catalogue[particle]
        return particle

    def min_mass_kinematic(self, particle: ParticleLike) -> float:
        return self.__database.min_mass_kinematic(self.__particle(particle))

    def min_mass_spectral(self, particle: ParticleLike) -> float:
        """Smallest mass where the spectral function is not negligible.

        This is `min_mass_kinematic`, unless the spectral function is smaller
        than `~.SpectralSettings.really_small` there. In that case, the mass
        is found by stepping upwards until the spectral function is large
        enough and then bisecting the last step.
        """
        particle = self.__particle(particle)
        return self.__min_mass_spectral.get(
            particle.name, lambda: self.__compute_min_mass_spectral(particle)
        )

    def __compute_min_mass_spectral(self, particle: Particle) -> float:
        min_mass = self.min_mass_kinematic(particle)
        really_small = self.__settings.really_small
        if particle.is_stable():
            return min_mass
        if self.__unclipped_spectral_function(particle, min_mass) >= really_small:
            return min_mass
        step = self.__settings.bisection_step
        for i in range(1, self.__settings.bisection_max_steps + 1):
            right = min_mass + step * i
            if self.__unclipped_spectral_function(particle, right) > really_small:
                break
        else:
            raise RuntimeError(
                f"Spectral function of {particle.name} is negligible"
                f" everywhere between {min_mass} and {right} GeV"
            )
        left = right - step
        while right - left > self.__settings.bisection_precision:
            middle = 0.5 * (left + right)
            if (
                self.__unclipped_spectral_function(particle, middle)
                > really_small
            ):
                right = middle
            else:
                left = middle
        logging.debug(
            f"Minimal mass of {particle.name} with non-negligible spectral"
            f" function: {right} (kinematic limit {min_mass})"
        )
        return right

    def total_width(self, particle: ParticleLike, m: float) -> float:
        """Sum of all partial widths at mass :code:`m`.

        Widths below `~.SpectralSettings.width_cutoff` are returned as zero.
        """
        particle = self.__particle(particle)
        if particle.is_stable():
            return 0.0
        width = 0.0
        for branch in self.__database.decay_table(particle):
            width += self.partial_width(particle, m, branch)
        if width < self.__settings.width_cutoff:
            return 0.0
        return width

    def partial_width(
        self, particle: ParticleLike, m: float, branch: DecayBranch
    ) -> float:
        """Width of one decay branch, which vanishes below its threshold."""
        particle = self.__particle(particle)
        if m < self.__database.threshold(branch.decay_type):
            return 0.0
        partial_width_at_pole = particle.width * branch.weight
        return self.width(
            branch.decay_type, particle, partial_width_at_pole, m
        )

    def width(
        self,
        decay_type: DecayType,
        mother: Particle,
        partial_width_at_pole: float,
        m: float,
    ) -> float:
        """Mass dependence of a partial width, depending on the decay type."""
        m0 = mother.mass
        kind = decay_type.kind
        if kind is DecayTypeKind.TWO_BODY_STABLE:
            rho_pole = self.__rho_stable(decay_type, m0)
            if rho_pole <= 0.0:
                return 0.0
            return (
                partial_width_at_pole
                * self.__rho_stable(decay_type, m)
                / rho_pole
            )
        if kind is DecayTypeKind.TWO_BODY_SEMISTABLE:
            return self.__width_tabulated(
                decay_type,
                partial_width_at_pole,
                m0,
                m,
                cutoff=self.__semistable_cutoff(decay_type),
            )
        if kind is DecayTypeKind.TWO_BODY_UNSTABLE:
            return self.__width_tabulated(
                decay_type,
                partial_width_at_pole,
                m0,
                m,
                cutoff=self.__settings.lambda_unstable,
            )
        if kind is DecayTypeKind.TWO_BODY_DILEPTON:
            lepton_mass = decay_type.daughters[0].mass
            pole_factor = _dilepton_factor(m0, lepton_mass)
            if pole_factor <= 0.0:
                return 0.0
            return (
                partial_width_at_pole
                * (m0 / m) ** 3
                * _dilepton_factor(m, lepton_mass)
                / pole_factor
            )
        if kind is DecayTypeKind.THREE_BODY:
            if m <= self.__database.threshold(decay_type):
                return 0.0
            return partial_width_at_pole
        if kind is DecayTypeKind.THREE_BODY_DILEPTON:
            if mother.is_stable():
                return partial_width_at_pole
            tabulation = self.__tabulation(decay_type)
            return partial_width_at_pole * tabulation(m) / tabulation(m0)
        raise NotImplementedError(f"No width for decay type kind {kind}")

    def __rho_stable(self, decay_type: DecayType, m: float) -> float:
        first, second = decay_type.daughters
        p_cm = breakup_momentum(m, first.mass, second.mass)
        return (
            p_cm
            / m
            * blatt_weisskopf_sqr(
                p_cm,
                decay_type.angular_momentum,
                self.__settings.interaction_radius,
            )
        )

    def __semistable_cutoff(self, decay_type: DecayType) -> float:
        unstable_daughter = decay_type.daughters[1]
        if unstable_daughter.baryon_number != 0:
            return self.__settings.lambda_baryon
        return self.__settings.lambda_meson

    def __width_tabulated(  # pylint: disable=too-many-arguments
        self,
        decay_type: DecayType,
        partial_width_at_pole: float,
        m0: float,
        m: float,
        cutoff: float,
    ) -> float:
        tabulation = self.__tabulation(decay_type)
        rho_pole = tabulation(m0)
        if rho_pole <= 0.0:
            return 0.0
        threshold = self.__database.threshold(decay_type)
        return (
            partial_width_at_pole
            * tabulation(m)
            / rho_pole
            * post_ff_sqr(m, m0, threshold, cutoff)
        )

    def __tabulation(self, decay_type: DecayType) -> Tabulation:
        return self.__tabulations.get(
            decay_type, lambda: self.__create_tabulation(decay_type)
        )

    def __create_tabulation(self, decay_type: DecayType) -> Tabulation:
        integrals: Dict[DecayTypeKind, Callable[[DecayType, float], float]] = {
            DecayTypeKind.TWO_BODY_SEMISTABLE: self.__rho_semistable,
            DecayTypeKind.TWO_BODY_UNSTABLE: self.__rho_unstable,
            DecayTypeKind.THREE_BODY_DILEPTON: self.__dalitz_integral,
        }
        if decay_type.kind not in integrals:
            raise NotImplementedError(
                f"Decay type kind {decay_type.kind} needs no tabulation"
            )
        logging.debug(f"Tabulating phase space of {decay_type}")
        return Tabulation(
            x_min=self.__database.threshold(decay_type),
            x_range=self.__settings.tabulation_range,
            num_points=self.__settings.tabulation_points,
            function=partial(integrals[decay_type.kind], decay_type),
        )

    def __phase_space(
        self, m: float, m1: float, m2: float, angular_momentum: int
    ) -> float:
        p_cm = breakup_momentum(m, m1, m2)
        return (
            p_cm
            / m
            * blatt_weisskopf_sqr(
                p_cm, angular_momentum, self.__settings.interaction_radius
            )
        )

    def __rho_semistable(self, decay_type: DecayType, m: float) -> float:
        stable, resonance = decay_type.daughters
        m_min = self.min_mass_kinematic(resonance)
        m_max = m - stable.mass
        if m_max <= m_min:
            return 0.0
        value, _ = quad(
            lambda m_res: self.spectral_function(resonance, m_res)
            * self.__phase_space(
                m, stable.mass, m_res, decay_type.angular_momentum
            ),
            m_min,
            m_max,
            epsrel=self.__settings.integration_epsrel,
            limit=100,
        )
        return value

    def __rho_unstable(self, decay_type: DecayType, m: float) -> float:
        resonance1, resonance2 = decay_type.daughters
        m1_min = self.min_mass_kinematic(resonance1)
        m2_min = self.min_mass_kinematic(resonance2)
        if m <= m1_min + m2_min:
            return 0.0
        value, _ = dblquad(
            lambda m2, m1: self.spectral_function(resonance1, m1)
            * self.spectral_function(resonance2, m2)
            * self.__phase_space(m, m1, m2, decay_type.angular_momentum),
            m1_min,
            m - m2_min,
            lambda m1: m2_min,
            lambda m1: m - m1,
            epsrel=self.__settings.integration_epsrel,
        )
        return value

    def __dalitz_integral(self, decay_type: DecayType, m: float) -> float:
        daughters = decay_type.daughters
        lepton_indices = next(
            (i, j)
            for i, j in combinations(range(3), 2)
            if is_dilepton(daughters[i].pid, daughters[j].pid)
        )
        other = next(
            p for i, p in enumerate(daughters) if i not in lepton_indices
        )
        lepton_mass = daughters[lepton_indices[0]].mass
        m_min = 2.0 * lepton_mass
        m_max = m - other.mass
        if m_max <= m_min:
            return 0.0
        value, _ = quad(
            lambda m_ll: _kroll_wada(m_ll, m, other.mass, lepton_mass),
            m_min,
            m_max,
            epsrel=self.__settings.integration_epsrel,
            limit=100,
        )
        return value

    def spectral_function(self, particle: ParticleLike, m: float) -> float:
        """Normalized spectral function, zero below `min_mass_spectral`."""
        particle = self.__particle(particle)
        if particle.is_stable():
            return 0.0
        if m < self.min_mass_spectral(particle):
            return 0.0
        return self.__unclipped_spectral_function(particle, m)

    def __unclipped_spectral_function(self, particle: Particle, m: float) -> float:
        return self.spectral_norm(particle) * self.spectral_function_no_norm(
            particle, m
        )

    def spectral_norm(self, particle: ParticleLike) -> float:
        r"""Inverse of the integral over `spectral_function_no_norm`."""
        particle = self.__particle(particle)
        if particle.is_stable():
            raise ValueError(
                f"{particle.name} is stable and has no spectral function"
            )
        return self.__norm_factors.get(
            particle.name, lambda: self.__compute_norm(particle)
        )

    def __compute_norm(self, particle: Particle) -> float:
        width = particle.width
        m_pole = particle.mass
        x_min = math.atan((self.min_mass_kinematic(particle) - m_pole) / width)

        def integrand(x: float) -> float:
            tan_x = math.tan(x)
            jacobian = width * (1.0 + tan_x * tan_x)
            return (
                self.spectral_function_no_norm(particle, m_pole + width * tan_x)
                * jacobian
            )

        integral, _ = quad(
            integrand,
            x_min,
            0.5 * math.pi,
            epsrel=self.__settings.integration_epsrel,
            limit=200,
        )
        logging.debug(
            f"Normalization of the spectral function of {particle.name}:"
            f" {1.0 / integral}"
        )
        return 1.0 / integral

    def spectral_function_no_norm(
        self, particle: ParticleLike, m: float
    ) -> float:
        """Relativistic Breit-Wigner with mass-dependent `total_width`."""
        resonance_width = self.total_width(particle, m)
        if resonance_width < self.__settings.width_cutoff:
            return 0.0
        return breit_wigner(m, self.__particle(particle).mass, resonance_width)

    def spectral_function_const_width(
        self, particle: ParticleLike, m: float
    ) -> float:
        """Relativistic Breit-Wigner with the width at the pole."""
        particle = self.__particle(particle)
        if particle.width < self.__settings.width_cutoff:
            return 0.0
        return breit_wigner(m, particle.mass, particle.width)

    def spectral_function_simple(
        self, particle: ParticleLike, m: float
    ) -> float:
        """Non-relativistic Breit-Wigner, the proposal density of the sampler."""
        particle = self.__particle(particle)
        return breit_wigner_nonrel(m, particle.mass, particle.width)

    def partial_widths(
        self,
        particle: ParticleLike,
        m: float,
        which: WhichDecayModes = WhichDecayModes.ALL,
    ) -> List[DecayBranch]:
        """Open decay branches with their partial width as weight.

        Branches with a vanishing width at :code:`m` are left out.
        """
        particle = self.__particle(particle)
        branches = list()
        for branch in self.__database.decay_table(particle):
            if not _is_wanted(branch.decay_type, which):
                continue
            width = self.partial_width(particle, m, branch)
            if width > 0.0:
                branches.append(DecayBranch(branch.decay_type, width))
        return branches

    def partial_width_to(
        self, particle: ParticleLike, m: float, daughters: Sequence[Particle]
    ) -> float:
        """Sum of the widths of all branches into exactly these daughters."""
        particle = self.__particle(particle)
        width = 0.0
        for branch in self.__database.decay_table(particle):
            if branch.decay_type.has_daughters(daughters):
                width += self.width(
                    branch.decay_type,
                    particle,
                    particle.width * branch.weight,
                    m,
                )
        return width

    def tabulate(
        self,
        particle: ParticleLike,
        mass_step: float = 0.02,
        spectral_threshold: float = 8e-3,
    ) -> np.ndarray:
        """Table of mass, total width and spectral function.

        Starts at `min_mass_spectral` and stops once the mass is larger than
        twice the largest sum of daughter pole masses and the spectral
        function has dropped below ``spectral_threshold``.

        Returns:
            An array of shape :code:`(n, 3)`.
        """
        particle = self.__particle(particle)
        if particle.is_stable():
            raise ValueError(
                f"Particle {particle.name} is stable, so it makes no sense to"
                " tabulate its spectral function"
            )
        rightmost_pole = max(
            sum(p.mass for p in branch.daughters)
            for branch in self.__database.decay_table(particle)
        )
        m_min = self.min_mass_spectral(particle)
        rows = list()
        i = 0
        while True:
            m = m_min + mass_step * i
            spectral_value = self.spectral_function(particle, m)
            if m > 2 * rightmost_pole and spectral_value < spectral_threshold:
                break
            rows.append((m, self.total_width(particle, m), spectral_value))
            i += 1
        return np.array(rows)

    def warm_up(self, particles: Optional[Iterable[ParticleLike]] = None) -> None:
        """Compute all lazily cached values up-front, for instance before
        starting threads."""
        if particles is None:
            particles = self.__database.catalogue.values()
        for particle in map(self.__particle, particles):
            self.min_mass_kinematic(particle)
            if particle.is_stable():
                continue
            for branch in self.__database.decay_table(particle):
                if branch.decay_type.kind in (
                    DecayTypeKind.TWO_BODY_SEMISTABLE,
                    DecayTypeKind.TWO_BODY_UNSTABLE,
                    DecayTypeKind.THREE_BODY_DILEPTON,
                ):
                    self.__tabulation(branch.decay_type)
            self.spectral_norm(particle)
            self.min_mass_spectral(particle)


def _is_wanted(decay_type: DecayType, which: WhichDecayModes) -> bool:
    if which is WhichDecayModes.ALL:
        return True
    if which is WhichDecayModes.HADRONIC:
        return not decay_type.kind.is_dilepton
    if which is WhichDecayModes.DILEPTONS:
        return decay_type.kind.is_dilepton
    raise NotImplementedError(f"Unknown decay mode selection {which}")
