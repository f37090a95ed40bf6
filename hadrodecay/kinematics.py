# pylint: disable=invalid-name
"""Kinematic helper functions and lineshapes.

These are the numerical building blocks of the :mod:`.spectral` and
:mod:`.sampling` modules. Masses and momenta are in GeV.
"""

import math
from typing import Callable

import numpy as np

from .default_settings import HBARC, INTERACTION_RADIUS


def breakup_momentum_squared(m_r: float, m_a: float, m_b: float) -> float:
    s = m_r * m_r
    return (s - (m_a + m_b) ** 2) * (s - (m_a - m_b) ** 2) / (4 * s)


def breakup_momentum(m_r: float, m_a: float, m_b: float) -> float:
    """Center-of-mass momentum of a two-body system, zero below threshold."""
    p_squared = breakup_momentum_squared(m_r, m_a, m_b)
    if p_squared <= 0.0:
        return 0.0
    return math.sqrt(p_squared)


def blatt_weisskopf_sqr(
    p_ab: float,
    angular_momentum: int,
    interaction_radius: float = INTERACTION_RADIUS,
) -> float:
    r"""Squared Blatt-Weisskopf barrier factor :math:`B_L^2`, up to :math:`L \leq 4`.

    Args:
        p_ab: Break-up momentum in GeV.
        angular_momentum: Orbital angular momentum :math:`L`.
        interaction_radius: Interaction radius in fm, converted to
            :math:`\mathrm{GeV}^{-1}` with :math:`\hbar c`.
    """
    if angular_momentum == 0:
        return 1.0
    x = p_ab * interaction_radius / HBARC
    x2 = x * x
    x4 = x2 * x2
    if angular_momentum == 1:
        return x2 / (1.0 + x2)
    if angular_momentum == 2:
        return x4 / (9.0 + 3.0 * x2 + x4)
    if angular_momentum == 3:
        return x4 * x2 / (225.0 + 45.0 * x2 + 6.0 * x4 + x4 * x2)
    if angular_momentum == 4:
        return (
            x4
            * x4
            / (11025.0 + 1575.0 * x2 + 135.0 * x4 + 10.0 * x2 * x4 + x4 * x4)
        )
    raise ValueError(
        f"Blatt-Weisskopf factor is only implemented for L <= 4, not {angular_momentum}"
    )


def post_ff_sqr(m: float, m0: float, srts0: float, cutoff: float) -> float:
    r"""Squared Manley-Saleski form factor for unstable decay products.

    .. math::
        F(m) = \frac{\Lambda^4 + (s_0 - M_0^2)^2/4}
        {\Lambda^4 + \left(m^2 - (s_0 + M_0^2)/2\right)^2}

    where :math:`\sqrt{s_0}` is the decay threshold and :math:`M_0` the pole
    mass. The form factor is one at the pole.
    """
    cutoff4 = cutoff ** 4
    m0_sqr = m0 * m0
    s0 = srts0 * srts0
    s_minus = (s0 - m0_sqr) * 0.5
    s_plus = m * m - (s0 + m0_sqr) * 0.5
    form_factor = (cutoff4 + s_minus * s_minus) / (cutoff4 + s_plus * s_plus)
    return form_factor * form_factor


def breit_wigner(m: float, pole: float, width: float) -> float:
    r"""Relativistic Breit-Wigner, normalized in :math:`m` for constant width.

    .. math::
        \mathcal{A}(m) = \frac{2}{\pi}\frac{m^2\Gamma}
        {(m^2 - M^2)^2 + m^2\Gamma^2}
    """
    m_sqr = m * m
    dmass = m_sqr - pole * pole
    return 2.0 * m_sqr * width / (math.pi * (dmass * dmass + m_sqr * width * width))


def cauchy(x: float, pole: float, half_width: float) -> float:
    dm = x - pole
    return half_width / (math.pi * (dm * dm + half_width * half_width))


def breit_wigner_nonrel(m: float, pole: float, width: float) -> float:
    """Non-relativistic Breit-Wigner, a Cauchy distribution with half ``width``."""
    return cauchy(m, pole, width / 2.0)


def sample_cauchy(
    rng: np.random.Generator,
    pole: float,
    half_width: float,
    m_min: float,
    m_max: float,
) -> float:
    """Draw from a Cauchy distribution truncated to :code:`[m_min, m_max]`."""
    x_min = math.atan((m_min - pole) / half_width)
    x_max = math.atan((m_max - pole) / half_width)
    x = rng.uniform(x_min, x_max)
    return pole + half_width * math.tan(x)


class Tabulation:
    """Function values on an equidistant grid, evaluated by linear interpolation.

    Outside of the grid the boundary values are used.
    """

    def __init__(
        self,
        x_min: float,
        x_range: float,
        num_points: int,
        function: Callable[[float], float],
    ) -> None:
        self.__x = np.linspace(x_min, x_min + x_range, num_points)
        self.__y = np.array([function(x) for x in self.__x])

    def __call__(self, x: float) -> float:
        return float(np.interp(x, self.__x, self.__y))

    @property
    def x_min(self) -> float:
        return float(self.__x[0])

    @property
    def x_max(self) -> float:
        return float(self.__x[-1])
