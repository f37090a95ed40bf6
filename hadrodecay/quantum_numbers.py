"""Angular-momentum bounds and isospin Clebsch-Gordan weights.

All functions in this module work with *doubled* spins and isospins, so that
half-integer values are stored as integers (for instance the nucleon has a
doubled spin of :code:`1`). The Clebsch-Gordan coefficients themselves are
computed with :class:`sympy.physics.quantum.cg.CG`.
"""

from functools import lru_cache
from itertools import product
from typing import List, Optional, Tuple

import sympy as sp
from sympy.physics.quantum.cg import CG

from .particle import Particle


def angular_momentum_bounds(*doubled_spins: int) -> Tuple[int, int]:
    r"""Compute the allowed range of orbital angular momentum :math:`L`.

    The first argument is the doubled spin of the mother, the remaining two or
    three arguments are the doubled spins of the daughters. The bounds follow
    from the triangle inequalities, for instance for a two-body decay

    .. math::
        L_\mathrm{min} = \min\left(|s_0-s_1-s_2|, |s_0-s_1+s_2|,
        |s_0+s_1-s_2|\right)/2, \quad L_\mathrm{max} = (s_0+s_1+s_2)/2.

    Raises:
        ValueError: if the spins do not add up to an integer.
    """
    if len(doubled_spins) not in (3, 4):
        raise ValueError(
            "Angular momentum bounds need a mother and two or three"
            f" daughters, got {len(doubled_spins)} spins"
        )
    mother, *daughters = doubled_spins
    min_l = min(
        abs(mother + sum(sign * s for sign, s in zip(signs, daughters)))
        for signs in product([+1, -1], repeat=len(daughters))
    )
    max_l = mother + sum(daughters)
    if min_l % 2 != 0:
        raise ValueError(
            f"Sum of spins {doubled_spins} (doubled) should be integer"
        )
    return min_l // 2, max_l // 2


@lru_cache(maxsize=None)
def clebsch_gordan(  # pylint: disable=too-many-arguments
    j_a: int, j_b: int, j_c: int, m_a: int, m_b: int, m_c: int
) -> float:
    r"""Compute :math:`\langle j_a m_a j_b m_b | j_c m_c \rangle` from doubled values.

    Couplings that violate the projection sum, the triangle inequality or the
    magnitude-projection parity are zero.
    """
    if m_a + m_b != m_c:
        return 0.0
    if j_c < abs(j_a - j_b) or j_c > j_a + j_b or (j_a + j_b + j_c) % 2:
        return 0.0
    for j, m in [(j_a, m_a), (j_b, m_b), (j_c, m_c)]:
        if abs(m) > j or (j - m) % 2:
            return 0.0
    coefficient = CG(
        sp.Rational(j_a, 2),
        sp.Rational(m_a, 2),
        sp.Rational(j_b, 2),
        sp.Rational(m_b, 2),
        sp.Rational(j_c, 2),
        sp.Rational(m_c, 2),
    ).doit()
    return float(coefficient)


def isospin_clebsch_gordan_sqr_2to1(
    daughter1: Particle, daughter2: Particle, mother: Particle
) -> float:
    """Squared isospin Clebsch-Gordan coefficient for coupling two states.

    A value of zero means that the coupling is forbidden by isospin.
    """
    cg_value = clebsch_gordan(
        daughter1.doubled_isospin,
        daughter2.doubled_isospin,
        mother.doubled_isospin,
        daughter1.doubled_isospin_projection,
        daughter2.doubled_isospin_projection,
        mother.doubled_isospin_projection,
    )
    return cg_value * cg_value


def isospin_clebsch_gordan_sqr_3to1(
    daughter1: Particle,
    daughter2: Particle,
    daughter3: Particle,
    mother: Particle,
) -> float:
    """Squared isospin Clebsch-Gordan coefficient for coupling three states.

    The first two daughters are coupled to an intermediate isospin, which is
    then coupled with the third daughter. The intermediate isospin has to be
    determined uniquely by the isospin magnitudes involved.

    Raises:
        ValueError: if more than one (or no) intermediate isospin allows the
            coupling to the mother isospin.
    """
    i_1 = daughter1.doubled_isospin
    i_2 = daughter2.doubled_isospin
    i_3 = daughter3.doubled_isospin
    i_mother = mother.doubled_isospin
    allowed_i_12 = [
        i_12
        for i_12 in range(abs(i_1 - i_2), i_1 + i_2 + 1, 2)
        if abs(i_12 - i_3) <= i_mother <= i_12 + i_3
    ]
    if len(allowed_i_12) != 1:
        raise ValueError(
            "The coupled three-body isospin state is not uniquely defined for"
            f" {mother.name} -> {daughter1.name} {daughter2.name}"
            f" {daughter3.name} (allowed intermediate doubled isospins:"
            f" {allowed_i_12})"
        )
    i_12 = allowed_i_12[0]
    i3_12 = (
        daughter1.doubled_isospin_projection
        + daughter2.doubled_isospin_projection
    )
    cg_value = clebsch_gordan(
        i_1,
        i_2,
        i_12,
        daughter1.doubled_isospin_projection,
        daughter2.doubled_isospin_projection,
        i3_12,
    ) * clebsch_gordan(
        i_12,
        i_3,
        i_mother,
        i3_12,
        daughter3.doubled_isospin_projection,
        mother.doubled_isospin_projection,
    )
    return cg_value * cg_value


def isospin_clebsch_gordan(
    daughter1: Particle,
    daughter2: Particle,
    doubled_total_isospin: int,
    doubled_total_projection: int,
) -> float:
    """Clebsch-Gordan coefficient for coupling two states to a total isospin."""
    return clebsch_gordan(
        daughter1.doubled_isospin,
        daughter2.doubled_isospin,
        doubled_total_isospin,
        daughter1.doubled_isospin_projection,
        daughter2.doubled_isospin_projection,
        doubled_total_projection,
    )


def total_isospin_range(
    p_a: Particle, p_b: Particle, p_c: Particle, p_d: Particle
) -> List[int]:
    """Doubled total isospins that both :math:`ab` and :math:`cd` can couple to.

    The total isospin also has to be large enough for the total projection of
    the initial state.
    """
    i_z = abs(p_a.doubled_isospin_projection + p_b.doubled_isospin_projection)
    i_min = max(
        abs(p_a.doubled_isospin - p_b.doubled_isospin),
        abs(p_c.doubled_isospin - p_d.doubled_isospin),
        i_z,
    )
    i_max = min(
        p_a.doubled_isospin + p_b.doubled_isospin,
        p_c.doubled_isospin + p_d.doubled_isospin,
    )
    # all values need the parity of the initial state coupling
    if (i_min - p_a.doubled_isospin - p_b.doubled_isospin) % 2:
        i_min += 1
    return list(range(i_min, i_max + 1, 2))


def isospin_clebsch_gordan_sqr_2to2(
    p_a: Particle,
    p_b: Particle,
    p_c: Particle,
    p_d: Particle,
    doubled_total_isospin: Optional[int] = None,
) -> float:
    """Isospin factor of a :math:`ab \\to cd` scattering.

    Sums the squared coupling weights over all total isospins in
    `total_isospin_range`, or only over ``doubled_total_isospin`` if given.
    """
    i_z = p_a.doubled_isospin_projection + p_b.doubled_isospin_projection
    if i_z != p_c.doubled_isospin_projection + p_d.doubled_isospin_projection:
        return 0.0
    isospin_factor = 0.0
    for i_tot in total_isospin_range(p_a, p_b, p_c, p_d):
        if doubled_total_isospin is not None and i_tot != doubled_total_isospin:
            continue
        cg_in = isospin_clebsch_gordan(p_a, p_b, i_tot, i_z)
        cg_out = isospin_clebsch_gordan(p_c, p_d, i_tot, i_z)
        isospin_factor += cg_in * cg_in * cg_out * cg_out
    return isospin_factor
