"""Default configuration for `hadrodecay`.

The module level constants are the defaults of `SpectralSettings`. A
`.DecayDatabase` can be built with different settings, for instance a coarser
`~SpectralSettings.tabulation_points` in tests.
"""

from enum import Enum, auto

import attr

# Widths below this value are treated as zero, particles with a pole width
# below this value are stable.
WIDTH_CUTOFF = 1e-5
REALLY_SMALL = 1e-6
# Relative deviation of the sum of branching ratios that is reported
LARGE_RENORMALIZATION = 0.01

HBARC = 0.197327053  # GeV fm
INTERACTION_RADIUS = 1.0  # fm

BISECTION_STEP = 0.01  # GeV
BISECTION_PRECISION = 1e-6  # GeV
BISECTION_MAX_STEPS = 100000

# Cut-off parameters of the Manley-Saleski form factor (GeV)
LAMBDA_BARYON = 2.0
LAMBDA_MESON = 1.6
LAMBDA_UNSTABLE = 0.6

TABULATION_RANGE = 10.0  # GeV
TABULATION_POINTS = 200
INTEGRATION_EPSREL = 1e-6


class WhichDecayModes(Enum):
    """Selection of decay branches, see `.SpectralFunctions.partial_widths`."""

    ALL = auto()
    HADRONIC = auto()
    DILEPTONS = auto()


@attr.s(frozen=True)
class SpectralSettings:  # pylint: disable=too-many-instance-attributes
    width_cutoff: float = attr.ib(default=WIDTH_CUTOFF)
    really_small: float = attr.ib(default=REALLY_SMALL)
    large_renormalization: float = attr.ib(default=LARGE_RENORMALIZATION)
    interaction_radius: float = attr.ib(default=INTERACTION_RADIUS)
    bisection_step: float = attr.ib(default=BISECTION_STEP)
    bisection_precision: float = attr.ib(default=BISECTION_PRECISION)
    bisection_max_steps: int = attr.ib(default=BISECTION_MAX_STEPS)
    lambda_baryon: float = attr.ib(default=LAMBDA_BARYON)
    lambda_meson: float = attr.ib(default=LAMBDA_MESON)
    lambda_unstable: float = attr.ib(default=LAMBDA_UNSTABLE)
    tabulation_range: float = attr.ib(default=TABULATION_RANGE)
    tabulation_points: int = attr.ib(default=TABULATION_POINTS)
    integration_epsrel: float = attr.ib(default=INTEGRATION_EPSREL)

    @tabulation_points.validator
    def __check_points(self, _: attr.Attribute, value: int) -> None:  # type: ignore  # pylint: disable=no-self-use
        if value < 2:
            raise ValueError(
                f"Need at least two tabulation points, got {value}"
            )
