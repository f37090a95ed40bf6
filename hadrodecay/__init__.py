"""Decay tables, spectral functions and resonance masses for hadronic transport.

The `hadrodecay` package consists of three stages:

  `hadrodecay.decay`
    ― builds a `.DecayTable` for every species of a `.ParticleCatalogue` from
    decay-mode records. Isospin multiplets are expanded into charge states
    with Clebsch-Gordan coefficients, conservation laws are checked and the
    tables are mirrored onto the antiparticles. The result is an immutable
    `.DecayDatabase`.

  `hadrodecay.spectral`
    ― evaluates mass-dependent total widths and normalized spectral functions
    on top of a `.DecayDatabase`.

  `hadrodecay.sampling`
    ― samples resonance masses from these spectral functions with an
    adaptive rejection method.

The `.io` module reads particle catalogues and decay-mode files, including
the default ones that come with the package.
"""

__all__ = [
    # Main modules
    "decay",
    "io",
    "sampling",
    "spectral",
    # Facade functions
    "build_decay_database",
    "load_default_decay_modes",
    "load_default_particles",
    "load_default_database",
]

from typing import Optional

from . import decay, io, sampling, spectral
from .default_settings import SpectralSettings

build_decay_database = decay.build_decay_database
"""An alias to `.decay.build_decay_database`."""

load_default_particles = io.load_default_particles
"""An alias to `.io.load_default_particles`."""

load_default_decay_modes = io.load_default_decay_modes
"""An alias to `.io.load_default_decay_modes`."""


def load_default_database(
    settings: Optional[SpectralSettings] = None,
) -> decay.DecayDatabase:
    """Build the decay tables of the default particle catalogue."""
    return build_decay_database(
        load_default_particles(), load_default_decay_modes(), settings
    )
