# pylint: disable=redefined-outer-name
import logging

import pytest

import hadrodecay as hd
from hadrodecay.decay import DecayDatabase
from hadrodecay.particle import ParticleCatalogue
from hadrodecay.spectral import SpectralFunctions

logging.basicConfig(level=logging.ERROR)


@pytest.fixture(scope="session")
def particle_catalogue() -> ParticleCatalogue:
    return hd.load_default_particles()


@pytest.fixture(scope="session")
def decay_database(particle_catalogue: ParticleCatalogue) -> DecayDatabase:
    return hd.build_decay_database(
        particle_catalogue, hd.load_default_decay_modes()
    )


@pytest.fixture(scope="session")
def spectral(decay_database: DecayDatabase) -> SpectralFunctions:
    return SpectralFunctions(decay_database)
