# pylint: disable=no-self-use, redefined-outer-name
from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest
from scipy.stats import kstest

from hadrodecay._cache import LazyValues
from hadrodecay.kinematics import breakup_momentum
from hadrodecay.sampling import ResonanceMassSampler, SamplerEnvelope


@pytest.fixture
def sampler(spectral) -> ResonanceMassSampler:
    return ResonanceMassSampler(spectral, seed=42)


def _expected_cdf(spectral, name, cms_energy, mass_stable):
    m_min = spectral.min_mass_spectral(name)
    m_max = cms_energy - mass_stable
    masses = np.linspace(m_min, m_max, 4001)
    density = np.array(
        [
            spectral.spectral_function(name, m)
            * breakup_momentum(cms_energy, mass_stable, m)
            for m in masses
        ]
    )
    cumulative = np.concatenate(
        [[0.0], np.cumsum(0.5 * (density[1:] + density[:-1]) * np.diff(masses))]
    )
    cumulative /= cumulative[-1]
    return lambda m: np.interp(m, masses, cumulative)


class TestSamplerEnvelope:
    @staticmethod
    def test_factors_only_increase():
        envelope = SamplerEnvelope()
        assert envelope.single_factor == 1.0
        assert envelope.pair_factor == 1.0
        envelope.increase_single_factor(1.5)
        envelope.increase_single_factor(1.2)
        envelope.increase_pair_factor(3.0)
        assert envelope.single_factor == 1.5
        assert envelope.pair_factor == 3.0
        assert repr(envelope) == "SamplerEnvelope(single=1.5, pair=3.0)"


class TestSampleMass:
    @staticmethod
    def test_distribution(spectral, sampler):
        cms_energy = 5.0
        mass_stable = 0.938
        samples = [
            sampler.sample_mass("Delta++", cms_energy, 0, mass_stable)
            for _ in range(1000)
        ]
        cdf = _expected_cdf(spectral, "Delta++", cms_energy, mass_stable)
        _, p_value = kstest(samples, cdf)
        assert p_value > 0.01

    @staticmethod
    def test_range(spectral, sampler):
        min_mass = spectral.min_mass_spectral("rho0")
        cms_energy = 1.2
        mass_stable = 0.138
        for _ in range(200):
            mass = sampler.sample_mass("rho0", cms_energy, 1, mass_stable)
            assert min_mass <= mass <= cms_energy - mass_stable

    @staticmethod
    def test_particle_instance(spectral, sampler):
        delta = spectral.database.catalogue["Delta0"]
        mass = sampler.sample_mass(delta, 2.0, 1, 0.138)
        assert spectral.min_mass_spectral(delta) <= mass <= 2.0 - 0.138

    @staticmethod
    def test_insufficient_energy(sampler):
        with pytest.raises(ValueError):
            sampler.sample_mass("Delta++", 1.5, 0, 0.938)

    @staticmethod
    def test_stable(sampler):
        with pytest.raises(ValueError):
            sampler.sample_mass("p", 5.0)

    @staticmethod
    def test_seed(spectral):
        def sample(seed):
            sampler = ResonanceMassSampler(spectral, seed=seed)
            return [sampler.sample_mass("rho+", 2.0, 1, 0.138) for _ in range(20)]

        assert sample(7) == sample(7)
        assert sample(7) != sample(8)
        generator = np.random.default_rng(7)
        sampler = ResonanceMassSampler(spectral, seed=generator)
        assert [
            sampler.sample_mass("rho+", 2.0, 1, 0.138) for _ in range(20)
        ] == sample(7)


class TestSampleMassPair:
    @staticmethod
    def test_range(spectral, sampler):
        min_mass_1 = spectral.min_mass_spectral("Delta++")
        min_mass_2 = spectral.min_mass_spectral("rho-")
        cms_energy = 3.0
        for _ in range(100):
            mass_1, mass_2 = sampler.sample_mass_pair(
                "Delta++", "rho-", cms_energy, 1
            )
            assert mass_1 >= min_mass_1
            assert mass_2 >= min_mass_2
            assert mass_1 + mass_2 <= cms_energy

    @staticmethod
    def test_insufficient_energy(sampler):
        with pytest.raises(ValueError):
            sampler.sample_mass_pair("Delta++", "Delta0", 2.0)

    @staticmethod
    def test_stable(sampler):
        with pytest.raises(ValueError):
            sampler.sample_mass_pair("Delta++", "pi0", 3.0)


class TestEnvelopes:
    @staticmethod
    def test_per_species(sampler):
        delta = sampler.envelope("Delta++")
        assert sampler.envelope("Delta++") is delta
        assert sampler.envelope("Delta+") is not delta
        assert "Delta++" in sampler.envelopes

    @staticmethod
    def test_shared_between_threads(spectral):
        envelopes: LazyValues = LazyValues()
        samplers = [
            ResonanceMassSampler(spectral, seed=seed, envelopes=envelopes)
            for seed in range(4)
        ]

        def run(sampler):
            return [
                sampler.sample_mass("Delta++", 3.0, 1, 0.938)
                for _ in range(50)
            ]

        with ThreadPoolExecutor(max_workers=4) as executor:
            results = list(executor.map(run, samplers))
        assert all(len(masses) == 50 for masses in results)
        assert samplers[0].envelope("Delta++") is samplers[3].envelope(
            "Delta++"
        )
        assert samplers[0].envelope("Delta++").single_factor >= 1.0
