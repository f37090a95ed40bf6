# pylint: disable=no-self-use
import pytest

from hadrodecay.decay import DecayTypeKind, InvalidDecay, Violation
from hadrodecay.decay.decay_type import (
    DecayTypeRegistry,
    classify,
    has_lepton_pair,
    is_dilepton,
)


@pytest.mark.parametrize(
    "pid1, pid2, expected",
    [
        (11, -11, True),
        (-13, 13, True),
        (11, -13, False),
        (11, 11, False),
        (211, -211, False),
    ],
)
def test_is_dilepton(pid1, pid2, expected):
    assert is_dilepton(pid1, pid2) is expected


@pytest.mark.parametrize(
    "pids, expected",
    [
        ((111, 11, -11), True),
        ((-13, 111, 13), True),
        ((211, -211, 111), False),
        ((11, 111, -13), False),
    ],
)
def test_has_lepton_pair(pids, expected):
    assert has_lepton_pair(*pids) is expected


class TestClassify:
    @pytest.mark.parametrize(
        "daughters, expected",
        [
            (("p", "pi0"), DecayTypeKind.TWO_BODY_STABLE),
            (("pi0", "gamma"), DecayTypeKind.TWO_BODY_STABLE),
            (("Delta++", "pi-"), DecayTypeKind.TWO_BODY_SEMISTABLE),
            (("pi+", "rho0"), DecayTypeKind.TWO_BODY_SEMISTABLE),
            (("rho+", "rho-"), DecayTypeKind.TWO_BODY_UNSTABLE),
            (("e+", "e-"), DecayTypeKind.TWO_BODY_DILEPTON),
            (("mu-", "mu+"), DecayTypeKind.TWO_BODY_DILEPTON),
            (("pi+", "pi-", "pi0"), DecayTypeKind.THREE_BODY),
            (("pi0", "e+", "e-"), DecayTypeKind.THREE_BODY_DILEPTON),
        ],
    )
    def test_kinds(self, particle_catalogue, daughters, expected):
        particles = [particle_catalogue[name] for name in daughters]
        kind = classify(particles)
        assert kind is expected
        assert kind.is_dilepton == (
            expected
            in (
                DecayTypeKind.TWO_BODY_DILEPTON,
                DecayTypeKind.THREE_BODY_DILEPTON,
            )
        )

    @pytest.mark.parametrize(
        "daughters", [("pi0",), ("pi+", "pi-", "pi+", "pi-")]
    )
    def test_daughter_count(self, particle_catalogue, daughters):
        particles = [particle_catalogue[name] for name in daughters]
        with pytest.raises(InvalidDecay) as exception:
            classify(particles)
        assert exception.value.violation is Violation.DAUGHTER_COUNT


class TestDecayTypeRegistry:
    @staticmethod
    def test_identity(particle_catalogue):
        registry = DecayTypeRegistry()
        pi_plus = particle_catalogue["pi+"]
        pi_minus = particle_catalogue["pi-"]
        decay_type = registry.get_or_create([pi_plus, pi_minus], 1)
        assert registry.get_or_create([pi_minus, pi_plus], 1) is decay_type
        assert registry.get_or_create([pi_plus, pi_minus], 0) is not decay_type
        assert len(registry) == 2
        assert list(registry)[0] is decay_type
        assert decay_type.daughter_names == ("pi+", "pi-")
        assert decay_type.has_daughters([pi_minus, pi_plus])
        assert not decay_type.has_daughters([pi_plus, pi_plus])
        assert decay_type.mother is None

    @staticmethod
    def test_semistable_order(particle_catalogue):
        registry = DecayTypeRegistry()
        decay_type = registry.get_or_create(
            [particle_catalogue["Delta++"], particle_catalogue["pi-"]], 1
        )
        assert decay_type.kind is DecayTypeKind.TWO_BODY_SEMISTABLE
        assert decay_type.daughter_names == ("pi-", "Delta++")

    @staticmethod
    def test_dalitz_mother(particle_catalogue):
        registry = DecayTypeRegistry()
        daughters = [
            particle_catalogue[name] for name in ["pi0", "e+", "e-"]
        ]
        omega = particle_catalogue["omega"]
        decay_type = registry.get_or_create(daughters, 1, omega)
        assert decay_type.kind is DecayTypeKind.THREE_BODY_DILEPTON
        assert decay_type.mother is omega
        other_mother = registry.get_or_create(
            daughters, 1, particle_catalogue["rho0"]
        )
        assert other_mother is not decay_type
        with pytest.raises(ValueError):
            registry.get_or_create(daughters, 1)

    @staticmethod
    def test_mother_is_ignored(particle_catalogue):
        registry = DecayTypeRegistry()
        daughters = [particle_catalogue["pi+"], particle_catalogue["pi-"]]
        from_rho = registry.get_or_create(
            daughters, 1, particle_catalogue["rho0"]
        )
        from_omega = registry.get_or_create(
            daughters, 1, particle_catalogue["omega"]
        )
        assert from_rho is from_omega
        assert from_rho.mother is None

    @staticmethod
    def test_repr(particle_catalogue):
        registry = DecayTypeRegistry()
        decay_type = registry.get_or_create(
            [particle_catalogue["p"], particle_catalogue["pi0"]], 1
        )
        assert repr(decay_type) == "DecayType(TWO_BODY_STABLE, [p pi0], L=1)"
