# pylint: disable=no-self-use
from copy import deepcopy

import pytest
from attr.exceptions import FrozenInstanceError

from hadrodecay.particle import (  # noqa: F401  # pylint: disable=unused-import
    GellmannNishijima,
    IsospinMultiplet,
    Parity,
    Particle,
    ParticleCatalogue,
    Spin,
    antiparticle_name,
    create_anti_multiplet,
    create_antiparticle,
)


class TestGellmannNishijima:
    @staticmethod
    @pytest.mark.parametrize(
        "state",
        [
            Particle(
                name="p1",
                pid=1,
                spin=0.0,
                mass=1,
                charge=1,
                isospin=Spin(1.0, 0.0),
                strangeness=2,
            ),
            Particle(
                name="p1",
                pid=1,
                spin=1.0,
                mass=1,
                charge=1,
                isospin=Spin(1.5, 0.5),
                charmness=1,
            ),
            Particle(
                name="p1",
                pid=1,
                spin=0.5,
                mass=1,
                charge=1,
                isospin=Spin(0.5, 0.5),
                baryon_number=1,
            ),
        ],
    )
    def test_computations(state: Particle):
        assert GellmannNishijima.compute_charge(state) == state.charge
        assert (
            GellmannNishijima.compute_isospin_projection(
                charge=state.charge,
                baryon_number=state.baryon_number,
                strangeness=state.strangeness,
                charmness=state.charmness,
            )
            == state.isospin.projection  # type: ignore
        )

    @staticmethod
    def test_isospin_none():
        state = Particle(
            name="p1", pid=1, mass=1, spin=0.0, charge=1, isospin=None
        )
        assert GellmannNishijima.compute_charge(state) is None


class TestParity:
    @staticmethod
    def test_init_and_eq():
        parity = Parity(+1)
        assert parity == +1
        assert int(parity) == +1

    @staticmethod
    def test_mul():
        pos = Parity(+1)
        neg = Parity(-1)
        assert pos * neg == Parity(-1)
        assert neg * neg == Parity(+1)
        assert neg * -1 == pos

    @staticmethod
    def test_hash():
        neg = Parity(-1)
        pos = Parity(+1)
        assert {pos, neg, deepcopy(pos)} == {neg, pos}

    @pytest.mark.parametrize("value", [-1, +1])
    def test_repr(self, value):
        parity = Parity(value)
        from_repr = eval(repr(parity))  # pylint: disable=eval-used
        assert from_repr == parity

    @staticmethod
    def test_exceptions():
        with pytest.raises(ValueError):
            Parity(1.2)


class TestSpin:
    @staticmethod
    def test_init_and_eq():
        isospin = Spin(1.5, -0.5)
        assert isospin == 1.5
        assert isospin.magnitude == 1.5
        assert isospin.projection == -0.5
        assert -isospin == Spin(1.5, 0.5)

    @pytest.mark.parametrize(
        "magnitude, projection",
        [(0.3, 0.3), (1.0, -2.0), (1.0, 0.5)],
    )
    def test_exceptions(self, magnitude, projection):
        with pytest.raises(ValueError):
            Spin(magnitude, projection)


class TestParticle:
    @staticmethod
    def test_repr(particle_catalogue: ParticleCatalogue):
        for particle in particle_catalogue.values():
            from_repr = eval(repr(particle))  # pylint: disable=eval-used
            assert from_repr == particle

    @pytest.mark.parametrize(
        "name, is_lepton, is_hadron",
        [
            ("p", False, True),
            ("pi0", False, True),
            ("gamma", False, False),
            ("e+", True, False),
            ("mu-", True, False),
        ],
    )
    def test_classification(
        self, name, is_lepton, is_hadron, particle_catalogue
    ):
        particle = particle_catalogue[name]
        assert particle.is_lepton() == is_lepton
        assert particle.is_hadron() == is_hadron

    @pytest.mark.parametrize(
        "name, is_stable",
        [("p", True), ("eta", True), ("Delta++", False), ("omega", False)],
    )
    def test_is_stable(self, name, is_stable, particle_catalogue):
        assert particle_catalogue[name].is_stable() == is_stable

    @staticmethod
    def test_doubled_quantum_numbers(particle_catalogue: ParticleCatalogue):
        delta = particle_catalogue["Delta-"]
        assert delta.doubled_spin == 3
        assert delta.doubled_isospin == 3
        assert delta.doubled_isospin_projection == -3
        electron = particle_catalogue["e-"]
        assert electron.doubled_spin == 1
        assert electron.doubled_isospin == 0
        assert electron.doubled_isospin_projection == 0

    @staticmethod
    def test_exceptions():
        with pytest.raises(FrozenInstanceError):
            test_state = Particle(
                name="MyParticle",
                pid=123,
                mass=1.2,
                width=0.1,
                spin=1,
                charge=0,
                isospin=Spin(1, 0),
            )
            test_state.charge = 1  # type: ignore
        with pytest.raises(ValueError):
            Particle(
                name="Fails Gell-Mann–Nishijima formula",
                pid=666,
                mass=0.0,
                spin=1,
                charge=0,
                parity=Parity(-1),
                isospin=Spin(0.0, 0.0),
                charmness=1,
            )

    @staticmethod
    def test_eq():
        particle = Particle(
            name="MyParticle",
            pid=123,
            mass=1.2,
            spin=1,
            charge=0,
            isospin=Spin(1, 0),
        )
        same_particle = deepcopy(particle)
        assert particle is not same_particle
        assert particle == same_particle
        assert hash(particle) == hash(same_particle)
        different_labels = Particle(
            name="Different name, same QNs",
            pid=753,
            mass=1.2,
            spin=1,
            charge=0,
            isospin=Spin(1, 0),
        )
        assert particle == different_labels
        assert particle.name != different_labels.name

    @staticmethod
    def test_neg(particle_catalogue: ParticleCatalogue):
        proton = particle_catalogue["p"]
        antiproton = -proton
        assert antiproton.name == "p~"
        assert antiproton.pid == -2212
        assert antiproton.baryon_number == -1
        assert antiproton.parity == -1
        assert antiproton == particle_catalogue["p~"]


class TestAntiparticles:
    @pytest.mark.parametrize(
        "name, charge, expected",
        [
            ("Delta++", 2, "Delta~--"),
            ("Delta+", 1, "Delta~-"),
            ("Delta0", 0, "Delta~0"),
            ("N(1440)+", 1, "N(1440)~-"),
            ("K0", 0, "K~0"),
            ("p", 1, "p~"),
            ("Lambda", 0, "Lambda~"),
        ],
    )
    def test_antiparticle_name(self, name, charge, expected):
        assert antiparticle_name(name, charge) == expected

    @staticmethod
    def test_boson_parity_is_kept(particle_catalogue: ParticleCatalogue):
        kaon = particle_catalogue["K+"]
        anti_kaon = create_antiparticle(kaon)
        assert anti_kaon.parity == kaon.parity
        assert anti_kaon.strangeness == -1
        assert anti_kaon.isospin == Spin(0.5, -0.5)

    @staticmethod
    def test_create_anti_multiplet(particle_catalogue: ParticleCatalogue):
        delta = particle_catalogue.find_multiplet("Delta")
        anti_delta = create_anti_multiplet(delta)
        assert anti_delta.name == "Delta~"
        assert anti_delta.anti_multiplet == "Delta"
        assert [p.name for p in anti_delta.states] == [
            "Delta~--",
            "Delta~-",
            "Delta~0",
            "Delta~+",
        ]


class TestIsospinMultiplet:
    @staticmethod
    def test_properties(particle_catalogue: ParticleCatalogue):
        nucleon = particle_catalogue.find_multiplet("N")
        assert nucleon.spin == 0.5
        assert nucleon.doubled_spin == 1
        assert nucleon.isospin == 0.5
        assert nucleon.parity == +1
        assert nucleon.baryon_number == 1
        assert nucleon.strangeness == 0
        assert nucleon.is_hadronic()
        assert nucleon.has_anti_multiplet()
        pion = particle_catalogue.find_multiplet("pi")
        assert not pion.has_anti_multiplet()
        assert not particle_catalogue.find_multiplet("e+").is_hadronic()

    @staticmethod
    def test_no_states():
        with pytest.raises(ValueError):
            IsospinMultiplet(name="empty", states=[])


class TestParticleCatalogue:
    @staticmethod
    def test_find(particle_catalogue: ParticleCatalogue):
        pion = particle_catalogue.find(-211)
        assert pion.name == "pi-"
        assert particle_catalogue.find("pi-") is pion
        assert 211 in particle_catalogue
        assert "pi+" in particle_catalogue
        assert pion in particle_catalogue

    @pytest.mark.parametrize("search_term", [666, "non-existing"])
    def test_find_fail(self, particle_catalogue, search_term):
        with pytest.raises(LookupError):
            particle_catalogue.find(search_term)

    @staticmethod
    def test_filter(particle_catalogue: ParticleCatalogue):
        deltas = particle_catalogue.filter(lambda p: "Delta" in p.name)
        assert len(deltas) == 8
        strange_baryons = particle_catalogue.filter(
            lambda p: p.strangeness != 0 and p.baryon_number != 0
        )
        assert {p.name for p in strange_baryons} == {"Lambda", "Lambda~"}

    @staticmethod
    def test_find_state(particle_catalogue: ParticleCatalogue):
        assert particle_catalogue.find_state("omega").pid == 223
        assert particle_catalogue.find_state("pi0").pid == 111
        with pytest.raises(KeyError):
            particle_catalogue.find_state("pi")
        with pytest.raises(KeyError):
            particle_catalogue.find_state("non-existing")

    @staticmethod
    def test_multiplets(particle_catalogue: ParticleCatalogue):
        assert particle_catalogue.multiplet_of("Delta0").name == "Delta"
        assert particle_catalogue.try_find_multiplet("Delta0") is None
        assert particle_catalogue.find_multiplet("K~").anti_multiplet == "K"
        with pytest.raises(KeyError):
            particle_catalogue.find_multiplet("non-existing")

    @staticmethod
    def test_antiparticle(particle_catalogue: ParticleCatalogue):
        pi_plus = particle_catalogue["pi+"]
        assert particle_catalogue.antiparticle(pi_plus).name == "pi-"
        assert particle_catalogue.antiparticle(particle_catalogue["n"]).name == "n~"
        assert particle_catalogue.antiparticle(particle_catalogue["pi0"]) is None

    @staticmethod
    def test_duplicates():
        particle = Particle(name="a", pid=123, mass=1.0, spin=0)
        other = Particle(name="b", pid=123, mass=1.0, spin=0)
        with pytest.raises(KeyError):
            ParticleCatalogue(
                [
                    IsospinMultiplet("a", [particle]),
                    IsospinMultiplet("b", [other]),
                ]
            )
        with pytest.raises(KeyError):
            ParticleCatalogue(
                [IsospinMultiplet("a", [particle], anti_multiplet="a~")]
            )
