"""A collection of particle info containers.

The `~hadrodecay.particle` module describes the particle species that the
decay tables are built for. Its main interface is the `ParticleCatalogue`,
which is a frozen collection of immutable `Particle` instances grouped into
`IsospinMultiplet` s. The catalogue is created once (see
:func:`.io.load_particle_catalogue`) and is only read afterwards by the
:mod:`.decay` module.
"""

import logging
import re
from collections import abc
from typing import (
    Callable,
    Dict,
    Iterable,
    Iterator,
    List,
    Optional,
    Sequence,
    Set,
    Tuple,
    Union,
)

import attr

from .default_settings import WIDTH_CUTOFF


class Parity(abc.Hashable):
    """Safe, immutable data container for parity."""

    def __init__(self, value: Union[float, int, str]) -> None:
        value = float(value)
        if value not in [-1.0, +1.0]:
            raise ValueError(f"Parity can only be +1 or -1, not {value}")
        self.__value: int = int(value)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Parity):
            return self.__value == other.value
        return self.__value == other

    def __int__(self) -> int:
        return self.value

    def __mul__(self, other: Union["Parity", int]) -> "Parity":
        return Parity(self.value * int(other))

    def __neg__(self) -> "Parity":
        return Parity(-self.value)

    def __hash__(self) -> int:
        return self.__value

    def __repr__(self) -> str:
        return (
            f'{self.__class__.__name__}({"+1" if self.__value > 0 else "-1"})'
        )

    @property
    def value(self) -> int:
        return self.__value


class Spin(abc.Hashable):
    """Safe, immutable data container for spin **with projection**."""

    def __init__(self, magnitude: float, projection: float) -> None:
        magnitude = float(magnitude)
        projection = float(projection)
        if magnitude % 0.5 != 0.0:
            raise ValueError(
                f"Spin magnitude {magnitude} has to be a multitude of 0.5"
            )
        if abs(projection) > magnitude:
            if magnitude < 0.0:
                raise ValueError(
                    "Spin magnitude has to be positive:\n" f" {magnitude}"
                )
            raise ValueError(
                "Absolute value of spin projection cannot be larger than its "
                "magnitude:\n"
                f" abs({projection}) > {magnitude}"
            )
        if not (projection - magnitude).is_integer():
            raise ValueError(
                f"{self.__class__.__name__}{(magnitude, projection)}: "
                "(projection - magnitude) should be integer! "
            )
        if projection == -0.0:
            projection = 0.0
        self.__magnitude = magnitude
        self.__projection = projection

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Spin):
            return (
                self.__magnitude == other.magnitude
                and self.__projection == other.projection
            )
        return self.__magnitude == other

    def __neg__(self) -> "Spin":
        return Spin(self.magnitude, -self.projection)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}{(self.__magnitude, self.__projection)}"
        )

    @property
    def magnitude(self) -> float:
        return self.__magnitude

    @property
    def projection(self) -> float:
        return self.__projection

    def __hash__(self) -> int:
        return hash(repr(self))


def _to_parity(value: Union[Parity, float, int, str, None]) -> Optional[Parity]:
    if value is None or isinstance(value, Parity):
        return value
    return Parity(value)


@attr.s(frozen=True, repr=False)
class Particle:  # pylint: disable=too-many-instance-attributes
    """Immutable container of data defining one particle species.

    A `Particle` is a single charge state, for instance the :math:`\\Delta^{++}`.
    States that only differ in their isospin projection are grouped in an
    `IsospinMultiplet`.

    The `~Particle.name` and `~Particle.pid` are labels that are not taken into
    account when checking if two `Particle` instances are equal. Code that
    needs species *identity* (like the decay tables) should key on
    `~Particle.name`, which is unique within a `ParticleCatalogue`.
    """

    name: str = attr.ib(eq=False)
    pid: int = attr.ib(eq=False)
    spin: float = attr.ib(converter=float)
    mass: float = attr.ib(converter=float)
    width: float = attr.ib(default=0.0, converter=float)
    charge: int = attr.ib(default=0)
    isospin: Optional[Spin] = attr.ib(default=None)
    strangeness: int = attr.ib(default=0)
    charmness: int = attr.ib(default=0)
    baryon_number: int = attr.ib(default=0)
    electron_lepton_number: int = attr.ib(default=0)
    muon_lepton_number: int = attr.ib(default=0)
    tau_lepton_number: int = attr.ib(default=0)
    parity: Optional[Parity] = attr.ib(default=None, converter=_to_parity)

    @isospin.validator
    def __check_gellmann_nishijima(self, attribute, value) -> None:  # type: ignore  # pylint: disable=unused-argument
        if (
            self.isospin is not None
            and GellmannNishijima.compute_charge(self) != self.charge
        ):
            raise ValueError(
                f"Cannot construct particle {self.name}, because its quantum"
                " numbers don't agree with the Gell-Mann–Nishijima formula:\n"
                f"  Q[{self.charge}] != "
                f"Iz[{self.isospin.projection}] + 1/2 "
                f"(B[{self.baryon_number}] + "
                f" S[{self.strangeness}] + "
                f" C[{self.charmness}]"
                ")"
            )

    def __neg__(self) -> "Particle":
        return create_antiparticle(self)

    def __repr__(self) -> str:
        output_string = f"{self.__class__.__name__}("
        for member in attr.fields(Particle):
            value = getattr(self, member.name)
            if value is None:
                continue
            if member.name not in ["mass", "spin", "isospin"] and value == 0:
                continue
            if isinstance(value, str):
                value = f'"{value}"'
            output_string += f"\n    {member.name}={value},"
        output_string += "\n)"
        return output_string

    def is_lepton(self) -> bool:
        return (
            self.electron_lepton_number != 0
            or self.muon_lepton_number != 0
            or self.tau_lepton_number != 0
        )

    def is_hadron(self) -> bool:
        return abs(self.pid) > 100 and not self.is_lepton()

    def is_stable(self) -> bool:
        return self.width < WIDTH_CUTOFF

    @property
    def doubled_spin(self) -> int:
        return int(round(2 * self.spin))

    @property
    def doubled_isospin(self) -> int:
        if self.isospin is None or not self.is_hadron():
            return 0
        return int(round(2 * self.isospin.magnitude))

    @property
    def doubled_isospin_projection(self) -> int:
        if self.isospin is None or not self.is_hadron():
            return 0
        return int(round(2 * self.isospin.projection))


class GellmannNishijima:
    r"""Collection of conversion methods using Gell-Mann–Nishijima.

    The methods in this class use the `Gell-Mann–Nishijima formula
    <https://en.wikipedia.org/wiki/Gell-Mann%E2%80%93Nishijima_formula>`_:

    .. math::
        Q = I_3 + \frac{1}{2}(B+S+C)

    where
    :math:`Q` is charge (computed),
    :math:`I_3` is `.Spin.projection` of `~.Particle.isospin`,
    :math:`B` is `~.Particle.baryon_number`,
    :math:`S` is `~.Particle.strangeness`, and
    :math:`C` is `~.Particle.charmness`.
    """

    @staticmethod
    def compute_charge(state: Particle) -> Optional[float]:
        """Compute charge using the Gell-Mann–Nishijima formula.

        If isospin is not `None`, returns the value :math:`Q`: computed with
        the `Gell-Mann–Nishijima formula <.GellmannNishijima>`.
        """
        if state.isospin is None:
            return None
        computed_charge = state.isospin.projection + 0.5 * (
            state.baryon_number + state.strangeness + state.charmness
        )
        return computed_charge

    @staticmethod
    def compute_isospin_projection(
        charge: float,
        baryon_number: float,
        strangeness: float,
        charmness: float,
    ) -> float:
        """Compute isospin projection using the Gell-Mann–Nishijima formula.

        See `~.GellmannNishijima.compute_charge`, but then computed for
        :math:`I_3`.
        """
        return charge - 0.5 * (baryon_number + strangeness + charmness)


@attr.s(frozen=True)
class IsospinMultiplet:
    """Group of `Particle` states that only differ by isospin projection.

    The common properties (spin, parity, isospin magnitude, baryon number,
    strangeness) are taken from the first state.
    """

    name: str = attr.ib()
    states: Tuple[Particle, ...] = attr.ib(converter=tuple)
    anti_multiplet: Optional[str] = attr.ib(default=None)

    @states.validator
    def __check_states(self, _: attr.Attribute, value: Tuple[Particle, ...]) -> None:  # type: ignore  # pylint: disable=no-self-use
        if not value:
            raise ValueError(f"Multiplet {self.name} has no states")

    @property
    def spin(self) -> float:
        return self.states[0].spin

    @property
    def doubled_spin(self) -> int:
        return self.states[0].doubled_spin

    @property
    def parity(self) -> Optional[Parity]:
        return self.states[0].parity

    @property
    def isospin(self) -> float:
        return self.states[0].doubled_isospin / 2

    @property
    def baryon_number(self) -> int:
        return self.states[0].baryon_number

    @property
    def strangeness(self) -> int:
        return self.states[0].strangeness

    def is_hadronic(self) -> bool:
        return self.states[0].is_hadron()

    def has_anti_multiplet(self) -> bool:
        return (
            self.anti_multiplet is not None
            and self.anti_multiplet != self.name
        )


class ParticleCatalogue(abc.Mapping):
    """Searchable, frozen collection of `Particle` and `IsospinMultiplet`.

    Iterating over the catalogue yields the particle names in insertion
    order, which is the order in which the decay tables are checked.
    """

    def __init__(self, multiplets: Iterable[IsospinMultiplet]) -> None:
        self.__particles: Dict[str, Particle] = dict()
        self.__pid_to_name: Dict[int, str] = dict()
        self.__multiplets: Dict[str, IsospinMultiplet] = dict()
        self.__multiplet_of: Dict[str, str] = dict()
        for multiplet in multiplets:
            self.__add_multiplet(multiplet)
        for multiplet in self.__multiplets.values():
            anti_name = multiplet.anti_multiplet
            if anti_name is not None and anti_name not in self.__multiplets:
                raise KeyError(
                    f"Multiplet {multiplet.name} refers to an unknown"
                    f" anti-multiplet {anti_name}"
                )

    def __add_multiplet(self, multiplet: IsospinMultiplet) -> None:
        if multiplet.name in self.__multiplets:
            raise KeyError(f"Duplicate multiplet {multiplet.name}")
        for particle in multiplet.states:
            if particle.name in self.__particles:
                raise KeyError(f"Duplicate particle name {particle.name}")
            if particle.pid in self.__pid_to_name:
                raise KeyError(
                    f"Duplicate PID {particle.pid}: {particle.name} and"
                    f" {self.__pid_to_name[particle.pid]}"
                )
            self.__particles[particle.name] = particle
            self.__pid_to_name[particle.pid] = particle.name
            self.__multiplet_of[particle.name] = multiplet.name
        self.__multiplets[multiplet.name] = multiplet
        logging.debug(
            f"Registered multiplet {multiplet.name}:"
            f" {[p.name for p in multiplet.states]}"
        )

    def __contains__(self, instance: object) -> bool:
        if isinstance(instance, str):
            return instance in self.__particles
        if isinstance(instance, Particle):
            return self.__particles.get(instance.name) == instance
        if isinstance(instance, int):
            return instance in self.__pid_to_name
        raise NotImplementedError(
            f"Cannot search for type {instance.__class__.__name__}"
        )

    def __getitem__(self, particle_name: str) -> Particle:
        if particle_name in self.__particles:
            return self.__particles[particle_name]
        error_message = (
            f'No particle with name "{particle_name}" in the catalogue'
        )
        candidates = [
            name for name in self.__particles if particle_name in name
        ]
        if candidates:
            raise KeyError(
                error_message,
                "Did you mean one of these?",
                candidates,
            )
        raise KeyError(error_message)

    def __iter__(self) -> Iterator[str]:
        return self.__particles.__iter__()

    def __len__(self) -> int:
        return len(self.__particles)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({list(self.__multiplets)})"

    def find(self, search_term: Union[int, str]) -> Particle:
        """Search for a particle by either name (`str`) or PID (`int`)."""
        if isinstance(search_term, str):
            return self.__getitem__(search_term)
        if isinstance(search_term, int):
            if search_term not in self.__pid_to_name:
                raise KeyError(f"No particle with PID {search_term}")
            return self.__getitem__(self.__pid_to_name[search_term])
        raise NotImplementedError(
            f"Cannot search for a search term of type {type(search_term)}"
        )

    def filter(  # noqa: A003
        self, function: Callable[[Particle], bool]
    ) -> List[Particle]:
        """Search by `Particle` properties using a :code:`lambda` function."""
        return [p for p in self.__particles.values() if function(p)]

    def find_state(self, name: str) -> Particle:
        """Resolve a name to exactly one charge state.

        The name is either a state name or the name of a multiplet that
        consists of a single state.
        """
        if name in self.__particles:
            return self.__particles[name]
        multiplet = self.__multiplets.get(name)
        if multiplet is not None and len(multiplet.states) == 1:
            return multiplet.states[0]
        raise KeyError(f'"{name}" does not refer to a unique particle state')

    def find_multiplet(self, name: str) -> IsospinMultiplet:
        if name not in self.__multiplets:
            raise KeyError(f'No isospin multiplet with name "{name}"')
        return self.__multiplets[name]

    def try_find_multiplet(self, name: str) -> Optional[IsospinMultiplet]:
        return self.__multiplets.get(name)

    def multiplet_of(self, particle: Union[Particle, str]) -> IsospinMultiplet:
        name = particle if isinstance(particle, str) else particle.name
        return self.__multiplets[self.__multiplet_of[name]]

    def antiparticle(self, particle: Particle) -> Optional[Particle]:
        """Return the species with the opposite PDG code, if any."""
        anti_name = self.__pid_to_name.get(-particle.pid)
        if anti_name is None:
            return None
        return self.__particles[anti_name]

    @property
    def multiplets(self) -> Sequence[IsospinMultiplet]:
        return tuple(self.__multiplets.values())

    @property
    def names(self) -> Set[str]:
        return set(self.__particles)


_CHARGE_SUFFIXES = {2: "++", 1: "+", 0: "0", -1: "-", -2: "--"}
_CHARGE_SUFFIX_PATTERN = re.compile(r"(\+\+|--|\+|-|0)$")


def charge_suffix(charge: int) -> str:
    if charge not in _CHARGE_SUFFIXES:
        raise ValueError(f"Invalid charge {charge}")
    return _CHARGE_SUFFIXES[charge]


def antiparticle_name(name: str, charge: int) -> str:
    """Construct an antiparticle name, like :code:`Delta~--` for ``Delta++``."""
    match = _CHARGE_SUFFIX_PATTERN.search(name)
    if match is None or name == match.group():
        return f"{name}~"
    base_name = name[: match.start()]
    return f"{base_name}~{charge_suffix(-charge)}"


def create_antiparticle(
    template_particle: Particle, new_name: Optional[str] = None
) -> Particle:
    isospin: Optional[Spin] = None
    if template_particle.isospin:
        isospin = -template_particle.isospin
    parity: Optional[Parity] = None
    if template_particle.parity is not None:
        if template_particle.spin.is_integer():
            parity = template_particle.parity
        else:
            parity = -template_particle.parity
    return Particle(
        name=new_name
        if new_name
        else antiparticle_name(template_particle.name, template_particle.charge),
        pid=-template_particle.pid,
        mass=template_particle.mass,
        width=template_particle.width,
        charge=-template_particle.charge,
        spin=template_particle.spin,
        isospin=isospin,
        strangeness=-template_particle.strangeness,
        charmness=-template_particle.charmness,
        baryon_number=-template_particle.baryon_number,
        electron_lepton_number=-template_particle.electron_lepton_number,
        muon_lepton_number=-template_particle.muon_lepton_number,
        tau_lepton_number=-template_particle.tau_lepton_number,
        parity=parity,
    )


def create_anti_multiplet(multiplet: IsospinMultiplet) -> IsospinMultiplet:
    """Mirror a multiplet with `create_antiparticle` and link both ways."""
    return IsospinMultiplet(
        name=f"{multiplet.name}~",
        states=[create_antiparticle(state) for state in multiplet.states],
        anti_multiplet=multiplet.name,
    )
