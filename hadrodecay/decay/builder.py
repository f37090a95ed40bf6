"""Build the decay tables from decay-mode records.

The records are grouped in sections. Each section starts with a header line
that only contains the name of the mother `.IsospinMultiplet`, followed by
data lines of the form

.. code-block:: text

    ratio  L  daughter1  daughter2  [daughter3]

If all daughters are names of hadronic isospin multiplets, the line is
expanded into all charge states with isospin Clebsch-Gordan weights
(*multiplet mode*). Otherwise, all daughters have to be specific states and
the mode is added to the mother states with matching charge (*explicit
mode*). At the end of a section, the weights of each mother state are
renormalized and the tables are mirrored onto the anti-multiplet.

The tables are only handed out as a `.DecayDatabase` once every section and
every global check has passed.
"""

import logging
from functools import reduce
from itertools import product
from typing import Dict, Iterable, List, Optional, Sequence, Union

import attr

from hadrodecay.default_settings import SpectralSettings
from hadrodecay.particle import (
    IsospinMultiplet,
    Parity,
    Particle,
    ParticleCatalogue,
)
from hadrodecay.quantum_numbers import (
    angular_momentum_bounds,
    isospin_clebsch_gordan_sqr_2to1,
    isospin_clebsch_gordan_sqr_3to1,
)

from .database import DecayDatabase
from .decay_type import DecayTypeRegistry
from .exceptions import (
    InvalidDecay,
    LoadFailure,
    ManleySaleskiViolation,
    MissingDecays,
    Violation,
)
from .table import DecayTable, DecayTableAccumulator

ADDITIVE_QUANTUM_NUMBERS = (
    "baryon_number",
    "strangeness",
    "charmness",
    "electron_lepton_number",
    "muon_lepton_number",
    "tau_lepton_number",
)


@attr.s(frozen=True)
class Line:
    """A non-empty record with its 1-based line number in the source text."""

    number: int = attr.ib()
    text: str = attr.ib()

    def is_header(self) -> bool:
        return len(self.text.split()) == 1


def parse_decay_modes(text: str) -> List[Line]:
    """Split decay-mode text into `Line` records.

    Everything after a :code:`#` is a comment. Empty lines are dropped, but
    still counted, so that `Line.number` refers to the source text.
    """
    lines = list()
    for number, raw_line in enumerate(text.splitlines(), start=1):
        content = raw_line.split("#", 1)[0].strip()
        if content:
            lines.append(Line(number, content))
    return lines


@attr.s
class _Section:
    header: Line = attr.ib()
    multiplet: IsospinMultiplet = attr.ib()
    accumulators: List[DecayTableAccumulator] = attr.ib()

    @property
    def mother_states(self) -> Sequence[Particle]:
        return self.multiplet.states


def _combined_parity(
    parities: Iterable[Optional[Parity]],
) -> Optional[Parity]:
    parity_list = list(parities)
    if any(parity is None for parity in parity_list):
        return None
    return reduce(lambda p1, p2: p1 * p2, parity_list, Parity(+1))


def _format_parity(parity: Optional[Parity]) -> str:
    if parity is None:
        return "?"
    return "+" if parity.value > 0 else "-"


class _DecayTableBuilder:
    def __init__(
        self, catalogue: ParticleCatalogue, settings: SpectralSettings
    ) -> None:
        self.__catalogue = catalogue
        self.__settings = settings
        self.__registry = DecayTypeRegistry()
        self.__tables: Dict[str, DecayTable] = dict()
        self.__section: Optional[_Section] = None
        self.__large_renormalizations = 0

    def build(self, lines: Iterable[Line]) -> DecayDatabase:
        for line in lines:
            if line.is_header():
                self.__start_section(line)
            else:
                self.__process_decay_mode(line)
        self.__finish_section()
        self.__check_all_unstable_have_decays()
        database = DecayDatabase(
            catalogue=self.__catalogue,
            decay_types=list(self.__registry),
            tables=self.__tables,
            settings=self.__settings,
            large_renormalizations=self.__large_renormalizations,
        )
        _check_manley_saleski(database)
        if self.__large_renormalizations > 0:
            logging.warning(
                f"Branching ratios of {self.__large_renormalizations} hadrons"
                " were renormalized by more than 1% to have sum 1."
            )
        return database

    def __start_section(self, line: Line) -> None:
        self.__finish_section()
        name = line.text
        multiplet = self.__catalogue.try_find_multiplet(name)
        if multiplet is None:
            raise LoadFailure(
                f"Unknown isospin multiplet {name}",
                line_number=line.number,
                line=line.text,
            )
        if any(state.name in self.__tables for state in multiplet.states):
            raise LoadFailure(
                f"Duplicate entry for {name}",
                line_number=line.number,
                line=line.text,
            )
        logging.debug(f"Reading decay modes for {name}")
        self.__section = _Section(
            header=line,
            multiplet=multiplet,
            accumulators=[DecayTableAccumulator() for _ in multiplet.states],
        )

    def __process_decay_mode(self, line: Line) -> None:
        section = self.__section
        if section is None:
            raise LoadFailure(
                "Decay mode given before the first multiplet header",
                line_number=line.number,
                line=line.text,
            )
        tokens = line.text.split()
        if len(tokens) < 3:
            raise LoadFailure(
                "Expected a ratio, an angular momentum and daughter names",
                line_number=line.number,
                line=line.text,
            )
        try:
            ratio = float(tokens[0])
            angular_momentum = int(tokens[1])
        except ValueError as exception:
            raise LoadFailure(
                f"Cannot read ratio and angular momentum: {exception}",
                line_number=line.number,
                line=line.text,
            ) from exception
        if ratio < 0.0:
            raise LoadFailure(
                f"Invalid branching ratio {ratio}",
                line_number=line.number,
                line=line.text,
            )
        if angular_momentum < 0:
            raise LoadFailure(
                f"Invalid angular momentum {angular_momentum}",
                line_number=line.number,
                line=line.text,
            )
        daughter_names = tokens[2:]
        multiplets = list()
        for name in daughter_names:
            multiplet = self.__catalogue.try_find_multiplet(name)
            if multiplet is None and name not in self.__catalogue:
                raise LoadFailure(
                    f"Daughter {name} is neither an isospin multiplet nor a"
                    " particle",
                    violation=Violation.MISSING_DAUGHTER,
                    line_number=line.number,
                    line=line.text,
                )
            multiplets.append(multiplet)

        if all(m is not None and m.is_hadronic() for m in multiplets):
            daughter_multiplets: List[IsospinMultiplet] = multiplets  # type: ignore
            representatives = [m.states[0] for m in daughter_multiplets]
            self.__check_daughter_count(section, representatives, line)
            self.__check_additive_quantum_numbers(
                section, representatives, line
            )
            self.__add_multiplet_modes(
                section, daughter_multiplets, ratio, angular_momentum, line
            )
        else:
            daughters = self.__resolve_states(daughter_names, line)
            self.__check_daughter_count(section, daughters, line)
            self.__check_additive_quantum_numbers(section, daughters, line)
            self.__add_explicit_modes(
                section, daughters, ratio, angular_momentum, line
            )
            representatives = daughters
        self.__check_parity(section, representatives, angular_momentum, line)
        self.__check_angular_momentum(
            section, representatives, angular_momentum, line
        )

    def __resolve_states(
        self, daughter_names: Sequence[str], line: Line
    ) -> List[Particle]:
        daughters = list()
        for name in daughter_names:
            try:
                daughters.append(self.__catalogue.find_state(name))
            except KeyError as exception:
                raise LoadFailure(
                    str(exception.args[0]),
                    violation=Violation.MISSING_DAUGHTER,
                    line_number=line.number,
                    line=line.text,
                ) from exception
        return daughters

    def __add_multiplet_modes(  # pylint: disable=too-many-arguments
        self,
        section: _Section,
        daughter_multiplets: Sequence[IsospinMultiplet],
        ratio: float,
        angular_momentum: int,
        line: Line,
    ) -> None:
        if len(daughter_multiplets) == 2:
            compute_cg_sqr = isospin_clebsch_gordan_sqr_2to1
        else:
            compute_cg_sqr = isospin_clebsch_gordan_sqr_3to1  # type: ignore
        forbidden_by_isospin = True
        for mother, accumulator in zip(
            section.mother_states, section.accumulators
        ):
            for daughters in product(*(m.states for m in daughter_multiplets)):
                try:
                    cg_sqr = compute_cg_sqr(*daughters, mother)  # type: ignore
                except ValueError as exception:
                    raise InvalidDecay(
                        str(exception),
                        violation=Violation.ISOSPIN,
                        line_number=line.number,
                        line=line.text,
                    ) from exception
                if cg_sqr <= 0.0:
                    continue
                logging.debug(
                    f"Decay mode generated: {mother.name} ->"
                    f" {' '.join(p.name for p in daughters)}"
                    f" ({ratio * cg_sqr})"
                )
                decay_type = self.__registry.get_or_create(
                    daughters, angular_momentum, mother
                )
                accumulator.add_mode(decay_type, ratio * cg_sqr)
                forbidden_by_isospin = False
        if forbidden_by_isospin:
            daughter_isospins = " ".join(
                str(m.isospin) for m in daughter_multiplets
            )
            raise InvalidDecay(
                f"{section.multiplet.name} decay mode is forbidden by isospin,"
                f" where isospin of the mother: {section.multiplet.isospin},"
                f" daughters: {daughter_isospins}",
                violation=Violation.ISOSPIN,
                line_number=line.number,
                line=line.text,
            )

    def __add_explicit_modes(  # pylint: disable=too-many-arguments
        self,
        section: _Section,
        daughters: Sequence[Particle],
        ratio: float,
        angular_momentum: int,
        line: Line,
    ) -> None:
        charge = sum(p.charge for p in daughters)
        no_decays = True
        for mother, accumulator in zip(
            section.mother_states, section.accumulators
        ):
            if mother.charge != charge:
                continue
            logging.debug(
                f"Decay mode found: {mother.name} ->"
                f" {' '.join(p.name for p in daughters)} ({ratio})"
            )
            decay_type = self.__registry.get_or_create(
                daughters, angular_momentum, mother
            )
            accumulator.add_mode(decay_type, ratio)
            no_decays = False
        if no_decays:
            mother_charges = [p.charge for p in section.mother_states]
            raise InvalidDecay(
                f"{section.multiplet.name} decay mode violates charge"
                f" conservation: total charge {charge} of the daughters"
                f" matches none of the mother charges {mother_charges}",
                violation=Violation.CHARGE,
                line_number=line.number,
                line=line.text,
            )

    @staticmethod
    def __check_daughter_count(
        section: _Section, daughters: Sequence[Particle], line: Line
    ) -> None:
        if len(daughters) not in (2, 3):
            raise InvalidDecay(
                f"{section.multiplet.name} decay mode has an invalid number"
                f" of particles in the final state ({len(daughters)})",
                violation=Violation.DAUGHTER_COUNT,
                line_number=line.number,
                line=line.text,
            )

    @staticmethod
    def __check_additive_quantum_numbers(
        section: _Section, daughters: Sequence[Particle], line: Line
    ) -> None:
        mother = section.mother_states[0]
        for quantum_number in ADDITIVE_QUANTUM_NUMBERS:
            mother_value = getattr(mother, quantum_number)
            daughter_value = sum(getattr(p, quantum_number) for p in daughters)
            if mother_value != daughter_value:
                raise InvalidDecay(
                    f"{section.multiplet.name} decay mode violates"
                    f" {quantum_number.replace('_', ' ')} conservation:"
                    f" {mother_value} != {daughter_value}",
                    violation=Violation.QUANTUM_NUMBER,
                    line_number=line.number,
                    line=line.text,
                )

    @staticmethod
    def __check_parity(
        section: _Section,
        daughters: Sequence[Particle],
        angular_momentum: int,
        line: Line,
    ) -> None:
        # Three-body parities are not checked, because the relative angular
        # momentum of the third daughter is not part of the records.
        if len(daughters) != 2:
            return
        parity = _combined_parity(p.parity for p in daughters)
        mother_parity = section.mother_states[0].parity
        if parity is None or mother_parity is None:
            return
        if angular_momentum % 2 == 1:
            parity = -parity
        if parity != mother_parity:
            raise InvalidDecay(
                f"{section.mother_states[0].name} decay mode violates parity"
                f" conservation: mother {_format_parity(mother_parity)},"
                f" daughters {_format_parity(daughters[0].parity)}"
                f" {_format_parity(daughters[1].parity)},"
                f" L = {angular_momentum}",
                violation=Violation.PARITY,
                line_number=line.number,
                line=line.text,
            )

    @staticmethod
    def __check_angular_momentum(
        section: _Section,
        daughters: Sequence[Particle],
        angular_momentum: int,
        line: Line,
    ) -> None:
        min_l, max_l = angular_momentum_bounds(
            section.multiplet.doubled_spin,
            *(p.doubled_spin for p in daughters),
        )
        if not min_l <= angular_momentum <= max_l:
            raise InvalidDecay(
                f"{section.mother_states[0].name} decay mode violates angular"
                f" momentum conservation: {angular_momentum} not in"
                f" [{min_l}, {max_l}]",
                violation=Violation.ANGULAR_MOMENTUM,
                line_number=line.number,
                line=line.text,
            )

    def __finish_section(self) -> None:
        section = self.__section
        if section is None:
            return
        self.__section = None
        for mother, accumulator in zip(
            section.mother_states, section.accumulators
        ):
            if accumulator.is_empty() and not mother.is_stable():
                raise MissingDecays(
                    f"No decay modes found for particle {mother.name}",
                    line_number=section.header.number,
                    line=section.header.text,
                )
            if not accumulator.is_empty():
                self.__renormalize(section, mother, accumulator)
            self.__tables[mother.name] = accumulator.freeze()
        if section.multiplet.has_anti_multiplet():
            self.__mirror(section)

    def __renormalize(
        self,
        section: _Section,
        mother: Particle,
        accumulator: DecayTableAccumulator,
    ) -> None:
        if accumulator.total_weight <= 0.0:
            raise LoadFailure(
                f"Branching ratios of {mother.name} sum to"
                f" {accumulator.total_weight}",
                line_number=section.header.number,
                line=section.header.text,
            )
        is_large = accumulator.renormalize(
            mother.name,
            self.__settings.large_renormalization,
            self.__settings.really_small,
        )
        self.__large_renormalizations += int(is_large)

    def __mirror(self, section: _Section) -> None:
        logging.debug(
            "Generating decay modes for anti-multiplet"
            f" {section.multiplet.anti_multiplet}"
        )
        for mother in section.mother_states:
            anti_mother = self.__catalogue.antiparticle(mother)
            if anti_mother is None:
                raise LoadFailure(
                    f"Anti-multiplet of {section.multiplet.name} has no"
                    f" antiparticle of {mother.name}",
                    line_number=section.header.number,
                    line=section.header.text,
                )
            if anti_mother.name in self.__tables:
                raise LoadFailure(
                    f"Duplicate entry for {anti_mother.name}, which is"
                    f" already generated from {section.multiplet.name}",
                    line_number=section.header.number,
                    line=section.header.text,
                )
            accumulator = DecayTableAccumulator()
            for branch in self.__tables[mother.name]:
                anti_daughters = [
                    self.__conjugate(daughter) for daughter in branch.daughters
                ]
                decay_type = self.__registry.get_or_create(
                    anti_daughters, branch.angular_momentum, anti_mother
                )
                accumulator.add_mode(decay_type, branch.weight)
            self.__tables[anti_mother.name] = accumulator.freeze()

    def __conjugate(self, particle: Particle) -> Particle:
        antiparticle = self.__catalogue.antiparticle(particle)
        if antiparticle is None:
            return particle
        return antiparticle

    def __check_all_unstable_have_decays(self) -> None:
        for name, particle in self.__catalogue.items():
            if particle.is_stable():
                continue
            table = self.__tables.get(name)
            if table is None or table.is_empty():
                raise MissingDecays(
                    f"No decay modes found for unstable particle {name}"
                )


def _check_manley_saleski(database: DecayDatabase) -> None:
    for particle in database.catalogue.values():
        if particle.is_stable():
            continue
        for branch in database.decay_table(particle):
            threshold = database.threshold(branch.decay_type)
            if particle.mass <= threshold:
                daughters = " ".join(p.name for p in branch.daughters)
                raise ManleySaleskiViolation(
                    "For all decays, the minimum mass of the daughters must"
                    " be smaller than the pole mass of the mother"
                    " (Manley-Saleski ansatz). Violated by"
                    f" {particle.name} -> {daughters} with"
                    f" {particle.mass} <= {threshold}",
                    violation=Violation.MANLEY_SALESKI,
                )


def build_decay_database(
    catalogue: ParticleCatalogue,
    records: Union[str, Iterable[Line]],
    settings: Optional[SpectralSettings] = None,
) -> DecayDatabase:
    """Build all decay tables of a `.ParticleCatalogue`.

    Args:
        catalogue: Frozen particle catalogue with isospin multiplets.
        records: Either the full decay-mode text or the already parsed
            `Line` records (see `parse_decay_modes`).
        settings: Overrides of the `.SpectralSettings` defaults.

    Raises:
        .LoadFailure: for malformed records, duplicate sections or names that
            do not resolve.
        .InvalidDecay: if a decay mode violates a conservation law.
        .MissingDecays: if an unstable particle has no decay modes.
        .ManleySaleskiViolation: if a pole mass is below a decay threshold.
    """
    if isinstance(records, str):
        records = parse_decay_modes(records)
    if settings is None:
        settings = SpectralSettings()
    builder = _DecayTableBuilder(catalogue, settings)
    return builder.build(records)
