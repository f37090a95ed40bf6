"""Build a `.ParticleCatalogue` from a `dict` definition."""

from typing import Iterator, List

from hadrodecay.particle import (
    GellmannNishijima,
    IsospinMultiplet,
    Particle,
    ParticleCatalogue,
    Spin,
    charge_suffix,
    create_anti_multiplet,
)

from . import validation

_ADDITIVE_FIELDS = [
    "strangeness",
    "charmness",
    "baryon_number",
    "electron_lepton_number",
    "muon_lepton_number",
    "tau_lepton_number",
]


def build_particle_catalogue(
    definition: dict, do_validate: bool = True
) -> ParticleCatalogue:
    if do_validate:
        validation.particle_catalogue(definition)
    return ParticleCatalogue(__iter_multiplets(definition["multiplets"]))


def __iter_multiplets(definitions: List[dict]) -> Iterator[IsospinMultiplet]:
    for definition in definitions:
        name = definition["name"]
        has_antiparticles = definition.get("antiparticles", False)
        multiplet = IsospinMultiplet(
            name=name,
            states=[
                __build_state(definition, state_def)
                for state_def in definition["states"]
            ],
            anti_multiplet=f"{name}~" if has_antiparticles else None,
        )
        yield multiplet
        if has_antiparticles:
            yield create_anti_multiplet(multiplet)


def __build_state(multiplet_def: dict, state_def: dict) -> Particle:
    charge = state_def["charge"]
    name = state_def.get("name")
    if name is None:
        name = multiplet_def["name"]
        if len(multiplet_def["states"]) > 1:
            name += charge_suffix(charge)
    quantum_numbers = {
        field: multiplet_def.get(field, 0) for field in _ADDITIVE_FIELDS
    }
    isospin = None
    if "isospin" in multiplet_def:
        isospin = Spin(
            multiplet_def["isospin"],
            GellmannNishijima.compute_isospin_projection(
                charge=charge,
                baryon_number=quantum_numbers["baryon_number"],
                strangeness=quantum_numbers["strangeness"],
                charmness=quantum_numbers["charmness"],
            ),
        )
    return Particle(
        name=name,
        pid=state_def["pid"],
        spin=multiplet_def["spin"],
        mass=state_def.get("mass", multiplet_def["mass"]),
        width=multiplet_def.get("width", 0.0),
        charge=charge,
        isospin=isospin,
        parity=multiplet_def.get("parity"),
        **quantum_numbers,
    )
