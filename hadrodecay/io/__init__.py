"""Read particle catalogues and decay-mode files.

Particle catalogues are YAML files that are validated with a JSON schema (see
:download:`schemas/particle-catalogue.json
</../hadrodecay/schemas/particle-catalogue.json>`). Decay modes are plain
text, see :mod:`.decay.builder` for the format.
"""

from os.path import dirname, realpath
from pathlib import Path
from typing import List

import yaml

from hadrodecay.decay import Line, parse_decay_modes
from hadrodecay.particle import ParticleCatalogue

from ._build import build_particle_catalogue

_DATA_PATH = f"{dirname(dirname(realpath(__file__)))}/data"
DEFAULT_PARTICLES_PATH = f"{_DATA_PATH}/particles.yml"
DEFAULT_DECAY_MODES_PATH = f"{_DATA_PATH}/decaymodes.txt"


def fromdict(definition: dict) -> ParticleCatalogue:
    keys = set(definition.keys())
    if keys == {"multiplets"}:
        return build_particle_catalogue(definition)
    raise NotImplementedError(f"Could not determine type from keys {keys}")


def load_particle_catalogue(filename: str) -> ParticleCatalogue:
    with open(filename) as stream:
        file_extension = _get_file_extension(filename)
        if file_extension in ["yaml", "yml"]:
            definition = yaml.load(stream, Loader=yaml.SafeLoader)
            return fromdict(definition)
    raise NotImplementedError(
        f'No loader defined for file type "{file_extension}"'
    )


def load_decay_modes(filename: str) -> List[Line]:
    with open(filename) as stream:
        return parse_decay_modes(stream.read())


def load_default_particles() -> ParticleCatalogue:
    """Load the particle catalogue that comes with `hadrodecay`."""
    return load_particle_catalogue(DEFAULT_PARTICLES_PATH)


def load_default_decay_modes() -> List[Line]:
    """Load the decay modes of the default particle catalogue."""
    return load_decay_modes(DEFAULT_DECAY_MODES_PATH)


def _get_file_extension(filename: str) -> str:
    path = Path(filename)
    extension = path.suffix.lower()
    if not extension:
        raise ValueError(f"No file extension in file {filename}")
    extension = extension[1:]
    return extension
