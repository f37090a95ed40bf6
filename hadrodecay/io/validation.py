"""JSON validation schema for a YAML particle catalogue."""

import json
from os.path import dirname, realpath

import jsonschema

_HADRODECAY_PATH = dirname(dirname(realpath(__file__)))

with open(f"{_HADRODECAY_PATH}/schemas/particle-catalogue.json") as stream:
    _SCHEMA_CATALOGUE = json.load(stream)


def particle_catalogue(instance: dict) -> None:
    jsonschema.validate(instance=instance, schema=_SCHEMA_CATALOGUE)
