from .schema import (
    AMES_SCHEMA,
    BUILDING_TYPES,
    CRICKET_SPECIES,
    CRICKETS_SCHEMA,
    DATASET_SCHEMAS,
    NEIGHBORHOODS,
    TWO_CLASS_LEVELS,
    TWO_CLASS_SCHEMA,
)

__all__ = [
    "AMES_SCHEMA",
    "BUILDING_TYPES",
    "CRICKETS_SCHEMA",
    "CRICKET_SPECIES",
    "DATASET_SCHEMAS",
    "NEIGHBORHOODS",
    "TWO_CLASS_LEVELS",
    "TWO_CLASS_SCHEMA",
]
