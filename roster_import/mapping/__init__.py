from .aliases import AUTO_MAPPINGS, PARTIAL_MATCHERS
from .catalog import FieldInfo, available_fields
from .field_mapper import apply_field_mappings, auto_map_record, map_fields, map_record

__all__ = [
    "AUTO_MAPPINGS",
    "PARTIAL_MATCHERS",
    "FieldInfo",
    "available_fields",
    "apply_field_mappings",
    "auto_map_record",
    "map_fields",
    "map_record",
]
