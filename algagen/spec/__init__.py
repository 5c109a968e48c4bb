"""Declaration model and parsing (attribute entries in, structure requests out)."""

from .load import load_declarations, target_from_dict
from .parser import parse_attribute, parse_entries, parse_generics, parse_instantiations
from .schema import Generics, Obligation, StructureRequest, Target, TargetDecl

__all__ = [
    "Generics",
    "Obligation",
    "StructureRequest",
    "Target",
    "TargetDecl",
    "load_declarations",
    "parse_attribute",
    "parse_entries",
    "parse_generics",
    "parse_instantiations",
    "target_from_dict",
]
