"""Parsing module for type expressions."""

from typed_models.parsing.type_parser import TypeParser, TypeRef

__all__ = [
    "TypeParser",
    "TypeRef",
]
