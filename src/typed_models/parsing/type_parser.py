"""Parser for type expressions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import ply.yacc as yacc

from typed_models.parsing.type_lexer import TypeLexer


@dataclass(frozen=True)
class TypeRef:
    """Reference to a type, possibly as an array.

    ``name`` keeps the casing found in the source expression; namespaces are
    joined with dots.
    """

    name: str
    is_array: bool = False

    @property
    def namespace(self) -> tuple[str, ...]:
        """Return the namespace segments preceding the type name."""
        return tuple(self.name.split(".")[:-1])

    @property
    def type_name(self) -> str:
        """Return the last segment of the dotted name."""
        return self.name.split(".")[-1]


class TypeParser:
    """Parser for ``qualified.Name`` and ``qualified.Name[]`` expressions."""

    tokens = TypeLexer.tokens

    def __init__(self) -> None:
        self.lexer = TypeLexer()
        self.lexer.build()
        self.parser: yacc.LRParser = None  # type: ignore

    def p_type_ref_simple(self, p: yacc.YaccProduction) -> None:
        """type_ref : qualified_name"""
        p[0] = TypeRef(name=p[1], is_array=False)

    def p_type_ref_array(self, p: yacc.YaccProduction) -> None:
        """type_ref : qualified_name LBRACKET RBRACKET"""
        p[0] = TypeRef(name=p[1], is_array=True)

    def p_qualified_name_single(self, p: yacc.YaccProduction) -> None:
        """qualified_name : IDENTIFIER"""
        p[0] = p[1]

    def p_qualified_name_dotted(self, p: yacc.YaccProduction) -> None:
        """qualified_name : qualified_name DOT IDENTIFIER"""
        p[0] = f"{p[1]}.{p[3]}"

    def p_error(self, p: yacc.YaccProduction) -> None:
        if p:
            raise SyntaxError(f"Syntax error at '{p.value}' (position {p.lexpos})")
        else:
            raise SyntaxError("Syntax error at end of input")

    def build(self, **kwargs: Any) -> None:
        """Build the parser."""
        self.parser = yacc.yacc(module=self, **kwargs)

    def parse(self, data: str) -> TypeRef:
        """Parse a type expression.

        Raises:
            SyntaxError: If the expression is empty or malformed.
        """
        if self.parser is None:
            self.build(debug=False, write_tables=False)

        if not data.strip():
            raise SyntaxError("Empty type expression")

        return self.parser.parse(data, lexer=self.lexer.lexer)
