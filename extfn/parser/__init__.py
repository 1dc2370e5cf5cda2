"""
extfn parser: lark grammar for the Rust item syntax extfn consumes and emits,
plus the tree builder producing `extfn.parser.ast` nodes.
"""

from __future__ import annotations

from typing import Optional

from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedInput, UnexpectedToken

from extfn.core.diagnostics import Diagnostic
from extfn.core.span import Span

from . import ast
from .parser import AstShapeError, parse_function, parse_items, split_attribute_text, tokenize_tree


def parse_error_diagnostic(err: UnexpectedInput, *, file: Optional[str] = None) -> Diagnostic:
	"""Convert a lark parse failure into an `E-PARSE` diagnostic at the offending position."""
	if isinstance(err, UnexpectedToken):
		if err.token.type == "$END":
			message = "unexpected end of input"
		else:
			message = f"unexpected token '{err.token.value}'"
	elif isinstance(err, UnexpectedCharacters):
		message = f"unexpected character '{err.char}'"
	elif isinstance(err, UnexpectedEOF):
		message = "unexpected end of input"
	else:
		message = str(err)
	span = Span(
		file=file,
		line=getattr(err, "line", None),
		column=getattr(err, "column", None),
		raw=err,
	)
	return Diagnostic(message=message, code="E-PARSE", phase="parser", span=span)


__all__ = [
	"AstShapeError",
	"ast",
	"parse_error_diagnostic",
	"parse_function",
	"parse_items",
	"split_attribute_text",
	"tokenize_tree",
]
