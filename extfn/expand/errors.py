# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Expansion failures.

Each failure kind is an `ExpansionError` subclass with a stable code and the
user-facing message. They are raised at the offending syntax element; the
driver reports them as one diagnostic per annotated function.
"""

from __future__ import annotations

from typing import Optional

from extfn.core.diagnostics import Diagnostic, ExpansionError
from extfn.core.span import Span
from extfn.parser.ast import Located


class _ExpansionFailure(ExpansionError):
	code_id: str = ""
	default_message: str = ""

	def __init__(self, loc: Optional[Located] = None, *, message: Optional[str] = None, notes=None) -> None:
		super().__init__(
			Diagnostic(
				message=message or self.default_message,
				code=self.code_id,
				phase="expand",
				span=Span.from_loc(loc),
				notes=list(notes or []),
			)
		)
		self.loc = loc


class AttributeArgumentsNotAllowed(_ExpansionFailure):
	code_id = "E-EXTFN-ATTR-ARGS"
	default_message = "attribute arguments are not allowed"


class MissingSubjectParameter(_ExpansionFailure):
	code_id = "E-EXTFN-NO-SELF"
	default_message = "function must have a parameter named `self`"


class InvalidSubjectParameter(_ExpansionFailure):
	code_id = "E-EXTFN-NOT-SELF"
	default_message = "parameter must be called `self`"


class UntypedSubject(_ExpansionFailure):
	code_id = "E-EXTFN-UNTYPED-SELF"
	default_message = "the `self` parameter must have a type"


class TypeTooDeep(_ExpansionFailure):
	code_id = "E-EXTFN-TYPE-DEPTH"
	default_message = "type is nested too deeply"


__all__ = [
	"AttributeArgumentsNotAllowed",
	"InvalidSubjectParameter",
	"MissingSubjectParameter",
	"TypeTooDeep",
	"UntypedSubject",
]
