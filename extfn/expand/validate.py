# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Admission checks for an `#[extfn]` function.

Checks run in a fixed order and stop at the first failure: attribute
arguments, then presence of a first parameter, then its name, then its type.
"""

from __future__ import annotations

import re
from typing import Optional

from extfn.parser.ast import FnItem, Located, Receiver, TypedParam

from .errors import (
	AttributeArgumentsNotAllowed,
	InvalidSubjectParameter,
	MissingSubjectParameter,
	UntypedSubject,
)

_EMPTY_ARGS_RE = re.compile(r"\(\s*\)")


def validate_attribute_args(args: Optional[str], loc: Optional[Located] = None) -> None:
	"""
	Reject any argument list on the annotation.

	`args` is the verbatim text following the attribute path inside `#[...]`
	(for example `(foo)` or ` = "x"`). Nothing and `()` are accepted.
	"""
	if args is None:
		return
	text = args.strip()
	if not text or _EMPTY_ARGS_RE.fullmatch(text):
		return
	raise AttributeArgumentsNotAllowed(loc)


def validate_signature(fn: FnItem) -> Receiver:
	"""Return the typed `self` receiver or raise the matching failure."""
	sig = fn.sig
	if not sig.params:
		raise MissingSubjectParameter(sig.params_loc or sig.loc)
	first = sig.params[0]
	if isinstance(first, TypedParam):
		raise InvalidSubjectParameter(first.pat.loc or first.loc)
	if first.ty is None:
		raise UntypedSubject(first.loc)
	return first


__all__ = ["validate_attribute_args", "validate_signature"]
