# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Extract the subject type from `self: T` and simplify the receiver."""

from __future__ import annotations

from dataclasses import dataclass

from extfn.parser.ast import Receiver, TypeExpr
from extfn.types import strip_parens, strip_reference


@dataclass
class SubjectTarget:
	subject_ty: TypeExpr  # the type the trait gets implemented for
	receiver: Receiver  # `self`, `mut self`, `&self`, `&'a mut self`; never typed


def extract_target(receiver: Receiver) -> SubjectTarget:
	"""
	Split `self: T` into the subject type and a plain receiver.

	Parentheses are removed, then at most one reference; the reference's
	lifetime and mutability move onto the receiver. `self: &&T` therefore
	implements for `&T` with receiver `&self`.
	"""
	if receiver.ty is None:
		raise ValueError("receiver has no explicit type")
	inner, ref = strip_reference(strip_parens(receiver.ty))
	if ref is None:
		simplified = Receiver(mutable=receiver.mutable, loc=receiver.loc)
	else:
		simplified = Receiver(reference=True, lifetime=ref.lifetime, mutable=ref.mutable, loc=receiver.loc)
	return SubjectTarget(subject_ty=inner, receiver=simplified)


__all__ = ["SubjectTarget", "extract_target"]
