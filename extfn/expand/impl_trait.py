# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Rewrite `impl Bounds` occurrences in the subject type into named generics.

`impl` in the subject type cannot be kept: the type appears as the impl
target, where anonymous existentials are not allowed. Each occurrence becomes
a fresh type parameter `_T<n>` carrying the original bounds.

Walk order is post-order, left to right, so for `(impl A, Vec<impl B>)` the
introduced parameters are `_T1: A` then `_T2: B`, and an `impl` nested inside
another `impl`'s bounds is numbered before its container.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Set

from extfn.parser.ast import (
	ArrayType,
	AssocConstraint,
	AssocType,
	Bound,
	ConstArg,
	DynType,
	FnPtrType,
	ImplType,
	InferType,
	Lifetime,
	NeverType,
	ParenType,
	Path,
	PathType,
	PtrType,
	RefType,
	SliceType,
	TupleType,
	TypeExpr,
	TypeParam,
)

from .errors import TypeTooDeep

# Maximum type nesting the walk accepts.
MAX_TYPE_DEPTH = 32


class ImplTraitRewriter:
	"""
	Replace `ImplType` nodes with fresh generic parameters.

	One rewriter is created per expansion. `taken` holds identifiers already
	spelled in the signature; fresh names skip them so `_T1` never captures a
	user's own `_T1`.
	"""

	def __init__(self, taken: Optional[Iterable[str]] = None, *, prefix: str = "_T") -> None:
		self._temp_counter = 0
		self._prefix = prefix
		self._taken: Set[str] = set(taken or ())
		self.introduced: List[TypeParam] = []

	def _fresh(self) -> str:
		"""Generate the next deterministic parameter name not already in use."""
		while True:
			self._temp_counter += 1
			name = f"{self._prefix}{self._temp_counter}"
			if name not in self._taken:
				self._taken.add(name)
				return name

	# Public entry point -------------------------------------------------

	def rewrite(self, ty: TypeExpr) -> TypeExpr:
		"""Return `ty` with every `impl` replaced; nodes are updated in place."""
		return self._rewrite_type(ty, 0)

	# Walk ---------------------------------------------------------------

	def _rewrite_type(self, ty: TypeExpr, depth: int) -> TypeExpr:
		if depth > MAX_TYPE_DEPTH:
			raise TypeTooDeep(ty.loc, notes=[f"nesting limit is {MAX_TYPE_DEPTH}"])
		nxt = depth + 1
		if isinstance(ty, PathType):
			if ty.qself is not None:
				ty.qself.ty = self._rewrite_type(ty.qself.ty, nxt)
				if ty.qself.trait_path is not None:
					self._rewrite_path(ty.qself.trait_path, nxt)
			self._rewrite_path(ty.path, nxt)
		elif isinstance(ty, (RefType, ParenType, PtrType)):
			ty.inner = self._rewrite_type(ty.inner, nxt)
		elif isinstance(ty, (ArrayType, SliceType)):
			ty.elem = self._rewrite_type(ty.elem, nxt)
		elif isinstance(ty, TupleType):
			ty.elems = [self._rewrite_type(e, nxt) for e in ty.elems]
		elif isinstance(ty, FnPtrType):
			for arg in ty.inputs:
				arg.ty = self._rewrite_type(arg.ty, nxt)
			if ty.output is not None:
				ty.output = self._rewrite_type(ty.output, nxt)
		elif isinstance(ty, DynType):
			self._rewrite_bounds(ty.bounds, nxt)
		elif isinstance(ty, ImplType):
			self._rewrite_bounds(ty.bounds, nxt)
			name = self._fresh()
			self.introduced.append(TypeParam(name=name, bounds=ty.bounds, loc=ty.loc))
			return PathType(path=Path.ident(name), loc=ty.loc)
		elif isinstance(ty, (NeverType, InferType)):
			pass
		else:
			raise TypeError(f"unknown type node {type(ty).__name__}")
		return ty

	def _rewrite_path(self, path: Path, depth: int) -> None:
		for seg in path.segments:
			if seg.args is not None:
				new_args = []
				for arg in seg.args:
					if isinstance(arg, (Lifetime, ConstArg)):
						new_args.append(arg)
					elif isinstance(arg, AssocType):
						arg.ty = self._rewrite_type(arg.ty, depth)
						new_args.append(arg)
					elif isinstance(arg, AssocConstraint):
						self._rewrite_bounds(arg.bounds, depth)
						new_args.append(arg)
					else:
						new_args.append(self._rewrite_type(arg, depth))
				seg.args = new_args
			if seg.inputs is not None:
				seg.inputs = [self._rewrite_type(t, depth) for t in seg.inputs]
			if seg.output is not None:
				seg.output = self._rewrite_type(seg.output, depth)

	def _rewrite_bounds(self, bounds: List[Bound], depth: int) -> None:
		for bound in bounds:
			if not isinstance(bound, Lifetime):
				self._rewrite_path(bound.path, depth)


__all__ = ["ImplTraitRewriter", "MAX_TYPE_DEPTH"]
