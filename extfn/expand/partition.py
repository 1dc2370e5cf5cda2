# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Split a function's generic parameters into the ones the subject type uses
(promoted to the trait and impl) and the ones it does not (kept on the method).

Matching is purely syntactic: a name is "used" when it is spelled inside the
subject type. A nested binder that shadows an outer parameter with the same
spelling still counts as a use.
"""

from __future__ import annotations

from typing import List, Tuple

from extfn.parser.ast import (
	ArrayType,
	ConstArg,
	ConstParam,
	GenericParam,
	LifetimeParam,
	PathType,
	TypeExpr,
	TypeParam,
)
from extfn.types import iter_lifetimes, iter_types, render_type


def _const_text(text: str) -> str:
	return "".join(text.split()).strip("{}")


def _uses_lifetime(ty: TypeExpr, name: str) -> bool:
	return any(lt.name == name for lt in iter_lifetimes(ty))


def _uses_type(ty: TypeExpr, name: str) -> bool:
	for node in iter_types(ty):
		if not isinstance(node, PathType) or node.qself is not None:
			continue
		# `T`, `T::Item`
		if node.path.segments and not node.path.leading_colon and node.path.segments[0].name == name:
			return True
	return False


def _uses_const(ty: TypeExpr, name: str) -> bool:
	for node in iter_types(ty):
		if isinstance(node, ArrayType) and _const_text(node.length.text) == name:
			return True
		if isinstance(node, PathType):
			if node.qself is None and render_type(node) == name:
				return True
			for seg in node.path.segments:
				for arg in seg.args or []:
					if isinstance(arg, ConstArg) and _const_text(arg.text) == name:
						return True
	return False


def uses_generic_param(ty: TypeExpr, param: GenericParam) -> bool:
	"""True when `param` is referenced anywhere inside `ty`."""
	if isinstance(param, LifetimeParam):
		return _uses_lifetime(ty, param.name)
	if isinstance(param, TypeParam):
		return _uses_type(ty, param.name)
	if isinstance(param, ConstParam):
		return _uses_const(ty, param.name)
	raise TypeError(f"unknown generic parameter {type(param).__name__}")


def partition_generics(
	params: List[GenericParam], subject_ty: TypeExpr
) -> Tuple[List[GenericParam], List[GenericParam]]:
	"""Return `(promoted, retained)`, each in declaration order."""
	promoted: List[GenericParam] = []
	retained: List[GenericParam] = []
	for param in params:
		if uses_generic_param(subject_ty, param):
			promoted.append(param)
		else:
			retained.append(param)
	return promoted, retained


__all__ = ["partition_generics", "uses_generic_param"]
