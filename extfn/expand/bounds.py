# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Build the impl's generic parameter list and place the hoisted bounds.

Inline bounds are hoisted into where-predicates so the trait can re-declare
the same parameter list without any bounds. A predicate that only names impl
generics goes on the impl. One that also names a parameter kept on the method
(`T: Into<U>` with `U` retained) cannot: the impl never declares `U`. Those
go on the method's own where clause, which the trait declaration and the
embedded function share.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

from extfn.parser.ast import (
	ConstParam,
	GenericParam,
	Generics,
	ImplType,
	LifetimeParam,
	LifetimePredicate,
	PathType,
	TypeParam,
	TypePredicate,
	WhereClause,
	WherePredicate,
)

from .partition import uses_generic_param


def _predicate_uses(pred: WherePredicate, param: GenericParam) -> bool:
	if isinstance(pred, LifetimePredicate):
		if not isinstance(param, LifetimeParam):
			return False
		return any(lt.name == param.name for lt in [pred.lifetime, *pred.bounds])
	if uses_generic_param(pred.bounded_ty, param):
		return True
	return bool(pred.bounds) and uses_generic_param(ImplType(bounds=pred.bounds), param)


def normalize_bounds(
	promoted: List[GenericParam],
	introduced: List[TypeParam],
	retained: Sequence[GenericParam] = (),
) -> Tuple[Generics, List[WherePredicate]]:
	"""
	Return `(impl_generics, method_predicates)`.

	Impl params are `promoted` in declaration order, then `introduced`. Every
	lifetime or type parameter with inline bounds yields one predicate
	(`'a: 'b`, `T: Ord`) and has its inline bounds cleared. Const parameters
	keep their type. Predicates that mention any of `retained` come back as
	`method_predicates`; the rest form the impl where clause, which is None
	when empty.
	"""
	params: List[GenericParam] = [*promoted, *introduced]
	preds: List[WherePredicate] = []
	for param in params:
		if isinstance(param, LifetimeParam):
			if param.bounds:
				preds.append(LifetimePredicate(lifetime=param.lifetime, bounds=param.bounds))
				param.bounds = []
		elif isinstance(param, TypeParam):
			if param.bounds:
				preds.append(TypePredicate(bounded_ty=PathType.ident(param.name), bounds=param.bounds))
				param.bounds = []
		elif isinstance(param, ConstParam):
			continue
		else:
			raise TypeError(f"unknown generic parameter {type(param).__name__}")

	impl_preds: List[WherePredicate] = []
	method_preds: List[WherePredicate] = []
	for pred in preds:
		if any(_predicate_uses(pred, param) for param in retained):
			method_preds.append(pred)
		else:
			impl_preds.append(pred)
	where = WhereClause(predicates=impl_preds) if impl_preds else None
	return Generics(params=params, where_clause=where), method_preds


__all__ = ["normalize_bounds"]
