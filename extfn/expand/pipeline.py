# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
One `#[extfn]` expansion, start to finish.

Pipeline:
  validate attribute args → validate signature → extract subject type
  → partition generics (on the type as written) → rewrite `impl` types
  → strip leftover parentheses → hoist bounds → synthesize trait + impl

Every call works on its own deep copy of the input and its own rewriter, so
the same function can be expanded repeatedly (or concurrently) with identical
results and without touching the caller's tree.
"""

from __future__ import annotations

import copy
import logging
from typing import Iterable, List, Optional, Set

from extfn.config import ExpandConfig
from extfn.parser.ast import (
	FnItem,
	ImplType,
	Located,
	PathType,
	TypedParam,
	TypeExpr,
	TypeParam,
	TypePredicate,
	WhereClause,
)
from extfn.types import iter_types, strip_parens, type_depth

from .bounds import normalize_bounds
from .errors import TypeTooDeep
from .impl_trait import MAX_TYPE_DEPTH, ImplTraitRewriter
from .partition import partition_generics
from .synthesize import ExtensionArtifact, synthesize, trait_name_for
from .target import extract_target
from .validate import validate_attribute_args, validate_signature

logger = logging.getLogger(__name__)


def _signature_types(fn: FnItem) -> List[TypeExpr]:
	sig = fn.sig
	types: List[TypeExpr] = []
	for param in sig.params:
		if isinstance(param, TypedParam):
			types.append(param.ty)
		elif param.ty is not None:
			types.append(param.ty)
	if sig.output is not None:
		types.append(sig.output)
	where = sig.generics.where_clause
	if where is not None:
		for pred in where.predicates:
			if isinstance(pred, TypePredicate):
				types.append(pred.bounded_ty)
	return types


def _check_depth(types: Iterable[TypeExpr]) -> None:
	for ty in types:
		if type_depth(ty) > MAX_TYPE_DEPTH:
			raise TypeTooDeep(ty.loc, notes=[f"nesting limit is {MAX_TYPE_DEPTH}"])


def _bound_carriers(fn: FnItem) -> List[TypeExpr]:
	generics = fn.sig.generics
	carriers: List[TypeExpr] = [
		ImplType(bounds=p.bounds) for p in generics.params if isinstance(p, TypeParam) and p.bounds
	]
	if generics.where_clause is not None:
		for pred in generics.where_clause.predicates:
			if isinstance(pred, TypePredicate) and pred.bounds:
				carriers.append(ImplType(bounds=pred.bounds))
	return carriers


def _taken_names(fn: FnItem, types: Iterable[TypeExpr]) -> Set[str]:
	taken: Set[str] = {p.name for p in fn.sig.generics.params}
	for ty in [*types, *_bound_carriers(fn)]:
		for node in iter_types(ty):
			if isinstance(node, PathType):
				taken.update(seg.name for seg in node.path.segments)
	return taken


def _split_extfn_attrs(fn: FnItem, config: ExpandConfig):
	marker = [a for a in fn.attrs if a.path in config.attribute_paths]
	rest = [a for a in fn.attrs if a.path not in config.attribute_paths]
	return marker, rest


def expand_function(
	fn: FnItem,
	*,
	attr_args: Optional[str] = None,
	attr_loc: Optional[Located] = None,
	config: Optional[ExpandConfig] = None,
) -> ExtensionArtifact:
	"""
	Expand one annotated function into its trait and impl.

	`attr_args` is the verbatim argument text of the triggering attribute when
	the caller already removed it from `fn.attrs` (the driver does). Marker
	attributes still present on `fn` are validated and removed here.

	Raises an `ExpansionError` subclass on the first failed check; nothing is
	returned in that case.
	"""
	cfg = config or ExpandConfig()
	validate_attribute_args(attr_args, attr_loc)
	marker, rest = _split_extfn_attrs(fn, cfg)
	for attr in marker:
		validate_attribute_args(attr.tokens, attr.loc)
	validate_signature(fn)

	sig_types = _signature_types(fn)
	_check_depth(sig_types)
	taken = _taken_names(fn, sig_types)

	work = copy.deepcopy(fn)
	work.attrs = copy.deepcopy(rest)
	receiver = validate_signature(work)
	target = extract_target(receiver)
	work.sig.params[0] = target.receiver

	promoted, retained = partition_generics(work.sig.generics.params, target.subject_ty)
	work.sig.generics.params = retained

	rewriter = ImplTraitRewriter(taken)
	subject_ty = strip_parens(rewriter.rewrite(target.subject_ty))
	impl_generics, method_preds = normalize_bounds(promoted, rewriter.introduced, retained)
	if method_preds:
		if work.sig.generics.where_clause is None:
			work.sig.generics.where_clause = WhereClause()
		work.sig.generics.where_clause.predicates.extend(method_preds)

	name = trait_name_for(work.sig.name, cfg.trait_naming)
	logger.debug(
		"expanding %s: %d promoted, %d retained, %d introduced generic(s)",
		work.sig.name,
		len(promoted),
		len(retained),
		len(rewriter.introduced),
	)
	return synthesize(work, subject_ty, impl_generics, trait_name=name)


__all__ = ["expand_function"]
