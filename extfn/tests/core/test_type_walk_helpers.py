# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from extfn.parser import parse_function
from extfn.parser.ast import ImplType, Path, PathSegment, PathType, RefType, TupleType
from extfn.types import (
	iter_lifetimes,
	iter_types,
	render_type,
	strip_parens,
	strip_reference,
	type_depth,
)


def _ty(src: str):
	return parse_function(f"fn f(self: {src}) {{}}").sig.params[0].ty


def test_strip_parens_removes_every_layer() -> None:
	assert render_type(strip_parens(_ty("((Vec<u8>))"))) == "Vec<u8>"
	assert render_type(strip_parens(_ty("(u8,)"))) == "(u8,)"


def test_strip_reference_removes_one_level() -> None:
	inner, ref = strip_reference(_ty("&'a mut &T"))
	assert isinstance(ref, RefType)
	assert ref.mutable and ref.lifetime is not None and ref.lifetime.name == "'a"
	assert render_type(inner) == "&T"
	inner, ref = strip_reference(_ty("u8"))
	assert ref is None
	assert render_type(inner) == "u8"


def test_iter_types_is_preorder_and_covers_bounds() -> None:
	ty = _ty("(Vec<T>, impl Into<U>, <V as Tr>::Out)")
	rendered = [render_type(t) for t in iter_types(ty)]
	assert rendered == [
		"(Vec<T>, impl Into<U>, <V as Tr>::Out)",
		"Vec<T>",
		"T",
		"impl Into<U>",
		"U",
		"<V as Tr>::Out",
		"V",
	]


def test_iter_lifetimes_reports_uses_not_binders() -> None:
	ty = _ty("&'a Foo<'b, dyn for<'c> Fn(&'c u8) + 'd>")
	assert sorted(lt.name for lt in iter_lifetimes(ty)) == ["'a", "'b", "'c", "'d"]
	ty = _ty("for<'x> fn(&'x u8)")
	assert [lt.name for lt in iter_lifetimes(ty)] == ["'x"]


def test_deep_nesting_walks_without_recursion() -> None:
	ty: object = PathType.ident("u8")
	for _ in range(5000):
		ty = TupleType(elems=[ty, PathType.ident("u8")])
	assert type_depth(ty) == 5001
	assert sum(1 for _ in iter_types(ty)) == 10001


def test_type_depth_counts_generic_arguments() -> None:
	assert type_depth(_ty("u8")) == 1
	assert type_depth(_ty("Vec<Vec<u8>>")) == 3
	nested = PathType(path=Path(segments=[PathSegment(name="Box", args=[ImplType(bounds=[])])]))
	assert type_depth(nested) == 2
