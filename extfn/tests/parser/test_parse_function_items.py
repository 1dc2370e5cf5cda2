# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest
from lark.exceptions import UnexpectedInput

from extfn.parser import parse_error_diagnostic, parse_function, parse_items, split_attribute_text
from extfn.parser.ast import (
	FnItem,
	ImplDef,
	Located,
	PathType,
	Receiver,
	RefType,
	TraitDef,
	TypedParam,
	TypeParam,
)
from extfn.types import render_type


def test_parse_simple_function() -> None:
	fn = parse_function("fn add1(self: usize) -> usize { self + 1 }")
	assert fn.sig.name == "add1"
	assert fn.vis is None
	assert fn.body is not None
	assert fn.body.text == "{ self + 1 }"
	recv = fn.sig.params[0]
	assert isinstance(recv, Receiver)
	assert recv.ty == PathType.ident("usize")
	assert fn.sig.output == PathType.ident("usize")


def test_parse_receiver_forms() -> None:
	cases = {
		"fn f(self) {}": Receiver(),
		"fn f(mut self) {}": Receiver(mutable=True),
		"fn f(&self) {}": Receiver(reference=True),
		"fn f(&mut self) {}": Receiver(reference=True, mutable=True),
	}
	for src, expected in cases.items():
		assert parse_function(src).sig.params[0] == expected, src
	recv = parse_function("fn f(&'a self) {}").sig.params[0]
	assert recv.reference and recv.lifetime is not None and recv.lifetime.name == "'a"
	recv = parse_function("fn f(mut self: Vec<u8>) {}").sig.params[0]
	assert recv.mutable and recv.ty is not None


def test_parse_patterns_are_verbatim() -> None:
	fn = parse_function("fn f(self: u8, (mut _a, mut _b): (bool, bool), ref x: u8, _: i32) {}")
	pats = [p.pat.text for p in fn.sig.params if isinstance(p, TypedParam)]
	assert pats == ["(mut _a, mut _b)", "ref x", "_"]


def test_parse_attributes_docs_and_visibility() -> None:
	fn = parse_function(
		"""
/// Adds one.
#[must_use]
#[doc = "more"]
pub(crate) fn add1(self: usize) -> usize { self + 1 }
"""
	)
	assert [a.path for a in fn.attrs] == ["doc", "must_use", "doc"]
	assert fn.attrs[0].doc_comment == "/// Adds one."
	assert fn.attrs[0].is_doc
	assert not fn.attrs[1].is_doc
	assert fn.attrs[2].tokens == ' = "more"'
	assert fn.attrs[2].is_doc
	assert fn.vis is not None and fn.vis.text == "pub(crate)"


def test_parse_qualifiers_and_where_clause() -> None:
	fn = parse_function(
		"""
pub const unsafe extern "C" fn g<'a, T: Clone + 'a, const N: usize>(self: [T; N]) -> T
where
	T: Default,
{
	todo!()
}
"""
	)
	q = fn.sig.qualifiers
	assert q.const and q.unsafe and not q.is_async
	assert q.abi == '"C"'
	names = [p.name for p in fn.sig.generics.params]
	assert names == ["'a", "T", "N"]
	assert isinstance(fn.sig.generics.params[1], TypeParam)
	assert len(fn.sig.generics.params[1].bounds) == 2
	assert fn.sig.generics.where_clause is not None
	assert len(fn.sig.generics.where_clause.predicates) == 1


def test_parse_body_keeps_nested_tokens() -> None:
	body = """{
	let s = "}{";
	let c = '}';
	// comment with }
	if self > 0 { self } else { 0 }
}"""
	fn = parse_function("fn f(self: u8) -> u8 " + body)
	assert fn.body is not None
	assert fn.body.text == body


def test_parse_positions() -> None:
	fn = parse_function("fn f(self: u8) {}\n")
	assert fn.sig.loc == Located(line=1, column=4)
	assert fn.sig.params_loc == Located(line=1, column=5)
	fn = parse_function("\n\nfn g(x: u8) {}")
	param = fn.sig.params[0]
	assert isinstance(param, TypedParam)
	assert param.pat.loc == Located(line=3, column=6)


def test_parse_items_trait_and_impl() -> None:
	items = parse_items(
		"""
pub trait add1<T> {
	#[allow(dead_code)]
	fn add1(self, _: T) -> usize;
}
impl<T> add1<T> for Vec<T>
where
	T: Clone,
{
	fn add1(self, t: T) -> usize { 1 }
}
"""
	)
	assert [type(i) for i in items] == [TraitDef, ImplDef]
	trait, impl = items
	assert trait.name == "add1"
	assert trait.vis is not None and trait.vis.text == "pub"
	assert trait.items[0].body is None
	assert trait.items[0].attrs[0].path == "allow"
	assert impl.trait_path.segments[0].name == "add1"
	assert render_type(impl.self_ty) == "Vec<T>"
	assert isinstance(impl.items[0], FnItem)
	assert impl.generics.where_clause is not None


def test_parse_reference_subject_type() -> None:
	recv = parse_function("fn f(self: &'a mut Option<&'b T>) {}").sig.params[0]
	assert isinstance(recv.ty, RefType)
	assert recv.ty.mutable
	assert recv.ty.lifetime is not None and recv.ty.lifetime.name == "'a"


def test_split_attribute_text() -> None:
	assert split_attribute_text("extfn") == ("extfn", "")
	assert split_attribute_text("extfn :: extfn(x)") == ("extfn::extfn", "(x)")
	assert split_attribute_text('doc = "x"') == ("doc", ' = "x"')


def test_parse_error_becomes_diagnostic() -> None:
	with pytest.raises(UnexpectedInput) as excinfo:
		parse_function("fn f(self: u8) -> {}")
	diag = parse_error_diagnostic(excinfo.value, file="lib.rs")
	assert diag.code == "E-PARSE"
	assert diag.phase == "parser"
	assert diag.span.file == "lib.rs"
	assert diag.span.line == 1
