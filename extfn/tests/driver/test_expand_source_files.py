# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from extfn.config import ExpandConfig
from extfn.driver import expand_source
from extfn.parser import parse_items

ADD1_EXPANDED = (
	"trait add1 {\n"
	"    #[allow(async_fn_in_trait, unknown_lints, clippy::allow_attributes)]\n"
	"    fn add1(self) -> usize;\n"
	"}\n"
	"impl add1 for usize {\n"
	"    fn add1(self) -> usize { self + 1 }\n"
	"}"
)


def test_expand_single_function() -> None:
	res = expand_source("#[extfn]\nfn add1(self: usize) -> usize { self + 1 }\n")
	assert res.diagnostics == []
	assert res.ok
	assert res.expanded == 1
	assert res.text == ADD1_EXPANDED + "\n"


def test_surrounding_text_is_untouched() -> None:
	src = (
		"use extfn::extfn;\n"
		"\n"
		"// leading comment\n"
		"#[extfn]\n"
		"fn add1(self: usize) -> usize { self + 1 }\n"
		"\n"
		"fn main() {\n"
		"    assert_eq!(1.add1(), 2);\n"
		"}\n"
	)
	res = expand_source(src)
	assert res.diagnostics == []
	assert res.text == (
		"use extfn::extfn;\n"
		"\n"
		"// leading comment\n"
		+ ADD1_EXPANDED
		+ "\n\nfn main() {\n"
		"    assert_eq!(1.add1(), 2);\n"
		"}\n"
	)


def test_sibling_attributes_and_docs_travel_with_function() -> None:
	src = "/// Adds one.\n#[inline]\n#[extfn]\npub fn add1(self: usize) -> usize { self + 1 }\n"
	res = expand_source(src)
	assert res.diagnostics == []
	trait, impl = parse_items(res.text)
	assert [a.path for a in trait.attrs] == ["doc"]
	assert trait.vis is not None and trait.vis.text == "pub"
	assert [a.path for a in impl.items[0].attrs] == ["doc", "inline"]


def test_nested_module_keeps_indentation() -> None:
	src = "mod util {\n    #[extfn]\n    fn add1(self: usize) -> usize { self + 1 }\n}\n"
	res = expand_source(src)
	assert res.diagnostics == []
	lines = res.text.splitlines()
	assert lines[0] == "mod util {"
	assert lines[1] == "    trait add1 {"
	assert lines[5] == "    impl add1 for usize {"
	assert lines[-1] == "}"


def test_failure_is_isolated_and_positioned() -> None:
	src = (
		"#[extfn]\n"
		"fn bad() {}\n"
		"\n"
		"#[extfn]\n"
		"fn add1(self: usize) -> usize { self + 1 }\n"
	)
	res = expand_source(src, path="lib.rs")
	assert res.expanded == 1
	assert not res.ok
	(diag,) = res.diagnostics
	assert diag.code == "E-EXTFN-NO-SELF"
	assert (diag.span.file, diag.span.line, diag.span.column) == ("lib.rs", 2, 7)
	assert res.text.startswith("#[extfn]\nfn bad() {}\n\ntrait add1 {")


def test_attribute_arguments_reported_at_argument_list() -> None:
	res = expand_source("#[extfn(fast)]\nfn add1(self: usize) -> usize { self + 1 }\n")
	(diag,) = res.diagnostics
	assert diag.code == "E-EXTFN-ATTR-ARGS"
	assert (diag.span.line, diag.span.column) == (1, 8)
	assert res.expanded == 0


def test_empty_attribute_arguments_and_qualified_path() -> None:
	res = expand_source("#[extfn::extfn()]\nfn add1(self: usize) -> usize { self + 1 }\n")
	assert res.diagnostics == []
	assert res.text == ADD1_EXPANDED + "\n"


def test_parse_error_in_annotated_function() -> None:
	res = expand_source("#[extfn]\nfn f(self: u8) -> {}\n", path="x.rs")
	(diag,) = res.diagnostics
	assert diag.code == "E-PARSE"
	assert diag.span.line == 2


def test_attribute_on_non_function() -> None:
	res = expand_source("#[extfn]\nstruct S;\n")
	(diag,) = res.diagnostics
	assert diag.code == "E-EXTFN-NOT-FN"
	assert res.text == "#[extfn]\nstruct S;\n"


def test_unbalanced_source_is_a_parse_error() -> None:
	res = expand_source("fn f() {\n")
	(diag,) = res.diagnostics
	assert diag.code == "E-PARSE"
	assert res.expanded == 0


def test_configured_attribute_path_and_naming() -> None:
	cfg = ExpandConfig(trait_naming="camel", attribute_paths=("ext",))
	src = "#[extfn]\nfn keep(self: u8) {}\n#[ext]\nfn subject_incr(self: u8) -> u8 { self + 1 }\n"
	res = expand_source(src, config=cfg)
	assert res.diagnostics == []
	assert res.expanded == 1
	assert res.text.startswith("#[extfn]\nfn keep(self: u8) {}\ntrait SubjectIncr {")
	assert "impl SubjectIncr for u8 {" in res.text


def test_where_clause_with_braced_const() -> None:
	src = "#[extfn]\nfn f<const N: usize>(self: [u8; N]) where [u8; { N + 1 }]: Sized { }\n"
	res = expand_source(src)
	assert res.diagnostics == []
	assert "impl<const N: usize> f<N> for [u8; N] {" in res.text
	assert "[u8; { N + 1 }]: Sized," in res.text


def test_nested_comments_and_keywords_inside_bodies() -> None:
	src = (
		"/* disabled: /* #[extfn] */ fn old(self: u8) {} */\n"
		"#[extfn]\n"
		"fn pair(self: (u8, u8)) -> u8 {\n"
		"    let (a, b): (u8, u8) = self;\n"
		"    if a > b {} unsafe { touch() }\n"
		"    a + b\n"
		"}\n"
	)
	res = expand_source(src)
	assert res.diagnostics == []
	assert res.expanded == 1
	assert res.text.startswith("/* disabled: /* #[extfn] */ fn old(self: u8) {} */\ntrait pair {\n")
	assert "impl pair for (u8, u8) {\n    fn pair(self) -> u8 {\n    let (a, b): (u8, u8) = self;\n" in res.text
