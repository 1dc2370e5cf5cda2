# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from extfn.expand import (
	AttributeArgumentsNotAllowed,
	InvalidSubjectParameter,
	MissingSubjectParameter,
	UntypedSubject,
	expand_function,
)
from extfn.expand.validate import validate_attribute_args, validate_signature
from extfn.parser import parse_function
from extfn.parser.ast import Located


def test_zero_parameters() -> None:
	fn = parse_function("fn nothing() {}")
	with pytest.raises(MissingSubjectParameter) as excinfo:
		validate_signature(fn)
	diag = excinfo.value.diagnostic
	assert diag.code == "E-EXTFN-NO-SELF"
	assert diag.message == "function must have a parameter named `self`"
	assert (diag.span.line, diag.span.column) == (1, 11)


def test_ordinary_first_parameter() -> None:
	fn = parse_function("fn f(x: u8, self: u8) {}")
	with pytest.raises(InvalidSubjectParameter) as excinfo:
		validate_signature(fn)
	diag = excinfo.value.diagnostic
	assert diag.code == "E-EXTFN-NOT-SELF"
	assert diag.message == "parameter must be called `self`"
	assert (diag.span.line, diag.span.column) == (1, 6)


@pytest.mark.parametrize("param", ["self", "mut self", "&self", "&mut self", "&'a self"])
def test_untyped_receivers(param: str) -> None:
	fn = parse_function(f"fn f({param}) {{}}")
	with pytest.raises(UntypedSubject) as excinfo:
		validate_signature(fn)
	diag = excinfo.value.diagnostic
	assert diag.code == "E-EXTFN-UNTYPED-SELF"
	assert diag.message == "the `self` parameter must have a type"
	assert diag.span.column == 6


def test_typed_receiver_is_returned() -> None:
	fn = parse_function("fn f(mut self: Vec<u8>, x: u8) {}")
	recv = validate_signature(fn)
	assert recv.mutable
	assert recv.ty is not None


@pytest.mark.parametrize("args", [None, "", "()", " (  ) "])
def test_empty_attribute_arguments_accepted(args) -> None:
	validate_attribute_args(args)


@pytest.mark.parametrize("args", ["(foo)", " = \"x\"", "(a, b)"])
def test_attribute_arguments_rejected(args: str) -> None:
	with pytest.raises(AttributeArgumentsNotAllowed) as excinfo:
		validate_attribute_args(args, Located(line=3, column=9))
	diag = excinfo.value.diagnostic
	assert diag.code == "E-EXTFN-ATTR-ARGS"
	assert diag.message == "attribute arguments are not allowed"
	assert (diag.span.line, diag.span.column) == (3, 9)


def test_attribute_arguments_checked_before_signature() -> None:
	fn = parse_function("#[extfn(x)]\nfn nothing() {}")
	with pytest.raises(AttributeArgumentsNotAllowed):
		expand_function(fn)
	fn = parse_function("fn nothing() {}")
	with pytest.raises(AttributeArgumentsNotAllowed):
		expand_function(fn, attr_args="(x)")
