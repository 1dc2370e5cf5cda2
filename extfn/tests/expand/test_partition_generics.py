# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from extfn.expand import partition_generics, uses_generic_param
from extfn.parser import parse_function


def _split(src: str):
	fn = parse_function(src)
	ty = fn.sig.params[0].ty
	promoted, retained = partition_generics(fn.sig.generics.params, ty)
	return [p.name for p in promoted], [p.name for p in retained]


def test_unrelated_type_parameter_stays_on_method() -> None:
	assert _split("fn f<T, U>(self: Vec<T>, u: U) {}") == (["T"], ["U"])


def test_order_is_declaration_order() -> None:
	assert _split("fn f<B, 'x, A, const N: usize>(self: (A, [B; N], &'x u8)) {}") == (
		["B", "'x", "A", "N"],
		[],
	)


def test_lifetimes_match_by_name() -> None:
	assert _split("fn f<'a, 'b, T>(self: &'a Option<&'b T>) {}") == (["'a", "'b", "T"], [])


def test_associated_path_counts_as_use() -> None:
	assert _split("fn f<T: Iterator, U>(self: Vec<T::Item>) {}") == (["T"], ["U"])
	assert _split("fn f<T: Iterator>(self: <T as Iterator>::Item) {}") == (["T"], [])


def test_impl_bounds_count_as_uses() -> None:
	assert _split("fn f<T>(self: impl Into<T>) {}") == (["T"], [])


def test_const_in_generic_argument() -> None:
	assert _split("fn f<const N: usize>(self: Buf<N>) {}") == (["N"], [])
	assert _split("fn f<const N: usize>(self: Buf<{ N }>) {}") == (["N"], [])
	assert _split("fn f<const N: usize>(self: Buf<4>) {}") == ([], ["N"])


def test_prefix_of_name_is_not_a_use() -> None:
	fn = parse_function("fn f<T>(self: Tx) {}")
	assert not uses_generic_param(fn.sig.params[0].ty, fn.sig.generics.params[0])
	assert _split("fn f<T>(self: std::T) {}") == ([], ["T"])
