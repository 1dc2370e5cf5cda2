# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Helpers over the closed `TypeExpr` variant set.

Walking is done with an explicit work list so arbitrarily nested types never
hit the interpreter recursion limit. Rendering produces the canonical Rust
spelling shared by the printer and by the syntactic comparisons of the
partitioner (`Vec<T>`, `&'a mut [u8; 4]`, `dyn Fn(&T) -> bool + Send`).
"""

from __future__ import annotations

from typing import Iterator, List, Optional, Tuple

from extfn.parser.ast import (
	ArrayType,
	AssocConstraint,
	AssocType,
	Bound,
	ConstArg,
	DynType,
	FnPtrType,
	GenericArg,
	ImplType,
	InferType,
	Lifetime,
	NeverType,
	ParenType,
	Path,
	PathSegment,
	PathType,
	PtrType,
	RefType,
	SliceType,
	TupleType,
	TypeExpr,
)


def strip_parens(ty: TypeExpr) -> TypeExpr:
	"""Remove every outer `ParenType` wrapper: `((T))` → `T`."""
	while isinstance(ty, ParenType):
		ty = ty.inner
	return ty


def strip_reference(ty: TypeExpr) -> Tuple[TypeExpr, Optional[RefType]]:
	"""
	Remove one outer reference.

	Returns `(inner, ref)` where `ref` is the removed `RefType` (carrying the
	lifetime and mutability) or None when `ty` was not a reference. Only one
	level is removed: `&&T` → `&T`.
	"""
	if isinstance(ty, RefType):
		return ty.inner, ty
	return ty, None


def _path_parts(path: Path, types: List[TypeExpr], lifetimes: List[Lifetime]) -> None:
	for seg in path.segments:
		for arg in seg.args or []:
			if isinstance(arg, Lifetime):
				lifetimes.append(arg)
			elif isinstance(arg, AssocType):
				types.append(arg.ty)
			elif isinstance(arg, AssocConstraint):
				_bounds_parts(arg.bounds, types, lifetimes)
			elif isinstance(arg, ConstArg):
				continue
			else:
				types.append(arg)
		for inp in seg.inputs or []:
			types.append(inp)
		if seg.output is not None:
			types.append(seg.output)


def _bounds_parts(bounds: List[Bound], types: List[TypeExpr], lifetimes: List[Lifetime]) -> None:
	for bound in bounds:
		if isinstance(bound, Lifetime):
			lifetimes.append(bound)
		else:
			_path_parts(bound.path, types, lifetimes)


def type_parts(ty: TypeExpr) -> Tuple[List[TypeExpr], List[Lifetime]]:
	"""
	Direct children of one type node.

	Returns the nested types and the lifetimes that occur directly in `ty`
	(reference lifetimes, lifetime arguments, lifetime bounds). `for<'a>`
	binders are declarations, not uses, and are not reported.
	"""
	types: List[TypeExpr] = []
	lifetimes: List[Lifetime] = []
	if isinstance(ty, PathType):
		if ty.qself is not None:
			types.append(ty.qself.ty)
			if ty.qself.trait_path is not None:
				_path_parts(ty.qself.trait_path, types, lifetimes)
		_path_parts(ty.path, types, lifetimes)
	elif isinstance(ty, RefType):
		if ty.lifetime is not None:
			lifetimes.append(ty.lifetime)
		types.append(ty.inner)
	elif isinstance(ty, (ParenType, PtrType)):
		types.append(ty.inner)
	elif isinstance(ty, (ArrayType, SliceType)):
		types.append(ty.elem)
	elif isinstance(ty, TupleType):
		types.extend(ty.elems)
	elif isinstance(ty, FnPtrType):
		types.extend(arg.ty for arg in ty.inputs)
		if ty.output is not None:
			types.append(ty.output)
	elif isinstance(ty, (DynType, ImplType)):
		_bounds_parts(ty.bounds, types, lifetimes)
	elif isinstance(ty, (NeverType, InferType)):
		pass
	else:
		raise TypeError(f"unknown type node {type(ty).__name__}")
	return types, lifetimes


def iter_types(ty: TypeExpr) -> Iterator[TypeExpr]:
	"""Yield `ty` and every type nested inside it, pre-order, left to right."""
	work: List[TypeExpr] = [ty]
	while work:
		cur = work.pop()
		yield cur
		children, _ = type_parts(cur)
		work.extend(reversed(children))


def type_depth(ty: TypeExpr) -> int:
	"""Nesting depth of `ty` (a bare `u8` has depth 1)."""
	deepest = 0
	work: List[Tuple[TypeExpr, int]] = [(ty, 1)]
	while work:
		cur, depth = work.pop()
		deepest = max(deepest, depth)
		children, _ = type_parts(cur)
		work.extend((child, depth + 1) for child in children)
	return deepest


def iter_lifetimes(ty: TypeExpr) -> Iterator[Lifetime]:
	"""Yield every lifetime occurrence inside `ty`."""
	for node in iter_types(ty):
		_, lifetimes = type_parts(node)
		yield from lifetimes


# ---------------------------------------------------------------- rendering


def render_bound(bound: Bound) -> str:
	if isinstance(bound, Lifetime):
		return bound.name
	text = render_path(bound.path)
	if bound.maybe:
		text = "?" + text
	if bound.lifetimes:
		text = f"for<{', '.join(lt.name for lt in bound.lifetimes)}> " + text
	return text


def render_bounds(bounds: List[Bound]) -> str:
	return " + ".join(render_bound(b) for b in bounds)


def render_generic_arg(arg: GenericArg) -> str:
	if isinstance(arg, Lifetime):
		return arg.name
	if isinstance(arg, ConstArg):
		return arg.text
	if isinstance(arg, AssocType):
		return f"{arg.name} = {render_type(arg.ty)}"
	if isinstance(arg, AssocConstraint):
		return f"{arg.name}: {render_bounds(arg.bounds)}"
	return render_type(arg)


def render_segment(seg: PathSegment) -> str:
	if seg.inputs is not None:
		text = f"{seg.name}({', '.join(render_type(t) for t in seg.inputs)})"
		if seg.output is not None:
			text += f" -> {render_type(seg.output)}"
		return text
	if seg.args is None:
		return seg.name
	return f"{seg.name}<{', '.join(render_generic_arg(a) for a in seg.args)}>"


def render_path(path: Path) -> str:
	text = "::".join(render_segment(s) for s in path.segments)
	return "::" + text if path.leading_colon else text


def render_abi(abi: Optional[str]) -> str:
	if abi is None:
		return ""
	return f"extern {abi} " if abi else "extern "


def render_type(ty: TypeExpr) -> str:
	"""Canonical Rust text of a type."""
	if isinstance(ty, PathType):
		if ty.qself is None:
			return render_path(ty.path)
		inner = render_type(ty.qself.ty)
		if ty.qself.trait_path is not None:
			inner += f" as {render_path(ty.qself.trait_path)}"
		return f"<{inner}>::{render_path(ty.path)}"
	if isinstance(ty, RefType):
		text = "&"
		if ty.lifetime is not None:
			text += ty.lifetime.name + " "
		if ty.mutable:
			text += "mut "
		return text + render_type(ty.inner)
	if isinstance(ty, ParenType):
		return f"({render_type(ty.inner)})"
	if isinstance(ty, ArrayType):
		return f"[{render_type(ty.elem)}; {ty.length.text}]"
	if isinstance(ty, SliceType):
		return f"[{render_type(ty.elem)}]"
	if isinstance(ty, TupleType):
		if len(ty.elems) == 1:
			return f"({render_type(ty.elems[0])},)"
		return f"({', '.join(render_type(e) for e in ty.elems)})"
	if isinstance(ty, PtrType):
		return ("*mut " if ty.mutable else "*const ") + render_type(ty.inner)
	if isinstance(ty, FnPtrType):
		text = ""
		if ty.lifetimes:
			text += f"for<{', '.join(lt.name for lt in ty.lifetimes)}> "
		if ty.unsafe:
			text += "unsafe "
		text += render_abi(ty.abi)
		args = []
		for arg in ty.inputs:
			rendered = render_type(arg.ty)
			args.append(f"{arg.name}: {rendered}" if arg.name is not None else rendered)
		text += f"fn({', '.join(args)})"
		if ty.output is not None:
			text += f" -> {render_type(ty.output)}"
		return text
	if isinstance(ty, DynType):
		return f"dyn {render_bounds(ty.bounds)}"
	if isinstance(ty, ImplType):
		return f"impl {render_bounds(ty.bounds)}"
	if isinstance(ty, NeverType):
		return "!"
	if isinstance(ty, InferType):
		return "_"
	raise TypeError(f"unknown type node {type(ty).__name__}")


__all__ = [
	"iter_lifetimes",
	"iter_types",
	"render_abi",
	"render_bound",
	"render_bounds",
	"render_generic_arg",
	"render_path",
	"render_segment",
	"render_type",
	"strip_parens",
	"strip_reference",
	"type_depth",
	"type_parts",
]
