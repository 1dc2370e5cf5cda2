# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Render extfn AST items back to Rust source.

Layout is fixed: four-space indentation per nesting level, where clauses on
their own lines with one predicate per line, and function bodies inserted
verbatim (their inner lines are not re-indented). Every line the printer
produces itself is prefixed with the caller's base `indent`, so an expansion
nested inside a `mod` block lines up with its surroundings.
"""

from __future__ import annotations

from typing import List, Optional

from extfn.parser.ast import (
	Attribute,
	ConstParam,
	FnItem,
	FnParam,
	FnQualifiers,
	GenericParam,
	Generics,
	ImplDef,
	Item,
	LifetimeParam,
	LifetimePredicate,
	Receiver,
	TraitDef,
	TypeParam,
	WhereClause,
	WherePredicate,
)
from extfn.types import render_abi, render_bounds, render_path, render_type

INDENT_UNIT = "    "


def render_attribute(attr: Attribute) -> str:
	if attr.doc_comment is not None:
		return attr.doc_comment
	return f"#[{attr.path}{attr.tokens}]"


def render_generic_param(param: GenericParam) -> str:
	if isinstance(param, LifetimeParam):
		if param.bounds:
			return f"{param.name}: {' + '.join(lt.name for lt in param.bounds)}"
		return param.name
	if isinstance(param, TypeParam):
		if param.bounds:
			return f"{param.name}: {render_bounds(param.bounds)}"
		return param.name
	if isinstance(param, ConstParam):
		return f"const {param.name}: {render_type(param.ty)}"
	raise TypeError(f"unknown generic parameter {type(param).__name__}")


def render_generic_params(generics: Generics) -> str:
	if not generics.params:
		return ""
	return f"<{', '.join(render_generic_param(p) for p in generics.params)}>"


def render_where_predicate(pred: WherePredicate) -> str:
	if isinstance(pred, LifetimePredicate):
		return f"{pred.lifetime.name}: {' + '.join(lt.name for lt in pred.bounds)}".rstrip()
	return f"{render_type(pred.bounded_ty)}: {render_bounds(pred.bounds)}".rstrip()


def render_param(param: FnParam) -> str:
	if isinstance(param, Receiver):
		if param.reference:
			text = "&"
			if param.lifetime is not None:
				text += param.lifetime.name + " "
			if param.mutable:
				text += "mut "
			return text + "self"
		text = "mut self" if param.mutable else "self"
		if param.ty is not None:
			text += f": {render_type(param.ty)}"
		return text
	return f"{param.pat.text}: {render_type(param.ty)}"


def render_qualifiers(quals: FnQualifiers) -> str:
	text = ""
	if quals.const:
		text += "const "
	if quals.is_async:
		text += "async "
	if quals.unsafe:
		text += "unsafe "
	return text + render_abi(quals.abi)


def render_fn_head(fn: FnItem) -> str:
	"""`pub async fn name<G>(params) -> Out` without where clause or body."""
	sig = fn.sig
	text = ""
	if fn.vis is not None:
		text += fn.vis.text + " "
	text += render_qualifiers(sig.qualifiers)
	text += f"fn {sig.name}{render_generic_params(sig.generics)}"
	text += f"({', '.join(render_param(p) for p in sig.params)})"
	if sig.output is not None:
		text += f" -> {render_type(sig.output)}"
	return text


def _where_lines(where: Optional[WhereClause], indent: str, *, last_sep: str = ",") -> List[str]:
	if where is None:
		return []
	lines = [indent + "where"]
	preds = where.predicates
	for idx, pred in enumerate(preds):
		sep = last_sep if idx == len(preds) - 1 else ","
		lines.append(indent + INDENT_UNIT + render_where_predicate(pred) + sep)
	return lines


def _attr_lines(attrs: List[Attribute], indent: str) -> List[str]:
	lines: List[str] = []
	for attr in attrs:
		rendered = render_attribute(attr)
		first, *rest = rendered.split("\n")
		lines.append(indent + first)
		lines.extend(rest)
	return lines


def render_fn(fn: FnItem, indent: str = "") -> str:
	"""
	Render a function item or a body-less method declaration.

	Without a where clause the body follows the head on the same line
	(`fn f(self) -> u8 { .. }`); with one, the body opens on its own line
	after the predicates. Declarations end in `;`.
	"""
	lines = _attr_lines(fn.attrs, indent)
	head = indent + render_fn_head(fn)
	where = fn.sig.generics.where_clause
	if fn.body is None:
		if where is None:
			lines.append(head + ";")
		elif not where.predicates:
			lines.extend([head, indent + "where;"])
		else:
			lines.append(head)
			lines.extend(_where_lines(where, indent, last_sep=";"))
		return "\n".join(lines)
	if where is None:
		lines.append(f"{head} {fn.body.text}")
	else:
		lines.append(head)
		lines.extend(_where_lines(where, indent))
		lines.append(indent + fn.body.text)
	return "\n".join(lines)


def _open_block(head: str, where: Optional[WhereClause], indent: str) -> List[str]:
	if where is None:
		return [head + " {"]
	return [head] + _where_lines(where, indent) + [indent + "{"]


def render_trait(trait: TraitDef, indent: str = "") -> str:
	lines = _attr_lines(trait.attrs, indent)
	head = indent
	if trait.vis is not None:
		head += trait.vis.text + " "
	head += f"trait {trait.name}{render_generic_params(trait.generics)}"
	lines.extend(_open_block(head, trait.generics.where_clause, indent))
	for item in trait.items:
		lines.append(render_fn(item, indent + INDENT_UNIT))
	lines.append(indent + "}")
	return "\n".join(lines)


def render_impl(impl: ImplDef, indent: str = "") -> str:
	lines = _attr_lines(impl.attrs, indent)
	head = (
		f"{indent}impl{render_generic_params(impl.generics)} "
		f"{render_path(impl.trait_path)} for {render_type(impl.self_ty)}"
	)
	lines.extend(_open_block(head, impl.generics.where_clause, indent))
	for item in impl.items:
		lines.append(render_fn(item, indent + INDENT_UNIT))
	lines.append(indent + "}")
	return "\n".join(lines)


def render_item(item: Item, indent: str = "") -> str:
	if isinstance(item, FnItem):
		return render_fn(item, indent)
	if isinstance(item, TraitDef):
		return render_trait(item, indent)
	if isinstance(item, ImplDef):
		return render_impl(item, indent)
	raise TypeError(f"unknown item {type(item).__name__}")


def render_items(items: List[Item], indent: str = "") -> str:
	"""Render items separated by newlines (no trailing newline)."""
	return "\n".join(render_item(item, indent) for item in items)


def render_artifact(artifact, indent: str = "") -> str:
	"""Render an `ExtensionArtifact` as the trait followed by its impl."""
	return render_items([artifact.interface, artifact.binding], indent)


__all__ = [
	"INDENT_UNIT",
	"render_artifact",
	"render_attribute",
	"render_fn",
	"render_fn_head",
	"render_generic_param",
	"render_generic_params",
	"render_impl",
	"render_item",
	"render_items",
	"render_param",
	"render_trait",
	"render_where_predicate",
]
