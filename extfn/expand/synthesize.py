# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Assemble the trait (capability interface) and its single impl (binding).

Output shape for `#[extfn] pub fn name<P..>(self: S, x: X) -> R { body }`:

    /// docs
    pub trait name<P..> {
        /// docs
        #[allow(async_fn_in_trait, unknown_lints, clippy::allow_attributes)]
        fn name(self, _: X) -> R;
    }
    impl<P..> name<P..> for S
    where
        <hoisted bounds>,
    {
        /// docs
        fn name(self, x: X) -> R { body }
    }
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import List

from extfn.parser.ast import (
	Attribute,
	FnItem,
	GenericArg,
	Generics,
	ImplDef,
	Lifetime,
	LifetimeParam,
	Path,
	PathSegment,
	PathType,
	Pattern,
	Receiver,
	TraitDef,
	TypedParam,
	TypeExpr,
)

ALLOW_ATTRIBUTE = Attribute(
	path="allow",
	tokens="(async_fn_in_trait, unknown_lints, clippy::allow_attributes)",
)


@dataclass
class ExtensionArtifact:
	"""Result of one expansion: the trait declaration and its only impl."""

	interface: TraitDef
	binding: ImplDef


def trait_name_for(fn_name: str, naming: str = "verbatim") -> str:
	"""Trait name derived from the function name (`camel`: `subject_incr` → `SubjectIncr`)."""
	if naming == "verbatim":
		return fn_name
	if naming == "camel":
		raw = fn_name[2:] if fn_name.startswith("r#") else fn_name
		parts = [p for p in raw.split("_") if p]
		if not parts:
			return fn_name
		return "".join(p[:1].upper() + p[1:] for p in parts)
	raise ValueError(f"unknown trait naming mode '{naming}'")


def _trait_args(generics: Generics) -> List[GenericArg]:
	args: List[GenericArg] = []
	for param in generics.params:
		if isinstance(param, LifetimeParam):
			args.append(Lifetime(name=param.name))
		else:
			args.append(PathType.ident(param.name))
	return args


def _declaration(method: FnItem, docs: List[Attribute]) -> FnItem:
	sig = copy.deepcopy(method.sig)
	params = []
	for param in sig.params:
		if isinstance(param, Receiver):
			if not param.reference:
				param.mutable = False
			params.append(param)
		elif isinstance(param, TypedParam):
			params.append(TypedParam(pat=Pattern.wild(), ty=param.ty, loc=param.loc))
	sig.params = params
	attrs = copy.deepcopy(docs) + [copy.deepcopy(ALLOW_ATTRIBUTE)]
	return FnItem(sig=sig, body=None, attrs=attrs, loc=method.loc)


def synthesize(
	method: FnItem,
	subject_ty: TypeExpr,
	impl_generics: Generics,
	*,
	trait_name: str,
) -> ExtensionArtifact:
	"""
	Build the artifact from the already-rewritten pieces.

	`method` is the function as it will appear inside the impl: receiver
	simplified, promoted generics removed, extfn attribute dropped. Its
	visibility moves to the trait.
	"""
	vis = method.vis
	embedded = copy.copy(method)
	embedded.vis = None
	docs = [attr for attr in method.attrs if attr.is_doc]

	interface = TraitDef(
		name=trait_name,
		items=[_declaration(embedded, docs)],
		generics=Generics(params=copy.deepcopy(impl_generics.params)),
		attrs=copy.deepcopy(docs),
		vis=vis,
		loc=method.loc,
	)
	args = _trait_args(impl_generics)
	binding = ImplDef(
		trait_path=Path(segments=[PathSegment(name=trait_name, args=args or None)]),
		self_ty=subject_ty,
		items=[embedded],
		generics=impl_generics,
		loc=method.loc,
	)
	return ExtensionArtifact(interface=interface, binding=binding)


__all__ = ["ALLOW_ATTRIBUTE", "ExtensionArtifact", "synthesize", "trait_name_for"]
