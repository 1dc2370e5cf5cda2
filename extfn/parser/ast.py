# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Rust item AST used by extfn.

The node set covers exactly what the extension-trait expansion consumes and
produces: one function item, one trait with method declarations, one impl
block, and the full type grammar that may appear in a function signature.

Conventions:
  * Every node is a mutable dataclass; expansion works on a deep copy.
  * `loc` fields are excluded from equality so a tree built by hand compares
    equal to the same tree re-parsed from rendered text.
  * Function bodies, patterns, attribute arguments and const expressions are
    kept as verbatim source text; nothing in extfn needs to look inside them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Union


@dataclass(frozen=True)
class Located:
	line: int
	column: int


def _loc() -> Optional[Located]:
	return field(default=None, compare=False, repr=False)


# ---------------------------------------------------------------- types


class TypeExpr:
	"""
	Base of the closed set of type shapes.

	Variants: PathType, RefType, ParenType, ArrayType, SliceType, TupleType,
	PtrType, FnPtrType, DynType, ImplType, NeverType, InferType. Code that
	walks types matches on these exhaustively; there are no other subclasses.
	"""

	loc: Optional[Located]


@dataclass
class Lifetime:
	name: str  # includes the leading quote: "'a"
	loc: Optional[Located] = _loc()


@dataclass
class ConstArg:
	"""Const generic argument or array length, kept as source text (`4`, `N`, `{ N + 1 }`)."""

	text: str


@dataclass
class AssocType:
	"""Associated type binding inside generic arguments: `Item = T`."""

	name: str
	ty: TypeExpr


@dataclass
class AssocConstraint:
	"""Associated type constraint inside generic arguments: `Item: Display`."""

	name: str
	bounds: List["Bound"]


GenericArg = Union[TypeExpr, Lifetime, ConstArg, AssocType, AssocConstraint]


@dataclass
class PathSegment:
	name: str
	# Angle-bracketed arguments. None means no brackets at all; [] means `<>`.
	args: Optional[List[GenericArg]] = None
	# Parenthesized `Fn(A, B) -> C` sugar. Mutually exclusive with `args`.
	inputs: Optional[List[TypeExpr]] = None
	output: Optional[TypeExpr] = None


@dataclass
class Path:
	segments: List[PathSegment]
	leading_colon: bool = False

	@staticmethod
	def ident(name: str) -> "Path":
		return Path(segments=[PathSegment(name=name)])


@dataclass
class QSelf:
	"""Qualified self of `<T as Trait>::Name` (`trait_path` is None for `<T>::Name`)."""

	ty: TypeExpr
	trait_path: Optional[Path] = None


@dataclass
class PathType(TypeExpr):
	path: Path
	qself: Optional[QSelf] = None
	loc: Optional[Located] = _loc()

	@staticmethod
	def ident(name: str) -> "PathType":
		return PathType(path=Path.ident(name))


@dataclass
class RefType(TypeExpr):
	inner: TypeExpr
	lifetime: Optional[Lifetime] = None
	mutable: bool = False
	loc: Optional[Located] = _loc()


@dataclass
class ParenType(TypeExpr):
	inner: TypeExpr
	loc: Optional[Located] = _loc()


@dataclass
class ArrayType(TypeExpr):
	elem: TypeExpr
	length: ConstArg
	loc: Optional[Located] = _loc()


@dataclass
class SliceType(TypeExpr):
	elem: TypeExpr
	loc: Optional[Located] = _loc()


@dataclass
class TupleType(TypeExpr):
	elems: List[TypeExpr] = field(default_factory=list)
	loc: Optional[Located] = _loc()


@dataclass
class PtrType(TypeExpr):
	inner: TypeExpr
	mutable: bool = False
	loc: Optional[Located] = _loc()


@dataclass
class FnPtrArg:
	ty: TypeExpr
	name: Optional[str] = None  # "_" is kept as a name


@dataclass
class FnPtrType(TypeExpr):
	inputs: List[FnPtrArg] = field(default_factory=list)
	output: Optional[TypeExpr] = None
	lifetimes: List[Lifetime] = field(default_factory=list)  # `for<'a>` binder
	unsafe: bool = False
	abi: Optional[str] = None  # None: no `extern`; "": bare `extern`; otherwise the quoted ABI
	loc: Optional[Located] = _loc()


@dataclass
class DynType(TypeExpr):
	bounds: List["Bound"]
	loc: Optional[Located] = _loc()


@dataclass
class ImplType(TypeExpr):
	"""`impl Bounds` in type position: an anonymous generic parameter."""

	bounds: List["Bound"]
	loc: Optional[Located] = _loc()


@dataclass
class NeverType(TypeExpr):
	loc: Optional[Located] = _loc()


@dataclass
class InferType(TypeExpr):
	loc: Optional[Located] = _loc()


@dataclass
class TraitBound:
	path: Path
	maybe: bool = False  # `?Sized`
	lifetimes: List[Lifetime] = field(default_factory=list)  # `for<'a>` binder


Bound = Union[TraitBound, Lifetime]


# ---------------------------------------------------------------- generics


@dataclass
class LifetimeParam:
	lifetime: Lifetime
	bounds: List[Lifetime] = field(default_factory=list)

	@property
	def name(self) -> str:
		return self.lifetime.name


@dataclass
class TypeParam:
	name: str
	bounds: List[Bound] = field(default_factory=list)
	loc: Optional[Located] = _loc()


@dataclass
class ConstParam:
	name: str
	ty: TypeExpr
	loc: Optional[Located] = _loc()


GenericParam = Union[LifetimeParam, TypeParam, ConstParam]


@dataclass
class LifetimePredicate:
	lifetime: Lifetime
	bounds: List[Lifetime] = field(default_factory=list)


@dataclass
class TypePredicate:
	bounded_ty: TypeExpr
	bounds: List[Bound] = field(default_factory=list)


WherePredicate = Union[LifetimePredicate, TypePredicate]


@dataclass
class WhereClause:
	predicates: List[WherePredicate] = field(default_factory=list)


@dataclass
class Generics:
	params: List[GenericParam] = field(default_factory=list)
	where_clause: Optional[WhereClause] = None


# ---------------------------------------------------------------- items


@dataclass
class Attribute:
	"""
	Outer attribute `#[path tokens]` or a doc comment.

	`tokens` is the verbatim text following the path inside the brackets
	(`(async_fn_in_trait)`, ` = "docs"`, or empty). Doc comments keep their
	source form in `doc_comment` and use path `doc`.
	"""

	path: str
	tokens: str = ""
	doc_comment: Optional[str] = None
	loc: Optional[Located] = _loc()

	@property
	def is_doc(self) -> bool:
		if self.path != "doc":
			return False
		return self.doc_comment is not None or self.tokens.lstrip().startswith("=")


@dataclass
class Visibility:
	text: str  # normalized: "pub", "pub(crate)", "pub(in a::b)"


@dataclass
class FnQualifiers:
	const: bool = False
	is_async: bool = False
	unsafe: bool = False
	abi: Optional[str] = None  # same encoding as FnPtrType.abi


@dataclass
class Receiver:
	"""
	The `self` parameter.

	`reference`/`lifetime` describe `&'a self`. `mutable` is the reference
	mutability for `&mut self` and the binding mutability for `mut self`.
	`ty` is set only for the explicitly typed form `self: T`.
	"""

	reference: bool = False
	lifetime: Optional[Lifetime] = None
	mutable: bool = False
	ty: Optional[TypeExpr] = None
	loc: Optional[Located] = _loc()


@dataclass
class Pattern:
	text: str
	loc: Optional[Located] = _loc()

	@staticmethod
	def wild() -> "Pattern":
		return Pattern(text="_")


@dataclass
class TypedParam:
	pat: Pattern
	ty: TypeExpr
	loc: Optional[Located] = _loc()


FnParam = Union[Receiver, TypedParam]


@dataclass
class FnSig:
	name: str
	params: List[FnParam] = field(default_factory=list)
	output: Optional[TypeExpr] = None
	generics: Generics = field(default_factory=Generics)
	qualifiers: FnQualifiers = field(default_factory=FnQualifiers)
	loc: Optional[Located] = _loc()
	# Position of the opening parenthesis of the parameter list.
	params_loc: Optional[Located] = _loc()


@dataclass
class Block:
	"""Function body, verbatim from `{` to `}`."""

	text: str


@dataclass
class FnItem:
	sig: FnSig
	body: Optional[Block] = None  # None for a declaration inside a trait
	attrs: List[Attribute] = field(default_factory=list)
	vis: Optional[Visibility] = None
	loc: Optional[Located] = _loc()


@dataclass
class TraitDef:
	name: str
	items: List[FnItem] = field(default_factory=list)
	generics: Generics = field(default_factory=Generics)
	attrs: List[Attribute] = field(default_factory=list)
	vis: Optional[Visibility] = None
	loc: Optional[Located] = _loc()


@dataclass
class ImplDef:
	trait_path: Path
	self_ty: TypeExpr
	items: List[FnItem] = field(default_factory=list)
	generics: Generics = field(default_factory=Generics)
	attrs: List[Attribute] = field(default_factory=list)
	loc: Optional[Located] = _loc()


Item = Union[FnItem, TraitDef, ImplDef]


__all__ = [
	"ArrayType",
	"AssocConstraint",
	"AssocType",
	"Attribute",
	"Block",
	"Bound",
	"ConstArg",
	"ConstParam",
	"DynType",
	"FnItem",
	"FnParam",
	"FnPtrArg",
	"FnPtrType",
	"FnQualifiers",
	"FnSig",
	"GenericArg",
	"GenericParam",
	"Generics",
	"ImplDef",
	"ImplType",
	"InferType",
	"Item",
	"Lifetime",
	"LifetimeParam",
	"LifetimePredicate",
	"Located",
	"NeverType",
	"ParenType",
	"Path",
	"PathSegment",
	"PathType",
	"Pattern",
	"PtrType",
	"QSelf",
	"Receiver",
	"RefType",
	"SliceType",
	"TraitBound",
	"TraitDef",
	"TupleType",
	"TypeExpr",
	"TypeParam",
	"TypedParam",
	"TypePredicate",
	"Visibility",
	"WhereClause",
	"WherePredicate",
]
