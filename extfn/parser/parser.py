# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Rust item parser (lark LALR) and tree → AST builder.

Entry points:
  fn_start      a single function item (what `#[extfn]` is attached to)
  items_start   a sequence of fn/trait/impl items (rendered expansion output)
  tokens_start  a whole source file as token trees (used by the driver); this
                one has its own keyword-free grammar, token_trees.lark

The builder walks lark trees the same way for every rule: look at the rule
name, pick children by rule/terminal name, and slice verbatim text out of the
source for the pieces kept opaque (bodies, patterns, attribute arguments).
"""

from __future__ import annotations

import re
from pathlib import Path as FsPath
from typing import List, Optional, Tuple

from lark import Lark, Token, Tree

from .ast import (
	ArrayType,
	AssocConstraint,
	AssocType,
	Attribute,
	Block,
	Bound,
	ConstArg,
	ConstParam,
	DynType,
	FnItem,
	FnParam,
	FnPtrArg,
	FnPtrType,
	FnQualifiers,
	FnSig,
	GenericArg,
	GenericParam,
	Generics,
	ImplDef,
	ImplType,
	InferType,
	Item,
	Lifetime,
	LifetimeParam,
	LifetimePredicate,
	Located,
	NeverType,
	ParenType,
	Path,
	PathSegment,
	PathType,
	Pattern,
	PtrType,
	QSelf,
	Receiver,
	RefType,
	SliceType,
	TraitBound,
	TraitDef,
	TupleType,
	TypeExpr,
	TypeParam,
	TypedParam,
	TypePredicate,
	Visibility,
	WhereClause,
	WherePredicate,
)

_GRAMMAR_PATH = FsPath(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()

_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	lexer="contextual",
	start=["fn_start", "items_start"],
	propagate_positions=True,
	maybe_placeholders=False,
)

_TT_GRAMMAR_SRC = _GRAMMAR_PATH.with_name("token_trees.lark").read_text()

_TT_PARSER = Lark(
	_TT_GRAMMAR_SRC,
	parser="lalr",
	lexer="basic",
	start="tokens_start",
	propagate_positions=True,
	maybe_placeholders=False,
)

_TYPE_RULES = {
	"path_type",
	"qself_type",
	"fn_ptr_type",
	"ref_type",
	"paren_type",
	"tuple_type",
	"array_type",
	"slice_type",
	"ptr_type",
	"never_type",
	"infer_type",
	"impl_type",
	"dyn_type",
}

_WILD_ARG_RE = re.compile(r"_\s*:(?!:)")
_ATTR_PATH_RE = re.compile(r"\s*(::\s*)?[A-Za-z_][A-Za-z0-9_]*(\s*::\s*[A-Za-z_][A-Za-z0-9_]*)*")


class AstShapeError(ValueError):
	"""
	Raised when the parse tree has a shape the builder does not know.

	This only happens when the grammar and the builder drift apart; user input
	errors surface as `lark.exceptions.UnexpectedInput` instead.
	"""


def parse_function(source: str) -> FnItem:
	"""Parse exactly one function item (attributes, visibility, signature, body)."""
	tree = _PARSER.parse(source, start="fn_start")
	return _Builder(source).fn_item(_only_tree(tree))


def parse_items(source: str) -> List[Item]:
	"""Parse a sequence of fn/trait/impl items."""
	tree = _PARSER.parse(source, start="items_start")
	builder = _Builder(source)
	items: List[Item] = []
	for child in _trees(tree):
		kind = _name(child)
		if kind == "fn_item":
			items.append(builder.fn_item(child))
		elif kind == "trait_item":
			items.append(builder.trait_item(child))
		elif kind == "impl_item":
			items.append(builder.impl_item(child))
		else:
			raise AstShapeError(f"unexpected item node '{kind}'")
	return items


def tokenize_tree(source: str) -> Tree:
	"""
	Split a whole source file into token trees.

	The result is a `tokens_start` tree whose children are either tokens
	(`TT_ATOM`, `STRING`, `RAW_STRING`, `CHAR`, `LIFETIME`, `DOC_COMMENT`) or
	delimited groups (`paren_tt`, `bracket_tt`, `brace_tt`) carrying source
	positions. Comments and whitespace are dropped.
	"""
	return _TT_PARSER.parse(source)


class _Builder:
	def __init__(self, source: str) -> None:
		self.src = source

	def text(self, node: Tree | Token) -> str:
		if isinstance(node, Token):
			return str(node.value)
		return self.src[node.meta.start_pos : node.meta.end_pos]

	# Items --------------------------------------------------------------

	def fn_item(self, tree: Tree) -> FnItem:
		attrs: List[Attribute] = []
		vis: Optional[Visibility] = None
		sig: Optional[FnSig] = None
		body: Optional[Block] = None
		for child in _trees(tree):
			kind = _name(child)
			if kind == "attrs":
				attrs = self.attrs(child)
			elif kind == "visibility":
				vis = self.visibility(child)
			elif kind == "fn_sig":
				sig = self.fn_sig(child)
			elif kind == "fn_body":
				body = Block(text=self.text(child))
		if sig is None:
			raise AstShapeError("function item without a signature")
		return FnItem(sig=sig, body=body, attrs=attrs, vis=vis, loc=_loc(tree))

	def trait_item(self, tree: Tree) -> TraitDef:
		name_tok = _first_token(tree, "NAME")
		attrs: List[Attribute] = []
		vis: Optional[Visibility] = None
		generics = Generics()
		items: List[FnItem] = []
		for child in _trees(tree):
			kind = _name(child)
			if kind == "attrs":
				attrs = self.attrs(child)
			elif kind == "visibility":
				vis = self.visibility(child)
			elif kind == "generic_params":
				generics.params = self.generic_params(child)
			elif kind == "where_clause":
				generics.where_clause = self.where_clause(child)
			elif kind == "trait_fn":
				items.append(self.trait_fn(child))
		return TraitDef(
			name=name_tok.value,
			items=items,
			generics=generics,
			attrs=attrs,
			vis=vis,
			loc=_loc(tree),
		)

	def trait_fn(self, tree: Tree) -> FnItem:
		attrs: List[Attribute] = []
		sig: Optional[FnSig] = None
		for child in _trees(tree):
			if _name(child) == "attrs":
				attrs = self.attrs(child)
			elif _name(child) == "fn_sig":
				sig = self.fn_sig(child)
		if sig is None:
			raise AstShapeError("trait method without a signature")
		return FnItem(sig=sig, body=None, attrs=attrs, loc=_loc(tree))

	def impl_item(self, tree: Tree) -> ImplDef:
		attrs: List[Attribute] = []
		generics = Generics()
		trait_path: Optional[Path] = None
		self_ty: Optional[TypeExpr] = None
		items: List[FnItem] = []
		for child in _trees(tree):
			kind = _name(child)
			if kind == "attrs":
				attrs = self.attrs(child)
			elif kind == "generic_params":
				generics.params = self.generic_params(child)
			elif kind == "path":
				trait_path = self.path(child)
			elif kind in _TYPE_RULES:
				self_ty = self.type_expr(child)
			elif kind == "where_clause":
				generics.where_clause = self.where_clause(child)
			elif kind == "fn_item":
				items.append(self.fn_item(child))
		if trait_path is None or self_ty is None:
			raise AstShapeError("impl block without a trait path or self type")
		return ImplDef(
			trait_path=trait_path,
			self_ty=self_ty,
			items=items,
			generics=generics,
			attrs=attrs,
			loc=_loc(tree),
		)

	def attrs(self, tree: Tree) -> List[Attribute]:
		out: List[Attribute] = []
		for child in _trees(tree):
			if _name(child) == "doc_comment":
				tok = _first_token(child, "DOC_COMMENT")
				out.append(Attribute(path="doc", doc_comment=tok.value, loc=_loc_from_token(tok)))
			elif _name(child) == "attribute":
				group = next(c for c in _trees(child) if _name(c) == "attr_group")
				inner = self.text(group)[1:-1]
				out.append(_split_attribute(inner, _loc(child)))
		return out

	def visibility(self, tree: Tree) -> Visibility:
		raw = " ".join(self.text(tree).split())
		raw = re.sub(r"\(\s*", "(", raw)
		raw = re.sub(r"\s*\)", ")", raw)
		raw = re.sub(r"\s*::\s*", "::", raw)
		return Visibility(text=raw.replace("pub (", "pub("))

	# Signatures ---------------------------------------------------------

	def fn_sig(self, tree: Tree) -> FnSig:
		name_tok = _first_token(tree, "NAME")
		qualifiers = FnQualifiers()
		generics = Generics()
		params: List[FnParam] = []
		params_loc: Optional[Located] = None
		output: Optional[TypeExpr] = None
		for child in _trees(tree):
			kind = _name(child)
			if kind == "fn_qualifiers":
				qualifiers = self.fn_qualifiers(child)
			elif kind == "generic_params":
				generics.params = self.generic_params(child)
			elif kind == "param_list":
				params_loc = _loc(child)
				params = [self.fn_param(p) for p in _trees(child)]
			elif kind == "ret_type":
				output = self.type_expr(_only_tree(child))
			elif kind == "where_clause":
				generics.where_clause = self.where_clause(child)
		return FnSig(
			name=name_tok.value,
			params=params,
			output=output,
			generics=generics,
			qualifiers=qualifiers,
			loc=_loc_from_token(name_tok),
			params_loc=params_loc,
		)

	def fn_qualifiers(self, tree: Tree) -> FnQualifiers:
		quals = FnQualifiers()
		for child in tree.children:
			if isinstance(child, Token):
				if child.type == "CONST":
					quals.const = True
				elif child.type == "ASYNC":
					quals.is_async = True
				elif child.type == "UNSAFE":
					quals.unsafe = True
			elif _name(child) == "abi":
				quals.abi = self.abi(child)
		return quals

	def abi(self, tree: Tree) -> str:
		tok = _first_token(tree, "STRING", required=False)
		return tok.value if tok is not None else ""

	def fn_param(self, tree: Tree) -> FnParam:
		kind = _name(tree)
		if kind == "ref_receiver":
			lt = _first_token(tree, "LIFETIME", required=False)
			return Receiver(
				reference=True,
				lifetime=_lifetime(lt) if lt is not None else None,
				mutable=_has_token(tree, "MUT"),
				loc=_loc(tree),
			)
		if kind == "value_receiver":
			ty_node = next(_trees(tree), None)
			return Receiver(
				mutable=_has_token(tree, "MUT"),
				ty=self.type_expr(ty_node) if ty_node is not None else None,
				loc=_loc(tree),
			)
		if kind == "typed_param":
			pat_node, ty_node = list(_trees(tree))
			return TypedParam(
				pat=Pattern(text=self.text(pat_node), loc=_loc(pat_node)),
				ty=self.type_expr(ty_node),
				loc=_loc(tree),
			)
		raise AstShapeError(f"unexpected parameter node '{kind}'")

	# Generics -----------------------------------------------------------

	def generic_params(self, tree: Tree) -> List[GenericParam]:
		params: List[GenericParam] = []
		for child in _trees(tree):
			kind = _name(child)
			if kind == "lifetime_param":
				lt = _first_token(child, "LIFETIME")
				bounds_node = next(_trees(child), None)
				params.append(
					LifetimeParam(
						lifetime=_lifetime(lt),
						bounds=self.lifetime_bounds(bounds_node) if bounds_node is not None else [],
					)
				)
			elif kind == "type_param":
				name_tok = _first_token(child, "NAME")
				bounds_node = next(_trees(child), None)
				params.append(
					TypeParam(
						name=name_tok.value,
						bounds=self.bounds(bounds_node) if bounds_node is not None else [],
						loc=_loc(child),
					)
				)
			elif kind == "const_param":
				name_tok = _first_token(child, "NAME")
				params.append(ConstParam(name=name_tok.value, ty=self.type_expr(_only_tree(child)), loc=_loc(child)))
			else:
				raise AstShapeError(f"unexpected generic parameter node '{kind}'")
		return params

	def lifetime_bounds(self, tree: Tree) -> List[Lifetime]:
		return [_lifetime(tok) for tok in tree.children if isinstance(tok, Token) and tok.type == "LIFETIME"]

	def where_clause(self, tree: Tree) -> WhereClause:
		preds: List[WherePredicate] = []
		for child in _trees(tree):
			kind = _name(child)
			if kind == "lifetime_pred":
				lt = _first_token(child, "LIFETIME")
				bounds_node = next(_trees(child), None)
				preds.append(
					LifetimePredicate(
						lifetime=_lifetime(lt),
						bounds=self.lifetime_bounds(bounds_node) if bounds_node is not None else [],
					)
				)
			elif kind == "type_pred":
				nodes = list(_trees(child))
				bounded = self.type_expr(nodes[0])
				bounds = self.bounds(nodes[1]) if len(nodes) > 1 else []
				preds.append(TypePredicate(bounded_ty=bounded, bounds=bounds))
			else:
				raise AstShapeError(f"unexpected where predicate node '{kind}'")
		return WhereClause(predicates=preds)

	def bounds(self, tree: Tree) -> List[Bound]:
		out: List[Bound] = []
		for bound in _trees(tree):
			inner = bound.children[0]
			if isinstance(inner, Token):
				out.append(_lifetime(inner))
			else:
				out.append(self.trait_bound(inner))
		return out

	def trait_bound(self, tree: Tree) -> TraitBound:
		lifetimes: List[Lifetime] = []
		path: Optional[Path] = None
		for child in _trees(tree):
			if _name(child) == "for_lifetimes":
				lifetimes = self.lifetime_bounds(child)
			elif _name(child) == "path":
				path = self.path(child)
		if path is None:
			raise AstShapeError("trait bound without a path")
		return TraitBound(path=path, maybe=_has_token(tree, "MAYBE"), lifetimes=lifetimes)

	# Types --------------------------------------------------------------

	def type_expr(self, tree: Tree) -> TypeExpr:
		kind = _name(tree)
		loc = _loc(tree)
		if kind == "path_type":
			return PathType(path=self.path(_only_tree(tree)), loc=loc)
		if kind == "qself_type":
			nodes = list(_trees(tree))
			qself_ty = self.type_expr(nodes[0])
			trait_path: Optional[Path] = None
			rest = nodes[1:]
			if rest and _name(rest[0]) == "path":
				trait_path = self.path(rest[0])
				rest = rest[1:]
			return PathType(
				path=Path(segments=[self.segment(s) for s in rest]),
				qself=QSelf(ty=qself_ty, trait_path=trait_path),
				loc=loc,
			)
		if kind == "ref_type":
			lt = _first_token(tree, "LIFETIME", required=False)
			return RefType(
				inner=self.type_expr(_only_tree(tree)),
				lifetime=_lifetime(lt) if lt is not None else None,
				mutable=_has_token(tree, "MUT"),
				loc=loc,
			)
		if kind == "paren_type":
			return ParenType(inner=self.type_expr(_only_tree(tree)), loc=loc)
		if kind == "tuple_type":
			return TupleType(elems=[self.type_expr(t) for t in _trees(tree)], loc=loc)
		if kind == "array_type":
			elem_node, len_node = list(_trees(tree))
			return ArrayType(elem=self.type_expr(elem_node), length=ConstArg(text=self.text(len_node)), loc=loc)
		if kind == "slice_type":
			return SliceType(elem=self.type_expr(_only_tree(tree)), loc=loc)
		if kind == "ptr_type":
			return PtrType(inner=self.type_expr(_only_tree(tree)), mutable=_has_token(tree, "MUT"), loc=loc)
		if kind == "fn_ptr_type":
			return self.fn_ptr_type(tree)
		if kind == "never_type":
			return NeverType(loc=loc)
		if kind == "infer_type":
			return InferType(loc=loc)
		if kind == "impl_type":
			return ImplType(bounds=self.bounds(_only_tree(tree)), loc=loc)
		if kind == "dyn_type":
			return DynType(bounds=self.bounds(_only_tree(tree)), loc=loc)
		raise AstShapeError(f"unexpected type node '{kind}'")

	def fn_ptr_type(self, tree: Tree) -> FnPtrType:
		ty = FnPtrType(loc=_loc(tree), unsafe=_has_token(tree, "UNSAFE"))
		for child in _trees(tree):
			kind = _name(child)
			if kind == "for_lifetimes":
				ty.lifetimes = self.lifetime_bounds(child)
			elif kind == "abi":
				ty.abi = self.abi(child)
			elif kind == "fn_ptr_arg":
				name_tok = _first_token(child, "NAME", required=False)
				arg_ty = self.type_expr(_only_tree(child))
				if name_tok is not None:
					ty.inputs.append(FnPtrArg(ty=arg_ty, name=name_tok.value))
				elif _WILD_ARG_RE.match(self.text(child)):
					# `_: T`; the anonymous `_` token is filtered from the tree.
					ty.inputs.append(FnPtrArg(ty=arg_ty, name="_"))
				else:
					ty.inputs.append(FnPtrArg(ty=arg_ty))
			elif kind == "ret_type":
				ty.output = self.type_expr(_only_tree(child))
		return ty

	def path(self, tree: Tree) -> Path:
		leading = False
		segments: List[PathSegment] = []
		for child in _trees(tree):
			if _name(child) == "leading_colon":
				leading = True
			else:
				segments.append(self.segment(child))
		return Path(segments=segments, leading_colon=leading)

	def segment(self, tree: Tree) -> PathSegment:
		name_tok = _first_token(tree, "NAME")
		kind = _name(tree)
		if kind == "path_segment":
			args_node = next(_trees(tree), None)
			args = self.generic_args(args_node) if args_node is not None else None
			return PathSegment(name=name_tok.value, args=args)
		if kind == "fn_segment":
			inputs: List[TypeExpr] = []
			output: Optional[TypeExpr] = None
			for child in _trees(tree):
				if _name(child) == "ret_type":
					output = self.type_expr(_only_tree(child))
				else:
					inputs.append(self.type_expr(child))
			return PathSegment(name=name_tok.value, inputs=inputs, output=output)
		raise AstShapeError(f"unexpected path segment node '{kind}'")

	def generic_args(self, tree: Tree) -> List[GenericArg]:
		args: List[GenericArg] = []
		for child in _trees(tree):
			kind = _name(child)
			if kind == "lifetime_arg":
				args.append(_lifetime(_first_token(child, "LIFETIME")))
			elif kind == "const_arg":
				args.append(ConstArg(text=self.text(child)))
			elif kind == "assoc_type":
				args.append(AssocType(name=_first_token(child, "NAME").value, ty=self.type_expr(_only_tree(child))))
			elif kind == "assoc_constraint":
				args.append(
					AssocConstraint(name=_first_token(child, "NAME").value, bounds=self.bounds(_only_tree(child)))
				)
			else:
				args.append(self.type_expr(child))
		return args


def split_attribute_text(inner: str) -> Tuple[str, str]:
	"""
	Split the text inside `#[...]` into the attribute path and its verbatim arguments.

	`extfn :: extfn(x)` → (`extfn::extfn`, `(x)`). The path is whitespace-free;
	an attribute that does not start with a path gets an empty path.
	"""
	m = _ATTR_PATH_RE.match(inner)
	if m is None:
		return "", inner
	return re.sub(r"\s+", "", m.group(0)), inner[m.end() :]


def _split_attribute(inner: str, loc: Optional[Located]) -> Attribute:
	path, tokens = split_attribute_text(inner)
	return Attribute(path=path, tokens=tokens, loc=loc)


def _lifetime(tok: Token) -> Lifetime:
	return Lifetime(name=tok.value, loc=_loc_from_token(tok))


def _trees(node: Tree):
	return (child for child in node.children if isinstance(child, Tree))


def _only_tree(node: Tree) -> Tree:
	child = next(_trees(node), None)
	if child is None:
		raise AstShapeError(f"'{_name(node)}' node has no subtree")
	return child


def _first_token(node: Tree, ttype: str, *, required: bool = True) -> Optional[Token]:
	tok = next((c for c in node.children if isinstance(c, Token) and c.type == ttype), None)
	if tok is None and required:
		raise AstShapeError(f"'{_name(node)}' node has no {ttype} token")
	return tok


def _has_token(node: Tree, ttype: str) -> bool:
	return any(isinstance(c, Token) and c.type == ttype for c in node.children)


def _loc(tree: Tree) -> Optional[Located]:
	meta = tree.meta
	if getattr(meta, "empty", True):
		return None
	return Located(line=meta.line, column=meta.column)


def _loc_from_token(token: Token) -> Located:
	return Located(line=token.line, column=token.column)


def _name(node: Tree | Token) -> str:
	if isinstance(node, Tree):
		data = node.data
		if isinstance(data, Token):
			return data.value
		return data
	if isinstance(node, Token):
		return node.type
	return str(node)


__all__ = ["AstShapeError", "parse_function", "parse_items", "split_attribute_text", "tokenize_tree"]
