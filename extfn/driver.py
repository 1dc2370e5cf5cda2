# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
File-level driver and CLI.

The driver does not parse whole Rust files. It splits the source into token
trees, looks for `#[extfn]` attributes at module level (including inside
inline `mod name { ... }` blocks), carves out the annotated function, and
parses only that. Everything outside the annotated functions is copied
through byte for byte.

Positions stay file-accurate: the function is parsed from a copy of the file
in which everything before the function is blanked out (newlines kept) and
the triggering attribute is replaced by spaces.
"""

from __future__ import annotations

import argparse
import bisect
import json
import logging
import re
import sys
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from lark import Token, Tree
from lark.exceptions import UnexpectedInput

from extfn.config import TRAIT_NAMING_MODES, ExpandConfig, load_config_json
from extfn.core.diagnostics import Diagnostic, ExpansionError
from extfn.core.span import Span
from extfn.expand import TypeTooDeep, expand_function
from extfn.parser import parse_error_diagnostic, parse_function, split_attribute_text, tokenize_tree
from extfn.parser.ast import Located
from extfn.printer import render_artifact

logger = logging.getLogger(__name__)

_NON_NEWLINE_RE = re.compile(r"[^\n]")


@dataclass
class ExpandResult:
	"""Expanded text plus diagnostics for one source file."""

	text: str
	diagnostics: List[Diagnostic] = field(default_factory=list)
	expanded: int = 0  # number of functions replaced

	@property
	def ok(self) -> bool:
		return not any(d.severity == "error" for d in self.diagnostics)


@dataclass
class _Annotation:
	attr_start: int  # offset of `#`
	attr_end: int  # offset just past `]`
	args: str
	args_offset: int
	item_start: int
	children: list  # sibling token trees
	index: int  # index of the `#` token in `children`


class _LineIndex:
	"""Offset → 1-based (line, column) for one source text."""

	def __init__(self, text: str) -> None:
		self._starts = [0]
		for m in re.finditer("\n", text):
			self._starts.append(m.end())

	def loc(self, offset: int) -> Located:
		line = bisect.bisect_right(self._starts, offset) - 1
		return Located(line=line + 1, column=offset - self._starts[line] + 1)

	def line_start(self, offset: int) -> int:
		return self._starts[bisect.bisect_right(self._starts, offset) - 1]


def _start(node) -> int:
	return node.start_pos if isinstance(node, Token) else node.meta.start_pos


def _end(node) -> int:
	return node.end_pos if isinstance(node, Token) else node.meta.end_pos


def _is_atom(node, value: Optional[str] = None) -> bool:
	if not isinstance(node, Token) or node.type != "TT_ATOM":
		return False
	return value is None or node.value == value


def _is_group(node, kind: str) -> bool:
	return isinstance(node, Tree) and node.data == kind


def _is_outer_attr(children: list, idx: int) -> bool:
	return (
		idx + 1 < len(children)
		and _is_atom(children[idx], "#")
		and _is_group(children[idx + 1], "bracket_tt")
	)


def _find_annotations(text: str, children: list, config: ExpandConfig) -> List[_Annotation]:
	found: List[_Annotation] = []
	idx = 0
	while idx < len(children):
		node = children[idx]
		if (
			_is_atom(node, "mod")
			and idx + 2 < len(children)
			and _is_atom(children[idx + 1])
			and _is_group(children[idx + 2], "brace_tt")
		):
			found.extend(_find_annotations(text, children[idx + 2].children, config))
			idx += 3
			continue
		if _is_outer_attr(children, idx):
			group = children[idx + 1]
			inner_start = _start(group) + 1
			inner = text[inner_start : _end(group) - 1]
			path, args = split_attribute_text(inner)
			if path in config.attribute_paths:
				found.append(
					_Annotation(
						attr_start=_start(node),
						attr_end=_end(group),
						args=args,
						args_offset=inner_start + len(inner) - len(args),
						item_start=_item_start(children, idx),
						children=children,
						index=idx,
					)
				)
			idx += 2
			continue
		idx += 1
	return found


def _item_start(children: list, idx: int) -> int:
	"""Walk back over the contiguous attributes and doc comments preceding `children[idx]`."""
	start = _start(children[idx])
	j = idx
	while j > 0:
		prev = children[j - 1]
		if isinstance(prev, Token) and prev.type == "DOC_COMMENT":
			j -= 1
		elif j >= 2 and _is_outer_attr(children, j - 2):
			j -= 2
		else:
			break
		start = _start(children[j])
	return start


def _masked(text: str, ann: _Annotation, end: int) -> str:
	prefix = _NON_NEWLINE_RE.sub(" ", text[: ann.item_start])
	before = text[ann.item_start : ann.attr_start]
	attr = _NON_NEWLINE_RE.sub(" ", text[ann.attr_start : ann.attr_end])
	return prefix + before + attr + text[ann.attr_end : end]


def _parse_annotated(text: str, ann: _Annotation):
	"""
	Parse the function an annotation is attached to.

	The function ends at one of the following top-level brace groups; each is
	tried in order until one yields a complete function. Returns `(fn, end)`
	or raises the first parse error.
	"""
	first_err: Optional[UnexpectedInput] = None
	for node in ann.children[ann.index + 2 :]:
		if _is_atom(node) and ";" in node.value:
			break
		if not _is_group(node, "brace_tt"):
			continue
		end = _end(node)
		try:
			return parse_function(_masked(text, ann, end)), end
		except UnexpectedInput as err:
			if first_err is None:
				first_err = err
	if first_err is not None:
		raise first_err
	return None, None


def _with_file(diag: Diagnostic, file: Optional[str]) -> Diagnostic:
	return replace(diag, span=Span.from_loc(diag.span, file=file))


def expand_source(text: str, path: Optional[str] = None, config: Optional[ExpandConfig] = None) -> ExpandResult:
	"""
	Expand every `#[extfn]` function in `text`.

	A function that fails to expand is left untouched and contributes exactly
	one diagnostic; the others are still expanded.
	"""
	cfg = config or ExpandConfig()
	try:
		tree = tokenize_tree(text)
	except UnexpectedInput as err:
		return ExpandResult(text=text, diagnostics=[parse_error_diagnostic(err, file=path)])

	lines = _LineIndex(text)
	diagnostics: List[Diagnostic] = []
	replacements: List[Tuple[int, int, str]] = []
	for ann in _find_annotations(text, tree.children, cfg):
		attr_loc = lines.loc(ann.attr_start)
		try:
			if ann.args.strip():
				expand_args_loc = lines.loc(ann.args_offset + len(ann.args) - len(ann.args.lstrip()))
			else:
				expand_args_loc = attr_loc
			fn, end = _parse_annotated(text, ann)
			if fn is None:
				diagnostics.append(
					Diagnostic(
						message="expected a function after the extfn attribute",
						code="E-EXTFN-NOT-FN",
						phase="driver",
						span=Span.from_loc(attr_loc, file=path),
					)
				)
				continue
			artifact = expand_function(fn, attr_args=ann.args, attr_loc=expand_args_loc, config=cfg)
		except ExpansionError as err:
			diagnostics.append(_with_file(err.diagnostic, path))
			continue
		except UnexpectedInput as err:
			diagnostics.append(parse_error_diagnostic(err, file=path))
			continue
		except RecursionError:
			diagnostics.append(_with_file(TypeTooDeep(attr_loc).diagnostic, path))
			continue
		indent_start = lines.line_start(ann.item_start)
		indent = text[indent_start : ann.item_start]
		if indent.strip():
			indent = ""
		rendered = render_artifact(artifact, indent)[len(indent) :]
		replacements.append((ann.item_start, end, rendered))
		logger.debug("expanded %s at %s:%d", fn.sig.name, path or "<input>", attr_loc.line)

	out = text
	for start, end, rendered in sorted(replacements, reverse=True):
		out = out[:start] + rendered + out[end:]
	return ExpandResult(text=out, diagnostics=diagnostics, expanded=len(replacements))


def expand_file(path: Path, config: Optional[ExpandConfig] = None) -> ExpandResult:
	return expand_source(path.read_text(encoding="utf-8"), str(path), config)


# ---------------------------------------------------------------- CLI


def _diag_to_json(diag: Diagnostic, phase: str, source: Path) -> dict:
	"""Render a Diagnostic to a structured JSON-friendly dict."""
	file = diag.span.file if diag.span.file is not None else str(source)
	return {
		"phase": diag.phase or phase,
		"code": diag.code,
		"message": diag.message,
		"severity": diag.severity,
		"file": file,
		"line": diag.span.line,
		"column": diag.span.column,
		"notes": list(diag.notes),
	}


def _print_human(diags: Sequence[Tuple[Path, Diagnostic]]) -> None:
	for source, d in diags:
		print(d.render(str(source)), file=sys.stderr)
		for note in d.notes:
			print(f"  note: {note}", file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
	"""
	Expand `#[extfn]` functions in Rust source files.

	Without `-o`/`--in-place` the expanded text goes to stdout (not with
	`--json`, where stdout carries the diagnostics payload). With --json,
	prints structured diagnostics (phase/code/message/severity/file/line/column)
	and an exit_code; otherwise prints human-readable messages to stderr.
	"""
	parser = argparse.ArgumentParser(prog="extfn", description="Expand #[extfn] functions into a trait and its impl")
	parser.add_argument("sources", nargs="+", type=Path, help="Rust source files")
	parser.add_argument("-o", "--output", type=Path, help="write the expanded file here (single source only)")
	parser.add_argument("--in-place", action="store_true", help="rewrite each source file")
	parser.add_argument("--check", action="store_true", help="only report diagnostics; write nothing")
	parser.add_argument("--json", action="store_true", help="emit diagnostics as JSON on stdout")
	parser.add_argument("--config", type=Path, help="JSON config file (format extfn-config, version 0)")
	parser.add_argument("--trait-naming", choices=TRAIT_NAMING_MODES, help="override the trait naming mode")
	parser.add_argument("-v", "--verbose", action="store_true", help="debug logging on stderr")
	args = parser.parse_args(argv)

	logging.basicConfig(
		level=logging.DEBUG if args.verbose else logging.WARNING,
		format="%(levelname)s %(name)s: %(message)s",
	)
	if args.output is not None and (len(args.sources) != 1 or args.in_place):
		parser.error("-o/--output needs exactly one source and no --in-place")

	collected: List[Tuple[Path, Diagnostic]] = []
	config = ExpandConfig()
	if args.config is not None:
		try:
			config = load_config_json(args.config)
		except (OSError, ValueError) as err:
			collected.append(
				(
					args.config,
					Diagnostic(
						message=f"invalid config: {err}",
						code="E-CONFIG",
						phase="config",
						span=Span(file=str(args.config)),
					),
				)
			)
	config = config.with_overrides(trait_naming=args.trait_naming)

	outputs: List[Tuple[Path, ExpandResult]] = []
	if not collected:
		for source in args.sources:
			try:
				result = expand_file(source, config)
			except OSError as err:
				collected.append(
					(
						source,
						Diagnostic(
							message=f"cannot read source: {err.strerror or err}",
							code="E-IO",
							phase="driver",
							span=Span(file=str(source)),
						),
					)
				)
				continue
			logger.info("%s: %d function(s) expanded", source, result.expanded)
			collected.extend((source, d) for d in result.diagnostics)
			outputs.append((source, result))

	if not args.check:
		for source, result in outputs:
			if args.in_place:
				if result.expanded:
					source.write_text(result.text, encoding="utf-8")
			elif args.output is not None:
				args.output.write_text(result.text, encoding="utf-8")
			elif not args.json:
				sys.stdout.write(result.text)

	exit_code = 1 if collected else 0
	if args.json:
		payload = {
			"exit_code": exit_code,
			"diagnostics": [_diag_to_json(d, "driver", source) for source, d in collected],
		}
		print(json.dumps(payload))
	else:
		_print_human(collected)
	return exit_code


__all__ = ["ExpandResult", "expand_file", "expand_source", "main"]
