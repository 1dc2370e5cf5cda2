# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Common diagnostic structure for the parser, the expansion passes and the driver.

A Diagnostic is a message plus a stable code, a phase label and a span. The
expansion passes do not collect diagnostics in a sink: they raise
`ExpansionError`, which carries exactly one Diagnostic, and the driver turns
that into a per-function failure.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .span import Span


@dataclass
class Diagnostic:
	"""Represents a diagnostic (error/warning/etc.)."""

	message: str
	code: str | None = None
	# Phase label used in JSON output: "parser", "expand" or "driver".
	phase: str | None = None
	severity: str = "error"
	span: Span = field(default_factory=Span)  # Source location (Span() denotes unknown).
	notes: list[str] = field(default_factory=list)

	def __post_init__(self) -> None:
		if self.span is None:  # type: ignore[unreachable]
			self.span = Span()

	def render(self, default_file: str | None = None) -> str:
		"""Human form: `file:line:col: severity: message`."""
		file = self.span.file or default_file or "<input>"
		line = self.span.line if self.span.line is not None else "?"
		column = self.span.column if self.span.column is not None else "?"
		return f"{file}:{line}:{column}: {self.severity}: {self.message}"


class ExpansionError(ValueError):
	"""Raised by an expansion pass; carries the single Diagnostic describing the failure."""

	def __init__(self, diagnostic: Diagnostic) -> None:
		super().__init__(diagnostic.message)
		self.diagnostic = diagnostic


__all__ = ["Diagnostic", "ExpansionError"]
