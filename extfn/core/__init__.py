"""
extfn.core: shared diagnostic types used by every stage.

Modules:
  - span: best-effort source location
  - diagnostics: Diagnostic record plus the error carrying one
"""

__all__ = [
	"diagnostics",
	"span",
]
