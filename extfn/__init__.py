"""
extfn: rewrite `#[extfn]` Rust functions into an extension trait plus its impl.

Entry points:
  - expand_source / expand_file: whole-file expansion (driver)
  - expand_function: one parsed function → ExtensionArtifact
  - parse_function / parse_items: Rust item parser
  - render_artifact: ExtensionArtifact → Rust text
"""

from extfn.config import ExpandConfig, load_config_json
from extfn.core.diagnostics import Diagnostic, ExpansionError
from extfn.driver import ExpandResult, expand_file, expand_source
from extfn.expand import ExtensionArtifact, expand_function
from extfn.parser import parse_function, parse_items
from extfn.printer import render_artifact

__all__ = [
	"Diagnostic",
	"ExpandConfig",
	"ExpandResult",
	"ExpansionError",
	"ExtensionArtifact",
	"expand_file",
	"expand_function",
	"expand_source",
	"load_config_json",
	"parse_function",
	"parse_items",
	"render_artifact",
]
