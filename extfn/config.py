# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Expansion configuration.

The defaults reproduce the canonical output. A JSON file can change the two
knobs that make sense for a source-to-source tool: how the trait is named and
which attribute paths mark a function for expansion.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional, Tuple

TRAIT_NAMING_MODES = ("verbatim", "camel")
DEFAULT_ATTRIBUTE_PATHS = ("extfn", "extfn::extfn")


@dataclass(frozen=True)
class ExpandConfig:
	"""
	Resolved configuration.

	- `trait_naming`: "verbatim" names the trait exactly like the function;
	  "camel" converts `snake_case` to `SnakeCase`.
	- `attribute_paths`: attribute paths (whitespace-free, `a::b` form) that
	  mark a function for expansion.
	"""

	trait_naming: str = "verbatim"
	attribute_paths: Tuple[str, ...] = DEFAULT_ATTRIBUTE_PATHS

	def __post_init__(self) -> None:
		if self.trait_naming not in TRAIT_NAMING_MODES:
			raise ValueError(f"unknown trait naming mode '{self.trait_naming}'")
		if not self.attribute_paths:
			raise ValueError("at least one attribute path is required")

	def with_overrides(self, *, trait_naming: Optional[str] = None) -> "ExpandConfig":
		if trait_naming is None:
			return self
		return replace(self, trait_naming=trait_naming)


def load_config_json(path: Path) -> ExpandConfig:
	"""
	Load a configuration file.

	Format (pinned for v0, JSON):
	{
	  "format": "extfn-config",
	  "version": 0,
	  "trait_naming": "verbatim" | "camel",   // optional
	  "attribute_paths": ["extfn", "..."]     // optional
	}
	"""
	obj = json.loads(path.read_text(encoding="utf-8"))
	if not isinstance(obj, dict):
		raise ValueError("config must be a JSON object")
	if obj.get("format") != "extfn-config" or obj.get("version") != 0:
		raise ValueError("unsupported config format/version")

	naming = obj.get("trait_naming", "verbatim")
	if not isinstance(naming, str):
		raise ValueError("config trait_naming must be a string")

	paths_obj = obj.get("attribute_paths")
	if paths_obj is None:
		paths = DEFAULT_ATTRIBUTE_PATHS
	else:
		if not isinstance(paths_obj, list) or not all(isinstance(p, str) for p in paths_obj):
			raise ValueError("config attribute_paths must be a list of strings")
		paths = tuple("".join(p.split()) for p in paths_obj)

	return ExpandConfig(trait_naming=naming, attribute_paths=paths)


__all__ = ["DEFAULT_ATTRIBUTE_PATHS", "ExpandConfig", "TRAIT_NAMING_MODES", "load_config_json"]
