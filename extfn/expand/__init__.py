"""
extfn.expand: turn one `#[extfn]` function into a trait plus its impl.

Stages (one module each):
  - validate: attribute arguments and the `self: T` parameter
  - target: subject type extraction and receiver simplification
  - partition: generics used by the subject type vs. kept on the method
  - impl_trait: `impl Bounds` → fresh named generics
  - bounds: inline bounds → impl where clause
  - synthesize: trait and impl assembly
  - pipeline: the stages in order
"""

from .errors import (
	AttributeArgumentsNotAllowed,
	InvalidSubjectParameter,
	MissingSubjectParameter,
	TypeTooDeep,
	UntypedSubject,
)
from .impl_trait import MAX_TYPE_DEPTH, ImplTraitRewriter
from .partition import partition_generics, uses_generic_param
from .pipeline import expand_function
from .synthesize import ExtensionArtifact, trait_name_for

__all__ = [
	"AttributeArgumentsNotAllowed",
	"ExtensionArtifact",
	"ImplTraitRewriter",
	"InvalidSubjectParameter",
	"MAX_TYPE_DEPTH",
	"MissingSubjectParameter",
	"TypeTooDeep",
	"UntypedSubject",
	"expand_function",
	"partition_generics",
	"trait_name_for",
	"uses_generic_param",
]
