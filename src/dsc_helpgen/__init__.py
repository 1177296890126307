"""
dsc-helpgen: comment-based help scaffolding for PowerShell DSC resources.

Given a resource module (``.psm1``) and its MOF schema (``.schema.mof``),
the package emits one ``<# ... #>`` help block per lifecycle function with
the ``.PARAMETER`` sections pre-filled from the schema descriptions.
"""

__version__ = "0.3.0"

from .errors import (
    DscHelpError,
    NotFoundError,
    AmbiguousOrMissingPairError,
    SyntaxParseError,
    SchemaParseError,
    NoTargetFunctionsFoundError,
)
from .generator import generate_comment_help, HelpResult

__all__ = [
    "__version__",
    "DscHelpError",
    "NotFoundError",
    "AmbiguousOrMissingPairError",
    "SyntaxParseError",
    "SchemaParseError",
    "NoTargetFunctionsFoundError",
    "generate_comment_help",
    "HelpResult",
]
