"""
Exception hierarchy for dsc-helpgen.

Every fatal condition of a help-generation run is a subclass of
``DscHelpError`` so callers (and the CLI) can catch one type.
"""

from typing import List, Optional


class DscHelpError(Exception):
    """Base exception for dsc-helpgen specific errors."""

    pass


class NotFoundError(DscHelpError):
    """The resource identifier resolved to nothing."""

    pass


class AmbiguousOrMissingPairError(DscHelpError):
    """A directory or catalog lookup did not yield exactly one module and one schema."""

    pass


class SyntaxParseError(DscHelpError):
    """
    The module source could not be parsed.

    Parameters
    ----------
    message : str
        Human readable summary.
    errors : list, optional
        The individual ``ParseError`` records reported by the parser.
    """

    def __init__(self, message: str, errors: Optional[List] = None):
        super().__init__(message)
        self.errors = list(errors or [])


class SchemaParseError(DscHelpError):
    """The schema source could not be parsed."""

    pass


class NoTargetFunctionsFoundError(DscHelpError):
    """None of the requested functions exist in the module."""

    pass
