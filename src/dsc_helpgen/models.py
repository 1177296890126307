"""
Record types passed between the locator, readers and synthesizer.

All records are immutable; a fresh set is built for every run.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional, Tuple

# --- Comment-help layout ---
OPEN_MARKER = "<#"
CLOSE_MARKER = "#>"
SECTION_INDENT = " " * 4
BODY_INDENT = " " * 8
SYNOPSIS_PLACEHOLDER = "Synopsis here"


@dataclass(frozen=True)
class ResourceFileSet:
    """The module/schema pair a resource identifier resolved to."""

    module_path: str
    schema_path: str


@dataclass(frozen=True)
class FieldDescriptor:
    """One property of the resource class declared in the MOF schema."""

    name: str
    declared_type: str
    description: str = ""
    attribute: Optional[str] = None  # Key | Required | Write | Read
    values: Tuple[str, ...] = ()  # From ValueMap{...}


@dataclass(frozen=True)
class ParameterDescriptor:
    """One parameter declared by a target function, in declaration order."""

    name: str
    declared_type: str
    owner_function_name: str
    source_order: int


@dataclass(frozen=True)
class FunctionExtractionResult:
    """
    Parameters of every target function found in a module.

    Only functions that were actually found are keys of ``functions``; a
    function declared without parameters maps to an empty tuple. Functions
    that were requested but not found are reported next to this record by
    ``extract_parameters`` and never appear here.
    """

    functions: Dict[str, Tuple[ParameterDescriptor, ...]] = field(
        default_factory=dict
    )

    def __iter__(self) -> Iterator[str]:
        return iter(self.functions)

    def __len__(self) -> int:
        return len(self.functions)

    def __contains__(self, name: object) -> bool:
        return name in self.functions

    def parameters(self, name: str) -> Tuple[ParameterDescriptor, ...]:
        """Return the parameters of a found function (KeyError if not found)."""
        return self.functions[name]

    def is_parameterless(self, name: str) -> bool:
        return name in self.functions and not self.functions[name]


@dataclass(frozen=True)
class CommentBlock:
    """
    A rendered ``<# ... #>`` help block for a single function.

    Parameters
    ----------
    function_name : str
        The function the block documents.
    entries : tuple of (str, str)
        ``(parameter name, description)`` pairs in declaration order. An
        empty description renders as an empty body line.
    synopsis : str
        The synopsis body line.
    """

    function_name: str
    entries: Tuple[Tuple[str, str], ...] = ()
    synopsis: str = SYNOPSIS_PLACEHOLDER

    @property
    def lines(self) -> Tuple[str, ...]:
        lines = [
            OPEN_MARKER,
            f"{SECTION_INDENT}.SYNOPSIS",
            f"{BODY_INDENT}{self.synopsis}",
            "",
        ]
        for name, description in self.entries:
            lines.append(f"{SECTION_INDENT}.PARAMETER {name}")
            lines.append(f"{BODY_INDENT}{description}" if description else "")
            lines.append("")
        lines.append(CLOSE_MARKER)
        return tuple(lines)

    @property
    def text(self) -> str:
        return "".join(f"{line}\n" for line in self.lines)
