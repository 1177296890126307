"""
Generation of comment-based help blocks for a DSC resource.

This module provides a single high-level function, generate_comment_help,
which resolves a resource identifier to its module and schema, reads the
schema fields, extracts the parameters of the lifecycle functions and
renders one ``<# ... #>`` block per function.

Fatal conditions raise a ``DscHelpError`` subclass and no output is
returned. Non-fatal ones (some functions missing, a function without
parameters) are collected in ``HelpResult.warnings``.
"""

import logging
import sys
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Optional

from .catalog import ResourceCatalog
from .config import get_culture, get_target_functions
from .errors import DscHelpError
from .extractor import extract_parameters
from .locator import resolve
from .messages import MessageTable, get_messages
from .models import FunctionExtractionResult, ResourceFileSet
from .schema import read_fields
from .synthesizer import synthesize

# Configure logging with proper format and level
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stderr), logging.FileHandler("dsc_helpgen.log")],
)

logger = logging.getLogger(__name__)


@dataclass
class HelpResult:
    """
    Outcome of one help-generation run.

    Attributes
    ----------
    files : ResourceFileSet
        The module and schema the identifier resolved to.
    blocks : dict
        Function name to rendered block text, in document order.
    extraction : FunctionExtractionResult
        The parameters the blocks were built from.
    missing : frozenset of str
        Requested functions not defined in the module.
    warnings : list of str
        Localized text for every non-fatal condition.
    """

    files: ResourceFileSet
    blocks: Dict[str, str]
    extraction: FunctionExtractionResult
    missing: FrozenSet[str] = frozenset()
    warnings: List[str] = field(default_factory=list)


# --- Public API ---
def generate_comment_help(
    identifier: str,
    function_names: Optional[Iterable[str]] = None,
    catalog: Optional[ResourceCatalog] = None,
    messages: Optional[MessageTable] = None,
) -> HelpResult:
    """
    Generate comment-help blocks for the lifecycle functions of a resource.

    Parameters
    ----------
    identifier : str
        Path to the module, the schema, a resource directory, or the name
        of an installed resource.
    function_names : iterable of str, optional
        Functions to document. Defaults to Get-, Test- and
        Set-TargetResource.
    catalog : ResourceCatalog, optional
        Catalog for name lookups; built from the environment if omitted.
    messages : MessageTable, optional
        Message table; defaults to the configured culture's table.

    Returns
    -------
    HelpResult
        Rendered blocks plus the missing set and any warnings.

    Raises
    ------
    DscHelpError
        Any fatal condition (a subclass names which); unexpected failures
        are wrapped in the base class.
    """
    messages = messages or get_messages(get_culture())
    requested = (
        list(function_names) if function_names is not None else get_target_functions()
    )

    try:
        files = resolve(identifier, catalog=catalog, messages=messages)
        fields = read_fields(files.schema_path, messages=messages)
        extraction, missing = extract_parameters(
            files.module_path, requested, messages=messages
        )
        blocks = synthesize(extraction, fields, messages=messages)
    except DscHelpError:
        # Re-raise DscHelpError without wrapping to preserve the original
        raise
    except Exception as e:
        logger.error("Unexpected error: %s", e)
        raise DscHelpError(f"Unexpected error: {e}") from e

    warnings: List[str] = []
    if missing:
        ordered = [name for name in dict.fromkeys(requested) if name in missing]
        warnings.append(messages.get("functions_missing", ", ".join(ordered)))
    for name in extraction:
        if extraction.is_parameterless(name):
            warnings.append(messages.get("function_no_parameters", name))

    logger.info(messages.get("blocks_generated", len(blocks)))
    return HelpResult(
        files=files,
        blocks=blocks,
        extraction=extraction,
        missing=missing,
        warnings=warnings,
    )
