"""Rendering of comment-help blocks from extracted parameters and schema fields."""

import logging
from typing import Dict, Iterable, Optional

from .messages import MessageTable, get_messages
from .models import CommentBlock, FieldDescriptor, FunctionExtractionResult

logger = logging.getLogger(__name__)


def index_fields(fields: Iterable[FieldDescriptor]) -> Dict[str, FieldDescriptor]:
    """Map field name to descriptor; the first declaration of a name wins."""
    index: Dict[str, FieldDescriptor] = {}
    for descriptor in fields:
        index.setdefault(descriptor.name, descriptor)
    return index


def build_blocks(
    extraction: FunctionExtractionResult,
    fields: Iterable[FieldDescriptor],
    messages: Optional[MessageTable] = None,
) -> Dict[str, CommentBlock]:
    """
    Join each function's parameters against the schema fields.

    Parameters
    ----------
    extraction : FunctionExtractionResult
        Found functions and their parameters.
    fields : iterable of FieldDescriptor
        Schema fields, matched to parameters by exact (case-sensitive) name.
    messages : MessageTable, optional
        Message table for log text.

    Returns
    -------
    dict
        Function name to ``CommentBlock``, in the extraction's order.
    """
    messages = messages or get_messages()
    index = index_fields(fields)
    blocks: Dict[str, CommentBlock] = {}
    for function_name in extraction:
        entries = []
        for parameter in extraction.parameters(function_name):
            descriptor = index.get(parameter.name)
            if descriptor is None:
                logger.debug(
                    messages.get("parameter_not_in_schema", parameter.name, function_name)
                )
            entries.append(
                (parameter.name, descriptor.description if descriptor else "")
            )
        blocks[function_name] = CommentBlock(function_name, tuple(entries))
    return blocks


def synthesize(
    extraction: FunctionExtractionResult,
    fields: Iterable[FieldDescriptor],
    messages: Optional[MessageTable] = None,
) -> Dict[str, str]:
    """
    Render one ``<# ... #>`` help block per function.

    The result is a pure function of its inputs: same inputs, same text.
    """
    return {
        name: block.text
        for name, block in build_blocks(extraction, fields, messages).items()
    }
