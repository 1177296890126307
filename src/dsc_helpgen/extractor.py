"""
Extraction of the declared parameters of target functions in a module.

The module is parsed into a syntax tree (``syntax.parse``); the tree is
searched in document order for definitions of the requested functions and
each definition's own parameter declaration is read in source order.

Found-with-no-parameters and not-found are kept apart: the former is a key
mapped to an empty tuple in ``FunctionExtractionResult``, the latter is a
member of the returned ``missing`` set.
"""

import logging
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

from .config import get_target_functions
from .errors import NoTargetFunctionsFoundError, NotFoundError, SyntaxParseError
from .files import read_source
from .messages import MessageTable, get_messages
from .models import FunctionExtractionResult, ParameterDescriptor
from .syntax import FunctionDefinitionNode, find_all, is_function_named, parse

logger = logging.getLogger(__name__)

# Number of parse errors quoted in a SyntaxParseError message
MAX_REPORTED_ERRORS = 3


def _ordered_unique(names: Iterable[str]) -> List[str]:
    seen: Dict[str, str] = {}
    for name in names:
        seen.setdefault(name.casefold(), name)
    return list(seen.values())


def extract_parameters(
    module_path: str,
    target_function_names: Optional[Iterable[str]] = None,
    messages: Optional[MessageTable] = None,
) -> Tuple[FunctionExtractionResult, FrozenSet[str]]:
    """
    Extract the parameters of the target functions defined in a module.

    Parameters
    ----------
    module_path : str
        Path to the ``.psm1`` module.
    target_function_names : iterable of str, optional
        Functions to look for. Defaults to the configured lifecycle triad.
    messages : MessageTable, optional
        Message table for log and error text.

    Returns
    -------
    tuple of (FunctionExtractionResult, frozenset of str)
        The found functions (document order) with their parameters
        (declaration order), and the requested names that were not found.

    Raises
    ------
    NotFoundError
        If the module cannot be read.
    SyntaxParseError
        If the module has any parse error.
    NoTargetFunctionsFoundError
        If none of the requested functions is defined.
    """
    messages = messages or get_messages()
    if target_function_names is None:
        target_function_names = get_target_functions()
    targets = _ordered_unique(target_function_names)

    # --- 1. Parse ---
    logger.info(messages.get("parsing_module", module_path))
    try:
        source = read_source(module_path)
    except OSError as e:
        message = messages.get("path_not_found", module_path)
        logger.error("%s (%s)", message, e)
        raise NotFoundError(message) from e
    except UnicodeDecodeError as e:
        message = messages.get("module_parse_failed", module_path, e)
        logger.error(message)
        raise SyntaxParseError(message) from e

    tree, errors = parse(source)
    if errors:
        summary = "; ".join(str(error) for error in errors[:MAX_REPORTED_ERRORS])
        message = messages.get("module_parse_failed", module_path, summary)
        logger.error(message)
        raise SyntaxParseError(message, errors)

    # --- 2. Locate target functions ---
    # Results are keyed by the requested spelling of each name
    requested = {name.casefold(): name for name in targets}
    definitions: Dict[str, FunctionDefinitionNode] = {}
    for node in find_all(tree, is_function_named(targets)):
        name = requested[node.name.casefold()]
        if name in definitions:
            logger.debug("Ignoring redefinition of %s at line %d", node.name, node.line)
            continue
        definitions[name] = node

    if not definitions:
        message = messages.get("no_target_functions", module_path, ", ".join(targets))
        logger.error(message)
        raise NoTargetFunctionsFoundError(message)

    missing = frozenset(name for name in targets if name not in definitions)
    if missing:
        logger.warning(
            messages.get(
                "functions_missing",
                ", ".join(name for name in targets if name in missing),
            )
        )

    # --- 3. Read parameter declarations ---
    functions = {}
    for name, node in definitions.items():
        block = node.param_block
        declared = block.parameters if block is not None else []
        functions[name] = tuple(
            ParameterDescriptor(
                name=parameter.name,
                declared_type=parameter.declared_type,
                owner_function_name=name,
                source_order=order,
            )
            for order, parameter in enumerate(declared)
        )
        if declared:
            logger.info(messages.get("function_found", name, len(declared)))
        else:
            logger.warning(messages.get("function_no_parameters", name))

    return FunctionExtractionResult(functions=functions), missing
