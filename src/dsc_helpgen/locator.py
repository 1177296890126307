"""
Resolution of a resource identifier to its module/schema file pair.

An identifier may be a path to the ``.psm1`` module, a path to the
``.schema.mof`` schema, a directory holding exactly one of each, or the
name of an installed resource looked up in the ``ResourceCatalog``.
Nothing is cached; every call hits the file system afresh.
"""

import logging
from pathlib import Path
from typing import Optional

from .catalog import ResourceCatalog
from .config import get_suffixes
from .errors import AmbiguousOrMissingPairError, NotFoundError
from .messages import MessageTable, get_messages
from .models import ResourceFileSet

logger = logging.getLogger(__name__)


def _has_suffix(path: str, suffix: str) -> bool:
    return path.lower().endswith(suffix.lower())


def _swap_suffix(path: str, old: str, new: str) -> str:
    return path[: len(path) - len(old)] + new


def resolve(
    identifier: str,
    catalog: Optional[ResourceCatalog] = None,
    messages: Optional[MessageTable] = None,
) -> ResourceFileSet:
    """
    Resolve ``identifier`` to a module file and its schema file.

    Parameters
    ----------
    identifier : str
        Module path, schema path, directory, or catalog name.
    catalog : ResourceCatalog, optional
        Catalog used for name lookups. Built from the configured search
        paths when omitted.
    messages : MessageTable, optional
        Message table for log and error text.

    Returns
    -------
    ResourceFileSet
        Paths of two existing files that share a stem.

    Raises
    ------
    NotFoundError
        If the identifier resolves to nothing.
    AmbiguousOrMissingPairError
        If a directory or catalog entry does not yield exactly one module
        and one schema, or a file's sibling is missing.
    """
    messages = messages or get_messages()
    module_suffix, schema_suffix = get_suffixes()
    logger.info(messages.get("resolving_identifier", identifier))

    if not identifier or not identifier.strip():
        message = messages.get("resource_not_found", identifier)
        logger.error(message)
        raise NotFoundError(message)

    # --- 1. Direct file path ---
    if _has_suffix(identifier, schema_suffix) or _has_suffix(identifier, module_suffix):
        if not Path(identifier).is_file():
            message = messages.get("path_not_found", identifier)
            logger.error(message)
            raise NotFoundError(message)
        if _has_suffix(identifier, schema_suffix):
            schema_path = identifier
            module_path = _swap_suffix(identifier, schema_suffix, module_suffix)
            sibling = module_path
        else:
            module_path = identifier
            schema_path = _swap_suffix(identifier, module_suffix, schema_suffix)
            sibling = schema_path
        if not Path(sibling).is_file():
            message = messages.get("path_not_found", sibling)
            logger.error(message)
            raise AmbiguousOrMissingPairError(message)
        return _resolved(module_path, schema_path, messages)

    # --- 2. Directory ---
    directory = Path(identifier)
    if directory.is_dir():
        children = sorted(p for p in directory.iterdir() if p.is_file())
        schemas = [p for p in children if _has_suffix(p.name, schema_suffix)]
        modules = [p for p in children if _has_suffix(p.name, module_suffix)]
        if len(schemas) != 1 or len(modules) != 1:
            message = messages.get(
                "directory_pair_ambiguous",
                identifier,
                schema_suffix,
                module_suffix,
                len(schemas),
                len(modules),
            )
            logger.error(message)
            raise AmbiguousOrMissingPairError(message)
        return _resolved(str(modules[0]), str(schemas[0]), messages)

    # --- 3. Catalog name ---
    catalog = catalog if catalog is not None else ResourceCatalog(messages=messages)
    entry = catalog.lookup(identifier)
    if entry is not None:
        schema_path = _swap_suffix(entry.module_path, module_suffix, schema_suffix)
        if not Path(schema_path).is_file():
            message = messages.get(
                "catalog_schema_missing", identifier, entry.module_path, schema_path
            )
            logger.error(message)
            raise AmbiguousOrMissingPairError(message)
        return _resolved(entry.module_path, schema_path, messages)

    message = messages.get("resource_not_found", identifier)
    logger.error(message)
    raise NotFoundError(message)


def _resolved(module_path: str, schema_path: str, messages: MessageTable) -> ResourceFileSet:
    logger.info(messages.get("resolved_files", module_path, schema_path))
    return ResourceFileSet(module_path=module_path, schema_path=schema_path)
