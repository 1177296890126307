"""
Lookup of installed DSC resources by name.

PowerShell modules ship their class-less DSC resources under a
``DSCResources`` folder, one sub-folder per resource holding
``<Name>.psm1`` and ``<Name>.schema.mof``. The catalog walks a list of
module roots (``DSC_RESOURCE_PATH`` or ``PSModulePath``) for such folders.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

from .config import get_search_paths, get_suffixes
from .errors import AmbiguousOrMissingPairError
from .messages import MessageTable, get_messages

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogEntry:
    name: str
    module_path: str


class ResourceCatalog:
    """
    Name-based resource lookup over a set of module roots.

    Parameters
    ----------
    search_paths : iterable of str, optional
        Directories to search. Defaults to ``config.get_search_paths()``.
    messages : MessageTable, optional
        Message table for error text.
    """

    def __init__(
        self,
        search_paths: Optional[Iterable[str]] = None,
        messages: Optional[MessageTable] = None,
    ):
        if search_paths is None:
            search_paths = get_search_paths()
        self.search_paths = [Path(p) for p in search_paths]
        self.messages = messages or get_messages()

    def _candidates(self, root: Path, name: str, suffix: str) -> List[Path]:
        direct = root / name / f"{name}{suffix}"
        found = [direct] if direct.is_file() else []
        found.extend(
            p for p in root.glob(f"**/DSCResources/{name}/{name}{suffix}") if p.is_file()
        )
        return found

    def lookup(self, name: str) -> Optional[CatalogEntry]:
        """
        Find the module registered under ``name``.

        Returns
        -------
        CatalogEntry or None
            The entry, or None when no root holds the resource.

        Raises
        ------
        AmbiguousOrMissingPairError
            If more than one distinct module matches the name.
        """
        module_suffix, _ = get_suffixes()
        matches: List[Path] = []
        for root in self.search_paths:
            if not root.is_dir():
                logger.debug("Skipping missing search path %s", root)
                continue
            for candidate in self._candidates(root, name, module_suffix):
                resolved = candidate.resolve()
                if resolved not in matches:
                    matches.append(resolved)

        if not matches:
            return None
        if len(matches) > 1:
            message = self.messages.get(
                "catalog_ambiguous", name, ", ".join(str(m) for m in matches)
            )
            logger.error(message)
            raise AmbiguousOrMissingPairError(message)
        return CatalogEntry(name=name, module_path=str(matches[0]))
