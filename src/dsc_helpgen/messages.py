"""
Localized message table.

Message strings live in JSON files under ``locales/`` next to this module,
one file per culture (``en-US.json``). A table is loaded once per culture
and is read-only afterwards; components receive it explicitly rather than
reaching for a global.
"""

import json
import logging
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

LOCALES_PATH = Path(__file__).parent / "locales"
DEFAULT_CULTURE = "en-US"

logger = logging.getLogger(__name__)


class MessageTable:
    """
    Read-only lookup of message templates keyed by message identifier.

    Parameters
    ----------
    culture : str
        The culture the templates were loaded for.
    templates : Mapping[str, str]
        Message identifier to ``str.format`` template (positional fields).
    """

    def __init__(self, culture: str, templates: Mapping[str, str]):
        self.culture = culture
        self._templates = MappingProxyType(dict(templates))

    def __contains__(self, key: object) -> bool:
        return key in self._templates

    def get(self, key: str, *args) -> str:
        """
        Format the template registered under ``key`` with ``args``.

        Unknown keys are returned verbatim so a missing translation never
        hides the condition being reported.
        """
        template = self._templates.get(key)
        if template is None:
            notice = self._templates.get("unknown_message_key", "{0}")
            logger.warning(notice.format(key))
            return key
        return template.format(*args)


def load_template(culture: str = DEFAULT_CULTURE) -> dict:
    """
    Load the raw message templates for a culture.

    Parameters
    ----------
    culture : str
        Culture name, e.g. ``"en-US"``. Falls back to ``en-US`` when no
        file exists for the requested culture.

    Returns
    -------
    dict
        Parsed JSON object mapping message identifiers to templates.
    """
    template_path = LOCALES_PATH / f"{culture}.json"

    if not template_path.exists():
        if culture == DEFAULT_CULTURE:
            raise FileNotFoundError(f"Message table not found at: {template_path}")
        logger.warning(
            "No message table for culture %s, falling back to %s",
            culture,
            DEFAULT_CULTURE,
        )
        template_path = LOCALES_PATH / f"{DEFAULT_CULTURE}.json"

    with open(template_path, "r", encoding="utf-8") as f:
        return json.load(f)


@lru_cache(maxsize=None)
def get_messages(culture: str = DEFAULT_CULTURE) -> MessageTable:
    """Return the memoised message table for ``culture``."""
    return MessageTable(culture, load_template(culture))
