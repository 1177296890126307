"""
Reading of resource source files.

PowerShell tooling saves modules and schemas as UTF-8 (with or without a
byte order mark) or as UTF-16 with a byte order mark. The encoding is
chosen from the leading bytes, the way PowerShell's own readers do it.
"""

import codecs
from pathlib import Path
from typing import Union

_BOM_ENCODINGS = (
    (codecs.BOM_UTF32_LE, "utf-32"),
    (codecs.BOM_UTF32_BE, "utf-32"),
    (codecs.BOM_UTF16_LE, "utf-16"),
    (codecs.BOM_UTF16_BE, "utf-16"),
)


def detect_encoding(data: bytes) -> str:
    """Return the codec name for ``data`` based on its byte order mark."""
    for bom, encoding in _BOM_ENCODINGS:
        if data.startswith(bom):
            return encoding
    return "utf-8-sig"


def read_source(path: Union[str, Path]) -> str:
    """
    Read a module or schema file as text.

    Parameters
    ----------
    path : str or pathlib.Path
        File to read.

    Returns
    -------
    str
        The decoded contents, without a byte order mark.

    Raises
    ------
    OSError
        If the file cannot be read.
    UnicodeDecodeError
        If the contents are not valid in the detected encoding.
    """
    data = Path(path).read_bytes()
    return data.decode(detect_encoding(data))
