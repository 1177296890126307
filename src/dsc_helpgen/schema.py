"""
Reader for DSC MOF schema files.

A ``.schema.mof`` file declares one resource class (deriving from
``OMI_BaseResource``) and, optionally, helper classes used as embedded
instances. Each property carries a qualifier list such as
``[Key, Description("Widget name.")]``. ``read_fields`` returns the
properties of the resource class as ``FieldDescriptor`` records, in
declaration order.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from .errors import SchemaParseError
from .files import read_source
from .messages import MessageTable, get_messages
from .models import FieldDescriptor

logger = logging.getLogger(__name__)

BASE_RESOURCE_CLASS = "OMI_BaseResource"
ATTRIBUTE_QUALIFIERS = ("Key", "Required", "Write", "Read")

QualifierValue = Union[bool, str, List[str]]

_TOKEN_RE = re.compile(
    r"""
    (?P<ws>[ \t\r\f\v\ufeff]+)
  | (?P<newline>\n)
  | (?P<line_comment>//[^\n]*)
  | (?P<pragma>\#pragma[^\n]*)
  | (?P<block_comment>/\*.*?\*/)
  | (?P<string>"(?:[^"\\\n]|\\.)*")
  | (?P<number>[+-]?\d+(?:\.\d+)?)
  | (?P<ident>[A-Za-z_][A-Za-z0-9_]*)
  | (?P<punct>[\[\](){},;:=])
    """,
    re.VERBOSE | re.DOTALL,
)
_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", '"': '"', "'": "'", "\\": "\\"}


class MofSyntaxError(ValueError):
    """Malformed MOF text; the message names the offending line."""

    def __init__(self, message: str, line: int):
        super().__init__(f"line {line}: {message}")
        self.line = line


@dataclass
class MofProperty:
    name: str
    type: str
    is_array: bool = False
    qualifiers: Dict[str, QualifierValue] = field(default_factory=dict)
    default: Optional[str] = None

    @property
    def description(self) -> str:
        value = self.qualifiers.get("description", "")
        return value if isinstance(value, str) else ""


@dataclass
class MofClass:
    name: str
    superclass: Optional[str] = None
    qualifiers: Dict[str, QualifierValue] = field(default_factory=dict)
    properties: List[MofProperty] = field(default_factory=list)


def _unescape(literal: str) -> str:
    body = literal[1:-1]
    return re.sub(r"\\(.)", lambda m: _ESCAPES.get(m.group(1), m.group(1)), body)


def _tokenize(text: str) -> List[tuple]:
    tokens = []
    pos, line = 0, 1
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        if match is None:
            if text[pos] == '"':
                raise MofSyntaxError("Missing closing quote for string", line)
            if text.startswith("/*", pos):
                raise MofSyntaxError("Missing closing '*/' for comment", line)
            raise MofSyntaxError(f"Unexpected character {text[pos]!r}", line)
        kind, value = match.lastgroup, match.group()
        if kind not in ("ws", "newline", "line_comment", "pragma", "block_comment"):
            tokens.append((kind, value, line))
        line += value.count("\n")
        pos = match.end()
    return tokens


class _MofParser:
    def __init__(self, tokens: List[tuple]):
        self.tokens = tokens
        self.pos = 0

    def _peek(self, offset: int = 0) -> Optional[tuple]:
        idx = self.pos + offset
        return self.tokens[idx] if idx < len(self.tokens) else None

    def _line(self) -> int:
        token = self._peek()
        if token is not None:
            return token[2]
        return self.tokens[-1][2] if self.tokens else 1

    def _next(self, expected: Optional[str] = None, kind: Optional[str] = None) -> tuple:
        token = self._peek()
        if token is None:
            wanted = expected or kind or "token"
            raise MofSyntaxError(f"Unexpected end of schema, expected {wanted!r}", self._line())
        if expected is not None and token[1] != expected:
            raise MofSyntaxError(f"Expected {expected!r} but found {token[1]!r}", token[2])
        if kind is not None and token[0] != kind:
            raise MofSyntaxError(f"Expected {kind} but found {token[1]!r}", token[2])
        self.pos += 1
        return token

    def _at(self, value: str) -> bool:
        token = self._peek()
        return token is not None and token[0] == "punct" and token[1] == value

    def parse(self) -> List[MofClass]:
        classes = []
        while self._peek() is not None:
            qualifiers = self._qualifier_list() if self._at("[") else {}
            keyword = self._next(kind="ident")
            if keyword[1].lower() != "class":
                raise MofSyntaxError(f"Expected 'class' but found {keyword[1]!r}", keyword[2])
            classes.append(self._class_body(qualifiers))
        return classes

    def _class_body(self, qualifiers: Dict[str, QualifierValue]) -> MofClass:
        mof_class = MofClass(self._next(kind="ident")[1], qualifiers=qualifiers)
        if self._at(":"):
            self._next(":")
            mof_class.superclass = self._next(kind="ident")[1]
        self._next("{")
        while not self._at("}"):
            if self._peek() is None:
                raise MofSyntaxError(
                    f"Missing closing '}}' for class {mof_class.name}", self._line()
                )
            mof_class.properties.append(self._property())
        self._next("}")
        self._next(";")
        return mof_class

    def _property(self) -> MofProperty:
        qualifiers = self._qualifier_list() if self._at("[") else {}
        type_name = self._next(kind="ident")[1]
        following = self._peek(1)
        if (
            self._peek() is not None
            and self._peek()[1].lower() == "ref"
            and following is not None
            and following[0] == "ident"
        ):
            self._next()
            type_name = f"{type_name} REF"
        prop = MofProperty(self._next(kind="ident")[1], type_name, qualifiers=qualifiers)
        if self._at("["):
            self._next("[")
            if self._peek() is not None and self._peek()[0] == "number":
                self._next()
            self._next("]")
            prop.is_array = True
        if self._at("="):
            self._next("=")
            value = self._value()
            prop.default = value if isinstance(value, str) else ", ".join(value)
        self._next(";")
        return prop

    def _qualifier_list(self) -> Dict[str, QualifierValue]:
        qualifiers: Dict[str, QualifierValue] = {}
        self._next("[")
        while True:
            name = self._next(kind="ident")[1]
            value: QualifierValue = True
            if self._at("("):
                self._next("(")
                value = self._value()
                self._next(")")
            elif self._at("{"):
                value = self._value()
            if self._at(":"):
                # Flavors, e.g. ": ToSubclass"
                self._next(":")
                self._next(kind="ident")
            qualifiers[name.lower()] = value
            if self._at("]"):
                self._next("]")
                return qualifiers
            self._next(",")

    def _value(self) -> Union[str, List[str]]:
        if self._at("{"):
            self._next("{")
            items: List[str] = []
            while not self._at("}"):
                item = self._value()
                items.append(item if isinstance(item, str) else ", ".join(item))
                if not self._at("}"):
                    self._next(",")
            self._next("}")
            return items
        token = self._next()
        if token[0] == "string":
            # Adjacent literals concatenate
            parts = [_unescape(token[1])]
            while self._peek() is not None and self._peek()[0] == "string":
                parts.append(_unescape(self._next()[1]))
            return "".join(parts)
        if token[0] in ("number", "ident"):
            return token[1]
        raise MofSyntaxError(f"Unexpected {token[1]!r} in value", token[2])


def parse_mof(text: str) -> List[MofClass]:
    """
    Parse MOF schema text into its class declarations.

    Raises
    ------
    MofSyntaxError
        If the text does not follow the MOF class grammar.
    """
    return _MofParser(_tokenize(text)).parse()


def resource_class(classes: List[MofClass]) -> MofClass:
    """
    Pick the resource class among the declared classes.

    The class deriving from ``OMI_BaseResource`` wins; otherwise the last
    declared class, since helper classes are declared before their users.
    """
    if not classes:
        raise MofSyntaxError("No class declaration found", 1)
    for mof_class in classes:
        if (mof_class.superclass or "").lower() == BASE_RESOURCE_CLASS.lower():
            return mof_class
    return classes[-1]


def _declared_type(prop: MofProperty) -> str:
    embedded = prop.qualifiers.get("embeddedinstance")
    base = embedded if isinstance(embedded, str) and embedded else prop.type
    return f"{base}[]" if prop.is_array else base


def _attribute(prop: MofProperty) -> Optional[str]:
    for attribute in ATTRIBUTE_QUALIFIERS:
        if attribute.lower() in prop.qualifiers:
            return attribute
    return None


def parse_schema(text: str) -> List[dict]:
    """
    Parse schema text into the fields of its resource class.

    Parameters
    ----------
    text : str
        Contents of a ``.schema.mof`` file.

    Returns
    -------
    list of dict
        One mapping per property with keys ``name``, ``type``,
        ``description``, ``attribute``, ``values`` and ``class_name``, in
        declaration order.

    Raises
    ------
    MofSyntaxError
        If the text is malformed or declares no class.
    """
    mof_class = resource_class(parse_mof(text))
    fields = []
    for prop in mof_class.properties:
        value_map = prop.qualifiers.get("valuemap", [])
        fields.append(
            {
                "name": prop.name,
                "type": _declared_type(prop),
                "description": prop.description,
                "attribute": _attribute(prop),
                "values": list(value_map) if isinstance(value_map, list) else [],
                "class_name": mof_class.name,
            }
        )
    return fields


def read_fields(
    schema_path: str, messages: Optional[MessageTable] = None
) -> List[FieldDescriptor]:
    """
    Read a schema file and return its fields.

    Duplicate field names are kept as declared; lookups by name use the
    first declaration.

    Parameters
    ----------
    schema_path : str
        Path to the ``.schema.mof`` file.
    messages : MessageTable, optional
        Message table for log text. Defaults to the ``en-US`` table.

    Returns
    -------
    list of FieldDescriptor
        The resource class's fields in declaration order.

    Raises
    ------
    SchemaParseError
        If the file cannot be read or is not valid MOF.
    """
    messages = messages or get_messages()
    logger.info(messages.get("reading_schema", schema_path))

    try:
        text = read_source(schema_path)
        raw_fields = parse_schema(text)
    except (OSError, UnicodeDecodeError, MofSyntaxError) as e:
        message = messages.get("schema_parse_failed", schema_path, e)
        logger.error(message)
        raise SchemaParseError(message) from e

    fields = [
        FieldDescriptor(
            name=raw["name"],
            declared_type=raw["type"],
            description=raw["description"],
            attribute=raw["attribute"],
            values=tuple(raw["values"]),
        )
        for raw in raw_fields
    ]

    seen = set()
    for descriptor in fields:
        if descriptor.name in seen:
            logger.warning(messages.get("schema_duplicate_field", descriptor.name))
        seen.add(descriptor.name)

    logger.info(messages.get("schema_field_count", schema_path, len(fields)))
    return fields
