"""
A small PowerShell syntax tree.

Only the parts of the language needed to locate function definitions and
their declared parameters are modelled. The scanner still understands
every construct that can hide a bracket or a ``function`` keyword
(comments, single/double quoted strings, here-strings, sub-expressions and
backtick escapes), so bracket nesting and statement boundaries are exact.

The entry point is ``parse(source)``, which returns the root
``ScriptBlockNode`` and a list of ``ParseError`` records. Trees are
searched with ``find_all(node, predicate)``, a depth-first traversal that
yields nodes in document order.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Optional, Tuple

logger = logging.getLogger(__name__)

FUNCTION_KEYWORDS = ("function", "filter")
DEFAULT_PARAMETER_TYPE = "Object"

_CLOSING = {"(": ")", "{": "}", "[": "]"}
_WORD_STOP = set(" \t\r\n\f\v(){}[],;'\"$`=|&")
_SCOPES = ("global:", "script:", "local:", "private:")


@dataclass(frozen=True)
class ParseError:
    """A single problem reported while parsing."""

    message: str
    line: int
    column: int

    def __str__(self) -> str:
        return f"line {self.line}, column {self.column}: {self.message}"


@dataclass(frozen=True)
class Token:
    kind: str  # word | variable | string | open | close | comma | semicolon | equals | newline | comment | other
    text: str
    line: int
    column: int
    start: int
    end: int


# --- Tree nodes ---


@dataclass
class Node:
    """Base class of all tree nodes; ``line``/``column`` are 1-based."""

    line: int
    column: int

    kind = "node"

    @property
    def children(self) -> Tuple["Node", ...]:
        return ()


@dataclass
class ParameterNode(Node):
    name: str
    declared_type: str = DEFAULT_PARAMETER_TYPE
    attributes: Tuple[str, ...] = ()
    default: Optional[str] = None

    kind = "parameter"


@dataclass
class ParamBlockNode(Node):
    parameters: List[ParameterNode] = field(default_factory=list)

    kind = "param_block"

    @property
    def children(self) -> Tuple[Node, ...]:
        return tuple(self.parameters)


@dataclass
class ScriptBlockNode(Node):
    end_line: int = 0
    param_block: Optional[ParamBlockNode] = None
    statements: List[Node] = field(default_factory=list)
    comments: Tuple[Token, ...] = ()  # Only populated on the root block

    kind = "script_block"

    @property
    def children(self) -> Tuple[Node, ...]:
        head = (self.param_block,) if self.param_block is not None else ()
        return head + tuple(self.statements)


@dataclass
class FunctionDefinitionNode(Node):
    name: str = ""
    keyword: str = "function"
    body: Optional[ScriptBlockNode] = None
    inline_parameters: Optional[ParamBlockNode] = None
    end_line: int = 0

    kind = "function_definition"

    @property
    def children(self) -> Tuple[Node, ...]:
        nodes = []
        if self.inline_parameters is not None:
            nodes.append(self.inline_parameters)
        if self.body is not None:
            nodes.append(self.body)
        return tuple(nodes)

    @property
    def param_block(self) -> Optional[ParamBlockNode]:
        """The function's own parameter declaration, inline or ``param()``."""
        if self.inline_parameters is not None:
            return self.inline_parameters
        if self.body is not None:
            return self.body.param_block
        return None


def find_all(node: Node, predicate: Callable[[Node], bool]) -> Iterator[Node]:
    """
    Yield every node in the subtree rooted at ``node`` matching ``predicate``.

    The traversal is depth-first pre-order, i.e. document order.
    """
    if predicate(node):
        yield node
    for child in node.children:
        yield from find_all(child, predicate)


def is_function_named(names) -> Callable[[Node], bool]:
    """
    Predicate matching function definitions whose name is in ``names``.

    Function names compare case-insensitively, as PowerShell resolves them.
    """
    wanted = {name.casefold() for name in names}

    def predicate(node: Node) -> bool:
        return (
            isinstance(node, FunctionDefinitionNode)
            and node.name.casefold() in wanted
        )

    return predicate


# --- Scanner ---


class _Scanner:
    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.line = 1
        self.column = 1
        self.errors: List[ParseError] = []

    def _peek(self, offset: int = 0) -> str:
        idx = self.pos + offset
        return self.source[idx] if idx < len(self.source) else ""

    def _advance(self, count: int = 1) -> None:
        for _ in range(count):
            if self.pos >= len(self.source):
                return
            if self.source[self.pos] == "\n":
                self.line += 1
                self.column = 1
            else:
                self.column += 1
            self.pos += 1

    def _advance_to(self, target: int) -> None:
        self._advance(max(target - self.pos, 0))

    def _error(self, message: str, line: int, column: int) -> None:
        self.errors.append(ParseError(message, line, column))

    def scan(self) -> List[Token]:
        tokens = []
        while True:
            token = self._scan_one()
            if token is None:
                return tokens
            tokens.append(token)

    def _scan_one(self) -> Optional[Token]:
        while self.pos < len(self.source):
            ch = self._peek()
            if ch in " \t\r\f\v\ufeff":
                self._advance()
            elif ch == "`":
                # Escape or line continuation
                self._advance(2)
            else:
                break
        if self.pos >= len(self.source):
            return None

        start, line, column = self.pos, self.line, self.column
        ch, nxt = self._peek(), self._peek(1)

        if ch == "\n":
            self._advance()
            kind = "newline"
        elif ch == "<" and nxt == "#":
            self._scan_block_comment(line, column)
            kind = "comment"
        elif ch == "#":
            while self.pos < len(self.source) and self._peek() != "\n":
                self._advance()
            kind = "comment"
        elif ch == "@" and nxt in ("'", '"') and self._at_here_string():
            self._scan_here_string(nxt, line, column)
            kind = "string"
        elif ch == "'":
            self._scan_single_quoted(line, column)
            kind = "string"
        elif ch == '"':
            self._scan_double_quoted(line, column)
            kind = "string"
        elif (ch in "$@" and nxt == "(") or (ch == "@" and nxt == "{"):
            self._advance(2)
            kind = "open"
        elif ch == "$":
            self._scan_variable()
            kind = "variable"
        elif ch in "({[":
            self._advance()
            kind = "open"
        elif ch in ")}]":
            self._advance()
            kind = "close"
        elif ch == ",":
            self._advance()
            kind = "comma"
        elif ch == ";":
            self._advance()
            kind = "semicolon"
        elif ch == "=":
            self._advance()
            kind = "equals"
        elif ch in "|&":
            self._advance()
            kind = "other"
        else:
            while self.pos < len(self.source) and self._peek() not in _WORD_STOP:
                self._advance()
            kind = "word"

        return Token(kind, self.source[start : self.pos], line, column, start, self.pos)

    def _scan_block_comment(self, line: int, column: int) -> None:
        end = self.source.find("#>", self.pos + 2)
        if end == -1:
            self._error("Missing closing '#>' for block comment", line, column)
            self._advance_to(len(self.source))
        else:
            self._advance_to(end + 2)

    def _at_here_string(self) -> bool:
        idx = self.pos + 2
        while idx < len(self.source) and self.source[idx] in " \t\r":
            idx += 1
        return idx >= len(self.source) or self.source[idx] == "\n"

    def _scan_here_string(self, quote: str, line: int, column: int) -> None:
        # The terminator must start a line
        end = self.source.find(f"\n{quote}@", self.pos + 2)
        if end == -1:
            self._error("Missing here-string terminator", line, column)
            self._advance_to(len(self.source))
        else:
            self._advance_to(end + 3)

    def _scan_single_quoted(self, line: int, column: int) -> None:
        self._advance()
        while True:
            if self.pos >= len(self.source):
                self._error("Missing closing quote for string", line, column)
                return
            if self._peek() == "'":
                if self._peek(1) == "'":
                    self._advance(2)
                    continue
                self._advance()
                return
            self._advance()

    def _scan_double_quoted(self, line: int, column: int) -> None:
        self._advance()
        while True:
            if self.pos >= len(self.source):
                self._error("Missing closing quote for string", line, column)
                return
            ch = self._peek()
            if ch == "`":
                self._advance(2)
            elif ch == '"':
                if self._peek(1) == '"':
                    self._advance(2)
                    continue
                self._advance()
                return
            elif ch == "$" and self._peek(1) == "(":
                self._advance(2)
                self._skip_subexpression(line, column)
            else:
                self._advance()

    def _skip_subexpression(self, line: int, column: int) -> None:
        depth = 1
        while depth:
            token = self._scan_one()
            if token is None:
                self._error("Missing closing ')' in subexpression", line, column)
                return
            if token.kind == "open":
                depth += 1
            elif token.kind == "close":
                depth -= 1

    def _scan_variable(self) -> None:
        self._advance()
        if self._peek() == "{":
            end = self.source.find("}", self.pos)
            self._advance_to(len(self.source) if end == -1 else end + 1)
            return
        consumed = False
        while self.pos < len(self.source) and (
            self._peek().isalnum() or self._peek() in "_:"
        ):
            self._advance()
            consumed = True
        if not consumed and self._peek() in ("?", "^", "$"):
            self._advance()


# --- Parser ---


def _strip_scope(name: str) -> str:
    lowered = name.lower()
    for scope in _SCOPES:
        if lowered.startswith(scope):
            return name[len(scope) :]
    return name


def _variable_name(text: str) -> str:
    name = text[1:] if text.startswith("$") else text
    if name.startswith("{") and name.endswith("}"):
        name = name[1:-1]
    return name


class _Parser:
    def __init__(self, source: str, tokens: List[Token], errors: List[ParseError]):
        self.source = source
        self.tokens = tokens
        self.errors = errors
        self.matches: Dict[int, int] = {}

    def _error(self, message: str, token: Token) -> None:
        self.errors.append(ParseError(message, token.line, token.column))

    def match_brackets(self) -> bool:
        stack: List[int] = []
        ok = True
        for idx, token in enumerate(self.tokens):
            if token.kind == "open":
                stack.append(idx)
            elif token.kind == "close":
                if not stack:
                    self._error(f"Unexpected token '{token.text}'", token)
                    ok = False
                    continue
                opener = stack.pop()
                expected = _CLOSING[self.tokens[opener].text[-1]]
                if token.text != expected:
                    self._error(
                        f"Missing closing '{expected}' for "
                        f"'{self.tokens[opener].text}' opened at line "
                        f"{self.tokens[opener].line}",
                        token,
                    )
                    ok = False
                self.matches[opener] = idx
        for opener in stack:
            expected = _CLOSING[self.tokens[opener].text[-1]]
            self._error(f"Missing closing '{expected}'", self.tokens[opener])
            ok = False
        return ok

    def _skip_newlines(self, idx: int, end: int) -> int:
        while idx < end and self.tokens[idx].kind == "newline":
            idx += 1
        return idx

    def _is_open(self, idx: int, end: int, text: str) -> bool:
        return (
            idx < end
            and self.tokens[idx].kind == "open"
            and self.tokens[idx].text == text
        )

    def _at_statement_start(self, idx: int) -> bool:
        if idx == 0:
            return True
        prev = self.tokens[idx - 1]
        if prev.kind in ("newline", "semicolon"):
            return True
        return prev.text in ("{", "}")

    def parse_root(self) -> ScriptBlockNode:
        end = len(self.tokens)
        last_line = self.tokens[-1].line if self.tokens else 1
        root = ScriptBlockNode(1, 1, end_line=last_line)
        param_block, start = self._leading_param_block(0, end)
        root.param_block = param_block
        root.statements = self._parse_range(start, end)
        return root

    def _parse_range(self, start: int, end: int) -> List[Node]:
        nodes: List[Node] = []
        idx = start
        while idx < end:
            token = self.tokens[idx]
            if (
                token.kind == "word"
                and token.text.lower() in FUNCTION_KEYWORDS
                and self._at_statement_start(idx)
                and not self._followed_by_equals(idx, end)
            ):
                node, idx = self._parse_function(idx, end)
                if node is not None:
                    nodes.append(node)
                continue
            if token.kind == "open":
                close = self.matches[idx]
                if token.text == "{":
                    nodes.append(self._parse_script_block(idx, close))
                else:
                    nodes.extend(self._parse_range(idx + 1, close))
                idx = close + 1
                continue
            idx += 1
        return nodes

    def _followed_by_equals(self, idx: int, end: int) -> bool:
        nxt = self._skip_newlines(idx + 1, end)
        return nxt < end and self.tokens[nxt].kind == "equals"

    def _parse_function(
        self, idx: int, end: int
    ) -> Tuple[Optional[FunctionDefinitionNode], int]:
        keyword = self.tokens[idx]
        pos = self._skip_newlines(idx + 1, end)
        if pos >= end or self.tokens[pos].kind != "word":
            self._error(f"Missing name after '{keyword.text}'", keyword)
            return None, idx + 1
        name = _strip_scope(self.tokens[pos].text)

        pos = self._skip_newlines(pos + 1, end)
        inline = None
        if self._is_open(pos, end, "("):
            close = self.matches[pos]
            inline = self._parse_parameters(self.tokens[pos], pos + 1, close)
            pos = self._skip_newlines(close + 1, end)

        if not self._is_open(pos, end, "{"):
            self._error(f"Missing function body in definition of '{name}'", keyword)
            return None, pos

        close = self.matches[pos]
        node = FunctionDefinitionNode(
            keyword.line,
            keyword.column,
            name=name,
            keyword=keyword.text.lower(),
            body=self._parse_script_block(pos, close),
            inline_parameters=inline,
            end_line=self.tokens[close].line,
        )
        return node, close + 1

    def _parse_script_block(self, open_idx: int, close_idx: int) -> ScriptBlockNode:
        opener = self.tokens[open_idx]
        param_block, start = self._leading_param_block(open_idx + 1, close_idx)
        return ScriptBlockNode(
            opener.line,
            opener.column,
            end_line=self.tokens[close_idx].line,
            param_block=param_block,
            statements=self._parse_range(start, close_idx),
        )

    def _leading_param_block(
        self, start: int, end: int
    ) -> Tuple[Optional[ParamBlockNode], int]:
        pos = self._skip_newlines(start, end)
        # [CmdletBinding()], [OutputType(...)] and friends precede param()
        while self._is_open(pos, end, "["):
            pos = self._skip_newlines(self.matches[pos] + 1, end)
        if not (
            pos < end
            and self.tokens[pos].kind == "word"
            and self.tokens[pos].text.lower() == "param"
        ):
            return None, start
        keyword = self.tokens[pos]
        paren = self._skip_newlines(pos + 1, end)
        if not self._is_open(paren, end, "("):
            return None, start
        close = self.matches[paren]
        return self._parse_parameters(keyword, paren + 1, close), close + 1

    def _split_commas(self, start: int, end: int) -> List[List[int]]:
        segments: List[List[int]] = [[]]
        idx = start
        while idx < end:
            token = self.tokens[idx]
            if token.kind == "comma":
                segments.append([])
            elif token.kind != "newline":
                segments[-1].append(idx)
            idx = self.matches[idx] + 1 if token.kind == "open" else idx + 1
        return segments

    def _parse_parameters(self, anchor: Token, start: int, end: int) -> ParamBlockNode:
        block = ParamBlockNode(anchor.line, anchor.column)
        segments = self._split_commas(start, end)
        if segments == [[]]:
            return block
        for segment in segments:
            if not segment:
                self._error("Missing parameter declaration after ','", anchor)
                continue
            parameter = self._parse_parameter(segment)
            if parameter is not None:
                block.parameters.append(parameter)
        return block

    def _group_text(self, open_idx: int) -> str:
        close = self.matches[open_idx]
        return self.source[self.tokens[open_idx].end : self.tokens[close].start].strip()

    def _is_attribute(self, open_idx: int) -> bool:
        close = self.matches[open_idx]
        first = self._skip_newlines(open_idx + 1, close)
        return (
            first < close
            and self.tokens[first].kind == "word"
            and self._is_open(first + 1, close, "(")
        )

    def _segment_end(self, idx: int) -> int:
        if self.tokens[idx].kind == "open":
            return self.tokens[self.matches[idx]].end
        return self.tokens[idx].end

    def _parse_parameter(self, segment: List[int]) -> Optional[ParameterNode]:
        first = self.tokens[segment[0]]
        attributes: List[str] = []
        types: List[str] = []
        pos = 0
        while pos < len(segment) and self._is_open(segment[pos], len(self.tokens), "["):
            text = self._group_text(segment[pos])
            if self._is_attribute(segment[pos]):
                attributes.append(text)
            else:
                types.append(text)
            pos += 1

        if pos >= len(segment) or self.tokens[segment[pos]].kind != "variable":
            where = self.tokens[segment[pos]] if pos < len(segment) else first
            self._error("Missing parameter name in parameter declaration", where)
            return None
        name = _variable_name(self.tokens[segment[pos]].text)
        pos += 1

        default = None
        if pos < len(segment):
            token = self.tokens[segment[pos]]
            if token.kind != "equals":
                self._error(
                    f"Unexpected token '{token.text}' in declaration of '${name}'",
                    token,
                )
                return None
            if pos + 1 >= len(segment):
                self._error(f"Missing default value for '${name}'", token)
                return None
            default = self.source[
                self.tokens[segment[pos + 1]].start : self._segment_end(segment[-1])
            ].strip()

        return ParameterNode(
            first.line,
            first.column,
            name=name,
            declared_type=types[-1] if types else DEFAULT_PARAMETER_TYPE,
            attributes=tuple(attributes),
            default=default,
        )


def parse(source: str) -> Tuple[ScriptBlockNode, List[ParseError]]:
    """
    Parse PowerShell source text.

    Parameters
    ----------
    source : str
        The complete script or module text.

    Returns
    -------
    tuple of (ScriptBlockNode, list of ParseError)
        The root script block and every problem found. When the scanner or
        bracket matching fails the root is returned empty, since statement
        boundaries cannot be trusted.
    """
    scanner = _Scanner(source)
    tokens = scanner.scan()
    errors = scanner.errors
    comments = tuple(t for t in tokens if t.kind == "comment")
    tokens = [t for t in tokens if t.kind != "comment"]

    parser = _Parser(source, tokens, errors)
    if errors or not parser.match_brackets():
        logger.debug("Skipping tree construction after %d scan error(s)", len(errors))
        return ScriptBlockNode(1, 1, comments=comments), errors

    root = parser.parse_root()
    root.comments = comments
    return root, errors
