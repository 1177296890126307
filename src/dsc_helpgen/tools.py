"""
Utilities to insert or replace comment-based help blocks in PowerShell
source. Blocks are placed on the lines directly above each function
definition, indented to the definition's column; a ``<# ... #>`` block
that already sits directly above a definition is replaced. Line indices
are resolved from the syntax tree before any edit so insertions never
shift each other.
"""

from typing import Dict, List, Optional, Set, Tuple

from .syntax import Token, find_all, is_function_named, parse


def _comment_end_line(token: Token) -> int:
    return token.line + token.text.count("\n")


def _preceding_help(
    lines: List[Optional[str]], comments: Tuple[Token, ...], def_index: int
) -> Optional[Token]:
    """Return the block comment separated from line ``def_index`` only by blank lines."""
    previous = def_index - 1
    while previous >= 0 and not lines[previous].strip():
        previous -= 1
    if previous < 0:
        return None
    for token in comments:
        if not token.text.startswith("<#"):
            continue
        if _comment_end_line(token) - 1 != previous:
            continue
        # The comment must own its lines
        head = lines[token.line - 1][: token.column - 1]
        tail = lines[previous].rstrip("\r\n")
        if head.strip() or not tail.rstrip().endswith("#>"):
            return None
        return token
    return None


def _indent_block(text: str, indent: str) -> str:
    formatted = ""
    for line in text.splitlines():
        # Preserve empty lines correctly
        formatted += f"{indent}{line}\n" if line.strip() else "\n"
    return formatted


def insert_comment_help_to_source(original_source: str, blocks: Dict[str, str]) -> str:
    """
    Insert help blocks above the matching function definitions.

    Parameters
    ----------
    original_source : str
        Full PowerShell module text.
    blocks : dict
        Function name to rendered block text (as produced by
        ``synthesizer.synthesize``). Names not defined in the source are
        ignored; only the first definition of a name receives a block.

    Returns
    -------
    str
        The modified source. If the source does not parse, it is returned
        unchanged.
    """
    tree, errors = parse(original_source)
    if errors:
        # Fallback: If code is unparsable, we can't inject safely.
        return original_source

    lines: List[Optional[str]] = original_source.splitlines(keepends=True)
    lines_to_delete: Set[int] = set()
    insertions = []  # List of (index_to_insert_at, text)
    seen: Set[str] = set()
    names = {name.casefold(): name for name in blocks}

    for node in find_all(tree, is_function_named(blocks)):
        name = names[node.name.casefold()]
        if name in seen:
            continue
        seen.add(name)

        def_index = node.line - 1
        existing = _preceding_help(lines, tree.comments, def_index)
        if existing is not None:
            for i in range(existing.line - 1, _comment_end_line(existing)):
                lines_to_delete.add(i)

        indent = " " * (node.column - 1)
        insertions.append((def_index, _indent_block(blocks[name], indent)))

    # Nullify deleted lines so indices don't shift yet
    for idx in lines_to_delete:
        if 0 <= idx < len(lines):
            lines[idx] = None

    # Bottom to top keeps the remaining insertion indices valid
    insertions.sort(key=lambda x: x[0], reverse=True)
    for idx, text in insertions:
        if 0 <= idx <= len(lines):
            lines.insert(idx, text)

    return "".join(line for line in lines if line is not None)
