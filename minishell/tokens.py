"""Lexer tokens and the command table built from them."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import IntEnum

REDIRECTION_OPERATORS = frozenset({"<", ">", ">>", "<<"})
_QUOTE_MARK = ";"


class TokenType(IntEnum):
    """Kinds of token produced by the lexer."""

    WORD = 0
    PIPE = 1
    REDIR_IN = 2
    REDIR_OUT = 3
    REDIR_APPEND = 4
    SQUOTE = 5
    DQUOTE = 6
    HEREDOC = 7
    VAR = 8
    SPACE = 9


_REDIRECT_TYPES = frozenset(
    {TokenType.REDIR_IN, TokenType.REDIR_OUT, TokenType.REDIR_APPEND, TokenType.HEREDOC}
)
_QUOTED_TYPES = frozenset({TokenType.SQUOTE, TokenType.DQUOTE})


@dataclass(frozen=True)
class Token:
    """One lexed token: its text and its kind."""

    content: str
    type: TokenType = TokenType.WORD


def _segment_entries(segment: list[Token]) -> list[list[str]]:
    """Turn the tokens between two pipes into redirection entries and an argv."""
    redirections: list[list[str]] = []
    argv: list[str] = []
    tokens: Iterator[Token] = iter(segment)
    for token in tokens:
        if token.type in _REDIRECT_TYPES:
            target = next(tokens, None)
            if target is None:
                raise ValueError(f"missing target after {token.content!r}")
            redirections.append([token.content, target.content])
        elif token.type in _QUOTED_TYPES and token.content in REDIRECTION_OPERATORS:
            # A quoted operator is a plain word; mark it so it is not taken
            # for a redirection before the command runs.
            argv.append(_QUOTE_MARK + token.content)
        else:
            argv.append(token.content)
    if argv:
        redirections.append(argv)
    return redirections


def build_command_table(tokens: Iterable[Token]) -> list[list[str]]:
    """Build the command table: per pipeline stage, its redirections then its argv.

    Each pipe becomes an entry of its own holding the pipe's text.
    """
    table: list[list[str]] = []
    segment: list[Token] = []
    for token in tokens:
        if token.type is TokenType.PIPE:
            table.extend(_segment_entries(segment))
            segment = []
            table.append([token.content])
        else:
            segment.append(token)
    table.extend(_segment_entries(segment))
    return table


def is_redirection(entry: list[str] | None) -> bool:
    """Tell whether a command-table entry is a redirection."""
    return bool(entry) and entry[0] in REDIRECTION_OPERATORS


def _later_entries(table: list[list[str]], index: int) -> Iterator[list[str]]:
    for entry in table[index + 1:]:
        if not entry or entry[0][:1] == "|":
            return
        yield entry


def has_later_input(table: list[list[str]], index: int) -> bool:
    """Tell whether an input redirection follows index within the same stage."""
    return any(entry[0] in ("<", "<<") for entry in _later_entries(table, index))


def has_later_output(table: list[list[str]], index: int) -> bool:
    """Tell whether an output redirection follows index within the same stage."""
    return any(entry[0] in (">", ">>") for entry in _later_entries(table, index))


def restore_quoted_operators(table: list[list[str]]) -> None:
    """Strip the quote mark from marked operator words, in place."""
    marked = {_QUOTE_MARK + op for op in REDIRECTION_OPERATORS}
    for entry in table:
        entry[:] = [word[1:] if word in marked else word for word in entry]