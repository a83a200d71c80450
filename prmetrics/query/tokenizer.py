"""
Tokenizer for the GitHub search-query language.

Splits a query into qualifiers (``key:value``), boolean operators,
parentheses and bare terms. Double-quoted spans are kept intact, so
``label:"good first issue"`` is a single qualifier token.
"""

import re
from dataclasses import dataclass
from enum import Enum

OPERATORS = frozenset({"AND", "OR", "NOT"})

_QUALIFIER_RE = re.compile(r"^(-?)([A-Za-z][\w-]*):(.*)$", re.DOTALL)


class TokenKind(str, Enum):
    """Kinds of tokens produced by :func:`tokenize`."""

    QUALIFIER = "qualifier"
    OPERATOR = "operator"
    LPAREN = "lparen"
    RPAREN = "rparen"
    TERM = "term"


@dataclass(frozen=True)
class Token:
    """A single lexical unit of a search query."""

    kind: TokenKind
    text: str  # raw source text
    position: int  # offset of the first character in the query
    key: str | None = None  # lowercased qualifier key, without "-"
    value: str | None = None  # qualifier value, quotes removed
    negated: bool = False
    quoted: bool = False

    @property
    def is_qualifier(self) -> bool:
        return self.kind is TokenKind.QUALIFIER


def tokenize(query: str) -> list[Token]:
    """
    Split a query into tokens.

    Whitespace separates tokens except inside double quotes. Parentheses
    outside quotes are emitted as their own tokens. An unterminated quote
    runs to the end of the input.

    Args:
        query: Raw query string

    Returns:
        Tokens in source order
    """
    tokens: list[Token] = []
    i = 0
    length = len(query)

    while i < length:
        char = query[i]

        if char.isspace():
            i += 1
            continue

        if char == "(":
            tokens.append(Token(TokenKind.LPAREN, char, i))
            i += 1
            continue

        if char == ")":
            tokens.append(Token(TokenKind.RPAREN, char, i))
            i += 1
            continue

        start = i
        in_quotes = False
        while i < length:
            char = query[i]
            if char == '"':
                in_quotes = not in_quotes
            elif not in_quotes and (char.isspace() or char in "()"):
                break
            i += 1

        tokens.append(_classify(query[start:i], start))

    return tokens


def _classify(word: str, position: int) -> Token:
    if word in OPERATORS:
        return Token(TokenKind.OPERATOR, word, position)

    match = _QUALIFIER_RE.match(word)
    if match is None:
        return Token(TokenKind.TERM, word, position, value=word.strip('"'))

    negation, key, raw_value = match.groups()
    quoted = raw_value.startswith('"')
    return Token(
        TokenKind.QUALIFIER,
        word,
        position,
        key=key.lower(),
        value=raw_value.replace('"', ""),
        negated=bool(negation),
        quoted=quoted,
    )


def qualifiers(tokens: list[Token], key: str, include_negated: bool = False) -> list[Token]:
    """Return the qualifier tokens for ``key`` in source order."""
    return [
        token
        for token in tokens
        if token.is_qualifier
        and token.key == key
        and (include_negated or not token.negated)
    ]
