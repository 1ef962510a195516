"""
Tokenizer for filang statements.

Splits one line into words, quoted strings and parentheses, keeping the
source offsets of every token so the router can hand the raw WHERE text
to the predicate parser untouched.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List

from ..exit_codes import DslSyntaxError


class TokenKind(Enum):
    WORD = "word"
    STRING = "string"
    LPAREN = "("
    RPAREN = ")"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    value: str
    start: int
    end: int

    def is_word(self, *keywords: str) -> bool:
        """True if this is a bare word equal (case-insensitively) to one of ``keywords``."""
        return self.kind is TokenKind.WORD and self.value.upper() in keywords


def tokenize(text: str) -> List[Token]:
    """
    Tokenize a statement line.

    Strings are delimited by double or single quotes; a backslash keeps
    the next character inside the string, and the string value is the
    raw text between the quotes.

    Raises:
        DslSyntaxError: On an unterminated string
    """
    tokens: List[Token] = []
    i = 0
    length = len(text)

    while i < length:
        char = text[i]

        if char.isspace():
            i += 1
            continue

        if char in ('"', "'"):
            start = i
            i += 1
            while i < length and text[i] != char:
                i += 2 if text[i] == '\\' else 1
            if i >= length:
                raise DslSyntaxError(f"Unterminated string starting at column {start + 1}")
            tokens.append(Token(TokenKind.STRING, text[start + 1:i], start, i + 1))
            i += 1
            continue

        if char == '(':
            tokens.append(Token(TokenKind.LPAREN, char, i, i + 1))
            i += 1
            continue

        if char == ')':
            tokens.append(Token(TokenKind.RPAREN, char, i, i + 1))
            i += 1
            continue

        start = i
        while i < length and not text[i].isspace() and text[i] not in '"\'()':
            i += 1
        tokens.append(Token(TokenKind.WORD, text[start:i], start, i))

    return tokens
