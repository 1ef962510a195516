"""
DSL parsing for filang.

Provides the tokenizer and the statement router that turns one input
line into a Statement variant.
"""

from .lexer import Token, TokenKind, tokenize
from .router import COMMANDS, StatementRouter

__all__ = ['Token', 'TokenKind', 'tokenize', 'COMMANDS', 'StatementRouter']
