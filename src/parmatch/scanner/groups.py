"""
Comma-separated token group reading.

Parameter lists in both module definitions (``module m #(parameter A = 1,
B = 2)``) and instantiations (``m #(.A(3), 4) u0 (...)``) are read the same
way: the ``#(`` introducer, then groups of tokens separated by top-level
commas up to the matching ``)``.
"""

import logging
from typing import List

from parmatch.scanner.lexer import Token, TokenStream, TokenType

logger = logging.getLogger(__name__)

OPENERS = frozenset({TokenType.LPAREN, TokenType.LBRACKET, TokenType.LBRACE})
CLOSERS = frozenset({TokenType.RPAREN, TokenType.RBRACKET, TokenType.RBRACE})

TokenGroup = List[Token]


def read_groups(stream: TokenStream) -> List[TokenGroup]:
    """
    Read a closer-terminated, comma-separated list of token groups.

    The opening delimiter must already have been consumed (nesting starts at
    1). Brackets only track nesting and are not kept in the groups; commas
    only separate groups at nesting depth 1. Empty source between
    the delimiters gives one empty group. If input ends before the matching
    closer, the groups read so far (including the open one) are returned.
    """
    groups: List[TokenGroup] = []
    group: TokenGroup = []
    nest = 1
    while True:
        token = stream.next()
        if token.type == TokenType.EOF:
            groups.append(group)
            return groups
        if token.type in OPENERS:
            nest += 1
        elif token.type in CLOSERS:
            nest -= 1
            if nest == 0:
                groups.append(group)
                return groups
        elif token.type == TokenType.COMMA and nest == 1:
            groups.append(group)
            group = []
        else:
            group.append(token)


def maybe_read_param_lparen(stream: TokenStream) -> bool:
    """
    Consume a ``#`` ``(`` pair if present.

    Tokens examined are not pushed back when the pair is absent: the caller
    continues after whatever was read (one token if it was not ``#``, two
    otherwise).
    """
    if stream.next().type != TokenType.HASH:
        return False
    return stream.next().type == TokenType.LPAREN


def read_param_list(stream: TokenStream) -> List[TokenGroup]:
    """
    Read an optional ``#( ... )`` parameter list.

    Returns no groups when the list is absent; ``#()`` gives one empty group.
    """
    if not maybe_read_param_lparen(stream):
        return []
    groups = read_groups(stream)
    logger.debug("%s: read %d parameter group(s)", stream.filename, len(groups))
    return groups
