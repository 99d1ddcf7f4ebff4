"""
parmatch.scanner - HDL token scanner

Lexer, token stream and parameter-list group reader. Converts Verilog and
SystemVerilog source into tokens without building a syntax tree.
"""

from parmatch.scanner.lexer import (
    KEYWORDS,
    Lexer,
    Token,
    TokenStream,
    TokenType,
    open_stream,
    read_source,
)
from parmatch.scanner.groups import (
    TokenGroup,
    maybe_read_param_lparen,
    read_groups,
    read_param_list,
)

__all__ = [
    # Lexer
    "KEYWORDS",
    "Lexer",
    "Token",
    "TokenStream",
    "TokenType",
    "open_stream",
    "read_source",
    # Groups
    "TokenGroup",
    "maybe_read_param_lparen",
    "read_groups",
    "read_param_list",
]
