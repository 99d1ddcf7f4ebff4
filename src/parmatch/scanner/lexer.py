"""
Verilog/SystemVerilog Lexer (Tokenizer)

Converts HDL source text into a lazy stream of tokens. This is not a full
Verilog lexer: it recognizes just enough (identifiers, keywords, named
parameter binds, numbers, delays, punctuation, strings, macros) for the
parameter binding checks, and recovers from anything else by dropping the
rest of the offending line.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Union

from parmatch.diagnostics import Reporter
from parmatch.errors import SourceReadError

logger = logging.getLogger(__name__)


class TokenType(Enum):
    """Kinds of tokens. Every punctuation/operator is its own kind."""
    KEYWORD = "keyword"          # module, endmodule, parameter, begin, ...
    IDENTIFIER = "identifier"    # foo, bar_baz, a.b, \escaped+id
    PARAM_BIND = "param_bind"    # .WIDTH (dot stripped from value)
    NUMBER = "number"            # 42, 8'b1010, 'h, 1.5
    DELAY = "delay"              # #10, #1.5 (value without the #)
    STRING = "string"            # "quoted string"
    MACRO = "macro"              # `define, `FOO (value without the backtick)
    LESS_EQUAL = "<="
    GREATER_EQUAL = ">="
    LOGICAL_AND = "&&"
    LOGICAL_OR = "||"
    SEMICOLON = ";"
    COMMA = ","
    HASH = "#"
    LPAREN = "("
    RPAREN = ")"
    LBRACE = "{"
    RBRACE = "}"
    EQUALS = "="
    QUESTION = "?"
    COLON = ":"
    BANG = "!"
    LESS_THAN = "<"
    GREATER_THAN = ">"
    TILDE = "~"
    PIPE = "|"
    AMPERSAND = "&"
    CARET = "^"
    PLUS = "+"
    MINUS = "-"
    STAR = "*"
    PERCENT = "%"
    AT = "@"
    SLASH = "/"
    LBRACKET = "["
    RBRACKET = "]"
    EOF = "eof"                  # End of input


KEYWORDS = frozenset({
    "module", "endmodule", "begin", "end", "case", "endcase",
    "generate", "endgenerate", "parameter", "localparam", "type",
    "real", "integer", "logic", "wire", "reg", "time", "realtime",
    "assign", "posedge", "negedge",
})

# Two-character operators are listed first so they win over their prefixes
TWO_CHAR_OPERATORS = {
    t.value: t for t in (
        TokenType.LESS_EQUAL, TokenType.GREATER_EQUAL,
        TokenType.LOGICAL_AND, TokenType.LOGICAL_OR,
    )
}
ONE_CHAR_OPERATORS = {
    t.value: t for t in TokenType
    if len(t.value) == 1
}


@dataclass(frozen=True)
class Token:
    """A single token from the lexer."""
    type: TokenType
    value: Optional[str]
    file: str
    line: int

    def __repr__(self):
        if self.value is None:
            return f"Token({self.type.name}, {self.file}:{self.line})"
        return f"Token({self.type.name}, {self.value!r}, {self.file}:{self.line})"


_IDENTIFIER = re.compile(r"[a-zA-Z_$.][a-zA-Z_$.0-9]*")
_ESCAPED_IDENTIFIER = re.compile(r"\\(\S+)")
_NUMBER = re.compile(r"[0-9'][0-9'bodhxzsBODHXZS_.]*")
_DELAY = re.compile(r"#([0-9][0-9.]*)")
_MACRO = re.compile(r"`([a-zA-Z_0-9]+)")
# Physical line breaks only; form feeds, \x85 and friends stay inside a line
_LINE_BREAK = re.compile(r"\r\n|\r|\n")


class Lexer:
    """
    Tokenizer for Verilog/SystemVerilog source files.

    Works line by line; ``self.line`` is the 1-based number of the physical
    line being scanned and advances on every consumed line, including lines
    swallowed by block comments and continued strings.

    Usage:
        lexer = Lexer(source_text, "top.v")
        for token in lexer.tokenize():
            ...
    """

    def __init__(self, source: str, filename: str = "<unknown>",
                 reporter: Optional[Reporter] = None):
        self.filename = filename
        self.reporter = reporter if reporter is not None else Reporter()
        self._lines = _LINE_BREAK.split(source)
        if self._lines[-1] == "":
            self._lines.pop()
        self._index = 0
        self.line = 1
        self._rest: Optional[str] = self._lines[0] if self._lines else None
        self._matchers: List[Callable[[], Optional[Token]]] = [
            self._match_identifier,
            self._match_escaped_identifier,
            self._match_number,
            self._match_delay,
            self._match_operator,
            self._match_string,
            self._match_macro,
        ]

    def _next_line(self) -> bool:
        """Move to the next physical line. Returns False at end of input."""
        self._index += 1
        self.line += 1
        if self._index >= len(self._lines):
            self._rest = None
            return False
        self._rest = self._lines[self._index]
        return True

    def _skip_block_comment(self) -> None:
        """Skip past the closing */, consuming as many lines as needed."""
        self._rest = self._rest[2:]
        while True:
            end = self._rest.find("*/")
            if end >= 0:
                self._rest = self._rest[end + 2:]
                return
            if not self._next_line():
                return

    def _skip_blanks(self) -> bool:
        """
        Skip whitespace, comments and line continuations.

        Returns True if a token may start at the current position, False at
        end of input.
        """
        while self._rest is not None:
            self._rest = self._rest.lstrip()
            if not self._rest:
                self._next_line()
            elif self._rest.startswith("//"):
                self._rest = ""
            elif self._rest.startswith("/*"):
                self._skip_block_comment()
            elif self._rest[0] == "\\" and (len(self._rest) == 1 or self._rest[1].isspace()):
                self._rest = self._rest[1:]
            else:
                return True
        return False

    def _make(self, token_type: TokenType, value: Optional[str], line: int) -> Token:
        return Token(token_type, value, self.filename, line)

    def _match_identifier(self) -> Optional[Token]:
        m = _IDENTIFIER.match(self._rest)
        if not m:
            return None
        self._rest = self._rest[m.end():]
        text = m.group(0)
        bare = text[1:] if text.startswith(".") else text
        if bare in KEYWORDS:
            return self._make(TokenType.KEYWORD, bare, self.line)
        if text.startswith("."):
            return self._make(TokenType.PARAM_BIND, bare, self.line)
        return self._make(TokenType.IDENTIFIER, text, self.line)

    def _match_escaped_identifier(self) -> Optional[Token]:
        m = _ESCAPED_IDENTIFIER.match(self._rest)
        if not m:
            return None
        self._rest = self._rest[m.end():]
        return self._make(TokenType.IDENTIFIER, m.group(1), self.line)

    def _match_number(self) -> Optional[Token]:
        m = _NUMBER.match(self._rest)
        if not m:
            return None
        self._rest = self._rest[m.end():]
        return self._make(TokenType.NUMBER, m.group(0), self.line)

    def _match_delay(self) -> Optional[Token]:
        m = _DELAY.match(self._rest)
        if not m:
            return None
        self._rest = self._rest[m.end():]
        return self._make(TokenType.DELAY, m.group(1), self.line)

    def _match_operator(self) -> Optional[Token]:
        token_type = TWO_CHAR_OPERATORS.get(self._rest[:2]) or ONE_CHAR_OPERATORS.get(self._rest[:1])
        if token_type is None:
            return None
        self._rest = self._rest[len(token_type.value):]
        return self._make(token_type, token_type.value, self.line)

    def _match_string(self) -> Optional[Token]:
        """
        Read a double-quoted string. A backslash at the very end of a line
        continues the string onto the next line. On an unterminated string
        the lexer state is restored and None is returned.
        """
        if not self._rest.startswith('"'):
            return None
        start_line = self.line
        saved = (self._index, self.line, self._rest)
        text = self._rest[1:]
        result = []
        i = 0
        while True:
            if i >= len(text):
                if result and result[-1] == "\\" and self._next_line():
                    result.pop()
                    text = self._rest
                    i = 0
                    continue
                self._index, self.line, self._rest = saved
                return None
            ch = text[i]
            if ch == "\\" and i + 1 < len(text):
                nxt = text[i + 1]
                result.append('"' if nxt == '"' else ch + nxt)
                i += 2
                continue
            if ch == '"':
                self._rest = text[i + 1:]
                return self._make(TokenType.STRING, "".join(result), start_line)
            result.append(ch)
            i += 1

    def _match_macro(self) -> Optional[Token]:
        m = _MACRO.match(self._rest)
        if not m:
            return None
        self._rest = self._rest[m.end():]
        return self._make(TokenType.MACRO, m.group(1), self.line)

    def next_token(self) -> Token:
        """Return the next token, or an EOF token at end of input."""
        while self._skip_blanks():
            for matcher in self._matchers:
                token = matcher()
                if token is not None:
                    logger.debug("%s:%d: token %s", self.filename, token.line, token)
                    return token
            self.reporter.warn(self.filename, self.line,
                               f"failed to recognize token '{self._rest}'")
            self._rest = ""
        return self._make(TokenType.EOF, None, self.line)

    def tokenize(self) -> Iterator[Token]:
        """Generate tokens up to and including a single EOF token."""
        while True:
            token = self.next_token()
            yield token
            if token.type == TokenType.EOF:
                break


class TokenStream:
    """
    Forward-only cursor over a Lexer with a pushback buffer of depth one.

    Once the lexer is exhausted, ``next()`` keeps returning the EOF token.
    """

    def __init__(self, lexer: Lexer):
        self.lexer = lexer
        self._pushed: Optional[Token] = None
        self._eof: Optional[Token] = None

    @property
    def filename(self) -> str:
        return self.lexer.filename

    def next(self) -> Token:
        if self._pushed is not None:
            token, self._pushed = self._pushed, None
            return token
        if self._eof is not None:
            return self._eof
        token = self.lexer.next_token()
        if token.type == TokenType.EOF:
            self._eof = token
        return token

    def push_back(self, token: Token) -> None:
        if self._pushed is not None:
            raise ValueError("token pushback buffer is already full")
        self._pushed = token

    def __iter__(self) -> Iterator[Token]:
        """Iterate until (not including) EOF."""
        while True:
            token = self.next()
            if token.type == TokenType.EOF:
                return
            yield token


def read_source(filepath: Union[str, Path]) -> str:
    """Read a source file. Handles encoding fallback; raises SourceReadError."""
    # Try UTF-8 with BOM first, then UTF-8, then latin-1 (which always succeeds)
    try:
        raw = Path(filepath).read_bytes()
    except OSError as e:
        raise SourceReadError(filepath, e.strerror or str(e)) from e
    for encoding in ['utf-8-sig', 'utf-8']:
        try:
            return raw.decode(encoding)
        except UnicodeDecodeError:
            continue
    return raw.decode('latin-1')


def open_stream(filepath: Union[str, Path], reporter: Optional[Reporter] = None) -> TokenStream:
    """Read a file and return a token stream over it."""
    source = read_source(filepath)
    return TokenStream(Lexer(source, filename=str(filepath), reporter=reporter))
