"""Modal scanner for protobuf (.proto) files.

The proto3 grammar reuses the same lexical shapes in different positions
(``max`` is a keyword or an identifier, ``-1`` is a literal or two tokens),
so the caller chooses a ScanMode for every token it asks for.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import Enum, Flag, auto
from typing import Callable, Deque, Optional

from .errors import ProtoScanError
from .proto_meta import Position
from .rune_source import EOF_RUNE, RuneSource


class ProtoTokenType(Enum):
    # Keywords
    SYNTAX = auto()
    IMPORT = auto()
    WEAK = auto()
    PUBLIC = auto()
    PACKAGE = auto()
    OPTION = auto()
    MESSAGE = auto()
    ENUM = auto()
    SERVICE = auto()
    RPC = auto()
    RETURNS = auto()
    STREAM = auto()
    ONEOF = auto()
    MAP = auto()
    RESERVED = auto()
    TO = auto()
    MAX = auto()
    EXTENSIONS = auto()
    EXTEND = auto()
    REPEATED = auto()
    OPTIONAL = auto()
    REQUIRED = auto()
    ADDITIONAL_BINDINGS = auto()

    # Delimiters
    EQUALS = auto()
    SEMICOLON = auto()
    COMMA = auto()
    DOT = auto()
    COLON = auto()
    LPAREN = auto()
    RPAREN = auto()
    LBRACE = auto()
    RBRACE = auto()
    LBRACKET = auto()
    RBRACKET = auto()
    LANGLE = auto()
    RANGLE = auto()
    MINUS = auto()
    PLUS = auto()
    SLASH = auto()
    QUOTE = auto()

    # Literals
    IDENT = auto()
    INT_LIT = auto()
    FLOAT_LIT = auto()
    STRING_LIT = auto()
    BOOL_LIT = auto()

    # Special
    COMMENT = auto()
    ILLEGAL = auto()
    EOF = auto()


_KEYWORDS = {
    "syntax": ProtoTokenType.SYNTAX,
    "import": ProtoTokenType.IMPORT,
    "weak": ProtoTokenType.WEAK,
    "public": ProtoTokenType.PUBLIC,
    "package": ProtoTokenType.PACKAGE,
    "option": ProtoTokenType.OPTION,
    "message": ProtoTokenType.MESSAGE,
    "enum": ProtoTokenType.ENUM,
    "service": ProtoTokenType.SERVICE,
    "rpc": ProtoTokenType.RPC,
    "returns": ProtoTokenType.RETURNS,
    "stream": ProtoTokenType.STREAM,
    "oneof": ProtoTokenType.ONEOF,
    "map": ProtoTokenType.MAP,
    "reserved": ProtoTokenType.RESERVED,
    "to": ProtoTokenType.TO,
    "max": ProtoTokenType.MAX,
    "extensions": ProtoTokenType.EXTENSIONS,
    "extend": ProtoTokenType.EXTEND,
    "repeated": ProtoTokenType.REPEATED,
    "optional": ProtoTokenType.OPTIONAL,
    "required": ProtoTokenType.REQUIRED,
    "additional_bindings": ProtoTokenType.ADDITIONAL_BINDINGS,
}

_DELIMITERS = {
    "=": ProtoTokenType.EQUALS,
    ";": ProtoTokenType.SEMICOLON,
    ",": ProtoTokenType.COMMA,
    ".": ProtoTokenType.DOT,
    ":": ProtoTokenType.COLON,
    "(": ProtoTokenType.LPAREN,
    ")": ProtoTokenType.RPAREN,
    "{": ProtoTokenType.LBRACE,
    "}": ProtoTokenType.RBRACE,
    "[": ProtoTokenType.LBRACKET,
    "]": ProtoTokenType.RBRACKET,
    "<": ProtoTokenType.LANGLE,
    ">": ProtoTokenType.RANGLE,
    "-": ProtoTokenType.MINUS,
    "+": ProtoTokenType.PLUS,
    "/": ProtoTokenType.SLASH,
    '"': ProtoTokenType.QUOTE,
    "'": ProtoTokenType.QUOTE,
}

KEYWORD_TYPES = frozenset(_KEYWORDS.values())

_WHITESPACE = (" ", "\t", "\r", "\n")
_QUOTES = ('"', "'")
_SIMPLE_ESCAPES = "abfnrtv\\'\"?"
_OCTAL_DIGITS = "01234567"
_HEX_DIGITS = "0123456789abcdefABCDEF"


class ScanMode(Flag):
    DEFAULT = 0
    KEYWORD = 1
    STRING_LIT = 2
    NUMBER_LIT = 4
    BOOL_LIT = 8
    COMMENT = 16
    LIT = STRING_LIT | NUMBER_LIT | BOOL_LIT


@dataclass
class ProtoToken:
    type: ProtoTokenType
    value: str
    pos: Position
    # Position of the last character; only tracked for comments.
    end: Optional[Position] = None
    error: Optional[ProtoScanError] = None

    @property
    def line(self) -> int:
        return self.pos.line

    @property
    def col(self) -> int:
        return self.pos.column


def _is_ident_start(ch: str) -> bool:
    return ch.isalpha() or ch == "_"


def _is_ident_char(ch: str) -> bool:
    return ch.isalnum() or ch == "_"


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


class ProtoScanner:
    """Turns a RuneSource into tokens under a caller-selected ScanMode.

    Outside ScanMode.COMMENT, comments are skipped like whitespace and queued
    on ``pending_comments`` for the parser to attach. ``unscan`` rewinds the
    last token so it can be scanned again, possibly under another mode.
    """

    def __init__(self, source: RuneSource):
        self._src = source
        self._can_unscan = False
        self.pending_comments: Deque[ProtoToken] = deque()
        self.latest_err: Optional[ProtoScanError] = None
        self.on_error: Optional[Callable[[ProtoScanError], None]] = None

    @property
    def filename(self) -> str:
        return self._src.filename

    def scan(self, mode: ScanMode = ScanMode.DEFAULT) -> ProtoToken:
        """Scan the next token."""
        self._can_unscan = True
        try:
            return self._scan(mode)
        except ProtoScanError as err:
            # Undecodable input, raised by the rune source at the bad byte.
            self._report(err)
            return ProtoToken(ProtoTokenType.ILLEGAL, "", err.pos, error=err)

    def _scan(self, mode: ScanMode) -> ProtoToken:
        tok = self._skip_whitespace(mode)
        if tok is not None:
            return tok

        start = self._src.mark()
        ch = self._src.peek()

        if ch == EOF_RUNE:
            return ProtoToken(ProtoTokenType.EOF, "", start)

        if _is_ident_start(ch):
            word = self._scan_ident()
            if mode & ScanMode.BOOL_LIT and word in ("true", "false"):
                return ProtoToken(ProtoTokenType.BOOL_LIT, word, start)
            if mode & ScanMode.NUMBER_LIT and word in ("inf", "nan"):
                return ProtoToken(ProtoTokenType.FLOAT_LIT, word, start)
            if mode & ScanMode.KEYWORD and word in _KEYWORDS:
                return ProtoToken(_KEYWORDS[word], word, start)
            return ProtoToken(ProtoTokenType.IDENT, word, start)

        if _is_digit(ch):
            return self._scan_number("", start)

        if ch in _QUOTES and mode & ScanMode.STRING_LIT:
            return self._scan_string(start)

        self._src.next()
        if mode & ScanMode.NUMBER_LIT:
            if ch in ("-", "+"):
                return self._scan_signed(ch, start)
            if ch == "." and _is_digit(self._src.peek()):
                return self._scan_number(".", start, fraction=True)

        tok_type = _DELIMITERS.get(ch, ProtoTokenType.ILLEGAL)
        return ProtoToken(tok_type, ch, start)

    def unscan(self) -> None:
        """Rewind the last scanned token. Only one level of pushback exists."""
        if not self._can_unscan:
            raise RuntimeError("unscan without a preceding scan")
        self._can_unscan = False
        self._src.reset()

    # -- whitespace and comments --

    def _skip_whitespace(self, mode: ScanMode) -> Optional[ProtoToken]:
        """Skip whitespace and, outside COMMENT mode, queue comments.

        Returns a token only for a COMMENT in COMMENT mode or an ILLEGAL
        unterminated comment.
        """
        while True:
            ch = self._src.peek()
            if ch in _WHITESPACE:
                self._src.next()
                continue
            if ch != "/":
                return None

            self._src.next()
            following = self._src.peek()
            self._src.unread()
            if following not in ("/", "*"):
                return None

            start = self._src.mark()
            tok = self._scan_comment(start)
            if mode & ScanMode.COMMENT or tok.type == ProtoTokenType.ILLEGAL:
                return tok
            self.pending_comments.append(tok)

    def _scan_comment(self, start: Position) -> ProtoToken:
        chars = [self._src.next(), self._src.next()]
        if chars[1] == "/":
            while self._src.peek() not in ("\n", EOF_RUNE):
                chars.append(self._src.next())
            raw = "".join(chars).rstrip("\r")
            return ProtoToken(ProtoTokenType.COMMENT, raw, start, end=self._src.prev_pos)

        while True:
            ch = self._src.next()
            if ch == EOF_RUNE:
                return self._illegal("".join(chars), "unterminated block comment", start)
            chars.append(ch)
            if ch == "*" and self._src.peek() == "/":
                chars.append(self._src.next())
                return ProtoToken(
                    ProtoTokenType.COMMENT, "".join(chars), start, end=self._src.prev_pos
                )

    # -- identifiers --

    def _scan_ident(self) -> str:
        chars = [self._src.next()]
        while _is_ident_char(self._src.peek()):
            chars.append(self._src.next())
        return "".join(chars)

    # -- numbers --

    def _scan_signed(self, sign: str, start: Position) -> ProtoToken:
        ch = self._src.peek()
        if _is_digit(ch):
            return self._scan_number(sign, start)
        if ch == ".":
            self._src.next()
            if _is_digit(self._src.peek()):
                return self._scan_number(sign + ".", start, fraction=True)
            self._src.unread()
        elif _is_ident_start(ch):
            word = self._scan_ident()
            if word in ("inf", "nan"):
                return ProtoToken(ProtoTokenType.FLOAT_LIT, sign + word, start)
            return ProtoToken(ProtoTokenType.ILLEGAL, sign + word, start)
        return ProtoToken(_DELIMITERS[sign], sign, start)

    def _scan_number(self, prefix: str, start: Position, fraction: bool = False) -> ProtoToken:
        """Scan intLit or floatLit; ``prefix`` is the sign and/or a leading dot."""
        chars = [prefix]
        is_float = fraction

        if not fraction and self._src.peek() == "0":
            chars.append(self._src.next())
            if self._src.peek() in ("x", "X"):
                chars.append(self._src.next())
                digits = self._take(lambda c: c in _HEX_DIGITS)
                if not digits:
                    return self._bad_number(chars, start)
                chars.append(digits)
                return self._finish_number(chars, start, ProtoTokenType.INT_LIT)

        chars.append(self._take(_is_digit))
        if not fraction and self._src.peek() == ".":
            chars.append(self._src.next())
            chars.append(self._take(_is_digit))
            is_float = True
        if self._src.peek() in ("e", "E"):
            chars.append(self._src.next())
            if self._src.peek() in ("+", "-"):
                chars.append(self._src.next())
            exponent = self._take(_is_digit)
            if not exponent:
                return self._bad_number(chars, start)
            chars.append(exponent)
            is_float = True

        if not is_float:
            digits = "".join(chars).lstrip("+-")
            if len(digits) > 1 and digits[0] == "0" and any(c in "89" for c in digits):
                return self._bad_number(chars, start)
            return self._finish_number(chars, start, ProtoTokenType.INT_LIT)
        return self._finish_number(chars, start, ProtoTokenType.FLOAT_LIT)

    def _finish_number(self, chars, start: Position, tok_type: ProtoTokenType) -> ProtoToken:
        if _is_ident_char(self._src.peek()) or self._src.peek() == ".":
            return self._bad_number(chars, start)
        return ProtoToken(tok_type, "".join(chars), start)

    def _bad_number(self, chars, start: Position) -> ProtoToken:
        chars.append(self._take(lambda c: _is_ident_char(c) or c == "."))
        text = "".join(chars)
        return self._illegal(text, f"invalid number literal {text!r}", start)

    def _take(self, accept: Callable[[str], bool]) -> str:
        chars = []
        while self._src.peek() != EOF_RUNE and accept(self._src.peek()):
            chars.append(self._src.next())
        return "".join(chars)

    # -- strings --

    def _scan_string(self, start: Position) -> ProtoToken:
        """Scan a quoted string, joining adjacent literals into one token."""
        quote = self._src.peek()
        body = []
        while True:
            lit_start = self._src.pos
            lit_quote = self._src.next()
            while True:
                ch = self._src.next()
                if ch in (EOF_RUNE, "\n"):
                    return self._illegal(lit_quote + "".join(body), "unterminated string literal", lit_start)
                if ch == lit_quote:
                    break
                if ch == "\\":
                    escape = self._scan_escape()
                    if escape is None:
                        return self._illegal(
                            lit_quote + "".join(body), "invalid escape sequence in string literal", self._src.prev_pos
                        )
                    body.append(escape)
                elif ch == quote:
                    body.append("\\" + ch)
                else:
                    body.append(ch)

            while self._src.peek() in _WHITESPACE:
                self._src.next()
            if self._src.peek() not in _QUOTES:
                return ProtoToken(ProtoTokenType.STRING_LIT, quote + "".join(body) + quote, start)

    def _scan_escape(self) -> Optional[str]:
        """Consume an escape after the backslash; returns it verbatim or None."""
        ch = self._src.next()
        if ch == EOF_RUNE:
            return None
        if ch in _SIMPLE_ESCAPES:
            return "\\" + ch
        if ch in _OCTAL_DIGITS:
            digits = ch + self._take_at_most(2, _OCTAL_DIGITS)
            return "\\" + digits
        if ch in ("x", "X"):
            digits = self._take_at_most(2, _HEX_DIGITS)
            return "\\" + ch + digits if digits else None
        if ch in ("u", "U"):
            width = 4 if ch == "u" else 8
            digits = self._take_at_most(width, _HEX_DIGITS)
            return "\\" + ch + digits if len(digits) == width else None
        return None

    def _take_at_most(self, count: int, allowed: str) -> str:
        chars = []
        while len(chars) < count and self._src.peek() != EOF_RUNE and self._src.peek() in allowed:
            chars.append(self._src.next())
        return "".join(chars)

    # -- errors --

    def _illegal(self, text: str, message: str, pos: Position) -> ProtoToken:
        err = ProtoScanError(message, pos)
        self._report(err)
        return ProtoToken(ProtoTokenType.ILLEGAL, text, pos, error=err)

    def _report(self, err: ProtoScanError) -> None:
        self.latest_err = err
        if self.on_error is not None:
            self.on_error(err)
