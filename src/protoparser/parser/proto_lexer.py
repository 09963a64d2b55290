"""Token-level reader used by the recursive descent parser.

Wraps ProtoScanner with the state the parser works against (the current
token, its text and position), one-token pushback, and readers for the
productions that span several tokens: fullIdent, messageType and constant.
"""

from __future__ import annotations

import logging
from typing import IO, List, Optional, Tuple, Union

from .errors import ProtoParseError, ProtoScanError
from .proto_meta import Position
from .proto_tokenizer import ProtoScanner, ProtoToken, ProtoTokenType, ScanMode
from .rune_source import RuneSource

logger = logging.getLogger(__name__)

_LITERALS = (
    ProtoTokenType.STRING_LIT,
    ProtoTokenType.INT_LIT,
    ProtoTokenType.FLOAT_LIT,
    ProtoTokenType.BOOL_LIT,
)


class ProtoLexer:
    def __init__(self, reader: Union[IO[bytes], IO[str]], filename: str = "", debug: bool = False):
        self.debug = debug
        self.token = ProtoTokenType.ILLEGAL
        self.text = ""
        self.pos = Position(filename)
        self.latest_err: Optional[ProtoScanError] = None
        self._error: Optional[ProtoScanError] = None
        self._prev: Optional[Tuple[ProtoTokenType, str, Position, Optional[ProtoScanError]]] = None
        self._scanner = ProtoScanner(RuneSource(reader, filename))
        self._scanner.on_error = self._on_error

    @property
    def filename(self) -> str:
        return self._scanner.filename

    def _on_error(self, err: ProtoScanError) -> None:
        self.latest_err = err
        if self.debug:
            logger.warning("Lexer encountered the error %s", err)

    # -- scanning --

    def next(self, mode: ScanMode = ScanMode.DEFAULT) -> ProtoTokenType:
        """Scan the next token under ``mode`` and make it current."""
        self._prev = (self.token, self.text, self.pos, self._error)
        tok = self._scanner.scan(mode)
        self.token, self.text, self.pos, self._error = tok.type, tok.value, tok.pos, tok.error
        if self.debug:
            logger.debug("Text=[%s], Token=[%s], Pos=[%s]", self.text, self.token.name, self.pos)
        return self.token

    def next_keyword(self) -> ProtoTokenType:
        return self.next(ScanMode.KEYWORD)

    def next_str_lit(self) -> ProtoTokenType:
        return self.next(ScanMode.STRING_LIT)

    def next_keyword_or_str_lit(self) -> ProtoTokenType:
        return self.next(ScanMode.KEYWORD | ScanMode.STRING_LIT)

    def next_lit(self) -> ProtoTokenType:
        return self.next(ScanMode.LIT)

    def next_number_lit(self) -> ProtoTokenType:
        return self.next(ScanMode.NUMBER_LIT)

    def un_next(self) -> None:
        """Put the current token back; the previous token becomes current again."""
        if self._prev is None:
            raise RuntimeError("un_next without a preceding next")
        self._scanner.unscan()
        self.token, self.text, self.pos, self._error = self._prev
        self._prev = None

    def peek(self, mode: ScanMode = ScanMode.DEFAULT) -> ProtoTokenType:
        """Return the type of the next token without consuming it."""
        tok = self.next(mode)
        self.un_next()
        return tok

    def is_eof(self) -> bool:
        return self.token == ProtoTokenType.EOF

    # -- comments --

    @property
    def pending_comments(self):
        """Comments skipped so far and not yet claimed by the parser, oldest first."""
        return self._scanner.pending_comments

    def drain_comments(self) -> List[ProtoToken]:
        comments = list(self._scanner.pending_comments)
        self._scanner.pending_comments.clear()
        return comments

    # -- errors --

    def unexpected(self, expected: str) -> ProtoParseError:
        """Build the error for the current token; lexical errors take precedence."""
        if self._error is not None:
            return self._error
        found = "EOF" if self.token == ProtoTokenType.EOF else self.text
        return ProtoParseError(f"found {found}, but expected {expected}", self.pos)

    # -- multi-token readers --

    def read_full_ident(self) -> Tuple[str, Position]:
        """fullIdent = ident { "." ident }"""
        self.next()
        if self.token != ProtoTokenType.IDENT:
            raise self.unexpected("ident")
        start = self.pos
        parts = [self.text]

        while True:
            self.next()
            if self.token != ProtoTokenType.DOT:
                self.un_next()
                break
            self.next()
            if self.token != ProtoTokenType.IDENT:
                raise self.unexpected("ident")
            parts.append(self.text)
        return ".".join(parts), start

    def read_message_type(self) -> Tuple[str, Position]:
        """messageType = [ "." ] { ident "." } messageName"""
        self.next()
        if self.token == ProtoTokenType.DOT:
            start = self.pos
            name, _ = self.read_full_ident()
            return "." + name, start
        self.un_next()
        return self.read_full_ident()

    # enumType shares the messageType production.
    read_enum_type = read_message_type

    def read_constant(self, permissive: bool = False) -> Tuple[Optional[str], Position]:
        """constant = fullIdent | ( [ "-" | "+" ] intLit ) | ( [ "-" | "+" ] floatLit ) | strLit | boolLit

        In permissive mode an opening "{" is pushed back and None is returned,
        leaving the structured constant to the parser.
        """
        self.next_lit()
        start = self.pos

        if self.token in _LITERALS:
            return self.text, start
        if self.token == ProtoTokenType.IDENT:
            self.un_next()
            return self.read_full_ident()
        if self.token in (ProtoTokenType.MINUS, ProtoTokenType.PLUS):
            sign = self.text
            self.next_lit()
            if self.token not in (ProtoTokenType.INT_LIT, ProtoTokenType.FLOAT_LIT):
                raise self.unexpected("intLit or floatLit")
            return sign + self.text, start
        if self.token == ProtoTokenType.LBRACE and permissive:
            self.un_next()
            return None, start
        raise self.unexpected("constant")
