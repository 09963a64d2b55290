"""Recursive descent parser for protobuf (.proto) files.

Consumes tokens from ProtoLexer and produces proto AST nodes.
"""

from __future__ import annotations

from typing import Callable, List, Optional, Tuple

from .proto_ast import (
    AdditionalBinding,
    CloudEndpoint,
    EndpointFieldOption,
    EnumValueOption,
    FieldOption,
    ImportModifier,
    ProtoComment,
    ProtoEnum,
    ProtoEnumField,
    ProtoExtend,
    ProtoField,
    ProtoFile,
    ProtoImport,
    ProtoMapField,
    ProtoMessage,
    ProtoOneof,
    ProtoOption,
    ProtoPackage,
    ProtoReserved,
    ProtoRPC,
    ProtoService,
    ProtoSyntax,
    Range,
    RPCType,
)
from .proto_lexer import ProtoLexer
from .proto_meta import Meta, Position
from .proto_tokenizer import ProtoToken, ProtoTokenType, ScanMode

# Proto scalar types; any other field type is a message or enum reference.
PROTO_PRIMITIVES = {
    "int32", "sint32", "sfixed32", "uint32", "fixed32",
    "int64", "sint64", "sfixed64", "uint64", "fixed64",
    "float", "double", "bool", "string", "bytes",
}

MAP_KEY_TYPES = PROTO_PRIMITIVES - {"float", "double", "bytes"}

# Keywords that can never start a oneof member.
_ONEOF_FORBIDDEN = {
    ProtoTokenType.REPEATED,
    ProtoTokenType.OPTIONAL,
    ProtoTokenType.REQUIRED,
    ProtoTokenType.MAP,
    ProtoTokenType.MESSAGE,
    ProtoTokenType.ENUM,
    ProtoTokenType.ONEOF,
}

_TOP_LEVEL_EXPECTED = "import, package, option, message, enum, service or extend"


def _comment(tok: ProtoToken) -> ProtoComment:
    return ProtoComment(raw=tok.value, meta=Meta(tok.pos, tok.end or tok.pos))


class ProtoParser:
    """Recursive descent parser for .proto files.

    ``permissive`` accepts ``{ ... }`` option values (Cloud Endpoints and
    go-proto-validators); ``body_including_comments`` keeps stray comments in a
    block body (before the closing curly, or on the first line of a declaration)
    as ProtoComment elements instead of dropping them.
    """

    def __init__(self, lexer: ProtoLexer, permissive: bool = False, body_including_comments: bool = False):
        self.lex = lexer
        self.permissive = permissive
        self.body_including_comments = body_including_comments

    # -- public API --

    def parse(self) -> ProtoFile:
        """Parse the whole input: [ syntax ] { import | package | option | topLevelDef | emptyStatement }"""
        proto = ProtoFile()
        dispatch = {
            ProtoTokenType.IMPORT: self.parse_import,
            ProtoTokenType.PACKAGE: self.parse_package,
            ProtoTokenType.OPTION: self.parse_option,
            ProtoTokenType.MESSAGE: self.parse_message,
            ProtoTokenType.ENUM: self.parse_enum,
            ProtoTokenType.SERVICE: self.parse_service,
            ProtoTokenType.EXTEND: self.parse_extend,
        }

        while True:
            comments = self._collect_comments()
            tt = self.lex.peek(ScanMode.KEYWORD)

            if tt == ProtoTokenType.EOF:
                # Comments after the last declaration stay in the top-level stream.
                proto.body.extend(comments)
                return proto
            if tt == ProtoTokenType.SEMICOLON:
                self.lex.next()
                continue

            if tt == ProtoTokenType.SYNTAX:
                if proto.syntax is not None or proto.body:
                    self.lex.next_keyword()
                    raise self.lex.unexpected(_TOP_LEVEL_EXPECTED)
                proto.syntax = self._parse_statement(self.parse_syntax, comments, proto.body)
                continue

            parse = dispatch.get(tt)
            if parse is None:
                self.lex.next_keyword()
                raise self.lex.unexpected(_TOP_LEVEL_EXPECTED)
            proto.body.append(self._parse_statement(parse, comments, proto.body))

    # -- comments --

    def _collect_comments(self) -> List[ProtoComment]:
        """Drain the comments queued in front of the next token."""
        self.lex.peek()
        return [_comment(tok) for tok in self.lex.drain_comments()]

    def _parse_inline_comment(self, after: Position) -> Optional[ProtoComment]:
        """Claim the comment that follows ``after`` on the same line, if any."""
        pending = self.lex.pending_comments
        # Comments between the tokens of the declaration itself are dropped.
        while pending and pending[0].pos.offset < after.offset:
            pending.popleft()
        self.lex.peek()
        if pending and pending[0].pos.line == after.line:
            return _comment(pending.popleft())
        return None

    def _parse_statement(self, parse: Callable, comments: List[ProtoComment], stray: Optional[list] = None):
        """Run a declaration parser and attach its leading and inline comments.

        Comments ending on the declaration's first line cannot lead it; they
        go to ``stray`` (the enclosing body) when given, and are dropped otherwise.
        """
        stmt = parse()
        line = stmt.meta.start.line
        stmt.comments = [c for c in comments if c.meta.last.line < line]
        if stray is not None:
            stray.extend(c for c in comments if c.meta.last.line >= line)
        stmt.inline_comment = self._parse_inline_comment(stmt.meta.last)
        return stmt

    def _parse_body(
        self,
        dispatch: Callable[[ProtoTokenType], Optional[Callable]],
        expected: str,
    ) -> Tuple[list, Optional[ProtoComment], Position]:
        """Parse "{" { element | emptyStatement } "}".

        Returns the body, the comment behind the left curly and the
        position of the right curly.
        """
        self.lex.next()
        if self.lex.token != ProtoTokenType.LBRACE:
            raise self.lex.unexpected("{")
        behind_curly = self._parse_inline_comment(self.lex.pos)

        body: list = []
        while True:
            comments = self._collect_comments()
            tt = self.lex.peek(ScanMode.KEYWORD)

            if tt == ProtoTokenType.RBRACE:
                if self.body_including_comments:
                    body.extend(comments)
                self.lex.next()
                return body, behind_curly, self.lex.pos
            if tt == ProtoTokenType.SEMICOLON:
                self.lex.next()
                continue

            parse = dispatch(tt)
            if parse is None:
                self.lex.next_keyword()
                raise self.lex.unexpected(expected)
            stray = body if self.body_including_comments else None
            body.append(self._parse_statement(parse, comments, stray))

    # -- statements --

    def parse_syntax(self) -> ProtoSyntax:
        """syntax = "syntax" "=" quote "proto3" quote ";" """
        self.lex.next_keyword()
        if self.lex.token != ProtoTokenType.SYNTAX:
            raise self.lex.unexpected("syntax")
        start = self.lex.pos

        self.lex.next()
        if self.lex.token != ProtoTokenType.EQUALS:
            raise self.lex.unexpected("=")

        self.lex.next()
        if self.lex.token != ProtoTokenType.QUOTE:
            raise self.lex.unexpected("quote")
        quote = self.lex.text

        self.lex.next()
        if self.lex.text != "proto3":
            raise self.lex.unexpected("proto3")

        self.lex.next()
        if self.lex.token != ProtoTokenType.QUOTE or self.lex.text != quote:
            raise self.lex.unexpected(quote)

        self.lex.next()
        if self.lex.token != ProtoTokenType.SEMICOLON:
            raise self.lex.unexpected(";")

        return ProtoSyntax(protobuf_version="proto3", meta=Meta(start, self.lex.pos))

    def parse_import(self) -> ProtoImport:
        """import = "import" [ "weak" | "public" ] strLit ";" """
        self.lex.next_keyword()
        if self.lex.token != ProtoTokenType.IMPORT:
            raise self.lex.unexpected("import")
        start = self.lex.pos

        modifier = ImportModifier.NONE
        self.lex.next_keyword_or_str_lit()
        if self.lex.token == ProtoTokenType.PUBLIC:
            modifier = ImportModifier.PUBLIC
            self.lex.next_str_lit()
        elif self.lex.token == ProtoTokenType.WEAK:
            modifier = ImportModifier.WEAK
            self.lex.next_str_lit()
        if self.lex.token != ProtoTokenType.STRING_LIT:
            raise self.lex.unexpected("weak, public or strLit")
        location = self.lex.text

        self.lex.next()
        if self.lex.token != ProtoTokenType.SEMICOLON:
            raise self.lex.unexpected(";")

        return ProtoImport(location=location, modifier=modifier, meta=Meta(start, self.lex.pos))

    def parse_package(self) -> ProtoPackage:
        """package = "package" fullIdent ";" """
        self.lex.next_keyword()
        if self.lex.token != ProtoTokenType.PACKAGE:
            raise self.lex.unexpected("package")
        start = self.lex.pos

        name, _ = self.lex.read_full_ident()

        self.lex.next()
        if self.lex.token != ProtoTokenType.SEMICOLON:
            raise self.lex.unexpected(";")

        return ProtoPackage(name=name, meta=Meta(start, self.lex.pos))

    # -- options --

    def parse_option(self) -> ProtoOption:
        """option = "option" optionName "=" constant ";" """
        self.lex.next_keyword()
        if self.lex.token != ProtoTokenType.OPTION:
            raise self.lex.unexpected("option")
        start = self.lex.pos

        option_name = self._parse_option_name()

        self.lex.next()
        if self.lex.token != ProtoTokenType.EQUALS:
            raise self.lex.unexpected("=")

        endpoint = None
        constant, _ = self.lex.read_constant(self.permissive)
        if constant is None:
            # Cloud Endpoints requires this exception.
            endpoint = self._parse_cloud_endpoint()
            constant = ""

        self.lex.next()
        if self.lex.token != ProtoTokenType.SEMICOLON:
            raise self.lex.unexpected(";")

        return ProtoOption(
            option_name=option_name,
            constant=constant,
            endpoint=endpoint,
            meta=Meta(start, self.lex.pos),
        )

    def _parse_option_name(self) -> str:
        """optionName = ( ident | "(" fullIdent ")" ) { "." ident }"""
        self.lex.next()
        if self.lex.token == ProtoTokenType.IDENT:
            option_name = self.lex.text
        elif self.lex.token == ProtoTokenType.LPAREN:
            full_ident, _ = self.lex.read_full_ident()
            self.lex.next()
            if self.lex.token != ProtoTokenType.RPAREN:
                raise self.lex.unexpected(")")
            option_name = f"({full_ident})"
        else:
            raise self.lex.unexpected("ident or (")

        while True:
            self.lex.next()
            if self.lex.token != ProtoTokenType.DOT:
                self.lex.un_next()
                return option_name
            self.lex.next()
            if self.lex.token != ProtoTokenType.IDENT:
                raise self.lex.unexpected("ident")
            option_name += "." + self.lex.text

    def _parse_cloud_endpoint(self) -> CloudEndpoint:
        """cloudEndpoint = "{" endpointField { [ "," ] endpointField } "}"

        endpointField = ident ":" constant | ident [ ":" ] cloudEndpoint
                      | "additional_bindings" [ ":" ] cloudEndpoint
        """
        self.lex.next()
        if self.lex.token != ProtoTokenType.LBRACE:
            raise self.lex.unexpected("{")

        endpoint = CloudEndpoint()
        while True:
            self.lex.next_keyword()
            if self.lex.token == ProtoTokenType.RBRACE:
                return endpoint
            if self.lex.token == ProtoTokenType.ADDITIONAL_BINDINGS:
                endpoint.additional_bindings.append(self._parse_additional_binding())
            else:
                self.lex.un_next()
                endpoint.fields.append(self._parse_endpoint_field())

            self.lex.next()
            if self.lex.token != ProtoTokenType.COMMA:
                self.lex.un_next()

    def _parse_endpoint_field(self) -> EndpointFieldOption:
        name, start = self.lex.read_full_ident()

        self.lex.next()
        if self.lex.token == ProtoTokenType.LBRACE:
            self.lex.un_next()
            constant = self._parse_cloud_endpoint().to_constant()
        elif self.lex.token == ProtoTokenType.COLON:
            constant, _ = self.lex.read_constant(permissive=True)
            if constant is None:
                constant = self._parse_cloud_endpoint().to_constant()
        else:
            raise self.lex.unexpected(":")

        return EndpointFieldOption(option_name=name, constant=constant, meta=Meta(start, self.lex.pos))

    def _parse_additional_binding(self) -> AdditionalBinding:
        start = self.lex.pos
        self.lex.next()
        if self.lex.token != ProtoTokenType.COLON:
            self.lex.un_next()
        nested = self._parse_cloud_endpoint()
        return AdditionalBinding(fields=nested.fields, meta=Meta(start, self.lex.pos))

    def _parse_field_options(self, factory: Callable) -> list:
        """[ "[" fieldOption { "," fieldOption } "]" ]"""
        self.lex.next()
        if self.lex.token != ProtoTokenType.LBRACKET:
            self.lex.un_next()
            return []

        options = [self._parse_field_option(factory)]
        while True:
            self.lex.next()
            if self.lex.token == ProtoTokenType.RBRACKET:
                return options
            if self.lex.token != ProtoTokenType.COMMA:
                raise self.lex.unexpected(", or ]")
            options.append(self._parse_field_option(factory))

    def _parse_field_option(self, factory: Callable):
        """fieldOption = optionName "=" constant"""
        option_name = self._parse_option_name()

        self.lex.next()
        if self.lex.token != ProtoTokenType.EQUALS:
            raise self.lex.unexpected("=")

        constant, _ = self.lex.read_constant(self.permissive)
        if constant is None:
            # go-proto-validators requires this exception.
            constant = self._parse_validator_constant()
        return factory(option_name, constant)

    def _parse_validator_constant(self) -> str:
        """validatorConstant = "{" ident ":" value { "," ident ":" value } [ "," ] "}"

        Returned as source text without whitespace, e.g. ``{int_gt:0}``.
        """
        self.lex.next()
        if self.lex.token != ProtoTokenType.LBRACE:
            raise self.lex.unexpected("{")
        parts = ["{"]

        while True:
            self.lex.next()
            if self.lex.token != ProtoTokenType.IDENT:
                raise self.lex.unexpected("ident")
            parts.append(self.lex.text)

            self.lex.next()
            if self.lex.token != ProtoTokenType.COLON:
                raise self.lex.unexpected(":")
            parts.append(":")
            parts.append(self._parse_validator_value())

            self.lex.next()
            if self.lex.token == ProtoTokenType.COMMA:
                parts.append(",")
                if self.lex.peek() == ProtoTokenType.RBRACE:
                    self.lex.next()
                    parts.append("}")
                    return "".join(parts)
            elif self.lex.token == ProtoTokenType.RBRACE:
                parts.append("}")
                return "".join(parts)
            else:
                self.lex.un_next()

    def _parse_validator_value(self) -> str:
        """value = constant | validatorConstant | "[" strLit { "," strLit } "]" """
        if self.lex.peek() == ProtoTokenType.LBRACKET:
            return "[" + " ".join(self._parse_constant_list()) + "]"
        constant, _ = self.lex.read_constant(permissive=True)
        if constant is None:
            return self._parse_validator_constant()
        return constant

    def _parse_constant_list(self) -> List[str]:
        """constList = "[" strLit { "," strLit } "]" """
        self.lex.next()
        if self.lex.token != ProtoTokenType.LBRACKET:
            raise self.lex.unexpected("[")
        values = []
        while True:
            if self.lex.peek() == ProtoTokenType.RBRACKET:
                self.lex.next()
                return values
            self.lex.next_str_lit()
            if self.lex.token != ProtoTokenType.STRING_LIT:
                raise self.lex.unexpected("strLit")
            values.append(self.lex.text)
            if self.lex.peek() == ProtoTokenType.COMMA:
                self.lex.next()

    # -- fields --

    def _parse_type(self) -> Tuple[str, Position]:
        """type = "double" | "float" | ... | "bytes" | messageType | enumType"""
        self.lex.next()
        if self.lex.token == ProtoTokenType.IDENT and self.lex.text in PROTO_PRIMITIVES:
            return self.lex.text, self.lex.pos
        if self.lex.token not in (ProtoTokenType.IDENT, ProtoTokenType.DOT):
            raise self.lex.unexpected("type")
        self.lex.un_next()
        return self.lex.read_message_type()

    def _parse_field_number(self) -> str:
        """fieldNumber = intLit"""
        self.lex.next_number_lit()
        if self.lex.token != ProtoTokenType.INT_LIT or self.lex.text[0] in "+-":
            raise self.lex.unexpected("fieldNumber")
        return self.lex.text

    def parse_field(self) -> ProtoField:
        """field = [ "repeated" ] type fieldName "=" fieldNumber [ "[" fieldOptions "]" ] ";" """
        is_repeated = False
        self.lex.next_keyword()
        start = self.lex.pos
        if self.lex.token == ProtoTokenType.REPEATED:
            is_repeated = True
        else:
            self.lex.un_next()

        type_name, type_pos = self._parse_type()
        if not is_repeated:
            start = type_pos

        self.lex.next()
        if self.lex.token != ProtoTokenType.IDENT:
            raise self.lex.unexpected("fieldName")
        field_name = self.lex.text

        self.lex.next()
        if self.lex.token != ProtoTokenType.EQUALS:
            raise self.lex.unexpected("=")

        field_number = self._parse_field_number()
        field_options = self._parse_field_options(FieldOption)

        self.lex.next()
        if self.lex.token != ProtoTokenType.SEMICOLON:
            raise self.lex.unexpected(";")

        return ProtoField(
            type_name=type_name,
            field_name=field_name,
            field_number=field_number,
            is_repeated=is_repeated,
            field_options=field_options,
            meta=Meta(start, self.lex.pos),
        )

    def parse_map_field(self) -> ProtoMapField:
        """mapField = "map" "<" keyType "," type ">" mapName "=" fieldNumber [ "[" fieldOptions "]" ] ";" """
        self.lex.next_keyword()
        if self.lex.token != ProtoTokenType.MAP:
            raise self.lex.unexpected("map")
        start = self.lex.pos

        self.lex.next()
        if self.lex.token != ProtoTokenType.LANGLE:
            raise self.lex.unexpected("<")

        self.lex.next()
        if self.lex.token != ProtoTokenType.IDENT or self.lex.text not in MAP_KEY_TYPES:
            raise self.lex.unexpected("keyType")
        key_type = self.lex.text

        self.lex.next()
        if self.lex.token != ProtoTokenType.COMMA:
            raise self.lex.unexpected(",")

        type_name, _ = self._parse_type()

        self.lex.next()
        if self.lex.token != ProtoTokenType.RANGLE:
            raise self.lex.unexpected(">")

        self.lex.next()
        if self.lex.token != ProtoTokenType.IDENT:
            raise self.lex.unexpected("mapName")
        field_name = self.lex.text

        self.lex.next()
        if self.lex.token != ProtoTokenType.EQUALS:
            raise self.lex.unexpected("=")

        field_number = self._parse_field_number()
        field_options = self._parse_field_options(FieldOption)

        self.lex.next()
        if self.lex.token != ProtoTokenType.SEMICOLON:
            raise self.lex.unexpected(";")

        return ProtoMapField(
            key_type=key_type,
            type_name=type_name,
            field_name=field_name,
            field_number=field_number,
            field_options=field_options,
            meta=Meta(start, self.lex.pos),
        )

    def parse_oneof(self) -> ProtoOneof:
        """oneof = "oneof" oneofName "{" { option | oneofField | emptyStatement } "}" """
        self.lex.next_keyword()
        if self.lex.token != ProtoTokenType.ONEOF:
            raise self.lex.unexpected("oneof")
        start = self.lex.pos

        self.lex.next()
        if self.lex.token != ProtoTokenType.IDENT:
            raise self.lex.unexpected("oneofName")
        name = self.lex.text

        def dispatch(tt: ProtoTokenType) -> Optional[Callable]:
            if tt == ProtoTokenType.OPTION:
                return self.parse_option
            if tt in _ONEOF_FORBIDDEN:
                return None
            return self.parse_field

        body, behind_curly, last = self._parse_body(dispatch, "option or oneofField")
        return ProtoOneof(
            name=name,
            body=body,
            inline_comment_behind_left_curly=behind_curly,
            meta=Meta(start, last),
        )

    # -- enums --

    def parse_enum(self) -> ProtoEnum:
        """enum = "enum" enumName "{" { option | enumField | reserved | emptyStatement } "}" """
        self.lex.next_keyword()
        if self.lex.token != ProtoTokenType.ENUM:
            raise self.lex.unexpected("enum")
        start = self.lex.pos

        self.lex.next()
        if self.lex.token != ProtoTokenType.IDENT:
            raise self.lex.unexpected("enumName")
        name = self.lex.text

        dispatch = {
            ProtoTokenType.OPTION: self.parse_option,
            ProtoTokenType.RESERVED: self.parse_reserved,
        }
        body, behind_curly, last = self._parse_body(
            lambda tt: dispatch.get(tt, self.parse_enum_field), "enumField"
        )
        return ProtoEnum(
            name=name,
            body=body,
            inline_comment_behind_left_curly=behind_curly,
            meta=Meta(start, last),
        )

    def parse_enum_field(self) -> ProtoEnumField:
        """enumField = ident "=" [ "-" ] intLit [ "[" enumValueOption { "," enumValueOption } "]" ] ";" """
        self.lex.next()
        if self.lex.token != ProtoTokenType.IDENT:
            raise self.lex.unexpected("ident")
        start = self.lex.pos
        ident = self.lex.text

        self.lex.next()
        if self.lex.token != ProtoTokenType.EQUALS:
            raise self.lex.unexpected("=")

        self.lex.next_number_lit()
        if self.lex.token != ProtoTokenType.INT_LIT or self.lex.text.startswith("+"):
            raise self.lex.unexpected("intLit")
        number = self.lex.text

        options = self._parse_field_options(EnumValueOption)

        self.lex.next()
        if self.lex.token != ProtoTokenType.SEMICOLON:
            raise self.lex.unexpected(";")

        return ProtoEnumField(
            ident=ident,
            number=number,
            enum_value_options=options,
            meta=Meta(start, self.lex.pos),
        )

    # -- messages --

    def parse_message(self) -> ProtoMessage:
        """message = "message" messageName "{" { messageBodyElement | emptyStatement } "}" """
        self.lex.next_keyword()
        if self.lex.token != ProtoTokenType.MESSAGE:
            raise self.lex.unexpected("message")
        start = self.lex.pos

        self.lex.next()
        if self.lex.token != ProtoTokenType.IDENT:
            raise self.lex.unexpected("messageName")
        name = self.lex.text

        dispatch = {
            ProtoTokenType.ENUM: self.parse_enum,
            ProtoTokenType.MESSAGE: self.parse_message,
            ProtoTokenType.OPTION: self.parse_option,
            ProtoTokenType.ONEOF: self.parse_oneof,
            ProtoTokenType.MAP: self.parse_map_field,
            ProtoTokenType.RESERVED: self.parse_reserved,
            ProtoTokenType.EXTEND: self.parse_extend,
        }
        body, behind_curly, last = self._parse_body(
            lambda tt: dispatch.get(tt, self.parse_field), "messageBody"
        )
        return ProtoMessage(
            name=name,
            body=body,
            inline_comment_behind_left_curly=behind_curly,
            meta=Meta(start, last),
        )

    def parse_extend(self) -> ProtoExtend:
        """extend = "extend" messageType "{" { field | emptyStatement } "}" """
        self.lex.next_keyword()
        if self.lex.token != ProtoTokenType.EXTEND:
            raise self.lex.unexpected("extend")
        start = self.lex.pos

        message_type, _ = self.lex.read_message_type()

        body, behind_curly, last = self._parse_body(lambda tt: self.parse_field, "field")
        return ProtoExtend(
            message_type=message_type,
            body=body,
            inline_comment_behind_left_curly=behind_curly,
            meta=Meta(start, last),
        )

    def parse_reserved(self) -> ProtoReserved:
        """reserved = "reserved" ( ranges | fieldNames ) ";" """
        self.lex.next_keyword()
        if self.lex.token != ProtoTokenType.RESERVED:
            raise self.lex.unexpected("reserved")
        start = self.lex.pos

        reserved = ProtoReserved()
        if self.lex.peek(ScanMode.STRING_LIT) == ProtoTokenType.STRING_LIT:
            reserved.field_names = self._parse_reserved_names()
        else:
            reserved.ranges = self._parse_ranges()

        self.lex.next()
        if self.lex.token != ProtoTokenType.SEMICOLON:
            raise self.lex.unexpected(";")

        reserved.meta = Meta(start, self.lex.pos)
        return reserved

    def _parse_ranges(self) -> List[Range]:
        """ranges = range { "," range }"""
        ranges = [self._parse_range()]
        while True:
            self.lex.next()
            if self.lex.token != ProtoTokenType.COMMA:
                self.lex.un_next()
                return ranges
            ranges.append(self._parse_range())

    def _parse_range(self) -> Range:
        """range = intLit [ "to" ( intLit | "max" ) ]"""
        self.lex.next_number_lit()
        if self.lex.token != ProtoTokenType.INT_LIT:
            raise self.lex.unexpected("intLit")
        begin = self.lex.text

        self.lex.next_keyword()
        if self.lex.token != ProtoTokenType.TO:
            self.lex.un_next()
            return Range(begin=begin)

        self.lex.next(ScanMode.KEYWORD | ScanMode.NUMBER_LIT)
        if self.lex.token not in (ProtoTokenType.INT_LIT, ProtoTokenType.MAX):
            raise self.lex.unexpected("intLit or max")
        return Range(begin=begin, end=self.lex.text)

    def _parse_reserved_names(self) -> List[str]:
        """fieldNames = strLit { "," strLit }"""
        names = []
        while True:
            self.lex.next_str_lit()
            if self.lex.token != ProtoTokenType.STRING_LIT:
                raise self.lex.unexpected("fieldName")
            names.append(self.lex.text)

            self.lex.next()
            if self.lex.token != ProtoTokenType.COMMA:
                self.lex.un_next()
                return names

    # -- services --

    def parse_service(self) -> ProtoService:
        """service = "service" serviceName "{" { option | rpc | emptyStatement } "}" """
        self.lex.next_keyword()
        if self.lex.token != ProtoTokenType.SERVICE:
            raise self.lex.unexpected("service")
        start = self.lex.pos

        self.lex.next()
        if self.lex.token != ProtoTokenType.IDENT:
            raise self.lex.unexpected("serviceName")
        name = self.lex.text

        dispatch = {
            ProtoTokenType.OPTION: self.parse_option,
            ProtoTokenType.RPC: self.parse_rpc,
        }
        body, behind_curly, last = self._parse_body(dispatch.get, "option or rpc")
        return ProtoService(
            name=name,
            body=body,
            inline_comment_behind_left_curly=behind_curly,
            meta=Meta(start, last),
        )

    def parse_rpc(self) -> ProtoRPC:
        """rpc = "rpc" rpcName "(" [ "stream" ] messageType ")" "returns" "(" [ "stream" ] messageType ")"
        ( ( "{" { option | emptyStatement } "}" ) | ";" )
        """
        self.lex.next_keyword()
        if self.lex.token != ProtoTokenType.RPC:
            raise self.lex.unexpected("rpc")
        start = self.lex.pos

        self.lex.next()
        if self.lex.token != ProtoTokenType.IDENT:
            raise self.lex.unexpected("rpcName")
        name = self.lex.text

        request = self._parse_rpc_type()

        self.lex.next_keyword()
        if self.lex.token != ProtoTokenType.RETURNS:
            raise self.lex.unexpected("returns")

        response = self._parse_rpc_type()
        rpc = ProtoRPC(name=name, request=request, response=response)

        self.lex.next()
        if self.lex.token == ProtoTokenType.SEMICOLON:
            rpc.meta = Meta(start, self.lex.pos)
            return rpc
        if self.lex.token != ProtoTokenType.LBRACE:
            raise self.lex.unexpected("{ or ;")
        self.lex.un_next()

        dispatch = {ProtoTokenType.OPTION: self.parse_option}
        rpc.body, rpc.inline_comment_behind_left_curly, last = self._parse_body(dispatch.get, "option")
        rpc.meta = Meta(start, last)
        return rpc

    def _parse_rpc_type(self) -> RPCType:
        """"(" [ "stream" ] messageType ")" """
        self.lex.next()
        if self.lex.token != ProtoTokenType.LPAREN:
            raise self.lex.unexpected("(")

        is_stream = False
        self.lex.next_keyword()
        start = self.lex.pos
        if self.lex.token == ProtoTokenType.STREAM:
            is_stream = True
        else:
            self.lex.un_next()

        message_type, type_pos = self.lex.read_message_type()
        rpc_type = RPCType(
            message_type=message_type,
            is_stream=is_stream,
            meta=Meta(start if is_stream else type_pos, self.lex.pos),
        )

        self.lex.next()
        if self.lex.token != ProtoTokenType.RPAREN:
            raise self.lex.unexpected(")")
        return rpc_type
