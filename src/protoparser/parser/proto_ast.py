"""AST node definitions for protobuf (.proto) files.

Every declaration carries its source range in ``meta``, the comments placed
before it in ``comments`` and at most one trailing same-line comment in
``inline_comment``. Block declarations also keep the comment placed right
after their opening brace.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union

from .proto_meta import Meta


class Visitor:
    """Callbacks for a depth-first walk over the AST in declaration order.

    Each ``visit_*`` method returns whether the children (body elements and
    attached comments) of the node should be visited as well.
    """

    def visit_comment(self, node: ProtoComment) -> bool:
        return True

    def visit_syntax(self, node: ProtoSyntax) -> bool:
        return True

    def visit_import(self, node: ProtoImport) -> bool:
        return True

    def visit_package(self, node: ProtoPackage) -> bool:
        return True

    def visit_option(self, node: ProtoOption) -> bool:
        return True

    def visit_field(self, node: ProtoField) -> bool:
        return True

    def visit_map_field(self, node: ProtoMapField) -> bool:
        return True

    def visit_oneof(self, node: ProtoOneof) -> bool:
        return True

    def visit_enum_field(self, node: ProtoEnumField) -> bool:
        return True

    def visit_enum(self, node: ProtoEnum) -> bool:
        return True

    def visit_message(self, node: ProtoMessage) -> bool:
        return True

    def visit_extend(self, node: ProtoExtend) -> bool:
        return True

    def visit_service(self, node: ProtoService) -> bool:
        return True

    def visit_rpc(self, node: ProtoRPC) -> bool:
        return True

    def visit_reserved(self, node: ProtoReserved) -> bool:
        return True


def _accept_comments(node, visitor: Visitor) -> None:
    for comment in node.comments:
        comment.accept(visitor)
    if node.inline_comment is not None:
        node.inline_comment.accept(visitor)
    behind_curly = getattr(node, "inline_comment_behind_left_curly", None)
    if behind_curly is not None:
        behind_curly.accept(visitor)


def _accept_body(node, visitor: Visitor) -> None:
    for element in node.body:
        element.accept(visitor)
    _accept_comments(node, visitor)


@dataclass
class ProtoComment:
    """A comment; ``raw`` keeps the delimiters (``//`` or ``/* */``)."""

    raw: str
    meta: Meta = field(default_factory=Meta)

    def is_c_style(self) -> bool:
        return self.raw.startswith("/*")

    def lines(self) -> List[str]:
        """The comment text without delimiters, split on newlines."""
        if self.is_c_style():
            return self.raw[2:-2].split("\n")
        return [self.raw[2:]]

    def accept(self, visitor: Visitor) -> None:
        visitor.visit_comment(self)


@dataclass
class ProtoSyntax:
    protobuf_version: str = "proto3"
    comments: List[ProtoComment] = field(default_factory=list)
    inline_comment: Optional[ProtoComment] = None
    meta: Meta = field(default_factory=Meta)

    def accept(self, visitor: Visitor) -> None:
        if visitor.visit_syntax(self):
            _accept_comments(self, visitor)


class ImportModifier(Enum):
    NONE = ""
    PUBLIC = "public"
    WEAK = "weak"


@dataclass
class ProtoImport:
    """An import; ``location`` keeps the quoted path verbatim."""

    location: str
    modifier: ImportModifier = ImportModifier.NONE
    comments: List[ProtoComment] = field(default_factory=list)
    inline_comment: Optional[ProtoComment] = None
    meta: Meta = field(default_factory=Meta)

    def accept(self, visitor: Visitor) -> None:
        if visitor.visit_import(self):
            _accept_comments(self, visitor)


@dataclass
class ProtoPackage:
    name: str
    comments: List[ProtoComment] = field(default_factory=list)
    inline_comment: Optional[ProtoComment] = None
    meta: Meta = field(default_factory=Meta)

    def accept(self, visitor: Visitor) -> None:
        if visitor.visit_package(self):
            _accept_comments(self, visitor)


@dataclass
class EndpointFieldOption:
    """One ``name: constant`` entry of a Cloud Endpoints option literal."""

    option_name: str
    constant: str
    meta: Meta = field(default_factory=Meta)


@dataclass
class AdditionalBinding:
    """One ``additional_bindings { ... }`` block of a Cloud Endpoints literal."""

    fields: List[EndpointFieldOption] = field(default_factory=list)
    meta: Meta = field(default_factory=Meta)


@dataclass
class CloudEndpoint:
    fields: List[EndpointFieldOption] = field(default_factory=list)
    additional_bindings: List[AdditionalBinding] = field(default_factory=list)

    def to_constant(self) -> str:
        """Render the fields back to ``{name:constant,...}``."""
        return "{" + ",".join(f"{f.option_name}:{f.constant}" for f in self.fields) + "}"


@dataclass
class ProtoOption:
    """An option statement.

    ``constant`` holds the right-hand side verbatim. When permissive mode reads
    a ``{ ... }`` literal, ``constant`` stays empty and ``endpoint`` is set.
    """

    option_name: str
    constant: str = ""
    endpoint: Optional[CloudEndpoint] = None
    comments: List[ProtoComment] = field(default_factory=list)
    inline_comment: Optional[ProtoComment] = None
    meta: Meta = field(default_factory=Meta)

    def accept(self, visitor: Visitor) -> None:
        if visitor.visit_option(self):
            _accept_comments(self, visitor)


@dataclass
class FieldOption:
    option_name: str
    constant: str


@dataclass
class ProtoField:
    """A field declaration: [repeated] type name = number [options];"""

    type_name: str
    field_name: str
    field_number: str
    is_repeated: bool = False
    field_options: List[FieldOption] = field(default_factory=list)
    comments: List[ProtoComment] = field(default_factory=list)
    inline_comment: Optional[ProtoComment] = None
    meta: Meta = field(default_factory=Meta)

    def accept(self, visitor: Visitor) -> None:
        if visitor.visit_field(self):
            _accept_comments(self, visitor)


@dataclass
class ProtoMapField:
    """map<key_type, type_name> field_name = number [options];"""

    key_type: str
    type_name: str
    field_name: str
    field_number: str
    field_options: List[FieldOption] = field(default_factory=list)
    comments: List[ProtoComment] = field(default_factory=list)
    inline_comment: Optional[ProtoComment] = None
    meta: Meta = field(default_factory=Meta)

    def accept(self, visitor: Visitor) -> None:
        if visitor.visit_map_field(self):
            _accept_comments(self, visitor)


@dataclass
class ProtoOneof:
    name: str
    body: List[OneofBodyElement] = field(default_factory=list)
    comments: List[ProtoComment] = field(default_factory=list)
    inline_comment: Optional[ProtoComment] = None
    inline_comment_behind_left_curly: Optional[ProtoComment] = None
    meta: Meta = field(default_factory=Meta)

    def accept(self, visitor: Visitor) -> None:
        if visitor.visit_oneof(self):
            _accept_body(self, visitor)


@dataclass
class EnumValueOption:
    option_name: str
    constant: str


@dataclass
class ProtoEnumField:
    ident: str
    number: str
    enum_value_options: List[EnumValueOption] = field(default_factory=list)
    comments: List[ProtoComment] = field(default_factory=list)
    inline_comment: Optional[ProtoComment] = None
    meta: Meta = field(default_factory=Meta)

    def accept(self, visitor: Visitor) -> None:
        if visitor.visit_enum_field(self):
            _accept_comments(self, visitor)


@dataclass
class Range:
    """A reserved range; ``end`` is empty for a single number."""

    begin: str
    end: str = ""

    def __str__(self) -> str:
        if not self.end:
            return self.begin
        return f"{self.begin} to {self.end}"


@dataclass
class ProtoReserved:
    """reserved ranges; or reserved "names"; - never both."""

    ranges: List[Range] = field(default_factory=list)
    field_names: List[str] = field(default_factory=list)
    comments: List[ProtoComment] = field(default_factory=list)
    inline_comment: Optional[ProtoComment] = None
    meta: Meta = field(default_factory=Meta)

    def accept(self, visitor: Visitor) -> None:
        if visitor.visit_reserved(self):
            _accept_comments(self, visitor)


@dataclass
class ProtoEnum:
    name: str
    body: List[EnumBodyElement] = field(default_factory=list)
    comments: List[ProtoComment] = field(default_factory=list)
    inline_comment: Optional[ProtoComment] = None
    inline_comment_behind_left_curly: Optional[ProtoComment] = None
    meta: Meta = field(default_factory=Meta)

    def accept(self, visitor: Visitor) -> None:
        if visitor.visit_enum(self):
            _accept_body(self, visitor)


@dataclass
class ProtoExtend:
    message_type: str
    body: List[ExtendBodyElement] = field(default_factory=list)
    comments: List[ProtoComment] = field(default_factory=list)
    inline_comment: Optional[ProtoComment] = None
    inline_comment_behind_left_curly: Optional[ProtoComment] = None
    meta: Meta = field(default_factory=Meta)

    def accept(self, visitor: Visitor) -> None:
        if visitor.visit_extend(self):
            _accept_body(self, visitor)


@dataclass
class ProtoMessage:
    """A message definition, possibly containing nested declarations."""

    name: str
    body: List[MessageBodyElement] = field(default_factory=list)
    comments: List[ProtoComment] = field(default_factory=list)
    inline_comment: Optional[ProtoComment] = None
    inline_comment_behind_left_curly: Optional[ProtoComment] = None
    meta: Meta = field(default_factory=Meta)

    def accept(self, visitor: Visitor) -> None:
        if visitor.visit_message(self):
            _accept_body(self, visitor)


@dataclass
class RPCType:
    """The request or response of an rpc: [stream] messageType."""

    message_type: str
    is_stream: bool = False
    meta: Meta = field(default_factory=Meta)


@dataclass
class ProtoRPC:
    name: str
    request: RPCType
    response: RPCType
    body: List[RPCBodyElement] = field(default_factory=list)
    comments: List[ProtoComment] = field(default_factory=list)
    inline_comment: Optional[ProtoComment] = None
    inline_comment_behind_left_curly: Optional[ProtoComment] = None
    meta: Meta = field(default_factory=Meta)

    def accept(self, visitor: Visitor) -> None:
        if visitor.visit_rpc(self):
            _accept_body(self, visitor)


@dataclass
class ProtoService:
    name: str
    body: List[ServiceBodyElement] = field(default_factory=list)
    comments: List[ProtoComment] = field(default_factory=list)
    inline_comment: Optional[ProtoComment] = None
    inline_comment_behind_left_curly: Optional[ProtoComment] = None
    meta: Meta = field(default_factory=Meta)

    def accept(self, visitor: Visitor) -> None:
        if visitor.visit_service(self):
            _accept_body(self, visitor)


@dataclass
class ProtoFile:
    """Top-level parsed representation of a .proto file."""

    syntax: Optional[ProtoSyntax] = None
    body: List[ProtoBodyElement] = field(default_factory=list)

    def accept(self, visitor: Visitor) -> None:
        if self.syntax is not None:
            self.syntax.accept(visitor)
        for element in self.body:
            element.accept(visitor)


OneofBodyElement = Union[ProtoField, ProtoOption, ProtoComment]
EnumBodyElement = Union[ProtoOption, ProtoEnumField, ProtoReserved, ProtoComment]
ExtendBodyElement = Union[ProtoField, ProtoComment]
MessageBodyElement = Union[
    ProtoField,
    ProtoEnum,
    ProtoMessage,
    ProtoOption,
    ProtoOneof,
    ProtoMapField,
    ProtoReserved,
    ProtoExtend,
    ProtoComment,
]
RPCBodyElement = Union[ProtoOption, ProtoComment]
ServiceBodyElement = Union[ProtoOption, ProtoRPC, ProtoComment]
ProtoBodyElement = Union[
    ProtoImport,
    ProtoPackage,
    ProtoOption,
    ProtoMessage,
    ProtoEnum,
    ProtoService,
    ProtoExtend,
    ProtoComment,
]
