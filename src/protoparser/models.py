"""Unordered view of a parsed .proto file.

Block bodies are split into one list per declaration kind. Each list keeps
the source order of its own elements; the order across kinds is lost.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from protoparser.parser.proto_ast import (
    ProtoComment,
    ProtoEnumField,
    ProtoExtend,
    ProtoField,
    ProtoImport,
    ProtoMapField,
    ProtoOneof,
    ProtoOption,
    ProtoPackage,
    ProtoReserved,
    ProtoRPC,
    ProtoSyntax,
)
from protoparser.parser.proto_meta import Meta


@dataclass
class EnumBody:
    options: List[ProtoOption] = field(default_factory=list)
    enum_fields: List[ProtoEnumField] = field(default_factory=list)
    reserves: List[ProtoReserved] = field(default_factory=list)
    comments: List[ProtoComment] = field(default_factory=list)


@dataclass
class Enum:
    name: str
    body: EnumBody = field(default_factory=EnumBody)
    comments: List[ProtoComment] = field(default_factory=list)
    inline_comment: Optional[ProtoComment] = None
    inline_comment_behind_left_curly: Optional[ProtoComment] = None
    meta: Meta = field(default_factory=Meta)


@dataclass
class MessageBody:
    fields: List[ProtoField] = field(default_factory=list)
    enums: List[Enum] = field(default_factory=list)
    messages: List[Message] = field(default_factory=list)
    options: List[ProtoOption] = field(default_factory=list)
    oneofs: List[ProtoOneof] = field(default_factory=list)
    maps: List[ProtoMapField] = field(default_factory=list)
    reserves: List[ProtoReserved] = field(default_factory=list)
    extends: List[ProtoExtend] = field(default_factory=list)
    comments: List[ProtoComment] = field(default_factory=list)


@dataclass
class Message:
    name: str
    body: MessageBody = field(default_factory=MessageBody)
    comments: List[ProtoComment] = field(default_factory=list)
    inline_comment: Optional[ProtoComment] = None
    inline_comment_behind_left_curly: Optional[ProtoComment] = None
    meta: Meta = field(default_factory=Meta)


@dataclass
class ServiceBody:
    options: List[ProtoOption] = field(default_factory=list)
    rpcs: List[ProtoRPC] = field(default_factory=list)
    comments: List[ProtoComment] = field(default_factory=list)


@dataclass
class Service:
    name: str
    body: ServiceBody = field(default_factory=ServiceBody)
    comments: List[ProtoComment] = field(default_factory=list)
    inline_comment: Optional[ProtoComment] = None
    inline_comment_behind_left_curly: Optional[ProtoComment] = None
    meta: Meta = field(default_factory=Meta)


@dataclass
class ProtoBody:
    imports: List[ProtoImport] = field(default_factory=list)
    packages: List[ProtoPackage] = field(default_factory=list)
    options: List[ProtoOption] = field(default_factory=list)
    messages: List[Message] = field(default_factory=list)
    enums: List[Enum] = field(default_factory=list)
    services: List[Service] = field(default_factory=list)
    extends: List[ProtoExtend] = field(default_factory=list)
    comments: List[ProtoComment] = field(default_factory=list)


@dataclass
class Proto:
    syntax: Optional[ProtoSyntax] = None
    body: ProtoBody = field(default_factory=ProtoBody)
