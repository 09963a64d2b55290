"""Transform proto AST nodes into the unordered Proto/Message/Enum/Service models."""

from __future__ import annotations

from typing import Dict, List, Optional

from protoparser.models import (
    Enum,
    EnumBody,
    Message,
    MessageBody,
    Proto,
    ProtoBody,
    Service,
    ServiceBody,
)

from .proto_ast import (
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
)


class InterpretError(Exception):
    """Raised when a body holds an element its block cannot contain."""


# AST node type -> name of the bucket it lands in.
_PROTO_BUCKETS: Dict[type, str] = {
    ProtoImport: "imports",
    ProtoPackage: "packages",
    ProtoOption: "options",
    ProtoExtend: "extends",
    ProtoComment: "comments",
}

_MESSAGE_BUCKETS: Dict[type, str] = {
    ProtoField: "fields",
    ProtoOption: "options",
    ProtoOneof: "oneofs",
    ProtoMapField: "maps",
    ProtoReserved: "reserves",
    ProtoExtend: "extends",
    ProtoComment: "comments",
}

_ENUM_BUCKETS: Dict[type, str] = {
    ProtoOption: "options",
    ProtoEnumField: "enum_fields",
    ProtoReserved: "reserves",
    ProtoComment: "comments",
}

_SERVICE_BUCKETS: Dict[type, str] = {
    ProtoOption: "options",
    ProtoRPC: "rpcs",
    ProtoComment: "comments",
}


def _sort_into(body, elements: List, buckets: Dict[type, str], kind: str) -> None:
    for element in elements:
        bucket = buckets.get(type(element))
        if bucket is None:
            raise InterpretError(f"invalid {kind} body element {type(element).__name__}")
        getattr(body, bucket).append(element)


def interpret_proto(src: Optional[ProtoFile]) -> Optional[Proto]:
    """Interpret a ProtoFile into a Proto, recursing into messages, enums and services."""
    if src is None:
        return None

    body = ProtoBody()
    rest = []
    for element in src.body:
        if isinstance(element, ProtoMessage):
            body.messages.append(interpret_message(element))
        elif isinstance(element, ProtoEnum):
            body.enums.append(interpret_enum(element))
        elif isinstance(element, ProtoService):
            body.services.append(interpret_service(element))
        else:
            rest.append(element)
    _sort_into(body, rest, _PROTO_BUCKETS, "proto")
    return Proto(syntax=src.syntax, body=body)


def interpret_message(src: Optional[ProtoMessage]) -> Optional[Message]:
    if src is None:
        return None

    body = MessageBody()
    rest = []
    for element in src.body:
        if isinstance(element, ProtoMessage):
            body.messages.append(interpret_message(element))
        elif isinstance(element, ProtoEnum):
            body.enums.append(interpret_enum(element))
        else:
            rest.append(element)
    _sort_into(body, rest, _MESSAGE_BUCKETS, "message")

    return Message(
        name=src.name,
        body=body,
        comments=src.comments,
        inline_comment=src.inline_comment,
        inline_comment_behind_left_curly=src.inline_comment_behind_left_curly,
        meta=src.meta,
    )


def interpret_enum(src: Optional[ProtoEnum]) -> Optional[Enum]:
    if src is None:
        return None

    body = EnumBody()
    _sort_into(body, src.body, _ENUM_BUCKETS, "enum")
    return Enum(
        name=src.name,
        body=body,
        comments=src.comments,
        inline_comment=src.inline_comment,
        inline_comment_behind_left_curly=src.inline_comment_behind_left_curly,
        meta=src.meta,
    )


def interpret_service(src: Optional[ProtoService]) -> Optional[Service]:
    if src is None:
        return None

    body = ServiceBody()
    _sort_into(body, src.body, _SERVICE_BUCKETS, "service")
    return Service(
        name=src.name,
        body=body,
        comments=src.comments,
        inline_comment=src.inline_comment,
        inline_comment_behind_left_curly=src.inline_comment_behind_left_curly,
        meta=src.meta,
    )
