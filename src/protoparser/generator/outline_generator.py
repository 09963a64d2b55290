from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

from jinja2 import Environment, FileSystemLoader

from protoparser.parser.proto_ast import (
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
    RPCType,
)


def _get_template_env() -> Environment:
    template_dir = Path(__file__).parent.parent / "templates"
    return Environment(
        loader=FileSystemLoader(str(template_dir)),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )


def _options_suffix(options) -> str:
    if not options:
        return ""
    return " [" + ", ".join(f"{o.option_name} = {o.constant}" for o in options) + "]"


def _rpc_type(rpc_type: RPCType) -> str:
    if rpc_type.is_stream:
        return f"(stream {rpc_type.message_type})"
    return f"({rpc_type.message_type})"


def _label(node) -> Optional[str]:
    """One-line summary of a declaration; None for nodes left out of the outline."""
    if isinstance(node, ProtoSyntax):
        return f'syntax "{node.protobuf_version}"'
    if isinstance(node, ProtoImport):
        if node.modifier is ImportModifier.NONE:
            return f"import {node.location}"
        return f"import {node.modifier.value} {node.location}"
    if isinstance(node, ProtoPackage):
        return f"package {node.name}"
    if isinstance(node, ProtoOption):
        constant = node.endpoint.to_constant() if node.endpoint is not None else node.constant
        return f"option {node.option_name} = {constant}"
    if isinstance(node, ProtoField):
        prefix = "repeated " if node.is_repeated else ""
        return (
            f"{prefix}{node.type_name} {node.field_name} = {node.field_number}"
            + _options_suffix(node.field_options)
        )
    if isinstance(node, ProtoMapField):
        return (
            f"map<{node.key_type}, {node.type_name}> {node.field_name} = {node.field_number}"
            + _options_suffix(node.field_options)
        )
    if isinstance(node, ProtoEnumField):
        return f"{node.ident} = {node.number}" + _options_suffix(node.enum_value_options)
    if isinstance(node, ProtoReserved):
        if node.field_names:
            return "reserved " + ", ".join(node.field_names)
        return "reserved " + ", ".join(str(r) for r in node.ranges)
    if isinstance(node, ProtoOneof):
        return f"oneof {node.name}"
    if isinstance(node, ProtoEnum):
        return f"enum {node.name}"
    if isinstance(node, ProtoMessage):
        return f"message {node.name}"
    if isinstance(node, ProtoExtend):
        return f"extend {node.message_type}"
    if isinstance(node, ProtoService):
        return f"service {node.name}"
    if isinstance(node, ProtoRPC):
        return f"rpc {node.name}{_rpc_type(node.request)} returns {_rpc_type(node.response)}"
    if isinstance(node, ProtoComment):
        return None
    raise TypeError(f"unsupported node type {type(node).__name__}")


def _outline_nodes(elements: List) -> List[Dict]:
    """Build the nested template data, skipping comments."""
    nodes = []
    for element in elements:
        label = _label(element)
        if label is None:
            continue
        children = _outline_nodes(getattr(element, "body", []))
        nodes.append({"label": label, "children": children})
    return nodes


def generate_outline(proto: ProtoFile, filename: str = "") -> str:
    """Render an indented outline of the declarations in ``proto``."""
    env = _get_template_env()
    template = env.get_template("outline.txt.j2")

    elements = list(proto.body)
    if proto.syntax is not None:
        elements.insert(0, proto.syntax)

    return template.render(
        filename=filename or "<input>",
        nodes=_outline_nodes(elements),
    )
