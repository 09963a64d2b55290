import io

import pytest

from protoparser.models import Enum, Message, Proto, Service
from protoparser.parser.proto_ast import (
    ProtoEnum,
    ProtoField,
    ProtoMessage,
    ProtoRPC,
    ProtoService,
)
from protoparser.parser.proto_parser import parse
from protoparser.parser.proto_transform import (
    InterpretError,
    interpret_enum,
    interpret_message,
    interpret_proto,
    interpret_service,
)


PROTO = """\
syntax = "proto3";
import "a.proto";
package foo.bar;
option java_package = "com.foo.bar";
import "b.proto";

// The message.
message Outer {
  int32 a = 1;
  message Inner { string s = 1; }
  enum Kind { K0 = 0; }
  option deprecated = true;
  oneof choice { string x = 2; }
  map<string, int32> counts = 3;
  int32 b = 4;
  reserved 5 to 7;
  extend Base { int32 ext = 100; }
  // closing
}

enum Status {
  option allow_alias = true;
  OK = 0;
  reserved 2;
  DONE = 1;
}

service Svc { // svc
  option (v) = 1;
  rpc A(Req) returns (Res);
  rpc B(Req) returns (stream Res);
}

extend google.protobuf.FieldOptions { string tag = 5000; }
// end
"""


def _proto():
    return parse(io.StringIO(PROTO), body_including_comments=True)


class TestInterpretProto:
    def test_top_level_buckets(self):
        proto = interpret_proto(_proto())
        assert isinstance(proto, Proto)
        assert proto.syntax.protobuf_version == "proto3"
        body = proto.body
        assert [i.location for i in body.imports] == ['"a.proto"', '"b.proto"']
        assert [p.name for p in body.packages] == ["foo.bar"]
        assert [o.option_name for o in body.options] == ["java_package"]
        assert [m.name for m in body.messages] == ["Outer"]
        assert [e.name for e in body.enums] == ["Status"]
        assert [s.name for s in body.services] == ["Svc"]
        assert [e.message_type for e in body.extends] == ["google.protobuf.FieldOptions"]
        assert [c.raw for c in body.comments] == ["// end"]

    def test_nested_declarations_are_interpreted(self):
        proto = interpret_proto(_proto())
        assert isinstance(proto.body.messages[0], Message)
        assert isinstance(proto.body.enums[0], Enum)
        assert isinstance(proto.body.services[0], Service)

    def test_none(self):
        assert interpret_proto(None) is None


class TestInterpretMessage:
    def test_buckets_keep_source_order(self):
        message = interpret_message(_proto().body[4])
        assert message.name == "Outer"
        assert [c.raw for c in message.comments] == ["// The message."]
        body = message.body
        assert [f.field_name for f in body.fields] == ["a", "b"]
        assert [m.name for m in body.messages] == ["Inner"]
        assert isinstance(body.messages[0], Message)
        assert [e.name for e in body.enums] == ["Kind"]
        assert [o.option_name for o in body.options] == ["deprecated"]
        assert [o.name for o in body.oneofs] == ["choice"]
        assert [m.field_name for m in body.maps] == ["counts"]
        assert [str(r) for r in body.reserves[0].ranges] == ["5 to 7"]
        assert [e.message_type for e in body.extends] == ["Base"]
        assert [c.raw for c in body.comments] == ["// closing"]

    def test_meta_is_carried_over(self):
        src = _proto().body[4]
        message = interpret_message(src)
        assert message.meta == src.meta
        assert message.inline_comment is None

    def test_rejects_foreign_element(self):
        src = ProtoMessage(name="M", body=[ProtoRPC("A", None, None)])
        with pytest.raises(InterpretError, match="invalid message body element ProtoRPC"):
            interpret_message(src)

    def test_none(self):
        assert interpret_message(None) is None


class TestInterpretEnum:
    def test_buckets(self):
        enum = interpret_enum(_proto().body[5])
        assert enum.name == "Status"
        assert [o.option_name for o in enum.body.options] == ["allow_alias"]
        assert [f.ident for f in enum.body.enum_fields] == ["OK", "DONE"]
        assert [str(r) for r in enum.body.reserves[0].ranges] == ["2"]
        assert enum.body.comments == []

    def test_rejects_field(self):
        src = ProtoEnum(name="E", body=[ProtoField("int32", "x", "1")])
        with pytest.raises(InterpretError, match="invalid enum body element ProtoField"):
            interpret_enum(src)

    def test_none(self):
        assert interpret_enum(None) is None


class TestInterpretService:
    def test_buckets(self):
        service = interpret_service(_proto().body[6])
        assert service.name == "Svc"
        assert service.inline_comment_behind_left_curly.raw == "// svc"
        assert [o.option_name for o in service.body.options] == ["(v)"]
        assert [r.name for r in service.body.rpcs] == ["A", "B"]
        assert service.body.rpcs[1].response.is_stream is True

    def test_rejects_message(self):
        src = ProtoService(name="S", body=[ProtoMessage(name="M")])
        with pytest.raises(InterpretError, match="invalid service body element ProtoMessage"):
            interpret_service(src)

    def test_none(self):
        assert interpret_service(None) is None
