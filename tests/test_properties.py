import io

import pytest

from protoparser.parser.proto_ast import ProtoComment, ProtoFile, Range
from protoparser.parser.proto_ast_parser import ProtoParser
from protoparser.parser.proto_lexer import ProtoLexer
from protoparser.parser.proto_parser import parse
from protoparser.parser.proto_tokenizer import ProtoScanner, ProtoTokenType, ScanMode
from protoparser.parser.rune_source import RuneSource


SOURCES = [
    """\
// Header comment, über alles.
syntax = "proto3"; // inline
package a.b;
import weak "x.proto";
option (my.opt) = -1.5e3;

/* Block
   comment */
message Outer {
  message Inner { bytes data = 1; }
  enum Kind {
    option allow_alias = true;
    K0 = 0;
    K1 = 1 [(label) = "ein"];
    reserved 2 to 4;
  }
  repeated Inner inners = 1 [packed = true];
  map<string, Kind> kinds = 2; // kinds
  oneof choice {
    option (o) = 1;
    string s = 3;
    int64 n = 4;
  }
  reserved 5, 10 to max;
  reserved "old_name";
  extend Base { int32 ext = 100; }
  ;
  // trailing
}

service Svc {
  rpc Unary(Outer) returns (Outer);
  rpc Streaming(stream Outer) returns (stream .a.b.Outer) {
    option deprecated = true;
  }
}
""",
    'enum E {\n  RUNNING = 0; // last\n  // tail\n}\n',
    "message Ünïcode { string näme = 1; }\n",
]


def _walk(node):
    """Yield (parent, child) pairs for every body element, depth first."""
    body = node.body if isinstance(node, ProtoFile) else getattr(node, "body", [])
    for child in body:
        yield node, child
        yield from _walk(child)


def _offsets(node):
    return node.meta.start.offset, node.meta.last.offset


class TestPositionMonotonicity:
    @pytest.mark.parametrize("text", SOURCES)
    def test_start_not_after_last(self, text):
        proto = parse(io.StringIO(text), body_including_comments=True)
        for _, child in _walk(proto):
            start, last = _offsets(child)
            assert child.meta.last.is_valid, child
            assert start <= last, child

    @pytest.mark.parametrize("text", SOURCES)
    def test_children_inside_parent(self, text):
        proto = parse(io.StringIO(text), body_including_comments=True)
        for parent, child in _walk(proto):
            if isinstance(parent, ProtoFile):
                continue
            parent_start, parent_last = _offsets(parent)
            child_start, child_last = _offsets(child)
            assert parent_start <= child_start, child
            assert child_last <= parent_last, child


class TestCoordinateConsistency:
    @pytest.mark.parametrize("text", SOURCES)
    def test_offsets_match_line_and_column(self, text):
        data = text.encode("utf-8")
        scanner = ProtoScanner(RuneSource(io.BytesIO(data)))
        while True:
            tok = scanner.scan(ScanMode.COMMENT | ScanMode.STRING_LIT)
            assert tok.type != ProtoTokenType.ILLEGAL
            if tok.type == ProtoTokenType.EOF:
                break
            prefix = data[: tok.pos.offset].decode("utf-8")
            assert tok.pos.line == prefix.count("\n") + 1
            assert tok.pos.column == len(prefix) - (prefix.rfind("\n") + 1) + 1


class TestCommentAssociation:
    @pytest.mark.parametrize("text", SOURCES)
    def test_inline_and_leading_lines(self, text):
        proto = parse(io.StringIO(text), body_including_comments=True)
        nodes = [proto.syntax] if proto.syntax is not None else []
        nodes += [child for _, child in _walk(proto) if not isinstance(child, ProtoComment)]
        for node in nodes:
            if node.inline_comment is not None:
                assert node.inline_comment.meta.start.line == node.meta.last.line
            for comment in node.comments:
                assert comment.meta.last.line < node.meta.start.line


class TestBodyOrder:
    def test_declaration_order_is_kept(self):
        proto = parse(io.StringIO(SOURCES[0]), body_including_comments=True)
        for parent, _ in _walk(proto):
            if isinstance(parent, ProtoFile):
                continue
            offsets = [child.meta.start.offset for child in parent.body]
            assert offsets == sorted(offsets)


class TestReservedRoundTrip:
    def test_ranges(self):
        parser = ProtoParser(ProtoLexer(io.StringIO("reserved 1, 5 to 10, 20 to max;")))
        reserved = parser.parse_reserved()
        assert reserved.ranges == [Range("1"), Range("5", "10"), Range("20", "max")]
        assert "reserved " + ", ".join(str(r) for r in reserved.ranges) + ";" == (
            "reserved 1, 5 to 10, 20 to max;"
        )


class TestDeterminism:
    @pytest.mark.parametrize("text", SOURCES)
    def test_identical_input_gives_equal_trees(self, text):
        data = text.encode("utf-8")
        first = parse(io.BytesIO(data), filename="x.proto", body_including_comments=True)
        second = parse(io.BytesIO(data), filename="x.proto", body_including_comments=True)
        assert first == second
