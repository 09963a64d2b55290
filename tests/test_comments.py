import io

from protoparser.parser.proto_ast import ProtoComment, ProtoEnumField, ProtoOption
from protoparser.parser.proto_ast_parser import ProtoParser
from protoparser.parser.proto_lexer import ProtoLexer
from protoparser.parser.proto_meta import Meta, Position


def _parser(text: str, **kwargs) -> ProtoParser:
    return ProtoParser(ProtoLexer(io.StringIO(text)), **kwargs)


def _pos(offset: int, line: int, column: int) -> Position:
    return Position("", offset, line, column)


class TestCommentNode:
    def test_c_style(self):
        assert ProtoComment("/*\ncomment\n*/\n").is_c_style()
        assert not ProtoComment("// comment").is_c_style()

    def test_lines_of_single_line_c_style(self):
        assert ProtoComment("/*comment*/").lines() == ["comment"]

    def test_lines_of_multi_line_c_style(self):
        assert ProtoComment("/* comment1\ncomment2\n*/").lines() == [" comment1", "comment2", ""]

    def test_lines_of_cpp_style(self):
        assert ProtoComment("// comment").lines() == [" comment"]


class TestLeadingComments:
    def test_reference_enum(self):
        enum = _parser(
            """enum EnumAllowingAlias {
  // option
  option allow_alias = true;
  // UNKNOWN
  UNKNOWN = 0;
}
"""
        ).parse_enum()
        option, unknown = enum.body

        assert [c.raw for c in option.comments] == ["// option"]
        assert option.comments[0].meta.start == _pos(27, 2, 3)
        assert option.meta.start == _pos(39, 3, 3)
        assert option.meta.last == _pos(64, 3, 28)

        assert [c.raw for c in unknown.comments] == ["// UNKNOWN"]
        assert unknown.comments[0].meta.start == _pos(68, 4, 3)
        assert unknown.meta.start == _pos(81, 5, 3)
        assert enum.meta.last == _pos(94, 6, 1)

    def test_multiple_comments_in_order(self):
        proto = _parser(
            """// leading 1
/* leading
   2 */
message Foo {}
"""
        ).parse()
        message = proto.body[0]
        assert [c.raw for c in message.comments] == ["// leading 1", "/* leading\n   2 */"]
        assert message.comments[1].meta.last.line == 3

    def test_comments_end_before_declaration_line(self):
        proto = _parser("// a\n/* b */ message Foo {}\n").parse()
        message = proto.body[1]
        assert [c.raw for c in message.comments] == ["// a"]
        for comment in message.comments:
            assert comment.meta.last.line < message.meta.start.line

    def test_same_line_comment_stays_in_top_level_stream(self):
        proto = _parser("/* doc */ message A {}\n").parse()
        comment, message = proto.body
        assert isinstance(comment, ProtoComment)
        assert comment.raw == "/* doc */"
        assert comment.meta.start == _pos(0, 1, 1)
        assert message.comments == []
        assert message.meta.start == _pos(10, 1, 11)

    def test_same_line_comment_before_syntax(self):
        proto = _parser('/* header */ syntax = "proto3";\nmessage A {}\n').parse()
        assert proto.syntax.comments == []
        assert [c.raw for c in proto.body[:1]] == ["/* header */"]
        assert proto.body[1].name == "A"

    def test_same_line_comment_kept_in_block_body(self):
        message = _parser(
            "message M {\n  // leads x\n  /* x */ int32 x = 1;\n}\n", body_including_comments=True
        ).parse_message()
        comment, field = message.body
        assert comment.raw == "/* x */"
        assert [c.raw for c in field.comments] == ["// leads x"]

    def test_same_line_comment_dropped_from_block_by_default(self):
        message = _parser("message M {\n  /* x */ int32 x = 1;\n}\n").parse_message()
        assert len(message.body) == 1
        assert message.body[0].comments == []

    def test_syntax_comments(self):
        proto = _parser('// header\nsyntax = "proto3";\n').parse()
        assert [c.raw for c in proto.syntax.comments] == ["// header"]

    def test_comments_do_not_leak_into_next_declaration(self):
        proto = _parser(
            """// first
message A {}
message B {}
"""
        ).parse()
        assert [c.raw for c in proto.body[0].comments] == ["// first"]
        assert proto.body[1].comments == []


class TestInlineComments:
    def test_reference_enum(self):
        enum = _parser(
            """enum EnumAllowingAlias { // TODO: implementation
  option allow_alias = true; // option
  UNKNOWN = 0; // UNKNOWN
}
"""
        ).parse_enum()
        option, unknown = enum.body

        assert option.inline_comment.raw == "// option"
        assert option.inline_comment.meta == Meta(_pos(78, 2, 30), _pos(86, 2, 38))
        assert option.meta.start == _pos(51, 2, 3)
        assert option.meta.last == _pos(76, 2, 28)

        assert unknown.inline_comment.raw == "// UNKNOWN"
        assert unknown.inline_comment.meta.start == _pos(103, 3, 16)
        assert unknown.meta.start == _pos(90, 3, 3)

        assert enum.inline_comment_behind_left_curly.raw == "// TODO: implementation"
        assert enum.inline_comment_behind_left_curly.meta.start == _pos(25, 1, 26)
        assert enum.meta.last == _pos(114, 4, 1)

    def test_inline_comment_on_terminator_line(self):
        proto = _parser(
            """message Foo {
  int32 x = 1; /* x */
  int32 y = 2;
} // Foo
"""
        ).parse()
        message = proto.body[0]
        x, y = message.body
        assert x.inline_comment.raw == "/* x */"
        assert y.inline_comment is None
        assert message.inline_comment.raw == "// Foo"
        for node in (x, message):
            assert node.inline_comment.meta.start.line == node.meta.last.line

    def test_comment_on_next_line_is_leading_not_inline(self):
        proto = _parser(
            """message Foo {
  int32 x = 1;
  // about y
  int32 y = 2;
}
"""
        ).parse()
        x, y = proto.body[0].body
        assert x.inline_comment is None
        assert [c.raw for c in y.comments] == ["// about y"]

    def test_comments_inside_declaration_are_dropped(self):
        message = _parser(
            """message Foo {
  int32 /* inside */ x = 1; // after
}
"""
        ).parse_message()
        field = message.body[0]
        assert field.comments == []
        assert field.inline_comment.raw == "// after"

    def test_only_one_inline_comment(self):
        proto = _parser("package a; /* one */ // two\nmessage B {}\n").parse()
        package, message = proto.body
        assert package.inline_comment.raw == "/* one */"
        assert [c.raw for c in message.comments] == ["// two"]

    def test_top_level_inline_comments(self):
        proto = _parser('syntax = "proto3"; // syntax\nimport "a.proto"; // a\n').parse()
        assert proto.syntax.inline_comment.raw == "// syntax"
        assert proto.body[0].inline_comment.raw == "// a"

    def test_rpc_and_service_behind_left_curly(self):
        proto = _parser(
            """service S { // service
  rpc A(B) returns (C) { // rpc
    option deprecated = true; // option
  }
}
"""
        ).parse()
        service = proto.body[0]
        rpc = service.body[0]
        assert service.inline_comment_behind_left_curly.raw == "// service"
        assert rpc.inline_comment_behind_left_curly.raw == "// rpc"
        assert rpc.body[0].inline_comment.raw == "// option"


class TestTrailingBodyComments:
    def test_skipped_by_default(self):
        enum = _parser(
            """enum EnumAllowingAlias {
  option allow_alias = true;
  // last line
}
"""
        ).parse_enum()
        assert len(enum.body) == 1
        assert isinstance(enum.body[0], ProtoOption)
        assert enum.body[0].meta.last == _pos(52, 2, 28)
        assert enum.meta.last == _pos(69, 4, 1)

    def test_kept_when_body_includes_comments(self):
        enum = _parser(
            """enum EnumAllowingAlias {
  option allow_alias = true;
  // last first comment
  /* last second comment */
}
""",
            body_including_comments=True,
        ).parse_enum()
        option, first, second = enum.body
        assert isinstance(option, ProtoOption)
        assert first.raw == "// last first comment"
        assert first.meta.start == _pos(56, 3, 3)
        assert second.raw == "/* last second comment */"
        assert second.meta.start == _pos(80, 4, 3)
        assert enum.meta.last == _pos(106, 5, 1)

    def test_enum_field_followed_by_closing_comment(self):
        enum = _parser("enum E {\n  RUNNING = 0;\n  // last\n}\n", body_including_comments=True).parse_enum()
        field, comment = enum.body
        assert isinstance(field, ProtoEnumField)
        assert isinstance(comment, ProtoComment)
        assert comment.raw == "// last"

    def test_empty_block_comment(self):
        message = _parser("message M {\n  // nothing yet\n}", body_including_comments=True).parse_message()
        assert [c.raw for c in message.body] == ["// nothing yet"]

    def test_nested_block_comments(self):
        message = _parser(
            "message A {\n  message B {\n    // inner\n  }\n  // outer\n}",
            body_including_comments=True,
        ).parse_message()
        inner, outer = message.body
        assert [c.raw for c in inner.body] == ["// inner"]
        assert outer.raw == "// outer"

    def test_top_level_trailing_comments(self):
        proto = _parser("message A {}\n// end of file\n/* really */\n").parse()
        assert [type(e) for e in proto.body][1:] == [ProtoComment, ProtoComment]
        assert proto.body[1].raw == "// end of file"
