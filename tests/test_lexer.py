"""Tests for the lexer: token categories, longest match, spans and totality."""

from __future__ import annotations

from smalilsp.tokens import TokenType

from .conftest import SAMPLE, assert_contents, assert_types


class TestDirectives:
    def test_class(self, lex) -> None:
        tokens = lex(".class public final Lme/l3af/Test;")
        assert_types(
            tokens,
            [
                TokenType.DIRECTIVE,
                TokenType.SPACE,
                TokenType.VISIBILITY,
                TokenType.SPACE,
                TokenType.MODIFIER,
                TokenType.SPACE,
                TokenType.CLASS,
            ],
        )
        assert_contents(tokens, [".class", " ", "public", " ", "final", " ", "Lme/l3af/Test;"])

    def test_source(self, lex) -> None:
        tokens = lex('.source "TreecordCommands.smali"')
        assert_types(tokens, [TokenType.DIRECTIVE, TokenType.SPACE, TokenType.STRING])
        assert tokens[2].content == '"TreecordCommands.smali"'

    def test_super(self, lex) -> None:
        tokens = lex(".super Ljava/lang/Object;")
        assert_types(tokens, [TokenType.DIRECTIVE, TokenType.SPACE, TokenType.CLASS])

    def test_field(self, lex) -> None:
        tokens = lex(".field private static final Obj:Ljava/lang/Object;")
        assert_types(
            tokens,
            [
                TokenType.FIELD,
                TokenType.SPACE,
                TokenType.VISIBILITY,
                TokenType.SPACE,
                TokenType.MODIFIER,
                TokenType.SPACE,
                TokenType.MODIFIER,
                TokenType.SPACE,
                TokenType.FIELD_NAME,
                TokenType.CLASS,
            ],
        )
        assert tokens[8].content == "Obj:"

    def test_method_start(self, lex) -> None:
        tokens = lex(".method public static constructor <clinit>()V")
        assert_types(
            tokens,
            [
                TokenType.METHOD,
                TokenType.SPACE,
                TokenType.VISIBILITY,
                TokenType.SPACE,
                TokenType.MODIFIER,
                TokenType.SPACE,
                TokenType.MODIFIER,
                TokenType.SPACE,
                TokenType.METHOD_NAME,
                TokenType.PAREN,
                TokenType.BUILTIN_TYPE,
            ],
        )
        assert tokens[8].content == "<clinit>("

    def test_method_end_is_one_token(self, lex) -> None:
        tokens = lex(".end method")
        assert_types(tokens, [TokenType.METHOD])
        assert tokens[0].content == ".end method"

    def test_end_field_is_one_token(self, lex) -> None:
        assert_types(lex(".end field"), [TokenType.FIELD])

    def test_goto(self, lex) -> None:
        tokens = lex(".goto :goto_12")
        assert_types(tokens, [TokenType.DIRECTIVE, TokenType.SPACE, TokenType.LABEL])
        assert tokens[2].content == ":goto_12"

    def test_locals_beats_local(self, lex) -> None:
        tokens = lex(".locals 2")
        assert_types(tokens, [TokenType.DIRECTIVE, TokenType.SPACE, TokenType.NUMBER])
        assert tokens[0].content == ".locals"

    def test_end_annotation(self, lex) -> None:
        tokens = lex(".end annotation")
        assert_types(tokens, [TokenType.DIRECTIVE])


class TestFieldsAndMethods:
    def test_field_then_method(self, lex) -> None:
        tokens = lex(".field private bool:Z\n.method public getBool()Z")
        assert_types(
            tokens,
            [
                TokenType.FIELD,
                TokenType.SPACE,
                TokenType.VISIBILITY,
                TokenType.SPACE,
                TokenType.FIELD_NAME,
                TokenType.BUILTIN_TYPE,
                TokenType.NEWLINE,
                TokenType.METHOD,
                TokenType.SPACE,
                TokenType.VISIBILITY,
                TokenType.SPACE,
                TokenType.METHOD_NAME,
                TokenType.PAREN,
                TokenType.BUILTIN_TYPE,
            ],
        )
        assert tokens[4].content == "bool:"
        assert tokens[11].content == "getBool("

    def test_array_parameter(self, lex) -> None:
        tokens = lex("main([Ljava/lang/String;)V")
        assert_types(
            tokens,
            [
                TokenType.METHOD_NAME,
                TokenType.ARRAY_OP,
                TokenType.CLASS,
                TokenType.PAREN,
                TokenType.BUILTIN_TYPE,
            ],
        )

    def test_keyword_prefix_of_name_is_a_name(self, lex) -> None:
        tokens = lex("finalize()V")
        assert tokens[0].type == TokenType.METHOD_NAME
        assert tokens[0].content == "finalize("

    def test_underscore_in_method_name(self, lex) -> None:
        tokens = lex("get_value()I")
        assert tokens[0].type == TokenType.METHOD_NAME


class TestInstructions:
    def test_invoke(self, lex) -> None:
        tokens = lex("    invoke-direct {p0}, Ljava/lang/Object;-><init>()V")
        assert_types(
            tokens,
            [
                TokenType.SPACE,
                TokenType.INVOKE,
                TokenType.SPACE,
                TokenType.BRACE,
                TokenType.REGISTER,
                TokenType.BRACE,
                TokenType.COMMA_OP,
                TokenType.SPACE,
                TokenType.CLASS,
                TokenType.METHOD_CALL,
                TokenType.PAREN,
                TokenType.BUILTIN_TYPE,
            ],
        )
        assert tokens[9].content == "-><init>("

    def test_invoke_range(self, lex) -> None:
        tokens = lex("invoke-static/range {v0 .. v2}")
        assert tokens[0].type == TokenType.INVOKE
        assert tokens[0].content == "invoke-static/range"
        assert TokenType.RANGE_OP in [t.type for t in tokens]

    def test_const_variants_longest_match(self, lex) -> None:
        assert lex("const/4")[0].type == TokenType.CONST_INT
        assert lex("const-string")[0].type == TokenType.CONST_STRING
        assert lex("const-string/jumbo")[0].content == "const-string/jumbo"
        assert lex("const-class")[0].type == TokenType.CONST
        assert lex("const")[0].type == TokenType.CONST

    def test_returns(self, lex) -> None:
        for text in ("return", "return-void", "return-object", "return-wide"):
            tokens = lex(text)
            assert_types(tokens, [TokenType.RETURN])
            assert tokens[0].content == text

    def test_move_result_object(self, lex) -> None:
        tokens = lex("move-result-object v0")
        assert tokens[0].type == TokenType.MOVE
        assert tokens[0].content == "move-result-object"

    def test_field_access(self, lex) -> None:
        assert lex("iget-object")[0].type == TokenType.IGET
        assert lex("sget")[0].type == TokenType.SGET
        assert lex("iput-wide")[0].type == TokenType.IPUT
        assert lex("sput-boolean")[0].type == TokenType.SPUT

    def test_if_and_label(self, lex) -> None:
        tokens = lex("if-eqz v0, :cond_0")
        assert_types(
            tokens,
            [
                TokenType.IF,
                TokenType.SPACE,
                TokenType.REGISTER,
                TokenType.COMMA_OP,
                TokenType.SPACE,
                TokenType.LABEL,
            ],
        )

    def test_check_cast_and_new_instance(self, lex) -> None:
        assert lex("check-cast")[0].type == TokenType.CHECK_CAST
        assert lex("new-instance")[0].type == TokenType.NEW_INSTANCE

    def test_numbers(self, lex) -> None:
        for text in ("0", "42", "-7", "0x1f", "-0x10"):
            tokens = lex(text)
            assert_types(tokens, [TokenType.NUMBER])

    def test_macro(self, lex) -> None:
        assert_types(lex("{{name}}"), [TokenType.MACRO])


class TestStructural:
    def test_comment(self, lex) -> None:
        tokens = lex("# Test")
        assert_types(tokens, [TokenType.COMMENT])
        assert tokens[0].content == "# Test"

    def test_comment_stops_at_newline(self, lex) -> None:
        tokens = lex("# Test\n")
        assert_types(tokens, [TokenType.COMMENT, TokenType.NEWLINE])
        assert tokens[0].content == "# Test"

    def test_crlf_is_one_newline(self, lex) -> None:
        tokens = lex("# Test\r\n")
        assert_types(tokens, [TokenType.COMMENT, TokenType.NEWLINE])
        assert tokens[1].content == "\r\n"

    def test_mixed_whitespace(self, lex) -> None:
        tokens = lex(" \t ")
        assert_types(tokens, [TokenType.SPACE])

    def test_punctuation(self, lex) -> None:
        assert_types(
            lex("{}(),[.."),
            [
                TokenType.BRACE,
                TokenType.BRACE,
                TokenType.PAREN,
                TokenType.PAREN,
                TokenType.COMMA_OP,
                TokenType.ARRAY_OP,
                TokenType.RANGE_OP,
            ],
        )


class TestErrors:
    def test_unknown_characters_are_single_error_tokens(self, lex) -> None:
        tokens = lex("@!")
        assert_types(tokens, [TokenType.ERROR, TokenType.ERROR])
        assert_contents(tokens, ["@", "!"])

    def test_error_inside_line(self, lex) -> None:
        tokens = lex(".super @")
        assert_types(tokens, [TokenType.DIRECTIVE, TokenType.SPACE, TokenType.ERROR])

    def test_empty_source(self, lex) -> None:
        assert lex("") == []


class TestSpans:
    def test_single_line_offsets(self, lex) -> None:
        tokens = lex(".class public Ltest/Test;")
        cls = tokens[4]
        assert (cls.span.start.offset, cls.span.end.offset) == (14, 25)
        assert (cls.span.start.line, cls.span.start.column) == (0, 14)
        assert (cls.span.end.line, cls.span.end.column) == (0, 25)

    def test_newline_span_crosses_lines(self, lex) -> None:
        tokens = lex(".class\n  .super")
        newline = tokens[1]
        assert (newline.span.start.line, newline.span.start.column) == (0, 6)
        assert (newline.span.end.line, newline.span.end.column) == (1, 0)
        sup = tokens[3]
        assert sup.content == ".super"
        assert (sup.span.start.line, sup.span.start.column) == (1, 2)


class TestTotality:
    def test_sample_reconstructs(self, lex) -> None:
        assert "".join(t.content for t in lex(SAMPLE)) == SAMPLE

    def test_garbage_reconstructs(self, lex) -> None:
        source = "\x00 ~~ .method\r\n\t\"unterminated\n@@ L;->x"
        tokens = lex(source)
        assert "".join(t.content for t in tokens) == source

    def test_spans_are_contiguous(self, lex) -> None:
        tokens = lex(SAMPLE)
        assert tokens[0].span.start.offset == 0
        for prev, cur in zip(tokens, tokens[1:]):
            assert prev.span.end == cur.span.start
        assert tokens[-1].span.end.offset == len(SAMPLE)
