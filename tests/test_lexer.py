import dataclasses

import pytest

from minipy.diagnostics import Diagnostics, ErrorCode
from minipy.lexer import Token, TokenType, tokenize

T = TokenType


def types(source: str):
    return [token.type for token in tokenize(source)]


def test_assignment_line():
    assert types("x = 1\n") == [T.IDENT, T.ASSIGN, T.INT, T.NEWLINE]


def test_block_is_bracketed_by_one_indent_and_one_dedent():
    source = "if x:\n    y = 1\nz = 2\n"
    assert types(source) == [
        T.IF, T.IDENT, T.COLON, T.NEWLINE,
        T.INDENT, T.IDENT, T.ASSIGN, T.INT, T.NEWLINE,
        T.DEDENT, T.IDENT, T.ASSIGN, T.INT, T.NEWLINE,
    ]


def test_open_blocks_closed_at_end_of_input():
    result = types("if x:\n  if y:\n    z = 1")
    assert result.count(T.INDENT) == 2
    assert result[-2:] == [T.DEDENT, T.DEDENT]


def test_blank_lines_produce_nothing():
    assert types("\n\n   \nx = 1\n\n") == [T.IDENT, T.ASSIGN, T.INT, T.NEWLINE]
    assert tokenize("") == []


def test_comments():
    assert types("x = 1 # the answer") == [T.IDENT, T.ASSIGN, T.INT, T.NEWLINE]
    # A comment-only line at column 0 closes the block and ends with a NEWLINE
    result = types("if x:\n    y = 1\n# note\n    z = 2\n")
    assert result[9:11] == [T.DEDENT, T.NEWLINE]
    assert result.count(T.INDENT) == 2
    assert result.count(T.DEDENT) == 2
    assert result.count(T.NEWLINE) == 4


def test_indented_comment_line_stays_in_the_block():
    result = types("if x:\n    y = 1\n    # note\n    z = 2\n")
    assert result.count(T.INDENT) == 1
    assert result.count(T.DEDENT) == 1
    assert result[9] == T.NEWLINE
    assert result.count(T.NEWLINE) == 4


def test_comment_line_position():
    tokens = tokenize("  # note")
    assert [(t.type, t.line, t.col) for t in tokens] == [
        (T.INDENT, 1, 3), (T.NEWLINE, 1, 9), (T.DEDENT, 2, 1),
    ]


def test_numbers():
    tokens = tokenize("3 4.5 10.")
    assert [(t.type, t.value) for t in tokens] == [
        (T.INT, 3), (T.FLOAT, 4.5), (T.FLOAT, 10.0), (T.NEWLINE, ''),
    ]


def test_malformed_number_degrades_to_unknown():
    diagnostics = Diagnostics()
    tokens = tokenize("x = 1.2.3", diagnostics)
    assert [t.type for t in tokens] == [T.IDENT, T.ASSIGN, T.UNKNOWN, T.NEWLINE]
    assert tokens[2].value == '.'
    assert diagnostics.codes() == [ErrorCode.MALFORMED_NUMBER]


def test_strings():
    tokens = tokenize("""'hi' "a b" "it's" """)
    assert [t.value for t in tokens if t.type == T.STRING] == ["hi", "a b", "it's"]


def test_unterminated_string_runs_to_end_of_line():
    diagnostics = Diagnostics()
    tokens = tokenize("print 'abc def\nx = 1", diagnostics)
    assert [t.type for t in tokens[:3]] == [T.PRINT, T.STRING, T.NEWLINE]
    assert tokens[1].value == "abc def"
    assert diagnostics.codes() == [ErrorCode.UNTERMINATED_STRING]


def test_keywords():
    source = "print def if else return for while in range printer"
    assert types(source) == [
        T.PRINT, T.DEF, T.IF, T.ELSE, T.RETURN, T.FOR, T.WHILE, T.IN, T.RANGE,
        T.IDENT, T.NEWLINE,
    ]


def test_identifiers():
    tokens = tokenize("foo_bar2 x1")
    assert [t.value for t in tokens[:2]] == ["foo_bar2", "x1"]
    # Identifiers start with a letter
    assert types("_x") == [T.UNKNOWN, T.IDENT, T.NEWLINE]


def test_operators_and_punctuation():
    assert types("** * // / > < = , ( ) : + -") == [
        T.DOUBLE_STAR, T.STAR, T.DOUBLE_SLASH, T.SLASH, T.GT, T.LT, T.ASSIGN,
        T.COMMA, T.LPAREN, T.RPAREN, T.COLON, T.PLUS, T.MINUS, T.NEWLINE,
    ]
    assert types("2**3//4") == [T.INT, T.DOUBLE_STAR, T.INT, T.DOUBLE_SLASH, T.INT, T.NEWLINE]


def test_unknown_characters_never_stop_the_lexer():
    diagnostics = Diagnostics()
    tokens = tokenize("@ $\nx = 1", diagnostics)
    assert [(t.type, t.value) for t in tokens[:3]] == [
        (T.UNKNOWN, '@'), (T.UNKNOWN, '$'), (T.NEWLINE, ''),
    ]
    assert [t.type for t in tokens[3:]] == [T.IDENT, T.ASSIGN, T.INT, T.NEWLINE]
    assert diagnostics.codes() == [ErrorCode.UNKNOWN_CHARACTER] * 2


def test_inconsistent_dedent_opens_new_level():
    diagnostics = Diagnostics()
    result = [t.type for t in tokenize("if a:\n    b = 1\n  c = 2\n", diagnostics)]
    assert result.count(T.INDENT) == result.count(T.DEDENT) == 2
    assert result[-7:] == [T.DEDENT, T.INDENT, T.IDENT, T.ASSIGN, T.INT, T.NEWLINE, T.DEDENT]
    assert diagnostics.codes() == [ErrorCode.INCONSISTENT_DEDENT]


def test_tab_indents_to_multiple_of_eight():
    result = types("if a:\n\tb = 1\n        c = 2\n")
    assert result.count(T.INDENT) == 1
    assert result.count(T.DEDENT) == 1


def test_crlf_line_endings():
    assert types("x = 1\r\ny = 2\r\n") == [
        T.IDENT, T.ASSIGN, T.INT, T.NEWLINE,
        T.IDENT, T.ASSIGN, T.INT, T.NEWLINE,
    ]


def test_positions():
    tokens = tokenize("x = 10\nif a:\n    b = 1")
    assert (tokens[2].line, tokens[2].col) == (1, 5)
    b = [t for t in tokens if t.value == 'b'][0]
    assert (b.line, b.col) == (3, 5)


def test_tokens_are_immutable():
    token = tokenize("x")[0]
    assert token == Token(T.IDENT, 'x', 1, 1)
    with pytest.raises(dataclasses.FrozenInstanceError):
        token.value = 'y'
