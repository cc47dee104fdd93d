"""
Minipy Language - Lexer/Tokenizer
Line-oriented tokenization with synthesized indentation tokens
"""

from enum import IntEnum, auto
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .diagnostics import Diagnostics, ErrorCode, report

# Columns a leading tab advances to (next multiple)
TAB_WIDTH = 8

DIGITS = '0123456789'
NUMBER_CHARS = DIGITS + '.'


class TokenType(IntEnum):
    # Literals
    INT = auto()
    FLOAT = auto()
    STRING = auto()

    # Identifiers & Keywords
    IDENT = auto()
    PRINT = auto()
    DEF = auto()
    IF = auto()
    ELSE = auto()
    RETURN = auto()
    FOR = auto()
    WHILE = auto()
    IN = auto()
    RANGE = auto()

    # Operators
    PLUS = auto()
    MINUS = auto()
    STAR = auto()
    DOUBLE_STAR = auto()
    SLASH = auto()
    DOUBLE_SLASH = auto()
    GT = auto()
    LT = auto()
    ASSIGN = auto()

    # Delimiters
    COMMA = auto()
    LPAREN = auto()
    RPAREN = auto()
    COLON = auto()

    # Block structure
    INDENT = auto()
    DEDENT = auto()
    NEWLINE = auto()

    # Special
    UNKNOWN = auto()


KEYWORDS = {
    'print': TokenType.PRINT,
    'def': TokenType.DEF,
    'if': TokenType.IF,
    'else': TokenType.ELSE,
    'return': TokenType.RETURN,
    'for': TokenType.FOR,
    'while': TokenType.WHILE,
    'in': TokenType.IN,
    'range': TokenType.RANGE,
}

TWO_CHAR_OPS = {
    '**': TokenType.DOUBLE_STAR,
    '//': TokenType.DOUBLE_SLASH,
}

SINGLE_CHAR_OPS = {
    '+': TokenType.PLUS,
    '-': TokenType.MINUS,
    '*': TokenType.STAR,
    '/': TokenType.SLASH,
    '>': TokenType.GT,
    '<': TokenType.LT,
    '=': TokenType.ASSIGN,
    ',': TokenType.COMMA,
    '(': TokenType.LPAREN,
    ')': TokenType.RPAREN,
    ':': TokenType.COLON,
}


@dataclass(frozen=True, slots=True)
class Token:
    type: TokenType
    value: str | int | float
    line: int
    col: int

    def __repr__(self):
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.col})"


def measure_indent(line: str) -> Tuple[int, int]:
    """Return (indentation width, index of the first non-blank character)"""
    width = 0
    index = 0
    for ch in line:
        if ch == ' ':
            width += 1
        elif ch == '\t':
            width += TAB_WIDTH - width % TAB_WIDTH
        else:
            break
        index += 1
    return width, index


class Lexer:
    """Whole-input lexer, processed one line at a time"""

    __slots__ = ('source', 'diagnostics', 'tokens', 'indent_stack',
                 'text', 'pos', 'line', 'length')

    def __init__(self, source: str, diagnostics: Optional[Diagnostics] = None):
        self.source = source
        self.diagnostics = diagnostics
        self.tokens: List[Token] = []
        self.indent_stack = [0]
        self.text = ''
        self.pos = 0
        self.line = 0
        self.length = 0

    def peek(self, offset: int = 0) -> str:
        """Look ahead on the current line without consuming"""
        idx = self.pos + offset
        return self.text[idx] if idx < self.length else '\0'

    def advance(self) -> str:
        ch = self.peek()
        self.pos += 1
        return ch

    def make_token(self, type: TokenType, value, line: int, col: int) -> Token:
        token = Token(type, value, line, col)
        self.tokens.append(token)
        return token

    def error(self, code: ErrorCode, message: str, col: int):
        report(self.diagnostics, code, message, self.line, col)

    def handle_indent(self, width: int, line: int):
        """Emit INDENT/DEDENT tokens for a line starting at `width` columns"""
        stack = self.indent_stack
        if width > stack[-1]:
            stack.append(width)
            self.make_token(TokenType.INDENT, '', line, width + 1)
            return

        while width < stack[-1]:
            stack.pop()
            self.make_token(TokenType.DEDENT, '', line, width + 1)

        if width > stack[-1]:
            # Dedent landed between two open levels: open a fresh one
            self.error(ErrorCode.INCONSISTENT_DEDENT,
                       f"Indentation of {width} matches no enclosing block", width + 1)
            stack.append(width)
            self.make_token(TokenType.INDENT, '', line, width + 1)

    def read_number(self):
        """Parse integer or float literal"""
        col = self.pos + 1
        start = self.pos
        while self.peek() in NUMBER_CHARS:
            self.advance()

        text = self.text[start:self.pos]
        if '.' not in text:
            self.make_token(TokenType.INT, int(text), self.line, col)
            return

        try:
            value = float(text)
        except ValueError:
            self.error(ErrorCode.MALFORMED_NUMBER, f"Cannot read number {text!r}", col)
            self.make_token(TokenType.UNKNOWN, '.', self.line, col)
            return
        self.make_token(TokenType.FLOAT, value, self.line, col)

    def read_string(self):
        """Parse string literal; an unterminated one ends at the end of the line"""
        col = self.pos + 1
        quote = self.advance()
        start = self.pos
        while self.pos < self.length and self.peek() != quote:
            self.advance()

        value = self.text[start:self.pos]
        if self.pos < self.length:
            self.advance()  # Closing quote
        else:
            self.error(ErrorCode.UNTERMINATED_STRING, f"String opened with {quote} is not closed", col)
        self.make_token(TokenType.STRING, value, self.line, col)

    def read_identifier(self):
        """Parse identifier or keyword"""
        col = self.pos + 1
        start = self.pos
        while self.peek().isalnum() or self.peek() == '_':
            self.advance()

        text = self.text[start:self.pos]
        self.make_token(KEYWORDS.get(text, TokenType.IDENT), text, self.line, col)

    def scan_line(self):
        """Tokenize the rest of the current line"""
        while self.pos < self.length:
            ch = self.peek()
            col = self.pos + 1

            if ch in ' \t':
                self.advance()
                continue

            # Comment runs to the end of the line
            if ch == '#':
                break

            if ch in DIGITS:
                self.read_number()
                continue

            if ch in '"\'':
                self.read_string()
                continue

            if ch.isalpha():
                self.read_identifier()
                continue

            two_char = ch + self.peek(1)
            if two_char in TWO_CHAR_OPS:
                self.advance()
                self.advance()
                self.make_token(TWO_CHAR_OPS[two_char], two_char, self.line, col)
                continue

            self.advance()
            if ch in SINGLE_CHAR_OPS:
                self.make_token(SINGLE_CHAR_OPS[ch], ch, self.line, col)
                continue

            self.error(ErrorCode.UNKNOWN_CHARACTER, f"Unexpected character: {ch!r}", col)
            self.make_token(TokenType.UNKNOWN, ch, self.line, col)

    def tokenize(self) -> List[Token]:
        """Tokenize entire source into list"""
        last_line = 0
        for lineno, line in enumerate(self.source.split('\n'), start=1):
            last_line = lineno
            if line.endswith('\r'):
                line = line[:-1]

            width, start = measure_indent(line)
            # Blank lines produce nothing; a comment-only line still takes part
            # in indentation and ends with a NEWLINE
            if start == len(line):
                continue

            self.handle_indent(width, lineno)
            self.text = line
            self.pos = start
            self.length = len(line)
            self.line = lineno
            self.scan_line()
            self.make_token(TokenType.NEWLINE, '', lineno, self.length + 1)

        # Close blocks still open at end of input
        while len(self.indent_stack) > 1:
            self.indent_stack.pop()
            self.make_token(TokenType.DEDENT, '', last_line + 1, 1)

        return self.tokens


def tokenize(source: str, diagnostics: Optional[Diagnostics] = None) -> List[Token]:
    """Convenience function to tokenize source code"""
    return Lexer(source, diagnostics).tokenize()
