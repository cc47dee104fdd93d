"""
Minipy Language - Parser
Recursive descent parser with operator precedence climbing
"""

from typing import List, Optional, Union

from .ast_nodes import *
from .diagnostics import Diagnostics, ErrorCode, report
from .lexer import Token, TokenType, tokenize


class ParseError(Exception):
    def __init__(self, message: str, token: Optional[Token]):
        where = f"line {token.line}, col {token.col}" if token else "end of input"
        super().__init__(f"{message} at {where}")
        self.message = message
        self.token = token


class Parser:
    """Recursive descent parser that skips what it cannot read.

    A statement production that fails leaves the cursor where it stopped;
    the enclosing statement loop then drops the token under the cursor and
    tries again. Dropped tokens are kept in ``skipped``.
    """

    __slots__ = ('tokens', 'pos', 'length', 'diagnostics', 'skipped', 'comparison_end')

    # Binding strength of infix operators (higher = tighter binding)
    PRECEDENCE = {
        TokenType.PLUS: 1, TokenType.MINUS: 1,
        TokenType.STAR: 2, TokenType.SLASH: 2, TokenType.DOUBLE_SLASH: 2,
    }

    BINOP_MAP = {
        TokenType.PLUS: BinOp.ADD,
        TokenType.MINUS: BinOp.SUB,
        TokenType.STAR: BinOp.MUL,
        TokenType.SLASH: BinOp.DIV,
        TokenType.DOUBLE_SLASH: BinOp.FLOOR_DIV,
        TokenType.DOUBLE_STAR: BinOp.POW,
        TokenType.GT: BinOp.GT,
        TokenType.LT: BinOp.LT,
    }

    def __init__(self, tokens: List[Token], diagnostics: Optional[Diagnostics] = None):
        self.tokens = tokens
        self.pos = 0
        self.length = len(tokens)
        self.diagnostics = diagnostics
        self.skipped: List[Token] = []
        # Cursor position right after the last comparison; nothing may extend it
        self.comparison_end = -1

    def peek(self, offset: int = 0) -> Optional[Token]:
        idx = self.pos + offset
        if idx >= self.length:
            return None
        return self.tokens[idx]

    def current(self) -> Optional[Token]:
        return self.peek(0)

    def at_end(self) -> bool:
        return self.pos >= self.length

    def advance(self) -> Optional[Token]:
        token = self.current()
        self.pos += 1
        return token

    def check(self, *types: TokenType) -> bool:
        token = self.current()
        return token is not None and token.type in types

    def match(self, *types: TokenType) -> Optional[Token]:
        if self.check(*types):
            return self.advance()
        return None

    def expect(self, type: TokenType, message: str) -> Token:
        if self.check(type):
            return self.advance()
        raise ParseError(message, self.current())

    def skip_newlines(self):
        while self.match(TokenType.NEWLINE):
            pass

    def position(self, token: Optional[Token]) -> tuple[int, int]:
        if token is None:
            token = self.tokens[-1] if self.tokens else None
        return (token.line, token.col) if token else (0, 0)

    # === Resynchronization ===

    def parse_or_skip(self, statements: List[Stmt]):
        """Parse one statement into `statements`, or drop one token"""
        try:
            stmt = self.parse_stmt()
        except ParseError as e:
            line, col = self.position(e.token)
            report(self.diagnostics, ErrorCode.MALFORMED_SYNTAX, e.message, line, col)
            stmt = None
        except RecursionError:
            line, col = self.position(self.current())
            report(self.diagnostics, ErrorCode.NESTING_TOO_DEEP,
                   "Expression or block nested too deeply", line, col)
            stmt = None

        if stmt is not None:
            statements.append(stmt)
            return

        token = self.advance()
        if token is not None:
            self.skipped.append(token)
            report(self.diagnostics, ErrorCode.SKIPPED_TOKEN,
                   f"Skipped {token.type.name} {token.value!r}", token.line, token.col)

    # === Expression Parsing ===

    def comparison_closed(self) -> bool:
        return self.pos == self.comparison_end

    def parse_expr(self, min_prec: int = 1) -> Expr:
        """Precedence climbing over + - * / //"""
        left = self.parse_power()

        while not self.comparison_closed():
            token = self.current()
            prec = self.PRECEDENCE.get(token.type, -1) if token else -1
            if prec < min_prec:
                break

            op_token = self.advance()
            right = self.parse_expr(prec + 1)

            left = BinaryExpr(
                left,
                self.BINOP_MAP[op_token.type],
                right,
                line=op_token.line,
                col=op_token.col,
            )

        return left

    def parse_power(self) -> Expr:
        """A ** chain, folded right to left"""
        operands = [self.parse_unary()]
        op_tokens = []
        while not self.comparison_closed() and self.check(TokenType.DOUBLE_STAR):
            op_tokens.append(self.advance())
            operands.append(self.parse_unary())

        expr = operands.pop()
        while op_tokens:
            op_token = op_tokens.pop()
            expr = BinaryExpr(operands.pop(), BinOp.POW, expr,
                              line=op_token.line, col=op_token.col)
        return expr

    def parse_unary(self, relational: bool = True) -> Expr:
        """Unary minus, desugared to 0 - operand"""
        minus_tokens = []
        while self.check(TokenType.MINUS):
            minus_tokens.append(self.advance())

        expr = self.parse_primary(relational)
        for token in reversed(minus_tokens):
            zero = IntLiteral(0, line=token.line, col=token.col)
            expr = BinaryExpr(zero, BinOp.SUB, expr, line=token.line, col=token.col)
        return expr

    def parse_primary(self, relational: bool = True) -> Expr:
        """Parse primary expressions (literals, identifiers, parens)"""
        token = self.current()

        if self.match(TokenType.LPAREN):
            expr = self.parse_expr()
            self.expect(TokenType.RPAREN, "Expected ')' after expression")
        elif self.match(TokenType.INT):
            expr = IntLiteral(token.value, line=token.line, col=token.col)
        elif self.match(TokenType.FLOAT):
            expr = FloatLiteral(token.value, line=token.line, col=token.col)
        elif self.match(TokenType.STRING):
            expr = StringLiteral(token.value, line=token.line, col=token.col)
        elif self.match(TokenType.IDENT):
            expr = Identifier(token.value, line=token.line, col=token.col)
        elif token is None:
            raise ParseError("Expected expression", None)
        else:
            raise ParseError(f"Unexpected token: {token.type.name}", token)

        if relational:
            return self.parse_comparison(expr)
        return expr

    def parse_comparison(self, left: Expr) -> Expr:
        """A single, non-chainable > or < right after a primary"""
        op_token = self.match(TokenType.GT, TokenType.LT)
        if op_token is None:
            return left

        right = self.parse_unary(relational=False)
        self.comparison_end = self.pos
        return BinaryExpr(
            left,
            self.BINOP_MAP[op_token.type],
            right,
            line=op_token.line,
            col=op_token.col,
        )

    # === Statement Parsing ===

    def parse_stmt(self) -> Optional[Stmt]:
        """Parse a single statement; None if no statement starts here"""
        if self.check(TokenType.IDENT):
            return self.parse_assignment()

        if self.check(TokenType.DEF):
            return self.parse_fn_decl()

        if self.check(TokenType.IF):
            return self.parse_if_stmt()

        if self.check(TokenType.PRINT):
            return self.parse_print_stmt()

        if self.check(TokenType.RETURN):
            return self.parse_return_stmt()

        if self.check(TokenType.FOR):
            return self.parse_for_stmt()

        if self.check(TokenType.WHILE):
            return self.parse_while_stmt()

        return None

    def parse_assignment(self) -> Assignment:
        """Parse assignment: x = 10"""
        name_token = self.advance()
        self.expect(TokenType.ASSIGN, "Expected '=' after variable name")
        value = self.parse_expr()
        self.match(TokenType.NEWLINE)
        return Assignment(name_token.value, value, line=name_token.line, col=name_token.col)

    def parse_fn_decl(self) -> FnDecl:
        """Parse function definition; stray tokens among the parameters are ignored"""
        token = self.advance()
        name_token = self.expect(TokenType.IDENT, "Expected function name")
        self.expect(TokenType.LPAREN, "Expected '(' after function name")

        params = []
        while not self.at_end():
            param = self.advance()
            if param.type == TokenType.IDENT:
                params.append(param.value)
            elif param.type == TokenType.RPAREN:
                break

        self.expect(TokenType.COLON, "Expected ':' after parameters")
        body = self.parse_block()
        return FnDecl(name_token.value, params, body, line=token.line, col=token.col)

    def parse_if_stmt(self) -> IfStmt:
        token = self.advance()
        condition = self.parse_expr()
        self.expect(TokenType.COLON, "Expected ':' after condition")
        body = self.parse_block()
        return IfStmt(condition, body, line=token.line, col=token.col)

    def parse_print_stmt(self) -> PrintStmt:
        """Parse print(a, b, ...) or print a"""
        token = self.advance()

        if self.match(TokenType.LPAREN):
            args = [self.parse_expr()]
            while self.match(TokenType.COMMA):
                args.append(self.parse_expr())
            self.expect(TokenType.RPAREN, "Expected ')' after arguments")
        else:
            args = [self.parse_expr()]

        self.match(TokenType.NEWLINE)
        return PrintStmt(args, line=token.line, col=token.col)

    def parse_return_stmt(self) -> ReturnStmt:
        token = self.advance()
        value = self.parse_expr()
        self.match(TokenType.NEWLINE)
        return ReturnStmt(value, line=token.line, col=token.col)

    def parse_for_stmt(self) -> ForStmt:
        """Parse for i in range(start, end):"""
        token = self.advance()
        var_token = self.expect(TokenType.IDENT, "Expected loop variable")
        self.expect(TokenType.IN, "Expected 'in' after loop variable")
        self.expect(TokenType.RANGE, "Expected 'range' after 'in'")
        self.expect(TokenType.LPAREN, "Expected '(' after 'range'")
        start = self.parse_expr()
        self.expect(TokenType.COMMA, "Expected ',' between range bounds")
        end = self.parse_expr()
        self.expect(TokenType.RPAREN, "Expected ')' after range bounds")
        self.expect(TokenType.COLON, "Expected ':' after range")
        body = self.parse_block()
        return ForStmt(var_token.value, start, end, body, line=token.line, col=token.col)

    def parse_while_stmt(self) -> WhileStmt:
        token = self.advance()
        condition = self.parse_expr()
        self.expect(TokenType.COLON, "Expected ':' after condition")
        body = self.parse_block()
        return WhileStmt(condition, body, line=token.line, col=token.col)

    def parse_block(self) -> List[Stmt]:
        """Parse an INDENT ... DEDENT block; no INDENT means an empty body"""
        statements = []
        self.skip_newlines()
        if not self.match(TokenType.INDENT):
            return statements

        while not self.at_end():
            if self.match(TokenType.DEDENT):
                break
            if self.match(TokenType.NEWLINE):
                continue
            self.parse_or_skip(statements)

        return statements

    def parse_program(self) -> List[Stmt]:
        """Parse entire token list"""
        statements = []

        while not self.at_end():
            if self.match(TokenType.NEWLINE):
                continue
            self.parse_or_skip(statements)

        return statements


def parse(source: Union[str, List[Token]], diagnostics: Optional[Diagnostics] = None) -> List[Stmt]:
    """Convenience function to parse source code or an already tokenized list"""
    tokens = tokenize(source, diagnostics) if isinstance(source, str) else source
    return Parser(tokens, diagnostics).parse_program()
