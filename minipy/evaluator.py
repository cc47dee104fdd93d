"""
Minipy Language - Evaluator
Tree-walking interpreter over a single flat environment
"""

import math
from decimal import Decimal
from typing import Dict, List, Optional, TextIO, Union

from .ast_nodes import *
from .diagnostics import Diagnostics, ErrorCode, report

Value = Union[float, str]
Environment = Dict[str, Value]

# Range of a 64-bit signed integer; loop bounds saturate to it
INT64_MAX = 2 ** 63 - 1
INT64_MIN = -2 ** 63


def is_number(value: Optional[Value]) -> bool:
    return isinstance(value, float)


def is_truthy(value: Optional[Value]) -> bool:
    """Nonzero numbers are true; strings and missing values are false"""
    return is_number(value) and value != 0.0


def format_number(value: float) -> str:
    """Shortest round-trip decimal text, never in exponent notation"""
    if math.isnan(value):
        return 'NaN'
    if math.isinf(value):
        return 'inf' if value > 0 else '-inf'
    text = repr(value)
    if 'e' in text:
        return format(Decimal(text), 'f')
    if text.endswith('.0'):
        return text[:-2]
    return text


def format_value(value: Value) -> str:
    if is_number(value):
        return format_number(value)
    return value


def divide(left: float, right: float) -> float:
    """IEEE-754 division: x/0 is +-inf, 0/0 is nan"""
    if right == 0.0:
        if left == 0.0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
    return left / right


def floor_divide(left: float, right: float) -> float:
    quotient = divide(left, right)
    if math.isinf(quotient) or math.isnan(quotient):
        return quotient
    return float(math.floor(quotient))


def is_odd_integer(value: float) -> bool:
    return value.is_integer() and value % 2 == 1


def power(left: float, right: float) -> float:
    """Real-valued exponentiation; nan outside the real domain"""
    try:
        return math.pow(left, right)
    except OverflowError:
        negative = left < 0 and is_odd_integer(right)
        return -math.inf if negative else math.inf
    except ValueError:
        if left == 0.0 and right < 0:
            # 0 ** negative is a pole, not a domain error
            negative = is_odd_integer(right) and math.copysign(1.0, left) < 0
            return -math.inf if negative else math.inf
        return math.nan


def truncate(value: float) -> int:
    """Truncate toward zero, saturating at the 64-bit integer range"""
    if math.isnan(value):
        return 0
    if value >= INT64_MAX:
        return INT64_MAX
    if value <= INT64_MIN:
        return INT64_MIN
    return int(value)


ARITHMETIC = {
    BinOp.ADD: lambda a, b: a + b,
    BinOp.SUB: lambda a, b: a - b,
    BinOp.MUL: lambda a, b: a * b,
    BinOp.DIV: divide,
    BinOp.FLOOR_DIV: floor_divide,
    BinOp.POW: power,
    BinOp.GT: lambda a, b: 1.0 if a > b else 0.0,
    BinOp.LT: lambda a, b: 1.0 if a < b else 0.0,
}


class Evaluator:
    """Executes statements in source order; print is the only side effect"""

    __slots__ = ('environment', 'output', 'diagnostics')

    def __init__(self, environment: Environment, output: TextIO,
                 diagnostics: Optional[Diagnostics] = None):
        self.environment = environment
        self.output = output
        self.diagnostics = diagnostics

    def error(self, code: ErrorCode, message: str, node: Node):
        report(self.diagnostics, code, message, node.line, node.col)

    def run(self, statements: List[Stmt]):
        for stmt in statements:
            try:
                self.exec_stmt(stmt)
            except RecursionError:
                self.error(ErrorCode.NESTING_TOO_DEEP, "Statements nested too deeply", stmt)

    # === Statements ===

    def exec_stmt(self, stmt: Stmt) -> Optional[Value]:
        """Execute one statement; assignments yield the bound value"""
        if isinstance(stmt, Assignment):
            value = self.eval_expr(stmt.value)
            if value is not None:
                self.environment[stmt.name] = value
            return value

        if isinstance(stmt, PrintStmt):
            self.exec_print(stmt)
        elif isinstance(stmt, ForStmt):
            self.exec_for(stmt)
        elif isinstance(stmt, WhileStmt):
            self.exec_while(stmt)
        elif isinstance(stmt, IfStmt):
            condition = self.eval_expr(stmt.condition)
            self.check_number(condition, stmt.condition, "if condition")
            if is_truthy(condition):
                self.run(stmt.body)
        elif isinstance(stmt, ReturnStmt):
            # Nothing to return from
            self.eval_expr(stmt.value)
        elif isinstance(stmt, FnDecl):
            pass
        else:
            raise TypeError(f"Not a statement: {stmt!r}")
        return None

    def exec_print(self, stmt: PrintStmt):
        parts = []
        for arg in stmt.args:
            value = self.eval_expr(arg)
            if value is not None:
                parts.append(format_value(value))
        self.output.write(' '.join(parts) + '\n')

    def exec_for(self, stmt: ForStmt):
        start = self.eval_expr(stmt.start)
        end = self.eval_expr(stmt.end)
        bounds_ok = self.check_number(start, stmt.start, "range start")
        bounds_ok = self.check_number(end, stmt.end, "range end") and bounds_ok
        if not bounds_ok:
            return

        env = self.environment
        for i in range(truncate(start), truncate(end)):
            env[stmt.var_name] = float(i)
            self.run(stmt.body)

    def exec_while(self, stmt: WhileStmt):
        while True:
            condition = self.eval_expr(stmt.condition)
            self.check_number(condition, stmt.condition, "while condition")
            if not is_number(condition) or condition <= 0.0:
                break
            self.run(stmt.body)

    def check_number(self, value: Optional[Value], node: Expr, what: str) -> bool:
        """True for a number; a string is reported, a missing value already was"""
        if is_number(value):
            return True
        if value is not None:
            self.error(ErrorCode.TYPE_MISMATCH, f"{what} must be a number, got string", node)
        return False

    # === Expressions ===

    def eval_expr(self, expr: Expr) -> Optional[Value]:
        """Evaluate an expression; None means it produced no value

        Operator trees are walked with an explicit stack, operands left to
        right, so long chains like ``1 + 1 + ... + 1`` need no recursion.
        """
        if not isinstance(expr, BinaryExpr):
            return self.eval_leaf(expr)

        values: List[Optional[Value]] = []
        stack = [(expr, False)]
        while stack:
            node, operands_ready = stack.pop()
            if operands_ready:
                right = values.pop()
                left = values.pop()
                values.append(self.apply_binary(node, left, right))
            elif isinstance(node, BinaryExpr):
                stack.append((node, True))
                stack.append((node.right, False))
                stack.append((node.left, False))
            else:
                values.append(self.eval_leaf(node))
        return values.pop()

    def eval_leaf(self, expr: Expr) -> Optional[Value]:
        if isinstance(expr, IntLiteral):
            try:
                return float(expr.value)
            except OverflowError:
                return math.inf

        if isinstance(expr, FloatLiteral):
            return float(expr.value)

        if isinstance(expr, StringLiteral):
            return expr.value

        if isinstance(expr, Identifier):
            value = self.environment.get(expr.name)
            if value is None:
                self.error(ErrorCode.NAME_NOT_FOUND, f"Undefined variable: {expr.name}", expr)
            elif isinstance(value, int):
                # Caller-seeded environments may hold ints
                value = float(value)
            return value

        raise TypeError(f"Not an expression: {expr!r}")

    def apply_binary(self, expr: BinaryExpr, left: Optional[Value],
                     right: Optional[Value]) -> Optional[float]:
        if isinstance(left, str) or isinstance(right, str):
            self.error(ErrorCode.TYPE_MISMATCH,
                       f"Operator {expr.op.value} needs numbers, got string", expr)
            return None
        if left is None or right is None:
            return None

        return ARITHMETIC[expr.op](left, right)


def evaluate(statements: List[Stmt], environment: Environment, output: TextIO,
             diagnostics: Optional[Diagnostics] = None):
    """Execute statements against `environment`, printing to `output`"""
    Evaluator(environment, output, diagnostics).run(statements)
