"""
Minipy Language - AST (Abstract Syntax Tree)
Node structures with __slots__; positions are keyword-only
"""

from dataclasses import dataclass, field
from typing import List, Union
from enum import Enum


class BinOp(str, Enum):
    ADD = '+'
    SUB = '-'
    MUL = '*'
    DIV = '/'
    FLOOR_DIV = '//'
    POW = '**'
    GT = '>'
    LT = '<'


# Base AST Node
@dataclass(slots=True)
class Node:
    line: int = field(default=0, kw_only=True, compare=False)
    col: int = field(default=0, kw_only=True, compare=False)


# Expressions
@dataclass(slots=True)
class IntLiteral(Node):
    value: int


@dataclass(slots=True)
class FloatLiteral(Node):
    value: float


@dataclass(slots=True)
class StringLiteral(Node):
    value: str


@dataclass(slots=True)
class Identifier(Node):
    name: str


@dataclass(slots=True)
class BinaryExpr(Node):
    left: 'Expr'
    op: BinOp
    right: 'Expr'


# Statements
@dataclass(slots=True)
class Assignment(Node):
    name: str
    value: 'Expr'


@dataclass(slots=True)
class FnDecl(Node):
    name: str
    params: List[str]
    body: List['Stmt']


@dataclass(slots=True)
class IfStmt(Node):
    condition: 'Expr'
    body: List['Stmt']


@dataclass(slots=True)
class ForStmt(Node):
    var_name: str
    start: 'Expr'
    end: 'Expr'
    body: List['Stmt']


@dataclass(slots=True)
class WhileStmt(Node):
    condition: 'Expr'
    body: List['Stmt']


@dataclass(slots=True)
class PrintStmt(Node):
    args: List['Expr']


@dataclass(slots=True)
class ReturnStmt(Node):
    value: 'Expr'


# Type aliases
Expr = Union[
    IntLiteral, FloatLiteral, StringLiteral, Identifier, BinaryExpr
]

Stmt = Union[
    Assignment, FnDecl, IfStmt, ForStmt, WhileStmt, PrintStmt, ReturnStmt
]


def describe(node) -> tuple:
    """Header text and child nodes of one syntax tree node"""
    if isinstance(node, (IntLiteral, FloatLiteral, StringLiteral)):
        return f"{type(node).__name__} {node.value!r}", []
    if isinstance(node, Identifier):
        return f"Identifier {node.name}", []
    if isinstance(node, BinaryExpr):
        return f"BinaryExpr {node.op.value}", [node.left, node.right]
    if isinstance(node, Assignment):
        return f"Assignment {node.name}", [node.value]
    if isinstance(node, FnDecl):
        return f"FnDecl {node.name}({', '.join(node.params)})", list(node.body)
    if isinstance(node, (IfStmt, WhileStmt)):
        return type(node).__name__, [node.condition] + node.body
    if isinstance(node, ForStmt):
        return f"ForStmt {node.var_name}", [node.start, node.end] + node.body
    if isinstance(node, PrintStmt):
        return "PrintStmt", list(node.args)
    if isinstance(node, ReturnStmt):
        return "ReturnStmt", [node.value]
    raise TypeError(f"Not a syntax tree node: {node!r}")


def dump(node, indent: int = 0) -> str:
    """Render a node (or list of nodes) as an indented tree"""
    roots = node if isinstance(node, list) else [node]
    lines = []
    stack = [(root, indent) for root in reversed(roots)]
    while stack:
        current, depth = stack.pop()
        header, children = describe(current)
        lines.append('  ' * depth + header)
        stack.extend((child, depth + 1) for child in reversed(children))
    return '\n'.join(lines)
