"""
Minipy Language Package
"""

import sys
from typing import Optional, TextIO

from .diagnostics import Diagnostic, Diagnostics, ErrorCode
from .lexer import tokenize, Lexer, Token, TokenType
from .parser import parse, Parser, ParseError
from .evaluator import evaluate, Evaluator, Environment, Value

__version__ = "0.1.0"
__all__ = [
    "tokenize", "Lexer", "Token", "TokenType",
    "parse", "Parser", "ParseError",
    "evaluate", "Evaluator", "Environment", "Value",
    "Diagnostic", "Diagnostics", "ErrorCode",
    "execute",
]


def execute(source: str, output: Optional[TextIO] = None,
            environment: Optional[Environment] = None,
            diagnostics: Optional[Diagnostics] = None) -> Environment:
    """Tokenize, parse and evaluate source; returns the environment"""
    if environment is None:
        environment = {}
    statements = parse(tokenize(source, diagnostics), diagnostics)
    evaluate(statements, environment, sys.stdout if output is None else output, diagnostics)
    return environment
