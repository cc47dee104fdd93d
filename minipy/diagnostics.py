"""
Minipy Language - Diagnostics
Structured, discardable reports of malformed input
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional


class ErrorCode(Enum):
    # Lexer
    UNKNOWN_CHARACTER = 'Unknown character'
    MALFORMED_NUMBER = 'Malformed number'
    UNTERMINATED_STRING = 'Unterminated string'
    INCONSISTENT_DEDENT = 'Inconsistent dedent'

    # Parser
    MALFORMED_SYNTAX = 'Malformed syntax'
    SKIPPED_TOKEN = 'Skipped token'

    # Evaluator
    NAME_NOT_FOUND = 'Name not found'
    TYPE_MISMATCH = 'Type mismatch'

    # Parser or evaluator
    NESTING_TOO_DEEP = 'Nesting too deep'


@dataclass(frozen=True, slots=True)
class Diagnostic:
    code: ErrorCode
    message: str
    line: int
    col: int

    def __str__(self):
        return f"{self.line}:{self.col}: {self.code.value}: {self.message}"


class Diagnostics:
    """Ordered collector shared by the lexer, parser and evaluator"""

    __slots__ = ('items',)

    def __init__(self):
        self.items: List[Diagnostic] = []

    def report(self, code: ErrorCode, message: str, line: int, col: int) -> Diagnostic:
        diagnostic = Diagnostic(code, message, line, col)
        self.items.append(diagnostic)
        return diagnostic

    def codes(self) -> List[ErrorCode]:
        return [d.code for d in self.items]

    def of(self, code: ErrorCode) -> List[Diagnostic]:
        return [d for d in self.items if d.code is code]

    def clear(self):
        self.items.clear()

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __bool__(self) -> bool:
        return bool(self.items)


def report(diagnostics: Optional[Diagnostics], code: ErrorCode, message: str, line: int, col: int):
    """Report to a collector that may be absent"""
    if diagnostics is not None:
        diagnostics.report(code, message, line, col)
