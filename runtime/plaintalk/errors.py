"""
PlainTalk Errors

Every fault the engine can raise derives from PlainTalkError. Faults carry an
error code, a human-readable message and, where known, the source position
they originated from.

Fault classes:
- LexError: illegal character, unterminated string
- ParseError: unexpected token, missing keyword or punctuation
- PlainTalkRuntimeError: undefined names, bad arity, division by zero, ...
"""

from typing import Optional


# ============================================================================
# Error Codes
# ============================================================================

E_LEX_ERROR = "E_LEX_ERROR"
E_PARSE_ERROR = "E_PARSE_ERROR"
E_RUNTIME_ERROR = "E_RUNTIME_ERROR"
E_NAME_ERROR = "E_NAME_ERROR"
E_TYPE_ERROR = "E_TYPE_ERROR"
E_ZERO_DIVISION = "E_ZERO_DIVISION"
E_ARGUMENT_ERROR = "E_ARGUMENT_ERROR"


# ============================================================================
# Exceptions
# ============================================================================

class PlainTalkError(Exception):
    """Base exception for PlainTalk faults"""
    def __init__(self, code: str, message: str, line: Optional[int] = None, column: Optional[int] = None):
        self.code = code
        self.message = message
        self.line = line
        self.column = column
        super().__init__(f"[{code}] {message}")

    def describe(self) -> str:
        """Message with its source position, as shown to the user"""
        if self.line is None:
            return self.message
        if self.column is None:
            return f"{self.message} at line {self.line}"
        return f"{self.message} at line {self.line}, column {self.column}"


class LexError(PlainTalkError):
    """Malformed source text"""
    def __init__(self, message: str, line: int, column: int):
        super().__init__(E_LEX_ERROR, message, line, column)


class ParseError(PlainTalkError):
    """Token stream that does not form a program"""
    def __init__(self, message: str, line: int, column: int):
        super().__init__(E_PARSE_ERROR, message, line, column)


class PlainTalkRuntimeError(PlainTalkError):
    """Fault raised while interpreting a program"""
    def __init__(self, message: str, line: int, code: str = E_RUNTIME_ERROR):
        super().__init__(code, message, line)


__all__ = [
    'E_LEX_ERROR',
    'E_PARSE_ERROR',
    'E_RUNTIME_ERROR',
    'E_NAME_ERROR',
    'E_TYPE_ERROR',
    'E_ZERO_DIVISION',
    'E_ARGUMENT_ERROR',
    'PlainTalkError',
    'LexError',
    'ParseError',
    'PlainTalkRuntimeError',
]
