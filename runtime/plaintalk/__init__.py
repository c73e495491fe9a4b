"""
PlainTalk - a natural-English programming language

This package provides the complete PlainTalk engine:

**Front End:**
- Tokenizer: indentation-aware token stream (INDENT/DEDENT synthesis)
- Parser: recursive descent, synonymous phrasings collapsed to one tree

**Runtime:**
- Interpreter: async tree walker with timers and input prompting
- Engine: host-facing execute / trigger_event / stop API

Version: 1.0.0
"""

import logging

__version__ = '1.0.0'

logging.getLogger("plaintalk").addHandler(logging.NullHandler())

# ============================================================================
# Front End
# ============================================================================

from .lexer import Token, TokenType, KEYWORDS, PlainTalkTokenizer, tokenize
from .nodes import (
    ASTNode, Literal, Identifier, BinaryOp, UnaryOp, Call, MemberAccess,
    ArrayLiteral, ObjectLiteral,
    EventStatement, FunctionStatement, SetStatement, AddStatement,
    RemoveStatement, DeleteStatement, CallStatement, IfStatement,
    WhileStatement, ForEachStatement, PrintStatement, ReturnStatement,
    Program, walk, to_dict,
)
from .parser import PlainTalkParser, parse

# ============================================================================
# Runtime
# ============================================================================

from .context import NO_NEWLINE, MS_PER_SECOND, TERMINATE_MESSAGE, Severity, RuntimeContext
from .interpreter import PlainTalkInterpreter, ReturnValue
from .engine import PlainTalkEngine
from .examples import EXAMPLE_SCRIPTS

# Errors
from .errors import (
    E_LEX_ERROR, E_PARSE_ERROR, E_RUNTIME_ERROR, E_NAME_ERROR,
    E_TYPE_ERROR, E_ZERO_DIVISION, E_ARGUMENT_ERROR,
    PlainTalkError, LexError, ParseError, PlainTalkRuntimeError,
)

# ============================================================================
# Exports
# ============================================================================

__all__ = [
    # Version
    '__version__',

    # Tokenizer
    'Token', 'TokenType', 'KEYWORDS', 'PlainTalkTokenizer', 'tokenize',

    # AST
    'ASTNode', 'Literal', 'Identifier', 'BinaryOp', 'UnaryOp', 'Call', 'MemberAccess',
    'ArrayLiteral', 'ObjectLiteral',
    'EventStatement', 'FunctionStatement', 'SetStatement', 'AddStatement',
    'RemoveStatement', 'DeleteStatement', 'CallStatement', 'IfStatement',
    'WhileStatement', 'ForEachStatement', 'PrintStatement', 'ReturnStatement',
    'Program', 'walk', 'to_dict',

    # Parser
    'PlainTalkParser', 'parse',

    # Runtime
    'NO_NEWLINE', 'MS_PER_SECOND', 'TERMINATE_MESSAGE', 'Severity', 'RuntimeContext',
    'PlainTalkInterpreter', 'ReturnValue',
    'PlainTalkEngine',
    'EXAMPLE_SCRIPTS',

    # Errors
    'PlainTalkError', 'LexError', 'ParseError', 'PlainTalkRuntimeError',
    'E_LEX_ERROR', 'E_PARSE_ERROR', 'E_RUNTIME_ERROR', 'E_NAME_ERROR',
    'E_TYPE_ERROR', 'E_ZERO_DIVISION', 'E_ARGUMENT_ERROR',
]
