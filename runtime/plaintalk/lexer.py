"""
PlainTalk Tokenizer

Turns source text into a flat list of tokens. Blocks are delimited by
indentation, so the tokenizer synthesizes INDENT/DEDENT tokens from changes
in leading whitespace after each newline.

Indentation rules:
- The stack starts with a single zero-width frame
- Deeper line: push the width, emit one INDENT
- Shallower line: pop (emitting DEDENT) while the top is wider than the line
- Blank and comment-only lines never touch the stack
- A dedent that lands between two frames is accepted as-is

Example:
    >>> [t.type for t in tokenize('say 1')]
    ['SAY', 'NUMBER', 'EOF']
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List

from .errors import LexError
from .values import normalize_number

logger = logging.getLogger("plaintalk.lexer")


# ============================================================================
# Token Types
# ============================================================================

@dataclass(frozen=True)
class Token:
    """Token from PlainTalk source"""
    type: str
    value: Any
    line: int
    column: int


class TokenType:
    """Token type constants"""
    # Literals
    IDENTIFIER = "IDENTIFIER"
    NUMBER = "NUMBER"
    STRING = "STRING"
    TRUE = "TRUE"
    FALSE = "FALSE"

    # Statement keywords
    WHEN = "WHEN"
    PROGRAM = "PROGRAM"
    STARTS = "STARTS"
    START = "START"
    TO = "TO"
    VAR = "VAR"
    REMEMBER = "REMEMBER"
    SET = "SET"
    AS = "AS"
    GLOBAL = "GLOBAL"
    IF = "IF"
    ELSE = "ELSE"
    WHILE = "WHILE"
    REPEAT = "REPEAT"
    FOR = "FOR"
    EVERY = "EVERY"
    IN = "IN"
    SAY = "SAY"
    DISPLAY = "DISPLAY"
    GIVE = "GIVE"
    BACK = "BACK"
    ASK = "ASK"
    STORE = "STORE"
    RESULT = "RESULT"
    INCREASE = "INCREASE"
    DECREASE = "DECREASE"
    ADD = "ADD"
    SUBTRACT = "SUBTRACT"
    MULTIPLY = "MULTIPLY"
    DIVIDE = "DIVIDE"
    DELETE = "DELETE"
    TERMINATE = "TERMINATE"
    BY = "BY"
    FROM = "FROM"
    USING = "USING"
    WITH = "WITH"

    # Expression keywords
    AND = "AND"
    OR = "OR"
    NOT = "NOT"
    IS = "IS"
    EQUAL = "EQUAL"
    GREATER = "GREATER"
    LESS = "LESS"
    THAN = "THAN"
    MORE = "MORE"
    AT = "AT"
    LEAST = "LEAST"
    MOST = "MOST"
    FOLLOWED = "FOLLOWED"
    DIVIDED = "DIVIDED"
    THE = "THE"
    OF = "OF"
    LIST = "LIST"
    LENGTH = "LENGTH"

    # Operators
    PLUS = "PLUS"
    MINUS = "MINUS"
    STAR = "STAR"
    SLASH = "SLASH"
    EQUAL_EQUAL = "EQUAL_EQUAL"
    NOT_EQUAL = "NOT_EQUAL"
    GREATER_OP = "GREATER_OP"
    GREATER_EQUAL = "GREATER_EQUAL"
    LESS_OP = "LESS_OP"
    LESS_EQUAL = "LESS_EQUAL"

    # Delimiters
    COLON = "COLON"
    COMMA = "COMMA"
    DOT = "DOT"
    LPAREN = "LPAREN"
    RPAREN = "RPAREN"
    LBRACKET = "LBRACKET"
    RBRACKET = "RBRACKET"
    LBRACE = "LBRACE"
    RBRACE = "RBRACE"

    # Structure
    NEWLINE = "NEWLINE"
    INDENT = "INDENT"
    DEDENT = "DEDENT"
    EOF = "EOF"


KEYWORDS: Dict[str, str] = {
    'when': TokenType.WHEN,
    'program': TokenType.PROGRAM,
    'starts': TokenType.STARTS,
    'start': TokenType.START,
    'to': TokenType.TO,
    'var': TokenType.VAR,
    'remember': TokenType.REMEMBER,
    'set': TokenType.SET,
    'as': TokenType.AS,
    'global': TokenType.GLOBAL,
    'if': TokenType.IF,
    'else': TokenType.ELSE,
    'while': TokenType.WHILE,
    'repeat': TokenType.REPEAT,
    'for': TokenType.FOR,
    'every': TokenType.EVERY,
    'in': TokenType.IN,
    'say': TokenType.SAY,
    'display': TokenType.DISPLAY,
    'give': TokenType.GIVE,
    'back': TokenType.BACK,
    'ask': TokenType.ASK,
    'store': TokenType.STORE,
    'result': TokenType.RESULT,
    'increase': TokenType.INCREASE,
    'decrease': TokenType.DECREASE,
    'add': TokenType.ADD,
    'subtract': TokenType.SUBTRACT,
    'multiply': TokenType.MULTIPLY,
    'divide': TokenType.DIVIDE,
    'delete': TokenType.DELETE,
    'terminate': TokenType.TERMINATE,
    'by': TokenType.BY,
    'from': TokenType.FROM,
    'using': TokenType.USING,
    'with': TokenType.WITH,
    'and': TokenType.AND,
    'or': TokenType.OR,
    'not': TokenType.NOT,
    'is': TokenType.IS,
    'equal': TokenType.EQUAL,
    'greater': TokenType.GREATER,
    'less': TokenType.LESS,
    'than': TokenType.THAN,
    'more': TokenType.MORE,
    'at': TokenType.AT,
    'least': TokenType.LEAST,
    'most': TokenType.MOST,
    'followed': TokenType.FOLLOWED,
    'divided': TokenType.DIVIDED,
    'the': TokenType.THE,
    'of': TokenType.OF,
    'list': TokenType.LIST,
    'length': TokenType.LENGTH,
    'true': TokenType.TRUE,
    'false': TokenType.FALSE,
}

SINGLE_CHAR_TOKENS: Dict[str, str] = {
    '+': TokenType.PLUS,
    '-': TokenType.MINUS,
    '*': TokenType.STAR,
    '/': TokenType.SLASH,
    ':': TokenType.COLON,
    ',': TokenType.COMMA,
    '.': TokenType.DOT,
    '(': TokenType.LPAREN,
    ')': TokenType.RPAREN,
    '[': TokenType.LBRACKET,
    ']': TokenType.RBRACKET,
    '{': TokenType.LBRACE,
    '}': TokenType.RBRACE,
}

# Longer integer literals are read as floats
MAX_INT_DIGITS = 16

ESCAPES: Dict[str, str] = {
    'n': '\n',
    't': '\t',
    'r': '\r',
    '\\': '\\',
    '"': '"',
    "'": "'",
}


def _is_digit(ch: str) -> bool:
    """ASCII 0-9 only; '' past the end of input is not a digit"""
    return '0' <= ch <= '9'


# ============================================================================
# Tokenizer
# ============================================================================

class PlainTalkTokenizer:
    """Tokenize PlainTalk source code"""

    def __init__(self, source: str):
        self.source = source.replace('\r\n', '\n')
        self.pos = 0
        self.line = 1
        self.column = 1
        self.indent_stack: List[int] = [0]
        self.tokens: List[Token] = []

    def tokenize(self) -> List[Token]:
        """Tokenize entire source"""
        while self.pos < len(self.source):
            self._skip_whitespace_and_comments()
            if self.pos >= len(self.source):
                break

            ch = self.source[self.pos]

            if ch == '\n':
                self._add_token(TokenType.NEWLINE, '\n', self.line, self.column)
                self._advance()
                self._handle_indentation()
            elif _is_digit(ch):
                self._read_number()
            elif ch in '"\'':
                self._read_string(ch)
            elif ch.isalpha() or ch == '_':
                self._read_identifier()
            elif ch in '<>=!':
                self._read_comparison()
            elif ch in SINGLE_CHAR_TOKENS:
                self._add_token(SINGLE_CHAR_TOKENS[ch], ch, self.line, self.column)
                self._advance()
            else:
                raise LexError(f"Unexpected character '{ch}'", self.line, self.column)

        # Close every block still open at end of input
        while len(self.indent_stack) > 1:
            self.indent_stack.pop()
            self._add_token(TokenType.DEDENT, '', self.line, self.column)

        self._add_token(TokenType.EOF, '', self.line, self.column)
        logger.debug("Tokenized %d characters into %d tokens", len(self.source), len(self.tokens))
        return self.tokens

    def _handle_indentation(self):
        """Compare the new line's leading whitespace against the indent stack"""
        width = 0
        while self._peek() in (' ', '\t'):
            width += 1
            self._advance()

        if self._at_line_end():
            return

        top = self.indent_stack[-1]
        if width > top:
            self.indent_stack.append(width)
            self._add_token(TokenType.INDENT, '', self.line, self.column)
        elif width < top:
            while len(self.indent_stack) > 1 and self.indent_stack[-1] > width:
                self.indent_stack.pop()
                self._add_token(TokenType.DEDENT, '', self.line, self.column)

    def _at_line_end(self) -> bool:
        """True when the rest of the line holds no tokens"""
        ch = self._peek()
        if ch in ('', '\n', '\r', '#'):
            return True
        return ch == '/' and self._peek(1) == '/'

    def _skip_whitespace_and_comments(self):
        """Skip whitespace and comments"""
        while self.pos < len(self.source):
            ch = self.source[self.pos]
            if ch in ' \t\r':
                self._advance()
            elif ch == '#' or (ch == '/' and self._peek(1) == '/'):
                # Skip comment until end of line
                while self.pos < len(self.source) and self.source[self.pos] != '\n':
                    self._advance()
            else:
                break

    def _read_number(self):
        """Read numeric literal"""
        line, column = self.line, self.column
        start = self.pos

        while _is_digit(self._peek()):
            self._advance()

        has_dot = self._peek() == '.' and _is_digit(self._peek(1))
        if has_dot:
            self._advance()
            while _is_digit(self._peek()):
                self._advance()

        text = self.source[start:self.pos]
        if has_dot or len(text) > MAX_INT_DIGITS:
            value = float(text)
        else:
            value = normalize_number(int(text))
        self._add_token(TokenType.NUMBER, value, line, column)

    def _read_string(self, quote: str):
        """Read string literal"""
        line, column = self.line, self.column
        self._advance()  # Skip opening quote
        chars = []

        while self.pos < len(self.source) and self.source[self.pos] != quote:
            ch = self._advance()
            if ch == '\\' and self.pos < len(self.source):
                escaped = self._advance()
                chars.append(ESCAPES.get(escaped, '\\' + escaped))
            else:
                chars.append(ch)

        if self.pos >= len(self.source):
            raise LexError("Unterminated string", line, column)

        self._advance()  # Skip closing quote
        self._add_token(TokenType.STRING, ''.join(chars), line, column)

    def _read_identifier(self):
        """Read identifier or keyword"""
        line, column = self.line, self.column
        start = self.pos

        while self._peek().isalnum() or self._peek() == '_':
            self._advance()

        text = self.source[start:self.pos]
        token_type = KEYWORDS.get(text, TokenType.IDENTIFIER)

        if token_type == TokenType.TRUE:
            self._add_token(token_type, True, line, column)
        elif token_type == TokenType.FALSE:
            self._add_token(token_type, False, line, column)
        else:
            self._add_token(token_type, text, line, column)

    def _read_comparison(self):
        """Read a symbolic comparison operator"""
        line, column = self.line, self.column
        ch = self._advance()
        has_equal = self._peek() == '='
        if has_equal:
            self._advance()

        if ch == '=' and has_equal:
            self._add_token(TokenType.EQUAL_EQUAL, '==', line, column)
        elif ch == '!' and has_equal:
            self._add_token(TokenType.NOT_EQUAL, '!=', line, column)
        elif ch == '>':
            self._add_token(TokenType.GREATER_EQUAL if has_equal else TokenType.GREATER_OP,
                            '>=' if has_equal else '>', line, column)
        elif ch == '<':
            self._add_token(TokenType.LESS_EQUAL if has_equal else TokenType.LESS_OP,
                            '<=' if has_equal else '<', line, column)
        else:
            raise LexError(f"Unexpected character '{ch}'", line, column)

    def _peek(self, offset: int = 0) -> str:
        """Character at pos + offset, or '' past the end"""
        index = self.pos + offset
        if index >= len(self.source):
            return ''
        return self.source[index]

    def _advance(self) -> str:
        """Consume one character, tracking line and column"""
        ch = self.source[self.pos]
        self.pos += 1
        if ch == '\n':
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        return ch

    def _add_token(self, type: str, value: Any, line: int, column: int):
        """Add token to list"""
        self.tokens.append(Token(type=type, value=value, line=line, column=column))


def tokenize(source: str) -> List[Token]:
    """Tokenize PlainTalk source text"""
    return PlainTalkTokenizer(source).tokenize()


__all__ = [
    'Token',
    'TokenType',
    'KEYWORDS',
    'PlainTalkTokenizer',
    'tokenize',
]
