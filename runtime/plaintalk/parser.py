"""
PlainTalk Parser

Recursive-descent parser from tokens to a Program tree. Many phrasings share
one node shape:

    remember x as 1 / var x as 1 / set x to 1       -> SetStatement
    increase x by 1 / add 1 to x                    -> AddStatement
    decrease x by 1 / subtract 1 from x             -> RemoveStatement
    multiply x by 2 / divide x by 2                 -> SetStatement(x * 2) / (x / 2)
    ask "q" and store result in x                   -> SetStatement(ask("q"))
    x is 5 or more / x is at least 5 / x >= 5       -> BinaryOp('>=')

Expression precedence, loosest first:

    or > and > is-comparisons > symbolic comparisons > + - "followed by"
       > * / "divided by" > unary > call/postfix > primary

The word "and" is a logical operator except where it separates arguments of a
natural-language call ("f using 5 and 3"), separates list elements, or starts
the "and store result in" tail of an ask statement. Argument context is
tracked with an explicit flag; the ask tail is found by two-token lookahead.
"""

import logging
from typing import List, Tuple

from .errors import ParseError
from .lexer import Token, TokenType
from .nodes import (
    ArrayLiteral, BinaryOp, Call, CallStatement, DeleteStatement, EventStatement,
    Expression, ForEachStatement, FunctionStatement, Identifier, IfStatement,
    Literal, MemberAccess, ObjectLiteral, PrintStatement, Program, RemoveStatement,
    ReturnStatement, SetStatement, Statement, UnaryOp, WhileStatement, AddStatement,
)

logger = logging.getLogger("plaintalk.parser")

# Keywords that only have meaning in a fixed position, so they may also
# be used as variable, parameter and event names
SOFT_KEYWORDS = (
    TokenType.RESULT,
    TokenType.BACK,
    TokenType.START,
    TokenType.STARTS,
    TokenType.PROGRAM,
    TokenType.LEAST,
    TokenType.MOST,
)

TIME_UNITS = {
    'second': 'seconds',
    'seconds': 'seconds',
    'ms': 'ms',
    'millisecond': 'ms',
    'milliseconds': 'ms',
}

COMPARISON_OPERATORS = (
    TokenType.GREATER_OP,
    TokenType.GREATER_EQUAL,
    TokenType.LESS_OP,
    TokenType.LESS_EQUAL,
    TokenType.EQUAL_EQUAL,
    TokenType.NOT_EQUAL,
)

STATEMENT_END = (TokenType.NEWLINE, TokenType.DEDENT, TokenType.EOF)


class PlainTalkParser:
    """Parse PlainTalk tokens into a Program"""

    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.pos = 0
        # True while parsing the arguments of "name using a and b"
        self._in_arguments = False

    def parse(self) -> Program:
        """Parse all statements"""
        statements = []
        try:
            while not self._is_at_end():
                if self._match(TokenType.NEWLINE):
                    continue
                statements.append(self._parse_statement())
        except RecursionError:
            token = self._peek()
            raise ParseError("Expression nested too deeply", token.line, token.column) from None
        logger.debug("Parsed %d top-level statements", len(statements))
        return Program(body=statements, line=1)

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def _parse_statement(self) -> Statement:
        """Dispatch on the leading token"""
        if self._match(TokenType.WHEN):
            return self._parse_event()
        if self._match(TokenType.EVERY):
            return self._parse_timer()
        if self._match(TokenType.TO):
            return self._parse_function()
        if self._match(TokenType.REMEMBER, TokenType.VAR, TokenType.SET):
            return self._parse_set()
        if self._match(TokenType.INCREASE, TokenType.DECREASE):
            return self._parse_increase()
        if self._match(TokenType.ADD):
            return self._parse_add()
        if self._match(TokenType.SUBTRACT):
            return self._parse_subtract()
        if self._match(TokenType.MULTIPLY, TokenType.DIVIDE):
            return self._parse_scale()
        if self._match(TokenType.DELETE):
            return self._parse_delete()
        if self._match(TokenType.IF):
            return self._parse_if()
        if self._match(TokenType.WHILE, TokenType.REPEAT):
            return self._parse_while()
        if self._match(TokenType.FOR):
            return self._parse_for_each()
        if self._match(TokenType.SAY, TokenType.DISPLAY):
            return self._parse_print()
        if self._match(TokenType.GIVE):
            return self._parse_return()
        if self._match(TokenType.ASK):
            return self._parse_ask()
        if self._match(TokenType.STORE):
            return self._parse_store()
        if self._match(TokenType.TERMINATE):
            return self._parse_terminate()
        return self._parse_call_statement()

    def _parse_event(self) -> EventStatement:
        """when the program starts: / when start: / when <name>:"""
        line = self._previous().line
        self._match(TokenType.THE)

        if self._match(TokenType.PROGRAM):
            self._consume(TokenType.STARTS, "Expected 'starts' after 'program'")
            event_type = 'start'
        elif self._match(TokenType.START):
            event_type = 'start'
        else:
            event_type = self._consume_name("Expected event name")

        self._consume(TokenType.COLON, "Expected ':' after event name")
        body = self._parse_block()
        return EventStatement(event_type=event_type, body=body, line=line)

    def _parse_timer(self) -> EventStatement:
        """every <number> <seconds|ms>:"""
        line = self._previous().line
        interval_token = self._consume(TokenType.NUMBER, "Expected timer interval")
        if interval_token.value <= 0:
            raise ParseError("Timer interval must be greater than zero",
                             interval_token.line, interval_token.column)

        unit_token = self._consume(TokenType.IDENTIFIER, "Expected time unit (seconds/ms)")
        unit = TIME_UNITS.get(unit_token.value)
        if unit is None:
            raise ParseError(f"Unknown time unit '{unit_token.value}'", unit_token.line, unit_token.column)

        self._consume(TokenType.COLON, "Expected ':' after timer interval")
        body = self._parse_block()
        return EventStatement(event_type='timer', body=body, interval=interval_token.value,
                              unit=unit, line=line)

    def _parse_function(self) -> FunctionStatement:
        """to <name> [using|with <param> [and <param>]*]:"""
        line = self._previous().line
        name = self._consume_name("Expected function name")

        parameters = []
        if self._match(TokenType.USING, TokenType.WITH):
            parameters.append(self._consume_name("Expected parameter name"))
            while self._match(TokenType.AND, TokenType.COMMA):
                parameters.append(self._consume_name("Expected parameter name"))

        self._consume(TokenType.COLON, "Expected ':' after function declaration")
        body = self._parse_block()
        return FunctionStatement(name=name, parameters=parameters, body=body, line=line)

    def _parse_set(self) -> SetStatement:
        """remember|var <target> as <expr> / set <target> to <expr>"""
        keyword = self._previous()
        name, is_global = self._parse_target()

        if keyword.type == TokenType.SET:
            self._consume(TokenType.TO, "Expected 'to' after variable name in set statement")
        else:
            self._consume(TokenType.AS, "Expected 'as' after variable name")

        value = self._parse_expression()
        self._end_statement()
        return SetStatement(variable=name, value=value, is_global=is_global, line=keyword.line)

    def _parse_increase(self) -> Statement:
        """increase|decrease <target> by <expr>"""
        keyword = self._previous()
        name, is_global = self._parse_target()
        self._consume(TokenType.BY, "Expected 'by' after variable name")
        amount = self._parse_expression()
        self._end_statement()

        if keyword.type == TokenType.INCREASE:
            return AddStatement(variable=name, amount=amount, is_global=is_global, line=keyword.line)
        return RemoveStatement(variable=name, amount=amount, is_global=is_global, line=keyword.line)

    def _parse_add(self) -> AddStatement:
        """add <expr> to <target>"""
        line = self._previous().line
        amount = self._parse_expression()
        self._consume(TokenType.TO, "Expected 'to' after amount in add statement")
        name, is_global = self._parse_target()
        self._end_statement()
        return AddStatement(variable=name, amount=amount, is_global=is_global, line=line)

    def _parse_subtract(self) -> RemoveStatement:
        """subtract <expr> from <target>"""
        line = self._previous().line
        amount = self._parse_expression()
        self._consume(TokenType.FROM, "Expected 'from' after amount in subtract statement")
        name, is_global = self._parse_target()
        self._end_statement()
        return RemoveStatement(variable=name, amount=amount, is_global=is_global, line=line)

    def _parse_scale(self) -> SetStatement:
        """multiply|divide <target> by <expr>, rewritten as an assignment"""
        keyword = self._previous()
        op = '*' if keyword.type == TokenType.MULTIPLY else '/'
        name, is_global = self._parse_target()
        self._consume(TokenType.BY, "Expected 'by' after variable name")
        amount = self._parse_expression()
        self._end_statement()

        current = Identifier(name=name, is_global=is_global, line=keyword.line)
        value = BinaryOp(op=op, left=current, right=amount, line=keyword.line)
        return SetStatement(variable=name, value=value, is_global=is_global, line=keyword.line)

    def _parse_delete(self) -> DeleteStatement:
        """delete <target>"""
        line = self._previous().line
        name, is_global = self._parse_target()
        self._end_statement()
        return DeleteStatement(variable=name, is_global=is_global, line=line)

    def _parse_if(self) -> IfStatement:
        """if <expr>: ... [else if <expr>: ...]* [else: ...]"""
        line = self._previous().line
        condition = self._parse_expression()
        self._consume(TokenType.COLON, "Expected ':' after if condition")
        node = IfStatement(condition=condition, then_body=self._parse_block(), line=line)

        # Each "else if" hangs off the else branch of the previous one
        tail = node
        while self._match(TokenType.ELSE):
            else_line = self._previous().line
            if self._match(TokenType.IF):
                nested_condition = self._parse_expression()
                self._consume(TokenType.COLON, "Expected ':' after else if condition")
                nested = IfStatement(condition=nested_condition, then_body=self._parse_block(),
                                     line=else_line)
                tail.else_body = [nested]
                tail = nested
            else:
                self._consume(TokenType.COLON, "Expected ':' after 'else'")
                tail.else_body = self._parse_block()
                break

        return node

    def _parse_while(self) -> WhileStatement:
        """while <expr>: / repeat [while] <expr>:"""
        keyword = self._previous()
        if keyword.type == TokenType.REPEAT:
            self._match(TokenType.WHILE)

        condition = self._parse_expression()
        self._consume(TokenType.COLON, "Expected ':' after while condition")
        return WhileStatement(condition=condition, body=self._parse_block(), line=keyword.line)

    def _parse_for_each(self) -> ForEachStatement:
        """for [every] <id> in [the list of] <expr>:"""
        line = self._previous().line
        self._match(TokenType.EVERY)
        variable = self._consume_name("Expected loop variable")
        self._consume(TokenType.IN, "Expected 'in' after loop variable")

        self._match(TokenType.THE)
        if self._check(TokenType.LIST) and self._check_next(TokenType.OF):
            self._advance()
            self._advance()

        iterable = self._parse_expression()
        self._consume(TokenType.COLON, "Expected ':' after for loop")
        return ForEachStatement(variable=variable, iterable=iterable, body=self._parse_block(), line=line)

    def _parse_print(self) -> PrintStatement:
        """say <expr> / display <expr>"""
        keyword = self._previous()
        expression = self._parse_expression()
        self._end_statement()
        return PrintStatement(expression=expression, newline=keyword.type == TokenType.SAY,
                              line=keyword.line)

    def _parse_return(self) -> ReturnStatement:
        """give back [<expr>]"""
        line = self._previous().line
        self._consume(TokenType.BACK, "Expected 'back' after 'give'")

        expression = None
        if not self._check(*STATEMENT_END):
            expression = self._parse_expression()
        self._end_statement()
        return ReturnStatement(expression=expression, line=line)

    def _parse_ask(self) -> SetStatement:
        """ask <expr> and store [the] result in <target>"""
        line = self._previous().line
        prompt = self._parse_expression()
        self._consume(TokenType.AND, "Expected 'and' after ask prompt")
        self._consume(TokenType.STORE, "Expected 'store' after 'and'")
        self._match(TokenType.THE)
        self._consume(TokenType.RESULT, "Expected 'result' after 'store'")
        self._consume(TokenType.IN, "Expected 'in' after 'store result'")
        name, is_global = self._parse_target()
        self._end_statement()

        value = Call(function='ask', args=[prompt], line=line)
        return SetStatement(variable=name, value=value, is_global=is_global, line=line)

    def _parse_store(self) -> SetStatement:
        """store <expr> in <target>"""
        line = self._previous().line
        value = self._parse_expression()
        self._consume(TokenType.IN, "Expected 'in' after value")
        name, is_global = self._parse_target()
        self._end_statement()
        return SetStatement(variable=name, value=value, is_global=is_global, line=line)

    def _parse_terminate(self) -> CallStatement:
        """terminate program"""
        line = self._previous().line
        self._consume(TokenType.PROGRAM, "Expected 'program' after 'terminate'")
        self._end_statement()
        return CallStatement(function='terminate', args=[], line=line)

    def _parse_call_statement(self) -> CallStatement:
        """name using a and b / name(a, b) / name"""
        start = self._peek()
        expr = self._parse_expression()

        if isinstance(expr, Call):
            statement = CallStatement(function=expr.function, args=expr.args, line=expr.line)
        elif isinstance(expr, Identifier) and not expr.is_global:
            statement = CallStatement(function=expr.name, args=[], line=expr.line)
        else:
            raise ParseError(f"Expected a statement, got {self._describe(start)}", start.line, start.column)

        self._end_statement()
        return statement

    def _parse_block(self) -> List[Statement]:
        """NEWLINE INDENT statement+ DEDENT"""
        self._consume(TokenType.NEWLINE, "Expected newline after ':'")
        while self._match(TokenType.NEWLINE):
            pass
        self._consume(TokenType.INDENT, "Expected indentation")

        statements = []
        while not self._check(TokenType.DEDENT) and not self._is_at_end():
            if self._match(TokenType.NEWLINE):
                continue
            statements.append(self._parse_statement())

        self._consume(TokenType.DEDENT, "Expected dedentation")
        return statements

    def _parse_target(self) -> Tuple[str, bool]:
        """[global] <name>"""
        is_global = self._match(TokenType.GLOBAL)
        return self._consume_name("Expected variable name"), is_global

    def _end_statement(self):
        """A statement ends at a newline, a dedent, an else or end of input"""
        if self._match(TokenType.NEWLINE):
            return
        if self._check(TokenType.DEDENT, TokenType.EOF, TokenType.ELSE):
            return
        token = self._peek()
        raise ParseError(f"Expected end of line, got {self._describe(token)}", token.line, token.column)

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def _parse_expression(self) -> Expression:
        """Parse expression"""
        return self._parse_or()

    def _parse_or(self) -> Expression:
        """Parse logical OR"""
        left = self._parse_and()
        while self._match(TokenType.OR):
            line = self._previous().line
            right = self._parse_and()
            left = BinaryOp(op='or', left=left, right=right, line=line)
        return left

    def _parse_and(self) -> Expression:
        """Parse logical AND, leaving argument separators and 'and store' alone"""
        left = self._parse_equality()
        while (self._check(TokenType.AND) and not self._in_arguments
               and not self._check_next(TokenType.STORE)):
            line = self._advance().line
            right = self._parse_equality()
            left = BinaryOp(op='and', left=left, right=right, line=line)
        return left

    def _parse_equality(self) -> Expression:
        """Parse natural-language 'is' comparisons"""
        left = self._parse_comparison()
        while self._match(TokenType.IS):
            line = self._previous().line
            op, right = self._parse_is_tail()
            left = BinaryOp(op=op, left=left, right=right, line=line)
        return left

    def _parse_is_tail(self) -> Tuple[str, Expression]:
        """Everything after 'is', normalized to a symbolic operator"""
        if self._match(TokenType.EQUAL):
            self._match(TokenType.TO)
            return '==', self._parse_comparison()

        if self._match(TokenType.NOT):
            if self._match(TokenType.EQUAL):
                self._match(TokenType.TO)
            return '!=', self._parse_comparison()

        if self._match(TokenType.GREATER, TokenType.LESS):
            strict = '>' if self._previous().type == TokenType.GREATER else '<'
            self._consume(TokenType.THAN, f"Expected 'than' after '{self._previous().value}'")
            if self._check(TokenType.OR) and self._check_next(TokenType.EQUAL):
                self._advance()
                self._advance()
                self._match(TokenType.TO)
                return strict + '=', self._parse_comparison()
            return strict, self._parse_comparison()

        if self._match(TokenType.AT):
            if self._match(TokenType.LEAST):
                return '>=', self._parse_comparison()
            if self._match(TokenType.MOST):
                return '<=', self._parse_comparison()
            token = self._peek()
            raise ParseError("Expected 'least' or 'most' after 'at'", token.line, token.column)

        # Plain 'is': equality, or "N or more" / "N or less"
        right = self._parse_comparison()
        if self._check(TokenType.OR) and self._check_next(TokenType.MORE):
            self._advance()
            self._advance()
            return '>=', right
        if self._check(TokenType.OR) and self._check_next(TokenType.LESS):
            self._advance()
            self._advance()
            return '<=', right
        return '==', right

    def _parse_comparison(self) -> Expression:
        """Parse symbolic comparison operators"""
        left = self._parse_additive()
        while self._match(*COMPARISON_OPERATORS):
            token = self._previous()
            right = self._parse_additive()
            left = BinaryOp(op=token.value, left=left, right=right, line=token.line)
        return left

    def _parse_additive(self) -> Expression:
        """Parse +, - and 'followed by'"""
        left = self._parse_multiplicative()
        while True:
            if self._match(TokenType.PLUS, TokenType.MINUS):
                token = self._previous()
                op = token.value
            elif self._match(TokenType.FOLLOWED):
                token = self._previous()
                self._consume(TokenType.BY, "Expected 'by' after 'followed'")
                op = '+'
            else:
                break
            right = self._parse_multiplicative()
            left = BinaryOp(op=op, left=left, right=right, line=token.line)
        return left

    def _parse_multiplicative(self) -> Expression:
        """Parse *, / and 'divided by'"""
        left = self._parse_unary()
        while self._match(TokenType.STAR, TokenType.SLASH, TokenType.DIVIDED):
            token = self._previous()
            if token.type == TokenType.DIVIDED:
                self._match(TokenType.BY)
            op = '*' if token.type == TokenType.STAR else '/'
            right = self._parse_unary()
            left = BinaryOp(op=op, left=left, right=right, line=token.line)
        return left

    def _parse_unary(self) -> Expression:
        """Parse unary operators"""
        if self._match(TokenType.MINUS, TokenType.NOT):
            token = self._previous()
            op = '-' if token.type == TokenType.MINUS else 'not'
            return UnaryOp(op=op, operand=self._parse_unary(), line=token.line)
        return self._parse_postfix()

    def _parse_postfix(self) -> Expression:
        """Parse calls, member access and indexing"""
        expr = self._parse_primary()

        while True:
            if self._match(TokenType.LPAREN):
                name = self._callee_name(expr)
                expr = Call(function=name, args=self._parse_paren_arguments(), line=expr.line)
            elif self._match(TokenType.USING, TokenType.WITH):
                name = self._callee_name(expr)
                expr = Call(function=name, args=self._parse_natural_arguments(), line=expr.line)
            elif self._match(TokenType.DOT):
                token = self._peek()
                name = self._consume_name("Expected property name after '.'")
                prop = Literal(value=name, line=token.line)
                expr = MemberAccess(object=expr, property=prop, line=token.line)
            elif self._match(TokenType.LBRACKET):
                line = self._previous().line
                index = self._parse_nested(self._parse_expression)
                self._consume(TokenType.RBRACKET, "Expected ']' after index")
                expr = MemberAccess(object=expr, property=index, line=line)
            else:
                break

        return expr

    def _parse_paren_arguments(self) -> List[Expression]:
        """name(a, b): full expressions, 'and' is logical"""
        args = []
        if not self._check(TokenType.RPAREN):
            args.append(self._parse_nested(self._parse_expression))
            while self._match(TokenType.COMMA):
                args.append(self._parse_nested(self._parse_expression))
        self._consume(TokenType.RPAREN, "Expected ')' after arguments")
        return args

    def _parse_natural_arguments(self) -> List[Expression]:
        """name using a and b: each argument stops short of 'and'"""
        args = []
        if self._check(TokenType.COLON, *STATEMENT_END):
            return args

        saved = self._in_arguments
        self._in_arguments = True
        try:
            args.append(self._parse_comparison())
            while self._match(TokenType.AND):
                args.append(self._parse_comparison())
        finally:
            self._in_arguments = saved
        return args

    def _parse_primary(self) -> Expression:
        """Parse primary expression"""
        token = self._peek()

        if self._match(TokenType.NUMBER, TokenType.STRING, TokenType.TRUE, TokenType.FALSE):
            return Literal(value=token.value, line=token.line)

        if self._match(TokenType.LENGTH):
            if self._match(TokenType.LPAREN):
                return Call(function='length', args=self._parse_paren_arguments(), line=token.line)
            self._consume(TokenType.OF, "Expected 'of' after 'length'")
            return Call(function='length', args=[self._parse_postfix()], line=token.line)

        if self._match(TokenType.LIST):
            self._consume(TokenType.OF, "Expected 'of' after 'list'")
            return ArrayLiteral(elements=self._parse_list_elements(), line=token.line)

        if self._match(TokenType.GLOBAL):
            name = self._consume_name("Expected variable name after 'global'")
            return Identifier(name=name, is_global=True, line=token.line)

        if self._match(TokenType.IDENTIFIER, *SOFT_KEYWORDS):
            return Identifier(name=token.value, line=token.line)

        if self._match(TokenType.LPAREN):
            expr = self._parse_nested(self._parse_expression)
            self._consume(TokenType.RPAREN, "Expected ')' after expression")
            return expr

        if self._match(TokenType.LBRACKET):
            return self._parse_array_literal(token)

        if self._match(TokenType.LBRACE):
            return self._parse_object_literal(token)

        raise ParseError(f"Unexpected {self._describe(token)}", token.line, token.column)

    def _parse_list_elements(self) -> List[Expression]:
        """list of a, b and c: bare words are strings, not variables"""
        elements = [self._parse_list_element()]
        while True:
            if self._match(TokenType.COMMA):
                if not self._in_arguments:
                    self._match(TokenType.AND)
            elif (self._check(TokenType.AND) and not self._in_arguments
                  and not self._check_next(TokenType.STORE)):
                self._advance()
            else:
                break
            elements.append(self._parse_list_element())
        return elements

    def _parse_list_element(self) -> Expression:
        """One list element"""
        token = self._peek()
        if self._match(TokenType.IDENTIFIER):
            return Literal(value=token.value, line=token.line)
        return self._parse_unary()

    def _parse_array_literal(self, start: Token) -> ArrayLiteral:
        """[a, b, c]"""
        elements = []
        if not self._check(TokenType.RBRACKET):
            elements.append(self._parse_nested(self._parse_expression))
            while self._match(TokenType.COMMA):
                elements.append(self._parse_nested(self._parse_expression))
        self._consume(TokenType.RBRACKET, "Expected ']' after list elements")
        return ArrayLiteral(elements=elements, line=start.line)

    def _parse_object_literal(self, start: Token) -> ObjectLiteral:
        """{key: value, ...}"""
        fields = {}
        if not self._check(TokenType.RBRACE):
            while True:
                if self._check(TokenType.STRING):
                    key = self._advance().value
                else:
                    key = self._consume_name("Expected property name")
                self._consume(TokenType.COLON, "Expected ':' after property name")
                fields[key] = self._parse_nested(self._parse_expression)
                if not self._match(TokenType.COMMA):
                    break
        self._consume(TokenType.RBRACE, "Expected '}' after object properties")
        return ObjectLiteral(fields=fields, line=start.line)

    def _parse_nested(self, parse):
        """Run parse() outside any natural-language argument list"""
        saved = self._in_arguments
        self._in_arguments = False
        try:
            return parse()
        finally:
            self._in_arguments = saved

    def _callee_name(self, expr: Expression) -> str:
        """Calls need a plain function name on the left"""
        if isinstance(expr, Identifier) and not expr.is_global:
            return expr.name
        token = self._previous()
        raise ParseError("Only named functions can be called", token.line, token.column)

    # ------------------------------------------------------------------
    # Parser utilities
    # ------------------------------------------------------------------

    def _match(self, *types: str) -> bool:
        """Consume the current token if it matches any of the given types"""
        if self._check(*types):
            self._advance()
            return True
        return False

    def _check(self, *types: str) -> bool:
        """Check if current token is of any given type"""
        return self._peek().type in types

    def _check_next(self, type: str) -> bool:
        """Check the token after the current one"""
        if self.pos + 1 >= len(self.tokens):
            return False
        return self.tokens[self.pos + 1].type == type

    def _consume(self, type: str, message: str) -> Token:
        """Consume a token of the given type or fail"""
        if self._check(type):
            return self._advance()
        token = self._peek()
        raise ParseError(f"{message}, got {self._describe(token)}", token.line, token.column)

    def _consume_name(self, message: str) -> str:
        """Consume an identifier (or a keyword usable as one)"""
        if self._check(TokenType.IDENTIFIER, *SOFT_KEYWORDS):
            return self._advance().value
        token = self._peek()
        raise ParseError(f"{message}, got {self._describe(token)}", token.line, token.column)

    def _advance(self) -> Token:
        """Consume current token and return it"""
        if not self._is_at_end():
            self.pos += 1
        return self._previous()

    def _is_at_end(self) -> bool:
        """Check if at end of tokens"""
        return self._peek().type == TokenType.EOF

    def _peek(self) -> Token:
        """Return current token without consuming"""
        return self.tokens[self.pos]

    def _previous(self) -> Token:
        """Return previous token"""
        return self.tokens[self.pos - 1]

    @staticmethod
    def _describe(token: Token) -> str:
        """Human-readable token for error messages"""
        if token.type == TokenType.EOF:
            return "end of input"
        if token.type == TokenType.NEWLINE:
            return "end of line"
        if token.type == TokenType.INDENT:
            return "unexpected indentation"
        if token.type == TokenType.DEDENT:
            return "end of block"
        if token.type == TokenType.STRING:
            return f'"{token.value}"'
        if token.type in (TokenType.TRUE, TokenType.FALSE):
            return "'true'" if token.value else "'false'"
        return f"'{token.value}'"


def parse(tokens: List[Token]) -> Program:
    """Parse a token list into a Program"""
    return PlainTalkParser(tokens).parse()


__all__ = [
    'PlainTalkParser',
    'parse',
]
