"""
Test suite for the PlainTalk parser
Verifies that synonymous phrasings collapse to the same tree
"""

import json
import pytest
import sys
import os

# Add grandparent directory to path for imports (to find plaintalk package)
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from plaintalk.lexer import tokenize
from plaintalk.parser import parse, PlainTalkParser
from plaintalk.errors import ParseError, E_PARSE_ERROR
from plaintalk.nodes import (
    Program, Literal, Identifier, BinaryOp, UnaryOp, Call, MemberAccess,
    ArrayLiteral, ObjectLiteral, EventStatement, FunctionStatement, SetStatement,
    AddStatement, RemoveStatement, DeleteStatement, CallStatement, IfStatement,
    WhileStatement, ForEachStatement, PrintStatement, ReturnStatement,
    walk, to_dict,
)


def parse_source(source):
    return parse(tokenize(source))


def first(source):
    return parse_source(source).body[0]


def expr(source):
    """Parse 'say <source>' and return the expression"""
    return first(f'say {source}').expression


class TestProgram:
    """Test whole-program parsing"""

    def test_empty_program(self):
        program = parse_source('')
        assert isinstance(program, Program)
        assert program.body == []

    def test_blank_and_comment_lines(self):
        assert parse_source('\n\n# nothing here\n\n').body == []

    def test_indent_width_does_not_matter(self):
        two = 'if x:\n  say 1\n  say 2\nsay 3\n'
        four = 'if x:\n    say 1\n    say 2\nsay 3\n'
        assert to_dict(parse_source(two)) == to_dict(parse_source(four))

    def test_statement_lines(self):
        program = parse_source('say 1\nsay 2\n\nsay 3')
        assert [s.line for s in program.body] == [1, 2, 4]


class TestAssignment:
    """Test synonymous assignment forms"""

    @pytest.mark.parametrize("source", [
        'remember x as 5',
        'var x as 5',
        'set x to 5',
        'store 5 in x',
    ])
    def test_set_forms(self, source):
        node = first(source)
        assert isinstance(node, SetStatement)
        assert node.variable == 'x'
        assert node.value == Literal(5, line=1)
        assert node.is_global is False

    def test_global_set(self):
        node = first('set global x to 1')
        assert node.is_global is True

    def test_increase_and_add_agree(self):
        a = first('increase x by 2')
        b = first('add 2 to x')
        assert isinstance(a, AddStatement)
        assert to_dict(a) == to_dict(b)

    def test_decrease_and_subtract_agree(self):
        a = first('decrease x by 2')
        b = first('subtract 2 from x')
        assert isinstance(a, RemoveStatement)
        assert to_dict(a) == to_dict(b)

    def test_global_add(self):
        node = first('add 1 to global total')
        assert node.variable == 'total'
        assert node.is_global is True

    @pytest.mark.parametrize("source,op", [
        ('multiply x by 2', '*'),
        ('divide x by 2', '/'),
    ])
    def test_scale_rewritten_as_set(self, source, op):
        node = first(source)
        assert isinstance(node, SetStatement)
        assert isinstance(node.value, BinaryOp)
        assert node.value.op == op
        assert node.value.left == Identifier('x', line=1)
        assert node.value.right == Literal(2, line=1)

    def test_delete(self):
        node = first('delete global x')
        assert isinstance(node, DeleteStatement)
        assert node.variable == 'x'
        assert node.is_global is True

    def test_soft_keyword_as_variable(self):
        node = first('set result to 1')
        assert node.variable == 'result'


class TestComparisons:
    """Test natural-language comparison normalization"""

    @pytest.mark.parametrize("source,op", [
        ('x is 5', '=='),
        ('x is equal to 5', '=='),
        ('x is not 5', '!='),
        ('x is not equal to 5', '!='),
        ('x is greater than 5', '>'),
        ('x is greater than or equal to 5', '>='),
        ('x is less than 5', '<'),
        ('x is less than or equal to 5', '<='),
        ('x is at least 5', '>='),
        ('x is at most 5', '<='),
        ('x is 5 or more', '>='),
        ('x is 5 or less', '<='),
        ('x >= 5', '>='),
        ('x != 5', '!='),
    ])
    def test_normalized(self, source, op):
        node = expr(source)
        assert isinstance(node, BinaryOp)
        assert node.op == op
        assert node.left == Identifier('x', line=1)
        assert node.right == Literal(5, line=1)

    def test_or_after_comparison_is_logical(self):
        node = expr('x is 5 or y')
        assert node.op == 'or'
        assert node.left.op == '=='

    def test_at_requires_least_or_most(self):
        with pytest.raises(ParseError) as exc_info:
            parse_source('say x is at 5')
        assert "'least' or 'most'" in exc_info.value.message


class TestExpressions:
    """Test expression precedence and forms"""

    def test_followed_by_is_concatenation(self):
        node = expr('"a" followed by 1 followed by "b"')
        assert node.op == '+'
        assert node.left.op == '+'
        assert node.right == Literal("b", line=1)

    def test_multiplication_binds_tighter(self):
        node = expr('1 + 2 * 3')
        assert node.op == '+'
        assert node.right.op == '*'

    def test_divided_by(self):
        assert expr('6 divided by 3').op == '/'

    def test_parentheses(self):
        node = expr('(1 + 2) * 3')
        assert node.op == '*'
        assert node.left.op == '+'

    def test_unary(self):
        assert expr('-x') == UnaryOp('-', Identifier('x', line=1), line=1)
        assert expr('not x').op == 'not'

    def test_and_binds_tighter_than_or(self):
        node = expr('a or b and c')
        assert node.op == 'or'
        assert node.right.op == 'and'

    def test_length_of(self):
        node = expr('length of xs')
        assert node == Call('length', [Identifier('xs', line=1)], line=1)

    def test_length_call(self):
        assert expr('length(xs)').function == 'length'

    def test_global_read(self):
        assert expr('global x') == Identifier('x', is_global=True, line=1)

    def test_member_access(self):
        node = expr('person.name')
        assert isinstance(node, MemberAccess)
        assert node.property == Literal('name', line=1)

    def test_index_access(self):
        node = expr('xs[1 + 1]')
        assert isinstance(node, MemberAccess)
        assert node.property.op == '+'

    def test_bracket_list(self):
        node = expr('[1, "two", x]')
        assert isinstance(node, ArrayLiteral)
        assert len(node.elements) == 3

    def test_empty_bracket_list(self):
        assert expr('[]') == ArrayLiteral([], line=1)

    def test_record(self):
        node = expr('{name: "Ada", "age": 36}')
        assert isinstance(node, ObjectLiteral)
        assert list(node.fields) == ['name', 'age']


class TestLists:
    """Test 'list of' literals"""

    def test_bare_words_are_strings(self):
        node = first('set xs to list of a, b and c').value
        assert isinstance(node, ArrayLiteral)
        assert node.elements == [Literal('a', line=1), Literal('b', line=1), Literal('c', line=1)]

    def test_numbers_and_quoted(self):
        node = first('set xs to list of 1, "two", 3').value
        assert [e.value for e in node.elements] == [1, 'two', 3]

    def test_comma_and(self):
        node = first('set xs to list of a, b, and c').value
        assert len(node.elements) == 3


class TestCalls:
    """Test function call forms and contextual 'and'"""

    def test_natural_call_arguments(self):
        node = first('area using 5 and 3')
        assert isinstance(node, CallStatement)
        assert node.function == 'area'
        assert node.args == [Literal(5, line=1), Literal(3, line=1)]

    def test_with_is_using(self):
        assert to_dict(first('area with 5 and 3')) == to_dict(first('area using 5 and 3'))

    def test_paren_call_full_expressions(self):
        node = first('check(a and b, c)')
        assert len(node.args) == 2
        assert node.args[0].op == 'and'

    def test_bare_name_is_call(self):
        node = first('greet')
        assert node == CallStatement('greet', [], line=1)

    def test_call_inside_expression(self):
        node = expr('"Sum: " followed by add2 using a and b')
        assert node.op == '+'
        assert node.right == Call('add2', [Identifier('a', line=1), Identifier('b', line=1)], line=1)

    def test_list_argument_stops_at_and(self):
        node = first('show using list of a, b and c')
        assert len(node.args) == 2
        assert len(node.args[0].elements) == 2
        assert node.args[1] == Identifier('c', line=1)

    def test_and_outside_arguments_is_logical(self):
        node = first('if ready and done:\n    say 1')
        assert node.condition.op == 'and'

    def test_ask_and_store(self):
        node = first('ask "Name?" and store result in name')
        assert isinstance(node, SetStatement)
        assert node.variable == 'name'
        assert node.value == Call('ask', [Literal('Name?', line=1)], line=1)

    def test_ask_with_the_result(self):
        assert first('ask "q" and store the result in x').variable == 'x'

    def test_ask_prompt_with_and(self):
        node = first('ask a and b and store result in x')
        assert node.value.args[0].op == 'and'

    def test_terminate(self):
        assert first('terminate program') == CallStatement('terminate', [], line=1)


class TestControlFlow:
    """Test blocks and control statements"""

    def test_if_else(self):
        node = first('if x:\n    say 1\nelse:\n    say 2\n')
        assert isinstance(node, IfStatement)
        assert len(node.then_body) == 1
        assert len(node.else_body) == 1

    def test_else_if_chain_nests(self):
        source = (
            'if a:\n    say 1\n'
            'else if b:\n    say 2\n'
            'else if c:\n    say 3\n'
            'else:\n    say 4\n'
        )
        node = first(source)
        second = node.else_body[0]
        third = second.else_body[0]
        assert isinstance(second, IfStatement) and second.condition == Identifier('b', line=3)
        assert isinstance(third, IfStatement) and third.condition == Identifier('c', line=5)
        assert isinstance(third.else_body[0], PrintStatement)

    def test_nested_if_else_binds_outer(self):
        source = 'if a:\n    if b:\n        say 1\nelse:\n    say 2\n'
        node = first(source)
        assert node.then_body[0].else_body is None
        assert node.else_body is not None

    def test_while_and_repeat(self):
        a = first('while x < 3:\n    add 1 to x')
        b = first('repeat while x < 3:\n    add 1 to x')
        c = first('repeat x < 3:\n    add 1 to x')
        assert isinstance(a, WhileStatement)
        assert to_dict(a) == to_dict(b) == to_dict(c)

    def test_for_each(self):
        node = first('for every x in the list of xs:\n    say x')
        assert isinstance(node, ForEachStatement)
        assert node.variable == 'x'
        assert node.iterable == Identifier('xs', line=1)

    def test_for_without_every(self):
        assert first('for x in xs:\n    say x').variable == 'x'

    def test_say_and_display(self):
        assert first('say 1').newline is True
        assert first('display 1').newline is False

    def test_block_requires_indent(self):
        with pytest.raises(ParseError) as exc_info:
            parse_source('if x:\nsay 1')
        assert exc_info.value.code == E_PARSE_ERROR
        assert exc_info.value.line == 2

    def test_blank_line_before_block(self):
        node = first('if x:\n\n    say 1')
        assert len(node.then_body) == 1


class TestDeclarations:
    """Test functions and events"""

    def test_function(self):
        node = first('to area using width and height:\n    give back width * height')
        assert isinstance(node, FunctionStatement)
        assert node.parameters == ['width', 'height']
        assert isinstance(node.body[0], ReturnStatement)

    def test_function_without_parameters(self):
        assert first('to greet:\n    say "hi"').parameters == []

    def test_return_without_value(self):
        node = first('to f:\n    give back').body[0]
        assert node.expression is None

    @pytest.mark.parametrize("source", [
        'when the program starts:\n    say 1',
        'when program starts:\n    say 1',
        'when start:\n    say 1',
    ])
    def test_start_event(self, source):
        node = first(source)
        assert isinstance(node, EventStatement)
        assert node.event_type == 'start'

    def test_named_event(self):
        assert first('when clicked:\n    say 1').event_type == 'clicked'

    @pytest.mark.parametrize("source,interval,unit", [
        ('every 2 seconds:\n    say 1', 2, 'seconds'),
        ('every 1 second:\n    say 1', 1, 'seconds'),
        ('every 500 ms:\n    say 1', 500, 'ms'),
        ('every 250 milliseconds:\n    say 1', 250, 'ms'),
    ])
    def test_timer(self, source, interval, unit):
        node = first(source)
        assert node.event_type == 'timer'
        assert node.interval == interval
        assert node.unit == unit

    def test_timer_needs_positive_interval(self):
        with pytest.raises(ParseError):
            parse_source('every 0 seconds:\n    say 1')

    def test_timer_unknown_unit(self):
        with pytest.raises(ParseError) as exc_info:
            parse_source('every 2 hours:\n    say 1')
        assert "hours" in exc_info.value.message


class TestErrors:
    """Test parse faults"""

    def test_missing_expression(self):
        with pytest.raises(ParseError) as exc_info:
            parse_source('say')
        assert exc_info.value.line == 1
        assert "end of input" in exc_info.value.message

    def test_missing_keyword(self):
        with pytest.raises(ParseError) as exc_info:
            parse_source('set x 5')
        assert "Expected 'to'" in exc_info.value.message
        assert exc_info.value.column == 7

    def test_expression_is_not_a_statement(self):
        with pytest.raises(ParseError) as exc_info:
            parse_source('5 + 3')
        assert "Expected a statement" in exc_info.value.message

    def test_trailing_tokens(self):
        with pytest.raises(ParseError) as exc_info:
            parse_source('say 1 2')
        assert "Expected end of line" in exc_info.value.message

    def test_error_on_later_line(self):
        with pytest.raises(ParseError) as exc_info:
            parse_source('say 1\nsay 2\nset to 3')
        assert exc_info.value.line == 3

    def test_describe_includes_position(self):
        with pytest.raises(ParseError) as exc_info:
            PlainTalkParser(tokenize('say )')).parse()
        assert exc_info.value.describe().endswith("at line 1, column 5")


class TestInspection:
    """Test tree helpers"""

    def test_walk_visits_every_node(self):
        program = parse_source('if x is 1:\n    say "a" followed by y')
        types = [type(node).__name__ for node in walk(program)]
        assert types.count('Identifier') == 2
        assert 'PrintStatement' in types
        assert types[0] == 'Program'

    def test_to_dict_is_json_serializable(self):
        program = parse_source('set p to {name: "Ada"}\nsay p.name')
        data = json.loads(json.dumps(to_dict(program)))
        assert data['type'] == 'Program'
        assert data['body'][0]['type'] == 'SetStatement'


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
