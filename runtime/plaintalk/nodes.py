"""
PlainTalk AST Nodes

Two closed families of dataclass nodes, every one carrying the source line it
came from. Synonymous phrasings are collapsed by the parser, so the
interpreter only ever sees these shapes.

Statements: EventStatement, FunctionStatement, SetStatement, AddStatement,
RemoveStatement, DeleteStatement, CallStatement, IfStatement, WhileStatement,
ForEachStatement, PrintStatement, ReturnStatement

Expressions: Literal, Identifier, BinaryOp, UnaryOp, Call, MemberAccess,
ArrayLiteral, ObjectLiteral
"""

from dataclasses import dataclass, field, fields
from typing import Any, Dict, Iterator, List, Optional, Union


@dataclass
class ASTNode:
    """Base AST node"""
    pass


# ============================================================================
# Expressions
# ============================================================================

@dataclass
class Literal(ASTNode):
    """Number, string or boolean value"""
    value: Any
    line: int = 0


@dataclass
class Identifier(ASTNode):
    """Variable reference; is_global skips the local scope"""
    name: str
    is_global: bool = False
    line: int = 0


@dataclass
class BinaryOp(ASTNode):
    """Binary operation, natural-language forms already normalized"""
    op: str
    left: 'Expression'
    right: 'Expression'
    line: int = 0


@dataclass
class UnaryOp(ASTNode):
    """Unary operation: '-' or 'not'"""
    op: str
    operand: 'Expression'
    line: int = 0


@dataclass
class Call(ASTNode):
    """Call of a built-in or user-defined function by name"""
    function: str
    args: List['Expression'] = field(default_factory=list)
    line: int = 0


@dataclass
class MemberAccess(ASTNode):
    """obj.name or obj[index]"""
    object: 'Expression'
    property: 'Expression'
    line: int = 0


@dataclass
class ArrayLiteral(ASTNode):
    """List literal"""
    elements: List['Expression'] = field(default_factory=list)
    line: int = 0


@dataclass
class ObjectLiteral(ASTNode):
    """Record literal"""
    fields: Dict[str, 'Expression'] = field(default_factory=dict)
    line: int = 0


Expression = Union[Literal, Identifier, BinaryOp, UnaryOp, Call, MemberAccess, ArrayLiteral, ObjectLiteral]

EXPRESSION_TYPES = (Literal, Identifier, BinaryOp, UnaryOp, Call, MemberAccess, ArrayLiteral, ObjectLiteral)


# ============================================================================
# Statements
# ============================================================================

@dataclass
class EventStatement(ASTNode):
    """Event body; timer events also carry interval and unit"""
    event_type: str
    body: List['Statement'] = field(default_factory=list)
    interval: Optional[float] = None
    unit: Optional[str] = None
    line: int = 0


@dataclass
class FunctionStatement(ASTNode):
    """Named function declaration"""
    name: str
    parameters: List[str] = field(default_factory=list)
    body: List['Statement'] = field(default_factory=list)
    line: int = 0


@dataclass
class SetStatement(ASTNode):
    """Assignment"""
    variable: str
    value: Expression
    is_global: bool = False
    line: int = 0


@dataclass
class AddStatement(ASTNode):
    """In-place numeric increase"""
    variable: str
    amount: Expression
    is_global: bool = False
    line: int = 0


@dataclass
class RemoveStatement(ASTNode):
    """In-place numeric decrease"""
    variable: str
    amount: Expression
    is_global: bool = False
    line: int = 0


@dataclass
class DeleteStatement(ASTNode):
    """Remove a variable from its table"""
    variable: str
    is_global: bool = False
    line: int = 0


@dataclass
class CallStatement(ASTNode):
    """Function call whose result is discarded"""
    function: str
    args: List[Expression] = field(default_factory=list)
    line: int = 0


@dataclass
class IfStatement(ASTNode):
    """Conditional; else-if chains nest in else_body"""
    condition: Expression
    then_body: List['Statement'] = field(default_factory=list)
    else_body: Optional[List['Statement']] = None
    line: int = 0


@dataclass
class WhileStatement(ASTNode):
    """Pre-tested loop"""
    condition: Expression
    body: List['Statement'] = field(default_factory=list)
    line: int = 0


@dataclass
class ForEachStatement(ASTNode):
    """Iteration over a list value"""
    variable: str
    iterable: Expression
    body: List['Statement'] = field(default_factory=list)
    line: int = 0


@dataclass
class PrintStatement(ASTNode):
    """say (newline) / display (no newline)"""
    expression: Expression
    newline: bool = True
    line: int = 0


@dataclass
class ReturnStatement(ASTNode):
    """give back [expr]"""
    expression: Optional[Expression] = None
    line: int = 0


Statement = Union[
    EventStatement, FunctionStatement, SetStatement, AddStatement, RemoveStatement,
    DeleteStatement, CallStatement, IfStatement, WhileStatement, ForEachStatement,
    PrintStatement, ReturnStatement,
]

STATEMENT_TYPES = (
    EventStatement, FunctionStatement, SetStatement, AddStatement, RemoveStatement,
    DeleteStatement, CallStatement, IfStatement, WhileStatement, ForEachStatement,
    PrintStatement, ReturnStatement,
)


@dataclass
class Program(ASTNode):
    """Top-level statements of one source text"""
    body: List[Statement] = field(default_factory=list)
    line: int = 1


# ============================================================================
# Inspection
# ============================================================================

def walk(node: ASTNode) -> Iterator[ASTNode]:
    """Yield node and all its descendants, depth first in source order"""
    yield node
    for f in fields(node):
        child = getattr(node, f.name)
        if isinstance(child, ASTNode):
            yield from walk(child)
        elif isinstance(child, list):
            for item in child:
                if isinstance(item, ASTNode):
                    yield from walk(item)
        elif isinstance(child, dict):
            for item in child.values():
                if isinstance(item, ASTNode):
                    yield from walk(item)


def to_dict(node: Any) -> Any:
    """Plain dict/list form of a tree, for dumping as JSON"""
    if isinstance(node, ASTNode):
        d = {"type": type(node).__name__}
        for f in fields(node):
            d[f.name] = to_dict(getattr(node, f.name))
        return d
    if isinstance(node, list):
        return [to_dict(item) for item in node]
    if isinstance(node, dict):
        return {key: to_dict(value) for key, value in node.items()}
    return node


__all__ = [
    'ASTNode',
    'Literal',
    'Identifier',
    'BinaryOp',
    'UnaryOp',
    'Call',
    'MemberAccess',
    'ArrayLiteral',
    'ObjectLiteral',
    'Expression',
    'EXPRESSION_TYPES',
    'EventStatement',
    'FunctionStatement',
    'SetStatement',
    'AddStatement',
    'RemoveStatement',
    'DeleteStatement',
    'CallStatement',
    'IfStatement',
    'WhileStatement',
    'ForEachStatement',
    'PrintStatement',
    'ReturnStatement',
    'Statement',
    'STATEMENT_TYPES',
    'Program',
    'walk',
    'to_dict',
]
