"""
PlainTalk Interpreter

Async tree-walking interpreter over a RuntimeContext.

Lifecycle: execute() registers every function and event of a program
(scheduling timer events as asyncio tasks), then runs the start event and the
remaining top-level statements. A single asyncio.Lock guarantees that the main
line, timer ticks and triggered events never interleave, so a tick that comes
due while the program waits on input runs only after the answer arrives.

Runtime faults are raised as PlainTalkRuntimeError where detected and are only
caught at the execute / trigger_event / timer-tick boundaries, which report
them on the output channel with severity 'error'.
"""

import asyncio
import logging
import math
import random
from typing import Any, Dict, List, Optional, Set

from .context import MS_PER_SECOND, NO_NEWLINE, TERMINATE_MESSAGE, RuntimeContext, Severity
from .errors import (
    E_ARGUMENT_ERROR, E_NAME_ERROR, E_TYPE_ERROR, E_ZERO_DIVISION,
    PlainTalkRuntimeError,
)
from .nodes import (
    AddStatement, ArrayLiteral, BinaryOp, Call, CallStatement, DeleteStatement,
    EventStatement, Expression, ForEachStatement, FunctionStatement, Identifier,
    IfStatement, Literal, MemberAccess, ObjectLiteral, PrintStatement, Program,
    RemoveStatement, ReturnStatement, SetStatement, Statement, UnaryOp, WhileStatement,
)
from .values import (
    coerce_input, format_value, is_number, is_truthy, normalize_number, type_name, values_equal,
)

logger = logging.getLogger("plaintalk.interpreter")


class ReturnValue:
    """Signal carrying a 'give back' value up through nested blocks"""
    __slots__ = ('value',)

    def __init__(self, value: Any):
        self.value = value


# ============================================================================
# Interpreter
# ============================================================================

class PlainTalkInterpreter:
    """Execute PlainTalk programs against a RuntimeContext"""

    def __init__(self, context: RuntimeContext):
        """
        Initialize interpreter

        Args:
            context: Variable tables, registries and host callbacks
        """
        self.context = context
        self.running = False
        # Set by stop(); statement loops exit as soon as they see it
        self._halted = False
        self._lock = asyncio.Lock()
        self._timers: Set[asyncio.Task] = set()

        # Built-in functions, resolved before user-defined ones
        self.builtins = {
            'say': self._builtin_say,
            'print': self._builtin_say,
            'display': self._builtin_display,
            'ask': self._builtin_ask,
            'input': self._builtin_ask,
            'random': self._builtin_random,
            'length': self._builtin_length,
            'terminate': self._builtin_terminate,
        }

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def execute(self, program: Program):
        """
        Run a program

        Pass 1 registers functions and events and schedules timers; pass 2
        runs the start event, then every other top-level statement in order.
        A runtime fault is reported and ends the main line; the interpreter
        stays running while timers remain scheduled.
        """
        self.running = True
        self._halted = False
        logger.debug("State: running")

        for statement in program.body:
            self._register(statement)

        try:
            async with self._lock:
                for statement in program.body:
                    if isinstance(statement, EventStatement) and statement.event_type == 'start':
                        await self._execute_block(statement.body)

                for statement in program.body:
                    if self._halted:
                        break
                    if isinstance(statement, (FunctionStatement, EventStatement)):
                        continue
                    result = await self._execute_statement(statement)
                    if isinstance(result, ReturnValue):
                        break
        except PlainTalkRuntimeError as e:
            self._report(e)
        except Exception as e:
            self._report_unexpected(e)
        finally:
            if not self._timers:
                self.running = False
                logger.debug("State: idle")

    async def trigger_event(self, name: str):
        """Run one registered event body; unknown names are ignored"""
        event = self.context.events.get(name)
        if event is None:
            logger.debug("No event registered for '%s'", name)
            return

        logger.debug("Triggering event '%s'", name)
        async with self._lock:
            self._halted = False
            try:
                await self._execute_block(event.body)
            except PlainTalkRuntimeError as e:
                self._report(e)
            except Exception as e:
                self._report_unexpected(e)

    def stop(self):
        """Cancel all timers and halt execution"""
        self.running = False
        self._halted = True

        current = None
        try:
            current = asyncio.current_task()
        except RuntimeError:
            # No event loop running: nothing can be the current task
            pass

        for task in self._timers:
            if task is not current and not task.done():
                task.cancel()
        self._timers = {task for task in self._timers if task is current}
        logger.debug("State: stopped")

    def is_running(self) -> bool:
        return self.running

    async def wait(self):
        """Wait until no timers remain scheduled"""
        while self._timers:
            await asyncio.gather(*list(self._timers), return_exceptions=True)

    # ------------------------------------------------------------------
    # Registration and timers
    # ------------------------------------------------------------------

    def _register(self, statement: Statement):
        """Record function and event declarations"""
        if isinstance(statement, FunctionStatement):
            self.context.functions[statement.name] = statement
            logger.debug("Registered function '%s'", statement.name)
        elif isinstance(statement, EventStatement):
            self.context.register_event(statement.event_type, statement)
            logger.debug("Registered event '%s'", statement.event_type)
            if statement.event_type == 'timer':
                self._schedule_timer(statement)

    def _schedule_timer(self, event: EventStatement):
        """Start the recurring task for a timer event"""
        if event.unit == 'ms':
            seconds = event.interval / MS_PER_SECOND
        else:
            seconds = event.interval

        task = asyncio.get_running_loop().create_task(self._run_timer(event, seconds))
        self._timers.add(task)
        task.add_done_callback(lambda t: self._timers.discard(t))
        logger.debug("Scheduled timer every %s %s (line %d)", event.interval, event.unit, event.line)

    async def _run_timer(self, event: EventStatement, seconds: float):
        """Tick until the interpreter stops running"""
        while True:
            await asyncio.sleep(seconds)
            if not self.running:
                break

            async with self._lock:
                if not self.running:
                    break
                logger.debug("Timer tick (line %d)", event.line)
                self._halted = False
                try:
                    await self._execute_block(event.body)
                except PlainTalkRuntimeError as e:
                    self._report(e)
                except Exception as e:
                    self._report_unexpected(e)

        logger.debug("Timer cancelled (line %d)", event.line)

    def _report(self, error: PlainTalkRuntimeError):
        logger.warning("Runtime fault: %s", error)
        self.context.output(f"Error: {error.describe()}", Severity.ERROR)

    def _report_unexpected(self, error: Exception):
        logger.exception("Unexpected fault")
        self.context.output(f"Runtime Error: {error}", Severity.ERROR)

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    async def _execute_block(self, statements: List[Statement]) -> Optional[ReturnValue]:
        """Run statements until one returns or execution halts"""
        for statement in statements:
            if self._halted:
                break
            result = await self._execute_statement(statement)
            if isinstance(result, ReturnValue):
                return result
        return None

    async def _execute_statement(self, node: Statement) -> Optional[ReturnValue]:
        """Execute a single statement"""
        context = self.context

        if isinstance(node, SetStatement):
            value = await self._evaluate(node.value)
            context.assign(node.variable, value, node.is_global)

        elif isinstance(node, AddStatement):
            amount = await self._evaluate(node.amount)
            current = self._current_value(node.variable, node.is_global)
            if not (is_number(current) and is_number(amount)):
                raise PlainTalkRuntimeError("Cannot perform arithmetic on non-numeric values",
                                            node.line, E_TYPE_ERROR)
            context.assign(node.variable, self._apply('+', current, amount, node.line), node.is_global)

        elif isinstance(node, RemoveStatement):
            amount = await self._evaluate(node.amount)
            current = self._current_value(node.variable, node.is_global)
            if not (is_number(current) and is_number(amount)):
                raise PlainTalkRuntimeError("Cannot decrease non-numeric values", node.line, E_TYPE_ERROR)
            context.assign(node.variable, self._apply('-', current, amount, node.line), node.is_global)

        elif isinstance(node, DeleteStatement):
            if not context.delete(node.variable, node.is_global):
                logger.debug("delete of unset variable '%s' (line %d)", node.variable, node.line)

        elif isinstance(node, CallStatement):
            await self._call(node.function, node.args, node.line)

        elif isinstance(node, IfStatement):
            if is_truthy(await self._evaluate(node.condition)):
                return await self._execute_block(node.then_body)
            if node.else_body is not None:
                return await self._execute_block(node.else_body)

        elif isinstance(node, WhileStatement):
            while not self._halted and is_truthy(await self._evaluate(node.condition)):
                result = await self._execute_block(node.body)
                if isinstance(result, ReturnValue):
                    return result
                # Let timers and the host breathe inside long loops
                await asyncio.sleep(0)

        elif isinstance(node, ForEachStatement):
            return await self._execute_for_each(node)

        elif isinstance(node, PrintStatement):
            value = await self._evaluate(node.expression)
            if node.newline:
                await self._builtin_say([value], node.line)
            else:
                await self._builtin_display([value], node.line)

        elif isinstance(node, ReturnStatement):
            value = None
            if node.expression is not None:
                value = await self._evaluate(node.expression)
            return ReturnValue(value)

        elif isinstance(node, (FunctionStatement, EventStatement)):
            self._register(node)

        else:
            raise PlainTalkRuntimeError(f"Unknown statement type: {type(node).__name__}",
                                        getattr(node, 'line', 0))

        return None

    async def _execute_for_each(self, node: ForEachStatement) -> Optional[ReturnValue]:
        """Loop over a list; the loop variable does not outlive the loop"""
        items = await self._evaluate(node.iterable)
        if not isinstance(items, list):
            raise PlainTalkRuntimeError(f"Cannot loop over {type_name(items)}, expected a list",
                                        node.line, E_TYPE_ERROR)

        variables = self.context.variables
        had_previous = node.variable in variables
        previous = variables.get(node.variable)
        try:
            for item in list(items):
                if self._halted:
                    break
                self.context.variables[node.variable] = item
                result = await self._execute_block(node.body)
                if isinstance(result, ReturnValue):
                    return result
                await asyncio.sleep(0)
        finally:
            if had_previous:
                self.context.variables[node.variable] = previous
            else:
                self.context.variables.pop(node.variable, None)
        return None

    def _current_value(self, name: str, is_global: bool) -> Any:
        """Value for in-place arithmetic; unset variables start from 0"""
        if self.context.has(name, is_global):
            return self.context.lookup(name, is_global)
        return 0

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    async def _evaluate(self, node: Expression) -> Any:
        """Evaluate an expression node"""
        if isinstance(node, Literal):
            return node.value

        elif isinstance(node, Identifier):
            if not self.context.has(node.name, node.is_global):
                raise PlainTalkRuntimeError(f"Undefined variable: {node.name}", node.line, E_NAME_ERROR)
            return self.context.lookup(node.name, node.is_global)

        elif isinstance(node, BinaryOp):
            left = await self._evaluate(node.left)
            if node.op == 'and':
                return await self._evaluate(node.right) if is_truthy(left) else left
            if node.op == 'or':
                return left if is_truthy(left) else await self._evaluate(node.right)
            right = await self._evaluate(node.right)
            return self._apply(node.op, left, right, node.line)

        elif isinstance(node, UnaryOp):
            operand = await self._evaluate(node.operand)
            if node.op == 'not':
                return not is_truthy(operand)
            if not is_number(operand):
                raise PlainTalkRuntimeError(f"Cannot negate {type_name(operand)}", node.line, E_TYPE_ERROR)
            return -operand

        elif isinstance(node, Call):
            return await self._call(node.function, node.args, node.line)

        elif isinstance(node, MemberAccess):
            target = await self._evaluate(node.object)
            key = await self._evaluate(node.property)
            return self._member(target, key, node.line)

        elif isinstance(node, ArrayLiteral):
            return [await self._evaluate(element) for element in node.elements]

        elif isinstance(node, ObjectLiteral):
            return {key: await self._evaluate(value) for key, value in node.fields.items()}

        else:
            raise PlainTalkRuntimeError(f"Unknown expression type: {type(node).__name__}",
                                        getattr(node, 'line', 0))

    def _apply(self, op: str, left: Any, right: Any, line: int) -> Any:
        """Evaluate a non-logical binary operator"""
        if op == '+':
            if isinstance(left, str) or isinstance(right, str):
                return format_value(left) + format_value(right)
            self._require_numbers(op, left, right, line)
            return normalize_number(left + right)
        elif op == '-':
            self._require_numbers(op, left, right, line)
            return normalize_number(left - right)
        elif op == '*':
            self._require_numbers(op, left, right, line)
            return normalize_number(left * right)
        elif op == '/':
            self._require_numbers(op, left, right, line)
            if right == 0:
                raise PlainTalkRuntimeError("Division by zero", line, E_ZERO_DIVISION)
            return left / right
        elif op == '==':
            return values_equal(left, right)
        elif op == '!=':
            return not values_equal(left, right)
        elif op in ('<', '>', '<=', '>='):
            comparable = (is_number(left) and is_number(right)) or \
                (isinstance(left, str) and isinstance(right, str))
            if not comparable:
                raise PlainTalkRuntimeError(
                    f"Cannot compare {type_name(left)} with {type_name(right)}", line, E_TYPE_ERROR)
            if op == '<':
                return left < right
            elif op == '>':
                return left > right
            elif op == '<=':
                return left <= right
            return left >= right
        else:
            raise PlainTalkRuntimeError(f"Unknown operator: {op}", line)

    @staticmethod
    def _require_numbers(op: str, left: Any, right: Any, line: int):
        if not (is_number(left) and is_number(right)):
            raise PlainTalkRuntimeError(
                f"Cannot apply '{op}' to {type_name(left)} and {type_name(right)}", line, E_TYPE_ERROR)

    @staticmethod
    def _member(target: Any, key: Any, line: int) -> Any:
        """obj.name / obj[index]; missing entries are null"""
        if target is None:
            raise PlainTalkRuntimeError(f"Cannot read '{format_value(key)}' of null", line, E_TYPE_ERROR)

        if isinstance(target, (list, str)):
            if not is_number(key) or not float(key).is_integer():
                raise PlainTalkRuntimeError(f"Index must be a whole number, got {format_value(key)}",
                                            line, E_TYPE_ERROR)
            index = int(key)
            if 0 <= index < len(target):
                return target[index]
            return None

        if isinstance(target, dict):
            name = key if isinstance(key, str) else format_value(key)
            return target.get(name)

        return None

    # ------------------------------------------------------------------
    # Calls
    # ------------------------------------------------------------------

    async def _call(self, name: str, arg_nodes: List[Expression], line: int) -> Any:
        """Call a built-in or user-defined function by name"""
        args = [await self._evaluate(arg) for arg in arg_nodes]

        builtin = self.builtins.get(name)
        if builtin is not None:
            return await builtin(args, line)

        function = self.context.functions.get(name)
        if function is None:
            raise PlainTalkRuntimeError(f"Undefined function: {name}", line, E_NAME_ERROR)
        return await self._call_user_function(function, args, line)

    async def _call_user_function(self, function: FunctionStatement, args: List[Any], line: int) -> Any:
        """Run a function body in a fresh local scope"""
        if len(args) != len(function.parameters):
            raise PlainTalkRuntimeError(
                f"Function {function.name} expects {len(function.parameters)} arguments, got {len(args)}",
                line, E_ARGUMENT_ERROR)

        logger.debug("Calling %s with %d arguments (line %d)", function.name, len(args), line)

        saved: Dict[str, Any] = self.context.variables
        self.context.variables = dict(zip(function.parameters, args))
        try:
            result = await self._execute_block(function.body)
        except RecursionError:
            raise PlainTalkRuntimeError("Maximum recursion depth exceeded", line) from None
        finally:
            self.context.variables = saved

        if isinstance(result, ReturnValue):
            return result.value
        return None

    # Built-in functions

    async def _builtin_say(self, args: List[Any], line: int) -> None:
        """Built-in: say(value, ...) -> one line of output"""
        self.context.output(" ".join(format_value(arg) for arg in args), Severity.INFO)
        return None

    async def _builtin_display(self, args: List[Any], line: int) -> None:
        """Built-in: display(value, ...) -> output without a line break"""
        self.context.output(" ".join(format_value(arg) for arg in args) + NO_NEWLINE, Severity.INFO)
        return None

    async def _builtin_ask(self, args: List[Any], line: int) -> Any:
        """Built-in: ask(prompt) -> answer, as a number when it reads as one"""
        prompt = format_value(args[0]) if args else ""
        answer = await self.context.input(prompt)
        if answer is None:
            return None
        return coerce_input(answer)

    async def _builtin_random(self, args: List[Any], line: int) -> Any:
        """Built-in: random() / random(n) -> [0, n) / random(a, b) -> [a, b]"""
        for arg in args:
            if not is_number(arg):
                raise PlainTalkRuntimeError(f"random expects numbers, got {type_name(arg)}",
                                            line, E_TYPE_ERROR)
        if not args:
            return random.random()
        if len(args) == 1:
            return math.floor(random.random() * args[0])
        if len(args) == 2:
            low, high = args
            return math.floor(random.random() * (high - low + 1)) + low
        raise PlainTalkRuntimeError(f"random expects at most 2 arguments, got {len(args)}",
                                    line, E_ARGUMENT_ERROR)

    async def _builtin_length(self, args: List[Any], line: int) -> int:
        """Built-in: length(value) -> number of items or characters"""
        if len(args) != 1:
            raise PlainTalkRuntimeError(f"length expects 1 argument, got {len(args)}", line, E_ARGUMENT_ERROR)
        value = args[0]
        if isinstance(value, (str, list, dict)):
            return len(value)
        raise PlainTalkRuntimeError(f"Cannot take the length of {type_name(value)}", line, E_TYPE_ERROR)

    async def _builtin_terminate(self, args: List[Any], line: int) -> None:
        """Built-in: terminate() -> end the program and its timers"""
        self.context.output(TERMINATE_MESSAGE, Severity.SYSTEM)
        self.stop()
        return None


__all__ = [
    'ReturnValue',
    'PlainTalkInterpreter',
]
