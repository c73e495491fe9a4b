"""
PlainTalk Engine

The host-facing API. One engine owns one RuntimeContext for its whole
lifetime; repeated execute() calls share the same variable tables and
registries, and each one cancels the timers left behind by the previous
program.

Example:
    >>> import asyncio
    >>> messages = []
    >>> engine = PlainTalkEngine(output=lambda msg, severity: messages.append(msg))
    >>> asyncio.run(engine.execute('set x to 10\\nadd 5 to x\\nsay x'))
    >>> messages
    ['15']
"""

import logging
from typing import Any, Dict, List, Optional

from .context import InputCallback, OutputCallback, RuntimeContext, Severity
from .errors import LexError, ParseError
from .interpreter import PlainTalkInterpreter
from .lexer import tokenize
from .parser import parse

logger = logging.getLogger("plaintalk.engine")


class PlainTalkEngine:
    """Tokenize, parse and run PlainTalk source"""

    def __init__(self, output: Optional[OutputCallback] = None, input: Optional[InputCallback] = None):
        """
        Initialize engine

        Args:
            output: Called with (message, severity) for every line of output
            input: Awaitable called with a prompt; resolves to the answer text
        """
        self.context = RuntimeContext()
        if output is not None:
            self.context.output = output
        if input is not None:
            self.context.input = input
        self.interpreter = PlainTalkInterpreter(self.context)

    async def execute(self, source: str):
        """
        Run source text

        Lex and parse faults are reported as "Syntax Error: ..." on the output
        channel; nothing of a malformed program runs.
        """
        self.interpreter.stop()

        try:
            program = parse(tokenize(source))
        except (LexError, ParseError) as e:
            logger.warning("Syntax fault: %s", e)
            self.context.output(f"Syntax Error: {e.describe()}", Severity.ERROR)
            return

        await self.interpreter.execute(program)

    async def trigger_event(self, name: str):
        """Run a registered event body; no-op for unknown names"""
        await self.interpreter.trigger_event(name)

    def stop(self):
        """Cancel all timers and halt execution"""
        self.interpreter.stop()

    def is_running(self) -> bool:
        return self.interpreter.is_running()

    async def wait(self):
        """Resolve once no timers remain scheduled"""
        await self.interpreter.wait()

    def get_variables(self) -> Dict[str, Any]:
        """Local and global variables merged; globals win"""
        return self.context.snapshot()

    def get_functions(self) -> List[str]:
        return list(self.context.functions)

    def get_events(self) -> List[str]:
        return list(self.context.events)


__all__ = [
    'PlainTalkEngine',
]
