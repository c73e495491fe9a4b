"""
PlainTalk Runtime Context

Mutable state shared by the interpreter and its host: variable tables,
function and event registries, and the host's output and input callbacks.
"""

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict


# ============================================================================
# Constants
# ============================================================================

# Appended to a message by "display" so the host keeps the cursor on the line
NO_NEWLINE = "\0NO_NEWLINE"

MS_PER_SECOND = 1000

TERMINATE_MESSAGE = "[SYSTEM] Execution completed."


class Severity:
    """Output severities understood by hosts"""
    INFO = "info"
    ERROR = "error"
    SUCCESS = "success"
    WARNING = "warning"
    SYSTEM = "system"


OutputCallback = Callable[[str, str], None]
InputCallback = Callable[[str], Awaitable[str]]


async def _no_input(prompt: str) -> str:
    return ""


def _discard_output(message: str, severity: str = Severity.INFO):
    pass


# ============================================================================
# Context
# ============================================================================

@dataclass
class RuntimeContext:
    """Variable tables, registries and host callbacks"""
    variables: Dict[str, Any] = field(default_factory=dict)
    global_variables: Dict[str, Any] = field(default_factory=dict)
    functions: Dict[str, Any] = field(default_factory=dict)
    events: Dict[str, Any] = field(default_factory=dict)
    output: OutputCallback = _discard_output
    input: InputCallback = _no_input

    def lookup(self, name: str, is_global: bool = False) -> Any:
        """Local table first, then global; raises KeyError when absent"""
        if not is_global and name in self.variables:
            return self.variables[name]
        return self.global_variables[name]

    def has(self, name: str, is_global: bool = False) -> bool:
        if not is_global and name in self.variables:
            return True
        return name in self.global_variables

    def assign(self, name: str, value: Any, is_global: bool = False):
        """Writes go to the local table unless is_global"""
        if is_global:
            self.global_variables[name] = value
        else:
            self.variables[name] = value

    def delete(self, name: str, is_global: bool = False) -> bool:
        table = self.global_variables if is_global else self.variables
        if name in table:
            del table[name]
            return True
        return False

    def register_event(self, event_type: str, event: Any):
        """Later declarations of the same event replace earlier ones"""
        self.events[event_type] = event

    def snapshot(self) -> Dict[str, Any]:
        """Merged view of both tables; globals win on collision"""
        merged = dict(self.variables)
        merged.update(self.global_variables)
        return merged


__all__ = [
    'NO_NEWLINE',
    'MS_PER_SECOND',
    'TERMINATE_MESSAGE',
    'Severity',
    'RuntimeContext',
]
