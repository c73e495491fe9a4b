"""
PlainTalk command line host

    plaintalk run program.pt [--trigger EVENT ...] [--timeout SECONDS]
    plaintalk tokens program.pt
    plaintalk parse program.pt
    plaintalk examples [NAME]
"""

import argparse
import asyncio
import json
import logging
import os
import sys
from typing import List, Optional

from .context import NO_NEWLINE, Severity
from .engine import PlainTalkEngine
from .errors import LexError, ParseError
from .examples import EXAMPLE_SCRIPTS
from .lexer import tokenize
from .nodes import to_dict
from .parser import parse

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


class ConsoleHost:
    """Output and input callbacks backed by the terminal"""

    def __init__(self):
        self.errors = 0

    def output(self, message: str, severity: str):
        if severity == Severity.ERROR:
            self.errors += 1
            print(message, file=sys.stderr)
        elif message.endswith(NO_NEWLINE):
            print(message[:-len(NO_NEWLINE)], end="", flush=True)
        else:
            print(message)

    async def input(self, prompt: str) -> str:
        # input() blocks, so it runs in a worker thread to keep timers ticking
        return await asyncio.to_thread(_read_line, prompt)


def _read_line(prompt: str) -> str:
    try:
        return input(f"{prompt} ")
    except EOFError:
        return ""


def _read_source(path: str) -> str:
    if not os.path.exists(path):
        print(f"Error: File '{path}' not found.", file=sys.stderr)
        sys.exit(1)
    with open(path, encoding="utf-8") as f:
        return f.read()


async def run_program(engine: PlainTalkEngine, source: str, triggers: List[str],
                      timeout: Optional[float] = None):
    """Execute source, fire triggered events, then wait for timers"""
    await engine.execute(source)
    for name in triggers:
        await engine.trigger_event(name)

    if timeout is None:
        await engine.wait()
        return

    try:
        await asyncio.wait_for(engine.wait(), timeout)
    except asyncio.TimeoutError:
        engine.stop()


def cmd_run(args) -> int:
    source = _read_source(args.file)
    host = ConsoleHost()
    engine = PlainTalkEngine(output=host.output, input=host.input)

    try:
        asyncio.run(run_program(engine, source, args.trigger, args.timeout))
    except KeyboardInterrupt:
        engine.stop()
        return 130

    return 1 if host.errors else 0


def cmd_tokens(args) -> int:
    source = _read_source(args.file)
    try:
        tokens = tokenize(source)
    except LexError as e:
        print(f"Syntax Error: {e.describe()}", file=sys.stderr)
        return 1

    for token in tokens:
        print(f"{token.line}:{token.column}\t{token.type}\t{token.value!r}")
    return 0


def cmd_parse(args) -> int:
    source = _read_source(args.file)
    try:
        program = parse(tokenize(source))
    except (LexError, ParseError) as e:
        print(f"Syntax Error: {e.describe()}", file=sys.stderr)
        return 1

    print(json.dumps(to_dict(program), indent=2))
    return 0


def cmd_examples(args) -> int:
    if args.name is None:
        for name in EXAMPLE_SCRIPTS:
            print(name)
        return 0

    source = EXAMPLE_SCRIPTS.get(args.name)
    if source is None:
        print(f"Error: Unknown example '{args.name}'.", file=sys.stderr)
        return 1

    print(source, end="")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="plaintalk", description="Run PlainTalk programs.")
    parser.add_argument("--log-level", default="WARNING", choices=LOG_LEVELS,
                        help="Logging level (default: WARNING).")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run = subparsers.add_parser("run", help="Run a program.")
    run.add_argument("file", type=str, help="Path to the program source.")
    run.add_argument("--trigger", action="append", default=[], metavar="EVENT",
                     help="Trigger a named event after the program starts (repeatable).")
    run.add_argument("--timeout", type=float, default=None, metavar="SECONDS",
                     help="Stop timers after this many seconds.")
    run.set_defaults(func=cmd_run)

    tokens = subparsers.add_parser("tokens", help="Print the token stream of a program.")
    tokens.add_argument("file", type=str, help="Path to the program source.")
    tokens.set_defaults(func=cmd_tokens)

    dump = subparsers.add_parser("parse", help="Print the syntax tree of a program as JSON.")
    dump.add_argument("file", type=str, help="Path to the program source.")
    dump.set_defaults(func=cmd_parse)

    examples = subparsers.add_parser("examples", help="List example programs or print one.")
    examples.add_argument("name", type=str, nargs="?", default=None, help="Example name.")
    examples.set_defaults(func=cmd_examples)

    return parser


def main(argv: Optional[List[str]] = None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level),
                        format="%(levelname)s %(name)s: %(message)s")
    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
