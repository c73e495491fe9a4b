"""
Pytest configuration and fixtures for plaintalk tests.
"""

import asyncio
import os
import sys

import pytest

# Add grandparent directory to path for imports (to find plaintalk package)
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from plaintalk import PlainTalkEngine, Severity


class RecordingHost:
    """Collects output and serves scripted answers to prompts"""

    def __init__(self):
        self.messages = []
        self.prompts = []
        self.answers = []

    def output(self, message, severity):
        self.messages.append((message, severity))

    async def input(self, prompt):
        self.prompts.append(prompt)
        if self.answers:
            return self.answers.pop(0)
        return ""

    def texts(self, severity=Severity.INFO):
        """Messages of one severity, in order"""
        return [message for message, sev in self.messages if sev == severity]

    @property
    def errors(self):
        return self.texts(Severity.ERROR)


@pytest.fixture
def host():
    """Fresh recording host"""
    return RecordingHost()


@pytest.fixture
def engine(host):
    """Engine wired to the recording host"""
    return PlainTalkEngine(output=host.output, input=host.input)


@pytest.fixture
def run(host, engine):
    """
    Run source on the engine and return the host.

    Usage:
        host = run('say 1', answers=['42'])
    """
    def _run(source, answers=()):
        host.answers.extend(answers)
        asyncio.run(engine.execute(source))
        return host
    return _run
