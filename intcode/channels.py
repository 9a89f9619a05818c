"""
Intcode VM: I/O Channels

Callables that back the input (opcode 3) and output (opcode 4) operations.
An input channel is ``() -> int``; an output channel is ``(int) -> None``.
Each is called exactly once per executed I/O instruction, in program order.
"""

from __future__ import annotations
import logging
from collections import deque
from typing import Callable, Iterable, List

from .errors import InputExhaustedError

logger = logging.getLogger(__name__)

INPUT_PROMPT = 'Input > '
OUTPUT_PREFIX = 'Output: '


class ConsoleInput:
    """Prompt on stdin until the user types an integer."""

    def __init__(self, prompt: str = INPUT_PROMPT, reader: Callable[[str], str] = input):
        self.prompt = prompt
        self._reader = reader

    def __call__(self) -> int:
        while True:
            text = self._reader(self.prompt).strip()
            try:
                return int(text)
            except ValueError:
                logger.warning(f"Not an integer: {text!r}, try again")


class ConsoleOutput:
    def __init__(self, prefix: str = OUTPUT_PREFIX, writer: Callable[[str], None] = print):
        self.prefix = prefix
        self._writer = writer

    def __call__(self, value: int):
        self._writer(f"{self.prefix}{value}")


class ScriptedInput:
    """Feed a fixed sequence of values, then fail loudly."""

    def __init__(self, values: Iterable[int] = ()):
        self._values = deque(int(v) for v in values)
        self.consumed = 0

    def __call__(self) -> int:
        if not self._values:
            raise InputExhaustedError(f"Scripted input exhausted after {self.consumed} values")
        self.consumed += 1
        return self._values.popleft()

    @property
    def remaining(self) -> int:
        return len(self._values)


class CollectingOutput:
    """Record every emitted value in ``values``."""

    def __init__(self):
        self.values: List[int] = []

    def __call__(self, value: int):
        self.values.append(value)
