"""
Intcode VM: Interpreter

Owns the tape and the program counter and drives the
fetch/decode/dispatch loop:

  1. Fetch the instruction word at the counter
  2. Look up the operation for its opcode
  3. Decode the modes of that operation's parameters and read them
  4. Execute the operation with an ExecutionContext
  5. Apply the returned ControlSignal (advance, jump, halt, suspend)

State machine:

    UNINITIALIZED --run--> RUNNING --HALT--> HALTED      (terminal)
                              |  ^
                       Suspend|  |run
                              v  |
                           SUSPENDED

Errors raised while executing an instruction abort the loop and propagate;
the counter is left on the faulting instruction.
"""

from __future__ import annotations
import enum
import logging
from typing import Iterable, List, Optional, Tuple, Union

from .decoder import Instruction, opcode_of
from .errors import OutOfBoundsAddressError
from .memory import DEFAULT_DELIMITER, Tape
from .opcodes import (
    Advance, ControlSignal, ExecutionContext, Halt, Jump, Operation, OperationTable, Suspend,
)

logger = logging.getLogger(__name__)


class ExecutionState(enum.Enum):
    UNINITIALIZED = 'uninitialized'
    RUNNING = 'running'
    HALTED = 'halted'
    SUSPENDED = 'suspended'


class Interpreter:
    """Intcode interpreter.

    Usage:
        vm = Interpreter("1,0,0,0,99").run()
        vm.result()   # 2
        vm.program    # [2, 0, 0, 0, 99]

    The opcode table is copied at construction, so overriding entries on
    the caller's table afterwards does not affect this instance.
    """

    def __init__(self, program: Union[str, Iterable[int]],
                 opcodes: Optional[OperationTable] = None,
                 delimiter: str = DEFAULT_DELIMITER):
        if isinstance(program, str):
            self.tape = Tape.parse(program, delimiter)
        else:
            self.tape = Tape(program)
        self.opcodes = (opcodes if opcodes is not None else OperationTable()).copy()
        self.pointer = 0
        self.state = ExecutionState.UNINITIALIZED
        self.steps = 0

        self._trace = False
        self._trace_output: List[str] = []

    # ══════════════════════════════════════════════
    # Execution
    # ══════════════════════════════════════════════

    def run(self) -> "Interpreter":
        """Execute until the program halts or an operation suspends it."""
        if self.halted:
            logger.debug("run() on a halted program, nothing to do")
            return self

        if self.suspended:
            logger.info(f"Resuming at {self.pointer}")
        self.state = ExecutionState.RUNNING

        while not (self.halted or self.suspended):
            self._execute_next()

        return self

    def step(self) -> Optional[ControlSignal]:
        """Execute one instruction. Returns its signal, or None if halted."""
        if self.halted:
            return None
        self.state = ExecutionState.RUNNING
        return self._execute_next()

    def decode(self) -> Instruction:
        """Decode the instruction at the counter without executing it."""
        return self._fetch()[1]

    def _fetch(self) -> Tuple[Operation, Instruction]:
        pc = self.pointer
        word = self.tape.read(pc)
        operation = self.opcodes.lookup(opcode_of(word, pc), pc)
        return operation, Instruction.decode(word, pc, operation.arity)

    def _execute_next(self) -> ControlSignal:
        pc = self.pointer
        operation, instruction = self._fetch()
        params = instruction.bind(self.tape.read(pc + i) for i in range(1, instruction.length))

        signal = operation.execute(ExecutionContext(self.tape, instruction), params)
        self.steps += 1

        if self._trace:
            line = f"{pc:>5}: {operation.name:<5} {' '.join(str(p) for p in params):<24} -> {signal}"
            self._trace_output.append(line)
            logger.debug(line)

        self._apply(signal)
        return signal

    def _apply(self, signal: ControlSignal):
        if isinstance(signal, Advance):
            self.pointer += signal.length
        elif isinstance(signal, Jump):
            if not 0 <= signal.address < len(self.tape):
                raise OutOfBoundsAddressError(signal.address, len(self.tape))
            self.pointer = signal.address
        elif isinstance(signal, Halt):
            self.state = ExecutionState.HALTED
            logger.info(f"Halted at {self.pointer} after {self.steps} instructions")
        elif isinstance(signal, Suspend):
            self.state = ExecutionState.SUSPENDED
            logger.info(f"Suspended at {self.pointer}")
        else:
            raise TypeError(f"Unknown control signal: {signal!r}")

    # ══════════════════════════════════════════════
    # Results and state
    # ══════════════════════════════════════════════

    def result(self) -> int:
        """Value at address 0, where programs leave their answer."""
        return self.tape.read(0)

    def read_last(self) -> int:
        return self.tape.read(len(self.tape) - 1)

    @property
    def program(self) -> List[int]:
        return self.tape.to_list()

    @property
    def halted(self) -> bool:
        return self.state is ExecutionState.HALTED

    @property
    def suspended(self) -> bool:
        return self.state is ExecutionState.SUSPENDED

    @property
    def running(self) -> bool:
        return self.state is ExecutionState.RUNNING

    @property
    def uninitialized(self) -> bool:
        return self.state is ExecutionState.UNINITIALIZED

    # ══════════════════════════════════════════════
    # Trace / Debug
    # ══════════════════════════════════════════════

    def enable_trace(self, enable: bool = True):
        """Record a line per executed instruction (also logged at DEBUG)."""
        self._trace = enable

    def get_trace(self) -> str:
        return '\n'.join(self._trace_output)

    def clear_trace(self):
        self._trace_output.clear()

    def __repr__(self) -> str:
        return (f"Interpreter(state={self.state.value}, pointer={self.pointer}, "
                f"size={len(self.tape)}, steps={self.steps})")
