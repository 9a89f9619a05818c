"""
Intcode VM: Operation Table

Maps opcode numbers to Operation values (name, arity, handler). The default
set covers opcodes 1-8 and 99; any entry can be replaced per table, which is
how a host swaps console I/O for scripted channels.

Handler contract:
    handler(context, *params) -> ControlSignal | None

``params`` are decoded Parameter descriptors, one per declared arity slot.
The handler reads operands with ``context.value(p)``, writes with
``context.write(p, v)`` and returns one of the control signals below.
Returning None means "advance past this instruction".

    Advance(length)  move the counter past opcode + parameters
    Jump(address)    set the counter to ``address``
    Halt()           stop for good
    Suspend()        pause; the counter stays on this instruction so the
                     next run() retries it
"""

from __future__ import annotations
import enum
import inspect
import logging
from dataclasses import dataclass
from typing import Callable, Deque, Dict, List, Mapping, Optional, Tuple, Union

from .channels import ConsoleInput, ConsoleOutput
from .decoder import Instruction, Parameter
from .errors import InvalidWriteTargetError, UnknownOpcodeError
from .memory import Tape

logger = logging.getLogger(__name__)

MAX_ARITY = 3
MAX_OPCODE = 99


# ──────────────────────────────────────────────
# Control signals
# ──────────────────────────────────────────────

class ControlSignal:
    """Base for the transitions an operation can request."""
    __slots__ = ()


@dataclass(frozen=True)
class Advance(ControlSignal):
    length: int


@dataclass(frozen=True)
class Jump(ControlSignal):
    address: int


@dataclass(frozen=True)
class Halt(ControlSignal):
    pass


@dataclass(frozen=True)
class Suspend(ControlSignal):
    pass


# ──────────────────────────────────────────────
# Execution context
# ──────────────────────────────────────────────

class ExecutionContext:
    """Access an operation gets to the VM for the duration of one dispatch."""

    __slots__ = ('tape', 'instruction')

    def __init__(self, tape: Tape, instruction: Instruction):
        self.tape = tape
        self.instruction = instruction

    @property
    def counter(self) -> int:
        return self.instruction.address

    def value(self, param: Parameter) -> int:
        """Resolve an operand through its addressing mode."""
        if param.immediate:
            return param.raw
        return self.tape.read(param.raw)

    def write(self, param: Parameter, value: int):
        """Store ``value`` at the address named by a position-mode operand."""
        if param.immediate:
            raise InvalidWriteTargetError(param.position, self.counter)
        self.tape.write(param.raw, value)

    def advance(self) -> Advance:
        return Advance(self.instruction.length)

    def jump(self, address: int) -> Jump:
        return Jump(address)

    def halt(self) -> Halt:
        return Halt()

    def suspend(self) -> Suspend:
        return Suspend()


# ──────────────────────────────────────────────
# Operations
# ──────────────────────────────────────────────

Handler = Callable[..., Optional[ControlSignal]]


@dataclass(frozen=True)
class Operation:
    name: str
    arity: int
    handler: Handler

    def __post_init__(self):
        if not 0 <= self.arity <= MAX_ARITY:
            raise ValueError(f"{self.name}: arity must be 0-{MAX_ARITY}, got {self.arity}")

    @classmethod
    def from_function(cls, fn: Handler, name: Optional[str] = None) -> "Operation":
        """Wrap a plain handler, taking arity from its signature.

        The first positional argument is the context; the rest are operands.
        """
        params = [p for p in inspect.signature(fn).parameters.values()
                  if p.default is p.empty]
        for p in params:
            if p.kind not in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD):
                raise ValueError(f"Handler {fn!r} must take fixed positional arguments")
        if not params:
            raise ValueError(f"Handler {fn!r} must accept an execution context")
        return cls(name or getattr(fn, '__name__', 'custom'), len(params) - 1, fn)

    def execute(self, context: ExecutionContext, params: Tuple[Parameter, ...]) -> ControlSignal:
        if len(params) != self.arity:
            raise ValueError(f"{self.name} takes {self.arity} parameters, got {len(params)}")
        signal = self.handler(context, *params)
        if signal is None:
            return context.advance()
        if not isinstance(signal, ControlSignal):
            raise TypeError(f"{self.name} returned {signal!r}, expected a ControlSignal")
        return signal


class Opcode(enum.IntEnum):
    ADD = 1
    MUL = 2
    IN = 3
    OUT = 4
    JNZ = 5
    JZ = 6
    LT = 7
    EQ = 8
    HALT = 99


# ── Default handlers ──

def _op_add(ctx, a, b, c):
    ctx.write(c, ctx.value(a) + ctx.value(b))
    return ctx.advance()


def _op_mul(ctx, a, b, c):
    ctx.write(c, ctx.value(a) * ctx.value(b))
    return ctx.advance()


def _op_jnz(ctx, a, b):
    if ctx.value(a) != 0:
        return ctx.jump(ctx.value(b))
    return ctx.advance()


def _op_jz(ctx, a, b):
    if ctx.value(a) == 0:
        return ctx.jump(ctx.value(b))
    return ctx.advance()


def _op_lt(ctx, a, b, c):
    ctx.write(c, 1 if ctx.value(a) < ctx.value(b) else 0)
    return ctx.advance()


def _op_eq(ctx, a, b, c):
    ctx.write(c, 1 if ctx.value(a) == ctx.value(b) else 0)
    return ctx.advance()


def _op_halt(ctx):
    return ctx.halt()


# ── I/O operation factories ──

def input_operation(source: Callable[[], int], name: str = 'IN') -> Operation:
    """Opcode-3 style operation: tape[a] = source()."""
    def _op_in(ctx, a):
        ctx.write(a, source())
        return ctx.advance()
    return Operation(name, 1, _op_in)


def output_operation(sink: Callable[[int], None], name: str = 'OUT') -> Operation:
    """Opcode-4 style operation: sink(value(a))."""
    def _op_out(ctx, a):
        sink(ctx.value(a))
        return ctx.advance()
    return Operation(name, 1, _op_out)


def constant_input_operation(value: int) -> Operation:
    """Input operation that always reads ``value``."""
    return input_operation(lambda: value)


def queued_input_operation(queue: Deque[int], name: str = 'IN') -> Operation:
    """Input operation that suspends the VM while ``queue`` is empty.

    The host appends to the deque and calls run() again; the suspended
    instruction is then retried from the same counter.
    """
    def _op_in_queued(ctx, a):
        if not queue:
            logger.debug(f"@{ctx.counter}: input queue empty, suspending")
            return ctx.suspend()
        ctx.write(a, queue.popleft())
        return ctx.advance()
    return Operation(name, 1, _op_in_queued)


def default_operations(input_source: Callable[[], int],
                       output_sink: Callable[[int], None]) -> Dict[int, Operation]:
    return {
        Opcode.ADD: Operation('ADD', 3, _op_add),
        Opcode.MUL: Operation('MUL', 3, _op_mul),
        Opcode.IN: input_operation(input_source),
        Opcode.OUT: output_operation(output_sink),
        Opcode.JNZ: Operation('JNZ', 2, _op_jnz),
        Opcode.JZ: Operation('JZ', 2, _op_jz),
        Opcode.LT: Operation('LT', 3, _op_lt),
        Opcode.EQ: Operation('EQ', 3, _op_eq),
        Opcode.HALT: Operation('HALT', 0, _op_halt),
    }


# ──────────────────────────────────────────────
# Table
# ──────────────────────────────────────────────

OperationLike = Union[Operation, Handler]


class OperationTable:
    """Opcode -> Operation mapping, seeded with the defaults.

    Usage:
        table = OperationTable({3: lambda ctx, a: ctx.write(a, 5)})
        table.override(4, output_operation(results.append))
    """

    def __init__(self, overrides: Optional[Mapping[int, OperationLike]] = None,
                 input_source: Optional[Callable[[], int]] = None,
                 output_sink: Optional[Callable[[int], None]] = None):
        self._operations: Dict[int, Operation] = {
            int(opcode): op for opcode, op in default_operations(
                input_source if input_source is not None else ConsoleInput(),
                output_sink if output_sink is not None else ConsoleOutput(),
            ).items()
        }
        for opcode, operation in (overrides or {}).items():
            self.override(opcode, operation)

    def lookup(self, opcode: int, address: Optional[int] = None) -> Operation:
        operation = self._operations.get(opcode)
        if operation is None:
            raise UnknownOpcodeError(opcode, address)
        return operation

    def override(self, opcode: int, operation: OperationLike):
        """Replace or insert the operation for ``opcode``."""
        if isinstance(opcode, bool) or not isinstance(opcode, int) or not 0 <= opcode <= MAX_OPCODE:
            raise ValueError(f"Opcode must be an integer 0-{MAX_OPCODE}, got {opcode!r}")
        if not isinstance(operation, Operation):
            if not callable(operation):
                raise TypeError(f"Opcode {opcode}: expected an Operation or callable, got {operation!r}")
            operation = Operation.from_function(operation, name=f'OP{int(opcode)}')
        if opcode in self._operations:
            logger.debug(f"Overriding opcode {opcode}: {self._operations[opcode].name} -> {operation.name}")
        self._operations[int(opcode)] = operation

    def copy(self) -> "OperationTable":
        clone = OperationTable.__new__(OperationTable)
        clone._operations = dict(self._operations)
        return clone

    def opcodes(self) -> List[int]:
        return sorted(self._operations)

    def __contains__(self, opcode: int) -> bool:
        return opcode in self._operations

    def __len__(self) -> int:
        return len(self._operations)

    def __repr__(self) -> str:
        entries = ', '.join(f'{op}:{self._operations[op].name}' for op in self.opcodes())
        return f"OperationTable({entries})"
