"""
Intcode VM
==========
A small virtual machine for programs encoded as comma-separated integers.

Architecture:
    ┌──────────┐    ┌──────────┐    ┌───────────┐    ┌────────────────┐
    │ Program  │───>│   Tape   │───>│  Decoder  │───>│ OperationTable │
    │ "1,0,.." │    │ (memory) │    │ (op+modes)│    │ (opcode -> op) │
    └──────────┘    └──────────┘    └───────────┘    └────────────────┘
                          ^                                  │
                          └──────── ControlSignal ───────────┘

    - memory.py:      bounds-checked integer tape, parse/serialize, snapshots
    - decoder.py:     opcode and parameter-mode decoding
    - opcodes.py:     default operations, overridable table, control signals
    - interpreter.py: fetch/decode/dispatch loop and run/halt/suspend states
    - channels.py:    console, scripted and collecting I/O channels
"""

__version__ = "0.1.0"

from typing import Iterable, List, Optional, Tuple, Union

from .errors import *
from .memory import Tape
from .decoder import Instruction, Parameter, ParameterMode, POSITION, IMMEDIATE
from .channels import CollectingOutput, ConsoleInput, ConsoleOutput, ScriptedInput
from .opcodes import (
    Advance, ControlSignal, ExecutionContext, Halt, Jump, Opcode, Operation,
    OperationTable, Suspend, constant_input_operation, input_operation,
    output_operation, queued_input_operation,
)
from .interpreter import ExecutionState, Interpreter


def run_program(source: Union[str, Iterable[int]], inputs: Optional[Iterable[int]] = None,
                opcodes: Optional[OperationTable] = None) -> Tuple[Interpreter, List[int]]:
    """Run a program to completion and collect what it outputs.

    Args:
        source: Program text ("1,0,0,0,99") or a sequence of integers.
        inputs: Values for opcode 3, in order. None reads from the console.
        opcodes: Base table. A copy is used, with opcode 4 rebound to the
            collector and opcode 3 rebound when ``inputs`` is given.

    Returns:
        (interpreter, outputs)
    """
    table = opcodes.copy() if opcodes is not None else OperationTable()
    output = CollectingOutput()
    if inputs is not None:
        table.override(Opcode.IN, input_operation(ScriptedInput(inputs)))
    table.override(Opcode.OUT, output_operation(output))
    interpreter = Interpreter(source, table).run()
    return interpreter, output.values
