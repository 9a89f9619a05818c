"""
Error hierarchy for the Intcode VM.

Every fault raised by the tape, the decoder or the interpreter derives from
IntcodeError, so a host can catch one type and still tell the kinds apart.
None of these are recoverable inside the run loop: the interpreter stops,
leaves the counter on the failing instruction and lets the error propagate.
"""

from __future__ import annotations
from typing import Optional

__all__ = [
    'IntcodeError',
    'UnknownOpcodeError',
    'UnknownParameterModeError',
    'OutOfBoundsAddressError',
    'InvalidWriteTargetError',
    'MalformedProgramError',
    'InputExhaustedError',
]


class IntcodeError(Exception):
    """Base class for all VM faults."""
    def __init__(self, message: str, address: Optional[int] = None):
        self.address = address
        super().__init__(f"@{address}: {message}" if address is not None else message)


class UnknownOpcodeError(IntcodeError):
    """Decoded opcode has no registered operation."""
    def __init__(self, opcode: int, address: Optional[int] = None):
        self.opcode = opcode
        super().__init__(f"Unknown opcode: {opcode}", address)


class UnknownParameterModeError(IntcodeError):
    """Mode digit is neither position (0) nor immediate (1)."""
    def __init__(self, mode: int, position: int, address: Optional[int] = None):
        self.mode = mode
        self.position = position
        super().__init__(f"Unknown parameter mode {mode} for parameter {position}", address)


class OutOfBoundsAddressError(IntcodeError):
    """Memory address outside the tape."""
    def __init__(self, address: int, size: int):
        self.size = size
        super().__init__(f"Address out of bounds (tape size {size})", address)


class InvalidWriteTargetError(IntcodeError):
    """Write attempted through an immediate-mode parameter."""
    def __init__(self, position: int, address: Optional[int] = None):
        self.position = position
        super().__init__(f"Parameter {position} is immediate and cannot be written to", address)


class MalformedProgramError(IntcodeError):
    """Program text contains a token that is not an integer."""
    def __init__(self, message: str, index: Optional[int] = None, token: str = ""):
        self.index = index
        self.token = token
        if index is not None:
            message = f"Token {index} ({token!r}): {message}"
        super().__init__(message)


class InputExhaustedError(IntcodeError):
    """Scripted input channel has no values left."""
    pass
