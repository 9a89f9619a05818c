"""
Intcode VM: Instruction Decoder

An instruction word packs the opcode and the parameter modes in decimal:

    ABCDE
     1002
    DE - two-digit opcode      (02 = MUL)
     C - mode of parameter 0   (0 = position)
     B - mode of parameter 1   (1 = immediate)
     A - mode of parameter 2   (0 = position, omitted leading zero)

Modes are read least-significant first after the opcode digits. Digits that
are absent default to position mode.

Parameter modes:
  POSITION   the raw parameter is an address; its value is tape[raw]
  IMMEDIATE  the raw parameter is the value itself
"""

from __future__ import annotations
import enum
from dataclasses import dataclass
from typing import Optional, Tuple

from .errors import UnknownOpcodeError, UnknownParameterModeError


class ParameterMode(enum.IntEnum):
    POSITION = 0
    IMMEDIATE = 1


POSITION = ParameterMode.POSITION
IMMEDIATE = ParameterMode.IMMEDIATE


def opcode_of(word: int, address: Optional[int] = None) -> int:
    """Low two decimal digits of an instruction word."""
    if word < 0:
        raise UnknownOpcodeError(word, address)
    return word % 100


def mode_digit(word: int, position: int) -> int:
    """Raw mode digit for parameter ``position`` (0 when absent)."""
    return (abs(word) // 10 ** (position + 2)) % 10


def parameter_mode(word: int, position: int) -> ParameterMode:
    digit = mode_digit(word, position)
    try:
        return ParameterMode(digit)
    except ValueError:
        raise UnknownParameterModeError(digit, position) from None


@dataclass(frozen=True)
class Parameter:
    """One operand of a decoded instruction."""
    raw: int
    position: int
    mode: ParameterMode = POSITION

    @property
    def immediate(self) -> bool:
        return self.mode is IMMEDIATE

    def __str__(self) -> str:
        return f'#{self.raw}' if self.immediate else f'[{self.raw}]'


@dataclass(frozen=True)
class Instruction:
    """Decoded instruction word at ``address``."""
    address: int
    word: int
    opcode: int
    modes: Tuple[ParameterMode, ...] = ()

    @classmethod
    def decode(cls, word: int, address: int = 0, arity: int = 0) -> "Instruction":
        """Decode opcode and the modes of the first ``arity`` parameters."""
        opcode = opcode_of(word, address)
        modes = []
        for position in range(arity):
            try:
                modes.append(parameter_mode(word, position))
            except UnknownParameterModeError as exc:
                raise UnknownParameterModeError(exc.mode, position, address) from None
        return cls(address, word, opcode, tuple(modes))

    @property
    def arity(self) -> int:
        return len(self.modes)

    @property
    def length(self) -> int:
        """Words occupied on the tape, opcode included."""
        return self.arity + 1

    def bind(self, raws) -> Tuple[Parameter, ...]:
        """Pair raw operand values with this instruction's modes."""
        return tuple(Parameter(raw, pos, mode)
                     for pos, (raw, mode) in enumerate(zip(raws, self.modes)))
