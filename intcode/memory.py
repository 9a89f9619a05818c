"""
Intcode VM: Memory Tape

The tape is a flat list of signed integers that holds both the program and
its data. Instructions, operands and scratch values share one address space
and any of them may be overwritten while the program runs.

Unlike a Python list, the tape never wraps negative indexes and never grows:
every address must satisfy 0 <= address < len(tape).
"""

from __future__ import annotations
import re
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .errors import MalformedProgramError, OutOfBoundsAddressError

DEFAULT_DELIMITER = ','

_INT_TOKEN = re.compile(r'[+-]?[0-9]+')


class Tape:
    """Bounds-checked, mutable integer memory."""

    def __init__(self, values: Iterable[int] = ()):
        self._cells: List[int] = []
        for index, value in enumerate(values):
            if isinstance(value, bool) or not isinstance(value, int):
                raise MalformedProgramError("expected an integer", index, repr(value))
            self._cells.append(value)

    @classmethod
    def parse(cls, text: str, delimiter: str = DEFAULT_DELIMITER) -> "Tape":
        """Parse program text such as ``"1,0,0,0,99"`` into a tape.

        Whitespace around each token is ignored (a trailing newline from a
        file is fine). Blank text and non-integer tokens raise
        MalformedProgramError.
        """
        if len(delimiter) != 1:
            raise ValueError(f"Delimiter must be a single character, got {delimiter!r}")
        if not text.strip():
            raise MalformedProgramError("program is empty")

        values = []
        for index, token in enumerate(text.strip().split(delimiter)):
            token = token.strip()
            if not _INT_TOKEN.fullmatch(token):
                raise MalformedProgramError("not a base-10 integer", index, token)
            try:
                values.append(int(token))
            except ValueError as exc:
                # int() caps the digit count (sys.set_int_max_str_digits)
                raise MalformedProgramError(str(exc), index, token) from None
        return cls(values)

    # --- Core read/write ---

    def read(self, address: int) -> int:
        self._check(address)
        return self._cells[address]

    def write(self, address: int, value: int):
        self._check(address)
        self._cells[address] = value

    def _check(self, address: int):
        if not 0 <= address < len(self._cells):
            raise OutOfBoundsAddressError(address, len(self._cells))

    def __getitem__(self, address: int) -> int:
        return self.read(address)

    def __len__(self) -> int:
        return len(self._cells)

    def __iter__(self) -> Iterator[int]:
        return iter(self._cells)

    def __repr__(self) -> str:
        return f"Tape({self._cells!r})"

    # --- Serialization ---

    def to_list(self) -> List[int]:
        return list(self._cells)

    def serialize(self, delimiter: str = DEFAULT_DELIMITER) -> str:
        """Inverse of parse()."""
        return delimiter.join(str(v) for v in self._cells)

    # --- Snapshots ---

    def snapshot(self) -> Tuple[int, ...]:
        """Capture the tape for later diffing."""
        return tuple(self._cells)

    @staticmethod
    def diff_snapshots(snap_a: Tuple[int, ...],
                       snap_b: Tuple[int, ...]) -> Dict[int, tuple]:
        """Compare two snapshots, return {address: (old, new)} for changes.

        Snapshots of different lengths are compared over the shorter one.
        """
        changes = {}
        for i in range(min(len(snap_a), len(snap_b))):
            if snap_a[i] != snap_b[i]:
                changes[i] = (snap_a[i], snap_b[i])
        return changes

    # --- Dump ---

    def dump(self, start: int = 0, length: Optional[int] = None, width: int = 8) -> str:
        """Format a region of the tape as address-prefixed rows."""
        end = len(self._cells) if length is None else min(len(self._cells), start + length)
        cell_width = max((len(str(v)) for v in self._cells[start:end]), default=1)
        addr_width = len(str(max(end - 1, 0)))
        lines = []
        for row in range(start, end, width):
            cells = ' '.join(f'{v:>{cell_width}}' for v in self._cells[row:min(row + width, end)])
            lines.append(f'{row:>{addr_width}}: {cells}')
        return '\n'.join(lines)
