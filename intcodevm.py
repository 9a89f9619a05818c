#!/usr/bin/env python3
"""
intcodevm: run an Intcode program

Usage:
    python intcodevm.py <program.txt> [-i VALUE ...] [--trace] [--dump] [-v|-q]
    python intcodevm.py --source "3,0,4,0,99" -i 7

Without -i the program reads input interactively ("Input > ").
With -i values are fed in order; running out of them is an error.

Exit codes:
    0  program halted
    1  VM error (unknown opcode, bad address, malformed program, ...)
    2  internal error
"""

import argparse
import logging
import sys
from pathlib import Path

from intcode import __version__
from intcode.channels import ScriptedInput
from intcode.errors import (
    IntcodeError, InputExhaustedError, InvalidWriteTargetError, MalformedProgramError,
    OutOfBoundsAddressError, UnknownOpcodeError, UnknownParameterModeError,
)
from intcode.interpreter import Interpreter
from intcode.memory import DEFAULT_DELIMITER
from intcode.opcodes import Opcode, OperationTable, input_operation

logger = logging.getLogger("intcodevm")

EXIT_OK = 0
EXIT_VM_ERROR = 1
EXIT_INTERNAL = 2

_ERROR_KINDS = [
    (MalformedProgramError, "Malformed program"),
    (UnknownOpcodeError, "Unknown opcode"),
    (UnknownParameterModeError, "Parameter mode"),
    (OutOfBoundsAddressError, "Address"),
    (InvalidWriteTargetError, "Write target"),
    (InputExhaustedError, "Input"),
]


def _delimiter(text: str) -> str:
    if len(text) != 1:
        raise argparse.ArgumentTypeError(f"must be a single character, got {text!r}")
    return text


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="intcodevm",
        description="Intcode virtual machine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("program", help="Program file, or program text with --source")
    parser.add_argument("--source", "-s", action="store_true",
                        help="Treat the program argument as literal program text")
    parser.add_argument("--input", "-i", dest="inputs", action="append", type=int,
                        metavar="VALUE", help="Scripted input value (repeatable)")
    parser.add_argument("--delimiter", default=DEFAULT_DELIMITER, type=_delimiter,
                        help=f"Token delimiter (default: {DEFAULT_DELIMITER!r})")
    parser.add_argument("--trace", action="store_true",
                        help="Print an instruction trace to stderr after the run")
    parser.add_argument("--dump", action="store_true",
                        help="Print the final tape")
    parser.add_argument("--verbose", "-v", action="count", default=0,
                        help="Increase log verbosity (-v, -vv)")
    parser.add_argument("--quiet", "-q", action="store_true",
                        help="Only log errors")
    parser.add_argument("--log-file", help="Also write the log to this file")
    parser.add_argument("--version", action="version",
                        version=f"intcodevm {__version__}")
    return parser


def setup_logging(args):
    """Configure the root logger from -v/-q/--log-file."""
    if args.quiet:
        level = logging.ERROR
    elif args.verbose == 0:
        level = logging.WARNING
    elif args.verbose == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    handlers = [console]

    if args.log_file:
        log_path = Path(args.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))
        handlers.append(file_handler)

    logging.basicConfig(level=min(h.level for h in handlers), handlers=handlers, force=True)


def load_source(args) -> str:
    if args.source:
        return args.program
    return Path(args.program).read_text(encoding="utf-8")


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args)

    try:
        source = load_source(args)
    except OSError as e:
        print(f"Error reading {args.program}: {e}", file=sys.stderr)
        return EXIT_VM_ERROR

    table = OperationTable()
    scripted = None
    if args.inputs is not None:
        scripted = ScriptedInput(args.inputs)
        table.override(Opcode.IN, input_operation(scripted))

    vm = None
    try:
        vm = Interpreter(source, table, delimiter=args.delimiter)
        vm.enable_trace(args.trace)
        logger.info(f"Loaded {len(vm.tape)} words")
        vm.run()
    except IntcodeError as e:
        kind = next((label for cls, label in _ERROR_KINDS if isinstance(e, cls)), "VM")
        print(f"{kind} error: {e}", file=sys.stderr)
        return EXIT_VM_ERROR
    except Exception as e:
        print(f"Internal error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return EXIT_INTERNAL
    finally:
        if vm is not None:
            if args.trace:
                print(vm.get_trace(), file=sys.stderr)
            if args.dump:
                print(vm.tape.dump())

    if scripted is not None and scripted.remaining:
        logger.warning(f"{scripted.remaining} scripted input value(s) not consumed")
    logger.info(f"Result: {vm.result()}")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
