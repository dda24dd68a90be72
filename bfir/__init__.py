from .instructions import (
    Increment,
    Instruction,
    Loop,
    PointerIncrement,
    Read,
    Set,
    Write,
    format_instruction,
    format_program,
)
from .parser import ParseError, UnbalancedLoopError, find_close, parse, parse_between, parse_iterative

__all__ = [
    "Instruction",
    "Increment",
    "Set",
    "PointerIncrement",
    "Read",
    "Write",
    "Loop",
    "format_instruction",
    "format_program",
    "ParseError",
    "UnbalancedLoopError",
    "find_close",
    "parse",
    "parse_between",
    "parse_iterative",
]
