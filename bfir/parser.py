from __future__ import annotations

from typing import List, Optional, Tuple

from .instructions import Increment, Instruction, Loop, PointerIncrement, Read, Write


class ParseError(Exception):
    pass


class UnbalancedLoopError(ParseError):
    """Raised when a '[' has no matching ']' before the end of the source."""

    def __init__(self, position: int) -> None:
        super().__init__(f"Unmatched '[' at position {position}")
        self.position = position


# Commands that map directly to a single node; '[' and ']' are handled apart.
_SIMPLE_COMMANDS = {
    "+": lambda: Increment(1),
    "-": lambda: Increment(-1),
    ">": lambda: PointerIncrement(1),
    "<": lambda: PointerIncrement(-1),
    ",": Read,
    ".": Write,
}


def parse(source: str) -> List[Instruction]:
    """Parse Brainfuck source into a list of IR instructions.

    Characters outside the eight command symbols are commentary and produce
    nothing. An unmatched '[' raises UnbalancedLoopError; a stray ']' is
    ignored like any other commentary character.
    """
    return parse_between(source, 0, len(source))


def parse_between(source: str, start: int, end: int) -> List[Instruction]:
    """Parse ``source[start:end]``, resolving loops against the whole source."""
    if not 0 <= start <= end <= len(source):
        raise ValueError(
            f"Invalid parse range {start}..{end} for source of length {len(source)}"
        )

    instructions: List[Instruction] = []
    index = start
    while index < end:
        char = source[index]
        factory = _SIMPLE_COMMANDS.get(char)
        if factory is not None:
            instructions.append(factory())
        elif char == "[":
            close_index = find_close(source, index)
            if close_index is None:
                raise UnbalancedLoopError(index)
            body = parse_between(source, index + 1, close_index)
            instructions.append(Loop(body))
            index = close_index
        index += 1
    return instructions


def find_close(source: str, open_index: int) -> Optional[int]:
    """Return the index of the ']' matching the '[' at ``open_index``.

    Returns None when the source ends before the loop is closed.
    """
    if not 0 <= open_index < len(source) or source[open_index] != "[":
        raise ValueError(f"No '[' at position {open_index}")

    nesting_depth = 0
    for index in range(open_index, len(source)):
        char = source[index]
        if char == "[":
            nesting_depth += 1
        elif char == "]":
            nesting_depth -= 1
        if nesting_depth == 0:
            return index
    return None


def parse_iterative(source: str) -> List[Instruction]:
    """Same result as :func:`parse`, built with an explicit stack.

    Deeply nested input does not consume Python call-stack frames here, so
    it cannot hit the interpreter's recursion limit.
    """
    # Each frame is (instructions collected so far, position of its '[').
    stack: List[Tuple[List[Instruction], int]] = []
    current: List[Instruction] = []
    for index, char in enumerate(source):
        factory = _SIMPLE_COMMANDS.get(char)
        if factory is not None:
            current.append(factory())
        elif char == "[":
            stack.append((current, index))
            current = []
        elif char == "]" and stack:
            body = current
            current, _ = stack.pop()
            current.append(Loop(body))
    if stack:
        # The outermost unclosed loop is the first one a left-to-right parse hits.
        raise UnbalancedLoopError(stack[0][1])
    return current


__all__ = [
    "ParseError",
    "UnbalancedLoopError",
    "find_close",
    "parse",
    "parse_between",
    "parse_iterative",
]
