from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Sequence, Tuple


# === IR Nodes ===


class Instruction:
    """Base class for every node of the parsed program tree."""

    def __str__(self) -> str:
        return format_instruction(self)


@dataclass(frozen=True)
class Increment(Instruction):
    amount: int


@dataclass(frozen=True)
class Set(Instruction):
    amount: int


@dataclass(frozen=True)
class PointerIncrement(Instruction):
    amount: int


@dataclass(frozen=True)
class Read(Instruction):
    pass


@dataclass(frozen=True)
class Write(Instruction):
    pass


@dataclass(frozen=True)
class Loop(Instruction):
    body: Tuple[Instruction, ...]

    # Body is always stored as a tuple.
    def __init__(self, body: Iterable[Instruction] = ()) -> None:
        object.__setattr__(self, "body", tuple(body))


# === Display ===


def format_instruction(instr: Instruction, indent: int = 0) -> str:
    lines: List[str] = []
    _format_into(instr, indent, lines)
    return "\n".join(lines)


def format_program(instructions: Sequence[Instruction]) -> str:
    lines: List[str] = []
    for instr in instructions:
        _format_into(instr, 0, lines)
    return "\n".join(lines)


def _format_into(instr: Instruction, indent: int, lines: List[str]) -> None:
    # Explicit stack so trees from parse_iterative render at any depth.
    pending: List[Tuple[Instruction, int]] = [(instr, indent)]
    while pending:
        node, level = pending.pop()
        prefix = "  " * level
        if isinstance(node, Loop):
            lines.append(f"{prefix}Loop")
            pending.extend((child, level + 1) for child in reversed(node.body))
        elif isinstance(node, (Increment, Set, PointerIncrement)):
            lines.append(f"{prefix}{type(node).__name__}({node.amount})")
        elif isinstance(node, (Read, Write)):
            lines.append(f"{prefix}{type(node).__name__}")
        else:
            raise TypeError(f"Unknown instruction type: {type(node).__name__}")


# === JSON form ===


_AMOUNT_OPS: Dict[str, type] = {
    "increment": Increment,
    "set": Set,
    "pointer_increment": PointerIncrement,
}


def instruction_to_dict(instr: Instruction) -> Dict[str, Any]:
    if isinstance(instr, Loop):
        return {"op": "loop", "body": [instruction_to_dict(child) for child in instr.body]}
    if isinstance(instr, Increment):
        return {"op": "increment", "amount": instr.amount}
    if isinstance(instr, Set):
        return {"op": "set", "amount": instr.amount}
    if isinstance(instr, PointerIncrement):
        return {"op": "pointer_increment", "amount": instr.amount}
    if isinstance(instr, Read):
        return {"op": "read"}
    if isinstance(instr, Write):
        return {"op": "write"}
    raise TypeError(f"Unknown instruction type: {type(instr).__name__}")


def instruction_from_dict(data: Dict[str, Any]) -> Instruction:
    if not isinstance(data, dict):
        raise ValueError(f"Instruction entry must be an object, got {type(data).__name__}")
    op = data.get("op")
    if op in _AMOUNT_OPS:
        amount = data.get("amount")
        if not isinstance(amount, int) or isinstance(amount, bool):
            raise ValueError(f"Instruction '{op}' requires an integer amount")
        return _AMOUNT_OPS[op](amount)
    if op == "read":
        return Read()
    if op == "write":
        return Write()
    if op == "loop":
        body = data.get("body")
        if not isinstance(body, list):
            raise ValueError("Instruction 'loop' requires a list body")
        return Loop(instruction_from_dict(child) for child in body)
    raise ValueError(f"Unknown instruction op: {op!r}")


def program_to_dicts(instructions: Sequence[Instruction]) -> List[Dict[str, Any]]:
    return [instruction_to_dict(instr) for instr in instructions]


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
    "instruction_to_dict",
    "instruction_from_dict",
    "program_to_dicts",
]
