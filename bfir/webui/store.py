from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass
from typing import Dict, List

from bfir.instructions import Instruction


@dataclass
class ProgramRecord:
    program_id: str
    code: str
    instructions: List[Instruction]


def new_program_id() -> str:
    return uuid.uuid4().hex


class ProgramStore:
    """Thread-safe registry of parsed programs."""

    def __init__(self) -> None:
        self._programs: Dict[str, ProgramRecord] = {}
        self._lock = threading.RLock()

    def add(self, *, code: str, instructions: List[Instruction]) -> ProgramRecord:
        record = ProgramRecord(
            program_id=new_program_id(),
            code=code,
            instructions=list(instructions),
        )
        return self.put(record)

    def put(self, record: ProgramRecord) -> ProgramRecord:
        with self._lock:
            self._programs[record.program_id] = record
        return record

    def get(self, program_id: str) -> ProgramRecord:
        with self._lock:
            try:
                return self._programs[program_id]
            except KeyError as exc:
                raise KeyError(f"Unknown program id: {program_id}") from exc

    def remove(self, program_id: str) -> bool:
        with self._lock:
            return self._programs.pop(program_id, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._programs.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._programs)


__all__ = ["ProgramRecord", "ProgramStore", "new_program_id"]
