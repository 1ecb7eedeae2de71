from __future__ import annotations

from typing import Dict

from llvmlite import ir  # type: ignore

from .errors import MalformedNode


class SymbolTable:
    """Variable name → stack slot for the function being lowered.

    Flat on purpose: a second declaration under the same name replaces the
    first one, and a new table is used for every function.
    """

    def __init__(self) -> None:
        self.slots: Dict[str, ir.AllocaInstr] = {}

    def declare(self, name: str, slot: ir.AllocaInstr) -> ir.AllocaInstr:
        self.slots[name] = slot
        return slot

    def lookup(self, name: str) -> ir.AllocaInstr:
        if name in self.slots:
            return self.slots[name]
        raise MalformedNode(f"Unknown variable '{name}'")
