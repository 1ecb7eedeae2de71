"""Type names of the tree language mapped to LLVM types.

- Void    → void
- Int8    → i8
- Int16   → i16
- Int32   → i32
- Int64   → i64
- String  → i8* (a plain byte pointer, no length word)
"""

from __future__ import annotations

from typing import Dict

from llvmlite import ir  # type: ignore

from .errors import UnknownType

VOID = ir.VoidType()
I8 = ir.IntType(8)
I16 = ir.IntType(16)
I32 = ir.IntType(32)
I64 = ir.IntType(64)
I8P = I8.as_pointer()

_PRIMITIVES: Dict[str, ir.Type] = {
    "Void": VOID,
    "Int8": I8,
    "Int16": I16,
    "Int32": I32,
    "Int64": I64,
    "String": I8P,
}


def resolve_type(name: str) -> ir.Type:
    try:
        return _PRIMITIVES[name]
    except KeyError:
        raise UnknownType(name) from None


def is_integer(ty: ir.Type) -> bool:
    return isinstance(ty, ir.IntType)


def is_void(ty: ir.Type) -> bool:
    return isinstance(ty, ir.VoidType)
