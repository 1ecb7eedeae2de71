"""Tobster: lowers attributed program trees into LLVM IR modules."""

from .codegen import BuilderContext, Codegen, ENTRY_POINT_ALIAS, generate
from .errors import (
    BackendError,
    CompileError,
    MalformedNode,
    TreeReadError,
    UnknownFunction,
    UnknownType,
)

__all__ = [
    "BackendError",
    "BuilderContext",
    "Codegen",
    "CompileError",
    "ENTRY_POINT_ALIAS",
    "MalformedNode",
    "TreeReadError",
    "UnknownFunction",
    "UnknownType",
    "generate",
]
