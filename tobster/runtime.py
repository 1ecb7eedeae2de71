"""Externally linked runtime functions that programs may call without defining."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Mapping

from llvmlite import ir  # type: ignore

from .errors import UnknownFunction
from .types import I32, I8P

logger = logging.getLogger(__name__)

DeclareFn = Callable[[ir.Module, str], ir.Function]


@dataclass(frozen=True)
class LibraryFunction:
    name: str
    declare: DeclareFn


def _declare_formatted_io(module: ir.Module, name: str) -> ir.Function:
    # int name(const char *fmt, ...)
    fn_ty = ir.FunctionType(I32, [I8P], var_arg=True)
    fn = ir.Function(module, fn_ty, name=name)
    fn.calling_convention = "ccc"
    return fn


LIBRARY: Mapping[str, LibraryFunction] = {
    "printf": LibraryFunction("printf", _declare_formatted_io),
    "scanf": LibraryFunction("scanf", _declare_formatted_io),
}


def resolve_function(module: ir.Module, name: str) -> ir.Function:
    """Find `name` in the module, declaring it from the library table on first use."""
    existing = module.globals.get(name)
    if isinstance(existing, ir.Function):
        return existing
    entry = LIBRARY.get(name)
    if entry is None:
        raise UnknownFunction(name)
    logger.debug("declaring library function %s in module %s", name, module.name)
    return entry.declare(module, entry.name)