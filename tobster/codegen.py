"""Attributed tree → LLVM IR lowering.

Pipeline placement:
  XML tree (tree_reader) → AstNode → ir.Module (this file) → backend → object

Every `Func` node gets its own `BuilderContext`: an IR builder positioned in
the function's only block and an empty symbol table. Locals and parameters
live in stack slots, so `Store`/`Load` work the same for both. There is no
control flow: each function is a single `entry` block closed by an explicit
`Return` or by the implicit terminator synthesized in `_finish_function`.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from llvmlite import ir  # type: ignore

from .ast import AstNode
from .errors import MalformedNode, UnknownType
from .escapes import unescape
from .runtime import resolve_function
from .symbols import SymbolTable
from .types import I8, I32, is_integer, is_void, resolve_type

logger = logging.getLogger(__name__)

# Source-level name of the program entry point → platform entry symbol.
ENTRY_POINT_ALIAS: Tuple[str, str] = ("ZdraveitePriqteliAzSumTobstera", "main")

_FUNC_RESERVED_ATTRS = ("name", "returns")
_INT_LITERAL = re.compile(r"[+-]?[0-9]+")


@dataclass
class BuilderContext:
    """Where the next instruction goes, plus the variables visible there.

    The module-level context has no function and no builder; only `Func`
    may be lowered in it.
    """

    module: ir.Module
    function: Optional[ir.Function] = None
    builder: Optional[ir.IRBuilder] = None
    symbols: SymbolTable = field(default_factory=SymbolTable)

    @classmethod
    def for_function(cls, module: ir.Module, fn: ir.Function) -> "BuilderContext":
        entry = fn.append_basic_block(name="entry")
        return cls(module=module, function=fn, builder=ir.IRBuilder(entry))

    def allocate(self, name: str, ty: ir.Type) -> ir.AllocaInstr:
        if is_void(ty):
            raise MalformedNode(f"variable '{name}' cannot have type Void")
        slot = self.builder.alloca(ty, name=name)
        return self.symbols.declare(name, slot)

    def require_open_block(self, node: AstNode) -> None:
        if self.builder is None:
            raise MalformedNode(f"'{node.kind}' node outside of a function")
        if self.builder.block.is_terminated:
            raise MalformedNode(f"'{node.kind}' node after Return in function '{self.function.name}'")


Rule = Callable[[AstNode, BuilderContext], Optional[ir.Value]]


class Codegen:
    def __init__(self) -> None:
        self._rules: Dict[str, Rule] = {
            "Func": self._lower_func,
            "Var": self._lower_var,
            "Value": self._lower_value,
            "Store": self._lower_store,
            "Load": self._lower_load,
            "Ref": self._lower_ref,
            "Add": self._lower_add,
            "Sub": self._lower_sub,
            "Return": self._lower_return,
            "Call": self._lower_call,
        }

    def generate(self, tree: AstNode) -> ir.Module:
        if tree.kind != "Root":
            raise MalformedNode(f"expected a 'Root' node, got '{tree.kind}'")
        module = ir.Module(name=tree.attr("module"))
        self.lower_children(tree, BuilderContext(module=module))
        return module

    def lower_children(self, node: AstNode, ctx: BuilderContext) -> List[ir.Value]:
        values: List[ir.Value] = []
        for child in node.children:
            value = self.lower(child, ctx)
            if value is not None:
                values.append(value)
        return values

    def lower(self, node: AstNode, ctx: BuilderContext) -> Optional[ir.Value]:
        rule = self._rules.get(node.kind)
        if rule is None:
            raise MalformedNode(f"unknown node kind '{node.kind}'")
        if node.kind != "Func":
            ctx.require_open_block(node)
        return rule(node, ctx)

    # Functions ---------------------------------------------------------------

    def _lower_func(self, node: AstNode, ctx: BuilderContext) -> ir.Function:
        name = node.attr("name")
        return_type = resolve_type(node.get("returns", "Void"))
        params = [
            (param_name, resolve_type(type_name))
            for param_name, type_name in node.items()
            if param_name not in _FUNC_RESERVED_ATTRS
        ]
        if name == ENTRY_POINT_ALIAS[0]:
            name = ENTRY_POINT_ALIAS[1]
        if name in ctx.module.globals:
            raise MalformedNode(f"function '{name}' already defined")

        fn_ty = ir.FunctionType(return_type, [ty for _, ty in params], var_arg=False)
        fn = ir.Function(ctx.module, fn_ty, name=name)
        logger.debug("lowering function %s with %d parameter(s)", name, len(params))

        fn_ctx = BuilderContext.for_function(ctx.module, fn)
        for arg, (param_name, ty) in zip(fn.args, params):
            arg.name = param_name
            slot = fn_ctx.allocate(param_name, ty)
            fn_ctx.builder.store(arg, slot)

        values = self.lower_children(node, fn_ctx)
        self._finish_function(node, fn_ctx, return_type, values)
        return fn

    def _finish_function(
        self,
        node: AstNode,
        ctx: BuilderContext,
        return_type: ir.Type,
        values: List[ir.Value],
    ) -> None:
        """Close the entry block unless the body ended with an explicit Return.

        The returned value is whatever the body produced last; it is not checked
        against the declared return type.
        """
        if node.last_child_kind() == "Return":
            return
        if is_void(return_type) or not values:
            ctx.builder.ret_void()
        else:
            ctx.builder.ret(values[-1])

    # Statements and expressions ----------------------------------------------

    def _lower_var(self, node: AstNode, ctx: BuilderContext) -> None:
        ctx.allocate(node.attr("name"), resolve_type(node.attr("type")))
        return None

    def _lower_value(self, node: AstNode, ctx: BuilderContext) -> ir.Value:
        type_name = node.attr("type")
        ty = resolve_type(type_name)
        text = unescape(node.text or "")
        if is_integer(ty):
            return ir.Constant(ty, _parse_int(text, ty.width))
        if type_name == "String":
            return self._string_pointer(text, ctx)
        raise UnknownType(type_name)

    def _string_pointer(self, text: str, ctx: BuilderContext) -> ir.Value:
        data = bytearray(text.encode("utf-8"))
        data.append(0)
        arr_ty = ir.ArrayType(I8, len(data))
        gv = ir.GlobalVariable(ctx.module, arr_ty, name=ctx.module.get_unique_name(".str"))
        gv.linkage = "private"
        gv.unnamed_addr = True
        gv.global_constant = True
        gv.initializer = ir.Constant(arr_ty, data)
        zero = ir.Constant(I32, 0)
        return ctx.builder.gep(gv, [zero, zero], inbounds=True, name="str")

    def _lower_store(self, node: AstNode, ctx: BuilderContext) -> None:
        name = node.attr("name")
        slot = ctx.symbols.lookup(name)
        values = self.lower_children(node, ctx)
        if len(values) != 1:
            raise MalformedNode(f"Store to '{name}' expects exactly one value, got {len(values)}")
        ctx.builder.store(values[0], slot)
        return None

    def _lower_load(self, node: AstNode, ctx: BuilderContext) -> ir.Value:
        name = node.attr("name")
        return ctx.builder.load(ctx.symbols.lookup(name), name=name)

    def _lower_ref(self, node: AstNode, ctx: BuilderContext) -> ir.Value:
        return ctx.symbols.lookup(node.attr("name"))

    def _lower_add(self, node: AstNode, ctx: BuilderContext) -> ir.Value:
        return self._fold(node, ctx, ctx.builder.add)

    def _lower_sub(self, node: AstNode, ctx: BuilderContext) -> ir.Value:
        return self._fold(node, ctx, ctx.builder.sub)

    def _fold(
        self,
        node: AstNode,
        ctx: BuilderContext,
        emit: Callable[[ir.Value, ir.Value], ir.Value],
    ) -> ir.Value:
        values = self.lower_children(node, ctx)
        if len(values) < 2:
            raise MalformedNode(f"'{node.kind}' expects at least two operands, got {len(values)}")
        acc = emit(values[0], values[1])
        for value in values[2:]:
            acc = emit(acc, value)
        return acc

    def _lower_return(self, node: AstNode, ctx: BuilderContext) -> None:
        values = self.lower_children(node, ctx)
        # Anything but exactly one value (including several) returns void.
        if len(values) == 1:
            ctx.builder.ret(values[0])
        else:
            ctx.builder.ret_void()
        return None

    def _lower_call(self, node: AstNode, ctx: BuilderContext) -> ir.Value:
        callee = resolve_function(ctx.module, node.attr("name"))
        args = self.lower_children(node, ctx)
        return ctx.builder.call(callee, args)


def _parse_int(text: str, width: int) -> int:
    """Parse a base-10 literal into the signed range of an iN constant."""
    literal = text.strip()
    if not _INT_LITERAL.fullmatch(literal):
        raise MalformedNode(f"invalid Int{width} literal {text!r}")
    value = int(literal, 10)
    if value < -(1 << (width - 1)) or value >= (1 << width):
        raise MalformedNode(f"literal {literal} does not fit in Int{width}")
    if value >= 1 << (width - 1):
        value -= 1 << width
    return value


def generate(tree: AstNode) -> ir.Module:
    return Codegen().generate(tree)
