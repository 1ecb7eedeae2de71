from __future__ import annotations

import pytest
from llvmlite import ir  # type: ignore

from tobster.errors import MalformedNode, UnknownFunction, UnknownType
from tobster.runtime import LIBRARY, resolve_function
from tobster.symbols import SymbolTable
from tobster.types import resolve_type


@pytest.mark.parametrize("name, width", [("Int8", 8), ("Int16", 16), ("Int32", 32), ("Int64", 64)])
def test_integer_types(name: str, width: int) -> None:
    ty = resolve_type(name)
    assert isinstance(ty, ir.IntType)
    assert ty.width == width


def test_void_and_string() -> None:
    assert isinstance(resolve_type("Void"), ir.VoidType)
    string = resolve_type("String")
    assert isinstance(string, ir.PointerType)
    assert string == ir.IntType(8).as_pointer()


def test_unknown_type_name() -> None:
    with pytest.raises(UnknownType) as excinfo:
        resolve_type("Float64")
    assert excinfo.value.name == "Float64"
    assert "unknown type: Float64" in str(excinfo.value)


def test_library_function_declared_once() -> None:
    module = ir.Module(name="m")
    first = resolve_function(module, "printf")
    second = resolve_function(module, "printf")
    assert first is second
    assert [g for g in module.globals if g == "printf"] == ["printf"]
    assert first.ftype.var_arg
    assert isinstance(first.ftype.return_type, ir.IntType)
    assert first.ftype.return_type.width == 32
    assert first.is_declaration


def test_scanf_is_in_library() -> None:
    assert set(LIBRARY) == {"printf", "scanf"}
    module = ir.Module(name="m")
    assert resolve_function(module, "scanf").name == "scanf"


def test_module_function_wins_over_library() -> None:
    module = ir.Module(name="m")
    own = ir.Function(module, ir.FunctionType(ir.VoidType(), []), name="printf")
    assert resolve_function(module, "printf") is own


def test_unknown_function_leaves_module_alone() -> None:
    module = ir.Module(name="m")
    with pytest.raises(UnknownFunction):
        resolve_function(module, "puts")
    assert "puts" not in module.globals
    assert len(module.globals) == 0


def test_symbol_table_overwrites_and_reports_unknown() -> None:
    module = ir.Module(name="m")
    fn = ir.Function(module, ir.FunctionType(ir.VoidType(), []), name="f")
    builder = ir.IRBuilder(fn.append_basic_block("entry"))
    table = SymbolTable()
    first = table.declare("x", builder.alloca(ir.IntType(32), name="x"))
    second = table.declare("x", builder.alloca(ir.IntType(32), name="x"))
    assert table.lookup("x") is second
    assert first is not second
    assert list(table.slots) == ["x"]
    with pytest.raises(MalformedNode):
        table.lookup("y")
