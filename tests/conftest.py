from __future__ import annotations

import ctypes

import pytest
from llvmlite import binding as llvm  # type: ignore


def _jit_call(module, fn_name: str, restype, *args: int, argtypes=()):
    """Compile `module` with MCJIT and call `fn_name` natively."""
    llvm.initialize_native_target()
    llvm.initialize_native_asmprinter()
    target = llvm.Target.from_default_triple()
    tm = target.create_target_machine()
    llvm_mod = llvm.parse_assembly(str(module))
    llvm_mod.verify()
    engine = llvm.create_mcjit_compiler(llvm_mod, tm)
    engine.finalize_object()
    addr = engine.get_function_address(fn_name)
    assert addr, f"{fn_name} not found in JIT module"
    cfunc = ctypes.CFUNCTYPE(restype, *argtypes)(addr)
    return cfunc(*args)


@pytest.fixture
def jit_call():
    return _jit_call
