"""Object-file emission for lowered modules (host target only)."""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Tuple

from llvmlite import binding as llvm  # type: ignore
from llvmlite import ir  # type: ignore

from .errors import BackendError

logger = logging.getLogger(__name__)


class OptLevel(Enum):
    O0 = "0"
    O1 = "1"
    O2 = "2"
    O3 = "3"
    Os = "s"
    Oz = "z"

    @classmethod
    def parse(cls, suffix: str) -> "OptLevel":
        """Map the part after `-O` (`2`, `s`, ...) to a level."""
        for level in cls:
            if level.value == suffix:
                return level
        raise ValueError(f"unknown optimization level '-O{suffix}'")

    @property
    def speed_and_size(self) -> Tuple[int, int]:
        return _PIPELINE_LEVELS[self]


_PIPELINE_LEVELS = {
    OptLevel.O0: (0, 0),
    OptLevel.O1: (1, 0),
    OptLevel.O2: (2, 0),
    OptLevel.O3: (3, 0),
    OptLevel.Os: (2, 1),
    OptLevel.Oz: (2, 2),
}


def _host_target_machine(opt_level: OptLevel) -> Tuple[str, llvm.TargetMachine]:
    llvm.initialize_native_target()
    llvm.initialize_native_asmprinter()

    triple = llvm.get_default_triple()
    try:
        target = llvm.Target.from_triple(triple)
    except RuntimeError as exc:
        raise BackendError(f"no target for triple {triple}: {exc}") from exc

    cpu = llvm.get_host_cpu_name()
    try:
        features = llvm.get_host_cpu_features().flatten()
    except RuntimeError:
        # Host feature detection is not available everywhere.
        features = ""
    speed, _ = opt_level.speed_and_size
    tm = target.create_target_machine(cpu=cpu, features=features, opt=speed)
    return triple, tm


def _prepare(module: ir.Module, opt_level: OptLevel) -> Tuple[llvm.ModuleRef, llvm.TargetMachine]:
    triple, tm = _host_target_machine(opt_level)
    module.triple = triple
    module.data_layout = str(tm.target_data)

    try:
        llvm_mod = llvm.parse_assembly(str(module))
        llvm_mod.verify()
    except RuntimeError as exc:
        raise BackendError(f"invalid module {module.name}: {exc}") from exc

    optimize(llvm_mod, tm, opt_level)
    logger.debug("final module %s:\n%s", module.name, llvm_mod)
    return llvm_mod, tm


def optimize(llvm_mod: llvm.ModuleRef, tm: llvm.TargetMachine, opt_level: OptLevel) -> None:
    """Run the default per-module pipeline for `opt_level`; `O0` skips it entirely."""
    if opt_level is OptLevel.O0:
        return
    speed, size = opt_level.speed_and_size
    try:
        pto = llvm.PipelineTuningOptions(speed_level=speed)
        # Newer llvmlite releases dropped size tuning; Os/Oz then run the speed pipeline.
        if size and hasattr(pto, "size_level"):
            pto.size_level = size
        pb = llvm.create_pass_builder(tm, pto)
        pm = pb.getModulePassManager()
        pm.run(llvm_mod, pb)
    except (RuntimeError, TypeError, ValueError) as exc:
        raise BackendError(f"optimization pipeline -O{opt_level.value} failed: {exc}") from exc


def compile_ir(module: ir.Module, opt_level: OptLevel = OptLevel.O0) -> str:
    """Return the verified, optimized textual IR for `module`."""
    llvm_mod, _ = _prepare(module, opt_level)
    return str(llvm_mod)


def emit_object(module: ir.Module, out_path: Path, opt_level: OptLevel = OptLevel.O0) -> None:
    """Optimize `module` and write it to `out_path` as a relocatable object file.

    The module belongs to the backend from here on: its triple and data layout
    are overwritten for the host target.
    """
    llvm_mod, tm = _prepare(module, opt_level)
    try:
        obj = tm.emit_object(llvm_mod)
    except RuntimeError as exc:
        raise BackendError(f"target machine can't emit an object file: {exc}") from exc
    try:
        out_path.write_bytes(obj)
    except OSError as exc:
        raise BackendError(f"could not open file: {exc}") from exc
    logger.debug("wrote %d bytes to %s", len(obj), out_path)


def emit_llvm(module: ir.Module, out_path: Path, opt_level: OptLevel = OptLevel.O0) -> None:
    text = compile_ir(module, opt_level)
    try:
        out_path.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise BackendError(f"could not open file: {exc}") from exc
