from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .backend import OptLevel, emit_llvm, emit_object
from .codegen import generate
from .tree_reader import read_tree

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompileOptions:
    input: Path
    output: Optional[Path] = None
    opt_level: OptLevel = OptLevel.O0
    emit_llvm: bool = False


def default_output(module_name: str, emit_llvm: bool = False) -> Path:
    suffix = ".ll" if emit_llvm else ".o"
    return Path(".") / f"{module_name}{suffix}"


def compile_file(opts: CompileOptions) -> Path:
    """Read, lower and emit one program tree; returns the path written."""
    tree = read_tree(opts.input)
    module = generate(tree)
    out_path = opts.output or default_output(module.name, opts.emit_llvm)
    logger.info("compiling %s -> %s (-O%s)", opts.input, out_path, opts.opt_level.value)
    if opts.emit_llvm:
        emit_llvm(module, out_path, opts.opt_level)
    else:
        emit_object(module, out_path, opts.opt_level)
    return out_path
