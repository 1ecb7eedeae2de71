#!/usr/bin/env python3
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from tobster.backend import OptLevel
from tobster.driver import CompileOptions, compile_file
from tobster.errors import CompileError


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="tobsterc", description="Compile a Tobster program tree to an object file")
    p.add_argument("input", type=Path, help="Path to the XML program tree")
    p.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Output path (default: ./<module name>.o)",
    )
    # Glued like the C compilers: -O2, -Os, -Oz.
    p.add_argument(
        "-O",
        dest="opt_level",
        metavar="LEVEL",
        default=OptLevel.O0.value,
        choices=[level.value for level in OptLevel],
        help="Optimization level: 0, 1, 2, 3, s or z (default: 0)",
    )
    p.add_argument("--emit-llvm", action="store_true", help="Write optimized LLVM IR text instead of an object file")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging, including the final module IR")
    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    opts = CompileOptions(
        input=args.input,
        output=args.output,
        opt_level=OptLevel.parse(args.opt_level),
        emit_llvm=args.emit_llvm,
    )

    try:
        out_path = compile_file(opts)
    except OSError as exc:
        print(f"error: unable to read source: {exc}", file=sys.stderr)
        return 1
    except CompileError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    if args.verbose:
        print(f"wrote {out_path}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
