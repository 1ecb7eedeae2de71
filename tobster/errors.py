from __future__ import annotations


class CompileError(Exception):
    """Base class for every error raised while turning a tree into an object file."""


class UnknownType(CompileError):
    def __init__(self, name: str) -> None:
        super().__init__(f"unknown type: {name}")
        self.name = name


class UnknownFunction(CompileError):
    def __init__(self, name: str) -> None:
        super().__init__(f"unknown function: {name}")
        self.name = name


class MalformedNode(CompileError):
    pass


class TreeReadError(CompileError):
    pass


class BackendError(CompileError):
    pass
