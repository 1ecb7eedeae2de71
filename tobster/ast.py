from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from .errors import MalformedNode


@dataclass
class AstNode:
    """Generic attributed tree node.

    `attributes` keeps document order; `Func` relies on it to recover the
    parameter order. Structural children are kept separately from the
    attribute bag and each child carries its own kind.
    """

    kind: str
    attributes: Dict[str, str] = field(default_factory=dict)
    children: List["AstNode"] = field(default_factory=list)
    text: Optional[str] = None

    def attr(self, name: str) -> str:
        try:
            return self.attributes[name]
        except KeyError:
            raise MalformedNode(f"'{self.kind}' node is missing required attribute '{name}'") from None

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.attributes.get(name, default)

    def items(self) -> Iterator[Tuple[str, str]]:
        return iter(self.attributes.items())

    def last_child_kind(self) -> Optional[str]:
        if not self.children:
            return None
        return self.children[-1].kind
