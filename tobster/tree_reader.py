"""Read program trees stored as XML documents.

    <Root module="hello">
      <Func name="ZdraveitePriqteliAzSumTobstera" returns="Int32">
        <Call name="printf"><Value type="String">Hello\\n</Value></Call>
        <Return><Value type="Int32">0</Value></Return>
      </Func>
    </Root>

Element tags become node kinds, XML attributes become the attribute bag (in
document order), child elements become structural children. Leaf text is
kept verbatim; escape decoding happens during lowering.
"""

from __future__ import annotations

from pathlib import Path
from xml.etree import ElementTree

from .ast import AstNode
from .errors import TreeReadError


def parse_tree(text: str) -> AstNode:
    try:
        root = ElementTree.fromstring(text)
    except ElementTree.ParseError as exc:
        raise TreeReadError(f"malformed program tree: {exc}") from exc
    return _convert(root)


def read_tree(path: Path) -> AstNode:
    return parse_tree(path.read_text(encoding="utf-8"))


def _convert(elem: ElementTree.Element) -> AstNode:
    children = [_convert(child) for child in elem]
    return AstNode(
        kind=elem.tag,
        attributes=dict(elem.attrib),
        children=children,
        text=None if children else elem.text,
    )
