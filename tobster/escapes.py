from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

_ESCAPES = {
    "\\": "\\",
    "'": "'",
    '"': '"',
    "0": "\0",
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
}


def unescape(text: str) -> str:
    """Decode backslash escapes in literal text.

    An unknown escape is reported and decoded as the bare character, so
    `\\q` becomes `q`. A lone trailing backslash is reported and dropped.
    """
    out: list[str] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch != "\\":
            out.append(ch)
            i += 1
            continue
        if i + 1 == len(text):
            logger.warning("Unknown escape sequence: trailing '\\' in %r", text)
            break
        nxt = text[i + 1]
        decoded = _ESCAPES.get(nxt)
        if decoded is None:
            logger.warning("Unknown escape sequence: \\%s", nxt)
            decoded = nxt
        out.append(decoded)
        i += 2
    return "".join(out)
