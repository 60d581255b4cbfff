"""Textual CSS and JavaScript minifiers for theme assets.

Neither function parses its language; both work on characters and lexical
contexts only.
"""

from __future__ import annotations

import re
from typing import List

_CSS_COMMENT = re.compile(r"/\*.*?\*/", re.DOTALL)
_WHITESPACE = re.compile(r"\s+")
_CSS_PUNCTUATION = re.compile(r"\s*([{};,])\s*")
_CSS_COLON = re.compile(r":\s+")
_CSS_TRAILING_SEMICOLON = re.compile(r";+}")

_QUOTES = {'"', "'"}


def minify_css(css: str) -> str:
    """Strip comments, collapse whitespace and drop the last semicolon of each block."""
    text = _CSS_COMMENT.sub("", css)
    text = _WHITESPACE.sub(" ", text)
    text = _CSS_PUNCTUATION.sub(r"\1", text)
    text = _CSS_COLON.sub(":", text)
    text = _CSS_TRAILING_SEMICOLON.sub("}", text)
    return text.strip()


def _is_word(char: str) -> bool:
    return char.isalnum() or char in "_$"


def minify_js(source: str) -> str:
    """Remove comments and redundant whitespace outside string literals.

    The scanner tracks plain code, ``//`` comments, ``/* */`` comments,
    single/double-quoted strings and backtick templates. String and template
    contents are copied verbatim, escapes included. Comments count as
    whitespace, and whitespace survives as one space only where two word
    characters would otherwise touch.
    """
    out: List[str] = []
    pending_space = False
    index = 0
    length = len(source)

    def emit(char: str) -> None:
        nonlocal pending_space
        if pending_space and out and _is_word(out[-1]) and _is_word(char):
            out.append(" ")
        pending_space = False
        out.append(char)

    while index < length:
        char = source[index]
        nxt = source[index + 1] if index + 1 < length else ""

        if char in _QUOTES or char == "`":
            end = _string_end(source, index)
            emit(char)
            out.append(source[index + 1 : end])
            index = end
            continue

        if char == "/" and nxt == "/":
            newline = source.find("\n", index + 2)
            index = length if newline == -1 else newline
            pending_space = True
            continue

        if char == "/" and nxt == "*":
            close = source.find("*/", index + 2)
            index = length if close == -1 else close + 2
            pending_space = True
            continue

        if char.isspace():
            pending_space = True
            index += 1
            continue

        emit(char)
        index += 1

    return "".join(out).strip()


def _string_end(source: str, start: int) -> int:
    """Return the index just past the literal opened at ``start``."""
    delimiter = source[start]
    index = start + 1
    length = len(source)
    while index < length:
        char = source[index]
        if char == "\\":
            index += 2
            continue
        if char == delimiter:
            return index + 1
        if char == "\n" and delimiter in _QUOTES:
            # Unterminated quote ends at the line break.
            return index
        index += 1
    return length


__all__ = ["minify_css", "minify_js"]
