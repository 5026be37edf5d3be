"""
JavaScript lexical helpers — just enough scanning to tell code from
comments, string literals and regex literals.

This is not a parser. It splits source text into segments, matches
brackets while skipping non-code, and trims comments off both ends of a
file. Template literals are treated as plain strings (``${}`` nesting
is not tracked); a ``/`` starts a regex literal only where an operand
is expected.
"""

from __future__ import annotations

import bisect
import re
from typing import Iterator

_PAIRS = {"(": ")", "[": "]", "{": "}"}
_CLOSERS = frozenset(_PAIRS.values())

# A "/" after one of these (or after one of the keywords below) opens a regex.
_REGEX_PRECEDERS = frozenset("(,=:[!&|?{};+-*%<>~^")
_REGEX_KEYWORDS = frozenset({
    "return", "typeof", "case", "do", "else", "in", "of", "new",
    "delete", "void", "throw", "instanceof", "yield", "await",
})

IDENTIFIER = r"[A-Za-z_$][\w$]*"


def is_identifier_char(ch: str) -> bool:
    return ch.isalnum() or ch in "_$"


# ── Low-level skipping ──────────────────────────────────────────────


def _skip_string(text: str, i: int) -> int:
    """Return the index just past the string literal starting at ``i``."""
    quote = text[i]
    n = len(text)
    j = i + 1
    while j < n:
        ch = text[j]
        if ch == "\\":
            j += 2
            continue
        if ch == quote:
            return j + 1
        if ch == "\n" and quote != "`":
            return j  # unterminated, stop at end of line
        j += 1
    return n


def _regex_allowed(text: str, i: int) -> bool:
    """Whether a ``/`` at ``i`` sits where an operand (not a divisor) is expected."""
    j = i - 1
    while j >= 0 and text[j].isspace():
        j -= 1
    if j < 0:
        return True
    ch = text[j]
    if ch in _REGEX_PRECEDERS:
        return True
    if is_identifier_char(ch):
        k = j
        while k >= 0 and is_identifier_char(text[k]):
            k -= 1
        return text[k + 1:j + 1] in _REGEX_KEYWORDS
    return False


def _skip_regex(text: str, i: int) -> int | None:
    """Return the index past the regex literal at ``i``, or None if it isn't one."""
    n = len(text)
    j = i + 1
    in_class = False
    while j < n:
        ch = text[j]
        if ch == "\\":
            j += 2
            continue
        if ch == "\n":
            return None
        if in_class:
            if ch == "]":
                in_class = False
        elif ch == "[":
            in_class = True
        elif ch == "/":
            j += 1
            while j < n and is_identifier_char(text[j]):
                j += 1  # flags
            return j
        j += 1
    return None


def _skip_non_code(text: str, i: int) -> tuple[int, str] | None:
    """If a comment, string or regex literal starts at ``i``, return (end, kind)."""
    ch = text[i]
    nxt = text[i + 1] if i + 1 < len(text) else ""
    if ch == "/" and nxt == "*":
        close = text.find("*/", i + 2)
        return (len(text) if close < 0 else close + 2), "comment"
    if ch == "/" and nxt == "/":
        close = text.find("\n", i + 2)
        return (len(text) if close < 0 else close), "comment"
    if ch in "'\"`":
        return _skip_string(text, i), "string"
    if ch == "/" and _regex_allowed(text, i):
        end = _skip_regex(text, i)
        if end is not None:
            return end, "regex"
    return None


# ── Segmentation ────────────────────────────────────────────────────


def iter_segments(text: str) -> Iterator[tuple[str, int, int]]:
    """Yield ``(kind, start, end)`` covering the whole text.

    ``kind`` is one of ``code``, ``comment``, ``string``, ``regex``.
    An unterminated block comment runs to the end of the text.
    """
    n = len(text)
    i = 0
    code_start = 0
    while i < n:
        skipped = _skip_non_code(text, i)
        if skipped is None:
            i += 1
            continue
        end, kind = skipped
        if code_start < i:
            yield "code", code_start, i
        yield kind, i, end
        i = end
        code_start = end
    if code_start < n:
        yield "code", code_start, n


class SpanIndex:
    """Sorted, non-overlapping spans with O(log n) membership tests."""

    def __init__(self, spans: list[tuple[int, int]]):
        self._starts = [s for s, _ in spans]
        self._ends = [e for _, e in spans]

    def __contains__(self, pos: int) -> bool:
        k = bisect.bisect_right(self._starts, pos) - 1
        return k >= 0 and pos < self._ends[k]


def code_spans(text: str) -> SpanIndex:
    """Index of the code-only regions of ``text``."""
    return SpanIndex([(s, e) for kind, s, e in iter_segments(text) if kind == "code"])


def mask_comments(text: str) -> str:
    """Blank out comments, keeping offsets and line breaks intact."""
    parts: list[str] = []
    for kind, start, end in iter_segments(text):
        chunk = text[start:end]
        if kind == "comment":
            chunk = re.sub(r"[^\n]", " ", chunk)
        parts.append(chunk)
    return "".join(parts)


def strip_comments(text: str) -> str:
    """Remove comments entirely."""
    return "".join(
        text[start:end] for kind, start, end in iter_segments(text) if kind != "comment"
    )


# ── Brackets and arguments ──────────────────────────────────────────


def find_closing(text: str, open_index: int) -> int:
    """Index of the bracket matching the one at ``open_index``; -1 if unbalanced."""
    if open_index >= len(text) or text[open_index] not in _PAIRS:
        return -1
    stack: list[str] = []
    n = len(text)
    i = open_index
    while i < n:
        skipped = _skip_non_code(text, i)
        if skipped is not None:
            i = skipped[0]
            continue
        ch = text[i]
        if ch in _PAIRS:
            stack.append(_PAIRS[ch])
        elif ch in _CLOSERS:
            if not stack or stack[-1] != ch:
                return -1
            stack.pop()
            if not stack:
                return i
        i += 1
    return -1


def split_top_level(text: str, sep: str = ",") -> list[str]:
    """Split on ``sep`` where it is not nested in brackets, strings or comments."""
    parts: list[str] = []
    depth = 0
    n = len(text)
    i = 0
    last = 0
    while i < n:
        skipped = _skip_non_code(text, i)
        if skipped is not None:
            i = skipped[0]
            continue
        ch = text[i]
        if ch in _PAIRS:
            depth += 1
        elif ch in _CLOSERS:
            depth -= 1
        elif ch == sep and depth == 0:
            parts.append(text[last:i])
            last = i + 1
        i += 1
    parts.append(text[last:])
    if len(parts) == 1 and not parts[0].strip():
        return []
    return parts


def top_level_code(text: str) -> str:
    """Only the code at bracket depth zero; everything else becomes spaces."""
    out = []
    depth = 0
    for kind, start, end in iter_segments(text):
        if kind != "code":
            out.append(re.sub(r"[^\n]", " ", text[start:end]))
            continue
        for ch in text[start:end]:
            if ch in _PAIRS:
                depth += 1
                out.append(" ")
            elif ch in _CLOSERS:
                depth = max(depth - 1, 0)
                out.append(" ")
            elif depth == 0 or ch == "\n":
                out.append(ch)
            else:
                out.append(" ")
    return "".join(out)


# ── Trimming ────────────────────────────────────────────────────────


def split_trivia(text: str) -> tuple[str, str, str]:
    """Split into (leading comments/space, code, trailing comments/space)."""
    segments = list(iter_segments(text))
    start = None
    for kind, s, e in segments:
        if kind == "comment":
            continue
        if kind == "code":
            chunk = text[s:e]
            stripped = len(chunk) - len(chunk.lstrip())
            if stripped == len(chunk):
                continue
            start = s + stripped
        else:
            start = s
        break
    if start is None:
        return text, "", ""

    end = start
    for kind, s, e in reversed(segments):
        if kind == "comment":
            continue
        if kind == "code":
            chunk = text[s:e]
            kept = len(chunk.rstrip())
            if kept == 0:
                continue
            end = s + kept
        else:
            end = e
        break
    return text[:start], text[start:end], text[end:]


def trim_comments(text: str) -> str:
    """The text with white space and comments removed from both ends."""
    return split_trivia(text)[1]


def is_blank(text: str) -> bool:
    """Whether the text holds nothing but white space and comments."""
    return not trim_comments(text)


def indent(text: str, level: int = 1, indent_str: str = "  ") -> str:
    """Indent every non-blank line; blank lines become empty."""
    prefix = indent_str * level
    return "\n".join(
        prefix + line if line.strip() else ""
        for line in re.split(r"\r?\n", text)
    )


def rename_identifier(text: str, old: str, new: str) -> str:
    """Replace standalone uses of identifier ``old`` in code (not strings or comments).

    Property accesses (``obj.old``) are left alone.
    """
    if old == new:
        return text
    pattern = re.compile(r"(?<![\w$.])" + re.escape(old) + r"(?![\w$])")
    parts = []
    for kind, start, end in iter_segments(text):
        chunk = text[start:end]
        parts.append(pattern.sub(new, chunk) if kind == "code" else chunk)
    return "".join(parts)
