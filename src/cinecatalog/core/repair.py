"""Text repair rules for near-JSON catalog dumps.

Scraped catalog files are usually JavaScript object literals pasted
together by hand: unquoted keys, single quotes, trailing commas, comments
and several objects with no enclosing array. Each rule below fixes one of
those malformations and is a pure ``str -> str`` function, so rules can be
tested and reasoned about independently. ``repair_document`` and
``repair_fragment`` compose them in the order the parser relies on.

All rules except ``strip_line_comments`` and ``normalize_single_quotes``
only touch text outside string literals, so titles such as
``"Naruto: Shippuden"`` or URLs such as ``"https://..."`` pass through
untouched.
"""

import re
from typing import Callable, Iterator

BARE_KEY_RE = re.compile(r"(^|[{,])(\s*)([A-Za-z_$][\w$]*)(\s*):", re.MULTILINE)
BARE_URL_RE = re.compile(r":(\s*)([A-Za-z][\w+.-]*://[^\s,}\]\"']*)")
BARE_VALUE_RE = re.compile(r":(\s*)([A-Za-z_$][\w$]*)(?=\s*(?:[,}\]]|$))", re.MULTILINE)
TRAILING_COMMA_RE = re.compile(r",(\s*[}\]])")
TRUNCATION_RE = re.compile(r"\.\.\.\s*\[Truncated\]", re.IGNORECASE)

LEADING_STRAY = ",}] \t\r\n"
TRAILING_STRAY = ",{[ \t\r\n"
JSON_LITERALS = {"true", "false", "null"}
JS_NULLS = {"undefined", "None", "NaN"}
CLOSERS = {"{": "}", "[": "]"}


def iter_segments(text: str) -> Iterator[tuple[bool, str]]:
    """Split text into (is_string, chunk) pieces.

    String literals are delimited by double or single quotes, honour
    backslash escapes and never span lines; an unterminated literal ends at
    the newline (or end of text).

    Args:
        text: Text to split

    Yields:
        Tuples of (is_string, chunk) covering the whole input in order
    """
    i = 0
    start = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch not in "\"'":
            i += 1
            continue

        if start < i:
            yield False, text[start:i]

        j = i + 1
        while j < n:
            if text[j] == "\\":
                j += 2
                continue
            if text[j] == ch or text[j] == "\n":
                break
            j += 1

        end = j + 1 if j < n and text[j] == ch else min(j, n)
        yield True, text[i:end]
        i = start = end

    if start < n:
        yield False, text[start:]


def map_code(text: str, fn: Callable[[str], str]) -> str:
    """Apply ``fn`` to every chunk of text that is outside string literals."""
    return "".join(chunk if is_string else fn(chunk) for is_string, chunk in iter_segments(text))


def strip_line_comments(text: str) -> str:
    """Remove ``//`` comments running to the end of the line.

    A ``//`` directly after ``:`` belongs to an unquoted URL scheme
    (``poster: https://...``) and is kept.
    """
    out = []
    i = 0
    n = len(text)
    quote = None
    while i < n:
        ch = text[i]
        if quote:
            out.append(ch)
            if ch == "\\" and i + 1 < n:
                out.append(text[i + 1])
                i += 2
                continue
            if ch == quote or ch == "\n":
                quote = None
            i += 1
            continue

        if ch in "\"'":
            quote = ch
            out.append(ch)
            i += 1
            continue

        if ch == "/" and i + 1 < n and text[i + 1] == "/":
            if out and out[-1] == ":":
                out.append("//")
                i += 2
                continue
            newline = text.find("\n", i)
            if newline == -1:
                break
            i = newline
            continue

        out.append(ch)
        i += 1

    return "".join(out)


def quote_bare_keys(text: str) -> str:
    """Quote identifier keys: ``{title: ...}`` -> ``{"title": ...}``."""
    return map_code(text, lambda chunk: BARE_KEY_RE.sub(r'\1\2"\3"\4:', chunk))


def normalize_single_quotes(text: str) -> str:
    """Rewrite single-quoted literals as double-quoted JSON strings.

    Best effort: ``\\'`` is unescaped and bare double quotes inside the
    literal are escaped, but other escapes are passed through as-is.
    """
    out = []
    for is_string, chunk in iter_segments(text):
        if not is_string or not chunk.startswith("'"):
            out.append(chunk)
            continue

        terminated = len(chunk) > 1 and chunk.endswith("'") and not chunk.endswith("\\'")
        inner = chunk[1:-1] if terminated else chunk[1:]
        inner = inner.replace("\\'", "'")
        inner = re.sub(r'(?<!\\)"', r'\\"', inner)
        out.append(f'"{inner}"' if terminated else f'"{inner}')
    return "".join(out)


def strip_trailing_commas(text: str) -> str:
    """Remove commas that directly precede ``}`` or ``]``."""
    return map_code(text, lambda chunk: TRAILING_COMMA_RE.sub(r"\1", chunk))


def strip_stray_edges(text: str) -> str:
    """Trim separators and half brackets left over from concatenation.

    A document cannot legitimately start with ``,``, ``}`` or ``]`` nor end
    with ``,``, ``{`` or ``[``, so those are removed from the edges.
    """
    return text.lstrip(LEADING_STRAY).rstrip(TRAILING_STRAY)


def wrap_in_array(text: str) -> str:
    """Make the text array-shaped."""
    if not text.startswith("["):
        return f"[{text}]"
    if not text.endswith("]"):
        return f"{text}]"
    return text


def quote_bare_values(text: str) -> str:
    """Quote identifier values other than ``true``/``false``/``null``.

    JavaScript null-ish literals (``undefined``, ``NaN``) become ``null``
    and unquoted URLs become strings.
    """
    text = map_code(text, lambda chunk: BARE_URL_RE.sub(r':\1"\2"', chunk))

    def _quote(match: re.Match) -> str:
        spacing, value = match.group(1), match.group(2)
        if value in JSON_LITERALS:
            return match.group(0)
        if value in JS_NULLS:
            return f":{spacing}null"
        return f':{spacing}"{value}"'

    return map_code(text, lambda chunk: BARE_VALUE_RE.sub(_quote, chunk))


def replace_truncation_markers(text: str) -> str:
    """Collapse ``...[Truncated]`` markers left by scrapers to ``...``."""
    return TRUNCATION_RE.sub("...", text)


def _is_closed_literal(chunk: str) -> bool:
    if len(chunk) < 2 or chunk[-1] != chunk[0]:
        return False
    body = chunk[1:-1]
    escapes = len(body) - len(body.rstrip("\\"))
    return escapes % 2 == 0


def close_open_brackets(text: str) -> str:
    """Append closers for brackets left open, as in a truncated object.

    A string literal cut off at the very end of the text is closed first.
    """
    stack = []
    unterminated = ""
    for is_string, chunk in iter_segments(text):
        if is_string:
            unterminated = "" if _is_closed_literal(chunk) else chunk[0]
            continue
        unterminated = ""
        for ch in chunk:
            if ch in CLOSERS:
                stack.append(CLOSERS[ch])
            elif ch in "}]" and stack and stack[-1] == ch:
                stack.pop()
    return text + unterminated + "".join(reversed(stack))


def repair_document(text: str) -> str:
    """Apply the whole-document repair chain.

    Order: comments, keys, quotes, bare values, trailing commas, stray
    edges, array wrap.
    """
    repaired = strip_line_comments(text)
    repaired = quote_bare_keys(repaired)
    repaired = normalize_single_quotes(repaired)
    repaired = quote_bare_values(repaired)
    repaired = strip_trailing_commas(repaired)
    repaired = strip_stray_edges(repaired.strip())
    return wrap_in_array(repaired)


def repair_fragment(fragment: str) -> str:
    """Apply the single-object repair chain used by the fragment scanner."""
    repaired = strip_line_comments(fragment)
    repaired = replace_truncation_markers(repaired)
    repaired = quote_bare_keys(repaired)
    repaired = normalize_single_quotes(repaired)
    repaired = quote_bare_values(repaired)
    repaired = strip_stray_edges(repaired.strip())
    if not repaired.startswith("{"):
        repaired = "{" + repaired
    repaired = close_open_brackets(repaired)
    return strip_trailing_commas(repaired)
