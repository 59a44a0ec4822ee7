"""Pull LaTeX source out of free-form model output.

Models are asked for a bare document but regularly add commentary or wrap the
answer in Markdown code fences. `extract_latex` trims both, and is idempotent:
feeding its output back in returns the same string.
"""

import re

DOCUMENT_START = "\\documentclass"
DOCUMENT_END = "\\end{document}"

_LEADING_TAGGED_FENCE = re.compile(r"\A```(?:latex|tex)\b[ \t]*\r?\n?")
_LEADING_BARE_FENCE = re.compile(r"\A```[ \t]*\r?\n?")
_TRAILING_FENCE = re.compile(r"```\s*\Z")
_ANY_FENCE = re.compile(r"```(?:latex|tex)\b|```")


def _anchored_span(text: str) -> str | None:
    start = text.find(DOCUMENT_START)
    end = text.rfind(DOCUMENT_END)
    if start != -1 and end != -1 and end > start:
        return text[start : end + len(DOCUMENT_END)]
    return None


def _strip_fences(text: str) -> str:
    text = _LEADING_TAGGED_FENCE.sub("", text, count=1)
    text = _LEADING_BARE_FENCE.sub("", text, count=1)
    text = _TRAILING_FENCE.sub("", text, count=1)
    # Opening fences the model emitted somewhere other than the very start
    return _ANY_FENCE.sub("", text)


def extract_latex(raw_text: str) -> str:
    """Return the LaTeX document contained in `raw_text`.

    The span from the first ``\\documentclass`` to the last ``\\end{document}``
    wins when both are present in that order; fences inside it are kept
    verbatim. Otherwise code fences are stripped and the rest is returned
    as-is. Never raises.
    """
    if not raw_text:
        return ""
    span = _anchored_span(raw_text)
    if span is not None:
        return span
    stripped = _strip_fences(raw_text)
    span = _anchored_span(stripped)
    return stripped if span is None else span
