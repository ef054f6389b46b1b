"""
Display formatting for raw transcripts.

Applied to the transcript before it is shown, according to the user's
formatting preferences.
"""

import re
from enum import Enum
from typing import List

MIN_WRAP_WIDTH = 20

# Terminal punctuation, optional closing quotes/brackets, then whitespace.
_SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?…])[\"'”’)\]]*\s+")


class FormattingStyle(str, Enum):
    PLAIN = "plain"
    SENTENCE_PER_LINE = "sentence_per_line"
    PARAGRAPHS = "paragraphs"
    WRAPPED = "wrapped"

    @property
    def label(self) -> str:
        return {
            FormattingStyle.PLAIN: "Plain",
            FormattingStyle.SENTENCE_PER_LINE: "Sentence per line",
            FormattingStyle.PARAGRAPHS: "Paragraphs",
            FormattingStyle.WRAPPED: "Wrapped",
        }[self]


def format_text(
    text: str,
    style: FormattingStyle = FormattingStyle.SENTENCE_PER_LINE,
    paragraph_sentence_count: int = 3,
    wrap_width: int = 80,
) -> str:
    cleaned = text.strip()
    if not cleaned:
        return ""

    style = FormattingStyle(style)
    if style == FormattingStyle.PLAIN:
        return cleaned
    if style == FormattingStyle.SENTENCE_PER_LINE:
        return "\n".join(split_into_sentences(cleaned))
    if style == FormattingStyle.PARAGRAPHS:
        sentences = split_into_sentences(cleaned)
        count = max(1, paragraph_sentence_count)
        paragraphs = [
            " ".join(sentences[i : i + count]) for i in range(0, len(sentences), count)
        ]
        return "\n\n".join(paragraphs)
    return wrap_text(cleaned, max(MIN_WRAP_WIDTH, wrap_width))


def split_into_sentences(text: str) -> List[str]:
    sentences = []
    start = 0
    for match in _SENTENCE_BOUNDARY.finditer(text):
        # Keep closing quotes with their sentence, drop the whitespace.
        end = match.start() + len(match.group(0).rstrip())
        sentences.append(text[start:end].strip())
        start = match.end()
    sentences.append(text[start:].strip())

    sentences = [s for s in sentences if s]
    if not sentences:
        return [text]
    return sentences


def wrap_text(text: str, width: int) -> str:
    """Greedy word wrap. Words longer than ``width`` get a line of their own."""
    lines: List[str] = []
    current = ""
    for word in text.split():
        if not current:
            current = word
            continue
        candidate = f"{current} {word}"
        if len(candidate) > width:
            lines.append(current)
            current = word
        else:
            current = candidate
    if current:
        lines.append(current)
    return "\n".join(lines)
