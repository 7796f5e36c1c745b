"""Plain-text derivation from markdown study content.

Used for the reading-time estimate shown next to a study item and for the
text handed to speech synthesis.
"""

import math
import re
from typing import Protocol, Sequence

WORDS_PER_MINUTE = 200
SUMMARY_SPEECH_PREFIX = 'Összegzés: '

# Applied in order; code spans go after links so brackets inside code do not
# leave half-removed link syntax behind.
_STRIP_PATTERNS = [
    re.compile(r'<[^>]+>'),
    re.compile(r'\{[^}]+\}'),
    re.compile(r'&[a-zA-Z0-9#]+;'),
    re.compile(r'[#_*>\-]'),
    re.compile(r'!?\[.*?\]\(.*?\)'),
    re.compile(r'`{1,3}[\s\S]*?`{1,3}'),
]
_WHITESPACE = re.compile(r'\s+')


class _Subsection(Protocol):
    title: str | None
    description: str | None


class _Section(Protocol):
    content: str | None
    subsections: Sequence[_Subsection] | None


class _Summary(Protocol):
    content: str | None


class _Item(Protocol):
    name: str


def strip_markdown(text: str | None) -> str:
    cleaned = text or ''
    for pattern in _STRIP_PATTERNS:
        cleaned = pattern.sub('', cleaned)
    return _WHITESPACE.sub(' ', cleaned).strip()


def _section_fragments(sections: Sequence[_Section]) -> list[str]:
    fragments: list[str] = []
    for section in sections:
        fragments.append(strip_markdown(section.content))
        for subsection in section.subsections or []:
            fragments.append(strip_markdown(subsection.title))
            fragments.append(strip_markdown(subsection.description))
    return fragments


def estimate_reading_minutes(sections: Sequence[_Section], summary: _Summary | None = None) -> int:
    """Whole minutes needed to read the item at ``WORDS_PER_MINUTE``, rounded up."""
    fragments = _section_fragments(sections)
    if summary is not None and summary.content:
        fragments.append(strip_markdown(summary.content))

    total_text = ''.join(' ' + fragment for fragment in fragments)
    word_count = len([word for word in total_text.split(' ') if word])
    return math.ceil(word_count / WORDS_PER_MINUTE)


def build_speech_text(item: _Item, sections: Sequence[_Section], summary: _Summary | None = None) -> str:
    fragments = [strip_markdown(item.name), *_section_fragments(sections)]
    if summary is not None and summary.content:
        fragments.append(SUMMARY_SPEECH_PREFIX + strip_markdown(summary.content))

    return ' '.join(fragment for fragment in fragments if fragment).strip()
