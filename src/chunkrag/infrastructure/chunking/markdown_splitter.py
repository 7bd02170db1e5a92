"""Markdown heading splitter."""

import re

from chunkrag.domain.entities import ParsedChunk

_TITLE = re.compile(r"^#\s+", re.MULTILINE)
_SUBTITLE = re.compile(r"^##\s+", re.MULTILINE)


def _first_line(text: str) -> tuple[str, str]:
    """Split off the first line; the rest is returned with leading whitespace removed."""
    head, _, rest = text.partition("\n")
    return head.strip(), rest.lstrip()


class MarkdownSplitter:
    """Split text into chunks on ``#`` and ``##`` headings.

    Text before the first ``#`` heading is dropped. A document without any
    ``#`` heading becomes a single untitled chunk.
    """

    def split(self, content: str) -> list[ParsedChunk]:
        """Split text into titled, subtitled chunks in document order."""
        sections = _TITLE.split(content)
        if len(sections) == 1:
            chunks = [ParsedChunk(title=None, subtitle=None, content=content.strip())]
        else:
            chunks = []
            for section in sections[1:]:
                if not section.strip():
                    continue
                title, body = _first_line(section)
                for subtitle, text in self._split_subtitles(body):
                    chunks.append(
                        ParsedChunk(title=title or None, subtitle=subtitle, content=text)
                    )
        return [c for c in chunks if c.content]

    def _split_subtitles(self, body: str) -> list[tuple[str | None, str]]:
        pieces = _SUBTITLE.split(body)
        if len(pieces) == 1:
            return [(None, body.strip())]

        # Every piece, including text before the first "##", leads with its subtitle.
        sections: list[tuple[str | None, str]] = []
        for piece in pieces:
            if not piece.strip():
                continue
            subtitle, text = _first_line(piece.strip())
            if not text.strip():
                # Heading without a body: keep the heading text as content.
                sections.append((None, subtitle))
            else:
                sections.append((subtitle or None, text.strip()))
        return sections
