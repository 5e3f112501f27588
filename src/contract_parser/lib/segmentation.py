"""Size-bounded contract segmentation with cascading strategies.

Splits decoded contract text into an ordered list of chunk texts. Three
strategies are tried in order and the first one that qualifies wins:

1. Structural: split before lines shaped like ``"<n>. <UPPERCASE TITLE>"``.
   Accepted when it yields more than three sections. Oversized sections are
   split on sentence boundaries, undersized ones are merged forward, and an
   undersized tail is appended to the previous chunk.
2. Paragraph: split on blank lines and pack paragraphs up to the size limit.
   Accepted when there are more than two paragraphs.
3. Fixed-size: consecutive windows of ``max_size`` characters.

Segmentation never calls out and never raises on empty or short input.
Source order is preserved and no non-whitespace character is lost or
duplicated; only whitespace at chunk boundaries is trimmed.
"""

import re
from dataclasses import dataclass
from enum import Enum

from contract_parser.lib.logging_config import get_logger

logger = get_logger(__name__)

# (start, end) character offsets into the stripped input
Span = tuple[int, int]


class SegmentationStrategy(str, Enum):
    """Strategy that produced a segmentation.

    Attributes:
        SINGLE: Text shorter than the minimum size, returned as one chunk
        STRUCTURAL: Numbered-heading split
        PARAGRAPH: Blank-line paragraph packing
        FIXED: Fixed-size character windows
    """

    SINGLE = "single"
    STRUCTURAL = "structural"
    PARAGRAPH = "paragraph"
    FIXED = "fixed"


@dataclass(frozen=True)
class SegmentationResult:
    """Chunk texts together with the strategy that produced them."""

    chunks: list[str]
    strategy: SegmentationStrategy


class SegmentationEngine:
    """Split contract text into size-bounded chunk texts.

    Attributes:
        max_size: Target maximum chunk size in characters (default 700).
        min_size: Minimum chunk size in characters (default 100).

    Example:
        >>> engine = SegmentationEngine(max_size=700, min_size=100)
        >>> result = engine.segment_with_strategy(contract_text)
        >>> result.strategy
        <SegmentationStrategy.STRUCTURAL: 'structural'>
    """

    DEFAULT_MAX_SIZE = 700
    DEFAULT_MIN_SIZE = 100

    # More than this many sections are needed to accept the structural split
    MIN_STRUCTURAL_SECTIONS = 3
    # More than this many paragraphs are needed to accept the paragraph split
    MIN_PARAGRAPHS = 2

    # "<n>. <UPPERCASE TITLE>" occupying a whole line
    SECTION_HEADING_PATTERN = re.compile(
        r"^[ \t]*\d+\.[ \t]+[A-Z][A-Z0-9 \t&'/,()\-]*[A-Z0-9)][ \t]*[.:]?[ \t]*$",
        re.MULTILINE,
    )

    # Whitespace after sentence punctuation, except after a bare list number
    # such as "1." so numbered headings stay attached to their title
    SENTENCE_ENDINGS = re.compile(r"(?<!\b\d\.)(?<!\b\d\d\.)(?<=[.!?])\s+")

    # Blank-line separators for the different line-ending conventions
    PARAGRAPH_SEPARATORS: tuple[re.Pattern[str], ...] = (
        re.compile(r"\r\n[ \t]*\r\n(?:[ \t]*\r\n)*"),
        re.compile(r"\n[ \t]*\n(?:[ \t]*\n)*"),
        re.compile(r"\r[ \t]*\r(?:[ \t]*\r)*"),
    )

    def __init__(
        self,
        max_size: int = DEFAULT_MAX_SIZE,
        min_size: int = DEFAULT_MIN_SIZE,
    ) -> None:
        """Initialize the segmentation engine.

        Args:
            max_size: Maximum chunk size in characters. Defaults to 700.
            min_size: Minimum chunk size in characters. Defaults to 100.

        Raises:
            ValueError: If max_size is not positive, min_size is negative,
                or min_size is not below max_size.
        """
        if max_size <= 0:
            raise ValueError("max_size must be positive")
        if min_size < 0:
            raise ValueError("min_size must not be negative")
        if min_size >= max_size:
            raise ValueError("min_size must be less than max_size")

        self._max_size = max_size
        self._min_size = min_size

    @property
    def max_size(self) -> int:
        """Get the maximum chunk size."""
        return self._max_size

    @property
    def min_size(self) -> int:
        """Get the minimum chunk size."""
        return self._min_size

    def segment(self, text: str) -> list[str]:
        """Split text into ordered chunk texts.

        Args:
            text: Decoded contract text.

        Returns:
            Ordered list of chunk texts. Text shorter than ``min_size``
            yields exactly one chunk.
        """
        return self.segment_with_strategy(text).chunks

    def segment_with_strategy(self, text: str) -> SegmentationResult:
        """Split text and report which strategy produced the chunks.

        Args:
            text: Decoded contract text.

        Returns:
            SegmentationResult with chunk texts and the winning strategy.
        """
        stripped = text.strip()
        if not stripped or len(stripped) < self._min_size:
            return SegmentationResult([stripped], SegmentationStrategy.SINGLE)

        sections = self._split_structural(stripped)
        if len(sections) > self.MIN_STRUCTURAL_SECTIONS:
            logger.debug(
                f"Structural split found {len(sections)} sections, "
                "using structural strategy"
            )
            return SegmentationResult(
                _slice(stripped, self._pack_sections(stripped, sections)),
                SegmentationStrategy.STRUCTURAL,
            )

        paragraphs = self._split_paragraphs(stripped)
        if len(paragraphs) > self.MIN_PARAGRAPHS:
            logger.debug(
                f"Paragraph split found {len(paragraphs)} paragraphs, "
                "using paragraph strategy"
            )
            return SegmentationResult(
                _slice(stripped, self._pack_paragraphs(paragraphs)),
                SegmentationStrategy.PARAGRAPH,
            )

        logger.debug(
            f"Only {len(paragraphs)} paragraph(s) found, using fixed-size windows"
        )
        return SegmentationResult(
            self._split_fixed(stripped), SegmentationStrategy.FIXED
        )

    def _split_structural(self, text: str) -> list[Span]:
        """Split text immediately before each numbered heading line.

        Content before the first heading (the preamble) is its own section.

        Args:
            text: Text to split.

        Returns:
            Trimmed, non-empty section spans in source order.
        """
        boundaries = [m.start() for m in self.SECTION_HEADING_PATTERN.finditer(text)]
        if not boundaries:
            return [(0, len(text))]

        if boundaries[0] != 0:
            boundaries.insert(0, 0)
        boundaries.append(len(text))

        sections: list[Span] = []
        for start, end in zip(boundaries, boundaries[1:]):
            span = _trim_span(text, start, end)
            if span is not None:
                sections.append(span)
        return sections

    def _pack_sections(self, text: str, sections: list[Span]) -> list[Span]:
        """Bound structural sections to the configured sizes.

        Undersized sections are merged forward into the buffer being built,
        oversized ones are split on sentence boundaries, and an undersized
        remainder at the end is appended to the previously emitted chunk.
        Merged spans keep the source text between sections.

        Args:
            text: Text the spans index into.
            sections: Structural section spans in source order.

        Returns:
            Chunk spans.
        """
        chunks: list[Span] = []
        buffer_start: int | None = None
        end = 0

        for section_start, end in sections:
            start = section_start if buffer_start is None else buffer_start
            size = end - start

            if size < self._min_size:
                buffer_start = start
                continue

            if size <= self._max_size:
                chunks.append((start, end))
                buffer_start = None
                continue

            pieces = self._split_sentences(text, start, end)
            chunks.extend(pieces[:-1])
            tail_start, tail_end = pieces[-1]
            if tail_end - tail_start < self._min_size:
                buffer_start = tail_start
            else:
                chunks.append(pieces[-1])
                buffer_start = None

        if buffer_start is not None:
            if chunks:
                chunks[-1] = (chunks[-1][0], end)
            else:
                chunks.append((buffer_start, end))

        return chunks

    def _split_sentences(self, text: str, start: int, end: int) -> list[Span]:
        """Split an oversized span at sentence boundaries.

        Sentences accumulate into a running piece that is flushed when the
        next sentence would push it past ``max_size``. A single sentence
        longer than ``max_size`` is kept whole. Whitespace inside a piece is
        kept as it appears in the source.

        Args:
            text: Text the span indexes into.
            start: Span start.
            end: Span end.

        Returns:
            Non-empty piece spans in source order.
        """
        sentences: list[Span] = []
        cursor = start
        for match in self.SENTENCE_ENDINGS.finditer(text, start, end):
            sentences.append((cursor, match.start()))
            cursor = match.end()
        sentences.append((cursor, end))

        pieces: list[Span] = []
        current: Span | None = None
        for sentence_start, sentence_end in sentences:
            if sentence_end <= sentence_start:
                continue
            if current is None:
                current = (sentence_start, sentence_end)
            elif sentence_end - current[0] > self._max_size:
                pieces.append(current)
                current = (sentence_start, sentence_end)
            else:
                current = (current[0], sentence_end)

        if current is not None:
            pieces.append(current)

        return pieces or [(start, end)]

    def _split_paragraphs(self, text: str) -> list[Span]:
        """Split on blank lines, picking the line-ending variant that wins.

        Args:
            text: Text to split.

        Returns:
            Trimmed, non-empty paragraph spans from the separator yielding
            the most.
        """
        best: list[Span] = [(0, len(text))]
        for separator in self.PARAGRAPH_SEPARATORS:
            paragraphs: list[Span] = []
            cursor = 0
            for match in separator.finditer(text):
                span = _trim_span(text, cursor, match.start())
                if span is not None:
                    paragraphs.append(span)
                cursor = match.end()
            span = _trim_span(text, cursor, len(text))
            if span is not None:
                paragraphs.append(span)

            if len(paragraphs) > len(best):
                best = paragraphs
        return best

    def _pack_paragraphs(self, paragraphs: list[Span]) -> list[Span]:
        """Accumulate paragraphs into chunks bounded by ``max_size``.

        A paragraph longer than ``max_size`` becomes its own chunk unsplit.

        Args:
            paragraphs: Paragraph spans in source order.

        Returns:
            Chunk spans.
        """
        chunks: list[Span] = []
        current: Span | None = None

        for start, end in paragraphs:
            if current is None:
                current = (start, end)
            elif end - current[0] > self._max_size:
                chunks.append(current)
                current = (start, end)
            else:
                current = (current[0], end)

        if current is not None:
            chunks.append(current)

        return chunks

    def _split_fixed(self, text: str) -> list[str]:
        """Cut text into consecutive ``max_size`` windows.

        Args:
            text: Text to split.

        Returns:
            Windows of exactly ``max_size`` characters; the last may be shorter.
        """
        return [
            text[start : start + self._max_size]
            for start in range(0, len(text), self._max_size)
        ]


def _trim_span(text: str, start: int, end: int) -> Span | None:
    """Narrow a span past surrounding whitespace; None when nothing is left."""
    while start < end and text[start].isspace():
        start += 1
    while end > start and text[end - 1].isspace():
        end -= 1
    return (start, end) if start < end else None


def _slice(text: str, spans: list[Span]) -> list[str]:
    return [text[start:end] for start, end in spans]
