"""Chunk models produced by the chunking pipeline.

A chunking call turns decoded contract text into an ordered list of
``Chunk`` records. Offsets are computed from the segmentation output alone,
so for any chunk list produced by one call:

- indices are contiguous ``0..N-1``
- ``end_offset == start_offset + len(content)``
- ``chunks[i + 1].start_offset == chunks[i].end_offset``
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class StructuralType(str, Enum):
    """Structural role of a chunk within a contract.

    Attributes:
        HEADER: Titles, party blocks and introductory recitals
        CLAUSE: Numbered sections carrying substantive obligations
        TERM: Definitions, schedules, compensation and payment details
        CONDITION: Conditional obligations ("if", "in the event of")
        SIGNATURE: Execution blocks, witness and date lines
        OTHER: Anything else, and the default when classification fails
    """

    HEADER = "Header"
    CLAUSE = "Clause"
    TERM = "Term"
    CONDITION = "Condition"
    SIGNATURE = "Signature"
    OTHER = "Other"


# Closed lookup table for decoding a generative reply into a structural type
STRUCTURAL_LABELS: dict[str, StructuralType] = {
    "header": StructuralType.HEADER,
    "clause": StructuralType.CLAUSE,
    "term": StructuralType.TERM,
    "condition": StructuralType.CONDITION,
    "signature": StructuralType.SIGNATURE,
}

# "<n>. <UPPERCASE TITLE>" at the very start of a chunk
_LEADING_SECTION_PATTERN = re.compile(
    r"\A\s*(\d+)\.[ \t]+([A-Z][A-Z0-9 \t&'/,()\-]*[A-Z0-9)])[ \t]*[.:]?[ \t]*(?:\r?\n|\Z)"
)


@dataclass(frozen=True)
class SectionInfo:
    """Numbered heading detected at the start of a chunk.

    Attributes:
        number: The section number (e.g., 4 for "4. BONUS AND EQUITY")
        title: The uppercase heading title without the number
    """

    number: int
    title: str

    @classmethod
    def parse(cls, text: str) -> "SectionInfo | None":
        """Parse a leading ``"<n>. <TITLE>"`` heading from chunk text.

        Args:
            text: Chunk text.

        Returns:
            SectionInfo when the text opens with a numbered uppercase heading,
            otherwise None.

        Example:
            >>> SectionInfo.parse("4. BONUS AND EQUITY\\nStock Options: 5,000")
            SectionInfo(number=4, title='BONUS AND EQUITY')
        """
        match = _LEADING_SECTION_PATTERN.match(text)
        if not match:
            return None
        title = re.sub(r"[ \t]+", " ", match.group(2)).strip()
        return cls(number=int(match.group(1)), title=title)


class Chunk(BaseModel):
    """A contiguous piece of contract text with its structural type.

    Chunks are immutable; re-chunking a document recomputes the whole list.

    Attributes:
        id: Unique chunk identifier (ULID)
        document_id: Identifier of the source document
        content: The chunk text
        index: Zero-based position of the chunk in the document
        start_offset: Cursor position where this chunk starts
        end_offset: Cursor position where this chunk ends (exclusive)
        type: Structural classification
        metadata: Derived annotations (chunkType, charCount, createdAt,
            processingMethod, hasSectionNumber, wordCount, preview and,
            when a heading was detected, sectionNumber and sectionTitle)
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique chunk identifier")
    document_id: str = Field(..., description="Source document identifier")
    content: str = Field(..., description="Chunk text")
    index: int = Field(..., ge=0, description="Zero-based chunk index")
    start_offset: int = Field(..., ge=0, description="Start offset")
    end_offset: int = Field(..., ge=0, description="End offset (exclusive)")
    type: StructuralType = Field(
        default=StructuralType.OTHER, description="Structural type"
    )
    metadata: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def validate_offsets(self) -> "Chunk":
        """Ensure the offset span matches the content length."""
        if self.end_offset != self.start_offset + len(self.content):
            raise ValueError(
                f"end_offset ({self.end_offset}) must equal start_offset "
                f"({self.start_offset}) + len(content) ({len(self.content)})"
            )
        return self

    @property
    def section_info(self) -> SectionInfo | None:
        """Return the detected section heading, if any."""
        if not self.metadata.get("hasSectionNumber"):
            return None
        return SectionInfo(
            number=int(self.metadata["sectionNumber"]),
            title=str(self.metadata["sectionTitle"]),
        )

    def to_record_dict(self) -> dict[str, Any]:
        """Convert to a flat, JSON-serializable dict for downstream storage.

        Returns:
            Dictionary with camelCase keys matching the persisted chunk shape.
        """
        return {
            "id": self.id,
            "documentId": self.document_id,
            "content": self.content,
            "index": self.index,
            "startOffset": self.start_offset,
            "endOffset": self.end_offset,
            "type": self.type.value,
            "metadata": dict(self.metadata),
        }
