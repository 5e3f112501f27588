"""Tests for chunk models and section heading detection."""

import pytest
from pydantic import ValidationError

from contract_parser.models.chunk import (
    STRUCTURAL_LABELS,
    Chunk,
    SectionInfo,
    StructuralType,
)


@pytest.mark.unit
class TestStructuralType:
    """Tests for the StructuralType enum and label table."""

    def test_values_are_capitalized_labels(self) -> None:
        """Test that enum values are the persisted label strings."""
        assert [t.value for t in StructuralType] == [
            "Header",
            "Clause",
            "Term",
            "Condition",
            "Signature",
            "Other",
        ]

    def test_label_table_excludes_other(self) -> None:
        """Test that only the five concrete labels are decodable."""
        assert set(STRUCTURAL_LABELS) == {
            "header",
            "clause",
            "term",
            "condition",
            "signature",
        }
        assert StructuralType.OTHER not in STRUCTURAL_LABELS.values()


@pytest.mark.unit
class TestSectionInfo:
    """Tests for SectionInfo.parse()."""

    def test_parses_number_and_title(self) -> None:
        """Test the canonical numbered uppercase heading."""
        info = SectionInfo.parse("4. BONUS AND EQUITY\nStock Options: 5,000")
        assert info == SectionInfo(number=4, title="BONUS AND EQUITY")

    def test_heading_only_text(self) -> None:
        """Test a chunk consisting of just the heading."""
        assert SectionInfo.parse("1. SCOPE") == SectionInfo(number=1, title="SCOPE")

    def test_trailing_colon_is_dropped(self) -> None:
        """Test that heading punctuation is not part of the title."""
        info = SectionInfo.parse("12. GOVERNING LAW:\nDelaware law applies.")
        assert info is not None
        assert info.number == 12
        assert info.title == "GOVERNING LAW"

    def test_leading_whitespace_allowed(self) -> None:
        """Test that whitespace before the number is tolerated."""
        info = SectionInfo.parse("\n  3. PAYMENT TERMS\nNet 30.")
        assert info == SectionInfo(number=3, title="PAYMENT TERMS")

    def test_prose_is_not_a_heading(self) -> None:
        """Test that ordinary sentences are not detected."""
        assert SectionInfo.parse("Developer will build X.") is None

    def test_mixed_case_title_is_not_a_heading(self) -> None:
        """Test that the title must be uppercase."""
        assert SectionInfo.parse("2. Payment Terms\nNet 30.") is None

    def test_heading_must_open_the_chunk(self) -> None:
        """Test that headings in the middle of a chunk are ignored."""
        assert SectionInfo.parse("Preamble text.\n2. PAYMENT\nNet 30.") is None


@pytest.mark.unit
class TestChunk:
    """Tests for the Chunk model."""

    def _chunk(self, **overrides: object) -> Chunk:
        values: dict[str, object] = {
            "id": "chunk-0",
            "document_id": "doc-1",
            "content": "1. SCOPE\nDeveloper will build X.",
            "index": 0,
            "start_offset": 0,
            "end_offset": 32,
            "type": StructuralType.CLAUSE,
        }
        values.update(overrides)
        return Chunk(**values)

    def test_valid_chunk(self) -> None:
        """Test creating a chunk whose span matches its content."""
        chunk = self._chunk()
        assert chunk.end_offset - chunk.start_offset == len(chunk.content)

    def test_offset_mismatch_rejected(self) -> None:
        """Test that end_offset must equal start_offset + len(content)."""
        with pytest.raises(ValidationError, match="end_offset"):
            self._chunk(start_offset=5, end_offset=7)

    def test_negative_index_rejected(self) -> None:
        """Test that indices are zero-based."""
        with pytest.raises(ValidationError):
            self._chunk(index=-1)

    def test_type_defaults_to_other(self) -> None:
        """Test the default structural type."""
        chunk = Chunk(
            id="c",
            document_id="d",
            content="abc",
            index=0,
            start_offset=0,
            end_offset=3,
        )
        assert chunk.type == StructuralType.OTHER

    def test_chunk_is_frozen(self) -> None:
        """Test that chunks cannot be mutated."""
        chunk = self._chunk()
        with pytest.raises(ValidationError):
            chunk.content = "changed"  # type: ignore[misc]

    def test_section_info_from_metadata(self) -> None:
        """Test section_info reads the annotation keys."""
        chunk = self._chunk(
            metadata={
                "hasSectionNumber": True,
                "sectionNumber": 1,
                "sectionTitle": "SCOPE",
            }
        )
        assert chunk.section_info == SectionInfo(number=1, title="SCOPE")

    def test_section_info_absent(self) -> None:
        """Test section_info is None without a detected heading."""
        chunk = self._chunk(metadata={"hasSectionNumber": False})
        assert chunk.section_info is None

    def test_to_record_dict(self) -> None:
        """Test the camelCase record shape."""
        record = self._chunk(metadata={"charCount": 32}).to_record_dict()
        assert record == {
            "id": "chunk-0",
            "documentId": "doc-1",
            "content": "1. SCOPE\nDeveloper will build X.",
            "index": 0,
            "startOffset": 0,
            "endOffset": 32,
            "type": "Clause",
            "metadata": {"charCount": 32},
        }
