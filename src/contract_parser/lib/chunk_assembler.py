"""Assembly of segmentation output and classifications into Chunk records."""

from collections.abc import Callable

from ulid import ULID

from contract_parser.lib.clock import Clock, utc_now
from contract_parser.lib.logging_config import get_logger
from contract_parser.lib.segmentation import SegmentationStrategy
from contract_parser.models.chunk import Chunk, SectionInfo, StructuralType

logger = get_logger(__name__)

PROCESSING_METHOD = "semantic-chunking"
PREVIEW_LENGTH = 50
PREVIEW_ELLIPSIS = "..."


def make_preview(content: str, length: int = PREVIEW_LENGTH) -> str:
    """Collapse content to one line and cut it to ``length`` characters.

    Example:
        >>> make_preview("1. SCOPE\\nDeveloper will build X.")
        '1. SCOPE Developer will build X.'
    """
    single_line = content.replace("\r\n", " ").replace("\n", " ").replace("\r", " ")
    if len(single_line) <= length:
        return single_line
    return single_line[:length] + PREVIEW_ELLIPSIS


class ChunkAssembler:
    """Build final Chunk records with offsets and derived annotations.

    Offsets come from a cursor that starts at 0 and advances by each chunk's
    length, so they depend only on segmentation output and never on which
    classification path ran.

    Example:
        >>> assembler = ChunkAssembler()
        >>> chunks = assembler.assemble(texts, types, document_id="doc-1")
        >>> chunks[1].start_offset == chunks[0].end_offset
        True
    """

    def __init__(
        self,
        clock: Clock | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        """Initialize the assembler.

        Args:
            clock: Source of the ``createdAt`` timestamp.
            id_factory: Chunk id generator. Defaults to ULIDs.
        """
        self._clock = clock or utc_now
        self._id_factory = id_factory or (lambda: str(ULID()))

    def assemble(
        self,
        chunk_texts: list[str],
        classifications: list[StructuralType],
        document_id: str,
        strategy: SegmentationStrategy | None = None,
    ) -> list[Chunk]:
        """Combine chunk texts and their types into Chunk records.

        Args:
            chunk_texts: Segmentation output in document order.
            classifications: One structural type per chunk text.
            document_id: Identifier stamped on every chunk.
            strategy: Segmentation strategy to record, when known.

        Returns:
            Chunks with contiguous indices and offsets.

        Raises:
            ValueError: If the two lists differ in length.
        """
        if len(chunk_texts) != len(classifications):
            raise ValueError(
                f"Got {len(chunk_texts)} chunk texts but "
                f"{len(classifications)} classifications"
            )

        created_at = self._clock().isoformat()
        chunks: list[Chunk] = []
        cursor = 0

        for index, (content, chunk_type) in enumerate(zip(chunk_texts, classifications)):
            metadata = self._build_metadata(content, chunk_type, created_at, strategy)
            chunks.append(
                Chunk(
                    id=self._id_factory(),
                    document_id=document_id,
                    content=content,
                    index=index,
                    start_offset=cursor,
                    end_offset=cursor + len(content),
                    type=chunk_type,
                    metadata=metadata,
                )
            )
            cursor += len(content)

        logger.debug(f"Assembled {len(chunks)} chunks for document {document_id}")
        return chunks

    def _build_metadata(
        self,
        content: str,
        chunk_type: StructuralType,
        created_at: str,
        strategy: SegmentationStrategy | None,
    ) -> dict[str, object]:
        metadata: dict[str, object] = {
            "chunkType": chunk_type.value,
            "charCount": len(content),
            "wordCount": len(content.split()),
            "preview": make_preview(content),
            "createdAt": created_at,
            "processingMethod": PROCESSING_METHOD,
        }
        if strategy is not None:
            metadata["segmentationStrategy"] = strategy.value

        section = SectionInfo.parse(content)
        if section is not None:
            metadata["hasSectionNumber"] = True
            metadata["sectionNumber"] = section.number
            metadata["sectionTitle"] = section.title
        else:
            metadata["hasSectionNumber"] = False

        return metadata
