"""Document parsing service.

Orchestrates the pipeline for one document:

    fetch bytes -> extract text -> segment -> classify (concurrent) -> assemble

and, independently on the same text, metadata extraction. Only
``UpstreamFetchError`` and ``UnsupportedFormatError`` escape; every failure
of the generative capability degrades inside the extractors.
"""

import asyncio

from contract_parser.lib.chunk_assembler import ChunkAssembler
from contract_parser.lib.chunk_classifier import ChunkClassifier
from contract_parser.lib.clock import Clock
from contract_parser.lib.errors import UnsupportedFormatError, UpstreamFetchError
from contract_parser.lib.logging_config import get_logger
from contract_parser.lib.metadata_extractor import MetadataExtractor
from contract_parser.lib.segmentation import SegmentationEngine
from contract_parser.lib.text_extractor import DocumentTextExtractor, TextExtractor
from contract_parser.lib.text_generation import (
    TextGenerator,
    build_text_generator,
    check_connection,
)
from contract_parser.models.chunk import Chunk
from contract_parser.models.config import ParserConfig
from contract_parser.models.metadata import ContractMetadata
from contract_parser.services.document_source import DocumentSource, HttpDocumentSource

logger = get_logger(__name__)


class DocumentParsingService:
    """Parse and chunk contract documents.

    Example:
        >>> config = load_parser_config("parser.yaml")
        >>> service = DocumentParsingService.from_config(config)
        >>> metadata, chunks = await service.process_document("3f2b...")
    """

    def __init__(
        self,
        source: DocumentSource,
        segmentation_engine: SegmentationEngine,
        classifier: ChunkClassifier,
        metadata_extractor: MetadataExtractor,
        assembler: ChunkAssembler,
        text_extractor: TextExtractor | None = None,
        generator: TextGenerator | None = None,
    ) -> None:
        """Initialize the service from its components.

        Args:
            source: Document byte source.
            segmentation_engine: Splits text into chunk texts.
            classifier: Assigns structural types to chunk texts.
            metadata_extractor: Derives document-level metadata.
            assembler: Builds final Chunk records.
            text_extractor: Decodes document bytes. Defaults to the plain-text
                only DocumentTextExtractor.
            generator: Generative capability, used for connection tests.
        """
        self._source = source
        self._segmentation_engine = segmentation_engine
        self._classifier = classifier
        self._metadata_extractor = metadata_extractor
        self._assembler = assembler
        self._text_extractor = text_extractor or DocumentTextExtractor()
        self._generator = generator

    @classmethod
    def from_config(
        cls,
        config: ParserConfig,
        source: DocumentSource | None = None,
        text_extractor: TextExtractor | None = None,
        generator: TextGenerator | None = None,
        clock: Clock | None = None,
    ) -> "DocumentParsingService":
        """Build the service and its components from configuration.

        The generative capability is resolved once here; when ``generator``
        is not given it is built from ``config.llm`` and may be None.

        Args:
            config: Parser configuration.
            source: Document byte source. Defaults to the HTTP source built
                from ``config.document_source``.
            text_extractor: Document text decoder.
            generator: Pre-built generative capability.
            clock: Timestamp source shared by the extractors and assembler.

        Returns:
            A ready DocumentParsingService.
        """
        if generator is None:
            generator = build_text_generator(config.llm)

        return cls(
            source=source or HttpDocumentSource.from_config(config.document_source),
            segmentation_engine=SegmentationEngine(
                max_size=config.segmentation.max_chunk_size,
                min_size=config.segmentation.min_chunk_size,
            ),
            classifier=ChunkClassifier(generator, config.classification),
            metadata_extractor=MetadataExtractor(
                generator, config.extraction, clock=clock
            ),
            assembler=ChunkAssembler(clock=clock),
            text_extractor=text_extractor,
            generator=generator,
        )

    @property
    def ai_available(self) -> bool:
        """Whether a generative capability was configured."""
        return self._generator is not None

    async def load_text(self, document_id: str) -> str:
        """Fetch a document and decode it to text.

        Raises:
            UpstreamFetchError: If the document bytes cannot be retrieved.
            UnsupportedFormatError: If the content type cannot be decoded.
        """
        content = await asyncio.to_thread(self._source.get_document_bytes, document_id)
        return self._text_extractor.extract_text(content.data, content.content_type)

    async def extract_metadata(self, text: str) -> ContractMetadata:
        """Extract document-level metadata from decoded text."""
        return await self._metadata_extractor.extract(text)

    async def chunk_text(self, text: str, document_id: str) -> list[Chunk]:
        """Segment, classify and assemble decoded text into chunks.

        Args:
            text: Decoded contract text.
            document_id: Identifier stamped on every chunk.

        Returns:
            Ordered chunks with contiguous offsets.
        """
        result = self._segmentation_engine.segment_with_strategy(text)
        logger.info(
            f"Segmented document {document_id} into {len(result.chunks)} chunks "
            f"using {result.strategy.value} strategy"
        )

        classifications = await self._classifier.classify_batch(result.chunks)
        return self._assembler.assemble(
            result.chunks, classifications, document_id, strategy=result.strategy
        )

    async def parse_document(self, document_id: str) -> ContractMetadata:
        """Fetch a document and extract its metadata.

        Raises:
            UpstreamFetchError: If the document bytes cannot be retrieved.
            UnsupportedFormatError: If the content type cannot be decoded.
        """
        logger.info(f"Starting document parsing for {document_id}")
        try:
            text = await self.load_text(document_id)
        except (UpstreamFetchError, UnsupportedFormatError) as e:
            logger.error(f"Failed to parse document {document_id}: {e}")
            raise

        metadata = await self.extract_metadata(text)
        logger.info(
            f"Document parsing completed for {document_id} "
            f"({metadata.extraction_method} extraction)"
        )
        return metadata

    async def chunk_document(self, document_id: str) -> list[Chunk]:
        """Fetch a document and split it into classified chunks.

        Raises:
            UpstreamFetchError: If the document bytes cannot be retrieved.
            UnsupportedFormatError: If the content type cannot be decoded.
        """
        logger.info(f"Starting document chunking for {document_id}")
        try:
            text = await self.load_text(document_id)
        except (UpstreamFetchError, UnsupportedFormatError) as e:
            logger.error(f"Failed to chunk document {document_id}: {e}")
            raise

        chunks = await self.chunk_text(text, document_id)
        logger.info(
            f"Document chunking completed for {document_id}. "
            f"Created {len(chunks)} chunks"
        )
        return chunks

    async def process_document(
        self, document_id: str
    ) -> tuple[ContractMetadata, list[Chunk]]:
        """Fetch a document once, then extract metadata and chunk concurrently.

        Raises:
            UpstreamFetchError: If the document bytes cannot be retrieved.
            UnsupportedFormatError: If the content type cannot be decoded.
        """
        logger.info(f"Starting document processing for {document_id}")
        try:
            text = await self.load_text(document_id)
        except (UpstreamFetchError, UnsupportedFormatError) as e:
            logger.error(f"Failed to process document {document_id}: {e}")
            raise

        metadata, chunks = await asyncio.gather(
            self.extract_metadata(text),
            self.chunk_text(text, document_id),
        )
        logger.info(
            f"Document processing completed for {document_id}: "
            f"{metadata.extraction_method} metadata, {len(chunks)} chunks"
        )
        return metadata, chunks

    async def test_ai_connection(self) -> bool:
        """Check that the generative capability answers a trivial prompt."""
        return await check_connection(self._generator)
