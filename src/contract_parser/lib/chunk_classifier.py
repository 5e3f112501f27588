"""Structural classification of contract chunks.

``ChunkClassifier`` asks the generative capability for one label per chunk
and decodes the reply through a closed table. It never raises: when the
capability is absent, fails, or replies with nothing, the chunk falls back
to ``StructuralType.OTHER`` (or, when enabled, to the keyword heuristics of
``HeuristicChunkClassifier``).

Chunks are independent, so ``classify_batch`` dispatches them concurrently
under a semaphore and reassembles results in input order.
"""

import asyncio
import re

from contract_parser.lib.errors import AIMalformedResponseError
from contract_parser.lib.logging_config import get_logger
from contract_parser.lib.response_parsing import (
    decode_structural_label,
    truncate_for_log,
)
from contract_parser.lib.text_generation import GenerationOptions, TextGenerator
from contract_parser.models.chunk import SectionInfo, StructuralType
from contract_parser.models.config import ClassificationConfig

logger = get_logger(__name__)

CLASSIFICATION_PROMPT_TEMPLATE = """Classify this contract text chunk into ONE category.

TEXT CHUNK:
{chunk}

CLASSIFICATION RULES:

Header:
- Contract titles and document headers
- Party information blocks (EMPLOYER:, EMPLOYEE:, CLIENT:, DEVELOPER:, LICENSOR:, LICENSEE:)
- Party details (name, address, contact info)
- Introductory recitals

Clause:
- Numbered sections with substantive terms
- Employment: "1. POSITION", "2. COMPENSATION", "3. BENEFITS", "4. TERMINATION"
- Service: "1. SCOPE OF WORK", "2. PAYMENT TERMS", "3. DELIVERABLES"
- License: "1. GRANT OF LICENSE", "2. ROYALTIES", "3. EXCLUSIVITY"
- Main contractual obligations and rights

Term:
- Specific definitions, schedules, or detailed conditions
- Employment: benefits breakdown, vesting schedules, vacation policies
- Service: milestone schedules, payment breakdowns, deliverable details
- License: royalty rates, minimum payments, field of use definitions
- Compensation details, pricing tables

Condition:
- If-then statements and conditional obligations
- Termination conditions, renewal terms
- Contingent requirements
- "Either party may terminate if..."
- "In the event of..."

Signature:
- Signature lines and execution blocks
- "SIGNATURES:", "ACKNOWLEDGED AND AGREED:", "IN WITNESS WHEREOF"
- Witness lines, date lines
- Notary sections

Other:
- Any content not fitting above categories

EXAMPLES:
Employment Contract:
- "EMPLOYER: Innovation Tech Solutions\\nAddress: 555 Corporate..." -> Header
- "1. POSITION AND DUTIES\\nJob Title: Senior Software Engineer..." -> Clause
- "Base Salary: $145,000 per year\\nPay Frequency: Bi-weekly..." -> Term
- "Either party may terminate at any time" -> Condition
- "ACKNOWLEDGED AND AGREED:\\nEMPLOYER: _____" -> Signature

Service Contract:
- "CLIENT: TechCorp Inc." -> Header
- "1. PROJECT SCOPE\\nDeveloper agrees to develop..." -> Clause
- "Phase 1: Analysis (Weeks 1-3) - Payment: $25,000" -> Term
- "If Client fails to provide requirements within 5 days..." -> Condition

License Agreement:
- "LICENSOR: BioGen Research Ltd." -> Header
- "2. ROYALTIES\\nLicensee shall pay a royalty of 4% of Net Sales..." -> Clause
- "Minimum Annual Royalty: $50,000" -> Term

Respond with ONLY ONE WORD: Header, Clause, Term, Condition, Signature, or Other"""


class HeuristicChunkClassifier:
    """Keyword heuristics used in place of ``Other`` when AI is unavailable.

    Rules are checked in order and the first hit wins:

    1. Execution-block language or signature rules -> Signature
    2. Party role labels or an agreement title line -> Header
    3. A leading numbered heading -> Clause
    4. Conditional language -> Condition
    5. Amounts, rates or definitions -> Term
    """

    SIGNATURE_PATTERN = re.compile(
        r"\b(?:SIGNATURES?|ACKNOWLEDGED\s+AND\s+AGREED|IN\s+WITNESS\s+WHEREOF"
        r"|NOTARY\s+PUBLIC)\b|^[ \t]*(?:By|Signature|Signed):[ \t]*_{3,}|_{8,}",
        re.MULTILINE,
    )
    HEADER_PATTERN = re.compile(
        r"^[ \t]*(?:EMPLOYER|EMPLOYEE|CLIENT|DEVELOPER|PROVIDER|CONTRACTOR|VENDOR"
        r"|CONSULTANT|CUSTOMER|LICENSOR|LICENSEE|PARTIES):"
        r"|\A\s*[A-Z][A-Z0-9 \t&,'\-]*(?:AGREEMENT|CONTRACT)[ \t]*$"
        r"|\bWHEREAS\b",
        re.MULTILINE,
    )
    CONDITION_PATTERN = re.compile(
        r"\b(?:if|in\s+the\s+event\s+(?:of|that)|either\s+party\s+may"
        r"|provided\s+that|unless|subject\s+to)\b",
        re.IGNORECASE,
    )
    TERM_PATTERN = re.compile(
        r"\$[ \t]*\d|\b\d+(?:\.\d+)?[ \t]*%|\bmeans\b"
        r"|\bper[ \t]+(?:year|annum|month|hour)\b|\bschedule\b",
        re.IGNORECASE,
    )

    def classify(self, chunk_text: str) -> StructuralType:
        """Classify a chunk from surface cues.

        Args:
            chunk_text: The chunk content.

        Returns:
            The first matching structural type, else ``OTHER``.
        """
        if self.SIGNATURE_PATTERN.search(chunk_text):
            return StructuralType.SIGNATURE
        if self.HEADER_PATTERN.search(chunk_text):
            return StructuralType.HEADER
        if SectionInfo.parse(chunk_text) is not None:
            return StructuralType.CLAUSE
        if self.CONDITION_PATTERN.search(chunk_text):
            return StructuralType.CONDITION
        if self.TERM_PATTERN.search(chunk_text):
            return StructuralType.TERM
        return StructuralType.OTHER


class ChunkClassifier:
    """Assign one structural type to each chunk text.

    Example:
        >>> classifier = ChunkClassifier(generator=None)
        >>> await classifier.classify("1. SCOPE\\nDeveloper will build X.")
        <StructuralType.OTHER: 'Other'>
    """

    def __init__(
        self,
        generator: TextGenerator | None,
        config: ClassificationConfig | None = None,
        fallback: HeuristicChunkClassifier | None = None,
    ) -> None:
        """Initialize the classifier.

        Args:
            generator: Generative capability, or None when AI is unavailable.
            config: Classification settings. Uses defaults if not provided.
            fallback: Heuristic classifier used instead of ``OTHER`` on the
                fallback path. Built from ``config.heuristic_fallback`` when
                not given.
        """
        self._generator = generator
        self._config = config or ClassificationConfig()
        if fallback is None and self._config.heuristic_fallback:
            fallback = HeuristicChunkClassifier()
        self._fallback = fallback
        self._options = GenerationOptions(
            temperature=self._config.temperature,
            max_tokens=self._config.max_tokens,
        )

    @property
    def ai_available(self) -> bool:
        """Whether the AI-primary path is in use."""
        return self._generator is not None

    def _format_prompt(self, chunk_text: str) -> str:
        sample = chunk_text[: self._config.max_sample_chars]
        return CLASSIFICATION_PROMPT_TEMPLATE.format(chunk=sample)

    def _fallback_type(self, chunk_text: str) -> StructuralType:
        if self._fallback is None:
            return StructuralType.OTHER
        return self._fallback.classify(chunk_text)

    async def classify(self, chunk_text: str) -> StructuralType:
        """Classify a single chunk.

        Never raises. Any failure on the AI path resolves to the fallback.

        Args:
            chunk_text: The chunk content.

        Returns:
            The structural type for the chunk.
        """
        if self._generator is None:
            return self._fallback_type(chunk_text)

        try:
            reply = await self._generator.generate(
                self._format_prompt(chunk_text), self._options
            )
            label = decode_structural_label(reply)
        except AIMalformedResponseError as e:
            logger.warning(
                f"Malformed classification reply, using fallback type: "
                f"{truncate_for_log(e.raw_response)!r}"
            )
            return self._fallback_type(chunk_text)
        except Exception as e:
            logger.warning(
                f"Error classifying chunk type, using fallback. "
                f"Chunk length: {len(chunk_text)}, error: {e}"
            )
            return self._fallback_type(chunk_text)

        logger.debug(
            f"Chunk classified as {label.value} (raw: {truncate_for_log(reply)!r}), "
            f"first 100 chars: {chunk_text[:100]!r}"
        )
        return label

    async def classify_batch(
        self,
        chunk_texts: list[str],
        concurrency: int | None = None,
    ) -> list[StructuralType]:
        """Classify many chunks concurrently, keeping input order.

        Args:
            chunk_texts: Chunk contents in document order.
            concurrency: Optional concurrency override. Uses the configured
                value if None.

        Returns:
            Structural types, one per chunk, in the same order as the input.
        """
        if not chunk_texts:
            return []

        semaphore = asyncio.Semaphore(concurrency or self._config.concurrency)

        async def classify_one(chunk_text: str) -> StructuralType:
            async with semaphore:
                return await self.classify(chunk_text)

        # gather preserves input order regardless of completion order
        results = await asyncio.gather(*(classify_one(t) for t in chunk_texts))
        return list(results)
