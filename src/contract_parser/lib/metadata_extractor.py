"""Document-level contract metadata extraction.

The AI-primary path sends one bounded prompt to the generative capability
and decodes a JSON object from the reply, field by field. Any failure
(capability absent, call error, empty reply, unparsable JSON, a field that
raises while decoding) routes the whole call to ``RuleBasedMetadataExtractor``.
"""

from datetime import date
from decimal import Decimal
from typing import Any

from contract_parser.lib.clock import Clock, utc_now
from contract_parser.lib.errors import AIMalformedResponseError
from contract_parser.lib.logging_config import get_logger
from contract_parser.lib.response_parsing import parse_json_object, truncate_for_log
from contract_parser.lib.rule_based_extractor import (
    RuleBasedMetadataExtractor,
    parse_amount,
    parse_date,
)
from contract_parser.lib.text_generation import GenerationOptions, TextGenerator
from contract_parser.models.config import ExtractionConfig
from contract_parser.models.metadata import EXTRACTION_METHOD_AI, ContractMetadata

logger = get_logger(__name__)

PARAGRAPH_BREAKS = ("\r\n\r\n", "\n\n")

METADATA_PROMPT_TEMPLATE = """You are an expert contract analysis AI specializing in business, \
employment and intellectual property license contracts. Extract comprehensive metadata.

CONTRACT TEXT:
{document}

EXTRACTION RULES FOR DIFFERENT CONTRACT TYPES:

For SERVICE/DEVELOPMENT CONTRACTS:
- Sum all milestone payments for total value
- Parties: CLIENT and DEVELOPER/PROVIDER roles

For EMPLOYMENT CONTRACTS:
- Use annual BASE SALARY as contract value
- Can also include signing bonus if applicable
- Parties: EMPLOYER and EMPLOYEE roles

For IP LICENSE AGREEMENTS:
- Contract value = upfront license fee + year-1 minimum annual royalty + first milestone payment
- Parties: LICENSOR and LICENSEE roles
- Key terms should include royalty, exclusivity, sublicensing and field of use when present

For ALL CONTRACTS:
1. TITLE: Extract exact title from first meaningful line
2. DATE: Contract execution date ("as of", "entered into on", or signature date)
3. EXPIRATION: Termination date, end date, or renewal date if specified
4. VALUE:
   - Service contracts: Sum of all payments/milestones
   - Employment: Annual base salary (+ signing bonus if applicable)
   - License: Upfront fee + minimum royalty + first milestone
   - Use largest total value if multiple amounts exist
5. CURRENCY: Extract from $ symbol (USD) or explicit currency code
6. PARTIES: Include ALL parties with their roles in parentheses
   - Examples: "TechCorp Inc. (CLIENT)", "Jessica Martinez (EMPLOYEE)"
7. KEY TERMS: Extract from section headers and critical clauses:
   - Employment: compensation, benefits, equity, vacation, confidentiality, IP, \
non-compete, termination
   - Service: scope, deliverables, payment, IP rights, warranties, support, liability, \
governing law
   - License: royalty, exclusivity, sublicense, territory, milestones, patents
8. TYPE: Exact contract type from title

Return ONLY a JSON object (no markdown, no explanations):
{{
    "title": "EXACT contract title",
    "contractDate": "YYYY-MM-DD or null",
    "expirationDate": "YYYY-MM-DD or null",
    "contractValue": numeric_value_or_null,
    "currency": "USD or other",
    "parties": ["Party Name (ROLE)"],
    "keyTerms": ["term1", "term2"],
    "contractType": "type from title"
}}

EXAMPLES:
Employment: {{"contractValue": 145000, "parties": ["Innovation Tech Solutions (EMPLOYER)", \
"Jessica Martinez (EMPLOYEE)"]}}
Service: {{"contractValue": 120000, "parties": ["TechCorp Inc. (CLIENT)", \
"Digital Solutions LLC (DEVELOPER)"]}}
License: {{"contractValue": 850000, "parties": ["BioGen Research Ltd. (LICENSOR)", \
"MedTech Pharma Inc. (LICENSEE)"]}}

Return ONLY valid JSON, nothing else."""


def truncate_text(text: str, max_chars: int, backoff_chars: int) -> str:
    """Bound text to a prefix, preferring to cut at a paragraph break.

    When the text is longer than ``max_chars``, the prefix is shortened to
    the last paragraph break that falls within the final ``backoff_chars``
    characters of the cap. Without such a break the hard cut is kept.

    Args:
        text: Full text.
        max_chars: Maximum prefix length.
        backoff_chars: How far back from the cap to look for a break.

    Returns:
        The bounded prefix.
    """
    if len(text) <= max_chars:
        return text

    prefix = text[:max_chars]
    window_start = max(0, max_chars - backoff_chars)
    cut = max(prefix.rfind(brk, window_start) for brk in PARAGRAPH_BREAKS)
    if cut > 0:
        return prefix[:cut]
    return prefix


def _as_text(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _as_date(value: Any) -> date | None:
    text = _as_text(value)
    if text is None:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return parse_date(text)


def _as_decimal(value: Any) -> Decimal | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return parse_amount(str(value))
    text = _as_text(value)
    if text is None:
        return None
    return parse_amount(text.lstrip("$").strip())


def _as_string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


class MetadataExtractor:
    """Derive one ContractMetadata record from full contract text.

    Attributes:
        ai_available: Whether the AI-primary path is in use.

    Example:
        >>> extractor = MetadataExtractor(generator=None)
        >>> metadata = await extractor.extract(contract_text)
        >>> metadata.extraction_method
        'rule-based'
    """

    def __init__(
        self,
        generator: TextGenerator | None,
        config: ExtractionConfig | None = None,
        rule_extractor: RuleBasedMetadataExtractor | None = None,
        clock: Clock | None = None,
    ) -> None:
        """Initialize the extractor.

        Args:
            generator: Generative capability, or None when AI is unavailable.
            config: Extraction settings. Uses defaults if not provided.
            rule_extractor: Fallback extractor. Built with the same clock if
                not provided.
            clock: Source of the ``extractionDate`` timestamp.
        """
        self._generator = generator
        self._config = config or ExtractionConfig()
        self._clock = clock or utc_now
        self._rule_extractor = rule_extractor or RuleBasedMetadataExtractor(
            clock=self._clock
        )
        self._options = GenerationOptions(
            temperature=self._config.temperature,
            max_tokens=self._config.max_tokens,
        )

    @property
    def ai_available(self) -> bool:
        """Whether the AI-primary path is in use."""
        return self._generator is not None

    def _format_prompt(self, text_sample: str) -> str:
        return METADATA_PROMPT_TEMPLATE.format(document=text_sample)

    def _model_name(self) -> str:
        return getattr(self._generator, "model_id", None) or "unknown"

    async def extract(self, text: str) -> ContractMetadata:
        """Extract metadata, falling back to rules on any AI failure.

        Args:
            text: Full decoded contract text.

        Returns:
            ContractMetadata from the AI path or the rule-based path.
        """
        if self._generator is None:
            logger.warning(
                "No text generator available, falling back to rule-based extraction"
            )
            return self._rule_extractor.extract(text)

        text_sample = truncate_text(
            text,
            self._config.max_prompt_chars,
            self._config.paragraph_backoff_chars,
        )
        logger.debug(
            f"Sending metadata extraction prompt. Text sample length: "
            f"{len(text_sample)} of {len(text)}"
        )

        try:
            reply = await self._generator.generate(
                self._format_prompt(text_sample), self._options
            )
        except Exception as e:
            logger.warning(
                f"Error during AI metadata extraction (text length {len(text)}): {e}. "
                "Falling back to rule-based extraction"
            )
            return self._rule_extractor.extract(text)

        if not reply.strip():
            logger.warning(
                "Empty AI metadata reply, falling back to rule-based extraction"
            )
            return self._rule_extractor.extract(text)

        logger.debug(
            f"Received raw AI response (length: {len(reply)}): "
            f"{truncate_for_log(reply)}"
        )

        try:
            data = parse_json_object(reply)
        except AIMalformedResponseError as e:
            logger.warning(
                f"Failed to parse AI response as JSON ({e.message}). "
                f"Raw response: {truncate_for_log(e.raw_response)}. "
                "Falling back to rule-based extraction"
            )
            return self._rule_extractor.extract(text)

        try:
            metadata = self._build_metadata(data, len(text_sample))
        except Exception as e:
            logger.warning(
                f"Failed to decode AI metadata fields: {e}. "
                "Falling back to rule-based extraction"
            )
            return self._rule_extractor.extract(text)

        logger.info(
            f"Successfully extracted metadata using AI. "
            f"Title: {metadata.title or 'None'}, Parties: {len(metadata.parties)}, "
            f"Terms: {len(metadata.key_terms)}, "
            f"Value: {metadata.contract_value or 0} {metadata.currency or 'N/A'}"
        )
        return metadata

    def _build_metadata(self, data: dict[str, Any], sample_length: int) -> ContractMetadata:
        """Decode each field independently; bad fields become empty."""
        currency = _as_text(data.get("currency"))
        return ContractMetadata(
            title=_as_text(data.get("title")),
            contract_date=_as_date(data.get("contractDate")),
            expiration_date=_as_date(data.get("expirationDate")),
            contract_value=_as_decimal(data.get("contractValue")),
            currency=currency.upper() if currency else None,
            parties=_as_string_list(data.get("parties")),
            key_terms=_as_string_list(data.get("keyTerms")),
            contract_type=_as_text(data.get("contractType")),
            custom_fields={
                "extractionMethod": EXTRACTION_METHOD_AI,
                "extractionDate": self._clock().isoformat(),
                "aiModel": self._model_name(),
                "textSampleLength": sample_length,
            },
        )
