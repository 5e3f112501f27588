"""Deterministic, regex-driven contract metadata extraction.

Seven independent extractors (title, parties, contract date, expiration
date, value, currency, contract type, plus key terms) run over the same
raw text. The only non-deterministic input is the extraction timestamp,
which comes from an injectable clock so repeated runs can be compared
byte for byte.
"""

import math
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from contract_parser.lib import contract_patterns as patterns
from contract_parser.lib.clock import Clock, utc_now
from contract_parser.lib.contract_patterns import ValueCategory
from contract_parser.lib.logging_config import get_logger
from contract_parser.models.metadata import (
    EXTRACTION_METHOD_RULES,
    MAX_KEY_TERMS,
    MAX_PARTIES,
    ContractMetadata,
)

logger = get_logger(__name__)

_WHITESPACE = re.compile(r"\s+")


def _normalize_space(value: str) -> str:
    return _WHITESPACE.sub(" ", value).strip()


def parse_date(value: str) -> date | None:
    """Parse a numeric or month-name date within the accepted year range.

    Args:
        value: Date text such as "01/15/2025" or "January 15, 2025".

    Returns:
        The parsed date, or None if no known format matches or the year falls
        outside 1990-2100.
    """
    candidate = _normalize_space(value).replace(".", "")
    formats = (
        patterns.NUMERIC_DATE_FORMATS
        if candidate[:1].isdigit()
        else patterns.WORD_DATE_FORMATS
    )
    for fmt in formats:
        try:
            parsed = datetime.strptime(candidate, fmt).date()
        except ValueError:
            continue
        if patterns.MIN_DATE_YEAR <= parsed.year <= patterns.MAX_DATE_YEAR:
            return parsed
    return None


def parse_amount(value: str) -> Decimal | None:
    """Parse a monetary amount with optional thousands separators.

    Returns:
        The positive amount, or None when the text is not a positive,
        finite number that fits in a float.
    """
    try:
        amount = Decimal(value.replace(",", ""))
    except InvalidOperation:
        return None
    if not amount.is_finite() or amount <= 0:
        return None
    # Records serialize the value as a JSON number
    if math.isinf(float(amount)):
        return None
    return amount


def to_title_case(value: str) -> str:
    """Title-case a contract type, keeping short acronyms in capitals."""
    normalized = _normalize_space(value)
    if len(normalized) <= patterns.ACRONYM_MAX_LENGTH and normalized.isupper():
        return normalized
    return normalized.title()


class RuleBasedMetadataExtractor:
    """Extract contract metadata with regex tables only.

    Example:
        >>> extractor = RuleBasedMetadataExtractor()
        >>> metadata = extractor.extract(contract_text)
        >>> metadata.custom_fields["extractionMethod"]
        'rule-based'
    """

    def __init__(self, clock: Clock | None = None) -> None:
        """Initialize the extractor.

        Args:
            clock: Source of the ``extractionDate`` timestamp. Defaults to
                the current UTC time.
        """
        self._clock = clock or utc_now

    def extract(self, text: str) -> ContractMetadata:
        """Run every extractor over the text.

        Never raises: an internal failure yields the all-empty record.

        Args:
            text: Full decoded contract text.

        Returns:
            Rule-based ContractMetadata.
        """
        logger.info("Using rule-based metadata extraction")

        try:
            title = self.extract_title(text)
            metadata = ContractMetadata(
                title=title,
                contract_date=self.extract_contract_date(text),
                expiration_date=self.extract_expiration_date(text),
                contract_value=self.extract_contract_value(text),
                currency=self.extract_currency(text),
                parties=self.extract_parties(text),
                key_terms=self.extract_key_terms(text),
                contract_type=self.extract_contract_type(text, title),
                custom_fields={
                    "extractionMethod": EXTRACTION_METHOD_RULES,
                    "extractionDate": self._clock().isoformat(),
                },
            )
        except Exception as e:
            logger.error(f"Error in rule-based extraction: {e}", exc_info=True)
            return ContractMetadata.empty(self._clock())

        logger.debug(
            f"Rule-based extraction found title={metadata.title!r}, "
            f"parties={len(metadata.parties)}, key_terms={len(metadata.key_terms)}, "
            f"value={metadata.contract_value} {metadata.currency or ''}"
        )
        return metadata

    def extract_title(self, text: str) -> str | None:
        """Find the contract title in the first few non-blank lines.

        Args:
            text: Contract text.

        Returns:
            The first title-shaped line, else the first line longer than
            10 characters, else None.
        """
        lines = [line.strip() for line in text.splitlines() if line.strip()]

        for line in lines[: patterns.TITLE_SCAN_LINES]:
            for entry in patterns.TITLE_PATTERNS:
                match = entry.pattern.match(line)
                if not match:
                    continue
                title = _normalize_space(match.group(1))
                if patterns.TITLE_MIN_LENGTH < len(title) < patterns.TITLE_MAX_LENGTH:
                    return title

        for line in lines:
            if len(line) > patterns.FALLBACK_TITLE_MIN_LENGTH:
                return line
        return None

    def extract_parties(self, text: str) -> list[str]:
        """Collect party names from role labels, recitals and entity names.

        Args:
            text: Contract text.

        Returns:
            Deduplicated party names in discovery order, at most 10.
        """
        parties: dict[str, None] = {}

        for entry in patterns.PARTY_PATTERNS:
            for match in entry.pattern.finditer(text):
                for group in match.groups():
                    if not group:
                        continue
                    party = _normalize_space(group).rstrip(",.;:").strip()
                    if self._is_party_name(party):
                        parties.setdefault(party, None)

        return list(parties)[:MAX_PARTIES]

    @staticmethod
    def _is_party_name(value: str) -> bool:
        if not patterns.PARTY_MIN_LENGTH <= len(value) < patterns.PARTY_MAX_LENGTH:
            return False
        if value.lower().startswith("http"):
            return False
        if value.isdigit():
            return False
        return any(ch.isalpha() for ch in value)

    def _first_date(self, text: str, table: list[patterns.ExtractionPattern]) -> date | None:
        for entry in table:
            for match in entry.pattern.finditer(text):
                parsed = parse_date(match.group(1))
                if parsed is not None:
                    return parsed
        return None

    def extract_contract_date(self, text: str) -> date | None:
        """Find the execution or effective date.

        Phrase-anchored patterns ("as of", "dated", "EFFECTIVE") are tried
        before bare date formats.
        """
        return self._first_date(text, patterns.CONTRACT_DATE_PATTERNS)

    def extract_expiration_date(self, text: str) -> date | None:
        """Find the expiration date from EXPIR/TERMINAT/END/UNTIL/THROUGH."""
        return self._first_date(text, patterns.EXPIRATION_DATE_PATTERNS)

    def extract_contract_value(self, text: str) -> Decimal | None:
        """Resolve the contract value from category-tagged amounts.

        Resolution order:

        1. License shape: first upfront fee plus first minimum royalty,
           plus the first milestone payment.
        2. Employment shape: the first base salary.
        3. Anything else: the largest amount found.

        Args:
            text: Contract text.

        Returns:
            The resolved value, or None when no amount was found.
        """
        buckets: dict[ValueCategory, list[Decimal]] = {
            category: [] for category in ValueCategory
        }

        for entry in patterns.VALUE_PATTERNS:
            for match in entry.pattern.finditer(text):
                amount = parse_amount(match.group(1))
                if amount is not None:
                    buckets[entry.category].append(amount)

        upfront = buckets[ValueCategory.UPFRONT_FEE]
        royalty = buckets[ValueCategory.MINIMUM_ROYALTY]
        if upfront or royalty:
            total = Decimal(0)
            for bucket in (upfront, royalty, buckets[ValueCategory.MILESTONE]):
                if bucket:
                    total += bucket[0]
            return total

        salary = buckets[ValueCategory.BASE_SALARY]
        if salary:
            return salary[0]

        all_values = [amount for bucket in buckets.values() for amount in bucket]
        return max(all_values) if all_values else None

    def extract_currency(self, text: str) -> str | None:
        """Return "USD" for a dollar sign, else the first ISO currency code."""
        if "$" in text:
            return "USD"
        match = patterns.CURRENCY_CODE_PATTERN.search(text)
        return match.group(1) if match else None

    def extract_contract_type(self, text: str, title: str | None = None) -> str | None:
        """Match known contract type phrases, title first, then the full text.

        Args:
            text: Contract text.
            title: Extracted title, when available.

        Returns:
            The first matching type in title case, or None.
        """
        for source in (title, text):
            if not source:
                continue
            for entry in patterns.CONTRACT_TYPE_PATTERNS:
                match = entry.pattern.search(source)
                if match:
                    return to_title_case(match.group(1))
        return None

    def extract_key_terms(self, text: str) -> list[str]:
        """Collect domain key terms.

        Returns:
            Lower-cased, whitespace-normalized terms, deduplicated, sorted
            alphabetically and capped at 20.
        """
        terms: set[str] = set()
        for entry in patterns.KEY_TERM_PATTERNS:
            for match in entry.pattern.finditer(text):
                terms.add(_normalize_space(match.group(1).lower()))
        return sorted(terms)[:MAX_KEY_TERMS]
