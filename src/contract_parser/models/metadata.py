"""Document-level contract metadata model."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

MAX_PARTIES = 10
MAX_KEY_TERMS = 20

EXTRACTION_METHOD_AI = "ai"
EXTRACTION_METHOD_RULES = "rule-based"


def _dedupe(values: list[str]) -> list[str]:
    """Drop blanks and duplicates while keeping first-seen order."""
    seen: dict[str, None] = {}
    for value in values:
        cleaned = value.strip()
        if cleaned and cleaned not in seen:
            seen[cleaned] = None
    return list(seen)


class ContractMetadata(BaseModel):
    """Structured summary of one contract.

    Created once per parse call and never mutated afterwards. Every field
    except ``parties``, ``key_terms`` and ``custom_fields`` is optional;
    ``custom_fields`` always records ``extractionMethod`` ("ai" or
    "rule-based") and ``extractionDate``.

    Attributes:
        title: Contract title
        contract_date: Execution or effective date
        expiration_date: Termination or end date
        contract_value: Monetary value resolved for the contract shape
        currency: ISO currency code (e.g., "USD")
        parties: Deduplicated party names, at most 10
        key_terms: Deduplicated, alphabetically sorted terms, at most 20
        contract_type: Contract type in title case
        custom_fields: Extraction bookkeeping and provider details
    """

    model_config = ConfigDict(frozen=True)

    title: str | None = None
    contract_date: date | None = None
    expiration_date: date | None = None
    contract_value: Decimal | None = None
    currency: str | None = None
    parties: list[str] = Field(default_factory=list)
    key_terms: list[str] = Field(default_factory=list)
    contract_type: str | None = None
    custom_fields: dict[str, Any] = Field(default_factory=dict)

    @field_validator("parties")
    @classmethod
    def validate_parties(cls, value: list[str]) -> list[str]:
        """Deduplicate parties and cap the list."""
        return _dedupe(value)[:MAX_PARTIES]

    @field_validator("key_terms")
    @classmethod
    def validate_key_terms(cls, value: list[str]) -> list[str]:
        """Deduplicate, sort and cap key terms."""
        return sorted(_dedupe(value))[:MAX_KEY_TERMS]

    @property
    def extraction_method(self) -> str | None:
        """Return which extraction path produced this record."""
        method = self.custom_fields.get("extractionMethod")
        return str(method) if method is not None else None

    @classmethod
    def empty(cls, extraction_date: datetime) -> "ContractMetadata":
        """Create the all-empty record used when rule-based extraction fails.

        Args:
            extraction_date: Timestamp to record as ``extractionDate``.

        Returns:
            ContractMetadata with no extracted values.
        """
        return cls(
            custom_fields={
                "extractionMethod": EXTRACTION_METHOD_RULES,
                "extractionDate": extraction_date.isoformat(),
            }
        )

    def to_record_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dict with camelCase keys.

        Returns:
            Dictionary matching the persisted metadata shape.
        """
        return {
            "title": self.title,
            "contractDate": self.contract_date.isoformat()
            if self.contract_date
            else None,
            "expirationDate": self.expiration_date.isoformat()
            if self.expiration_date
            else None,
            "contractValue": float(self.contract_value)
            if self.contract_value is not None
            else None,
            "currency": self.currency,
            "parties": list(self.parties),
            "keyTerms": list(self.key_terms),
            "contractType": self.contract_type,
            "customFields": dict(self.custom_fields),
        }
