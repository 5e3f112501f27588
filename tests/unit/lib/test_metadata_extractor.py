"""Tests for AI-primary metadata extraction with rule-based fallback."""

import json
import sys
from datetime import date
from decimal import Decimal

import pytest

from contract_parser.lib.errors import AITimeoutError
from contract_parser.lib.metadata_extractor import (
    METADATA_PROMPT_TEMPLATE,
    MetadataExtractor,
    truncate_text,
)
from contract_parser.lib.text_generation import GenerationOptions
from contract_parser.models.config import ExtractionConfig

FIXED_STAMP = "2025-01-15T12:00:00+00:00"

SCENARIO_TEXT = (
    "1. SCOPE\nDeveloper will build X.\n\n2. PAYMENT\nClient pays $120,000 total."
)

AI_REPLY = {
    "title": "SOFTWARE DEVELOPMENT AGREEMENT",
    "contractDate": "2025-01-15",
    "expirationDate": "2025-12-31",
    "contractValue": 120000,
    "currency": "usd",
    "parties": ["TechCorp Inc. (CLIENT)", "Digital Solutions LLC (DEVELOPER)"],
    "keyTerms": ["scope", "payment", "scope"],
    "contractType": "Software Development Agreement",
}


@pytest.mark.unit
class TestTruncateText:
    """Tests for truncate_text()."""

    def test_short_text_unchanged(self) -> None:
        """Test text within the cap is not cut."""
        assert truncate_text("short", max_chars=100, backoff_chars=10) == "short"

    def test_backs_off_to_paragraph_break(self) -> None:
        """Test the cut moves back to a paragraph break near the cap."""
        text = "a" * 100 + "\n\n" + "b" * 100
        assert truncate_text(text, max_chars=150, backoff_chars=100) == "a" * 100

    def test_crlf_paragraph_break(self) -> None:
        """Test Windows paragraph breaks are recognized."""
        text = "a" * 100 + "\r\n\r\n" + "b" * 100
        assert truncate_text(text, max_chars=150, backoff_chars=100) == "a" * 100

    def test_hard_cut_without_break(self) -> None:
        """Test text without breaks is cut at the cap."""
        assert truncate_text("a" * 300, max_chars=100, backoff_chars=50) == "a" * 100

    def test_break_outside_window_ignored(self) -> None:
        """Test breaks further back than the window are not used."""
        text = "a" * 10 + "\n\n" + "b" * 300
        result = truncate_text(text, max_chars=200, backoff_chars=50)
        assert len(result) == 200


@pytest.mark.unit
class TestExtractionFallback:
    """Tests for routing to rule-based extraction."""

    @pytest.mark.asyncio
    async def test_no_generator(self, fixed_clock) -> None:
        """Test AI-absent extraction matches the rule-based record."""
        extractor = MetadataExtractor(generator=None, clock=fixed_clock)
        assert extractor.ai_available is False

        metadata = await extractor.extract(SCENARIO_TEXT)

        assert metadata.extraction_method == "rule-based"
        assert metadata.title == "Developer will build X."
        assert metadata.contract_value == Decimal("120000")
        assert metadata.key_terms == ["payment"]
        assert metadata.custom_fields["extractionDate"] == FIXED_STAMP

    @pytest.mark.asyncio
    async def test_generation_error(self, fake_generator_factory, fixed_clock) -> None:
        """Test a failing call falls back to rules."""
        generator = fake_generator_factory(error=AITimeoutError(60.0))
        extractor = MetadataExtractor(generator, clock=fixed_clock)

        metadata = await extractor.extract(SCENARIO_TEXT)

        assert metadata.extraction_method == "rule-based"
        assert metadata.contract_value == Decimal("120000")

    @pytest.mark.asyncio
    async def test_empty_reply(self, fake_generator_factory, fixed_clock) -> None:
        """Test an empty reply falls back to rules."""
        generator = fake_generator_factory(replies=["   "])
        metadata = await MetadataExtractor(generator, clock=fixed_clock).extract(
            SCENARIO_TEXT
        )
        assert metadata.extraction_method == "rule-based"

    @pytest.mark.asyncio
    async def test_unparsable_reply(self, fake_generator_factory, fixed_clock) -> None:
        """Test a non-JSON reply falls back to rules."""
        generator = fake_generator_factory(replies=["I'm sorry, I can't do that."])
        metadata = await MetadataExtractor(generator, clock=fixed_clock).extract(
            SCENARIO_TEXT
        )
        assert metadata.extraction_method == "rule-based"
        assert metadata.title == "Developer will build X."

    @pytest.mark.skipif(
        not hasattr(sys, "get_int_max_str_digits"),
        reason="integer string conversion limit not enforced",
    )
    @pytest.mark.asyncio
    async def test_undecodable_integer_reply(
        self, fake_generator_factory, fixed_clock
    ) -> None:
        """Test an integer past the decoder limit falls back to rules."""
        reply = '{"title": "X", "contractValue": 1' + "0" * 5000 + "}"
        generator = fake_generator_factory(replies=[reply])

        metadata = await MetadataExtractor(generator, clock=fixed_clock).extract(
            SCENARIO_TEXT
        )

        assert metadata.extraction_method == "rule-based"
        assert metadata.contract_value == Decimal("120000")

    @pytest.mark.asyncio
    async def test_field_decoding_error(
        self, fake_generator_factory, fixed_clock, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test an exception while decoding fields falls back to rules."""

        def broken(value):
            raise TypeError("unexpected field shape")

        monkeypatch.setattr(
            "contract_parser.lib.metadata_extractor._as_string_list", broken
        )
        generator = fake_generator_factory(replies=[json.dumps(AI_REPLY)])

        metadata = await MetadataExtractor(generator, clock=fixed_clock).extract(
            SCENARIO_TEXT
        )

        assert metadata.extraction_method == "rule-based"
        assert metadata.title == "Developer will build X."


@pytest.mark.unit
class TestAIExtraction:
    """Tests for the AI-primary path."""

    @pytest.mark.asyncio
    async def test_decodes_all_fields(self, fake_generator_factory, fixed_clock) -> None:
        """Test a complete reply is decoded field by field."""
        generator = fake_generator_factory(replies=[json.dumps(AI_REPLY)])
        extractor = MetadataExtractor(generator, clock=fixed_clock)

        metadata = await extractor.extract(SCENARIO_TEXT)

        assert metadata.title == "SOFTWARE DEVELOPMENT AGREEMENT"
        assert metadata.contract_date == date(2025, 1, 15)
        assert metadata.expiration_date == date(2025, 12, 31)
        assert metadata.contract_value == Decimal("120000")
        assert metadata.currency == "USD"
        assert metadata.parties == [
            "TechCorp Inc. (CLIENT)",
            "Digital Solutions LLC (DEVELOPER)",
        ]
        assert metadata.key_terms == ["payment", "scope"]
        assert metadata.contract_type == "Software Development Agreement"
        assert metadata.custom_fields == {
            "extractionMethod": "ai",
            "extractionDate": FIXED_STAMP,
            "aiModel": "test-model",
            "textSampleLength": len(SCENARIO_TEXT),
        }

    @pytest.mark.asyncio
    async def test_fenced_reply_with_prose(
        self, fake_generator_factory, fixed_clock
    ) -> None:
        """Test code fences and surrounding prose are tolerated."""
        reply = "Sure!\n```json\n" + json.dumps({"title": "NDA"}) + "\n```"
        generator = fake_generator_factory(replies=[reply])
        metadata = await MetadataExtractor(generator, clock=fixed_clock).extract(
            SCENARIO_TEXT
        )
        assert metadata.extraction_method == "ai"
        assert metadata.title == "NDA"

    @pytest.mark.asyncio
    async def test_bad_fields_become_empty(
        self, fake_generator_factory, fixed_clock
    ) -> None:
        """Test malformed fields default to empty without failing the call."""
        reply = {
            "title": "Consulting Agreement",
            "contractDate": "sometime next year",
            "expirationDate": 20251231,
            "contractValue": "lots",
            "currency": "",
            "parties": "TechCorp",
            "keyTerms": ["payment", 42, None, " "],
        }
        generator = fake_generator_factory(replies=[json.dumps(reply)])
        metadata = await MetadataExtractor(generator, clock=fixed_clock).extract(
            SCENARIO_TEXT
        )

        assert metadata.extraction_method == "ai"
        assert metadata.title == "Consulting Agreement"
        assert metadata.contract_date is None
        assert metadata.expiration_date is None
        assert metadata.contract_value is None
        assert metadata.currency is None
        assert metadata.parties == []
        assert metadata.key_terms == ["payment"]
        assert metadata.contract_type is None

    @pytest.mark.parametrize(
        ("raw_value", "expected"),
        [
            ("$1,500.50", Decimal("1500.50")),
            (850000.0, Decimal("850000.0")),
            (True, None),
            (-5, None),
            (0, None),
            (None, None),
            (float("nan"), None),
            ("Infinity", None),
            (10**400, None),
        ],
    )
    @pytest.mark.asyncio
    async def test_contract_value_decoding(
        self, fake_generator_factory, fixed_clock, raw_value, expected
    ) -> None:
        """Test numeric and string contract values."""
        generator = fake_generator_factory(
            replies=[json.dumps({"contractValue": raw_value})]
        )
        metadata = await MetadataExtractor(generator, clock=fixed_clock).extract(
            SCENARIO_TEXT
        )
        assert metadata.contract_value == expected

    @pytest.mark.asyncio
    async def test_us_style_date_string(
        self, fake_generator_factory, fixed_clock
    ) -> None:
        """Test non-ISO date strings are parsed with the rule-based formats."""
        generator = fake_generator_factory(
            replies=[json.dumps({"contractDate": "January 15, 2025"})]
        )
        metadata = await MetadataExtractor(generator, clock=fixed_clock).extract(
            SCENARIO_TEXT
        )
        assert metadata.contract_date == date(2025, 1, 15)

    @pytest.mark.asyncio
    async def test_prompt_is_bounded(self, fake_generator_factory, fixed_clock) -> None:
        """Test the prompt carries only the truncated prefix."""
        generator = fake_generator_factory(replies=["{}"])
        config = ExtractionConfig(max_prompt_chars=100, paragraph_backoff_chars=0)
        extractor = MetadataExtractor(generator, config=config, clock=fixed_clock)

        metadata = await extractor.extract("A" * 100 + "TAILMARKER")

        assert generator.prompts == [
            METADATA_PROMPT_TEMPLATE.format(document="A" * 100)
        ]
        assert "TAILMARKER" not in generator.prompts[0]
        assert metadata.custom_fields["textSampleLength"] == 100

    @pytest.mark.asyncio
    async def test_low_temperature_options(
        self, fake_generator_factory, fixed_clock
    ) -> None:
        """Test the call uses the configured low temperature."""
        generator = fake_generator_factory(replies=["{}"])
        await MetadataExtractor(generator, clock=fixed_clock).extract(SCENARIO_TEXT)
        assert generator.options == [
            GenerationOptions(temperature=0.1, max_tokens=2000)
        ]

    @pytest.mark.asyncio
    async def test_unknown_model_name(self, fixed_clock) -> None:
        """Test generators without a model id record 'unknown'."""

        class AnonymousGenerator:
            async def generate(self, prompt: str, options: GenerationOptions) -> str:
                return "{}"

        metadata = await MetadataExtractor(
            AnonymousGenerator(), clock=fixed_clock
        ).extract(SCENARIO_TEXT)
        assert metadata.custom_fields["aiModel"] == "unknown"
