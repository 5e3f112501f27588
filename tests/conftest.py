"""Pytest configuration and shared fixtures for contract parser tests."""

import os
import shutil
import tempfile
from collections.abc import Generator
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pytest

from contract_parser.lib.text_generation import GenerationOptions

FIXED_NOW = datetime(2025, 1, 15, 12, 0, 0, tzinfo=timezone.utc)

SERVICE_CONTRACT = """SOFTWARE DEVELOPMENT AGREEMENT

This Software Development Agreement is entered into as of January 15, 2025 \
between TechCorp Inc. and Digital Solutions LLC.

CLIENT: TechCorp Inc.
DEVELOPER: Digital Solutions LLC

1. PROJECT SCOPE
Developer agrees to develop a customer portal with deliverables described \
in Schedule A. The project scope includes design, implementation and testing.

2. PAYMENT TERMS
Phase 1: Analysis - Payment: $25,000
Phase 2: Development - Payment: $70,000
Phase 3: Deployment - Payment: $25,000
Total Contract Value: $120,000

3. INTELLECTUAL PROPERTY
All intellectual property created under this Agreement transfers to Client \
upon final payment. Confidentiality obligations survive termination.

4. TERMINATION
Either party may terminate this Agreement if the other party materially \
breaches it. This Agreement ends on 12/31/2025.

5. GOVERNING LAW
This Agreement is governed by the laws of the State of Delaware.
"""

EMPLOYMENT_CONTRACT = """EMPLOYMENT AGREEMENT

EMPLOYER: Innovation Tech Solutions
EMPLOYEE: Jessica Martinez

1. POSITION AND DUTIES
Job Title: Senior Software Engineer

2. COMPENSATION
Base Salary: $145,000 per year
Signing Bonus: $10,000

3. BENEFITS
Health insurance and 401k matching. Employment is at-will.
"""

LICENSE_CONTRACT = """PATENT LICENSE AGREEMENT

LICENSOR: BioGen Research Ltd.
LICENSEE: MedTech Pharma Inc.

1. GRANT
Licensor grants an exclusive license within the territory.

2. FEES
Upfront License Fee: $500,000
Minimum Annual Royalty: $50,000
First Milestone Payment: $300,000
"""


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test file operations.

    Yields:
        Path to temporary directory

    Cleanup:
        Automatically removes directory after test
    """
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def isolated_env() -> Generator[dict[str, str], None, None]:
    """Provide isolated environment variables for testing.

    Saves current environment and restores after test.

    Yields:
        Dictionary of original environment variables
    """
    original_env = os.environ.copy()
    yield original_env
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def fixed_clock():
    """Clock returning a constant timestamp, for byte-identical output."""
    return lambda: FIXED_NOW


@pytest.fixture
def service_contract() -> str:
    """Software development agreement with five numbered sections."""
    return SERVICE_CONTRACT


@pytest.fixture
def employment_contract() -> str:
    """Employment agreement with salary and signing bonus."""
    return EMPLOYMENT_CONTRACT


@pytest.fixture
def license_contract() -> str:
    """IP license agreement with upfront fee, royalty and milestone."""
    return LICENSE_CONTRACT


class FakeTextGenerator:
    """TextGenerator double that replays canned replies and records prompts."""

    def __init__(
        self,
        replies: list[str] | None = None,
        error: Exception | None = None,
        model_id: str = "test-model",
    ) -> None:
        self.replies = list(replies or [])
        self.error = error
        self.model_id = model_id
        self.prompts: list[str] = []
        self.options: list[GenerationOptions] = []

    async def generate(self, prompt: str, options: GenerationOptions) -> str:
        self.prompts.append(prompt)
        self.options.append(options)
        if self.error is not None:
            raise self.error
        if not self.replies:
            return ""
        return self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]


@pytest.fixture
def fake_generator_factory():
    """Factory for FakeTextGenerator instances."""
    return FakeTextGenerator


# Configure pytest
def pytest_configure(config: Any) -> None:
    """Configure pytest with marker options."""
    config.addinivalue_line(
        "markers",
        "slow: marks tests as slow (deselect with '-m \"not slow\"')",
    )
    config.addinivalue_line(
        "markers",
        "unit: marks tests as unit tests",
    )
