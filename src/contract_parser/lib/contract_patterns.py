"""Regex tables used by rule-based contract metadata extraction.

Each table is an ordered list; extractors walk it front to back and the
order encodes priority (phrase-anchored patterns before bare formats,
specific contract types before generic ones).
"""

import re
from dataclasses import dataclass
from enum import Enum


class ValueCategory(str, Enum):
    """Which kind of monetary amount a value pattern recognizes."""

    UPFRONT_FEE = "upfront_fee"
    MINIMUM_ROYALTY = "minimum_royalty"
    MILESTONE = "milestone"
    BASE_SALARY = "base_salary"
    SIGNING_BONUS = "signing_bonus"
    TOTAL = "total"
    AMOUNT = "amount"


@dataclass(frozen=True)
class ExtractionPattern:
    """Named regex whose first group holds the extracted value.

    Attributes:
        name: Human-readable name for the pattern (e.g., "all_caps_title")
        pattern: Compiled regex; group 1 (and further groups, if any) carry
            the extracted text
    """

    name: str
    pattern: re.Pattern[str]


@dataclass(frozen=True)
class ValuePattern:
    """Monetary amount pattern tagged with the category it recognizes.

    Attributes:
        category: Bucket the matched amount is filed under
        pattern: Compiled regex; group 1 is the numeric amount (may contain
            thousands separators)
    """

    category: ValueCategory
    pattern: re.Pattern[str]


@dataclass(frozen=True)
class KeyTermPattern:
    """Single-concept key term pattern tagged with its contract domain.

    Attributes:
        domain: Contract domain (e.g., "compensation", "license")
        pattern: Compiled regex; group 1 is the term as written
    """

    domain: str
    pattern: re.Pattern[str]


# Number of leading non-blank lines inspected for a title
TITLE_SCAN_LINES = 5
TITLE_MIN_LENGTH = 5
TITLE_MAX_LENGTH = 200
FALLBACK_TITLE_MIN_LENGTH = 10

TITLE_PATTERNS: list[ExtractionPattern] = [
    ExtractionPattern(
        name="all_caps_title",
        pattern=re.compile(r"^([A-Z][A-Z0-9 \t&,'\-]*(?:AGREEMENT|CONTRACT))$"),
    ),
    ExtractionPattern(
        name="title_case_title",
        pattern=re.compile(r"^([A-Z][A-Za-z0-9 \t&,'\-]*(?:Agreement|Contract))$"),
    ),
    ExtractionPattern(
        name="title_label",
        pattern=re.compile(r"^TITLE:[ \t]*(.+)$", re.IGNORECASE),
    ),
    ExtractionPattern(
        name="contract_label",
        pattern=re.compile(r"^(?:CONTRACT|AGREEMENT):[ \t]*(.+)$", re.IGNORECASE),
    ),
]

# Role labels are matched case-sensitively so prose like "the Client:" in a
# sentence does not read as a party block
_LINE_VALUE = r"[ \t]*([^\n\r]+?)[ \t]*$"

PARTY_PATTERNS: list[ExtractionPattern] = [
    ExtractionPattern(
        name="employment_roles",
        pattern=re.compile(r"^[ \t]*(?:EMPLOYER|EMPLOYEE):" + _LINE_VALUE, re.MULTILINE),
    ),
    ExtractionPattern(
        name="service_roles",
        pattern=re.compile(
            r"^[ \t]*(?:CLIENT|DEVELOPER|PROVIDER|CONTRACTOR|VENDOR|CONSULTANT"
            r"|CUSTOMER):" + _LINE_VALUE,
            re.MULTILINE,
        ),
    ),
    ExtractionPattern(
        name="license_roles",
        pattern=re.compile(r"^[ \t]*(?:LICENSOR|LICENSEE):" + _LINE_VALUE, re.MULTILINE),
    ),
    ExtractionPattern(
        name="between",
        pattern=re.compile(
            r"\bbetween[ \t]+([^\n\r,()]+?)[ \t]+(?:and|&)[ \t]+([^\n\r,()]+?)"
            r"(?=[ \t]*\(|,|\.(?:\s|$)|\n|$)",
            re.IGNORECASE | re.MULTILINE,
        ),
    ),
    ExtractionPattern(
        name="legal_entity",
        pattern=re.compile(
            r"\b([A-Z][A-Za-z0-9&'\-]*(?:[ \t]+[A-Z][A-Za-z0-9&'\-]*)*[ \t]+"
            r"(?:Inc\.|LLC|Ltd\.|L\.P\.|Corporation|Corp\.|GmbH|PLC))"
        ),
    ),
    ExtractionPattern(
        name="quoted_with_role",
        pattern=re.compile(
            r"\"([^\"\n\r]+)\"[ \t]*\((?:the[ \t]+)?\"?(?:CLIENT|DEVELOPER|PROVIDER"
            r"|CONTRACTOR|EMPLOYER|EMPLOYEE|LICENSOR|LICENSEE|Client|Developer"
            r"|Provider|Contractor|Employer|Employee|Licensor|Licensee)\"?\)"
        ),
    ),
]

PARTY_MIN_LENGTH = 4
PARTY_MAX_LENGTH = 200

_NUMERIC_DATE = r"(\d{1,2}[-/]\d{1,2}[-/]\d{2,4})"
_WORD_DATE = r"([A-Za-z]+\.?[ \t]+\d{1,2},?[ \t]+\d{4})"

CONTRACT_DATE_PATTERNS: list[ExtractionPattern] = [
    ExtractionPattern(
        name="as_of_word",
        pattern=re.compile(
            r"\b(?:as[ \t]+of|dated|entered[ \t]+into[ \t]+on)[ \t]+" + _WORD_DATE,
            re.IGNORECASE,
        ),
    ),
    ExtractionPattern(
        name="as_of_numeric",
        pattern=re.compile(
            r"\b(?:as[ \t]+of|dated|entered[ \t]+into[ \t]+on)[ \t]+" + _NUMERIC_DATE,
            re.IGNORECASE,
        ),
    ),
    ExtractionPattern(
        name="execution_label_numeric",
        pattern=re.compile(
            r"\b(?:DATE|DATED|EXECUTED|SIGNED|EFFECTIVE)\b[^\n\r]*?" + _NUMERIC_DATE,
            re.IGNORECASE,
        ),
    ),
    ExtractionPattern(
        name="execution_label_word",
        pattern=re.compile(
            r"\b(?:DATE|DATED|EXECUTED|SIGNED|EFFECTIVE)\b[^\n\r]*?" + _WORD_DATE,
            re.IGNORECASE,
        ),
    ),
    ExtractionPattern(name="bare_numeric", pattern=re.compile(r"\b" + _NUMERIC_DATE)),
    ExtractionPattern(name="bare_word", pattern=re.compile(r"\b" + _WORD_DATE)),
]

EXPIRATION_DATE_PATTERNS: list[ExtractionPattern] = [
    ExtractionPattern(
        name="expiry_numeric",
        pattern=re.compile(
            r"\b(?:EXPIR\w*|TERMINAT\w*|END(?:S|ING)?)\b[^\n\r]*?" + _NUMERIC_DATE,
            re.IGNORECASE,
        ),
    ),
    ExtractionPattern(
        name="expiry_word",
        pattern=re.compile(
            r"\b(?:EXPIR\w*|TERMINAT\w*|END(?:S|ING)?)\b[^\n\r]*?" + _WORD_DATE,
            re.IGNORECASE,
        ),
    ),
    ExtractionPattern(
        name="until_numeric",
        pattern=re.compile(r"\b(?:UNTIL|THROUGH)\b[^\n\r]*?" + _NUMERIC_DATE, re.IGNORECASE),
    ),
    ExtractionPattern(
        name="until_word",
        pattern=re.compile(r"\b(?:UNTIL|THROUGH)\b[^\n\r]*?" + _WORD_DATE, re.IGNORECASE),
    ),
]

NUMERIC_DATE_FORMATS = ("%m/%d/%Y", "%m-%d-%Y", "%m/%d/%y", "%m-%d-%y")
WORD_DATE_FORMATS = ("%B %d, %Y", "%b %d, %Y", "%B %d %Y", "%b %d %Y")
MIN_DATE_YEAR = 1990
MAX_DATE_YEAR = 2100

# Label, then anything up to the first dollar amount on the same line
_AMOUNT = r"[^\n\r$]*?\$[ \t]*(\d[\d,]*(?:\.\d{1,2})?)"

VALUE_PATTERNS: list[ValuePattern] = [
    ValuePattern(
        category=ValueCategory.UPFRONT_FEE,
        pattern=re.compile(
            r"\b(?:up-?front|initial[ \t]+license|license)[ \t]+fee" + _AMOUNT,
            re.IGNORECASE,
        ),
    ),
    ValuePattern(
        category=ValueCategory.MINIMUM_ROYALTY,
        pattern=re.compile(
            r"\bminimum[ \t]+(?:annual[ \t]+)?royalt(?:y|ies)" + _AMOUNT,
            re.IGNORECASE,
        ),
    ),
    ValuePattern(
        category=ValueCategory.MILESTONE,
        pattern=re.compile(r"\b(?:milestone|achievement)" + _AMOUNT, re.IGNORECASE),
    ),
    ValuePattern(
        category=ValueCategory.BASE_SALARY,
        pattern=re.compile(r"\b(?:base|annual|yearly)[ \t]+salary" + _AMOUNT, re.IGNORECASE),
    ),
    ValuePattern(
        category=ValueCategory.SIGNING_BONUS,
        pattern=re.compile(r"\b(?:signing|sign-on)[ \t]+bonus" + _AMOUNT, re.IGNORECASE),
    ),
    ValuePattern(
        category=ValueCategory.TOTAL,
        pattern=re.compile(
            r"\b(?:grand[ \t]+total|total(?:[ \t]+contract)?[ \t]+(?:value|amount|price)"
            r"|contract[ \t]+value)" + _AMOUNT,
            re.IGNORECASE,
        ),
    ),
    ValuePattern(
        category=ValueCategory.AMOUNT,
        pattern=re.compile(r"\$[ \t]*(\d[\d,]*(?:\.\d{1,2})?)"),
    ),
    ValuePattern(
        category=ValueCategory.AMOUNT,
        pattern=re.compile(r"\b(\d[\d,]*(?:\.\d{1,2})?)[ \t]*(?:USD|dollars)\b", re.IGNORECASE),
    ),
]

CURRENCY_CODE_PATTERN = re.compile(r"\b(USD|EUR|GBP|CAD|AUD|JPY|CHF|INR|CNY)\b")

# Ordered most specific first; acronyms are matched case-sensitively
CONTRACT_TYPE_PATTERNS: list[ExtractionPattern] = [
    ExtractionPattern("license", re.compile(r"\b(LICENSE[ \t]+AGREEMENT)\b", re.IGNORECASE)),
    ExtractionPattern(
        "employment",
        re.compile(r"\b(EMPLOYMENT[ \t]+(?:AGREEMENT|CONTRACT))\b", re.IGNORECASE),
    ),
    ExtractionPattern("offer_letter", re.compile(r"\b(OFFER[ \t]+LETTER)\b", re.IGNORECASE)),
    ExtractionPattern("job_offer", re.compile(r"\b(JOB[ \t]+OFFER)\b", re.IGNORECASE)),
    ExtractionPattern(
        "software_development",
        re.compile(r"\b(SOFTWARE[ \t]+DEVELOPMENT[ \t]+AGREEMENT)\b", re.IGNORECASE),
    ),
    ExtractionPattern(
        "development", re.compile(r"\b(DEVELOPMENT[ \t]+AGREEMENT)\b", re.IGNORECASE)
    ),
    ExtractionPattern(
        "professional_services",
        re.compile(r"\b(PROFESSIONAL[ \t]+SERVICES[ \t]+AGREEMENT)\b", re.IGNORECASE),
    ),
    ExtractionPattern(
        "master_services",
        re.compile(r"\b(MASTER[ \t]+SERVICES?[ \t]+AGREEMENT)\b", re.IGNORECASE),
    ),
    ExtractionPattern(
        "services", re.compile(r"\b(SERVICES?[ \t]+AGREEMENT)\b", re.IGNORECASE)
    ),
    ExtractionPattern(
        "consulting", re.compile(r"\b(CONSULTING[ \t]+AGREEMENT)\b", re.IGNORECASE)
    ),
    ExtractionPattern(
        "statement_of_work",
        re.compile(r"\b(STATEMENT[ \t]+OF[ \t]+WORK)\b", re.IGNORECASE),
    ),
    ExtractionPattern("msa", re.compile(r"\b(MSA)\b")),
    ExtractionPattern("sow", re.compile(r"\b(SOW)\b")),
    ExtractionPattern(
        "purchase", re.compile(r"\b(PURCHASE[ \t]+AGREEMENT)\b", re.IGNORECASE)
    ),
    ExtractionPattern("lease", re.compile(r"\b(LEASE[ \t]+AGREEMENT)\b", re.IGNORECASE)),
    ExtractionPattern(
        "nda",
        re.compile(r"\b(NON-DISCLOSURE[ \t]+AGREEMENT)\b", re.IGNORECASE),
    ),
    ExtractionPattern("nda_acronym", re.compile(r"\b(NDA)\b")),
    ExtractionPattern(
        "independent_contractor",
        re.compile(r"\b(INDEPENDENT[ \t]+CONTRACTOR[ \t]+AGREEMENT)\b", re.IGNORECASE),
    ),
]

# Acronym contract types keep their capitals instead of being title-cased
ACRONYM_MAX_LENGTH = 4


def _term(domain: str, regex: str) -> KeyTermPattern:
    return KeyTermPattern(domain=domain, pattern=re.compile(regex, re.IGNORECASE))


KEY_TERM_PATTERNS: list[KeyTermPattern] = [
    # Compensation, benefits and equity
    _term("compensation", r"\b(compensation|salary|base\s+pay)\b"),
    _term("compensation", r"\b(bonus|incentive)\b"),
    _term("compensation", r"\b(stock\s+options?|equity|vesting)\b"),
    _term("compensation", r"\b(benefits?|health\s+insurance|401k|retirement)\b"),
    _term("compensation", r"\b(vacation|pto|paid\s+time\s+off|sick\s+leave)\b"),
    # Intellectual property and confidentiality
    _term("ip", r"\b(intellectual\s+property|ip\s+rights?|ownership)\b"),
    _term("ip", r"\b(confidential(?:ity)?|proprietary|trade\s+secrets?)\b"),
    _term("ip", r"\b(work\s+(?:made\s+)?for\s+hire)\b"),
    # Termination, liability and governing law
    _term("legal", r"\b(termination|cancellation)\b"),
    _term("legal", r"\b(liability|damages)\b"),
    _term("legal", r"\b(indemnif(?:y|ication))\b"),
    _term("legal", r"\b(warrant(?:y|ies))\b"),
    _term("legal", r"\b(governing\s+law|jurisdiction)\b"),
    _term("legal", r"\b(dispute\s+resolution|arbitration)\b"),
    _term("legal", r"\b(force\s+majeure)\b"),
    # License agreements
    _term("license", r"\b(royalt(?:y|ies))\b"),
    _term("license", r"\b(non-exclusive|exclusiv(?:e|ity))\b"),
    _term("license", r"\b(sublicens(?:e|ing))\b"),
    _term("license", r"\b(territory|field\s+of\s+use)\b"),
    _term("license", r"\b(upfront\s+fee|license\s+fee)\b"),
    # Employment
    _term("employment", r"\b(non-compete|non-solicitation|restrictive\s+covenants?)\b"),
    _term("employment", r"\b(severance)\b"),
    _term("employment", r"\b(at-will|probation(?:ary)?)\b"),
    _term("employment", r"\b(position|job\s+title|duties|responsibilities)\b"),
    # Service and development
    _term("service", r"\b(project\s+scope|scope\s+of\s+work)\b"),
    _term("service", r"\b(deliverables?|milestones?|timeline)\b"),
    _term("service", r"\b(payment\s+terms|payment|fees?)\b"),
    _term("service", r"\b(acceptance\s+criteria|testing)\b"),
    _term("service", r"\b(support|maintenance)\b"),
    _term("service", r"\b(training|documentation)\b"),
]
