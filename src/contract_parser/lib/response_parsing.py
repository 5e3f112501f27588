"""Decoding of free-text generative replies into typed values."""

import json
import re
from typing import Any

from contract_parser.lib.errors import AIMalformedResponseError
from contract_parser.models.chunk import STRUCTURAL_LABELS, StructuralType

# Raw replies quoted in log messages are cut to this many characters
LOG_REPLY_LIMIT = 500

_LABEL_SEPARATORS = re.compile(r"[\s,.:\-]+")
_CODE_FENCE = "```"


def truncate_for_log(text: str, limit: int = LOG_REPLY_LIMIT) -> str:
    """Shorten text for diagnostics, marking the cut with an ellipsis."""
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


def strip_code_fences(reply: str) -> str:
    """Remove a surrounding markdown code fence (```json ... ```) if present.

    Args:
        reply: Raw reply text.

    Returns:
        The reply without the opening fence line and closing fence.
    """
    cleaned = reply.strip()
    if not cleaned.startswith(_CODE_FENCE):
        return cleaned

    # Drop the opening fence line, which may carry a language tag
    _, _, cleaned = cleaned.partition("\n")
    cleaned = cleaned.rstrip()
    if cleaned.endswith(_CODE_FENCE):
        cleaned = cleaned[: cleaned.rfind(_CODE_FENCE)]
    return cleaned.strip()


def isolate_json_object(reply: str) -> str:
    """Cut the text from the first ``{`` to the last ``}``.

    Args:
        reply: Reply text, possibly wrapped in prose or code fences.

    Returns:
        The JSON object candidate, or the fence-stripped text when no brace
        pair is present. An empty reply becomes ``"{}"``.
    """
    if not reply or not reply.strip():
        return "{}"

    cleaned = strip_code_fences(reply)
    first = cleaned.find("{")
    last = cleaned.rfind("}")
    if first >= 0 and last > first:
        cleaned = cleaned[first : last + 1]
    return cleaned.strip()


def parse_json_object(reply: str) -> dict[str, Any]:
    """Parse a reply expected to contain a single JSON object.

    Args:
        reply: Raw reply text.

    Returns:
        The decoded object.

    Raises:
        AIMalformedResponseError: If the reply is not a JSON object.
    """
    candidate = isolate_json_object(reply)
    try:
        data = json.loads(candidate)
    except json.JSONDecodeError as e:
        raise AIMalformedResponseError(
            f"Reply is not valid JSON: {e.msg}", raw_response=reply
        ) from e
    except (ValueError, RecursionError) as e:
        # Oversized integer literals or nesting too deep for the decoder
        raise AIMalformedResponseError(
            f"Reply is not decodable JSON: {e}", raw_response=reply
        ) from e

    if not isinstance(data, dict):
        raise AIMalformedResponseError(
            f"Expected a JSON object, got {type(data).__name__}", raw_response=reply
        )
    return data


def decode_structural_label(reply: str) -> StructuralType:
    """Decode a classification reply into a structural type.

    The reply is split on whitespace and punctuation, the first token is
    lower-cased and looked up in the closed label table. Tokens outside the
    table decode to ``StructuralType.OTHER``.

    Args:
        reply: Raw classification reply.

    Returns:
        The decoded structural type.

    Raises:
        AIMalformedResponseError: If the reply contains no token at all.

    Example:
        >>> decode_structural_label("Clause.")
        <StructuralType.CLAUSE: 'Clause'>
        >>> decode_structural_label("Preamble")
        <StructuralType.OTHER: 'Other'>
    """
    tokens = [t for t in _LABEL_SEPARATORS.split(reply.strip()) if t]
    if not tokens:
        raise AIMalformedResponseError("Empty classification reply", raw_response=reply)
    return STRUCTURAL_LABELS.get(tokens[0].lower(), StructuralType.OTHER)
