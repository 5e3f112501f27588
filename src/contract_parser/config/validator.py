"""Validation utilities for contract parser configuration."""

from pydantic import ValidationError as PydanticValidationError


def flatten_pydantic_errors(exc: PydanticValidationError) -> list[str]:
    """Flatten a pydantic ValidationError into human-readable messages.

    Args:
        exc: Pydantic ValidationError exception

    Returns:
        One message per field error, each naming the dotted field path

    Example:
        >>> try:
        ...     SegmentationConfig(max_chunk_size=0)
        ... except ValidationError as e:
        ...     flatten_pydantic_errors(e)
        ["Field 'max_chunk_size': Input should be greater than 0"]
    """
    errors: list[str] = []

    for error in exc.errors():
        loc = error.get("loc", ())
        field_path = ".".join(str(item) for item in loc) if loc else "config"

        msg = error.get("msg", "Unknown error")
        if error.get("type") == "value_error" and loc:
            formatted = f"Field '{field_path}': {msg} (received: {error.get('input')!r})"
        else:
            formatted = f"Field '{field_path}': {msg}"

        errors.append(formatted)

    return errors if errors else ["Validation failed with unknown error"]
