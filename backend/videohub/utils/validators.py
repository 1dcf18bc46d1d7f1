"""Input validation utilities."""

from typing import Optional, Tuple, Union
from uuid import UUID

from videohub.exceptions import InvalidArgument


def validate_content(content: Optional[str], field_name: str = "Content", max_length: int = 5000) -> Tuple[bool, str]:
    """
    Validate free-text content (comments, tweets, titles).

    Args:
        content: Text to validate
        field_name: Name used in the error message
        max_length: Maximum allowed length

    Returns:
        Tuple of (is_valid, error_message)
    """
    if content is None or not content.strip():
        return False, f"{field_name} can't be empty"

    if len(content) > max_length:
        return False, f"{field_name} must be at most {max_length} characters"

    return True, ""


def require_content(content: Optional[str], field_name: str = "Content", max_length: int = 5000) -> str:
    """Return stripped content or raise InvalidArgument."""
    is_valid, error = validate_content(content, field_name, max_length)
    if not is_valid:
        raise InvalidArgument(error)
    return content.strip()


def parse_id(value: Union[str, UUID, None], field_name: str = "id") -> UUID:
    """
    Parse an entity identifier.

    Raises:
        InvalidArgument: Value is missing or not a UUID
    """
    if isinstance(value, UUID):
        return value

    if not value:
        raise InvalidArgument(f"Invalid {field_name}")

    try:
        return UUID(str(value).strip())
    except ValueError:
        raise InvalidArgument(f"Invalid {field_name}: {value}") from None


def parse_positive_int(value: Union[str, int, None], field_name: str, default: int) -> int:
    """
    Parse a page number or page size.

    ``None`` and empty strings fall back to ``default``. Booleans, floats,
    zero, negatives and non-numeric strings are rejected.

    Raises:
        InvalidArgument: Value is not a positive integer
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return default

    if isinstance(value, bool):
        raise InvalidArgument(f"{field_name} must be a positive integer")

    if isinstance(value, int):
        parsed = value
    else:
        text = str(value).strip()
        # isdigit() also accepts characters such as "²" that int() rejects
        if not (text.isascii() and text.isdigit()):
            raise InvalidArgument(f"{field_name} must be a positive integer")
        parsed = int(text)

    if parsed < 1:
        raise InvalidArgument(f"{field_name} must be a positive integer")

    return parsed
