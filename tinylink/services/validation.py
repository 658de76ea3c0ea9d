"""Input checks shared by the link service and the HTTP layer."""

import re
from typing import Any

from pydantic import AnyUrl, TypeAdapter, ValidationError

from tinylink.models.link import CODE_MAX_LENGTH, CODE_MIN_LENGTH
from tinylink.services.exceptions import InvalidCodeError, InvalidURLError

CODE_PATTERN = re.compile(rf"^[A-Za-z0-9]{{{CODE_MIN_LENGTH},{CODE_MAX_LENGTH}}}$")
ALLOWED_SCHEMES = ("http", "https")

_url_adapter = TypeAdapter(AnyUrl)


def is_valid_code(code: Any) -> bool:
    """True if ``code`` is 6-8 ASCII letters or digits."""
    return isinstance(code, str) and CODE_PATTERN.fullmatch(code) is not None


def validate_code(code: Any) -> str:
    """Return ``code`` unchanged or raise InvalidCodeError."""
    if not is_valid_code(code):
        raise InvalidCodeError(f"code must match {CODE_PATTERN.pattern}")
    return code


def validate_target_url(target_url: Any) -> str:
    """
    Check that ``target_url`` is an absolute http(s) URL.

    The URL is returned exactly as given; the parsed form is only used
    for the checks, so redirects go to what the user submitted.

    Raises:
        InvalidURLError: With a message describing the first failed check
    """
    if not target_url or not isinstance(target_url, str):
        raise InvalidURLError("target_url is required")

    try:
        parsed = _url_adapter.validate_python(target_url)
    except ValidationError:
        raise InvalidURLError("target_url is not a valid URL")

    if parsed.scheme not in ALLOWED_SCHEMES:
        raise InvalidURLError("target_url must be http or https")

    return target_url
