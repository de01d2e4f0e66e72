from __future__ import annotations

import re
from typing import Any, Optional
from urllib.parse import urlsplit

from works_gateway.messaging.domain.validators.strings import validate_string_param
from works_gateway.shared.exceptions import ValidationError

HTTP_URL_RE = re.compile(r"^(https?://)[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}(/\S*)?$")
HTTPS_RE = re.compile(r"^https://", re.IGNORECASE)
EXTENSION_RE = re.compile(r"\.([a-zA-Z0-9]+)$")

IMAGE_URL_MAX_LENGTH = 1000
ALLOWED_IMAGE_EXTENSIONS = frozenset({
    "jpg", "jpeg", "png", "gif", "svg", "bmp", "webp", "tif", "tiff",
    "ico", "icns", "psd", "ai", "clip", "heic", "rw2",
})


def validate_url(value: Any, name: str, max_length: Optional[int] = None) -> None:
    """Require an http(s) URL with a dotted host, optionally bounded by max_length."""
    validate_string_param(value, name, max_length)
    if not HTTP_URL_RE.match(value):
        raise ValidationError(
            f"Parameter '{name}' must be a valid HTTP or HTTPS URL.",
            details={"field": name},
        )


def validate_image_url(value: Any, name: str) -> None:
    """
    Image URLs are stricter than plain URLs: HTTPS only, at most 1000
    characters, and a path extension (when present) from the image allow-list.
    """
    validate_url(value, name, IMAGE_URL_MAX_LENGTH)

    if not HTTPS_RE.match(value):
        raise ValidationError(f"Parameter '{name}' must be an HTTPS URL.", details={"field": name})

    match = EXTENSION_RE.search(urlsplit(value).path)
    if match:
        ext = match.group(1).lower()
        if ext not in ALLOWED_IMAGE_EXTENSIONS:
            raise ValidationError(
                f"Parameter '{name}' has a disallowed file extension '{ext}'.",
                details={"field": name, "extension": ext},
            )
