"""Input validation utilities for the API layer.

Share links arrive either as a bare URL or embedded in the text the Douyin
app copies to the clipboard, e.g.
``7.43 复制打开抖音，看看【xx的作品】 https://v.douyin.com/iRNBho6u/ a@b.Ne 09/26``.
"""

import re
from dataclasses import dataclass
from typing import FrozenSet, Optional
from urllib.parse import urlparse

import structlog

from douyin_api.providers.exceptions import InvalidURLError

logger = structlog.get_logger(__name__)

# First http(s) URL inside free-form share text
SHARE_URL_PATTERN = re.compile(r"https?://[^\s，。、　<>\"']+", re.IGNORECASE)

VIDEO_ID_PATTERN = re.compile(r"^[0-9]{1,32}$")


@dataclass(frozen=True)
class ValidationResult:
    """Result of a validation operation."""

    is_valid: bool
    error_message: Optional[str] = None
    sanitized_value: Optional[str] = None


class ShareURLValidator:
    """Normalizes user input into a single share URL."""

    # Dangerous URL schemes that should always be rejected
    DANGEROUS_SCHEMES: FrozenSet[str] = frozenset(
        {
            "javascript",
            "data",
            "file",
            "vbscript",
            "about",
        }
    )

    def validate(self, text: str) -> ValidationResult:
        """Extract and validate the share URL contained in ``text``.

        Args:
            text: Share URL or share text copied from the app

        Returns:
            ValidationResult whose sanitized_value is the share URL
        """
        if not text or not isinstance(text, str):
            return ValidationResult(is_valid=False, error_message="URL is required")

        text = text.strip()
        if not text:
            return ValidationResult(is_valid=False, error_message="URL cannot be empty")

        scheme = urlparse(text).scheme.lower()
        if scheme in self.DANGEROUS_SCHEMES:
            logger.warning("dangerous_url_scheme", scheme=scheme)
            return ValidationResult(
                is_valid=False, error_message=f"URL scheme '{scheme}' is not allowed"
            )

        match = SHARE_URL_PATTERN.search(text)
        if match:
            url = match.group(0)
            logger.debug("share_url_extracted", url=url)
            return ValidationResult(is_valid=True, sanitized_value=url)

        # Bare host/path or a plain ID; the extractor still gets a chance at it
        if " " in text:
            return ValidationResult(is_valid=False, error_message="No URL found in share text")

        return ValidationResult(is_valid=True, sanitized_value=text)

    def normalize(self, text: str) -> Optional[str]:
        """Return the share URL inside ``text`` or None when invalid."""
        return self.validate(text).sanitized_value

    def require(self, text: str) -> str:
        """Return the share URL inside ``text``.

        Raises:
            InvalidURLError: If no usable URL can be extracted
        """
        result = self.validate(text)
        if not result.is_valid or not result.sanitized_value:
            raise InvalidURLError(result.error_message or "Invalid share URL")
        return result.sanitized_value


def is_valid_video_id(video_id: str) -> bool:
    """Check that a content ID is purely numeric (safe to use in cache file names)."""
    return bool(video_id) and VIDEO_ID_PATTERN.match(video_id) is not None


share_url_validator = ShareURLValidator()
