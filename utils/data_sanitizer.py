"""
Data Sanitization for logs and error messages
Keeps the TON Center API key and bot token out of log output
"""

import re
from typing import Optional


class DataSanitizer:
    """Masking helpers for secrets that travel in URLs and error text"""

    # api_key is sent as a query parameter, aiohttp errors echo the full URL
    QUERY_SECRET_PATTERN = re.compile(r"(?i)((?:api_key|apikey|token)=)([^&\s'\"]+)")
    BOT_TOKEN_PATTERN = re.compile(r"(?<!\d)(\d{6,12}):([A-Za-z0-9_-]{30,})")

    @classmethod
    def sanitize_text(cls, text: str) -> str:
        """Replace secret query values and bot tokens with a fixed marker"""
        if not text:
            return text
        text = cls.QUERY_SECRET_PATTERN.sub(r"\1[REDACTED]", text)
        return cls.BOT_TOKEN_PATTERN.sub(r"\1:[REDACTED]", text)

    @classmethod
    def mask_api_key(cls, api_key: Optional[str], show_chars: int = 2) -> str:
        """
        Safely mask API key for logging

        Args:
            api_key: API key to mask
            show_chars: Number of characters to show at start/end

        Returns:
            Masked API key safe for logging
        """
        if not api_key:
            return "[NO_API_KEY]"

        if len(api_key) <= show_chars * 2:
            return "[REDACTED]"

        return f"[API_KEY:{api_key[:show_chars]}***{api_key[-show_chars:]}]"


def safe_error_log(error: Exception) -> str:
    """Error text with secrets stripped, prefixed by the exception type"""
    return f"{type(error).__name__}: {DataSanitizer.sanitize_text(str(error))}"


def mask_api_key_safe(api_key: Optional[str]) -> str:
    """Safely mask API key for any logging"""
    return DataSanitizer.mask_api_key(api_key)
