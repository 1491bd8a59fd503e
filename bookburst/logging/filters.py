import logging
import re
from typing import List, Optional


class SensitiveDataFilter(logging.Filter):
    """
    Mask credentials that end up in log messages.
    """

    def __init__(
        self,
        name: str = "",
        sensitive_fields: Optional[List[str]] = None,
        replacement: str = "***REDACTED***",
    ):
        super().__init__(name)
        self.sensitive_fields = sensitive_fields or [
            "password",
            "secret",
            "token",
            "authorization",
        ]
        self.replacement = replacement
        fields = "|".join(re.escape(field) for field in self.sensitive_fields)
        # password=abc, token: abc, "password": "abc", 'token': 'abc'
        self._pattern = re.compile(
            rf"""(["']?(?:{fields})["']?\s*[:=]\s*)(["']?)([^"',;\s]+)\2""",
            re.IGNORECASE,
        )

    def mask(self, message: str) -> str:
        return self._pattern.sub(
            lambda m: f"{m.group(1)}{m.group(2)}{self.replacement}{m.group(2)}",
            message,
        )

    def filter(self, record: logging.LogRecord) -> bool:
        """
        Filter log record, masking sensitive data.

        Args:
            record: Log record to filter

        Returns:
            True to include the record in log output
        """
        if not hasattr(record, "original_msg"):
            record.original_msg = record.msg

        record.msg = self.mask(record.getMessage())
        record.args = None

        return True
