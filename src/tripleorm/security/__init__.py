"""Security helpers: DSN parsing and log redaction."""

from .dsns import DSNConfig, parse_dsn
from .redaction import REDACTED_VALUE, redact_statements, redact_value

__all__ = ["DSNConfig", "REDACTED_VALUE", "parse_dsn", "redact_statements", "redact_value"]
