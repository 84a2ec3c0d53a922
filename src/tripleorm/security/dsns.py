"""Store DSN parsing and redaction."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import parse_qs, urlencode, urlparse

from .redaction import redact_query_params


@dataclass
class DSNConfig:
    driver: str
    username: Optional[str] = None
    password: Optional[str] = None
    host: Optional[str] = None
    port: Optional[int] = None
    path: str = ""
    query: dict[str, str] = field(default_factory=dict)

    @property
    def database(self) -> Optional[str]:
        """
        Filesystem location (or ``:memory:``) addressed by the DSN path.
        """
        if not self.path:
            return None
        if self.path == "/:memory:":
            return ":memory:"
        # sqlite:///relative.db -> "relative.db", sqlite:////abs.db -> "/abs.db"
        return self.path[1:] if self.path.startswith("/") else self.path

    def redacted(self) -> str:
        netloc = ""
        if self.username:
            netloc += self.username
            if self.password:
                netloc += ":***"
            netloc += "@"
        if self.host:
            netloc += self.host
        if self.port:
            netloc += f":{self.port}"

        result = f"{self.driver}://{netloc}{self.path}"
        if self.query:
            result += f"?{urlencode(redact_query_params(self.query))}"
        return result


def parse_dsn(dsn: str) -> DSNConfig:
    parsed = urlparse(dsn)
    if not parsed.scheme:
        raise ValueError(f"DSN '{dsn}' does not name a driver")
    return DSNConfig(
        driver=parsed.scheme.lower(),
        username=parsed.username,
        password=parsed.password,
        host=parsed.hostname,
        port=parsed.port,
        path=parsed.path or "",
        query={k: v[0] for k, v in parse_qs(parsed.query).items()},
    )
