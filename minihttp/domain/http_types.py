"""Shared HTTP type definitions to avoid circular imports."""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional


@dataclass(frozen=True)
class HttpRequest:
    """Represents a parsed HTTP request.

    Header names are kept exactly as the client sent them. The mapping is
    read-only once the request is built.
    """

    method: str
    path: str
    version: str
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    def header(self, name: str) -> Optional[str]:
        """Return a header value, preferring an exact name match."""
        if name in self.headers:
            return self.headers[name]
        wanted = name.lower()
        value = None
        for key, candidate in self.headers.items():
            if key.lower() == wanted:
                value = candidate
        return value


@dataclass
class HttpResponse:
    """Represents an HTTP response to be sent to a client."""

    status_line: str
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    @property
    def status_code(self) -> int:
        return int(self.status_line.split(" ", 1)[0])
