from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import FrozenSet
from urllib.parse import urlsplit

_SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.-]*://", flags=re.IGNORECASE)


class UrlNormalizer:
    """Strategy interface: turns a user supplied site into an auditable url."""
    def normalize(self, s: str) -> str:
        raise NotImplementedError


@dataclass(frozen=True)
class GuessComUrlNormalizer(UrlNormalizer):
    default_scheme: str = "https"
    guess_com_if_no_dot: bool = True
    no_guess_hosts: FrozenSet[str] = field(default_factory=frozenset)

    def normalize(self, s: str) -> str:
        """
        "example"          -> "https://example.com"
        "example.com/blog" -> "https://example.com/blog"
        "localhost:3000"   -> "https://localhost:3000"

        Raises ValueError for non-http(s) schemes; the auditor only crawls web sites.
        """
        s = (s or "").strip()
        if not s:
            return ""

        if _SCHEME_RE.match(s):
            scheme = urlsplit(s).scheme.lower()
            if scheme not in ("http", "https"):
                raise ValueError(f"Unsupported URL scheme: {scheme}")
            return s

        parts = s.split("/", 1)
        host = parts[0].strip()
        rest = ("/" + parts[1]) if len(parts) > 1 else ""

        name, sep, port = host.partition(":")
        no_guess = {h.lower() for h in self.no_guess_hosts}
        if self.guess_com_if_no_dot and "." not in name and name.lower() not in no_guess:
            host = f"{name}.com{sep}{port}"

        return f"{self.default_scheme}://" + host + rest
