"""Records returned by the provider lookups."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RequestRecord:
    """An open pull request (GitHub) or merge request (GitLab)."""

    web_url: str
    number: int | None = None
    title: str = ""
