"""Git remote URL parsing utilities."""

from __future__ import annotations

import re
from dataclasses import dataclass

from propener.errors import ProError

URL_SCHEMES = ("ssh", "git+ssh", "ssh+git", "git", "http", "https")

_URL_FORM = re.compile(
    r"^(?P<scheme>[A-Za-z][A-Za-z0-9+.-]*)://"
    r"(?:[^@/]*@)?"
    r"(?P<host>\[[^\]]+\]|[^:/]+)"
    r"(?::\d*)?"
    r"(?P<path>/.*)?$"
)
_SCP_FORM = re.compile(r"^(?:[^@/:]+@)?(?P<host>[^@/:]+):(?!//)(?P<path>.+)$")


class UrlParseError(ProError):
    """Raised when a remote URL matches none of the supported syntaxes."""


@dataclass(frozen=True)
class RemoteDescriptor:
    """Host and project path of a remote, independent of URL syntax."""

    host: str
    project_path: str

    @property
    def home_url(self) -> str:
        return f"https://{self.host}/{self.project_path}"

    @property
    def owner(self) -> str:
        return self.project_path.split("/", 1)[0]


def parse_remote_url(url: str) -> RemoteDescriptor:
    """Extract host and project path from a git remote URL.

    Handles:
    - git@github.com:owner/repo.git
    - ssh://git@github.com:22/owner/repo.git
    - https://github.com/owner/repo
    - https://user@gitlab.com/group/subgroup/repo.git/

    Raises:
        UrlParseError: If the URL cannot be parsed.
    """
    raw = url
    url = url.strip()

    match = _URL_FORM.match(url)
    if match:
        if match.group("scheme").lower() not in URL_SCHEMES:
            raise UrlParseError(f"Unsupported remote URL scheme: {raw}")
        host = match.group("host")
        path = match.group("path") or ""
    else:
        match = _SCP_FORM.match(url)
        if not match:
            raise UrlParseError(f"Cannot parse remote URL: {raw}")
        host = match.group("host")
        path = match.group("path")

    if path.endswith("/"):
        path = path[:-1]
    if path.endswith(".git"):
        path = path[:-4]
    if path.startswith("/"):
        path = path[1:]

    if not host or not path:
        raise UrlParseError(f"Cannot parse remote URL: {raw}")

    return RemoteDescriptor(host=host, project_path=path)
