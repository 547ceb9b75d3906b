"""GitHub API client and pull request lookup."""

from __future__ import annotations

from typing import Any

from propener.api_client import ApiClient, ApiError, ApiHTTPError
from propener.errors import RequestNotFound, TransportError, Unauthorized
from propener.models import RequestRecord

GITHUB_HOST = "github.com"
GITHUB_API_URL = "https://api.github.com"


class GitHubClient(ApiClient):
    """GitHub REST API client."""

    default_headers = {
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": "2022-11-28",
    }

    def __init__(self, token: str, *, base_url: str = GITHUB_API_URL, **kwargs: Any) -> None:
        super().__init__(token, base_url=base_url, **kwargs)


def _translate(error: ApiError) -> Exception:
    if isinstance(error, ApiHTTPError) and error.status_code == 401:
        body = error.json()
        message = body.get("message") if isinstance(body, dict) else None
        return Unauthorized(message or "Bad credentials")
    if isinstance(error, ApiHTTPError) and error.status_code in (403, 429):
        headers = {k.lower(): v for k, v in error.headers.items()}
        if headers.get("x-ratelimit-remaining") == "0":
            reset = headers.get("x-ratelimit-reset", "unknown")
            return TransportError(f"GitHub API rate limit exceeded (resets at epoch {reset}): {error}")
    return TransportError(str(error))


def find_pull_request(client: GitHubClient, project_path: str, branch: str) -> RequestRecord:
    """Find the open pull request whose head is ``branch``.

    The head filter uses the repository owner, so pull requests opened from
    forks are not matched. When several match, the first one in GitHub's
    default ordering wins.

    Raises:
        RequestNotFound: If there is no open pull request for the branch.
        Unauthorized: If the token is rejected.
        TransportError: For any other failure.
    """
    owner = project_path.split("/", 1)[0]
    try:
        pulls = client.get_json(
            f"/repos/{project_path}/pulls",
            params={"state": "open", "head": f"{owner}:{branch}", "per_page": 1},
        )
    except ApiError as e:
        raise _translate(e) from e

    if not isinstance(pulls, list):
        raise TransportError(f"Unexpected response listing pull requests for {project_path}")
    if not pulls:
        raise RequestNotFound(f"No open pull request for {branch} in {project_path}")

    pull = pulls[0]
    try:
        return RequestRecord(
            web_url=pull["html_url"],
            number=pull.get("number"),
            title=pull.get("title") or "",
        )
    except (KeyError, TypeError, AttributeError) as e:
        raise TransportError(f"Malformed pull request in response: {e}") from e


def get_authenticated_user(client: GitHubClient) -> str:
    """Return the login of the token's owner."""
    try:
        user = client.get_json("/user")
    except ApiError as e:
        raise _translate(e) from e
    if not isinstance(user, dict) or "login" not in user:
        raise TransportError("Unexpected response from /user")
    return user["login"]
