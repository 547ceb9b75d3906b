"""GitLab API client and merge request lookup."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

from propener.api_client import ApiClient, ApiError, ApiHTTPError
from propener.errors import RequestNotFound, TokenExpired, TransportError, Unauthorized
from propener.models import RequestRecord

GITLAB_HOST = "gitlab.com"
GITLAB_API_URL = "https://gitlab.com/api/v4"


class GitLabClient(ApiClient):
    """GitLab REST API (v4) client."""

    default_headers = {"Accept": "application/json"}

    def __init__(self, token: str, *, base_url: str = GITLAB_API_URL, **kwargs: Any) -> None:
        super().__init__(token, base_url=base_url, **kwargs)


def _error_message(body: Any) -> str | None:
    if not isinstance(body, dict):
        return None
    for key in ("error_description", "message", "error"):
        value = body.get(key)
        if value:
            return str(value)
    return None


def _translate(error: ApiError) -> Exception:
    if isinstance(error, ApiHTTPError) and error.status_code == 401:
        body = error.json()
        message = _error_message(body) or "401 Unauthorized"
        # OAuth tokens report expiry as invalid_token with an explanatory description
        if isinstance(body, dict) and body.get("error") == "invalid_token" and "expired" in message.lower():
            return TokenExpired(message)
        return Unauthorized(message)
    return TransportError(str(error))


def project_id(project_path: str) -> str:
    """URL-encode a namespaced project path for use as a project id."""
    return quote(project_path, safe="")


def find_merge_request(client: GitLabClient, project_path: str, branch: str) -> RequestRecord:
    """Find the open merge request whose source branch is ``branch``.

    GitLab orders merge requests by creation date, newest first; the first
    one returned wins.

    Raises:
        RequestNotFound: If there is no open merge request for the branch.
        Unauthorized: If the token is rejected.
        TokenExpired: If the token has expired.
        TransportError: For any other failure.
    """
    try:
        merge_requests = client.get_json(
            f"/projects/{project_id(project_path)}/merge_requests",
            params={"state": "opened", "source_branch": branch, "per_page": 1},
        )
    except ApiError as e:
        raise _translate(e) from e

    if not isinstance(merge_requests, list):
        raise TransportError(f"Unexpected response listing merge requests for {project_path}")
    if not merge_requests:
        raise RequestNotFound(f"No open merge request for {branch} in {project_path}")

    merge_request = merge_requests[0]
    try:
        return RequestRecord(
            web_url=merge_request["web_url"],
            number=merge_request.get("iid"),
            title=merge_request.get("title") or "",
        )
    except (KeyError, TypeError, AttributeError) as e:
        raise TransportError(f"Malformed merge request in response: {e}") from e


def get_authenticated_user(client: GitLabClient) -> str:
    """Return the username of the token's owner."""
    try:
        user = client.get_json("/user")
    except ApiError as e:
        raise _translate(e) from e
    if not isinstance(user, dict) or "username" not in user:
        raise TransportError("Unexpected response from /user")
    return user["username"]
