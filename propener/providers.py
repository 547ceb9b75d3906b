"""Hosting providers that pro knows how to query."""

from __future__ import annotations

from abc import ABC, abstractmethod

from propener import github_api, gitlab_api
from propener.api_client import ApiClient
from propener.models import RequestRecord


class Provider(ABC):
    """A hosting provider and its open request lookup."""

    name: str
    title: str
    host: str
    request_noun: str
    token_url: str

    @abstractmethod
    def client(self, token: str) -> ApiClient:
        """Create an API client authenticated with ``token``."""
        ...

    @abstractmethod
    def find_open_request(self, project_path: str, token: str, branch: str) -> RequestRecord:
        """Find the open request for ``branch`` in ``project_path``.

        Raises one of the ProviderError subclasses on failure.
        """
        ...

    @abstractmethod
    def new_request_url(self, project_path: str, branch: str) -> str:
        """Return the web page URL for creating a request from ``branch``."""
        ...

    @abstractmethod
    def authenticated_user(self, token: str) -> str:
        """Return the account name that owns ``token``.

        Raises Unauthorized if the token is rejected.
        """
        ...


class GitHubProvider(Provider):
    name = "github"
    title = "GitHub"
    host = github_api.GITHUB_HOST
    request_noun = "pull request"
    token_url = "https://github.com/settings/tokens/new?scopes=repo&description=pro"

    def client(self, token: str) -> github_api.GitHubClient:
        return github_api.GitHubClient(token)

    def find_open_request(self, project_path: str, token: str, branch: str) -> RequestRecord:
        with self.client(token) as client:
            return github_api.find_pull_request(client, project_path, branch)

    def new_request_url(self, project_path: str, branch: str) -> str:
        return f"https://{self.host}/{project_path}/pull/new/{branch}"

    def authenticated_user(self, token: str) -> str:
        with self.client(token) as client:
            return github_api.get_authenticated_user(client)


class GitLabProvider(Provider):
    name = "gitlab"
    title = "GitLab"
    host = gitlab_api.GITLAB_HOST
    request_noun = "merge request"
    token_url = "https://gitlab.com/-/user_settings/personal_access_tokens?name=pro&scopes=read_api"

    def client(self, token: str) -> gitlab_api.GitLabClient:
        return gitlab_api.GitLabClient(token)

    def find_open_request(self, project_path: str, token: str, branch: str) -> RequestRecord:
        with self.client(token) as client:
            return gitlab_api.find_merge_request(client, project_path, branch)

    def new_request_url(self, project_path: str, branch: str) -> str:
        return (
            f"https://{self.host}/{project_path}/merge_requests/new"
            f"?merge_request%5Bsource_branch%5D={branch}"
        )

    def authenticated_user(self, token: str) -> str:
        with self.client(token) as client:
            return gitlab_api.get_authenticated_user(client)


GITHUB = GitHubProvider()
GITLAB = GitLabProvider()

PROVIDERS: dict[str, Provider] = {provider.host: provider for provider in (GITHUB, GITLAB)}
PROVIDERS_BY_NAME: dict[str, Provider] = {provider.name: provider for provider in (GITHUB, GITLAB)}
