"""Shared fixtures for pro tests."""

from __future__ import annotations

import io

import pytest
from rich.console import Console

from propener.errors import RequestNotFound
from propener.models import RequestRecord
from propener.providers import GitHubProvider, GitLabProvider
from propener.repository import Branch, RemoteNotFound


class FakeRepository:
    def __init__(self, urls=None, branch=Branch("feature/x", True)):
        self.urls = urls if urls is not None else ["git@github.com:acme/widgets.git"]
        self.branch = branch

    def remote_urls(self, name="origin"):
        if name != "origin" or not self.urls:
            raise RemoteNotFound(f'No remote named "{name}" found.')
        return list(self.urls)

    def current_branch(self):
        return self.branch


class RecordingMixin:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = []

    def find_open_request(self, project_path, token, branch):
        self.calls.append((project_path, token, branch))
        if self.error is not None:
            raise self.error
        if self.result is None:
            raise RequestNotFound(f"No open request for {branch}")
        return RequestRecord(web_url=self.result)


class FakeGitHub(RecordingMixin, GitHubProvider):
    pass


class FakeGitLab(RecordingMixin, GitLabProvider):
    pass


class FakeCredentials:
    def __init__(self, **tokens):
        self.tokens = tokens

    def get_token(self, provider):
        return self.tokens.get(provider, "")


class FakeLauncher:
    def __init__(self, error=None):
        self.error = error
        self.urls = []

    def __call__(self, url):
        self.urls.append(url)
        if self.error is not None:
            raise self.error


def make_console():
    return Console(file=io.StringIO(), width=300, color_system=None, force_terminal=False)


@pytest.fixture
def console():
    return make_console()


@pytest.fixture
def err_console():
    return make_console()
