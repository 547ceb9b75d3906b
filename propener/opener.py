"""Resolve the pull/merge request for the current branch and open it."""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Literal, Protocol

from rich.console import Console
from rich.markup import escape

from propener.browser import BrowserLaunchError, open_browser
from propener.errors import ProError, RequestNotFound, TransportError, Unauthorized
from propener.models import RequestRecord
from propener.providers import PROVIDERS, Provider
from propener.remote_url import RemoteDescriptor, UrlParseError, parse_remote_url
from propener.repository import (
    Branch,
    LocatorError,
    RemoteNotFound,
    Repository,
    RepositoryNotFound,
    RepositoryStateError,
    find_repository,
)

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1

ORIGIN = "origin"
DEFAULT_BRANCHES = frozenset({"master", "main", "trunk", "develop"})

ResolutionKind = Literal["detached", "home", "lookup", "request", "create"]


class MissingCredential(ProError):
    """Raised when no token is stored for the remote's provider."""

    def __init__(self, provider: Provider) -> None:
        super().__init__(f"{provider.title} token is not set.")
        self.provider = provider


class UnknownRemoteType(ProError):
    """Raised when the origin remote is not on a supported host."""

    def __init__(self, host: str) -> None:
        super().__init__(f"Unknown remote type: {host}")
        self.host = host


class CredentialStore(Protocol):
    def get_token(self, provider: str) -> str: ...


@dataclass(frozen=True)
class Resolution:
    """Where one invocation ended up.

    ``lookup`` is the intermediate state before the provider is queried;
    ``request`` and ``create`` carry the found request URL or the link to
    create one.
    """

    kind: ResolutionKind
    branch: Branch
    remote: RemoteDescriptor
    url: str | None = None
    provider: Provider | None = None
    token: str = dataclasses.field(default="", repr=False)
    record: RequestRecord | None = None


class Opener:
    """Finds the request for the checked out branch and hands its URL to the output."""

    def __init__(
        self,
        credentials: CredentialStore,
        *,
        locate: Callable[[Path], Repository] = find_repository,
        launcher: Callable[[str], None] = open_browser,
        providers: dict[str, Provider] | None = None,
        console: Console | None = None,
        err_console: Console | None = None,
    ) -> None:
        self._credentials = credentials
        self._locate = locate
        self._launcher = launcher
        self._providers = providers if providers is not None else PROVIDERS
        self._console = console if console is not None else Console()
        self._err_console = err_console if err_console is not None else Console(stderr=True)

    def prepare(self, start: Path) -> Resolution:
        """Resolve everything that does not need the network.

        Raises:
            RepositoryNotFound, LocatorError: No repository encloses ``start``.
            RemoteNotFound: There is no origin remote.
            UrlParseError: The origin URL cannot be parsed.
            RepositoryStateError: HEAD or the git config cannot be read.
            UnknownRemoteType: The origin host is not a known provider.
            MissingCredential: No token is stored for the provider.
        """
        repository = self._locate(start)

        origin_url = repository.remote_urls(ORIGIN)[0]
        remote = parse_remote_url(origin_url)
        logger.debug("Origin %s -> %s", origin_url, remote)

        branch = repository.current_branch()
        logger.debug("HEAD is %s", branch)
        if not branch.is_named_branch:
            return Resolution(kind="detached", branch=branch, remote=remote)

        # a request never targets the default branch itself
        if branch.name in DEFAULT_BRANCHES:
            return Resolution(kind="home", branch=branch, remote=remote, url=remote.home_url)

        provider = self._providers.get(remote.host)
        if provider is None:
            raise UnknownRemoteType(remote.host)

        token = self._credentials.get_token(provider.name)
        if not token:
            raise MissingCredential(provider)

        return Resolution(kind="lookup", branch=branch, remote=remote, provider=provider, token=token)

    def lookup(self, resolution: Resolution) -> Resolution:
        """Query the provider for a ``lookup`` resolution.

        Raises:
            Unauthorized: The token was rejected (TokenExpired included).
            TransportError: Any other provider failure.
        """
        if resolution.kind != "lookup" or resolution.provider is None:
            return resolution

        provider = resolution.provider
        project_path = resolution.remote.project_path
        branch = resolution.branch.name
        try:
            record = provider.find_open_request(project_path, resolution.token, branch)
        except RequestNotFound:
            return dataclasses.replace(
                resolution,
                kind="create",
                url=provider.new_request_url(project_path, branch),
            )
        return dataclasses.replace(resolution, kind="request", url=record.web_url, record=record)

    def resolve(self, start: Path) -> Resolution:
        return self.lookup(self.prepare(start))

    def run(self, start: Path, print_url: bool = False) -> int:
        """Resolve and output the URL, returning the process exit status."""
        try:
            resolution = self.prepare(start)
        except ProError as e:
            return self._report(e)

        if resolution.kind == "detached":
            self._status("[red]No active branch found.[/red]")
            self._status("Switch to a branch and try again.")
            return EXIT_OK

        self._status(f"Current branch: [green]{escape(resolution.branch.name)}[/green]")

        if resolution.kind == "home":
            self._status("Looks like you are on the main branch. Opening home page.")
            return self._output(resolution.url, print_url)

        provider = resolution.provider
        try:
            resolution = self.lookup(resolution)
        except Unauthorized as e:
            logger.debug("Lookup rejected", exc_info=True)
            return self._fail(
                f"Unable to get {provider.request_noun}s: {e}",
                f"Token may be expired or revoked. Run `pro auth {provider.name}` to connect {provider.title} again.",
            )
        except TransportError as e:
            logger.debug("Lookup failed", exc_info=True)
            return self._fail(f"Unable to get {provider.request_noun}s: {e}")

        if resolution.kind == "create":
            self._status(f"No open {provider.request_noun} found for current branch")
            if print_url:
                self._print_url(resolution.url)
            else:
                # the create page is shown, never opened
                self._status(f"Create {provider.request_noun} at [blue]{escape(resolution.url)}[/blue]")
            return EXIT_OK

        return self._output(resolution.url, print_url)

    def _output(self, url: str, print_url: bool) -> int:
        if print_url:
            self._print_url(url)
            return EXIT_OK

        self._status(f"Opening [blue]{escape(url)}[/blue]")
        try:
            self._launcher(url)
        except BrowserLaunchError as e:
            return self._fail(str(e))
        return EXIT_OK

    def _print_url(self, url: str) -> None:
        self._console.print(url, style="blue", markup=False, highlight=False, soft_wrap=True)

    def _report(self, error: ProError) -> int:
        logger.debug("Resolution failed", exc_info=error)
        if isinstance(error, (RepositoryNotFound, LocatorError)):
            return self._fail(
                "Unable to find git repository in given directory or any of parent directories.",
                "Please make sure you are in the project directory.",
            )
        if isinstance(error, RemoteNotFound):
            return self._fail(str(error), f'Please make sure you have a remote named "{ORIGIN}".')
        if isinstance(error, UrlParseError):
            return self._fail(f"Unable to parse origin URL: {error}")
        if isinstance(error, RepositoryStateError):
            return self._fail(f"Unable to read repository state: {error}")
        if isinstance(error, MissingCredential):
            return self._fail(str(error), f"Run `pro auth {error.provider.name}` to set it.")
        if isinstance(error, UnknownRemoteType):
            supported = ", ".join(sorted(self._providers))
            return self._fail(str(error), f"Supported hosts: {supported}.")
        return self._fail(str(error))

    def _status(self, message: str) -> None:
        self._err_console.print(message, highlight=False, soft_wrap=True)

    def _fail(self, message: str, hint: str | None = None) -> int:
        self._err_console.print(f"[red]{escape(message)}[/red]", highlight=False, soft_wrap=True)
        if hint:
            self._err_console.print(hint, markup=False, highlight=False, soft_wrap=True)
        return EXIT_FAILURE
