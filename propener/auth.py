"""Interactive token setup for `pro auth`."""

from __future__ import annotations

import logging
from typing import Callable

from rich.console import Console
from rich.markup import escape
from rich.prompt import Prompt

from propener.config import Config, ConfigError, save_config
from propener.errors import TransportError, Unauthorized
from propener.providers import Provider

logger = logging.getLogger(__name__)


def _ask_token(provider: Provider) -> str:
    return Prompt.ask(f"Paste your {provider.title} token", password=True)


def authorize(
    provider: Provider,
    config: Config,
    *,
    prompt: Callable[[Provider], str] = _ask_token,
    console: Console | None = None,
) -> int:
    """Ask for a token, check it against the provider and store it.

    Returns the process exit status.
    """
    if console is None:
        console = Console(stderr=True)

    console.print(f"Create a {provider.title} access token at:")
    console.print(provider.token_url, style="blue", markup=False, highlight=False, soft_wrap=True)

    token = prompt(provider).strip()
    if not token:
        console.print("[red]No token given.[/red]")
        return 1

    try:
        user = provider.authenticated_user(token)
    except Unauthorized as e:
        console.print(f"[red]{provider.title} rejected the token: {escape(str(e))}[/red]")
        return 1
    except TransportError as e:
        logger.debug("Token verification failed", exc_info=True)
        console.print(f"[red]Unable to verify the token: {escape(str(e))}[/red]")
        return 1

    config.set_token(provider.name, token)
    try:
        save_config(config)
    except ConfigError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        return 1

    console.print(f"[green]Connected {provider.title} as {escape(user)}.[/green]")
    console.print(f"[dim]Token saved to {escape(str(config.path))}[/dim]")
    return 0
