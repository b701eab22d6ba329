"""Container and event-loop plumbing shared by the CLI handlers."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

from dependency_injector import providers

from squashlink.cli.common.context import CliContext
from squashlink.config import load_settings
from squashlink.containers import Container
from squashlink.core.gateway import SquashGateway

T = TypeVar("T")


def create_container(context: CliContext) -> Container:
    """Build a container, pinning the settings file given with --config."""
    container = Container()
    if context.config_path is not None:
        settings = load_settings(context.config_path)
        container.config.override(providers.Object(settings))
    return container


def run_with_gateway(
    context: CliContext,
    action: Callable[[SquashGateway], Awaitable[T]],
) -> T:
    """Run ``action`` against a fresh gateway and close its session afterwards."""
    container = create_container(context)

    async def _run() -> T:
        async with container.gateway() as gateway:
            return await action(gateway)

    return asyncio.run(_run())


__all__ = ["create_container", "run_with_gateway"]
