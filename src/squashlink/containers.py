"""Dependency Injection container for SquashLink.

This module wires the resilient access layer using dependency-injector.

The container manages:
- Settings (Singleton)
- Process-wide state: token context, circuit breaker, fallback switch (Singleton)
- HTTP client, SquashTM service, tree loader and gateway (Singleton)
- Test-case pager (Factory)
"""

from __future__ import annotations

from dependency_injector import containers, providers

from squashlink.config.loader import get_config
from squashlink.core.gateway import SquashGateway
from squashlink.core.paging import TestCasePager
from squashlink.core.tree.loader import HierarchicalTreeLoader
from squashlink.services import (
    CircuitBreaker,
    FallbackDataSource,
    FallbackSwitch,
    ResilientHttpClient,
    RetryPolicy,
    SquashApiService,
    TokenContext,
)


class Container(containers.DeclarativeContainer):
    """Dependency Injection container for SquashLink services.

    Example:
        >>> container = Container()
        >>> container.config.override(providers.Object(Settings()))
        >>> gateway = container.gateway()
        >>> roots = await gateway.load_roots()
    """

    # Configuration
    config = providers.Singleton(get_config)

    squash_settings = providers.Callable(lambda config: config.squash, config=config)

    # Shared state
    token_context = providers.Singleton(
        TokenContext,
        token=providers.Callable(lambda squash: squash.token, squash=squash_settings),
    )

    circuit_breaker = providers.Singleton(
        CircuitBreaker,
        failure_threshold=providers.Callable(
            lambda squash: squash.circuit.failure_threshold,
            squash=squash_settings,
        ),
        cooldown_ms=providers.Callable(
            lambda squash: squash.circuit.cooldown_ms,
            squash=squash_settings,
        ),
    )

    retry_policy = providers.Singleton(
        RetryPolicy.from_settings,
        settings=providers.Callable(lambda squash: squash.retry, squash=squash_settings),
    )

    fallback_source = providers.Singleton(FallbackDataSource)

    fallback_switch = providers.Singleton(
        FallbackSwitch,
        policy=providers.Callable(lambda squash: squash.fallback_policy, squash=squash_settings),
    )

    # HTTP client
    http_client = providers.Singleton(
        ResilientHttpClient,
        base_url=providers.Callable(lambda squash: squash.base_url, squash=squash_settings),
        token_context=token_context,
        circuit_breaker=circuit_breaker,
        retry_policy=retry_policy,
        timeout_ms=providers.Callable(lambda squash: squash.timeout_ms, squash=squash_settings),
        health_timeout_ms=providers.Callable(
            lambda squash: squash.health_timeout_ms,
            squash=squash_settings,
        ),
    )

    # SquashTM service
    squash_service = providers.Singleton(
        SquashApiService,
        client=http_client,
        fallback_source=fallback_source,
        fallback_switch=fallback_switch,
        projects_page_size=providers.Callable(
            lambda squash: squash.projects_page_size,
            squash=squash_settings,
        ),
        folders_page_size=providers.Callable(
            lambda squash: squash.folders_page_size,
            squash=squash_settings,
        ),
        test_cases_page_size=providers.Callable(
            lambda squash: squash.test_cases_page_size,
            squash=squash_settings,
        ),
    )

    # Core
    tree_loader = providers.Singleton(HierarchicalTreeLoader, service=squash_service)

    pager = providers.Factory(
        TestCasePager,
        service=squash_service,
        block_size=providers.Callable(
            lambda squash: squash.test_cases_page_size,
            squash=squash_settings,
        ),
    )

    gateway = providers.Singleton(
        SquashGateway,
        client=http_client,
        service=squash_service,
        tree_loader=tree_loader,
        pager=pager,
        token_context=token_context,
    )
