"""Dependency Injection Container.

This module provides a centralized DI container using dependency-injector.
Lifecycles:
- Singleton: One instance per container (HTTP client, session, query cache)
- Factory: New instance every time

Usage:
    from relevant.core.container import create_container

    container = create_container()
    dashboard = container.dashboard()
    await dashboard.start("/feed")

    # In tests
    with container.infrastructure.token_store.override(MemoryTokenStore("t")):
        ...
"""

from dependency_injector import containers, providers

from relevant.core.config import Config, get_config
from relevant.services.navigation import RouteGuard


def _route_guard(session) -> RouteGuard:
    return RouteGuard(lambda: session.status)


class InfrastructureContainer(containers.DeclarativeContainer):
    """Infrastructure layer dependencies (HTTP, credential storage, API client)."""

    global_config = providers.Dependency(instance_of=Config)

    # ============================================
    # HTTP Client
    # ============================================

    http_client = providers.Singleton(
        "relevant.infrastructure.http_client.HTTPClient",
        base_url=global_config.provided.api_base_url,
        timeout=global_config.provided.api_timeout,
    )

    # ============================================
    # Credentials
    # ============================================

    token_store = providers.Singleton(
        "relevant.infrastructure.token_store.FileTokenStore",
        token_path=global_config.provided.token_path,
    )

    # ============================================
    # Relevant API
    # ============================================

    api_client = providers.Singleton(
        "relevant.infrastructure.api_client.RelevantAPI",
        http_client=http_client,
        token_store=token_store,
        auth_header_scheme=global_config.provided.auth_header_scheme,
    )


class ConfigContainer(containers.DeclarativeContainer):
    """Configuration models container.

    Configs are Singleton - loaded once and reused.
    """

    global_config = providers.Dependency(instance_of=Config)

    query_options = providers.Singleton(
        "relevant.config.query.build_query_options",
        feed_page_size=global_config.provided.feed_page_size,
    )

    interest_catalog = providers.Singleton(
        "relevant.services.interests.InterestCatalog",
    )


class ServiceContainer(containers.DeclarativeContainer):
    """Service layer dependencies."""

    global_config = providers.Dependency(instance_of=Config)
    infrastructure = providers.DependenciesContainer()
    configs = providers.DependenciesContainer()

    notifier = providers.Singleton(
        "relevant.services.notifications.Notifier",
    )

    session = providers.Singleton(
        "relevant.services.session.SessionStore",
        api=infrastructure.api_client,
        token_store=infrastructure.token_store,
        notifier=notifier,
    )

    route_guard = providers.Singleton(_route_guard, session=session)

    navigator = providers.Singleton(
        "relevant.services.navigation.Navigator",
        guard=route_guard,
    )

    query_client = providers.Singleton(
        "relevant.services.query.client.QueryClient",
        retry=global_config.provided.query_retry,
        default_stale_time=global_config.provided.default_stale_time,
        notifier=notifier,
    )

    # ============================================
    # Feature services
    # ============================================

    content = providers.Singleton(
        "relevant.services.content.ContentService",
        api=infrastructure.api_client,
        queries=query_client,
        options=configs.query_options,
        scroll_threshold_px=global_config.provided.scroll_threshold_px,
    )

    profile = providers.Singleton(
        "relevant.services.profile.ProfileService",
        api=infrastructure.api_client,
        queries=query_client,
        session=session,
        catalog=configs.interest_catalog,
    )

    youtube = providers.Singleton(
        "relevant.services.youtube_oauth.YouTubeConnectionService",
        api=infrastructure.api_client,
        queries=query_client,
        navigator=navigator,
        notifier=notifier,
    )

    processing = providers.Singleton(
        "relevant.services.processing.ProcessingService",
        api=infrastructure.api_client,
        queries=query_client,
        poll_interval=global_config.provided.processing_poll_interval,
    )

    dashboard = providers.Singleton(
        "relevant.dashboard.Dashboard",
        http_client=infrastructure.http_client,
        session=session,
        navigator=navigator,
        queries=query_client,
        notifier=notifier,
        content=content,
        profile=profile,
        youtube=youtube,
        processing=processing,
    )


class ApplicationContainer(containers.DeclarativeContainer):
    """Root application container.

    Composes all sub-containers and provides the main entry point.
    """

    # Uses get_config() to ensure same instance across the app
    config = providers.Singleton(get_config)

    # Sub-containers
    infrastructure = providers.Container(
        InfrastructureContainer,
        global_config=config,
    )

    configs = providers.Container(
        ConfigContainer,
        global_config=config,
    )

    services = providers.Container(
        ServiceContainer,
        global_config=config,
        infrastructure=infrastructure,
        configs=configs,
    )

    # ============================================
    # Convenience accessors (shortcuts)
    # ============================================

    http_client = providers.Singleton(
        lambda client: client,
        client=infrastructure.http_client,
    )

    api = providers.Singleton(
        lambda client: client,
        client=infrastructure.api_client,
    )

    session = providers.Singleton(
        lambda svc: svc,
        svc=services.session,
    )

    queries = providers.Singleton(
        lambda svc: svc,
        svc=services.query_client,
    )

    content = providers.Singleton(
        lambda svc: svc,
        svc=services.content,
    )

    dashboard = providers.Singleton(
        lambda svc: svc,
        svc=services.dashboard,
    )


def create_container(config: Config | None = None) -> ApplicationContainer:
    """Create and configure the application container.

    Args:
        config: Settings to use instead of the environment-derived singleton

    Returns:
        Configured ApplicationContainer instance
    """
    container = ApplicationContainer()
    if config is not None:
        container.config.override(config)
    return container


__all__ = [
    "ApplicationContainer",
    "ConfigContainer",
    "InfrastructureContainer",
    "ServiceContainer",
    "create_container",
]
