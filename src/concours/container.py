"\"\"\"Dependency injection container for the admission system.\"\"\""

from __future__ import annotations

from typing import Any, Callable

from dependency_injector import containers, providers

from .audit import AuditLogger
from .core import (
    DeadlineClock,
    NotificationDispatcher,
    RankingEngine,
    ReferenceCatalog,
    ScoreCalculator,
    StatusWorkflow,
)
from .events import ChangeFeed
from .schemas.config import load_config
from .service import AdmissionService
from .store import InMemoryStore, JsonFileStore


class AdmissionContainer(containers.DeclarativeContainer):
    """Dependency-injector container definition."""

    config = providers.Configuration()

    store = providers.Singleton(InMemoryStore)
    clock = providers.Singleton(DeadlineClock)
    audit_logger = providers.Object(None)

    change_feed = providers.Singleton(ChangeFeed, store=store)

    catalog = providers.Singleton(ReferenceCatalog, store=store)

    dispatcher = providers.Singleton(
        NotificationDispatcher,
        store=store,
        feed=change_feed,
        notify_on_reset=config.workflow.notify_on_reset,
        now_provider=clock.provided.now,
    )

    workflow = providers.Singleton(
        StatusWorkflow,
        store=store,
        dispatcher=dispatcher,
        feed=change_feed,
        audit_logger=audit_logger,
        now_provider=clock.provided.now,
    )

    score_calculator = providers.Singleton(ScoreCalculator)
    ranking_engine = providers.Singleton(RankingEngine, calculator=score_calculator)

    service = providers.Factory(
        AdmissionService,
        store=store,
        catalog=catalog,
        workflow=workflow,
        dispatcher=dispatcher,
        ranking=ranking_engine,
        feed=change_feed,
        clock=clock,
        password_length=config.credentials.password_length,
        poll_interval_seconds=config.portal.poll_interval_seconds,
    )


def create_container(
    *,
    settings: dict | None = None,
    now_provider: Callable[[], Any] | None = None,
) -> AdmissionContainer:
    """Instantiate container with optional overrides."""

    container = AdmissionContainer()

    if now_provider is not None:
        container.clock.override(providers.Singleton(DeadlineClock, now_provider=now_provider))

    if not settings:
        return container

    resolved = load_config(settings).to_settings()
    container.config.from_dict(resolved)

    store_path = resolved.get("store", {}).get("path")
    if store_path:
        container.store.override(providers.Singleton(JsonFileStore, path=store_path))

    audit_path = resolved.get("audit", {}).get("path")
    if audit_path:
        container.audit_logger.override(providers.Singleton(AuditLogger, path=audit_path))

    return container
