"""
Outbox transactionnelle : publication des événements de domaine et worker
de traitement.

Les producteurs (machine à états du bail) appellent publish_events() dans
leur transaction. La commande `python manage.py process_outbox` dépile
ensuite les événements et les transmet aux handlers enregistrés
(notifications, comptabilité, ...). Le producteur n'attend jamais le
traitement.
"""

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Callable

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from notifications.models import OutboxEvent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DomainEvent:
    event_type: str
    aggregate_id: Any
    payload: dict = field(default_factory=dict)
    aggregate_type: str = "bail"


EventHandler = Callable[[OutboxEvent], None]

_HANDLERS: dict[str, list[EventHandler]] = {}


def register_handler(event_type: str, handler: EventHandler) -> None:
    """Abonne un handler à un type d'événement (ex: "Lease.Activated")"""
    _HANDLERS.setdefault(event_type, []).append(handler)


def unregister_handler(event_type: str, handler: EventHandler) -> None:
    handlers = _HANDLERS.get(event_type, [])
    if handler in handlers:
        handlers.remove(handler)


def get_handlers(event_type: str) -> list[EventHandler]:
    return list(_HANDLERS.get(event_type, []))


def publish_events(events: list[DomainEvent]) -> list[OutboxEvent]:
    """Écrit les événements dans l'outbox (statut pending)"""
    max_retries = getattr(settings, "OUTBOX_MAX_RETRIES", 3)
    rows = OutboxEvent.objects.bulk_create(
        [
            OutboxEvent(
                event_type=event.event_type,
                aggregate_type=event.aggregate_type,
                aggregate_id=event.aggregate_id,
                payload=event.payload,
                max_retries=max_retries,
            )
            for event in events
        ]
    )
    for row in rows:
        logger.info(f"📤 Outbox: {row.event_type} publié pour {row.aggregate_id}")
    return rows


def log_event(event: OutboxEvent) -> None:
    """Handler par défaut : trace l'événement sans autre action"""
    logger.info(
        f"📨 {event.event_type} ({event.aggregate_type} {event.aggregate_id}): "
        f"{event.payload}"
    )


def dispatch(event: OutboxEvent) -> None:
    handlers = get_handlers(event.event_type) or [log_event]
    for handler in handlers:
        handler(event)


def _claim(event: OutboxEvent) -> bool:
    """Passe l'événement en processing si personne ne l'a pris entre-temps"""
    return (
        OutboxEvent.objects.filter(id=event.id, status=OutboxEvent.Status.PENDING)
        .update(status=OutboxEvent.Status.PROCESSING, updated_at=timezone.now())
        == 1
    )


def _schedule_retry(event: OutboxEvent, error: Exception) -> None:
    event.retry_count += 1
    event.error_message = str(error) or error.__class__.__name__

    if event.retry_count >= event.max_retries:
        event.status = OutboxEvent.Status.FAILED
        logger.error(
            f"❌ Outbox: {event.event_type} {event.id} en échec définitif "
            f"après {event.retry_count} tentative(s): {event.error_message}"
        )
    else:
        base_delay = getattr(settings, "OUTBOX_RETRY_BASE_DELAY_SECONDS", 60)
        delay = base_delay * (2**event.retry_count)
        event.status = OutboxEvent.Status.PENDING
        event.scheduled_at = timezone.now() + timedelta(seconds=delay)
        logger.warning(
            f"⚠️ Outbox: {event.event_type} {event.id} reprogrammé dans {delay}s "
            f"(tentative {event.retry_count}/{event.max_retries})"
        )

    event.save(
        update_fields=[
            "retry_count",
            "error_message",
            "status",
            "scheduled_at",
            "updated_at",
        ]
    )


def reclaim_stale_events(timeout_seconds: int | None = None) -> int:
    """
    Remet en pending les événements restés en processing au-delà du délai
    (worker interrompu entre la prise en charge et la fin du traitement).

    Returns:
        Nombre d'événements remis en file
    """
    if timeout_seconds is None:
        timeout_seconds = getattr(settings, "OUTBOX_PROCESSING_TIMEOUT_SECONDS", 300)

    now = timezone.now()
    reclaimed = OutboxEvent.objects.filter(
        status=OutboxEvent.Status.PROCESSING,
        updated_at__lt=now - timedelta(seconds=timeout_seconds),
    ).update(status=OutboxEvent.Status.PENDING, scheduled_at=now, updated_at=now)

    if reclaimed:
        logger.warning(
            f"⚠️ Outbox: {reclaimed} événement(s) bloqué(s) en processing "
            f"depuis plus de {timeout_seconds}s remis en file"
        )
    return reclaimed


def process_outbox(batch_size: int | None = None) -> dict[str, int]:
    """
    Traite un lot d'événements pending dont l'échéance est passée, après
    avoir remis en file les événements abandonnés en processing.

    Returns:
        {"processed": n, "failed": n, "skipped": n}
    """
    if batch_size is None:
        batch_size = getattr(settings, "OUTBOX_BATCH_SIZE", 50)

    reclaim_stale_events()

    events = list(
        OutboxEvent.objects.filter(
            status=OutboxEvent.Status.PENDING, scheduled_at__lte=timezone.now()
        ).order_by("scheduled_at")[:batch_size]
    )

    stats = {"processed": 0, "failed": 0, "skipped": 0}
    for event in events:
        if not _claim(event):
            stats["skipped"] += 1
            continue

        try:
            with transaction.atomic():
                dispatch(event)
        except Exception as e:
            logger.exception(f"Erreur traitement événement {event.id}")
            _schedule_retry(event, e)
            stats["failed"] += 1
            continue

        OutboxEvent.objects.filter(id=event.id).update(
            status=OutboxEvent.Status.COMPLETED,
            processed_at=timezone.now(),
            updated_at=timezone.now(),
        )
        stats["processed"] += 1

    if events:
        logger.info(
            f"Outbox: {stats['processed']} traité(s), {stats['failed']} en échec, "
            f"{stats['skipped']} ignoré(s)"
        )
    return stats
