from django.db import models
from django.utils import timezone

from location.models import BaseModel


class OutboxEvent(BaseModel):
    """
    Événement de domaine en attente de traitement (outbox transactionnelle).

    Écrit dans la même transaction que le changement d'état qui le produit,
    puis consommé de manière asynchrone par la commande process_outbox
    (envoi de notifications, écritures comptables, ...).
    """

    class Status(models.TextChoices):
        PENDING = "pending", "En attente"
        PROCESSING = "processing", "En cours de traitement"
        COMPLETED = "completed", "Traité"
        FAILED = "failed", "Échec définitif"

    event_type = models.CharField(max_length=100, help_text="Ex: Lease.Activated")
    aggregate_type = models.CharField(max_length=50, default="bail")
    aggregate_id = models.UUIDField(help_text="Identifiant de l'entité concernée")
    payload = models.JSONField(default=dict)

    status = models.CharField(
        max_length=20, choices=Status.choices, default=Status.PENDING
    )
    retry_count = models.PositiveSmallIntegerField(default=0)
    max_retries = models.PositiveSmallIntegerField(default=3)
    scheduled_at = models.DateTimeField(default=timezone.now)
    processed_at = models.DateTimeField(null=True, blank=True)
    error_message = models.TextField(blank=True)

    class Meta:
        db_table = "notifications_outbox"
        verbose_name = "Événement outbox"
        verbose_name_plural = "Événements outbox"
        ordering = ["scheduled_at"]
        indexes = [
            models.Index(
                fields=["status", "scheduled_at"], name="notificatio_status_8a41d2_idx"
            ),
            models.Index(
                fields=["aggregate_type", "aggregate_id"],
                name="notificatio_aggrega_3e7b90_idx",
            ),
        ]

    def __str__(self):
        return f"{self.event_type} ({self.status}) - {self.aggregate_id}"
