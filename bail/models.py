"""
Modèles du bail et des éléments qui conditionnent son cycle de vie
(signataires, remise des clés, congé, journal des transitions).

Le statut du bail n'est jamais écrit directement : seules les transitions
de bail.services.executor le modifient (update conditionnel).
"""

from django.db import models
from django.utils import timezone
from simple_history.models import HistoricalRecords

from location.models import BaseModel, Location
from signature.models import AbstractSignatureRequest


class BailStatus(models.TextChoices):
    """États légaux du bail"""

    DRAFT = "draft", "Brouillon"
    SENT = "sent", "Envoyé"
    PENDING_SIGNATURE = "pending_signature", "En attente de signature"
    FULLY_SIGNED = "fully_signed", "Signé par toutes les parties"
    ACTIVE = "active", "Actif"
    NOTICE_GIVEN = "notice_given", "Congé donné"
    TERMINATED = "terminated", "Résilié"
    ARCHIVED = "archived", "Archivé"
    CANCELLED = "cancelled", "Annulé"

    @classmethod
    def terminaux(cls):
        return [cls.ARCHIVED, cls.CANCELLED]


class BailType(models.TextChoices):
    """Types de contrat"""

    VIDE = "vide", "Location vide"
    MEUBLE = "meuble", "Location meublée"
    ETUDIANT = "etudiant", "Bail étudiant"
    MOBILITE = "mobilite", "Bail mobilité"
    SAISONNIER = "saisonnier", "Location saisonnière"
    COMMERCIAL = "commercial", "Bail commercial"


class DirectStatusWriteError(Exception):
    """Écriture du statut d'un bail en dehors de l'exécuteur de transitions"""


class Bail(BaseModel):
    """Contrat de bail"""

    location = models.ForeignKey(
        Location, on_delete=models.CASCADE, related_name="bails"
    )

    type_bail = models.CharField(
        max_length=20, choices=BailType.choices, default=BailType.VIDE
    )

    status = models.CharField(
        max_length=20,
        choices=BailStatus.choices,
        default=BailStatus.DRAFT,
        verbose_name="Statut du bail",
    )

    duree_mois = models.IntegerField(default=12)

    # Horodatages posés par les transitions
    activated_at = models.DateTimeField(null=True, blank=True)
    terminated_at = models.DateTimeField(null=True, blank=True)
    archived_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    # Historique automatique
    history = HistoricalRecords()

    class Meta:
        ordering = ["-created_at"]
        db_table = "bail_bail"
        verbose_name = "Bail"
        verbose_name_plural = "Bails"

    def __str__(self):
        return f"Bail {self.location.bien} - ({self.location.date_debut})"

    @classmethod
    def from_db(cls, db, field_names, values):
        instance = super().from_db(db, field_names, values)
        instance._status_en_base = instance.__dict__.get("status")
        return instance

    def refresh_from_db(self, *args, **kwargs):
        super().refresh_from_db(*args, **kwargs)
        self._status_en_base = self.__dict__.get("status")

    def save(self, *args, **kwargs):
        """
        Un bail est toujours créé en brouillon. Sur un bail existant, le
        statut est exclu de l'écriture et toute modification en mémoire est
        refusée.
        """
        if self._state.adding:
            if self.status != BailStatus.DRAFT:
                raise DirectStatusWriteError(
                    f"Bail créé en {self.status}: un bail commence en "
                    f"{BailStatus.DRAFT}"
                )
        else:
            status_en_base = getattr(self, "_status_en_base", None)
            if status_en_base is not None and self.status != status_en_base:
                raise DirectStatusWriteError(
                    f"Bail {self.id}: passage de {status_en_base} à {self.status} "
                    "hors transition"
                )
            if kwargs.get("update_fields") is None:
                kwargs["update_fields"] = [
                    field.name
                    for field in self._meta.concrete_fields
                    if not field.primary_key and field.name != "status"
                ]
        super().save(*args, **kwargs)
        self._status_en_base = self.status

    @property
    def is_terminal(self) -> bool:
        return self.status in BailStatus.terminaux()


class BailSignatureRequest(AbstractSignatureRequest):
    """Signataire du bail (bailleur, locataire, colocataire, garant)"""

    bail = models.ForeignKey(
        Bail, on_delete=models.CASCADE, related_name="signature_requests"
    )

    class Meta:
        # Contrainte unique partielle : seulement pour les non-annulées
        constraints = [
            models.UniqueConstraint(
                fields=["bail", "personne"],
                condition=models.Q(cancelled_at__isnull=True, personne__isnull=False),
                name="unique_bail_personne_active",
            ),
        ]
        ordering = ["order"]

    def get_document_name(self):
        return f"Contrat de bail - {self.bail.location.bien.adresse}"

    def get_document(self):
        return self.bail


class RemiseCles(BaseModel):
    """Remise des clés au locataire"""

    class Status(models.TextChoices):
        PENDING = "pending", "Planifiée"
        COMPLETED = "completed", "Effectuée"

    bail = models.ForeignKey(
        Bail, on_delete=models.CASCADE, related_name="remises_cles"
    )
    status = models.CharField(
        max_length=20, choices=Status.choices, default=Status.PENDING
    )
    nombre_cles = models.PositiveSmallIntegerField(default=1)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "bail_remise_cles"
        verbose_name = "Remise des clés"
        verbose_name_plural = "Remises des clés"
        ordering = ["-created_at"]

    def __str__(self):
        return f"Remise des clés ({self.get_status_display()}) - {self.bail_id}"

    def mark_as_completed(self):
        self.status = self.Status.COMPLETED
        self.completed_at = timezone.now()
        self.save(update_fields=["status", "completed_at", "updated_at"])


class Conge(BaseModel):
    """Congé (préavis) donné par le bailleur ou le locataire"""

    class Emetteur(models.TextChoices):
        BAILLEUR = "bailleur", "Bailleur"
        LOCATAIRE = "locataire", "Locataire"

    class Status(models.TextChoices):
        PENDING = "pending", "Notifié"
        ACKNOWLEDGED = "acknowledged", "Accusé de réception"
        WITHDRAWN = "withdrawn", "Retiré"

    ACTIVE_STATUSES = [Status.PENDING, Status.ACKNOWLEDGED]

    bail = models.ForeignKey(Bail, on_delete=models.CASCADE, related_name="conges")
    emetteur = models.CharField(max_length=20, choices=Emetteur.choices)
    status = models.CharField(
        max_length=20, choices=Status.choices, default=Status.PENDING
    )
    date_notification = models.DateField(default=timezone.localdate)
    date_effet = models.DateField(help_text="Fin du préavis")
    motif = models.TextField(blank=True)

    class Meta:
        db_table = "bail_conge"
        verbose_name = "Congé"
        verbose_name_plural = "Congés"
        ordering = ["-date_notification"]

    def __str__(self):
        return f"Congé {self.get_emetteur_display()} - effet {self.date_effet}"


class BailTransitionLog(BaseModel):
    """Journal d'audit des transitions exécutées sur un bail"""

    bail = models.ForeignKey(
        Bail, on_delete=models.CASCADE, related_name="transition_logs"
    )
    actor_id = models.CharField(max_length=64)
    transition = models.CharField(max_length=40)
    from_status = models.CharField(max_length=20, choices=BailStatus.choices)
    to_status = models.CharField(max_length=20, choices=BailStatus.choices)
    timestamp = models.DateTimeField(default=timezone.now)
    forced = models.BooleanField(default=False)
    overridden_guards = models.JSONField(default=list, blank=True)
    warnings = models.JSONField(default=list, blank=True)
    metadata = models.JSONField(default=dict, blank=True)

    class Meta:
        db_table = "bail_transition_log"
        verbose_name = "Transition de bail"
        verbose_name_plural = "Transitions de bail"
        ordering = ["-timestamp"]

    def __str__(self):
        return f"{self.transition}: {self.from_status} → {self.to_status}"
