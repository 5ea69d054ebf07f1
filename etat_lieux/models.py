"""
Modèle EtatLieux (état des lieux d'entrée et de sortie)
"""

from django.db import models
from django.utils import timezone

from location.models import BaseModel, Location


class EtatLieuxType(models.TextChoices):
    """Types d'état des lieux"""

    ENTREE = "entree", "État des lieux d'entrée"
    SORTIE = "sortie", "État des lieux de sortie"


class EtatLieuxStatus(models.TextChoices):
    """Statuts de l'état des lieux"""

    DRAFT = "draft", "Brouillon"
    SIGNING = "signing", "En cours de signature"
    SIGNED = "signed", "Signé et finalisé"
    CANCELLED = "cancelled", "Annulé"


class EtatLieux(BaseModel):
    """État des lieux"""

    location = models.ForeignKey(
        Location, on_delete=models.CASCADE, related_name="etats_lieux"
    )

    type_etat_lieux = models.CharField(max_length=10, choices=EtatLieuxType.choices)

    status = models.CharField(
        max_length=20, choices=EtatLieuxStatus.choices, default=EtatLieuxStatus.DRAFT
    )

    date_etat_lieux = models.DateField(default=timezone.localdate)
    signed_at = models.DateTimeField(null=True, blank=True)

    # Inventaire des clés remises, ex: {"porte_entree": 2, "boite_lettres": 1}
    nombre_cles = models.JSONField(default=dict, blank=True)

    class Meta:
        verbose_name = "État des lieux"
        verbose_name_plural = "États des lieux"
        ordering = ["-created_at"]
        db_table = "etat_lieux_etatlieux"
        # Un seul état des lieux par type (entrée/sortie) et par location
        unique_together = [["location", "type_etat_lieux"]]

    def __str__(self):
        type_display = self.get_type_etat_lieux_display()
        return f"État des lieux {type_display} - {self.location.bien.adresse}"

    @property
    def est_signe(self) -> bool:
        return self.status == EtatLieuxStatus.SIGNED

    def mark_as_signed(self):
        """Finalise l'état des lieux une fois toutes les parties signataires"""
        self.status = EtatLieuxStatus.SIGNED
        self.signed_at = timezone.now()
        self.save(update_fields=["status", "signed_at", "updated_at"])
