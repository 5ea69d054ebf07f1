from django.db import models

from location.models import BaseModel, Personne


def couverture_valide(is_active: bool, end_date, day) -> bool:
    """Police active et non expirée au jour donné"""
    return is_active and (end_date is None or end_date >= day)


class InsurancePolicy(BaseModel):
    """
    Police d'assurance habitation du locataire, rattachée au bail.

    Hérite de BaseModel: id (UUID), created_at, updated_at
    """

    class Status(models.TextChoices):
        PENDING = "PENDING", "En attente de paiement"
        ACTIVE = "ACTIVE", "Active"
        SUSPENDED = "SUSPENDED", "Suspendue (impayé)"
        CANCELLED = "CANCELLED", "Résiliée"
        EXPIRED = "EXPIRED", "Expirée"

    policy_number = models.CharField(max_length=25, blank=True, default="")

    bail = models.ForeignKey(
        "bail.Bail",
        on_delete=models.CASCADE,
        related_name="insurance_policies",
    )
    subscriber = models.ForeignKey(
        Personne,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="insurance_policies",
        help_text="Souscripteur (locataire)",
    )

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
    )
    start_date = models.DateField()
    end_date = models.DateField(
        null=True,
        blank=True,
        default=None,
        help_text="Date de fin (null = en cours)",
    )

    class Meta:
        verbose_name = "Police assurance"
        verbose_name_plural = "Polices assurances"
        ordering = ["-created_at"]
        indexes = [
            models.Index(
                fields=["bail", "status"], name="assurances__bail_id_5c2f1e_idx"
            ),
        ]

    def __str__(self) -> str:
        return f"{self.policy_number or self.id} ({self.status})"

    @property
    def is_active(self) -> bool:
        return self.status == self.Status.ACTIVE

    def is_valid_on(self, day) -> bool:
        return couverture_valide(self.is_active, self.end_date, day)
