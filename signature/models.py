"""
Modèles abstraits pour les signataires de documents
"""

import uuid
from abc import abstractmethod

from django.db import models
from django.utils import timezone

from location.models import BaseModel, Personne


class SignerRole(models.TextChoices):
    """Rôle d'un signataire vis-à-vis du document"""

    OWNER = "owner", "Bailleur"
    PRIMARY_TENANT = "primary_tenant", "Locataire principal"
    CO_TENANT = "co_tenant", "Colocataire"
    GUARANTOR = "guarantor", "Garant"

    @classmethod
    def tenant_roles(cls):
        return [cls.PRIMARY_TENANT, cls.CO_TENANT]


class AbstractSignatureRequest(BaseModel):
    """Modèle abstrait pour les demandes de signature"""

    role = models.CharField(max_length=20, choices=SignerRole.choices)

    # Lien vers la personne (null tant que le compte n'est pas rattaché)
    personne = models.ForeignKey(
        Personne,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="%(class)s_set",
        help_text="Personne signataire (rattachée lors de la liaison du compte)",
    )

    # Ordre de signature
    order = models.PositiveSmallIntegerField(
        default=1, help_text="Ordre de signature dans le processus"
    )

    # Lien unique pour accéder à la signature
    link_token = models.UUIDField(default=uuid.uuid4, unique=True, editable=False)

    # État de la signature
    signed = models.BooleanField(default=False)
    signed_at = models.DateTimeField(null=True, blank=True)

    # Annulation (soft delete, ignorée par les guards)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        abstract = True
        ordering = ["order"]

    def __str__(self):
        return f"Signature de {self.get_signataire_name()} pour {self.get_document_name()}"

    def get_signataire_name(self):
        return self.personne.full_name if self.personne else "Inconnu"

    def mark_as_signed(self):
        """Marque la demande comme signée"""
        self.signed = True
        self.signed_at = timezone.now()
        self.save(update_fields=["signed", "signed_at", "updated_at"])

    @abstractmethod
    def get_document_name(self):
        """Retourne le nom du document à signer"""

    @abstractmethod
    def get_document(self):
        """Retourne l'objet document associé"""
