"""
Modèles pour la gestion des locations
Location est l'entité pivot entre un bien, ses bailleurs et ses locataires
"""

import uuid

from django.contrib.auth import get_user_model
from django.db import models

User = get_user_model()


class BaseModel(models.Model):
    """
    Modèle de base pour tous les modèles du projet.

    Fournit :
    - UUID comme clé primaire (compatibilité frontend, sécurité, distribution)
    - Timestamps automatiques (created_at, updated_at) pour l'audit
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Personne(BaseModel):
    """Personne physique (bailleur, locataire, garant, mandataire)"""

    # Lien vers le compte utilisateur (créé automatiquement via email)
    user = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="personnes",
        help_text="Compte utilisateur associé (créé automatiquement via email)",
    )

    lastName = models.CharField(max_length=100, db_column="nom")
    firstName = models.CharField(max_length=100, db_column="prenom")
    email = models.EmailField()

    class Meta:
        verbose_name = "Personne"
        verbose_name_plural = "Personnes"

    def __str__(self):
        return self.full_name

    @property
    def full_name(self):
        return f"{self.firstName} {self.lastName}"

    def save(self, *args, **kwargs):
        """
        Associe automatiquement un User lors de la sauvegarde.
        Si un User existe avec cet email, il est réutilisé.
        Sinon, un nouveau User est créé.
        """
        if self.email and not self.user:
            user, _ = User.objects.get_or_create(
                email=self.email,
                defaults={
                    "username": self.email,
                    "first_name": self.firstName,
                    "last_name": self.lastName,
                },
            )
            self.user = user

        super().save(*args, **kwargs)


class Bien(BaseModel):
    """Bien immobilier loué"""

    bailleurs = models.ManyToManyField(
        Personne,
        related_name="biens",
        help_text="Un ou plusieurs bailleurs pour ce bien",
    )

    adresse = models.CharField(max_length=255)
    superficie = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        help_text="En m²",
        null=True,
        blank=True,
        default=None,
    )
    meuble = models.BooleanField(
        null=True, blank=True, default=None, verbose_name="Meublé"
    )

    class Meta:
        verbose_name = "Bien"
        verbose_name_plural = "Biens"

    def __str__(self):
        return self.adresse


class Location(BaseModel):
    """Location = relation entre un bien et des locataires"""

    bien = models.ForeignKey(Bien, on_delete=models.PROTECT, related_name="locations")
    mandataire = models.ForeignKey(
        Personne,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        default=None,
        related_name="mandats",
        help_text="Personne qui gère la location pour le compte du bailleur",
    )
    locataires = models.ManyToManyField(Personne, related_name="locations")

    # Dates
    date_debut = models.DateField(null=True, blank=True, default=None)
    date_fin = models.DateField(null=True, blank=True, default=None)

    def __str__(self):
        return f"Location {self.bien} - {self.date_debut or 'Sans date'}"

    class Meta:
        db_table = "location_location"
        verbose_name = "Location"
        verbose_name_plural = "Locations"
        ordering = ["-created_at"]
