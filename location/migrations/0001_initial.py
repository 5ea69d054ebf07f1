import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Personne",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("lastName", models.CharField(db_column="nom", max_length=100)),
                ("firstName", models.CharField(db_column="prenom", max_length=100)),
                ("email", models.EmailField(max_length=254)),
                (
                    "user",
                    models.ForeignKey(
                        blank=True,
                        help_text="Compte utilisateur associé (créé automatiquement via email)",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="personnes",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Personne",
                "verbose_name_plural": "Personnes",
            },
        ),
        migrations.CreateModel(
            name="Bien",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("adresse", models.CharField(max_length=255)),
                (
                    "superficie",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        default=None,
                        help_text="En m²",
                        max_digits=8,
                        null=True,
                    ),
                ),
                (
                    "meuble",
                    models.BooleanField(
                        blank=True, default=None, null=True, verbose_name="Meublé"
                    ),
                ),
                (
                    "bailleurs",
                    models.ManyToManyField(
                        help_text="Un ou plusieurs bailleurs pour ce bien",
                        related_name="biens",
                        to="location.personne",
                    ),
                ),
            ],
            options={
                "verbose_name": "Bien",
                "verbose_name_plural": "Biens",
            },
        ),
        migrations.CreateModel(
            name="Location",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "date_debut",
                    models.DateField(blank=True, default=None, null=True),
                ),
                ("date_fin", models.DateField(blank=True, default=None, null=True)),
                (
                    "bien",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="locations",
                        to="location.bien",
                    ),
                ),
                (
                    "mandataire",
                    models.ForeignKey(
                        blank=True,
                        default=None,
                        help_text="Personne qui gère la location pour le compte du bailleur",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="mandats",
                        to="location.personne",
                    ),
                ),
                (
                    "locataires",
                    models.ManyToManyField(
                        related_name="locations", to="location.personne"
                    ),
                ),
            ],
            options={
                "verbose_name": "Location",
                "verbose_name_plural": "Locations",
                "db_table": "location_location",
                "ordering": ["-created_at"],
            },
        ),
    ]
