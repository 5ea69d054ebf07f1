import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("bail", "0001_initial"),
        ("location", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="InsurancePolicy",
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
                    "policy_number",
                    models.CharField(blank=True, default="", max_length=25),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("PENDING", "En attente de paiement"),
                            ("ACTIVE", "Active"),
                            ("SUSPENDED", "Suspendue (impayé)"),
                            ("CANCELLED", "Résiliée"),
                            ("EXPIRED", "Expirée"),
                        ],
                        default="PENDING",
                        max_length=20,
                    ),
                ),
                ("start_date", models.DateField()),
                (
                    "end_date",
                    models.DateField(
                        blank=True,
                        default=None,
                        help_text="Date de fin (null = en cours)",
                        null=True,
                    ),
                ),
                (
                    "bail",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="insurance_policies",
                        to="bail.bail",
                    ),
                ),
                (
                    "subscriber",
                    models.ForeignKey(
                        blank=True,
                        help_text="Souscripteur (locataire)",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="insurance_policies",
                        to="location.personne",
                    ),
                ),
            ],
            options={
                "verbose_name": "Police assurance",
                "verbose_name_plural": "Polices assurances",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["bail", "status"],
                        name="assurances__bail_id_5c2f1e_idx",
                    )
                ],
            },
        ),
    ]
