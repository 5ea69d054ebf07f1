import uuid

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("location", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="EtatLieux",
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
                    "type_etat_lieux",
                    models.CharField(
                        choices=[
                            ("entree", "État des lieux d'entrée"),
                            ("sortie", "État des lieux de sortie"),
                        ],
                        max_length=10,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("draft", "Brouillon"),
                            ("signing", "En cours de signature"),
                            ("signed", "Signé et finalisé"),
                            ("cancelled", "Annulé"),
                        ],
                        default="draft",
                        max_length=20,
                    ),
                ),
                (
                    "date_etat_lieux",
                    models.DateField(default=django.utils.timezone.localdate),
                ),
                ("signed_at", models.DateTimeField(blank=True, null=True)),
                ("nombre_cles", models.JSONField(blank=True, default=dict)),
                (
                    "location",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="etats_lieux",
                        to="location.location",
                    ),
                ),
            ],
            options={
                "verbose_name": "État des lieux",
                "verbose_name_plural": "États des lieux",
                "db_table": "etat_lieux_etatlieux",
                "ordering": ["-created_at"],
                "unique_together": {("location", "type_etat_lieux")},
            },
        ),
    ]
