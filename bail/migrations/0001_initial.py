import uuid

import django.db.models.deletion
import django.utils.timezone
import simple_history.models
from django.conf import settings
from django.db import migrations, models

BAIL_STATUS_CHOICES = [
    ("draft", "Brouillon"),
    ("sent", "Envoyé"),
    ("pending_signature", "En attente de signature"),
    ("fully_signed", "Signé par toutes les parties"),
    ("active", "Actif"),
    ("notice_given", "Congé donné"),
    ("terminated", "Résilié"),
    ("archived", "Archivé"),
    ("cancelled", "Annulé"),
]

BAIL_TYPE_CHOICES = [
    ("vide", "Location vide"),
    ("meuble", "Location meublée"),
    ("etudiant", "Bail étudiant"),
    ("mobilite", "Bail mobilité"),
    ("saisonnier", "Location saisonnière"),
    ("commercial", "Bail commercial"),
]


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("location", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Bail",
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
                    "type_bail",
                    models.CharField(
                        choices=BAIL_TYPE_CHOICES, default="vide", max_length=20
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=BAIL_STATUS_CHOICES,
                        default="draft",
                        max_length=20,
                        verbose_name="Statut du bail",
                    ),
                ),
                ("duree_mois", models.IntegerField(default=12)),
                ("activated_at", models.DateTimeField(blank=True, null=True)),
                ("terminated_at", models.DateTimeField(blank=True, null=True)),
                ("archived_at", models.DateTimeField(blank=True, null=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                (
                    "location",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="bails",
                        to="location.location",
                    ),
                ),
            ],
            options={
                "verbose_name": "Bail",
                "verbose_name_plural": "Bails",
                "db_table": "bail_bail",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="HistoricalBail",
            fields=[
                (
                    "id",
                    models.UUIDField(db_index=True, default=uuid.uuid4, editable=False),
                ),
                ("created_at", models.DateTimeField(blank=True, editable=False)),
                ("updated_at", models.DateTimeField(blank=True, editable=False)),
                (
                    "type_bail",
                    models.CharField(
                        choices=BAIL_TYPE_CHOICES, default="vide", max_length=20
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=BAIL_STATUS_CHOICES,
                        default="draft",
                        max_length=20,
                        verbose_name="Statut du bail",
                    ),
                ),
                ("duree_mois", models.IntegerField(default=12)),
                ("activated_at", models.DateTimeField(blank=True, null=True)),
                ("terminated_at", models.DateTimeField(blank=True, null=True)),
                ("archived_at", models.DateTimeField(blank=True, null=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                ("history_id", models.AutoField(primary_key=True, serialize=False)),
                ("history_date", models.DateTimeField(db_index=True)),
                (
                    "history_change_reason",
                    models.CharField(max_length=100, null=True),
                ),
                (
                    "history_type",
                    models.CharField(
                        choices=[("+", "Created"), ("~", "Changed"), ("-", "Deleted")],
                        max_length=1,
                    ),
                ),
                (
                    "history_user",
                    models.ForeignKey(
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "location",
                    models.ForeignKey(
                        blank=True,
                        db_constraint=False,
                        null=True,
                        on_delete=django.db.models.deletion.DO_NOTHING,
                        related_name="+",
                        to="location.location",
                    ),
                ),
            ],
            options={
                "verbose_name": "historical Bail",
                "verbose_name_plural": "historical Bails",
                "ordering": ("-history_date", "-history_id"),
                "get_latest_by": ("history_date", "history_id"),
            },
            bases=(simple_history.models.HistoricalChanges, models.Model),
        ),
        migrations.CreateModel(
            name="BailSignatureRequest",
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
                    "role",
                    models.CharField(
                        choices=[
                            ("owner", "Bailleur"),
                            ("primary_tenant", "Locataire principal"),
                            ("co_tenant", "Colocataire"),
                            ("guarantor", "Garant"),
                        ],
                        max_length=20,
                    ),
                ),
                (
                    "order",
                    models.PositiveSmallIntegerField(
                        default=1, help_text="Ordre de signature dans le processus"
                    ),
                ),
                (
                    "link_token",
                    models.UUIDField(default=uuid.uuid4, editable=False, unique=True),
                ),
                ("signed", models.BooleanField(default=False)),
                ("signed_at", models.DateTimeField(blank=True, null=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                (
                    "bail",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="signature_requests",
                        to="bail.bail",
                    ),
                ),
                (
                    "personne",
                    models.ForeignKey(
                        blank=True,
                        help_text="Personne signataire (rattachée lors de la liaison du compte)",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="%(class)s_set",
                        to="location.personne",
                    ),
                ),
            ],
            options={
                "ordering": ["order"],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(
                            ("cancelled_at__isnull", True),
                            ("personne__isnull", False),
                        ),
                        fields=("bail", "personne"),
                        name="unique_bail_personne_active",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="RemiseCles",
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
                    "status",
                    models.CharField(
                        choices=[("pending", "Planifiée"), ("completed", "Effectuée")],
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("nombre_cles", models.PositiveSmallIntegerField(default=1)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                (
                    "bail",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="remises_cles",
                        to="bail.bail",
                    ),
                ),
            ],
            options={
                "verbose_name": "Remise des clés",
                "verbose_name_plural": "Remises des clés",
                "db_table": "bail_remise_cles",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="Conge",
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
                    "emetteur",
                    models.CharField(
                        choices=[("bailleur", "Bailleur"), ("locataire", "Locataire")],
                        max_length=20,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Notifié"),
                            ("acknowledged", "Accusé de réception"),
                            ("withdrawn", "Retiré"),
                        ],
                        default="pending",
                        max_length=20,
                    ),
                ),
                (
                    "date_notification",
                    models.DateField(default=django.utils.timezone.localdate),
                ),
                ("date_effet", models.DateField(help_text="Fin du préavis")),
                ("motif", models.TextField(blank=True)),
                (
                    "bail",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="conges",
                        to="bail.bail",
                    ),
                ),
            ],
            options={
                "verbose_name": "Congé",
                "verbose_name_plural": "Congés",
                "db_table": "bail_conge",
                "ordering": ["-date_notification"],
            },
        ),
        migrations.CreateModel(
            name="BailTransitionLog",
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
                ("actor_id", models.CharField(max_length=64)),
                ("transition", models.CharField(max_length=40)),
                (
                    "from_status",
                    models.CharField(choices=BAIL_STATUS_CHOICES, max_length=20),
                ),
                (
                    "to_status",
                    models.CharField(choices=BAIL_STATUS_CHOICES, max_length=20),
                ),
                (
                    "timestamp",
                    models.DateTimeField(default=django.utils.timezone.now),
                ),
                ("forced", models.BooleanField(default=False)),
                ("overridden_guards", models.JSONField(blank=True, default=list)),
                ("warnings", models.JSONField(blank=True, default=list)),
                ("metadata", models.JSONField(blank=True, default=dict)),
                (
                    "bail",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="transition_logs",
                        to="bail.bail",
                    ),
                ),
            ],
            options={
                "verbose_name": "Transition de bail",
                "verbose_name_plural": "Transitions de bail",
                "db_table": "bail_transition_log",
                "ordering": ["-timestamp"],
            },
        ),
    ]
