"""
Commande pour traiter les événements en attente de l'outbox.

Usage:
    python manage.py process_outbox                 # Traite un lot (OUTBOX_BATCH_SIZE)
    python manage.py process_outbox --batch-size 10
    python manage.py process_outbox --until-empty   # Enchaîne les lots jusqu'à épuisement
"""

from django.core.management.base import BaseCommand

from notifications.services import process_outbox


class Command(BaseCommand):
    help = "Traite les événements de domaine en attente dans l'outbox"

    def add_arguments(self, parser):
        parser.add_argument(
            "--batch-size",
            type=int,
            default=None,
            help="Nombre maximum d'événements par lot (défaut: OUTBOX_BATCH_SIZE)",
        )
        parser.add_argument(
            "--until-empty",
            action="store_true",
            help="Enchaîne les lots tant que des événements sont traités",
        )

    def handle(self, *args, **options):
        totals = {"processed": 0, "failed": 0, "skipped": 0}

        while True:
            stats = process_outbox(batch_size=options["batch_size"])
            for key, value in stats.items():
                totals[key] += value
            if not options["until_empty"] or not any(stats.values()):
                break

        message = (
            f"{totals['processed']} traité(s), {totals['failed']} en échec, "
            f"{totals['skipped']} ignoré(s)"
        )
        if totals["failed"]:
            self.stdout.write(self.style.WARNING(f"⚠️ Outbox: {message}"))
        else:
            self.stdout.write(self.style.SUCCESS(f"✅ Outbox: {message}"))
