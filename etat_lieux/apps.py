from django.apps import AppConfig


class EtatLieuxConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "etat_lieux"
    verbose_name = "États des lieux"
