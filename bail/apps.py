from django.apps import AppConfig


class BailConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "bail"
    verbose_name = "Baux"
