from django.apps import AppConfig


class AssurancesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "assurances"
    verbose_name = "Assurances"
