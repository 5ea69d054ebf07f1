from django.apps import AppConfig


class SignatureConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "signature"
    verbose_name = "Signatures"
