from django.contrib import admin

from .models import EtatLieux


@admin.register(EtatLieux)
class EtatLieuxAdmin(admin.ModelAdmin):
    """Interface d'administration des états des lieux"""

    list_display = (
        "get_adresse",
        "type_etat_lieux",
        "status",
        "date_etat_lieux",
        "signed_at",
    )
    list_filter = ("type_etat_lieux", "status", "date_etat_lieux")
    search_fields = ("location__bien__adresse",)
    readonly_fields = ("signed_at", "created_at", "updated_at")

    def get_adresse(self, obj):
        return obj.location.bien.adresse

    get_adresse.short_description = "Adresse"
