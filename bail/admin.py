from django.contrib import admin
from django.urls import reverse
from django.utils.html import format_html
from simple_history.admin import SimpleHistoryAdmin

from .models import (
    Bail,
    BailSignatureRequest,
    BailTransitionLog,
    Conge,
    RemiseCles,
)


class BailSignatureRequestInline(admin.TabularInline):
    """Inline pour les signataires d'un bail"""

    model = BailSignatureRequest
    extra = 0
    fields = ("order", "role", "personne", "signed", "signed_at", "cancelled_at")
    readonly_fields = ("link_token", "signed_at")


class RemiseClesInline(admin.TabularInline):
    model = RemiseCles
    extra = 0
    fields = ("status", "nombre_cles", "completed_at")
    readonly_fields = ("completed_at",)


class CongeInline(admin.TabularInline):
    model = Conge
    extra = 0
    fields = ("emetteur", "status", "date_notification", "date_effet")


class BailTransitionLogInline(admin.TabularInline):
    """Historique des transitions (lecture seule)"""

    model = BailTransitionLog
    extra = 0
    can_delete = False
    fields = (
        "timestamp",
        "transition",
        "from_status",
        "to_status",
        "actor_id",
        "forced",
        "overridden_guards",
    )
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Bail)
class BailAdmin(SimpleHistoryAdmin):
    """
    Interface d'administration des baux.

    Le statut est en lecture seule : il ne change que via les transitions
    (API /api/bail/<id>/transitions/execute/).
    """

    list_display = (
        "get_adresse",
        "type_bail",
        "status_display",
        "get_date_debut",
        "activated_at",
        "created_at",
    )
    list_filter = ("status", "type_bail", "created_at")
    search_fields = (
        "location__bien__adresse",
        "location__locataires__lastName",
        "location__locataires__email",
    )
    date_hierarchy = "created_at"
    inlines = [
        BailSignatureRequestInline,
        RemiseClesInline,
        CongeInline,
        BailTransitionLogInline,
    ]
    readonly_fields = (
        "status",
        "activated_at",
        "terminated_at",
        "archived_at",
        "cancelled_at",
        "created_at",
        "updated_at",
    )

    fieldsets = (
        ("Location", {"fields": ("location", "type_bail", "duree_mois")}),
        (
            "Cycle de vie",
            {
                "fields": (
                    "status",
                    "activated_at",
                    "terminated_at",
                    "archived_at",
                    "cancelled_at",
                )
            },
        ),
        (
            "Métadonnées",
            {
                "fields": ("created_at", "updated_at"),
                "classes": ("collapse",),
            },
        ),
    )

    def get_readonly_fields(self, request, obj=None):
        # Bail archivé ou annulé : plus aucune modification
        if obj is not None and obj.is_terminal:
            return ("location", "type_bail", "duree_mois") + self.readonly_fields
        return self.readonly_fields

    def get_adresse(self, obj):
        return obj.location.bien.adresse

    get_adresse.short_description = "Adresse"

    def get_date_debut(self, obj):
        return obj.location.date_debut

    get_date_debut.short_description = "Début"

    def status_display(self, obj):
        colors = {
            "draft": "#6c757d",
            "pending_signature": "#fd7e14",
            "fully_signed": "#0d6efd",
            "active": "#198754",
            "notice_given": "#ffc107",
            "terminated": "#dc3545",
        }
        return format_html(
            '<span style="color: {};">{}</span>',
            colors.get(obj.status, "#000"),
            obj.get_status_display(),
        )

    status_display.short_description = "Statut"


@admin.register(BailTransitionLog)
class BailTransitionLogAdmin(admin.ModelAdmin):
    """Journal d'audit des transitions (lecture seule)"""

    list_display = (
        "timestamp",
        "get_bail_link",
        "transition",
        "from_status",
        "to_status",
        "actor_id",
        "forced",
    )
    list_filter = ("transition", "forced", "timestamp")
    search_fields = ("bail__id", "actor_id", "bail__location__bien__adresse")
    date_hierarchy = "timestamp"

    def get_bail_link(self, obj):
        url = reverse("admin:bail_bail_change", args=[obj.bail_id])
        return format_html('<a href="{}">{}</a>', url, obj.bail_id)

    get_bail_link.short_description = "Bail"

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
