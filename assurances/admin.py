from django.contrib import admin
from django.utils import timezone

from .models import InsurancePolicy


@admin.register(InsurancePolicy)
class InsurancePolicyAdmin(admin.ModelAdmin):
    list_display = (
        "policy_number",
        "bail",
        "status",
        "start_date",
        "end_date",
        "valide_aujourdhui",
    )
    list_filter = ("status",)
    search_fields = ("policy_number", "subscriber__email")
    readonly_fields = ("created_at", "updated_at")

    @admin.display(boolean=True, description="Valide aujourd'hui")
    def valide_aujourdhui(self, obj):
        return obj.is_valid_on(timezone.localdate())
