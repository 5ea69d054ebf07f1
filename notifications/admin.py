from django.contrib import admin
from django.utils import timezone

from .models import OutboxEvent


@admin.register(OutboxEvent)
class OutboxEventAdmin(admin.ModelAdmin):
    list_display = [
        "event_type",
        "aggregate_id",
        "status",
        "retry_count",
        "scheduled_at",
        "processed_at",
    ]

    list_filter = ["status", "event_type", "scheduled_at"]

    search_fields = ["event_type", "aggregate_id"]

    readonly_fields = [
        "event_type",
        "aggregate_type",
        "aggregate_id",
        "payload",
        "created_at",
        "processed_at",
        "error_message",
    ]

    list_per_page = 50

    actions = ["requeue"]

    def requeue(self, request, queryset):
        updated = queryset.filter(status=OutboxEvent.Status.FAILED).update(
            status=OutboxEvent.Status.PENDING,
            retry_count=0,
            scheduled_at=timezone.now(),
            error_message="",
        )
        self.message_user(request, f"{updated} événement(s) remis en file.")

    requeue.short_description = "Remettre en file les événements en échec"

    fieldsets = (
        (
            "Événement",
            {"fields": ("event_type", "aggregate_type", "aggregate_id", "payload")},
        ),
        (
            "Traitement",
            {
                "fields": (
                    "status",
                    "retry_count",
                    "max_retries",
                    "scheduled_at",
                    "processed_at",
                    "error_message",
                ),
            },
        ),
    )
