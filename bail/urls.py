from django.urls import path

from bail.views import execute_bail_transition, get_bail_transitions

urlpatterns = [
    path(
        "<uuid:bail_id>/transitions/",
        get_bail_transitions,
        name="get_bail_transitions",
    ),
    path(
        "<uuid:bail_id>/transitions/execute/",
        execute_bail_transition,
        name="execute_bail_transition",
    ),
]
