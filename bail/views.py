import logging

from django.http import JsonResponse
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from bail.models import Bail
from bail.serializers import ExecuteTransitionSerializer
from bail.services import (
    ContextBuilder,
    DjangoBailStore,
    TransitionErrorCode,
    create_lease_state_machine,
    get_available_transitions,
)
from location.constants import UserRole
from location.services.access_utils import get_user_info_for_location

logger = logging.getLogger(__name__)

HTTP_STATUS_BY_ERROR = {
    TransitionErrorCode.NOT_FOUND: 404,
    TransitionErrorCode.INVALID_TRANSITION: 400,
    TransitionErrorCode.GUARD_FAILED: 409,
    TransitionErrorCode.CONCURRENT_MODIFICATION: 409,
}


def _get_bail_and_user_info(bail_id, user):
    bail = (
        Bail.objects.select_related("location__bien", "location__mandataire")
        .filter(id=bail_id)
        .first()
    )
    if bail is None:
        return None, None
    return bail, get_user_info_for_location(bail.location, user.email)


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def get_bail_transitions(request, bail_id):
    """
    Liste les transitions déclarées depuis le statut courant du bail,
    avec pour chacune sa légalité et le détail des guards en échec.

    GET /api/bail/<bail_id>/transitions/
    """
    try:
        bail, user_info = _get_bail_and_user_info(bail_id, request.user)
        if bail is None:
            return JsonResponse(
                {"success": False, "error": "Bail non trouvé"}, status=404
            )

        if not (user_info.has_access or request.user.is_staff):
            return JsonResponse(
                {"success": False, "error": "Accès non autorisé à ce bail"},
                status=403,
            )

        context = ContextBuilder(DjangoBailStore()).build(bail.id)
        if context is None:
            return JsonResponse(
                {"success": False, "error": "Bail non trouvé"}, status=404
            )

        transitions = get_available_transitions(context)

        return JsonResponse(
            {
                "success": True,
                "bail_id": str(bail.id),
                "status": context.current_status,
                "context": context.to_dict(),
                "transitions": [t.to_dict() for t in transitions],
            }
        )

    except Exception as e:
        logger.exception(f"Erreur lors du calcul des transitions du bail {bail_id}")
        return JsonResponse({"success": False, "error": str(e)}, status=500)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
def execute_bail_transition(request, bail_id):
    """
    Exécute une transition sur le bail au nom de l'utilisateur connecté.

    POST /api/bail/<bail_id>/transitions/execute/
    {
        "transition": "ACTIVATE",
        "force": false,
        "metadata": {"source": "dashboard"}
    }
    """
    serializer = ExecuteTransitionSerializer(data=request.data)
    if not serializer.is_valid():
        return JsonResponse(
            {"success": False, "errors": serializer.errors}, status=400
        )
    data = serializer.validated_data

    try:
        bail, user_info = _get_bail_and_user_info(bail_id, request.user)
        if bail is None:
            return JsonResponse(
                {
                    "success": False,
                    "error_code": str(TransitionErrorCode.NOT_FOUND),
                    "error": "Bail non trouvé",
                },
                status=404,
            )

        user = request.user
        if not (user_info.has_access or user.is_staff):
            return JsonResponse(
                {"success": False, "error": "Accès non autorisé à ce bail"},
                status=403,
            )

        if data["force"] and not (
            user.is_staff
            or any(role in UserRole.gestionnaires() for role in user_info.roles)
        ):
            return JsonResponse(
                {
                    "success": False,
                    "error": "Seuls le bailleur ou son mandataire peuvent forcer une transition",
                },
                status=403,
            )

        result = create_lease_state_machine().execute(
            bail.id,
            data["transition"],
            actor_id=user.pk,
            force=data["force"],
            metadata=data.get("metadata") or {},
        )

        status = 200 if result.success else HTTP_STATUS_BY_ERROR[result.error_code]
        return JsonResponse(result.to_dict(), status=status)

    except Exception as e:
        logger.exception(
            f"Erreur lors de l'exécution de {data['transition']} sur le bail {bail_id}"
        )
        return JsonResponse({"success": False, "error": str(e)}, status=500)
