"""
Tests des endpoints de transitions du bail.

    GET  /api/bail/<bail_id>/transitions/
    POST /api/bail/<bail_id>/transitions/execute/
"""

import uuid

import pytest
from django.urls import reverse
from rest_framework.test import APIClient

from bail.factories import add_signataires
from bail.models import Bail, BailStatus
from location.factories import PersonneFactory

pytestmark = [pytest.mark.django_db, pytest.mark.e2e]


def transitions_url(bail_id):
    return reverse("get_bail_transitions", kwargs={"bail_id": bail_id})


def execute_url(bail_id):
    return reverse("execute_bail_transition", kwargs={"bail_id": bail_id})


class TestGetTransitions:
    def test_requires_authentication(self, api_client, bail):
        response = api_client.get(transitions_url(bail.id))
        assert response.status_code == 401

    def test_lists_transitions_for_bailleur(self, bailleur_client, bail):
        response = bailleur_client.get(transitions_url(bail.id))

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "draft"
        assert data["context"]["signers_count"] == 0
        transitions = {t["name"]: t for t in data["transitions"]}
        assert set(transitions) == {"INITIATE_SIGNATURE", "CANCEL"}
        assert not transitions["INITIATE_SIGNATURE"]["is_legal"]
        assert not transitions["INITIATE_SIGNATURE"]["can_be_forced"]
        assert transitions["CANCEL"]["is_legal"]

    def test_locataire_has_access(self, locataire_client, bail):
        assert locataire_client.get(transitions_url(bail.id)).status_code == 200

    def test_forbidden_without_role(self, etranger_client, bail):
        assert etranger_client.get(transitions_url(bail.id)).status_code == 403

    def test_unknown_bail(self, etranger_client):
        assert etranger_client.get(transitions_url(uuid.uuid4())).status_code == 404


class TestExecuteTransition:
    def test_success(self, bailleur_client, bail):
        add_signataires(bail)

        response = bailleur_client.post(
            execute_url(bail.id),
            {"transition": "initiate_signature"},
            format="json",
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["new_status"] == "pending_signature"
        assert Bail.objects.get(id=bail.id).status == BailStatus.PENDING_SIGNATURE

    def test_actor_is_connected_user(self, bailleur_client, bail):
        bailleur_client.post(
            execute_url(bail.id), {"transition": "CANCEL"}, format="json"
        )

        log = bail.transition_logs.get()
        assert log.actor_id == str(bail.location.bien.bailleurs.first().user.pk)

    def test_guard_failure_is_conflict(self, bailleur_client, bail):
        response = bailleur_client.post(
            execute_url(bail.id), {"transition": "INITIATE_SIGNATURE"}, format="json"
        )

        assert response.status_code == 409
        data = response.json()
        assert data["error_code"] == "guard_failed"
        assert {e["code"] for e in data["errors"]} == {
            "owner_signer_missing",
            "tenant_signer_missing",
            "not_enough_signers",
        }

    def test_invalid_transition_is_bad_request(self, bailleur_client, bail):
        response = bailleur_client.post(
            execute_url(bail.id), {"transition": "ARCHIVE"}, format="json"
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "invalid_transition"

    def test_missing_transition_name(self, bailleur_client, bail):
        response = bailleur_client.post(execute_url(bail.id), {}, format="json")
        assert response.status_code == 400

    def test_unknown_bail(self, bailleur_client):
        response = bailleur_client.post(
            execute_url(uuid.uuid4()), {"transition": "CANCEL"}, format="json"
        )
        assert response.status_code == 404

    def test_forbidden_without_role(self, etranger_client, bail):
        response = etranger_client.post(
            execute_url(bail.id), {"transition": "CANCEL"}, format="json"
        )

        assert response.status_code == 403
        assert Bail.objects.get(id=bail.id).status == BailStatus.DRAFT

    def test_locataire_cannot_force(self, locataire_client, bail):
        response = locataire_client.post(
            execute_url(bail.id),
            {"transition": "CANCEL", "force": True},
            format="json",
        )
        assert response.status_code == 403

    def test_mandataire_can_force(self, bail_pret_a_activer):
        bail = bail_pret_a_activer
        mandataire = PersonneFactory()
        bail.location.mandataire = mandataire
        bail.location.save()
        bail.remises_cles.all().delete()

        client = APIClient()
        client.force_authenticate(user=mandataire.user)
        response = client.post(
            execute_url(bail.id),
            {"transition": "ACTIVATE", "force": True},
            format="json",
        )

        assert response.status_code == 200
        assert response.json()["overridden_guards"] == ["keys_not_handed_over"]
