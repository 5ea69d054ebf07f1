"""
Tests d'intégration du cycle de vie du bail sur l'ORM Django.

Usage:
    pytest tests/test_bail_lifecycle.py -v
"""

from datetime import date, timedelta

import pytest
from django.utils import timezone

from bail.factories import (
    BailFactory,
    BailSignatureRequestFactory,
    CongeFactory,
    EtatLieuxFactory,
    InsurancePolicyFactory,
    RemiseClesFactory,
    add_signataires,
    create_bail_pret_a_activer,
)
from bail.models import (
    Bail,
    BailStatus,
    BailTransitionLog,
    DirectStatusWriteError,
    RemiseCles,
)
from bail.services import (
    ContextBuilder,
    DjangoBailStore,
    TransitionErrorCode,
    TransitionName,
    create_lease_state_machine,
    get_available_transitions,
)
from etat_lieux.models import EtatLieuxStatus, EtatLieuxType
from notifications.models import OutboxEvent
from signature.models import SignerRole

pytestmark = [pytest.mark.django_db, pytest.mark.integration]


def execute(bail, transition, **kwargs):
    kwargs.setdefault("actor_id", "user-1")
    return create_lease_state_machine().execute(bail.id, transition, **kwargs)


def status_of(bail):
    return Bail.objects.values_list("status", flat=True).get(id=bail.id)


class TestScenarios:
    """Parcours complet du bail, du brouillon à l'archivage"""

    def test_initiate_signature_requires_tenant_signer(self, bail):
        BailSignatureRequestFactory(
            bail=bail,
            role=SignerRole.OWNER,
            personne=bail.location.bien.bailleurs.first(),
        )

        result = execute(bail, TransitionName.INITIATE_SIGNATURE)

        assert result.error_code == TransitionErrorCode.GUARD_FAILED
        assert "tenant_signer_missing" in [e.code for e in result.errors]
        assert status_of(bail) == BailStatus.DRAFT

    def test_initiate_signature_with_owner_and_tenant(self, bail):
        add_signataires(bail)

        result = execute(bail, TransitionName.INITIATE_SIGNATURE)

        assert result.success
        assert status_of(bail) == BailStatus.PENDING_SIGNATURE

    def test_mark_fully_signed_waits_for_every_signer(self, bail):
        owner, tenant = add_signataires(bail)
        execute(bail, TransitionName.INITIATE_SIGNATURE)
        owner.mark_as_signed()

        result = execute(bail, TransitionName.MARK_FULLY_SIGNED)

        assert result.error_code == TransitionErrorCode.GUARD_FAILED
        assert [e.code for e in result.errors] == ["signatures_incomplete"]
        assert status_of(bail) == BailStatus.PENDING_SIGNATURE

        tenant.mark_as_signed()
        result = execute(bail, TransitionName.MARK_FULLY_SIGNED)

        assert result.success
        assert status_of(bail) == BailStatus.FULLY_SIGNED

    def test_mark_fully_signed_refused_when_tenant_signer_cancelled(self, bail):
        owner, tenant = add_signataires(bail)
        execute(bail, TransitionName.INITIATE_SIGNATURE)
        tenant.cancelled_at = timezone.now()
        tenant.save()
        owner.mark_as_signed()

        result = execute(bail, TransitionName.MARK_FULLY_SIGNED, force=True)

        assert result.error_code == TransitionErrorCode.GUARD_FAILED
        assert [e.code for e in result.errors] == ["tenant_signer_missing"]
        assert status_of(bail) == BailStatus.PENDING_SIGNATURE

    def test_cancelled_signer_is_ignored(self, bail):
        owner, tenant = add_signataires(bail)
        BailSignatureRequestFactory(
            bail=bail, role=SignerRole.GUARANTOR, cancelled_at=timezone.now()
        )
        execute(bail, TransitionName.INITIATE_SIGNATURE)
        owner.mark_as_signed()
        tenant.mark_as_signed()

        assert execute(bail, TransitionName.MARK_FULLY_SIGNED).success

    def test_activate_after_edl_entree_signed(self):
        bail = BailFactory(status=BailStatus.FULLY_SIGNED)
        add_signataires(bail, signed=True)
        RemiseClesFactory(bail=bail)
        InsurancePolicyFactory(bail=bail)
        edl = EtatLieuxFactory(location=bail.location, status=EtatLieuxStatus.SIGNING)

        result = execute(bail, TransitionName.ACTIVATE)

        assert result.error_code == TransitionErrorCode.GUARD_FAILED
        assert [e.code for e in result.errors] == ["edl_entree_not_signed"]

        edl.mark_as_signed()
        result = execute(bail, TransitionName.ACTIVATE)

        assert result.success
        bail.refresh_from_db()
        assert bail.status == BailStatus.ACTIVE
        assert bail.activated_at is not None

    def test_notice_terminate_archive(self, bail_actif):
        bail = bail_actif
        CongeFactory(bail=bail, date_effet=date.today() - timedelta(days=1))

        assert execute(bail, TransitionName.GIVE_NOTICE).success
        assert status_of(bail) == BailStatus.NOTICE_GIVEN

        assert execute(bail, TransitionName.TERMINATE).success
        assert status_of(bail) == BailStatus.TERMINATED

        assert execute(bail, TransitionName.ARCHIVE).success
        assert status_of(bail) == BailStatus.ARCHIVED

        for name in TransitionName:
            result = execute(bail, name, force=True)
            assert result.error_code == TransitionErrorCode.INVALID_TRANSITION
        assert status_of(bail) == BailStatus.ARCHIVED

        bail.refresh_from_db()
        assert bail.terminated_at is not None
        assert bail.archived_at is not None
        assert bail.transition_logs.count() == 3


class TestActivationGuards:
    def test_all_conditions_met(self, bail_pret_a_activer):
        assert execute(bail_pret_a_activer, TransitionName.ACTIVATE).success

    def test_key_handover_unblocks_activation(self):
        bail = create_bail_pret_a_activer()
        remise = bail.remises_cles.get()
        remise.status = RemiseCles.Status.PENDING
        remise.save()

        result = execute(bail, TransitionName.ACTIVATE)
        assert [e.code for e in result.errors] == ["keys_not_handed_over"]

        remise.mark_as_completed()
        assert execute(bail, TransitionName.ACTIVATE).success

    def test_expired_insurance_blocks_unless_forced(self):
        bail = BailFactory(status=BailStatus.FULLY_SIGNED)
        add_signataires(bail, signed=True)
        EtatLieuxFactory(location=bail.location, signe=True)
        RemiseClesFactory(bail=bail)
        InsurancePolicyFactory(bail=bail, end_date=date.today() - timedelta(days=1))

        result = execute(bail, TransitionName.ACTIVATE)
        assert [e.code for e in result.errors] == ["insurance_not_valid"]

        result = execute(bail, TransitionName.ACTIVATE, force=True)
        assert result.success
        assert result.overridden_guards == ["insurance_not_valid"]

        log = BailTransitionLog.objects.get(bail=bail)
        assert log.forced
        assert log.overridden_guards == ["insurance_not_valid"]

    def test_insurance_record_follows_policy_validity(self):
        bail = BailFactory()
        policy = InsurancePolicyFactory(bail=bail, end_date=date.today())
        record = DjangoBailStore().get_insurance_policy(bail.id)
        demain = date.today() + timedelta(days=1)

        assert record.is_valid_on(date.today()) is policy.is_valid_on(date.today())
        assert record.is_valid_on(date.today())
        assert record.is_valid_on(demain) is policy.is_valid_on(demain)
        assert not record.is_valid_on(demain)

    def test_start_date_in_future_cannot_be_forced(self):
        bail = create_bail_pret_a_activer(
            location__date_debut=date.today() + timedelta(days=15)
        )

        result = execute(bail, TransitionName.ACTIVATE, force=True)

        assert result.error_code == TransitionErrorCode.GUARD_FAILED
        assert status_of(bail) == BailStatus.FULLY_SIGNED

    def test_edl_sortie_does_not_count_for_activation(self):
        bail = BailFactory(status=BailStatus.FULLY_SIGNED)
        add_signataires(bail, signed=True)
        RemiseClesFactory(bail=bail)
        InsurancePolicyFactory(bail=bail)
        EtatLieuxFactory(
            location=bail.location, type_etat_lieux=EtatLieuxType.SORTIE, signe=True
        )

        result = execute(bail, TransitionName.ACTIVATE)

        assert [e.code for e in result.errors] == ["edl_entree_not_signed"]


class TestSideEffects:
    def test_events_and_audit_written_with_status(self, bail):
        add_signataires(bail)

        result = execute(
            bail, TransitionName.INITIATE_SIGNATURE, metadata={"source": "test"}
        )

        event = OutboxEvent.objects.get(aggregate_id=bail.id)
        assert event.event_type == "Lease.SentForSignature"
        assert event.status == OutboxEvent.Status.PENDING
        assert event.payload["new_status"] == "pending_signature"
        assert event.payload["actor_id"] == "user-1"

        log = BailTransitionLog.objects.get(bail=bail)
        assert log.transition == "INITIATE_SIGNATURE"
        assert log.from_status == BailStatus.DRAFT
        assert log.to_status == BailStatus.PENDING_SIGNATURE
        assert log.metadata == {"source": "test"}
        assert result.events == ["Lease.SentForSignature"]

    def test_refused_transition_writes_nothing(self, bail):
        execute(bail, TransitionName.INITIATE_SIGNATURE)

        assert not OutboxEvent.objects.exists()
        assert not BailTransitionLog.objects.exists()

    def test_unknown_bail_id(self, db):
        result = create_lease_state_machine().execute(
            "not-a-uuid", TransitionName.CANCEL, actor_id="user-1"
        )
        assert result.error_code == TransitionErrorCode.NOT_FOUND


class TestAvailableTransitions:
    def test_listing_is_read_only_and_stable(self, bail_pret_a_activer):
        bail = bail_pret_a_activer
        builder = ContextBuilder(DjangoBailStore())
        updated_at = Bail.objects.get(id=bail.id).updated_at

        first = get_available_transitions(builder.build(bail.id))
        second = get_available_transitions(builder.build(bail.id))

        assert first == second
        assert [t.name for t in first] == [TransitionName.ACTIVATE]
        assert first[0].is_legal
        assert Bail.objects.get(id=bail.id).updated_at == updated_at
        assert not OutboxEvent.objects.exists()

    def test_terminated_lease_with_notice_period_running(self):
        bail = BailFactory(status=BailStatus.NOTICE_GIVEN)
        CongeFactory(bail=bail, date_effet=date.today() + timedelta(days=20))

        context = ContextBuilder(DjangoBailStore()).build(bail.id)
        (terminate,) = get_available_transitions(context)

        assert terminate.is_legal
        assert "Le préavis n'est pas encore arrivé à son terme" in terminate.warnings


class RacingDjangoStore(DjangoBailStore):
    """Exécute une transition concurrente juste avant l'écriture du statut"""

    def __init__(self, competing_transition):
        self.competing_transition = competing_transition
        self.competitor_result = None

    def update_status_if(self, bail_id, expected_status, new_status, **kwargs):
        if self.competitor_result is None:
            self.competitor_result = "running"
            self.competitor_result = create_lease_state_machine().execute(
                bail_id, self.competing_transition, actor_id="concurrent"
            )
        return super().update_status_if(
            bail_id, expected_status, new_status, **kwargs
        )


class TestConcurrency:
    def test_only_one_racing_execution_succeeds(self, bail):
        add_signataires(bail)
        store = RacingDjangoStore(TransitionName.INITIATE_SIGNATURE)

        result = create_lease_state_machine(store).execute(
            bail.id, TransitionName.INITIATE_SIGNATURE, actor_id="user-1"
        )

        assert store.competitor_result.success
        assert result.error_code == TransitionErrorCode.CONCURRENT_MODIFICATION
        assert status_of(bail) == BailStatus.PENDING_SIGNATURE
        assert BailTransitionLog.objects.filter(bail=bail).count() == 1
        assert OutboxEvent.objects.filter(aggregate_id=bail.id).count() == 1


class TestDirectStatusWrite:
    def test_save_refuses_status_change(self, bail):
        bail = Bail.objects.get(id=bail.id)
        bail.status = BailStatus.ACTIVE

        with pytest.raises(DirectStatusWriteError):
            bail.save()

        assert status_of(bail) == BailStatus.DRAFT

    def test_stale_instance_does_not_revert_status(self, bail):
        add_signataires(bail)
        stale = Bail.objects.get(id=bail.id)

        execute(bail, TransitionName.INITIATE_SIGNATURE)
        stale.duree_mois = 24
        stale.save()

        bail.refresh_from_db()
        assert bail.status == BailStatus.PENDING_SIGNATURE
        assert bail.duree_mois == 24

    @pytest.mark.parametrize("status", [BailStatus.SENT, BailStatus.ACTIVE])
    def test_creation_outside_draft_is_refused(self, location, status):
        with pytest.raises(DirectStatusWriteError):
            Bail.objects.create(location=location, status=status)

        assert not Bail.objects.exists()

    def test_creation_starts_in_draft(self, location):
        bail = Bail.objects.create(location=location)
        assert status_of(bail) == BailStatus.DRAFT
