"""
Tests de l'exécuteur de transitions sur un store en mémoire.

Couvre le forçage (guards SOFT / HARD), le chemin non transactionnel en
best-effort et les exécutions concurrentes.
"""

import logging
import uuid
from datetime import date, datetime, timedelta
from datetime import timezone as dt_timezone

import pytest

from bail.models import BailStatus, BailType
from bail.services.context_builder import ContextBuilder
from bail.services.executor import TransitionErrorCode, TransitionExecutor
from bail.services.transitions import TransitionName
from bail.tests.memory_store import InMemoryBailStore
from etat_lieux.models import EtatLieuxType
from signature.models import SignerRole

pytestmark = pytest.mark.unit

TODAY = date(2024, 6, 1)
NOW = datetime(2024, 6, 1, 10, 0, tzinfo=dt_timezone.utc)


def make_executor(store):
    return TransitionExecutor(
        store, ContextBuilder(store, today=lambda: TODAY), now=lambda: NOW
    )


@pytest.fixture
def store():
    return InMemoryBailStore()


@pytest.fixture
def executor(store):
    return make_executor(store)


def fully_signed_bail(store, **kwargs):
    bail_id = store.add_bail(status=BailStatus.FULLY_SIGNED, **kwargs)
    store.add_standard_signers(bail_id, signed=True)
    store.set_etat_lieux(bail_id, EtatLieuxType.ENTREE, signed=True)
    return bail_id


class TestExecute:
    def test_unknown_bail(self, executor):
        result = executor.execute(uuid.uuid4(), "CANCEL", actor_id="u1")

        assert not result.success
        assert result.error_code == TransitionErrorCode.NOT_FOUND
        assert result.previous_status is None

    def test_invalid_transition_leaves_status(self, store, executor):
        bail_id = store.add_bail(status=BailStatus.DRAFT)

        result = executor.execute(bail_id, TransitionName.ACTIVATE, actor_id="u1")

        assert result.error_code == TransitionErrorCode.INVALID_TRANSITION
        assert result.new_status == BailStatus.DRAFT
        assert store.status_of(bail_id) == BailStatus.DRAFT
        assert store.status_writes == 0
        assert store.events == []
        assert store.audit == []

    def test_success_writes_status_event_and_audit(self, store, executor):
        bail_id = store.add_bail(status=BailStatus.DRAFT)
        store.add_standard_signers(bail_id)

        result = executor.execute(
            bail_id,
            TransitionName.INITIATE_SIGNATURE,
            actor_id="u1",
            metadata={"source": "dashboard"},
        )

        assert result.success
        assert result.previous_status == "draft"
        assert result.new_status == "pending_signature"
        assert result.events == ["Lease.SentForSignature"]
        assert store.status_of(bail_id) == BailStatus.PENDING_SIGNATURE

        (event,) = store.events
        assert event.aggregate_id == bail_id
        assert event.payload == {
            "lease_id": str(bail_id),
            "transition_name": "INITIATE_SIGNATURE",
            "previous_status": "draft",
            "new_status": "pending_signature",
            "timestamp": NOW.isoformat(),
            "actor_id": "u1",
            "forced": False,
        }

        (audit,) = store.audit
        assert audit.from_status == "draft"
        assert audit.to_status == "pending_signature"
        assert audit.metadata == {"source": "dashboard"}
        assert not audit.forced

    def test_guard_failure_returns_all_reasons(self, store, executor):
        bail_id = store.add_bail(status=BailStatus.DRAFT)
        store.add_signer(bail_id, SignerRole.PRIMARY_TENANT)

        result = executor.execute(bail_id, "INITIATE_SIGNATURE", actor_id="u1")

        assert result.error_code == TransitionErrorCode.GUARD_FAILED
        assert [e.code for e in result.errors] == [
            "owner_signer_missing",
            "not_enough_signers",
        ]
        assert store.status_of(bail_id) == BailStatus.DRAFT

    def test_activate_sets_timestamp(self, store, executor):
        bail_id = fully_signed_bail(store)
        store.hand_over_keys(bail_id)
        store.set_insurance(bail_id)

        result = executor.execute(bail_id, TransitionName.ACTIVATE, actor_id="u1")

        assert result.success
        assert store.timestamps[(bail_id, "activated_at")] == NOW


class TestForce:
    def test_force_bypasses_soft_guards(self, store, executor):
        bail_id = fully_signed_bail(store)

        result = executor.execute(
            bail_id, TransitionName.ACTIVATE, actor_id="u1", force=True
        )

        assert result.success
        assert result.overridden_guards == [
            "keys_not_handed_over",
            "insurance_not_valid",
        ]
        assert all(w.startswith("Forcé") for w in result.warnings)
        assert store.audit[0].forced
        assert store.audit[0].overridden_guards == result.overridden_guards
        assert store.events[0].payload["forced"] is True

    def test_soft_guards_block_without_force(self, store, executor):
        bail_id = fully_signed_bail(store)

        result = executor.execute(bail_id, TransitionName.ACTIVATE, actor_id="u1")

        assert result.error_code == TransitionErrorCode.GUARD_FAILED
        assert store.status_of(bail_id) == BailStatus.FULLY_SIGNED

    def test_force_never_bypasses_edl(self, store, executor):
        bail_id = fully_signed_bail(store)
        store.set_etat_lieux(bail_id, EtatLieuxType.ENTREE, signed=False)
        store.hand_over_keys(bail_id)
        store.set_insurance(bail_id)

        result = executor.execute(
            bail_id, TransitionName.ACTIVATE, actor_id="u1", force=True
        )

        assert result.error_code == TransitionErrorCode.GUARD_FAILED
        assert [e.code for e in result.errors] == ["edl_entree_not_signed"]
        assert store.status_of(bail_id) == BailStatus.FULLY_SIGNED

    def test_force_never_bypasses_start_date(self, store, executor):
        bail_id = fully_signed_bail(store, date_debut=TODAY + timedelta(days=10))

        result = executor.execute(
            bail_id, TransitionName.ACTIVATE, actor_id="u1", force=True
        )

        assert not result.success
        assert "date_debut_not_reached" in [e.code for e in result.errors]

    def test_force_never_bypasses_signer_composition(self, store, executor):
        bail_id = store.add_bail(status=BailStatus.DRAFT)
        store.add_signer(bail_id, SignerRole.OWNER)

        result = executor.execute(
            bail_id, TransitionName.INITIATE_SIGNATURE, actor_id="u1", force=True
        )

        assert result.error_code == TransitionErrorCode.GUARD_FAILED
        assert store.status_of(bail_id) == BailStatus.DRAFT

    def test_seasonal_lease_activates_without_insurance(self, store, executor):
        bail_id = fully_signed_bail(store, type_bail=BailType.SAISONNIER)
        store.hand_over_keys(bail_id)

        assert executor.execute(bail_id, "ACTIVATE", actor_id="u1").success


class TestTerminalStates:
    @pytest.mark.parametrize("status", [BailStatus.ARCHIVED, BailStatus.CANCELLED])
    @pytest.mark.parametrize("name", list(TransitionName))
    def test_terminal_states_reject_transitions(self, store, executor, status, name):
        bail_id = store.add_bail(status=status)

        result = executor.execute(bail_id, name, actor_id="u1", force=True)

        assert result.error_code == TransitionErrorCode.INVALID_TRANSITION
        assert store.status_of(bail_id) == status


class FailingAuditStore(InMemoryBailStore):
    def write_audit(self, entry):
        raise RuntimeError("audit indisponible")


class TestBestEffortSideEffects:
    def test_status_kept_when_audit_fails(self, caplog):
        store = FailingAuditStore()
        bail_id = store.add_bail(status=BailStatus.DRAFT)

        with caplog.at_level(logging.ERROR, logger="bail.services.executor"):
            result = make_executor(store).execute(
                bail_id, TransitionName.CANCEL, actor_id="u1"
            )

        assert result.success
        assert store.status_of(bail_id) == BailStatus.CANCELLED
        assert store.events
        assert "L'entrée d'audit n'a pas pu être écrite" in result.warnings
        assert "Échec d'écriture de l'audit" in caplog.text


class RacingStore(InMemoryBailStore):
    """
    Store dont la première écriture de statut est précédée d'une autre
    exécution sur le même bail, entre la lecture du contexte et l'écriture.
    """

    def __init__(self, competing_transition):
        super().__init__()
        self.competing_transition = competing_transition
        self.competitor_result = None

    def update_status_if(self, bail_id, expected_status, new_status, **kwargs):
        if self.competitor_result is None:
            self.competitor_result = "running"
            self.competitor_result = make_executor(self).execute(
                bail_id, self.competing_transition, actor_id="concurrent"
            )
        return super().update_status_if(
            bail_id, expected_status, new_status, **kwargs
        )


class TestConcurrency:
    def test_exactly_one_of_two_racing_executions_succeeds(self):
        store = RacingStore(competing_transition=TransitionName.CANCEL)
        bail_id = store.add_bail(status=BailStatus.DRAFT)
        store.add_standard_signers(bail_id)

        result = make_executor(store).execute(
            bail_id, TransitionName.INITIATE_SIGNATURE, actor_id="u1"
        )

        assert store.competitor_result.success
        assert not result.success
        assert result.error_code == TransitionErrorCode.CONCURRENT_MODIFICATION
        assert [e.code for e in result.errors] == ["concurrent_change"]
        assert store.status_of(bail_id) == BailStatus.CANCELLED
        assert len(store.audit) == 1

    def test_same_transition_twice(self):
        store = RacingStore(competing_transition=TransitionName.CANCEL)
        bail_id = store.add_bail(status=BailStatus.PENDING_SIGNATURE)

        result = make_executor(store).execute(
            bail_id, TransitionName.CANCEL, actor_id="u1"
        )

        assert store.competitor_result.success
        assert result.error_code == TransitionErrorCode.CONCURRENT_MODIFICATION
        assert store.status_writes == 1
