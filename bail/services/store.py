"""
Accès aux données du cycle de vie du bail.

Le ContextBuilder et le TransitionExecutor reçoivent un BailStore en
paramètre : aucune connexion globale n'est utilisée par la machine à états.
DjangoBailStore est l'implémentation ORM utilisée en production.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import nullcontext
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from assurances.models import couverture_valide
from notifications.services import DomainEvent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BailRecord:
    id: Any
    status: str
    type_bail: str
    date_debut: date | None


@dataclass(frozen=True)
class SignerRecord:
    role: str
    signed: bool


@dataclass(frozen=True)
class EtatLieuxRecord:
    signed: bool


@dataclass(frozen=True)
class InsuranceRecord:
    is_active: bool
    end_date: date | None = None

    def is_valid_on(self, day: date) -> bool:
        return couverture_valide(self.is_active, self.end_date, day)


@dataclass(frozen=True)
class NoticeRecord:
    date_effet: date


@dataclass(frozen=True)
class AuditEntry:
    bail_id: Any
    actor_id: str
    transition: str
    from_status: str
    to_status: str
    timestamp: datetime
    forced: bool = False
    overridden_guards: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    metadata: dict = field(default_factory=dict)


class BailStore(ABC):
    """
    Interface d'accès aux enregistrements utilisés par la machine à états.
    Toutes les lectures et écritures sont indexées par l'identifiant du bail.
    """

    # True si atomic() couvre statut + événements + audit
    transactional = False

    def atomic(self):
        return nullcontext()

    @abstractmethod
    def get_bail(self, bail_id) -> BailRecord | None:
        pass

    @abstractmethod
    def list_signers(self, bail_id) -> list[SignerRecord]:
        pass

    @abstractmethod
    def get_etat_lieux(self, bail_id, type_etat_lieux: str) -> EtatLieuxRecord | None:
        pass

    @abstractmethod
    def has_completed_key_handover(self, bail_id) -> bool:
        pass

    @abstractmethod
    def get_insurance_policy(self, bail_id) -> InsuranceRecord | None:
        pass

    @abstractmethod
    def get_active_notice(self, bail_id) -> NoticeRecord | None:
        pass

    @abstractmethod
    def update_status_if(
        self,
        bail_id,
        expected_status: str,
        new_status: str,
        timestamp_field: str | None = None,
        at: datetime | None = None,
    ) -> bool:
        """
        Écrit le nouveau statut seulement si le statut en base vaut encore
        expected_status. Retourne False si aucune ligne n'a été modifiée.
        """

    @abstractmethod
    def publish_events(self, events: list[DomainEvent]) -> None:
        pass

    @abstractmethod
    def write_audit(self, entry: AuditEntry) -> None:
        pass


class DjangoBailStore(BailStore):
    """BailStore adossé à l'ORM Django (une seule base, transactions disponibles)"""

    transactional = True

    def atomic(self):
        return transaction.atomic()

    def get_bail(self, bail_id) -> BailRecord | None:
        from bail.models import Bail

        try:
            bail = Bail.objects.select_related("location").filter(id=bail_id).first()
        except (ValidationError, ValueError):
            logger.warning(f"Identifiant de bail invalide: {bail_id}")
            return None

        if bail is None:
            return None

        return BailRecord(
            id=bail.id,
            status=bail.status,
            type_bail=bail.type_bail,
            date_debut=bail.location.date_debut,
        )

    def list_signers(self, bail_id) -> list[SignerRecord]:
        from bail.models import BailSignatureRequest

        signers = BailSignatureRequest.objects.filter(
            bail_id=bail_id, cancelled_at__isnull=True
        ).order_by("order")
        return [SignerRecord(role=s.role, signed=s.signed) for s in signers]

    def get_etat_lieux(self, bail_id, type_etat_lieux: str) -> EtatLieuxRecord | None:
        from etat_lieux.models import EtatLieux

        etat_lieux = EtatLieux.objects.filter(
            location__bails__id=bail_id, type_etat_lieux=type_etat_lieux
        ).first()
        if etat_lieux is None:
            return None
        return EtatLieuxRecord(signed=etat_lieux.est_signe)

    def has_completed_key_handover(self, bail_id) -> bool:
        from bail.models import RemiseCles

        return RemiseCles.objects.filter(
            bail_id=bail_id, status=RemiseCles.Status.COMPLETED
        ).exists()

    def get_insurance_policy(self, bail_id) -> InsuranceRecord | None:
        from assurances.models import InsurancePolicy

        # Police active la plus couvrante (sans date de fin en premier)
        policy = (
            InsurancePolicy.objects.filter(
                bail_id=bail_id, status=InsurancePolicy.Status.ACTIVE
            )
            .order_by(F("end_date").desc(nulls_first=True))
            .first()
        )
        if policy is None:
            return None
        return InsuranceRecord(is_active=policy.is_active, end_date=policy.end_date)

    def get_active_notice(self, bail_id) -> NoticeRecord | None:
        from bail.models import Conge

        conge = (
            Conge.objects.filter(bail_id=bail_id, status__in=Conge.ACTIVE_STATUSES)
            .order_by("-date_notification")
            .first()
        )
        if conge is None:
            return None
        return NoticeRecord(date_effet=conge.date_effet)

    def update_status_if(
        self,
        bail_id,
        expected_status: str,
        new_status: str,
        timestamp_field: str | None = None,
        at: datetime | None = None,
    ) -> bool:
        from bail.models import Bail

        at = at or timezone.now()
        values = {"status": new_status, "updated_at": at}
        if timestamp_field:
            values[timestamp_field] = at

        updated = Bail.objects.filter(id=bail_id, status=expected_status).update(
            **values
        )
        return updated == 1

    def publish_events(self, events: list[DomainEvent]) -> None:
        from notifications.services import publish_events

        publish_events(events)

    def write_audit(self, entry: AuditEntry) -> None:
        from bail.models import BailTransitionLog

        BailTransitionLog.objects.create(
            bail_id=entry.bail_id,
            actor_id=entry.actor_id,
            transition=entry.transition,
            from_status=entry.from_status,
            to_status=entry.to_status,
            timestamp=entry.timestamp,
            forced=entry.forced,
            overridden_guards=entry.overridden_guards,
            warnings=entry.warnings,
            metadata=entry.metadata,
        )
