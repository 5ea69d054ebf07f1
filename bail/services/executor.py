"""
Exécuteur des transitions du bail.

Séquence d'une transition :
1. construction du contexte (NOT_FOUND si le bail n'existe pas)
2. recherche (statut, transition) dans la table (INVALID_TRANSITION sinon)
3. évaluation des guards (GUARD_FAILED, sauf forçage de guards SOFT)
4. écriture conditionnelle du statut (CONCURRENT_MODIFICATION si le statut
   a changé depuis la lecture), événements outbox, entrée d'audit

Avec un store transactionnel les trois écritures sont atomiques. Sinon le
statut est écrit d'abord, puis événements et audit en best-effort : leur
échec est journalisé et remonté en warning, sans annuler le statut.

Les conditions métier ne lèvent jamais d'exception : seules les erreurs du
store (base indisponible, ...) se propagent.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Callable

from django.utils import timezone

from bail.services.context_builder import ContextBuilder
from bail.services.store import AuditEntry, BailStore
from bail.services.transitions import (
    GuardFailure,
    GuardSeverity,
    evaluate_guards,
    get_transition,
)
from notifications.services import DomainEvent

logger = logging.getLogger(__name__)


class TransitionErrorCode(StrEnum):
    NOT_FOUND = "not_found"
    INVALID_TRANSITION = "invalid_transition"
    GUARD_FAILED = "guard_failed"
    CONCURRENT_MODIFICATION = "concurrent_modification"


CONCURRENT_CHANGE = GuardFailure(
    "concurrent_change",
    "Le statut du bail a été modifié de manière concurrente, rechargez et réessayez",
    GuardSeverity.HARD,
)


@dataclass
class TransitionResult:
    success: bool
    transition: str
    previous_status: str | None
    new_status: str | None
    warnings: list[str] = field(default_factory=list)
    errors: list[GuardFailure] = field(default_factory=list)
    error_code: TransitionErrorCode | None = None
    overridden_guards: list[str] = field(default_factory=list)
    events: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "transition": self.transition,
            "previous_status": self.previous_status,
            "new_status": self.new_status,
            "warnings": list(self.warnings),
            "errors": [e.to_dict() for e in self.errors],
            "error_code": str(self.error_code) if self.error_code else None,
            "overridden_guards": list(self.overridden_guards),
            "events": list(self.events),
        }


class TransitionExecutor:
    """Applique une transition nommée sur un bail"""

    def __init__(
        self,
        store: BailStore,
        context_builder: ContextBuilder | None = None,
        now: Callable[[], datetime] = timezone.now,
    ):
        self.store = store
        self.context_builder = context_builder or ContextBuilder(store)
        self.now = now

    def _failure(
        self,
        transition_name,
        status,
        error_code: TransitionErrorCode,
        errors: list[GuardFailure],
        warnings: list[str] | None = None,
    ) -> TransitionResult:
        return TransitionResult(
            success=False,
            transition=str(transition_name),
            previous_status=status,
            new_status=status,
            warnings=warnings or [],
            errors=errors,
            error_code=error_code,
        )

    def execute(
        self,
        bail_id,
        transition_name: str,
        actor_id,
        force: bool = False,
        metadata: dict | None = None,
    ) -> TransitionResult:
        metadata = metadata or {}

        context = self.context_builder.build(bail_id)
        if context is None:
            return self._failure(
                transition_name,
                None,
                TransitionErrorCode.NOT_FOUND,
                [GuardFailure("bail_not_found", "Bail non trouvé", GuardSeverity.HARD)],
            )

        previous_status = str(context.current_status)
        definition = get_transition(previous_status, transition_name)
        if definition is None:
            logger.warning(
                f"Transition {transition_name} refusée pour le bail {bail_id}: "
                f"non définie depuis {previous_status}"
            )
            return self._failure(
                transition_name,
                previous_status,
                TransitionErrorCode.INVALID_TRANSITION,
                [
                    GuardFailure(
                        "invalid_transition",
                        f"Transition \"{transition_name}\" impossible depuis "
                        f"l'état \"{previous_status}\"",
                        GuardSeverity.HARD,
                    )
                ],
            )

        evaluation = evaluate_guards(definition, context)
        warnings = [a.message for a in evaluation.advisories]
        overridden = []

        if not evaluation.is_satisfied:
            if not (force and evaluation.can_be_forced):
                logger.warning(
                    f"Transition {definition.name} refusée pour le bail {bail_id}: "
                    f"{[f.code for f in evaluation.failures]} (force={force})"
                )
                return self._failure(
                    definition.name,
                    previous_status,
                    TransitionErrorCode.GUARD_FAILED,
                    list(evaluation.failures),
                    warnings,
                )
            overridden = [f.code for f in evaluation.soft_failures]
            warnings = [f"Forcé : {f.message}" for f in evaluation.soft_failures] + warnings
            logger.warning(
                f"⚠️ Transition {definition.name} forcée sur le bail {bail_id} "
                f"par {actor_id}: {overridden}"
            )

        at = self.now()
        new_status = str(definition.to_status)
        payload = {
            "lease_id": str(context.bail_id),
            "transition_name": str(definition.name),
            "previous_status": previous_status,
            "new_status": new_status,
            "timestamp": at.isoformat(),
            "actor_id": str(actor_id),
            "forced": bool(overridden),
        }
        events = [
            DomainEvent(event_type=event_type, aggregate_id=context.bail_id, payload=payload)
            for event_type in definition.events
        ]
        audit = AuditEntry(
            bail_id=context.bail_id,
            actor_id=str(actor_id),
            transition=str(definition.name),
            from_status=previous_status,
            to_status=new_status,
            timestamp=at,
            forced=bool(overridden),
            overridden_guards=overridden,
            warnings=warnings,
            metadata=metadata,
        )

        if self.store.transactional:
            with self.store.atomic():
                if not self._write_status(context.bail_id, previous_status, definition, at):
                    return self._concurrent_failure(definition, previous_status, bail_id)
                self.store.publish_events(events)
                self.store.write_audit(audit)
        else:
            if not self._write_status(context.bail_id, previous_status, definition, at):
                return self._concurrent_failure(definition, previous_status, bail_id)
            warnings += self._best_effort(bail_id, events, audit)

        logger.info(
            f"✅ Bail {bail_id}: {definition.name} {previous_status} → {new_status} "
            f"(acteur {actor_id})"
        )
        return TransitionResult(
            success=True,
            transition=str(definition.name),
            previous_status=previous_status,
            new_status=new_status,
            warnings=warnings,
            overridden_guards=overridden,
            events=[e.event_type for e in events],
        )

    def _write_status(self, bail_id, expected_status, definition, at) -> bool:
        return self.store.update_status_if(
            bail_id,
            expected_status,
            str(definition.to_status),
            timestamp_field=definition.timestamp_field,
            at=at,
        )

    def _concurrent_failure(self, definition, previous_status, bail_id):
        logger.warning(
            f"Transition {definition.name} refusée pour le bail {bail_id}: "
            f"statut modifié de manière concurrente (attendu {previous_status})"
        )
        return self._failure(
            definition.name,
            previous_status,
            TransitionErrorCode.CONCURRENT_MODIFICATION,
            [CONCURRENT_CHANGE],
        )

    def _best_effort(self, bail_id, events, audit) -> list[str]:
        """Événements puis audit, sans jamais annuler le statut déjà écrit"""
        warnings = []
        try:
            self.store.publish_events(events)
        except Exception:
            logger.exception(f"Échec de publication des événements pour le bail {bail_id}")
            warnings.append("Les événements n'ont pas pu être publiés")
        try:
            self.store.write_audit(audit)
        except Exception:
            logger.exception(f"Échec d'écriture de l'audit pour le bail {bail_id}")
            warnings.append("L'entrée d'audit n'a pas pu être écrite")
        return warnings
