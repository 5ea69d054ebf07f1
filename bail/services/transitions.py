"""
Table des transitions du bail.

Chaque couple (statut courant, transition) est une entrée unique de
TRANSITION_TABLE : une transition absente de la table pour un statut est
illégale, quel que soit le contexte. Les statuts terminaux (archived,
cancelled) n'ont aucune entrée.

Chaque guard déclare explicitement sa sévérité :
- HARD : ne peut jamais être contourné, même avec force=True
- SOFT : peut être contourné par un forçage autorisé
- ADVISORY : simple avertissement, ne bloque jamais la transition
"""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Callable

from bail.models import BailStatus, BailType
from bail.services.context_builder import TransitionContext


class TransitionName(StrEnum):
    INITIATE_SIGNATURE = "INITIATE_SIGNATURE"
    MARK_FULLY_SIGNED = "MARK_FULLY_SIGNED"
    ACTIVATE = "ACTIVATE"
    GIVE_NOTICE = "GIVE_NOTICE"
    TERMINATE = "TERMINATE"
    ARCHIVE = "ARCHIVE"
    CANCEL = "CANCEL"


class GuardSeverity(StrEnum):
    HARD = "hard"
    SOFT = "soft"
    ADVISORY = "advisory"


# Types de contrat pour lesquels l'assurance habitation du locataire est exigée
INSURANCE_REQUIRED_TYPES = frozenset(
    t.value
    for t in (BailType.VIDE, BailType.MEUBLE, BailType.ETUDIANT, BailType.MOBILITE)
)


def _always(ctx: TransitionContext) -> bool:
    return True


@dataclass(frozen=True)
class Guard:
    code: str
    message: str
    check: Callable[[TransitionContext], bool]
    severity: GuardSeverity = GuardSeverity.HARD
    # Le guard n'est évalué que si applies(ctx) est vrai (ex: type de contrat)
    applies: Callable[[TransitionContext], bool] = _always


@dataclass(frozen=True)
class GuardFailure:
    code: str
    message: str
    severity: GuardSeverity

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "severity": str(self.severity),
        }


@dataclass(frozen=True)
class GuardEvaluation:
    failures: tuple[GuardFailure, ...] = ()
    advisories: tuple[GuardFailure, ...] = ()

    @property
    def is_satisfied(self) -> bool:
        return not self.failures

    @property
    def hard_failures(self) -> tuple[GuardFailure, ...]:
        return tuple(f for f in self.failures if f.severity == GuardSeverity.HARD)

    @property
    def soft_failures(self) -> tuple[GuardFailure, ...]:
        return tuple(f for f in self.failures if f.severity == GuardSeverity.SOFT)

    @property
    def can_be_forced(self) -> bool:
        return bool(self.failures) and not self.hard_failures


@dataclass(frozen=True)
class TransitionDefinition:
    name: TransitionName
    from_statuses: tuple[str, ...]
    to_status: str
    guards: tuple[Guard, ...] = ()
    events: tuple[str, ...] = ()
    # Horodatage du bail posé avec le changement de statut
    timestamp_field: str | None = None


@dataclass(frozen=True)
class AvailableTransition:
    name: TransitionName
    target_status: str
    is_legal: bool
    failed_guard_reasons: list[GuardFailure] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def can_be_forced(self) -> bool:
        return bool(self.failed_guard_reasons) and all(
            f.severity == GuardSeverity.SOFT for f in self.failed_guard_reasons
        )

    def to_dict(self) -> dict:
        return {
            "name": str(self.name),
            "target_status": str(self.target_status),
            "is_legal": self.is_legal,
            "can_be_forced": self.can_be_forced,
            "failed_guard_reasons": [f.to_dict() for f in self.failed_guard_reasons],
            "warnings": list(self.warnings),
        }


TRANSITIONS: tuple[TransitionDefinition, ...] = (
    TransitionDefinition(
        name=TransitionName.INITIATE_SIGNATURE,
        from_statuses=(BailStatus.DRAFT,),
        to_status=BailStatus.PENDING_SIGNATURE,
        guards=(
            Guard(
                "owner_signer_missing",
                "Au moins un signataire bailleur est requis",
                lambda ctx: ctx.owner_signer_exists,
            ),
            Guard(
                "tenant_signer_missing",
                "Au moins un signataire locataire est requis",
                lambda ctx: ctx.tenant_signer_exists,
            ),
            Guard(
                "not_enough_signers",
                "Au moins 2 signataires sont requis",
                lambda ctx: ctx.signers_count >= 2,
            ),
        ),
        events=("Lease.SentForSignature",),
    ),
    TransitionDefinition(
        name=TransitionName.MARK_FULLY_SIGNED,
        from_statuses=(BailStatus.PENDING_SIGNATURE,),
        to_status=BailStatus.FULLY_SIGNED,
        guards=(
            # Signataires non annulés uniquement
            Guard(
                "owner_signer_missing",
                "Au moins un signataire bailleur est requis",
                lambda ctx: ctx.owner_signer_exists,
            ),
            Guard(
                "tenant_signer_missing",
                "Au moins un signataire locataire est requis",
                lambda ctx: ctx.tenant_signer_exists,
            ),
            Guard(
                "signatures_incomplete",
                "Tous les signataires n'ont pas encore signé",
                lambda ctx: ctx.all_signers_signed,
            ),
        ),
        events=("Lease.FullySigned",),
    ),
    TransitionDefinition(
        name=TransitionName.ACTIVATE,
        from_statuses=(BailStatus.FULLY_SIGNED,),
        to_status=BailStatus.ACTIVE,
        guards=(
            Guard(
                "edl_entree_not_signed",
                "L'état des lieux d'entrée n'est pas signé",
                lambda ctx: ctx.edl_entree_signed,
            ),
            Guard(
                "date_debut_not_reached",
                "La date de début du bail n'est pas encore atteinte",
                lambda ctx: ctx.date_debut_reached,
            ),
            Guard(
                "keys_not_handed_over",
                "La remise des clés n'a pas été confirmée",
                lambda ctx: ctx.keys_handed_over,
                severity=GuardSeverity.SOFT,
            ),
            Guard(
                "insurance_not_valid",
                "L'assurance habitation du locataire n'est pas valide",
                lambda ctx: ctx.insurance_valid,
                severity=GuardSeverity.SOFT,
                applies=lambda ctx: ctx.type_bail in INSURANCE_REQUIRED_TYPES,
            ),
        ),
        events=("Lease.Activated",),
        timestamp_field="activated_at",
    ),
    TransitionDefinition(
        name=TransitionName.GIVE_NOTICE,
        from_statuses=(BailStatus.ACTIVE,),
        to_status=BailStatus.NOTICE_GIVEN,
        guards=(
            Guard(
                "notice_not_recorded",
                "Aucun congé n'a encore été enregistré pour ce bail",
                lambda ctx: ctx.notice_exists,
                severity=GuardSeverity.ADVISORY,
            ),
        ),
        events=("Lease.NoticeGiven",),
    ),
    TransitionDefinition(
        name=TransitionName.TERMINATE,
        from_statuses=(BailStatus.NOTICE_GIVEN, BailStatus.ACTIVE),
        to_status=BailStatus.TERMINATED,
        guards=(
            Guard(
                "date_debut_not_reached",
                "Le bail n'a pas encore commencé",
                lambda ctx: ctx.date_debut_reached,
            ),
            Guard(
                "notice_period_running",
                "Le préavis n'est pas encore arrivé à son terme",
                lambda ctx: ctx.notice_period_completed,
                severity=GuardSeverity.ADVISORY,
                applies=lambda ctx: ctx.notice_exists,
            ),
            Guard(
                "edl_sortie_not_signed",
                "L'état des lieux de sortie n'est pas signé",
                lambda ctx: ctx.edl_sortie_signed,
                severity=GuardSeverity.ADVISORY,
            ),
        ),
        events=("Lease.Terminated",),
        timestamp_field="terminated_at",
    ),
    TransitionDefinition(
        name=TransitionName.ARCHIVE,
        from_statuses=(BailStatus.TERMINATED,),
        to_status=BailStatus.ARCHIVED,
        events=("Lease.Archived",),
        timestamp_field="archived_at",
    ),
    TransitionDefinition(
        name=TransitionName.CANCEL,
        from_statuses=(
            BailStatus.DRAFT,
            BailStatus.SENT,
            BailStatus.PENDING_SIGNATURE,
        ),
        to_status=BailStatus.CANCELLED,
        events=("Lease.Cancelled",),
        timestamp_field="cancelled_at",
    ),
)


TRANSITION_TABLE: dict[tuple[str, str], TransitionDefinition] = {
    (str(status), str(definition.name)): definition
    for definition in TRANSITIONS
    for status in definition.from_statuses
}


def get_transition(status: str, transition_name: str) -> TransitionDefinition | None:
    """Recherche (statut, transition) dans la table ; None = transition illégale"""
    return TRANSITION_TABLE.get((str(status), str(transition_name)))


def transitions_from(status: str) -> list[TransitionDefinition]:
    """Transitions déclarées pour un statut, dans l'ordre de la table"""
    return [d for d in TRANSITIONS if str(status) in map(str, d.from_statuses)]


def evaluate_guards(
    definition: TransitionDefinition, context: TransitionContext
) -> GuardEvaluation:
    failures = []
    advisories = []
    for guard in definition.guards:
        if not guard.applies(context) or guard.check(context):
            continue
        failure = GuardFailure(guard.code, guard.message, guard.severity)
        if guard.severity == GuardSeverity.ADVISORY:
            advisories.append(failure)
        else:
            failures.append(failure)
    return GuardEvaluation(failures=tuple(failures), advisories=tuple(advisories))


def get_available_transitions(context: TransitionContext) -> list[AvailableTransition]:
    """
    Évalue toutes les transitions déclarées pour le statut courant.

    Lecture seule : les transitions illégales sont listées avec le détail
    des guards en échec, jamais omises.
    """
    available = []
    for definition in transitions_from(context.current_status):
        evaluation = evaluate_guards(definition, context)
        available.append(
            AvailableTransition(
                name=definition.name,
                target_status=definition.to_status,
                is_legal=evaluation.is_satisfied,
                failed_guard_reasons=list(evaluation.failures),
                warnings=[a.message for a in evaluation.advisories],
            )
        )
    return available
