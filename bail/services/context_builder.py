"""
Construction du contexte d'évaluation des guards.

Le contexte est un instantané en lecture seule, recalculé à chaque
évaluation à partir du bail, de ses signataires, des états des lieux, de la
remise des clés, de l'assurance et du congé. Il n'est jamais persisté ni
mis en cache.
"""

from dataclasses import asdict, dataclass
from datetime import date
from typing import Any, Callable

from django.utils import timezone

from bail.services.store import BailStore
from etat_lieux.models import EtatLieuxType
from signature.models import SignerRole


@dataclass(frozen=True)
class TransitionContext:
    bail_id: Any
    current_status: str
    type_bail: str
    signers_count: int
    owner_signer_exists: bool
    tenant_signer_exists: bool
    all_signers_signed: bool
    edl_entree_exists: bool
    edl_entree_signed: bool
    keys_handed_over: bool
    insurance_valid: bool
    date_debut_reached: bool
    notice_exists: bool
    notice_period_completed: bool = False
    edl_sortie_exists: bool = False
    edl_sortie_signed: bool = False

    def to_dict(self) -> dict:
        data = asdict(self)
        data["bail_id"] = str(self.bail_id)
        return data


class ContextBuilder:
    """Assemble un TransitionContext pour un bail à partir du store"""

    def __init__(self, store: BailStore, today: Callable[[], date] = timezone.localdate):
        self.store = store
        self.today = today

    def build(self, bail_id) -> TransitionContext | None:
        """
        Returns:
            TransitionContext, ou None si aucun bail n'a cet identifiant
        """
        bail = self.store.get_bail(bail_id)
        if bail is None:
            return None

        today = self.today()

        signers = self.store.list_signers(bail.id)
        tenant_roles = SignerRole.tenant_roles()

        edl_entree = self.store.get_etat_lieux(bail.id, EtatLieuxType.ENTREE)
        edl_sortie = self.store.get_etat_lieux(bail.id, EtatLieuxType.SORTIE)
        insurance = self.store.get_insurance_policy(bail.id)
        notice = self.store.get_active_notice(bail.id)

        insurance_valid = bool(insurance and insurance.is_valid_on(today))

        return TransitionContext(
            bail_id=bail.id,
            current_status=bail.status,
            type_bail=bail.type_bail,
            signers_count=len(signers),
            owner_signer_exists=any(s.role == SignerRole.OWNER for s in signers),
            tenant_signer_exists=any(s.role in tenant_roles for s in signers),
            all_signers_signed=bool(signers)
            and all(s.signed for s in signers),
            edl_entree_exists=edl_entree is not None,
            edl_entree_signed=bool(edl_entree and edl_entree.signed),
            keys_handed_over=self.store.has_completed_key_handover(bail.id),
            insurance_valid=insurance_valid,
            date_debut_reached=bail.date_debut is not None and today >= bail.date_debut,
            notice_exists=notice is not None,
            notice_period_completed=bool(notice and notice.date_effet <= today),
            edl_sortie_exists=edl_sortie is not None,
            edl_sortie_signed=bool(edl_sortie and edl_sortie.signed),
        )
