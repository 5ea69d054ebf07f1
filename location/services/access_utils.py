"""
Utilitaires pour la vérification des droits d'accès aux locations.
"""
from typing import TYPE_CHECKING

from location.constants import UserRole
from location.models import Location

if TYPE_CHECKING:
    from location.models import Personne


class UserLocationInfo:
    """Informations sur le rôle et la personne d'un utilisateur pour une location."""

    def __init__(
        self,
        is_mandataire: bool = False,
        is_bailleur: bool = False,
        is_locataire: bool = False,
        personne: "Personne | None" = None,
    ):
        self.is_mandataire = is_mandataire
        self.is_bailleur = is_bailleur
        self.is_locataire = is_locataire
        self.personne = personne

    @property
    def has_access(self) -> bool:
        return self.is_mandataire or self.is_bailleur or self.is_locataire

    @property
    def roles(self) -> list[UserRole]:
        roles = []
        if self.is_bailleur:
            roles.append(UserRole.BAILLEUR)
        if self.is_mandataire:
            roles.append(UserRole.MANDATAIRE)
        if self.is_locataire:
            roles.append(UserRole.LOCATAIRE)
        return roles

    def to_dict(self) -> dict[str, bool]:
        return {
            "is_mandataire": self.is_mandataire,
            "is_bailleur": self.is_bailleur,
            "is_locataire": self.is_locataire,
        }


def get_user_info_for_location(
    location: Location, user_email: str
) -> UserLocationInfo:
    """
    Retourne les rôles et la Personne d'un utilisateur pour une location.

    Args:
        location: Instance de Location
        user_email: Email de l'utilisateur à vérifier

    Returns:
        UserLocationInfo avec is_mandataire, is_bailleur, is_locataire, personne
    """
    user_email_lower = (user_email or "").lower()
    info = UserLocationInfo()
    if not user_email_lower:
        return info

    if location.mandataire and location.mandataire.email.lower() == user_email_lower:
        info.is_mandataire = True
        info.personne = location.mandataire

    for bailleur in location.bien.bailleurs.all():
        if bailleur.email.lower() == user_email_lower:
            info.is_bailleur = True
            info.personne = info.personne or bailleur
            break

    for locataire in location.locataires.all():
        if locataire.email.lower() == user_email_lower:
            info.is_locataire = True
            info.personne = info.personne or locataire
            break

    return info
