"""
Constantes pour le module location
"""

from enum import StrEnum


class UserRole(StrEnum):
    """
    Rôles d'un utilisateur vis-à-vis d'une location.
    Utilisé pour les permissions sur les transitions du bail.
    """

    BAILLEUR = "bailleur"
    MANDATAIRE = "mandataire"
    LOCATAIRE = "locataire"

    @classmethod
    def gestionnaires(cls):
        """Rôles autorisés à forcer une transition (côté bailleur)"""
        return [cls.BAILLEUR, cls.MANDATAIRE]
