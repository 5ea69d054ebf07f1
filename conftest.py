"""
Configuration pytest.

Ce fichier définit des fixtures réutilisables pour tous les tests.
"""

import pytest
from django.conf import settings
from rest_framework.test import APIClient

from bail.factories import BailFactory, create_bail_pret_a_activer
from bail.models import BailStatus
from location.factories import LocationFactory, PersonneFactory


# ==============================
# CONFIGURATION DJANGO POUR TESTS
# ==============================


@pytest.fixture(scope="session", autouse=True)
def configure_django_for_tests():
    """Configure Django settings pour les tests."""
    if "testserver" not in settings.ALLOWED_HOSTS:
        settings.ALLOWED_HOSTS.append("testserver")
    yield


# ==============================
# FIXTURES API CLIENT
# ==============================


@pytest.fixture
def api_client():
    """Client API REST Framework pour les tests."""
    return APIClient()


def _client_for(personne):
    client = APIClient()
    client.force_authenticate(user=personne.user)
    return client


# ==============================
# FIXTURES LOCATIONS ET BAILS
# ==============================


@pytest.fixture
def location():
    """Location de test basique (1 bailleur, 1 locataire)."""
    return LocationFactory()


@pytest.fixture
def bail(location):
    """Bail en brouillon sans signataire."""
    return BailFactory(location=location)


@pytest.fixture
def bail_pret_a_activer():
    """Bail FULLY_SIGNED dont toutes les conditions d'activation sont remplies."""
    return create_bail_pret_a_activer()


@pytest.fixture
def bail_actif():
    """Bail ACTIVE avec signataires signés."""
    return create_bail_pret_a_activer(status=BailStatus.ACTIVE)


# ==============================
# FIXTURES UTILISATEURS
# ==============================


@pytest.fixture
def bailleur_client(bail):
    """Client authentifié en tant que bailleur du bail."""
    return _client_for(bail.location.bien.bailleurs.first())


@pytest.fixture
def locataire_client(bail):
    """Client authentifié en tant que locataire du bail."""
    return _client_for(bail.location.locataires.first())


@pytest.fixture
def etranger_client(db):
    """Client authentifié sans aucun rôle sur le bail."""
    return _client_for(PersonneFactory())


# ==============================
# MARKERS PYTEST
# ==============================


def pytest_configure(config):
    """Configure les markers pytest personnalisés."""
    config.addinivalue_line("markers", "e2e: Tests end-to-end complets")
    config.addinivalue_line("markers", "unit: Tests unitaires")
    config.addinivalue_line("markers", "integration: Tests d'intégration")
