"""
Factories pour les tests - Crée des biens, personnes et locations.

Usage dans les tests:
    from location.factories import BienFactory, LocationFactory, PersonneFactory

    # Location complète (bien + 1 bailleur + 1 locataire)
    location = LocationFactory()

    # Location avec 2 locataires et un mandataire
    location = LocationFactory(locataires__count=2, mandataire=PersonneFactory())

    # Bien avec plusieurs bailleurs
    bien = BienFactory(bailleurs__count=2)
"""

from datetime import date, timedelta

import factory
from factory.django import DjangoModelFactory

from location.models import Bien, Location, Personne


# ==============================
# PERSONNES
# ==============================


class PersonneFactory(DjangoModelFactory):
    """Factory pour créer une personne physique."""

    class Meta:
        model = Personne

    firstName = factory.Faker("first_name", locale="fr_FR")
    lastName = factory.Faker("last_name", locale="fr_FR")
    # Email unique : chaque personne a son propre compte utilisateur
    email = factory.Sequence(lambda n: f"personne{n}@example.com")


# ==============================
# BIENS
# ==============================


class BienFactory(DjangoModelFactory):
    """
    Factory pour créer un bien immobilier.

    Usage:
        bien = BienFactory()  # 1 bailleur
        bien = BienFactory(bailleurs__count=2)
        bien = BienFactory(bailleurs=[personne1, personne2])
    """

    class Meta:
        model = Bien

    adresse = factory.Faker("address", locale="fr_FR")
    superficie = factory.Faker(
        "pydecimal",
        left_digits=3,
        right_digits=2,
        positive=True,
        min_value=15,
        max_value=150,
    )
    meuble = False

    @factory.post_generation
    def bailleurs(self, create, extracted, **kwargs):
        if not create:
            return

        if extracted:
            for bailleur in extracted:
                self.bailleurs.add(bailleur)
        else:
            count = kwargs.get("count", 1)
            for _ in range(count):
                self.bailleurs.add(PersonneFactory())


# ==============================
# LOCATIONS
# ==============================


class LocationFactory(DjangoModelFactory):
    """
    Factory pour créer une location (bien + locataires).

    Usage:
        location = LocationFactory()  # 1 locataire
        location = LocationFactory(locataires__count=2)
        location = LocationFactory(date_debut=date.today() + timedelta(days=30))
    """

    class Meta:
        model = Location

    bien = factory.SubFactory(BienFactory)
    mandataire = None
    date_debut = factory.LazyFunction(lambda: date.today() - timedelta(days=30))
    date_fin = factory.LazyFunction(lambda: date.today() + timedelta(days=335))

    @factory.post_generation
    def locataires(self, create, extracted, **kwargs):
        if not create:
            return

        if extracted:
            for locataire in extracted:
                self.locataires.add(locataire)
        else:
            count = kwargs.get("count", 1)
            for _ in range(count):
                self.locataires.add(PersonneFactory())
