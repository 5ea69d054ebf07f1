"""
Factories pour le cycle de vie du bail.

Usage:
    from bail.factories import BailFactory, create_bail_pret_a_activer

    # Bail en brouillon, sans signataire
    bail = BailFactory()

    # Bail placé directement dans un statut donné (tests uniquement)
    bail = BailFactory(status=BailStatus.ACTIVE)

    # Bail signé dont toutes les conditions d'activation sont remplies
    bail = create_bail_pret_a_activer()
"""

from datetime import date, timedelta

import factory
from django.utils import timezone
from factory.django import DjangoModelFactory

from assurances.models import InsurancePolicy
from etat_lieux.models import EtatLieux, EtatLieuxStatus, EtatLieuxType
from location.factories import LocationFactory, PersonneFactory
from signature.models import SignerRole

from .models import (
    Bail,
    BailSignatureRequest,
    BailStatus,
    BailType,
    Conge,
    RemiseCles,
)


class BailFactory(DjangoModelFactory):
    class Meta:
        model = Bail

    location = factory.SubFactory(LocationFactory)
    type_bail = BailType.VIDE
    status = BailStatus.DRAFT
    duree_mois = 36

    @classmethod
    def _create(cls, model_class, *args, **kwargs):
        """
        Le bail est créé en brouillon (seul statut accepté par Bail.save)
        puis placé dans le statut demandé par un update direct, réservé aux
        tests.
        """
        status = kwargs.pop("status", BailStatus.DRAFT)
        bail = super()._create(model_class, *args, **kwargs)
        if status != BailStatus.DRAFT:
            model_class.objects.filter(pk=bail.pk).update(status=status)
            bail.refresh_from_db()
        return bail


class BailSignatureRequestFactory(DjangoModelFactory):
    class Meta:
        model = BailSignatureRequest

    bail = factory.SubFactory(BailFactory)
    role = SignerRole.PRIMARY_TENANT
    personne = factory.SubFactory(PersonneFactory)
    order = factory.Sequence(lambda n: n + 1)
    signed = False
    signed_at = factory.LazyAttribute(
        lambda obj: timezone.now() if obj.signed else None
    )


class EtatLieuxFactory(DjangoModelFactory):
    class Meta:
        model = EtatLieux

    location = factory.SubFactory(LocationFactory)
    type_etat_lieux = EtatLieuxType.ENTREE
    status = EtatLieuxStatus.DRAFT
    nombre_cles = factory.LazyFunction(lambda: {"porte_entree": 2})

    class Params:
        signe = factory.Trait(
            status=EtatLieuxStatus.SIGNED,
            signed_at=factory.LazyFunction(timezone.now),
        )


class InsurancePolicyFactory(DjangoModelFactory):
    class Meta:
        model = InsurancePolicy

    bail = factory.SubFactory(BailFactory)
    policy_number = factory.Sequence(lambda n: f"MRH-{n:08d}")
    status = InsurancePolicy.Status.ACTIVE
    start_date = factory.LazyFunction(lambda: date.today() - timedelta(days=1))
    end_date = None


class RemiseClesFactory(DjangoModelFactory):
    class Meta:
        model = RemiseCles

    bail = factory.SubFactory(BailFactory)
    status = RemiseCles.Status.COMPLETED
    nombre_cles = 2
    completed_at = factory.LazyFunction(timezone.now)


class CongeFactory(DjangoModelFactory):
    class Meta:
        model = Conge

    bail = factory.SubFactory(BailFactory)
    emetteur = Conge.Emetteur.LOCATAIRE
    date_notification = factory.LazyFunction(date.today)
    date_effet = factory.LazyFunction(lambda: date.today() + timedelta(days=30))


# ==============================
# HELPERS
# ==============================


def add_signataires(bail, signed=False):
    """
    Ajoute un bailleur et les locataires de la location comme signataires.

    Returns:
        list[BailSignatureRequest]: Demandes créées, bailleur en premier
    """
    location = bail.location
    requests = [
        BailSignatureRequestFactory(
            bail=bail,
            role=SignerRole.OWNER,
            personne=location.bien.bailleurs.first(),
            order=1,
            signed=signed,
        )
    ]
    for index, locataire in enumerate(location.locataires.all()):
        requests.append(
            BailSignatureRequestFactory(
                bail=bail,
                role=SignerRole.PRIMARY_TENANT if index == 0 else SignerRole.CO_TENANT,
                personne=locataire,
                order=index + 2,
                signed=signed,
            )
        )
    return requests


def create_bail_pret_a_activer(**kwargs):
    """
    Bail FULLY_SIGNED dont toutes les conditions d'activation sont remplies :
    signatures complètes, EDL d'entrée signé, clés remises, assurance active
    et date de début atteinte.
    """
    kwargs.setdefault("status", BailStatus.FULLY_SIGNED)
    bail = BailFactory(**kwargs)
    add_signataires(bail, signed=True)
    EtatLieuxFactory(location=bail.location, signe=True)
    RemiseClesFactory(bail=bail)
    InsurancePolicyFactory(bail=bail)
    return bail
