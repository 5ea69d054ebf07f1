from django.contrib import admin

from .models import Bien, Location, Personne


@admin.register(Personne)
class PersonneAdmin(admin.ModelAdmin):
    list_display = ("lastName", "firstName", "email", "user")
    search_fields = ("lastName", "firstName", "email")


@admin.register(Bien)
class BienAdmin(admin.ModelAdmin):
    list_display = ("adresse", "superficie", "meuble")
    search_fields = ("adresse",)
    filter_horizontal = ("bailleurs",)


@admin.register(Location)
class LocationAdmin(admin.ModelAdmin):
    list_display = ("bien", "date_debut", "date_fin", "mandataire")
    search_fields = ("bien__adresse",)
    filter_horizontal = ("locataires",)
