from rest_framework import serializers


class ExecuteTransitionSerializer(serializers.Serializer):
    """
    Corps de la requête d'exécution d'une transition.

    Le nom de transition n'est pas restreint ici : une transition inconnue
    est refusée par l'exécuteur comme INVALID_TRANSITION.
    """

    transition = serializers.CharField(max_length=40)
    force = serializers.BooleanField(default=False)
    metadata = serializers.DictField(required=False, default=dict)

    def validate_transition(self, value):
        return value.strip().upper()
