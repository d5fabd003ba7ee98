import bleach
from rest_framework import serializers


class AdmitSerializer(serializers.Serializer):
    patientId = serializers.IntegerField(min_value=1)
    wingId = serializers.IntegerField(min_value=1)
    roomId = serializers.IntegerField(min_value=1)
    admissionType = serializers.ChoiceField(choices=['emergency', 'planned', 'transfer'], required=False,
                                            default='planned')
    notes = serializers.CharField(required=False, allow_blank=True, max_length=2000)

    def validate_notes(self, v):
        return bleach.clean((v or '').strip(), tags=set(), attributes={}, strip=True)
