import bleach
from rest_framework import serializers

from visitors.models import Guest
from visitors.services.policy import ACTIONS

PASS_TYPES = [Guest.TYPE_ONE_TIME, Guest.TYPE_FREQUENT]


def _clean(v):
    return bleach.clean((v or '').strip(), tags=set(), attributes={}, strip=True)


class GuestCreateSerializer(serializers.Serializer):
    guestName = serializers.CharField(max_length=255)
    guestPhone = serializers.RegexField(r'^\+?\d{10,15}$')
    relationshipToPatient = serializers.CharField(required=False, allow_blank=True, max_length=100)
    guestType = serializers.ChoiceField(choices=PASS_TYPES, required=False, default=Guest.TYPE_ONE_TIME)
    visitDate = serializers.DateField(required=False, allow_null=True)
    visitPurpose = serializers.CharField(required=False, allow_blank=True, max_length=1000)

    def validate_guestName(self, v):
        v = _clean(v)
        if len(v) < 2:
            raise serializers.ValidationError('Guest name must be at least 2 characters')
        return v

    def validate_relationshipToPatient(self, v):
        return _clean(v)

    def validate_visitPurpose(self, v):
        return _clean(v)

    def validate(self, attrs):
        if attrs.get('guestType', Guest.TYPE_ONE_TIME) == Guest.TYPE_ONE_TIME and not attrs.get('visitDate'):
            raise serializers.ValidationError({'visitDate': 'Visit date is required for one-time visits'})
        return attrs


class NurseGuestCreateSerializer(GuestCreateSerializer):
    sessionId = serializers.IntegerField(min_value=1)


class GuestUpdateSerializer(GuestCreateSerializer):
    guestName = serializers.CharField(max_length=255, required=False)
    guestPhone = serializers.RegexField(r'^\+?\d{10,15}$', required=False)
    guestType = serializers.ChoiceField(choices=PASS_TYPES, required=False)

    def validate(self, attrs):
        if attrs.get('guestType') == Guest.TYPE_ONE_TIME and not attrs.get('visitDate'):
            raise serializers.ValidationError({'visitDate': 'Visit date is required for one-time visits'})
        return attrs


class GuestAccessSerializer(serializers.Serializer):
    guestId = serializers.IntegerField(min_value=1)
    action = serializers.ChoiceField(choices=list(ACTIONS))
    notes = serializers.CharField(required=False, allow_blank=True, max_length=1000)

    def validate_notes(self, v):
        return _clean(v)


class QrScanSerializer(serializers.Serializer):
    qrCode = serializers.JSONField(required=False)
    qrData = serializers.JSONField(required=False)
    deviceInfo = serializers.CharField(required=False, allow_blank=True, max_length=1000)
    notes = serializers.CharField(required=False, allow_blank=True, max_length=1000)

    def validate_notes(self, v):
        return _clean(v)

    def validate(self, attrs):
        if not attrs.get('qrCode') and not attrs.get('qrData'):
            raise serializers.ValidationError({'qrCode': 'QR code not found in request'})
        return attrs


class CompleteSessionSerializer(serializers.Serializer):
    guestId = serializers.IntegerField(required=False, min_value=1)
    sessionId = serializers.IntegerField(required=False, min_value=1)

    def validate(self, attrs):
        if not attrs.get('guestId') and not attrs.get('sessionId'):
            raise serializers.ValidationError('guestId or sessionId is required')
        return attrs


class GuestLogQuerySerializer(serializers.Serializer):
    days = serializers.IntegerField(required=False, min_value=1, max_value=90, default=7)
    guestId = serializers.IntegerField(required=False, min_value=1)


class DeviceTokenSerializer(serializers.Serializer):
    deviceToken = serializers.CharField(max_length=512)
    platform = serializers.ChoiceField(choices=['android', 'ios', 'web'], required=False)
    deviceModel = serializers.CharField(required=False, allow_blank=True, max_length=255)
