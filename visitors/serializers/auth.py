from rest_framework import serializers

MOBILE_FIELD = dict(min_length=10, max_length=15)


class LoginSerializer(serializers.Serializer):
    username = serializers.CharField()
    password = serializers.CharField()

    def validate_username(self, v):
        v = (v or '').strip()
        if not v:
            raise serializers.ValidationError('Username is required')
        return v

    def validate_password(self, v):
        if not v:
            raise serializers.ValidationError('Password is required')
        return v


class OtpSendSerializer(serializers.Serializer):
    mobileNumber = serializers.RegexField(r'^\+?\d+$', **MOBILE_FIELD)


class OtpVerifySerializer(serializers.Serializer):
    mobileNumber = serializers.RegexField(r'^\+?\d+$', **MOBILE_FIELD)
    otp = serializers.RegexField(r'^\d{6}$')
