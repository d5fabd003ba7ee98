"""
Authentication views.

Username/password login for staff, OTP login for patients and
bystanders, JWT refresh/logout and the current user profile.  Both
login paths return the legacy ``Token`` key and a JWT pair so mobile
clients can use either header.
"""
from __future__ import annotations

from django.conf import settings
from django.contrib.auth import authenticate
from rest_framework.authtoken.models import Token
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenRefreshView

from visitors.authentication import ensure_hospital_active
from visitors.serializers.auth import LoginSerializer, OtpSendSerializer, OtpVerifySerializer
from visitors.services import otp
from visitors.services.audit import client_ip, log_action

from .models import User


def _user_payload(user: User) -> dict:
    return {
        'id': user.id,
        'username': user.username,
        'name': user.get_full_name() or user.username,
        'role': user.role,
        'hospitalId': user.hospital_id,
        'sectionId': user.section_id,
        'assignedWingId': user.assigned_wing_id,
        'mobileNumber': user.mobile_number,
    }


def _token_payload(user: User) -> dict:
    token_obj, _ = Token.objects.get_or_create(user=user)
    refresh = RefreshToken.for_user(user)
    return {
        'ok': True,
        'token': token_obj.key,
        'jwt_access': str(refresh.access_token),
        'jwt_refresh': str(refresh),
        'role': user.role,
        'user': _user_payload(user),
    }


# ---------------------------------------------------------------------
# Username/password login
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
def login_view(request):
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    username = s.validated_data['username']
    password = s.validated_data['password']

    user = authenticate(request, username=username, password=password)
    if not user:
        # only the username is recorded for failed attempts
        log_action(user=None, action='login', object_type='user', object_id=None,
                   detail={'result': 'fail', 'username': username, 'ip': client_ip(request)})
        return Response({'ok': False, 'detail': 'Invalid username or password'}, status=400)
    ensure_hospital_active(user)

    log_action(user=user, action='login', object_type='user', object_id=user.id,
               detail={'result': 'ok', 'ip': client_ip(request)})
    return Response(_token_payload(user), status=200)

# ScopedRateThrottle reads throttle_scope from the APIView class that @api_view builds
login_view.cls.throttle_scope = 'login'


# ---------------------------------------------------------------------
# OTP login
# ---------------------------------------------------------------------
def _otp_user(mobile: str) -> User:
    user = User.objects.filter(mobile_number=mobile, is_active=True, otp_login_enabled=True).first()
    if user is None:
        raise NotFound('No account registered for this mobile number')
    return user


@api_view(['POST'])
@permission_classes([AllowAny])
def send_otp_view(request):
    s = OtpSendSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    mobile = s.validated_data['mobileNumber']
    user = _otp_user(mobile)
    code = otp.issue_otp(mobile)
    log_action(user=user, action='otp_send', object_type='user', object_id=user.id,
               detail={'ip': client_ip(request)})
    payload = {'ok': True, 'message': 'OTP sent', 'expiresIn': settings.OTP_TTL_SECONDS}
    if settings.DEBUG:
        payload['devOtp'] = code
    return Response(payload)

send_otp_view.cls.throttle_scope = 'otp'


@api_view(['POST'])
@permission_classes([AllowAny])
def verify_otp_view(request):
    s = OtpVerifySerializer(data=request.data)
    s.is_valid(raise_exception=True)
    mobile = s.validated_data['mobileNumber']
    user = _otp_user(mobile)
    otp.verify_otp(mobile, s.validated_data['otp'])
    ensure_hospital_active(user)
    log_action(user=user, action='otp_login', object_type='user', object_id=user.id,
               detail={'ip': client_ip(request)})
    return Response(_token_payload(user))

verify_otp_view.cls.throttle_scope = 'otp'


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def me_view(request):
    return Response({'ok': True, 'user': _user_payload(request.user)})


# ---------------------------------------------------------------------
# JWT: refresh & logout
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
def jwt_refresh_view(request):
    """Return a new access token from refresh token."""
    view = TokenRefreshView.as_view()
    resp = view(request._request)
    if isinstance(resp, Response):
        data = dict(resp.data)
        if 'access' in data and 'jwt_access' not in data:
            data['jwt_access'] = data.pop('access')
        return Response(data, status=resp.status_code)
    return resp


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def jwt_logout_view(request):
    """Blacklist current user's refresh tokens (all or a given one)."""
    refresh = request.data.get('refresh')
    count = 0
    if refresh:
        try:
            RefreshToken(refresh).blacklist()
        except TokenError as e:
            return Response({'ok': False, 'detail': str(e)}, status=400)
        count = 1
    else:
        for token in OutstandingToken.objects.filter(user=request.user):
            _, created = BlacklistedToken.objects.get_or_create(token=token)
            count += int(created)
    Token.objects.filter(user=request.user).delete()
    log_action(user=request.user, action='logout', object_type='user', object_id=request.user.id,
               detail={'blacklisted': count})
    return Response({'ok': True, 'blacklisted': count})
