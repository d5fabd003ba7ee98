"""
Security desk endpoints: QR verification, entry/exit and the gate
dashboard.
"""
from __future__ import annotations

from datetime import timedelta

from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from visitors.models import GuestLog, QrScan
from visitors.permissions import IsSecurity
from visitors.serializers.guests import GuestLogQuerySerializer, QrScanSerializer
from visitors.services import access_log
from visitors.services.access import (
    ScanContext,
    find_guest_by_qr,
    normalize_qr_payload,
    preview_access,
    request_access,
)
from visitors.services.audit import client_ip
from visitors.services.policy import scope_for_user

from .access import access_response


def _scanned_guest(request, scope):
    s = QrScanSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    token = normalize_qr_payload(s.validated_data.get('qrCode'), s.validated_data.get('qrData'))
    return find_guest_by_qr(scope, token), s.validated_data


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsSecurity])
def verify_qr(request):
    """Validate a scanned pass without recording an entry."""
    scope = scope_for_user(request.user)
    guest, _ = _scanned_guest(request, scope)
    return Response(preview_access(scope, guest))

verify_qr.cls.throttle_scope = 'qr_scan'


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsSecurity])
def grant_access(request):
    """Check the scanned guest in, or out when the guest is already inside."""
    scope = scope_for_user(request.user)
    guest, v = _scanned_guest(request, scope)
    scan = ScanContext(
        device_info=v.get('deviceInfo') or request.META.get('HTTP_USER_AGENT'),
        ip_address=client_ip(request),
    )
    result = request_access(scope, guest.id, scan=scan, notes=v.get('notes'))
    return access_response(result)

grant_access.cls.throttle_scope = 'qr_scan'


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsSecurity])
def active_guests(request):
    scope = scope_for_user(request.user)
    logs = (
        GuestLog.objects.select_related('guest', 'session__patient', 'session__room', 'session__wing')
        .filter(currently_inside=True, guest__hospital_id=scope.hospital_id)
        .order_by('-entry_time')
    )
    if scope.wing_id:
        logs = logs.filter(session__wing_id=scope.wing_id)
    now = timezone.now()
    rows = []
    for log in logs:
        data = access_log.format_log(log)
        data.update({
            'guestPhone': log.guest.guest_phone,
            'guestType': log.guest.guest_type,
            'patientName': log.session.patient.get_full_name() or log.session.patient.username,
            'roomNumber': log.session.room.room_number,
            'wingName': log.session.wing.wing_name,
            'minutesInside': int((now - log.entry_time).total_seconds() // 60),
        })
        rows.append(data)
    return Response({'ok': True, 'guests': rows, 'count': len(rows)})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsSecurity])
def guest_logs(request):
    q = GuestLogQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    scope = scope_for_user(request.user)
    logs = access_log.logs_for_security(scope, days=q.validated_data['days'],
                                        guest_id=q.validated_data.get('guestId'))
    rows = [access_log.format_log(log) for log in logs[:500]]
    return Response({'ok': True, 'logs': rows, 'count': len(rows)})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsSecurity])
def security_dashboard(request):
    scope = scope_for_user(request.user)
    now = timezone.now()
    day_start = timezone.localtime(now).replace(hour=0, minute=0, second=0, microsecond=0)
    scans = QrScan.objects.filter(security_id=scope.actor_id, scanned_at__gte=day_start)
    inside = GuestLog.objects.filter(currently_inside=True, guest__hospital_id=scope.hospital_id)
    if scope.wing_id:
        inside = inside.filter(session__wing_id=scope.wing_id)
    recent = access_log.logs_for_security(scope, days=1, now=now)[:10]
    return Response({
        'ok': True,
        'stats': {
            'scansToday': scans.count(),
            'grantedToday': scans.filter(access_granted=True).count(),
            'deniedToday': scans.filter(access_granted=False).count(),
            'currentlyInside': inside.count(),
            'longStays': inside.filter(entry_time__lte=now - timedelta(hours=4)).count(),
        },
        'recentLogs': [access_log.format_log(log) for log in recent],
        'hospitalId': scope.hospital_id,
        'wingId': scope.wing_id,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsSecurity])
def security_profile(request):
    user = request.user
    wing = user.assigned_wing
    return Response({'ok': True, 'profile': {
        'id': user.id,
        'username': user.username,
        'name': user.get_full_name() or user.username,
        'mobileNumber': user.mobile_number,
        'employeeId': user.employee_id,
        'shiftTiming': user.shift_timing,
        'hospitalId': user.hospital_id,
        'hospitalName': user.hospital.name,
        'hospitalAddress': user.hospital.address,
        'assignedWingId': user.assigned_wing_id,
        'wingName': wing.wing_name if wing else None,
        'wingCode': wing.wing_code if wing else None,
        'floorNumber': wing.floor_number if wing else None,
    }})
