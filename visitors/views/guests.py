"""
Patient and bystander guest pass endpoints.

Callers act on the guests of their own active session only; a pass of
another session is reported as not found.
"""
from __future__ import annotations

from django.db.models import Q
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from visitors.models import DeviceToken, Guest, GuestLog, VisitingHours
from visitors.permissions import IsPatientOrBystander
from visitors.serializers.guests import DeviceTokenSerializer, GuestCreateSerializer, GuestUpdateSerializer
from visitors.services import passes
from visitors.services.audit import log_action
from visitors.services.sessions import active_session_for


def _require_session(user):
    session = active_session_for(user)
    if session is None:
        raise NotFound('No active session found')
    return session


def _owned_guest(user, guest_id):
    guest = Guest.objects.filter(id=guest_id, session__patient=user).first()
    if guest is None:
        raise NotFound('Guest not found')
    return guest


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsPatientOrBystander])
def my_guests(request):
    if request.method == 'GET':
        session = active_session_for(request.user)
        if session is None:
            return Response({'ok': True, 'guests': [], 'count': 0, 'message': 'No active session'})
        rows = [passes.format_guest(g) for g in Guest.objects.filter(session=session).order_by('-created_at')]
        return Response({'ok': True, 'guests': rows, 'count': len(rows)})

    s = GuestCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    session = _require_session(request.user)
    guest = passes.issue_guest_pass(
        session,
        created_by=request.user,
        guest_name=v['guestName'],
        guest_phone=v['guestPhone'],
        pass_type=v.get('guestType') or Guest.TYPE_ONE_TIME,
        relationship=v.get('relationshipToPatient'),
        visit_date=v.get('visitDate'),
        purpose=v.get('visitPurpose'),
    )
    return Response({'ok': True, 'guest': passes.format_guest(guest), 'message': 'Guest added successfully'},
                    status=201)

my_guests.cls.throttle_scope = 'guest_write'


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, IsPatientOrBystander])
def my_guest_detail(request, guest_id: int):
    guest = _owned_guest(request.user, guest_id)
    if request.method == 'GET':
        return Response({'ok': True, 'guest': passes.format_guest(guest)})

    if request.method == 'DELETE':
        passes.revoke_pass(guest, request.user)
        return Response({'ok': True, 'message': 'Guest pass revoked'})

    s = GuestUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    guest = passes.update_pass(
        guest, request.user,
        guest_name=v.get('guestName'),
        guest_phone=v.get('guestPhone'),
        relationship=v.get('relationshipToPatient'),
        pass_type=v.get('guestType'),
        visit_date=v.get('visitDate'),
        purpose=v.get('visitPurpose'),
    )
    return Response({'ok': True, 'guest': passes.format_guest(guest), 'message': 'Guest updated successfully'})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPatientOrBystander])
def my_guest_arrivals(request):
    session = active_session_for(request.user)
    if session is None:
        return Response({'ok': True, 'arrivals': [], 'count': 0, 'message': 'No active session'})
    logs = (
        GuestLog.objects.select_related('guest', 'security')
        .filter(session=session)
        .order_by('-entry_time', '-id')
    )
    arrivals = []
    for log in logs:
        arrivals.append({
            'id': log.id,
            'guestId': log.guest_id,
            'guestName': log.guest.guest_name,
            'guestPhone': log.guest.guest_phone,
            'relationship': log.guest.relationship_to_patient,
            'checkInTime': log.entry_time.isoformat(),
            'checkOutTime': log.exit_time.isoformat() if log.exit_time else None,
            'currentlyInside': log.currently_inside,
            'accessGranted': log.access_granted,
            'accessDeniedReason': log.access_denied_reason,
            'verifiedBy': log.security.get_full_name() if log.security_id else None,
            'verificationStatus': 'approved' if log.access_granted else 'rejected',
            'notes': log.notes,
        })
    return Response({'ok': True, 'arrivals': arrivals, 'count': len(arrivals)})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPatientOrBystander])
def my_visiting_hours(request):
    session = active_session_for(request.user)
    if session is None:
        return Response({'ok': True, 'visitingHours': [], 'count': 0, 'message': 'No active session'})
    base = VisitingHours.objects.filter(hospital_id=session.hospital_id, is_active=True)
    hours = base.filter(wing_id=session.wing_id)
    if not hours.exists():
        # fall back to the hospital-wide windows
        hours = base.filter(Q(wing__isnull=True))
    rows = [
        {
            'id': vh.id,
            'wingId': vh.wing_id,
            'dayOfWeek': vh.day_of_week,
            'startTime': vh.start_time.strftime('%H:%M'),
            'endTime': vh.end_time.strftime('%H:%M'),
        }
        for vh in hours.order_by('day_of_week', 'start_time')
    ]
    return Response({'ok': True, 'visitingHours': rows, 'count': len(rows)})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def register_device_token(request):
    s = DeviceTokenSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    token, created = DeviceToken.objects.update_or_create(
        user=request.user,
        device_token=v['deviceToken'],
        defaults={'platform': v.get('platform') or '', 'device_model': v.get('deviceModel') or ''},
    )
    if created:
        log_action(user=request.user, action='device_token_register', object_type='device_token',
                   object_id=token.id, detail={'platform': token.platform})
    return Response({'ok': True, 'id': token.id, 'created': created}, status=201 if created else 200)
