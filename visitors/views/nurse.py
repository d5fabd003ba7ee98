"""
Nurse endpoints.

A nurse manages the guests of patients whose rooms belong to the
nurse's nursing section.
"""
from __future__ import annotations

import logging

from django.db import transaction
from django.db.models import Count, Exists, OuterRef, Q
from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound, PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from visitors.exceptions import NoOpenLog
from visitors.models import Guest, GuestLog, PatientSession, Room
from visitors.permissions import IsNurse
from visitors.serializers.guests import (
    CompleteSessionSerializer,
    GuestAccessSerializer,
    GuestUpdateSerializer,
    NurseGuestCreateSerializer,
)
from visitors.services import access_log, passes
from visitors.services.access import request_access
from visitors.services.audit import log_action
from visitors.services.policy import AccessScope, scope_for_user

from .access import access_response

logger = logging.getLogger(__name__)


def _patient_name(session: PatientSession) -> str:
    return session.patient.get_full_name() or session.patient.username


def _reachable_guest(request, guest_id: int) -> Guest:
    scope = scope_for_user(request.user)
    guest = (
        Guest.objects.select_related('session__patient', 'session__room')
        .filter(id=guest_id, hospital_id=scope.hospital_id)
        .first()
    )
    if guest is None:
        raise NotFound('Guest not found')
    if not scope.reaches(guest.session):
        raise PermissionDenied('Access denied')
    return guest


def _section_rooms(scope: AccessScope) -> list[dict]:
    """Rooms of the nurse's section with their active session and guest counts."""
    rooms = (
        Room.objects.select_related('wing')
        .filter(id__in=scope.room_ids, wing__hospital_id=scope.hospital_id, is_active=True,
                deleted_at__isnull=True)
        .order_by('room_number')
    )
    sessions = {
        s.room_id: s
        for s in PatientSession.objects.select_related('patient').filter(
            room_id__in=scope.room_ids, hospital_id=scope.hospital_id, status=PatientSession.STATUS_ACTIVE,
        )
    }
    session_ids = [s.id for s in sessions.values()]
    active = dict(
        Guest.objects.filter(session_id__in=session_ids, is_active=True, status=Guest.STATUS_APPROVED)
        .values('session_id').annotate(n=Count('id')).values_list('session_id', 'n')
    )
    inside = dict(
        GuestLog.objects.filter(session_id__in=session_ids, currently_inside=True)
        .values('session_id').annotate(n=Count('id')).values_list('session_id', 'n')
    )
    rows = []
    for room in rooms:
        session = sessions.get(room.id)
        rows.append({
            'roomId': room.id,
            'roomNumber': room.room_number,
            'roomType': room.room_type,
            'roomStatus': room.status,
            'wingId': room.wing_id,
            'wingName': room.wing.wing_name,
            'sessionId': session.id if session else None,
            'patientId': session.patient_id if session else None,
            'patientName': _patient_name(session) if session else None,
            'patientMobile': session.patient.mobile_number if session else None,
            'activeGuests': active.get(session.id, 0) if session else 0,
            'guestsInside': inside.get(session.id, 0) if session else 0,
        })
    return rows


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsNurse])
def nurse_guests(request):
    """Active guests of active sessions in the nurse's rooms, with presence."""
    scope = scope_for_user(request.user)
    qs = (
        Guest.objects.select_related('session__patient', 'session__room')
        .filter(
            hospital_id=scope.hospital_id,
            session__room_id__in=scope.room_ids,
            session__status=PatientSession.STATUS_ACTIVE,
            is_active=True,
        )
        .order_by('-created_at')
    )
    inside_ids = set(
        GuestLog.objects.filter(guest__in=qs, currently_inside=True).values_list('guest_id', flat=True)
    )
    rows = []
    for guest in qs:
        data = passes.format_guest(guest)
        data.update({
            'patientId': guest.session.patient_id,
            'patientName': _patient_name(guest.session),
            'roomNumber': guest.session.room.room_number,
            'isCurrentlyInside': guest.id in inside_ids,
        })
        rows.append(data)
    return Response({'ok': True, 'guests': rows, 'count': len(rows)})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsNurse])
def nurse_create_guest(request):
    s = NurseGuestCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    scope = scope_for_user(request.user)
    session = PatientSession.objects.filter(id=v['sessionId'], hospital_id=scope.hospital_id).first()
    if session is None:
        raise NotFound('Patient session not found')
    if not scope.reaches(session):
        raise PermissionDenied('You cannot manage guests for this room')
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
    return Response({'ok': True, 'guest': passes.format_guest(guest)}, status=201)

nurse_create_guest.cls.throttle_scope = 'guest_write'


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated, IsNurse])
def nurse_guest_detail(request, guest_id: int):
    guest = _reachable_guest(request, guest_id)
    if request.method == 'PUT':
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

    data = passes.format_guest(guest)
    data.update({
        'patientId': guest.session.patient_id,
        'patientName': _patient_name(guest.session),
        'roomNumber': guest.session.room.room_number,
        'isCurrentlyInside': access_log.is_currently_inside(guest),
    })
    logs = guest.logs.select_related('guest').order_by('-entry_time', '-id')[:10]
    return Response({'ok': True, 'guest': data, 'recentLogs': [access_log.format_log(log) for log in logs]})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsNurse])
def nurse_guest_access(request):
    s = GuestAccessSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    result = request_access(scope_for_user(request.user), v['guestId'], v['action'], notes=v.get('notes'))
    return access_response(result)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsNurse])
def nurse_complete_session(request):
    """End the visit of one guest, or of every guest of a session.

    Guests still inside are checked out, including those whose pass was
    deactivated while they were in, and active passes are expired.
    """
    s = CompleteSessionSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    scope = scope_for_user(request.user)
    now = timezone.now()

    inside = GuestLog.objects.filter(guest=OuterRef('pk'), currently_inside=True)
    qs = (
        Guest.objects.select_related('session')
        .annotate(inside=Exists(inside))
        .filter(Q(is_active=True) | Q(inside=True), hospital_id=scope.hospital_id)
    )
    if v.get('guestId'):
        qs = qs.filter(id=v['guestId'])
    else:
        qs = qs.filter(session_id=v['sessionId'])
    guests = list(qs)
    if not guests:
        raise NotFound('No active guest found')
    if any(not scope.reaches(g.session) for g in guests):
        raise PermissionDenied('You cannot manage guests for this room')

    completed = []
    with transaction.atomic():
        for guest in guests:
            checked_out = False
            if guest.inside:
                try:
                    access_log.record_check_out(guest, scope, now=now, notes='Visit completed by nurse')
                    checked_out = True
                except NoOpenLog as exc:
                    logger.info('Guest %s was checked out concurrently: %s', guest.id, exc)
            if guest.is_active:
                passes.expire_pass(guest, request.user)
            completed.append({'guestId': guest.id, 'checkedOut': checked_out})
    log_action(user=request.user, action='guest_complete_session', object_type='session',
               object_id=guests[0].session_id, detail={'guests': completed})
    return Response({'ok': True, 'completed': completed, 'count': len(completed)})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsNurse])
def nurse_rooms(request):
    """Rooms of the section; ``filter`` is ``with-session`` or ``with-guests``."""
    rows = _section_rooms(scope_for_user(request.user))
    total = len(rows)
    f = request.query_params.get('filter')
    if f == 'with-session':
        rows = [r for r in rows if r['sessionId']]
    elif f == 'with-guests':
        rows = [r for r in rows if r['activeGuests']]
    return Response({'ok': True, 'rooms': rows, 'count': len(rows), 'totalRooms': total})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsNurse])
def nurse_room_detail(request, room_id: int):
    scope = scope_for_user(request.user)
    if room_id not in scope.room_ids:
        raise PermissionDenied('Access denied to this room')
    room = Room.objects.select_related('wing').filter(id=room_id, wing__hospital_id=scope.hospital_id).first()
    if room is None:
        raise NotFound('Room not found')
    data = {
        'roomId': room.id,
        'roomNumber': room.room_number,
        'roomType': room.room_type,
        'wingId': room.wing_id,
        'wingName': room.wing.wing_name,
    }
    session = (
        PatientSession.objects.select_related('patient')
        .filter(room=room, status=PatientSession.STATUS_ACTIVE)
        .first()
    )
    if session is None:
        return Response({'ok': True, 'room': data, 'guests': [], 'guestLogs': [],
                         'message': 'No active session in this room'})
    data.update({
        'sessionId': session.id,
        'sessionStartDate': session.start_date.isoformat(),
        'patientId': session.patient_id,
        'patientName': _patient_name(session),
        'patientMobile': session.patient.mobile_number,
    })
    guests = Guest.objects.filter(session=session).order_by('-created_at')
    logs = GuestLog.objects.select_related('guest').filter(session=session).order_by('-entry_time', '-id')[:20]
    return Response({
        'ok': True,
        'room': data,
        'guests': [passes.format_guest(g) for g in guests],
        'guestLogs': [access_log.format_log(log) for log in logs],
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsNurse])
def nurse_assigned_patients(request):
    """Patients with an active session in one of the section's rooms."""
    scope = scope_for_user(request.user)
    sessions = (
        PatientSession.objects.select_related('patient', 'room', 'wing')
        .filter(room_id__in=scope.room_ids, hospital_id=scope.hospital_id, status=PatientSession.STATUS_ACTIVE)
        .order_by('start_date')
    )
    rows = [
        {
            'sessionId': s.id,
            'sessionStartDate': s.start_date.isoformat(),
            'admissionType': s.admission_type,
            'patientId': s.patient_id,
            'patientName': _patient_name(s),
            'patientMobile': s.patient.mobile_number,
            'roomId': s.room_id,
            'roomNumber': s.room.room_number,
            'wingId': s.wing_id,
            'wingName': s.wing.wing_name,
        }
        for s in sessions
    ]
    return Response({'ok': True, 'patients': rows, 'count': len(rows)})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsNurse])
def nurse_dashboard(request):
    rows = _section_rooms(scope_for_user(request.user))
    occupied = [r for r in rows if r['sessionId']]
    return Response({
        'ok': True,
        'stats': {
            'totalRoomsInSection': len(rows),
            'roomsWithActiveSessions': len(occupied),
            'roomsWithActiveGuests': sum(1 for r in occupied if r['activeGuests']),
            'totalActiveGuests': sum(r['activeGuests'] for r in occupied),
            'totalGuestsInside': sum(r['guestsInside'] for r in occupied),
        },
        'rooms': occupied,
        'currentTime': timezone.now().isoformat(),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsNurse])
def nurse_profile(request):
    user = request.user
    section = user.section
    return Response({'ok': True, 'profile': {
        'id': user.id,
        'username': user.username,
        'name': user.get_full_name() or user.username,
        'email': user.email,
        'mobileNumber': user.mobile_number,
        'employeeId': user.employee_id,
        'shiftTiming': user.shift_timing,
        'hospitalId': user.hospital_id,
        'hospitalName': user.hospital.name if user.hospital_id else None,
        'sectionId': section.id,
        'sectionName': section.section_name,
        'wingId': section.wing_id,
        'wingName': section.wing.wing_name if section.wing_id else None,
    }})
