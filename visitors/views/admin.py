"""
Hospital admin endpoints: admissions, discharges and the pass
approval queue.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from visitors.models import Guest, HospitalWing, PatientSession, Room, User
from visitors.permissions import IsHospitalAdmin
from visitors.serializers.sessions import AdmitSerializer
from visitors.services import passes, sessions


def _hospital_filter(user) -> dict:
    """Super admins see every hospital; admins only their own."""
    if user.role == User.ROLE_SUPER_ADMIN:
        return {}
    return {'hospital_id': user.hospital_id}


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsHospitalAdmin])
def admit(request):
    s = AdmitSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    scoped = _hospital_filter(request.user)
    wing = HospitalWing.objects.filter(id=v['wingId'], is_active=True, deleted_at__isnull=True, **scoped).first()
    if wing is None:
        raise NotFound('Wing not found')
    room = Room.objects.filter(id=v['roomId'], deleted_at__isnull=True).first()
    if room is None:
        raise NotFound('Room not found')
    patient = User.objects.filter(id=v['patientId'], role=User.ROLE_PATIENT, hospital_id=wing.hospital_id).first()
    if patient is None:
        raise ValidationError({'patientId': 'Patient not found in this hospital'})
    session = sessions.admit_patient(
        request.user, patient, wing, room,
        admission_type=v['admissionType'], notes=v.get('notes') or '',
    )
    return Response({'ok': True, 'session': sessions.format_session(session)}, status=201)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsHospitalAdmin])
def discharge(request, session_id: int):
    session = PatientSession.objects.filter(id=session_id, **_hospital_filter(request.user)).first()
    if session is None:
        raise NotFound('Session not found')
    session = sessions.discharge_session(request.user, session)
    return Response({'ok': True, 'session': sessions.format_session(session)})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsHospitalAdmin])
def pending_guests(request):
    qs = (
        Guest.objects.filter(status=Guest.STATUS_PENDING, is_active=True, **_hospital_filter(request.user))
        .order_by('created_at')
    )
    rows = [passes.format_guest(g) for g in qs]
    return Response({'ok': True, 'guests': rows, 'count': len(rows)})


def _scoped_guest(request, guest_id: int) -> Guest:
    guest = Guest.objects.filter(id=guest_id, **_hospital_filter(request.user)).first()
    if guest is None:
        raise NotFound('Guest not found')
    return guest


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsHospitalAdmin])
def approve_guest(request, guest_id: int):
    guest = passes.approve_pass(_scoped_guest(request, guest_id), request.user)
    return Response({'ok': True, 'guest': passes.format_guest(guest)})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsHospitalAdmin])
def reject_guest(request, guest_id: int):
    guest = passes.reject_pass(_scoped_guest(request, guest_id), request.user)
    return Response({'ok': True, 'guest': passes.format_guest(guest)})
