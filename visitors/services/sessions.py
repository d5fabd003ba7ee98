"""
Patient admission and discharge.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from django.db import IntegrityError, transaction
from django.utils import timezone

from visitors.exceptions import ActiveSessionExists, RoomNotAvailable, SessionNotActiveError
from visitors.models import Guest, GuestLog, HospitalWing, PatientSession, Room, User
from visitors.services.audit import log_action

logger = logging.getLogger(__name__)


@transaction.atomic
def admit_patient(admin: User, patient: User, wing: HospitalWing, room: Room, *,
                  admission_type: str = 'planned', notes: str = '',
                  now: Optional[datetime] = None) -> PatientSession:
    """Open a session for ``patient`` in ``room`` and mark the room occupied."""
    now = now or timezone.now()
    room = Room.objects.select_for_update().get(pk=room.pk)
    if room.wing_id != wing.id or not room.is_active or room.status != Room.STATUS_AVAILABLE:
        raise RoomNotAvailable()
    if PatientSession.objects.filter(patient=patient, status=PatientSession.STATUS_ACTIVE).exists():
        raise ActiveSessionExists()
    try:
        with transaction.atomic():
            session = PatientSession.objects.create(
                patient=patient,
                hospital_id=wing.hospital_id,
                wing=wing,
                room=room,
                admitted_by=admin,
                start_date=now,
                admission_type=admission_type,
                status=PatientSession.STATUS_ACTIVE,
                notes=notes or '',
            )
    except IntegrityError as exc:
        # concurrent admission of the same patient
        raise ActiveSessionExists() from exc
    room.status = Room.STATUS_OCCUPIED
    room.save(update_fields=['status', 'updated_at'])
    log_action(user=admin, action='session_admit', object_type='session', object_id=session.id,
               detail={'patientId': patient.id, 'roomId': room.id})
    logger.info('Admitted patient %s to room %s (session %s)', patient.id, room.id, session.id)
    return session


@transaction.atomic
def discharge_session(admin: User, session: PatientSession, *, now: Optional[datetime] = None) -> PatientSession:
    """Close an active session.

    The room becomes available again, every active pass of the session is
    expired and any guest still inside is checked out at ``now``.
    """
    now = now or timezone.now()
    session = PatientSession.objects.select_for_update().get(pk=session.pk)
    if session.status != PatientSession.STATUS_ACTIVE:
        raise SessionNotActiveError()

    closed = GuestLog.objects.filter(session=session, currently_inside=True).update(
        exit_time=now, currently_inside=False,
    )
    expired = Guest.objects.filter(session=session, is_active=True).update(
        status=Guest.STATUS_EXPIRED, is_active=False, updated_at=now,
    )
    session.status = PatientSession.STATUS_DISCHARGED
    session.end_date = now
    session.discharged_by = admin
    session.save(update_fields=['status', 'end_date', 'discharged_by', 'updated_at'])
    Room.objects.filter(pk=session.room_id).update(status=Room.STATUS_AVAILABLE, updated_at=now)

    log_action(user=admin, action='session_discharge', object_type='session', object_id=session.id,
               detail={'passesExpired': expired, 'guestsCheckedOut': closed})
    logger.info('Discharged session %s: %s passes expired, %s guests checked out', session.id, expired, closed)
    return session


def active_session_for(patient: User) -> Optional[PatientSession]:
    return (
        PatientSession.objects.select_related('wing', 'room')
        .filter(patient=patient, status=PatientSession.STATUS_ACTIVE)
        .first()
    )


def format_session(session: PatientSession) -> dict:
    return {
        'id': session.id,
        'patientId': session.patient_id,
        'hospitalId': session.hospital_id,
        'wingId': session.wing_id,
        'roomId': session.room_id,
        'status': session.status,
        'admissionType': session.admission_type,
        'startDate': session.start_date.isoformat(),
        'endDate': session.end_date.isoformat() if session.end_date else None,
    }
