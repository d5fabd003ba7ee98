"""
Guest entry/exit log recorder.

A guest's physical presence is a projection over :class:`GuestLog`: the
guest is inside exactly when one of its rows has ``currently_inside``
set.  A conditional unique constraint keeps that row single; the
recorder turns constraint violations and empty checkout updates into
:class:`~visitors.exceptions.AccessConflict` errors.
"""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from django.db import IntegrityError, transaction
from django.db.models import QuerySet
from django.utils import timezone

from visitors.exceptions import AlreadyInside, NoOpenLog
from visitors.models import Guest, GuestLog, PatientSession, QrScan
from visitors.services.policy import AccessScope

INSIDE = 'INSIDE'
OUTSIDE = 'OUTSIDE'


def _actor_fields(scope: AccessScope) -> dict:
    if scope.is_security:
        return {'security_id': scope.actor_id}
    return {'nurse_id': scope.actor_id}


def open_log(guest: Guest) -> Optional[GuestLog]:
    return GuestLog.objects.filter(guest=guest, currently_inside=True).first()


def is_currently_inside(guest: Guest) -> bool:
    return GuestLog.objects.filter(guest=guest, currently_inside=True).exists()


def presence_state(guest: Guest) -> str:
    return INSIDE if is_currently_inside(guest) else OUTSIDE


def record_check_in(guest: Guest, session: PatientSession, scope: AccessScope, *,
                    now: datetime, notes: Optional[str] = None) -> GuestLog:
    try:
        with transaction.atomic():
            return GuestLog.objects.create(
                guest=guest,
                session=session,
                entry_time=now,
                exit_time=None,
                currently_inside=True,
                access_granted=True,
                notes=notes or None,
                **_actor_fields(scope),
            )
    except IntegrityError as exc:
        raise AlreadyInside(f'guest {guest.id} already has an open visit') from exc


def record_check_out(guest: Guest, scope: AccessScope, *, now: datetime,
                     notes: Optional[str] = None) -> GuestLog:
    log = open_log(guest)
    if log is None:
        raise NoOpenLog(f'guest {guest.id} has no open visit')
    if notes:
        notes = f'{log.notes} | {notes}' if log.notes else notes
    else:
        notes = log.notes
    # conditional update: a concurrent checkout of the same row updates nothing
    updated = GuestLog.objects.filter(pk=log.pk, currently_inside=True).update(
        exit_time=now, currently_inside=False, notes=notes,
    )
    if not updated:
        raise NoOpenLog(f'guest {guest.id} was checked out concurrently')
    log.refresh_from_db()
    return log


def record_denial(guest: Guest, session: PatientSession, scope: AccessScope, reason: str, *,
                  now: datetime, notes: Optional[str] = None) -> GuestLog:
    return GuestLog.objects.create(
        guest=guest,
        session=session,
        entry_time=now,
        exit_time=now,
        currently_inside=False,
        access_granted=False,
        access_denied_reason=reason,
        notes=notes or None,
        **_actor_fields(scope),
    )


def record_scan(guest: Guest, scope: AccessScope, *, now: datetime, granted: bool,
                access_reason: Optional[str] = None, denial_reason: Optional[str] = None,
                device_info: Optional[str] = None, ip_address: Optional[str] = None) -> QrScan:
    return QrScan.objects.create(
        guest=guest,
        security_id=scope.actor_id,
        hospital_id=guest.hospital_id,
        scanned_at=now,
        access_granted=granted,
        access_reason=access_reason,
        denial_reason=denial_reason,
        device_info=(device_info or '')[:255] or None,
        ip_address=ip_address,
    )


def logs_for_security(scope: AccessScope, *, days: int = 7, guest_id: Optional[int] = None,
                      now: Optional[datetime] = None) -> QuerySet:
    since = (now or timezone.now()) - timedelta(days=days)
    qs = GuestLog.objects.filter(security_id=scope.actor_id, entry_time__gte=since)
    if guest_id:
        qs = qs.filter(guest_id=guest_id)
    return qs.select_related('guest', 'session__patient').order_by('-entry_time', '-id')


def format_log(log: GuestLog) -> dict:
    return {
        'logId': log.id,
        'guestId': log.guest_id,
        'guestName': log.guest.guest_name if log.guest_id else None,
        'sessionId': log.session_id,
        'securityId': log.security_id,
        'nurseId': log.nurse_id,
        'entryTime': log.entry_time.isoformat() if log.entry_time else None,
        'exitTime': log.exit_time.isoformat() if log.exit_time else None,
        'currentlyInside': log.currently_inside,
        'accessGranted': log.access_granted,
        'accessDeniedReason': log.access_denied_reason,
        'notes': log.notes,
    }
