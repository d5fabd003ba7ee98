"""
Guest pass lifecycle: issuing, approving, editing, revoking and scan
quota consumption.
"""
from __future__ import annotations

import logging
import secrets
from datetime import date, datetime, time, timedelta
from typing import Optional

from django.conf import settings
from django.db import transaction
from django.db.models import F
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from visitors.exceptions import GuestLimitReached, PassNotEditable, SessionNotActiveError
from visitors.models import Guest, GuestLog, PatientSession, User
from visitors.services.audit import log_action

logger = logging.getLogger(__name__)


def generate_qr_code(now: Optional[datetime] = None) -> str:
    """Millisecond timestamp plus a random suffix; retried until unused."""
    now = now or timezone.now()
    while True:
        code = f"QR{int(now.timestamp() * 1000)}{secrets.token_hex(5).upper()}"
        if not Guest.objects.filter(qr_code=code).exists():
            return code


def validity_window(pass_type: str, *, visit_date: Optional[date], now: datetime) -> tuple[datetime, datetime]:
    if pass_type == Guest.TYPE_ONE_TIME:
        tz = timezone.get_current_timezone()
        return (
            timezone.make_aware(datetime.combine(visit_date, time(0, 0, 0)), tz),
            timezone.make_aware(datetime.combine(visit_date, time(23, 59, 59)), tz),
        )
    return now, now + timedelta(days=settings.FREQUENT_PASS_VALID_DAYS)


def active_pass_count(session: PatientSession) -> int:
    return Guest.objects.filter(session=session, is_active=True, status=Guest.STATUS_APPROVED).count()


def _ensure_below_cap(session: PatientSession) -> None:
    if active_pass_count(session) >= settings.MAX_ACTIVE_GUEST_PASSES:
        raise GuestLimitReached(
            f'Maximum {settings.MAX_ACTIVE_GUEST_PASSES} active guest passes allowed for this patient'
        )


@transaction.atomic
def issue_guest_pass(
    session: PatientSession,
    *,
    created_by: User,
    guest_name: str,
    guest_phone: str,
    pass_type: str = Guest.TYPE_ONE_TIME,
    relationship: Optional[str] = None,
    visit_date: Optional[date] = None,
    purpose: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Guest:
    """Create a pass for ``session``.

    One-time passes cover the whole local calendar day of ``visit_date``
    and allow two scans (entry and exit); frequent passes run for
    ``FREQUENT_PASS_VALID_DAYS`` with unlimited scans.  The session row
    is locked while the active pass cap is checked.
    """
    now = now or timezone.now()
    session = PatientSession.objects.select_for_update().get(pk=session.pk)
    if session.status != PatientSession.STATUS_ACTIVE:
        raise SessionNotActiveError()
    if pass_type == Guest.TYPE_ONE_TIME and not visit_date:
        raise ValidationError({'visitDate': 'Visit date is required for one-time visits'})

    auto_approve = settings.GUEST_PASS_AUTO_APPROVE
    # only approved passes count towards the cap
    if auto_approve:
        _ensure_below_cap(session)

    valid_from, valid_until = validity_window(pass_type, visit_date=visit_date, now=now)
    guest = Guest.objects.create(
        created_by=created_by,
        hospital_id=session.hospital_id,
        session=session,
        guest_name=guest_name,
        guest_phone=guest_phone,
        relationship_to_patient=relationship or None,
        guest_type=pass_type,
        valid_from=valid_from,
        valid_until=valid_until,
        qr_code=generate_qr_code(now),
        qr_expires_at=valid_until,
        qr_scan_limit=settings.ONE_TIME_PASS_SCAN_LIMIT if pass_type == Guest.TYPE_ONE_TIME else None,
        qr_scans_used=0,
        purpose=purpose or None,
        status=Guest.STATUS_APPROVED if auto_approve else Guest.STATUS_PENDING,
        approved_at=now if auto_approve else None,
        is_active=True,
    )
    log_action(user=created_by, action='guest_create', object_type='guest', object_id=guest.id,
               detail={'sessionId': session.id, 'type': pass_type, 'status': guest.status})
    logger.info('Issued %s guest pass %s for session %s (%s)', pass_type, guest.id, session.id, guest.status)
    return guest


@transaction.atomic
def approve_pass(guest: Guest, admin: User, *, now: Optional[datetime] = None) -> Guest:
    session = PatientSession.objects.select_for_update().get(pk=guest.session_id)
    guest = Guest.objects.select_for_update().get(pk=guest.pk)
    if guest.status != Guest.STATUS_PENDING:
        raise PassNotEditable('Only pending guest passes can be approved')
    if session.status != PatientSession.STATUS_ACTIVE:
        raise SessionNotActiveError()
    _ensure_below_cap(session)
    guest.status = Guest.STATUS_APPROVED
    guest.approved_by = admin
    guest.approved_at = now or timezone.now()
    guest.save(update_fields=['status', 'approved_by', 'approved_at', 'updated_at'])
    log_action(user=admin, action='guest_approve', object_type='guest', object_id=guest.id)
    return guest


@transaction.atomic
def reject_pass(guest: Guest, admin: User) -> Guest:
    guest = Guest.objects.select_for_update().get(pk=guest.pk)
    if guest.status != Guest.STATUS_PENDING:
        raise PassNotEditable('Only pending guest passes can be rejected')
    guest.status = Guest.STATUS_REJECTED
    guest.is_active = False
    guest.approved_by = admin
    guest.save(update_fields=['status', 'is_active', 'approved_by', 'updated_at'])
    log_action(user=admin, action='guest_reject', object_type='guest', object_id=guest.id)
    return guest


def consume_scan(guest: Guest) -> bool:
    """Use one scan of a limited pass.

    A single conditional UPDATE, so two concurrent check-ins can never
    push ``qr_scans_used`` past ``qr_scan_limit``.  Returns False when the
    quota is exhausted; unlimited passes always return True.
    """
    if guest.qr_scan_limit is None:
        return True
    updated = Guest.objects.filter(
        pk=guest.pk,
        qr_scan_limit__isnull=False,
        qr_scans_used__lt=F('qr_scan_limit'),
    ).update(qr_scans_used=F('qr_scans_used') + 1, updated_at=timezone.now())
    if updated:
        guest.refresh_from_db(fields=['qr_scans_used'])
    return bool(updated)


def update_pass(guest: Guest, user: User, *, guest_name=None, guest_phone=None, relationship=None,
                pass_type=None, visit_date=None, purpose=None, now=None) -> Guest:
    if guest.status in (Guest.STATUS_EXPIRED, Guest.STATUS_REVOKED):
        raise PassNotEditable()
    fields = ['updated_at']
    if guest_name:
        guest.guest_name = guest_name
        fields.append('guest_name')
    if guest_phone:
        guest.guest_phone = guest_phone
        fields.append('guest_phone')
    if relationship is not None:
        guest.relationship_to_patient = relationship or None
        fields.append('relationship_to_patient')
    if purpose is not None:
        guest.purpose = purpose or None
        fields.append('purpose')
    became_frequent = pass_type == Guest.TYPE_FREQUENT and guest.guest_type != Guest.TYPE_FREQUENT
    if pass_type:
        guest.guest_type = pass_type
        fields.append('guest_type')
    if became_frequent:
        valid_from, valid_until = validity_window(pass_type, visit_date=None, now=now or timezone.now())
        guest.valid_from = valid_from
        guest.valid_until = valid_until
        guest.qr_expires_at = valid_until
        guest.qr_scan_limit = None
        fields += ['valid_from', 'valid_until', 'qr_expires_at', 'qr_scan_limit']
    elif pass_type == Guest.TYPE_ONE_TIME and visit_date:
        valid_from, valid_until = validity_window(pass_type, visit_date=visit_date, now=now or timezone.now())
        guest.valid_from = valid_from
        guest.valid_until = valid_until
        guest.qr_expires_at = valid_until
        guest.qr_scan_limit = max(settings.ONE_TIME_PASS_SCAN_LIMIT, guest.qr_scans_used)
        fields += ['valid_from', 'valid_until', 'qr_expires_at', 'qr_scan_limit']
    guest.save(update_fields=fields)
    log_action(user=user, action='guest_update', object_type='guest', object_id=guest.id,
               detail={'fields': fields[1:]})
    return guest


@transaction.atomic
def revoke_pass(guest: Guest, user: User, *, now: Optional[datetime] = None) -> Guest:
    """Revoke a pass; a guest still inside is checked out at ``now``."""
    now = now or timezone.now()
    guest = Guest.objects.select_for_update().get(pk=guest.pk)
    closed = GuestLog.objects.filter(guest=guest, currently_inside=True).update(
        exit_time=now, currently_inside=False,
    )
    guest.status = Guest.STATUS_REVOKED
    guest.is_active = False
    guest.save(update_fields=['status', 'is_active', 'updated_at'])
    log_action(user=user, action='guest_revoke', object_type='guest', object_id=guest.id,
               detail={'guestCheckedOut': bool(closed)})
    return guest


def expire_pass(guest: Guest, user: Optional[User] = None) -> Guest:
    guest.status = Guest.STATUS_EXPIRED
    guest.is_active = False
    guest.save(update_fields=['status', 'is_active', 'updated_at'])
    log_action(user=user, action='guest_expire', object_type='guest', object_id=guest.id)
    return guest


def format_guest(guest: Guest) -> dict:
    return {
        'id': guest.id,
        'sessionId': guest.session_id,
        'hospitalId': guest.hospital_id,
        'guestName': guest.guest_name,
        'guestPhone': guest.guest_phone,
        'relationshipToPatient': guest.relationship_to_patient,
        'guestType': guest.guest_type,
        'validFrom': guest.valid_from.isoformat(),
        'validUntil': guest.valid_until.isoformat(),
        'qrCode': guest.qr_code,
        'qrScanLimit': guest.qr_scan_limit,
        'qrScansUsed': guest.qr_scans_used,
        'purpose': guest.purpose,
        'status': guest.status,
        'approvedAt': guest.approved_at.isoformat() if guest.approved_at else None,
        'isActive': guest.is_active,
        'createdAt': guest.created_at.isoformat() if guest.created_at else None,
    }
