"""
Guest check-in / check-out workflow.

``request_access`` runs the whole read, decide and write sequence for
one access attempt inside a single transaction: the guest row is locked,
the policy is evaluated, and then either the quota is consumed and the
visit log opened or closed, or a denial row is written.  Security
officers additionally leave a :class:`QrScan` for every attempt.  A
failure anywhere rolls everything back, so no orphaned log row or stale
quota increment survives a fault.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, time
from typing import Any, Optional

from django.conf import settings
from django.db import transaction
from django.db.models import Q
from django.utils import timezone
from rest_framework.exceptions import NotFound, ValidationError

from visitors.exceptions import AccessConflict, ScanQuotaExhausted
from visitors.models import Guest, GuestLog, PatientSession, VisitingHours
from visitors.services import access_log, passes
from visitors.services.policy import (
    ACTIONS,
    CHECK_IN,
    CHECK_OUT,
    AccessDecision,
    AccessScope,
    DenialReason,
    evaluate_access,
    within_visiting_hours,
)

logger = logging.getLogger(__name__)


@dataclass
class ScanContext:
    device_info: Optional[str] = None
    ip_address: Optional[str] = None


@dataclass
class AccessResult:
    action: str
    granted: bool
    reason: Optional[str]
    log_id: Optional[int]
    timestamp: datetime
    guest: Guest
    scan_id: Optional[int] = None

    @property
    def message(self) -> str:
        if self.granted:
            return 'Guest checked out successfully' if self.action == CHECK_OUT else 'Access granted - guest checked in'
        return DenialReason.message(self.reason)

    def as_payload(self) -> dict:
        return {
            'ok': self.granted,
            'granted': self.granted,
            'action': self.action,
            'isCheckout': self.action == CHECK_OUT,
            'reason': self.reason,
            'message': self.message,
            'logId': self.log_id,
            'guestId': self.guest.id,
            'timestamp': self.timestamp.isoformat(),
        }


def normalize_qr_payload(qr_code: Any = None, qr_data: Any = None) -> str:
    """Extract the pass token from a raw token, a JSON string or an object with ``qrCode``."""
    if qr_data:
        try:
            parsed = json.loads(qr_data) if isinstance(qr_data, str) else qr_data
        except ValueError:
            raise ValidationError({'qrData': 'Invalid QR data format'})
        token = parsed.get('qrCode') if isinstance(parsed, dict) else None
        if token:
            return str(token)
    if isinstance(qr_code, dict):
        token = qr_code.get('qrCode')
    elif isinstance(qr_code, str) and qr_code.strip().startswith('{'):
        try:
            token = (json.loads(qr_code) or {}).get('qrCode')
        except (ValueError, AttributeError):
            raise ValidationError({'qrCode': 'Invalid QR code format'})
    else:
        token = qr_code
    if not token or not isinstance(token, str):
        raise ValidationError({'qrCode': 'QR code not found in request'})
    return token.strip()


def find_guest_by_qr(scope: AccessScope, qr_code: str) -> Guest:
    guest = (
        Guest.objects.select_related('session__patient', 'session__room', 'session__wing')
        .filter(qr_code=qr_code, hospital_id=scope.hospital_id)
        .first()
    )
    if guest is None:
        raise NotFound('Guest pass not found')
    return guest


def visiting_windows_for(session: Optional[PatientSession], now: datetime) -> Optional[list[tuple[time, time]]]:
    """Visiting windows that apply today, or None when visiting hours are not enforced."""
    if not settings.ENFORCE_VISITING_HOURS or session is None:
        return None
    day = timezone.localtime(now).strftime('%A').lower()
    rows = VisitingHours.objects.filter(
        Q(wing_id=session.wing_id) | Q(wing__isnull=True),
        Q(day_of_week=day) | Q(day_of_week__isnull=True),
        hospital_id=session.hospital_id,
        is_active=True,
    )
    return [(vh.start_time, vh.end_time) for vh in rows]


def resolve_action(guest: Guest) -> str:
    return CHECK_OUT if access_log.is_currently_inside(guest) else CHECK_IN


def _apply_grant(decision: AccessDecision, scope: AccessScope, *, now: datetime,
                 notes: Optional[str]) -> GuestLog:
    guest, session = decision.guest, decision.session
    if decision.action == CHECK_IN:
        with transaction.atomic():
            if not passes.consume_scan(guest):
                raise ScanQuotaExhausted(f'guest {guest.id} has no scans left')
            return access_log.record_check_in(guest, session, scope, now=now, notes=notes)
    return access_log.record_check_out(guest, scope, now=now, notes=notes)


def request_access(
    scope: AccessScope,
    guest_id: int,
    action: Optional[str] = None,
    *,
    scan: Optional[ScanContext] = None,
    notes: Optional[str] = None,
    now: Optional[datetime] = None,
) -> AccessResult:
    """Check a guest in or out on behalf of a nurse or security officer.

    ``action`` of None lets a security scan pick check-out when the guest
    is inside and check-in otherwise.  Every outcome is logged; denials
    are returned, not raised.  Only an unknown guest raises (404).
    """
    if action is not None and action not in ACTIONS:
        raise ValidationError({'action': 'Valid action (check-in/check-out) is required'})
    now = now or timezone.now()

    with transaction.atomic():
        guest = Guest.objects.select_for_update().filter(pk=guest_id, hospital_id=scope.hospital_id).first()
        if guest is None:
            raise NotFound('Guest not found')
        session = PatientSession.objects.filter(pk=guest.session_id).first()
        inside = access_log.is_currently_inside(guest)
        if action is None:
            action = CHECK_OUT if inside else CHECK_IN

        decision = evaluate_access(
            scope, guest, session, action,
            now=now,
            currently_inside=inside,
            visiting_windows=visiting_windows_for(session, now),
        )
        reason = decision.reason
        log = None
        if decision.granted:
            try:
                log = _apply_grant(decision, scope, now=now, notes=notes)
            except AccessConflict as exc:
                logger.warning('Access race on guest %s resolved as %s: %s', guest.id, exc.reason, exc)
                reason = exc.reason
        if reason is not None:
            log = access_log.record_denial(guest, guest.session, scope, reason, now=now, notes=notes)

        granted = reason is None
        scan_row = None
        if scope.is_security:
            scan = scan or ScanContext()
            scan_row = access_log.record_scan(
                guest, scope, now=now, granted=granted,
                access_reason=decision.message if granted else None,
                denial_reason=reason,
                device_info=scan.device_info,
                ip_address=scan.ip_address,
            )

    logger.info('Guest %s %s by %s %s: %s', guest.id, action, scope.role, scope.actor_id,
                'granted' if granted else reason)
    return AccessResult(
        action=action,
        granted=granted,
        reason=reason,
        log_id=log.id if log else None,
        timestamp=now,
        guest=guest,
        scan_id=scan_row.id if scan_row else None,
    )


def preview_access(scope: AccessScope, guest: Guest, *, now: Optional[datetime] = None) -> dict:
    """Read-only verification of a scanned pass; nothing is written."""
    now = now or timezone.now()
    session = guest.session
    inside = access_log.is_currently_inside(guest)
    action = CHECK_OUT if inside else CHECK_IN
    windows = visiting_windows_for(session, now)
    decision = evaluate_access(scope, guest, session, action, now=now, currently_inside=inside,
                               visiting_windows=windows)
    return {
        'ok': True,
        'verified': decision.granted,
        'accessGranted': decision.granted,
        'action': action,
        'reason': decision.reason,
        'message': decision.message,
        'isCurrentlyInside': inside,
        'validations': {
            'isApproved': guest.status == Guest.STATUS_APPROVED,
            'isActive': guest.is_active,
            'isSessionActive': bool(session and session.status == PatientSession.STATUS_ACTIVE),
            'isWithinValidPeriod': guest.valid_from <= now <= guest.valid_until,
            'hasScansRemaining': guest.has_scans_remaining,
            'isWithinVisitingHours': True if windows is None else within_visiting_hours(now, windows),
        },
        'guest': passes.format_guest(guest),
        'patient': {
            'id': session.patient_id,
            'name': session.patient.get_full_name() or session.patient.username,
            'mobile': session.patient.mobile_number,
        },
        'location': {
            'wingId': session.wing_id,
            'wingName': session.wing.wing_name,
            'roomId': session.room_id,
            'roomNumber': session.room.room_number,
        },
        'currentTime': now.isoformat(),
    }
