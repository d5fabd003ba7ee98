"""
Access policy for guest check-in and check-out.

``evaluate_access`` is a pure decision function: it receives the actor's
:class:`AccessScope`, the guest pass, its session and the presence state
already read by the caller, and returns an :class:`AccessDecision`.  It
never touches the database.  Denials are ordinary results carrying a
machine readable reason so the caller can log them.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, time
from typing import Iterable, Optional

from django.utils import timezone

from visitors.models import Guest, NursingSectionRoom, PatientSession, User

CHECK_IN = 'check-in'
CHECK_OUT = 'check-out'
ACTIONS = (CHECK_IN, CHECK_OUT)


class DenialReason:
    SESSION_NOT_ACTIVE = 'SessionNotActive'
    ACCESS_DENIED = 'AccessDenied'
    PASS_NOT_APPROVED = 'PassNotApproved'
    PASS_EXPIRED = 'PassExpiredOrNotYetValid'
    SCAN_LIMIT_EXCEEDED = 'ScanLimitExceeded'
    OUTSIDE_VISITING_HOURS = 'OutsideVisitingHours'
    ALREADY_INSIDE = 'AlreadyInside'
    NOT_INSIDE = 'NotInside'
    NO_OPEN_LOG = 'NoOpenLog'

    MESSAGES = {
        SESSION_NOT_ACTIVE: 'Patient session has ended or is not active',
        ACCESS_DENIED: 'You cannot manage guests for this room',
        PASS_NOT_APPROVED: 'Guest pass is not approved',
        PASS_EXPIRED: 'Guest pass is expired or not yet valid',
        SCAN_LIMIT_EXCEEDED: 'QR code scan limit exceeded',
        OUTSIDE_VISITING_HOURS: 'Outside visiting hours',
        ALREADY_INSIDE: 'Guest is already checked in',
        NOT_INSIDE: 'Guest is not currently checked in',
        NO_OPEN_LOG: 'No open visit found for this guest',
    }

    @classmethod
    def message(cls, reason: str) -> str:
        return cls.MESSAGES.get(reason, 'Access denied')


@dataclass(frozen=True)
class AccessScope:
    """What the calling staff member may reach.  Derived per request, never stored."""
    role: str
    actor_id: int
    hospital_id: Optional[int]
    section_id: Optional[int] = None
    room_ids: frozenset = field(default_factory=frozenset)
    wing_id: Optional[int] = None

    @property
    def is_nurse(self) -> bool:
        return self.role == User.ROLE_NURSE

    @property
    def is_security(self) -> bool:
        return self.role == User.ROLE_SECURITY

    def reaches(self, session: PatientSession) -> bool:
        if session.hospital_id != self.hospital_id:
            return False
        if self.is_nurse:
            return session.room_id in self.room_ids
        if self.is_security:
            return self.wing_id is None or session.wing_id == self.wing_id
        return False


def scope_for_user(user: User) -> AccessScope:
    """Build the access scope of a nurse or security officer."""
    room_ids: frozenset = frozenset()
    if user.role == User.ROLE_NURSE and user.section_id:
        room_ids = frozenset(
            NursingSectionRoom.objects.filter(section_id=user.section_id).values_list('room_id', flat=True)
        )
    return AccessScope(
        role=user.role,
        actor_id=user.id,
        hospital_id=user.hospital_id,
        section_id=user.section_id if user.role == User.ROLE_NURSE else None,
        room_ids=room_ids,
        wing_id=user.assigned_wing_id if user.role == User.ROLE_SECURITY else None,
    )


@dataclass
class AccessDecision:
    action: str
    granted: bool
    reason: Optional[str] = None
    guest: Optional[Guest] = None
    session: Optional[PatientSession] = None

    @property
    def message(self) -> str:
        if self.granted:
            return 'Guest checked out' if self.action == CHECK_OUT else 'Access granted - guest checked in'
        return DenialReason.message(self.reason)


def within_visiting_hours(now: datetime, windows: Iterable[tuple[time, time]]) -> bool:
    local = timezone.localtime(now).time()
    return any(start <= local <= end for start, end in windows)


def evaluate_access(
    scope: AccessScope,
    guest: Guest,
    session: Optional[PatientSession],
    action: str,
    *,
    now: datetime,
    currently_inside: bool,
    visiting_windows: Optional[list[tuple[time, time]]] = None,
) -> AccessDecision:
    """Decide whether ``action`` is allowed for ``guest`` right now.

    Checks run in a fixed order and stop at the first failure:
    session active, scope reaches the room, pass approved, validity
    window, scan quota (check-in only), visiting hours (check-in only,
    when ``visiting_windows`` is given) and finally presence state.
    """
    def deny(reason: str) -> AccessDecision:
        return AccessDecision(action=action, granted=False, reason=reason, guest=guest, session=session)

    if session is None or session.status != PatientSession.STATUS_ACTIVE:
        return deny(DenialReason.SESSION_NOT_ACTIVE)
    if not scope.reaches(session):
        return deny(DenialReason.ACCESS_DENIED)
    if guest.status != Guest.STATUS_APPROVED or not guest.is_active:
        return deny(DenialReason.PASS_NOT_APPROVED)
    if not (guest.valid_from <= now <= guest.valid_until):
        return deny(DenialReason.PASS_EXPIRED)
    if guest.qr_expires_at is not None and now > guest.qr_expires_at:
        return deny(DenialReason.PASS_EXPIRED)
    if action == CHECK_IN:
        if not guest.has_scans_remaining:
            return deny(DenialReason.SCAN_LIMIT_EXCEEDED)
        if visiting_windows is not None and not currently_inside and not within_visiting_hours(now, visiting_windows):
            return deny(DenialReason.OUTSIDE_VISITING_HOURS)
        if currently_inside:
            return deny(DenialReason.ALREADY_INSIDE)
    elif not currently_inside:
        return deny(DenialReason.NOT_INSIDE)
    return AccessDecision(action=action, granted=True, guest=guest, session=session)
