"""
Decision table tests for the access policy.  No database is used: the
evaluator only ever sees in-memory records.
"""
from datetime import datetime, time, timedelta

import pytest
from django.utils import timezone

from visitors.models import Guest, PatientSession, User
from visitors.services.policy import (
    CHECK_IN,
    CHECK_OUT,
    AccessScope,
    DenialReason,
    evaluate_access,
    within_visiting_hours,
)

NOW = timezone.make_aware(datetime(2026, 3, 10, 15, 0, 0))

NURSE = AccessScope(role=User.ROLE_NURSE, actor_id=5, hospital_id=1, section_id=3, room_ids=frozenset({10}))
SECURITY = AccessScope(role=User.ROLE_SECURITY, actor_id=6, hospital_id=1, wing_id=2)


def make_session(**overrides):
    fields = dict(id=1, hospital_id=1, wing_id=2, room_id=10, patient_id=9, status=PatientSession.STATUS_ACTIVE)
    fields.update(overrides)
    return PatientSession(**fields)


def make_guest(**overrides):
    fields = dict(
        id=7, session_id=1, hospital_id=1,
        status=Guest.STATUS_APPROVED, is_active=True,
        valid_from=NOW - timedelta(hours=1), valid_until=NOW + timedelta(hours=8),
        qr_scan_limit=2, qr_scans_used=0,
    )
    fields.update(overrides)
    return Guest(**fields)


def decide(scope=NURSE, guest=None, session=None, action=CHECK_IN, inside=False, **kwargs):
    return evaluate_access(scope, guest or make_guest(), session if session is not None else make_session(),
                           action, now=NOW, currently_inside=inside, **kwargs)


def test_nurse_check_in_granted():
    d = decide()
    assert d.granted and d.reason is None
    assert d.session.room_id == 10


def test_session_checked_before_everything_else():
    expired = make_guest(valid_until=NOW - timedelta(minutes=1), valid_from=NOW - timedelta(days=1))
    d = decide(guest=expired, session=make_session(status=PatientSession.STATUS_DISCHARGED, room_id=99))
    assert d.reason == DenialReason.SESSION_NOT_ACTIVE


def test_missing_session_denied():
    d = evaluate_access(NURSE, make_guest(), None, CHECK_IN, now=NOW, currently_inside=False)
    assert d.reason == DenialReason.SESSION_NOT_ACTIVE


def test_nurse_outside_section_denied():
    assert decide(session=make_session(room_id=11)).reason == DenialReason.ACCESS_DENIED


def test_security_wing_and_hospital_scope():
    assert decide(scope=SECURITY).granted
    assert decide(scope=SECURITY, session=make_session(wing_id=3)).reason == DenialReason.ACCESS_DENIED
    assert decide(scope=SECURITY, session=make_session(hospital_id=2)).reason == DenialReason.ACCESS_DENIED


def test_security_without_wing_covers_whole_hospital():
    gate = AccessScope(role=User.ROLE_SECURITY, actor_id=6, hospital_id=1)
    assert decide(scope=gate, session=make_session(wing_id=42)).granted


def test_unknown_role_never_reaches():
    admin = AccessScope(role=User.ROLE_ADMIN, actor_id=1, hospital_id=1)
    assert decide(scope=admin).reason == DenialReason.ACCESS_DENIED


@pytest.mark.parametrize('status', [Guest.STATUS_PENDING, Guest.STATUS_REJECTED, Guest.STATUS_REVOKED])
def test_pass_must_be_approved(status):
    assert decide(guest=make_guest(status=status)).reason == DenialReason.PASS_NOT_APPROVED


def test_inactive_pass_not_approved():
    assert decide(guest=make_guest(is_active=False)).reason == DenialReason.PASS_NOT_APPROVED


def test_validity_window_bounds():
    past = make_guest(valid_from=NOW - timedelta(days=2), valid_until=NOW - timedelta(seconds=1))
    future = make_guest(valid_from=NOW + timedelta(seconds=1), valid_until=NOW + timedelta(days=1))
    assert decide(guest=past).reason == DenialReason.PASS_EXPIRED
    assert decide(guest=future).reason == DenialReason.PASS_EXPIRED
    # both ends are inclusive
    assert decide(guest=make_guest(valid_from=NOW, valid_until=NOW)).granted


def test_qr_expiry_enforced():
    assert decide(guest=make_guest(qr_expires_at=NOW - timedelta(seconds=1))).reason == DenialReason.PASS_EXPIRED


def test_scan_quota_applies_to_check_in_only():
    spent = make_guest(qr_scans_used=2)
    assert decide(guest=spent).reason == DenialReason.SCAN_LIMIT_EXCEEDED
    assert decide(guest=spent, action=CHECK_OUT, inside=True).granted


def test_unlimited_pass_never_exhausts():
    assert decide(guest=make_guest(qr_scan_limit=None, qr_scans_used=500)).granted


def test_quota_checked_before_presence():
    assert decide(guest=make_guest(qr_scans_used=2), inside=True).reason == DenialReason.SCAN_LIMIT_EXCEEDED


def test_presence_checks():
    assert decide(inside=True).reason == DenialReason.ALREADY_INSIDE
    assert decide(action=CHECK_OUT, inside=False).reason == DenialReason.NOT_INSIDE
    assert decide(action=CHECK_OUT, inside=True).granted


def test_visiting_hours_only_when_windows_given():
    evening = [(time(18, 0), time(20, 0))]
    assert decide(visiting_windows=evening).reason == DenialReason.OUTSIDE_VISITING_HOURS
    assert decide(visiting_windows=[(time(14, 0), time(16, 0))]).granted
    assert decide(visiting_windows=None).granted
    # leaving is always allowed
    assert decide(action=CHECK_OUT, inside=True, visiting_windows=evening).granted


def test_within_visiting_hours_uses_local_time():
    assert within_visiting_hours(NOW, [(time(15, 0), time(15, 0))])
    assert not within_visiting_hours(NOW, [])


def test_decision_message():
    assert decide().message == 'Access granted - guest checked in'
    assert decide(inside=True).message == DenialReason.MESSAGES[DenialReason.ALREADY_INSIDE]
