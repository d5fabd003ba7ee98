from datetime import timedelta

import pytest
from django.core.management import call_command
from django.urls import resolve, reverse
from django.utils import timezone
from rest_framework.test import APIClient

from visitors.models import AuditEvent, Guest, GuestLog, Hospital, User
from visitors.services import otp

from .conftest import PASSWORD

pytestmark = pytest.mark.django_db


def login(client, username, password=PASSWORD):
    return client.post(reverse('login_view'), {'username': username, 'password': password}, format='json')


def test_no_role_bypass_in_login(patient):
    client = APIClient()
    r = client.post(reverse('login_view'), {'username': 'patient1', 'password': PASSWORD, 'role': 'super_admin'},
                    format='json')
    assert r.status_code == 200
    assert r.data['role'] == User.ROLE_PATIENT
    patient.refresh_from_db()
    assert patient.role == User.ROLE_PATIENT


def test_login_returns_jwt_and_legacy_token(nurse):
    r = login(APIClient(), 'nurse1')
    assert r.status_code == 200
    assert r.data['token']
    assert r.data['jwt_access'] and r.data['jwt_refresh']
    assert r.data['user']['sectionId'] == nurse.section_id


def test_failed_login_is_audited_without_password(nurse):
    r = login(APIClient(), 'nurse1', 'wrong-password')
    assert r.status_code == 400
    event = AuditEvent.objects.get(action='login')
    assert event.detail['result'] == 'fail'
    assert 'wrong-password' not in str(event.detail)


def test_token_and_bearer_headers_both_accepted(nurse):
    client = APIClient()
    data = login(client, 'nurse1').data

    client.credentials(HTTP_AUTHORIZATION=f"Token {data['token']}")
    assert client.get(reverse('me')).data['user']['role'] == User.ROLE_NURSE

    client.credentials(HTTP_AUTHORIZATION=f"Bearer {data['jwt_access']}")
    assert client.get(reverse('me')).status_code == 200


def test_anonymous_requests_refused():
    client = APIClient()
    assert client.get(reverse('me')).status_code in (401, 403)
    assert client.get(reverse('user_guests')).status_code in (401, 403)
    assert client.post(reverse('security_grant_access'), {'qrCode': 'QR1'}, format='json').status_code in (401, 403)


def test_inactive_hospital_refused_at_login_and_on_requests(nurse, hospital):
    client = APIClient()
    token = login(client, 'nurse1').data['token']
    Hospital.objects.filter(pk=hospital.pk).update(is_active=False)

    client.credentials(HTTP_AUTHORIZATION=f'Token {token}')
    assert client.get(reverse('me')).status_code in (401, 403)

    client.credentials()
    assert login(client, 'nurse1').status_code in (401, 403)


def test_soft_deleted_hospital_refused(security, hospital):
    Hospital.objects.filter(pk=hospital.pk).update(deleted_at=timezone.now())
    assert login(APIClient(), 'security1').status_code in (401, 403)


def test_nurse_without_section_is_not_a_nurse(hospital, make_pass):
    User.objects.create_user(username='floater', password=PASSWORD, role=User.ROLE_NURSE, hospital=hospital)
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Token {login(client, 'floater').data['token']}")
    r = client.post(reverse('nurse_guest_access'), {'guestId': make_pass().id, 'action': 'check-in'},
                    format='json')
    assert r.status_code == 403
    assert not GuestLog.objects.exists()


def test_otp_login_flow(patient, monkeypatch):
    monkeypatch.setattr(otp, '_generate_code', lambda: '424242')
    client = APIClient()
    r = client.post(reverse('send_otp'), {'mobileNumber': '9876543210'}, format='json')
    assert r.status_code == 200
    assert 'devOtp' not in r.data

    r = client.post(reverse('verify_otp'), {'mobileNumber': '9876543210', 'otp': '000000'}, format='json')
    assert r.status_code == 400
    assert r.data['error']['code'] == 'InvalidOtp'

    r = client.post(reverse('verify_otp'), {'mobileNumber': '9876543210', 'otp': '424242'}, format='json')
    assert r.status_code == 200
    assert r.data['user']['id'] == patient.id
    assert r.data['token']


def test_otp_for_unknown_mobile_is_not_found():
    r = APIClient().post(reverse('send_otp'), {'mobileNumber': '9000000000'}, format='json')
    assert r.status_code == 404


def test_otp_rejects_malformed_mobile():
    r = APIClient().post(reverse('send_otp'), {'mobileNumber': '12ab'}, format='json')
    assert r.status_code == 400


def test_login_is_throttled(nurse):
    client = APIClient()
    codes = [login(client, 'nurse1', 'wrong').status_code for _ in range(11)]
    assert codes[-1] == 429


def test_logout_blacklists_and_drops_token(nurse):
    client = APIClient()
    data = login(client, 'nurse1').data
    client.credentials(HTTP_AUTHORIZATION=f"Token {data['token']}")
    r = client.post(reverse('jwt_logout'), {'refresh': data['jwt_refresh']}, format='json')
    assert r.status_code == 200 and r.data['blacklisted'] == 1

    client.credentials()
    r = client.post(reverse('jwt_refresh'), {'refresh': data['jwt_refresh']}, format='json')
    assert r.status_code == 401


def test_healthz():
    r = APIClient().get(reverse('healthz'))
    assert r.status_code == 200
    assert r.json()['ok'] is True


def test_expire_guest_passes_command_skips_guests_inside(make_pass, session, nurse):
    stale = make_pass()
    inside = make_pass()
    fresh = make_pass()
    past = timezone.now() - timedelta(days=2)
    Guest.objects.filter(pk__in=[stale.pk, inside.pk]).update(valid_from=past, valid_until=past,
                                                            qr_expires_at=past)
    GuestLog.objects.create(guest=inside, session=session, nurse=nurse, entry_time=past, currently_inside=True,
                            access_granted=True)

    call_command('expire_guest_passes', '--dry-run')
    stale.refresh_from_db()
    assert stale.status == Guest.STATUS_APPROVED

    call_command('expire_guest_passes')
    for g in (stale, inside, fresh):
        g.refresh_from_db()
    assert stale.status == Guest.STATUS_EXPIRED and not stale.is_active
    assert inside.status == Guest.STATUS_APPROVED
    assert fresh.status == Guest.STATUS_APPROVED


def test_ensure_test_users_is_idempotent():
    call_command('ensure_test_users')
    call_command('ensure_test_users')
    assert User.objects.filter(username__in=['admin1', 'nurse1', 'security1', 'patient1']).count() == 4
    nurse = User.objects.get(username='nurse1')
    assert nurse.section_id is not None
    assert login(APIClient(), 'nurse1', '123456').status_code == 200


def test_otp_requests_are_throttled():
    client = APIClient()
    codes = [client.post(reverse('send_otp'), {'mobileNumber': '9000000000'}, format='json').status_code
             for _ in range(11)]
    assert codes[:10] == [404] * 10
    assert codes[-1] == 429


@pytest.mark.parametrize('view, scope', [
    ('login_view', 'login'),
    ('send_otp', 'otp'),
    ('verify_otp', 'otp'),
    ('user_guests', 'guest_write'),
    ('nurse_guest_create', 'guest_write'),
    ('security_verify_qr', 'qr_scan'),
    ('security_grant_access', 'qr_scan'),
])
def test_scoped_throttles_are_attached(view, scope):
    assert resolve(reverse(view)).func.cls.throttle_scope == scope
