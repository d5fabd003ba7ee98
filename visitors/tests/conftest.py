import pytest
from django.core.cache import cache
from django.utils import timezone
from rest_framework.test import APIClient

from visitors.models import (
    Hospital,
    HospitalWing,
    NursingSection,
    NursingSectionRoom,
    PatientSession,
    Room,
    User,
)
from visitors.services import passes
from visitors.services.policy import scope_for_user

PASSWORD = 'P@ssw0rd1'


@pytest.fixture(autouse=True)
def _clear_cache():
    # throttles and OTP entries live in the cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def hospital(db):
    return Hospital.objects.create(name='City Hospital', address='1 Main Street', district='Central')


@pytest.fixture
def wing(hospital):
    return HospitalWing.objects.create(hospital=hospital, wing_name='North Wing', wing_code='N')


@pytest.fixture
def other_wing(hospital):
    return HospitalWing.objects.create(hospital=hospital, wing_name='South Wing', wing_code='S')


@pytest.fixture
def room(wing):
    return Room.objects.create(wing=wing, room_number='101', status=Room.STATUS_OCCUPIED)


@pytest.fixture
def other_room(other_wing):
    return Room.objects.create(wing=other_wing, room_number='201', status=Room.STATUS_OCCUPIED)


@pytest.fixture
def section(hospital, wing, room):
    s = NursingSection.objects.create(hospital=hospital, wing=wing, section_name='Ward A')
    NursingSectionRoom.objects.create(section=s, room=room)
    return s


@pytest.fixture
def nurse(hospital, section):
    return User.objects.create_user(username='nurse1', password=PASSWORD, role=User.ROLE_NURSE,
                                    hospital=hospital, section=section)


@pytest.fixture
def security(hospital, wing):
    return User.objects.create_user(username='security1', password=PASSWORD, role=User.ROLE_SECURITY,
                                    hospital=hospital, assigned_wing=wing)


@pytest.fixture
def hospital_admin(hospital):
    return User.objects.create_user(username='admin1', password=PASSWORD, role=User.ROLE_ADMIN, hospital=hospital)


@pytest.fixture
def patient(hospital):
    return User.objects.create_user(username='patient1', password=PASSWORD, role=User.ROLE_PATIENT,
                                    hospital=hospital, mobile_number='9876543210')


@pytest.fixture
def session(patient, hospital, wing, room):
    return PatientSession.objects.create(patient=patient, hospital=hospital, wing=wing, room=room,
                                         start_date=timezone.now())


@pytest.fixture
def other_session(hospital, other_wing, other_room):
    other_patient = User.objects.create_user(username='patient2', password=PASSWORD, role=User.ROLE_PATIENT,
                                             hospital=hospital)
    return PatientSession.objects.create(patient=other_patient, hospital=hospital, wing=other_wing,
                                         room=other_room, start_date=timezone.now())


@pytest.fixture
def make_pass(session, patient):
    def _make(target=None, **kwargs):
        kwargs.setdefault('guest_name', 'Asha Rao')
        kwargs.setdefault('guest_phone', '9123456780')
        kwargs.setdefault('visit_date', timezone.localdate())
        return passes.issue_guest_pass(target or session, created_by=patient, **kwargs)
    return _make


@pytest.fixture
def nurse_scope(nurse):
    return scope_for_user(nurse)


@pytest.fixture
def security_scope(security):
    return scope_for_user(security)


@pytest.fixture
def api_client():
    return APIClient()
