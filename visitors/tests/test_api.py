"""
Integration tests for the visitor access API.

These tests exercise role gating, the guest pass endpoints of patients
and nurses, the security gate flow and the admin session endpoints.
They use Django REST Framework's APIClient within the APITestCase base
class.

To run the tests:

```
pytest -q visitors/tests
```
"""
import json
from datetime import time, timedelta

from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from ..models import (
    DeviceToken,
    Guest,
    GuestLog,
    Hospital,
    HospitalWing,
    NursingSection,
    NursingSectionRoom,
    PatientSession,
    QrScan,
    Room,
    User,
    VisitingHours,
)
from ..services import passes


class VisitorAPITestCase(APITestCase):
    def setUp(self) -> None:
        """One hospital with two wings, a nurse covering room 101 and a patient admitted there."""
        self.hospital = Hospital.objects.create(name='City Hospital', address='1 Main Street')
        self.wing = HospitalWing.objects.create(hospital=self.hospital, wing_name='North Wing')
        self.other_wing = HospitalWing.objects.create(hospital=self.hospital, wing_name='South Wing')
        self.room = Room.objects.create(wing=self.wing, room_number='101', status=Room.STATUS_OCCUPIED)
        self.other_room = Room.objects.create(wing=self.other_wing, room_number='201',
                                              status=Room.STATUS_OCCUPIED)
        self.free_room = Room.objects.create(wing=self.wing, room_number='102')
        self.section = NursingSection.objects.create(hospital=self.hospital, wing=self.wing, section_name='Ward A')
        NursingSectionRoom.objects.create(section=self.section, room=self.room)

        self.nurse = User.objects.create_user(username='nurse1', password='nursepass', role=User.ROLE_NURSE,
                                              hospital=self.hospital, section=self.section)
        self.security = User.objects.create_user(username='gate1', password='gatepass', role=User.ROLE_SECURITY,
                                                 hospital=self.hospital, assigned_wing=self.wing)
        self.admin = User.objects.create_user(username='admin1', password='adminpass', role=User.ROLE_ADMIN,
                                              hospital=self.hospital)
        self.patient = User.objects.create_user(username='patient1', password='patientpass',
                                                role=User.ROLE_PATIENT, hospital=self.hospital,
                                                mobile_number='9876543210')
        self.session = PatientSession.objects.create(patient=self.patient, hospital=self.hospital, wing=self.wing,
                                                     room=self.room, start_date=timezone.now())
        self.other_patient = User.objects.create_user(username='patient2', password='patientpass',
                                                      role=User.ROLE_PATIENT, hospital=self.hospital)
        self.other_session = PatientSession.objects.create(patient=self.other_patient, hospital=self.hospital,
                                                           wing=self.other_wing, room=self.other_room,
                                                           start_date=timezone.now())

    def make_pass(self, session=None, **kwargs):
        kwargs.setdefault('visit_date', timezone.localdate())
        return passes.issue_guest_pass(session or self.session, created_by=self.patient,
                                       guest_name='Asha Rao', guest_phone='9123456780', **kwargs)

    def guest_payload(self, **overrides):
        data = {
            'guestName': 'Asha Rao',
            'guestPhone': '9123456780',
            'relationshipToPatient': 'Sister',
            'guestType': 'one_time',
            'visitDate': timezone.localdate().isoformat(),
        }
        data.update(overrides)
        return data


class PatientGuestTests(VisitorAPITestCase):
    def setUp(self) -> None:
        super().setUp()
        self.client.force_authenticate(self.patient)

    def test_create_and_list_guests(self):
        r = self.client.post(reverse('user_guests'), self.guest_payload(), format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        self.assertTrue(r.data['ok'])
        self.assertEqual(r.data['guest']['qrScanLimit'], 2)
        self.assertEqual(r.data['guest']['status'], Guest.STATUS_APPROVED)

        r = self.client.get(reverse('user_guests'))
        self.assertEqual(r.data['count'], 1)

    def test_fourth_active_pass_rejected(self):
        for _ in range(3):
            r = self.client.post(reverse('user_guests'), self.guest_payload(), format='json')
            self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        r = self.client.post(reverse('user_guests'), self.guest_payload(), format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(r.data['ok'])
        self.assertEqual(r.data['error']['code'], 'GuestLimitReached')
        self.assertEqual(Guest.objects.filter(session=self.session).count(), 3)

    def test_one_time_guest_needs_visit_date(self):
        r = self.client.post(reverse('user_guests'), self.guest_payload(visitDate=None), format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Guest.objects.exists())

    def test_guest_name_is_sanitised(self):
        r = self.client.post(reverse('user_guests'), self.guest_payload(guestName='<b>Asha</b> Rao'), format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        self.assertEqual(r.data['guest']['guestName'], 'Asha Rao')

    def test_relationship_and_purpose_are_plain_text(self):
        payload = self.guest_payload(relationshipToPatient='<a href="http://x">Sister</a>',
                                     visitPurpose='<i>Evening</i> visit')
        r = self.client.post(reverse('user_guests'), payload, format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        self.assertEqual(r.data['guest']['relationshipToPatient'], 'Sister')
        self.assertEqual(r.data['guest']['purpose'], 'Evening visit')

    def test_revoking_while_inside_ends_the_visit(self):
        g = self.make_pass()
        GuestLog.objects.create(guest=g, session=self.session, nurse=self.nurse, entry_time=timezone.now(),
                                currently_inside=True, access_granted=True)
        r = self.client.delete(reverse('user_guest_detail', args=[g.id]))
        self.assertEqual(r.status_code, 200)
        self.assertFalse(GuestLog.objects.filter(guest=g, currently_inside=True).exists())
        self.assertIsNotNone(GuestLog.objects.get(guest=g).exit_time)

    def test_update_and_revoke(self):
        g = self.make_pass()
        url = reverse('user_guest_detail', args=[g.id])
        r = self.client.put(url, {'guestName': 'Ravi Kumar'}, format='json')
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data['guest']['guestName'], 'Ravi Kumar')

        r = self.client.delete(url)
        self.assertEqual(r.status_code, 200)
        g.refresh_from_db()
        self.assertEqual(g.status, Guest.STATUS_REVOKED)
        self.assertTrue(Guest.objects.filter(id=g.id).exists())

        r = self.client.put(url, {'guestName': 'Someone Else'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(r.data['error']['code'], 'PassNotEditable')

    def test_cannot_touch_other_patients_guest(self):
        g = self.make_pass(self.other_session)
        r = self.client.get(reverse('user_guest_detail', args=[g.id]))
        self.assertEqual(r.status_code, status.HTTP_404_NOT_FOUND)

    def test_no_active_session(self):
        bystander = User.objects.create_user(username='bystander1', password='x', role=User.ROLE_BYSTANDER,
                                             hospital=self.hospital)
        self.client.force_authenticate(bystander)
        r = self.client.post(reverse('user_guests'), self.guest_payload(), format='json')
        self.assertEqual(r.status_code, status.HTTP_404_NOT_FOUND)
        r = self.client.get(reverse('user_guests'))
        self.assertEqual(r.data['guests'], [])

    def test_arrivals_show_visits(self):
        g = self.make_pass()
        GuestLog.objects.create(guest=g, session=self.session, nurse=self.nurse, entry_time=timezone.now(),
                                currently_inside=True, access_granted=True)
        r = self.client.get(reverse('user_guest_arrivals'))
        self.assertEqual(r.data['count'], 1)
        self.assertTrue(r.data['arrivals'][0]['currentlyInside'])
        self.assertEqual(r.data['arrivals'][0]['verificationStatus'], 'approved')

    def test_visiting_hours_fall_back_to_hospital_wide(self):
        VisitingHours.objects.create(hospital=self.hospital, start_time=time(16, 0), end_time=time(19, 0))
        r = self.client.get(reverse('user_visiting_hours'))
        self.assertEqual(r.data['count'], 1)
        self.assertEqual(r.data['visitingHours'][0]['startTime'], '16:00')

        VisitingHours.objects.create(hospital=self.hospital, wing=self.wing, start_time=time(10, 0),
                                     end_time=time(11, 0))
        r = self.client.get(reverse('user_visiting_hours'))
        self.assertEqual([h['startTime'] for h in r.data['visitingHours']], ['10:00'])

    def test_register_device_token_is_idempotent(self):
        body = {'deviceToken': 'tok-123', 'platform': 'android', 'deviceModel': 'Pixel 8'}
        r = self.client.post(reverse('device_tokens'), body, format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        r = self.client.post(reverse('device_tokens'), body, format='json')
        self.assertEqual(r.status_code, 200)
        self.assertEqual(DeviceToken.objects.filter(user=self.patient).count(), 1)

    def test_patient_cannot_use_staff_endpoints(self):
        g = self.make_pass()
        r = self.client.post(reverse('nurse_guest_access'), {'guestId': g.id, 'action': 'check-in'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_403_FORBIDDEN)
        r = self.client.post(reverse('security_grant_access'), {'qrCode': g.qr_code}, format='json')
        self.assertEqual(r.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(GuestLog.objects.exists())


class NurseAccessTests(VisitorAPITestCase):
    def setUp(self) -> None:
        super().setUp()
        self.client.force_authenticate(self.nurse)

    def access(self, guest, action):
        return self.client.post(reverse('nurse_guest_access'), {'guestId': guest.id, 'action': action},
                                format='json')

    def test_check_in_then_duplicate_conflicts(self):
        g = self.make_pass()
        r = self.access(g, 'check-in')
        self.assertEqual(r.status_code, 200)
        self.assertTrue(r.data['granted'])

        r = self.access(g, 'check-in')
        self.assertEqual(r.status_code, status.HTTP_409_CONFLICT)
        self.assertFalse(r.data['ok'])
        self.assertEqual(r.data['reason'], 'AlreadyInside')
        self.assertIsNotNone(r.data['logId'])
        self.assertEqual(GuestLog.objects.filter(guest=g, currently_inside=True).count(), 1)

    def test_check_out_without_visit_conflicts(self):
        r = self.access(self.make_pass(), 'check-out')
        self.assertEqual(r.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(r.data['reason'], 'NotInside')

    def test_room_outside_section_forbidden_and_logged(self):
        g = self.make_pass(self.other_session)
        r = self.access(g, 'check-in')
        self.assertEqual(r.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(r.data['reason'], 'AccessDenied')
        self.assertTrue(GuestLog.objects.filter(guest=g, access_granted=False).exists())

    def test_expired_pass_is_bad_request(self):
        g = self.make_pass()
        past = timezone.now() - timedelta(days=2)
        Guest.objects.filter(pk=g.pk).update(valid_from=past, valid_until=past, qr_expires_at=past)
        r = self.access(g, 'check-in')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(r.data['reason'], 'PassExpiredOrNotYetValid')

    def test_invalid_action_is_validation_error(self):
        r = self.access(self.make_pass(), 'enter')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(GuestLog.objects.exists())

    def test_unknown_guest_is_not_found(self):
        r = self.client.post(reverse('nurse_guest_access'), {'guestId': 424242, 'action': 'check-in'},
                             format='json')
        self.assertEqual(r.status_code, status.HTTP_404_NOT_FOUND)

    def test_list_only_section_guests_with_presence(self):
        inside = self.make_pass()
        self.make_pass()
        self.make_pass(self.other_session)
        self.access(inside, 'check-in')
        r = self.client.get(reverse('nurse_guests'))
        self.assertEqual(r.data['count'], 2)
        flags = {row['id']: row['isCurrentlyInside'] for row in r.data['guests']}
        self.assertTrue(flags[inside.id])

    def test_nurse_creates_guest_for_reachable_session_only(self):
        r = self.client.post(reverse('nurse_guest_create'), self.guest_payload(sessionId=self.session.id),
                             format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        r = self.client.post(reverse('nurse_guest_create'), self.guest_payload(sessionId=self.other_session.id),
                             format='json')
        self.assertEqual(r.status_code, status.HTTP_403_FORBIDDEN)

    def test_complete_session_checks_out_and_expires(self):
        g = self.make_pass()
        self.access(g, 'check-in')
        r = self.client.post(reverse('nurse_complete_session'), {'guestId': g.id}, format='json')
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data['completed'], [{'guestId': g.id, 'checkedOut': True}])
        g.refresh_from_db()
        self.assertEqual(g.status, Guest.STATUS_EXPIRED)
        self.assertFalse(GuestLog.objects.filter(guest=g, currently_inside=True).exists())


    def test_complete_session_checks_out_guest_of_deactivated_pass(self):
        g = self.make_pass()
        self.access(g, 'check-in')
        Guest.objects.filter(pk=g.pk).update(is_active=False, status=Guest.STATUS_EXPIRED)
        r = self.client.post(reverse('nurse_complete_session'), {'guestId': g.id}, format='json')
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data['completed'], [{'guestId': g.id, 'checkedOut': True}])
        self.assertFalse(GuestLog.objects.filter(guest=g, currently_inside=True).exists())

    def test_complete_session_ignores_closed_inactive_passes(self):
        g = self.make_pass()
        passes.revoke_pass(g, self.patient)
        r = self.client.post(reverse('nurse_complete_session'), {'guestId': g.id}, format='json')
        self.assertEqual(r.status_code, status.HTTP_404_NOT_FOUND)

    def test_guest_detail_and_edit(self):
        g = self.make_pass()
        url = reverse('nurse_guest_detail', args=[g.id])
        r = self.client.get(url)
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data['guest']['patientId'], self.patient.id)
        self.assertFalse(r.data['guest']['isCurrentlyInside'])

        self.access(g, 'check-in')
        r = self.client.get(url)
        self.assertTrue(r.data['guest']['isCurrentlyInside'])
        self.assertEqual(len(r.data['recentLogs']), 1)

        r = self.client.put(url, {'guestName': 'Ravi Kumar', 'visitPurpose': 'Evening visit'}, format='json')
        self.assertEqual(r.status_code, 200)
        g.refresh_from_db()
        self.assertEqual(g.guest_name, 'Ravi Kumar')
        self.assertEqual(g.purpose, 'Evening visit')

    def test_guest_detail_outside_section(self):
        g = self.make_pass(self.other_session)
        url = reverse('nurse_guest_detail', args=[g.id])
        self.assertEqual(self.client.get(url).status_code, status.HTTP_403_FORBIDDEN)
        r = self.client.put(url, {'guestName': 'Ravi Kumar'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_403_FORBIDDEN)
        g.refresh_from_db()
        self.assertEqual(g.guest_name, 'Asha Rao')
        self.assertEqual(self.client.get(reverse('nurse_guest_detail', args=[424242])).status_code,
                         status.HTTP_404_NOT_FOUND)

    def test_rooms_and_dashboard_cover_section_only(self):
        inside = self.make_pass()
        self.make_pass()
        self.make_pass(self.other_session)
        self.access(inside, 'check-in')

        r = self.client.get(reverse('nurse_rooms'))
        self.assertEqual(r.data['count'], 1)
        room = r.data['rooms'][0]
        self.assertEqual(room['roomId'], self.room.id)
        self.assertEqual(room['sessionId'], self.session.id)
        self.assertEqual(room['activeGuests'], 2)
        self.assertEqual(room['guestsInside'], 1)

        r = self.client.get(reverse('nurse_dashboard'))
        self.assertEqual(r.data['stats']['totalRoomsInSection'], 1)
        self.assertEqual(r.data['stats']['roomsWithActiveGuests'], 1)
        self.assertEqual(r.data['stats']['totalActiveGuests'], 2)
        self.assertEqual(r.data['stats']['totalGuestsInside'], 1)

    def test_room_filter_with_session(self):
        NursingSectionRoom.objects.create(section=self.section, room=self.free_room)
        r = self.client.get(reverse('nurse_rooms'))
        self.assertEqual(r.data['count'], 2)
        r = self.client.get(reverse('nurse_rooms'), {'filter': 'with-session'})
        self.assertEqual(r.data['count'], 1)
        self.assertEqual(r.data['totalRooms'], 2)

    def test_room_detail(self):
        g = self.make_pass()
        self.access(g, 'check-in')
        r = self.client.get(reverse('nurse_room_detail', args=[self.room.id]))
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data['room']['patientId'], self.patient.id)
        self.assertEqual([row['id'] for row in r.data['guests']], [g.id])
        self.assertEqual(len(r.data['guestLogs']), 1)

        r = self.client.get(reverse('nurse_room_detail', args=[self.other_room.id]))
        self.assertEqual(r.status_code, status.HTTP_403_FORBIDDEN)

    def test_assigned_patients_and_profile(self):
        r = self.client.get(reverse('nurse_assigned_patients'))
        self.assertEqual(r.data['count'], 1)
        self.assertEqual(r.data['patients'][0]['patientId'], self.patient.id)

        r = self.client.get(reverse('nurse_profile'))
        self.assertEqual(r.data['profile']['sectionName'], 'Ward A')
        self.assertEqual(r.data['profile']['wingName'], 'North Wing')

    def test_security_cannot_use_nurse_listings(self):
        self.client.force_authenticate(self.security)
        self.assertEqual(self.client.get(reverse('nurse_rooms')).status_code, status.HTTP_403_FORBIDDEN)


class SecurityGateTests(VisitorAPITestCase):
    def setUp(self) -> None:
        super().setUp()
        self.client.force_authenticate(self.security)

    def test_profile(self):
        r = self.client.get(reverse('security_profile'))
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data['profile']['assignedWingId'], self.wing.id)
        self.assertEqual(r.data['profile']['wingName'], 'North Wing')

    def test_verify_qr_does_not_write(self):
        g = self.make_pass()
        r = self.client.post(reverse('security_verify_qr'), {'qrCode': g.qr_code}, format='json')
        self.assertEqual(r.status_code, 200)
        self.assertTrue(r.data['verified'])
        self.assertEqual(r.data['action'], 'check-in')
        self.assertEqual(r.data['patient']['id'], self.patient.id)
        self.assertFalse(GuestLog.objects.exists())
        self.assertFalse(QrScan.objects.exists())

    def test_grant_access_toggles_entry_and_exit(self):
        g = self.make_pass()
        r = self.client.post(reverse('security_grant_access'), {'qrCode': g.qr_code}, format='json')
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data['action'], 'check-in')

        r = self.client.post(reverse('security_grant_access'),
                             {'qrData': json.dumps({'qrCode': g.qr_code})}, format='json')
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data['action'], 'check-out')
        self.assertTrue(r.data['isCheckout'])
        self.assertEqual(QrScan.objects.filter(guest=g, access_granted=True).count(), 2)

    def test_other_wing_forbidden_and_scanned(self):
        g = self.make_pass(self.other_session)
        r = self.client.post(reverse('security_grant_access'), {'qrCode': g.qr_code}, format='json')
        self.assertEqual(r.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(QrScan.objects.get(guest=g).denial_reason, 'AccessDenied')

    def test_unknown_qr_not_found(self):
        r = self.client.post(reverse('security_grant_access'), {'qrCode': 'QR0000'}, format='json')
        self.assertEqual(r.status_code, status.HTTP_404_NOT_FOUND)
        self.assertFalse(QrScan.objects.exists())

    def test_missing_qr_is_validation_error(self):
        r = self.client.post(reverse('security_grant_access'), {}, format='json')
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)

    def test_active_guests_logs_and_dashboard(self):
        g = self.make_pass()
        self.client.post(reverse('security_grant_access'), {'qrCode': g.qr_code}, format='json')

        r = self.client.get(reverse('security_active_guests'))
        self.assertEqual(r.data['count'], 1)
        self.assertEqual(r.data['guests'][0]['guestId'], g.id)

        r = self.client.get(reverse('security_guest_logs'), {'days': 1})
        self.assertEqual(r.data['count'], 1)

        r = self.client.get(reverse('security_dashboard'))
        self.assertEqual(r.data['stats']['scansToday'], 1)
        self.assertEqual(r.data['stats']['currentlyInside'], 1)


class AdminSessionTests(VisitorAPITestCase):
    def setUp(self) -> None:
        super().setUp()
        self.client.force_authenticate(self.admin)

    def test_admit_and_discharge(self):
        patient = User.objects.create_user(username='patient3', password='x', role=User.ROLE_PATIENT,
                                           hospital=self.hospital)
        body = {'patientId': patient.id, 'wingId': self.wing.id, 'roomId': self.free_room.id}
        r = self.client.post(reverse('admin_admit'), body, format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        session_id = r.data['session']['id']

        r = self.client.post(reverse('admin_admit'), body, format='json')
        self.assertEqual(r.status_code, status.HTTP_409_CONFLICT)

        r = self.client.post(reverse('admin_discharge', args=[session_id]))
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data['session']['status'], PatientSession.STATUS_DISCHARGED)

    def test_admission_notes_are_plain_text(self):
        patient = User.objects.create_user(username='patient4', password='x', role=User.ROLE_PATIENT,
                                           hospital=self.hospital)
        body = {'patientId': patient.id, 'wingId': self.wing.id, 'roomId': self.free_room.id,
                'notes': '<b>Post-op</b> <a href="x">check</a>'}
        r = self.client.post(reverse('admin_admit'), body, format='json')
        self.assertEqual(r.status_code, status.HTTP_201_CREATED)
        session = PatientSession.objects.get(pk=r.data['session']['id'])
        self.assertEqual(session.notes, 'Post-op check')

    def test_admin_of_other_hospital_cannot_discharge(self):
        elsewhere = Hospital.objects.create(name='Elsewhere', address='2 Side Road')
        outsider = User.objects.create_user(username='admin9', password='x', role=User.ROLE_ADMIN,
                                            hospital=elsewhere)
        self.client.force_authenticate(outsider)
        r = self.client.post(reverse('admin_discharge', args=[self.session.id]))
        self.assertEqual(r.status_code, status.HTTP_404_NOT_FOUND)

    def test_approval_queue(self):
        with self.settings(GUEST_PASS_AUTO_APPROVE=False):
            first = self.make_pass()
            second = self.make_pass()
        r = self.client.get(reverse('admin_pending_guests'))
        self.assertEqual(r.data['count'], 2)

        r = self.client.post(reverse('admin_approve_guest', args=[first.id]))
        self.assertEqual(r.data['guest']['status'], Guest.STATUS_APPROVED)
        r = self.client.post(reverse('admin_reject_guest', args=[second.id]))
        self.assertEqual(r.data['guest']['status'], Guest.STATUS_REJECTED)
        r = self.client.post(reverse('admin_reject_guest', args=[second.id]))
        self.assertEqual(r.status_code, status.HTTP_400_BAD_REQUEST)

    def test_nurse_cannot_admit(self):
        self.client.force_authenticate(self.nurse)
        r = self.client.post(reverse('admin_admit'), {}, format='json')
        self.assertEqual(r.status_code, status.HTTP_403_FORBIDDEN)
