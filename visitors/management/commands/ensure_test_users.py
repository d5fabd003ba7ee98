# visitors/management/commands/ensure_test_users.py
from django.contrib.auth.hashers import make_password
from django.core.management.base import BaseCommand
from django.db import transaction

from visitors.models import Hospital, HospitalWing, NursingSection, NursingSectionRoom, Room, User

TEST_SET = [
    ("super", User.ROLE_SUPER_ADMIN, ""),
    ("admin1", User.ROLE_ADMIN, ""),
    ("nurse1", User.ROLE_NURSE, ""),
    ("security1", User.ROLE_SECURITY, ""),
    ("patient1", User.ROLE_PATIENT, "9000000001"),
    ("bystander1", User.ROLE_BYSTANDER, "9000000002"),
]


class Command(BaseCommand):
    help = "Ensure a demo hospital and one user per role exist, password=123456 (idempotent)."

    @transaction.atomic
    def handle(self, *args, **opts):
        hospital, _ = Hospital.objects.get_or_create(
            name="Healway Demo Hospital", defaults={"address": "1 Demo Road", "district": "Demo"},
        )
        wing, _ = HospitalWing.objects.get_or_create(
            hospital=hospital, wing_name="General Wing", defaults={"wing_code": "GW", "floor_number": 1},
        )
        room, _ = Room.objects.get_or_create(wing=wing, room_number="101")
        section, _ = NursingSection.objects.get_or_create(hospital=hospital, wing=wing, section_name="Ward A")
        NursingSectionRoom.objects.get_or_create(section=section, room=room)

        for username, role, mobile in TEST_SET:
            fields = {
                "role": role,
                "hospital": None if role == User.ROLE_SUPER_ADMIN else hospital,
                "section": section if role == User.ROLE_NURSE else None,
                "mobile_number": mobile,
                "is_active": True,
            }
            u, created = User.objects.get_or_create(
                username=username,
                defaults={**fields, "password": make_password("123456")},
            )
            if not created:
                # reset password, role and scope
                u.password = make_password("123456")
                for k, v in fields.items():
                    setattr(u, k, v)
                u.save(update_fields=["password", *fields])
            self.stdout.write(self.style.SUCCESS(f"ok: {username} ({role})"))
        self.stdout.write(self.style.SUCCESS("All test users ensured."))
