"""
Database models for the Healway visitor access backend.

The schema is multi-tenant: every wing, room, nursing section, staff
member and patient belongs to a hospital.  Guests (visitor passes) hang
off a patient session, and every physical entry, exit or denied attempt
is written to :class:`GuestLog`.  Security scans are additionally kept
in the append-only :class:`QrScan` table.
"""
from __future__ import annotations

from django.contrib.auth.models import AbstractUser
from django.db import models
from django.db.models import F, Q


class Hospital(models.Model):
    """A tenant.  Soft-deleted through ``deleted_at``."""
    name = models.CharField(max_length=255, db_index=True)
    image_url = models.CharField(max_length=500, blank=True)
    address = models.TextField()
    district = models.CharField(max_length=100, blank=True)
    state = models.CharField(max_length=100, blank=True)
    country = models.CharField(max_length=100, default='India')
    pincode = models.CharField(max_length=10, blank=True)
    contact_email = models.CharField(max_length=255, blank=True)
    contact_phone = models.CharField(max_length=15, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    deleted_at = models.DateTimeField(null=True, blank=True)

    def __str__(self) -> str:
        return f"{self.name} (#{self.id})"


class HospitalWing(models.Model):
    hospital = models.ForeignKey(Hospital, on_delete=models.CASCADE, related_name='wings')
    wing_name = models.CharField(max_length=255, db_index=True)
    wing_code = models.CharField(max_length=50, blank=True)
    floor_number = models.IntegerField(null=True, blank=True)
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    deleted_at = models.DateTimeField(null=True, blank=True)

    def __str__(self) -> str:
        return f"{self.wing_name} @ {self.hospital_id}"


class Room(models.Model):
    TYPE_CHOICES = [
        ('general', 'General'),
        ('private', 'Private'),
        ('icu', 'ICU'),
        ('emergency', 'Emergency'),
    ]
    STATUS_AVAILABLE = 'available'
    STATUS_OCCUPIED = 'occupied'
    STATUS_CHOICES = [
        (STATUS_AVAILABLE, 'Available'),
        (STATUS_OCCUPIED, 'Occupied'),
        ('maintenance', 'Maintenance'),
        ('reserved', 'Reserved'),
    ]
    wing = models.ForeignKey(HospitalWing, on_delete=models.CASCADE, related_name='rooms')
    room_number = models.CharField(max_length=50, db_index=True)
    room_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='general')
    capacity = models.PositiveIntegerField(default=1)
    # mutated only by the admit/discharge workflows
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_AVAILABLE, db_index=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    deleted_at = models.DateTimeField(null=True, blank=True)

    def __str__(self) -> str:
        return f"Room {self.room_number} (wing {self.wing_id})"


class NursingSection(models.Model):
    """A nursing station.  Nurses reach only the rooms mapped to their section."""
    hospital = models.ForeignKey(Hospital, on_delete=models.CASCADE, related_name='nursing_sections')
    wing = models.ForeignKey(
        HospitalWing, null=True, blank=True, on_delete=models.SET_NULL, related_name='nursing_sections'
    )
    section_name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    deleted_at = models.DateTimeField(null=True, blank=True)

    def __str__(self) -> str:
        return self.section_name


class NursingSectionRoom(models.Model):
    section = models.ForeignKey(NursingSection, on_delete=models.CASCADE, related_name='section_rooms')
    room = models.ForeignKey(Room, on_delete=models.CASCADE, related_name='section_rooms')
    assigned_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = [('section', 'room')]

    def __str__(self) -> str:
        return f"section {self.section_id} -> room {self.room_id}"


class User(AbstractUser):
    """Single user table for staff, patients and bystanders.

    ``hospital`` scopes everyone except super admins.  Nurses carry the
    nursing ``section`` that defines which rooms they may act on;
    security officers may be pinned to an ``assigned_wing``.
    """
    ROLE_SUPER_ADMIN = 'super_admin'
    ROLE_ADMIN = 'admin'
    ROLE_NURSE = 'nurse'
    ROLE_SECURITY = 'security'
    ROLE_PATIENT = 'patient'
    ROLE_BYSTANDER = 'bystander'
    ROLE_CHOICES = [
        (ROLE_SUPER_ADMIN, 'Super Administrator'),
        (ROLE_ADMIN, 'Hospital Administrator'),
        (ROLE_NURSE, 'Nurse'),
        (ROLE_SECURITY, 'Security'),
        (ROLE_PATIENT, 'Patient'),
        (ROLE_BYSTANDER, 'Bystander'),
    ]
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_PATIENT, db_index=True)
    hospital = models.ForeignKey(
        Hospital, null=True, blank=True, on_delete=models.SET_NULL, related_name='users'
    )
    section = models.ForeignKey(
        NursingSection, null=True, blank=True, on_delete=models.SET_NULL, related_name='nurses'
    )
    assigned_wing = models.ForeignKey(
        HospitalWing, null=True, blank=True, on_delete=models.SET_NULL, related_name='security_staff'
    )
    mobile_number = models.CharField(max_length=15, blank=True, db_index=True)
    employee_id = models.CharField(max_length=50, blank=True)
    shift_timing = models.CharField(max_length=100, blank=True)
    otp_login_enabled = models.BooleanField(default=True)

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"


class PatientSession(models.Model):
    """One hospital stay.  At most one active session per patient."""
    STATUS_ACTIVE = 'active'
    STATUS_DISCHARGED = 'discharged'
    STATUS_CHOICES = [
        (STATUS_ACTIVE, 'Active'),
        (STATUS_DISCHARGED, 'Discharged'),
        ('transferred', 'Transferred'),
    ]
    ADMISSION_CHOICES = [
        ('emergency', 'Emergency'),
        ('planned', 'Planned'),
        ('transfer', 'Transfer'),
    ]
    patient = models.ForeignKey(User, on_delete=models.CASCADE, related_name='patient_sessions')
    hospital = models.ForeignKey(Hospital, on_delete=models.CASCADE, related_name='patient_sessions')
    wing = models.ForeignKey(HospitalWing, on_delete=models.PROTECT, related_name='patient_sessions')
    room = models.ForeignKey(Room, on_delete=models.PROTECT, related_name='patient_sessions')
    admitted_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='admissions'
    )
    discharged_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='discharges'
    )
    start_date = models.DateTimeField()
    end_date = models.DateTimeField(null=True, blank=True)
    admission_type = models.CharField(max_length=20, choices=ADMISSION_CHOICES, default='planned')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_ACTIVE, db_index=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=['patient'],
                condition=Q(status='active'),
                name='uniq_active_session_per_patient',
            ),
        ]
        indexes = [
            models.Index(fields=['start_date', 'end_date'], name='idx_session_dates'),
        ]

    @property
    def is_active(self) -> bool:
        return self.status == self.STATUS_ACTIVE

    def __str__(self) -> str:
        return f"session {self.id} patient={self.patient_id} room={self.room_id} ({self.status})"


class VisitingHours(models.Model):
    """A visiting window.  ``wing`` null means hospital-wide, ``day_of_week`` null means every day."""
    DAY_CHOICES = [
        ('monday', 'Monday'),
        ('tuesday', 'Tuesday'),
        ('wednesday', 'Wednesday'),
        ('thursday', 'Thursday'),
        ('friday', 'Friday'),
        ('saturday', 'Saturday'),
        ('sunday', 'Sunday'),
    ]
    hospital = models.ForeignKey(Hospital, on_delete=models.CASCADE, related_name='visiting_hours')
    wing = models.ForeignKey(
        HospitalWing, null=True, blank=True, on_delete=models.CASCADE, related_name='visiting_hours'
    )
    start_time = models.TimeField()
    end_time = models.TimeField()
    day_of_week = models.CharField(max_length=10, choices=DAY_CHOICES, null=True, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.day_of_week or 'daily'} {self.start_time:%H:%M}-{self.end_time:%H:%M}"


class Guest(models.Model):
    """A visitor pass issued against a patient session.

    Passes are never hard-deleted: revocation, rejection and expiry are
    status changes.  ``qr_scan_limit`` of ``None`` means unlimited scans.
    """
    TYPE_ONE_TIME = 'one_time'
    TYPE_FREQUENT = 'frequent'
    TYPE_CHOICES = [
        (TYPE_ONE_TIME, 'One time'),
        (TYPE_FREQUENT, 'Frequent'),
    ]

    STATUS_PENDING = 'pending'
    STATUS_APPROVED = 'approved'
    STATUS_REJECTED = 'rejected'
    STATUS_DENIED = 'denied'
    STATUS_EXPIRED = 'expired'
    STATUS_REVOKED = 'revoked'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_APPROVED, 'Approved'),
        (STATUS_REJECTED, 'Rejected'),
        (STATUS_DENIED, 'Denied'),
        (STATUS_EXPIRED, 'Expired'),
        (STATUS_REVOKED, 'Revoked'),
    ]

    created_by = models.ForeignKey(User, on_delete=models.CASCADE, related_name='guests_created')
    hospital = models.ForeignKey(Hospital, on_delete=models.CASCADE, related_name='guests')
    session = models.ForeignKey(PatientSession, on_delete=models.PROTECT, related_name='guests')
    guest_name = models.CharField(max_length=255)
    guest_phone = models.CharField(max_length=15, blank=True)
    guest_id_proof = models.CharField(max_length=100, blank=True)
    relationship_to_patient = models.CharField(max_length=100, blank=True, null=True)
    guest_type = models.CharField(max_length=10, choices=TYPE_CHOICES, default=TYPE_ONE_TIME)

    valid_from = models.DateTimeField()
    valid_until = models.DateTimeField()

    qr_code = models.CharField(max_length=500, unique=True)
    qr_expires_at = models.DateTimeField(null=True, blank=True)
    qr_scan_limit = models.PositiveIntegerField(null=True, blank=True)
    qr_scans_used = models.PositiveIntegerField(default=0)

    purpose = models.TextField(blank=True, null=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_PENDING, db_index=True)
    approved_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='guests_approved'
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.CheckConstraint(
                condition=Q(qr_scan_limit__isnull=True) | Q(qr_scans_used__lte=F('qr_scan_limit')),
                name='guest_scans_within_limit',
            ),
            models.CheckConstraint(
                condition=Q(valid_from__lte=F('valid_until')),
                name='guest_valid_window',
            ),
        ]
        indexes = [
            models.Index(fields=['valid_from', 'valid_until'], name='idx_guest_validity'),
        ]

    @property
    def has_scans_remaining(self) -> bool:
        return self.qr_scan_limit is None or self.qr_scans_used < self.qr_scan_limit

    def __str__(self) -> str:
        return f"{self.guest_name} ({self.guest_type}, {self.status})"


class GuestLog(models.Model):
    """One row per physical entry or denied attempt.

    The single row with ``currently_inside=True`` is the guest's open
    visit; checkout closes it in place.
    """
    guest = models.ForeignKey(Guest, on_delete=models.CASCADE, related_name='logs')
    session = models.ForeignKey(PatientSession, on_delete=models.CASCADE, related_name='guest_logs')
    security = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='security_guest_logs'
    )
    nurse = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='nurse_guest_logs'
    )
    entry_time = models.DateTimeField(db_index=True)
    exit_time = models.DateTimeField(null=True, blank=True)
    currently_inside = models.BooleanField(default=False, db_index=True)
    access_granted = models.BooleanField(default=False)
    access_denied_reason = models.CharField(max_length=255, blank=True, null=True)
    notes = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=['guest'],
                condition=Q(currently_inside=True),
                name='uniq_guest_open_log',
            ),
        ]

    def __str__(self) -> str:
        state = 'inside' if self.currently_inside else ('granted' if self.access_granted else 'denied')
        return f"log {self.id} guest={self.guest_id} {state}"


class QrScan(models.Model):
    """Append-only record of every security scan."""
    guest = models.ForeignKey(Guest, on_delete=models.CASCADE, related_name='scans')
    security = models.ForeignKey(User, on_delete=models.CASCADE, related_name='qr_scans')
    hospital = models.ForeignKey(Hospital, on_delete=models.CASCADE, related_name='qr_scans')
    scanned_at = models.DateTimeField(db_index=True)
    access_granted = models.BooleanField(default=False)
    access_reason = models.CharField(max_length=255, blank=True, null=True)
    denial_reason = models.CharField(max_length=255, blank=True, null=True)
    device_info = models.CharField(max_length=255, blank=True, null=True)
    ip_address = models.GenericIPAddressField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"scan {self.id} guest={self.guest_id} granted={self.access_granted}"


class DeviceToken(models.Model):
    """Push token registry for the mobile apps."""
    PLATFORM_CHOICES = [
        ('android', 'Android'),
        ('ios', 'iOS'),
        ('web', 'Web'),
    ]
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='device_tokens')
    device_token = models.CharField(max_length=512, db_index=True)
    platform = models.CharField(max_length=20, choices=PLATFORM_CHOICES, blank=True)
    device_model = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = [('user', 'device_token')]

    def __str__(self) -> str:
        return f"{self.platform or 'device'} token for {self.user_id}"


class AuditEvent(models.Model):
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.IntegerField(blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='idx_audit_action_time'),
            models.Index(fields=['object_type', 'object_id', 'created_at'], name='idx_audit_object_time'),
        ]
