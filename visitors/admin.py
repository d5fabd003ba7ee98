"""
Django admin registrations for the visitor access models.

Superusers can inspect hospitals, sessions, guest passes and the
entry/exit trail via ``/admin/``.  Logs and scans are read-only there;
they are only ever written by the access workflow.
"""

from django.contrib import admin

from .models import (
    AuditEvent,
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


@admin.register(Hospital)
class HospitalAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'district', 'state', 'is_active', 'created_at')
    list_filter = ('is_active', 'state')
    search_fields = ('id', 'name', 'pincode')


@admin.register(HospitalWing)
class HospitalWingAdmin(admin.ModelAdmin):
    list_display = ('id', 'wing_name', 'wing_code', 'hospital', 'floor_number', 'is_active')
    list_filter = ('hospital', 'is_active')
    search_fields = ('wing_name', 'wing_code')


@admin.register(Room)
class RoomAdmin(admin.ModelAdmin):
    list_display = ('id', 'room_number', 'wing', 'room_type', 'status', 'is_active')
    list_filter = ('status', 'room_type', 'wing__hospital')
    search_fields = ('room_number',)


class NursingSectionRoomInline(admin.TabularInline):
    model = NursingSectionRoom
    extra = 0


@admin.register(NursingSection)
class NursingSectionAdmin(admin.ModelAdmin):
    list_display = ('id', 'section_name', 'hospital', 'wing', 'is_active')
    list_filter = ('hospital',)
    inlines = [NursingSectionRoomInline]


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('username', 'role', 'hospital', 'section', 'assigned_wing', 'mobile_number', 'is_active')
    list_filter = ('role', 'hospital')
    search_fields = ('username', 'first_name', 'last_name', 'mobile_number', 'employee_id')


@admin.register(PatientSession)
class PatientSessionAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'hospital', 'wing', 'room', 'status', 'start_date', 'end_date')
    list_filter = ('status', 'admission_type', 'hospital')
    search_fields = ('id', 'patient__username', 'patient__mobile_number')


@admin.register(VisitingHours)
class VisitingHoursAdmin(admin.ModelAdmin):
    list_display = ('id', 'hospital', 'wing', 'day_of_week', 'start_time', 'end_time', 'is_active')
    list_filter = ('hospital', 'day_of_week', 'is_active')


@admin.register(Guest)
class GuestAdmin(admin.ModelAdmin):
    list_display = ('id', 'guest_name', 'guest_phone', 'session', 'guest_type', 'status',
                    'qr_scans_used', 'qr_scan_limit', 'valid_until', 'is_active')
    list_filter = ('status', 'guest_type', 'is_active', 'hospital')
    search_fields = ('id', 'guest_name', 'guest_phone', 'qr_code')


@admin.register(GuestLog)
class GuestLogAdmin(admin.ModelAdmin):
    list_display = ('id', 'guest', 'session', 'entry_time', 'exit_time', 'currently_inside',
                    'access_granted', 'access_denied_reason')
    list_filter = ('currently_inside', 'access_granted')
    search_fields = ('guest__guest_name', 'guest__id')

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(QrScan)
class QrScanAdmin(admin.ModelAdmin):
    list_display = ('id', 'guest', 'security', 'scanned_at', 'access_granted', 'denial_reason')
    list_filter = ('access_granted', 'hospital')

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(DeviceToken)
class DeviceTokenAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'platform', 'device_model', 'updated_at')
    search_fields = ('user__username',)


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('id', 'action', 'user', 'object_type', 'object_id', 'created_at')
    list_filter = ('action', 'object_type')
    search_fields = ('action', 'user__username')
