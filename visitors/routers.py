"""
URL mappings for the visitor access API.

Paths match the mobile and web clients; trailing slashes are omitted.
"""
from django.urls import path, include

from .auth_views import (
    jwt_logout_view,
    jwt_refresh_view,
    login_view,
    me_view,
    send_otp_view,
    verify_otp_view,
)
from .views import admin, guests, health, nurse, security

urlpatterns = [
    path('', include('django_prometheus.urls')),
    path('healthz', health.healthz, name='healthz'),

    # Authentication
    path('api/auth/login', login_view, name='login_view'),
    path('api/auth/refresh', jwt_refresh_view, name='jwt_refresh'),
    path('api/auth/logout', jwt_logout_view, name='jwt_logout'),
    path('api/auth/send-otp', send_otp_view, name='send_otp'),
    path('api/auth/verify-otp', verify_otp_view, name='verify_otp'),
    path('api/auth/me', me_view, name='me'),

    # Patient / bystander
    path('api/user/guests', guests.my_guests, name='user_guests'),
    path('api/user/guests/arrivals', guests.my_guest_arrivals, name='user_guest_arrivals'),
    path('api/user/guests/<int:guest_id>', guests.my_guest_detail, name='user_guest_detail'),
    path('api/user/visiting-hours', guests.my_visiting_hours, name='user_visiting_hours'),
    path('api/user/device-tokens', guests.register_device_token, name='device_tokens'),

    # Nurse
    path('api/mobile-api/nurse/guests', nurse.nurse_guests, name='nurse_guests'),
    path('api/mobile-api/nurse/guests/create', nurse.nurse_create_guest, name='nurse_guest_create'),
    path('api/mobile-api/nurse/guests/access', nurse.nurse_guest_access, name='nurse_guest_access'),
    path('api/mobile-api/nurse/guests/complete-session', nurse.nurse_complete_session,
         name='nurse_complete_session'),
    path('api/mobile-api/nurse/guests/<int:guest_id>', nurse.nurse_guest_detail, name='nurse_guest_detail'),
    path('api/mobile-api/nurse/rooms', nurse.nurse_rooms, name='nurse_rooms'),
    path('api/mobile-api/nurse/rooms/<int:room_id>', nurse.nurse_room_detail, name='nurse_room_detail'),
    path('api/mobile-api/nurse/assigned-patients', nurse.nurse_assigned_patients, name='nurse_assigned_patients'),
    path('api/mobile-api/nurse/dashboard', nurse.nurse_dashboard, name='nurse_dashboard'),
    path('api/mobile-api/nurse/profile', nurse.nurse_profile, name='nurse_profile'),

    # Security
    path('api/mobile-api/security/verify-qr', security.verify_qr, name='security_verify_qr'),
    path('api/mobile-api/security/grant-access', security.grant_access, name='security_grant_access'),
    path('api/mobile-api/security/active-guests', security.active_guests, name='security_active_guests'),
    path('api/mobile-api/security/guest-logs', security.guest_logs, name='security_guest_logs'),
    path('api/mobile-api/security/dashboard', security.security_dashboard, name='security_dashboard'),
    path('api/mobile-api/security/profile', security.security_profile, name='security_profile'),

    # Hospital admin
    path('api/admin/sessions', admin.admit, name='admin_admit'),
    path('api/admin/sessions/<int:session_id>/discharge', admin.discharge, name='admin_discharge'),
    path('api/admin/guests/pending', admin.pending_guests, name='admin_pending_guests'),
    path('api/admin/guests/<int:guest_id>/approve', admin.approve_guest, name='admin_approve_guest'),
    path('api/admin/guests/<int:guest_id>/reject', admin.reject_guest, name='admin_reject_guest'),
]
