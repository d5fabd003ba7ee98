"""Visitor access application for the Healway backend.

This package contains the hospital, session and guest pass models, the
access policy and logging services, and the REST endpoints used by the
patient, nurse, security and admin clients.
"""
