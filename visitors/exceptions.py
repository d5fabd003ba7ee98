"""
Error types and the unified DRF exception handler.

Every error response has the shape
``{'ok': False, 'error': {'code': ..., 'message': ...}}``.  Domain
failures raised by the services carry their own machine readable code;
anything that is not an ``APIException`` is an internal fault and is
logged with its traceback before a generic 500 is returned.
"""
import logging

from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class GuestAccessError(APIException):
    """Base class for refusals raised by the guest pass and session services."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Request could not be processed'
    default_code = 'guest_access_error'


class GuestLimitReached(GuestAccessError):
    default_detail = 'Maximum 3 active guest passes allowed for this patient'
    default_code = 'GuestLimitReached'


class SessionNotActiveError(GuestAccessError):
    default_detail = 'Patient session is not active'
    default_code = 'SessionNotActive'


class PassNotEditable(GuestAccessError):
    default_detail = 'Cannot edit expired or revoked guest pass'
    default_code = 'PassNotEditable'


class ActiveSessionExists(GuestAccessError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Patient already has an active session'
    default_code = 'ActiveSessionExists'


class RoomNotAvailable(GuestAccessError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Room is not available'
    default_code = 'RoomNotAvailable'


class OtpError(GuestAccessError):
    default_detail = 'Invalid or expired OTP'
    default_code = 'InvalidOtp'


class AccessConflict(Exception):
    """A guest log write lost a race against another request.

    Raised by the log recorder; the access workflow turns it into a
    logged denial carrying ``reason``.
    """
    reason = 'AccessConflict'


class AlreadyInside(AccessConflict):
    reason = 'AlreadyInside'


class NoOpenLog(AccessConflict):
    reason = 'NoOpenLog'


class ScanQuotaExhausted(AccessConflict):
    reason = 'ScanLimitExceeded'


def api_exception_handler(exc, context):
    resp = drf_exception_handler(exc, context)
    if resp is None:
        logger.exception('Unhandled API error: %s', exc)
        return Response(
            {'ok': False, 'error': {'code': 'server_error', 'message': 'Internal server error'}},
            status=500,
        )
    # normalize response
    detail = None
    if isinstance(resp.data, dict):
        detail = resp.data.get('detail') or resp.data
    else:
        detail = str(resp.data)
    code = exc.default_code if isinstance(exc, GuestAccessError) else 'api_error'
    return Response({'ok': False, 'error': {'code': code, 'message': detail}}, status=resp.status_code)
