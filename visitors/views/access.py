from rest_framework import status
from rest_framework.response import Response

from visitors.services.access import AccessResult
from visitors.services.policy import DenialReason

CONFLICT_REASONS = {DenialReason.ALREADY_INSIDE, DenialReason.NOT_INSIDE, DenialReason.NO_OPEN_LOG}


def denial_status(reason: str) -> int:
    if reason == DenialReason.ACCESS_DENIED:
        return status.HTTP_403_FORBIDDEN
    if reason in CONFLICT_REASONS:
        return status.HTTP_409_CONFLICT
    return status.HTTP_400_BAD_REQUEST


def access_response(result: AccessResult) -> Response:
    """Render a check-in/out outcome; denials keep their log id."""
    if result.granted:
        return Response(result.as_payload(), status=status.HTTP_200_OK)
    return Response(result.as_payload(), status=denial_status(result.reason))
