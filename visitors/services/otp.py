"""
One-time login codes kept in the Django cache.

Each pending code is a single cache entry keyed by mobile number holding
the hashed code and the attempts made so far; the cache TTL expires it.
"""
import logging
import secrets

from django.conf import settings
from django.contrib.auth.hashers import check_password, make_password
from django.core.cache import cache

from visitors.exceptions import OtpError

logger = logging.getLogger(__name__)

KEY_PREFIX = 'otp:'


def _key(mobile):
    return f'{KEY_PREFIX}{mobile}'


def _generate_code():
    return f'{secrets.randbelow(1000000):06d}'


def issue_otp(mobile):
    """Store a fresh code for ``mobile`` and return it (delivery is the caller's concern)."""
    code = _generate_code()
    cache.set(_key(mobile), {'hash': make_password(code), 'attempts': 0}, timeout=settings.OTP_TTL_SECONDS)
    if settings.DEBUG:
        logger.debug('OTP for %s: %s', mobile, code)
    return code


def verify_otp(mobile, code):
    entry = cache.get(_key(mobile))
    if entry is None:
        raise OtpError('OTP expired or not requested')
    if entry['attempts'] >= settings.OTP_MAX_ATTEMPTS:
        cache.delete(_key(mobile))
        raise OtpError('Too many attempts, request a new OTP')
    if not check_password(code, entry['hash']):
        entry['attempts'] += 1
        cache.set(_key(mobile), entry, timeout=settings.OTP_TTL_SECONDS)
        logger.info('OTP mismatch for %s (attempt %s)', mobile, entry['attempts'])
        raise OtpError()
    cache.delete(_key(mobile))
    return True
