import pytest
from django.core.cache import cache

from visitors.exceptions import OtpError
from visitors.services import otp


def test_issue_and_verify_once():
    code = otp.issue_otp('9876543210')
    assert len(code) == 6 and code.isdigit()
    assert otp.verify_otp('9876543210', code) is True
    # codes are single use
    with pytest.raises(OtpError):
        otp.verify_otp('9876543210', code)


def test_code_is_stored_hashed():
    code = otp.issue_otp('9876543210')
    entry = cache.get(otp._key('9876543210'))
    assert code not in str(entry)


def test_unknown_mobile():
    with pytest.raises(OtpError):
        otp.verify_otp('9000000000', '123456')


def test_attempts_are_capped(settings, monkeypatch):
    settings.OTP_MAX_ATTEMPTS = 2
    monkeypatch.setattr(otp, '_generate_code', lambda: '111111')
    otp.issue_otp('9876543210')
    for _ in range(2):
        with pytest.raises(OtpError):
            otp.verify_otp('9876543210', '222222')
    # even the right code is refused once the attempts are used up
    with pytest.raises(OtpError):
        otp.verify_otp('9876543210', '111111')


class RecordingCache:
    def __init__(self):
        self.timeouts = []

    def set(self, key, value, timeout=None):
        self.timeouts.append(timeout)


def test_expiry_uses_cache_ttl(settings, monkeypatch):
    recorder = RecordingCache()
    settings.OTP_TTL_SECONDS = 60
    monkeypatch.setattr(otp, 'cache', recorder)
    otp.issue_otp('9876543210')
    assert recorder.timeouts == [60]
