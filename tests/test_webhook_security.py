import hashlib
import hmac
import time

from juris.webhook_security import compute_hmac_sha256, constant_time_compare, verify_timestamp


class TestSignatures:
    def test_hmac(self):
        payload = b'{"transactionId": "TXN-1", "status": "completed"}'
        expected = hmac.new(b"secret", payload, hashlib.sha256).hexdigest()
        assert compute_hmac_sha256("secret", payload) == expected

    def test_compare(self):
        assert constant_time_compare("abc", "abc") is True
        assert constant_time_compare("abc", "abd") is False
        assert constant_time_compare("", "") is False


class TestTimestamps:
    def test_absent_timestamp_is_accepted(self):
        assert verify_timestamp(None) is True

    def test_recent(self):
        assert verify_timestamp(str(int(time.time()) - 10)) is True

    def test_too_old(self):
        assert verify_timestamp(str(int(time.time()) - 3600)) is False

    def test_garbage(self):
        assert verify_timestamp("yesterday") is False
