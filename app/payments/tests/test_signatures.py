"""
Tests for webhook signature verification.
"""

import hashlib
import hmac
import time

import pytest

from payments.signatures import (
    compute_square_signature,
    verify_square_signature,
    verify_stripe_signature,
)

STRIPE_SECRET = "whsec_test_secret"
SQUARE_KEY = "square-signature-key"
SQUARE_URL = "https://shop.example.com/api/v1/payments/webhooks/square/"
BODY = b'{"id":"evt_1","type":"checkout.session.completed"}'


def stripe_header(body: bytes, secret: str = STRIPE_SECRET, timestamp: int | None = None) -> str:
    timestamp = int(time.time()) if timestamp is None else timestamp
    signed = f"{timestamp}.{body.decode()}".encode()
    signature = hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signature}"


class TestStripeSignature:
    def test_valid_signature(self):
        assert verify_stripe_signature(BODY, stripe_header(BODY), STRIPE_SECRET, tolerance=300)

    def test_accepts_str_payload(self):
        assert verify_stripe_signature(BODY.decode(), stripe_header(BODY), STRIPE_SECRET)

    def test_any_matching_v1_is_enough(self):
        header = stripe_header(BODY)
        timestamp, good = header.split(",")
        header = f"{timestamp},v1={'0' * 64},{good}"

        assert verify_stripe_signature(BODY, header, STRIPE_SECRET)

    def test_wrong_secret(self):
        header = stripe_header(BODY, secret="whsec_other")

        assert not verify_stripe_signature(BODY, header, STRIPE_SECRET)

    def test_tampered_body(self):
        header = stripe_header(BODY)

        assert not verify_stripe_signature(BODY + b" ", header, STRIPE_SECRET)

    def test_stale_timestamp_rejected(self):
        header = stripe_header(BODY, timestamp=int(time.time()) - 600)

        assert not verify_stripe_signature(BODY, header, STRIPE_SECRET, tolerance=300)

    def test_zero_tolerance_skips_freshness(self):
        header = stripe_header(BODY, timestamp=int(time.time()) - 86400)

        assert verify_stripe_signature(BODY, header, STRIPE_SECRET, tolerance=0)

    @pytest.mark.parametrize(
        "header",
        ["", "garbage", "t=abc,v1=deadbeef", "v1=deadbeef"],
    )
    def test_malformed_header(self, header):
        assert not verify_stripe_signature(BODY, header, STRIPE_SECRET)

    def test_missing_secret(self):
        assert not verify_stripe_signature(BODY, stripe_header(BODY), "")

    def test_non_utf8_body(self):
        assert not verify_stripe_signature(b"\xff\xfe", "t=1,v1=00", STRIPE_SECRET)


class TestSquareSignature:
    def test_valid_signature(self):
        signature = compute_square_signature(BODY, SQUARE_KEY, SQUARE_URL)

        assert verify_square_signature(BODY, signature, SQUARE_KEY, SQUARE_URL)

    def test_url_is_part_of_the_message(self):
        signature = compute_square_signature(BODY, SQUARE_KEY, SQUARE_URL)

        assert not verify_square_signature(
            BODY, signature, SQUARE_KEY, "https://other.example.com/hook/"
        )

    def test_wrong_key(self):
        signature = compute_square_signature(BODY, "other-key", SQUARE_URL)

        assert not verify_square_signature(BODY, signature, SQUARE_KEY, SQUARE_URL)

    def test_tampered_body(self):
        signature = compute_square_signature(BODY, SQUARE_KEY, SQUARE_URL)

        assert not verify_square_signature(BODY + b"x", signature, SQUARE_KEY, SQUARE_URL)

    def test_surrounding_whitespace_ignored(self):
        signature = compute_square_signature(BODY, SQUARE_KEY, SQUARE_URL)

        assert verify_square_signature(BODY, f" {signature}\n", SQUARE_KEY, SQUARE_URL)

    @pytest.mark.parametrize(
        "signature, key, url",
        [(None, SQUARE_KEY, SQUARE_URL), ("sig", None, SQUARE_URL), ("sig", SQUARE_KEY, "")],
    )
    def test_missing_inputs(self, signature, key, url):
        assert not verify_square_signature(BODY, signature, key, url)
