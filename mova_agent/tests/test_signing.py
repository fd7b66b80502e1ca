import re

from mova_agent.app.crypto.signing import (
    SignedPayload,
    sign_payload,
    utc_timestamp,
    verify_signature,
)

FIXED_TS = "2024-01-01T00:00:00.000Z"
EXPECTED_BODY_SHA256 = "9504d30f4695ef5ec9ad92d051d80db1942a3d2bfc6b2b714eff5e4bcd54eb72"
EXPECTED_SIGNATURE = "d152a9d0d70445b20181741b0402d69bddb9c39dd2569489350a2471ac38880f"


def test_fixed_vector():
    signed = sign_payload("payload-body", "secret123", FIXED_TS)
    assert signed.timestamp == FIXED_TS
    assert signed.body_sha256 == EXPECTED_BODY_SHA256
    assert signed.signature == EXPECTED_SIGNATURE


def test_wire_shape():
    signed = sign_payload("payload-body", "secret123", FIXED_TS)
    assert signed.as_dict() == {
        "timestamp": FIXED_TS,
        "bodySha256": EXPECTED_BODY_SHA256,
        "signature": EXPECTED_SIGNATURE,
    }
    assert SignedPayload.from_dict(signed.as_dict()) == signed
    assert signed.as_headers()["x-mova-sig"] == EXPECTED_SIGNATURE


def test_deterministic_for_fixed_inputs():
    results = {sign_payload("body", "s", FIXED_TS) for _ in range(10)}
    assert len(results) == 1


def test_changing_body_changes_hash_and_signature():
    a = sign_payload("payload-body", "secret123", FIXED_TS)
    b = sign_payload("payload-body2", "secret123", FIXED_TS)
    assert a.body_sha256 != b.body_sha256
    assert a.signature != b.signature


def test_changing_secret_or_timestamp_changes_signature_only():
    base = sign_payload("payload-body", "secret123", FIXED_TS)
    other_secret = sign_payload("payload-body", "secret124", FIXED_TS)
    other_ts = sign_payload("payload-body", "secret123", "2024-01-01T00:00:00.001Z")
    assert other_secret.body_sha256 == base.body_sha256
    assert other_secret.signature != base.signature
    assert other_ts.signature != base.signature


def test_default_timestamp_is_iso_utc_millis():
    signed = sign_payload("x", "s")
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z", signed.timestamp)
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z", utc_timestamp())


def test_verify_roundtrip_and_tamper():
    signed = sign_payload("payload-body", "secret123", FIXED_TS)
    assert verify_signature("payload-body", "secret123", signed)
    assert not verify_signature("payload-body!", "secret123", signed)
    assert not verify_signature("payload-body", "wrong", signed)
    forged = SignedPayload(timestamp="2030-01-01T00:00:00.000Z", body_sha256=signed.body_sha256, signature=signed.signature)
    assert not verify_signature("payload-body", "secret123", forged)
