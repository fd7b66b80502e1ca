from .signing import SignedPayload, sign_payload, verify_signature

__all__ = ["SignedPayload", "sign_payload", "verify_signature"]
