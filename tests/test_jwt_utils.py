"""Tests for codex_oauth.jwt_utils."""
import base64
import datetime

import pytest

from codex_oauth.jwt_utils import decode_jwt, extract_account_info, get_token_claims


def _segment(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


# ---------------------------------------------------------------------------
# decode_jwt
# ---------------------------------------------------------------------------

class TestDecodeJWT:
    def test_aud_string_and_list_decode_identically(self, make_jwt):
        base = {"sub": "s1", "email": "x@y.com", "exp": 1999999999}
        as_string = decode_jwt(make_jwt({**base, "aud": "client"}))
        as_list = decode_jwt(make_jwt({**base, "aud": ["client", "other"]}))

        assert as_string is not None and as_list is not None
        assert as_string == as_list
        assert not hasattr(as_string, "aud")
        assert "aud" not in as_string.model_dump()

    def test_vendor_namespaces_parsed(self, make_jwt, account_payload):
        claims = decode_jwt(make_jwt(account_payload))
        assert claims.openai_auth.chatgpt_account_id == "a1"
        assert claims.openai_profile.email == "x@y.com"

    def test_payload_needing_padding(self, make_jwt):
        # 1, 2 and 3 padding characters stripped
        for sub in ("a", "ab", "abc", "abcd"):
            claims = decode_jwt(make_jwt({"sub": sub}))
            assert claims is not None
            assert claims.sub == sub

    @pytest.mark.parametrize("token", [
        "",
        "only-one-segment",
        "two.segments",
        "a.b.c.d",
    ])
    def test_wrong_segment_count(self, token):
        assert decode_jwt(token) is None

    def test_invalid_base64(self):
        assert decode_jwt("header.!!!not-base64!!!.sig") is None

    def test_non_utf8_payload(self):
        payload = _segment(b"\xff\xfe\xfd")
        assert decode_jwt(f"h.{payload}.s") is None

    def test_non_json_payload(self):
        assert decode_jwt(f"h.{_segment(b'not json')}.s") is None

    def test_non_object_payload(self):
        assert decode_jwt(f"h.{_segment(b'[1, 2, 3]')}.s") is None

    def test_wrong_claim_types(self, make_jwt):
        assert decode_jwt(make_jwt({"exp": "tomorrow"})) is None
        assert decode_jwt(make_jwt({"https://api.openai.com/auth": "nope"})) is None

    def test_non_string_token(self):
        assert decode_jwt(None) is None


class TestGetTokenClaims:
    def test_returns_raw_payload(self, make_jwt):
        payload = {"sub": "s1", "aud": "client", "custom": 1}
        assert get_token_claims(make_jwt(payload)) == payload

    def test_malformed(self):
        assert get_token_claims("garbage") is None


# ---------------------------------------------------------------------------
# extract_account_info
# ---------------------------------------------------------------------------

class TestExtractAccountInfo:
    def test_real_shaped_payload(self, make_jwt, account_payload):
        info = extract_account_info(make_jwt(account_payload))

        assert info.account_id == "a1"
        assert info.plan_type == "pro"
        assert info.email == "x@y.com"
        assert info.user_id == "user-1"
        assert info.expires_at == datetime.datetime.fromtimestamp(1999999999, datetime.timezone.utc)
        assert info.is_valid

    def test_falls_back_to_standard_claims(self, make_jwt):
        info = extract_account_info(make_jwt({
            "sub": "sub-1",
            "email": "top@level.com",
            "https://api.openai.com/auth": {"chatgpt_account_id": "a2"},
        }))

        assert info.email == "top@level.com"
        assert info.user_id == "sub-1"
        assert info.account_id == "a2"

    def test_profile_email_wins(self, make_jwt):
        info = extract_account_info(make_jwt({
            "email": "top@level.com",
            "https://api.openai.com/profile": {"email": "profile@vendor.com"},
        }))
        assert info.email == "profile@vendor.com"

    def test_plan_defaults_to_free(self, make_jwt):
        info = extract_account_info(make_jwt({
            "email": "x@y.com",
            "https://api.openai.com/auth": {"chatgpt_account_id": "a1"},
        }))
        assert info.plan_type == "free"

    def test_missing_identity_is_invalid(self, make_jwt):
        info = extract_account_info(make_jwt({"sub": "s1"}))
        assert info is not None
        assert info.account_id is None
        assert info.email is None
        assert not info.is_valid

    def test_missing_exp(self, make_jwt):
        info = extract_account_info(make_jwt({"email": "x@y.com"}))
        assert info.expires_at is None

    def test_out_of_range_exp(self, make_jwt):
        info = extract_account_info(make_jwt({"email": "x@y.com", "exp": 1e20}))
        assert info is not None
        assert info.expires_at is None

    def test_malformed_token(self):
        assert extract_account_info("not.a.jwt") is None
