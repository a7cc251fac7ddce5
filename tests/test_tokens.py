"""Unit tests for warden.core.tokens: issue/validate, expiry boundary, tampering, malformed input."""

import base64
import json
import unittest
from datetime import UTC, datetime, timedelta

import jwt

from support import TEST_SECRET
from warden.core.errors import (
    TokenBadSignature,
    TokenExpired,
    TokenMalformed,
    TokenRejected,
    TokenRejection,
)
from warden.core.tokens import TokenIssuer, TokenValidator
from warden.schemas.auth import Principal

T0 = datetime(2026, 1, 1, 12, 0, 0, tzinfo=UTC)
LIFETIME = timedelta(hours=24)


def _principal() -> Principal:
    return Principal(
        id=7,
        username="alice",
        email="alice@example.com",
        roles=("ROLE_ADMIN", "ROLE_USER"),
    )


def _at(moment: datetime):
    return lambda: moment


def _b64decode(segment: str) -> bytes:
    return base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4))


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


class TestIssueAndValidate(unittest.TestCase):
    def setUp(self) -> None:
        self.issuer = TokenIssuer(TEST_SECRET, LIFETIME, clock=_at(T0))

    def test_round_trip_returns_equal_principal(self) -> None:
        token = self.issuer.issue(_principal())
        validator = TokenValidator(TEST_SECRET, clock=_at(T0 + timedelta(hours=1)))
        self.assertEqual(validator.validate(token), _principal())

    def test_token_has_three_segments_and_hs256_header(self) -> None:
        token = self.issuer.issue(_principal())
        self.assertEqual(len(token.split(".")), 3)
        header = jwt.get_unverified_header(token)
        self.assertEqual(header["alg"], "HS256")
        self.assertEqual(header["typ"], "JWT")

    def test_claims_carry_subject_and_times(self) -> None:
        token = self.issuer.issue(_principal())
        claims = jwt.decode(token, options={"verify_signature": False})
        self.assertEqual(claims["sub"], "alice")
        self.assertEqual(claims["roles"], ["ROLE_ADMIN", "ROLE_USER"])
        self.assertEqual(claims["iat"], int(T0.timestamp()))
        self.assertEqual(claims["exp"], int((T0 + LIFETIME).timestamp()))

    def test_principal_without_roles_round_trips(self) -> None:
        principal = Principal(id=1, username="bob", email="bob@example.com")
        token = self.issuer.issue(principal)
        self.assertEqual(TokenValidator(TEST_SECRET, clock=_at(T0)).validate(token), principal)

    def test_issuer_rejects_empty_secret_and_bad_lifetime(self) -> None:
        with self.assertRaises(ValueError):
            TokenIssuer("", LIFETIME)
        with self.assertRaises(ValueError):
            TokenIssuer(TEST_SECRET, timedelta(0))
        with self.assertRaises(ValueError):
            TokenValidator("")


class TestExpiry(unittest.TestCase):
    def setUp(self) -> None:
        self.token = TokenIssuer(TEST_SECRET, LIFETIME, clock=_at(T0)).issue(_principal())

    def test_accepted_just_before_expiry(self) -> None:
        validator = TokenValidator(TEST_SECRET, clock=_at(T0 + LIFETIME - timedelta(seconds=1)))
        self.assertEqual(validator.validate(self.token).username, "alice")

    def test_rejected_exactly_at_expiry(self) -> None:
        validator = TokenValidator(TEST_SECRET, clock=_at(T0 + LIFETIME))
        with self.assertRaises(TokenExpired) as ctx:
            validator.validate(self.token)
        self.assertEqual(ctx.exception.reason, TokenRejection.EXPIRED)

    def test_rejected_after_expiry(self) -> None:
        validator = TokenValidator(TEST_SECRET, clock=_at(T0 + LIFETIME + timedelta(days=3)))
        with self.assertRaises(TokenExpired):
            validator.validate(self.token)

    def test_leeway_extends_acceptance_window(self) -> None:
        validator = TokenValidator(
            TEST_SECRET,
            clock=_at(T0 + LIFETIME + timedelta(seconds=30)),
            leeway=timedelta(seconds=60),
        )
        self.assertEqual(validator.validate(self.token).id, 7)

    def test_token_from_the_future_is_not_rejected_for_iat(self) -> None:
        validator = TokenValidator(TEST_SECRET, clock=_at(T0 - timedelta(minutes=5)))
        self.assertEqual(validator.validate(self.token).id, 7)


class TestTampering(unittest.TestCase):
    def setUp(self) -> None:
        self.token = TokenIssuer(TEST_SECRET, LIFETIME, clock=_at(T0)).issue(_principal())
        self.validator = TokenValidator(TEST_SECRET, clock=_at(T0))

    def test_flipping_any_signature_bit_is_bad_signature(self) -> None:
        header, payload, signature = self.token.split(".")
        raw = _b64decode(signature)
        for bit in (0, 7, 100, len(raw) * 8 - 1):
            flipped = bytearray(raw)
            flipped[bit // 8] ^= 1 << (bit % 8)
            forged = ".".join([header, payload, _b64encode(bytes(flipped))])
            with self.subTest(bit=bit):
                with self.assertRaises(TokenBadSignature) as ctx:
                    self.validator.validate(forged)
                self.assertEqual(ctx.exception.reason, TokenRejection.BAD_SIGNATURE)

    def test_editing_last_signature_character_is_bad_signature(self) -> None:
        last = self.token[-1]
        for replacement in {"B", "C", chr(ord(last) ^ 1)} - {last}:
            with self.subTest(replacement=replacement):
                with self.assertRaises(TokenBadSignature):
                    self.validator.validate(self.token[:-1] + replacement)

    def test_every_bit_flip_in_signature_text_is_bad_signature(self) -> None:
        header, payload, signature = self.token.split(".")
        prefix = f"{header}.{payload}."
        for pos, char in enumerate(signature):
            for bit in range(8):
                edited = signature[:pos] + chr(ord(char) ^ (1 << bit)) + signature[pos + 1 :]
                with self.subTest(pos=pos, bit=bit):
                    with self.assertRaises(TokenBadSignature):
                        self.validator.validate(prefix + edited)

    def test_truncated_or_extended_signature_is_bad_signature(self) -> None:
        for forged in (self.token[:-1], self.token + "A", self.token.rsplit(".", 1)[0] + "."):
            with self.subTest(token=forged[-10:]):
                with self.assertRaises(TokenBadSignature):
                    self.validator.validate(forged)

    def test_forged_roles_claim_is_bad_signature(self) -> None:
        header, payload, signature = self.token.split(".")
        claims = jwt.decode(self.token, options={"verify_signature": False})
        claims["roles"] = ["ROLE_ADMIN", "ROLE_MODERATOR", "ROLE_USER"]
        forged_payload = _b64encode(json.dumps(claims).encode("utf-8"))
        with self.assertRaises(TokenBadSignature):
            self.validator.validate(".".join([header, forged_payload, signature]))

    def test_token_signed_with_other_secret_is_bad_signature(self) -> None:
        other = TokenIssuer("another-secret-0123456789abcdef0123456789", LIFETIME, clock=_at(T0))
        with self.assertRaises(TokenBadSignature):
            self.validator.validate(other.issue(_principal()))


class TestMalformed(unittest.TestCase):
    def setUp(self) -> None:
        self.validator = TokenValidator(TEST_SECRET, clock=_at(T0))

    def _claims(self) -> dict:
        return {
            "sub": "alice",
            "uid": 7,
            "email": "alice@example.com",
            "roles": ["ROLE_USER"],
            "iat": int(T0.timestamp()),
            "exp": int((T0 + LIFETIME).timestamp()),
        }

    def test_garbage_is_malformed(self) -> None:
        for token in ("", "abc", "a.b", "a.b.c", "!!!.???.***"):
            with self.subTest(token=token):
                with self.assertRaises(TokenMalformed) as ctx:
                    self.validator.validate(token)
                self.assertEqual(ctx.exception.reason, TokenRejection.MALFORMED)

    def test_header_or_payload_not_json_object_is_malformed(self) -> None:
        header, payload, signature = jwt.encode(
            self._claims(), TEST_SECRET, algorithm="HS256"
        ).split(".")
        not_object = _b64encode(b"[1, 2]")
        not_json = _b64encode(b"{not json")
        for token in (
            f"{not_object}.{payload}.{signature}",
            f"{header}.{not_object}.{signature}",
            f"{not_json}.{payload}.{signature}",
            f"{header}.{not_json}.{signature}",
        ):
            with self.subTest(token=token[:20]):
                with self.assertRaises(TokenMalformed):
                    self.validator.validate(token)

    def test_other_algorithm_is_rejected(self) -> None:
        token = jwt.encode(self._claims(), TEST_SECRET, algorithm="HS512")
        with self.assertRaises(TokenMalformed):
            self.validator.validate(token)

    def test_unsigned_token_is_rejected(self) -> None:
        token = jwt.encode(self._claims(), None, algorithm="none")
        with self.assertRaises(TokenRejected):
            self.validator.validate(token)

    def test_missing_claim_is_malformed(self) -> None:
        claims = self._claims()
        del claims["uid"]
        token = jwt.encode(claims, TEST_SECRET, algorithm="HS256")
        with self.assertRaises(TokenMalformed):
            self.validator.validate(token)

    def test_wrongly_typed_claims_are_malformed(self) -> None:
        for key, value in (("roles", "ROLE_USER"), ("exp", "tomorrow"), ("uid", "seven")):
            claims = self._claims()
            claims[key] = value
            token = jwt.encode(claims, TEST_SECRET, algorithm="HS256")
            with self.subTest(claim=key):
                with self.assertRaises(TokenMalformed):
                    self.validator.validate(token)
