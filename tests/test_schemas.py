"""Validation rules of the auth request schemas."""

import unittest

from pydantic import ValidationError

from warden.schemas.auth import SignInRequest, SignUpRequest


class TestSignInRequest(unittest.TestCase):
    def test_blank_fields_rejected(self) -> None:
        for username, password in (("   ", "secret1"), ("ivy", " "), ("", "secret1")):
            with self.subTest(username=username, password=password):
                with self.assertRaises(ValidationError):
                    SignInRequest(username=username, password=password)

    def test_values_kept_as_given(self) -> None:
        body = SignInRequest(username="ivy", password=" secret1 ")
        self.assertEqual(body.password, " secret1 ")


class TestSignUpRequest(unittest.TestCase):
    def test_role_absent_vs_empty(self) -> None:
        base = {"username": "ivy", "email": "ivy@example.com", "password": "secret1"}
        self.assertIsNone(SignUpRequest(**base).role)
        self.assertEqual(SignUpRequest(**base, role=[]).role, set())
        self.assertEqual(SignUpRequest(**base, role=["admin", "admin"]).role, {"admin"})
