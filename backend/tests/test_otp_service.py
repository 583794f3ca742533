"""Tests for the one-time code state machine."""

from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

import pytest

from notekeeper.models import OtpCode, OtpPurpose
from notekeeper.services.otp_service import OtpPolicy, OtpService, OtpStatus, hash_code

EMAIL = "person@example.com"


@pytest.fixture
def mailer():
    mock = MagicMock()
    mock.send_otp_email.return_value = True
    return mock


@pytest.fixture
def otp(db_session, mailer):
    return OtpService(db_session, mailer, OtpPolicy())


def _sent_code(mailer) -> str:
    return mailer.send_otp_email.call_args[0][1]


def _backdate(db_session, seconds: int) -> None:
    for record in db_session.query(OtpCode).all():
        record.created_at = datetime.now(UTC) - timedelta(seconds=seconds)
    db_session.commit()


class TestGenerateCode:
    def test_codes_are_six_digits(self):
        for _ in range(50):
            code = OtpService.generate_code()
            assert len(code) == 6
            assert code.isdigit()


class TestRequestCode:
    def test_request_persists_hash_and_sends(self, otp, mailer, db_session):
        outcome = otp.request_code(EMAIL, OtpPurpose.LOGIN)

        assert outcome.status == OtpStatus.SENT
        assert outcome.success
        code = _sent_code(mailer)
        record = db_session.query(OtpCode).one()
        assert record.code_hash == hash_code(code)
        assert record.attempts == 0
        assert record.verified is False

    def test_email_is_lowercased(self, otp, mailer, db_session):
        otp.request_code("Person@Example.COM", OtpPurpose.LOGIN)

        assert mailer.send_otp_email.call_args[0][0] == EMAIL
        assert db_session.query(OtpCode).one().email == EMAIL

    def test_second_request_within_cooldown_is_throttled(self, otp, mailer):
        otp.request_code(EMAIL, OtpPurpose.LOGIN)

        outcome = otp.request_code(EMAIL, OtpPurpose.LOGIN)

        assert outcome.status == OtpStatus.THROTTLED
        assert 1 <= outcome.wait_seconds <= 10
        assert outcome.message == f"Please wait {outcome.wait_seconds} seconds before requesting another OTP"
        assert mailer.send_otp_email.call_count == 1

    def test_cooldown_is_per_purpose(self, otp):
        otp.request_code(EMAIL, OtpPurpose.EMAIL_VERIFICATION)

        outcome = otp.request_code(EMAIL, OtpPurpose.LOGIN)

        assert outcome.status == OtpStatus.SENT

    def test_new_code_replaces_old(self, otp, mailer, db_session):
        otp.request_code(EMAIL, OtpPurpose.LOGIN)
        first = _sent_code(mailer)
        _backdate(db_session, 30)

        otp.request_code(EMAIL, OtpPurpose.LOGIN)
        second = _sent_code(mailer)

        assert db_session.query(OtpCode).count() == 1
        if first != second:
            assert otp.verify_code(EMAIL, OtpPurpose.LOGIN, first).status == OtpStatus.INVALID
        assert otp.verify_code(EMAIL, OtpPurpose.LOGIN, second).status == OtpStatus.VERIFIED

    def test_delivery_failure_discards_code(self, otp, mailer, db_session):
        mailer.send_otp_email.return_value = False

        outcome = otp.request_code(EMAIL, OtpPurpose.LOGIN)

        assert outcome.status == OtpStatus.DELIVERY_FAILED
        assert outcome.message == "Failed to send OTP email"
        assert db_session.query(OtpCode).count() == 0

    def test_delivery_exception_counts_as_failure(self, otp, mailer, db_session):
        mailer.send_otp_email.side_effect = RuntimeError("smtp down")

        outcome = otp.request_code(EMAIL, OtpPurpose.LOGIN)

        assert outcome.status == OtpStatus.DELIVERY_FAILED
        assert db_session.query(OtpCode).count() == 0

    def test_request_sweeps_expired_codes_of_other_addresses(self, otp, db_session):
        db_session.add(
            OtpCode(
                email="stale@example.com",
                code_hash=hash_code("123456"),
                purpose=OtpPurpose.LOGIN,
                expires_at=datetime.now(UTC) - timedelta(minutes=1),
            )
        )
        db_session.commit()

        otp.request_code(EMAIL, OtpPurpose.LOGIN)

        emails = {record.email for record in db_session.query(OtpCode).all()}
        assert emails == {EMAIL}


class TestVerifyCode:
    def test_correct_code_verifies_once(self, otp, mailer, db_session):
        otp.request_code(EMAIL, OtpPurpose.LOGIN)
        code = _sent_code(mailer)

        assert otp.verify_code(EMAIL, OtpPurpose.LOGIN, code).status == OtpStatus.VERIFIED
        assert db_session.query(OtpCode).one().verified is True
        assert otp.verify_code(EMAIL, OtpPurpose.LOGIN, code).status == OtpStatus.NOT_FOUND

    def test_wrong_purpose_not_found(self, otp, mailer):
        otp.request_code(EMAIL, OtpPurpose.EMAIL_VERIFICATION)

        outcome = otp.verify_code(EMAIL, OtpPurpose.LOGIN, _sent_code(mailer))

        assert outcome.status == OtpStatus.NOT_FOUND
        assert outcome.message == "Invalid or expired OTP"

    def test_wrong_code_counts_down_then_exhausts(self, otp, mailer, db_session):
        otp.request_code(EMAIL, OtpPurpose.LOGIN)
        good = _sent_code(mailer)
        bad = "000000" if good != "000000" else "999999"

        first = otp.verify_code(EMAIL, OtpPurpose.LOGIN, bad)
        second = otp.verify_code(EMAIL, OtpPurpose.LOGIN, bad)
        third = otp.verify_code(EMAIL, OtpPurpose.LOGIN, bad)

        assert (first.status, first.attempts_remaining) == (OtpStatus.INVALID, 2)
        assert first.message == "Invalid OTP. 2 attempts remaining."
        assert (second.status, second.attempts_remaining) == (OtpStatus.INVALID, 1)
        assert third.status == OtpStatus.EXHAUSTED
        assert db_session.query(OtpCode).count() == 0
        assert otp.verify_code(EMAIL, OtpPurpose.LOGIN, good).status == OtpStatus.NOT_FOUND

    def test_correct_code_after_two_misses_still_works(self, otp, mailer):
        otp.request_code(EMAIL, OtpPurpose.LOGIN)
        good = _sent_code(mailer)
        bad = "000000" if good != "000000" else "999999"

        otp.verify_code(EMAIL, OtpPurpose.LOGIN, bad)
        otp.verify_code(EMAIL, OtpPurpose.LOGIN, bad)

        assert otp.verify_code(EMAIL, OtpPurpose.LOGIN, good).status == OtpStatus.VERIFIED

    def test_attempts_over_cap_exhausts_even_with_right_code(self, otp, mailer, db_session):
        otp.request_code(EMAIL, OtpPurpose.LOGIN)
        good = _sent_code(mailer)
        record = db_session.query(OtpCode).one()
        record.attempts = 3
        db_session.commit()

        outcome = otp.verify_code(EMAIL, OtpPurpose.LOGIN, good)

        assert outcome.status == OtpStatus.EXHAUSTED
        assert outcome.message == "Maximum OTP attempts exceeded. Please request a new OTP."

    def test_expired_code_not_found(self, otp, mailer, db_session):
        otp.request_code(EMAIL, OtpPurpose.LOGIN)
        record = db_session.query(OtpCode).one()
        record.expires_at = datetime.now(UTC) - timedelta(seconds=1)
        db_session.commit()

        outcome = otp.verify_code(EMAIL, OtpPurpose.LOGIN, _sent_code(mailer))

        assert outcome.status == OtpStatus.NOT_FOUND

    def test_verified_code_still_counts_for_cooldown(self, otp, mailer):
        otp.request_code(EMAIL, OtpPurpose.LOGIN)
        otp.verify_code(EMAIL, OtpPurpose.LOGIN, _sent_code(mailer))

        assert otp.request_code(EMAIL, OtpPurpose.LOGIN).status == OtpStatus.THROTTLED


class TestPolicy:
    def test_custom_policy_is_honoured(self, db_session, mailer):
        otp = OtpService(db_session, mailer, OtpPolicy(max_attempts=1, resend_cooldown_seconds=0))

        otp.request_code(EMAIL, OtpPurpose.LOGIN)
        good = _sent_code(mailer)
        bad = "000000" if good != "000000" else "999999"

        assert otp.verify_code(EMAIL, OtpPurpose.LOGIN, bad).status == OtpStatus.EXHAUSTED
        assert otp.request_code(EMAIL, OtpPurpose.LOGIN).status == OtpStatus.SENT

