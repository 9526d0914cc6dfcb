"""
Result envelope tests.

OperationResult helpers and ListenerOutcome.notified across the
email/UI combinations.
"""

import pytest

from core.models import DeliveryChannel, DeliveryResult, ListenerOutcome, OperationResult


def _delivery(channel: DeliveryChannel, success: bool) -> DeliveryResult:
    return DeliveryResult(
        channel=channel,
        provider="sendgrid" if channel == DeliveryChannel.EMAIL else "webhook",
        success=success,
        status_code=202 if success else 500,
    )


class TestOperationResult:

    def test_ok_carries_data(self):
        result = OperationResult.ok({"n": 1}, "done")
        assert result.is_success
        assert result.data == {"n": 1}
        assert result.message == "done"

    def test_fail_has_no_data(self):
        result = OperationResult.fail("Failed to create container")
        assert not result.is_success
        assert result.data is None
        assert result.message == "Failed to create container"


class TestListenerOutcome:

    @pytest.mark.parametrize("email_ok, ui_ok, expected", [
        (True, True, True),
        (True, False, True),
        (False, True, True),
        (False, False, False),
    ])
    def test_notified_when_any_channel_succeeds(self, email_ok, ui_ok, expected):
        outcome = ListenerOutcome(
            blob_name="result.csv",
            found=True,
            email=_delivery(DeliveryChannel.EMAIL, email_ok),
            ui=_delivery(DeliveryChannel.UI, ui_ok),
        )
        assert outcome.notified is expected

    def test_skipped_blob_not_notified(self):
        outcome = ListenerOutcome(blob_name="gone.csv", skipped_reason="Blob no longer exists")
        assert outcome.found is False
        assert outcome.notified is False

    def test_ui_disabled_email_only(self):
        outcome = ListenerOutcome(
            blob_name="result.csv",
            found=True,
            email=_delivery(DeliveryChannel.EMAIL, True),
        )
        assert outcome.ui is None
        assert outcome.notified is True
