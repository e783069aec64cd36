"""Tests for message, notification and tone models."""

import pytest
from conftest import make_document

from replydesk.models.message import Message, sender_display_name
from replydesk.models.notification import NotificationKind
from replydesk.models.tone import ToneAttributes


class TestMessage:
    """Tests for the stored-document transform."""

    def test_from_document(self) -> None:
        message = Message.from_document(make_document("7", email="sam@shop.test"))

        assert message.id == "7"
        assert message.sender == "sam@shop.test"
        assert message.sender_name == "sam"
        assert message.subject == "Order 7"
        assert message.customer_email == "Where is order 7?"
        assert message.summary == "Customer asks about order 7"
        assert message.reply == "Draft reply 7"

    def test_missing_fields_fall_back(self) -> None:
        message = Message.from_document({"id": 3, "client_email": None, "email_subject": ""})

        assert message.id == "3"
        assert message.sender_name == "Unknown"
        assert message.subject == "No Subject"
        assert message.reply == ""

    def test_with_reply_returns_copy(self) -> None:
        message = Message.from_document(make_document("1"))

        updated = message.with_reply("New")

        assert updated.reply == "New"
        assert message.reply == "Draft reply 1"

    @pytest.mark.parametrize(
        ("address", "expected"),
        [("a.b@x.com", "a.b"), ("", "Unknown"), (None, "Unknown"), ("@x.com", "Unknown")],
    )
    def test_sender_display_name(self, address: str | None, expected: str) -> None:
        assert sender_display_name(address) == expected


class TestToneAndNotification:
    """Tests for tone descriptors and notification kinds."""

    def test_combined_tone(self) -> None:
        assert ToneAttributes(formality="Casual", length="Long").combined == "Casual, Long length"
        assert ToneAttributes().combined == "No Change, No Change"

    def test_only_outcomes_self_expire(self) -> None:
        assert not NotificationKind.LOADING.self_expires
        assert NotificationKind.SUCCESS.self_expires
        assert NotificationKind.ERROR.self_expires
