"""Unit tests for the Resend API client."""

from unittest.mock import Mock

import pytest
import requests

from job_alerts.notifications.models import EmailDeliveryError, OutgoingEmail
from job_alerts.notifications.resend_client import RESEND_API_URL, ResendClient


@pytest.fixture
def email():
    return OutgoingEmail(
        sender="TalentHub <no-reply@talenthub.com>",
        to="jane@example.com",
        subject="1 new job matching your alert",
        html="<p>Hi</p>",
        text="Hi",
    )


def make_response(status_code, body=None, reason="OK"):
    response = Mock()
    response.status_code = status_code
    response.reason = reason
    if body is None:
        response.json.side_effect = ValueError("no json")
    else:
        response.json.return_value = body
    return response


class TestResendClient:
    def test_empty_key_rejected(self):
        with pytest.raises(ValueError):
            ResendClient("  ")

    def test_posts_payload(self, email):
        session = Mock()
        session.post.return_value = make_response(200, {"id": "msg_1"})
        client = ResendClient("re_123", timeout=15, session=session)

        client.send(email)

        session.post.assert_called_once()
        args, kwargs = session.post.call_args
        assert args[0] == RESEND_API_URL
        assert kwargs["timeout"] == 15
        assert kwargs["headers"]["Authorization"] == "Bearer re_123"
        assert kwargs["json"] == {
            "from": "TalentHub <no-reply@talenthub.com>",
            "to": ["jane@example.com"],
            "subject": "1 new job matching your alert",
            "html": "<p>Hi</p>",
            "text": "Hi",
        }

    def test_text_omitted_when_empty(self, email):
        email.text = ""
        session = Mock()
        session.post.return_value = make_response(200, {})

        ResendClient("re_123", session=session).send(email)

        assert "text" not in session.post.call_args.kwargs["json"]

    def test_http_error_includes_message(self, email):
        session = Mock()
        session.post.return_value = make_response(
            422, {"name": "validation_error", "message": "Invalid `to` field"}
        )

        with pytest.raises(EmailDeliveryError, match="HTTP 422: Invalid `to` field"):
            ResendClient("re_123", session=session).send(email)

    def test_http_error_without_json(self, email):
        session = Mock()
        session.post.return_value = make_response(502, reason="Bad Gateway")

        with pytest.raises(EmailDeliveryError, match="HTTP 502: Bad Gateway"):
            ResendClient("re_123", session=session).send(email)

    def test_timeout(self, email):
        session = Mock()
        session.post.side_effect = requests.exceptions.Timeout()

        with pytest.raises(EmailDeliveryError, match="timed out"):
            ResendClient("re_123", session=session).send(email)

    def test_connection_error(self, email):
        session = Mock()
        session.post.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(EmailDeliveryError, match="refused"):
            ResendClient("re_123", session=session).send(email)
