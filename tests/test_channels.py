"""Channel adapter tests with a mocked HTTP session."""

from unittest.mock import MagicMock

import pytest
import requests

from restart_notifier.channels import (
    CHANNEL_TYPES,
    DiscordChannel,
    SlackChannel,
    TeamsChannel,
    build_channels,
)
from restart_notifier.errors import DeliveryFailed

MESSAGE = "Pod api-0 has restarted 3 times"


def _session(status_code=200, reason="OK"):
    session = MagicMock()
    session.post.return_value = MagicMock(status_code=status_code, reason=reason)
    return session


# ---------------------------------------------------------------------------
# Payloads
# ---------------------------------------------------------------------------


class TestPayloads:
    def test_discord(self):
        assert DiscordChannel("https://d").build_payload(MESSAGE) == {"content": MESSAGE}

    def test_slack(self):
        assert SlackChannel("https://s").build_payload(MESSAGE) == {"text": MESSAGE}

    def test_teams_message_card(self):
        payload = TeamsChannel("https://t").build_payload(MESSAGE)
        assert payload == {
            "@type": "MessageCard",
            "@context": "http://schema.org/extensions",
            "summary": "Pod Restart Notification",
            "themeColor": "0078D7",
            "text": MESSAGE,
        }

    def test_untrusted_text_is_not_templated(self):
        message = 'Pod "evil",\n"x": 1 has restarted 2 times'
        assert SlackChannel("https://s").build_payload(message)["text"] == message


# ---------------------------------------------------------------------------
# Delivery
# ---------------------------------------------------------------------------


class TestNotify:
    def test_posts_json_once(self):
        session = _session()
        SlackChannel("https://hooks/slack", session=session).notify(MESSAGE)

        session.post.assert_called_once()
        args, kwargs = session.post.call_args
        assert args == ("https://hooks/slack",)
        assert kwargs["json"] == {"text": MESSAGE}
        assert kwargs["headers"]["Content-Type"] == "application/json"
        assert kwargs["timeout"] is None

    def test_timeout_forwarded(self):
        session = _session()
        DiscordChannel("https://d", session=session, timeout=5.0).notify(MESSAGE)
        assert session.post.call_args.kwargs["timeout"] == 5.0

    @pytest.mark.parametrize("status", [201, 204, 400, 429, 500])
    def test_non_200_is_failure(self, status):
        channel = DiscordChannel("https://d", session=_session(status, "Nope"))
        with pytest.raises(DeliveryFailed) as exc:
            channel.notify(MESSAGE)
        assert exc.value.channel == "discord"
        assert exc.value.status_code == status
        assert str(status) in str(exc.value)

    def test_transport_error_is_failure(self):
        session = MagicMock()
        session.post.side_effect = requests.ConnectionError("connection refused")
        channel = TeamsChannel("https://t", session=session)
        with pytest.raises(DeliveryFailed, match="connection refused"):
            channel.notify(MESSAGE)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class TestBuildChannels:
    def test_registry_order(self):
        assert list(CHANNEL_TYPES) == ["discord", "teams", "slack"]

    def test_empty_endpoints_skipped(self):
        channels = build_channels({"discord": "", "teams": "https://t", "slack": "https://s"})
        assert [c.kind for c in channels] == ["teams", "slack"]

    def test_order_follows_registry_not_input(self):
        channels = build_channels({"slack": "https://s", "discord": "https://d"})
        assert [c.kind for c in channels] == ["discord", "slack"]

    def test_all_disabled(self):
        assert build_channels({"discord": "", "teams": "", "slack": ""}) == []

    def test_shared_session(self):
        session = MagicMock()
        channels = build_channels({"discord": "https://d", "slack": "https://s"}, session=session)
        assert all(c.session is session for c in channels)

    def test_unknown_kind_ignored(self):
        channels = build_channels({"pager": "https://p", "slack": "https://s"})
        assert [c.kind for c in channels] == ["slack"]
