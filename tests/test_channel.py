"""Tests for the live notification channel."""

import json

import pytest

from src.tracker.models import ConnectionStatus, Severity
from src.tracker.notifications.channel import (
    NotificationChannel,
    alert_from_message,
    channel_url,
)
from tests.fakes import FakeConnector, FakeSocket, wait_until

pytestmark = pytest.mark.unit

WS_URL = "ws://tracker.test/ws"


def _count(value):
    return json.dumps({"type": "notification_count", "count": value})


def _channel(connector, **kwargs) -> NotificationChannel:
    kwargs.setdefault("reconnect_delay", 0)
    return NotificationChannel(WS_URL, "user_abc", connector=connector, **kwargs)


class TestChannelUrl:
    def test_appends_session_id(self):
        assert channel_url(WS_URL, "user_abc") == "ws://tracker.test/ws?sessionId=user_abc"

    def test_keeps_existing_query(self):
        assert channel_url(WS_URL + "?v=2", "user_abc") == "ws://tracker.test/ws?v=2&sessionId=user_abc"

    def test_without_session(self):
        assert channel_url(WS_URL, None) == WS_URL


class TestMessageReduction:
    def test_count_message_replaces_count(self):
        channel = _channel(FakeConnector())
        received = []
        channel.add_count_listener(received.append)
        channel.state.count = 3

        result = channel.handle_message(_count(7))

        assert result is None
        assert channel.count == 7
        assert received == [7]

    def test_count_message_does_not_alert(self):
        alerts = []
        channel = _channel(FakeConnector(), on_alert=alerts.append)

        channel.handle_message(_count(2))

        assert alerts == []

    @pytest.mark.parametrize(
        "priority, severity, duration",
        [
            ("critical", Severity.ERROR, 8000),
            ("normal", Severity.SUCCESS, 5000),
            ("low", Severity.INFO, 5000),
            (None, Severity.INFO, 5000),
        ],
    )
    def test_alert_severity_and_duration(self, priority, severity, duration):
        alerts = []
        channel = _channel(FakeConnector(), on_alert=alerts.append)
        channel.state.count = 4

        alert = channel.handle_message(
            json.dumps({"type": "exercise", "message": "Exercise updated", "priority": priority})
        )

        assert alerts == [alert]
        assert alert.severity is severity
        assert alert.duration_ms == duration
        assert alert.message == "Exercise updated"
        assert channel.count == 4

    def test_malformed_message_is_dropped(self):
        alerts = []
        channel = _channel(FakeConnector(), on_alert=alerts.append)

        assert channel.handle_message("not json{") is None
        assert channel.handle_message("[1, 2]") is None
        assert alerts == []

    def test_failing_listener_does_not_block_others(self):
        channel = _channel(FakeConnector())
        received = []

        def broken(count):
            raise RuntimeError("listener broke")

        channel.add_count_listener(broken)
        channel.add_count_listener(received.append)

        channel.handle_message(_count(5))

        assert received == [5]

    def test_removed_listener_not_called(self):
        channel = _channel(FakeConnector())
        received = []
        channel.add_count_listener(received.append)
        channel.remove_count_listener(received.append)

        channel.handle_message(_count(5))

        assert received == []

    def test_alert_from_message_keeps_entity(self):
        alert = alert_from_message({"message": "m", "priority": "critical", "entity_name": "Dragon"})

        assert alert.entity_name == "Dragon"
        assert alert.priority == "critical"


class TestReconnect:
    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self):
        connector = FakeConnector()
        channel = _channel(connector, max_attempts=5)

        assert channel.connect() is True
        await channel.wait_closed()

        # Initial attempt plus five reconnects
        assert len(connector.urls) == 6
        assert channel.state.reconnect_attempts == 5
        assert channel.state.status is ConnectionStatus.CLOSED
        assert channel.state.clean is False
        assert channel.status_label() == "Disconnected (Retries: 5/5)"

    @pytest.mark.asyncio
    async def test_successful_open_resets_attempts(self):
        connector = FakeConnector(
            [
                ConnectionRefusedError("down"),
                ConnectionRefusedError("down"),
                FakeSocket([_count(1)], close_code=1006),
            ]
        )
        channel = _channel(connector, max_attempts=5)

        channel.connect()
        await channel.wait_closed()

        # Two failures, one session, then five fresh reconnects
        assert len(connector.urls) == 8
        assert channel.count == 1
        assert channel.state.reconnect_attempts == 5

    @pytest.mark.asyncio
    async def test_normal_server_close_is_terminal(self):
        connector = FakeConnector([FakeSocket([_count(3)], close_code=1000)])
        channel = _channel(connector)

        channel.connect()
        await channel.wait_closed()

        assert len(connector.urls) == 1
        assert channel.count == 3
        assert channel.state.status is ConnectionStatus.CLOSED
        assert channel.state.clean is True

    @pytest.mark.asyncio
    async def test_connects_with_session_id(self):
        connector = FakeConnector([FakeSocket()])
        channel = _channel(connector)

        channel.connect()
        await channel.wait_closed()

        assert connector.urls == ["ws://tracker.test/ws?sessionId=user_abc"]


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_second_connect_is_ignored_while_open(self):
        socket = FakeSocket(hold_open=True)
        connector = FakeConnector([socket])
        channel = _channel(connector)

        channel.connect()
        await wait_until(lambda: channel.is_connected)

        assert channel.connect() is False
        assert len(connector.urls) == 1
        assert channel.status_label() == "Connected"

        await channel.disconnect()

    @pytest.mark.asyncio
    async def test_pushed_messages_reach_listeners(self):
        socket = FakeSocket(hold_open=True)
        channel = _channel(FakeConnector([socket]))
        received = []
        channel.add_count_listener(received.append)

        channel.connect()
        await wait_until(lambda: channel.is_connected)
        socket.push(_count(9))
        await wait_until(lambda: channel.count == 9)
        await channel.disconnect()

        assert received == [9]

    @pytest.mark.asyncio
    async def test_disconnect_closes_cleanly(self):
        socket = FakeSocket(hold_open=True)
        connector = FakeConnector([socket])
        channel = _channel(connector)

        channel.connect()
        await wait_until(lambda: channel.is_connected)
        await channel.disconnect()

        assert socket.closed_with == (1000, "Manual disconnect")
        assert channel.state.status is ConnectionStatus.CLOSED
        assert channel.state.clean is True
        assert len(connector.urls) == 1

    @pytest.mark.asyncio
    async def test_disconnect_cancels_pending_reconnect(self):
        connector = FakeConnector()
        channel = _channel(connector, reconnect_delay=10)

        channel.connect()
        await wait_until(lambda: channel.state.reconnect_attempts == 1)
        await channel.disconnect()

        assert len(connector.urls) == 1
        assert channel.state.status is ConnectionStatus.CLOSED
        assert channel.state.clean is True

    @pytest.mark.asyncio
    async def test_manual_connect_after_give_up_starts_fresh(self):
        connector = FakeConnector()
        channel = _channel(connector, max_attempts=1)

        channel.connect()
        await channel.wait_closed()
        assert len(connector.urls) == 2

        connector.outcomes.append(FakeSocket(hold_open=True))
        assert channel.connect() is True
        await wait_until(lambda: channel.is_connected)

        assert channel.state.reconnect_attempts == 0
        await channel.disconnect()
