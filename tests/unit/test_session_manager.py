"""
Unit tests for the messaging session state machine, credential store and backoff.
"""
import asyncio
import json

import pytest

from eventpix.domain.exceptions import (
    CredentialsRejectedError,
    MessageSendError,
    SessionNotConnectedError,
)
from eventpix.infrastructure.messaging import (
    BackoffPolicy,
    JsonCredentialStore,
    MessagingSessionManager,
    SessionState,
)

CREDENTIALS = {"session": "abc", "keys": {"noise": "xyz"}}


@pytest.fixture
def credential_store(tmp_path):
    return JsonCredentialStore(str(tmp_path / "auth" / "credentials.json"))


@pytest.fixture
def manager(chat_transport, credential_store):
    backoff = BackoffPolicy(initial_delay=0.001, max_delay=0.001, jitter=False)
    return MessagingSessionManager(chat_transport, credential_store, backoff=backoff)


async def _settle():
    # Let scheduled reconnect tasks run
    for _ in range(5):
        await asyncio.sleep(0.01)


class TestPairing:
    @pytest.mark.asyncio
    async def test_start_without_credentials_pairs(self, manager, chat_transport):
        assert manager.state == SessionState.UNINITIALIZED

        await manager.start()
        await manager.on_pairing_challenge("2@ABCD-EFGHé\n")

        assert chat_transport.connect_calls == [None]
        assert manager.state == SessionState.PAIRING
        assert manager.pairing_code == "2@ABCD-EFGH"

    @pytest.mark.asyncio
    async def test_connected_persists_credentials_first(self, manager, credential_store):
        await manager.start()
        await manager.on_pairing_challenge("CODE")

        await manager.on_connected(CREDENTIALS)

        assert manager.is_connected
        assert manager.pairing_code is None
        assert credential_store.load() == CREDENTIALS

    @pytest.mark.asyncio
    async def test_credentials_write_failure_keeps_session_down(self, manager, credential_store, chat_transport, monkeypatch):
        def fail(_credentials):
            raise OSError("disk full")

        monkeypatch.setattr(credential_store, "save", fail)
        await manager.start()

        await manager.on_connected(CREDENTIALS)

        assert not manager.is_connected
        assert chat_transport.closed == 1
        await manager.stop()

    @pytest.mark.asyncio
    async def test_start_reuses_stored_credentials(self, manager, credential_store, chat_transport):
        credential_store.save(CREDENTIALS)

        await manager.start()

        assert chat_transport.connect_calls == [CREDENTIALS]

    @pytest.mark.asyncio
    async def test_rejected_credentials_cleared_and_fresh_pairing(self, manager, credential_store, chat_transport):
        credential_store.save(CREDENTIALS)
        chat_transport.connect_error = CredentialsRejectedError("401")

        await manager.start()

        assert chat_transport.connect_calls == [CREDENTIALS, None]
        assert credential_store.load() is None
        assert manager.state == SessionState.PAIRING


class TestDisconnects:
    @pytest.mark.asyncio
    async def test_transport_drop_reconnects(self, manager, chat_transport, credential_store):
        await manager.start()
        await manager.on_connected(CREDENTIALS)

        await manager.on_disconnected("connection reset", logged_out=False)
        assert manager.state == SessionState.DISCONNECTED
        assert manager.last_disconnect_reason == "connection reset"
        await _settle()

        assert chat_transport.connect_calls == [None, CREDENTIALS]
        await manager.on_connected(CREDENTIALS)
        assert manager.is_connected
        assert manager.backoff.attempt == 0
        await manager.stop()

    @pytest.mark.asyncio
    async def test_failed_open_schedules_reconnect(self, manager, chat_transport):
        chat_transport.connect_error = ConnectionError("bridge down")

        await manager.start()
        assert manager.state == SessionState.DISCONNECTED
        await _settle()

        assert len(chat_transport.connect_calls) == 2
        assert manager.state == SessionState.PAIRING
        await manager.stop()

    @pytest.mark.asyncio
    async def test_logout_is_terminal(self, manager, chat_transport, credential_store):
        await manager.start()
        await manager.on_connected(CREDENTIALS)

        await manager.on_disconnected("logged out from phone", logged_out=True)
        await _settle()

        assert manager.state == SessionState.LOGGED_OUT
        assert credential_store.load() is None
        assert chat_transport.connect_calls == [None]

    @pytest.mark.asyncio
    async def test_restart_after_logout_pairs_fresh(self, manager, chat_transport, credential_store):
        await manager.start()
        await manager.on_connected(CREDENTIALS)
        await manager.on_disconnected("logged out", logged_out=True)

        await manager.restart()

        assert manager.state == SessionState.PAIRING
        assert chat_transport.connect_calls == [None, None]

    @pytest.mark.asyncio
    async def test_restart_keeps_connected_session(self, manager, chat_transport):
        await manager.start()
        await manager.on_connected(CREDENTIALS)

        await manager.restart()

        assert manager.is_connected
        assert chat_transport.closed == 0

    @pytest.mark.asyncio
    async def test_stop_ignores_late_callbacks(self, manager, chat_transport):
        await manager.start()
        await manager.stop()

        await manager.on_disconnected("closed", logged_out=False)
        await _settle()

        assert manager.state == SessionState.UNINITIALIZED
        assert chat_transport.connect_calls == [None]


class TestSendText:
    @pytest.mark.asyncio
    async def test_fails_fast_when_not_connected(self, manager, chat_transport):
        await manager.start()

        with pytest.raises(SessionNotConnectedError) as exc_info:
            await manager.send_text("15550100", "hello")

        assert exc_info.value.state == "PAIRING"
        assert chat_transport.sent == []

    @pytest.mark.asyncio
    async def test_sends_in_submission_order(self, manager, chat_transport):
        await manager.start()
        await manager.on_connected(CREDENTIALS)

        await asyncio.gather(*(manager.send_text("15550100", f"msg {i}") for i in range(5)))

        assert [text for _, text in chat_transport.sent] == [f"msg {i}" for i in range(5)]

    @pytest.mark.asyncio
    async def test_transport_errors_wrapped(self, manager, chat_transport):
        await manager.start()
        await manager.on_connected(CREDENTIALS)
        chat_transport.send_error = RuntimeError("socket closed")

        with pytest.raises(MessageSendError):
            await manager.send_text("15550100", "hello")


class TestCredentialStore:
    def test_missing_file_loads_none(self, credential_store):
        assert credential_store.load() is None

    def test_save_load_clear(self, credential_store):
        credential_store.save(CREDENTIALS)
        assert json.loads(credential_store.path.read_text()) == CREDENTIALS
        assert not credential_store.path.with_name("credentials.json.tmp").exists()

        credential_store.clear()
        assert credential_store.load() is None
        credential_store.clear()

    def test_corrupt_file_ignored(self, credential_store):
        credential_store.path.parent.mkdir(parents=True)
        credential_store.path.write_text("{not json")
        assert credential_store.load() is None


class TestBackoffPolicy:
    def test_exponential_and_capped(self):
        backoff = BackoffPolicy(initial_delay=1.0, max_delay=5.0, multiplier=2.0, jitter=False)
        assert [backoff.next_delay() for _ in range(5)] == [1.0, 2.0, 4.0, 5.0, 5.0]
        backoff.reset()
        assert backoff.next_delay() == 1.0

    def test_jitter_stays_within_bounds(self):
        backoff = BackoffPolicy(initial_delay=2.0, max_delay=2.0)
        for _ in range(20):
            assert 1.0 <= backoff.next_delay() < 3.0

    @pytest.mark.parametrize("kwargs", [{"initial_delay": 0}, {"initial_delay": 5, "max_delay": 1}, {"multiplier": 0.5}])
    def test_invalid_policy(self, kwargs):
        with pytest.raises(ValueError):
            BackoffPolicy(**kwargs)
