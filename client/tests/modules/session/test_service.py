import asyncio

import pytest

from shared.exceptions import ApiUnavailableError
from shared.models import UserRole
from modules.auth.exceptions import InvalidUserPayloadError
from modules.session.broadcast import BroadcastHub
from modules.session.events import EventBus
from modules.session.interfaces import ISessionService
from modules.session.models import (
    AuthAction,
    AuthStateChanged,
    BroadcastKind,
    SessionSnapshot,
    SessionState,
)
from modules.session.service import SESSION_SOURCE, SessionService

from tests.helpers import FakeAuthApi, make_user, settle, user_payload


@pytest.fixture
def hub():
    return BroadcastHub()


@pytest.fixture
def auth_api():
    return FakeAuthApi()


@pytest.fixture
def session(auth_api, hub, timings):
    service = SessionService(auth_api, hub.channel("tab-a"), timings=timings)
    service.start()
    yield service
    service.close()


class TestInitialize:
    def test_initial_snapshot(self, session):
        """A new store should be uninitialized and loading."""
        assert session.state == SessionState.UNINITIALIZED
        assert session.loading is True
        assert session.user is None
        assert session.is_authenticated is False

    def test_implements_interface(self, session):
        assert isinstance(session, ISessionService)

    @pytest.mark.asyncio
    async def test_authenticated_from_profile(self, session, auth_api):
        """A valid profile should make the store authenticated."""
        auth_api.profile = make_user(role=UserRole.ORGANIZER)
        states = []
        session.subscribe(lambda snapshot: states.append(snapshot.state))

        snapshot = await session.initialize()

        assert states == [SessionState.LOADING, SessionState.READY]
        assert snapshot.is_ready
        assert snapshot.is_authenticated is True
        assert snapshot.role == UserRole.ORGANIZER

    @pytest.mark.asyncio
    async def test_unauthenticated_without_profile(self, session):
        """No profile should still settle into READY."""
        snapshot = await session.initialize()
        assert snapshot.state == SessionState.READY
        assert snapshot.loading is False
        assert snapshot.is_authenticated is False
        assert snapshot.user is None

    @pytest.mark.asyncio
    async def test_runs_once(self, session, auth_api):
        """Repeated initialize() calls should fetch only once."""
        auth_api.fetch_delay = 0.01
        await asyncio.gather(session.initialize(), session.initialize())
        await session.initialize()
        assert auth_api.calls["fetch_profile"] == 1

    @pytest.mark.asyncio
    async def test_context_manager(self, auth_api, hub, timings):
        """async with should start and initialize the store."""
        auth_api.profile = make_user()
        async with SessionService(auth_api, hub.channel(), timings=timings) as service:
            assert service.is_authenticated is True


class TestLoginLogout:
    @pytest.mark.asyncio
    async def test_login_user_from_payload(self, session):
        """login_user should normalize a raw payload."""
        await session.initialize()
        user = session.login_user({"user": user_payload(role="admin")})

        assert user.role == UserRole.ADMIN
        assert session.user == user
        assert session.is_authenticated is True
        assert session.state == SessionState.READY

    @pytest.mark.asyncio
    async def test_login_user_rejects_incomplete_payload(self, session):
        """An unusable payload should raise and leave the store untouched."""
        await session.initialize()
        before = session.snapshot

        with pytest.raises(InvalidUserPayloadError):
            session.login_user({"email": "a@b.co"})

        assert session.snapshot == before

    @pytest.mark.asyncio
    async def test_login_then_logout_clears(self, session, auth_api):
        """logout_user should clear the session."""
        await session.initialize()
        session.login(make_user())

        await session.logout()

        assert auth_api.calls["logout"] == 1
        assert session.is_authenticated is False
        assert session.user is None

    @pytest.mark.asyncio
    async def test_logout_during_refresh_stays_logged_out(self, session, auth_api):
        """A refresh that finishes after logout must not restore the old user."""
        await session.initialize()
        user = make_user()
        session.login_user(user)
        auth_api.profile = user
        auth_api.fetch_delay = 0.05

        refresh = asyncio.create_task(session.refresh_user())
        await asyncio.sleep(0.01)
        await session.logout_user()
        await refresh

        assert session.is_authenticated is False
        assert session.user is None

    @pytest.mark.asyncio
    async def test_logout_during_initialize_stays_logged_out(self, session, auth_api):
        """The initial fetch should not override a logout that happened meanwhile."""
        auth_api.profile = make_user()
        auth_api.fetch_delay = 0.05

        init = asyncio.create_task(session.initialize())
        await asyncio.sleep(0.01)
        await session.logout_user()
        snapshot = await init

        assert snapshot.state == SessionState.READY
        assert snapshot.loading is False
        assert snapshot.is_authenticated is False

    @pytest.mark.asyncio
    async def test_logout_cancels_pending_event_refresh(self, session, auth_api):
        """A refresh triggered by an auth event should be dropped by logout."""
        await session.initialize()
        auth_api.profile = make_user()
        auth_api.fetch_delay = 0.05
        session.event_bus.dispatch(AuthStateChanged(action=AuthAction.REFRESH, source="navbar"))
        await asyncio.sleep(0.03)

        await session.logout_user()
        await settle()

        assert session.is_authenticated is False
        assert session.user is None

    @pytest.mark.asyncio
    async def test_logout_clears_even_when_request_fails(self, session, auth_api):
        """A failed logout request should still clear the local session."""
        auth_api.errors["logout"] = ApiUnavailableError()
        await session.initialize()
        session.login_user(make_user())

        await session.logout_user()

        assert session.is_authenticated is False
        assert session.user is None

    @pytest.mark.asyncio
    async def test_logout_dispatches_event(self, auth_api, hub, timings):
        """logout_user should dispatch a logout auth-state-changed event."""
        bus = EventBus()
        events = []
        bus.subscribe(events.append)
        service = SessionService(auth_api, hub.channel(), event_bus=bus, timings=timings)

        await service.logout_user()

        assert [(e.action, e.source) for e in events] == [(AuthAction.LOGOUT, SESSION_SOURCE)]


class TestRefresh:
    @pytest.mark.asyncio
    async def test_refresh_updates_user(self, session, auth_api):
        """refresh_user should adopt the latest profile."""
        await session.initialize()
        auth_api.profile = make_user(name="Renamed")

        user = await session.refresh()

        assert user.name == "Renamed"
        assert session.user.name == "Renamed"

    @pytest.mark.asyncio
    async def test_concurrent_refresh_sends_one_request(self, session, auth_api):
        """Two overlapping refreshes should result in one profile request."""
        await session.initialize()
        auth_api.profile = make_user()
        auth_api.fetch_delay = 0.02

        await asyncio.gather(session.refresh_user(), session.refresh_user())

        assert auth_api.calls["fetch_profile"] == 2  # initialize + one refresh
        assert session.is_authenticated is True


class TestCrossTabSync:
    @pytest.fixture
    def other_api(self):
        return FakeAuthApi()

    @pytest.fixture
    def other_tab(self, other_api, hub, timings):
        service = SessionService(other_api, hub.channel("tab-b"), timings=timings)
        service.start()
        yield service
        service.close()

    @pytest.mark.asyncio
    async def test_logout_in_other_tab_clears_without_request(
        self, session, auth_api, other_tab
    ):
        """auth-logout from another tab should clear this tab without a network call."""
        auth_api.profile = make_user()
        await session.initialize()
        await other_tab.initialize()
        calls_before = dict(auth_api.calls)

        await other_tab.logout_user()
        await settle()

        assert session.is_authenticated is False
        assert session.user is None
        assert auth_api.calls == calls_before

    @pytest.mark.asyncio
    async def test_login_in_other_tab_refreshes(self, session, auth_api, other_tab):
        """auth-login from another tab should refresh the profile after a delay."""
        await session.initialize()
        await other_tab.initialize()
        assert session.is_authenticated is False

        auth_api.profile = make_user(role=UserRole.SECURITY)
        other_tab.login_user(make_user(role=UserRole.SECURITY))
        await settle(0.2)

        assert session.is_authenticated is True
        assert session.user.role == UserRole.SECURITY

    @pytest.mark.asyncio
    async def test_burst_is_debounced(self, session, auth_api, hub):
        """A burst of broadcasts should lead to a single refresh."""
        await session.initialize()
        auth_api.profile = make_user()
        sender = hub.channel("tab-c")
        for _ in range(5):
            sender.publish(BroadcastKind.LOGIN)
        await settle(0.2)

        assert auth_api.calls["fetch_profile"] == 2

    @pytest.mark.asyncio
    async def test_own_broadcasts_are_ignored(self, session, auth_api):
        """A tab should not react to its own login broadcast."""
        await session.initialize()
        session.login_user(make_user())
        await settle(0.2)
        assert auth_api.calls["fetch_profile"] == 1

    @pytest.mark.asyncio
    async def test_close_stops_sync(self, session, auth_api, other_tab):
        """A closed store should ignore other tabs."""
        auth_api.profile = make_user()
        await session.initialize()
        session.close()

        await other_tab.logout_user()
        await settle()

        assert session.is_authenticated is True


class TestAuthStateEvents:
    @pytest.mark.asyncio
    async def test_login_event_adopts_user(self, session, auth_api):
        """A login event with a user payload should be adopted without a request."""
        await session.initialize()
        session.event_bus.dispatch(AuthStateChanged(
            action=AuthAction.LOGIN,
            user=user_payload(role="organizer"),
            source="profile-page",
        ))
        await settle()

        assert session.is_authenticated is True
        assert session.user.role == UserRole.ORGANIZER
        assert auth_api.calls["fetch_profile"] == 1

    @pytest.mark.asyncio
    async def test_login_event_without_user_refreshes(self, session, auth_api):
        """A login event without a payload should refresh from the server."""
        await session.initialize()
        auth_api.profile = make_user()
        session.event_bus.dispatch(AuthStateChanged(action=AuthAction.LOGIN, source="x"))
        await settle()

        assert auth_api.calls["fetch_profile"] == 2
        assert session.is_authenticated is True

    @pytest.mark.asyncio
    async def test_logout_event_clears(self, session, auth_api):
        """A logout event from another component should clear the session."""
        auth_api.profile = make_user()
        await session.initialize()
        session.event_bus.dispatch(AuthStateChanged(action=AuthAction.LOGOUT, source="navbar"))
        await settle()

        assert session.is_authenticated is False
        assert "logout" not in auth_api.calls

    @pytest.mark.asyncio
    async def test_refresh_event(self, session, auth_api):
        """A refresh event should re-fetch the profile."""
        await session.initialize()
        session.event_bus.dispatch(AuthStateChanged(action=AuthAction.REFRESH, source="x"))
        await settle()
        assert auth_api.calls["fetch_profile"] == 2

    @pytest.mark.asyncio
    async def test_events_from_store_are_ignored(self, session, auth_api):
        """Events the store dispatched itself should not loop back."""
        await session.initialize()
        session.event_bus.dispatch(
            AuthStateChanged(action=AuthAction.REFRESH, source=SESSION_SOURCE)
        )
        await settle()
        assert auth_api.calls["fetch_profile"] == 1


class TestListeners:
    @pytest.mark.asyncio
    async def test_unsubscribe(self, session):
        """An unsubscribed listener should stop receiving snapshots."""
        seen: list[SessionSnapshot] = []
        unsubscribe = session.subscribe(seen.append)
        await session.initialize()
        count = len(seen)

        unsubscribe()
        session.login_user(make_user())
        assert len(seen) == count

    @pytest.mark.asyncio
    async def test_failing_listener_does_not_break_store(self, session, caplog):
        """A listener that raises should be logged and skipped."""
        def broken(snapshot):
            raise RuntimeError("listener broke")

        session.subscribe(broken)
        await session.initialize()

        assert session.state == SessionState.READY
        assert "Session listener failed" in caplog.text
