"""Dashboard scenarios against the fake API.

Tests cover:
- Login returning to the page that required it
- A rejected credential logging out exactly once
- Cross-list refresh after content interactions
"""

import asyncio

import pytest

from relevant.core.exceptions import FormValidationError, UnauthorizedError
from relevant.models.auth import SessionStatus

EMAIL = "testuser@relevant.com"
PASSWORD = "testpass123"


class TestLoginFlow:
    """Tests for login and the remembered return path."""

    @pytest.mark.asyncio
    async def test_guarded_page_returns_after_login(self, dashboard):
        decision = await dashboard.start("/saved")

        assert decision.location == "/login"
        assert dashboard.navigator.path == "/login"

        user = await dashboard.login(EMAIL, PASSWORD)

        assert user.email == EMAIL
        assert dashboard.navigator.location == "/saved"
        assert dashboard.session.status == SessionStatus.AUTHENTICATED

    @pytest.mark.asyncio
    async def test_login_without_return_path(self, dashboard):
        await dashboard.start("/login")

        await dashboard.login(EMAIL, PASSWORD)

        assert dashboard.navigator.location == "/dashboard"

    @pytest.mark.asyncio
    async def test_invalid_form_sends_nothing(self, dashboard, backend):
        await dashboard.start("/login")

        with pytest.raises(FormValidationError):
            await dashboard.login("not-an-email", "")

        assert backend.calls == []

    @pytest.mark.asyncio
    async def test_logout(self, dashboard):
        await dashboard.start("/login")
        await dashboard.login(EMAIL, PASSWORD)

        decision = dashboard.logout()

        assert decision.location == "/login"
        assert dashboard.session.token is None
        assert dashboard.queries.keys() == []


class TestUnauthorized:
    """Tests for reacting to a rejected credential."""

    @pytest.mark.asyncio
    async def test_concurrent_401s_log_out_once(self, dashboard, backend):
        await dashboard.start("/")
        await dashboard.login(EMAIL, PASSWORD)
        navigator = dashboard.navigator
        logins_before = navigator.count("/login")
        backend.valid_tokens.clear()

        results = await asyncio.gather(
            dashboard.call(dashboard.content.feed),
            dashboard.call(dashboard.content.saved),
            dashboard.call(dashboard.profile.profile),
            return_exceptions=True,
        )

        assert all(isinstance(r, UnauthorizedError) for r in results)
        assert navigator.count("/login") == logins_before + 1
        assert navigator.location == "/login"
        assert dashboard.session.status == SessionStatus.UNAUTHENTICATED
        assert dashboard.session.token is None
        assert navigator.pop_return_to() == "/dashboard"

    @pytest.mark.asyncio
    async def test_background_refetch_401_logs_out(self, dashboard, backend):
        await dashboard.start("/")
        await dashboard.login(EMAIL, PASSWORD)
        cached = await dashboard.call(dashboard.content.feed)
        backend.valid_tokens.clear()

        served = await dashboard.call(dashboard.content.feed)
        for _ in range(100):
            if dashboard.session.status == SessionStatus.UNAUTHENTICATED:
                break
            await asyncio.sleep(0)

        assert served is cached
        assert dashboard.session.status == SessionStatus.UNAUTHENTICATED
        assert dashboard.session.token is None
        assert dashboard.navigator.location == "/login"
        assert dashboard.navigator.pop_return_to() == "/dashboard"

        with pytest.raises(UnauthorizedError):
            await dashboard.call(dashboard.content.feed)

    @pytest.mark.asyncio
    async def test_second_handler_call_is_a_no_op(self, dashboard):
        await dashboard.start("/")
        await dashboard.login(EMAIL, PASSWORD)

        assert dashboard.handle_unauthorized() is True
        assert dashboard.handle_unauthorized() is False

    @pytest.mark.asyncio
    async def test_unauthorized_mutation_is_not_toasted(self, dashboard, backend):
        await dashboard.start("/")
        await dashboard.login(EMAIL, PASSWORD)
        notifications_before = len(dashboard.notifier.items)
        backend.valid_tokens.clear()

        with pytest.raises(UnauthorizedError):
            await dashboard.call(dashboard.content.save, "c1", True)

        assert len(dashboard.notifier.items) == notifications_before


class TestContentScenarios:
    """Tests for interactions refreshing the right lists."""

    @pytest.mark.asyncio
    async def test_save_refreshes_every_list(self, dashboard):
        await dashboard.start("/")
        await dashboard.login(EMAIL, PASSWORD)
        content = dashboard.content
        await content.feed()
        await content.personalized()
        await content.saved()

        await content.save("c1", True)

        assert (await content.feed()).items[0].is_saved
        assert (await content.personalized()).items[0].is_saved
        assert (await content.saved()).ids == ["c1"]

    @pytest.mark.asyncio
    async def test_save_refreshes_content_detail(self, dashboard):
        await dashboard.start("/")
        await dashboard.login(EMAIL, PASSWORD)
        content = dashboard.content
        before = await content.get("c1")

        await content.save("c1", True)
        after = await content.get("c1")

        assert before.is_saved is False
        assert after.is_saved is True

    @pytest.mark.asyncio
    async def test_dismiss_keeps_saved_list(self, dashboard):
        await dashboard.start("/")
        await dashboard.login(EMAIL, PASSWORD)
        content = dashboard.content
        await content.save("c2", True)
        saved = await content.saved()

        await content.dismiss("c2")

        assert "c2" not in (await content.feed()).ids
        assert await content.saved() is saved
        assert dashboard.notifier.last.message == "Content dismissed"

    @pytest.mark.asyncio
    async def test_infinite_scroll(self, dashboard):
        await dashboard.start("/")
        await dashboard.login(EMAIL, PASSWORD)
        feed = dashboard.content.accumulator("feed")

        await feed.load_next()
        assert feed.should_load_more(scroll_top=2500, viewport_height=800, document_height=4000)
        await feed.load_next()

        assert len(feed.items) == 20
        assert feed.ids[10] == "c11"
