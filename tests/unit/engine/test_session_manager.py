"""
Tests for SessionManager - isolated sessions and login.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from web_macro.config import Settings, BrowserSettings, LoginSettings
from web_macro.engine.session_manager import (
    Credentials,
    ERROR_SELECTORS,
    SessionManager,
)
from web_macro.exceptions import BrowserLaunchError, NavigationError, SessionError


@pytest.fixture
def login_settings(settings) -> Settings:
    """Settings with a login page configured."""
    return settings.merge_with({"login": {"login_url": "https://example.com/login"}})


class TestOpen:
    """Opening sessions."""
    
    @pytest.mark.asyncio
    async def test_browser_launched_lazily_once(self, settings, fake_browser):
        """The browser starts on the first open only."""
        sessions = SessionManager(settings, browser=fake_browser)
        assert fake_browser.launches == []
        
        await sessions.open()
        await sessions.open()
        
        assert len(fake_browser.launches) == 1
    
    @pytest.mark.asyncio
    async def test_each_session_gets_own_context(self, settings, fake_browser):
        """Contexts are never shared."""
        sessions = SessionManager(settings, browser=fake_browser)
        first = await sessions.open(Credentials("a@x.com"))
        second = await sessions.open(Credentials("b@x.com"))
        
        assert first.context is not second.context
        assert len(fake_browser.contexts) == 2
        assert len(sessions.open_sessions) == 2
    
    @pytest.mark.asyncio
    async def test_context_configuration(self, settings, fake_browser):
        """Viewport, HTTPS errors and zoom come from settings."""
        sessions = SessionManager(settings, browser=fake_browser)
        await sessions.open()
        
        context = fake_browser.contexts[0]
        assert context.options["viewport"] == {"width": 1920, "height": 1080}
        assert context.options["ignore_https_errors"] is True
        assert "zoom = '60%'" in context.init_scripts[0]

    @pytest.mark.asyncio
    async def test_context_default_timeout(self, fake_browser):
        """The browser timeout becomes the context's default timeout."""
        settings = Settings(browser=BrowserSettings(timeout_ms=45000))
        sessions = SessionManager(settings, browser=fake_browser)
        await sessions.open()

        assert fake_browser.contexts[0].default_timeout == 45000

    @pytest.mark.asyncio
    async def test_incognito_disabled_is_reported(self, fake_browser, caplog):
        """Turning incognito off is logged; the session is still isolated."""
        settings = Settings(browser=BrowserSettings(incognito=False))
        sessions = SessionManager(settings, browser=fake_browser)

        with caplog.at_level("INFO", logger="web_macro.engine.session_manager"):
            session = await sessions.open()

        assert "incognito is disabled" in caplog.text
        assert session.context is fake_browser.contexts[0]

    @pytest.mark.asyncio
    async def test_maximized_args_when_headed(self, fake_browser):
        """Headed browsers are launched maximized."""
        settings = Settings(browser=BrowserSettings(headless=False))
        sessions = SessionManager(settings, browser=fake_browser)
        await sessions.open()
        
        launch = fake_browser.launches[0]
        assert launch["headless"] is False
        assert "--start-maximized" in launch["args"]
        assert "--window-size=1920,1080" in launch["args"]
    
    @pytest.mark.asyncio
    async def test_no_login_without_url(self, settings, fake_browser):
        """Without a login URL the session is usable immediately."""
        sessions = SessionManager(settings, browser=fake_browser)
        session = await sessions.open(Credentials("a@x.com"))
        
        assert session.is_authenticated
        assert session.page.calls == []
    
    @pytest.mark.asyncio
    async def test_driver_failure_raises_session_error(self, settings, fakes):
        """Context creation failures surface as SessionError."""
        sessions = SessionManager(settings, browser=fakes.Browser(fail_contexts=1))
        with pytest.raises(SessionError):
            await sessions.open(Credentials("a@x.com"))


class TestLogin:
    """Login against the configured page."""
    
    @pytest.mark.asyncio
    async def test_successful_login(self, login_settings, fakes):
        """Email, password and submit are used in order."""
        page = fakes.login_page()
        sessions = SessionManager(login_settings, browser=fakes.Browser(lambda: page))
        
        session = await sessions.open(Credentials("user1@example.com", "hunter2"))
        
        assert session.is_authenticated
        assert session.login_error is None
        assert page.calls[:2] == [
            ("goto", "https://example.com/login"),
            ("wait_for_load_state", "networkidle"),
        ]
        assert page.elements['input[type="email"]'].value == "user1@example.com"
        assert page.elements['input[type="password"]'].value == "hunter2"
        assert page.elements['button[type="submit"]'].clicks == 1
        assert ("wait_for_timeout", 0) in page.calls
    
    @pytest.mark.asyncio
    async def test_password_from_settings(self, login_settings, fakes):
        """The configured password is used when credentials have none."""
        page = fakes.login_page()
        sessions = SessionManager(login_settings, browser=fakes.Browser(lambda: page))
        
        await sessions.open(Credentials("user1@example.com"))
        
        assert page.elements['input[type="password"]'].value == "secret"
    
    @pytest.mark.asyncio
    async def test_fallback_selectors(self, login_settings, fakes):
        """Later candidates are used when the first ones are absent."""
        email = fakes.Element()
        password = fakes.Element()
        submit = fakes.Element()
        page = fakes.Page({
            'input[placeholder*="email" i]': email,
            'input[id="password"]': password,
            'button:has-text("Sign in")': submit,
        })
        sessions = SessionManager(login_settings, browser=fakes.Browser(lambda: page))
        
        session = await sessions.open(Credentials("a@x.com"))
        
        assert session.is_authenticated
        assert email.value == "a@x.com"
        assert submit.clicks == 1
    
    @pytest.mark.asyncio
    async def test_rejected_credentials(self, login_settings, fakes):
        """A visible error indicator marks the session unauthenticated."""
        page = fakes.login_page(rejected=True)
        sessions = SessionManager(login_settings, browser=fakes.Browser(lambda: page))
        
        session = await sessions.open(Credentials("a@x.com"))
        
        assert not session.is_authenticated
        assert "invalid credentials" in session.login_error
    
    @pytest.mark.asyncio
    async def test_hidden_error_indicator_ignored(self, login_settings, fakes):
        """Invisible error elements do not fail the login."""
        page = fakes.login_page(**{".error": fakes.Element(visible=False)})
        sessions = SessionManager(login_settings, browser=fakes.Browser(lambda: page))
        
        session = await sessions.open(Credentials("a@x.com"))
        
        assert session.is_authenticated
        assert set(ERROR_SELECTORS) <= set(page.queried)
    
    @pytest.mark.asyncio
    async def test_missing_email_field(self, login_settings, fakes):
        """A page without an email field fails the login."""
        page = fakes.Page()
        sessions = SessionManager(login_settings, browser=fakes.Browser(lambda: page))
        
        session = await sessions.open(Credentials("a@x.com"))
        
        assert not session.is_authenticated
        assert session.login_error == "Could not find email input field"
    
    @pytest.mark.asyncio
    async def test_login_page_unreachable(self, login_settings, fakes):
        """Navigation errors on the login page fail the login."""
        page = fakes.login_page()
        page.goto_error = NavigationError("net::ERR_NAME_NOT_RESOLVED", url="https://example.com/login")
        sessions = SessionManager(login_settings, browser=fakes.Browser(lambda: page))
        
        session = await sessions.open(Credentials("a@x.com"))
        
        assert not session.is_authenticated
        assert "Could not load login page" in session.login_error
    
    @pytest.mark.asyncio
    async def test_no_password_configured(self, fakes):
        """Login fails when there is no password anywhere."""
        settings = Settings(login=LoginSettings(login_url="https://example.com/login", settle_ms=0))
        page = fakes.login_page()
        sessions = SessionManager(settings, browser=fakes.Browser(lambda: page))
        
        session = await sessions.open(Credentials("a@x.com"))
        
        assert not session.is_authenticated
        assert page.calls == []


class TestClose:
    """Closing sessions and shutdown."""
    
    @pytest.mark.asyncio
    async def test_close_releases_page_and_context(self, settings, fake_browser):
        """Page and context are both closed."""
        sessions = SessionManager(settings, browser=fake_browser)
        session = await sessions.open()
        
        await sessions.close(session)
        
        assert session.closed
        assert session.page.is_closed
        assert fake_browser.contexts[0].closed
        assert sessions.open_sessions == []
    
    @pytest.mark.asyncio
    async def test_close_is_idempotent(self, settings, fake_browser):
        """Closing twice is harmless."""
        sessions = SessionManager(settings, browser=fake_browser)
        session = await sessions.open()
        
        await sessions.close(session)
        await sessions.close(session)
    
    @pytest.mark.asyncio
    async def test_close_swallows_driver_errors(self, settings, fake_browser):
        """A failing context close does not raise."""
        sessions = SessionManager(settings, browser=fake_browser)
        session = await sessions.open()
        
        async def broken_close():
            raise RuntimeError("Target closed")
        session.context.close = broken_close
        
        await sessions.close(session)
        assert session.closed
    
    @pytest.mark.asyncio
    async def test_context_manager_shuts_down(self, settings, fake_browser):
        """Leaving the context closes sessions and the browser."""
        async with SessionManager(settings, browser=fake_browser) as sessions:
            session = await sessions.open()
        
        assert session.closed
        assert fake_browser.closed

    @pytest.mark.asyncio
    async def test_failed_launches_release_driver(self, settings):
        """Every driver started by a failed launch is stopped by shutdown."""
        driver = MagicMock()
        driver.chromium.launch = AsyncMock(side_effect=Exception("Executable doesn't exist"))
        driver.stop = AsyncMock()
        factory = MagicMock()
        factory.return_value.start = AsyncMock(return_value=driver)

        with patch("playwright.async_api.async_playwright", factory):
            async with SessionManager(settings) as sessions:
                for _ in range(2):
                    with pytest.raises(BrowserLaunchError):
                        await sessions.open()

        assert factory.return_value.start.await_count == 2
        assert driver.stop.await_count == 2

    @pytest.mark.asyncio
    async def test_navigate(self, settings, fake_browser):
        """navigate() loads the url and waits for network idle."""
        sessions = SessionManager(settings, browser=fake_browser)
        session = await sessions.open()
        
        await sessions.navigate(session, "https://example.com/poll")
        
        assert session.page.calls == [
            ("goto", "https://example.com/poll"),
            ("wait_for_load_state", "networkidle"),
        ]
