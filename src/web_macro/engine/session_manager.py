"""
Session Manager - One isolated browser context per account.

The browser process is launched lazily and shared; every session gets its
own context, so cookies and storage never leak between accounts.

Example:
    >>> async with SessionManager(settings) as sessions:
    ...     session = await sessions.open(Credentials("user1@example.com", "secret"))
    ...     if session.is_authenticated:
    ...         await sessions.navigate(session, "https://example.com/poll")
    ...     await sessions.close(session)
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, TYPE_CHECKING
import logging
import uuid

from web_macro.config.settings import Settings
from web_macro.engine.selector_resolver import SelectorResolver
from web_macro.exceptions.browser import NavigationError, SessionError
from web_macro.exceptions.session import LoginFailedError
from web_macro.interfaces.browser import BrowserType, IBrowser

if TYPE_CHECKING:
    from web_macro.interfaces.browser import IBrowserContext, IPage

logger = logging.getLogger(__name__)


EMAIL_SELECTORS = [
    'input[type="email"]',
    'input[name="email"]',
    'input[id="email"]',
    'input[placeholder*="email" i]',
]

PASSWORD_SELECTORS = [
    'input[type="password"]',
    'input[name="password"]',
    'input[id="password"]',
]

SUBMIT_SELECTORS = [
    'button[type="submit"]',
    'input[type="submit"]',
    'button:has-text("Login")',
    'button:has-text("Sign in")',
    'button:has-text("Log in")',
    '[role="button"]:has-text("Login")',
]

ERROR_SELECTORS = [
    '.error',
    '.alert-danger',
    '[class*="error"]',
    '[class*="invalid"]',
    'text="Invalid"',
    'text="Error"',
]

ZOOM_SCRIPT = """
(() => {
    const apply = () => { if (document.body) document.body.style.zoom = '%d%%'; };
    if (document.readyState === 'loading') {
        document.addEventListener('DOMContentLoaded', apply);
    } else {
        apply();
    }
})();
"""


@dataclass(frozen=True)
class Credentials:
    """Login identity for one session."""
    email: str
    password: Optional[str] = None
    
    def __repr__(self) -> str:
        return f"Credentials(email={self.email!r}, password=***)"


@dataclass
class Session:
    """
    An open browser session bound to one account.
    
    Attributes:
        id: Session identifier
        email: Account the session belongs to
        context: Isolated browser context
        page: The session's page
        is_authenticated: Whether login succeeded (or was not required)
        login_error: Why login failed, if it did
    """
    id: str
    email: str
    context: "IBrowserContext"
    page: "IPage"
    is_authenticated: bool = False
    login_error: Optional[str] = None
    opened_at: datetime = field(default_factory=datetime.now)
    closed: bool = False


class SessionManager:
    """
    Open, log in and close isolated browser sessions.
    
    Args:
        settings: Application settings (browser and login sections are used)
        browser: Browser driver; a Playwright browser is created if omitted
    """
    
    def __init__(self, settings: Optional[Settings] = None, browser: Optional[IBrowser] = None):
        self.settings = settings or Settings()
        self._browser = browser
        self._sessions: Dict[str, Session] = {}
        self._resolver = SelectorResolver(self.settings.login.field_timeout_ms)
    
    @property
    def open_sessions(self) -> List[Session]:
        return list(self._sessions.values())
    
    async def __aenter__(self) -> "SessionManager":
        return self
    
    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.shutdown()
    
    async def _ensure_browser(self) -> IBrowser:
        if self._browser is None:
            from web_macro.browsers.playwright_browser import PlaywrightBrowser
            self._browser = PlaywrightBrowser()
        
        if not self._browser.is_connected:
            cfg = self.settings.browser
            args: List[str] = []
            if cfg.maximized and not cfg.headless:
                args.append("--start-maximized")
                args.append(f"--window-size={cfg.viewport_width},{cfg.viewport_height}")
            if not cfg.incognito:
                logger.info("incognito is disabled, but each session still gets an isolated context")
            await self._browser.launch(
                headless=cfg.headless,
                browser_type=BrowserType(cfg.browser_type),
                args=args,
                slow_mo=cfg.slow_mo,
            )
        return self._browser
    
    async def open(self, credentials: Optional[Credentials] = None) -> Session:
        """
        Open a fresh session and log in.
        
        Login is skipped when no credentials are given or no login URL is
        configured. Rejected credentials do not raise; the session comes
        back with ``is_authenticated`` False and a ``login_error``.
        
        Args:
            credentials: Account to log in as
            
        Returns:
            The open session
            
        Raises:
            SessionError: If the browser, context or page cannot be created
        """
        browser = await self._ensure_browser()
        cfg = self.settings.browser
        email = credentials.email if credentials else ""
        
        try:
            context = await browser.new_context(
                viewport={"width": cfg.viewport_width, "height": cfg.viewport_height},
                user_agent=cfg.user_agent,
                ignore_https_errors=True,
            )
        except SessionError:
            raise
        except Exception as e:
            raise SessionError(f"Failed to create context for {email or 'session'}: {e}")
        
        try:
            context.set_default_timeout(cfg.timeout_ms)
            await context.add_init_script(ZOOM_SCRIPT % cfg.zoom)
            page = await context.new_page()
        except Exception as e:
            try:
                await context.close()
            except Exception as close_error:
                logger.debug(f"Context cleanup failed: {close_error}")
            raise SessionError(f"Failed to open page for {email or 'session'}: {e}")
        
        session = Session(
            id=f"session_{uuid.uuid4().hex[:12]}",
            email=email,
            context=context,
            page=page,
        )
        self._sessions[session.id] = session
        logger.info(f"Opened session {session.id} for {email or 'anonymous'}")
        
        login_url = self.settings.login.login_url
        if credentials is None or not login_url:
            session.is_authenticated = True
            return session
        
        try:
            await self._login(page, login_url, credentials)
            session.is_authenticated = True
        except LoginFailedError as e:
            session.login_error = e.message
            logger.warning(f"Login failed for {email}: {e.message}")
        
        return session
    
    async def _login(self, page: "IPage", login_url: str, credentials: Credentials) -> None:
        login = self.settings.login
        password = credentials.password
        if password is None and login.password is not None:
            password = login.password.get_secret_value()
        if not password:
            raise LoginFailedError("No password configured", email=credentials.email, stage="password")
        
        try:
            await page.goto(login_url, timeout=self.settings.replay.navigation_timeout_ms)
            await page.wait_for_load_state("networkidle", timeout=self.settings.replay.navigation_timeout_ms)
        except NavigationError as e:
            raise LoginFailedError(
                f"Could not load login page: {e.message}",
                email=credentials.email,
                stage="navigate",
            )
        
        email_field = await self._resolver.first_match(page, EMAIL_SELECTORS, login.field_timeout_ms)
        if email_field is None:
            raise LoginFailedError("Could not find email input field", email=credentials.email, stage="email")
        await email_field.fill(credentials.email)
        
        password_field = await self._resolver.first_match(page, PASSWORD_SELECTORS, login.field_timeout_ms)
        if password_field is None:
            raise LoginFailedError("Could not find password input field", email=credentials.email, stage="password")
        await password_field.fill(password)
        
        submit = await self._resolver.first_match(page, SUBMIT_SELECTORS, login.field_timeout_ms)
        if submit is None:
            raise LoginFailedError("Could not find login button", email=credentials.email, stage="submit")
        await submit.click()
        
        await page.wait_for_timeout(login.settle_ms)
        
        for selector in ERROR_SELECTORS:
            try:
                indicator = await page.query_selector(selector)
                visible = indicator is not None and await indicator.is_visible()
            except Exception as e:
                logger.debug(f"Error indicator {selector!r} not checked: {e}")
                continue
            if visible:
                raise LoginFailedError(
                    "Login failed - invalid credentials",
                    email=credentials.email,
                    stage="verify",
                )
    
    async def navigate(self, session: Session, url: str) -> None:
        """
        Load ``url`` in the session and wait for network idle.
        
        Raises:
            NavigationError: If the page does not load
        """
        timeout = self.settings.replay.navigation_timeout_ms
        await session.page.goto(url, timeout=timeout)
        await session.page.wait_for_load_state("networkidle", timeout=timeout)
    
    async def close(self, session: Session) -> None:
        """Release the session's page and context. Never raises."""
        if session.closed:
            return
        session.closed = True
        self._sessions.pop(session.id, None)
        
        try:
            if not session.page.is_closed:
                await session.page.close()
        except Exception as e:
            logger.warning(f"Closing page of {session.id} failed: {e}")
        
        try:
            await session.context.close()
        except Exception as e:
            logger.warning(f"Closing context of {session.id} failed: {e}")
        
        logger.info(f"Closed session {session.id}")
    
    async def shutdown(self) -> None:
        """Close every open session and the browser."""
        for session in list(self._sessions.values()):
            await self.close(session)
        
        # A failed launch can leave driver resources behind without a connection
        if self._browser is not None:
            try:
                await self._browser.close()
            except Exception as e:
                logger.warning(f"Browser shutdown failed: {e}")
