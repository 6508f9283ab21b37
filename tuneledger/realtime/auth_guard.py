"""Debounces transient session loss so a token refresh never looks like a logout.

Identity providers briefly report "no session" while they rotate tokens.
Acting on that immediately tears down every view, so the guard holds the
signed-in state for a grace window and only reports a logout when the
session is still missing when the window closes. A deliberate ``sign_out()``
is reported at once.

    signed_out --present--> authenticated --absent--> grace
    grace --present--> authenticated   (not observable by the UI)
    grace --window expires--> signed_out  (on_logout fires once)
"""

from __future__ import annotations

import asyncio
import enum
import logging
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class AuthState(str, enum.Enum):
    SIGNED_OUT = "signed_out"
    AUTHENTICATED = "authenticated"
    GRACE = "grace"


class AuthContinuityGuard:
    def __init__(
        self,
        grace_seconds: float = 5.0,
        *,
        clock: Callable[[], float] = time.monotonic,
        on_logout: Optional[Callable[[], None]] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> None:
        if grace_seconds < 0:
            raise ValueError("grace_seconds must not be negative")
        self.grace_seconds = grace_seconds
        self.clock = clock
        self.on_logout = on_logout
        self.loop = loop
        self.state = AuthState.SIGNED_OUT
        self.deadline: Optional[float] = None
        self._timer: Optional[asyncio.TimerHandle] = None

    @property
    def is_authenticated(self) -> bool:
        """What the UI sees: the grace window still counts as signed in."""
        return self.state is not AuthState.SIGNED_OUT

    def session_present(self) -> None:
        if self.state is AuthState.GRACE:
            logger.debug("Session restored within the grace window")
        self._cancel_timer()
        self.deadline = None
        self.state = AuthState.AUTHENTICATED

    def session_lost(self) -> None:
        if self.state is not AuthState.AUTHENTICATED:
            return
        self.state = AuthState.GRACE
        self.deadline = self.clock() + self.grace_seconds
        if self.loop is not None:
            self._timer = self.loop.call_later(self.grace_seconds, self._on_timer)

    def observe(self, present: bool) -> None:
        if present:
            self.session_present()
        else:
            self.session_lost()

    def poll(self) -> AuthState:
        """Expire the grace window if its deadline has passed."""
        if self.state is AuthState.GRACE and self.deadline is not None and self.clock() >= self.deadline:
            logger.info("Session did not come back within %.1fs, signing out", self.grace_seconds)
            self._sign_out()
        return self.state

    def _on_timer(self) -> None:
        self._timer = None
        if self.state is AuthState.GRACE:
            logger.info("Session did not come back within %.1fs, signing out", self.grace_seconds)
            self._sign_out()

    def sign_out(self) -> None:
        """Deliberate sign-out; skips the grace window."""
        if self.state is AuthState.SIGNED_OUT:
            return
        self._sign_out()

    def _sign_out(self) -> None:
        self._cancel_timer()
        self.deadline = None
        self.state = AuthState.SIGNED_OUT
        if self.on_logout is not None:
            self.on_logout()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
