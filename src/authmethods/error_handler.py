"""Error screens and the step-up retry coordinator.

Copyright (c) 2025 AuthFramework. All rights reserved.
"""

from __future__ import annotations

import contextvars
import logging
import webbrowser
from typing import Awaitable, Callable, Protocol

from .classifier import ClassifiedError, ErrorKind, classify
from .collaborators import CredentialProvider, ReauthenticationProvider
from .config import MyAccountConfig

logger = logging.getLogger(__name__)

RetryCallback = Callable[[], Awaitable[None]]

TRY_AGAIN = "Try again"
CONTACT_US = "contact us."
GENERIC_DETAIL = (
    "We are unable to process your request. Please try again in a few minutes. "
    "If this problem persists, please contact us."
)

# Nesting depth of step-up ceremonies in the current task. Retries run inside
# the step-up that triggered them, so a retry failing with mfa_required again
# is counted too.
_step_up_depth: contextvars.ContextVar[int] = contextvars.ContextVar(
    "step_up_depth", default=0
)


class ErrorScreen:
    """Displayable error with a single retry action."""

    def __init__(
        self,
        error: ClassifiedError,
        title: str,
        detail: str,
        retry: RetryCallback | None,
        button_title: str = TRY_AGAIN,
        support_label: str | None = None,
        on_support: Callable[[], object] | None = None,
    ) -> None:
        self.error = error
        self.title = title
        self.detail = detail
        self.button_title = button_title
        self.support_label = support_label
        self._retry = retry
        self._on_support = on_support

    @property
    def kind(self) -> ErrorKind:
        return self.error.kind

    @property
    def has_support_action(self) -> bool:
        return self._on_support is not None

    @property
    def has_retry(self) -> bool:
        return self._retry is not None

    async def handle_button_click(self) -> None:
        if self._retry is not None:
            await self._retry()

    def handle_text_tap(self) -> None:
        if self._on_support is not None:
            self._on_support()

    def __repr__(self) -> str:
        return f"ErrorScreen(kind={self.kind.value!r}, title={self.title!r})"


_DEDICATED_SCREENS: dict[ErrorKind, tuple[str, str]] = {
    ErrorKind.NETWORK_ERROR: (
        "Connection problem",
        "Please check your internet connection",
    ),
    ErrorKind.INVALID_MFA_CODE: (
        "Invalid verification code",
        "The code you entered is incorrect or has expired. Please try again.",
    ),
    ErrorKind.SESSION_EXPIRED: (
        "Session expired",
        "Your session has expired. Please login again to continue.",
    ),
    ErrorKind.TOO_MANY_ATTEMPTS: (
        "Too many attempts",
        "Your account has been temporarily blocked due to too many failed "
        "attempts. Please try again later.",
    ),
}


def build_error_screen(
    error: ClassifiedError,
    retry: RetryCallback,
    on_support: Callable[[], object] | None = None,
) -> ErrorScreen | None:
    """Return the screen for ``error``; ``mfa_required`` has none."""
    if error.kind is ErrorKind.MFA_REQUIRED:
        return None

    dedicated = _DEDICATED_SCREENS.get(error.kind)
    if dedicated is not None:
        title, detail = dedicated
        return ErrorScreen(error, title, detail, retry)

    return ErrorScreen(
        error,
        error.message,
        GENERIC_DETAIL,
        retry,
        support_label=CONTACT_US,
        on_support=on_support,
    )


class ErrorViewModelHandler(Protocol):
    """Screen state the error handler writes to."""

    show_loader: bool
    error_screen: ErrorScreen | None


class ErrorHandler:
    """Classifies failures and either surfaces them or runs step-up."""

    def __init__(
        self,
        config: MyAccountConfig,
        credential_provider: CredentialProvider,
        reauthentication: ReauthenticationProvider,
        *,
        open_url: Callable[[str], object] = webbrowser.open,
    ) -> None:
        """Initialize the error handler.

        Args:
            config: Tenant configuration (audience, step-up ceiling, support URL)
            credential_provider: Store for the elevated credentials
            reauthentication: Interactive login used for step-up
            open_url: Opens the support page from the generic error screen

        """
        self._config = config
        self._credentials = credential_provider
        self._reauthentication = reauthentication
        self._open_url = open_url

    def open_support(self) -> None:
        self._open_url(self._config.support_url)

    def error_screen(
        self, error: ClassifiedError, retry: RetryCallback
    ) -> ErrorScreen | None:
        return build_error_screen(error, retry, self.open_support)

    async def handle(
        self,
        error: BaseException,
        scope: str,
        handler: ErrorViewModelHandler,
        retry: RetryCallback,
        *,
        otp_confirmation: bool = False,
    ) -> None:
        """Surface ``error`` on ``handler`` or recover from it through step-up.

        The loader flag is always cleared when this returns. Pass
        ``otp_confirmation`` when ``error`` came from verifying an entered code.
        """
        handler.show_loader = False
        try:
            classified = classify(error, otp_confirmation=otp_confirmation)
            if classified.kind is not ErrorKind.MFA_REQUIRED:
                logger.warning(
                    "Surfacing %s error: %s", classified.kind.value, classified.message
                )
                handler.error_screen = self.error_screen(classified, retry)
                return

            depth = _step_up_depth.get()
            if depth >= self._config.max_step_up_attempts:
                logger.warning("Step-up abandoned after %d attempts", depth)
                handler.error_screen = self.error_screen(
                    ClassifiedError.of(
                        ErrorKind.UNKNOWN,
                        "Multi-factor authentication could not be completed",
                        error,
                    ),
                    retry,
                )
                return

            await self._step_up(scope, handler, retry, depth)
        finally:
            handler.show_loader = False

    async def _step_up(
        self,
        scope: str,
        handler: ErrorViewModelHandler,
        retry: RetryCallback,
        depth: int,
    ) -> None:
        audience = self._config.audience or ""
        token = _step_up_depth.set(depth + 1)
        try:
            handler.show_loader = True
            logger.info("Step-up authentication required for scope %r", scope)
            try:
                credentials = await self._reauthentication.login(audience, scope)
            except Exception as e:
                await self.handle(e, scope, handler, retry)
                return

            handler.show_loader = False
            self._credentials.store_api_credentials(credentials, audience)
            await retry()
        finally:
            _step_up_depth.reset(token)
