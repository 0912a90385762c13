"""Static factor display metadata and the enroll-or-manage routing decision.

Copyright (c) 2025 AuthFramework. All rights reserved.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import NamedTuple

from .models import EnrolledMethod, FactorKind
from .routes import (
    EmailPhoneEnrollmentScreen,
    EnrollPasskeyScreen,
    QREnrollmentScreen,
    RecoveryCodeScreen,
    Route,
    SavedMethodsScreen,
)


class FactorDisplay(NamedTuple):
    """Display metadata for one factor kind."""

    title: str
    icon: str
    empty_state_message: str
    saved_title: str
    navigation_title: str
    manage_dialog_title: str
    destructive_action: str


_CATALOG: dict[FactorKind, FactorDisplay] = {
    FactorKind.EMAIL: FactorDisplay(
        title="Email OTP",
        icon="email",
        empty_state_message="No Email was saved.",
        saved_title="Saved Emails for OTP",
        navigation_title="Email OTP",
        manage_dialog_title="Manage your email",
        destructive_action="Remove",
    ),
    FactorKind.SMS: FactorDisplay(
        title="SMS OTP",
        icon="sms",
        empty_state_message="No Phone was saved.",
        saved_title="Saved Phones for SMS OTP",
        navigation_title="Phone for SMS OTP",
        manage_dialog_title="Manage your phone for SMS OTP",
        destructive_action="Remove",
    ),
    FactorKind.TOTP: FactorDisplay(
        title="Authenticator App",
        icon="totp",
        empty_state_message="No Authenticator was added.",
        saved_title="Saved Authenticators",
        navigation_title="Authenticator",
        manage_dialog_title="Manage your Authenticator",
        destructive_action="Revoke",
    ),
    FactorKind.PUSH: FactorDisplay(
        title="Push Notifications via Guardian",
        icon="totp",
        empty_state_message="No Push Notification was added.",
        saved_title="Saved Apps for Push",
        navigation_title="Push Notification",
        manage_dialog_title="Manage your Push Notification",
        destructive_action="Revoke",
    ),
    FactorKind.RECOVERY_CODE: FactorDisplay(
        title="Recovery Code",
        icon="code",
        empty_state_message="No Recovery Code was generated.",
        saved_title="Generated Recovery code",
        navigation_title="Recovery Code",
        manage_dialog_title="Manage your Recovery Code",
        destructive_action="Remove",
    ),
    FactorKind.PASSKEY: FactorDisplay(
        title="Passkey",
        icon="passkey",
        empty_state_message="No Passkey was added.",
        saved_title="Saved Passkeys",
        navigation_title="Passkey",
        manage_dialog_title="Manage your Passkey",
        destructive_action="Remove",
    ),
}


def display(kind: FactorKind) -> FactorDisplay:
    """Return the display metadata for ``kind``."""
    return _CATALOG[kind]


def is_usable(kind: FactorKind, method: EnrolledMethod) -> bool:
    """Whether ``method`` is a usable method of ``kind``.

    Passkeys have no confirmation step, so any passkey counts.
    """
    if method.kind != kind:
        return False
    return kind is FactorKind.PASSKEY or method.confirmed


def is_enrolled(kind: FactorKind, methods: Iterable[EnrolledMethod]) -> bool:
    """Whether ``methods`` holds a usable method of ``kind``."""
    return any(is_usable(kind, m) for m in methods)


def decide_destination(kind: FactorKind, methods: Iterable[EnrolledMethod]) -> Route:
    """Route to the management list when enrolled, else to the enrollment entry."""
    methods = tuple(methods)
    if is_enrolled(kind, methods):
        return SavedMethodsScreen(kind=kind, methods=methods)

    if kind in (FactorKind.TOTP, FactorKind.PUSH):
        return QREnrollmentScreen(kind=kind)
    if kind in (FactorKind.EMAIL, FactorKind.SMS):
        return EmailPhoneEnrollmentScreen(kind=kind)
    if kind is FactorKind.RECOVERY_CODE:
        return RecoveryCodeScreen()
    return EnrollPasskeyScreen()
