"""Authentication methods home screen model.

Copyright (c) 2025 AuthFramework. All rights reserved.
"""

from __future__ import annotations

import asyncio
import logging

from pydantic import BaseModel, ConfigDict

from .catalog import decide_destination, display, is_enrolled
from .classifier import ClassifiedError, ErrorKind
from .collaborators import CredentialProvider, GetAuthMethodsUseCase, GetFactorsUseCase
from .config import MyAccountConfig
from .error_handler import ErrorHandler, ErrorScreen
from .models import EnrolledMethod, FactorKind, GetAuthMethodsRequest, GetFactorsRequest
from .navigation import NavigationStore
from .routes import Route

logger = logging.getLogger(__name__)

HOME_TITLE = "Verification methods"
HOME_SUBTITLE = "Manage your 2FA methods"
NO_FACTORS_TITLE = "Something went wrong"


class AuthMethodCard(BaseModel):
    """One row of the home screen: a factor kind and its methods."""

    model_config = ConfigDict(frozen=True)

    kind: FactorKind
    methods: tuple[EnrolledMethod, ...] = ()

    @property
    def title(self) -> str:
        return display(self.kind).title

    @property
    def icon(self) -> str:
        return display(self.kind).icon

    @property
    def is_enrolled(self) -> bool:
        return is_enrolled(self.kind, self.methods)

    @property
    def destination(self) -> Route:
        return decide_destination(self.kind, self.methods)


class AuthMethodsHome:
    """Lists the tenant's factors with the user's enrollment status.

    Acts as the refresh delegate for the enrollment and management screens:
    they mark the data stale and the next view reloads it.
    """

    title = HOME_TITLE
    subtitle = HOME_SUBTITLE

    def __init__(
        self,
        *,
        config: MyAccountConfig,
        credential_provider: CredentialProvider,
        get_factors: GetFactorsUseCase,
        get_auth_methods: GetAuthMethodsUseCase,
        navigation: NavigationStore,
        error_handler: ErrorHandler,
    ) -> None:
        self._config = config
        self._credentials = credential_provider
        self._get_factors = get_factors
        self._get_auth_methods = get_auth_methods
        self._navigation = navigation
        self._error_handler = error_handler
        self._stale = True

        self.cards: list[AuthMethodCard] = []
        self.show_loader = False
        self.error_screen: ErrorScreen | None = None

    async def load(self) -> None:
        """Fetch factors and methods, then rebuild the cards."""
        self.error_screen = None
        self.cards = []
        self.show_loader = True
        scope = self._config.read_scope
        try:
            credentials = await self._credentials.fetch_api_credentials(
                self._config.audience or "", scope
            )
            token, domain = credentials.access_token, self._config.domain
            factors, methods = await asyncio.gather(
                self._get_factors.execute(GetFactorsRequest(token=token, domain=domain)),
                self._get_auth_methods.execute(
                    GetAuthMethodsRequest(token=token, domain=domain)
                ),
            )
        except Exception as e:
            await self._error_handler.handle(e, scope, self, self.load)
            return

        self.show_loader = False
        self._stale = False
        supported = list(dict.fromkeys(factor.kind for factor in factors))
        if not supported:
            logger.warning("Tenant exposes no supported factors")
            self.error_screen = ErrorScreen(
                ClassifiedError.of(ErrorKind.UNKNOWN, NO_FACTORS_TITLE),
                NO_FACTORS_TITLE,
                "",
                None,
                button_title="",
            )
            return

        self.cards = [
            AuthMethodCard(kind=kind, methods=tuple(m for m in methods if m.kind is kind))
            for kind in supported
        ]

    def open(self, kind: FactorKind) -> Route:
        """Push the destination of the card for ``kind`` and return it.

        Raises:
            ValueError: If the tenant does not offer ``kind``.

        """
        for card in self.cards:
            if card.kind is kind:
                route = card.destination
                self._navigation.push(route)
                return route
        msg = f"{kind.value} is not offered by this tenant"
        raise ValueError(msg)

    def refresh_auth_data(self) -> None:
        self._stale = True

    async def load_if_stale(self) -> None:
        if self._stale:
            await self.load()
