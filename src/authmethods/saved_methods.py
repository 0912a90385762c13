"""Management screen model for the enrolled methods of one kind.

Copyright (c) 2025 AuthFramework. All rights reserved.
"""

from __future__ import annotations

import logging

from .catalog import display, is_usable
from .collaborators import (
    CredentialProvider,
    DeleteAuthMethodUseCase,
    GetAuthMethodsUseCase,
    RefreshAuthData,
)
from .config import MyAccountConfig
from .error_handler import ErrorHandler, ErrorScreen
from .models import DeleteAuthMethodRequest, EnrolledMethod, GetAuthMethodsRequest
from .routes import SavedMethodsScreen

logger = logging.getLogger(__name__)


class SavedMethodsScreenModel:
    """Lists and deletes the user's methods of the route's kind."""

    def __init__(
        self,
        route: SavedMethodsScreen,
        *,
        config: MyAccountConfig,
        credential_provider: CredentialProvider,
        get_auth_methods: GetAuthMethodsUseCase,
        delete_auth_method: DeleteAuthMethodUseCase,
        error_handler: ErrorHandler,
        delegate: RefreshAuthData | None = None,
    ) -> None:
        """Initialize the screen model.

        Args:
            route: Route the screen was opened with; its methods seed the list
            config: Tenant configuration
            credential_provider: Source of My Account API tokens
            get_auth_methods: Refetches the listing
            delete_auth_method: Removes a method
            error_handler: Classifies and surfaces failures
            delegate: Told to refetch listings after a deletion

        """
        self.kind = route.kind
        self._initial = route.methods
        self._config = config
        self._credentials = credential_provider
        self._get_auth_methods = get_auth_methods
        self._delete_auth_method = delete_auth_method
        self._error_handler = error_handler
        self._delegate = delegate

        self.methods: list[EnrolledMethod] = []
        self.show_loader = False
        self.error_screen: ErrorScreen | None = None

    @property
    def title(self) -> str:
        return display(self.kind).saved_title

    @property
    def navigation_title(self) -> str:
        return display(self.kind).navigation_title

    @property
    def manage_dialog_title(self) -> str:
        return display(self.kind).manage_dialog_title

    @property
    def destructive_action(self) -> str:
        return display(self.kind).destructive_action

    @property
    def empty_state_message(self) -> str:
        return display(self.kind).empty_state_message

    @property
    def is_empty(self) -> bool:
        return not self.show_loader and self.error_screen is None and not self.methods

    async def load(self, post_deletion: bool = False) -> None:
        """Show the route's methods, or refetch when there are none or after a deletion."""
        self.methods = []
        self.show_loader = True
        self.error_screen = None

        if self._initial and not post_deletion:
            self.methods = self._usable(self._initial)
            self.show_loader = False
            return

        scope = self._config.read_methods_scope
        try:
            credentials = await self._credentials.fetch_api_credentials(
                self._config.audience or "", scope
            )
            methods = await self._get_auth_methods.execute(
                GetAuthMethodsRequest(
                    token=credentials.access_token, domain=self._config.domain
                )
            )
        except Exception as e:
            await self._error_handler.handle(
                e, scope, self, lambda: self.load(post_deletion)
            )
            return

        self.show_loader = False
        self.methods = self._usable(methods)

    async def delete(self, method: EnrolledMethod) -> None:
        """Delete ``method`` and reload the list from the server."""
        self.show_loader = True
        self.error_screen = None
        scope = self._config.delete_scope
        try:
            credentials = await self._credentials.fetch_api_credentials(
                self._config.audience or "", scope
            )
            await self._delete_auth_method.execute(
                DeleteAuthMethodRequest(
                    token=credentials.access_token,
                    domain=self._config.domain,
                    id=method.id,
                )
            )
        except Exception as e:
            await self._error_handler.handle(
                e, scope, self, lambda: self.delete(method)
            )
            return

        logger.info("Deleted %s method", self.kind.value)
        if self._delegate is not None:
            self._delegate.refresh_auth_data()
        await self.load(post_deletion=True)

    def _usable(self, methods: tuple[EnrolledMethod, ...] | list[EnrolledMethod]) -> list[EnrolledMethod]:
        return [m for m in methods if is_usable(self.kind, m)]
