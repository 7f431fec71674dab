"""BaseService — shared foundation for wavalidate services.

Every service receives a :class:`Workspace` at construction time.  The
workspace provides settings, the credential store, plugins, and the
messaging transport.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from wavalidate.infrastructure.workspace import Workspace

logger = logging.getLogger(__name__)


class BaseService:
    """Base for service-layer classes.

    Usage::

        class SessionService(BaseService):
            def list_sessions(self) -> ServiceResult:
                names = self._workspace.credentials.list_sessions()
                ...
    """

    def __init__(self, workspace: Workspace) -> None:
        self._workspace = workspace

    def _dispatch_event(
        self,
        hook_name: str,
        payload: dict[str, Any],
        warnings: list[str],
    ) -> None:
        """Fire a lifecycle hook.

        INVARIANT: Plugin failures are warnings, never errors.
        """
        warning = self._workspace.plugins.notify(hook_name, **payload)
        if warning is not None:
            warnings.append(warning)
