"""Validator — one directory lookup per canonical address.

Policy: unknown collapses to false.  A lookup that raises, and a session
that is not ready, both report ``exists=False`` with a reason instead of
raising.  This loses precision (an unreachable directory looks the same
as an unregistered number in the output file) in exchange for a batch
that never stops on a single bad lookup.  Indeterminate outcomes are
counted in the batch summary so the loss stays visible.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from wavalidate.domain.records import ValidationOutcome

if TYPE_CHECKING:
    from wavalidate.services.session import SessionManager

logger = logging.getLogger(__name__)

DEFAULT_ADDRESS_DOMAIN = "s.whatsapp.net"


def directory_query(address: str, domain: str | None = DEFAULT_ADDRESS_DOMAIN) -> str:
    """Build the directory identifier queried for *address*."""
    return f"{address}@{domain}" if domain else address


class Validator:
    """Ask the messaging directory whether an address exists.

    No retries here: reconnecting is the session manager's job, and each
    call yields exactly one outcome.
    """

    def __init__(
        self,
        session: SessionManager,
        *,
        address_domain: str | None = DEFAULT_ADDRESS_DOMAIN,
    ) -> None:
        self._session = session
        self._address_domain = address_domain

    async def validate(self, address: str) -> ValidationOutcome:
        connection = self._session.connection
        if not self._session.is_ready or connection is None:
            return ValidationOutcome.not_ready()

        query = directory_query(address, self._address_domain)
        try:
            matches = await connection.lookup(query)
        except Exception as exc:
            logger.warning("Lookup failed for %s: %s", address, exc)
            return ValidationOutcome.lookup_failed(str(exc) or type(exc).__name__)

        return ValidationOutcome(exists=isinstance(matches, (list, tuple)) and len(matches) > 0)
