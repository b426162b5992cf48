"""
Operator key registry client.

Resolves an operator key id to the public key the event log currently
publishes for it. A successful listing may be reused for ``cache_ttl``
seconds; a failed listing is never cached, so a lookup failure is retried
on the next verification.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from .client import CaptureStore
from .errors import DecodeError, KeyLookupError, NetworkError
from .models import OperatorKey

logger = logging.getLogger(__name__)


class KeyRegistryClient:
    """
    Looks up operator public keys in the event log's key listing.

    ``cache_ttl`` of 0 (the default) lists the registry on every lookup.
    ``clock`` is injectable for tests.
    """

    def __init__(
        self,
        store: CaptureStore,
        cache_ttl: float = 0.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.store = store
        self.cache_ttl = cache_ttl
        self._clock = clock
        self._keys: dict[str, OperatorKey] | None = None
        self._fetched_at = 0.0

    async def resolve(self, key_id: str) -> OperatorKey | None:
        """
        Look up one operator key.

        Returns:
            The key, or None if the registry does not list key_id

        Raises:
            KeyLookupError: If the registry could not be listed
        """
        keys = await self._listing()
        key = keys.get(key_id)
        if key is None:
            logger.info("Operator key %r is not in the registry", key_id)
        return key

    def invalidate(self) -> None:
        self._keys = None

    async def _listing(self) -> dict[str, OperatorKey]:
        if self._keys is not None and self._clock() - self._fetched_at < self.cache_ttl:
            return self._keys

        try:
            listed = await self.store.list_operator_keys()
        except (NetworkError, DecodeError) as exc:
            self.invalidate()
            raise KeyLookupError(f"Operator key lookup failed: {exc}") from exc

        keys = {key.key_id: key for key in listed}
        logger.debug("Fetched %d operator keys", len(keys))
        if self.cache_ttl > 0:
            self._keys = keys
            self._fetched_at = self._clock()
        return keys
