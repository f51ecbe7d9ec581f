"""Resolve raw commit author identities to display names"""

import logging
from typing import Optional

from team_report.config import AUTHOR_LOOKUP, AUTHOR_PASSTHROUGH, AUTHOR_RESOLUTION_MODES
from team_report.errors import PartialDataError, UpstreamRequestError

logger = logging.getLogger(__name__)


class DisplayNameCache:
    """Handle -> display name memo, scoped to one run"""

    def __init__(self):
        self._names = {}

    def get(self, handle: str) -> Optional[str]:
        return self._names.get(handle)

    def put(self, handle: str, display_name: str) -> None:
        self._names.setdefault(handle, display_name)

    def __contains__(self, handle: str) -> bool:
        return handle in self._names

    def __len__(self) -> int:
        return len(self._names)


class AuthorResolver:
    """
    Maps a raw author identity to the name shown in reports

    In passthrough mode the identity is returned unchanged. In lookup mode the
    identity is treated as a handle and resolved through the GitLab user
    directory; results are memoised in the cache for the rest of the run and
    any failure falls back to the raw identity.
    """

    def __init__(self, client=None, mode: str = AUTHOR_PASSTHROUGH, cache: DisplayNameCache = None):
        if mode not in AUTHOR_RESOLUTION_MODES:
            raise ValueError(f"Unknown author resolution mode: {mode}")
        if mode == AUTHOR_LOOKUP and client is None:
            raise ValueError("lookup mode needs a GitLab client")
        self.client = client
        self.mode = mode
        self.cache = cache if cache is not None else DisplayNameCache()

    def resolve(self, raw_identity: str) -> str:
        if self.mode == AUTHOR_PASSTHROUGH or not raw_identity:
            return raw_identity

        cached = self.cache.get(raw_identity)
        if cached is not None:
            return cached

        try:
            display_name = self._lookup(raw_identity)
        except PartialDataError as e:
            logger.warning("Display name lookup failed for %s: %s", raw_identity, e)
            # failures are not cached
            return raw_identity

        if not display_name:
            display_name = raw_identity
        self.cache.put(raw_identity, display_name)
        return display_name

    def _lookup(self, handle: str) -> str:
        try:
            users = self.client.find_users(handle)
        except UpstreamRequestError as e:
            raise PartialDataError(e.url, e.status, e.body) from e
        if not users:
            return ""
        return users[0].get("name") or ""
