"""
The session storage slot holding the logged-in Identity.

Storage is any mutable mapping of slot name to JSON text (a per-client dict
kept by the API session table, for instance). Pages read the identity through
``IdentityStore.read``; only the identity resolver writes it.
"""

import json
import sys
from typing import MutableMapping, Optional

from camp_portal.config import SESSION_STORAGE_KEY
from camp_portal.models import Identity


class IdentityStore:
    """Read/write/clear access to one named storage slot."""

    def __init__(self, storage: MutableMapping[str, str], key: str = SESSION_STORAGE_KEY):
        self._storage = storage
        self._key = key

    def read(self) -> Optional[Identity]:
        raw = self._storage.get(self._key)
        if not raw:
            return None
        try:
            return Identity.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError) as e:
            print(f"[WARN] Discarding unreadable session data: {e}", file=sys.stderr)
            self.clear()
            return None

    def write(self, identity: Identity) -> None:
        self._storage[self._key] = json.dumps(identity.to_dict())

    def clear(self) -> None:
        self._storage.pop(self._key, None)
