"""Policy loading: blob store document -> validated Policy snapshot.

Loading never raises for a bad document. ``parse_policy`` returns a
``PolicyLoadResult`` carrying either the parsed policy or the reason it
was rejected, and a rejected document is replaced by the empty policy,
which denies every request.
"""

import json
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from pydantic import ValidationError as PydanticValidationError

from ..schemas.policy import EMPTY_POLICY, Policy
from ..storage.base import BlobStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PolicyLoadResult:
    """Outcome of reading the policy document. Immutable."""
    policy: Policy
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def parse_policy(raw: bytes) -> PolicyLoadResult:
    """Parse and validate a policy document.

    Any decoding or structural problem yields the empty policy together
    with a short description of what was wrong.
    """
    try:
        document = json.loads(raw.decode("utf-8"))
    except UnicodeDecodeError:
        return PolicyLoadResult(EMPTY_POLICY, "policy document is not valid UTF-8")
    except json.JSONDecodeError as e:
        return PolicyLoadResult(EMPTY_POLICY, f"policy document is not valid JSON: {e}")

    if not isinstance(document, dict):
        return PolicyLoadResult(EMPTY_POLICY, "policy document must be a JSON object")

    try:
        return PolicyLoadResult(Policy.model_validate(document))
    except PydanticValidationError as e:
        return PolicyLoadResult(
            EMPTY_POLICY, f"policy document failed validation: {e.error_count()} error(s)"
        )


class PolicyCache:
    """Process-wide policy snapshot with a bounded lifetime.

    ``ttl_seconds == 0`` disables caching; every ``load`` then reads the
    document, so an upload is visible to the next request. Snapshots are
    immutable, so only the slot itself needs the lock.
    """

    def __init__(self, ttl_seconds: int = 0, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._snapshot: Optional[tuple[Policy, float]] = None

    @property
    def enabled(self) -> bool:
        return self.ttl_seconds > 0

    def get(self) -> Optional[Policy]:
        if not self.enabled:
            return None
        with self._lock:
            if self._snapshot is None:
                return None
            policy, loaded_at = self._snapshot
            if self._clock() - loaded_at >= self.ttl_seconds:
                self._snapshot = None
                return None
            return policy

    def put(self, policy: Policy) -> None:
        if not self.enabled:
            return
        with self._lock:
            self._snapshot = (policy, self._clock())

    def clear(self) -> None:
        with self._lock:
            self._snapshot = None


class PolicyStore:
    """Reads the policy document from the blob store at a fixed key."""

    def __init__(self, blob_store: BlobStore, policy_key: str, cache: Optional[PolicyCache] = None):
        self.blob_store = blob_store
        self.policy_key = policy_key
        self.cache = cache

    def load_result(self) -> PolicyLoadResult:
        """Read the document and report how parsing went."""
        obj = self.blob_store.get(self.policy_key)
        if obj is None:
            return PolicyLoadResult(EMPTY_POLICY, f"no policy document at {self.policy_key!r}")
        return parse_policy(obj.body)

    def load(self) -> Policy:
        """Current policy; the empty policy when the document is missing or bad."""
        if self.cache is not None:
            cached = self.cache.get()
            if cached is not None:
                return cached

        result = self.load_result()
        if not result.ok:
            logger.warning(
                "Policy unavailable, denying all access",
                extra={"policy_key": self.policy_key, "reason": result.error},
            )

        if self.cache is not None:
            self.cache.put(result.policy)
        return result.policy
