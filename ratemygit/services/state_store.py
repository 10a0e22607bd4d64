"""One-shot OAuth ``state`` values used to tie a GitHub callback to its sign-in.

Container deployments keep them in process memory. Lambda invocations do not
share memory, so there they live in a DynamoDB table keyed on ``state`` with a
``ttl`` attribute.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from typing import Protocol, runtime_checkable

from ratemygit.config import settings

logger = logging.getLogger(__name__)


@runtime_checkable
class StateStore(Protocol):
    async def put_state(self, state: str, ttl_seconds: int | None = None) -> None: ...

    async def validate_state(self, state: str) -> bool:
        """Consume ``state``; True only if it was issued and has not expired."""
        ...


class MemoryStateStore:
    def __init__(self, default_ttl: int | None = None) -> None:
        self._default_ttl = default_ttl or settings.oauth_state_ttl_seconds
        self._states: dict[str, float] = {}
        self._lock = threading.Lock()

    async def put_state(self, state: str, ttl_seconds: int | None = None) -> None:
        ttl = self._default_ttl if ttl_seconds is None else ttl_seconds
        now = time.time()
        with self._lock:
            # Abandoned sign-ins never come back, so drop them here
            self._states = {s: exp for s, exp in self._states.items() if exp > now}
            self._states[state] = now + ttl

    async def validate_state(self, state: str) -> bool:
        with self._lock:
            expires_at = self._states.pop(state, None)
        return expires_at is not None and time.time() < expires_at


class DynamoDBStateStore:
    def __init__(self, table_name: str, region: str, default_ttl: int | None = None) -> None:
        import boto3

        self._default_ttl = default_ttl or settings.oauth_state_ttl_seconds
        self._table = boto3.resource("dynamodb", region_name=region).Table(table_name)

    async def put_state(self, state: str, ttl_seconds: int | None = None) -> None:
        ttl = self._default_ttl if ttl_seconds is None else ttl_seconds
        item = {"state": state, "ttl": int(time.time()) + ttl}
        await asyncio.to_thread(self._table.put_item, Item=item)

    async def validate_state(self, state: str) -> bool:
        resp = await asyncio.to_thread(
            self._table.delete_item, Key={"state": state}, ReturnValues="ALL_OLD"
        )
        old = resp.get("Attributes")
        if not old:
            return False
        # DynamoDB TTL deletion lags by up to days; enforce expiry on read
        if int(old.get("ttl", 0)) <= int(time.time()):
            logger.info("Rejected expired OAuth state")
            return False
        return True


def get_state_store() -> StateStore:
    if settings.deployment_mode == "lambda":
        return DynamoDBStateStore(settings.dynamodb_state_table, settings.aws_region)
    return MemoryStateStore()
