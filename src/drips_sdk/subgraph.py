"""Async client for the Drips subgraph."""

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Any

import httpx

from . import gql
from ._exceptions import MissingArgumentError, SubgraphQueryError, UnsupportedNetworkError
from .constants import get_subgraph_url, is_supported_chain
from .history import unique_senders
from .mappers import (
    map_drips_receiver_seen_event,
    map_drips_set_event,
    map_received_drips_event,
    map_splits_entry,
    map_squeezed_drips_event,
    map_user_asset_config,
)
from .types import (
    DripsReceiverSeenEvent,
    DripsSetEvent,
    ReceivedDripsEvent,
    SplitsEntry,
    SqueezedDripsEvent,
    UserAssetConfig,
)

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 500
DEFAULT_TIMEOUT_SECS = 30.0


def _require(value: Any, name: str, action: str) -> None:
    if value is None or value == "":
        raise MissingArgumentError(f"Could not {action}: '{name}' is missing.", name)


class DripsSubgraphClient:
    """
    Async client for querying the Drips subgraph.

    Every list query pages through all results. Failures of any kind
    (transport, non-2xx status, GraphQL errors) raise SubgraphQueryError;
    nothing is retried.

    Example:
        >>> client = DripsSubgraphClient.create(5)
        >>> events = await client.get_drips_set_events_by_user_id(user_id)
    """

    def __init__(
        self,
        chain_id: int,
        api_url: str,
        http_client: httpx.AsyncClient | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        """
        Args:
            chain_id: Chain the subgraph indexes
            api_url: Subgraph GraphQL endpoint
            http_client: Client to send requests with (a short-lived one per query if not
                provided; see `session`)
            page_size: Number of entities fetched per request
        """
        self.chain_id = chain_id
        self.api_url = api_url
        self._http_client = http_client
        self._page_size = page_size

    @classmethod
    def create(cls, chain_id: int | None, api_url: str | None = None) -> "DripsSubgraphClient":
        """
        Create a client for a supported chain.

        Args:
            chain_id: Chain ID
            api_url: Endpoint override (defaults to DRIPS_SUBGRAPH_URL, then the network's subgraph)

        Raises:
            MissingArgumentError: If chain_id is missing
            UnsupportedNetworkError: If chain_id is not supported
        """
        if not chain_id:
            raise MissingArgumentError(
                "Could not create a new 'DripsSubgraphClient' instance: 'chain_id' is missing.", "chain_id"
            )
        if not is_supported_chain(chain_id):
            raise UnsupportedNetworkError(chain_id)

        return cls(chain_id, api_url or get_subgraph_url(chain_id))

    @asynccontextmanager
    async def session(self) -> AsyncIterator["DripsSubgraphClient"]:
        """
        Yield a client that sends every query over one HTTP connection pool.

        A client that already has an HTTP client yields itself.

        Example:
            >>> async with subgraph.session() as session:
            ...     events = await session.get_drips_set_events_by_user_id(user_id)
        """
        if self._http_client is not None:
            yield self
            return

        async with httpx.AsyncClient(timeout=DEFAULT_TIMEOUT_SECS) as http_client:
            yield DripsSubgraphClient(self.chain_id, self.api_url, http_client, self._page_size)

    async def get_user_asset_config_by_id(self, user_id: int | str, asset_id: int | str) -> UserAssetConfig | None:
        """Get a user's current drips configuration for one asset, or None."""
        _require(user_id, "user_id", "get user asset config")
        _require(asset_id, "asset_id", "get user asset config")

        data = await self.query(gql.get_user_asset_config_by_id, {"configId": f"{user_id}-{asset_id}"})
        config = data.get("userAssetConfig")

        return map_user_asset_config(config) if config else None

    async def get_all_user_asset_configs_by_user_id(self, user_id: int | str) -> list[UserAssetConfig]:
        """Get a user's current drips configurations for all assets."""
        _require(user_id, "user_id", "get user asset configs")

        configs = await self._query_all(
            gql.get_all_user_asset_configs_by_user_id,
            {"userId": str(user_id)},
            lambda data: (data.get("user") or {}).get("assetConfigs"),
        )
        return [map_user_asset_config(config) for config in configs]

    async def get_splits_config_by_user_id(self, user_id: int | str) -> list[SplitsEntry]:
        """Get a user's current splits receivers."""
        _require(user_id, "user_id", "get splits configuration")

        entries = await self._query_all(
            gql.get_splits_config_by_user_id,
            {"userId": str(user_id)},
            lambda data: (data.get("user") or {}).get("splitsEntries"),
        )
        return [map_splits_entry(entry) for entry in entries]

    async def get_drips_set_events_by_user_id(self, user_id: int | str) -> list[DripsSetEvent]:
        """Get all drips configuration updates of a user, oldest first."""
        _require(user_id, "user_id", "get drips set events")

        events = await self._query_all(
            gql.get_drips_set_events_by_user_id,
            {"userId": str(user_id)},
            lambda data: data.get("dripsSetEvents"),
        )
        return [map_drips_set_event(event) for event in events]

    async def get_drips_receiver_seen_events_by_receiver_id(
        self, receiver_user_id: int | str
    ) -> list[DripsReceiverSeenEvent]:
        """Get every time a user was configured as a drips receiver, oldest first."""
        _require(receiver_user_id, "receiver_user_id", "get drips receiver seen events")

        events = await self._query_all(
            gql.get_drips_receiver_seen_events_by_receiver_id,
            {"receiverUserId": str(receiver_user_id)},
            lambda data: data.get("dripsReceiverSeenEvents"),
        )
        return [map_drips_receiver_seen_event(event) for event in events]

    async def get_users_streaming_to_user(self, receiver_user_id: int | str) -> list[int]:
        """Get the IDs of all users that have streamed to a user, in discovery order."""
        _require(receiver_user_id, "receiver_user_id", "get streaming users")

        return unique_senders(await self.get_drips_receiver_seen_events_by_receiver_id(receiver_user_id))

    async def get_squeezed_drips_events_by_user_id(self, user_id: int | str) -> list[SqueezedDripsEvent]:
        """Get all squeezes performed by a user, oldest first."""
        _require(user_id, "user_id", "get squeezed drips events")

        events = await self._query_all(
            gql.get_squeezed_drips_events_by_user_id,
            {"userId": str(user_id)},
            lambda data: data.get("squeezedDripsEvents"),
        )
        return [map_squeezed_drips_event(event) for event in events]

    async def get_received_drips_events_by_user_id(self, user_id: int | str) -> list[ReceivedDripsEvent]:
        """Get all `receiveDrips` calls for a user, oldest first."""
        _require(user_id, "user_id", "get received drips events")

        events = await self._query_all(
            gql.get_received_drips_events_by_user_id,
            {"userId": str(user_id)},
            lambda data: data.get("receivedDripsEvents"),
        )
        return [map_received_drips_event(event) for event in events]

    async def query(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """
        Run a GraphQL query and return its `data`.

        Raises:
            SubgraphQueryError: On transport errors, non-2xx responses or GraphQL errors
        """
        payload = {"query": query, "variables": variables or {}}
        logger.debug("Querying subgraph %s with %s", self.api_url, variables)

        try:
            if self._http_client is not None:
                response = await self._http_client.post(self.api_url, json=payload)
            else:
                async with httpx.AsyncClient(timeout=DEFAULT_TIMEOUT_SECS) as client:
                    response = await client.post(self.api_url, json=payload)
        except httpx.HTTPError as e:
            raise SubgraphQueryError(f"Subgraph query failed: {e}", {"url": self.api_url}) from e

        if not response.is_success:
            raise SubgraphQueryError(
                f"Subgraph query failed: {response.status_code} {response.reason_phrase}",
                {"url": self.api_url, "status": response.status_code},
            )

        try:
            body = response.json()
        except ValueError as e:
            raise SubgraphQueryError(f"Subgraph query failed: invalid JSON response: {e}", {"url": self.api_url}) from e

        if not isinstance(body, dict):
            raise SubgraphQueryError(
                f"Subgraph query failed: expected a JSON object, got {type(body).__name__}", {"url": self.api_url}
            )

        if body.get("errors"):
            raise SubgraphQueryError(f"Subgraph query failed: {body['errors']}", {"errors": body["errors"]})

        return body.get("data") or {}

    async def _query_all(
        self,
        query: str,
        variables: dict[str, Any],
        select: Callable[[dict[str, Any]], list[dict[str, Any]] | None],
    ) -> list[dict[str, Any]]:
        results: list[dict[str, Any]] = []
        skip = 0
        while True:
            page = select(await self.query(query, {**variables, "first": self._page_size, "skip": skip})) or []
            results.extend(page)
            if len(page) < self._page_size:
                return results
            skip += self._page_size
            logger.debug("Fetching next page of %d (skip=%d)", self._page_size, skip)
