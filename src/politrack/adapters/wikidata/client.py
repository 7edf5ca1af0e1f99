"""Wikidata action-API client."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING, cast

import httpx
from pydantic import ValidationError

from politrack.adapters.http_resilience import RequestPacer, ResilientClient
from politrack.config.wikidata import WIKIDATA_API_PATH, WIKIDATA_MAX_IDS_PER_CALL
from politrack.domain.errors import ProviderError
from .schema import WikidataEntitiesResponse, WikidataEntity, WikidataSearchResponse
from .translator import translate_person, translate_registry_ids

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence

    from politrack.config import ResilienceConfig, WikidataConfig
    from politrack.domain.model import CandidateRecord, DataSource

log = getLogger(__name__)

PROVIDER_NAME = "wikidata"


class WikidataAPIError(ProviderError):
    """Raised when the Wikidata API fails or returns an unusable payload."""

    def __init__(self, message: str) -> None:
        super().__init__(PROVIDER_NAME, message)


class WikidataClient:
    """Name search and entity lookups against the Wikidata action API.

    Every public method is synchronous and raises ``WikidataAPIError`` (a
    ``ProviderError``) on transport failures, HTTP errors, API error objects and
    payloads that do not validate. With a rate limit configured, requests stay
    spaced out across calls as well as within one.
    """

    def __init__(
        self,
        *,
        config: WikidataConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient
        self._batch_size = max(1, min(config.batch_size, WIKIDATA_MAX_IDS_PER_CALL))
        self._languages = tuple(dict.fromkeys((config.language, "en")))
        self._pacer = RequestPacer.from_ratelimit(config.resilience.ratelimit)

    def search_people(self, name: str) -> list[CandidateRecord]:
        """Search by name and return the human hits as candidate records."""

        return asyncio.run(self._search_people_async(name))

    def fetch_entities(self, entity_ids: Sequence[str]) -> dict[str, WikidataEntity]:
        return asyncio.run(self._fetch_entities_async(entity_ids, props=("labels", "claims")))

    def registry_ids(self, entity_ids: Sequence[str]) -> Mapping[str, Mapping[DataSource, str]]:
        entities = asyncio.run(self._fetch_entities_async(entity_ids, props=("claims",)))
        return {
            entity_id: registry
            for entity_id, entity in entities.items()
            if (registry := translate_registry_ids(entity))
        }

    async def _search_people_async(self, name: str) -> list[CandidateRecord]:
        params = {
            "action": "wbsearchentities",
            "search": name,
            "language": self._config.language,
            "uselang": self._config.language,
            "type": "item",
            "limit": str(self._config.search_limit),
            "format": "json",
        }
        async with self._client_factory(self._resilience) as client:
            payload = await self._perform_request(client=client, params=params)
            try:
                search = WikidataSearchResponse.model_validate(payload)
            except ValidationError as exc:
                raise WikidataAPIError(f"Invalid search payload for {name!r}: {exc}") from exc
            if search.error is not None:
                raise WikidataAPIError(f"{search.error.code}: {search.error.info}")
            if not search.search:
                return []

            labels = {hit.id: hit.label for hit in search.search}
            entities = await self._fetch_batch(
                client=client, entity_ids=list(labels), props=("labels", "claims")
            )

        candidates: list[CandidateRecord] = []
        for entity_id, fallback in labels.items():
            entity = entities.get(entity_id)
            if entity is None:
                continue
            candidate = translate_person(
                entity, languages=self._languages, fallback_label=fallback
            )
            if candidate is not None:
                candidates.append(candidate)
        log.debug("Wikidata search %r: %d hits, %d people", name, len(labels), len(candidates))
        return candidates

    async def _fetch_entities_async(
        self, entity_ids: Sequence[str], *, props: tuple[str, ...]
    ) -> dict[str, WikidataEntity]:
        unique_ids = list(dict.fromkeys(entity_ids))
        results: dict[str, WikidataEntity] = {}
        if not unique_ids:
            return results
        async with self._client_factory(self._resilience) as client:
            for start in range(0, len(unique_ids), self._batch_size):
                batch = unique_ids[start : start + self._batch_size]
                results.update(
                    await self._fetch_batch(client=client, entity_ids=batch, props=props)
                )
        return results

    async def _fetch_batch(
        self,
        *,
        client: ResilientClient,
        entity_ids: Sequence[str],
        props: tuple[str, ...],
    ) -> dict[str, WikidataEntity]:
        params = {
            "action": "wbgetentities",
            "ids": "|".join(entity_ids),
            "props": "|".join(props),
            "languages": "|".join(self._languages),
            "format": "json",
        }
        payload = await self._perform_request(client=client, params=params)
        try:
            response = WikidataEntitiesResponse.model_validate(payload)
        except ValidationError as exc:
            raise WikidataAPIError(f"Invalid entities payload: {exc}") from exc
        if response.error is not None:
            raise WikidataAPIError(f"{response.error.code}: {response.error.info}")
        return {
            entity_id: entity
            for entity_id, entity in response.entities.items()
            if not entity.is_missing
        }

    async def _perform_request(
        self,
        *,
        client: ResilientClient,
        params: dict[str, str],
    ) -> dict[str, object]:
        if self._pacer is not None:
            await self._pacer.wait()
        try:
            response = await client.get(WIKIDATA_API_PATH, params=params)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            raise WikidataAPIError(f"{params['action']} failed: {exc}") from exc
        except ValueError as exc:
            raise WikidataAPIError(f"{params['action']} returned invalid JSON") from exc

        if not isinstance(payload, dict):
            raise WikidataAPIError("Unexpected Wikidata response payload")
        return payload


if TYPE_CHECKING:
    from politrack.domain.ports import PersonSearch, RegistryPivot

    _client_stub = WikidataClient(config=cast("WikidataConfig", object()))
    _search_check: PersonSearch = _client_stub
    _pivot_check: RegistryPivot = _client_stub
