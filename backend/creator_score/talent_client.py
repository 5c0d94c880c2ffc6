"""
Talent Protocol API client.

Fetches creator score profiles and the token-holder (boosted) profile set
from the advanced profile search endpoint, and normalizes the loosely typed
profile JSON into ``ScoredEntry`` values.
"""
import asyncio
import json
import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass

import httpx

from creator_score.constants import (
    BOOST_CREDENTIAL_SLUGS,
    CREATOR_SCORE_SLUG,
    CREATOR_SCORER,
    PROJECT_ACCOUNTS_TO_EXCLUDE,
)
from creator_score.exceptions import ProfileParseError, TalentAPIError
from creator_score.schemas import ScoredEntry

logger = logging.getLogger(__name__)

SEARCH_PATH = "/search/advanced/profiles"

# Boost searches only look at scores likely to reach the eligible window
BOOST_SEARCH_MIN_SCORE = 120


@dataclass(frozen=True)
class BoostedProfiles:
    ids: frozenset[str]
    complete: bool


def normalize_profile(raw: object) -> ScoredEntry:
    """Map one Talent search profile onto a ScoredEntry.

    The creator score is the highest ``points`` among ``creator_score``
    entries; a profile without one scores 0.
    """
    if not isinstance(raw, Mapping):
        raise ProfileParseError(f"Profile payload is not an object: {raw!r}")
    profile_id = raw.get("id")
    if not profile_id:
        raise ProfileParseError("Profile payload has no id")

    points = [
        s.get("points") or 0
        for s in raw.get("scores") or []
        if isinstance(s, Mapping) and s.get("slug") == CREATOR_SCORE_SLUG
    ]
    score = max(points) if points else 0
    if isinstance(score, bool) or not isinstance(score, (int, float)) or math.isnan(score) or score < 0:
        raise ProfileParseError(f"Profile {profile_id} has invalid creator score {score!r}")

    return ScoredEntry(
        id=str(profile_id),
        display_name=raw.get("display_name") or raw.get("name") or "Unknown",
        avatar_url=raw.get("image_url") or None,
        score=int(score),
    )


def _score_sort() -> dict:
    return {
        "score": {"order": "desc", "scorer": CREATOR_SCORER},
        "id": {"order": "desc"},
    }


class TalentClient:
    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.talentprotocol.com",
        timeout: float = 30.0,
        page_delay: float = 0.1,
        max_page_size: int = 250,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.page_delay = page_delay
        self.max_page_size = max_page_size
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        if not self.api_key:
            raise TalentAPIError("Missing Talent API key")
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self._transport,
            headers={"Accept": "application/json", "X-API-KEY": self.api_key},
        )

    async def _search(self, client: httpx.AsyncClient, params: dict, label: str) -> list:
        try:
            response = await client.get(SEARCH_PATH, params=params)
        except httpx.HTTPError as e:
            logger.error("Talent search %s failed: %s", label, e)
            raise TalentAPIError(f"{label} search failed: {e}") from e
        if response.status_code != 200:
            logger.error(
                "Talent search %s returned %s: %s", label, response.status_code, response.text[:200]
            )
            raise TalentAPIError(
                f"{label} search failed: {response.text[:200]}",
                status_code=response.status_code,
            )
        try:
            payload = response.json()
        except ValueError as e:
            raise TalentAPIError(f"{label} search returned invalid JSON") from e
        profiles = (payload.get("profiles") or []) if isinstance(payload, dict) else None
        if not isinstance(profiles, list):
            raise TalentAPIError(f"{label} search returned malformed profiles")
        return profiles

    async def fetch_top_profiles(self, total_needed: int) -> list:
        """Page through the score-sorted search until ``total_needed`` profiles are in."""
        query = {"score": {"min": 1, "scorer": CREATOR_SCORER}}
        per_page = min(total_needed, self.max_page_size)
        profiles: list = []
        page = 1
        async with self._client() as client:
            while len(profiles) < total_needed:
                params = {
                    "query": json.dumps(query),
                    "sort": json.dumps(_score_sort()),
                    "page": page,
                    "per_page": per_page,
                    "view": "scores_minimal",
                }
                batch = await self._search(client, params, f"top profiles page {page}")
                profiles.extend(batch)
                if len(batch) < per_page:
                    break
                page += 1
                if len(profiles) < total_needed:
                    await asyncio.sleep(self.page_delay)
        return profiles[:total_needed]

    async def fetch_top_scored_entries(
        self,
        limit: int = 200,
        exclude: frozenset[str] = PROJECT_ACCOUNTS_TO_EXCLUDE,
    ) -> list[ScoredEntry]:
        """Return up to ``limit`` creators after dropping excluded project accounts."""
        raw = await self.fetch_top_profiles(limit + len(exclude))
        logger.info("Retrieved %s profiles from Talent API", len(raw))
        entries = [normalize_profile(p) for p in raw]
        filtered = [e for e in entries if e.id not in exclude]
        logger.info("Filtered %s project accounts", len(entries) - len(filtered))
        return filtered[:limit]

    async def _credential_search(
        self, client: httpx.AsyncClient, slug: str, threshold: int
    ) -> list[str]:
        query = {
            "score": {"min": BOOST_SEARCH_MIN_SCORE, "scorer": CREATOR_SCORER},
            "credentials": [{"slug": slug, "valueRange": {"min": threshold}}],
        }
        params = {
            "query": json.dumps(query),
            "sort": json.dumps(_score_sort()),
            "per_page": 200,
        }
        profiles = await self._search(client, params, slug)
        return [str(p["id"]) for p in profiles if isinstance(p, Mapping) and p.get("id")]

    async def fetch_boosted_ids(self, threshold: int) -> BoostedProfiles:
        """Union of creators holding at least ``threshold`` tokens in either credential.

        Both searches run concurrently; a failed search is logged and the
        other one's results are still used.
        """
        async with self._client() as client:
            results = await asyncio.gather(
                *(self._credential_search(client, slug, threshold) for slug in BOOST_CREDENTIAL_SLUGS),
                return_exceptions=True,
            )

        ids: set[str] = set()
        failures = 0
        for slug, result in zip(BOOST_CREDENTIAL_SLUGS, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                failures += 1
                logger.warning("Boosted profile search %s failed: %s", slug, result)
                continue
            ids.update(result)
        if failures == len(BOOST_CREDENTIAL_SLUGS):
            raise TalentAPIError("All boosted profile searches failed")
        return BoostedProfiles(ids=frozenset(ids), complete=failures == 0)
