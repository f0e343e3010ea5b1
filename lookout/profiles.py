"""Steam implementation of the profile source used by the poll cycle."""

from __future__ import annotations

import asyncio

import aiohttp

from lookout.config import defaults
from lookout.errors import ProfileFetchError
from lookout.models import Offline, OnlineIdle, PlayingApp, ProfileSnapshot
from steamapi import steamapi

ONLINE_PERSONA_STATE = 1


def normalize_player_summary(player: dict) -> ProfileSnapshot:
    """Map one GetPlayerSummaries entry onto a ProfileSnapshot."""
    steam_id = str(player.get("steamid") or "")
    if not steam_id:
        raise ProfileFetchError(steam_id, "player summary has no steamid")

    is_online = player.get("personastate") == ONLINE_PERSONA_STATE
    game_id = player.get("gameid")
    if not is_online:
        presence = Offline()
    elif game_id:
        presence = PlayingApp(app_id=str(game_id), app_name=player.get("gameextrainfo") or "")
    else:
        presence = OnlineIdle()

    return ProfileSnapshot(
        id=steam_id,
        display_name=player.get("personaname") or steam_id,
        avatar_url=player.get("avatarfull") or player.get("avatar") or "",
        presence=presence,
    )


class SteamProfileSource:
    """Fetches one profile per call through the shared aiohttp session."""

    def __init__(self, session: aiohttp.ClientSession, api_key: str, timeout: float = defaults["request_timeout"]):
        self.session = session
        self.api_key = api_key
        self.timeout = timeout

    async def fetch(self, steam_id: str) -> ProfileSnapshot:
        if not self.api_key:
            raise ProfileFetchError(steam_id, "API key not set")
        try:
            response = await steamapi.fetch_endpoint_async(
                self.session,
                "player_summaries",
                api_key=self.api_key,
                steam_ids=[steam_id],
                timeout=self.timeout,
            )
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise ProfileFetchError(steam_id, f"request failed: {exc!r}") from exc

        if response["status_code"] != 200:
            raise ProfileFetchError(
                steam_id,
                f"HTTP {response['status_code']} {response['message']}",
                status_code=response["status_code"],
            )
        players = steamapi.get_players(response["content"])
        if not players:
            raise ProfileFetchError(steam_id, "profile not found", status_code=response["status_code"])
        return normalize_player_summary(players[0])
