import json
from string import Template

import aiohttp
import requests


'''
    Default configuration values.
    These can be modified as needed.
'''

defaults = {
    "timeout": 10.0,                       #Seconds before a request to the Steam Web API is abandoned.
    "steam_id": "76561197972495328",       #Profile used when no steam ID is given. Only useful for manual testing.
    "max_ids_per_request": 100,            #GetPlayerSummaries accepts at most 100 comma separated IDs.
    "headers": {
        "accept": "application/json",
        "user-agent": "steam-lookout/0.1",
    },
}

'''
Steam Web API endpoints. The keys are used to identify the endpoint when calling fetch_endpoint().
'''
endpoints = {
    "player_summaries":
                    {
                    "endpoint": "https://api.steampowered.com/ISteamUser/GetPlayerSummaries/v0002/?key=$key&steamids=$steamids",
                    "method": "GET"
                    },
}

# personastate values reported by GetPlayerSummaries.
PERSONA_STATES = {
    0: "Offline",
    1: "Online",
    2: "Busy",
    3: "Away",
    4: "Snooze",
    5: "Looking to trade",
    6: "Looking to play",
}


def build_url(endpoint_name, **values):
    if not endpoint_name or endpoint_name not in endpoints:
        raise ValueError(f"Invalid or missing endpoint. Valid endpoints are: {list(endpoints.keys())}")
    return Template(endpoints[endpoint_name]["endpoint"]).substitute(**values)


def get_players(content):
    '''
    Pulls the list of player summaries out of a GetPlayerSummaries response body.
    Returns an empty list when the body does not have the expected shape.
    '''
    if not isinstance(content, dict):
        return []
    players = content.get("response", {}).get("players", [])
    return players if isinstance(players, list) else []


## <------------------------------------- Synchronous requests -------------------------------------> ##

def fetch_endpoint(endpoint_name=None, api_key="", steam_ids=(), headers=defaults["headers"], timeout=defaults["timeout"]):
    '''
    Fetches an endpoint of the Steam Web API with requests. Endpoint name must be specified.
    Returns a dict with status_code, message and decoded JSON content, in the same shape as fetch_endpoint_async().

    :param endpoint_name: The name of the endpoint to fetch. Must be a key in the endpoints dictionary.
    :param api_key: The Steam Web API key.
    :param steam_ids: Steam IDs to include in the request.
    '''
    final_endpoint = build_url(endpoint_name, key=api_key, steamids=",".join(str(i) for i in steam_ids))
    try:
        response = requests.request(endpoints[endpoint_name]["method"], final_endpoint, headers=headers, timeout=timeout)
    except requests.RequestException as e:
        return {"status_code": None, "message": str(e), "content": None}

    content = None
    if response.content:
        try:
            content = json.loads(response.content)
        except json.JSONDecodeError:
            content = None
    return {"status_code": response.status_code, "message": response.reason, "content": content}


def fetch_player_summaries(steam_ids, api_key):
    '''
    Fetches the player summaries for any number of Steam IDs, batching them in groups of 100.
    IDs the API does not know are simply missing from the result.

    :return: A dict mapping steam ID to the raw player summary.
    '''
    steam_ids = [str(steam_id) for steam_id in steam_ids]
    batch_size = defaults["max_ids_per_request"]
    summaries = {}
    for start in range(0, len(steam_ids), batch_size):
        response = fetch_endpoint("player_summaries", api_key=api_key, steam_ids=steam_ids[start:start + batch_size])
        if response["status_code"] != 200:
            raise requests.HTTPError(f"GetPlayerSummaries failed: {response['status_code']} {response['message']}")
        for player in get_players(response["content"]):
            summaries[str(player.get("steamid"))] = player
    return summaries


def get_persona_names(steam_ids, api_key):
    '''
    Returns the persona names for the given Steam IDs, in the same order.
    Unknown IDs get an empty string.
    '''
    summaries = fetch_player_summaries(steam_ids, api_key)
    return [summaries.get(str(steam_id), {}).get("personaname", "") for steam_id in steam_ids]


## <------------------------------------- Asynchronous requests -------------------------------------> ##

async def fetch_endpoint_async(session: aiohttp.ClientSession, endpoint_name=None, api_key="", steam_ids=(), timeout=defaults["timeout"]):
    '''
    Same as fetch_endpoint(), but on a shared aiohttp session.
    Transport errors are raised, not folded into the result, so callers can tell them apart from API errors.
    '''
    final_endpoint = build_url(endpoint_name, key=api_key, steamids=",".join(str(i) for i in steam_ids))
    async with session.request(
        endpoints[endpoint_name]["method"],
        final_endpoint,
        headers=defaults["headers"],
        timeout=aiohttp.ClientTimeout(total=timeout),
    ) as response:
        content = None
        text = await response.text()
        if text:
            try:
                content = json.loads(text)
            except json.JSONDecodeError:
                content = None
        return {"status_code": response.status, "message": response.reason, "content": content}
