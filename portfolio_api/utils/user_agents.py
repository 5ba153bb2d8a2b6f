from typing import Iterable, Mapping

BOT_SIGNATURES = ("bot", "crawl", "spider", "slurp", "bingpreview", "mediapartners-google")


def is_bot_user_agent(user_agent: str | None) -> bool:
    """Return True when the user agent looks like a crawler."""
    ua = (user_agent or "").lower()
    return any(signature in ua for signature in BOT_SIGNATURES)


def has_campaign_params(params: Mapping[str, str] | Iterable[str]) -> bool:
    """Return True when any query parameter is a ``utm_*`` campaign tag."""
    return any(str(key).startswith("utm_") for key in params)
