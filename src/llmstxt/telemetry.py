"""Anonymous usage events. Opt out with DO_NOT_TRACK=1."""

from typing import Optional

import httpx

from llmstxt.config import (
    TELEMETRY_ENDPOINT,
    TELEMETRY_TIMEOUT,
    __version__,
    is_ci,
    is_telemetry_disabled,
)


def build_payload(event: str, skills: Optional[str] = None, agents: Optional[str] = None) -> dict:
    payload = {"event": event, "version": __version__}
    if skills:
        payload["skills"] = skills
    if agents:
        payload["agents"] = agents
    if is_ci():
        payload["ci"] = True
    return payload


def track(event: str, skills: Optional[str] = None, agents: Optional[str] = None):
    """Send one event. Never raises and never waits longer than TELEMETRY_TIMEOUT."""
    if is_telemetry_disabled():
        return

    try:
        httpx.post(
            TELEMETRY_ENDPOINT,
            json=build_payload(event, skills, agents),
            timeout=TELEMETRY_TIMEOUT,
        )
    except httpx.HTTPError:
        pass
