import logging
from dataclasses import dataclass

import httpx
from fastapi import Request

log = logging.getLogger(__name__)

PLACEHOLDER_IP = "0.0.0.0"


@dataclass(frozen=True)
class Visitor:
    ip: str
    device_id: str

    @property
    def has_ip(self) -> bool:
        return self.ip != PLACEHOLDER_IP


async def fetch_public_ip(url: str, client: httpx.AsyncClient | None = None) -> str:
    """Ask the lookup service for the public address. Never raises."""
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=10) as c:
                r = await c.get(url, headers={"Cache-Control": "no-store"})
        else:
            r = await client.get(url, headers={"Cache-Control": "no-store"})
        r.raise_for_status()
        ip = r.json().get("ip")
    except (httpx.HTTPError, ValueError, AttributeError) as e:
        log.warning("ip lookup failed: %s", e)
        return PLACEHOLDER_IP
    return ip if isinstance(ip, str) and ip else PLACEHOLDER_IP

def request_ip(request: Request) -> str:
    fwd = request.headers.get("x-forwarded-for")
    if fwd:
        first = fwd.split(",")[0].strip()
        if first:
            return first
    real = request.headers.get("x-real-ip")
    if real:
        return real.strip()
    if request.client and request.client.host:
        return request.client.host
    return PLACEHOLDER_IP

async def resolve_visitor_ip(request: Request, source: str, lookup_url: str) -> str:
    if source == "lookup":
        return await fetch_public_ip(lookup_url)
    return request_ip(request)
