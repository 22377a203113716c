from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx

from governance_sync.observability.logging import get_logger

logger = get_logger("content_resolver")

DEFAULT_TITLE = "N/A"
DEFAULT_BODY = "No body available"
DEFAULT_SUMMARY = "No summary available"
DEFAULT_EXECUTION_OPTION = "N/A"


@dataclass(slots=True, frozen=True)
class ProposalContent:
    title: str = DEFAULT_TITLE
    body: str = DEFAULT_BODY
    summary: str = DEFAULT_SUMMARY
    execution_option: str = DEFAULT_EXECUTION_OPTION

    @classmethod
    def from_payload(cls, payload: Any) -> ProposalContent:
        if not isinstance(payload, dict):
            return cls()
        return cls(
            title=_text_or(payload.get("title"), DEFAULT_TITLE),
            body=_text_or(payload.get("body"), DEFAULT_BODY),
            summary=_text_or(payload.get("summary"), DEFAULT_SUMMARY),
            execution_option=_text_or(payload.get("executionOption"), DEFAULT_EXECUTION_OPTION),
        )


def _text_or(value: Any, default: str) -> str:
    if value is None or value == "":
        return default
    return str(value)


class ContentResolver:
    """Fetch off-chain proposal content from a content-addressed gateway.

    Content behind a pointer never changes, so successful payloads are kept
    for the lifetime of the resolver. Failures are never cached and never
    raised; the caller gets placeholder content instead.
    """

    def __init__(self, gateway_url: str, client: httpx.AsyncClient) -> None:
        self._gateway_url = gateway_url
        self._client = client
        self._resolved: dict[str, ProposalContent] = {}

    def link_for(self, pointer: str) -> str:
        return f"{self._gateway_url}{pointer}"

    async def resolve(self, pointer: str) -> ProposalContent:
        link = self.link_for(pointer)
        cached = self._resolved.get(link)
        if cached is not None:
            return cached

        try:
            response = await self._client.get(link)
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("content_fetch_failed", link=link, error=str(exc))
            return ProposalContent()

        content = ProposalContent.from_payload(payload)
        self._resolved[link] = content
        return content
