import logging

import httpx

from voice_interview.clients.interviews_api import InterviewsApiClient, InterviewsApiError
from voice_interview.schemas import CandidateIdentity

logger = logging.getLogger("voice_interview.clients.identity")


class BackendIdentityResolver:
    """Resolves the caller's candidate profile from the bearer token the API client carries."""

    def __init__(self, api: InterviewsApiClient):
        self.api = api

    async def resolve_current_identity(self) -> CandidateIdentity | None:
        if not self.api.token:
            return None
        try:
            data = await self.api.request("GET", "/candidates/me")
        except (InterviewsApiError, httpx.HTTPError) as exc:
            logger.warning("identity lookup failed | err=%s", exc)
            return None

        candidate_id = (data or {}).get("id") if isinstance(data, dict) else None
        if not candidate_id:
            return None
        return CandidateIdentity(candidate_id=str(candidate_id))
