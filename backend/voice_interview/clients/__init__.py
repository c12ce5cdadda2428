from voice_interview.clients.identity import BackendIdentityResolver
from voice_interview.clients.interviews_api import InterviewsApiClient, InterviewsApiError

__all__ = ["BackendIdentityResolver", "InterviewsApiClient", "InterviewsApiError"]
