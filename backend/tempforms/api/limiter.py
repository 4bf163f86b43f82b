"""Shared slowapi limiter; routes opt in with the decorators below."""

from slowapi import Limiter
from slowapi.util import get_remote_address

from tempforms.core.config import settings

limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)

# One budget per client across every API route
api_limit = limiter.shared_limit(settings.RATE_LIMIT_API, scope="api")
# Viewing, exporting and deleting responses draw from a single budget
view_responses_limit = limiter.shared_limit(settings.RATE_LIMIT_VIEW_RESPONSES, scope="view_responses")
create_form_limit = limiter.limit(settings.RATE_LIMIT_CREATE_FORM)
submit_response_limit = limiter.limit(settings.RATE_LIMIT_SUBMIT_RESPONSE)
