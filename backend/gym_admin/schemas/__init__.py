"""Request drafts, operation results and serializers."""

from .dtos import *  # noqa: F401,F403
