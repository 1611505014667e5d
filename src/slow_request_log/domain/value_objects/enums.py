from __future__ import annotations

from enum import StrEnum


class LifecyclePhase(StrEnum):
    """Ordered request-processing phases, prefixed to stay clear of user segment names."""

    ON_REQUEST = "lifecycle:on_request"
    ON_PRE_AUTH = "lifecycle:on_pre_auth"
    ON_POST_AUTH = "lifecycle:on_post_auth"
    ON_PRE_HANDLER = "lifecycle:on_pre_handler"
    ON_POST_HANDLER = "lifecycle:on_post_handler"


class RequestState(StrEnum):
    CREATED = "created"
    COMPLETING = "completing"
    EMITTED = "emitted"
    SUPPRESSED = "suppressed"
    DISCARDED = "discarded"


LIFECYCLE_PHASES: tuple[LifecyclePhase, ...] = tuple(LifecyclePhase)
