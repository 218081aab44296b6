from __future__ import annotations

from fastapi import status


class EngineError(Exception):
    """Base for failures the engine reports to callers as a structured payload."""

    kind = "engine_error"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail

    def to_payload(self) -> dict[str, str]:
        return {"kind": self.kind, "detail": self.detail}


class NotFound(EngineError):
    kind = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class IneligibleRecipient(EngineError):
    kind = "ineligible_recipient"


class EmptyTeam(EngineError):
    kind = "empty_team"


class NoEligibleMembers(EngineError):
    kind = "no_eligible_members"


class AllocationFailed(EngineError):
    """Batch insert of allocated targets did not complete; nothing was kept."""

    kind = "allocation_failed"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
