from fastapi import Request

from backend.config import (
    ALLOW_CLIENT_TIMESTAMPS,
    DURATION_INCLUDE_SECONDS,
    REJECT_DUPLICATE_PUNCHES,
)
from backend.services.ledger import PunchLedger


def get_punch_ledger(request: Request) -> PunchLedger:
    return PunchLedger(
        request.app.state.punch_store,
        zone=request.app.state.zone,
        reject_duplicates=REJECT_DUPLICATE_PUNCHES,
        allow_client_timestamps=ALLOW_CLIENT_TIMESTAMPS,
        include_seconds=DURATION_INCLUDE_SECONDS,
    )
