from datetime import datetime

from fastapi import APIRouter, Body, Depends, Response
from pydantic import BaseModel

from backend.dependencies import get_punch_ledger
from backend.models import Punch
from backend.security import current_user_id
from backend.services.ledger import PunchLedger

router = APIRouter()


class PunchCreate(BaseModel):
    timestamp: datetime | None = None
    # wall-clock alternative: local date plus hour and minute
    data: str | None = None
    hora: int | None = None
    minuto: int | None = None


class PunchUpdate(BaseModel):
    horario: datetime


def _punch_json(punch: Punch, ledger: PunchLedger) -> dict:
    return {
        "id": punch.id,
        "user_id": punch.owner,
        "horario": punch.timestamp.astimezone(ledger.zone).isoformat(),
    }


@router.post("/punches", status_code=201)
def register_punch(
    payload: PunchCreate | None = Body(default=None),
    user_id: int = Depends(current_user_id),
    ledger: PunchLedger = Depends(get_punch_ledger),
):
    if payload is not None and payload.timestamp is not None:
        punch = ledger.register(user_id, payload.timestamp)
    elif payload is not None and (payload.data, payload.hora, payload.minuto) != (None, None, None):
        punch = ledger.register_from_parts(user_id, payload.data, payload.hora, payload.minuto)
    else:
        punch = ledger.register(user_id)
    return _punch_json(punch, ledger)


@router.get("/punches/{date}")
def list_punches(
    date: str,
    user_id: int = Depends(current_user_id),
    ledger: PunchLedger = Depends(get_punch_ledger),
):
    return [_punch_json(p, ledger) for p in ledger.list_for_date(user_id, date)]


@router.get("/punches/{date}/total-hours")
def total_hours(
    date: str,
    user_id: int = Depends(current_user_id),
    ledger: PunchLedger = Depends(get_punch_ledger),
):
    worked = ledger.worked_for_date(user_id, date)
    return {
        "total_trabalhado": worked.formatted.display,
        "total_segundos": worked.formatted.total_seconds,
    }


@router.put("/punches/{punch_id}")
def update_punch(
    punch_id: int,
    payload: PunchUpdate,
    user_id: int = Depends(current_user_id),
    ledger: PunchLedger = Depends(get_punch_ledger),
):
    punch = ledger.update(user_id, punch_id, payload.horario)
    return {"message": "Punch updated.", "punch": _punch_json(punch, ledger)}


@router.delete("/punches/{punch_id}", status_code=204)
def delete_punch(
    punch_id: int,
    user_id: int = Depends(current_user_id),
    ledger: PunchLedger = Depends(get_punch_ledger),
):
    ledger.delete(user_id, punch_id)
    return Response(status_code=204)
