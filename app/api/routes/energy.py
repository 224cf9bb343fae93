from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request

from app.api.routes.player_helpers import authenticate, now_utc
from app.db.session import SessionLocal
from app.economy.energy.service import EnergyGate

router = APIRouter(prefix="/api", tags=["energy"])


@router.get("/energy")
async def get_energy(request: Request) -> dict[str, Any]:
    now = now_utc()
    async with SessionLocal.begin() as session:
        user = await authenticate(request, session, now=now)
        energy = await EnergyGate.status(session, user_id=user.id, now_utc=now)

    return {
        "used": energy.used,
        "max": energy.max_attempts,
        "remaining": energy.remaining,
        "bonusEnergy": energy.bonus_energy,
        "nextEnergyAt": energy.next_energy_at.isoformat() if energy.next_energy_at else None,
        "hoursPerSlot": energy.hours_per_slot,
    }
