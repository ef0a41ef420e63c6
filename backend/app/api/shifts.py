from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.auth import RequireAnyAuth, UserInfo
from app.core.database import get_db
from app.schemas.shift import ShiftResponse
from app.services.record_service import list_shifts

router = APIRouter(prefix="/shifts", tags=["shifts"])


@router.get("", response_model=list[ShiftResponse])
async def get_shifts(
    db: AsyncSession = Depends(get_db),
    _user: UserInfo = Depends(RequireAnyAuth),
):
    return [ShiftResponse.model_validate(s) for s in await list_shifts(db)]
