# pagadiario/routers/auth_router.py
from fastapi import APIRouter, Depends

from pagadiario.core.auth import get_current_user
from pagadiario.models.profile_model import Profile
from pagadiario.schemas.collector_schema import ProfileOut

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.get("/me", response_model=ProfileOut)
def me(user: Profile = Depends(get_current_user)):
    return user
