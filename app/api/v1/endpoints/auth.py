from fastapi import APIRouter, Depends

from app.api.deps.auth import get_current_principal
from app.core.security import TokenPrincipal

router = APIRouter()


@router.get("/verify-token", response_model=TokenPrincipal)
async def verify_token(principal: TokenPrincipal = Depends(get_current_principal)):
    """Echo the verified claims of the bearer token."""
    return principal
