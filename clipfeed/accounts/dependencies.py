"""FastAPI dependencies for accounts."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from .service import AccountService


async def get_account_service(request: Request) -> AccountService:
    """Get account service from app state."""
    app_state = request.app.state
    if not hasattr(app_state, "account_service") or not app_state.account_service:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Account service not available",
        )
    return app_state.account_service


AccountServiceDep = Annotated[AccountService, Depends(get_account_service)]
