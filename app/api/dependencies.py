"""
API dependencies for resolving the store, the collaborator and the caller.

Authentication is simulated: after login the client sends its account id in
the X-Account-ID header.
"""

from fastapi import Depends, Header, HTTPException, Request, status
from structlog import get_logger

from app.db.store import LedgerStore
from app.exceptions import AccountNotFoundError
from app.models.api import UserRole
from app.models.domain import Account
from app.observability.logging import bind_account
from app.services.generation import GenerationClient

logger = get_logger(__name__)


def get_store(request: Request) -> LedgerStore:
    """Store attached to the running application."""
    return request.app.state.store  # type: ignore[no-any-return]


def get_generator(request: Request) -> GenerationClient:
    """Generation collaborator attached to the running application."""
    return request.app.state.generator  # type: ignore[no-any-return]


async def get_current_account(
    x_account_id: str | None = Header(None),
    store: LedgerStore = Depends(get_store),
) -> Account:
    """
    Resolve the calling account from the X-Account-ID header.

    Raises:
        HTTPException(401): No header, or no account with that id
        HTTPException(403): Account is blocked
    """
    if not x_account_id:
        logger.warning("auth_no_account_header")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )

    try:
        account = store.get_account(x_account_id)
    except AccountNotFoundError as exc:
        logger.warning("auth_unknown_account", account_id=x_account_id)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unknown account",
        ) from exc

    if account.is_blocked:
        logger.warning("auth_account_blocked", account_id=account.account_id)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is blocked",
        )

    bind_account(account.account_id)
    return account


async def require_admin(
    account: Account = Depends(get_current_account),
) -> Account:
    """
    Require ADMIN role.

    Raises:
        HTTPException(403): If caller is not an admin
    """
    if account.role != UserRole.ADMIN:
        logger.warning(
            "auth_insufficient_role",
            account_id=account.account_id,
            role=account.role.value,
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin role required",
        )

    return account
