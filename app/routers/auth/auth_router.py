from fastapi import APIRouter, Depends, HTTPException, status, Request
from typing import Any, Dict
import logging

from app.core.config import settings
from app.core.dependencies import get_current_account
from app.core.exceptions import Unauthorized
from app.core.rate_limit import limiter
from app.core.security import create_access_token
from app.db.connection import get_db
from app.db.repositories import WalletRepository
from app.models.schemas import AccountResponse, LoginRequest, MerchantRegisterRequest, MerchantResponse, Token
from app.services.auth_service import AuthService
from app.services.moderation_service import with_wallet

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/register", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("10/minute")
def register(request: Request, payload: MerchantRegisterRequest, db=Depends(get_db)):
    """
    Register a merchant account.

    The account starts in `pending` status and must be approved by an admin
    before it can submit payout orders or manage API keys.
    """
    return AuthService(db).register_merchant(
        email=payload.email,
        password=payload.password,
        company_name=payload.company_name,
        contact_person=payload.contact_person,
        phone=payload.phone,
    )


@router.post("/login", response_model=Token)
@limiter.limit("20/minute")
def login(request: Request, credentials: LoginRequest, db=Depends(get_db)):
    """Authenticate and return a bearer access token"""
    try:
        account = AuthService(db).authenticate(credentials.email, credentials.password)
    except Unauthorized as e:
        logger.info(f"Login refused for {credentials.email}: {e.message}")
        if e.message == "Incorrect email or password":
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=e.message,
                headers={"WWW-Authenticate": "Bearer"},
            )
        raise

    access_token = create_access_token(data={"sub": account["id"], "role": account["role"]})
    return {
        "access_token": access_token,
        "token_type": "bearer",
        "expires_in": settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    }


@router.get("/me", response_model=MerchantResponse)
def get_me(current_account: Dict[str, Any] = Depends(get_current_account), db=Depends(get_db)):
    """Current account with its wallet (admins have none)"""
    return with_wallet(current_account, WalletRepository(db).get_by_merchant(current_account["id"]))
