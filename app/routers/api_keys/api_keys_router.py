from fastapi import APIRouter, Depends, status
from typing import Any, Dict, List

from app.core.dependencies import get_current_account
from app.db.connection import get_db
from app.models.schemas import ApiKeyCreatedResponse, ApiKeyResponse, CreateApiKeyRequest, ToggleApiKeyRequest
from app.services.api_key_service import ApiKeyService

router = APIRouter()


@router.get("", response_model=List[ApiKeyResponse])
def list_api_keys(current_account: Dict[str, Any] = Depends(get_current_account), db=Depends(get_db)):
    return ApiKeyService(db).list_keys(current_account)


@router.post("", response_model=ApiKeyCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_api_key(
    payload: CreateApiKeyRequest,
    current_account: Dict[str, Any] = Depends(get_current_account),
    db=Depends(get_db),
):
    """
    Create an API key.

    The `secret_key` is only included in this response. Store it now; it
    cannot be retrieved later.
    """
    permissions = [p.value for p in payload.permissions] if payload.permissions is not None else None
    return ApiKeyService(db).create_key(current_account, payload.name, permissions)


@router.patch("/{key_id}", response_model=ApiKeyResponse)
def toggle_api_key(
    key_id: str,
    payload: ToggleApiKeyRequest,
    current_account: Dict[str, Any] = Depends(get_current_account),
    db=Depends(get_db),
):
    return ApiKeyService(db).set_active(current_account, key_id, payload.is_active)


@router.delete("/{key_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_api_key(
    key_id: str,
    current_account: Dict[str, Any] = Depends(get_current_account),
    db=Depends(get_db),
):
    ApiKeyService(db).delete_key(current_account, key_id)
