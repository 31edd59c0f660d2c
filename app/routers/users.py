from fastapi import APIRouter, Depends, Response
from app.dependencies import get_store
from app.errors import unwrap
from app.reconciler import Operation
from app.schemas import UserPayload, UserResponse
from app.services import user_service
from app.store import Store

router = APIRouter(prefix="/users", tags=["users"])

@router.get("", response_model=list[UserResponse])
async def list_users(store: Store = Depends(get_store)):
    return await user_service.list_users(store)

@router.get("/{username}", response_model=UserResponse)
async def get_user(username: str, store: Store = Depends(get_store)):
    return unwrap(await user_service.get_user(store, username))

@router.post("", status_code=201, response_model=UserResponse)
async def create_user(data: UserPayload, store: Store = Depends(get_store)):
    return unwrap(await user_service.create_user(store, data.model_dump(exclude_unset=True)))

@router.put("/{username}", response_model=UserResponse)
async def replace_user(username: str, data: UserPayload, store: Store = Depends(get_store)):
    payload = data.model_dump(exclude_unset=True)
    return unwrap(await user_service.update_user(store, username, payload, Operation.REPLACE))

@router.patch("/{username}", response_model=UserResponse)
async def merge_user(username: str, data: UserPayload, store: Store = Depends(get_store)):
    payload = data.model_dump(exclude_unset=True)
    return unwrap(await user_service.update_user(store, username, payload, Operation.MERGE))

@router.delete("/{username}", status_code=204, response_class=Response)
async def delete_user(username: str, store: Store = Depends(get_store)):
    unwrap(await user_service.delete_user(store, username))
