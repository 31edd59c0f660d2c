from fastapi import APIRouter, Depends, Response
from app.dependencies import get_store
from app.errors import unwrap
from app.reconciler import Operation
from app.schemas import PostPayload, PostResponse
from app.services import post_service
from app.store import Store

router = APIRouter(prefix="/posts", tags=["posts"])

# Path ids are taken as plain strings and validated by the service so a
# malformed id answers 400 rather than FastAPI's 422.

@router.get("", response_model=list[PostResponse])
async def list_posts(store: Store = Depends(get_store)):
    return await post_service.list_posts(store)

# Declared before "/{post_id}" so "search" is not captured as an id.
@router.get("/search", response_model=list[PostResponse])
async def search_posts(term: str = "", store: Store = Depends(get_store)):
    return await post_service.search_posts(store, term)

@router.get("/{post_id}", response_model=PostResponse)
async def get_post(post_id: str, store: Store = Depends(get_store)):
    return unwrap(await post_service.get_post(store, post_id))

@router.post("", status_code=201, response_model=PostResponse)
async def create_post(data: PostPayload, store: Store = Depends(get_store)):
    return unwrap(await post_service.create_post(store, data.model_dump(exclude_unset=True)))

@router.put("/{post_id}", response_model=PostResponse)
async def replace_post(post_id: str, data: PostPayload, store: Store = Depends(get_store)):
    payload = data.model_dump(exclude_unset=True)
    return unwrap(await post_service.update_post(store, post_id, payload, Operation.REPLACE))

@router.patch("/{post_id}", response_model=PostResponse)
async def merge_post(post_id: str, data: PostPayload, store: Store = Depends(get_store)):
    payload = data.model_dump(exclude_unset=True)
    return unwrap(await post_service.update_post(store, post_id, payload, Operation.MERGE))

@router.delete("/{post_id}", status_code=204, response_class=Response)
async def delete_post(post_id: str, store: Store = Depends(get_store)):
    unwrap(await post_service.delete_post(store, post_id))
