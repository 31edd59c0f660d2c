from fastapi import APIRouter, Depends, Response
from app.dependencies import get_store
from app.errors import unwrap
from app.reconciler import Operation
from app.schemas import CommentPayload, CommentResponse
from app.services import comment_service
from app.store import Store

router = APIRouter(prefix="/posts/{post_id}/comments", tags=["comments"])

@router.get("", response_model=list[CommentResponse])
async def list_comments(post_id: str, store: Store = Depends(get_store)):
    return unwrap(await comment_service.list_comments(store, post_id))

@router.get("/{comment_id}", response_model=CommentResponse)
async def get_comment(post_id: str, comment_id: str, store: Store = Depends(get_store)):
    return unwrap(await comment_service.get_comment(store, post_id, comment_id))

@router.post("", status_code=201, response_model=CommentResponse)
async def create_comment(post_id: str, data: CommentPayload, store: Store = Depends(get_store)):
    payload = data.model_dump(exclude_unset=True)
    return unwrap(await comment_service.create_comment(store, post_id, payload))

@router.put("/{comment_id}", response_model=CommentResponse)
async def replace_comment(
    post_id: str, comment_id: str, data: CommentPayload, store: Store = Depends(get_store)
):
    payload = data.model_dump(exclude_unset=True)
    return unwrap(
        await comment_service.update_comment(store, post_id, comment_id, payload, Operation.REPLACE)
    )

@router.patch("/{comment_id}", response_model=CommentResponse)
async def merge_comment(
    post_id: str, comment_id: str, data: CommentPayload, store: Store = Depends(get_store)
):
    payload = data.model_dump(exclude_unset=True)
    return unwrap(
        await comment_service.update_comment(store, post_id, comment_id, payload, Operation.MERGE)
    )

@router.delete("/{comment_id}", status_code=204, response_class=Response)
async def delete_comment(post_id: str, comment_id: str, store: Store = Depends(get_store)):
    unwrap(await comment_service.delete_comment(store, post_id, comment_id))
