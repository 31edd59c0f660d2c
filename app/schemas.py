from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# --- Payloads ---
#
# One payload model per resource serves POST, PUT and PATCH alike: every
# field is optional at this layer and the reconciler decides which ones
# each verb requires.  The models only pin down the JSON shape.

class PostPayload(BaseModel):
    title: str | None = None
    content: str | None = None
    category: str | None = None
    tags: list[str] | None = None


class CommentPayload(BaseModel):
    author: str | None = None
    content: str | None = None


class UserPayload(BaseModel):
    username: str | None = None
    email: str | None = None
    password: str | None = None


# --- Responses ---

class _Response(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int
    created_at: datetime
    updated_at: datetime


class PostResponse(_Response):
    title: str
    content: str
    category: str
    tags: list[str] = []


class CommentResponse(_Response):
    post_id: int = Field(alias="postID")
    author: str
    content: str


class UserResponse(_Response):
    username: str
    email: str


class ErrorResponse(BaseModel):
    detail: str
