from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.store import Store


async def get_store(db: AsyncSession = Depends(get_db)) -> Store:
    """
    Per-request store adapter bound to the request's session.

    The transaction boundary stays with ``get_db``: statements issued
    through the adapter are committed when the request succeeds and rolled
    back when it raises.  Tests override this dependency to inject a
    failing store.
    """
    return Store(db)
