"""Health check endpoint.

Learn: Verifies the server is up and both collections are readable.
A corrupt or unreadable data file shows up here as "degraded".
"""

from fastapi import APIRouter, Depends

from tasktrack import __version__
from tasktrack.store.base import CollectionStore, StoreError
from tasktrack.store.providers import get_task_store, get_user_store

router = APIRouter()


@router.get("/health")
async def health_check(
    users: CollectionStore = Depends(get_user_store),
    tasks: CollectionStore = Depends(get_task_store),
):
    """Check server health and store readability."""
    checks = {"server": "ok", "version": __version__}

    stores = {}
    for name, store in (("users", users), ("tasks", tasks)):
        try:
            await store.check()
            stores[name] = "ok"
        except StoreError as e:
            stores[name] = f"error: {e}"

    status = "healthy" if all(v == "ok" for v in stores.values()) else "degraded"
    return {"status": status, **checks, "stores": stores}
