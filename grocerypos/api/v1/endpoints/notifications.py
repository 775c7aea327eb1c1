"""
Notification feed for the UI.
"""
from fastapi import APIRouter, Depends

from grocerypos.api.deps import get_notifier
from grocerypos.core.notifications import Notifier

router = APIRouter()


@router.get("")
async def drain_notifications(notifier: Notifier = Depends(get_notifier)):
    """Pending notifications; each one is returned once."""
    return {"notifications": [n.model_dump(mode="json") for n in notifier.drain()]}
