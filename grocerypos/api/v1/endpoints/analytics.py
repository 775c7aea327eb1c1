"""
Analytics API endpoints.
"""
from fastapi import APIRouter, Depends, HTTPException

from grocerypos.api.deps import get_pos_store, require_session
from grocerypos.services.analytics import TimeFrame, build_summary, sales_by_cashier
from grocerypos.services.pos_store import PosStore

router = APIRouter(dependencies=[Depends(require_session)])


@router.get("/summary")
async def get_summary(time_frame: str = "today", pos_store: PosStore = Depends(get_pos_store)):
    """
    Sales analytics over the register's transaction history.

    ``time_frame`` (today, week, month, all) applies to the category
    breakdown only.
    """
    try:
        frame = TimeFrame(time_frame)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid time frame: {time_frame}")
    return build_summary(pos_store.state.transactions, frame).model_dump()


@router.get("/cashiers")
async def get_cashier_sales(pos_store: PosStore = Depends(get_pos_store)):
    return {"cashiers": [c.model_dump() for c in sales_by_cashier(pos_store.state.transactions)]}
