"""
Transaction history and receipt endpoints.
"""
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse

from grocerypos.api.deps import get_pos_store, require_session
from grocerypos.services.checkout import render_receipt
from grocerypos.services.pos_store import PosStore

router = APIRouter(dependencies=[Depends(require_session)])


@router.get("")
async def list_transactions(
    limit: int = 50,
    refresh: bool = False,
    pos_store: PosStore = Depends(get_pos_store),
):
    """Transaction history held by the register, newest first."""
    if refresh:
        await pos_store.fetch_transactions()
    if limit > 500:
        limit = 500  # Cap for performance

    transactions = pos_store.state.transactions[:limit]
    return {
        "transactions": [t.model_dump(mode="json") for t in transactions],
        "count": len(transactions),
    }


@router.get("/recent")
async def recent_transactions(pos_store: PosStore = Depends(get_pos_store)):
    """The last five sales, as shown beside the cart."""
    return {
        "transactions": [
            {
                "id": t.id,
                "timestamp": t.timestamp.isoformat(),
                "cashier_name": t.cashier_name,
                "item_count": len(t.items),
                "total": t.total,
                "status": t.status,
            }
            for t in pos_store.state.transactions[:5]
        ]
    }


@router.get("/{transaction_id}/receipt", response_class=PlainTextResponse)
async def get_receipt(transaction_id: str, pos_store: PosStore = Depends(get_pos_store)):
    transaction = pos_store.find_transaction(transaction_id)
    if transaction is None:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return render_receipt(transaction)
