from fastapi import APIRouter, Depends, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from core.dependencies import get_draft_scheduler, verify_admin
from db import get_db
from schemas.incomplete_order import IncompleteOrderIn, IncompleteOrderOut
from services.drafts import DraftSaveScheduler, delete_draft

router = APIRouter(prefix="/incomplete-orders", tags=["Incomplete orders"])


# POST /incomplete-orders - checkout form changed; written after a quiet period
@router.post("", status_code=status.HTTP_202_ACCEPTED)
async def upsert_incomplete_order(draft: IncompleteOrderIn, scheduler: DraftSaveScheduler = Depends(get_draft_scheduler)):
    scheduler.schedule(draft.session_id, draft)
    return {"message": "Draft scheduled", "sessionId": draft.session_id}


@router.get("", response_model=list[IncompleteOrderOut])
async def list_incomplete_orders(user: dict = Depends(verify_admin), db: AsyncIOMotorDatabase = Depends(get_db)):
    return await db.incomplete_orders.find({}).sort("updatedAt", -1).to_list(500)


# DELETE /incomplete-orders/{session_id} - drop the draft and any pending write
@router.delete("/{session_id}")
async def remove_incomplete_order(
    session_id: str,
    db: AsyncIOMotorDatabase = Depends(get_db),
    scheduler: DraftSaveScheduler = Depends(get_draft_scheduler),
):
    deleted = await delete_draft(db, session_id, scheduler)
    return {"deletedCount": deleted}
