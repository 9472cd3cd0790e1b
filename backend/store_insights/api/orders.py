"""
Orders API Endpoints
Admin notes on orders and one-click completion

Author: Store Insights
Date: 2026-01-23
"""
from fastapi import APIRouter, Depends

from store_insights.api.deps import get_order_service
from store_insights.api.responses import http_error
from store_insights.core.auth import verify_admin_key
from store_insights.domain.engagement import OrderNoteCreate
from store_insights.services.order_service import OrderService

router = APIRouter(tags=["Orders"], dependencies=[Depends(verify_admin_key)])


@router.get("/admin/custom/orders/{order_id}/notes")
async def get_order_notes(order_id: str, service: OrderService = Depends(get_order_service)):
    """Notes for an order, oldest first"""
    try:
        notes = await service.list_notes(order_id)
    except Exception as e:
        raise http_error("fetching order notes", e)
    return {
        "status": "success",
        "count": len(notes),
        "data": [n.model_dump(mode='json') for n in notes],
    }


@router.post("/admin/custom/orders/{order_id}/notes", status_code=201)
async def add_order_note(
    order_id: str,
    data: OrderNoteCreate,
    service: OrderService = Depends(get_order_service),
):
    try:
        note = await service.add_note(order_id, data)
    except Exception as e:
        raise http_error("adding order note", e)
    return {"status": "success", "data": note.model_dump(mode='json')}


@router.post("/admin/orders/{order_id}/complete")
async def complete_order(order_id: str, service: OrderService = Depends(get_order_service)):
    """Mark an order as completed (stored in order metadata)"""
    try:
        order = await service.complete_order(order_id)
    except Exception as e:
        raise http_error("completing order", e)
    return {
        "status": "success",
        "message": "Order marked as completed",
        "data": {
            "id": order.id,
            "display_id": order.display_id,
            "completed_at": order.metadata.get('completed_at'),
            "completed_by": order.metadata.get('completed_by'),
        },
    }
