"""
Order Service
Admin notes and one-click completion, persisted in order metadata

Author: Store Insights
Date: 2026-01-21
"""
import logging
import uuid
from typing import Any, Dict, List

from store_insights.connectors.medusa_connector import MedusaConnector
from store_insights.domain.engagement import NOTES_METADATA_KEY, OrderNote, OrderNoteCreate
from store_insights.domain.order import Order
from store_insights.services.formatting import ensure_aware, utc_now

logger = logging.getLogger(__name__)


def notes_from_metadata(metadata: Dict[str, Any]) -> List[OrderNote]:
    """Parse stored notes, skipping malformed entries, oldest first"""
    raw = metadata.get(NOTES_METADATA_KEY) or []
    if not isinstance(raw, list):
        return []
    notes = []
    for entry in raw:
        try:
            notes.append(OrderNote.model_validate(entry))
        except ValueError:
            logger.warning(f"Skipping malformed order note: {entry!r}")
    return sorted(notes, key=lambda n: ensure_aware(n.created_at))


class OrderService:
    """
    Order notes and completion

    Metadata updates send the full merged metadata dict so unrelated keys
    set by other tools are preserved.
    """

    def __init__(self, connector: MedusaConnector):
        self.connector = connector

    async def list_notes(self, order_id: str) -> List[OrderNote]:
        order = await self.connector.get_order(order_id)
        return notes_from_metadata(order.metadata)

    async def add_note(self, order_id: str, data: OrderNoteCreate) -> OrderNote:
        order = await self.connector.get_order(order_id)
        note = OrderNote(
            id=uuid.uuid4().hex,
            note=data.note,
            created_at=utc_now(),
            created_by=data.created_by,
        )
        stored = [n.model_dump(mode='json') for n in notes_from_metadata(order.metadata)]
        stored.append(note.model_dump(mode='json'))

        await self.connector.update_order(order_id, {
            'metadata': {**order.metadata, NOTES_METADATA_KEY: stored},
        })
        logger.info(f"Added note {note.id} to order {order_id}")
        return note

    async def complete_order(self, order_id: str, completed_by: str = 'admin') -> Order:
        """
        Mark an order completed via metadata (completed_at, completed_by,
        admin_completed). Completing twice keeps the first timestamp.
        """
        order = await self.connector.get_order(order_id)
        if order.metadata.get('admin_completed'):
            logger.info(f"Order {order_id} already completed at {order.metadata.get('completed_at')}")
            return order

        updated = await self.connector.update_order(order_id, {
            'metadata': {
                **order.metadata,
                'completed_at': utc_now().isoformat(),
                'completed_by': completed_by,
                'admin_completed': True,
            },
        })
        logger.info(f"Order {order_id} marked completed by {completed_by}")
        return updated
