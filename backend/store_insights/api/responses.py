"""
Response envelopes and error mapping shared by the routers
"""
import logging
from typing import Any, Awaitable, Callable, Dict

from fastapi import HTTPException

from store_insights.connectors.medusa_connector import MedusaAPIError

logger = logging.getLogger(__name__)


async def with_fallback(name: str, fetch: Awaitable[Any],
                        empty: Callable[[], Any]) -> Dict[str, Any]:
    """
    Await a dashboard payload; when the backend fails answer with the
    zeroed payload and status "degraded" instead of an error
    """
    try:
        data = await fetch
    except MedusaAPIError as e:
        logger.error(f"Error fetching {name}: {e}")
        return {
            "status": "degraded",
            "message": f"Commerce backend unavailable: {e.message}",
            "data": empty(),
        }
    except Exception as e:
        logger.exception(f"Unexpected error building {name}")
        raise HTTPException(status_code=500, detail=f"Error fetching {name}: {str(e)}")
    return {"status": "success", "data": data}


def http_error(action: str, e: Exception) -> HTTPException:
    """Map a service exception raised by a write route to an HTTPException"""
    if isinstance(e, MedusaAPIError):
        if e.is_not_found:
            return HTTPException(status_code=404, detail=e.message)
        logger.error(f"Backend error {action}: {e}")
        return HTTPException(status_code=502, detail=f"Commerce backend error {action}: {e.message}")
    if isinstance(e, LookupError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, ValueError):
        return HTTPException(status_code=400, detail=str(e))
    logger.exception(f"Unexpected error {action}")
    return HTTPException(status_code=500, detail=f"Error {action}: {str(e)}")
