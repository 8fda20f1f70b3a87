"""
city_explorer/routers/events.py
GET /events?id={location_id}&formatted_query={address}

Events near a previously resolved location, cached per location_id.

Response: [{"link", "name", "event_date", "summary", "created_at", "location_id"}]
"""

from fastapi import APIRouter, Query, Request

from city_explorer.core.descriptor import ResourceDescriptor, ResourceType

router = APIRouter(tags=["events"])


@router.get("/events")
async def get_events(
    request: Request,
    id: int = Query(..., description="Location id from /location"),
    formatted_query: str = Query(..., min_length=1),
):
    descriptor = ResourceDescriptor.for_dependent(
        ResourceType.EVENT, id, formatted_query=formatted_query,
    )
    records = await request.app.state.cache.lookup(descriptor)
    return [r.to_dict() for r in records]
