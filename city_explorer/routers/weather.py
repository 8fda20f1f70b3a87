"""
city_explorer/routers/weather.py
GET /weather?id={location_id}&latitude={lat}&longitude={lng}

Daily forecast for a previously resolved location.  Rows are cached per
location_id and expire after RESOURCE_TIMEOUTS[weather].

Response: [{"forecast", "time", "created_at", "location_id"}]
"""

from fastapi import APIRouter, Query, Request

from city_explorer.core.descriptor import ResourceDescriptor, ResourceType

router = APIRouter(tags=["weather"])


@router.get("/weather")
async def get_weather(
    request: Request,
    id: int = Query(..., description="Location id from /location"),
    latitude: float = Query(...),
    longitude: float = Query(...),
):
    descriptor = ResourceDescriptor.for_dependent(
        ResourceType.WEATHER, id, latitude=latitude, longitude=longitude,
    )
    records = await request.app.state.cache.lookup(descriptor)
    return [r.to_dict() for r in records]
