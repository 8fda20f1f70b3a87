"""
city_explorer/routers/location.py
GET /location?data={search query}

Resolves a search string to a stored location.  Locations never expire,
so after the first geocode the same query is answered from the store.

Response:
{"id", "search_query", "formatted_query", "latitude", "longitude", "created_at"}
"""

from fastapi import APIRouter, HTTPException, Query, Request

from city_explorer.core.descriptor import ResourceDescriptor

router = APIRouter(tags=["location"])


@router.get("/location")
async def get_location(
    request: Request,
    data: str = Query(..., description="Free-text place search, e.g. 'Seattle'"),
):
    query = data.strip()
    if not query:
        raise HTTPException(400, detail="Search query must not be empty")

    records = await request.app.state.cache.lookup(ResourceDescriptor.for_location(query))
    return records[0].to_dict()
