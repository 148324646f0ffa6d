"""
Card version endpoints.
"""
from typing import Annotated

from fastapi import APIRouter, Depends

from mtg_catalog.api.deps import get_search_engine
from mtg_catalog.schemas.search import VersionResponse, VersionsResponse
from mtg_catalog.services.search import SearchEngine

router = APIRouter()


@router.get("/{name}/versions", response_model=VersionsResponse)
async def card_versions(
    name: str,
    engine: Annotated[SearchEngine, Depends(get_search_engine)],
):
    """
    Every printing of a card, most available first, then newest.

    Out-of-stock versions are included; an unknown name returns an empty list.
    """
    versions = await engine.all_versions(name)
    return VersionsResponse(
        name=versions[0].entry.name if versions else name,
        total=len(versions),
        versions=[VersionResponse.from_version(v) for v in versions],
    )
