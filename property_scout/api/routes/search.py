"""Search and query interpretation endpoints."""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from property_scout.api.dependencies import get_search
from property_scout.search import PropertySearch
from property_scout.validation import FilterParameters

router = APIRouter()


class SearchRequest(BaseModel):
    """Free-text search request."""
    query: str
    page: int = 1
    per_page: int = 10


class ManualSearchRequest(BaseModel):
    """Structured search request (manual search mode)."""
    filters: FilterParameters = Field(default_factory=FilterParameters)
    page: int = 1
    per_page: int = 10


class InterpretRequest(BaseModel):
    query: str


def _validate_paging(page: int, per_page: int) -> None:
    if page < 1:
        raise HTTPException(status_code=400, detail="page must be at least 1")
    if per_page < 1 or per_page > 100:
        raise HTTPException(status_code=400, detail="per_page must be between 1 and 100")


@router.post("/search")
def search_properties(request: SearchRequest, search: PropertySearch = Depends(get_search)):
    """Search listings from a natural-language query.

    Returns one page of scored listings plus the market report and
    investment reports for the whole result set. Failures of individual
    stages are reported under ``diagnostics``.
    """
    if not request.query.strip():
        raise HTTPException(status_code=400, detail="query must not be empty")
    _validate_paging(request.page, request.per_page)

    result = search.search(request.query)
    return result.to_dict(page=request.page, per_page=request.per_page)


@router.post("/search/manual")
def search_manual(request: ManualSearchRequest, search: PropertySearch = Depends(get_search)):
    """Search listings with explicit filters."""
    _validate_paging(request.page, request.per_page)

    result = search.search_filters(request.filters)
    return result.to_dict(page=request.page, per_page=request.per_page)


@router.post("/interpret")
def interpret_query(request: InterpretRequest, search: PropertySearch = Depends(get_search)):
    """Translate a query into filter parameters without searching."""
    if not request.query.strip():
        raise HTTPException(status_code=400, detail="query must not be empty")

    filters, source = search.interpreter.interpret_with_source(request.query)
    return {
        "query": request.query,
        "filters": filters.to_params(),
        "empty": filters.is_empty,
        "interpreter": source,
    }
