"""Market and investment analysis over caller-supplied listings."""
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from property_scout.analysis import Capability, InvestmentAnalyzer, MarketAnalyzer
from property_scout.api.dependencies import get_search
from property_scout.search import PropertySearch
from property_scout.validation import raw_to_record_batch

router = APIRouter()


class MarketRequest(BaseModel):
    location: str = ""
    properties: List[Dict[str, Any]] = Field(default_factory=list)


class InvestmentRequest(BaseModel):
    properties: List[Dict[str, Any]] = Field(default_factory=list)


def _market_analyzer(search: PropertySearch) -> MarketAnalyzer:
    analyzer = search.analyzers.get(Capability.MARKET_INTELLIGENCE)
    return analyzer if isinstance(analyzer, MarketAnalyzer) else MarketAnalyzer()


@router.post("/market")
def analyze_market(request: MarketRequest, search: PropertySearch = Depends(get_search)):
    """Market report for the supplied listings.

    Listings use the provider's field names (``formattedAddress``,
    ``squareFootage``, ``daysOnMarket`` ...); invalid items are skipped.
    """
    records, failed = raw_to_record_batch(request.properties)
    report = _market_analyzer(search).analyze(records, request.location)

    return {
        "report": report.to_dict(),
        "skipped": len(failed),
    }


@router.get("/market")
def get_cached_market_report(
    location: str = Query(..., description="Location label, e.g. 'Austin, TX'"),
    search: PropertySearch = Depends(get_search),
):
    """Most recent market report computed for a location."""
    report = _market_analyzer(search).get_cached(location)
    if report is None:
        raise HTTPException(status_code=404, detail=f"No market report for '{location}'")
    return report.to_dict()


@router.post("/investment")
def analyze_investment(request: InvestmentRequest):
    """Investment reports for the supplied listings, best score first.

    Listings without a positive price produce no report.
    """
    records, failed = raw_to_record_batch(request.properties)
    reports = InvestmentAnalyzer().analyze_portfolio(records)

    return {
        "reports": [r.to_dict() for r in reports],
        "count": len(reports),
        "skipped": len(failed) + (len(records) - len(reports)),
    }
