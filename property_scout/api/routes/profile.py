"""User profile, interaction tracking and usage endpoints."""
from datetime import date
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ValidationError

from property_scout.api.dependencies import get_search
from property_scout.profile import UserProfile
from property_scout.search import PropertySearch
from property_scout.validation import PropertyRecord

router = APIRouter()


class InteractionRequest(BaseModel):
    property: Dict[str, Any]
    action: str


def _profile_summary(profile: UserProfile, recent: int = 10) -> dict:
    return {
        "average_price": profile.average_price,
        "preferred_types": profile.preferred_types,
        "preferred_bedrooms": profile.preferred_bedrooms,
        "interaction_count": len(profile.interactions),
        "recent_interactions": [
            i.model_dump(mode="json") for i in profile.interactions[-recent:]
        ],
    }


@router.post("/profile/interactions")
def track_interaction(request: InteractionRequest, search: PropertySearch = Depends(get_search)):
    """Log an interaction (view, save, contact ...) and update preferences."""
    if not request.action.strip():
        raise HTTPException(status_code=400, detail="action must not be empty")

    try:
        record = PropertyRecord.model_validate(request.property)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"Invalid property: {e.error_count()} errors")

    profile = search.track_interaction(record, request.action.strip())
    return _profile_summary(profile)


@router.get("/profile")
def get_profile(
    recent: int = Query(10, ge=0, le=100, description="Number of recent interactions"),
    search: PropertySearch = Depends(get_search),
):
    """Preferences learned so far."""
    return _profile_summary(search.profiles.load(), recent)


@router.get("/usage")
def get_usage(
    month: Optional[str] = Query(None, description="YYYY-MM, current month if omitted"),
    search: PropertySearch = Depends(get_search),
):
    """Feature usage and cost for a month, against the configured ceiling."""
    if month:
        try:
            day = date.fromisoformat(f"{month}-01")
        except ValueError:
            raise HTTPException(status_code=400, detail="month must be formatted YYYY-MM")
    else:
        day = date.today()

    tracker = search.usage
    usage = tracker.monthly_usage(day)
    return {
        "month": day.strftime("%Y-%m"),
        "days": {
            d: {feature: u.model_dump() for feature, u in features.items()}
            for d, features in sorted(usage.items())
        },
        "total_cost": round(tracker.monthly_cost(day), 4),
        "max_monthly_cost": tracker.config.max_monthly_cost,
        "limit_exceeded": tracker.check_cost_limit(day),
    }
