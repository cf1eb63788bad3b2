"""Rental investment heuristics for individual listings.

All figures are estimates derived from the list price, bedroom count and
living area; no rent or tax data is fetched.
"""

import logging
from dataclasses import asdict, dataclass, field
from typing import List, Optional

from property_scout.validation import PropertyRecord

from .base import AnalysisContext, Capability, ListingAnalyzer, clamp

logger = logging.getLogger(__name__)

RENT_PRICE_RATIO = 0.005  # monthly rent as a share of price ("1% rule" halved)
RENT_PER_BEDROOM = 500
MIN_RENT_PER_SQFT = 1.5
MAX_RENT_PER_SQFT = 3.5

TAX_RATE = 0.012  # annual, share of price
INSURANCE_RATE = 0.005
MAINTENANCE_RATE = 0.01
MANAGEMENT_RATE = 0.08  # share of rent
VACANCY_RATE = 0.05

DOWN_PAYMENT_RATIO = 0.25


@dataclass
class Finding:
    """A tagged risk or opportunity."""
    tag: str
    description: str


@dataclass
class InvestmentReport:
    """Estimated rental economics and recommendation for one listing."""
    address: str
    price: float
    estimated_rent: float
    monthly_expenses: float
    monthly_cash_flow: float
    cap_rate: float
    roi: float
    score: int
    rating: str
    recommendation: str
    risks: List[Finding] = field(default_factory=list)
    opportunities: List[Finding] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


class InvestmentAnalyzer(ListingAnalyzer):
    """Estimates rent, expenses, cap rate, cash flow and ROI per listing."""

    capability = Capability.INVESTMENT_ANALYZER

    def run(self, properties: List[PropertyRecord], context: AnalysisContext) -> List[InvestmentReport]:
        return self.analyze_portfolio(properties)

    def analyze_portfolio(self, properties: List[PropertyRecord]) -> List[InvestmentReport]:
        """Analyze every listing with a price, best score first."""
        reports = [r for r in (self.analyze(p) for p in properties) if r is not None]
        reports.sort(key=lambda r: r.score, reverse=True)
        return reports

    def estimate_rent(self, prop: PropertyRecord) -> float:
        """Monthly rent estimate, kept within a plausible $/sqft band."""
        rent = max(prop.price * RENT_PRICE_RATIO, (prop.bedrooms or 0) * RENT_PER_BEDROOM)

        if prop.square_footage and prop.square_footage > 0:
            rent = min(
                max(rent, prop.square_footage * MIN_RENT_PER_SQFT),
                prop.square_footage * MAX_RENT_PER_SQFT,
            )
        return rent

    @staticmethod
    def monthly_expenses(price: float, rent: float) -> float:
        fixed = price * (TAX_RATE + INSURANCE_RATE + MAINTENANCE_RATE) / 12
        return fixed + rent * (MANAGEMENT_RATE + VACANCY_RATE)

    def analyze(self, prop: PropertyRecord) -> Optional[InvestmentReport]:
        """Analyze a single listing.

        Returns:
            InvestmentReport, or None when the listing has no positive price
        """
        if prop.price <= 0:
            return None

        price = prop.price
        rent = self.estimate_rent(prop)
        expenses = self.monthly_expenses(price, rent)
        cash_flow = rent - expenses

        cap_rate = (rent * 12 - expenses * 12) / price * 100
        roi = (cash_flow * 12) / (price * DOWN_PAYMENT_RATIO) * 100

        score = self.investment_score(cap_rate, cash_flow, roi)
        rating, recommendation = self.recommend(score)

        return InvestmentReport(
            address=prop.address,
            price=price,
            estimated_rent=round(rent, 2),
            monthly_expenses=round(expenses, 2),
            monthly_cash_flow=round(cash_flow, 2),
            cap_rate=round(cap_rate, 2),
            roi=round(roi, 2),
            score=score,
            rating=rating,
            recommendation=recommendation,
            risks=self.find_risks(prop, cap_rate, cash_flow),
            opportunities=self.find_opportunities(prop, cap_rate),
        )

    @staticmethod
    def investment_score(cap_rate: float, cash_flow: float, roi: float) -> int:
        score = 50

        if cap_rate >= 8:
            score += 25
        elif cap_rate >= 6:
            score += 15
        elif cap_rate >= 4:
            score += 5
        else:
            score -= 10

        if cash_flow >= 500:
            score += 20
        elif cash_flow >= 0:
            score += 10
        else:
            score -= 20

        if roi >= 15:
            score += 15
        elif roi >= 10:
            score += 10
        elif roi >= 5:
            score += 5

        return int(clamp(score))

    @staticmethod
    def recommend(score: int) -> tuple[str, str]:
        if score >= 80:
            return "Excellent", "Strong Buy"
        if score >= 60:
            return "Good", "Consider"
        if score >= 40:
            return "Fair", "Caution"
        return "Poor", "Avoid"

    @staticmethod
    def find_risks(prop: PropertyRecord, cap_rate: float, cash_flow: float) -> List[Finding]:
        risks = []
        if cash_flow < 0:
            risks.append(Finding("negative-cash-flow", f"Negative monthly cash flow (${cash_flow:,.0f})"))
        if cap_rate < 4:
            risks.append(Finding("low-cap-rate", f"Low cap rate ({cap_rate:.1f}%)"))
        if prop.days_on_market is not None and prop.days_on_market > 90:
            risks.append(Finding("stale-listing", f"On the market {prop.days_on_market} days"))
        return risks

    @staticmethod
    def find_opportunities(prop: PropertyRecord, cap_rate: float) -> List[Finding]:
        opportunities = []
        if cap_rate > 8:
            opportunities.append(Finding("high-cap-rate", f"Strong cap rate ({cap_rate:.1f}%)"))
        if prop.price < 200000:
            opportunities.append(Finding("low-entry-price", f"Low entry price (${prop.price:,.0f})"))
        return opportunities
