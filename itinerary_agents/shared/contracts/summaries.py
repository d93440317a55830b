"""
Research summary contracts.

Read-only views derived from the consolidated research. Each of the four
artifacts is produced either by the completion service or by its
deterministic fallback; both validate against the same models.
"""

from typing import Dict, List

from pydantic import Field

from itinerary_agents.shared.contracts.base import Amount, ContractModel, Text, TextList
from itinerary_agents.shared.contracts.research import (
    ConsolidatedResearch,
    ResearchActivity,
    ResearchVenue,
)


# ============================================================================
# Category summaries
# ============================================================================


class AccommodationSummary(ContractModel):
    overview: Text = ""
    top_options: List[ResearchVenue] = Field(default_factory=list)
    budget_insights: Text = ""
    recommendations: Text = ""


class VenuesSummary(ContractModel):
    overview: Text = ""
    conference_venues: List[ResearchVenue] = Field(default_factory=list)
    dining_options: List[ResearchVenue] = Field(default_factory=list)
    attraction_venues: List[ResearchVenue] = Field(default_factory=list)
    recommendations: Text = ""


class ActivitiesSummary(ContractModel):
    overview: Text = ""
    team_building_activities: List[ResearchActivity] = Field(default_factory=list)
    cultural_activities: List[ResearchActivity] = Field(default_factory=list)
    adventure_activities: List[ResearchActivity] = Field(default_factory=list)
    recommendations: Text = ""


class PracticalSummary(ContractModel):
    transportation: Text = ""
    budget_considerations: Text = ""
    seasonal_factors: Text = ""
    local_insights: Text = ""


class CategorySummaries(ContractModel):
    """Per-category narrative plus the research items backing it."""

    accommodation_summary: AccommodationSummary
    venues_summary: VenuesSummary
    activities_summary: ActivitiesSummary
    practical_summary: PracticalSummary


# ============================================================================
# Recommendations
# ============================================================================


class MustHaveItem(ContractModel):
    item: Text
    type: Text = ""
    reasoning: Text = ""
    cost: Text = ""
    booking_advice: Text = ""


class DayStructure(ContractModel):
    day_type: Text = ""
    structure: Text = ""
    recommended_activities: TextList = Field(default_factory=list)
    budget_allocation: Text = ""


class LogisticalRecommendation(ContractModel):
    category: Text = ""
    recommendation: Text = ""
    cost: Text = ""
    implementation: Text = ""


class Recommendations(ContractModel):
    """Actionable planning recommendations."""

    must_have_items: List[MustHaveItem]
    day_structure_recommendations: List[DayStructure] = Field(default_factory=list)
    logistical_recommendations: List[LogisticalRecommendation] = Field(
        default_factory=list
    )
    budget_optimization_tips: TextList = Field(default_factory=list)
    risk_mitigation: TextList = Field(default_factory=list)


# ============================================================================
# Budget analysis
# ============================================================================


class TotalBudgetAnalysis(ContractModel):
    available_budget: Amount = 0.0
    per_person_budget: Amount = 0.0
    per_day_budget: Amount = 0.0
    feasibility_assessment: Text = ""


class CostLine(ContractModel):
    estimated_cost: Amount = 0.0
    percentage: Amount = 0.0
    options: TextList = Field(default_factory=list)
    description: Text = ""


class BudgetScenario(ContractModel):
    scenario: Text
    total_cost: Amount = 0.0
    description: Text = ""
    tradeoffs: Text = ""


class BudgetAnalysis(ContractModel):
    """Budget feasibility, category breakdown and scenarios."""

    total_budget_analysis: TotalBudgetAnalysis
    cost_breakdown: Dict[str, CostLine]
    budget_scenarios: List[BudgetScenario] = Field(default_factory=list)
    cost_optimization_tips: TextList = Field(default_factory=list)
    risk_mitigation: TextList = Field(default_factory=list)
    recommended_distribution: Dict[str, float] = Field(
        default_factory=dict,
        description="Type-specific share of budget per spending category",
    )


# ============================================================================
# Logistics
# ============================================================================


class TransportOption(ContractModel):
    method: Text = ""
    cost: Text = ""
    suitability: Text = ""
    booking_info: Text = ""


class TransportationPlan(ContractModel):
    overview: Text = ""
    options: List[TransportOption] = Field(default_factory=list)
    recommendations: Text = ""


class TimingConsiderations(ContractModel):
    peak_seasons: Text = ""
    operating_hours: Text = ""
    booking_lead_times: Text = ""
    group_scheduling: Text = ""


class GroupLogistics(ContractModel):
    coordination_needs: Text = ""
    communication_plan: Text = ""
    contingency_planning: Text = ""


class LocalFactors(ContractModel):
    weather: Text = ""
    cultural_considerations: Text = ""
    safety_notes: Text = ""
    emergency_info: Text = ""


class LogisticsSummary(ContractModel):
    """Transport, timing, coordination and local factors."""

    transportation_plan: TransportationPlan
    timing_considerations: TimingConsiderations = Field(
        default_factory=TimingConsiderations
    )
    group_logistics: GroupLogistics = Field(default_factory=GroupLogistics)
    local_factors: LocalFactors = Field(default_factory=LocalFactors)


# ============================================================================
# Bundle
# ============================================================================


class SummaryMetadata(ContractModel):
    total_venues: int = 0
    total_activities: int = 0
    summarized_at: str = ""
    fallbacks_used: List[str] = Field(
        default_factory=list, description="Artifacts produced by their fallback"
    )


class ResearchSummaries(ContractModel):
    """Consolidated research plus the four derived summary artifacts."""

    consolidated: ConsolidatedResearch
    category_summaries: CategorySummaries
    recommendations: Recommendations
    budget_analysis: BudgetAnalysis
    logistics_summary: LogisticsSummary
    metadata: SummaryMetadata = Field(default_factory=SummaryMetadata)

    @property
    def has_research(self) -> bool:
        return not self.consolidated.is_empty
