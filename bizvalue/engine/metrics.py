"""Financial metrics: ROI, payback, NPV, IRR and the yearly projection."""

from __future__ import annotations

import logging
from typing import Sequence

from bizvalue.engine.result import FinancialMetrics, YearProjection
from bizvalue.methodology.schema import RealizationCurve
from bizvalue.models.investment import InvestmentSummary

logger = logging.getLogger(__name__)

IRR_LOWER_BOUND = -0.5
IRR_UPPER_BOUND = 5.0
IRR_TOLERANCE = 1.0
IRR_MAX_ITERATIONS = 100


def calculate_roi(total_return: float, total_investment: float) -> float:
    """ROI % = (return - investment) / investment × 100, 0 for zero investment."""
    if total_investment == 0:
        logger.debug("Zero total investment; ROI reported as 0")
        return 0.0
    return (total_return - total_investment) / total_investment * 100


def calculate_payback_months(
    annual_return: float,
    implementation_cost: float,
    ongoing_annual_cost: float,
    curve: RealizationCurve,
    cap_months: int = 36,
) -> int:
    """First month where cumulative benefit covers cumulative cost.

    Monthly benefit is annual_return / 12 scaled by the curve's rate for
    that month. Cost is the implementation amount upfront plus the
    ongoing cost spread evenly per month. Returns ``cap_months`` when the
    investment is not recovered inside the window.
    """
    monthly_ongoing = ongoing_annual_cost / 12
    cumulative_benefit = 0.0
    cumulative_cost = implementation_cost

    for month in range(1, cap_months + 1):
        cumulative_benefit += annual_return / 12 * curve.rate_for_month(month)
        cumulative_cost += monthly_ongoing
        if cumulative_benefit >= cumulative_cost:
            return month

    return cap_months


def calculate_npv(
    investment: float,
    net_cash_flows: Sequence[float],
    discount_rate: float = 0.10,
) -> float:
    """NPV = -investment + Σ cash_flow_t / (1 + rate)^t for t = 1..n."""
    npv = -investment
    for year, cash_flow in enumerate(net_cash_flows, start=1):
        npv += cash_flow / (1 + discount_rate) ** year
    return npv


def calculate_irr(
    investment: float,
    net_cash_flows: Sequence[float],
    lower: float = IRR_LOWER_BOUND,
    upper: float = IRR_UPPER_BOUND,
    tolerance: float = IRR_TOLERANCE,
    max_iterations: int = IRR_MAX_ITERATIONS,
) -> float:
    """Internal rate of return in percent, by bisection.

    Searches ``[lower, upper]`` until |NPV| is below ``tolerance`` currency
    units or ``max_iterations`` halvings have been made. NPV may rise or
    fall with the rate. Without a sign change over the range the nearer
    bound is returned, so the result never leaves the search bounds.
    """
    npv_low = calculate_npv(investment, net_cash_flows, lower)
    npv_high = calculate_npv(investment, net_cash_flows, upper)
    if abs(npv_low) < tolerance:
        return lower * 100
    if npv_low * npv_high > 0:
        logger.debug("No NPV sign change in [%s, %s]; IRR clamped to nearer bound", lower, upper)
        return (lower if abs(npv_low) <= abs(npv_high) else upper) * 100

    low, high = lower, upper
    rate = (low + high) / 2

    for _ in range(max_iterations):
        rate = (low + high) / 2
        npv = calculate_npv(investment, net_cash_flows, rate)
        if abs(npv) < tolerance:
            break
        # Keep the root bracketed whichever way NPV slopes
        if (npv > 0) == (npv_low > 0):
            low = rate
        else:
            high = rate
    else:
        logger.debug("IRR search stopped at %d iterations without converging", max_iterations)

    return max(lower, min(upper, rate)) * 100


def project_years(
    year_benefits: Sequence[float],
    implementation_cost: float,
    ongoing_annual_cost: float,
    realization_rates: Sequence[float],
) -> list[YearProjection]:
    """Year-by-year benefit, cost and cumulative ROI over the horizon."""
    projections: list[YearProjection] = []
    cumulative_benefit = 0.0
    cumulative_cost = 0.0

    for i, benefit in enumerate(year_benefits):
        cost = ongoing_annual_cost + (implementation_cost if i == 0 else 0.0)
        cumulative_benefit += benefit
        cumulative_cost += cost
        projections.append(
            YearProjection(
                year=i + 1,
                realization_rate=realization_rates[i] if i < len(realization_rates) else 0.0,
                benefit=benefit,
                cost=cost,
                cumulative_benefit=cumulative_benefit,
                cumulative_cost=cumulative_cost,
                cumulative_roi=calculate_roi(cumulative_benefit, cumulative_cost),
            )
        )

    return projections


def calculate_financial_metrics(
    investment: InvestmentSummary,
    annual_return: float,
    year_benefits: Sequence[float],
    curve: RealizationCurve,
    discount_rate: float = 0.10,
    payback_cap_months: int = 36,
) -> FinancialMetrics:
    """Aggregate one scenario's returns and the investment into FinancialMetrics."""
    total_return = sum(year_benefits)
    total_investment = investment.total_cost_of_ownership
    net_cash_flows = [benefit - investment.ongoing_annual_cost for benefit in year_benefits]

    return FinancialMetrics(
        roi=calculate_roi(total_return, total_investment),
        payback_months=calculate_payback_months(
            annual_return,
            investment.implementation_cost,
            investment.ongoing_annual_cost,
            curve,
            cap_months=payback_cap_months,
        ),
        npv=calculate_npv(investment.implementation_cost, net_cash_flows, discount_rate),
        irr=calculate_irr(investment.implementation_cost, net_cash_flows),
        total_investment=total_investment,
        total_return=total_return,
        net_benefit=total_return - total_investment,
    )
