from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Optional

from .audit import DataPoint
from .enums import Industry


@dataclass
class BaselineFinancials:
    """Company financials as delivered by the external multi-source fetcher.

    Every metric is an optional DataPoint; a missing field or a DataPoint
    whose value is None both mean "not provided".
    """

    company_name: str
    industry: Industry = Industry.OTHER

    annual_revenue: Optional[DataPoint] = None
    annual_operating_costs: Optional[DataPoint] = None
    employee_count: Optional[DataPoint] = None
    gross_margin: Optional[DataPoint] = None
    operating_margin: Optional[DataPoint] = None
    net_income: Optional[DataPoint] = None
    revenue_growth_yoy: Optional[DataPoint] = None

    _NON_DATA_FIELDS = {"company_name", "industry"}

    def get(self, field_name: str) -> Optional[DataPoint]:
        """Retrieve a DataPoint by field name, returning None if missing or null."""
        dp = getattr(self, field_name, None)
        if dp is None or not dp.is_available:
            return None
        return dp

    def available_fields(self) -> list[str]:
        """Return names of all fields holding a non-null value."""
        return [
            f.name
            for f in fields(self)
            if f.name not in self._NON_DATA_FIELDS and self.get(f.name) is not None
        ]

    def completeness_score(self) -> float:
        """Returns 0.0-1.0 indicating how many data fields are populated."""
        data_fields = [f for f in fields(self) if f.name not in self._NON_DATA_FIELDS]
        if not data_fields:
            return 0.0
        return len(self.available_fields()) / len(data_fields)
