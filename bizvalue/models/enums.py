from enum import Enum


class ReturnCategoryType(str, Enum):
    REVENUE_IMPACT = "revenue_impact"
    MARGIN_UPLIFT = "margin_uplift"
    PRODUCTIVITY_GAIN = "productivity_gain"
    COST_REDUCTION = "cost_reduction"
    RISK_AVOIDANCE = "risk_avoidance"
    TIME_TO_MARKET = "time_to_market"


class ScenarioType(str, Enum):
    CONSERVATIVE = "conservative"
    REALISTIC = "realistic"
    OPTIMISTIC = "optimistic"


class Industry(str, Enum):
    TECHNOLOGY = "technology"
    FINANCIAL_SERVICES = "financial_services"
    HEALTHCARE = "healthcare"
    MANUFACTURING = "manufacturing"
    RETAIL = "retail"
    PROFESSIONAL_SERVICES = "professional_services"
    GOVERNMENT = "government"
    EDUCATION = "education"
    OTHER = "other"

    @classmethod
    def _missing_(cls, value):
        # camelCase spelling used by older clients
        if value == "financialServices":
            return cls.FINANCIAL_SERVICES
        return None

    @classmethod
    def resolve(cls, value: "str | Industry | None") -> "Industry":
        """Map a free-form industry name onto the enum, defaulting to OTHER."""
        if value is None:
            return cls.OTHER
        try:
            return cls(value)
        except ValueError:
            return cls.OTHER


class CompanySize(str, Enum):
    STARTUP = "startup"
    SMB = "smb"
    MIDMARKET = "midmarket"
    ENTERPRISE = "enterprise"


class DistributionType(str, Enum):
    NORMAL = "normal"
    TRIANGULAR = "triangular"
    UNIFORM = "uniform"


class DataQuality(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class PrimaryMetric(str, Enum):
    REVENUE = "revenue"
    COST_REDUCTION = "cost_reduction"
    TIME_TO_MARKET = "time_to_market"
    PRODUCTIVITY = "productivity"

    @classmethod
    def _missing_(cls, value):
        aliases = {
            "costReduction": cls.COST_REDUCTION,
            "timeToMarket": cls.TIME_TO_MARKET,
        }
        return aliases.get(value)


class AssumptionCategory(str, Enum):
    FINANCIAL = "financial"
    OPERATIONAL = "operational"
    MARKET = "market"
    TECHNICAL = "technical"


class ImpactLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
