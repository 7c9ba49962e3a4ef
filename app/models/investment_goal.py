"""Investment goal model definitions."""
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Annotated, Any, Optional

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, Field, model_validator


class Month(str, Enum):
    """Calendar month codes accepted in ``months``."""

    JAN = "JAN"
    FEV = "FEV"
    MAR = "MAR"
    ABR = "ABR"
    MAI = "MAI"
    JUN = "JUN"
    JUL = "JUL"
    AGO = "AGO"
    SET = "SET"
    OUT = "OUT"
    NOV = "NOV"
    DEZ = "DEZ"


def _require_number(value: Any) -> Any:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError("Value is required and must be a number")
    return value


MAX_GOAL_VALUE = 10 ** 12
CENT = Decimal("0.01")


def _require_cents(value: float) -> float:
    if Decimal(str(value)).as_tuple().exponent < -2:
        raise ValueError("Value must have at most 2 decimal places")
    return value


def _require_distinct(months: list[Month]) -> list[Month]:
    if len(set(months)) != len(months):
        raise ValueError("Months must not repeat")
    return months


GoalName = Annotated[str, Field(min_length=1, max_length=20)]
GoalMonths = Annotated[
    list[Month],
    Field(min_length=1, max_length=12),
    AfterValidator(_require_distinct),
]
GoalValue = Annotated[
    float,
    BeforeValidator(_require_number),
    Field(gt=0, lt=MAX_GOAL_VALUE),
    AfterValidator(_require_cents),
]


def compute_monthly_value(value: float, months: list) -> float:
    """Spread ``value`` evenly over ``months``, rounded to cents."""
    monthly = Decimal(str(value)) / len(months)
    return float(monthly.quantize(CENT, rounding=ROUND_HALF_UP))


class InvestmentGoalBase(BaseModel):
    """Base investment goal fields."""

    name: GoalName
    months: GoalMonths
    value: GoalValue


class InvestmentGoalCreate(InvestmentGoalBase):
    """Payload for creating or fully replacing a goal."""

    pass


class InvestmentGoalUpdate(BaseModel):
    """Partial update model - all fields optional, at least one required."""

    name: Optional[GoalName] = None
    months: Optional[GoalMonths] = None
    value: Optional[GoalValue] = None

    @model_validator(mode="after")
    def check_supplied_fields(self) -> "InvestmentGoalUpdate":
        if not self.model_fields_set:
            raise ValueError("Provide at least one field to update")
        nulls = sorted(field for field in self.model_fields_set if getattr(self, field) is None)
        if nulls:
            raise ValueError(f"Fields cannot be null: {', '.join(nulls)}")
        return self

    def supplied(self) -> dict:
        """Return only the fields the client sent."""
        return self.model_dump(exclude_unset=True)


class InvestmentGoal(BaseModel):
    """Full investment goal as stored and returned by the API."""

    id: int
    name: str
    months: list[Month]
    value: float
    monthly_value: float = Field(alias="monthlyValue")

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)


class MessageResponse(BaseModel):
    """Error or confirmation body."""

    message: str
