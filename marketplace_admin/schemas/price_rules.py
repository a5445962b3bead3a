"""Schemas for price automation rules and rule previews."""

from pydantic import BaseModel, ConfigDict, Field


class Condition(BaseModel):
    """One (field, operator, value) test used to match products against a rule."""

    model_config = ConfigDict(coerce_numbers_to_str=True, extra="ignore")

    id: str = ""
    field: str = ""
    value: str = ""
    operator: str = ""


class PriceRule(BaseModel):
    """A named condition set plus a single price-adjustment action.

    `id` is assigned by the backend; drafts leave it unset.
    """

    model_config = ConfigDict(coerce_numbers_to_str=True, extra="ignore")

    id: str | None = None
    name: str = ""
    description: str | None = ""
    status: str | None = "active"  # active | in_active
    match_type: str = "all"  # all | any
    conditions: list[Condition] = Field(default_factory=list)
    action_value: float | None = Field(default=None, allow_inf_nan=False)
    action_operator: str = "+"  # + | -
    action_mode: str = "percentage"  # percentage | absolute


class PriceRuleQuery(BaseModel):
    """Filters for the price rule list."""

    page: int | None = None
    per_page: int | None = None
    status: str | None = None
    name: str | None = None


class PreviewProduct(BaseModel):
    """Affected product as returned by the backend preview endpoint."""

    model_config = ConfigDict(extra="allow")

    product_name: str = ""
    face_value: float = 0.0
    current_selling_price: float = 0.0
    new_selling_price: float | None = None
    currency: str | None = None


class PreviewRow(BaseModel):
    """Affected product formatted for display."""

    product_name: str
    currency: str
    face_value: str
    current_selling_price: str
    new_selling_price: str


class PreviewResponse(BaseModel):
    """Response payload for POST /v1/admin/price-rules/preview."""

    warning: str | None = None
    products: list[PreviewRow] = Field(default_factory=list)


class RuleRegistry(BaseModel):
    """Static registry used by the UI to build condition rows."""

    field_operators: dict[str, list[str]]
    operator_labels: dict[str, str]
    field_options: list[dict[str, str]]
    match_options: list[dict[str, str]]
    value_options: dict[str, list[str]] = Field(default_factory=dict)
