"""Condition field/operator registry for price automation rules.

Each condition field has a closed set of legal comparison operators. The
first operator of a field is its default: it is applied when a condition is
created, when its field changes, and when a stored condition carries an
operator that is no longer legal for its field.
"""

# Field -> legal operators (first entry is the default)
FIELD_OPERATOR_MAP: dict[str, tuple[str, ...]] = {
    "selling_price": ("=", "!=", ">", ">=", "<", "<="),
    "name": ("=", "!=", "contains"),
    "brand_name": ("=", "!="),
    "regions": ("contains",),
}

OPERATOR_LABELS: dict[str, str] = {
    "=": "Equals",
    "!=": "Not equals",
    ">": "Greater than",
    ">=": "Greater than or equal to",
    "<": "Less than",
    "<=": "Less than or equal to",
    "contains": "Contains",
}

FIELD_LABELS: dict[str, str] = {
    "name": "Product Name",
    "regions": "Region",
    "brand_name": "Brand",
    "selling_price": "Selling Price",
}

MATCH_LABELS: dict[str, str] = {
    "all": "Match All",
    "any": "Match Any",
}

# Fields whose value is picked from an external lookup list instead of typed
CLOSED_VALUE_FIELDS = frozenset({"brand_name"})

DEFAULT_FIELD = "name"


def legal_operators(field: str) -> tuple[str, ...]:
    """Operators allowed for a field (empty for unknown fields)."""
    return FIELD_OPERATOR_MAP.get(field, ())


def default_operator(field: str) -> str:
    """Default operator for a field, or "" when the field is unknown."""
    operators = legal_operators(field)
    return operators[0] if operators else ""


def is_legal_operator(field: str, operator: str) -> bool:
    """Check whether an operator may be used with a field."""
    return operator in legal_operators(field)


def operator_options(field: str) -> list[dict[str, str]]:
    """Operator select options ({value, label}) for a field."""
    return [{"value": op, "label": OPERATOR_LABELS[op]} for op in legal_operators(field)]


def field_options() -> list[dict[str, str]]:
    """Field select options ({value, label})."""
    return [{"value": field, "label": label} for field, label in FIELD_LABELS.items()]


def match_options() -> list[dict[str, str]]:
    """Match type select options ({value, label})."""
    return [{"value": value, "label": label} for value, label in MATCH_LABELS.items()]
