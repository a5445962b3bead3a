"""Preview of the products a draft price rule would affect.

The preview is read-only: it sends the current draft to the backend's
preview endpoint and formats the returned rows. It never creates or
updates a rule.

An incomplete draft (first condition or action value missing) only raises
a warning; the request is still sent with whatever the draft holds.
"""

import logging
from dataclasses import dataclass, field

from marketplace_admin.schemas import PreviewProduct, PreviewRow, PriceRule
from marketplace_admin.services.backend_client import BackendError, MarketplaceClient
from marketplace_admin.services.rule_evaluator import price_for_rule
from marketplace_admin.services.rule_form import RuleFormState

logger = logging.getLogger("uvicorn.error")

INCOMPLETE_DRAFT_WARNING = "Please fill the form to preview products"
PREVIEW_FAILED_MESSAGE = "Failed to preview products"
PREVIEW_BUSY_MESSAGE = "A preview is already running"

_CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
}


def normalize_currency(currency: str | None) -> str:
    """Map a backend currency code to a display currency (USD fallback)."""
    code = (currency or "").strip().upper()
    return code if code in _CURRENCY_SYMBOLS else "USD"


def format_price(amount: float, currency: str | None = "usd") -> str:
    """Format an amount with its currency symbol, thousands separator and cents."""
    code = normalize_currency(currency)
    symbol = _CURRENCY_SYMBOLS[code]
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"


def preview_row(product: PreviewProduct, rule: PriceRule) -> PreviewRow:
    """Format one affected product for display.

    If the backend omitted the new price, it is computed from the draft's
    action; if that is impossible the current price is shown.
    """
    currency = normalize_currency(product.currency)
    new_price = product.new_selling_price
    if new_price is None:
        new_price = price_for_rule(rule, product.face_value)
    if new_price is None:
        new_price = product.current_selling_price

    return PreviewRow(
        product_name=product.product_name,
        currency=currency,
        face_value=format_price(product.face_value, currency),
        current_selling_price=format_price(product.current_selling_price, currency),
        new_selling_price=format_price(new_price, currency),
    )


def draft_is_incomplete(rule: PriceRule) -> bool:
    """True when the first condition's value or the action value is missing."""
    first_value = rule.conditions[0].value if rule.conditions else ""
    return not first_value or not rule.action_value


@dataclass
class PreviewOutcome:
    """What the preview dialog shows."""

    warning: str | None = None
    error: str | None = None
    rows: list[PreviewRow] = field(default_factory=list)
    requested: bool = False


class PreviewTrigger:
    """Fires on-demand preview queries for a rule form."""

    def __init__(self, form: RuleFormState, client: MarketplaceClient):
        self.form = form
        self.client = client
        self.is_loading = False

    async def handle_preview(self) -> PreviewOutcome:
        """Query the affected products for the current draft.

        Missing fields produce a warning but do not stop the request. A
        backend failure is reported on the outcome; the draft is untouched.
        """
        if self.is_loading:
            return PreviewOutcome(error=PREVIEW_BUSY_MESSAGE)

        draft = self.form.form_data
        outcome = PreviewOutcome()
        if draft_is_incomplete(draft):
            logger.warning("Preview requested for an incomplete price rule draft")
            outcome.warning = INCOMPLETE_DRAFT_WARNING

        self.is_loading = True
        try:
            outcome.requested = True
            products = await self.client.preview_price_rule(self.form.to_payload())
        except BackendError as e:
            logger.exception("Price rule preview failed")
            outcome.error = e.message or PREVIEW_FAILED_MESSAGE
            return outcome
        finally:
            self.is_loading = False

        outcome.rows = [preview_row(p, draft) for p in products]
        logger.info(f"Preview matched {len(outcome.rows)} product(s)")
        return outcome
