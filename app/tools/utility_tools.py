"""Callable utilities exposed to the chat model during tool-augmented chat.

Each utility is a plain function plus an OpenAI function-tool schema. The
schemas are what the model sees; `app.tools.executor.ToolExecutor` maps the
model's calls back onto the functions.

Error handling:
    Utilities never raise for bad user input. An unknown time zone, for
    example, yields a descriptive string the model can relay to the user.

Rounding:
    Results are rounded half-up (`floor(x * 10^n + 0.5) / 10^n`), so values
    such as 0.0005 round away from zero the way a calculator would.
"""

import math
from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


KM_TO_MILES = 0.621371
DEFAULT_TIMEZONE = "UTC"


def _round_half_up(value: float, places: int) -> float:
    factor = 10 ** places
    return math.floor(value * factor + 0.5) / factor


def current_date_time(timezone: str | None = None) -> str:
    """Return the current ISO-8601 date-time for a time zone id.

    Args:
        timezone: IANA zone id such as `Asia/Tashkent`; blank means `UTC`.

    Returns:
        `2025-01-01T12:00:00.000000+05:00[Asia/Tashkent]`-style string, or an
        `Invalid timezone: ...` message when the zone is unknown.
    """
    zone = timezone.strip() if timezone and timezone.strip() else DEFAULT_TIMEZONE

    try:
        zone_info = ZoneInfo(zone)
    except (ZoneInfoNotFoundError, ValueError):
        return f"Invalid timezone: {zone}. Example: UTC or Asia/Tashkent"

    return f"{datetime.now(zone_info).isoformat()}[{zone}]"


def kilometers_to_miles(kilometers: float) -> float:
    """Convert kilometers to miles, rounded to 3 decimals."""
    return _round_half_up(float(kilometers) * KM_TO_MILES, 3)


def loan_monthly_payment(principal: float, annual_interest_percent: float, months: int) -> float:
    """Monthly payment of a fixed-rate loan, rounded to 2 decimals.

    Returns 0 when `principal` or `months` is not positive, or when the term
    is too long for the compound factor to be represented. A zero interest
    rate splits the principal evenly across the term.
    """
    principal = float(principal)
    months = int(months)

    if principal <= 0 or months <= 0:
        return 0.0

    monthly_rate = float(annual_interest_percent) / 1200.0
    if monthly_rate == 0:
        return _round_half_up(principal / months, 2)

    try:
        factor = (1 + monthly_rate) ** months
    except OverflowError:
        return 0.0

    if factor == 1:
        return _round_half_up(principal / months, 2)

    payment = principal * (monthly_rate * factor) / (factor - 1)
    if not math.isfinite(payment):
        return 0.0
    return _round_half_up(payment, 2)


# =========================================================
# FUNCTION-TOOL SCHEMAS
# =========================================================

TOOL_SCHEMAS = [
    {
        "type": "function",
        "function": {
            "name": "currentDateTime",
            "description": "Get the current date-time for a timezone.",
            "parameters": {
                "type": "object",
                "properties": {
                    "timezone": {
                        "type": "string",
                        "description": "Timezone id like Asia/Tashkent, Europe/Berlin or UTC",
                    }
                },
                "required": ["timezone"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "kilometersToMiles",
            "description": "Convert distance from kilometers to miles.",
            "parameters": {
                "type": "object",
                "properties": {
                    "kilometers": {"type": "number", "description": "Distance in kilometers"}
                },
                "required": ["kilometers"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "loanMonthlyPayment",
            "description": "Calculate monthly loan payment with fixed interest.",
            "parameters": {
                "type": "object",
                "properties": {
                    "principal": {
                        "type": "number",
                        "description": "Principal amount, for example 10000",
                    },
                    "annualInterestPercent": {
                        "type": "number",
                        "description": "Yearly interest percent, for example 18",
                    },
                    "months": {
                        "type": "integer",
                        "description": "Loan term in months, for example 24",
                    },
                },
                "required": ["principal", "annualInterestPercent", "months"],
            },
        },
    },
]


def default_tools() -> dict:
    """Map tool names (as advertised in `TOOL_SCHEMAS`) to argument-dict callables."""
    return {
        "currentDateTime": lambda args: current_date_time(args.get("timezone")),
        "kilometersToMiles": lambda args: kilometers_to_miles(args["kilometers"]),
        "loanMonthlyPayment": lambda args: loan_monthly_payment(
            args["principal"],
            args.get("annualInterestPercent", 0),
            int(float(args["months"])),
        ),
    }
