"""Integer money helpers.

Every monetary amount in the system is an ``int`` count of minor units
(centavos). Decimal strings only exist at the edges: parsing what an
operator typed and rendering values for display.
"""
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from apps.common.exceptions import ValidationError

MINOR_UNITS_PER_MAJOR = 100
CURRENCY_SYMBOL = "R$"
# Largest value the integer columns hold (int4 on Postgres).
MAX_STORED_INT = 2_147_483_647


def _require_int(value, field):
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError({field: "Valor monetario deve ser um inteiro em centavos."})
    return value


def to_major(minor_units: int) -> str:
    minor_units = _require_int(minor_units, "amount")
    sign = "-" if minor_units < 0 else ""
    whole, cents = divmod(abs(minor_units), MINOR_UNITS_PER_MAJOR)
    return f"{sign}{whole}.{cents:02d}"


def format_brl(minor_units: int) -> str:
    return f"{CURRENCY_SYMBOL} {to_major(minor_units)}"


def from_major_input(text, field="amount") -> int:
    if isinstance(text, float):
        raise ValidationError({field: "Use uma string decimal, nao float."})
    raw = str(text if text is not None else "").strip()
    if raw.upper().startswith(CURRENCY_SYMBOL):
        raw = raw[len(CURRENCY_SYMBOL):].strip()
    raw = raw.replace(" ", "")
    if "," in raw:
        raw = raw.replace(".", "").replace(",", ".")
    if not raw:
        raise ValidationError({field: "Valor obrigatorio."})
    try:
        value = Decimal(raw)
    except InvalidOperation:
        raise ValidationError({field: "Valor monetario invalido."})
    if not value.is_finite():
        raise ValidationError({field: "Valor monetario invalido."})
    minor = (value * MINOR_UNITS_PER_MAJOR).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(minor)


def multiply(minor_units: int, quantity: int) -> int:
    return _require_int(minor_units, "unit_price") * _require_int(quantity, "quantity")


def total(*amounts: int) -> int:
    result = 0
    for amount in amounts:
        result += _require_int(amount, "amount")
    return result


def per_installment(total_amount: int, installments: int) -> int:
    """Display value of one installment, rounded half-up. Never persisted."""
    total_amount = _require_int(total_amount, "total_amount")
    installments = _require_int(installments, "installments")
    if installments < 1:
        raise ValidationError({"installments": "O numero de parcelas deve ser maior ou igual a 1."})
    share = Decimal(total_amount) / Decimal(installments)
    return int(share.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
