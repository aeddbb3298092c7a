"""
Cálculo de totales de facturas de compra.

Orden de operaciones por línea:
    1. bruto = cantidad * costo unitario neto
    2. bonificación = bruto * bonificacion% / 100
    3. neto = bruto - bonificación
    4. IVA = neto * iva% / 100
    5. impuestos internos = neto * internos% / 100

IVA e impuestos internos se calculan sobre la misma base neta; los internos
no integran la base del IVA. Los valores se devuelven como Decimal sin
redondear; el redondeo es tarea de la capa de presentación.
"""

import math
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Optional

from config import DEFAULT_VAT_PERCENT


DECIMAL_ZERO = Decimal('0')
HUNDRED = Decimal('100')

# Exponente máximo aceptado en las entradas. Con tres factores por línea
# (cantidad, costo, alícuota) el resultado sigue entrando en un float.
MAX_DECIMAL_EXPONENT = 100

# Variantes del calculador. "simple" corresponde a los formularios de compra
# sin columna de bonificación: el IVA se calcula directo sobre el costo neto.
CALCULATOR_VARIANTS = {
    "completo": {
        "bonification_enabled": True,
    },
    "simple": {
        "bonification_enabled": False,
    },
}

# Nombres aceptados para cada campo (snake_case y los que envía el frontend)
LINE_ITEM_FIELDS = {
    "quantity": ("quantity", "cantidad"),
    "unit_net_cost": ("unit_net_cost", "costo_unitario", "costoUnitario"),
    "bonification_percent": ("bonification_percent", "bonificacion"),
    "internal_tax_percent": ("internal_tax_percent", "impuestos_internos", "impuestosInternos"),
    "vat_percent": ("vat_percent", "porcentaje_iva", "porcentajeIva"),
}

TOTAL_FIELDS = (
    "gross_subtotal",
    "bonification_total",
    "net_subtotal",
    "vat_total",
    "internal_tax_total",
    "grand_total",
    "real_cost",
)


def _in_range(value: Decimal) -> bool:
    return value.is_finite() and abs(value.adjusted()) <= MAX_DECIMAL_EXPONENT


def to_decimal(value: Any) -> Decimal:
    """
    Convertir a Decimal de forma permisiva; lo no numérico vale 0.

    También valen 0 los valores fuera de rango (exponente mayor a
    MAX_DECIMAL_EXPONENT en valor absoluto), así los productos y cocientes
    del calculador nunca desbordan el contexto decimal.
    """
    if isinstance(value, bool):
        return DECIMAL_ZERO
    if isinstance(value, Decimal):
        return value if _in_range(value) else DECIMAL_ZERO
    if value is None or value == '':
        return DECIMAL_ZERO
    try:
        if isinstance(value, str):
            value = value.strip().replace(',', '.')
        result = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return DECIMAL_ZERO
    return result if _in_range(result) else DECIMAL_ZERO


def to_json_number(value: Decimal):
    """float para JSON; si no entra en un float se envía como texto."""
    number = float(value)
    return number if math.isfinite(number) else str(value)


def get_calculator_config(variant: str = "completo", **overrides) -> Dict[str, Any]:
    """Armar la configuración del calculador para una variante."""
    base = CALCULATOR_VARIANTS.get(variant)
    if base is None:
        raise ValueError(f"Variante de calculador desconocida: {variant}")
    config = {
        "default_vat_percent": DEFAULT_VAT_PERCENT,
        "bonification_enabled": True,
    }
    config.update(base)
    config.update(overrides)
    return config


def _pick(item: Dict[str, Any], field: str):
    for key in LINE_ITEM_FIELDS[field]:
        if key in item:
            return item[key], True
    return None, False


def normalize_line_item(item: Any, config: Optional[Dict[str, Any]] = None) -> Dict[str, Decimal]:
    """Llevar un ítem (posiblemente a medio cargar) a valores Decimal."""
    config = config or get_calculator_config()
    row = item if isinstance(item, dict) else {}

    normalized = {}
    for field in ("quantity", "unit_net_cost", "bonification_percent", "internal_tax_percent"):
        value, _ = _pick(row, field)
        normalized[field] = to_decimal(value)

    vat_value, present = _pick(row, "vat_percent")
    if not present or vat_value is None:
        normalized["vat_percent"] = to_decimal(config.get("default_vat_percent", DEFAULT_VAT_PERCENT))
    else:
        normalized["vat_percent"] = to_decimal(vat_value)

    if not config.get("bonification_enabled", True):
        normalized["bonification_percent"] = DECIMAL_ZERO

    return normalized


def compute_line_amounts(item: Any, config: Optional[Dict[str, Any]] = None) -> Dict[str, Decimal]:
    """Importes de una sola línea de la factura."""
    line = normalize_line_item(item, config)

    gross = line["quantity"] * line["unit_net_cost"]
    bonification = gross * line["bonification_percent"] / HUNDRED
    net = gross - bonification
    vat = net * line["vat_percent"] / HUNDRED
    internal_tax = net * line["internal_tax_percent"] / HUNDRED

    return {
        "gross": gross,
        "bonification": bonification,
        "net": net,
        "vat": vat,
        "internal_tax": internal_tax,
        "total": net + vat + internal_tax,
    }


def compute_invoice_totals(items: Optional[Iterable[Any]], config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Totales de la factura como suma campo a campo de las líneas."""
    config = config or get_calculator_config()

    gross_subtotal = DECIMAL_ZERO
    bonification_total = DECIMAL_ZERO
    vat_total = DECIMAL_ZERO
    internal_tax_total = DECIMAL_ZERO
    line_count = 0

    for item in items or []:
        amounts = compute_line_amounts(item, config)
        gross_subtotal += amounts["gross"]
        bonification_total += amounts["bonification"]
        vat_total += amounts["vat"]
        internal_tax_total += amounts["internal_tax"]
        line_count += 1

    net_subtotal = gross_subtotal - bonification_total

    return {
        "gross_subtotal": gross_subtotal,
        "bonification_total": bonification_total,
        "net_subtotal": net_subtotal,
        "vat_total": vat_total,
        "internal_tax_total": internal_tax_total,
        "grand_total": net_subtotal + vat_total + internal_tax_total,
        # Costo real: neto + internos, sin IVA (el IVA compras es crédito fiscal)
        "real_cost": net_subtotal + internal_tax_total,
        "line_count": line_count,
    }


def totals_to_json(totals: Dict[str, Any]) -> Dict[str, Any]:
    """Versión serializable de los totales para respuestas JSON."""
    return {
        key: to_json_number(value) if isinstance(value, Decimal) else value
        for key, value in totals.items()
    }


def lines_to_json(items: Optional[Iterable[Any]], config: Optional[Dict[str, Any]] = None) -> List[Dict[str, float]]:
    return [totals_to_json(compute_line_amounts(item, config)) for item in items or []]
