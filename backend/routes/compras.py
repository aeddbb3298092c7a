from flask import Blueprint, request, jsonify

from utils.http_utils import get_json_payload, handle_internal_error, json_error, json_ok
from utils.invoice_totals import (
    CALCULATOR_VARIANTS,
    compute_invoice_totals,
    get_calculator_config,
    lines_to_json,
    totals_to_json,
)
from utils.logging_utils import log_function_call, log_success


compras_bp = Blueprint('compras', __name__)


@compras_bp.route('/api/compras/calcular-totales', methods=['POST', 'OPTIONS'])
def calcular_totales():
    if request.method == 'OPTIONS':
        return jsonify({}), 200

    log_function_call("calcular_totales", minimal=True)

    payload = get_json_payload()
    items = payload.get('items')
    if items is None:
        items = []
    if not isinstance(items, list):
        return json_error("El campo items debe ser una lista")

    variante = str(payload.get('variante') or 'completo')
    if variante not in CALCULATOR_VARIANTS:
        return json_error(f"Variante inválida: {variante}. Opciones: {', '.join(CALCULATOR_VARIANTS)}")

    try:
        config = get_calculator_config(variante)
        totals = compute_invoice_totals(items, config)
        log_success(f"Totales calculados para {totals['line_count']} líneas", "calcular_totales")
        return json_ok({
            "variante": variante,
            "totales": totals_to_json(totals),
            "lineas": lines_to_json(items, config),
        })
    except Exception as e:
        return handle_internal_error(e, "calcular_totales")
