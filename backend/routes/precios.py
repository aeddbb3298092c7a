from flask import Blueprint, request, jsonify

from utils.http_utils import get_json_payload, handle_internal_error, json_error, json_ok
from utils.invoice_totals import to_json_number
from utils.pricing_utils import (
    calcular_ganancia_bruta,
    calcular_margen_porcentaje,
    calcular_monto_iva,
    calcular_neto_desde_total,
    calcular_precio_desde_margen,
    calcular_total_con_iva,
    calcular_total_pedido,
    redondear,
)


precios_bp = Blueprint('precios', __name__)


def _num(value):
    return to_json_number(redondear(value))


@precios_bp.route('/api/precios/calcular', methods=['POST', 'OPTIONS'])
def calcular_precio():
    """
    Calcular precios de un producto.

    Recibe costo neto, alícuota de IVA, impuestos internos (monto fijo) y
    opcionalmente precio de venta o margen deseado.
    """
    if request.method == 'OPTIONS':
        return jsonify({}), 200

    payload = get_json_payload()
    if not payload:
        return json_error("No se recibieron datos")

    costo = payload.get('costo_sin_iva')
    porcentaje_iva = payload.get('porcentaje_iva', 21)
    internos = payload.get('impuestos_internos', 0)

    try:
        result = {
            "costo_con_iva": _num(calcular_total_con_iva(costo, porcentaje_iva, internos)),
            "iva_costo": _num(calcular_monto_iva(costo, porcentaje_iva)),
        }

        if payload.get('margen') not in (None, ''):
            result["precio_sugerido"] = _num(calcular_precio_desde_margen(costo, payload.get('margen')))

        if payload.get('precio') not in (None, ''):
            precio = payload.get('precio')
            precio_neto = calcular_neto_desde_total(precio, porcentaje_iva, internos)
            result["precio_neto"] = _num(precio_neto)
            result["margen_porcentaje"] = _num(calcular_margen_porcentaje(precio_neto, costo))
            result["ganancia_bruta"] = _num(calcular_ganancia_bruta(precio_neto, costo))

        return json_ok({"data": result})
    except Exception as e:
        return handle_internal_error(e, "calcular_precio")


@precios_bp.route('/api/pedidos/calcular-total', methods=['POST', 'OPTIONS'])
def calcular_total_de_pedido():
    if request.method == 'OPTIONS':
        return jsonify({}), 200

    items = get_json_payload().get('items') or []
    if not isinstance(items, list):
        return json_error("El campo items debe ser una lista")

    try:
        return json_ok({"total": _num(calcular_total_pedido(items))})
    except Exception as e:
        return handle_internal_error(e, "calcular_total_de_pedido")
