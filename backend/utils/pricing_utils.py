"""
Cálculos monetarios compartidos: precios con IVA, totales de pedidos y
márgenes. Aquí los impuestos internos son un monto fijo por unidad, no un
porcentaje (a diferencia de las facturas de compra).
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext

from utils.invoice_totals import DECIMAL_ZERO, HUNDRED, to_decimal


def calcular_total_con_iva(neto, porcentaje_iva=21, impuestos_internos=0):
    """neto + (neto * porcentaje_iva / 100) + impuestos_internos"""
    monto_neto = to_decimal(neto)
    iva = monto_neto * to_decimal(porcentaje_iva) / HUNDRED
    return monto_neto + iva + to_decimal(impuestos_internos)


def calcular_neto_desde_total(total, porcentaje_iva=21, impuestos_internos=0):
    """Fórmula inversa: (total - impuestos_internos) / (1 + porcentaje_iva / 100)"""
    monto_total = to_decimal(total)
    internos = to_decimal(impuestos_internos)
    iva = to_decimal(porcentaje_iva)
    if iva == DECIMAL_ZERO:
        return monto_total - internos
    divisor = 1 + iva / HUNDRED
    if divisor == DECIMAL_ZERO:
        return DECIMAL_ZERO
    return (monto_total - internos) / divisor


def calcular_monto_iva(neto, porcentaje_iva=21):
    return to_decimal(neto) * to_decimal(porcentaje_iva) / HUNDRED


def calcular_subtotal_item(precio, cantidad, descuento=0):
    subtotal = to_decimal(precio) * to_decimal(cantidad)
    porcentaje = to_decimal(descuento)
    if porcentaje > 0:
        return subtotal * (1 - porcentaje / HUNDRED)
    return subtotal


def calcular_total_pedido(items):
    total = DECIMAL_ZERO
    for item in items or []:
        if not isinstance(item, dict):
            continue
        total += calcular_subtotal_item(item.get('precio'), item.get('cantidad'), item.get('descuento'))
    return total


def calcular_margen_porcentaje(precio_venta, costo):
    """((precio_venta - costo) / costo) * 100; 0 si no hay costo."""
    pv = to_decimal(precio_venta)
    c = to_decimal(costo)
    if c == DECIMAL_ZERO:
        return DECIMAL_ZERO
    return (pv - c) / c * HUNDRED


def calcular_ganancia_bruta(precio_venta, costo):
    return to_decimal(precio_venta) - to_decimal(costo)


def calcular_precio_desde_margen(costo, margen_deseado):
    return to_decimal(costo) * (1 + to_decimal(margen_deseado) / HUNDRED)


def redondear(valor, decimales=2):
    """
    Redondeo comercial (mitad hacia arriba). Si el valor tiene más dígitos
    que la precisión del contexto se devuelve sin redondear.
    """
    numero = valor if isinstance(valor, Decimal) and valor.is_finite() else to_decimal(valor)
    exponent = Decimal(1).scaleb(-int(decimales))
    with localcontext() as ctx:
        ctx.traps[InvalidOperation] = False
        resultado = numero.quantize(exponent, rounding=ROUND_HALF_UP)
    return resultado if resultado.is_finite() else numero
