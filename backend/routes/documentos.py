"""
Rutas de CUIT/DNI para los formularios de clientes y proveedores.

Nada se persiste aquí: el formulario pide la máscara mientras se escribe,
el valor de almacenamiento al guardar y el tipo/número al editar.
"""

from flask import Blueprint, request, jsonify

from utils.document_ids import (
    TIPOS_DOCUMENTO,
    format_document_input,
    from_storage,
    to_storage_format,
    validar_documento,
)
from utils.form_utils import validar_formulario_parte
from utils.http_utils import get_json_payload, json_error, json_ok


documentos_bp = Blueprint('documentos', __name__)


def _tipo_from_payload(payload):
    tipo = str(payload.get('tipo') or payload.get('tipo_documento') or 'CUIT').upper()
    if tipo not in TIPOS_DOCUMENTO:
        return None
    return tipo


@documentos_bp.route('/api/documentos/formatear', methods=['POST', 'OPTIONS'])
def formatear_documento():
    if request.method == 'OPTIONS':
        return jsonify({}), 200

    payload = get_json_payload()
    tipo = _tipo_from_payload(payload)
    if tipo is None:
        return json_error("Tipo de documento inválido. Use CUIT o DNI")

    valor = payload.get('valor') or ''
    return json_ok({"tipo": tipo, "valor": format_document_input(tipo, valor)})


@documentos_bp.route('/api/documentos/normalizar', methods=['POST', 'OPTIONS'])
def normalizar_documento():
    if request.method == 'OPTIONS':
        return jsonify({}), 200

    payload = get_json_payload()
    tipo = _tipo_from_payload(payload)
    if tipo is None:
        return json_error("Tipo de documento inválido. Use CUIT o DNI")

    numero = payload.get('numero') or payload.get('numero_documento') or ''
    ok, mensaje = validar_documento(tipo, numero)
    if not ok:
        return json_error(mensaje, field="numero_documento")

    return json_ok({"tipo": tipo, "cuit": to_storage_format(tipo, numero)})


@documentos_bp.route('/api/documentos/detectar', methods=['GET', 'OPTIONS'])
def detectar_documento():
    if request.method == 'OPTIONS':
        return jsonify({}), 200

    codigo = request.args.get('codigo')
    tipo, numero = from_storage(codigo)
    return json_ok({"tipo": tipo, "numero": numero})


@documentos_bp.route('/api/partes/validar', methods=['POST', 'OPTIONS'])
def validar_parte():
    """Validar el formulario de cliente o proveedor antes de guardarlo."""
    if request.method == 'OPTIONS':
        return jsonify({}), 200

    errores, datos = validar_formulario_parte(get_json_payload())
    if errores:
        return json_error("Hay errores en el formulario", errors=errores)
    return json_ok({"data": datos})
