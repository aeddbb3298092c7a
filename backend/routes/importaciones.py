"""
Vista previa de importaciones desde Excel: actualización masiva de precios e
ítems de compra. Se lee la planilla, se cruza con el catálogo enviado por el
frontend y se devuelve el resultado sin aplicar cambios.
"""

from io import BytesIO

from flask import Blueprint, request, jsonify, send_file

from utils.excel_import import (
    ESTADO_ENCONTRADO,
    ExcelImportError,
    PLANTILLAS,
    build_price_preview,
    build_purchase_preview,
    build_template_workbook,
    purchase_items_from_preview,
    read_excel_rows,
    validate_and_sanitize_rows,
    validate_excel_file,
)
from utils.http_utils import get_json_form_field, handle_internal_error, json_error, json_ok
from utils.invoice_totals import compute_invoice_totals, totals_to_json
from utils.logging_utils import log_import_operation


importaciones_bp = Blueprint('importaciones', __name__)

XLSX_MIMETYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'


def _load_uploaded_rows():
    """
    Leer y validar el archivo subido en el campo "file".

    Returns:
        tuple: (rows, warnings, error_response)
    """
    upload = request.files.get('file')
    if upload is None:
        return None, None, json_error("No se proporcionó ningún archivo")

    content = upload.read()
    ok, error = validate_excel_file(upload.filename, len(content))
    if not ok:
        return None, None, json_error(error)

    try:
        rows = read_excel_rows(BytesIO(content))
    except ExcelImportError as e:
        return None, None, json_error(str(e))

    validation = validate_and_sanitize_rows(rows)
    if not validation["valid"]:
        return None, None, json_error(validation["error"], warnings=validation["warnings"])

    log_import_operation("Planilla leída", f"{upload.filename} - {len(validation['data'])} filas")
    return validation["data"], validation["warnings"], None


def _productos_from_request():
    productos = get_json_form_field('productos', default=[])
    return productos if isinstance(productos, list) else None


@importaciones_bp.route('/api/importar/precios/preview', methods=['POST', 'OPTIONS'])
def preview_importar_precios():
    if request.method == 'OPTIONS':
        return jsonify({}), 200

    productos = _productos_from_request()
    if productos is None:
        return json_error("El campo productos debe ser una lista JSON")

    rows, warnings, error_response = _load_uploaded_rows()
    if error_response:
        return error_response

    try:
        preview, errores = build_price_preview(rows, productos)
        encontrados = sum(1 for p in preview if p["estado"] == ESTADO_ENCONTRADO)
        log_import_operation("Preview de precios", f"{encontrados}/{len(preview)} productos encontrados")
        return json_ok({
            "preview": preview,
            "errores": errores,
            "warnings": warnings,
            "summary": {
                "total": len(preview),
                "encontrados": encontrados,
                "no_encontrados": len(preview) - encontrados,
                "con_cambios": sum(1 for p in preview if p["cambia"]),
            },
        })
    except Exception as e:
        return handle_internal_error(e, "preview_importar_precios")


@importaciones_bp.route('/api/importar/compras/preview', methods=['POST', 'OPTIONS'])
def preview_importar_compra():
    if request.method == 'OPTIONS':
        return jsonify({}), 200

    productos = _productos_from_request()
    if productos is None:
        return json_error("El campo productos debe ser una lista JSON")

    rows, warnings, error_response = _load_uploaded_rows()
    if error_response:
        return error_response

    try:
        preview, errores = build_purchase_preview(rows, productos)
        items = purchase_items_from_preview(preview, productos)
        log_import_operation("Preview de compra", f"{len(items)}/{len(preview)} ítems importables")
        return json_ok({
            "preview": preview,
            "items": items,
            "totales": totals_to_json(compute_invoice_totals(items)),
            "errores": errores,
            "warnings": warnings,
        })
    except Exception as e:
        return handle_internal_error(e, "preview_importar_compra")


@importaciones_bp.route('/api/importar/plantilla/<tipo>', methods=['GET', 'OPTIONS'])
def descargar_plantilla(tipo):
    if request.method == 'OPTIONS':
        return jsonify({}), 200

    if tipo not in PLANTILLAS:
        return json_error(f"Plantilla desconocida: {tipo}", 404)

    output = build_template_workbook(tipo)
    return send_file(
        output,
        mimetype=XLSX_MIMETYPE,
        as_attachment=True,
        download_name=f"plantilla_{tipo}.xlsx",
    )
