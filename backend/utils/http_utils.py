# http_utils.py - Utilidades para respuestas HTTP consistentes

import json
import traceback
from typing import Any, Dict, Optional, Tuple

from flask import jsonify, request

from utils.logging_utils import is_debug_mode, log_error


def get_json_payload() -> Dict[str, Any]:
    """Cuerpo JSON de la petición; {} si no hay cuerpo o no es un objeto."""
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def get_json_form_field(name: str, default=None):
    """Campo de un formulario multipart que viaja como JSON (ej: productos)."""
    raw = request.form.get(name)
    if raw is None or raw == '':
        return default
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        return default


def json_ok(data: Optional[Dict[str, Any]] = None):
    body = {"success": True}
    body.update(data or {})
    return jsonify(body)


def json_error(message: str, status_code: int = 400, **extra) -> Tuple[Any, int]:
    body = {"success": False, "message": message}
    body.update(extra)
    return jsonify(body), status_code


def handle_internal_error(exc: Exception, operation_name: str = "") -> Tuple[Any, int]:
    """
    Loguear una excepción inesperada y devolver un 500 genérico.
    El detalle solo se expone en modo debug.
    """
    log_error(str(exc), operation_name)
    print(traceback.format_exc())
    if is_debug_mode():
        return json_error(str(exc), 500)
    return json_error("Error interno del servidor", 500)
