# logging_utils.py - Utilidades de logging condicional

import os


def is_debug_mode() -> bool:
    """Determinar si estamos en modo debug basado en variables de entorno"""
    return os.getenv('DEBUG', 'False').lower() in ['true', '1', 'yes']


def conditional_log(message: str, level: str = "info", force: bool = False):
    """
    Log condicional - solo muestra logs detallados si estamos en modo debug
    o si se fuerza la salida
    """
    if force or is_debug_mode():
        print(f"[{level.upper()}] {message}")


def log_function_call(func_name: str, minimal: bool = False):
    """Log de llamada a función - versión mínima o completa según configuración"""
    if minimal:
        conditional_log(f"→ {func_name}", "debug")
    else:
        conditional_log(f"🔍 Ejecutando: {func_name}", "debug")


def log_import_operation(operation: str, details: str = ""):
    """Log específico para importaciones de planillas - siempre se muestra"""
    print(f"📥 {operation}: {details}")


def log_error(error_msg: str, func_name: str = ""):
    """Log de errores - siempre se muestra"""
    prefix = f"❌ [{func_name}]" if func_name else "❌"
    print(f"{prefix} {error_msg}")


def log_success(success_msg: str, func_name: str = ""):
    """Log de éxito - versión condensada"""
    prefix = f"✅ [{func_name}]" if func_name else "✅"
    conditional_log(f"{prefix} {success_msg}", "info")
