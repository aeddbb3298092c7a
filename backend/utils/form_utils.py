import re

from utils.document_ids import TIPO_CUIT, to_storage_format, validar_documento


def validar_telefono(telefono):
    """Teléfono opcional: vacío es válido. Acepta espacios, guiones y paréntesis."""
    if not telefono:
        return True
    telefono_limpio = re.sub(r'[\s\-()]', '', str(telefono))
    return re.fullmatch(r'[0-9+]{6,15}', telefono_limpio) is not None


def validar_email(email):
    if not email:
        return True
    return re.fullmatch(r'[^\s@]+@[^\s@]+\.[^\s@]+', str(email)) is not None


def validar_texto(texto, min_length=2, max_length=100):
    if not texto:
        return False
    limpio = str(texto).strip()
    return min_length <= len(limpio) <= max_length


def sanitizar_texto(texto):
    if not texto:
        return ''
    return re.sub(r'[<>]', '', str(texto).strip())


def validar_formulario_parte(form):
    """
    Validar el formulario de cliente/proveedor y preparar el valor a guardar.

    Args:
        form: dict con nombre, telefono, email, tipo_documento y numero_documento

    Returns:
        tuple: (errores: dict campo -> mensaje, datos: dict listo para guardar)
    """
    form = form if isinstance(form, dict) else {}
    errores = {}

    nombre = sanitizar_texto(form.get('nombre') or form.get('razon_social') or '')
    if not validar_texto(nombre):
        errores['nombre'] = "El nombre debe tener entre 2 y 100 caracteres"

    telefono = form.get('telefono') or ''
    if not validar_telefono(telefono):
        errores['telefono'] = "Teléfono inválido"

    email = str(form.get('email') or '').strip()
    if not validar_email(email):
        errores['email'] = "Email inválido"

    tipo = form.get('tipo_documento') or TIPO_CUIT
    numero = form.get('numero_documento') or ''
    ok, mensaje = validar_documento(tipo, numero)
    if not ok:
        errores['numero_documento'] = mensaje

    datos = {
        'nombre': nombre,
        'telefono': telefono,
        'email': email,
        'tipo_documento': tipo,
        'cuit': to_storage_format(tipo, numero) if ok else None,
    }
    return errores, datos
