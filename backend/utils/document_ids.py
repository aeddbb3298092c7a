"""
Normalización de CUIT/DNI para clientes y proveedores.

La columna de documento guarda siempre el formato NN-XXXXXXXX-N. Los DNI se
almacenan con el centinela 00-XXXXXXXX-0 (8 dígitos, completados con ceros a
la izquierda), que no es un CUIT real. Los valores ya guardados dependen de
ese formato exacto: detect_document_type y extract_dni_from_storage deben
cambiar siempre juntos con dni_to_storage_format.
"""

import re


TIPO_CUIT = 'CUIT'
TIPO_DNI = 'DNI'
TIPOS_DOCUMENTO = (TIPO_CUIT, TIPO_DNI)

CUIT_DIGITS = 11
DNI_DIGITS = 8
DNI_MIN_DIGITS = 7

DNI_STORAGE_PATTERN = re.compile(r'00-([0-9]{8})-0')
_NON_DIGITS = re.compile(r'[^0-9]')


def _only_digits(value):
    if value is None:
        return ''
    return _NON_DIGITS.sub('', str(value))


def normalize_tax_id(value):
    """Solo los dígitos del documento, para búsquedas y comparaciones."""
    return _only_digits(value)


def format_cuit_input(raw):
    """Máscara XX-XXXXXXXX-X mientras se escribe."""
    numeros = _only_digits(raw)[:CUIT_DIGITS]
    if len(numeros) <= 2:
        return numeros
    if len(numeros) <= 10:
        return f"{numeros[:2]}-{numeros[2:]}"
    return f"{numeros[:2]}-{numeros[2:10]}-{numeros[10:]}"


def format_dni_input(raw):
    """Solo números, máximo 8."""
    return _only_digits(raw)[:DNI_DIGITS]


def format_document_input(tipo, raw):
    if tipo == TIPO_DNI:
        return format_dni_input(raw)
    return format_cuit_input(raw)


def dni_to_storage_format(dni):
    dni_limpio = _only_digits(dni)[:DNI_DIGITS].rjust(DNI_DIGITS, '0')
    return f"00-{dni_limpio}-0"


def extract_dni_from_storage(code):
    """
    Extraer el DNI de un valor almacenado 00-XXXXXXXX-0 sin ceros a la
    izquierda ("0" si son todos ceros). Otros valores se devuelven tal cual.
    """
    if not code:
        return ''
    match = DNI_STORAGE_PATTERN.fullmatch(str(code))
    if match:
        return match.group(1).lstrip('0') or '0'
    return code


def detect_document_type(code):
    if not code:
        return TIPO_CUIT
    if DNI_STORAGE_PATTERN.fullmatch(str(code)):
        return TIPO_DNI
    return TIPO_CUIT


def to_storage_format(tipo, numero):
    """Valor a guardar en la columna cuit al enviar el formulario."""
    if tipo == TIPO_DNI:
        return dni_to_storage_format(numero)
    return format_cuit_input(numero)


def from_storage(code):
    """Reconstruir (tipo, numero) para editar un registro existente."""
    tipo = detect_document_type(code)
    if tipo == TIPO_DNI:
        return tipo, extract_dni_from_storage(code)
    return tipo, code or ''


def validar_cuit(value):
    if not value:
        return False
    return re.fullmatch(r'[0-9]{11}', str(value).replace('-', '')) is not None


def validar_dni(value):
    if not value:
        return False
    return DNI_MIN_DIGITS <= len(_only_digits(value)) <= DNI_DIGITS


def validar_documento(tipo, numero):
    """
    Validación del formulario de cliente/proveedor.

    Returns:
        tuple: (ok: bool, mensaje: str | None)
    """
    if not numero or not str(numero).strip():
        return False, f"El {tipo or TIPO_CUIT} es obligatorio"
    if tipo == TIPO_DNI:
        if not validar_dni(numero):
            return False, "El DNI debe tener 7 u 8 dígitos"
        return True, None
    if tipo not in TIPOS_DOCUMENTO:
        return False, f"Tipo de documento inválido: {tipo}"
    if not validar_cuit(numero):
        return False, "El CUIT debe tener 11 dígitos (formato XX-XXXXXXXX-X)"
    return True, None
