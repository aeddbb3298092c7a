"""
Importación de planillas Excel de precios y de ítems de compra.

Lee la primera hoja (encabezados en la primera fila), normaliza números en
formato argentino o americano y cruza cada fila con el catálogo de productos
por código para armar una vista previa antes de aplicar cambios.
"""

import math
import re
from io import BytesIO

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Font, Alignment, PatternFill, Border, Side
from openpyxl.utils import get_column_letter

from config import EXCEL_MAX_ROWS, EXCEL_MAX_SIZE_MB
from utils.invoice_totals import DEFAULT_VAT_PERCENT


EXCEL_MIN_SIZE_BYTES = 100
# openpyxl no lee el formato binario .xls
ALLOWED_EXTENSIONS = ('.xlsx', '.xlsm')
ROWS_WARNING_THRESHOLD = 1000
MAX_CELL_LENGTH = 1000

ESTADO_ENCONTRADO = 'encontrado'
ESTADO_NO_ENCONTRADO = 'no_encontrado'

# Posibles nombres de columna; se busca por "contiene" sobre el encabezado
COLUMNAS_PRECIOS = {
    "codigo": ['codigo', 'code', 'sku', 'cod'],
    "precio_neto": ['precio neto', 'precio_neto', 'neto', 'costo', 'precio sin iva', 'precio_sin_iva'],
    "imp_internos": ['imp internos', 'impuestos internos', 'imp_internos', 'internos', 'impuestos'],
    "precio_final": ['precio final', 'precio', 'final', 'pvp', 'precio venta'],
}

COLUMNAS_COMPRAS = {
    "codigo": ['codigo', 'code', 'sku', 'cod', 'articulo'],
    "cantidad": ['cantidad', 'cant', 'qty', 'unidades'],
    "costo_unitario": ['costo', 'precio', 'neto', 'costo_unitario', 'costo unitario', 'precio_neto', 'precio neto'],
    "bonificacion": ['bonificacion', 'bonif', 'gratis', 'bonus'],
}

PLANTILLAS = {
    "precios": {
        "titulo": "Precios",
        "encabezados": ["Codigo", "Precio Neto", "Imp Internos", "Precio Final"],
        "ejemplos": [
            ["EJEMPLO001", 1000, 50, 1260],
            ["EJEMPLO002", 2500.5, 0, 3025.61],
        ],
    },
    "compras": {
        "titulo": "Compra",
        "encabezados": ["Codigo", "Cantidad", "Costo", "Bonificacion%"],
        "ejemplos": [
            ["EJEMPLO001", 10, 500, 5.5],
            ["EJEMPLO002", 5, 1200, 0],
        ],
    },
}

_CURRENCY_SYMBOLS = re.compile(r'[$€£¥]')
_CONTROL_CHARS = re.compile(r'[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]')


class ExcelImportError(Exception):
    """Error de lectura o validación de la planilla."""


def normalize_number(value):
    """
    Normalizar un número desde distintos formatos regionales.

    El separador que aparece último es el decimal:
    "1.500,50" -> 1500.5, "1,500.50" -> 1500.5, "1500,50" -> 1500.5.
    Lo que no se pueda interpretar, o no sea finito, vale 0.
    """
    if value is None or value == '':
        return 0.0
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        try:
            result = float(value)
        except OverflowError:
            return 0.0
        return result if math.isfinite(result) else 0.0

    text = _CURRENCY_SYMBOLS.sub('', str(value).strip()).strip()

    ultimo_punto = text.rfind('.')
    ultima_coma = text.rfind(',')

    if ultima_coma > ultimo_punto:
        text = text.replace('.', '').replace(',', '.', 1)
    elif ultimo_punto > ultima_coma and ultima_coma != -1:
        text = text.replace(',', '')

    match = re.match(r'\s*[-+]?(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?', text)
    if not match:
        return 0.0
    try:
        result = float(match.group(0))
    except ValueError:
        return 0.0
    return result if math.isfinite(result) else 0.0


def validate_excel_file(filename, size):
    """
    Validar nombre y tamaño del archivo antes de leerlo.

    Returns:
        tuple: (ok: bool, error: str | None)
    """
    if not filename:
        return False, "No se proporcionó ningún archivo"

    max_bytes = EXCEL_MAX_SIZE_MB * 1024 * 1024
    if size is not None and size > max_bytes:
        return False, f"El archivo excede el tamaño máximo permitido ({EXCEL_MAX_SIZE_MB}MB)"
    if size is not None and size < EXCEL_MIN_SIZE_BYTES:
        return False, "El archivo parece estar vacío o corrupto"

    if not str(filename).lower().endswith(ALLOWED_EXTENSIONS):
        return False, f"Tipo de archivo no permitido. Solo se aceptan archivos {', '.join(ALLOWED_EXTENSIONS)}"

    return True, None


def sanitize_cell(value):
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        return _CONTROL_CHARS.sub('', value)[:MAX_CELL_LENGTH]
    return str(value)[:MAX_CELL_LENGTH]


def _is_empty_row(row):
    if not row or not isinstance(row, dict):
        return True
    return all(v is None or v == '' for v in row.values())


def validate_and_sanitize_rows(rows):
    """
    Validar las filas leídas y limpiar sus valores.

    Returns:
        dict: {"valid": bool, "error": str, "warnings": list, "data": list}
    """
    if not isinstance(rows, list):
        return {"valid": False, "error": "El archivo no contiene datos válidos", "warnings": [], "data": []}
    if len(rows) == 0:
        return {"valid": False, "error": "El archivo está vacío o no tiene datos", "warnings": [], "data": []}
    if len(rows) > EXCEL_MAX_ROWS:
        return {
            "valid": False,
            "error": f"El archivo excede el límite de {EXCEL_MAX_ROWS} filas. Por favor, divida el archivo.",
            "warnings": [],
            "data": [],
        }

    warnings = []
    if len(rows) > ROWS_WARNING_THRESHOLD:
        warnings.append(f"El archivo contiene {len(rows)} filas. El procesamiento puede tomar tiempo.")

    empty_rows = sum(1 for row in rows if _is_empty_row(row))
    if empty_rows == len(rows):
        return {"valid": False, "error": "Todas las filas están vacías", "warnings": warnings, "data": []}
    if empty_rows > 0:
        warnings.append(f"Se encontraron {empty_rows} filas vacías que serán ignoradas")

    data = []
    for row in rows:
        if _is_empty_row(row):
            continue
        data.append({str(key).strip(): sanitize_cell(value) for key, value in row.items()})

    return {"valid": True, "error": None, "warnings": warnings, "data": data}


def read_excel_rows(stream):
    """Leer la primera hoja como lista de dicts (encabezado -> valor)."""
    try:
        wb = load_workbook(stream, data_only=True)
    except Exception as exc:
        raise ExcelImportError(f"Error al leer el archivo: {exc}") from exc

    try:
        ws = wb.worksheets[0] if wb.worksheets else None
        if ws is None:
            return []
        rows_iter = ws.iter_rows(values_only=True)
        header = next(rows_iter, None)
        if not header:
            return []
        keys = [str(h).strip() if h is not None else '' for h in header]

        rows = []
        for values in rows_iter:
            row = {}
            for idx, key in enumerate(keys):
                if key:
                    row[key] = values[idx] if idx < len(values) else None
            rows.append(row)
        return rows
    finally:
        wb.close()


def find_value(row, posibles_nombres):
    """Primer valor no vacío cuya columna contenga alguno de los nombres."""
    for nombre in posibles_nombres:
        for key, value in row.items():
            if nombre in str(key).lower().strip():
                if value is not None and value != '':
                    return value
                break
    return None


def _catalog_index(productos):
    index = {}
    for producto in productos or []:
        if not isinstance(producto, dict):
            continue
        codigo = str(producto.get('codigo') or '').lower().strip()
        if codigo and codigo not in index:
            index[codigo] = producto
    return index


def _codigo_to_str(codigo):
    # Los códigos numéricos llegan como float desde la planilla (1001.0)
    if isinstance(codigo, float) and codigo.is_integer():
        return str(int(codigo))
    return str(codigo).strip()


def build_price_preview(rows, productos):
    """
    Cruzar una planilla de precios con el catálogo.

    Returns:
        tuple: (preview: list, errores: list)
    """
    catalogo = _catalog_index(productos)
    preview = []
    errores = []

    for index, fila in enumerate(rows or []):
        codigo = find_value(fila, COLUMNAS_PRECIOS["codigo"])
        if codigo is None or _codigo_to_str(codigo) == '':
            errores.append(f"Fila {index + 2}: Codigo no encontrado")
            continue
        codigo = _codigo_to_str(codigo)

        producto = catalogo.get(codigo.lower())
        precio_final = normalize_number(find_value(fila, COLUMNAS_PRECIOS["precio_final"]))
        precio_actual = producto.get('precio') if producto else None

        preview.append({
            "fila": index + 2,
            "codigo": codigo,
            "precio_neto": normalize_number(find_value(fila, COLUMNAS_PRECIOS["precio_neto"])),
            "imp_internos": normalize_number(find_value(fila, COLUMNAS_PRECIOS["imp_internos"])),
            "precio_final": precio_final,
            "producto_id": producto.get('id') if producto else None,
            "producto_nombre": producto.get('nombre') if producto else None,
            "precio_actual": precio_actual,
            "estado": ESTADO_ENCONTRADO if producto else ESTADO_NO_ENCONTRADO,
            "cambia": bool(producto) and normalize_number(precio_actual) != precio_final,
        })

    return preview, errores


def build_purchase_preview(rows, productos):
    """
    Cruzar una planilla de ítems de compra con el catálogo.

    Returns:
        tuple: (preview: list, errores: list)
    """
    catalogo = _catalog_index(productos)
    preview = []
    errores = []

    for index, fila in enumerate(rows or []):
        codigo = find_value(fila, COLUMNAS_COMPRAS["codigo"])
        if codigo is None or _codigo_to_str(codigo) == '':
            errores.append(f"Fila {index + 2}: Codigo no encontrado")
            continue
        codigo = _codigo_to_str(codigo)

        producto = catalogo.get(codigo.lower())
        cantidad = int(round(normalize_number(find_value(fila, COLUMNAS_COMPRAS["cantidad"]))))

        preview.append({
            "fila": index + 2,
            "codigo": codigo,
            "cantidad": max(1, cantidad),
            "costo_unitario": normalize_number(find_value(fila, COLUMNAS_COMPRAS["costo_unitario"])),
            "bonificacion": max(0.0, normalize_number(find_value(fila, COLUMNAS_COMPRAS["bonificacion"]))),
            "producto_id": producto.get('id') if producto else None,
            "producto_nombre": producto.get('nombre') if producto else None,
            "estado": ESTADO_ENCONTRADO if producto else ESTADO_NO_ENCONTRADO,
        })

    return preview, errores


def purchase_items_from_preview(preview, productos):
    """Convertir las filas encontradas en ítems de compra para el calculador."""
    por_id = {
        p.get('id'): p for p in productos or []
        if isinstance(p, dict) and p.get('id') is not None
    }
    items = []
    for item in preview or []:
        if item.get('estado') != ESTADO_ENCONTRADO or item.get('producto_id') is None:
            continue
        producto = por_id.get(item['producto_id'], {})
        items.append({
            "producto_id": item['producto_id'],
            "producto_nombre": item.get('producto_nombre') or producto.get('nombre') or '',
            "producto_codigo": item['codigo'],
            "cantidad": item['cantidad'],
            "bonificacion": item['bonificacion'],
            "costo_unitario": item['costo_unitario'] or producto.get('costo_sin_iva') or 0,
            "impuestos_internos": producto.get('impuestos_internos') or 0,
            "porcentaje_iva": DEFAULT_VAT_PERCENT,
            "stock_actual": producto.get('stock') or 0,
        })
    return items


def build_template_workbook(kind):
    """Planilla de ejemplo para descargar. Devuelve un BytesIO listo para send_file."""
    plantilla = PLANTILLAS.get(kind)
    if plantilla is None:
        raise ExcelImportError(f"Plantilla desconocida: {kind}")

    wb = Workbook()
    ws = wb.active
    ws.title = plantilla["titulo"]

    accent_dark = "0F172A"
    header_fill = PatternFill(start_color="E2E8F0", end_color="E2E8F0", fill_type="solid")
    thin_border = Border(
        left=Side(style='thin', color="D0D7E2"),
        right=Side(style='thin', color="D0D7E2"),
        top=Side(style='thin', color="D0D7E2"),
        bottom=Side(style='thin', color="D0D7E2")
    )

    ws.append(plantilla["encabezados"])
    for cell in ws[1]:
        cell.font = Font(bold=True, color=accent_dark)
        cell.fill = header_fill
        cell.alignment = Alignment(horizontal='center', vertical='center')
        cell.border = thin_border

    for ejemplo in plantilla["ejemplos"]:
        ws.append(ejemplo)

    for idx in range(1, len(plantilla["encabezados"]) + 1):
        ws.column_dimensions[get_column_letter(idx)].width = 18

    output = BytesIO()
    wb.save(output)
    output.seek(0)
    return output
