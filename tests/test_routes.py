import json
from io import BytesIO

import pytest
from openpyxl import Workbook, load_workbook

from app import app


PRODUCTOS = [
    {"id": "p1", "codigo": "ART001", "nombre": "Gaseosa 2L", "precio": 1500, "costo_sin_iva": 900,
     "impuestos_internos": 8, "stock": 40},
]


@pytest.fixture
def client():
    app.config["TESTING"] = True
    with app.test_client() as test_client:
        yield test_client


def _xlsx_upload(rows, filename="planilla.xlsx"):
    wb = Workbook()
    ws = wb.active
    for row in rows:
        ws.append(row)
    output = BytesIO()
    wb.save(output)
    output.seek(0)
    return output, filename


def test_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.get_json()["success"] is True


def test_calcular_totales_worked_example(client):
    resp = client.post("/api/compras/calcular-totales", json={
        "items": [{
            "cantidad": 10,
            "costoUnitario": 100,
            "bonificacion": 10,
            "impuestosInternos": 5,
            "porcentajeIva": 21,
        }]
    })
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["variante"] == "completo"
    assert data["totales"]["gross_subtotal"] == 1000
    assert data["totales"]["bonification_total"] == 100
    assert data["totales"]["net_subtotal"] == 900
    assert data["totales"]["vat_total"] == 189
    assert data["totales"]["internal_tax_total"] == 45
    assert data["totales"]["grand_total"] == 1134
    assert data["lineas"][0]["total"] == 1134


def test_calcular_totales_empty_body(client):
    resp = client.post("/api/compras/calcular-totales", json={})
    assert resp.status_code == 200
    assert resp.get_json()["totales"]["grand_total"] == 0


def test_calcular_totales_simple_variant(client):
    resp = client.post("/api/compras/calcular-totales", json={
        "variante": "simple",
        "items": [{"quantity": 1, "unit_net_cost": 100, "bonification_percent": 50}],
    })
    assert resp.get_json()["totales"]["grand_total"] == 121


def test_calcular_totales_rejects_bad_payload(client):
    resp = client.post("/api/compras/calcular-totales", json={"items": "no"})
    assert resp.status_code == 400
    assert resp.get_json()["success"] is False

    resp = client.post("/api/compras/calcular-totales", json={"items": [], "variante": "otra"})
    assert resp.status_code == 400


def test_calcular_totales_options(client):
    resp = client.open("/api/compras/calcular-totales", method="OPTIONS")
    assert resp.status_code == 200


def test_formatear_documento(client):
    resp = client.post("/api/documentos/formatear", json={"tipo": "CUIT", "valor": "20123456789"})
    assert resp.get_json()["valor"] == "20-12345678-9"

    resp = client.post("/api/documentos/formatear", json={"tipo": "dni", "valor": "12.345.6789"})
    assert resp.get_json()["valor"] == "12345678"

    resp = client.post("/api/documentos/formatear", json={"tipo": "LE", "valor": "1"})
    assert resp.status_code == 400


def test_normalizar_documento(client):
    resp = client.post("/api/documentos/normalizar", json={"tipo": "DNI", "numero": "5123456"})
    assert resp.status_code == 200
    assert resp.get_json()["cuit"] == "00-05123456-0"

    resp = client.post("/api/documentos/normalizar", json={"tipo": "CUIT", "numero": "20123456789"})
    assert resp.get_json()["cuit"] == "20-12345678-9"

    resp = client.post("/api/documentos/normalizar", json={"tipo": "CUIT", "numero": "2012345678"})
    assert resp.status_code == 400
    assert resp.get_json()["field"] == "numero_documento"


def test_detectar_documento(client):
    resp = client.get("/api/documentos/detectar?codigo=00-05123456-0")
    assert resp.get_json() == {"success": True, "tipo": "DNI", "numero": "5123456"}

    resp = client.get("/api/documentos/detectar?codigo=20-12345678-9")
    assert resp.get_json()["tipo"] == "CUIT"

    resp = client.get("/api/documentos/detectar")
    assert resp.get_json()["tipo"] == "CUIT"
    assert resp.get_json()["numero"] == ""


def test_validar_parte(client):
    resp = client.post("/api/partes/validar", json={
        "nombre": "Kiosco El Sol",
        "tipo_documento": "DNI",
        "numero_documento": "1234567",
    })
    assert resp.status_code == 200
    assert resp.get_json()["data"]["cuit"] == "00-01234567-0"

    resp = client.post("/api/partes/validar", json={"nombre": "X", "numero_documento": "1"})
    assert resp.status_code == 400
    assert "numero_documento" in resp.get_json()["errors"]


def test_calcular_precio(client):
    resp = client.post("/api/precios/calcular", json={
        "costo_sin_iva": 100,
        "porcentaje_iva": 21,
        "precio": 242,
        "margen": 30,
    })
    data = resp.get_json()["data"]
    assert data["costo_con_iva"] == 121
    assert data["iva_costo"] == 21
    assert data["precio_sugerido"] == 130
    assert data["precio_neto"] == 200
    assert data["margen_porcentaje"] == 100
    assert data["ganancia_bruta"] == 100


def test_calcular_total_pedido(client):
    resp = client.post("/api/pedidos/calcular-total", json={
        "items": [{"precio": 10, "cantidad": 3, "descuento": 10}]
    })
    assert resp.get_json()["total"] == 27


def test_calcular_totales_out_of_range_numbers(client):
    resp = client.post("/api/compras/calcular-totales", json={
        "items": [
            {"cantidad": "1e999999", "costo_unitario": 5},
            {"cantidad": 2, "costo_unitario": 50},
        ]
    })
    assert resp.status_code == 200
    assert resp.get_json()["totales"]["grand_total"] == 121


def test_calcular_precio_extreme_values(client):
    resp = client.post("/api/precios/calcular", json={"costo_sin_iva": "1e30"})
    assert resp.status_code == 200
    assert resp.get_json()["data"]["costo_con_iva"] == 1.21e30

    resp = client.post("/api/precios/calcular", json={
        "costo_sin_iva": 100,
        "porcentaje_iva": -100,
        "precio": 100,
    })
    assert resp.status_code == 200
    assert resp.get_json()["data"]["precio_neto"] == 0


def test_preview_precios(client):
    stream, filename = _xlsx_upload([
        ["Codigo", "Precio Neto", "Precio Final"],
        ["ART001", "1.200,50", 1800],
        ["OTRO", 10, 12],
        [None, 5, 6],
    ])
    resp = client.post(
        "/api/importar/precios/preview",
        data={"file": (stream, filename), "productos": json.dumps(PRODUCTOS)},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["summary"] == {"total": 2, "encontrados": 1, "no_encontrados": 1, "con_cambios": 1}
    assert data["preview"][0]["precio_neto"] == 1200.5
    assert data["errores"] == ["Fila 4: Codigo no encontrado"]


def test_preview_compra(client):
    stream, filename = _xlsx_upload([
        ["Codigo", "Cantidad", "Costo", "Bonificacion%"],
        ["ART001", 10, 100, 10],
    ])
    resp = client.post(
        "/api/importar/compras/preview",
        data={"file": (stream, filename), "productos": json.dumps(PRODUCTOS)},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 200
    data = resp.get_json()
    assert len(data["items"]) == 1
    assert data["totales"]["net_subtotal"] == 900
    assert data["totales"]["vat_total"] == 189
    assert data["totales"]["internal_tax_total"] == 72


def test_preview_compra_overflowing_quantity(client):
    stream, filename = _xlsx_upload([
        ["Codigo", "Cantidad", "Costo"],
        ["ART001", "1e999", 100],
    ])
    resp = client.post(
        "/api/importar/compras/preview",
        data={"file": (stream, filename), "productos": json.dumps(PRODUCTOS)},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 200
    assert resp.get_json()["items"][0]["cantidad"] == 1


def test_preview_rejects_missing_file(client):
    resp = client.post("/api/importar/precios/preview", data={}, content_type="multipart/form-data")
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "No se proporcionó ningún archivo"


def test_preview_rejects_extension(client):
    stream, _ = _xlsx_upload([["Codigo"], ["A"]])
    resp = client.post(
        "/api/importar/precios/preview",
        data={"file": (stream, "precios.csv")},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 400


def test_preview_rejects_bad_productos(client):
    stream, filename = _xlsx_upload([["Codigo"], ["A"]])
    resp = client.post(
        "/api/importar/precios/preview",
        data={"file": (stream, filename), "productos": json.dumps({"no": "lista"})},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 400


def test_preview_rejects_corrupt_file(client):
    resp = client.post(
        "/api/importar/compras/preview",
        data={"file": (BytesIO(b"no es un excel " * 20), "compra.xlsx")},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 400
    assert resp.get_json()["message"].startswith("Error al leer el archivo")


def test_descargar_plantilla(client):
    resp = client.get("/api/importar/plantilla/precios")
    assert resp.status_code == 200
    wb = load_workbook(BytesIO(resp.data))
    assert wb.active["A1"].value == "Codigo"

    resp = client.get("/api/importar/plantilla/clientes")
    assert resp.status_code == 404
