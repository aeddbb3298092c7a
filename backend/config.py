import os
import os.path
from dotenv import load_dotenv

# Carga las variables de entorno desde el archivo .env
load_dotenv(dotenv_path=os.path.join(os.path.dirname(__file__), '..', '.env'))


def _env_float(name, default):
    raw = os.getenv(name)
    if raw is None or str(raw).strip() == "":
        return default
    try:
        return float(str(raw).strip().replace(",", "."))
    except ValueError:
        print(f"[config] Valor inválido para {name}: {raw!r}, se usa {default}")
        return default


def _env_int(name, default):
    raw = os.getenv(name)
    if raw is None or str(raw).strip() == "":
        return default
    try:
        return int(str(raw).strip())
    except ValueError:
        print(f"[config] Valor inválido para {name}: {raw!r}, se usa {default}")
        return default


# Configuración del frontend
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")

# Alícuota de IVA por defecto para ítems de compra sin alícuota propia
DEFAULT_VAT_PERCENT = _env_float("DEFAULT_IVA_PERCENT", 21.0)

# Límites para importación de planillas Excel
EXCEL_MAX_SIZE_MB = _env_int("EXCEL_MAX_SIZE_MB", 10)
EXCEL_MAX_ROWS = _env_int("EXCEL_MAX_ROWS", 10000)
