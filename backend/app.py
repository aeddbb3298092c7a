from flask import Flask, jsonify
from flask_cors import CORS
import os
import logging

# Importar configuración
from config import DEFAULT_VAT_PERCENT, FRONTEND_URL

# Importar los blueprints de rutas
from routes.compras import compras_bp
from routes.documentos import documentos_bp
from routes.importaciones import importaciones_bp
from routes.precios import precios_bp

from utils.logging_utils import is_debug_mode

# Inicializa la aplicación Flask
app = Flask(__name__)
# Avoid automatic redirect when trailing slashes differ between request and route.
# This prevents browsers from receiving a 301/308 redirect for preflight OPTIONS requests
# which causes CORS failures: "Redirect is not allowed for a preflight request".
app.url_map.strict_slashes = False

# Configurar logging para reducir logs de werkzeug
logging.getLogger('werkzeug').setLevel(logging.WARNING)
app.logger.setLevel(logging.WARNING)

# Registrar los blueprints ANTES de configurar CORS
app.register_blueprint(compras_bp)
app.register_blueprint(documentos_bp)
app.register_blueprint(importaciones_bp)  # Vista previa de planillas Excel
app.register_blueprint(precios_bp)

# Configurar CORS basado en el ambiente
# Lee la variable de entorno. Si no existe, usa el frontend configurado.
allowed_origins = os.getenv('FLASK_CORS_ORIGINS', f"{FRONTEND_URL},http://localhost:5174")
print(f"CORS - Orígenes permitidos leídos de ENV: {allowed_origins}")

# Si allowed_origins tiene una sola URL, pasala como string.
# Si tiene varias separadas por coma, pasalas como lista.
if ',' in allowed_origins:
    origins_list = [origin.strip() for origin in allowed_origins.split(',')]
    CORS(app, origins=origins_list, supports_credentials=True, methods=["GET", "POST", "OPTIONS"], allow_headers=["Content-Type", "Authorization", "X-Requested-With"])
    print(f"CORS configurado para MÚLTIPLES orígenes: {origins_list}")
else:
    CORS(app, origins=allowed_origins, supports_credentials=True, methods=["GET", "POST", "OPTIONS"], allow_headers=["Content-Type", "Authorization", "X-Requested-With"])
    print(f"CORS configurado para UN origen: {allowed_origins}")


@app.route('/api/health', methods=['GET'])
def health():
    return jsonify({"success": True, "status": "ok", "default_iva": DEFAULT_VAT_PERCENT})


# Inicia el servidor
if __name__ == '__main__':
    # Usar host 0.0.0.0 para aceptar conexiones externas dentro de Docker
    app.run(host="0.0.0.0", port=int(os.getenv('PORT', 5000)), debug=is_debug_mode())
