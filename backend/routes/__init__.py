# Routes package initialization
# Centralize the blueprints registered by app.py

from .compras import compras_bp
from .documentos import documentos_bp
from .importaciones import importaciones_bp
from .precios import precios_bp

__all__ = ['compras_bp', 'documentos_bp', 'importaciones_bp', 'precios_bp']
