"""
hugopages — Deploy de un sitio Hugo a GitHub Pages.

Este paquete contiene:
- fetching/   → Descarga y extracción de tarballs
- building/   → Descarga y ejecución de Hugo
- publishing/ → ghp-import y push forzado a gh-pages
- utils/      → Logger y ejecución de comandos

Uso:
    python -m hugopages deploy
    python -m hugopages config --show
"""

__version__ = "1.0.0"
