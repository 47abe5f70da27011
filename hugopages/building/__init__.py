"""
building/ — Generación del sitio estático.

Módulos:
- hugo.py → Builder y HugoBuilder (release fijo de Hugo)
"""
