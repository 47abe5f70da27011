"""
publishing/ — Todo lo relacionado con publicar el sitio.

Módulos:
- ghp_import.py → Publisher y GhpImporter (commit en gh-pages)
- git_push.py   → Push forzado de gh-pages al remoto
"""
