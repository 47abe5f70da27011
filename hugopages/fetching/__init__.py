"""
fetching/ — Descarga de tarballs por HTTPS.

Módulos:
- archive.py → GET en streaming + extracción con tarfile
"""
