"""
logger.py — Logging para el pipeline usando Rich + archivo.

Dual output:
- Rich console: colores para ver el avance del deploy en CI
- Archivo rotativo: logs/hugopages.log para debugging post-mortem

Todos los mensajes pasan por un filtro de redacción: cualquier secreto
registrado con register_secret() se reemplaza por "***" antes de llegar
a la consola o al archivo. El token de GitHub nunca debe aparecer en
el log del job.

Uso:
    from hugopages.utils.logger import get_logger, register_secret
    register_secret(config.token)
    logger = get_logger("hugopages.fetching")
    logger.info("Descargando hugo...")
    logger.trace(["./hugo"])
    logger.success("Sitio generado")
"""

from __future__ import annotations

import logging
import os
import shlex
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Sequence

from rich.console import Console
from rich.markup import escape
from rich.theme import Theme

_in_pytest = "pytest" in sys.modules or "PYTEST_CURRENT_TEST" in os.environ

hugopages_theme = Theme({
    "info": "cyan",
    "success": "bold green",
    "warning": "bold yellow",
    "error": "bold red",
    "trace": "dim",
    "step": "bold rgb(255,71,133)",  # Rosa Hugo (#ff4785)
})

# Consola global, compartida por todos los módulos
console = Console(theme=hugopages_theme)

MASK = "***"

# Secretos que nunca deben imprimirse (tokens, passwords)
_secrets: set[str] = set()


def register_secret(value: str | None) -> None:
    """Registra un valor para que se enmascare en todos los mensajes."""
    if value:
        _secrets.add(value)


def clear_secrets() -> None:
    """Olvida todos los secretos registrados (útil en tests)."""
    _secrets.clear()


def redact(message: str) -> str:
    """
    Reemplaza cada secreto registrado por MASK.

    Los secretos más largos se reemplazan primero para que un secreto
    que contiene a otro no deje fragmentos visibles.
    """
    for secret in sorted(_secrets, key=len, reverse=True):
        message = message.replace(secret, MASK)
    return message


# ================================================================
# File logging setup
# ================================================================

_file_logger: logging.Logger | None = None


def _setup_file_logger() -> logging.Logger:
    """Configura el logger de archivo con rotacion."""
    global _file_logger
    if _file_logger is not None:
        return _file_logger

    # No crear logs en pytest
    if _in_pytest:
        _file_logger = logging.getLogger("hugopages.null")
        _file_logger.addHandler(logging.NullHandler())
        return _file_logger

    log_dir = Path(os.environ.get("HUGOPAGES_LOG_DIR", "logs"))
    log_dir.mkdir(parents=True, exist_ok=True)

    _file_logger = logging.getLogger("hugopages.file")
    _file_logger.setLevel(logging.DEBUG)
    _file_logger.propagate = False

    if not _file_logger.handlers:
        handler = RotatingFileHandler(
            log_dir / "hugopages.log",
            maxBytes=5 * 1024 * 1024,  # 5 MB
            backupCount=5,
            encoding="utf-8",
        )
        handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
        _file_logger.addHandler(handler)

    return _file_logger


class DeployLogger:
    """
    Logger con Rich para la consola + archivo rotativo.

    Cada módulo crea su propio logger con un nombre para
    identificar de dónde viene cada mensaje.

    Args:
        name: Nombre del módulo (ej: "hugopages.pipeline")
    """

    def __init__(self, name: str):
        self._name = name
        self._file = _setup_file_logger()

    def _emit(self, style: str, prefix: str, message: str, level: int) -> None:
        message = redact(message)
        console.print(f"[{style}]{prefix}{escape(message)}[/{style}]")
        self._file.log(level, f"[{self._name}] {message}")

    def info(self, message: str) -> None:
        """Mensaje informativo (cyan)."""
        self._emit("info", "i  ", message, logging.INFO)

    def success(self, message: str) -> None:
        """Mensaje de éxito (verde)."""
        self._emit("success", "[OK] ", message, logging.INFO)

    def warning(self, message: str) -> None:
        """Mensaje de advertencia (amarillo)."""
        self._emit("warning", "[!] ", message, logging.WARNING)

    def error(self, message: str) -> None:
        """Mensaje de error (rojo)."""
        self._emit("error", "[X] ", message, logging.ERROR)

    def trace(self, command: Sequence[str]) -> None:
        """
        Imprime un comando antes de ejecutarlo, como `set -x` en bash.

        El push NO pasa por aquí: su URL lleva el token.
        """
        self._emit("trace", "+ ", shlex.join(str(c) for c in command), logging.DEBUG)

    def step(self, number: int, total: int, message: str) -> None:
        """Mensaje de paso en un proceso (rosa)."""
        self._emit("step", f"  [{number}/{total}] ", message, logging.INFO)


def get_logger(name: str = "hugopages") -> DeployLogger:
    """
    Obtiene un logger para el módulo especificado.

    Ejemplo:
        logger = get_logger("hugopages.building")
        logger.info("Ejecutando hugo...")
    """
    return DeployLogger(name)
