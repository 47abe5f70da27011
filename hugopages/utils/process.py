"""
process.py — Ejecuta comandos externos (hugo, ghp-import) con trazado.

Cada comando se imprime antes de correr (como `set -x`) y su salida
se reenvía al logger. Un exit code distinto de cero se convierte en
la excepción que pida el llamador.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Sequence

from hugopages.errors import DeployError
from hugopages.utils.logger import get_logger

logger = get_logger("hugopages.process")


def run_command(
    command: Sequence[str | Path],
    cwd: str | Path | None = None,
    error_cls: type[DeployError] = DeployError,
    timeout: float | None = None,
) -> str:
    """
    Ejecuta `command` y retorna su stdout.

    Raises:
        error_cls: Exit code != 0, timeout, o el ejecutable no existe.
    """
    args = [str(c) for c in command]
    logger.trace(args)

    try:
        result = subprocess.run(
            args,
            capture_output=True,
            text=True,
            timeout=timeout,
            cwd=cwd,
        )
    except subprocess.TimeoutExpired as e:
        raise error_cls(f"Timeout ({timeout}s): {args[0]}") from e
    except OSError as e:
        raise error_cls(f"No se pudo ejecutar {args[0]}: {e}") from e

    output = result.stdout
    if result.stderr:
        output += result.stderr

    if result.returncode != 0:
        raise error_cls(
            f"{Path(args[0]).name} salió con código {result.returncode}:\n"
            f"{output.strip()}"
        )

    for line in output.strip().splitlines():
        logger.info(line)
    return result.stdout
