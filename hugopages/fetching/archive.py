"""
archive.py — Descarga un .tar.gz por HTTPS y extrae lo que haga falta.

Equivale a `curl -L $url | tar -xz <miembro>` pero en streaming:
el body de la respuesta pasa por gzip.GzipFile y luego a tarfile en
modo "r|", sin guardar el tarball en disco. Se lee el gzip hasta EOF
para que un stream cortado entre dos entradas no pase por completo.

Dos modos de uso:
- Solo ciertos miembros (el binario de Hugo):
    download_archive(url, workdir, members=["hugo"])
- Todo, quitando el directorio de primer nivel (ghp-import):
    download_archive(url, workdir / "ghp-import", strip_components=1)

Cualquier fallo (HTTP no-2xx, stream truncado, miembro que no existe)
se reporta como FetchError. No hay reintentos.
"""

from __future__ import annotations

import gzip
import io
import shutil
import stat
import tarfile
import zlib
from pathlib import Path, PurePosixPath
from typing import IO, Iterable

import requests

from hugopages.errors import FetchError
from hugopages.utils.logger import get_logger

logger = get_logger("hugopages.fetching")

CHUNK_SIZE = 64 * 1024


class _ChunkStream(io.RawIOBase):
    """Adapta resp.iter_content() a un file-like de solo lectura para tarfile."""

    def __init__(self, chunks: Iterable[bytes]):
        self._chunks = iter(chunks)
        self._pending = b""

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        while not self._pending:
            try:
                self._pending = next(self._chunks)
            except StopIteration:
                return 0
        size = min(len(buffer), len(self._pending))
        buffer[:size] = self._pending[:size]
        self._pending = self._pending[size:]
        return size


def _normalize(name: str) -> str:
    """Quita el './' inicial que algunos tarballs ponen en sus entradas."""
    return str(PurePosixPath(name.lstrip("/")))


def _strip(name: str, components: int) -> str | None:
    """
    Quita los primeros `components` niveles de la ruta, como
    `tar --strip-components`. Retorna None si no queda nada.
    """
    parts = PurePosixPath(name).parts[components:]
    if not parts:
        return None
    return str(PurePosixPath(*parts))


def _safe_target(dest: Path, relative: str) -> Path:
    """Resuelve la ruta destino y rechaza entradas que escapan de dest."""
    root = dest.resolve()
    target = (root / relative).resolve()
    if target != root and root not in target.parents:
        raise FetchError(f"Entrada fuera del directorio destino: {relative}")
    return target


def extract_stream(
    stream: IO[bytes],
    dest: Path,
    members: Iterable[str] | None = None,
    strip_components: int = 0,
) -> list[Path]:
    """
    Extrae un tar.gz leído secuencialmente desde `stream`.

    Args:
        stream: Objeto file-like con el tarball comprimido.
        dest: Directorio donde escribir.
        members: Nombres exactos a extraer (antes de strip). None = todos.
        strip_components: Niveles de ruta a quitar de cada entrada.

    Returns:
        Rutas de los archivos escritos, en orden del tarball.

    Raises:
        FetchError: Si el stream está corrupto o falta un miembro pedido.
    """
    wanted = {_normalize(m) for m in members} if members is not None else None
    found: set[str] = set()
    written: list[Path] = []

    try:
        with gzip.GzipFile(fileobj=stream, mode="rb") as gz:
            with tarfile.open(fileobj=gz, mode="r|") as tar:
                for member in tar:
                    name = _normalize(member.name)
                    if wanted is not None and name not in wanted:
                        continue

                    relative = _strip(name, strip_components)
                    if relative is None:
                        continue
                    target = _safe_target(dest, relative)

                    if member.isdir():
                        target.mkdir(parents=True, exist_ok=True)
                    elif member.isfile():
                        target.parent.mkdir(parents=True, exist_ok=True)
                        source = tar.extractfile(member)
                        with open(target, "wb") as out:
                            shutil.copyfileobj(source, out, CHUNK_SIZE)
                        target.chmod(member.mode & 0o777 or 0o644)
                        written.append(target)
                    else:
                        logger.warning(f"Entrada ignorada (no es archivo): {name}")
                        continue

                    found.add(name)

            # gzip solo verifica el marcador final y el CRC al llegar a EOF
            while gz.read(CHUNK_SIZE):
                pass
    except (tarfile.TarError, EOFError, zlib.error, gzip.BadGzipFile) as e:
        raise FetchError(f"Tarball corrupto o incompleto: {e}") from e

    if wanted is not None:
        faltantes = sorted(wanted - found)
        if faltantes:
            raise FetchError(
                f"El tarball no contiene: {', '.join(faltantes)}"
            )

    return written


def download_archive(
    url: str,
    dest: str | Path,
    members: Iterable[str] | None = None,
    strip_components: int = 0,
    timeout: float = 60.0,
    user_agent: str = "hugopages/1.0",
) -> list[Path]:
    """
    Descarga `url` (siguiendo redirects) y extrae su contenido en `dest`.

    Returns:
        Rutas de los archivos extraídos.

    Raises:
        FetchError: Status no-2xx, error de red o tarball inválido.
    """
    dest = Path(dest)
    dest.mkdir(parents=True, exist_ok=True)
    logger.trace(["GET", url])

    try:
        resp = requests.get(
            url,
            stream=True,
            timeout=timeout,
            allow_redirects=True,
            headers={"User-Agent": user_agent},
        )
    except requests.Timeout as e:
        raise FetchError(f"Timeout al descargar {url}") from e
    except requests.RequestException as e:
        raise FetchError(f"Error de conexión al descargar {url}: {e}") from e

    try:
        try:
            resp.raise_for_status()
        except requests.HTTPError as e:
            raise FetchError(
                f"HTTP {resp.status_code} al descargar {url}"
            ) from e

        try:
            written = extract_stream(
                io.BufferedReader(_ChunkStream(resp.iter_content(CHUNK_SIZE))),
                dest,
                members=members,
                strip_components=strip_components,
            )
        except requests.RequestException as e:
            raise FetchError(f"Descarga interrumpida: {url}: {e}") from e
    finally:
        resp.close()

    logger.info(f"{len(written)} archivo(s) extraído(s) en {dest}")
    return written


def make_executable(path: Path) -> None:
    """Agrega permisos de ejecución (chmod +x)."""
    mode = path.stat().st_mode
    path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
