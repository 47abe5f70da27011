"""
hugo.py — Descarga un release fijo de Hugo y genera el sitio.

Hugo cambió cómo empaqueta sus releases, así que hay dos layouts:

    root       hugo_0.52_Linux-64bit.tar.gz
               └── hugo
    qualified  hugo_0.52_linux_amd64.tar.gz
               └── hugo_0.52_linux_amd64/
                   └── hugo_0.52_linux_amd64

La misma versión de la config se usa para la URL y para el nombre del
miembro, así que nunca pueden desalinearse.

Uso:
    from hugopages.building.hugo import HugoBuilder
    builder = HugoBuilder(config)
    builder.fetch()
    public_dir = builder.run()
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path

from hugopages.config import AppConfig
from hugopages.errors import BuildError
from hugopages.fetching.archive import download_archive, make_executable
from hugopages.utils.logger import get_logger
from hugopages.utils.process import run_command

logger = get_logger("hugopages.building")

RELEASES_URL = "https://github.com/gohugoio/hugo/releases/download/v{version}/{asset}"


class ArchiveLayout(Enum):
    """Convenciones de empaquetado de los releases de Hugo."""
    ROOT = "root"
    QUALIFIED = "qualified"

    def asset(self, version: str) -> str:
        if self is ArchiveLayout.ROOT:
            return f"hugo_{version}_Linux-64bit.tar.gz"
        return f"hugo_{version}_linux_amd64.tar.gz"

    def member(self, version: str) -> str:
        if self is ArchiveLayout.ROOT:
            return "hugo"
        qualified = f"hugo_{version}_linux_amd64"
        return f"{qualified}/{qualified}"


class Builder(ABC):
    """Algo que genera el sitio estático y dice dónde quedó."""

    def fetch(self) -> Path | None:
        """Descarga lo que haga falta antes de run(). Por defecto nada."""
        return None

    @abstractmethod
    def run(self) -> Path:
        """Genera el sitio y retorna el directorio de salida."""
        ...


class HugoBuilder(Builder):
    """
    Builder que usa un binario de Hugo descargado de GitHub Releases.

    Args:
        config: Configuración del deploy (versión, layout, workdir).
    """

    def __init__(self, config: AppConfig):
        self._config = config
        self._layout = ArchiveLayout(config.hugo.layout)

    @property
    def version(self) -> str:
        return self._config.hugo.version

    @property
    def layout(self) -> ArchiveLayout:
        return self._layout

    @property
    def download_url(self) -> str:
        template = self._config.hugo.url_template or RELEASES_URL
        return template.format(
            version=self.version,
            asset=self._layout.asset(self.version),
        )

    @property
    def member(self) -> str:
        return self._layout.member(self.version)

    @property
    def binary_path(self) -> Path:
        return self._config.workdir_path / self.member

    @property
    def output_dir(self) -> Path:
        return self._config.workdir_path / self._config.hugo.output_dir

    def fetch(self) -> Path:
        """
        Descarga el release y deja el binario ejecutable en el workdir.

        Raises:
            FetchError: Si la descarga o la extracción fallan.
        """
        logger.info(f"Descargando Hugo {self.version} ({self._layout.value})")
        download_archive(
            self.download_url,
            self._config.workdir_path,
            members=[self.member],
            timeout=self._config.download.timeout,
            user_agent=self._config.download.user_agent,
        )
        make_executable(self.binary_path)
        logger.success(f"Hugo listo en {self.binary_path}")
        return self.binary_path

    def run(self) -> Path:
        """
        Ejecuta Hugo desde el workdir y verifica que generó algo.

        Raises:
            BuildError: Exit code != 0, o el directorio de salida
                no existe o está vacío.
        """
        if not self.binary_path.is_file():
            raise BuildError(f"No existe el binario de Hugo: {self.binary_path}")

        run_command(
            [self.binary_path.resolve(), *self._config.hugo.args],
            cwd=self._config.workdir_path,
            error_cls=BuildError,
        )

        if not self.output_dir.is_dir():
            raise BuildError(f"Hugo no generó {self.output_dir}")
        if not any(self.output_dir.iterdir()):
            raise BuildError(f"{self.output_dir} está vacío")

        logger.success(f"Sitio generado en {self.output_dir}")
        return self.output_dir
