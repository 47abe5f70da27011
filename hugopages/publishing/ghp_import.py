"""
ghp_import.py — Commitea el sitio generado en la rama gh-pages.

Usa la herramienta externa ghp-import (https://github.com/c-w/ghp-import)
como caja negra: le pasamos el directorio public/ y ella crea el commit
en gh-pages sin tocar el working tree. Nosotros solo la descargamos
(en una versión fija) y leemos con GitPython el commit que dejó.

Flujo:
    1. Descargar el tarball del tag fijado → ghp-import/
    2. python ghp-import/ghp_import.py public
    3. Leer el sha de la rama gh-pages

Uso:
    from hugopages.publishing.ghp_import import GhpImporter
    importer = GhpImporter(config)
    importer.fetch()
    sha = importer.publish(Path("public"))
"""

from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from pathlib import Path

import git as gitpython

from hugopages.config import AppConfig
from hugopages.errors import ImporterError
from hugopages.fetching.archive import download_archive
from hugopages.utils.logger import get_logger
from hugopages.utils.process import run_command

logger = get_logger("hugopages.publishing")

DEFAULT_BRANCH = "gh-pages"


class Publisher(ABC):
    """Algo que toma el directorio de salida y lo deja commiteado."""

    def fetch(self) -> Path | None:
        """Descarga lo que haga falta antes de publish(). Por defecto nada."""
        return None

    @abstractmethod
    def publish(self, output_dir: Path) -> str:
        """
        Commitea `output_dir` y retorna la referencia del commit.

        Raises:
            DeployError: Si no se pudo commitear.
        """
        ...


class GhpImporter(Publisher):
    """
    Publisher basado en ghp-import.

    Args:
        config: Configuración del deploy (ref fijado, rama, workdir).
    """

    def __init__(self, config: AppConfig):
        self._config = config

    @property
    def download_url(self) -> str:
        return self._config.importer.url_template.format(
            ref=self._config.importer.ref
        )

    @property
    def directory(self) -> Path:
        return self._config.workdir_path / self._config.importer.directory

    @property
    def script_path(self) -> Path:
        return self.directory / self._config.importer.script

    def fetch(self) -> Path:
        """
        Descarga ghp-import quitando el directorio de primer nivel del tarball.

        Raises:
            FetchError: Si la descarga falla.
            ImporterError: Si el tarball no trae el script esperado.
        """
        logger.info(f"Descargando ghp-import {self._config.importer.ref}")
        download_archive(
            self.download_url,
            self.directory,
            strip_components=1,
            timeout=self._config.download.timeout,
            user_agent=self._config.download.user_agent,
        )
        if not self.script_path.is_file():
            raise ImporterError(
                f"El tarball de ghp-import no trae {self._config.importer.script}"
            )
        return self.script_path

    def command(self, output_dir: Path) -> list[str]:
        """Arma la línea de comando de ghp-import."""
        cmd = [sys.executable, str(self.script_path.resolve())]
        branch = self._config.publish.branch
        if branch != DEFAULT_BRANCH:
            cmd += ["-b", branch]
        cmd.append(str(Path(output_dir).resolve()))
        return cmd

    def publish(self, output_dir: Path) -> str:
        """
        Corre ghp-import sobre `output_dir` y retorna el sha de la rama.

        Raises:
            ImporterError: Exit code != 0 o la rama no quedó creada.
        """
        if not self.script_path.is_file():
            raise ImporterError(f"No existe {self.script_path}")

        run_command(
            self.command(output_dir),
            cwd=self._config.workdir_path,
            error_cls=ImporterError,
        )

        branch = self._config.publish.branch
        try:
            repo = gitpython.Repo(
                self._config.workdir_path, search_parent_directories=True
            )
            sha = repo.commit(branch).hexsha
        except (gitpython.InvalidGitRepositoryError, gitpython.NoSuchPathError) as e:
            raise ImporterError(f"{self._config.workdir} no es un repo Git") from e
        except (gitpython.BadName, ValueError) as e:
            raise ImporterError(f"ghp-import no creó la rama {branch}") from e

        logger.success(f"Commit {sha[:7]} en {branch}")
        return sha
