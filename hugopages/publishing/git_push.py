"""
git_push.py — Sube la rama gh-pages al remoto con push forzado.

El remoto se arma con el token en la URL:

    https://<token>@github.com/<owner>/<repo>.git

Por eso este es el único comando que NO se traza: ni la URL ni los
mensajes de error de git salen sin pasar antes por _redact().

El push es forzado: lo que hay en gh-pages del remoto se reemplaza
por la rama local, sin merge. Si el remoto lo rechaza (auth, rama
protegida) se lanza PushError y no se reintenta; la rama local
queda commiteada para el siguiente intento.

Uso:
    from hugopages.publishing.git_push import GitPusher
    pusher = GitPusher(config)
    sha = pusher.push()
"""

from __future__ import annotations

import git as gitpython

from hugopages.config import AppConfig
from hugopages.errors import PushError
from hugopages.utils.logger import MASK, get_logger

logger = get_logger("hugopages.git")


class GitPusher:
    """
    Hace `git push -fq <url> <rama>:<rama>` con GitPython.

    Args:
        config: Configuración del deploy (token, slug, host, rama).
    """

    def __init__(self, config: AppConfig):
        self._config = config
        self._repo: gitpython.Repo | None = None

    def _get_repo(self) -> gitpython.Repo:
        """
        Abre el repo del workdir (una sola vez).

        Raises:
            PushError: Si el workdir no es un repo Git.
        """
        if self._repo is None:
            try:
                self._repo = gitpython.Repo(
                    self._config.workdir_path, search_parent_directories=True
                )
            except (gitpython.InvalidGitRepositoryError, gitpython.NoSuchPathError) as e:
                raise PushError(f"{self._config.workdir} no es un repo Git") from e
        return self._repo

    def _redact(self, text: str) -> str:
        if self._config.token:
            text = text.replace(self._config.token, MASK)
        return text

    def remote_url(self) -> str:
        """URL del remoto con el token embebido. Nunca imprimir."""
        publish = self._config.publish
        return publish.remote_template.format(
            token=self._config.token,
            host=publish.host,
            slug=self._config.repo_slug,
        )

    def push(self) -> str:
        """
        Fuerza el push de la rama local a la rama remota del mismo nombre.

        Returns:
            Sha que quedó en el remoto.

        Raises:
            PushError: Si la rama local no existe o el remoto rechaza el push.
        """
        repo = self._get_repo()
        branch = self._config.publish.branch

        try:
            sha = repo.commit(branch).hexsha
        except (gitpython.BadName, ValueError):
            raise PushError(f"No existe la rama local {branch}") from None

        logger.info(
            f"Push forzado de {branch} ({sha[:7]}) a "
            f"{self._config.publish.host}/{self._config.repo_slug}"
        )

        try:
            repo.git.push(
                "-fq",
                self.remote_url(),
                f"{branch}:{branch}",
                env={"GIT_TERMINAL_PROMPT": "0"},
            )
        except gitpython.GitCommandError as e:
            detalle = (e.stderr or str(e)).strip()
            # from None: la excepción original lleva la URL con el token
            raise PushError(
                f"git push rechazado (código {e.status}): {self._redact(detalle)}"
            ) from None

        return sha
