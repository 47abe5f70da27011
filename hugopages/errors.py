"""
errors.py — Excepciones del deploy.

Cada paso del pipeline lanza la suya; el DeployPipeline las atrapa
y las convierte en un StepResult fallido.
"""


class DeployError(Exception):
    """Base de todos los errores del deploy."""


class FetchError(DeployError):
    """Descarga o extracción de un tarball falló."""


class BuildError(DeployError):
    """Hugo salió con error o no generó el sitio."""


class ImporterError(DeployError):
    """ghp-import no pudo commitear el sitio en la rama."""


class PushError(DeployError):
    """El remoto rechazó el push (auth, rama protegida, etc.)."""
