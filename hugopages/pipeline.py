"""
pipeline.py — Orquesta el deploy completo, paso por paso.

Orden fijo:

    fetch-generator → build → fetch-importer → import → publish

Cada paso devuelve un StepResult. El pipeline se detiene en el primer
paso fallido y no ejecuta los siguientes; no hay reintentos ni rollback.
Solo si el push termina bien se imprime el marcador de éxito ("OK").

La config se valida al construir el pipeline, antes de cualquier
descarga. El token se registra en el logger para que se enmascare.

Uso:
    from hugopages.config import load_config
    from hugopages.pipeline import DeployPipeline

    pipeline = DeployPipeline(load_config())
    result = pipeline.run()
    sys.exit(0 if result.success else 1)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from hugopages.building.hugo import Builder, HugoBuilder
from hugopages.config import AppConfig, validate_config
from hugopages.errors import DeployError
from hugopages.publishing.ghp_import import GhpImporter, Publisher
from hugopages.publishing.git_push import GitPusher
from hugopages.utils.logger import console, get_logger, redact, register_secret

logger = get_logger("hugopages.pipeline")

STEP_NAMES = ("fetch-generator", "build", "fetch-importer", "import", "publish")


@dataclass
class StepResult:
    """
    Resultado de un paso del pipeline.

    Campos:
        name: Nombre del paso (ej: "build").
        success: Si terminó bien.
        output: Resumen de lo que hizo (ruta, sha, ...).
        error: Mensaje de error (ya sin secretos) si falló.
    """

    name: str
    success: bool
    output: str = ""
    error: str = ""


@dataclass
class PipelineResult:
    """Resultados de los pasos que llegaron a ejecutarse, en orden."""

    results: list[StepResult] = field(default_factory=list)
    dry_run: bool = False

    @property
    def success(self) -> bool:
        return bool(self.results) and all(r.success for r in self.results)

    @property
    def failed_step(self) -> StepResult | None:
        for r in self.results:
            if not r.success:
                return r
        return None

    @property
    def executed(self) -> list[str]:
        return [r.name for r in self.results]


class DeployPipeline:
    """
    Driver secuencial del deploy.

    Builder y Publisher se pueden inyectar (tests, otros generadores);
    por defecto se usan HugoBuilder, GhpImporter y GitPusher.

    Args:
        config: Configuración ya cargada.
        builder: Genera el sitio (fetch() + run()).
        importer: Commitea el sitio en la rama (fetch() + publish()).
        pusher: Sube la rama al remoto (push()).

    Raises:
        ValueError: Si la configuración no es válida.
    """

    def __init__(
        self,
        config: AppConfig,
        builder: Builder | None = None,
        importer: Publisher | None = None,
        pusher: GitPusher | None = None,
    ):
        problemas = validate_config(config)
        if problemas:
            raise ValueError(
                "Configuración inválida:\n" + "\n".join(f"- {p}" for p in problemas)
            )

        register_secret(config.token)
        self._config = config
        self._builder = builder or HugoBuilder(config)
        self._importer = importer or GhpImporter(config)
        self._pusher = pusher or GitPusher(config)
        self._output_dir: Path | None = None

    # ============================================================
    # Pasos
    # ============================================================

    def _fetch_generator(self) -> str:
        binary = self._builder.fetch()
        return str(binary) if binary else ""

    def _build(self) -> str:
        self._output_dir = self._builder.run()
        return str(self._output_dir)

    def _fetch_importer(self) -> str:
        script = self._importer.fetch()
        return str(script) if script else ""

    def _import(self) -> str:
        if self._output_dir is None:
            raise DeployError("No hay directorio de salida: el build no corrió")
        return self._importer.publish(self._output_dir)

    def _publish(self) -> str:
        return self._pusher.push()

    def steps(self) -> list[tuple[str, Callable[[], str]]]:
        """Pasos en el orden en que se ejecutan."""
        funcs = [
            self._fetch_generator,
            self._build,
            self._fetch_importer,
            self._import,
            self._publish,
        ]
        return list(zip(STEP_NAMES, funcs))

    # ============================================================
    # Ejecución
    # ============================================================

    def _run_step(self, name: str, func: Callable[[], str]) -> StepResult:
        """Ejecuta un paso y convierte cualquier fallo en StepResult."""
        try:
            output = func()
        except (DeployError, OSError) as e:
            return StepResult(name=name, success=False, error=redact(str(e)))
        return StepResult(name=name, success=True, output=output)

    def run(self, dry_run: bool = False) -> PipelineResult:
        """
        Ejecuta el deploy completo.

        Args:
            dry_run: Genera y commitea en local pero no hace push.

        Returns:
            PipelineResult con un StepResult por paso ejecutado.
        """
        steps = self.steps()
        if dry_run:
            steps = [s for s in steps if s[0] != "publish"]

        result = PipelineResult(dry_run=dry_run)
        total = len(steps)

        for number, (name, func) in enumerate(steps, start=1):
            logger.step(number, total, name)
            step_result = self._run_step(name, func)
            result.results.append(step_result)

            if not step_result.success:
                logger.error(f"{name}: {step_result.error}")
                return result

        if dry_run:
            logger.warning("Dry-run: la rama quedó commiteada en local, sin push")
        else:
            console.print(
                self._config.publish.success_marker,
                markup=False,
                highlight=False,
            )
        return result
