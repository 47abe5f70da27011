"""
cli.py — Punto de entrada del deploy.

Comandos:
    python -m hugopages deploy              → Genera el sitio y publica gh-pages
    python -m hugopages deploy --dry-run    → Genera y commitea, sin push
    python -m hugopages config --show       → Muestra la configuración
    python -m hugopages config --validate   → Valida la configuración

En CI basta con `hugopages deploy`: el token y el repo salen de
GH_TOKEN y TRAVIS_REPO_SLUG (o GITHUB_TOKEN y GITHUB_REPOSITORY).

Exit code 0 si todo salió bien, 1 si falló la config o cualquier paso.
"""

from __future__ import annotations

import sys
from pathlib import Path

import click
from rich.panel import Panel
from rich.table import Table

from hugopages import __version__
from hugopages.config import load_config, validate_config
from hugopages.pipeline import DeployPipeline, PipelineResult
from hugopages.utils.logger import console as rich_console
from hugopages.utils.logger import get_logger

logger = get_logger("hugopages.cli")


@click.group()
@click.version_option(version=__version__, prog_name="hugopages")
def main():
    """Deploy de un sitio Hugo a la rama gh-pages."""
    pass


@main.command()
@click.option(
    "--config", "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Ruta a deploy.yaml (por defecto se busca hacia arriba)",
)
@click.option(
    "--dry-run",
    is_flag=True,
    default=False,
    help="Genera y commitea en local, NO hace push",
)
def deploy(config_path: Path | None, dry_run: bool):
    """Descarga Hugo, genera el sitio y lo publica en gh-pages."""
    try:
        cfg = load_config(config_path)
        pipeline = DeployPipeline(cfg)
    except (ValueError, OSError) as e:
        logger.error(str(e))
        sys.exit(1)

    result = pipeline.run(dry_run=dry_run)
    _show_summary(result)

    if not result.success:
        sys.exit(1)


@main.command()
@click.option("--show", is_flag=True, help="Muestra la configuración actual")
@click.option("--validate", is_flag=True, help="Valida la configuración")
@click.option(
    "--config", "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Ruta a deploy.yaml",
)
def config(show: bool, validate: bool, config_path: Path | None):
    """Muestra o valida la configuración del deploy."""
    try:
        cfg = load_config(config_path)
    except (ValueError, OSError) as e:
        logger.error(str(e))
        sys.exit(1)

    if show:
        datos = cfg.masked()
        tabla = Table(title="Configuración del deploy")
        tabla.add_column("Parámetro", style="cyan")
        tabla.add_column("Valor", style="green")

        tabla.add_row("Workdir", datos["workdir"])
        tabla.add_row("Hugo", f"{cfg.hugo.version} ({cfg.hugo.layout})")
        tabla.add_row("Salida", cfg.hugo.output_dir)
        tabla.add_row("ghp-import", cfg.importer.ref)
        tabla.add_row("Rama", cfg.publish.branch)
        tabla.add_row("Repo", cfg.repo_slug or "(no configurado)")
        tabla.add_row("Token", "Configurado" if cfg.token else "Falta")

        rich_console.print(tabla)

    if validate:
        problemas = validate_config(cfg)
        if problemas:
            for p in problemas:
                logger.error(p)
            sys.exit(1)
        logger.success("Configuración válida")


def _show_summary(result: PipelineResult) -> None:
    """Muestra qué pasos corrieron y cuál falló."""
    lineas = []
    for r in result.results:
        marca = "[green]ok[/green]" if r.success else "[red]falló[/red]"
        lineas.append(f"{r.name}: {marca}")

    fallido = result.failed_step
    if fallido is not None:
        titulo, borde = f"Deploy fallido en {fallido.name}", "red"
    elif result.dry_run:
        titulo, borde = "Dry-run completo", "yellow"
    else:
        titulo, borde = "Deploy completo", "green"

    rich_console.print(Panel("\n".join(lineas), title=titulo, border_style=borde))


if __name__ == "__main__":
    main()
