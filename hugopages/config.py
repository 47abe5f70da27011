"""
config.py — Carga y valida la configuración del deploy.

Todo lo que el pipeline necesita se resuelve UNA vez aquí y se pasa
explícitamente al DeployPipeline. Ningún otro módulo lee os.environ.

Fuentes (en orden):
1. .env (secretos locales, nunca se suben a Git)
2. deploy.yaml (versiones, rutas, rama destino)
3. Variables de entorno del CI: GH_TOKEN y TRAVIS_REPO_SLUG
   (o GITHUB_TOKEN y GITHUB_REPOSITORY en GitHub Actions)

Ejemplo de deploy.yaml:

    workdir: .
    hugo:
      version: "0.52"
      layout: root
    importer:
      ref: "2.1.0"
    publish:
      branch: gh-pages

Uso:
    from hugopages.config import load_config, validate_config
    config = load_config()
    problemas = validate_config(config)
"""

from __future__ import annotations

import os
import re
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv


CONFIG_FILENAME = "deploy.yaml"

TOKEN_ENV_VARS = ("GH_TOKEN", "GITHUB_TOKEN")
SLUG_ENV_VARS = ("TRAVIS_REPO_SLUG", "GITHUB_REPOSITORY")

LAYOUTS = ("root", "qualified")

_VERSION_RE = re.compile(r"^\d+\.\d+(\.\d+)?$")
_SLUG_RE = re.compile(r"^[\w.-]+/[\w.-]+$")


# ============================================================
# Dataclasses de configuración
# ============================================================

@dataclass
class HugoConfig:
    """Versión y empaquetado del binario de Hugo."""
    version: str = "0.52"
    # "root": el binario va en la raíz del tarball (hugo)
    # "qualified": va en hugo_<ver>_linux_amd64/hugo_<ver>_linux_amd64
    layout: str = "root"
    url_template: str = ""
    args: list[str] = field(default_factory=list)
    output_dir: str = "public"


@dataclass
class ImporterConfig:
    """De dónde sale ghp-import y qué versión usar."""
    url_template: str = "https://github.com/c-w/ghp-import/archive/{ref}.tar.gz"
    ref: str = "2.1.0"
    directory: str = "ghp-import"
    script: str = "ghp_import.py"


@dataclass
class PublishConfig:
    """Rama destino y forma del remoto."""
    branch: str = "gh-pages"
    host: str = "github.com"
    remote_template: str = "https://{token}@{host}/{slug}.git"
    success_marker: str = "OK"


@dataclass
class DownloadConfig:
    """Parámetros HTTP de las descargas."""
    timeout: float = 60.0
    user_agent: str = "hugopages/1.0"


@dataclass
class AppConfig:
    """Configuración completa del deploy."""
    workdir: str = "."
    hugo: HugoConfig = field(default_factory=HugoConfig)
    importer: ImporterConfig = field(default_factory=ImporterConfig)
    publish: PublishConfig = field(default_factory=PublishConfig)
    download: DownloadConfig = field(default_factory=DownloadConfig)

    # Valores del entorno (no están en deploy.yaml)
    token: str = ""
    repo_slug: str = ""

    @property
    def workdir_path(self) -> Path:
        return Path(self.workdir)

    def masked(self) -> dict[str, Any]:
        """Vista de la config en dict con el token enmascarado."""
        data = asdict(self)
        data["token"] = "***" if self.token else ""
        return data


# ============================================================
# Funciones de carga
# ============================================================

def _resolve_env_vars(value: str) -> str:
    """
    Resuelve ${VARIABLE} con el valor del entorno.

    Si la variable no existe se deja el placeholder tal cual.
    """
    patron = re.compile(r"\$\{(\w+)\}")

    def reemplazar(match: re.Match) -> str:
        return os.environ.get(match.group(1), match.group(0))

    return patron.sub(reemplazar, value)


def _resolve_env_recursive(data: Any) -> Any:
    """Resuelve ${VARIABLE} recursivamente en dicts y listas del YAML."""
    if isinstance(data, str):
        return _resolve_env_vars(data)
    elif isinstance(data, dict):
        return {k: _resolve_env_recursive(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [_resolve_env_recursive(item) for item in data]
    return data


def _dict_to_dataclass(data: dict, cls: type) -> Any:
    """Convierte un dict a dataclass ignorando keys desconocidas."""
    campos_validos = {f.name for f in cls.__dataclass_fields__.values()}
    datos_filtrados = {k: v for k, v in data.items() if k in campos_validos}
    return cls(**datos_filtrados)


def _find_config_dir() -> Path:
    """Busca deploy.yaml hacia arriba desde el directorio actual."""
    current = Path.cwd()
    for parent in [current] + list(current.parents):
        if (parent / CONFIG_FILENAME).exists():
            return parent
    return current


def _first_env(names: tuple[str, ...]) -> str:
    for name in names:
        value = os.environ.get(name, "").strip()
        if value:
            return value
    return ""


def load_config(config_path: Path | None = None) -> AppConfig:
    """
    Carga la configuración completa del deploy.

    Pasos:
    1. Carga .env (si existe) sin pisar variables ya definidas
    2. Lee deploy.yaml y resuelve ${VARIABLES}
    3. Convierte cada sección a su dataclass
    4. Agrega token y slug del entorno

    Args:
        config_path: Ruta al deploy.yaml. Si es None, busca automáticamente.

    Returns:
        AppConfig listo para pasarse al pipeline.

    Raises:
        ValueError: Si el YAML es inválido o no es un mapping.
    """
    proyecto_dir = _find_config_dir()
    env_path = proyecto_dir / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    if config_path is None:
        config_path = proyecto_dir / CONFIG_FILENAME

    raw_config: Any = {}
    if config_path.exists():
        with open(config_path, "r", encoding="utf-8") as f:
            try:
                raw_config = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"{config_path}: YAML inválido: {e}") from e

    if not isinstance(raw_config, dict):
        raise ValueError(f"{config_path}: se esperaba un mapping YAML")

    datos = _resolve_env_recursive(raw_config)

    app_config = AppConfig(
        workdir=str(datos.get("workdir", ".")),
        hugo=_dict_to_dataclass(datos.get("hugo") or {}, HugoConfig),
        importer=_dict_to_dataclass(datos.get("importer") or {}, ImporterConfig),
        publish=_dict_to_dataclass(datos.get("publish") or {}, PublishConfig),
        download=_dict_to_dataclass(datos.get("download") or {}, DownloadConfig),
    )

    # YAML lee 0.52 como float si no va entre comillas
    app_config.hugo.version = str(app_config.hugo.version)
    app_config.importer.ref = str(app_config.importer.ref)

    app_config.token = _first_env(TOKEN_ENV_VARS)
    app_config.repo_slug = _first_env(SLUG_ENV_VARS)

    return app_config


def validate_config(config: AppConfig) -> list[str]:
    """
    Valida la configuración antes de cualquier llamada de red.

    Returns:
        Lista de problemas. Vacía si todo está bien.
    """
    problemas = []

    if not config.token:
        problemas.append(
            f"Falta el token: define {' o '.join(TOKEN_ENV_VARS)}"
        )
    if not config.repo_slug:
        problemas.append(
            f"Falta el repositorio: define {' o '.join(SLUG_ENV_VARS)}"
        )
    elif not _SLUG_RE.match(config.repo_slug):
        problemas.append(
            f"Slug inválido '{config.repo_slug}': se esperaba owner/repo"
        )

    if not _VERSION_RE.match(config.hugo.version):
        problemas.append(f"Versión de Hugo inválida: '{config.hugo.version}'")
    if config.hugo.layout not in LAYOUTS:
        problemas.append(
            f"Layout desconocido '{config.hugo.layout}' "
            f"(opciones: {', '.join(LAYOUTS)})"
        )
    if not config.hugo.output_dir:
        problemas.append("hugo.output_dir no puede estar vacío")

    if not config.importer.ref.strip():
        problemas.append("importer.ref debe fijar una versión de ghp-import")
    if "{ref}" not in config.importer.url_template:
        problemas.append("importer.url_template debe contener {ref}")

    if not config.publish.branch:
        problemas.append("publish.branch no puede estar vacío")
    if "{slug}" not in config.publish.remote_template:
        problemas.append("publish.remote_template debe contener {slug}")

    if config.download.timeout <= 0:
        problemas.append("download.timeout debe ser positivo")

    return problemas
