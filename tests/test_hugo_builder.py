"""
test_hugo_builder.py — Tests para la descarga y ejecución de Hugo.

Verificamos que:
1. La URL y el miembro dependen de la misma versión
2. Los dos layouts extraen el binario donde corresponde
3. run() detecta exit code != 0 y salida vacía
"""

from __future__ import annotations

import io
import os
import tarfile
from unittest.mock import MagicMock, patch

import pytest

from hugopages.building.hugo import ArchiveLayout, HugoBuilder
from hugopages.config import AppConfig, HugoConfig
from hugopages.errors import BuildError, FetchError


FAKE_HUGO = """#!/bin/sh
mkdir -p public
echo '<h1>hola</h1>' > public/index.html
echo "Total in 12 ms"
"""


def _config(tmp_path, **hugo) -> AppConfig:
    return AppConfig(
        workdir=str(tmp_path),
        hugo=HugoConfig(**hugo),
        token="s3cr3t",
        repo_slug="owner/site",
    )


def _tarball(member: str, data: bytes) -> bytes:
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tar:
        for name, content in ((member, data), ("LICENSE.md", b"Apache")):
            info = tarfile.TarInfo(name)
            info.size = len(content)
            info.mode = 0o644
            tar.addfile(info, io.BytesIO(content))
    return buf.getvalue()


def _response(body: bytes) -> MagicMock:
    resp = MagicMock()
    resp.status_code = 200
    resp.iter_content.return_value = [body]
    return resp


def _install_script(path, script: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(script, encoding="utf-8")
    path.chmod(0o755)


class TestArchiveLayout:
    """Tests para los dos layouts del tarball de Hugo."""

    def test_root(self):
        """Layout root: binario hugo en la raíz."""
        assert ArchiveLayout.ROOT.member("0.52") == "hugo"
        assert ArchiveLayout.ROOT.asset("0.52") == "hugo_0.52_Linux-64bit.tar.gz"

    def test_qualified(self):
        """Layout qualified: binario dentro de su directorio."""
        layout = ArchiveLayout.QUALIFIED
        assert layout.member("0.52") == "hugo_0.52_linux_amd64/hugo_0.52_linux_amd64"
        assert layout.asset("0.52") == "hugo_0.52_linux_amd64.tar.gz"


class TestHugoBuilderUrls:
    """Tests para la URL de descarga."""

    def test_url_root(self, tmp_path):
        """URL de la release de GitHub para el layout root."""
        builder = HugoBuilder(_config(tmp_path))
        assert builder.download_url == (
            "https://github.com/gohugoio/hugo/releases/download/"
            "v0.52/hugo_0.52_Linux-64bit.tar.gz"
        )

    def test_version_consistente(self, tmp_path):
        """La misma versión va en la URL y en la ruta del binario."""
        builder = HugoBuilder(_config(tmp_path, version="0.48", layout="qualified"))
        assert "v0.48/" in builder.download_url
        assert builder.download_url.endswith("hugo_0.48_linux_amd64.tar.gz")
        assert builder.member == "hugo_0.48_linux_amd64/hugo_0.48_linux_amd64"

    def test_url_template_custom(self, tmp_path):
        """url_template permite usar un mirror."""
        builder = HugoBuilder(_config(
            tmp_path, url_template="https://mirror.local/{version}/{asset}"
        ))
        assert builder.download_url == "https://mirror.local/0.52/hugo_0.52_Linux-64bit.tar.gz"


class TestHugoBuilderFetch:
    """Tests para fetch() con requests.get simulado."""

    @patch("hugopages.fetching.archive.requests.get")
    def test_layout_root_extrae_hugo(self, mock_get, tmp_path):
        """Debe extraer solo hugo y dejarlo ejecutable."""
        mock_get.return_value = _response(_tarball("hugo", b"\x7fELF"))

        binary = HugoBuilder(_config(tmp_path)).fetch()

        assert binary == tmp_path / "hugo"
        assert binary.read_bytes() == b"\x7fELF"
        assert os.access(binary, os.X_OK)
        assert not (tmp_path / "LICENSE.md").exists()

    @patch("hugopages.fetching.archive.requests.get")
    def test_layout_qualified_extrae_subdirectorio(self, mock_get, tmp_path):
        """Debe extraer el binario dentro de su directorio."""
        member = "hugo_0.52_linux_amd64/hugo_0.52_linux_amd64"
        mock_get.return_value = _response(_tarball(member, b"\x7fELF"))

        binary = HugoBuilder(_config(tmp_path, layout="qualified")).fetch()

        assert binary == tmp_path / member
        assert os.access(binary, os.X_OK)

    @patch("hugopages.fetching.archive.requests.get")
    def test_layout_equivocado_falla(self, mock_get, tmp_path):
        """Si el layout no coincide con el tarball debe fallar."""
        mock_get.return_value = _response(_tarball("hugo", b"\x7fELF"))

        with pytest.raises(FetchError):
            HugoBuilder(_config(tmp_path, layout="qualified")).fetch()


class TestHugoBuilderRun:
    """Tests para run() con un hugo falso en sh."""

    def test_genera_public(self, tmp_path):
        """Debe correr hugo y retornar public/."""
        _install_script(tmp_path / "hugo", FAKE_HUGO)

        output = HugoBuilder(_config(tmp_path)).run()

        assert output == tmp_path / "public"
        assert (output / "index.html").exists()

    def test_binario_qualified(self, tmp_path):
        """Debe correr el binario del layout qualified."""
        _install_script(
            tmp_path / "hugo_0.52_linux_amd64" / "hugo_0.52_linux_amd64", FAKE_HUGO
        )
        output = HugoBuilder(_config(tmp_path, layout="qualified")).run()
        assert any(output.iterdir())

    def test_pasa_args_configurados(self, tmp_path):
        """Los args de la config llegan a hugo."""
        script = '#!/bin/sh\nmkdir -p public\necho "$@" > public/args.txt\n'
        _install_script(tmp_path / "hugo", script)

        HugoBuilder(_config(tmp_path, args=["--minify"])).run()

        assert (tmp_path / "public" / "args.txt").read_text().strip() == "--minify"

    def test_exit_code_distinto_de_cero(self, tmp_path):
        """Si hugo falla debe lanzar BuildError con el código."""
        _install_script(tmp_path / "hugo", "#!/bin/sh\necho 'Error: boom' >&2\nexit 3\n")

        with pytest.raises(BuildError, match="código 3"):
            HugoBuilder(_config(tmp_path)).run()

    def test_no_genera_public(self, tmp_path):
        """Si hugo no genera public/ debe fallar."""
        _install_script(tmp_path / "hugo", "#!/bin/sh\nexit 0\n")

        with pytest.raises(BuildError, match="no generó"):
            HugoBuilder(_config(tmp_path)).run()

    def test_public_vacio(self, tmp_path):
        """Un public/ vacío no se publica."""
        _install_script(tmp_path / "hugo", "#!/bin/sh\nmkdir -p public\n")

        with pytest.raises(BuildError, match="vacío"):
            HugoBuilder(_config(tmp_path)).run()

    def test_sin_binario(self, tmp_path):
        """Sin binario descargado debe fallar."""
        with pytest.raises(BuildError, match="No existe"):
            HugoBuilder(_config(tmp_path)).run()
