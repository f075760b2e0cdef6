"""命令行端到端测试: 真实 bash 构建脚本 + 临时目录"""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest
import yaml
from click.testing import CliRunner

from pkgstore import __version__
from pkgstore.cli import main
from pkgstore.core import config as config_mod
from pkgstore.utils.logger import reset_logging

DB = textwrap.dedent("""\
    # 测试数据库
    [lib@1.0]
    build = mkdir -p "$PACKAGE_DIR/lib"
            echo lib > "$PACKAGE_DIR/lib/VERSION"

    [app@2.0]
    depends = lib
    build = mkdir -p "$PACKAGE_DIR/bin"
            echo app > "$PACKAGE_DIR/bin/app"

    [bad@1]
    build = echo broken >&2
            false
""")


@pytest.fixture(autouse=True)
def _isolate(monkeypatch: pytest.MonkeyPatch):
    for var in ("STORE_DB_FILE", "STORE_PACKAGES_DIR", "STORE_TMP_DIR",
                "STORE_LOG_LEVEL", "STORE_LOG_JSON"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr(config_mod, "_current", None)
    yield
    reset_logging()


class _Store:
    """一个临时包仓库: 数据库 + 安装目录 + 工作目录"""

    def __init__(self, root: Path, db: str = DB) -> None:
        self.root = root
        self.db_file = root / "db.ini"
        self.db_file.write_text(db, encoding="utf-8")
        self.packages_dir = root / "store"
        self.tmp_dir = root / "work"

    def invoke(self, *args: str):
        return CliRunner().invoke(main, [
            "--config", str(self.root / "none.yml"),
            "--db-file", str(self.db_file),
            "--packages-dir", str(self.packages_dir),
            "--tmp-dir", str(self.tmp_dir),
            *args,
        ])


class TestGlobal:
    def test_version(self) -> None:
        result = CliRunner().invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help_lists_commands(self) -> None:
        result = CliRunner().invoke(main, ["--help"])
        assert result.exit_code == 0
        for name in ("install", "reinstall", "uninstall", "info", "deps"):
            assert name in result.output

    def test_usage_error(self, tmp_path: Path) -> None:
        result = _Store(tmp_path).invoke("install")
        assert result.exit_code == 2


class TestInstall:
    def test_install_with_dependency(self, tmp_path: Path) -> None:
        store = _Store(tmp_path)
        result = store.invoke("install", "app")
        assert result.exit_code == 0, result.output
        assert (store.packages_dir / "lib@1.0" / "lib" / "VERSION").read_text() == "lib\n"
        assert (store.packages_dir / "app@2.0" / "bin" / "app").read_text() == "app\n"
        assert result.output.index("Package lib@1.0 has been installed") < \
            result.output.index("Package app@2.0 has been installed")

    def test_install_twice(self, tmp_path: Path) -> None:
        store = _Store(tmp_path)
        store.invoke("install", "lib")
        result = store.invoke("install", "lib@1.0")
        assert result.exit_code == 0
        assert "Package lib@1.0 is already installed" in result.output

    def test_not_defined(self, tmp_path: Path) -> None:
        result = _Store(tmp_path).invoke("install", "nope")
        assert result.exit_code == 5
        assert "Package nope is not defined" in result.output

    def test_build_failure_rolls_back(self, tmp_path: Path) -> None:
        store = _Store(tmp_path)
        result = store.invoke("install", "bad")
        assert result.exit_code == 8
        assert "Installation of bad@1 failed" in result.output
        assert "broken" in result.output
        assert not (store.packages_dir / "bad@1").exists()

    def test_reinstall_and_uninstall(self, tmp_path: Path) -> None:
        store = _Store(tmp_path)
        store.invoke("install", "lib")
        extra = store.packages_dir / "lib@1.0" / "extra"
        extra.write_text("x")

        result = store.invoke("reinstall", "lib")
        assert result.exit_code == 0
        assert not extra.exists()
        assert (store.packages_dir / "lib@1.0" / "lib" / "VERSION").is_file()

        result = store.invoke("uninstall", "lib")
        assert result.exit_code == 0
        assert "has been deleted" in result.output
        assert not (store.packages_dir / "lib@1.0").exists()


class TestDatabaseErrors:
    def test_missing_database(self, tmp_path: Path) -> None:
        store = _Store(tmp_path)
        store.db_file.unlink()
        result = store.invoke("install", "lib")
        assert result.exit_code == 3
        assert "does not exist" in result.output

    def test_parse_error_location(self, tmp_path: Path) -> None:
        store = _Store(tmp_path, db="[a@1]\nbuild = x\n[a@1]\nbuild = y\n")
        result = store.invoke("info")
        assert result.exit_code == 4
        assert f"Parsing Error at {store.db_file}:3:1" in result.output
        assert "Package [a@1] has already been defined" in result.output

    def test_dependency_error(self, tmp_path: Path) -> None:
        store = _Store(tmp_path, db="[a@1]\ndepends = ghost\nbuild = true\n")
        result = store.invoke("install", "a")
        assert result.exit_code == 4
        assert "Package dependency ghost cannot be found" in result.output
        assert not (store.packages_dir / "a@1").exists()


class TestInfo:
    def test_listing(self, tmp_path: Path) -> None:
        store = _Store(tmp_path)
        store.invoke("install", "lib")
        (store.packages_dir / "gone@0.1").mkdir()

        result = store.invoke("info")
        assert result.exit_code == 0
        lines = [line.split() for line in result.output.splitlines()]
        assert ["Name", "Version", "Size"] in lines
        assert ["app", "2.0", "-"] in lines
        assert ["bad", "1", "-"] in lines
        assert ["lib", "1.0", "4", "B"] in lines
        assert ["gone", "0.1", "0", "B", "(obsolete)"] in lines

    def test_deps(self, tmp_path: Path) -> None:
        result = _Store(tmp_path).invoke("deps")
        assert result.exit_code == 0
        assert "app@2.0 -> lib@1.0" in result.output


class TestConfiguration:
    def test_env_and_config_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        store = _Store(tmp_path)
        config_file = tmp_path / "pkgstore.yml"
        config_file.write_text(yaml.dump({
            "packages_dir": str(tmp_path / "from-file"),
            "tmp_dir": str(tmp_path / "work"),
        }))
        monkeypatch.setenv("STORE_DB_FILE", str(store.db_file))

        result = CliRunner().invoke(main, ["--config", str(config_file), "install", "lib"])
        assert result.exit_code == 0, result.output
        assert (tmp_path / "from-file" / "lib@1.0" / "lib" / "VERSION").is_file()

    def test_malformed_config_file(self, tmp_path: Path) -> None:
        config_file = tmp_path / "pkgstore.yml"
        config_file.write_text("packages_dir: [unclosed\n")
        result = CliRunner().invoke(main, ["--config", str(config_file), "info"])
        assert result.exit_code == 3
        assert "Can not load config file" in result.output
