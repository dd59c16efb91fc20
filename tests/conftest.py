"""Shared fixtures: grammar source trees and a fake git/compiler toolchain."""

import json
import subprocess
from pathlib import Path
from typing import Callable, Dict, List, Optional

import pytest
import requests

from treesit_ensure import compiler, settings

BROKEN_MARKER = "/* broken */"
COMPILER_ERROR = "parser.c:3:1: error: expected ';' before '}' token"


def make_grammar(
    root: Path,
    name: str,
    scanner: Optional[str] = None,
    broken: bool = False,
    with_auxiliary: bool = True,
) -> Path:
    """Create a grammar source tree under ``root`` and return ``root``."""
    src = root / "src"
    src.mkdir(parents=True, exist_ok=True)
    (src / "grammar.json").write_text(json.dumps({"name": name, "rules": {}}))
    parser = "int x = 1;\n"
    if broken:
        parser += BROKEN_MARKER + "\nint y = }\n"
    (src / "parser.c").write_text(parser)
    if scanner is not None:
        (src / scanner).write_text("/* scanner */\n")
    if with_auxiliary:
        for relative in settings.AUXILIARY_FILES:
            target = src / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text("/* header */\n")
    return root


class FakeToolchain:
    """Stands in for ``subprocess.run`` when git or a compiler is invoked."""

    def __init__(self):
        self.compiles: List[Dict] = []
        self.git: List[List[str]] = []
        self.repositories: Dict[str, Callable[[Path], None]] = {}
        self.git_error: Optional[str] = None

    def add_repository(self, url: str, populate: Callable[[Path], None]) -> None:
        self.repositories[url] = populate

    def __call__(self, command, cwd=None, check=False, stdout=None, stderr=None, text=None):
        if command[0] == "git":
            return self._git(list(command), cwd, check)
        return self._compile(list(command), cwd)

    def _git(self, command, cwd, check):
        self.git.append(command)
        if self.git_error is not None:
            raise subprocess.CalledProcessError(128, command, output="", stderr=self.git_error)
        if command[1] == "clone":
            url, target = command[-2], Path(command[-1])
            if url not in self.repositories:
                raise subprocess.CalledProcessError(
                    128, command, output="",
                    stderr=f"fatal: repository '{url}' not found\n",
                )
            target.mkdir(parents=True)
            (target / ".git").mkdir()
            self.repositories[url](target)
        return subprocess.CompletedProcess(command, 0, stdout="", stderr="")

    def _compile(self, command, cwd):
        workdir = Path(cwd)
        self.compiles.append({"command": command, "cwd": workdir})
        if BROKEN_MARKER in (workdir / "parser.c").read_text():
            return subprocess.CompletedProcess(command, 1, stdout=COMPILER_ERROR + "\n")
        output = Path(command[command.index("-o") + 1])
        output.write_bytes(b"fake library " + " ".join(command).encode())
        return subprocess.CompletedProcess(command, 0, stdout="")


class FakeResponse:
    def __init__(self, content: bytes, status_code: int = 200):
        self.content = content
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Client Error: Not Found")


@pytest.fixture(autouse=True)
def data_dir(tmp_path, monkeypatch):
    """Point every settings path at a per-test directory."""
    path = tmp_path / "data"
    monkeypatch.setenv("TREESIT_ENSURE_DATA_DIR", str(path))
    monkeypatch.delenv("TREESIT_ENSURE_DEST_DIR", raising=False)
    monkeypatch.delenv("CC", raising=False)
    monkeypatch.delenv("CXX", raising=False)
    return path


@pytest.fixture(autouse=True)
def downloads(monkeypatch):
    """Serve auxiliary file downloads from memory and record the URLs."""
    requested: List[str] = []

    def fake_get(url, timeout=None):
        requested.append(url)
        return FakeResponse(b"/* downloaded */\n")

    monkeypatch.setattr(compiler.requests, "get", fake_get)
    return requested


@pytest.fixture
def toolchain(monkeypatch):
    fake = FakeToolchain()
    monkeypatch.setattr(subprocess, "run", fake)
    return fake


@pytest.fixture
def destination(tmp_path):
    return tmp_path / "dest"


@pytest.fixture
def artifact_exists(destination):
    """Readiness check that only looks for the artifact file."""

    def ready(language, quiet=False):
        return (destination / compiler.artifact_name(language)).exists()

    return ready
