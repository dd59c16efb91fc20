"""
    Compile a grammar source tree into a shared library and place it where the
    host looks for it.
"""
import json
import logging
import os
import subprocess
from pathlib import Path
from typing import List, Optional, Tuple, Union

import requests

from . import settings
from .errors import BuildError, ConfigError, FetchError

LOGGER = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


def artifact_name(grammar_name: str) -> str:
    return f"lib{settings.LIBRARY_PREFIX}-{grammar_name}{settings.shared_library_suffix()}"


def read_grammar_name(workdir: Path) -> str:
    """
    Reads the declared grammar name from ``grammar.json``.

    Parameters
    ----------
    workdir : Path
        The ``src`` directory of a grammar source tree.

    Returns
    -------
    str
        The ``name`` field of the grammar.

    Raises
    ------
    ConfigError
        If the file is absent, is not JSON or has no string ``name``.
    """
    grammar_json = workdir / "grammar.json"
    try:
        with open(grammar_json, "r", encoding="utf-8") as f:
            grammar = json.load(f)
    except FileNotFoundError:
        raise ConfigError("grammar.json not found", grammar_json) from None
    except (ValueError, OSError) as e:
        raise ConfigError(f"unreadable grammar.json ({e})", grammar_json) from e

    name = grammar.get("name") if isinstance(grammar, dict) else None
    if not isinstance(name, str) or not name:
        raise ConfigError("grammar.json declares no name", grammar_json)
    return name


def fetch_auxiliary_files(workdir: Path) -> List[Path]:
    """
    Downloads the pinned auxiliary sources into ``workdir``, skipping every
    file that is already there. Returns the files that were written.
    """
    written = []
    for relative, url in settings.AUXILIARY_FILES.items():
        target = workdir / relative
        if target.exists():
            continue
        LOGGER.info("Downloading %s", url)
        try:
            response = requests.get(url, timeout=settings.DOWNLOAD_TIMEOUT)
            response.raise_for_status()
        except requests.RequestException as e:
            raise FetchError(str(e), url) from e
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(response.content)
        written.append(target)
    return written


def select_compiler(workdir: Path) -> Tuple[str, Optional[str]]:
    """
    Picks the compiler and the scanner source to build with.

    A C++ scanner wins over a C one; a grammar with no scanner is compiled
    from ``parser.c`` alone with the C compiler.

    Returns
    -------
    Tuple[str, Optional[str]]
        The compiler executable and the scanner file name, or None.
    """
    if (workdir / "scanner.cc").exists():
        return settings.cxx_compiler(), "scanner.cc"
    if (workdir / "scanner.c").exists():
        return settings.c_compiler(), "scanner.c"
    return settings.c_compiler(), None


def compile_command(compiler: str, output: Path, scanner: Optional[str]) -> List[str]:
    command = [compiler, "parser.c", "-I.", "--shared", "-fPIC", "-o", str(output)]
    if scanner is not None:
        command.append(scanner)
    return command


def compile_grammar(source_path: Optional[PathLike] = None,
                    destination: Optional[PathLike] = None) -> Path:
    """
    Builds the grammar found at ``source_path`` into ``destination``.

    The library is linked to a temporary name next to its final one and then
    renamed over it, so a previously built artifact is replaced in one step.

    Parameters
    ----------
    source_path : str or PathLike, optional
        Root of the grammar source tree, by default the current directory.
        Relative paths are taken from the current directory.
    destination : str or PathLike, optional
        Directory receiving the library, by default ``settings.destination_dir()``.
        Created with its parents when missing.

    Returns
    -------
    Path
        The path of the compiled artifact.

    Raises
    ------
    ConfigError
        If ``grammar.json`` is missing or malformed.
    FetchError
        If an auxiliary file cannot be downloaded.
    BuildError
        If the compiler cannot be run or exits with a non-zero status.
    """
    destination = Path(destination if destination is not None else settings.destination_dir())
    destination = destination.expanduser().resolve()
    destination.mkdir(parents=True, exist_ok=True)

    source = Path(source_path if source_path is not None else os.getcwd()).expanduser().resolve()
    workdir = source / "src"

    grammar_name = read_grammar_name(workdir)
    fetch_auxiliary_files(workdir)
    compiler, scanner = select_compiler(workdir)

    artifact = destination / artifact_name(grammar_name)
    partial = artifact.with_name(f".{artifact.name}.{os.getpid()}.tmp")
    command = compile_command(compiler, partial, scanner)
    LOGGER.info("Compiling %s grammar in %s", grammar_name, workdir)
    LOGGER.debug("Running %s", " ".join(command))
    try:
        result = subprocess.run(command, cwd=workdir, stdout=subprocess.PIPE,
                                stderr=subprocess.STDOUT, text=True)
    except OSError as e:
        raise BuildError(f"could not run {compiler}: {e}") from e

    output = result.stdout or ""
    if output:
        LOGGER.debug("%s output:\n%s", compiler, output)
    if result.returncode != 0:
        if partial.exists():
            partial.unlink()
        raise BuildError(output or f"{compiler} exited with status {result.returncode}", output)

    os.replace(partial, artifact)
    LOGGER.info("Installed %s", artifact)
    return artifact
