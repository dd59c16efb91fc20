"""
    Locations, tool names and pinned URLs used while ensuring grammars.

    Values that depend on the environment are functions so that they are
    resolved at call time, not at import time.
"""
import os
import sysconfig
from pathlib import Path
from typing import Dict

# prefix of every compiled artifact: lib<prefix>-<grammar name><suffix>
LIBRARY_PREFIX = "tree-sitter"
# default repository locator is <organization>/<repository prefix>-<language>
DEFAULT_ORGANIZATION = "tree-sitter"
REPOSITORY_PREFIX = "tree-sitter"
GIT_HOST = "https://github.com"

# runtime headers that newer scanners include but older grammar repos lack
AUXILIARY_FILES_VERSION = "v0.22.6"
AUXILIARY_FILES: Dict[str, str] = {
    "tree_sitter/alloc.h":
        f"https://raw.githubusercontent.com/tree-sitter/tree-sitter/{AUXILIARY_FILES_VERSION}"
        "/cli/src/generate/templates/alloc.h",
    "tree_sitter/array.h":
        f"https://raw.githubusercontent.com/tree-sitter/tree-sitter/{AUXILIARY_FILES_VERSION}"
        "/cli/src/generate/templates/array.h",
}
# seconds
DOWNLOAD_TIMEOUT = 30


def data_dir() -> Path:
    override = os.environ.get("TREESIT_ENSURE_DATA_DIR")
    if override:
        return Path(override).expanduser()
    xdg_data_home = os.environ.get("XDG_DATA_HOME")
    base = Path(xdg_data_home) if xdg_data_home else Path.home() / ".local" / "share"
    return base / "treesit-ensure"


def destination_dir() -> Path:
    """
    Directory searched by the host for compiled grammars.

    Returns
    -------
    Path
        ``TREESIT_ENSURE_DEST_DIR`` when set, else ``<data_dir>/tree-sitter``.
    """
    override = os.environ.get("TREESIT_ENSURE_DEST_DIR")
    if override:
        return Path(override).expanduser()
    return data_dir() / "tree-sitter"


def sources_dir() -> Path:
    return data_dir() / "sources"


def build_record_path() -> Path:
    return data_dir() / "builds.json"


def c_compiler() -> str:
    return os.environ.get("CC") or "cc"


def cxx_compiler() -> str:
    return os.environ.get("CXX") or "c++"


def shared_library_suffix() -> str:
    # platform provided, e.g. ".so"
    return sysconfig.get_config_var("SHLIB_SUFFIX") or ".so"
