"""
    Load compiled grammars into the tree-sitter bindings and create parsers
    with them. ``language_ready`` is the plain readiness check of the host.
"""
import ctypes
import logging
from pathlib import Path
from typing import Optional

from tree_sitter import Language, Parser

from . import settings
from .compiler import PathLike, artifact_name
from .errors import LanguageNotReady

LOGGER = logging.getLogger(__name__)

# name the tree-sitter bindings expect on a language capsule
CAPSULE_NAME = b"tree_sitter.Language"

_capsule_new = ctypes.pythonapi.PyCapsule_New
_capsule_new.restype = ctypes.py_object
_capsule_new.argtypes = (ctypes.c_void_p, ctypes.c_char_p, ctypes.c_void_p)


def artifact_path(language: str, destination: Optional[PathLike] = None) -> Path:
    directory = Path(destination) if destination is not None else settings.destination_dir()
    return directory / artifact_name(language)


def load_language(language: str, destination: Optional[PathLike] = None) -> Language:
    """
    Loads the compiled grammar of ``language``.

    Parameters
    ----------
    language : str
        The language identifier, which is also the grammar name.
    destination : str or PathLike, optional
        Directory holding the artifacts, by default ``settings.destination_dir()``.

    Returns
    -------
    Language
        The tree-sitter language.

    Raises
    ------
    LanguageNotReady
        If the library is missing, cannot be loaded or does not export
        ``tree_sitter_<language>``.
    """
    path = artifact_path(language, destination)
    if not path.exists():
        raise LanguageNotReady(language, f"not-found: {path}")
    try:
        library = ctypes.cdll.LoadLibrary(str(path))
    except OSError as e:
        raise LanguageNotReady(language, f"load-failed: {e}") from e
    try:
        entry_point = getattr(library, f"tree_sitter_{language}")
    except AttributeError:
        raise LanguageNotReady(language, f"symbol-error: no tree_sitter_{language} in {path}") from None
    entry_point.restype = ctypes.c_void_p
    try:
        return Language(_capsule_new(entry_point(), CAPSULE_NAME, None))
    except ValueError as e:
        # incompatible ABI version
        raise LanguageNotReady(language, f"version-mismatch: {e}") from e


def language_ready(language: str, quiet: bool = False,
                   destination: Optional[PathLike] = None) -> bool:
    try:
        load_language(language, destination)
    except LanguageNotReady as e:
        if not quiet:
            LOGGER.warning("Cannot activate tree-sitter, because language grammar for %s is unavailable (%s)",
                           language, e.reason)
        return False
    return True


def create_parser(language: str, destination: Optional[PathLike] = None) -> Parser:
    """
    Create a parser with the compiled grammar of ``language`` set.
    """
    return Parser(load_language(language, destination))
