"""
    Readiness check that builds a missing grammar before giving up on it.
"""
import logging
from typing import Optional

from .compiler import PathLike
from .fetcher import GitFetcher, ReadinessPredicate, ensure_fetched
from .registry import EnsureRegistry, FetchStrategy, RegistryEntry, default_registry

LOGGER = logging.getLogger(__name__)


def ensure_language(language: str,
                    entry: RegistryEntry,
                    ready: ReadinessPredicate,
                    fetcher: Optional[GitFetcher] = None,
                    destination: Optional[PathLike] = None) -> object:
    """
    Runs the fetch and build procedure of ``entry`` for ``language``.

    Parameters
    ----------
    language : str
        The language identifier.
    entry : RegistryEntry
        How the grammar is obtained.
    ready : ReadinessPredicate
        The plain readiness check, handed to the procedure for any readiness
        query it makes.
    fetcher : GitFetcher, optional
        Fetch mechanism for hosted grammars.
    destination : str or PathLike, optional
        Where hosted grammars are compiled to.

    Returns
    -------
    object
        Whatever the procedure returned.
    """
    if entry.strategy == FetchStrategy.HOSTED:
        return ensure_fetched(language, entry.locator, entry.subpath,
                              ready=ready, fetcher=fetcher, destination=destination)
    if entry.strategy == FetchStrategy.CUSTOM:
        if entry.procedure is None:
            raise ValueError(f"custom entry for {language!r} has no procedure")
        return entry.procedure(language, ready, *entry.params)
    raise ValueError(f"unknown fetch strategy {entry.strategy!r}")


def ensure_and_check(native: ReadinessPredicate,
                     registry: Optional[EnsureRegistry] = None,
                     *,
                     fetcher: Optional[GitFetcher] = None,
                     destination: Optional[PathLike] = None) -> ReadinessPredicate:
    """
    Wraps the host readiness check ``native``.

    The returned check answers like ``native``; when the grammar is not
    ready it first makes one attempt to fetch and build it using the entry
    found in ``registry``. Failures of that attempt are logged as warnings
    and never raised.

    Parameters
    ----------
    native : ReadinessPredicate
        ``native(language, quiet) -> bool``.
    registry : EnsureRegistry, optional
        Where procedures are looked up, by default a fresh ``default_registry()``.
    fetcher : GitFetcher, optional
        Fetch mechanism for hosted grammars.
    destination : str or PathLike, optional
        Where hosted grammars are compiled to.

    Returns
    -------
    ReadinessPredicate
        The wrapped check.
    """
    registry = registry if registry is not None else default_registry()

    def is_ready(language: str, quiet: bool = False) -> bool:
        if native(language, True):
            return True
        entry = registry.lookup(language)
        if entry is not None:
            try:
                ensure_language(language, entry, native, fetcher, destination)
            except Exception as e:
                LOGGER.warning("Could not ensure tree-sitter grammar for %s: %s", language, e)
        return native(language, quiet)

    return is_ready
