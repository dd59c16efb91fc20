"""
    Build tree-sitter grammars on demand.

    ``is_ready`` answers whether a grammar is loadable, fetching and compiling
    it first when it is not. Entries of ``ensure_registry`` can be added or replaced
    before the first check.
"""
from .compiler import compile_grammar
from .errors import BuildError, ConfigError, EnsureError, FetchError, LanguageNotReady
from .fetcher import GitFetcher, ensure_fetched
from .language import create_parser, language_ready, load_language
from .readiness import ensure_and_check, ensure_language
from .registry import EnsureRegistry, FetchStrategy, RegistryEntry, default_registry

ensure_registry = default_registry()
is_ready = ensure_and_check(language_ready, ensure_registry)

__all__ = [
    "BuildError",
    "ConfigError",
    "EnsureError",
    "EnsureRegistry",
    "FetchError",
    "FetchStrategy",
    "GitFetcher",
    "LanguageNotReady",
    "RegistryEntry",
    "compile_grammar",
    "create_parser",
    "default_registry",
    "ensure_and_check",
    "ensure_fetched",
    "ensure_language",
    "is_ready",
    "language_ready",
    "load_language",
    "ensure_registry",
]
