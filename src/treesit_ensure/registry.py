from enum import Enum
from typing import Callable, Dict, Iterator, List, NamedTuple, Optional, Tuple


class FetchStrategy(Enum):
    # grammar hosted in a git repository, fetched and built by this package
    HOSTED = "hosted"
    # user supplied procedure
    CUSTOM = "custom"

    def __repr__(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value


class RegistryEntry(NamedTuple):
    strategy: FetchStrategy
    locator: Optional[str] = None
    subpath: Optional[str] = None
    procedure: Optional[Callable[..., object]] = None
    params: Tuple[object, ...] = ()


# language -> (repository locator or None for the default one, sub-path)
DEFAULT_GRAMMARS: Dict[str, Tuple[Optional[str], Optional[str]]] = {
    "bash": (None, None),
    "c": (None, None),
    "c_sharp": ("tree-sitter/tree-sitter-c-sharp", None),
    "cmake": ("uyha/tree-sitter-cmake", None),
    "cpp": (None, None),
    "css": (None, None),
    "dockerfile": ("camdencheek/tree-sitter-dockerfile", None),
    "elixir": ("elixir-lang/tree-sitter-elixir", None),
    "go": (None, None),
    "gomod": ("camdencheek/tree-sitter-go-mod", None),
    "haskell": (None, None),
    "html": (None, None),
    "java": (None, None),
    "javascript": (None, None),
    "jsdoc": (None, None),
    "json": (None, None),
    "julia": (None, None),
    "kotlin": ("fwcd/tree-sitter-kotlin", None),
    "lua": ("tree-sitter-grammars/tree-sitter-lua", None),
    "make": ("alemuller/tree-sitter-make", None),
    "markdown": ("tree-sitter-grammars/tree-sitter-markdown", "tree-sitter-markdown"),
    "markdown_inline": ("tree-sitter-grammars/tree-sitter-markdown", "tree-sitter-markdown-inline"),
    "ocaml": ("tree-sitter/tree-sitter-ocaml", "grammars/ocaml"),
    "ocaml_interface": ("tree-sitter/tree-sitter-ocaml", "grammars/interface"),
    "php": ("tree-sitter/tree-sitter-php", "php"),
    "python": (None, None),
    "regex": (None, None),
    "ruby": (None, None),
    "rust": (None, None),
    "scala": (None, None),
    "toml": ("tree-sitter-grammars/tree-sitter-toml", None),
    "tsx": ("tree-sitter/tree-sitter-typescript", "tsx"),
    "typescript": ("tree-sitter/tree-sitter-typescript", "typescript"),
    "yaml": ("tree-sitter-grammars/tree-sitter-yaml", None),
}


class EnsureRegistry:
    """
    Editable mapping from a language identifier to the way its grammar is
    obtained. Users add or override entries before the first readiness check.
    """

    def __init__(self, entries: Optional[Dict[str, RegistryEntry]] = None) -> None:
        self.entries: Dict[str, RegistryEntry] = dict(entries) if entries else {}

    def __contains__(self, language: str) -> bool:
        return language in self.entries

    def __getitem__(self, language: str) -> RegistryEntry:
        return self.entries[language]

    def __setitem__(self, language: str, entry: RegistryEntry) -> None:
        if not isinstance(entry, RegistryEntry):
            raise TypeError(f"expected a RegistryEntry for {language!r}, got {entry!r}")
        if entry.strategy == FetchStrategy.CUSTOM and entry.procedure is None:
            raise ValueError(f"custom entry for {language!r} has no procedure")
        self.entries[language] = entry

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __repr__(self) -> str:
        return str(self.entries)

    def lookup(self, language: str) -> Optional[RegistryEntry]:
        return self.entries.get(language)

    def register(self, language: str, locator: Optional[str] = None,
                 subpath: Optional[str] = None) -> RegistryEntry:
        entry = RegistryEntry(FetchStrategy.HOSTED, locator, subpath)
        self[language] = entry
        return entry

    def register_procedure(self, language: str, procedure: Callable[..., object],
                           *params: object) -> RegistryEntry:
        """
        Registers a custom procedure, called as
        ``procedure(language, ready, *params)`` where ``ready`` is the plain
        host readiness check.
        """
        entry = RegistryEntry(FetchStrategy.CUSTOM, procedure=procedure, params=params)
        self[language] = entry
        return entry

    def remove(self, language: str) -> None:
        self.entries.pop(language, None)

    def languages(self) -> List[str]:
        return sorted(self.entries)


def default_registry() -> EnsureRegistry:
    registry = EnsureRegistry()
    for language, (locator, subpath) in DEFAULT_GRAMMARS.items():
        registry.register(language, locator, subpath)
    return registry
