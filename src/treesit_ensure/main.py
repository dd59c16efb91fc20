import logging
import sys
from typing import List, Optional

from colorama import Fore, init

from . import ensure_registry
from .errors import print_error
from .language import language_ready
from .readiness import ensure_language

init(autoreset=True)  # colorama init


def print_usage():
    print(
        """
Usage: treesit-ensure <language>... [options]
options:
    --all: ensure every registered language
    --list: list registered languages and whether they are ready
    --verbose: show commands and compiler output
""")


def list_languages() -> None:
    for language in ensure_registry.languages():
        entry = ensure_registry[language]
        if entry.locator is not None:
            source = entry.locator
        elif entry.procedure is not None:
            source = f"{entry.strategy}"
        else:
            source = "(default)"
        if entry.subpath:
            source += f" [{entry.subpath}]"
        mark = f"{Fore.GREEN}ready" if language_ready(language, True) else f"{Fore.RED}missing"
        print(f"{language:<20}{source:<55}{mark}")


def ensure(languages: List[str]) -> bool:
    """
    Ensures every language in ``languages``, reporting failures as they happen.

    Parameters
    ----------
    languages : List[str]
        The language identifiers to ensure.

    Returns
    -------
    bool
        True if every language ends up ready.
    """
    all_ready = True
    for language in languages:
        if language_ready(language, True):
            print(f"{Fore.GREEN}{language}{Fore.RESET} already ready")
            continue
        entry = ensure_registry.lookup(language)
        if entry is None:
            print(f"{Fore.RED}{language}{Fore.RESET}: no way to obtain this grammar is registered")
            all_ready = False
            continue
        print(f"Ensuring {language}...")
        try:
            ensure_language(language, entry, language_ready)
        except Exception as e:
            print_error(language, e)
            all_ready = False
            continue
        if language_ready(language, False):
            print(f"{Fore.GREEN}{language}{Fore.RESET} ready")
        else:
            print(f"{Fore.RED}{language}{Fore.RESET} built but still not loadable")
            all_ready = False
    return all_ready


def main(argv: Optional[List[str]] = None) -> None:
    """
    Parse command line arguments and ensure or list the requested grammars.
    """
    args = sys.argv[1:] if argv is None else argv
    if not args or "--help" in args or "-h" in args:
        print_usage()
        sys.exit(1)

    verbose = "--verbose" in args
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format="%(message)s")

    if "--list" in args:
        list_languages()
        sys.exit(0)

    languages = [arg for arg in args if not arg.startswith("--")]
    if "--all" in args:
        languages = ensure_registry.languages()
    if not languages:
        print_usage()
        sys.exit(1)
    sys.exit(0 if ensure(languages) else 1)


if __name__ == "__main__":
    main()
