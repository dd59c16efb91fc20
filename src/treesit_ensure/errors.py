import sys
from pathlib import Path
from typing import Optional, TextIO

from colorama import Fore


class EnsureError(Exception):
    """
    Base class of every error raised while fetching, building or loading a grammar.
    """

    def __repr__(self):
        return f"{Fore.RED}{self.__class__.__name__}{Fore.RESET}"


class BuildError(EnsureError):
    """
    The compiler returned a non-zero status. ``output`` holds its combined
    stdout and stderr, which is also the message of the error.
    """

    def __init__(self, message: str, output: str = ""):
        super().__init__(message)
        self.output = output

    def __repr__(self):
        return f"{super().__repr__()}: {self}"


class ConfigError(BuildError):
    """
    The grammar source lacks the metadata needed to build it.
    """

    def __init__(self, message: str, path: Path):
        super().__init__(f"{message}: {path}")
        self.path = path

    def __repr__(self):
        return f"{super().__repr__()} ({self.path})"


class FetchError(EnsureError):
    """
    Network, version control or filesystem failure while acquiring source.
    The underlying message is kept untouched.
    """

    def __init__(self, message: str, locator: Optional[str] = None):
        super().__init__(message)
        self.locator = locator

    def __repr__(self):
        where = f" from {self.locator}" if self.locator else ""
        return f"{super().__repr__()}{where}: {self}"


class LanguageNotReady(EnsureError):
    def __init__(self, language: str, reason: str):
        super().__init__(f"{language}: {reason}")
        self.language = language
        self.reason = reason

    def __repr__(self):
        return f"{super().__repr__()}: {self}"


def print_error(language: str, error: Exception, stream: Optional[TextIO] = None) -> None:
    """
    Prints an error for an operator. Compiler output is printed verbatim
    below the headline so that it reads like the compiler's own diagnostic.

    Parameters
    ----------
    language : str
        The language whose grammar could not be ensured.
    error : Exception
        The error to print.
    stream : TextIO, optional
        Where to print, by default stderr.
    """
    stream = stream if stream is not None else sys.stderr
    indentation = " " * 5
    print(f"\n{Fore.RED}{error.__class__.__name__}{Fore.RESET} while ensuring '{language}'",
          file=stream)
    if isinstance(error, BuildError) and error.output:
        for line in error.output.rstrip().splitlines():
            print(f"{indentation}{line}", file=stream)
    else:
        print(f"{indentation}{error}", file=stream)
