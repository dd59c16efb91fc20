"""
    Acquire grammar source with git and build it once it is on disk.
"""
import json
import logging
import subprocess
from pathlib import Path
from typing import Callable, Dict, Optional

from . import settings
from .compiler import PathLike, artifact_name, compile_grammar
from .errors import FetchError

LOGGER = logging.getLogger(__name__)

ReadinessPredicate = Callable[[str, bool], bool]
PostFetchHook = Callable[[Path], object]


def default_locator(language: str) -> str:
    return f"{settings.DEFAULT_ORGANIZATION}/{settings.REPOSITORY_PREFIX}-{language}"


def repository_url(locator: str) -> str:
    if "://" in locator:
        return locator
    return f"{settings.GIT_HOST}/{locator}.git"


class GitFetcher:
    """
    Keeps shallow clones of grammar repositories and a record of which
    languages were built successfully from them.

    Attributes
    ----------
    root : Path
        Directory holding one clone per repository.
    record_path : Path
        JSON file mapping a language to the outcome of its last build.
    """

    def __init__(self, root: Optional[PathLike] = None, record_path: Optional[PathLike] = None) -> None:
        self.root = Path(root) if root is not None else settings.sources_dir()
        self.record_path = Path(record_path) if record_path is not None else settings.build_record_path()

    def clone_dir(self, locator: str) -> Path:
        # one clone per repository address, shared by the languages it hosts
        address = repository_url(locator).split("://", 1)[-1].rstrip("/")
        if address.endswith(".git"):
            address = address[:-len(".git")]
        return self.root / "__".join(part for part in address.split("/") if part)

    def _load_record(self) -> Dict[str, bool]:
        try:
            with open(self.record_path, "r", encoding="utf-8") as f:
                record = json.load(f)
        except FileNotFoundError:
            return {}
        except ValueError:
            LOGGER.warning("Ignoring corrupt build record %s", self.record_path)
            return {}
        return record if isinstance(record, dict) else {}

    def _save_record(self, record: Dict[str, bool]) -> None:
        self.record_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.record_path, "w", encoding="utf-8") as f:
            json.dump(record, f, indent=2, sort_keys=True)

    def built_ok(self, language: str) -> bool:
        return self._load_record().get(language) is True

    def forget(self, language: str) -> None:
        record = self._load_record()
        if record.pop(language, None) is not None:
            self._save_record(record)

    def _mark(self, language: str, ok: bool) -> None:
        record = self._load_record()
        record[language] = ok
        self._save_record(record)

    def _git(self, *args: str, cwd: Optional[Path] = None) -> None:
        command = ["git", *args]
        LOGGER.debug("Running %s", " ".join(command))
        try:
            subprocess.run(command, cwd=cwd, check=True, stdout=subprocess.PIPE,
                           stderr=subprocess.PIPE, text=True)
        except subprocess.CalledProcessError as e:
            raise FetchError((e.stderr or e.stdout or str(e)).strip()) from e

    def checkout(self, locator: str) -> Path:
        """
        Clones the repository, or updates the existing clone.

        Returns
        -------
        Path
            The clone directory.

        Raises
        ------
        FetchError
            If git fails, is missing, or the clone directory cannot be created.
        """
        target = self.clone_dir(locator)
        url = repository_url(locator)
        try:
            if (target / ".git").exists():
                LOGGER.info("Updating %s", target)
                self._git("pull", "--ff-only", cwd=target)
            else:
                LOGGER.info("Cloning %s into %s", url, target)
                target.parent.mkdir(parents=True, exist_ok=True)
                self._git("clone", "--depth", "1", url, str(target))
        except FetchError as e:
            e.locator = locator
            raise
        except OSError as e:
            raise FetchError(str(e), locator) from e
        return target

    def fetch(self, language: str, locator: str, post_fetch: PostFetchHook) -> Path:
        """
        Acquires the source of ``language`` and runs ``post_fetch`` on the
        clone. The outcome of the hook is recorded for the language.
        """
        tree = self.checkout(locator)
        try:
            post_fetch(tree)
        except Exception:
            self._mark(language, False)
            raise
        self._mark(language, True)
        return tree


def ensure_fetched(language: str,
                   locator: Optional[str] = None,
                   subpath: Optional[str] = None,
                   *,
                   ready: ReadinessPredicate,
                   fetcher: Optional[GitFetcher] = None,
                   destination: Optional[PathLike] = None) -> bool:
    """
    Makes sure the grammar of ``language`` has been fetched and built.

    Parameters
    ----------
    language : str
        The language identifier.
    locator : str, optional
        Repository locator, by default ``default_locator(language)``.
    subpath : str, optional
        Directory of the grammar inside the repository, for monorepos.
    ready : ReadinessPredicate
        The plain host readiness check, used to spot a stale build record.
    fetcher : GitFetcher, optional
        The fetch mechanism, by default a ``GitFetcher`` on the settings paths.
    destination : str or PathLike, optional
        Where the compiler places the artifact.

    Returns
    -------
    bool
        True when a fetch and build ran, False when the build record was
        trusted and nothing was done.
    """
    locator = locator or default_locator(language)
    fetcher = fetcher if fetcher is not None else GitFetcher()

    if fetcher.built_ok(language):
        if ready(language, True):
            return False
        # built before but the artifact is gone
        LOGGER.info("Build record for %s is stale, rebuilding", language)
        fetcher.forget(language)

    def post_fetch(tree: Path) -> None:
        artifact = compile_grammar(tree / subpath if subpath else tree, destination)
        if artifact.name != artifact_name(language):
            LOGGER.warning("Grammar fetched for %s was built as %s; readiness checks for %s look for %s",
                           language, artifact.name, language, artifact_name(language))

    fetcher.fetch(language, locator, post_fetch)
    return True
