# Object store backed by git plumbing commands.
#
#   resolve_root         git rev-parse --show-toplevel
#   list_objects         git rev-list --objects HEAD            (tip scope)
#                        git rev-list --objects --all --reflog  (all history)
#   batch_resolve_sizes  git cat-file --batch-check, identifiers on stdin
#   measure_directory    walk of --absolute-git-dir, or lstat of each
#                        path from git ls-files -z
#
# rev-list output is streamed line by line so that multi-million object
# histories are never buffered as one string.

from __future__ import annotations

import logging
import os
import stat as statmod
import subprocess
import tempfile
from collections.abc import Iterable, Iterator
from pathlib import Path

from repobloat.models.enums import AnalysisErrorCode, MeasurementKind, ObjectScope
from repobloat.models.objects import AnalysisError, ObjectStoreError

logger = logging.getLogger(__name__)

_BATCH_CHECK_FORMAT = "--batch-check=%(objectsize) %(objectname)"
_STDERR_TAIL_LINES = 20


def parse_rev_list_line(line: str) -> tuple[str, str] | None:
    """Split one ``rev-list --objects`` line into ``(identifier, path)``.

    Commits and root trees carry no path; the path itself may contain spaces.
    """
    identifier, _, path = line.rstrip("\n").partition(" ")
    if not identifier:
        return None
    return identifier, path


def parse_batch_check(output: str) -> dict[str, int]:
    """Parse ``%(objectsize) %(objectname)`` lines; ``<id> missing`` lines are skipped."""
    sizes: dict[str, int] = {}
    for line in output.splitlines():
        size_raw, _, identifier = line.strip().partition(" ")
        if not identifier:
            continue
        try:
            size = int(size_raw)
        except ValueError:
            continue
        if size >= 0:
            sizes[identifier] = size
    return sizes


class GitObjectStore:
    def __init__(self, git: str = "git") -> None:
        self._git = git

    def _run(self, root: str, args: list[str], input_text: str | None = None) -> str:
        try:
            completed = subprocess.run(
                [self._git, *args],
                cwd=root,
                input=input_text,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=True,
            )
        except FileNotFoundError as exc:
            raise ObjectStoreError(f"Cannot run {self._git}: {exc}") from exc
        except subprocess.CalledProcessError as exc:
            detail = (exc.stderr or "").strip() or f"exit status {exc.returncode}"
            raise ObjectStoreError(f"git {args[0]} failed: {detail}") from exc
        return completed.stdout

    def resolve_root(self, path: str) -> str | AnalysisError:
        expanded = Path(path).expanduser()
        if not expanded.exists():
            return AnalysisError(
                code=AnalysisErrorCode.NOT_FOUND,
                path=str(expanded),
                message="Path does not exist",
            )
        resolved = str(expanded.absolute())
        if not expanded.is_dir():
            return AnalysisError(
                code=AnalysisErrorCode.NOT_A_REPOSITORY,
                path=resolved,
                message="Path is not a directory",
            )
        try:
            toplevel = self._run(resolved, ["rev-parse", "--show-toplevel"]).strip()
        except ObjectStoreError as exc:
            return AnalysisError(
                code=AnalysisErrorCode.NOT_A_REPOSITORY,
                path=resolved,
                message=f"Not a git repository: {exc}",
            )
        return toplevel or resolved

    def list_objects(self, root: str, scope: ObjectScope) -> Iterator[tuple[str, str]]:
        if scope is ObjectScope.ALL_HISTORY:
            args = ["rev-list", "--objects", "--all", "--reflog"]
        else:
            args = ["rev-list", "--objects", "HEAD"]

        # stderr goes to a file, not a pipe: a corrupt store can emit more
        # warnings than a pipe buffer holds while stdout is still being read.
        with tempfile.TemporaryFile() as errfile:
            try:
                proc = subprocess.Popen(
                    [self._git, *args],
                    cwd=root,
                    stdout=subprocess.PIPE,
                    stderr=errfile,
                    text=True,
                    encoding="utf-8",
                    errors="replace",
                )
            except FileNotFoundError as exc:
                raise ObjectStoreError(f"Cannot run {self._git}: {exc}") from exc

            with proc:
                assert proc.stdout is not None
                for line in proc.stdout:
                    parsed = parse_rev_list_line(line)
                    if parsed is not None:
                        yield parsed
                returncode = proc.wait()

            if returncode != 0:
                errfile.seek(0)
                stderr = errfile.read().decode("utf-8", errors="replace")
                detail = _tail(stderr) or f"exit status {returncode}"
                raise ObjectStoreError(f"git rev-list failed: {detail}")

    def batch_resolve_sizes(self, root: str, identifiers: Iterable[str]) -> dict[str, int]:
        payload = "\n".join(identifiers)
        if not payload:
            return {}
        output = self._run(root, ["cat-file", _BATCH_CHECK_FORMAT], input_text=payload + "\n")
        return parse_batch_check(output)

    def measure_directory(self, root: str, kind: MeasurementKind) -> int:
        if kind is MeasurementKind.HISTORY_STORE:
            git_dir = self._run(root, ["rev-parse", "--absolute-git-dir"]).strip()
            return _directory_size(git_dir)
        listing = self._run(root, ["ls-files", "-z"])
        return _tracked_size(root, (rel for rel in listing.split("\0") if rel))


def _directory_size(path: str) -> int:
    if not os.path.isdir(path):
        raise ObjectStoreError(f"History store not found at {path}")
    total = 0

    def _raise(exc: OSError) -> None:
        raise ObjectStoreError(f"Cannot read {exc.filename}: {exc.strerror}") from exc

    for dirpath, _dirnames, filenames in os.walk(path, onerror=_raise):
        for name in filenames:
            try:
                st = os.lstat(os.path.join(dirpath, name))
            except FileNotFoundError:
                # Pack files and locks come and go while git runs.
                continue
            total += st.st_size
    return total


def _tracked_size(root: str, relpaths: Iterable[str]) -> int:
    total = 0
    missing = 0
    for rel in relpaths:
        try:
            st = os.lstat(os.path.join(root, rel))
        except FileNotFoundError:
            missing += 1
            continue
        except OSError as exc:
            raise ObjectStoreError(f"Cannot stat {rel}: {exc}") from exc
        if statmod.S_ISREG(st.st_mode) or statmod.S_ISLNK(st.st_mode):
            total += st.st_size
    if missing:
        logger.debug("%d tracked files missing from the working tree of %s", missing, root)
    return total


def _tail(text: str, lines: int = _STDERR_TAIL_LINES) -> str:
    return "\n".join(text.strip().splitlines()[-lines:])
