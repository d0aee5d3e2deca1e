"""Read commit history and refs from a git repository via subprocess."""

import re
import subprocess
from datetime import datetime
from pathlib import Path
from typing import Optional

from ..exceptions import GitCommandError
from ..graph.models import Commit, Ref, RefKind
from ..logging_config import get_logger

logger = get_logger(__name__)

# ASCII unit separator; cannot occur in any of the logged fields
SEP = "\x1f"

LOG_FORMAT = "%x1f".join(["%H", "%P", "%an", "%aI", "%D", "%s"])
REF_FORMAT = "%1f".join(["%(refname)", "%(objectname)", "%(*objectname)"])

_HASH_RE = re.compile(r"^[0-9a-f]{7,64}$")

_REF_PREFIXES = (
    ("refs/heads/", RefKind.BRANCH),
    ("refs/tags/", RefKind.TAG),
    ("refs/remotes/", RefKind.REMOTE),
)


class GitHistoryReader:
    """Parse `git log` and `git for-each-ref` into Commit and Ref lists."""

    # Maximum git log output size (50MB) to prevent OOM on huge repos
    _MAX_OUTPUT_BYTES = 50 * 1024 * 1024

    def __init__(self, repo_path: str, max_commits: int = 5000):
        self.repo_path = str(Path(repo_path).resolve())
        self.max_commits = max_commits

    def read(self) -> Optional[tuple[list[Commit], list[Ref]]]:
        """Return (commits, refs), or None if the path is not a git repository.

        Raises:
            GitCommandError: If a git command exits with an error.
        """
        if not self._is_git_repo():
            logger.info("Not a git repository: %s", self.repo_path)
            return None

        commits = parse_log(self._run_git_log())
        refs = parse_refs(self._run_git(["for-each-ref", f"--format={REF_FORMAT}"]))
        logger.debug("Read %d commits and %d refs from %s", len(commits), len(refs), self.repo_path)
        return commits, refs

    def _is_git_repo(self) -> bool:
        try:
            result = subprocess.run(
                ["git", "-C", self.repo_path, "rev-parse", "--git-dir"],
                capture_output=True,
                text=True,
                timeout=5,
            )
            return result.returncode == 0
        except (FileNotFoundError, subprocess.TimeoutExpired):
            return False

    def _run_git(self, args: list[str]) -> str:
        cmd = ["git", "-C", self.repo_path, *args]
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=30)
        except (FileNotFoundError, subprocess.TimeoutExpired) as e:
            raise GitCommandError(cmd, -1, str(e)) from e
        if result.returncode != 0:
            raise GitCommandError(cmd, result.returncode, result.stderr)
        return result.stdout

    def _run_git_log(self) -> str:
        cmd = [
            "git",
            "-C",
            self.repo_path,
            "log",
            "--all",
            "--topo-order",
            f"--format={LOG_FORMAT}",
            f"-n{self.max_commits}",
        ]
        try:
            # Use Popen for streaming to avoid loading unbounded output into memory
            proc = subprocess.Popen(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
            )
        except FileNotFoundError as e:
            raise GitCommandError(cmd, -1, str(e)) from e

        try:
            chunks = []
            total_size = 0
            stdout = proc.stdout
            if stdout is None:
                return ""
            while True:
                chunk = stdout.read(1024 * 1024)  # 1MB chunks
                if not chunk:
                    break
                total_size += len(chunk)
                if total_size > self._MAX_OUTPUT_BYTES:
                    logger.warning(
                        "git log output exceeded %dMB limit, truncating",
                        self._MAX_OUTPUT_BYTES // (1024 * 1024),
                    )
                    proc.kill()
                    break
                chunks.append(chunk)

            try:
                proc.wait(timeout=30)
            except subprocess.TimeoutExpired as e:
                proc.kill()
                raise GitCommandError(cmd, -1, str(e)) from e
            if proc.returncode != 0 and proc.returncode != -9:  # -9 = killed
                stderr = proc.stderr.read() if proc.stderr else ""
                raise GitCommandError(cmd, proc.returncode, stderr)

            raw = "".join(chunks)
            if proc.returncode == -9:
                # drop the partial last line
                raw = raw[: raw.rfind("\n") + 1]
            return raw
        finally:
            if proc.stdout:
                proc.stdout.close()
            if proc.stderr:
                proc.stderr.close()


def parse_decorations(raw: str) -> tuple[str, ...]:
    """Split a %D decoration list into ref names.

    "HEAD -> main, tag: v1.0, origin/main" -> ("HEAD", "main", "v1.0", "origin/main")
    """
    names: list[str] = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        if part.startswith("tag: "):
            names.append(part[len("tag: ") :])
        elif " -> " in part:
            names.extend(p.strip() for p in part.split(" -> ", 1))
        else:
            names.append(part)
    return tuple(names)


def _parse_date(raw: str) -> Optional[datetime]:
    if not raw:
        return None
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return None


def parse_log(raw: str) -> list[Commit]:
    """Parse `git log --format=LOG_FORMAT` output. Malformed lines are skipped."""
    commits = []
    skipped = 0
    for line in raw.split("\n"):
        if not line.strip():
            continue
        # Subject is last and may itself be empty; maxsplit keeps stray separators in it
        parts = line.split(SEP, 5)
        if len(parts) < 6 or not _HASH_RE.match(parts[0]):
            skipped += 1
            continue
        commit_hash, parents, author, date, decorations, subject = parts
        commits.append(
            Commit(
                hash=commit_hash,
                parents=tuple(parents.split()),
                message=subject,
                author=author,
                date=_parse_date(date),
                refs=parse_decorations(decorations),
            )
        )
    if skipped:
        logger.debug("Skipped %d malformed git log lines", skipped)
    return commits


def classify_ref(refname: str) -> tuple[str, RefKind]:
    """Short name and kind of a full ref name."""
    for prefix, kind in _REF_PREFIXES:
        if refname.startswith(prefix):
            return refname[len(prefix) :], kind
    return refname, RefKind.OTHER


def parse_refs(raw: str) -> list[Ref]:
    """Parse `git for-each-ref --format=REF_FORMAT` output.

    Annotated tags resolve to the commit they point at. Symbolic remote
    HEADs (origin/HEAD) are dropped.
    """
    refs = []
    for line in raw.split("\n"):
        if not line.strip():
            continue
        parts = line.split(SEP)
        if len(parts) < 2:
            continue
        refname, objectname = parts[0], parts[1]
        peeled = parts[2] if len(parts) > 2 else ""
        name, kind = classify_ref(refname)
        if kind is RefKind.REMOTE and name.endswith("/HEAD"):
            continue
        refs.append(Ref(name=name, hash=peeled or objectname, kind=kind, ref=refname))
    return refs
