"""Pin distroless base images in Dockerfiles to their newest digest."""

from __future__ import annotations

import re
from pathlib import Path

import pygit2
from rich.markup import escape

from teamsync.core.errors import SyncError
from teamsync.core.formatting import pluralize
from teamsync.core.logging import get_logger
from teamsync.core.progress import status
from teamsync.fleet.docker import latest_digest
from teamsync.git.errors import GitError
from teamsync.git.ops import GitOps
from teamsync.sync import prompts
from teamsync.sync.commit import push_changes
from teamsync.sync.context import SyncContext

log = get_logger("fleet.distroless")

DISTROLESS_IMAGES = {
    "java21": "gcr.io/distroless/java21-debian12",
    "node24": "gcr.io/distroless/nodejs24-debian12",
}

COMMIT_MESSAGE = "automated: update distroless with newest digest"

DOCKERFILE = "Dockerfile"

_FROM_LINE = re.compile(r"FROM(.*)\n")


def image_for(distroless_type: str) -> str:
    try:
        return DISTROLESS_IMAGES[distroless_type]
    except KeyError:
        raise SyncError.invalid_argument(
            "type",
            distroless_type or "empty",
            f"must be one of: {', '.join(DISTROLESS_IMAGES)}",
        ) from None


def first_from_line(content: str) -> str | None:
    match = re.search(r"FROM (.*)\n", content)
    return match.group(0) if match else None


def uses_image(repo_dir: Path, image: str) -> bool:
    """True if the clone's Dockerfile builds from ``image``."""
    dockerfile = repo_dir / DOCKERFILE
    if not dockerfile.is_file():
        return False
    line = first_from_line(dockerfile.read_bytes().decode("utf-8", errors="replace"))
    return line is not None and image in line


def pin_digest(content: str, image: str, digest: str) -> str:
    """Rewrite the first FROM line to ``FROM image@digest``."""
    return _FROM_LINE.sub(lambda _: f"FROM {image}@{digest}\n", content, count=1)


def update_dockerfile(repo_dir: Path, image: str, digest: str) -> None:
    dockerfile = repo_dir / DOCKERFILE
    content = dockerfile.read_bytes().decode("utf-8")
    dockerfile.write_bytes(pin_digest(content, image, digest).encode("utf-8"))


def _stage_dockerfile(ops: GitOps, _repo: str) -> None:
    ops.stage([DOCKERFILE])


async def update_distroless(ctx: SyncContext, distroless_type: str) -> list[str]:
    """Bump the digest in every matching repo and push. Returns pushed repos."""
    image = image_for(distroless_type)

    repos = await ctx.list_repos()
    await ctx.mirrors.ensure_all(repos)
    digest = await latest_digest(image)
    ctx.console.print(f"Latest image for {distroless_type} is: {image}@{digest}\n", highlight=False)

    relevant = [r.name for r in repos if uses_image(ctx.mirrors.path_for(r.name), image)]
    changed: list[str] = []
    for name in relevant:
        try:
            update_dockerfile(ctx.mirrors.path_for(name), image, digest)
            if not ctx.mirrors.client(name).diff_summary().is_empty:
                changed.append(name)
        except (GitError, pygit2.GitError, OSError, UnicodeDecodeError) as e:
            log.error("dockerfile_update_failed", repo=name, error=str(e))
            status(f"Could not update {name}: {escape(str(e))}", style="error")

    if not changed:
        ctx.console.print(
            f"Found [green]{pluralize(len(relevant), 'repo')}[/green] for type "
            f"[bright_blue]{distroless_type}[/bright_blue], none of them had digest changes"
        )
        return []

    ctx.console.print(
        f"Found [green]{pluralize(len(relevant), 'repo')}[/green] of type "
        f"[bright_blue]{distroless_type}[/bright_blue], [yellow]{len(changed)}[/yellow] had changes:"
    )
    for name in changed:
        ctx.console.print(f"\t{name}")

    if not await prompts.confirm("Do you want to commit and push these changes?"):
        ctx.console.print("[red]Aborting, no changes were committed or pushed[/red]")
        return []

    pushed, failed = await push_changes(ctx, changed, COMMIT_MESSAGE, stage=_stage_dockerfile)
    ctx.console.print(f"Pushed changes in [green]{pluralize(len(pushed), 'repo')}[/green]")
    if failed:
        status(f"Failed to push: {', '.join(failed)}", style="error")
    return pushed
