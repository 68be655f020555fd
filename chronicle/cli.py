"""
CLI interface for Chronicle repositories.

Each command loads a repository from its export file, runs one operation
and writes the repository back. Snapshot arguments are JSON text.
"""

import json
from pathlib import Path
from typing import Any, Optional

import click

from chronicle.config import config
from chronicle.logging import initialize_logging
from chronicle.version_control import (
    PULL_STRATEGIES,
    CONFLICT_RESOLUTIONS,
    ReconcileResult,
    Repository,
    VersionControlError,
)

DEFAULT_REPO = "chronicle.json"

repo_option = click.option(
    "--repo",
    default=DEFAULT_REPO,
    show_default=True,
    type=click.Path(dir_okay=False),
    help="Repository export file",
)


def _parse_data(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"not valid JSON: {e}", param_hint="DATA")


def _load(path: str) -> Repository:
    repo_path = Path(path)
    if not repo_path.exists():
        raise click.ClickException(
            f"No repository at {path} (run 'chronicle init' first)"
        )
    try:
        return Repository.from_export(repo_path.read_text())
    except VersionControlError as e:
        raise click.ClickException(str(e))


def _save(repo: Repository, path: str) -> None:
    Path(path).write_text(repo.export())


def _dump(value: Any) -> str:
    return json.dumps(value, indent=2, sort_keys=True)


def _echo_result(result: ReconcileResult) -> None:
    click.echo(result.message)
    if result.merge_commit:
        click.echo(f"  Merge commit: {result.merge_commit}")
    if result.changes:
        click.echo(f"  Changes: {result.changes}")
    if result.replayed_commits:
        click.echo(f"  Replayed: {result.replayed_commits}")
    if result.conflicts:
        click.echo("  Conflicts resolved automatically")


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log repository operations to stderr")
def cli(verbose: bool):
    """Chronicle - version control for structured data."""
    initialize_logging(
        log_dir=Path(config.logging.log_dir),
        level="DEBUG" if verbose else config.logging.level,
        enable_file_logging=config.logging.enable_file_logging,
        enable_console_logging=verbose,
        format_string=config.logging.format,
        rotation=config.logging.rotation,
        retention=config.logging.retention,
    )


@cli.command()
@click.argument("data", required=False)
@repo_option
@click.option("--force", is_flag=True, help="Overwrite an existing repository")
def init(data: Optional[str], repo: str, force: bool):
    """Create a repository, optionally with an initial snapshot."""
    if Path(repo).exists() and not force:
        raise click.ClickException(f"Repository already exists: {repo}")

    repository = Repository(_parse_data(data) if data is not None else None)
    _save(repository, repo)

    click.echo(f"Initialized repository: {repo}")
    if repository.head:
        click.echo(f"  HEAD: {repository.head}")


@cli.command()
@click.argument("data")
@click.option("--message", "-m", default=None, help="Commit message")
@repo_option
def commit(data: str, message: Optional[str], repo: str):
    """Commit a snapshot on the current branch."""
    repository = _load(repo)
    try:
        commit_id = repository.commit(_parse_data(data), message)
    except VersionControlError as e:
        raise click.ClickException(str(e))
    _save(repository, repo)
    message = repository.commits[commit_id].message
    click.echo(f"[{repository.current_branch} {commit_id}] {message}")


@cli.command()
@click.option("--limit", "-n", type=int, default=None, help="Maximum entries")
@repo_option
def log(limit: Optional[int], repo: str):
    """Show commit history from HEAD."""
    repository = _load(repo)
    try:
        entries = repository.log(limit)
    except VersionControlError as e:
        raise click.ClickException(str(e))

    if not entries:
        click.echo("No commits")
        return

    for entry in entries:
        click.echo(
            f"{entry.commit_id}  {entry.timestamp}  [{entry.branch}]  {entry.message}"
        )


@cli.command()
@click.argument("name")
@repo_option
def branch(name: str, repo: str):
    """Create a branch at HEAD."""
    repository = _load(repo)
    try:
        repository.branch(name)
    except VersionControlError as e:
        raise click.ClickException(str(e))
    _save(repository, repo)
    click.echo(f"Created branch: {name}")


@cli.command()
@click.argument("target")
@repo_option
def checkout(target: str, repo: str):
    """Check out a branch or a commit."""
    repository = _load(repo)
    try:
        repository.checkout(target)
    except VersionControlError as e:
        raise click.ClickException(str(e))
    _save(repository, repo)

    if repository.is_detached:
        click.echo(f"HEAD detached at {target}")
    else:
        click.echo(f"Switched to branch: {target}")


@cli.command()
@repo_option
def branches(repo: str):
    """List branches."""
    repository = _load(repo)
    for info in repository.list_branches():
        marker = "*" if info.current else " "
        click.echo(f"{marker} {info.name}  {info.head or '(no commits)'}")


@cli.command()
@click.argument("commit_id", required=False)
@repo_option
def show(commit_id: Optional[str], repo: str):
    """Print the snapshot at HEAD or at a commit."""
    repository = _load(repo)
    try:
        data = repository.get_commit(commit_id) if commit_id else repository.get_data()
    except VersionControlError as e:
        raise click.ClickException(str(e))
    click.echo(_dump(data))


@cli.command()
@click.argument("commit_id1")
@click.argument("commit_id2")
@click.option("--json", "as_json", is_flag=True, help="Print the diff as JSON")
@repo_option
def diff(commit_id1: str, commit_id2: str, as_json: bool, repo: str):
    """Diff the snapshots of two commits."""
    repository = _load(repo)
    try:
        result = repository.diff(commit_id1, commit_id2)
    except VersionControlError as e:
        raise click.ClickException(str(e))

    if as_json:
        click.echo(_dump(result.to_dict()))
    else:
        click.echo(result.format())


@cli.command()
@click.argument("other", type=click.Path(exists=True, dir_okay=False))
@repo_option
def compare(other: str, repo: str):
    """Compare this repository with another export file."""
    repository = _load(repo)
    remote = _load(other)
    try:
        comparison = repository.compare_forks(remote)
    except VersionControlError as e:
        raise click.ClickException(str(e))

    click.echo(comparison.summary())
    for commit in comparison.ahead_commits:
        click.echo(f"  > {commit.commit_id}  {commit.message}")
    for commit in comparison.behind_commits:
        click.echo(f"  < {commit.commit_id}  {commit.message}")


@cli.command()
@click.argument("other", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--strategy",
    type=click.Choice(PULL_STRATEGIES),
    default="merge",
    show_default=True,
    help="How to combine diverged histories",
)
@repo_option
def pull(other: str, strategy: str, repo: str):
    """Pull commits from another export file."""
    repository = _load(repo)
    remote = _load(other)
    try:
        result = repository.pull(remote, strategy)
    except VersionControlError as e:
        raise click.ClickException(str(e))
    _save(repository, repo)
    _echo_result(result)


@cli.command()
@click.argument("other", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--resolution",
    type=click.Choice(CONFLICT_RESOLUTIONS),
    default="ours",
    show_default=True,
    help="Which side wins when both have new commits",
)
@repo_option
def sync(other: str, resolution: str, repo: str):
    """Bring this repository and another export file into agreement."""
    repository = _load(repo)
    remote = _load(other)
    try:
        result = repository.sync(remote, resolution)
    except VersionControlError as e:
        raise click.ClickException(str(e))
    _save(repository, repo)
    _save(remote, other)
    _echo_result(result)


@cli.command()
@click.argument("data")
@click.option("--message", "-m", default=None, help="Stash message")
@repo_option
def stash(data: str, message: Optional[str], repo: str):
    """Stash a snapshot without committing it."""
    repository = _load(repo)
    try:
        index = repository.stash(_parse_data(data), message)
    except VersionControlError as e:
        raise click.ClickException(str(e))
    _save(repository, repo)
    click.echo(f"Saved stash@{{{index}}}")


@cli.command(name="stash-list")
@repo_option
def stash_list(repo: str):
    """List stash entries."""
    repository = _load(repo)
    entries = repository.stash_list()
    if not entries:
        click.echo("No stash entries")
        return
    for info in entries:
        click.echo(f"stash@{{{info.index}}}: On {info.branch}: {info.message}")


@cli.command(name="stash-pop")
@repo_option
def stash_pop(repo: str):
    """Remove the most recent stash entry and print its snapshot."""
    repository = _load(repo)
    try:
        data = repository.stash_pop()
    except VersionControlError as e:
        raise click.ClickException(str(e))
    _save(repository, repo)
    click.echo(_dump(data))


if __name__ == "__main__":
    cli()
