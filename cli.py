import asyncio
import contextlib
import os
import stat
from typing import Optional, Tuple

import click
from rich.console import Console

from config.logic import load_and_merge_configs
from config.models import Config
from core.collectors.change_collector import StagedChangeCollector
from core.output.notifier import ConsoleNotifier, LogNotifier
from core.output.targets import ConsoleTarget, MessageFile
from core.pipeline import CommitMessageGenerator
from utils.errors import AICommitsException
from utils.git import commit, get_hooks_dir, is_git_repository
from utils.logger import setup_logger, logger
from utils.usage import UsageStats


HOOK_MARKER = "Managed by aicommits"

HOOK_SCRIPT = f"""#!/bin/sh
# aicommits git hook. {HOOK_MARKER}.

# The commit message file is passed as the first argument.
COMMIT_MSG_FILE="$1"

# The source of the commit message is the second argument.
COMMIT_SOURCE="$2"

# The command decides internally whether to run.
exec aicommits generate --from-hook "$COMMIT_MSG_FILE" "$COMMIT_SOURCE"
"""

# Commit sources for which git already has a message worth keeping.
SKIPPED_COMMIT_SOURCES = ("message", "template", "merge", "squash")


def apply_cli_overrides(
    config: Config,
    provider: Optional[str] = None,
    model: Optional[str] = None,
    template: Optional[str] = None,
    max_tokens: Optional[int] = None,
) -> Config:
    """Applies command-line options on top of the loaded configuration."""
    if provider:
        config.model.provider = provider
        logger.info(f"Overriding provider: {provider}")
    if model:
        config.model.name = model
        logger.info(f"Overriding model: {model}")
    if template:
        config.prompt.template = template
        logger.info(f"Overriding template: {template}")
    if max_tokens:
        config.prompt.max_tokens = max_tokens
        logger.info(f"Overriding token limit: {max_tokens}")
    return config


def should_skip_hook(config: Config, commit_msg_file: str, commit_source: Optional[str], no_overwrite: Optional[bool]) -> bool:
    """Decides whether a prepare-commit-msg invocation should leave the message alone."""
    if not config.hook.enabled:
        return True
    if commit_source in SKIPPED_COMMIT_SOURCES:
        return True
    if os.path.exists(commit_msg_file) and os.path.getsize(commit_msg_file) > 0:
        # CLI flag takes precedence over config
        should_overwrite = not config.hook.no_overwrite
        if no_overwrite is not None:
            should_overwrite = not no_overwrite
        return not should_overwrite
    return False


@click.group(invoke_without_command=True)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Enable debug logging.",
)
@click.pass_context
def cli(ctx, verbose: bool):
    """
    Generate git commit messages from staged changes with an LLM.

    Runs 'generate' when no subcommand is given.
    """
    setup_logger(log_level="DEBUG" if verbose else "INFO")
    ctx.obj = {'verbose': verbose}

    if ctx.invoked_subcommand is None:
        ctx.invoke(generate)


@cli.command("generate")
@click.option(
    "-c", "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to a config file that replaces all other config layers.",
)
@click.option(
    "-r", "--repo",
    "repo_dirs",
    multiple=True,
    type=click.Path(file_okay=False),
    help="Repository to read staged changes from. Repeat for several repositories. Defaults to the current directory.",
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False),
    help="Write the message to this file instead of committing.",
)
@click.option(
    "--dry-run",
    is_flag=True,
    default=False,
    help="Show the generated message without committing.",
)
@click.option(
    "--no-overwrite",
    is_flag=True,
    default=None,  # None means "use the config value"
    help="In hook mode, keep commit message files that already have content.",
)
@click.option("--provider", type=str, help="Override the LLM provider (e.g. 'openai').")
@click.option("--model", type=str, help="Override the model name (e.g. 'gpt-4o-mini').")
@click.option("--template", type=str, help="Override the prompt template file.")
@click.option("--max-tokens", type=click.IntRange(min=1), help="Override the prompt token limit.")
@click.option(
    "--from-hook",
    nargs=2,
    type=str,
    default=(None, None),
    help="Called by the git hook with [commit_msg_file, commit_source]. Internal.",
    hidden=True,
)
@click.pass_context
def generate(
    ctx,
    config_path: Optional[str],
    repo_dirs: Tuple[str, ...],
    output: Optional[str],
    dry_run: bool,
    no_overwrite: Optional[bool],
    provider: Optional[str],
    model: Optional[str],
    template: Optional[str],
    max_tokens: Optional[int],
    from_hook: Tuple[Optional[str], Optional[str]],
):
    """
    Generate a commit message for the staged changes.
    """
    console = Console()
    verbose = (ctx.obj or {}).get('verbose', False)
    commit_msg_file, commit_source = from_hook
    is_hook_run = commit_msg_file is not None
    # git owns the terminal while a hook runs
    if is_hook_run:
        setup_logger(log_level="DEBUG" if verbose else "INFO", console=False)
    notifier = LogNotifier() if is_hook_run else ConsoleNotifier(console)
    succeeded = True

    try:
        config = load_and_merge_configs(custom_config_path=config_path)

        if is_hook_run and should_skip_hook(config, commit_msg_file, commit_source, no_overwrite):
            logger.info(f"Skipping hook run (source: {commit_source or 'none'}).")
            return

        config = apply_cli_overrides(config, provider, model, template, max_tokens)
        changes = StagedChangeCollector(repo_dirs or ["."]).collect()

        if is_hook_run or output:
            target = MessageFile.open(commit_msg_file or output)
        else:
            target = ConsoleTarget(console)

        usage = UsageStats(config.usage.path, enabled=config.usage.enabled)
        generator = CommitMessageGenerator(config, notifier, usage)

        status_context = console.status("[bold green]Generating commit message...[/bold green]") if not is_hook_run else contextlib.nullcontext()
        with status_context:
            result = asyncio.run(generator.generate(changes, target))

        if is_hook_run or not result.ok:
            succeeded = result.ok
        elif output:
            console.print(f"[green]Commit message written to {output}[/green]")
        elif dry_run:
            console.print("\n[yellow]Dry run: remove '--dry-run' to commit with this message.[/yellow]")
        else:
            for repository in result.repositories:
                commit(result.message, cwd=repository.root)
                console.print(f"[bold green]✅ Committed in {repository.root}[/bold green]")

    except AICommitsException as e:
        succeeded = False
        logger.error(f"Known error: {e}", exc_info=verbose)
        if not is_hook_run:
            console.print(f"[bold red]Error:[/bold red] {e}")
    except Exception as e:
        succeeded = False
        logger.error(f"Unexpected error: {e}", exc_info=True)
        if not is_hook_run:
            console.print(f"[bold red]Unexpected error:[/bold red] {e}")

    # A failing hook would abort 'git commit'
    if not succeeded and not is_hook_run:
        ctx.exit(1)


@cli.command("install-hook")
def install_hook():
    """
    Install a prepare-commit-msg hook that writes the message on 'git commit'.
    """
    console = Console()
    if not is_git_repository():
        console.print("[bold red]Error:[/bold red] not a git repository.")
        return

    hooks_dir = get_hooks_dir()
    hook_path = hooks_dir / "prepare-commit-msg"
    hooks_dir.mkdir(parents=True, exist_ok=True)

    if hook_path.exists():
        content = hook_path.read_text(encoding="utf-8", errors="replace")
        if HOOK_MARKER not in content:
            console.print("[bold yellow]Warning:[/bold yellow] a custom 'prepare-commit-msg' hook already exists.")
            if not click.confirm("Overwrite it? (back it up first)"):
                return

    hook_path.write_text(HOOK_SCRIPT, encoding="utf-8")

    st = os.stat(hook_path)
    os.chmod(hook_path, st.st_mode | stat.S_IEXEC | stat.S_IXGRP | stat.S_IXOTH)

    console.print("[bold green]✅ Git hook installed![/bold green]")
    console.print("'git commit' will now prefill the commit message for you.")


@cli.command("uninstall-hook")
def uninstall_hook():
    """
    Remove the aicommits git hook.
    """
    console = Console()
    if not is_git_repository():
        console.print("[bold red]Error:[/bold red] not a git repository.")
        return

    hook_path = get_hooks_dir() / "prepare-commit-msg"

    if not hook_path.exists():
        console.print("[yellow]No aicommits git hook found.[/yellow]")
        return

    if HOOK_MARKER in hook_path.read_text(encoding="utf-8", errors="replace"):
        hook_path.unlink()
        console.print("[bold green]✅ Git hook removed![/bold green]")
    else:
        console.print("[bold yellow]Warning:[/bold yellow] 'prepare-commit-msg' was not installed by aicommits. Remove it manually.")


@cli.command("stats")
@click.option(
    "-c", "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to a config file that replaces all other config layers.",
)
def stats(config_path: Optional[str]):
    """
    Show how many commit messages have been generated.
    """
    console = Console()
    try:
        config = load_and_merge_configs(custom_config_path=config_path)
    except AICommitsException as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        return
    usage = UsageStats(config.usage.path, enabled=config.usage.enabled)
    console.print(f"Generated commit messages: [bold]{usage.hits}[/bold]")


if __name__ == "__main__":
    cli()
