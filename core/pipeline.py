import asyncio
from typing import List, Optional, Sequence

from config.models import Config
from core.budget import TokenBudget
from core.contracts.models import (
    Change,
    CompletionResult,
    CompletionStatus,
    Notification,
    Repository,
)
from core.contracts.notifier import Notifier
from core.contracts.provider import LLMProvider
from core.contracts.target import MessageTarget
from core.contracts.usage import UsageCounter
from core.diff.aggregator import DiffBuilder
from core.llm.router import get_provider
from core.prompt.builder import PromptBuilder
from utils.errors import DiffError
from utils.logger import logger

UNKNOWN_ERROR = "Unknown error"


class CommitMessageGenerator:
    """
    The main pipeline for generating commit messages.

    Builds the diff and the prompt on a worker thread, checks the token budget
    and the message destination, then issues a single backend request. Every
    run ends in exactly one outcome: the message written to the destination,
    or one notification.
    """

    def __init__(
        self,
        config: Config,
        notifier: Notifier,
        usage: UsageCounter,
        *,
        provider: Optional[LLMProvider] = None,
        diff_builder: Optional[DiffBuilder] = None,
        prompt_builder: Optional[PromptBuilder] = None,
        budget: Optional[TokenBudget] = None,
    ):
        """
        Args:
            config: The configuration object.
            notifier: Receives failure notifications.
            usage: Records one hit per successful generation.
            provider: The backend client. Created from ``config.model`` on first use if omitted.
        """
        self.config = config
        self.notifier = notifier
        self.usage = usage
        self._provider = provider
        self.diff_builder = diff_builder or DiffBuilder()
        self.prompt_builder = prompt_builder or PromptBuilder(
            template_dir=config.prompt.template_dir,
            template_name=config.prompt.template,
            language=config.prompt.language,
        )
        self.budget = budget or TokenBudget(
            max_tokens=config.prompt.max_tokens,
            encoding=config.prompt.encoding,
        )

    async def generate(self, changes: Sequence[Change], target: Optional[MessageTarget]) -> CompletionResult:
        """
        Generates a commit message for ``changes`` and writes it to ``target``.

        The write-back happens on the calling event loop's thread. Cancelling
        the task during the backend request skips both the write-back and the
        notification.

        Raises:
            FormatterError: If the prompt template cannot be rendered.
        """
        logger.info("Starting commit message generation pipeline...")

        # 1. Diff
        try:
            diff, repositories = await asyncio.to_thread(self.diff_builder.build, list(changes))
        except DiffError as e:
            logger.error(f"Failed to compute diff: {e}")
            return self._fail(CompletionStatus.DIFF_FAILED, Notification.diff_failed(str(e)), error=str(e))

        if not diff.strip():
            logger.info("Diff is empty, nothing to describe.")
            return self._fail(CompletionStatus.EMPTY_DIFF, Notification.empty_diff())

        # 2. Prompt and token budget
        prompt = self.prompt_builder.build(diff)
        token_count = await asyncio.to_thread(self.budget.count, prompt)
        logger.info(f"Prompt uses {token_count} tokens (limit {self.budget.max_tokens}).")
        if token_count > self.budget.max_tokens:
            return self._fail(
                CompletionStatus.PROMPT_TOO_LARGE,
                Notification.prompt_too_large(),
                token_count=token_count,
                repositories=repositories,
            )

        # 3. Destination
        if target is None:
            return self._fail(
                CompletionStatus.NO_TARGET,
                Notification.no_target(),
                token_count=token_count,
                repositories=repositories,
            )

        # 4. One backend request
        logger.debug(f"Generated prompt for LLM:\n{prompt}")
        try:
            provider = self._get_provider()
            message = await provider.generate(prompt, n=self.config.model.candidates)
        except Exception as e:
            error = str(e) or UNKNOWN_ERROR
            logger.error(f"Failed to generate message from provider: {error}")
            target.set_text(self.config.output.error_placeholder)
            return self._fail(
                CompletionStatus.BACKEND_ERROR,
                Notification.backend_error(error),
                error=error,
                token_count=token_count,
                repositories=repositories,
            )

        # 5. Write-back
        target.set_text(message)
        self.usage.record_hit()
        logger.success("Commit message generation pipeline completed successfully!")
        return CompletionResult(
            status=CompletionStatus.SUCCESS,
            message=message,
            token_count=token_count,
            repositories=repositories,
        )

    def _get_provider(self) -> LLMProvider:
        if self._provider is None:
            logger.info(f"Creating LLM provider '{self.config.model.provider}'...")
            self._provider = get_provider(self.config.model)
        return self._provider

    def _fail(
        self,
        status: CompletionStatus,
        notification: Notification,
        *,
        error: Optional[str] = None,
        token_count: Optional[int] = None,
        repositories: Optional[List[Repository]] = None,
    ) -> CompletionResult:
        self.notifier.notify(notification)
        return CompletionResult(
            status=status,
            error=error,
            token_count=token_count,
            repositories=repositories or [],
        )
