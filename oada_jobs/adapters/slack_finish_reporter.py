"""Slack finish reporter posting to an incoming webhook."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import replace
from typing import Any, Final

from slack_sdk.webhook import WebhookClient

from oada_jobs.config.logging_config import get_logger
from oada_jobs.domain.exceptions import FinishReporterError
from oada_jobs.domain.models import Job, JobStatus
from oada_jobs.ports.finish_reporter import FinishReport

logger = get_logger(__name__)

SLACK_REPORTER_TYPE: Final[str] = "slack"
MAX_ERROR_TEXT_LENGTH: Final[int] = 500


def _error_text(result: Any) -> str | None:
    if isinstance(result, dict):
        message = result.get("message")
        if message:
            name = result.get("name")
            text = f"{name}: {message}" if name else str(message)
            return text[:MAX_ERROR_TEXT_LENGTH]
    return None


def build_finish_message(report: FinishReport) -> tuple[str, list[dict[str, Any]]]:
    """Build fallback text and Block Kit blocks for a finished job.

    Args:
        report: Finished job report

    Returns:
        Tuple of (text, blocks)

    Example:
        >>> text, blocks = build_finish_message(report)
        >>> text
        'Success: job J1 (demo) in service my-service'
    """
    is_success = report.status == JobStatus.SUCCESS
    icon = ":white_check_mark:" if is_success else ":x:"
    label = "Success" if is_success else "Failure"
    text = (
        f"{label}: job {report.job_id} ({report.job.type}) "
        f"in service {report.service.name}"
    )

    domain = report.config.option("domain")
    location = f"{domain.rstrip('/')}{report.finalpath}" if domain else report.finalpath

    details = [f"*Filed under:* `{location}`", f"*Record:* `{report.job.oada_id}`"]
    if not is_success:
        error = _error_text(report.job.result)
        if error:
            details.append(f"*Error:* {error}")

    blocks: list[dict[str, Any]] = [
        {"type": "section", "text": {"type": "mrkdwn", "text": f"{icon} *{text}*"}},
        {"type": "section", "text": {"type": "mrkdwn", "text": "\n".join(details)}},
    ]
    return text, blocks


class SlackFinishReporter:
    """Finish reporter for ``type: slack`` configs.

    Re-reads the job from the record store so the message reflects the
    finalized document, then posts to the config's ``posturl`` webhook.
    """

    def __init__(
        self, webhook_factory: Callable[[str], WebhookClient] = WebhookClient
    ) -> None:
        self._webhook_factory = webhook_factory

    async def __call__(self, report: FinishReport) -> None:
        logger.debug("slack_reporter_fetching_job", job_id=report.job_id)
        final_job = await Job.from_record_store(
            report.oada, report.job.oada_id, report.job_id
        )
        await self.on_finish(replace(report, job=final_job))

    async def on_finish(self, report: FinishReport) -> None:
        """Post the finish notification.

        Raises:
            FinishReporterError: If the webhook is not configured or rejects the post
        """
        posturl = report.config.option("posturl")
        if not posturl:
            raise FinishReporterError("slack finish reporter requires 'posturl'")

        text, blocks = build_finish_message(report)
        client = self._webhook_factory(posturl)
        try:
            response = await asyncio.to_thread(client.send, text=text, blocks=blocks)
        except OSError as exc:
            msg = f"Failed to post to Slack webhook: {exc}"
            raise FinishReporterError(msg) from exc

        if response.status_code != 200:
            raise FinishReporterError(
                f"Slack webhook returned {response.status_code}: {response.body}"
            )

        logger.info(
            "slack_finish_reported",
            job_id=report.job_id,
            service=report.service.name,
            status=report.status.value,
        )


__all__ = ["SLACK_REPORTER_TYPE", "SlackFinishReporter", "build_finish_message"]
