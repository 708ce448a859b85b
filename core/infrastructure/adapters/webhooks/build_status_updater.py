"""
Build Status Updater Implementation.

Posts build events to the configured build webhook.
"""
import logging
from typing import Optional

import aiohttp

from core.application.interfaces import BuildStatusTarget, IBuildStatusUpdater
from core.domain.enums import BuildStatus
from core.settings.modules.integrations_settings import WebhookSettings


logger = logging.getLogger(__name__)


class WebhookBuildStatusUpdater(IBuildStatusUpdater):
    """
    Webhook implementation of build status updates.

    Best-effort: delivery problems are logged, never raised.
    """

    def __init__(self, settings: Optional[WebhookSettings] = None):
        self.settings = settings or WebhookSettings()
        self.webhook_url = self.settings.build_status_url
        self._timeout = aiohttp.ClientTimeout(total=self.settings.timeout_seconds)

    async def update_build_status(
        self,
        target: BuildStatusTarget,
        status: BuildStatus,
        branch: str,
        build_no: str,
    ) -> None:
        if not self.webhook_url:
            logger.warning("Build status webhook_url not configured, skipping status %s", status.value)
            return

        repo_ref = target.repo_ref
        payload = {
            "repository": {
                "owner_name": repo_ref.owner,
                "name": repo_ref.repo,
            },
            "name": f"Build #{build_no}",
            "number": build_no,
            "type": "push",
            "build_url": target.url,
            "status": status.value,
            "commit": repo_ref.sha,
            "branch": branch,
            "provider": repo_ref.provider_id,
        }
        url = f"{self.webhook_url.rstrip('/')}/{target.team}"

        try:
            async with aiohttp.ClientSession(timeout=self._timeout) as session:
                async with session.post(url, json=payload) as response:
                    if response.status >= 300:
                        error_text = await response.text()
                        logger.error("Build status webhook error: %s - %s", response.status, error_text)
                    else:
                        logger.info("Build #%s of %s reported as %s", build_no, repo_ref, status.value)
        except Exception as e:
            logger.error("Failed to send build status: %s", e, exc_info=True)
