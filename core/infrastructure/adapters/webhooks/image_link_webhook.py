"""
Image Link Webhook Implementation.

Links a published image or stored artifact to the commit that produced it.
"""
import logging
from typing import Optional

import aiohttp

from core.application.interfaces import IImageLinkWebhook
from core.settings.modules.integrations_settings import WebhookSettings


logger = logging.getLogger(__name__)


class ImageLinkWebhook(IImageLinkWebhook):
    """Posts image links to the configured webhook endpoint."""

    def __init__(self, settings: Optional[WebhookSettings] = None):
        self.settings = settings or WebhookSettings()
        self.webhook_url = self.settings.image_link_url
        self._timeout = aiohttp.ClientTimeout(total=self.settings.timeout_seconds)

    async def post_image_link(
        self, owner: str, repo: str, sha: str, image_url: str, team: str
    ) -> bool:
        """
        Post the image link.

        Returns:
            True when the endpoint acknowledged with a 2xx status
        """
        if not self.webhook_url:
            logger.warning("Image link webhook_url not configured, cannot link %s", image_url)
            return False

        payload = {
            "git": {"owner": owner, "repo": repo, "sha": sha},
            "docker": {"image": image_url},
            "type": "link-image",
        }
        url = f"{self.webhook_url.rstrip('/')}/{team}"

        try:
            async with aiohttp.ClientSession(timeout=self._timeout) as session:
                async with session.post(url, json=payload) as response:
                    if response.status >= 300:
                        error_text = await response.text()
                        logger.error("Image link webhook error: %s - %s", response.status, error_text)
                        return False
        except (aiohttp.ClientError, OSError, TimeoutError) as e:
            logger.error("Failed to post image link for %s/%s@%s: %s", owner, repo, sha[:7], e)
            return False

        logger.info("Linked image %s to %s/%s@%s", image_url, owner, repo, sha[:7])
        return True
