"""Slack and Teams notifications for feature changes."""
import os
from typing import Any, Dict, Optional

from .models import Feature
from .utils import setup_logging, safe_request


logger = setup_logging(__name__)

STATUS_ICONS = {
    'detected': '🔍',
    'planned': '🗓️',
    'migrating': '🚧',
    'migrated': '✅',
    'failed': '❌',
}


class FeatureChangeNotifier:
    """Feature-change listener that posts each change to chat webhooks.

    Register with ``registry.on_feature_change(notifier)``.
    """

    def __init__(self, notifications_config: Optional[Dict[str, Any]] = None):
        self.notifications_config = notifications_config or {}

    @property
    def enabled(self) -> bool:
        return any(
            (self.notifications_config.get(channel) or {}).get('enabled', False)
            for channel in ('slack', 'teams')
        )

    def __call__(self, feature: Feature) -> None:
        self.send_slack_notification(feature)
        self.send_teams_notification(feature)

    def format_slack_message(self, feature: Feature) -> Dict:
        """Format message for Slack.

        Args:
            feature: Feature that changed

        Returns:
            Slack message payload
        """
        status = feature.status.value
        text = f"{STATUS_ICONS.get(status, '•')} *{feature.name}* is now *{status}*\n"
        text += f"Priority: {feature.priority.value}\n"
        if feature.description:
            text += f"{feature.description}\n"
        if feature.base44_usage:
            text += "\n*Base44 usage:*\n"
            for usage in feature.base44_usage[:5]:
                text += f"  • `{usage}`\n"

        return {
            "text": text,
            "unfurl_links": False
        }

    def format_teams_message(self, feature: Feature) -> Dict:
        """Format message for Teams.

        Args:
            feature: Feature that changed

        Returns:
            Teams message payload
        """
        facts = [
            {"name": "Status", "value": feature.status.value},
            {"name": "Priority", "value": feature.priority.value},
            {"name": "Feature ID", "value": feature.id},
        ]
        if feature.migrated_at:
            facts.append({"name": "Migrated At", "value": feature.migrated_at})

        return {
            "@type": "MessageCard",
            "@context": "https://schema.org/extensions",
            "summary": f"Feature migration: {feature.name}",
            "themeColor": "0078D7",
            "title": f"Feature migration: {feature.name}",
            "sections": [{"activityTitle": feature.description, "facts": facts}],
            "potentialAction": []
        }

    def send_slack_notification(self, feature: Feature) -> bool:
        """Send notification to Slack.

        Returns:
            True on success or when Slack is disabled, False on failure
        """
        return self._post('slack', self.format_slack_message(feature), 'SLACK_WEBHOOK_URL')

    def send_teams_notification(self, feature: Feature) -> bool:
        """Send notification to Teams.

        Returns:
            True on success or when Teams is disabled, False on failure
        """
        return self._post('teams', self.format_teams_message(feature), 'TEAMS_WEBHOOK_URL')

    def _post(self, channel: str, message: Dict, default_env: str) -> bool:
        channel_config = self.notifications_config.get(channel) or {}

        if not channel_config.get('enabled', False):
            logger.debug(f"{channel.title()} notifications are disabled")
            return True

        webhook_env = channel_config.get('webhook_url_env', default_env)
        webhook_url = os.environ.get(webhook_env)

        if not webhook_url:
            logger.warning(f"{channel.title()} webhook URL not found in environment variable: {webhook_env}")
            return False

        logger.info(f"Sending {channel.title()} notification")
        response = safe_request(
            webhook_url,
            method="POST",
            logger=logger,
            json=message,
            headers={'Content-Type': 'application/json'}
        )

        if response is not None and response.status_code == 200:
            logger.info(f"{channel.title()} notification sent successfully")
            return True

        logger.error(f"Failed to send {channel.title()} notification")
        return False
