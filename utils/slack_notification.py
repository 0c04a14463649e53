import requests
import logging
from typing import Optional, List, Dict, Any

from django.conf import settings

logger = logging.getLogger(__name__)

STATUS_LABELS = {
    'pending': 'Pending',
    'in_progress': 'In Progress',
    'done': 'Done',
}


def send_slack_message(
    channel_id: str,
    message: str,
    blocks: Optional[List[Dict[str, Any]]] = None
) -> bool:
    """
    Send a message to a Slack channel using the configured bot token.

    Args:
        channel_id: The Slack channel ID (e.g., 'C123456789')
        message: Plain text message (used as fallback if blocks are provided)
        blocks: Optional Slack Block Kit formatted message blocks

    Returns:
        bool: True if message was sent successfully, False otherwise
    """
    token = getattr(settings, 'SLACK_BOT_TOKEN', '')
    if not token:
        logger.debug("Slack is not configured. Skipping message.")
        return False

    headers = {
        'Authorization': f'Bearer {token}',
        'Content-Type': 'application/json'
    }

    payload = {
        'channel': channel_id,
        'text': message
    }

    if blocks:
        payload['blocks'] = blocks

    try:
        response = requests.post(
            'https://slack.com/api/chat.postMessage',
            headers=headers,
            json=payload,
            timeout=getattr(settings, 'SLACK_TIMEOUT_SECONDS', 10)
        )
    except requests.RequestException as e:
        logger.error(f"Error sending Slack message: {str(e)}")
        return False

    if response.status_code != 200:
        logger.error(f"Slack API error: HTTP {response.status_code}")
        return False

    data = response.json()
    if not data.get('ok'):
        logger.error(f"Slack API error: {data.get('error')}")
        return False

    logger.info(f"Message sent to Slack channel {channel_id}")
    return True


def channel_for(project) -> str:
    if project is not None and project.slack_channel_id:
        return project.slack_channel_id
    return getattr(settings, 'SLACK_DEFAULT_CHANNEL', '')


def notify_task_status_change(task, project, changed_by: str, old_status: str, new_status: str) -> bool:
    """
    Announce a task status change in the project's Slack channel.

    Args:
        task: The engine Task record after the change
        project: The Project the task belongs to
        changed_by: Display name of the actor
        old_status: Status before the change
        new_status: Status after the change

    Returns:
        bool: True if a message was delivered
    """
    channel_id = channel_for(project)
    if not channel_id:
        logger.debug(f"No Slack channel for project {task.project}")
        return False

    old_label = STATUS_LABELS.get(old_status, old_status)
    new_label = STATUS_LABELS.get(new_status, new_status)

    plain_message = (
        f"📝 Task Update: {task.title}\n"
        f"Project: {task.project}\n"
        f"Changed by: {changed_by}\n"
        f"Status: {old_label} → {new_label}"
    )

    blocks = [
        {
            "type": "header",
            "text": {
                "type": "plain_text",
                "text": "📝 Task Update",
                "emoji": True
            }
        },
        {
            "type": "section",
            "fields": [
                {
                    "type": "mrkdwn",
                    "text": f"*Task:*\n{task.title}"
                },
                {
                    "type": "mrkdwn",
                    "text": f"*Project:*\n{task.project}"
                },
                {
                    "type": "mrkdwn",
                    "text": f"*Changed by:*\n{changed_by}"
                },
                {
                    "type": "mrkdwn",
                    "text": f"*Status:*\n{old_label} → {new_label}"
                }
            ]
        },
        {
            "type": "divider"
        }
    ]

    return send_slack_message(channel_id=channel_id, message=plain_message, blocks=blocks)
