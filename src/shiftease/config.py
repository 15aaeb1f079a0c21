"""Configuration loader for ShiftEase with environment-specific support"""

import os
from pathlib import Path

from dotenv import load_dotenv

project_dir = Path(__file__).parent.parent.parent
env_path = project_dir / ".env"

# Load .env file if it exists. For local development only.
if env_path.exists():
    load_dotenv(env_path)

# Configuration dictionary - set once at initialization
config = {
    "database_url": os.getenv("DATABASE_URL"),
    # Optional. When unset, notifications are delivered in-process.
    "redis_url": os.getenv("REDIS_URL"),
    "port": int(os.getenv("PORT", "8080")),
    "log_level": os.getenv("LOG_LEVEL", "INFO"),
    "environment": os.getenv("ENVIRONMENT", "development"),
    "auth0_domain": os.getenv("AUTH0_DOMAIN"),
    "auth0_audience": os.getenv("AUTH0_AUDIENCE"),
    "mailgun_api_key": os.getenv("MAILGUN_API_KEY"),
    "mailgun_domain": os.getenv("MAILGUN_DOMAIN"),
    "sender_email": os.getenv("SENDER_EMAIL"),
    # Inbox that receives registration notices
    "notification_email": os.getenv("NOTIFICATION_EMAIL"),
    "notification_queue_key": os.getenv(
        "NOTIFICATION_QUEUE_KEY", "shiftease:notifications"
    ),
    "pexels_api_key": os.getenv("PEXELS_API_KEY"),
    "enable_auto_event_image": os.getenv("ENABLE_AUTO_EVENT_IMAGE", "false").lower()
    == "true",
    # Comma separated list, "*" allows all origins
    "cors_origins": [
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", "*").split(",")
        if origin.strip()
    ],
}
