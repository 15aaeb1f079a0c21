"""Database configuration and shared clients"""

import os
from typing import Optional

import redis
from sqlalchemy import create_engine
from sqlmodel import Session

from shiftease.config import config

# Database URL from config
DATABASE_URL = config["database_url"]

# Validate DATABASE_URL exists
if not DATABASE_URL:
    raise ValueError(
        "DATABASE_URL environment variable is not set. "
        "Set DATABASE_URL in the deployment environment or local .env file."
    )

# Create engine
engine = create_engine(
    DATABASE_URL,
    echo=os.getenv("DEBUG", "false").lower() == "true",
    pool_pre_ping=True,
)

# Redis is optional; it backs the notification queue when configured
REDIS_URL = config["redis_url"]

redis_client: Optional[redis.Redis] = None
if REDIS_URL:
    redis_client = redis.from_url(
        REDIS_URL,
        decode_responses=True,
        max_connections=20,  # Max connections in pool
        socket_connect_timeout=5,  # Connection timeout in seconds
        socket_keepalive=True,  # Enable TCP keepalive
        retry_on_timeout=True,  # Retry on timeout
    )


def get_db():
    """Get database session"""
    with Session(engine) as session:
        yield session


def get_redis() -> Optional[redis.Redis]:
    """Get Redis client, or None when Redis is not configured"""
    return redis_client
