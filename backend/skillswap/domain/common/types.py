"""Common domain types."""
from datetime import datetime
from uuid import uuid4


def generate_id() -> str:
    """Generate a new UUID string."""
    return str(uuid4())


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the DateTime columns."""
    return datetime.utcnow()
