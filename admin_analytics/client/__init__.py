"""Client-side collector that reports admin activity to the tracking API."""
from admin_analytics.client.collector import ActivityCollector
from admin_analytics.client.fingerprint import PageContext, device_type, parse_user_agent
from admin_analytics.client.store import FileStore, MemoryStore

__all__ = [
    "ActivityCollector",
    "PageContext",
    "FileStore",
    "MemoryStore",
    "device_type",
    "parse_user_agent",
]
