"""
DishManager Client
==================

Python counterpart of the dashboard: a REST client, a Socket.IO connection
with a bounded reconnect policy, and DishSync, which keeps a local ordered
dish list up to date from both.
"""

from dishmanager.client.api import ApiError, DishApiClient
from dishmanager.client.config import ClientSettings
from dishmanager.client.connection import BroadcastConnection, ChannelUnavailableError
from dishmanager.client.state import DishStats, SyncStatus
from dishmanager.client.sync import DishSync

__all__ = [
    "ApiError",
    "BroadcastConnection",
    "ChannelUnavailableError",
    "ClientSettings",
    "DishApiClient",
    "DishStats",
    "DishSync",
    "SyncStatus",
]
