"""FastAPI dependencies shared by route modules."""

from fastapi import Request

from dishmanager.services.broadcast_base import BroadcastPublisher


def get_broadcaster(request: Request) -> BroadcastPublisher:
    """
    The application's broadcast channel.

    Set on `app.state.broadcaster` by create_app(); routes hand it to
    DishService explicitly. Tests override this dependency.
    """
    return request.app.state.broadcaster
