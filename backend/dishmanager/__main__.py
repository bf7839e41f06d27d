"""Run the DishManager server: `python -m dishmanager`."""

import uvicorn

from dishmanager.config import settings


def main() -> None:
    uvicorn.run(
        "dishmanager.main:asgi_app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
