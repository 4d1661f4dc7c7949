"""chatauth entrypoint.

Run with:
  python -m chatauth
"""

import uvicorn

from chatauth.config import Settings, configure_logging


def main() -> None:
    settings = Settings.from_env()
    configure_logging(settings)
    uvicorn.run("chatauth.app:app", host=settings.host, port=settings.port, reload=settings.reload)


if __name__ == "__main__":
    main()
