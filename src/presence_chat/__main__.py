"""Run the chat service with uvicorn."""

import uvicorn

from .config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run("presence_chat.api.app:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    main()
