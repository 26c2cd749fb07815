"""Run the address book API with uvicorn."""

import uvicorn

from address_book.core.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "address_book.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
