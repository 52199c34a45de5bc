"""Run the account service with uvicorn on the configured host and port."""

import uvicorn

from account_service.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "account_service.main:app",
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
