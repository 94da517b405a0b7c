import uvicorn

from rental.core.config import settings


def main() -> None:
    uvicorn.run(
        "rental.main:app",
        host=settings.host,
        port=settings.port,
        log_config=None,  # setup_logging() owns the handlers
    )


if __name__ == "__main__":
    main()
