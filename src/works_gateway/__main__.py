import uvicorn

from works_gateway.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "works_gateway.main:app",
        host="0.0.0.0",
        port=settings.PORT,
        reload=False,
        log_config=None,  # logging is configured by create_app
    )


if __name__ == "__main__":
    main()
