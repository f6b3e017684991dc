import uvicorn

from server.config import config


def main() -> None:
    settings = config.UVICORN
    # uvicorn refuses reload with more than one worker
    reload_enabled = settings.RELOAD and settings.WORKERS == 1

    uvicorn.run(
        "server.main:app",
        host=settings.HOST,
        port=settings.PORT,
        workers=settings.WORKERS,
        reload=reload_enabled,
    )


if __name__ == "__main__":
    main()
