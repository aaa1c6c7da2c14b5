import uvicorn

from .config import config


def main():
    # Run the FastAPI application using Uvicorn
    uvicorn.run(
        "sheetxml.app:app",
        host=config.HOST,
        port=config.PORT,
        reload=config.DEBUG,
        log_level=config.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
