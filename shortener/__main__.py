import uvicorn

from shortener.config import Settings


def main():
    settings = Settings()
    uvicorn.run("shortener.main:create_app", factory=True, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
