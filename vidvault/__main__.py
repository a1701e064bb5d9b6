"""
Run the API server: python -m vidvault
"""
import uvicorn

from vidvault.config import get_settings


def main():
    settings = get_settings()
    uvicorn.run("vidvault.main:app", host=settings.host, port=settings.port, reload=settings.debug)


if __name__ == "__main__":
    main()
