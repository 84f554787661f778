"""Run the API with uvicorn: ``python -m htmlshelf``."""
import uvicorn

from htmlshelf.config import settings


def main():
    uvicorn.run("htmlshelf.main:app", host=settings.API_HOST, port=settings.API_PORT)


if __name__ == "__main__":
    main()
