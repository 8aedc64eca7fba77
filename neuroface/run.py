"""
Run the API server with uvicorn using host/port from the environment.
"""
import uvicorn

from neuroface.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run("neuroface.main:app", host=settings.host, port=settings.port, reload=False)


if __name__ == "__main__":
    main()
