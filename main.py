"""Main entrypoint for running the Extracto Normalizer API with Uvicorn."""

from extracto.core.settings import get_settings
from extracto.main import app  # noqa: F401

if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run("extracto.main:app", host=settings.server_host, port=settings.server_port, reload=True)
