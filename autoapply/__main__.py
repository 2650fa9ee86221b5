"""Run the AutoApply server: python -m autoapply"""
import uvicorn

from .config import settings


if __name__ == "__main__":
    uvicorn.run(
        "autoapply.main:app",
        host=settings.host,
        port=settings.port,
    )
