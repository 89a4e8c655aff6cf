# main.py
import uvicorn

from storefront.config.settings import get_settings
from storefront.main import app

settings = get_settings()

if __name__ == "__main__":
    uvicorn.run(
        "storefront.main:app" if settings.reload else app,
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level.lower()
    )
