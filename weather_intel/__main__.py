"""Run the API with ``python -m weather_intel``."""

import uvicorn

from weather_intel.core.config import settings

if __name__ == "__main__":
    uvicorn.run("weather_intel:app", host=settings.host, port=settings.port, reload=False)
