# main.py

from logger import logger
from trading_dashboard.config import Settings
from trading_dashboard.main import create_app

settings = Settings.from_env()
app = create_app(settings)


# Run the app with Uvicorn when executed directly
if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting trading dashboard on {settings.host}:{settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port)
