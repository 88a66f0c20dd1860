import logging
import os

from fastapi import FastAPI

from api.router import router as analytics_router

logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO"))

app = FastAPI(title="Compost Monitor Analytics")
app.include_router(analytics_router)
