# spotfeed/main.py
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from spotfeed.config import CORS_ORIGINS, LOG_LEVEL
from spotfeed.routers import feed, place

# Configure logging
handler = logging.StreamHandler()
handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
root_logger = logging.getLogger("spotfeed")
root_logger.setLevel(LOG_LEVEL)
if not root_logger.handlers:
    root_logger.addHandler(handler)

app = FastAPI(
    title="Spotfeed Backend",
    description="Discovery and historical photo feeds for places and spots",
    version="1.0.0",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(feed.router)
app.include_router(place.router)


@app.get("/")
async def root():
    return {"message": "Welcome to Spotfeed API, see what was shared where you are and where you've been"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("spotfeed.main:app", host="0.0.0.0", port=8000)
