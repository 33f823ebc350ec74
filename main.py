import logging

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

load_dotenv()

from config import DIRECTORY_BASE_URL, LOG_LEVEL
from recommendation.routes import router as recommendation_router

logging.basicConfig(level=LOG_LEVEL)
logging.info("Course recommender starting against %s", DIRECTORY_BASE_URL)

app = FastAPI(title="Course Recommender")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(recommendation_router)


@app.get("/health", tags=["meta"], summary="Health check")
def health():
    return {"status": "healthy"}
