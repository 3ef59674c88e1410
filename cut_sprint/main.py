import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cut_sprint import config
from cut_sprint.database import Base, engine
# register tables on Base.metadata
import cut_sprint.models.user
import cut_sprint.models.product
import cut_sprint.models.meal
import cut_sprint.models.weight
import cut_sprint.models.weekly_budget
import cut_sprint.models.ai_usage
from cut_sprint.routes import ai, analytics, nutrition, weekly_budgets, weights

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

app = FastAPI(
    title="Cut Sprint API",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

Base.metadata.create_all(bind=engine)

origins_env = config.FRONT_ORIGINS
allow_origins = (
    [o.strip() for o in origins_env.split(",")] if origins_env and origins_env != "*" else ["*"]
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(nutrition.router)
app.include_router(weekly_budgets.router)
app.include_router(weights.router)
app.include_router(analytics.router)
app.include_router(ai.router)


@app.get("/")
def health():
    return {"status": "ok"}
