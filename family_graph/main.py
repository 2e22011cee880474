import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from family_graph.core.config import settings
from family_graph.db.memory import connect_to_memory, close_memory
from family_graph.routers import families, persons, relationships, tags, tree

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    await connect_to_memory()
    logger.info("%s started (%s)", settings.APP_NAME, settings.APP_ENV)
    yield
    await close_memory()

# Expose the Swagger UI at the root URL so visiting http://127.0.0.1:8000 opens the docs
app = FastAPI(title=settings.APP_NAME, lifespan=lifespan, docs_url="/")

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(families.router)
app.include_router(persons.router)
app.include_router(relationships.router)
app.include_router(tags.router)
app.include_router(tree.router)

@app.get("/healthz")
async def healthz():
    return {"status": "ok"}

@app.get("/version")
async def version():
    return {"name": settings.APP_NAME, "env": settings.APP_ENV}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "family_graph.main:app",
        host=settings.APP_HOST,
        port=settings.APP_PORT,
        reload=settings.APP_ENV == "dev",
    )
