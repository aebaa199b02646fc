from contextlib import asynccontextmanager

from fastapi import FastAPI
from app.core.overpass_connection import overpass_connection
from app.routes.localities_route import router as localities_router

@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Release the shared Overpass client on shutdown
    await overpass_connection.aclose()

app = FastAPI(title="SpipUniform Geo Service", lifespan=lifespan)
app.include_router(localities_router)

# --- Root Endpoint ---
@app.get("/")
async def root():
    return {
        "message": "Welcome to the SpipUniform Geo Service",
        "status": "running",
        "endpoints": {
            "health": "/health",
            "fetch_localities": "/localities/fetch/{county}",
            "search_localities": "/localities/search",
            "county_bounds": "/counties/{county}/bounds",
            "docs": "/docs"
        },
        "version": "1.0.0"
    }

# --- Health Check ---
@app.get("/health")
async def health_check():
    return {"status": "ok", "service": "SpipUniform Geo Service"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True)
