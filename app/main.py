from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.core.config import configure_logging, settings
from app.core.http_logging import install_request_logging
from app.api.v1.router import router as v1_router

configure_logging()

app = FastAPI(title=settings.APP_NAME, version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
install_request_logging(app)

app.include_router(v1_router, prefix="/api/v1")

@app.get("/health")
def health():
    return {"status": "ok", "service": settings.APP_NAME}
