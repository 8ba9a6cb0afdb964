from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging

from app.core.config import settings
from app.core.errors import WeatherlyError
from app.api.v1.router import api_router
from app.db.base import Base
from app.db.session import SessionLocal, engine
from app.models import subscription  # noqa: F401  registra a tabela no Base
from app.services.notifier import WeatherNotifier
from app.services.push import get_push_service
from app.services.scheduler import WeatherUpdateScheduler, start_scheduler, stop_scheduler
from app.services.subscription_store import SubscriptionStore
from app.services.weather import get_weather_client

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

def build_scheduler() -> WeatherUpdateScheduler:
    store = SubscriptionStore(SessionLocal)
    notifier = WeatherNotifier(
        store=store,
        weather_client=get_weather_client(),
        push_service=get_push_service(store),
    )
    return WeatherUpdateScheduler(notifier, store, interval_hours=settings.UPDATE_INTERVAL_HOURS)

@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)

    # Inicia o agendador em background (alinhado na próxima hora par)
    if settings.SCHEDULER_ENABLED:
        start_scheduler(build_scheduler())

    yield
    # Para o agendador ao desligar
    stop_scheduler()

async def weatherly_error_handler(request: Request, exc: WeatherlyError):
    if exc.status_code >= 500:
        logger.error(f"❌ {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

async def request_validation_handler(request: Request, exc: RequestValidationError):
    # Requisição malformada é erro do cliente: 400 (e não o 422 padrão do FastAPI)
    fields = [".".join(str(p) for p in err["loc"] if p != "body") for err in exc.errors()]
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request format", "fields": fields},
    )

async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"Server error em {request.url.path}", exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})

def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME,
        lifespan=lifespan
    )

    if settings.FRONTEND_URL:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[settings.FRONTEND_URL],
            allow_credentials=True,
            allow_methods=["GET", "POST", "DELETE"],
            allow_headers=["*"],
        )

    app.add_exception_handler(WeatherlyError, weatherly_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(api_router, prefix=settings.API_V1_STR)

    @app.get("/")
    def root():
        return {"message": "Weatherly Push API rodando com Scheduler ativo!"}

    return app

app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)
