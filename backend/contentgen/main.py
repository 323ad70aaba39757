import logging

from fastapi import FastAPI

from .db import Base, engine
from .providers import build_registry
from .services import build_services
from .settings import settings
from .routers import auth
from .routers import generation
from .routers import api_keys
from .routers import templates

logging.basicConfig(
	level=getattr(logging, settings.log_level.upper(), logging.INFO),
	format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Literacy Content Generation API")
app.include_router(auth.router)
app.include_router(generation.router)
app.include_router(api_keys.router)
app.include_router(templates.router)


@app.get("/info")
def root():
	return {
		"status": "ok",
		"providers": build_registry(settings).names(),
		"env_keys_configured": {name: bool(key) for name, key in settings.env_api_keys().items()},
	}


@app.on_event("startup")
async def startup_event():
	# Initialize DB schema
	Base.metadata.create_all(bind=engine)
	app.state.services = build_services(settings)
	logger.info("Content generation service ready (providers: %s)", ", ".join(app.state.services.registry.names()))


@app.on_event("shutdown")
async def shutdown_event():
	services = getattr(app.state, "services", None)
	if services is not None:
		await services.dispatcher.aclose()
