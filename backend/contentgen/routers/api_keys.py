from fastapi import APIRouter, Depends, HTTPException
from pydantic import AliasChoices, BaseModel, Field

from ..services import Services, get_services
from .auth import Admin, get_current_admin

router = APIRouter(prefix="/admin/api-keys", tags=["api_keys"])


class StoreKeyRequest(BaseModel):
	api_key: str = Field(validation_alias=AliasChoices("apiKey", "api_key"))


def _known_provider(services: Services, provider: str) -> str:
	if provider not in services.registry:
		raise HTTPException(status_code=404, detail=f"Unknown provider: {provider}")
	return services.registry.get(provider).name


@router.get("")
def list_keys(admin: Admin = Depends(get_current_admin), services: Services = Depends(get_services)):
	return {
		"keys": services.key_store.describe(),
		"status": services.resolver.status(services.registry.names()),
	}


@router.put("/{provider}")
def store_key(
	provider: str,
	req: StoreKeyRequest,
	admin: Admin = Depends(get_current_admin),
	services: Services = Depends(get_services),
):
	name = _known_provider(services, provider)
	try:
		services.resolver.store_key(name, req.api_key)
	except ValueError as e:
		raise HTTPException(status_code=400, detail=str(e))
	return {"ok": True, "provider": name}


@router.delete("/{provider}")
def deactivate_key(
	provider: str,
	admin: Admin = Depends(get_current_admin),
	services: Services = Depends(get_services),
):
	name = _known_provider(services, provider)
	if not services.resolver.deactivate(name):
		raise HTTPException(status_code=404, detail="No active key stored for this provider")
	return {"ok": True, "provider": name}
