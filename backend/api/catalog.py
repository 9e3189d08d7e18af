from fastapi import APIRouter

from schemas import CatalogResponse, MachineType
from services.catalog_service import build_catalog_response

router = APIRouter(prefix="/api/catalog", tags=["catalog"])


@router.get("", response_model=CatalogResponse)
async def read_catalog(
    machine_type: MachineType = "subadquirente",
    quantity: float = 1,
) -> CatalogResponse:
    return build_catalog_response(machine_type, quantity)
