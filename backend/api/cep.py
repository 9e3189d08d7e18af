from fastapi import APIRouter

from schemas import CepLookupRequest, CepLookupResponse
from services.cep_service import autofill_address

router = APIRouter(prefix="/api/cep", tags=["cep"])


@router.post("/lookup", response_model=CepLookupResponse)
async def lookup(payload: CepLookupRequest) -> CepLookupResponse:
    return await autofill_address(payload.cep, payload.address, payload.edited)
