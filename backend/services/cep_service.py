import asyncio
import contextlib
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Optional

import httpx

from config import settings
from schemas import AddressEdits, CepLookupResponse, DeliveryAddress
from services.order_form import CEP_LENGTH, only_digits

logger = logging.getLogger("maquininhas")

CEP_NOT_FOUND = "CEP não encontrado."
CEP_UNAVAILABLE = "Não foi possível consultar o CEP agora."

# ViaCEP field -> delivery address field
VIACEP_FIELDS = {
    "logradouro": "street",
    "complemento": "complement",
    "bairro": "neighborhood",
    "localidade": "city",
    "uf": "state",
}


class CepLookupError(Exception):
    pass


@dataclass(frozen=True)
class CepResult:
    street: Optional[str] = None
    complement: Optional[str] = None
    neighborhood: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None


def _parse_viacep(data: Dict[str, object]) -> CepResult:
    values: Dict[str, Optional[str]] = {}
    for source, target in VIACEP_FIELDS.items():
        value = data.get(source)
        values[target] = value if isinstance(value, str) else None
    return CepResult(**values)


async def lookup_cep(
    cep: str, transport: Optional[httpx.AsyncBaseTransport] = None
) -> CepResult:
    digits = only_digits(cep)
    if len(digits) != CEP_LENGTH:
        raise CepLookupError("Informe um CEP válido (8 dígitos).")
    url = f"{settings.viacep_url.rstrip('/')}/{digits}/json/"
    try:
        async with httpx.AsyncClient(
            timeout=settings.cep_lookup_timeout_seconds, transport=transport
        ) as client:
            response = await client.get(url)
        response.raise_for_status()
        data = response.json()
    except (httpx.HTTPError, ValueError) as exc:
        logger.warning("CEP lookup failed for %s: %s", digits, exc)
        raise CepLookupError(CEP_UNAVAILABLE) from exc
    if not isinstance(data, dict) or data.get("erro"):
        raise CepLookupError(CEP_NOT_FOUND)
    return _parse_viacep(data)


def merge_address(
    address: DeliveryAddress, result: CepResult, edited: AddressEdits
) -> DeliveryAddress:
    """Fill the lookup result into every field the user has not typed into."""
    merged = address.model_dump()
    for field_name in VIACEP_FIELDS.values():
        if getattr(edited, field_name):
            continue
        value = getattr(result, field_name)
        if value is not None:
            merged[field_name] = value
    return DeliveryAddress(**merged)


async def autofill_address(
    cep: str,
    address: DeliveryAddress,
    edited: AddressEdits,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> CepLookupResponse:
    digits = only_digits(cep)
    try:
        result = await lookup_cep(digits, transport=transport)
    except CepLookupError as exc:
        return CepLookupResponse(cep=digits, address=address, notice=str(exc))
    return CepLookupResponse(cep=digits, address=merge_address(address, result, edited))


class CepAutofill:
    """Debounced lookups: only the most recently scheduled CEP gets resolved.

    The HTTP route is a single stateless lookup; this helper is for callers
    that own a long-lived form session in process (a worker or an
    interactive client) and feed it every keystroke::

        autofill = CepAutofill()
        autofill.schedule(typed_cep)   # cancels any lookup still waiting
        result = await autofill.wait() # None when superseded or incomplete

    Errors from the lookup propagate out of ``wait``.
    """

    def __init__(
        self,
        lookup: Callable[[str], Awaitable[CepResult]] = lookup_cep,
        delay_seconds: Optional[float] = None,
    ) -> None:
        self._lookup = lookup
        self.delay_seconds = (
            settings.cep_debounce_seconds if delay_seconds is None else delay_seconds
        )
        self._task: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def schedule(self, cep: str) -> Optional[asyncio.Task]:
        self.cancel()
        digits = only_digits(cep)
        if len(digits) != CEP_LENGTH:
            return None
        self._task = asyncio.create_task(self._run(digits))
        return self._task

    def cancel(self) -> None:
        if self.pending:
            self._task.cancel()
        self._task = None

    async def wait(self) -> Optional[CepResult]:
        if not self._task:
            return None
        with contextlib.suppress(asyncio.CancelledError):
            return await self._task
        return None

    async def _run(self, cep: str) -> CepResult:
        await asyncio.sleep(self.delay_seconds)
        return await self._lookup(cep)
