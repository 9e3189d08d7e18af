from datetime import datetime
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field

MachineType = Literal["pagseguro", "subadquirente"]
PaymentMethod = Literal["avista", "parcelado"]
OrderStatus = Literal["pending", "sent", "completed", "cancelled"]


class OrderForm(BaseModel):
    customer_name: str = ""
    customer_phone: str = ""
    customer_email: str = ""
    pagseguro_email: str = Field(
        default="", description="Required only for PagSeguro machines"
    )
    delivery_cep: str = ""
    delivery_street: str = ""
    delivery_number: str = ""
    delivery_complement: str = ""
    delivery_neighborhood: str = ""
    delivery_city: str = ""
    delivery_state: str = ""
    machine_type: MachineType = "subadquirente"
    selected_machine: str = ""
    quantity: Union[int, float] = 1
    payment_method: PaymentMethod = "avista"
    installments: Union[int, float] = 12


class OrderResponse(BaseModel):
    id: str
    created_by: Optional[str] = None
    user_email: Optional[str] = None
    customer_name: str
    customer_phone: str
    customer_email: Optional[str] = None
    pagseguro_email: Optional[str] = None
    delivery_address: Optional[str] = None
    machine_type: MachineType
    selected_machine: str
    quantity: int
    payment_method: PaymentMethod
    payment_method_label: str
    installments: Optional[int] = None
    total_price: float
    installment_price: Optional[float] = None
    status: OrderStatus
    status_label: str
    whatsapp_sent: bool = False
    created_at: Optional[datetime] = None


class OrderCreateResponse(BaseModel):
    order: OrderResponse
    form: OrderForm


class OrderListResponse(BaseModel):
    items: List[OrderResponse]


class OrderStatusUpdate(BaseModel):
    status: OrderStatus
    whatsapp_sent: Optional[bool] = None


class AdminOrderStatusUpdate(BaseModel):
    status: OrderStatus


class OrderStatusUpdateResponse(BaseModel):
    ok: bool
    order: OrderResponse


class QuoteResponse(BaseModel):
    machine_type: MachineType
    selected_machine: str
    quantity: int
    payment_method: PaymentMethod
    unit_price: float
    total_avista: float
    installments: int
    unit_installment: Optional[float]
    total_installment: Optional[float]
    installment_label: Optional[str] = None


class MachineCard(BaseModel):
    name: str
    unit_price: float
    total_price: float
    installments: int
    unit_installment: Optional[float]
    installment_label: Optional[str] = None
    tiered: bool = False


class CatalogResponse(BaseModel):
    machine_type: MachineType
    quantity: int
    machines: List[MachineCard]


class DeliveryAddress(BaseModel):
    street: str = ""
    complement: str = ""
    neighborhood: str = ""
    city: str = ""
    state: str = ""


class AddressEdits(BaseModel):
    street: bool = False
    complement: bool = False
    neighborhood: bool = False
    city: bool = False
    state: bool = False


class CepLookupRequest(BaseModel):
    cep: str
    address: DeliveryAddress = Field(default_factory=DeliveryAddress)
    edited: AddressEdits = Field(default_factory=AddressEdits)


class CepLookupResponse(BaseModel):
    cep: str
    address: DeliveryAddress
    notice: Optional[str] = None


class AuthInfoResponse(BaseModel):
    is_authenticated: bool
    is_anonymous: bool
    is_admin: bool
    email: Optional[str]
    user_id: Optional[str]
