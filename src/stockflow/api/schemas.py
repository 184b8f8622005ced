"""Pydantic request/response schemas for the Stockflow API.

These are external contracts, separate from the internal Protean commands.
Amounts are exact decimals and serialize as strings.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class StatusResponse(BaseModel):
    status: str = "ok"


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------
class RegisterUserRequest(BaseModel):
    name: str
    email: str
    role: str = "customer"


class UserIdResponse(BaseModel):
    user_id: str


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------
class RegisterProductRequest(BaseModel):
    name: str
    description: str | None = None
    price: Decimal


class ChangePriceRequest(BaseModel):
    price: Decimal


class ProductIdResponse(BaseModel):
    product_id: str


class ProductListingItem(BaseModel):
    product_id: str
    name: str
    price: Decimal
    stock: int | None = None


class ProductListingResponse(BaseModel):
    products: list[ProductListingItem]


# ---------------------------------------------------------------------------
# Stock
# ---------------------------------------------------------------------------
class InitializeStockRequest(BaseModel):
    product_id: str
    quantity: int = Field(ge=0)
    reorder_threshold: int = Field(ge=0, default=10)


class StockResponse(BaseModel):
    product_id: str
    quantity: int
    reorder_threshold: int
    is_low: bool
    updated_at: datetime | None = None


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class CreateOrderRequest(BaseModel):
    user_id: str


class OrderIdResponse(BaseModel):
    order_id: str


class AddLineRequest(BaseModel):
    product_id: str
    quantity: int


class LineIdResponse(BaseModel):
    line_id: str


class TransitionRequest(BaseModel):
    target_state: str


class OrderLineResponse(BaseModel):
    line_id: str
    product_id: str
    quantity: int
    unit_price_snapshot: Decimal
    subtotal: Decimal
    added_at: datetime | None = None


class OrderResponse(BaseModel):
    order_id: str
    user_id: str
    state: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
    lines: list[OrderLineResponse]
    total: Decimal


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------
class OrderTotalResponse(BaseModel):
    order_id: str
    total: Decimal


class LowStockRow(BaseModel):
    product_id: str
    name: str | None = None
    quantity: int
    reorder_threshold: int


class LowStockResponse(BaseModel):
    products: list[LowStockRow]


class BestSellerRow(BaseModel):
    product_id: str
    name: str | None = None
    units_sold: int
    revenue: Decimal


class BestSellersResponse(BaseModel):
    products: list[BestSellerRow]


class TopCustomerRow(BaseModel):
    user_id: str
    name: str | None = None
    order_count: int
    total_spent: Decimal
    average_order: Decimal


class TopCustomersResponse(BaseModel):
    customers: list[TopCustomerRow]


class MonthlySalesRow(BaseModel):
    month: str  # MM-YYYY
    order_count: int
    revenue: Decimal


class MonthlySalesResponse(BaseModel):
    months: list[MonthlySalesRow]
