"""FastAPI routes for Stockflow: users, products, stock, orders and reports."""

from fastapi import APIRouter, Query
from protean.utils.globals import current_domain

from stockflow import service
from stockflow.api.schemas import (
    AddLineRequest,
    BestSellersResponse,
    ChangePriceRequest,
    CreateOrderRequest,
    InitializeStockRequest,
    LineIdResponse,
    LowStockResponse,
    MonthlySalesResponse,
    OrderIdResponse,
    OrderResponse,
    OrderTotalResponse,
    ProductIdResponse,
    ProductListingResponse,
    RegisterProductRequest,
    RegisterUserRequest,
    StatusResponse,
    StockResponse,
    TopCustomersResponse,
    TransitionRequest,
    UserIdResponse,
)
from stockflow.catalogue.pricing import ChangeProductPrice
from stockflow.catalogue.registration import RegisterProduct
from stockflow.identity.registration import RegisterUser
from stockflow.identity.removal import RemoveUser
from stockflow.reporting import queries

# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------
user_router = APIRouter(prefix="/users", tags=["users"])


@user_router.post("", status_code=201, response_model=UserIdResponse)
async def register_user(body: RegisterUserRequest) -> UserIdResponse:
    command = RegisterUser(name=body.name, email=body.email, role=body.role)
    result = current_domain.process(command, asynchronous=False)
    return UserIdResponse(user_id=result)


@user_router.delete("/{user_id}", response_model=StatusResponse)
async def remove_user(user_id: str) -> StatusResponse:
    current_domain.process(RemoveUser(user_id=user_id), asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


@product_router.post("", status_code=201, response_model=ProductIdResponse)
async def register_product(body: RegisterProductRequest) -> ProductIdResponse:
    command = RegisterProduct(
        name=body.name,
        description=body.description,
        price=str(body.price),
    )
    result = current_domain.process(command, asynchronous=False)
    return ProductIdResponse(product_id=result)


@product_router.get("", response_model=ProductListingResponse)
async def list_products(search: str | None = None) -> ProductListingResponse:
    rows = queries.search_products(search) if search else queries.product_listing()
    return ProductListingResponse(products=rows)


@product_router.put("/{product_id}/price", response_model=StatusResponse)
async def change_product_price(product_id: str, body: ChangePriceRequest) -> StatusResponse:
    command = ChangeProductPrice(product_id=product_id, price=str(body.price))
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@product_router.delete("/{product_id}", response_model=StatusResponse)
async def remove_product(product_id: str) -> StatusResponse:
    service.remove_product(product_id)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Stock
# ---------------------------------------------------------------------------
stock_router = APIRouter(prefix="/stock", tags=["stock"])


@stock_router.post("", status_code=201, response_model=StockResponse)
async def initialize_stock(body: InitializeStockRequest) -> StockResponse:
    product_id = service.initialize_stock(body.product_id, body.quantity, body.reorder_threshold)
    return StockResponse(**service.get_stock(product_id))


@stock_router.get("/{product_id}", response_model=StockResponse)
async def get_stock(product_id: str) -> StockResponse:
    return StockResponse(**service.get_stock(product_id))


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderIdResponse)
async def create_order(body: CreateOrderRequest) -> OrderIdResponse:
    return OrderIdResponse(order_id=service.create_order(body.user_id))


@order_router.post("/{order_id}/lines", status_code=201, response_model=LineIdResponse)
async def add_line(order_id: str, body: AddLineRequest) -> LineIdResponse:
    line_id = service.add_or_merge_line(order_id, body.product_id, body.quantity)
    return LineIdResponse(line_id=line_id)


@order_router.put("/{order_id}/state", response_model=OrderResponse)
async def transition_state(order_id: str, body: TransitionRequest) -> OrderResponse:
    service.transition_state(order_id, body.target_state)
    return OrderResponse(**service.get_order(order_id))


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str) -> OrderResponse:
    return OrderResponse(**service.get_order(order_id))


@order_router.delete("/{order_id}", response_model=StatusResponse)
async def discard_order(order_id: str) -> StatusResponse:
    service.discard_order(order_id)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------
report_router = APIRouter(prefix="/reports", tags=["reports"])


@report_router.get("/low-stock", response_model=LowStockResponse)
async def low_stock() -> LowStockResponse:
    return LowStockResponse(products=queries.low_stock())


@report_router.get("/orders/{order_id}/total", response_model=OrderTotalResponse)
async def order_total(order_id: str) -> OrderTotalResponse:
    return OrderTotalResponse(order_id=order_id, total=queries.order_total(order_id))


@report_router.get("/best-sellers", response_model=BestSellersResponse)
async def best_sellers(limit: int = Query(default=10, ge=1, le=100)) -> BestSellersResponse:
    return BestSellersResponse(products=queries.best_sellers(limit=limit))


@report_router.get("/top-customers", response_model=TopCustomersResponse)
async def top_customers(limit: int = Query(default=10, ge=1, le=100)) -> TopCustomersResponse:
    return TopCustomersResponse(customers=queries.top_customers(limit=limit))


@report_router.get("/monthly-sales", response_model=MonthlySalesResponse)
async def monthly_sales() -> MonthlySalesResponse:
    return MonthlySalesResponse(months=queries.monthly_sales())
