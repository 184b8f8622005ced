from stockflow.api.errors import register_stockflow_exception_handlers
from stockflow.api.routes import order_router, product_router, report_router, stock_router, user_router

__all__ = [
    "order_router",
    "product_router",
    "report_router",
    "stock_router",
    "user_router",
    "register_stockflow_exception_handlers",
]
