# FastAPI routers - rules, prices, health
from app.price_alerts.presentation.api import health, prices, rules

__all__ = ["health", "prices", "rules"]
