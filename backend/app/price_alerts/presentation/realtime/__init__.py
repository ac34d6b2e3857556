# Real-time subscriber channel - WebSocket endpoint and broadcaster
from app.price_alerts.presentation.realtime import websocket

__all__ = ["websocket"]
