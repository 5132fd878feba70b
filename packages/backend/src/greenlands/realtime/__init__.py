"""Real-time infrastructure — Redis pub/sub + WebSocket.

Events flow through two channels:
1. Services → Redis PUBLISH (backend-side broadcast)
2. Redis SUBSCRIBE → WebSocket → admin/staff browsers

Only new support tickets are pushed today; clients that miss a push
recover by polling /api/communication/notifications.
"""
