"""Real-time endpoints. For now a single echo WebSocket at /ws."""
