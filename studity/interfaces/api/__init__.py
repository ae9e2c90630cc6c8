"""HTTP and websocket interface of the notification service."""
