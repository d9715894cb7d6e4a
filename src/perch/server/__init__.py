"""Request dispatch — ASGI entry point, lifecycle and error mapping."""
