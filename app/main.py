"""Application entry point; serve with ``uvicorn main:server_app``."""

from server import server

server_app = server.handler
