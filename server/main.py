# server/main.py
"""FastAPI application wiring for the arena shooter server."""

import logging
from typing import Optional

from fastapi import FastAPI, WebSocket
from fastapi.middleware.cors import CORSMiddleware

from api.routes import GameAPI
from config.settings import HOST, LOG_LEVEL, PORT
from services.game_service import GameService
from services.websocket_service import WebSocketService

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(game_service: Optional[GameService] = None) -> FastAPI:
    """Build the application around a game instance."""
    game_service = game_service or GameService()
    websocket_service = WebSocketService(game_service)

    app = FastAPI()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # In production, specify your client URL
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(GameAPI(game_service).router)
    app.state.game_service = game_service
    app.state.websocket_service = websocket_service

    @app.on_event("startup")
    async def startup_event():
        """Start the simulation loop and outbound delivery."""
        websocket_service.start_background_tasks()
        logger.info("Server is running on port %s", PORT)

    @app.on_event("shutdown")
    async def shutdown_event():
        await websocket_service.stop_background_tasks()

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        await websocket_service.handle_connection(websocket)

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=HOST, port=PORT)
