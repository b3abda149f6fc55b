"""
FastAPI WebSocket Room Chat Server
Fixed rooms, persisted message log, rate-limited actions and admin-gated room clearing
"""

from fastapi import FastAPI, WebSocket, WebSocketDisconnect, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from fastapi.staticfiles import StaticFiles
from contextlib import asynccontextmanager
import json
import os
import time
import uuid
from typing import Any, Dict, Optional
import uvicorn

from config import Settings
from helpers import (
    AdminAuthorizer,
    BroadcastDispatcher,
    MessageStore,
    RoomRegistry,
    SessionManager,
    Session,
    ack_payload,
    error_payload,
    create_engine,
    create_session_factory,
    init_db,
    parse_client_frame,
    get_logger,
    log_security_event,
    log_websocket_event,
    log_system_event,
    ERROR_MESSAGES,
    EVENT_POST_MESSAGE,
    EVENT_JOIN_ROOM,
    EVENT_SET_USERNAME,
    EVENT_VERIFY_ADMIN,
    EVENT_CLEAR_ROOM,
)

logger = get_logger()

FRONTEND_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "frontend")

ACKED_EVENTS = (EVENT_SET_USERNAME, EVENT_VERIFY_ADMIN, EVENT_CLEAR_ROOM)


async def dispatch_event(sessions: SessionManager, session: Session,
                         event_type: str, payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Run one client event for a session

    Args:
        sessions: Session manager
        session: Acting session
        event_type: Client event name
        payload: Decoded frame

    Returns:
        Acknowledgment frame for acknowledged events, error frame for
        unknown events, None otherwise
    """
    if event_type == EVENT_POST_MESSAGE:
        await sessions.post_message(session, payload.get("message"))
        return None

    if event_type == EVENT_JOIN_ROOM:
        await sessions.join_room(session, payload.get("room"))
        return None

    if event_type == EVENT_SET_USERNAME:
        result = sessions.set_display_name(session, payload.get("username"))
    elif event_type == EVENT_VERIFY_ADMIN:
        result = sessions.verify_admin(session, payload.get("token"))
    elif event_type == EVENT_CLEAR_ROOM:
        result = await sessions.clear_room(session, payload.get("room"), payload.get("token"))
    else:
        return error_payload(f"{ERROR_MESSAGES['unknown_event']}: {event_type}")

    return ack_payload(event_type, payload.get("ack"), result.to_dict())


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application and its chat components from settings"""
    settings = settings or Settings()

    engine = create_engine(settings.DATABASE_URL)
    store = MessageStore(create_session_factory(engine))
    registry = RoomRegistry()
    dispatcher = BroadcastDispatcher(registry)
    sessions = SessionManager(
        store=store,
        registry=registry,
        dispatcher=dispatcher,
        authorizer=AdminAuthorizer(settings.ADMIN_TOKEN),
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan management"""
        logger.info("Room Chat Server starting up...")
        await init_db(engine)
        if not settings.ADMIN_TOKEN:
            log_system_event("admin_disabled", "ADMIN_TOKEN not set; admin actions will fail", level="warning")

        yield

        await engine.dispose()
        logger.info("Room Chat Server shutting down...")

    app = FastAPI(
        title="Room Chat Server",
        description="Real-time chat with fixed rooms and admin-gated history clearing",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.store = store
    app.state.registry = registry
    app.state.sessions = sessions

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*"],
    )

    if os.path.isdir(FRONTEND_DIR):
        app.mount("/static", StaticFiles(directory=FRONTEND_DIR), name="static")

    @app.get("/")
    async def root():
        """Serve the chat page"""
        try:
            with open(os.path.join(FRONTEND_DIR, "index.html"), "r") as f:
                return HTMLResponse(content=f.read())
        except FileNotFoundError:
            return HTMLResponse(content="<h1>Chat interface not found</h1>", status_code=404)

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        try:
            return {
                "status": "healthy",
                "timestamp": time.time(),
                "connections": sessions.stats(),
                "messages": {"total_messages": await store.count()},
            }
        except Exception as e:
            logger.error(f"Health check failed: {e}")
            raise HTTPException(status_code=503, detail="Service unavailable")

    @app.get("/stats")
    async def get_stats():
        """Get server statistics"""
        try:
            return {
                "server": "Room Chat Server",
                "timestamp": time.time(),
                "rooms": registry.rooms,
                "connections": sessions.stats(),
                "messages": {"total_messages": await store.count()},
                "admin_configured": bool(settings.ADMIN_TOKEN),
            }
        except Exception as e:
            logger.error(f"Stats endpoint failed: {e}")
            raise HTTPException(status_code=500, detail="Failed to get stats")

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        """Main WebSocket endpoint: one session per connection, frames handled in arrival order"""
        connection_id = f"ws_{uuid.uuid4().hex[:12]}"

        await websocket.accept()
        client_ip = websocket.client.host if websocket.client else "unknown"
        log_websocket_event("connection_accepted", connection_id, f"client_ip={client_ip}")

        session: Optional[Session] = None
        try:
            session = await sessions.connect(connection_id, websocket)

            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    raise WebSocketDisconnect(message.get("code", 1000))

                data = message.get("text")
                if data is None:
                    # Binary frame
                    await websocket.send_text(json.dumps(error_payload(ERROR_MESSAGES["invalid_json"])))
                    continue

                try:
                    decoded = json.loads(data)
                except json.JSONDecodeError:
                    log_websocket_event("invalid_json", connection_id, f"length={len(data)}")
                    await websocket.send_text(json.dumps(error_payload(ERROR_MESSAGES["invalid_json"])))
                    continue

                is_valid, event_type, payload = parse_client_frame(decoded)
                if not is_valid:
                    await websocket.send_text(json.dumps(error_payload(ERROR_MESSAGES["invalid_json"])))
                    continue

                log_websocket_event("event_received", connection_id, f"type={event_type}")

                try:
                    reply = await dispatch_event(sessions, session, event_type, payload)
                except Exception as e:
                    logger.error(f"Event handling error for {connection_id}: {e}")
                    log_security_event("event_error", {
                        "conn": connection_id,
                        "type": event_type,
                        "error": str(e)
                    })
                    reply = None
                    if event_type in ACKED_EVENTS:
                        reply = ack_payload(event_type, payload.get("ack"),
                                            {"ok": False, "error": ERROR_MESSAGES["unexpected"]})

                if reply is not None:
                    await websocket.send_text(json.dumps(reply))

        except WebSocketDisconnect:
            logger.info(f"WebSocket disconnected: {connection_id}")

        except Exception as e:
            logger.error(f"WebSocket error: {e}")
            log_security_event("websocket_error", {
                "client_ip": client_ip,
                "conn": connection_id,
                "error": str(e)
            })

        finally:
            if session is not None:
                sessions.disconnect(session)

    return app


app = create_app()


if __name__ == "__main__":
    settings = Settings()
    logger.info("Starting Room Chat Server...")

    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=False,
        log_level=settings.LOG_LEVEL.lower(),
        access_log=True,
        ws_ping_interval=20,
        ws_ping_timeout=10,
    )
