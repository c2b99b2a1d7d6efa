"""FastAPI WebSocket server for live visualization of a running simulation.

Usage:
    # Start server standalone (streams mock fields for renderer development):
    python -m turinglab.server.main --mock

    # Start server alongside a simulation:
    turing-lab --server.enabled True

The server exposes:
    - GET  /               Health check
    - GET  /config         Current bridge state
    - WS   /ws/simulation  Binary MessagePack stream of the activator field
"""

from __future__ import annotations

import asyncio
import json
import logging
import threading
from typing import Any

import numpy as np
from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from starlette.websockets import WebSocketState

from turinglab import __version__
from turinglab.server.streaming import FrameBridge, pack_frame

logger = logging.getLogger(__name__)

# Global bridge instance, set by simulate() or by start_server()
_bridge: FrameBridge | None = None


def get_bridge() -> FrameBridge:
    """Get the global FrameBridge instance, creating one if needed."""
    global _bridge
    if _bridge is None:
        _bridge = FrameBridge()
    return _bridge


def set_bridge(bridge: FrameBridge) -> None:
    """Set the global FrameBridge instance."""
    global _bridge
    _bridge = bridge


def create_app(bridge: FrameBridge | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        bridge: Optional FrameBridge to use. If None, uses the global one.

    Returns:
        Configured FastAPI app with WebSocket endpoint.
    """
    if bridge is not None:
        set_bridge(bridge)

    app = FastAPI(
        title="Turing Lab Server",
        description="Live reaction-diffusion field streaming via WebSocket",
        version=__version__,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    async def health() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "turing-lab-server"}

    @app.get("/config")
    async def get_config() -> dict[str, Any]:
        """Return current bridge state."""
        b = get_bridge()
        latest = b.get_latest_frame()
        return {
            "target_fps": b.target_fps,
            "frame_count": b.frame_count,
            "paused": b.paused,
            "stop_requested": b.stop_requested,
            "latest_step": latest.step if latest is not None else None,
        }

    @app.websocket("/ws/simulation")
    async def simulation_stream(websocket: WebSocket) -> None:
        """Stream the activator field to renderer clients.

        Protocol:
            - Server sends binary MessagePack frames at target_fps.
            - Client can send JSON commands:
              {"type": "pause"}, {"type": "resume"}, {"type": "stop"}
        """
        await websocket.accept()
        b = get_bridge()
        interval = 1.0 / b.target_fps if b.target_fps > 0 else 1.0 / 30.0
        last_sent_step = -1

        logger.info("Renderer client connected")

        try:
            while True:
                # Check for incoming commands (non-blocking)
                try:
                    data = await asyncio.wait_for(
                        websocket.receive_text(), timeout=interval
                    )
                    try:
                        command = json.loads(data)
                        _handle_command(b, command)
                    except json.JSONDecodeError:
                        logger.warning("Invalid JSON command from client: %s", data)
                except asyncio.TimeoutError:
                    pass

                # Send latest frame if available and new
                frame = b.get_latest_frame()
                if frame is not None and frame.step != last_sent_step:
                    packed = pack_frame(frame)
                    if websocket.client_state == WebSocketState.CONNECTED:
                        await websocket.send_bytes(packed)
                        last_sent_step = frame.step

        except WebSocketDisconnect:
            logger.info("Renderer client disconnected")
        except Exception as e:
            logger.error("WebSocket error: %s", e)
            if websocket.client_state == WebSocketState.CONNECTED:
                await websocket.close(code=1011)
        finally:
            # A client that goes away must not leave the run paused.
            if b.paused:
                b.resume()
                logger.info("Simulation resumed after client left")

    return app


def _handle_command(bridge: FrameBridge, command: dict[str, Any]) -> None:
    """Process a command from a renderer client."""
    cmd_type = command.get("type")
    if cmd_type == "pause":
        bridge.pause()
        logger.info("Simulation paused by client")
    elif cmd_type == "resume":
        bridge.resume()
        logger.info("Simulation resumed by client")
    elif cmd_type == "stop":
        bridge.request_stop()
        logger.info("Simulation stop requested by client")
    else:
        logger.info("Unknown command ignored: %s", cmd_type)


def _generate_mock_field(step: int, rows: int = 64, cols: int = 64) -> np.ndarray:
    """Generate a drifting stripe pattern for testing renderers."""
    rr, cc = np.meshgrid(np.arange(rows), np.arange(cols), indexing="ij")
    phase = 2.0 * np.pi * step / 120.0
    return 0.5 + 0.5 * np.sin(2.0 * np.pi * (rr + cc) / 16.0 + phase)


async def _mock_simulation_loop(bridge: FrameBridge) -> None:
    """Publish mock fields until a client requests a stop."""
    step = 0
    while not bridge.stop_requested:
        if not bridge.paused:
            bridge.publish_field(_generate_mock_field(step), step)
            step += 1
        await asyncio.sleep(1.0 / 30.0)


def start_server(
    host: str = "0.0.0.0",
    port: int = 8765,
    bridge: FrameBridge | None = None,
    mock: bool = False,
) -> None:
    """Start the FastAPI server (blocking).

    Args:
        host: Bind address.
        port: Port number.
        bridge: FrameBridge instance. Created if None.
        mock: If True, stream a synthetic field instead of a simulation.
    """
    import uvicorn

    if bridge is None:
        bridge = FrameBridge()
    app = create_app(bridge)

    if mock:
        @app.on_event("startup")
        async def start_mock() -> None:
            asyncio.create_task(_mock_simulation_loop(bridge))

    uvicorn.run(app, host=host, port=port, log_level="info")


def start_server_thread(
    bridge: FrameBridge, host: str = "0.0.0.0", port: int = 8765
) -> threading.Thread:
    """Run the server in a daemon thread so the simulation can own the main thread."""
    thread = threading.Thread(
        target=start_server,
        kwargs={"host": host, "port": port, "bridge": bridge},
        name="turinglab-server",
        daemon=True,
    )
    thread.start()
    return thread


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Turing Lab Server")
    parser.add_argument("--host", default="0.0.0.0", help="Bind address")
    parser.add_argument("--port", type=int, default=8765, help="Port")
    parser.add_argument(
        "--mock", action="store_true", help="Stream a synthetic field for testing"
    )
    args = parser.parse_args()

    print(f"Starting Turing Lab server on {args.host}:{args.port}")
    if args.mock:
        print("Mock mode: streaming a synthetic field")
    start_server(host=args.host, port=args.port, mock=args.mock)
