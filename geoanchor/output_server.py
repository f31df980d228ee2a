"""
TCP server that streams scenes as JSON lines to AR render clients.
"""

import json
import logging
import socket
import threading
from typing import List, Optional

from geoanchor.overlay import OverlayView
from geoanchor.scene import Scene

logger = logging.getLogger(__name__)


def encode_frame(scene: Scene, overlay: OverlayView, banner: Optional[str]) -> bytes:
    """One newline-terminated JSON document per scene update."""
    frame = scene.to_dict()
    frame["overlay"] = overlay.to_dict()
    frame["status"] = banner
    return (json.dumps(frame, ensure_ascii=False) + "\n").encode("utf-8")


class RenderSurface:
    """Receives every recomputed scene."""

    def render(
        self, scene: Scene, overlay: OverlayView, banner: Optional[str]
    ) -> None:
        raise NotImplementedError


class SceneTcpServer(RenderSurface):
    """
    Simple TCP server that sends scene frames to connected clients.

    A client connecting later first receives the latest frame.
    Thread-safe: render() may be called from any thread.
    """

    def __init__(self, host: str = "127.0.0.1", port: int = 2950) -> None:
        self._host = host
        self._port = port
        self._sock: Optional[socket.socket] = None
        self._clients: List[socket.socket] = []
        self._last_frame: Optional[bytes] = None
        self._lock = threading.Lock()

    def start(self) -> bool:
        """Bind and listen; return True on success."""
        try:
            self._sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
            self._sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            self._sock.bind((self._host, self._port))
            self._sock.listen(4)
            self._sock.setblocking(False)
            logger.info("Scene server listening on %s:%s", self._host, self._port)
            return True
        except OSError as e:
            logger.error("Scene server bind failed: %s", e)
            return False

    def stop(self) -> None:
        """Close server and all client connections."""
        with self._lock:
            for c in self._clients:
                try:
                    c.close()
                except OSError:
                    pass
            self._clients.clear()
        if self._sock:
            try:
                self._sock.close()
            except OSError:
                pass
            self._sock = None

    def accept_new(self) -> None:
        """Accept pending connections (non-blocking). Call from main loop."""
        if not self._sock:
            return
        try:
            client, _ = self._sock.accept()
        except BlockingIOError:
            return
        except OSError as e:
            logger.debug("accept error: %s", e)
            return
        with self._lock:
            frame = self._last_frame
            if frame is not None and not self._send(client, frame):
                return
            self._clients.append(client)
            logger.info("Render client connected (total %d)", len(self._clients))

    def render(
        self, scene: Scene, overlay: OverlayView, banner: Optional[str]
    ) -> None:
        data = encode_frame(scene, overlay, banner)
        with self._lock:
            self._last_frame = data
            dead = [c for c in self._clients if not self._send(c, data)]
            for c in dead:
                self._clients.remove(c)

    @staticmethod
    def _send(client: socket.socket, data: bytes) -> bool:
        try:
            client.sendall(data)
            return True
        except OSError:
            try:
                client.close()
            except OSError:
                pass
            return False

    def get_socket(self) -> Optional[socket.socket]:
        """Return the server socket for select()."""
        return self._sock
