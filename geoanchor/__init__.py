"""
geoanchor: anchor AR content to GPS coordinates.

Turns geodetic fixes and compass/orientation samples into a local metric
frame with a one-time heading calibration, and streams render-ready scenes
(scene yaw + per-entity offsets) to AR clients.
"""

__version__ = "0.1.0"
