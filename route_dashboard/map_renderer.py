"""
Folium map widget for truck routes.

The widget is created lazily: the page asks for it the first time the map
view is opened, and every drawing call is refused with a notice until it
has loaded.
"""

import logging
import math
import time
from html import escape
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

import folium
from folium.map import FitBounds
import numpy as np

from route_dashboard.models import Notice, RouteRecord


logger = logging.getLogger(__name__)

ORIGIN_LAYER = "route-origin"
DESTINATION_LAYER = "route-destination"
ROUTE_LAYER = "truck-route"

TOMTOM_TILE_URL = "https://api.tomtom.com/map/1/tile/basic/main/{{z}}/{{x}}/{{y}}.png?key={key}"
TOMTOM_ATTRIBUTION = "&copy; TomTom"

MAP_NOT_READY = "Map not ready yet. Open the map view again once it has loaded."


def finite_bounds(points: Iterable[Sequence[float]]) -> Optional[List[List[float]]]:
    """
    South-west / north-east corners of the given (lat, lng) points.

    Points that are not finite numbers are skipped and logged.
    """
    valid: List[Tuple[float, float]] = []
    for point in points:
        try:
            lat, lng = float(point[0]), float(point[1])
        except (TypeError, ValueError, IndexError):
            logger.warning("Skipping malformed map coordinate %r", point)
            continue
        if not (math.isfinite(lat) and math.isfinite(lng)):
            logger.warning("Skipping non-finite map coordinate (%s, %s)", lat, lng)
            continue
        valid.append((lat, lng))

    if not valid:
        return None

    coords = np.array(valid)
    south, west = coords.min(axis=0)
    north, east = coords.max(axis=0)
    return [[float(south), float(west)], [float(north), float(east)]]


class RouteMapWidget:
    """A folium map plus the named layers drawn on it."""

    def __init__(
        self,
        api_key: Optional[str],
        center: Tuple[float, float] = (39.8283, -98.5795),
        zoom: int = 4,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.api_key = api_key
        self.center = center
        self.zoom = zoom
        self._sleep = sleep
        self.map: Optional[folium.Map] = None
        self.loaded = False
        self._layers: Dict[str, folium.FeatureGroup] = {}
        self._fit: Optional[FitBounds] = None

    def _build_map(self) -> folium.Map:
        m = folium.Map(location=list(self.center), zoom_start=self.zoom, tiles=None)
        folium.TileLayer(
            tiles=TOMTOM_TILE_URL.format(key=self.api_key),
            attr=TOMTOM_ATTRIBUTION,
            name="TomTom",
        ).add_to(m)
        return m

    def initialize(
        self,
        container_ready: Callable[[], bool],
        max_attempts: int = 10,
        delay: float = 0.1,
    ) -> List[Notice]:
        """
        Create the map once its container is available.

        Polls container_ready() up to max_attempts times. If the container
        never shows up the widget simply stays unloaded.
        """
        if self.loaded:
            return []
        if not self.api_key:
            return [Notice("warning", "Please configure your TomTom API key to enable the route map.")]

        for attempt in range(1, max_attempts + 1):
            if container_ready():
                self.map = self._build_map()
                self.loaded = True
                logger.info("Route map initialized after %d attempt(s)", attempt)
                return []
            self._sleep(delay)

        logger.debug("Map container unavailable after %d attempts", max_attempts)
        return []

    def has_layer(self, name: str) -> bool:
        return name in self._layers

    def _redraw(self) -> None:
        """Rebuild the map from the tracked layers and the latest viewport."""
        self.map = self._build_map()
        for layer in self._layers.values():
            layer.add_to(self.map)
        if self._fit is not None:
            self._fit.add_to(self.map)

    def remove_layer(self, name: str) -> bool:
        """Remove a layer by name; removing an absent layer is a no-op."""
        if self._layers.pop(name, None) is None:
            return False
        self._redraw()
        return True

    def add_layer(self, name: str, layer: folium.FeatureGroup) -> None:
        replaced = self._layers.pop(name, None) is not None
        self._layers[name] = layer
        if replaced:
            self._redraw()
        else:
            layer.add_to(self.map)

    def clear(self) -> None:
        removed = [self._layers.pop(name, None) for name in (ORIGIN_LAYER, DESTINATION_LAYER, ROUTE_LAYER)]
        if any(layer is not None for layer in removed):
            self._redraw()

    def fit_to(self, points: Iterable[Sequence[float]]) -> bool:
        bounds = finite_bounds(points)
        if bounds is None:
            return False
        # Only the latest viewport is kept on the map
        replaced = self._fit is not None
        self._fit = FitBounds(bounds)
        if replaced:
            self._redraw()
        else:
            self._fit.add_to(self.map)
        return True


def _endpoint_layer(label: str, address: str, location: Tuple[float, float], color: str, icon: str) -> folium.FeatureGroup:
    group = folium.FeatureGroup(name=label)
    folium.Marker(
        location=list(location),
        popup=folium.Popup(f"<strong>{label}:</strong><br>{escape(address)}", max_width=300),
        tooltip=label,
        icon=folium.Icon(color=color, icon=icon, prefix="fa"),
    ).add_to(group)
    return group


def render_route(widget: RouteMapWidget, route: RouteRecord) -> List[Notice]:
    """
    Draw a stored route: origin and destination markers, the route line,
    and a viewport fitted to it. Returns notices for the user.
    """
    if not widget.loaded or widget.map is None:
        return [Notice("warning", MAP_NOT_READY)]

    if route.origin_point is None or route.destination_point is None:
        return [Notice("warning", f"Route '{route.name}' has no origin or destination coordinates and cannot be drawn.")]

    notices: List[Notice] = []
    widget.clear()
    widget.add_layer(ORIGIN_LAYER, _endpoint_layer("Origin", route.origin, route.origin_point, "green", "play"))
    widget.add_layer(
        DESTINATION_LAYER,
        _endpoint_layer("Destination", route.destination, route.destination_point, "red", "flag-checkered"),
    )

    if route.path:
        line = folium.FeatureGroup(name="Truck route")
        folium.PolyLine(route.path, color="#ff6b35", weight=6, opacity=0.8, tooltip=route.name).add_to(line)
        widget.add_layer(ROUTE_LAYER, line)
        widget.fit_to(route.path)
    else:
        notices.append(Notice("info", f"Route '{route.name}' has no stored path yet; recalculate it to draw the road route."))
        widget.fit_to([route.origin_point, route.destination_point])

    if route.coordinates_approximate:
        notices.append(Notice("warning", "At least one endpoint could not be geocoded and uses a default location."))
    return notices
