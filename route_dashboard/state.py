import enum
from dataclasses import dataclass
from typing import Optional


class Mode(str, enum.Enum):
    """Views of the route planning page; changed only by explicit navigation."""
    CREATE = "create"
    LIST = "list"
    MAP = "map"


MODE_LABELS = {
    Mode.CREATE: "Create Truck Route",
    Mode.LIST: "Existing Routes",
    Mode.MAP: "Route Map",
}


@dataclass
class PageState:
    """Per-session state of the route planning page."""
    mode: Mode = Mode.CREATE
    map_loaded: bool = False
    selected_route_id: Optional[int] = None
    submitting: bool = False

    def select_mode(self, mode) -> bool:
        """
        Switch views. Returns True when the map widget should be initialized,
        i.e. the map view was just entered and has not loaded yet.
        """
        previous = self.mode
        self.mode = Mode(mode)
        return self.mode is Mode.MAP and previous is not Mode.MAP and not self.map_loaded

    def view_route(self, route_id: int) -> bool:
        """Select a route and navigate to the map view."""
        self.selected_route_id = route_id
        return self.select_mode(Mode.MAP)

    def begin_submit(self) -> bool:
        """Claim the create form; False while a submission is already running."""
        if self.submitting:
            return False
        self.submitting = True
        return True

    def end_submit(self) -> None:
        self.submitting = False
