"""
Display metrics for stored routes.

Routes planned before truck routing only carry a kilometre estimate in
`distance_km`; calculated routes carry `total_miles`. The list view shows
miles for both, converting the legacy value only when no calculated
mileage exists.
"""

from typing import Optional, Tuple

from fleetops.services.units import kilometers_to_miles


DISTANCE_CALCULATED = "calculated"
DISTANCE_LEGACY = "legacy"


def display_miles(
    total_miles: Optional[float],
    distance_km: Optional[float],
) -> Tuple[Optional[float], Optional[str]]:
    """Return (miles, source) for display; source is None when nothing is known."""
    if total_miles is not None:
        return total_miles, DISTANCE_CALCULATED
    if distance_km is not None:
        return kilometers_to_miles(distance_km), DISTANCE_LEGACY
    return None, None


def format_duration(minutes: Optional[int]) -> Optional[str]:
    """Format minutes as '5h 7m'."""
    if minutes is None:
        return None
    hours, rest = divmod(int(minutes), 60)
    return f"{hours}h {rest}m"
