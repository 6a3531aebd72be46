"""Distance conversion and display helpers."""

METERS_PER_MILE = 1609.344


def meters_to_miles(meters: float) -> float:
    """Convert meters (as returned by the geo index) to miles."""
    return meters / METERS_PER_MILE


def format_distance(meters: float) -> str:
    """Format a raw meter distance as a one-decimal mile string, e.g. "0.3 mi"."""
    return f"{meters_to_miles(meters):.1f} mi"
