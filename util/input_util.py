import math

# =============================================================================
# INPUT PARSING (PROMPT VALUES)
# =============================================================================
# Values typed into the radius prompt arrive as raw strings (or None when the
# prompt is cancelled). Everything that is not a finite positive number is
# rejected the same way.
# =============================================================================


class InvalidRadiusError(ValueError):
    """Raised when a radius prompt value is missing, non-numeric or not positive."""


def fmt_string(value):
    # Normalizes prompt strings:
    # - None => ""
    # - otherwise stripped string
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    return value


def parse_radius(value):
    """
    Return the radius in meters as a float.

    Accepts ints/floats directly and numeric strings ("1000", " 250.5 ").
    Raises InvalidRadiusError for None, blank, non-numeric, NaN/inf, zero or
    negative values.
    """
    cleaned = fmt_string(value)
    if cleaned == "" or isinstance(cleaned, bool):
        raise InvalidRadiusError("Invalid input.")

    try:
        radius = float(cleaned)
    except (TypeError, ValueError):
        raise InvalidRadiusError("Invalid input.") from None

    if not math.isfinite(radius) or radius <= 0:
        raise InvalidRadiusError("Invalid input.")
    return radius


def fmt_radius(radius):
    """Display helper: 1000.0 -> "1000", 250.5 -> "250.5"."""
    if float(radius).is_integer():
        return str(int(radius))
    return str(float(radius))


def fmt_coord(lat, lon, digits=4):
    """Display helper: coordinate pair rounded for popups and lists."""
    return f"{lat:.{digits}f}, {lon:.{digits}f}"
