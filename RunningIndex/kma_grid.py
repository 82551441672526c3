"""KMA 5 km grid projection - Lambert Conformal Conic lat/lon to (nx, ny)."""
import math
from dataclasses import dataclass


class GridProjectionError(ValueError):
    """Raised when a coordinate cannot be placed on the grid."""
    pass


@dataclass(frozen=True)
class GeoPoint:
    """Latitude/longitude in decimal degrees."""
    latitude: float
    longitude: float


@dataclass(frozen=True)
class GridCell:
    """Integer cell on the KMA forecast grid."""
    nx: int
    ny: int


@dataclass(frozen=True)
class GridParams:
    """Constants of a Lambert Conformal Conic grid."""
    earth_radius_km: float
    grid_km: float
    slat1: float  # standard parallel 1 (deg)
    slat2: float  # standard parallel 2 (deg)
    olon: float  # reference longitude (deg)
    olat: float  # reference latitude (deg)
    xo: int  # origin offset X (grid units)
    yo: int  # origin offset Y (grid units)


# KMA dong-ne forecast grid (DFS), 5 km spacing
KMA_GRID = GridParams(
    earth_radius_km=6371.00877,
    grid_km=5.0,
    slat1=30.0,
    slat2=60.0,
    olon=126.0,
    olat=38.0,
    xo=43,
    yo=136,
)

DEGRAD = math.pi / 180.0


def _cone_tan(lat_rad: float) -> float:
    return math.tan(math.pi * 0.25 + lat_rad * 0.5)


def project(lat: float, lon: float, params: GridParams = KMA_GRID) -> GridCell:
    """
    Convert latitude/longitude to a grid cell.

    Args:
        lat: Latitude in decimal degrees
        lon: Longitude in decimal degrees
        params: Grid constants (KMA 5 km grid by default)

    Returns:
        GridCell: The (nx, ny) cell containing the point

    Raises:
        GridProjectionError: If lat/lon is not finite or the latitude
            lies outside (-90, 90], where the cone has no point and the
            formulas would yield NaN instead of a cell
    """
    if not (math.isfinite(lat) and math.isfinite(lon)):
        raise GridProjectionError(f"Non-finite coordinate: lat={lat}, lon={lon}")

    re = params.earth_radius_km / params.grid_km
    slat1 = params.slat1 * DEGRAD
    slat2 = params.slat2 * DEGRAD
    olon = params.olon * DEGRAD
    olat = params.olat * DEGRAD

    sn = math.log(math.cos(slat1) / math.cos(slat2)) / math.log(_cone_tan(slat2) / _cone_tan(slat1))
    sf = math.pow(_cone_tan(slat1), sn) * math.cos(slat1) / sn
    ro = (re * sf) / math.pow(_cone_tan(olat), sn)

    # tan() is only positive on the projectable half of the cone
    t = _cone_tan(lat * DEGRAD)
    if not t > 0:
        raise GridProjectionError(f"Latitude outside projection domain: {lat}")
    ra = (re * sf) / math.pow(t, sn)

    theta = lon * DEGRAD - olon
    if theta > math.pi:
        theta -= 2.0 * math.pi
    if theta < -math.pi:
        theta += 2.0 * math.pi
    theta *= sn

    x = ra * math.sin(theta) + params.xo + 0.5
    y = ro - ra * math.cos(theta) + params.yo + 0.5
    if not (math.isfinite(x) and math.isfinite(y)):
        raise GridProjectionError(f"Projection overflow for lat={lat}, lon={lon}")

    return GridCell(nx=math.floor(x), ny=math.floor(y))


def latlon_to_grid(point: GeoPoint, params: GridParams = KMA_GRID) -> GridCell:
    """Project a GeoPoint onto the grid."""
    return project(point.latitude, point.longitude, params)
