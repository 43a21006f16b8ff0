"""
Route progress helpers for the tracking map.

Progress is a presentation heuristic: each status maps to a fixed fraction
of the origin -> destination arc, and the arc is a straight interpolation
with a sine bump on latitude so long routes read as curves.
"""

import math
from typing import List, Optional, Sequence, Tuple

from .constants import ShipmentStatus

# (lng, lat)
Point = Tuple[float, float]

STATUS_PROGRESS = {
    ShipmentStatus.CREATED: 0.0,
    ShipmentStatus.PICKUP_SCHEDULED: 0.0,
    ShipmentStatus.PICKED_UP: 0.0,
    ShipmentStatus.RECEIVED_AT_ORIGIN_HUB: 0.1,
    ShipmentStatus.STORED: 0.15,
    ShipmentStatus.READY_FOR_DISPATCH: 0.2,
    ShipmentStatus.IN_TRANSIT: 0.5,
    ShipmentStatus.ARRIVED_AT_DESTINATION_HUB: 0.75,
    ShipmentStatus.OUT_FOR_DELIVERY: 0.9,
    ShipmentStatus.DELIVERED: 1.0,
    ShipmentStatus.ON_HOLD: 0.5,
    ShipmentStatus.DELIVERY_FAILED: 0.9,
    ShipmentStatus.RETURNED_TO_SENDER: 0.0,
    ShipmentStatus.CANCELLED: 0.0,
    ShipmentStatus.DAMAGED: 0.5,
}

NOT_LEFT_ORIGIN = frozenset({
    ShipmentStatus.CREATED,
    ShipmentStatus.PICKUP_SCHEDULED,
    ShipmentStatus.PICKED_UP,
    ShipmentStatus.RETURNED_TO_SENDER,
    ShipmentStatus.CANCELLED,
})

ARC_HEIGHT_FACTOR = 0.15
MAX_ARC_HEIGHT = 15.0


def calculate_progress(status) -> float:
    """Fraction of the route covered for a status (0.0 - 1.0)."""
    return STATUS_PROGRESS.get(status, 0.0)


def has_left_origin(status) -> bool:
    return status not in NOT_LEFT_ORIGIN


def generate_arc_points(start: Point, end: Point, num_points: int = 50) -> List[Point]:
    """
    Interpolate num_points + 1 (lng, lat) points from start to end.

    The latitude of each point is raised by sin(t * pi) * height, where
    height = min(|delta lng| * 0.15, 15), so both endpoints stay exact.
    """
    if num_points < 1:
        raise ValueError("num_points must be at least 1")

    start_lng, start_lat = start
    end_lng, end_lat = end
    height = min(abs(end_lng - start_lng) * ARC_HEIGHT_FACTOR, MAX_ARC_HEIGHT)

    points = []
    for i in range(num_points + 1):
        t = i / num_points
        lng = start_lng + (end_lng - start_lng) * t
        lat = start_lat + (end_lat - start_lat) * t
        lat += math.sin(t * math.pi) * height
        points.append((lng, lat))
    return points


def covered_points(points: Sequence[Point], progress: float) -> List[Point]:
    """The prefix of an arc covered at the given progress (always keeps the start)."""
    progress = max(0.0, min(1.0, progress))
    count = math.floor(len(points) * progress) + 1
    return list(points[:count])


def progress_points(start: Point, end: Point, status, num_points: int = 50) -> List[Point]:
    """Covered part of the origin -> destination arc for the current status."""
    return covered_points(generate_arc_points(start, end, num_points), calculate_progress(status))


def build_route(origin: Optional[Point], destination: Optional[Point], status) -> Optional[dict]:
    """
    Map payload for the tracking page, or None when either end has no
    coordinates.
    """
    if origin is None or destination is None:
        return None

    arc = generate_arc_points(origin, destination)
    progress = calculate_progress(status)
    return {
        'origin': {'lng': origin[0], 'lat': origin[1]},
        'destination': {'lng': destination[0], 'lat': destination[1]},
        'progress': progress,
        'has_left_origin': has_left_origin(status),
        'arc': [[lng, lat] for lng, lat in arc],
        'covered': [[lng, lat] for lng, lat in covered_points(arc, progress)],
    }
