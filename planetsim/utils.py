"""Helpers that turn SI quantities into short human-readable strings."""

import math

AU = 1.495978707e11  # metres


def distance_to_display(dist_meters: float) -> str:
    if math.isnan(dist_meters) or math.isinf(dist_meters):
        return "unbounded"
    if dist_meters == 0:
        return "0 m"
    if abs(dist_meters) >= 0.1 * AU:
        return f"{dist_meters/AU:.3g} AU"
    if abs(dist_meters) >= 1e3:
        return f"{dist_meters/1e3:.3g} km"
    if abs(dist_meters) >= 1e-2:
        return f"{dist_meters:.3g} m"
    return f"{dist_meters:.2e} m"


def time_to_display(seconds: float) -> str:
    if seconds < 0:
        return "N/A"
    if seconds == 0:
        return "0 s"
    days = seconds / 86400
    if days >= 1:
        return f"{days:.3g} days"
    hours = seconds / 3600
    if hours >= 1:
        return f"{hours:.3g} h"
    if seconds >= 1e-2:
        return f"{seconds:.3g} s"
    return f"{seconds:.2e} s"
