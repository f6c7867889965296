from __future__ import annotations

from walkspot.services.categories import AREA_TAGS, QUERY_TAGS
from walkspot.services.selector import MAX_SPOTS


def build_overpass_query(
    lat: float,
    lon: float,
    radius_m: float,
    max_spots: int = MAX_SPOTS,
    timeout_s: int = 25,
) -> str:
    """Overpass QL for named spots within ``radius_m`` of (lat, lon).

    Point features come from the QUERY_TAGS allow-list; parks and places of
    worship mapped as areas are returned with their center.
    """
    r = round(radius_m)
    around = f"(around:{r},{lat},{lon})"

    clauses = [
        f'  node["{key}"~"^({"|".join(values)})$"]["name"]{around};'
        for key, values in QUERY_TAGS.items()
    ]
    clauses += [
        f'  {element}["{key}"="{value}"]["name"]{around};'
        for element, key, value in AREA_TAGS
    ]

    body = "\n".join(clauses)
    return f"""[out:json][timeout:{timeout_s}];
(
{body}
);
out center {max_spots};"""
