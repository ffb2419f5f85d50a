
from .types import NightSkyResult, SkyStarPoint
from nightsky.util.format import azimuth_to_compass, format_angle


def format_text(result: NightSkyResult, limit: int | None = None) -> str:
    lines: list[str] = []
    lines.append("Night Sky")
    lines.append("=========")
    request = result.request
    if request is not None:
        lines.append(f"Planet: {request.planet_id} (host star {request.host_star_id})")
        lines.append(f"Time (UTC): {request.instant_utc.isoformat()}")
        lines.append(
            f"Observer: lat {format_angle(request.observer_lat_rad, precision=3)},"
            f" lon {format_angle(request.observer_lon_rad, precision=3)}"
        )
    lines.append(f"Host star: {_host_star_line(result.host_star)}")
    source = "cache" if result.from_cache else f"computed in {result.compute_time.total_seconds() * 1000.0:.1f} ms"
    lines.append(
        f"Stars: {result.visible_count} visible of {result.total_stars_queried} queried ({source})"
    )
    if not result.ephemeris_converged:
        lines.append("Warning: orbit solution did not converge; positions are approximate")

    stars = result.stars if limit is None else result.stars[:limit]
    if not stars:
        return "\n".join(lines)

    lines.append("")
    rows = [_star_row(idx, star) for idx, star in enumerate(stars, start=1)]
    name_w = min(32, max(len(r["name"]) for r in rows))
    for r in rows:
        name = _pad(_truncate(r["name"], name_w), name_w)
        lines.append(
            f"{r['idx']} {name}  az {r['az']:>7} {r['dir']:<3}  alt {r['alt']:>6}"
            f"  mag {r['mag']:>6}  {r['dist']:>9}"
        )
    if limit is not None and len(result.stars) > limit:
        lines.append(f"... {len(result.stars) - limit} more")
    return "\n".join(lines)


def _host_star_line(host: SkyStarPoint | None) -> str:
    if host is None:
        return "none (always night)"
    state = "up" if host.alt_rad > 0 else "down"
    return (
        f"{host.name or host.star_id} {state}, alt {format_angle(host.alt_rad, precision=1)},"
        f" az {format_angle(host.az_rad, precision=1)} {azimuth_to_compass(host.az_rad)},"
        f" mag {host.apparent_mag:.2f}"
    )


def _star_row(idx: int, star: SkyStarPoint) -> dict:
    return {
        "idx": f"{idx:>3}.",
        "name": star.name or star.star_id,
        "az": format_angle(star.az_rad, precision=1),
        "dir": azimuth_to_compass(star.az_rad),
        "alt": format_angle(star.alt_rad, precision=1),
        "mag": f"{star.apparent_mag:.2f}",
        "dist": f"{star.distance_ly:.2f} ly",
    }


def _truncate(value: str, width: int) -> str:
    if len(value) <= width:
        return value
    if width <= 1:
        return value[:width]
    return value[: width - 1] + "…"


def _pad(value: str, width: int) -> str:
    return value.ljust(width)
