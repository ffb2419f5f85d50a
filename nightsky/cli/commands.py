import datetime
import json
import logging
import math
import sys
from dataclasses import asdict
from pathlib import Path

from nightsky.config import load_config
from nightsky.engine import (
    AtmosphereModel,
    LevelOfDetail,
    NightSkyRequest,
    TimeContext,
    TimeService,
    build_service,
)
from nightsky.engine.formatters import format_text
from nightsky.errors import NightSkyError
from nightsky.stores import get_stores
from nightsky.util.format import format_angle, rad_to_hms


def _json_envelope(command: str, ok: bool, data=None, error=None) -> dict:
    return {
        "ok": ok,
        "command": command,
        "timestamp_utc": datetime.datetime.now(datetime.timezone.utc).isoformat(),
        "data": data,
        "error": error,
    }


def _init_logging(level: str | None) -> None:
    if not level:
        return
    level_map = {
        "debug": logging.DEBUG,
        "info": logging.INFO,
        "warn": logging.WARNING,
        "error": logging.ERROR,
    }
    logging.basicConfig(level=level_map.get(level, logging.INFO))


def _handle_error(command: str, args, code: str, exc: Exception) -> int:
    if args is not None and getattr(args, "json", False):
        payload = _json_envelope(
            command=command,
            ok=False,
            data=None,
            error={"code": code, "message": str(exc), "details": None},
        )
        print(json.dumps(payload, indent=2))
    else:
        print(str(exc), file=sys.stderr)
    return 2


def _config_path_from_args(args) -> Path | None:
    if args is None:
        return None
    path = getattr(args, "config", None)
    return Path(path) if path else None


def _parse_datetime_arg(value: str | None) -> datetime.datetime:
    if not value:
        return datetime.datetime.now(datetime.timezone.utc)
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    dt = datetime.datetime.fromisoformat(value)
    if dt.tzinfo is None:
        return dt.replace(tzinfo=datetime.timezone.utc)
    return dt


def _build_request(args, config) -> NightSkyRequest:
    if args.latitude_deg is None or args.longitude_deg is None:
        raise ValueError("Both --lat and --lon are required")
    atmosphere = AtmosphereModel(
        enabled=config.atmosphere_enabled and not getattr(args, "no_atmosphere", False),
        extinction_coefficient=config.extinction_coefficient,
    )
    return NightSkyRequest(
        planet_id=args.planet,
        host_star_id=args.host_star,
        instant_utc=_parse_datetime_arg(args.time_utc),
        observer_lat_rad=math.radians(args.latitude_deg),
        observer_lon_rad=math.radians(args.longitude_deg),
        radius_ly=args.radius_ly if args.radius_ly is not None else config.default_radius_ly,
        max_magnitude=(
            args.max_magnitude if args.max_magnitude is not None else config.default_max_magnitude
        ),
        max_stars=args.max_stars if args.max_stars is not None else config.default_max_stars,
        lod=LevelOfDetail.from_name(args.lod or config.default_lod),
        dataset=args.dataset or config.default_dataset,
        atmosphere=atmosphere,
    )


def run_sky(args) -> int:
    _init_logging(getattr(args, "log_level", None))
    try:
        config = load_config(_config_path_from_args(args))
        service = build_service(config)
        request = _build_request(args, config)
        result = service.compute_night_sky(request)
    except ValueError as e:
        return _handle_error("sky", args, "invalid_request", e)
    except NightSkyError as e:
        return _handle_error("sky", args, "engine_error", e)

    if getattr(args, "json", False):
        payload = _json_envelope(command="sky", ok=True, data=asdict(result), error=None)
        print(json.dumps(payload, indent=2, default=str))
    else:
        print(format_text(result, limit=args.show))
    return 0


def run_is_night(args) -> int:
    _init_logging(getattr(args, "log_level", None))
    try:
        config = load_config(_config_path_from_args(args))
        service = build_service(config)
        request = _build_request(args, config)
        night = service.is_night_time(request)
    except ValueError as e:
        return _handle_error("is-night", args, "invalid_request", e)
    except NightSkyError as e:
        return _handle_error("is-night", args, "engine_error", e)

    if getattr(args, "json", False):
        payload = _json_envelope(command="is-night", ok=True, data={"night": night}, error=None)
        print(json.dumps(payload, indent=2))
    else:
        print("night" if night else "day")
    return 0


def run_time(args) -> int:
    _init_logging(getattr(args, "log_level", None))
    try:
        load_config(_config_path_from_args(args))
        context = TimeContext().initialize()
        time_service = TimeService(context)
        instant = _parse_datetime_arg(args.time_utc)
        lon_rad = math.radians(args.longitude_deg or 0.0)
        jd = time_service.to_julian_date(instant)
        lst = time_service.local_sidereal_time(instant, lon_rad)
    except ValueError as e:
        return _handle_error("time", args, "invalid_request", e)

    if getattr(args, "json", False):
        payload = _json_envelope(
            command="time",
            ok=True,
            data={
                "instant_utc": instant.isoformat(),
                "julian_date": jd,
                "longitude_deg": math.degrees(lon_rad),
                "local_sidereal_time_rad": lst,
            },
            error=None,
        )
        print(json.dumps(payload, indent=2))
    else:
        print(f"Instant (UTC): {instant.isoformat()}")
        print(f"Julian date  : {jd:.6f}")
        print(f"LST          : {rad_to_hms(lst)} ({format_angle(lst, precision=4)})")
    return 0


def run_doctor(args=None) -> int:
    _init_logging(getattr(args, "log_level", None))

    def check_config():
        try:
            load_config(_config_path_from_args(args))
            return {"ok": True, "detail": "loaded (defaults applied if missing)"}
        except Exception as e:
            return {"ok": False, "detail": f"invalid config: {e}"}

    def check_store():
        try:
            config = load_config(_config_path_from_args(args))
        except Exception as e:
            return {"ok": False, "detail": f"config unavailable: {e}"}
        if config.store_path is None:
            return {"ok": False, "detail": "store.path not configured"}
        try:
            star_store, _ = get_stores(config)
            star_store.get_star("")
        except Exception as e:
            return {"ok": False, "detail": str(e)}
        return {"ok": True, "detail": str(config.store_path)}

    def check_time_backend():
        try:
            context = TimeContext().initialize()
            TimeService(context).to_julian_date(datetime.datetime.now(datetime.timezone.utc))
        except Exception as e:
            return {"ok": False, "detail": f"astropy time unavailable: {e}"}
        return {"ok": True, "detail": "astropy time ready"}

    checks = {
        "config": check_config(),
        "star_store": check_store(),
        "time_backend": check_time_backend(),
    }
    ok = all(c["ok"] for c in checks.values())

    if args is not None and getattr(args, "json", False):
        payload = _json_envelope(
            command="doctor",
            ok=ok,
            data={"checks": checks},
            error=None
            if ok
            else {
                "code": "doctor_failed",
                "message": "one or more checks failed",
                "details": None,
            },
        )
        print(json.dumps(payload, indent=2))
    else:
        print("Night Sky Doctor Report")
        print("=======================")

        for name, result in checks.items():
            status = "OK" if result["ok"] else "MISSING"
            print(f"{name:20} : {status} ({result['detail']})")

        if ok:
            print("\nSystem ready.")
        else:
            print("\nSome components are missing or not configured.")

    return 0 if ok else 1
