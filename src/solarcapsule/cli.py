"""Command-line interface for Solar Capsule."""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import click
import yaml

from solarcapsule import __version__
from solarcapsule.config import Config, load_config, save_config
from solarcapsule.demo import DEMO_AUTHOR_ID, seed_capsules
from solarcapsule.drift import drifted_longitude
from solarcapsule.geo import (
    InvalidCoordinateError,
    distance_km,
    format_distance,
    validate_longitude,
)
from solarcapsule.lifecycle import CapsuleService
from solarcapsule.logger import setup_logger
from solarcapsule.solar import (
    format_minutes,
    is_daylight,
    solar_minutes,
    subsolar_point,
    time_of_day_label,
    zone_bounds,
    zone_index,
)
from solarcapsule.storage import JsonStore, StorageError


class InstantType(click.ParamType):
    """ISO-8601 instant; naive values are read as UTC."""

    name = "instant"

    def convert(self, value, param, ctx):
        if isinstance(value, datetime):
            return value
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            self.fail(f"{value!r} is not an ISO-8601 date/time", param, ctx)
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)


INSTANT = InstantType()


def _now(at: Optional[datetime]) -> datetime:
    return at if at is not None else datetime.now(timezone.utc)


def _load(ctx: click.Context) -> Config:
    config = load_config(ctx.obj.get("config_path"))
    if ctx.obj.get("store_path") is not None:
        config.storage.path = ctx.obj["store_path"]
    setup_logger(config.logging)
    return config


def _open_service(ctx: click.Context) -> CapsuleService:
    config = _load(ctx)
    try:
        store = JsonStore(config.storage.path)
    except StorageError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)
    return CapsuleService(store, config)


def _check_longitude(ctx: click.Context, longitude: float) -> float:
    try:
        return validate_longitude(longitude)
    except InvalidCoordinateError as e:
        click.echo(f"Invalid coordinates: {e}", err=True)
        ctx.exit(1)


def _echo_json(data) -> None:
    click.echo(json.dumps(data, indent=2, ensure_ascii=False))


def _format_countdown(seconds: float) -> str:
    minutes = int(seconds // 60)
    return f"{minutes // 60}h {minutes % 60:02d}m"


@click.group()
@click.version_option(version=__version__, prog_name="solarcapsule")
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file",
)
@click.option(
    "--store",
    "store_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Path to the capsule store file (overrides configuration)",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], store_path: Optional[Path]) -> None:
    """Solar Capsule.

    Drop messages that only people sharing your solar time can find.
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["store_path"] = store_path


@cli.command()
@click.option("--lon", "longitude", type=float, required=True, help="Longitude in degrees")
@click.option("--at", type=INSTANT, help="Instant (ISO-8601, default: now)")
@click.pass_context
def zone(ctx: click.Context, longitude: float, at: Optional[datetime]) -> None:
    """Show the solar zone for a longitude."""
    config = _load(ctx)
    longitude = _check_longitude(ctx, longitude)
    at = _now(at)
    zoning = config.zoning

    index = zone_index(longitude, at, zoning.total_zones, zoning.minutes_per_degree)
    local = solar_minutes(longitude, at, zoning.minutes_per_degree)
    start, end = zone_bounds(index, zoning.total_zones)

    click.echo(f"Zone: {index} of {zoning.total_zones}")
    click.echo(f"  Solar time: {format_minutes(local)} ({time_of_day_label(longitude, at)})")
    click.echo(f"  Zone span: {format_minutes(start)} - {format_minutes(end)}")


@cli.command()
@click.option("--at", type=INSTANT, help="Instant (ISO-8601, default: now)")
@click.option("--lat", "latitude", type=float, help="Latitude to check for daylight")
@click.option("--lon", "longitude", type=float, help="Longitude to check for daylight")
def sun(at: Optional[datetime], latitude: Optional[float], longitude: Optional[float]) -> None:
    """Show the sub-solar point."""
    at = _now(at)
    sun_lon, sun_lat = subsolar_point(at)

    click.echo(f"Sub-solar point at {at.isoformat()}:")
    click.echo(f"  Longitude: {sun_lon:.2f}")
    click.echo(f"  Latitude: {sun_lat:.2f}")

    if latitude is not None and longitude is not None:
        state = "day" if is_daylight(latitude, longitude, at) else "night"
        click.echo(f"  ({latitude:.2f}, {longitude:.2f}) is in {state}")


@cli.command()
@click.option("--lon", "longitude", type=float, required=True, help="Origin longitude")
@click.option("--created", type=INSTANT, required=True, help="Creation instant (ISO-8601)")
@click.option("--at", type=INSTANT, help="Instant (ISO-8601, default: now)")
@click.pass_context
def drift(
    ctx: click.Context, longitude: float, created: datetime, at: Optional[datetime]
) -> None:
    """Show where a capsule has drifted to."""
    config = _load(ctx)
    drifted = drifted_longitude(
        longitude, created, _now(at), degrees_per_hour=config.drift.degrees_per_hour
    )
    click.echo(f"Drifted longitude: {drifted:.4f}")


@cli.command()
@click.option("--user", "user_id", type=int, required=True, help="Author id")
@click.option("--lat", "latitude", type=float, required=True, help="Latitude in degrees")
@click.option("--lon", "longitude", type=float, required=True, help="Longitude in degrees")
@click.option("--text", required=True, help="Message text")
@click.option("--image", "image_ref", help="Reference to an uploaded image")
@click.option("--audio", "audio_ref", help="Reference to an uploaded audio clip")
@click.option("--at", type=INSTANT, help="Instant (ISO-8601, default: now)")
@click.pass_context
def drop(
    ctx: click.Context,
    user_id: int,
    latitude: float,
    longitude: float,
    text: str,
    image_ref: Optional[str],
    audio_ref: Optional[str],
    at: Optional[datetime],
) -> None:
    """Drop a new capsule."""
    service = _open_service(ctx)

    try:
        capsule = service.create_capsule(
            user_id, text, latitude, longitude, _now(at),
            image_ref=image_ref, audio_ref=audio_ref,
        )
    except InvalidCoordinateError as e:
        click.echo(f"Invalid coordinates: {e}", err=True)
        ctx.exit(1)
    except StorageError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    click.echo(f"Capsule {capsule.id} dropped in zone {capsule.solar_zone_index}")
    click.echo(f"  Expires at: {capsule.expires_at.isoformat()}")


@cli.command()
@click.option("--capsule", "capsule_id", type=int, required=True, help="Capsule id")
@click.option("--user", "user_id", type=int, required=True, help="Author id")
@click.option("--text", required=True, help="Reply text")
@click.option("--at", type=INSTANT, help="Instant (ISO-8601, default: now)")
@click.pass_context
def reply(
    ctx: click.Context, capsule_id: int, user_id: int, text: str, at: Optional[datetime]
) -> None:
    """Reply to a capsule."""
    service = _open_service(ctx)

    try:
        created = service.create_reply(capsule_id, user_id, text, _now(at))
    except StorageError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    click.echo(f"Reply {created.id} sent to capsule {capsule_id}")


@cli.command()
@click.option("--zone", "zone_number", type=int, help="Solar zone index")
@click.option("--lon", "longitude", type=float, help="Viewer longitude (derives the zone)")
@click.option("--lat", "latitude", type=float, help="Viewer latitude (shows distances)")
@click.option("--user", "user_id", type=int, help="Viewer id (includes own capsules)")
@click.option("--at", type=INSTANT, help="Instant (ISO-8601, default: now)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def globe(
    ctx: click.Context,
    zone_number: Optional[int],
    longitude: Optional[float],
    latitude: Optional[float],
    user_id: Optional[int],
    at: Optional[datetime],
    as_json: bool,
) -> None:
    """List capsules visible from a solar zone."""
    if zone_number is None and longitude is None:
        raise click.UsageError("Either --zone or --lon is required")
    if longitude is not None:
        longitude = _check_longitude(ctx, longitude)

    service = _open_service(ctx)
    at = _now(at)
    if zone_number is None:
        zone_number = service.current_zone(longitude, at)

    pins = service.globe_view(zone_number, user_id, at)

    if as_json:
        _echo_json([pin.to_dict() for pin in pins])
        return

    click.echo(f"Zone {zone_number}: {len(pins)} capsule(s)")
    if longitude is not None:
        click.echo(f"  Your solar time: {time_of_day_label(longitude, at)}")

    for pin in pins:
        line = (
            f"  [{pin.capsule.id}] ({pin.latitude:.2f}, {pin.longitude:.2f}) "
            f"zone {pin.capsule.solar_zone_index}, {pin.reply_count} repl(ies)"
        )
        if latitude is not None and longitude is not None:
            km = distance_km(latitude, longitude, pin.latitude, pin.longitude)
            line += f", {format_distance(km)} away"
        click.echo(line)
        click.echo(f"      {pin.capsule.content_text}")


@cli.command()
@click.option("--capsule", "capsule_id", type=int, required=True, help="Capsule id")
@click.option("--user", "user_id", type=int, help="Viewer id")
@click.option("--at", type=INSTANT, help="Instant (ISO-8601, default: now)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def replies(
    ctx: click.Context,
    capsule_id: int,
    user_id: Optional[int],
    at: Optional[datetime],
    as_json: bool,
) -> None:
    """Show a capsule and the replies you can read."""
    service = _open_service(ctx)

    try:
        detail = service.capsule_detail(capsule_id, user_id, _now(at))
    except StorageError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    if as_json:
        _echo_json(detail.to_dict())
        return

    state = detail.unlock
    click.echo(f"Capsule {detail.capsule.id}: {detail.capsule.content_text}")
    click.echo(
        f"  Replies: {state.visible_count} visible of {state.total_replies} "
        f"(age {state.hours_elapsed:.1f}h)"
    )
    for band in state.bands:
        status = "unlocked" if band.is_unlocked else "locked"
        click.echo(
            f"  Day {band.day} ({band.start_hour}-{band.end_hour}h): "
            f"{band.count} repl(ies), {status}"
        )
    if state.is_author and state.total_replies:
        click.echo(
            f"  Next unlock in: {_format_countdown(state.next_unlock_in.total_seconds())}"
        )
    for item in state.visible_replies:
        click.echo(f"  - [{item.created_at.isoformat()}] user {item.author_id}: {item.content_text}")


@cli.command()
@click.option("--user", "user_id", type=int, required=True, help="Author id")
@click.option("--at", type=INSTANT, help="Instant (ISO-8601, default: now)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def inbox(ctx: click.Context, user_id: int, at: Optional[datetime], as_json: bool) -> None:
    """Show replies waiting on your capsules."""
    service = _open_service(ctx)
    summary = service.inbox(user_id, _now(at))

    if as_json:
        _echo_json(summary.to_dict())
        return

    click.echo(
        f"Inbox: {summary.total_unread} unlocked repl(ies) "
        f"across {summary.total_capsules} capsule(s)"
    )
    for item in summary.items:
        click.echo(
            f"  [{item.capsule.id}] {item.unlocked_count} unlocked, "
            f"{item.locked_count} locked"
        )
        if item.latest_reply is not None:
            click.echo(f"      Latest: {item.latest_reply.preview}")


@cli.command()
@click.option(
    "--per-city",
    type=click.IntRange(min=0),
    default=3,
    show_default=True,
    help="Capsules per demo city",
)
@click.option(
    "--user",
    "user_id",
    type=int,
    default=DEMO_AUTHOR_ID,
    show_default=True,
    help="Author id of the demo capsules",
)
@click.option("--seed", "random_seed", type=int, help="Random seed for a reproducible demo")
@click.option("--at", type=INSTANT, help="Instant (ISO-8601, default: now)")
@click.pass_context
def seed(
    ctx: click.Context,
    per_city: int,
    user_id: int,
    random_seed: Optional[int],
    at: Optional[datetime],
) -> None:
    """Fill the store with demo capsules around the world."""
    service = _open_service(ctx)

    try:
        capsules = seed_capsules(
            service, _now(at), per_city=per_city, author_id=user_id, seed=random_seed
        )
    except StorageError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    zones = {capsule.solar_zone_index for capsule in capsules}
    click.echo(f"Seeded {len(capsules)} capsule(s) across {len(zones)} zone(s)")


@cli.command("config")
@click.option("--show", is_flag=True, help="Show current configuration")
@click.option("--create", is_flag=True, help="Create default configuration file")
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    default=Path("config/config.yaml"),
    help="Output path for configuration file",
)
@click.pass_context
def config_cmd(
    ctx: click.Context, show: bool, create: bool, output: Path
) -> None:
    """Manage configuration."""
    config_path = ctx.obj.get("config_path")

    if create:
        if output.exists():
            if not click.confirm(f"{output} already exists. Overwrite?"):
                return

        save_config(Config(), output)

        click.echo(f"Configuration file created: {output}")
        return

    # --show is the default action
    config = load_config(config_path)
    click.echo(yaml.dump(config.to_dict(), default_flow_style=False, allow_unicode=True))


if __name__ == "__main__":
    cli()
