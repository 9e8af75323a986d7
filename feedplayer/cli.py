"""
Simple CLI to inspect feeds and run a headless slideshow manually.
"""
from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import click
from dotenv import load_dotenv

from feedplayer.config_loader import load_presets
from feedplayer.errors import FeedSpecError, UnknownFeedError
from feedplayer.feed_spec import parse_feed_spec, resolve_kind
from feedplayer.models import FeedSpec
from feedplayer.player import FeedPlayer
from feedplayer.router import Location
from feedplayer.security import redact_secrets
from feedplayer.settings import PlayerSettings, load_settings
from feedplayer.status import build_status


def _resolve_preset(ctx: click.Context, spec: Optional[str]) -> Dict[str, Any]:
    options = ctx.obj
    preset: Dict[str, Any] = {"spec": spec or "", "feed_type": None, "fields": [], "require_media": False, "civic_limit": None}
    if options["preset"]:
        presets = load_presets(Path(options["config"]))
        if options["preset"] not in presets:
            raise click.BadParameter(f"Preset '{options['preset']}' not found in {options['config']}", param_hint="--preset")
        preset.update(presets[options["preset"]])
        if spec:
            preset["spec"] = spec
    if options["feed_type"]:
        preset["feed_type"] = options["feed_type"]
    if options["fields"]:
        preset["fields"] = list(options["fields"])
    return preset


def _build_player(preset: Dict[str, Any], settings: PlayerSettings, **kwargs: Any) -> FeedPlayer:
    return FeedPlayer(
        preset["spec"],
        feed_type=preset["feed_type"],
        fields=preset["fields"],
        settings=settings,
        require_media=preset["require_media"],
        civic_limit=preset["civic_limit"],
        **kwargs,
    )


def _feed_spec_of(preset: Dict[str, Any]) -> FeedSpec:
    spec = preset["spec"]
    if isinstance(spec, FeedSpec):
        return spec
    return parse_feed_spec(spec, preset["feed_type"])


@click.group()
@click.option("--config", default="feedplayer.yaml", show_default=True, help="YAML file with named presets.")
@click.option("--preset", default=None, help="Preset name to read the feed string from.")
@click.option("--feed-type", default=None, help="'mixed' or a source kind to pin every URL to.")
@click.option("--field", "fields", multiple=True, help="Field allowlist for generic feeds (repeatable).")
@click.pass_context
def cli(ctx: click.Context, config: str, preset: Optional[str], feed_type: Optional[str], fields: Tuple[str, ...]):
    load_dotenv()
    settings = load_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = {"config": config, "preset": preset, "feed_type": feed_type, "fields": fields, "settings": settings}


@cli.command()
@click.argument("spec", required=False)
@click.pass_context
def feeds(ctx: click.Context, spec: Optional[str]):
    """List the feed-keys a spec string defines."""
    preset = _resolve_preset(ctx, spec)
    try:
        feed_spec = _feed_spec_of(preset)
    except FeedSpecError as exc:
        raise click.ClickException(str(exc))
    for key, urls in feed_spec.items():
        for url in urls:
            kind = resolve_kind(url, preset["feed_type"])
            click.echo(f"{key}\t{kind.value}\t{redact_secrets(url)}")


@cli.command()
@click.argument("spec", required=False)
@click.option("--feed", "feed_key", default=None, help="Feed-key to load (defaults to the first).")
@click.pass_context
def items(ctx: click.Context, spec: Optional[str], feed_key: Optional[str]):
    """Print the normalized items of one feed as JSON lines."""
    preset = _resolve_preset(ctx, spec)
    player = _build_player(preset, ctx.obj["settings"])

    async def run():
        if not await player.mount():
            raise click.ClickException(player.error or "Cannot mount player")
        try:
            if feed_key:
                await player.select_feed(feed_key)
            return player.machine.items
        finally:
            player.close()

    try:
        loaded = asyncio.run(run())
    except UnknownFeedError as exc:
        raise click.ClickException(str(exc))
    for item in loaded:
        click.echo(json.dumps(item.to_dict(), ensure_ascii=False, default=str))


@cli.command()
@click.argument("spec", required=False)
@click.option("--steps", default=5, show_default=True, type=int, help="Number of slides to show.")
@click.option("--duration", default=None, type=float, help="Seconds per image (overrides settings).")
@click.option("--hash", "fragment", default="", help="Initial URL fragment, e.g. 'feed=nasa&ref=2'.")
@click.pass_context
def play(ctx: click.Context, spec: Optional[str], steps: int, duration: Optional[float], fragment: str):
    """Run a headless slideshow and print every slide with the resulting fragment."""
    preset = _resolve_preset(ctx, spec)
    settings: PlayerSettings = ctx.obj["settings"]
    if duration:
        settings = replace(settings, image_duration=duration)
    player = _build_player(preset, settings, location=Location(fragment), autoplay=True)

    async def run():
        if not await player.mount():
            raise click.ClickException(player.error or "Cannot mount player")
        changed = asyncio.Event()
        player.machine.subscribe(lambda cursor, items: changed.set())
        try:
            for _ in range(steps):
                item = player.current_item
                if item is not None:
                    click.echo(f"#{player.location.hash}\t[{item.media_kind.value}] {item.title or 'Untitled'}")
                changed.clear()
                try:
                    await asyncio.wait_for(changed.wait(), timeout=settings.image_duration + 1)
                except asyncio.TimeoutError:
                    # Text, unknown and headless video items never finish on their own.
                    player.machine.advance_next()
        finally:
            player.close()

    asyncio.run(run())


@cli.command()
@click.argument("spec", required=False)
@click.option("--hash", "fragment", default="", help="Initial URL fragment.")
@click.pass_context
def status(ctx: click.Context, spec: Optional[str], fragment: str):
    """Mount a player and print its status snapshot."""
    preset = _resolve_preset(ctx, spec)
    player = _build_player(preset, ctx.obj["settings"], location=Location(fragment))

    async def run():
        await player.mount()
        try:
            return build_status(player)
        finally:
            player.close()

    click.echo(json.dumps(asyncio.run(run()), indent=2, default=str))


if __name__ == "__main__":  # pragma: no cover
    cli()
