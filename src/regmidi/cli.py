from __future__ import annotations

import argparse
import json
import logging
from typing import Any, Dict, List, Tuple

from .config import SessionConfig, load_session_config
from .errors import RegMidiError, ScriptError
from .session import MidiSession
from .timebase import ticks_to_ms


def _int(value: Any) -> int:
    # Scripts may spell register values as "0x90".
    if isinstance(value, bool):
        raise ScriptError(f"expected integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value, 0)
        except ValueError:
            pass
    raise ScriptError(f"expected integer, got {value!r}")


def _apply_step(session: MidiSession, step: List[Any]) -> None:
    if not isinstance(step, list) or not step:
        raise ScriptError(f"malformed event entry: {step!r}")
    op = str(step[0]).lower()
    args = [_int(v) for v in step[1:]]
    arity = {"delay": 1, "write": 4, "poke8": 2, "poke32": 2, "setloop": 0}
    if op not in arity:
        raise ScriptError(f"unknown event op: {op!r}")
    if len(args) != arity[op]:
        raise ScriptError(f"{op} takes {arity[op]} values, got {len(args)}")
    if op == "delay":
        session.add_delay(args[0])
    elif op == "write":
        session.write_event(*args)
    elif op == "poke8":
        session.poke8(*args)
    elif op == "poke32":
        session.poke32(*args)
    else:
        session.set_loop()


def render_script(script: Dict[str, Any], config: SessionConfig, out: str | None = None) -> Tuple[str, bytes]:
    """Replay a JSON event script into a new session and close it.

    Returns the output path and the encoded file.
    """
    name = out or script.get("out")
    if not name:
        raise ScriptError("script has no 'out' and no --out was given")
    events = script.get("events", [])
    if not isinstance(events, list):
        raise ScriptError("'events' must be a list")

    session = MidiSession.open(str(name), config=config)
    try:
        tag = script.get("tag")
        if tag:
            if not isinstance(tag, dict):
                raise ScriptError(f"'tag' must be an object, got {tag!r}")
            song_id = tag.get("song_id")
            session.write_tag(tag.get("name", ""), None if song_id is None else _int(song_id))
        for step in events:
            _apply_step(session, step)
    except Exception:
        session.abort()
        raise
    return session.path, session.close()


def _cmd_render(args: argparse.Namespace) -> int:
    cfg = load_session_config(args.config) if args.config else SessionConfig()
    try:
        with open(args.script, "r") as f:
            script = json.load(f)
        if not isinstance(script, dict):
            raise ScriptError("script must be a JSON object")
        path, data = render_script(script, cfg, out=args.out)
    except (RegMidiError, ValueError) as exc:
        print(f"Render failed: {exc}")
        return 1
    print(f"Wrote {path} ({len(data)} bytes)")
    return 0


def _cmd_dump(args: argparse.Namespace) -> int:
    try:
        import mido
    except ImportError:  # pragma: no cover - guarded by requirements
        raise RuntimeError("mido is required to dump MIDI files")

    mid = mido.MidiFile(args.path)
    rows: List[Dict[str, Any]] = []
    for index, track in enumerate(mid.tracks):
        tick = 0
        for msg in track:
            tick += int(msg.time)
            rows.append(
                {
                    "track": index,
                    "tick": tick,
                    "ms": round(ticks_to_ms(tick, mid.ticks_per_beat, args.bpm), 3),
                    "type": msg.type,
                    "message": str(msg),
                }
            )

    if args.json:
        print(json.dumps(rows))
        return 0

    print(f"{args.path}: format {mid.type}, {len(mid.tracks)} track(s), division {mid.ticks_per_beat}")
    for row in rows:
        print(f"{row['track']:2d}  {row['tick']:8d}  {row['ms']:10.1f}ms  {row['message']}")
    return 0


def main(argv: List[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Register-write to Standard MIDI File encoder")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    p_render = subparsers.add_parser("render", help="Encode a JSON event script to a .mid file")
    p_render.add_argument("--script", required=True, help="Path to JSON event script")
    p_render.add_argument("--config", default=None, help="Optional JSON session config")
    p_render.add_argument("--out", default=None, help="Output name (overrides the script's 'out')")
    p_render.set_defaults(func=_cmd_render)

    p_dump = subparsers.add_parser("dump", help="List the messages of a MIDI file")
    p_dump.add_argument("path", help="Path to the MIDI file")
    p_dump.add_argument("--bpm", type=float, default=120.0, help="Tempo used for the ms column (default 120)")
    p_dump.add_argument("--json", action="store_true", help="Print rows as JSON")
    p_dump.set_defaults(func=_cmd_dump)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
