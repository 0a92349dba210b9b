from __future__ import annotations

import json
from pathlib import Path

import pytest

from regmidi.cli import main as regmidi_main


def _write_script(tmp_path: Path, **overrides) -> Path:
    script = {
        "out": str(tmp_path / "render"),
        "tag": {"name": "Game", "song_id": 5},
        "events": [
            ["write", "0x90", 0, 60, 100],
            ["delay", 4800],
            ["write", "0xF0", 0, 0, 0],
            ["poke8", 0, 0],
            ["write", "0x80", 0, 60, 0],
            ["setloop"],
        ],
    }
    script.update(overrides)
    p = tmp_path / "script.json"
    p.write_text(json.dumps(script))
    return p


def test_render_then_dump(tmp_path: Path, capsys):
    pytest.importorskip("mido")
    script = _write_script(tmp_path)

    assert regmidi_main(["render", "--script", str(script)]) == 0
    out, _ = capsys.readouterr()
    out_path = tmp_path / "render.mid"
    assert "Wrote" in out
    assert out_path.is_file()

    assert regmidi_main(["dump", str(out_path), "--json"]) == 0
    out, _ = capsys.readouterr()
    rows = json.loads(out)
    assert [r["type"] for r in rows] == ["text", "note_on", "note_off", "end_of_track"]
    assert rows[2]["tick"] == 480
    # 480 ticks at division 480 and 120 bpm
    assert rows[2]["ms"] == pytest.approx(500.0)


def test_render_with_config_and_out_override(tmp_path: Path, capsys):
    script = _write_script(tmp_path)
    cfg = tmp_path / "session.json"
    cfg.write_text(json.dumps({"division": 96}))
    target = tmp_path / "other.mid"

    rc = regmidi_main(["render", "--script", str(script), "--config", str(cfg), "--out", str(target)])
    assert rc == 0
    data = target.read_bytes()
    assert data[12:14] == (96).to_bytes(2, "big")
    assert not (tmp_path / "render.mid").exists()


def test_render_rejects_bad_script(tmp_path: Path, capsys):
    script = _write_script(tmp_path, events=[["write", 0x90, 0, 60], ["bogus"]])
    assert regmidi_main(["render", "--script", str(script)]) == 1
    out, _ = capsys.readouterr()
    assert "Render failed" in out
    assert not (tmp_path / "render.mid").exists()


def test_dump_text_table(tmp_path: Path, capsys):
    pytest.importorskip("mido")
    script = _write_script(tmp_path, tag=None)
    assert regmidi_main(["render", "--script", str(script)]) == 0
    capsys.readouterr()

    assert regmidi_main(["dump", str(tmp_path / "render.mid"), "--bpm", "60"]) == 0
    out, _ = capsys.readouterr()
    assert "division 480" in out
    assert "note_on" in out


def test_render_rejects_non_object_tag(tmp_path: Path, capsys):
    script = _write_script(tmp_path, tag="Game")
    assert regmidi_main(["render", "--script", str(script)]) == 1
    out, _ = capsys.readouterr()
    assert "Render failed" in out
    assert "'tag' must be an object" in out
    assert not (tmp_path / "render.mid").exists()


def test_render_reports_invalid_json(tmp_path: Path, capsys):
    script = tmp_path / "script.json"
    script.write_text("{not json")
    assert regmidi_main(["render", "--script", str(script)]) == 1
    out, _ = capsys.readouterr()
    assert "Render failed" in out
