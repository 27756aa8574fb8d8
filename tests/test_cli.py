"""Tests for the command line entry point."""

from bouncy.__main__ import main


class TestNotes:
    def test_renders_requested_count(self, tmp_path):
        assert main(["--duration", "0.02", "--seed", "1", "notes", str(tmp_path), "--count", "3"]) == 0
        assert sorted(p.name for p in tmp_path.iterdir()) == [
            "note_0001.wav",
            "note_0002.wav",
            "note_0003.wav",
        ]


class TestBounce:
    def test_writes_a_note_per_wall_hit(self, tmp_path):
        rc = main([
            "--duration", "0.02",
            "bounce", str(tmp_path),
            "--width", "300", "--height", "300",
            "--velocity-x", "4000", "--velocity-y", "0",
        ])
        assert rc == 0
        assert len(list(tmp_path.glob("*.wav"))) >= 1
