#!/usr/bin/env python3
"""
LibFuzzer harness for the remote protocol (RemoteSource._parse_line + poll).

Feed raw bytes (UTF-8). Exercises JSON parsing, type coercion and dispatch.
Run: python fuzz/fuzz_remote_parse.py fuzz/corpus/remote_parse/ [options]
"""

import sys

try:
    import atheris
except ImportError:
    print("Install atheris: pip install atheris")
    sys.exit(1)

with atheris.instrument_imports():
    from geoanchor.orientation import OrientationCalibrator
    from geoanchor.sources.remote import RemoteSource


def test_one_input(data: bytes) -> None:
    """Single fuzz iteration: decode as UTF-8 and feed one protocol line."""
    try:
        line = data.decode("utf-8").strip()
    except UnicodeDecodeError:
        return
    source = RemoteSource(host="127.0.0.1", port=0)
    calibrator = OrientationCalibrator()
    calibrator.listen(*source.channels())
    source.request_current_position(lambda coord, fix: None, lambda kind: None)
    source._parse_line(line)
    source.poll()


def main() -> None:
    atheris.Setup(sys.argv, test_one_input)
    atheris.Fuzz()


if __name__ == "__main__":
    main()
