#!/usr/bin/env python3
"""
LibFuzzer harness for orientation samples (HeadingSample.from_dict).

Feed raw bytes as JSON. Every sample must either calibrate to a finite
heading or leave the calibrator uncalibrated.
Run: python fuzz/fuzz_heading.py fuzz/corpus/heading/ [options]
"""

import json
import math
import sys

try:
    import atheris
except ImportError:
    print("Install atheris: pip install atheris")
    sys.exit(1)

with atheris.instrument_imports():
    from geoanchor.orientation import HeadingSample, OrientationCalibrator


def test_one_input(data: bytes) -> None:
    """Single fuzz iteration: parse JSON and offer it as an orientation sample."""
    try:
        obj = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        return
    calibrator = OrientationCalibrator()
    calibrator.handle_sample(HeadingSample.from_dict(obj))
    heading = calibrator.heading
    if heading is not None and not math.isfinite(heading):
        raise AssertionError(f"non-finite heading {heading!r}")


def main() -> None:
    atheris.Setup(sys.argv, test_one_input)
    atheris.Fuzz()


if __name__ == "__main__":
    main()
