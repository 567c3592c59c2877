"""Tests for dependencies between packages."""

from pathlib import Path

import co2mon.lib

_LIB_DIR = Path(co2mon.lib.__file__).parent


class TestLibIndependence:
    """Shared lib modules must not depend on a sensor package."""

    def test_lib_does_not_import_sensor_packages(self):
        offenders = [
            str(path.relative_to(_LIB_DIR))
            for path in _LIB_DIR.rglob("*.py")
            if "co2mon.mhz19" in path.read_text()
        ]
        assert offenders == []
