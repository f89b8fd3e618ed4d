"""Tests for the Python runtime resolver"""

import pytest

from canary_installer.errors import InstallerError
from canary_installer.lib.pyruntime import parse_python_version, resolve_runtime, version_in_range

from conftest import SYSTEM_PYTHON

LO, HI = (3, 11), (3, 12)


class TestParseVersion:
    def test_full_version(self):
        assert parse_python_version("Python 3.12.3\n") == (3, 12, 3)

    def test_release_candidate_suffix(self):
        assert parse_python_version("Python 3.11.0rc1") == (3, 11, 0)

    def test_major_minor_only(self):
        assert parse_python_version("Python 3.12") == (3, 12, 0)

    def test_garbage(self):
        assert parse_python_version("command not found") is None
        assert parse_python_version("") is None


class TestVersionRange:
    @pytest.mark.parametrize("version", [(3, 11, 0), (3, 11, 9), (3, 12, 0), (3, 12, 11)])
    def test_inclusive_bounds_accepted(self, version):
        assert version_in_range(version, LO, HI)

    @pytest.mark.parametrize("version", [(3, 10, 14), (3, 13, 0), (2, 7, 18), (4, 11, 0)])
    def test_outside_rejected(self, version):
        assert not version_in_range(version, LO, HI)


class TestResolveRuntime:
    def test_first_compatible_candidate_wins(self, machine):
        machine.binaries["python3.11"] = "/usr/bin/python3.11"
        machine.python_versions["/usr/bin/python3.11"] = "Python 3.11.8"

        rt = resolve_runtime(["python3.12", "python3.11", "python3"], LO, HI)

        assert rt.command == "python3.12"
        assert rt.path == SYSTEM_PYTHON
        assert rt.version_str == "3.12.3"

    def test_skips_out_of_range_and_missing(self, machine):
        machine.binaries = {"python3": "/usr/bin/python3"}
        machine.python_versions = {"/usr/bin/python3": "Python 3.11.2"}

        rt = resolve_runtime(["python3.12", "python3.11", "python3"], LO, HI)

        assert rt.command == "python3"
        assert rt.version == (3, 11, 2)

    def test_none_compatible_raises_with_hint(self, machine):
        machine.binaries = {"python3": "/usr/bin/python3"}
        machine.python_versions = {"/usr/bin/python3": "Python 3.13.1"}

        with pytest.raises(InstallerError, match="Need Python 3.11 - 3.12") as exc_info:
            resolve_runtime(["python3.12", "python3"], LO, HI, install_hint="sudo apt install python3.12")

        assert exc_info.value.hints == ["Install with: sudo apt install python3.12"]
