"""Tests for volume discovery."""

from __future__ import annotations

from types import SimpleNamespace

from volscan.core.volumes import list_volumes, volumes_for_paths


def _partition(device: str, mountpoint: str, fstype: str = "ext4") -> SimpleNamespace:
    return SimpleNamespace(device=device, mountpoint=mountpoint, fstype=fstype, opts="rw")


def _usage(total: int, used: int, free: int) -> SimpleNamespace:
    return SimpleNamespace(total=total, used=used, free=free, percent=0.0)


class TestListVolumes:
    def test_maps_partitions_to_volumes(self, monkeypatch):
        monkeypatch.setattr(
            "volscan.core.volumes.psutil.disk_partitions",
            lambda all=False: [_partition("/dev/sda1", "/"), _partition("/dev/sdb1", "/data", "xfs")],
        )
        usages = {"/": _usage(1000, 500, 400), "/data": _usage(2000, 100, 1900)}
        monkeypatch.setattr("volscan.core.volumes.psutil.disk_usage", lambda path: usages[path])

        volumes = list_volumes()

        assert [v.name for v in volumes] == ["/dev/sda1", "/dev/sdb1"]
        assert [v.mount_point for v in volumes] == ["/", "/data"]
        assert volumes[1].fstype == "xfs"
        assert volumes[0].total_bytes == 1000

    def test_used_counts_reserved_space(self, monkeypatch):
        monkeypatch.setattr(
            "volscan.core.volumes.psutil.disk_partitions",
            lambda all=False: [_partition("/dev/sda1", "/")],
        )
        monkeypatch.setattr("volscan.core.volumes.psutil.disk_usage", lambda path: _usage(1000, 500, 400))
        assert list_volumes()[0].used_bytes == 600

    def test_unreadable_partition_is_skipped(self, monkeypatch):
        monkeypatch.setattr(
            "volscan.core.volumes.psutil.disk_partitions",
            lambda all=False: [_partition("/dev/sda1", "/"), _partition("/dev/sr0", "/media/cd")],
        )

        def usage(path):
            if path == "/media/cd":
                raise PermissionError(13, "Permission denied", path)
            return _usage(1000, 10, 990)

        monkeypatch.setattr("volscan.core.volumes.psutil.disk_usage", usage)
        assert [v.name for v in list_volumes()] == ["/dev/sda1"]

    def test_no_partitions_is_empty_not_error(self, monkeypatch):
        monkeypatch.setattr("volscan.core.volumes.psutil.disk_partitions", lambda all=False: [])
        assert list_volumes() == []

    def test_used_never_exceeds_total(self, monkeypatch):
        monkeypatch.setattr(
            "volscan.core.volumes.psutil.disk_partitions",
            lambda all=False: [_partition("/dev/odd", "/odd")],
        )
        monkeypatch.setattr("volscan.core.volumes.psutil.disk_usage", lambda path: _usage(100, 0, -50))
        volume = list_volumes()[0]
        assert 0 <= volume.used_bytes <= volume.total_bytes


class TestVolumesForPaths:
    def test_real_directory(self, tmp_path):
        volumes = volumes_for_paths([str(tmp_path)])
        assert len(volumes) == 1
        assert volumes[0].mount_point == str(tmp_path)
        assert volumes[0].total_bytes > 0
        assert 0 <= volumes[0].used_bytes <= volumes[0].total_bytes

    def test_missing_path_is_skipped(self, tmp_path):
        assert volumes_for_paths([str(tmp_path / "missing")]) == []


class TestVolumeModel:
    def test_derived_values(self, volume_for, tmp_path):
        volume = volume_for(tmp_path)
        assert volume.total_gib == 100
        assert volume.used_gib == 40
        assert volume.usage_percent == 40

    def test_zero_capacity_usage(self, volume_for, tmp_path):
        assert volume_for(tmp_path, total=0, used=0).usage_percent == 0
