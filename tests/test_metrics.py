"""Tests for the Prometheus package collector."""

from unittest.mock import Mock

from prometheus_client import CollectorRegistry, generate_latest

from keepup.exceptions import StoreReadError
from keepup.metrics import PACKAGE_METRIC_NAME, PackageVersionsCollector
from keepup.packages import PackageVersions


def _repository(store):
    query = Mock(side_effect=lambda name: {"redis": ("7.0", "2025-01-01"), "mysql": ("8.0", "false")}[name])
    return PackageVersions(store, query, ttl=60)


class TestPackageVersionsCollector:
    """Test PackageVersionsCollector."""

    def test_one_sample_per_host_package(self, store):
        repo = _repository(store)
        record_id = repo.insert({"redis": "6.2.5", "mysql": "8.0.36", "data_center": "dc1", "host_ip": "10.0.0.1"})

        families = list(PackageVersionsCollector(repo).collect())

        assert len(families) == 1
        samples = {sample.labels["package_name"]: sample for sample in families[0].samples}
        assert set(samples) == {"redis", "mysql"}
        assert samples["redis"].value == 1.0
        assert samples["redis"].labels == {
            "id": str(record_id),
            "package_name": "redis",
            "current_version": "6.2",
            "current_version_eof": "2025-01-01",
            "newest_version": "7.0",
            "expired": "true",
            "data_center": "dc1",
            "host_ip": "10.0.0.1",
        }
        assert samples["mysql"].labels["expired"] == "false"

    def test_scan_failure_yields_no_samples(self):
        repo = Mock()
        repo.scan.side_effect = StoreReadError("down")

        families = list(PackageVersionsCollector(repo).collect())

        assert families[0].samples == []

    def test_exposition(self, store):
        repo = _repository(store)
        repo.insert({"redis": "7.0.1", "data_center": "dc1", "host_ip": "10.0.0.1"})
        registry = CollectorRegistry()
        registry.register(PackageVersionsCollector(repo))

        output = generate_latest(registry).decode()

        assert f"# TYPE {PACKAGE_METRIC_NAME} gauge" in output
        assert 'package_name="redis"' in output
        assert 'expired="false"' in output
