"""Prometheus exporter for stored package records."""

from typing import Iterator

from prometheus_client.core import GaugeMetricFamily
from prometheus_client.registry import Collector

from keepup.logging_config import logger

from .exceptions import KeepupError
from .packages import PackageVersions

PACKAGE_METRIC_NAME = "package_version_info"
PACKAGE_METRIC_LABELS = [
    "id",
    "package_name",
    "current_version",
    "current_version_eof",
    "newest_version",
    "expired",
    "data_center",
    "host_ip",
]


class PackageVersionsCollector(Collector):
    """
    Export one ``package_version_info`` sample per host and package.

    Records are read from the store on every scrape; nothing is held in
    process memory between scrapes.
    """

    def __init__(self, repository: PackageVersions) -> None:
        self._repository = repository

    def describe(self) -> Iterator[GaugeMetricFamily]:
        yield GaugeMetricFamily(PACKAGE_METRIC_NAME, "Metrics for package versions", labels=PACKAGE_METRIC_LABELS)

    def collect(self) -> Iterator[GaugeMetricFamily]:
        family = GaugeMetricFamily(PACKAGE_METRIC_NAME, "Metrics for package versions", labels=PACKAGE_METRIC_LABELS)

        try:
            records = self._repository.scan()
        except KeepupError as e:
            logger.error(f"Failed to scan package versions: {e}")
            yield family
            return

        for record_id, record in records.items():
            for package_name, detail in record.packages.items():
                family.add_metric(
                    [
                        str(record_id),
                        package_name,
                        detail.current_version,
                        detail.current_version_eof,
                        detail.newest_version,
                        "true" if detail.expired else "false",
                        record.data_center,
                        record.host_ip,
                    ],
                    1.0,
                )

        yield family
