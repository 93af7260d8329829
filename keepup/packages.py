"""Per-host package inventory records.

A host submits a flat mapping of package name to installed version, plus
two control fields naming the host (``data_center`` and ``host_ip``). Each
package is resolved against the EOL cache and the result is stored as one
record per host, keyed by an identifier derived from the control fields.
Re-submitting from the same host overwrites the previous record.
"""

import json
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Tuple

from keepup.logging_config import logger

from ._eol.models import NO_EOL, UNKNOWN_VERSION
from ._store.protocol import KeyValueStore
from .exceptions import KeepupError, MarshalError, RecordNotFoundError, StoreReadError
from .versions import extract_major_minor, is_version_expired

DATA_CENTER_KEY = "data_center"
HOST_IP_KEY = "host_ip"
CONTROL_KEYS = (DATA_CENTER_KEY, HOST_IP_KEY)

UUID_SUFFIX = "PACKAGE_UUID"

# Raw versions a host reports when it could not determine one
SKIPPED_VERSIONS = ("", UNKNOWN_VERSION)

# package name -> (latest version, EOL marker); raises KeepupError when unresolved
QueryFunc = Callable[[str], Tuple[str, str]]


@dataclass
class PackageDetail:
    """Freshness verdict for one installed package."""

    current_version: str
    current_version_eof: str = NO_EOL
    newest_version: str = UNKNOWN_VERSION
    expired: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "current_version": self.current_version,
            "current_version_eof": self.current_version_eof,
            "newest_version": self.newest_version,
            "expired": self.expired,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PackageDetail":
        return cls(
            current_version=data.get("current_version", ""),
            current_version_eof=data.get("current_version_eof", NO_EOL),
            newest_version=data.get("newest_version", UNKNOWN_VERSION),
            expired=bool(data.get("expired", False)),
        )


@dataclass
class PackageRecord:
    """Stored inventory of one host."""

    id: uuid.UUID
    data_center: str
    host_ip: str
    updated_at: str
    packages: Dict[str, PackageDetail] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": str(self.id),
            "data_center": self.data_center,
            "host_ip": self.host_ip,
            "updated_at": self.updated_at,
            "packages": {name: detail.to_dict() for name, detail in self.packages.items()},
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, raw: str) -> "PackageRecord":
        """
        Parse a stored record.

        Raises:
            MarshalError: If the payload is not a valid record
        """
        try:
            data = json.loads(raw)
            return cls(
                id=uuid.UUID(data["id"]),
                data_center=data.get("data_center", ""),
                host_ip=data.get("host_ip", ""),
                updated_at=data.get("updated_at", ""),
                packages={
                    name: PackageDetail.from_dict(detail) for name, detail in (data.get("packages") or {}).items()
                },
            )
        except (TypeError, ValueError, KeyError, AttributeError) as e:
            raise MarshalError(f"Failed to decode package record: {e}")


def split_inventory(raw: Mapping[str, str]) -> Tuple[str, str, Dict[str, str]]:
    """
    Separate the control fields from the package versions.

    Returns:
        Tuple of (data_center, host_ip, package name -> raw version)
    """
    packages = {name: version for name, version in raw.items() if name not in CONTROL_KEYS}
    return raw.get(DATA_CENTER_KEY, ""), raw.get(HOST_IP_KEY, ""), packages


def record_id_for(data_center: str, host_ip: str) -> uuid.UUID:
    """Derive the stable record identifier of a host."""
    return uuid.uuid5(uuid.NAMESPACE_DNS, f"{data_center}-{host_ip}-{UUID_SUFFIX}")


def resolve_package(name: str, raw_version: str, query: QueryFunc) -> PackageDetail:
    """
    Compare one installed package against its newest upstream release.

    Lookup failures are not propagated: the newest version becomes
    "unknown" and the EOL marker "false".
    """
    current_version = extract_major_minor(raw_version)

    try:
        latest_version, eol_date = query(name)
    except KeepupError as e:
        logger.warning(f"Could not resolve latest version of {name}: {e}")
        latest_version, eol_date = UNKNOWN_VERSION, NO_EOL
    else:
        latest_version = extract_major_minor(latest_version)

    if not eol_date:
        eol_date = NO_EOL

    return PackageDetail(
        current_version=current_version,
        current_version_eof=eol_date,
        newest_version=latest_version,
        expired=is_version_expired(current_version, latest_version),
    )


def build_response(record: PackageRecord) -> Dict[str, Any]:
    """Build the outbound document for a record."""
    return {
        "id": str(record.id),
        "packages": {name: detail.to_dict() for name, detail in record.packages.items()},
    }


class PackageVersions:
    """
    Repository of host package records in the key-value store.

    Example:
        repo = PackageVersions(store, cache.lookup, ttl=86400)
        record_id = repo.insert({"redis": "1:6.2.5", "data_center": "dc1", "host_ip": "10.0.0.1"})
        record = repo.retrieve(record_id)
    """

    def __init__(self, store: KeyValueStore, query: QueryFunc, ttl: int) -> None:
        self._store = store
        self._query = query
        self._ttl = ttl

    def build_record(self, raw_inventory: Mapping[str, str]) -> PackageRecord:
        """Resolve an inventory into a record without storing it."""
        data_center, host_ip, inventory = split_inventory(raw_inventory)

        packages: Dict[str, PackageDetail] = {}
        for name, raw_version in inventory.items():
            if raw_version in SKIPPED_VERSIONS:
                continue
            packages[name] = resolve_package(name, raw_version, self._query)

        return PackageRecord(
            id=record_id_for(data_center, host_ip),
            data_center=data_center,
            host_ip=host_ip,
            updated_at=str(int(time.time())),
            packages=packages,
        )

    def insert(self, raw_inventory: Mapping[str, str]) -> uuid.UUID:
        """
        Resolve and store a host's inventory.

        Returns:
            The record identifier

        Raises:
            MarshalError: If the record cannot be serialized
            StoreWriteError: If the store write fails
        """
        record = self.build_record(raw_inventory)

        try:
            data = record.to_json()
        except (TypeError, ValueError) as e:
            raise MarshalError(f"Failed to serialize record {record.id}: {e}")

        self._store.set(str(record.id), data, self._ttl)
        logger.info(f"Stored {len(record.packages)} packages for {record.data_center}/{record.host_ip} as {record.id}")
        return record.id

    def retrieve(self, record_id: uuid.UUID) -> PackageRecord:
        """
        Load a stored record.

        Raises:
            RecordNotFoundError: If no record exists for the identifier
            MarshalError: If the stored record cannot be decoded
        """
        raw = self._store.get(str(record_id))
        if raw is None:
            raise RecordNotFoundError(f"ID not found: {record_id}")
        return PackageRecord.from_json(raw)

    def scan(self) -> Dict[uuid.UUID, PackageRecord]:
        """
        Load every stored record.

        Keys that are not record identifiers (such as the EOL cache key)
        and records that fail to load are skipped.
        """
        records: Dict[uuid.UUID, PackageRecord] = {}
        for key in self._store.scan_keys():
            try:
                record_id = uuid.UUID(key)
            except ValueError:
                continue
            try:
                records[record_id] = self.retrieve(record_id)
            except (RecordNotFoundError, MarshalError, StoreReadError) as e:
                logger.debug(f"Skipping key {key} during scan: {e}")
        return records
