"""Shared fixtures: an in-memory Bound directory with call tracking."""

from typing import Any, Optional

import pytest

from rdns_providers.bound import (
    BOUND_PTR_RECORD_TYPE,
    APIResult,
    BoundConfig,
    BoundProvider,
)


class FakeBoundClient:
    """In-memory stand-in for BoundClient.

    Methods named in ``failing`` report failure instead of acting.
    """

    def __init__(self) -> None:
        self.zones: list[dict[str, Any]] = []
        self.records: dict[int, list[dict[str, Any]]] = {}
        self.calls: list[tuple] = []
        self.failing: set[str] = set()
        self._next_id = 100

    def _new_id(self) -> int:
        self._next_id += 1
        return self._next_id

    def _failed(self, method: str) -> Optional[APIResult]:
        if method in self.failing:
            return APIResult(ok=False, error=f"{method} failed")
        return None

    # --- seeding helpers ---

    def add_zone(self, name: str) -> int:
        zone_id = self._new_id()
        self.zones.append({"id": zone_id, "name": name})
        self.records[zone_id] = []
        return zone_id

    def add_record(
        self,
        zone_id: int,
        name: str,
        hostname: str,
        record_type: str = BOUND_PTR_RECORD_TYPE,
    ) -> int:
        record_id = self._new_id()
        self.records[zone_id].append(
            {
                "id": record_id,
                "name": name,
                "type": {"class": record_type},
                "form_data": {"name": hostname},
            }
        )
        return record_id

    def ptr_records(self, zone_id: int) -> list[dict[str, Any]]:
        return [
            r
            for r in self.records.get(zone_id, [])
            if r["type"]["class"] == BOUND_PTR_RECORD_TYPE
        ]

    @property
    def mutations(self) -> list[tuple]:
        return [c for c in self.calls if not c[0].endswith("_list")]

    # --- client interface ---

    def zones_list(self) -> APIResult:
        self.calls.append(("zones_list",))
        return self._failed("zones_list") or APIResult(
            ok=True, data=[dict(z) for z in self.zones]
        )

    def zones_create(self, name: str) -> APIResult:
        self.calls.append(("zones_create", name))
        failed = self._failed("zones_create")
        if failed:
            return failed
        zone_id = self.add_zone(name)
        return APIResult(ok=True, data={"id": zone_id, "name": name})

    def records_list(self, zone_id: int) -> APIResult:
        self.calls.append(("records_list", zone_id))
        return self._failed("records_list") or APIResult(
            ok=True, data=[dict(r) for r in self.records.get(zone_id, [])]
        )

    def records_create(
        self, zone_id: int, name: str, record_type: str, form_data: dict[str, Any]
    ) -> APIResult:
        self.calls.append(("records_create", zone_id, name, record_type, form_data))
        failed = self._failed("records_create")
        if failed:
            return failed
        record_id = self.add_record(zone_id, name, form_data["name"], record_type)
        return APIResult(ok=True, data={"id": record_id, "name": name})

    def records_update(self, record_id: int, form_data: dict[str, Any]) -> APIResult:
        self.calls.append(("records_update", record_id, form_data))
        failed = self._failed("records_update")
        if failed:
            return failed
        for records in self.records.values():
            for record in records:
                if record["id"] == record_id:
                    record["form_data"] = dict(form_data)
                    return APIResult(ok=True, data=dict(record))
        return APIResult(ok=False, error="record not found")

    def records_destroy(self, record_id: int) -> APIResult:
        self.calls.append(("records_destroy", record_id))
        failed = self._failed("records_destroy")
        if failed:
            return failed
        for zone_id, records in self.records.items():
            self.records[zone_id] = [r for r in records if r["id"] != record_id]
        return APIResult(ok=True, data={})

    def verify_credentials(self) -> bool:
        return "zones_list" not in self.failing


@pytest.fixture
def fake_client():
    return FakeBoundClient()


@pytest.fixture
def bound_config():
    return BoundConfig(host="bound.example.com", api_key="secret")


@pytest.fixture
def provider(bound_config, fake_client):
    return BoundProvider(bound_config, client=fake_client)
