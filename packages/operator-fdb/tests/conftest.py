"""Shared fixtures for operator-fdb tests."""

from typing import Any, Callable

import pytest

from operator_fdb.types import Process, ProcessAddress


@pytest.fixture
def make_process() -> Callable[..., Process]:
    """
    Factory for Process objects.

    Example:
        make_process("10.0.0.1:4500", zone="z1")
        make_process("10.0.0.2:4500:tls", process_class="log", excluded=True)
    """

    def _make(
        address: str,
        zone: str = "",
        process_class: str = "storage",
        dc: str = "",
        instance_id: str | None = None,
        excluded: bool = False,
        being_removed: bool = False,
        **locality: str,
    ) -> Process:
        tags = dict(locality)
        if zone:
            tags["zoneid"] = zone
        if dc:
            tags["dcid"] = dc
        tags["instance_id"] = instance_id or f"{process_class}-{address}"
        return Process(
            address=ProcessAddress.parse(address),
            process_class=process_class,
            locality=tags,
            excluded=excluded,
            being_removed=being_removed,
        )

    return _make


@pytest.fixture
def make_status() -> Callable[..., dict[str, Any]]:
    """
    Factory for `status json` documents.

    Each process is given as (address, class, zone) or
    (address, class, zone, extra_fields_dict).
    """

    def _make(*processes: tuple, connection_string: str | None = None) -> dict[str, Any]:
        entries = {}
        for index, fields in enumerate(processes):
            address, process_class, zone = fields[:3]
            extra = fields[3] if len(fields) > 3 else {}
            entry = {
                "address": address,
                "class_type": process_class,
                "locality": {
                    "zoneid": zone,
                    "instance_id": f"{process_class}-{index}",
                },
                "excluded": False,
            }
            entry.update(extra)
            entries[f"p{index:03d}"] = entry
        cluster: dict[str, Any] = {"processes": entries}
        if connection_string is not None:
            cluster["connection_string"] = connection_string
        return {"client": {"database_status": {"available": True}}, "cluster": cluster}

    return _make
