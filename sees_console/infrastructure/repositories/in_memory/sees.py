"""
============================================================
CRC CARD — infrastructure/repositories/in_memory/sees.py
============================================================
Class: InMemorySeesRepository

Responsibilities:
  - Store SEES records and their NS records in memory.
  - Mirror the Postgres constraints: unique target_domain (ConflictError),
    serial ids, NS records removed with their parent.
  - Keep ordering aligned with Postgres: ORDER BY created_at DESC, id DESC.

Collaborators:
  - domain.entities.Sees, SeesCreate, NsRecord
  - domain.repositories.SeesRepository (contract)

Constraints / Notes:
  - Thread-safe (Lock); callers receive copies, never the stored objects.
============================================================
"""

from __future__ import annotations

import copy
from dataclasses import replace
from datetime import datetime, timezone
from threading import Lock
from typing import Any, Dict, List, Optional

from ....crosscutting.exceptions import ConflictError
from ....domain.entities import NsRecord, Sees, SeesCreate


class InMemorySeesRepository:
    def __init__(self) -> None:
        self._lock = Lock()
        self._records: Dict[int, Sees] = {}
        self._next_id = 1
        self._next_ns_id = 1

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)

    def _ns_records(self, sees_id: int, name_servers: List[str]) -> List[NsRecord]:
        records = []
        for ns in name_servers:
            records.append(
                NsRecord(id=self._next_ns_id, sees_id=sees_id, name_server=ns)
            )
            self._next_ns_id += 1
        return records

    async def list_sees(self) -> List[Sees]:
        with self._lock:
            items = [copy.deepcopy(s) for s in self._records.values()]
        return sorted(items, key=lambda s: (s.created_at, s.id), reverse=True)

    async def get_sees(self, sees_id: int) -> Optional[Sees]:
        with self._lock:
            record = self._records.get(sees_id)
            return copy.deepcopy(record) if record else None

    async def create_sees(self, data: SeesCreate) -> Sees:
        domain = data.target_domain.strip().lower()
        with self._lock:
            if any(s.target_domain == domain for s in self._records.values()):
                raise ConflictError("A SEES record for this domain already exists")

            sees_id = self._next_id
            self._next_id += 1
            now = self._now()
            record = Sees(
                id=sees_id,
                title=data.title,
                target_domain=domain,
                redirect_url=data.redirect_url,
                note=data.note,
                preview_url=data.preview_url,
                template_variables=dict(data.template_variables),
                ns_records=self._ns_records(sees_id, data.name_servers),
                created_at=now,
                updated_at=now,
            )
            self._records[sees_id] = record
            return copy.deepcopy(record)

    async def update_sees(
        self,
        sees_id: int,
        *,
        redirect_url: str,
        note: Optional[str],
        preview_url: Optional[str],
        template_variables: dict[str, Any],
    ) -> Optional[Sees]:
        with self._lock:
            record = self._records.get(sees_id)
            if record is None:
                return None
            updated = replace(
                record,
                redirect_url=redirect_url,
                note=note,
                preview_url=preview_url,
                template_variables=dict(template_variables),
                updated_at=self._now(),
            )
            self._records[sees_id] = updated
            return copy.deepcopy(updated)

    async def attach_cloud_resources(
        self,
        sees_id: int,
        *,
        static_app_name: str,
        static_app_url: str,
        dns_zone_name: str,
        name_servers: List[str],
    ) -> Optional[Sees]:
        with self._lock:
            record = self._records.get(sees_id)
            if record is None:
                return None
            updated = replace(
                record,
                static_app_name=static_app_name,
                static_app_url=static_app_url,
                dns_zone_name=dns_zone_name,
                ns_records=self._ns_records(sees_id, name_servers),
                updated_at=self._now(),
            )
            self._records[sees_id] = updated
            return copy.deepcopy(updated)

    async def delete_sees(self, sees_id: int) -> bool:
        # R: NS records live inside the record, so they go with it.
        with self._lock:
            return self._records.pop(sees_id, None) is not None

    async def ping(self) -> bool:
        return True
