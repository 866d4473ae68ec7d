"""Seed CLI verification and log formatting."""

import json
import logging

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.middleware.logging_config import JSONFormatter
from app.middleware.request_context import _request_id_var
from app.seed.frontend_registry import DEFAULT_ROLE_PERMISSIONS, REGISTRY_ELEMENTS
from app.seed.registry import verify_data


def _count(output: str, label: str) -> str:
    return output.split(f"{label}:")[1].split()[0]


class TestCatalog:
    def test_keys_are_unique(self):
        keys = [row["element_key"] for row in REGISTRY_ELEMENTS]
        assert len(keys) == len(set(keys))

    def test_defaults_reference_registered_elements(self):
        keys = {row["element_key"] for row in REGISTRY_ELEMENTS}
        for role_name, defaults in DEFAULT_ROLE_PERMISSIONS.items():
            for permission_type in ("view", "edit"):
                unknown = set(defaults.get(permission_type, [])) - keys
                assert not unknown, f"{role_name}.{permission_type}: {unknown}"


@pytest.mark.asyncio
class TestVerifyData:
    async def test_empty_registry_fails(self, db_session: AsyncSession, capsys):
        assert await verify_data(db_session) is False
        assert _count(capsys.readouterr().out, "registry elements") == "0"

    async def test_seeded_registry_passes(self, seeded_session: AsyncSession, capsys):
        assert await verify_data(seeded_session) is True
        out = capsys.readouterr().out
        assert _count(out, "roles") == "4"
        assert _count(out, "permissions") == "29"


class TestJSONFormatter:
    def test_includes_request_id(self):
        token = _request_id_var.set("req-123")
        try:
            record = logging.LogRecord(
                "app.services.permission_resolver", logging.WARNING, __file__, 1,
                "Denied %s (%s)", ("cases", "view"), None,
            )
            entry = json.loads(JSONFormatter().format(record))
        finally:
            _request_id_var.reset(token)

        assert entry["message"] == "Denied cases (view)"
        assert entry["level"] == "WARNING"
        assert entry["request_id"] == "req-123"
