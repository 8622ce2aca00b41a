"""
Tests for logging formatters, the call context and the correlation middleware.
"""

import io
import json
import logging

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from focusflow.errors import Forbidden
from focusflow.observability import (
    CorrelationIdMiddleware,
    HumanFormatter,
    JSONFormatter,
    bind_call,
    configure_logging,
    current_context,
    generate_request_id,
    get_caller_owner,
    get_request_id,
)
from tests.fixtures import OWNER_A, OWNER_B, make_block


def _record(msg="hello %s", args=("world",), level=logging.INFO, **extra):
    record = logging.LogRecord("focusflow.test", level, __file__, 1, msg, args, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


class TestCallContext:
    def test_generated_ids_are_unique(self):
        ids = {generate_request_id() for _ in range(100)}
        assert len(ids) == 100
        assert all(i.startswith("req-") and len(i) == 20 for i in ids)

    def test_bind_sets_and_resets(self):
        assert current_context() is None
        with bind_call(request_id="req-abc", owner_id="alice") as ctx:
            assert ctx.request_id == "req-abc"
            assert get_request_id() == "req-abc"
            assert get_caller_owner() == "alice"
        assert get_request_id() is None
        assert get_caller_owner() is None

    def test_missing_request_id_generated(self):
        with bind_call(owner_id="alice") as ctx:
            assert ctx.request_id.startswith("req-")

    def test_blank_owner_treated_as_absent(self):
        with bind_call(owner_id=""):
            assert get_caller_owner() is None

    def test_nested_bind_restores_outer(self):
        with bind_call(request_id="req-outer", owner_id="alice"):
            with bind_call(owner_id="bob"):
                assert get_request_id() != "req-outer"
                assert get_caller_owner() == "bob"
            assert get_request_id() == "req-outer"
            assert get_caller_owner() == "alice"


class TestFormatters:
    def test_json_fields(self):
        data = json.loads(JSONFormatter().format(_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "focusflow.test"
        assert data["message"] == "hello world"
        assert data["timestamp"].endswith("Z")
        assert "request_id" not in data
        assert "owner_id" not in data

    def test_json_carries_call_context_and_extra(self):
        with bind_call(request_id="req-123", owner_id="alice"):
            data = json.loads(JSONFormatter().format(_record(block_id="block_1")))

        assert data["request_id"] == "req-123"
        assert data["owner_id"] == "alice"
        assert data["block_id"] == "block_1"

    def test_human_line(self):
        with bind_call(request_id="req-0123456789abcdef", owner_id="alice"):
            line = HumanFormatter().format(_record(level=logging.WARNING))

        assert "[WARNING] focusflow.test: [req-01234567 owner=alice] hello world" in line

    def test_human_line_without_owner(self):
        with bind_call(request_id="req-0123456789abcdef"):
            line = HumanFormatter().format(_record())

        assert "focusflow.test: [req-01234567] hello world" in line


class TestConfigureLogging:
    def test_installs_single_handler(self, restore_root_logger):
        configure_logging("DEBUG", json_format=True)
        configure_logging("WARNING", json_format=False)

        root = restore_root_logger
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, HumanFormatter)

    def test_json_selected(self, restore_root_logger):
        configure_logging("INFO", json_format=True)
        assert isinstance(restore_root_logger.handlers[0].formatter, JSONFormatter)


class TestManagerLogsTraceCaller:
    @pytest.fixture
    def json_lines(self, caplog):
        name = "focusflow.time_truth.block_manager"
        caplog.set_level(logging.INFO, logger=name)
        stream = io.StringIO()
        handler = logging.StreamHandler(stream)
        handler.setFormatter(JSONFormatter())
        log = logging.getLogger(name)
        log.addHandler(handler)
        yield lambda: [json.loads(line) for line in stream.getvalue().splitlines()]
        log.removeHandler(handler)

    def test_create_logged_with_caller(self, manager, json_lines):
        with bind_call(request_id="req-create", owner_id=OWNER_A):
            make_block(manager)

        created = [r for r in json_lines() if r["message"].startswith("Created block")]
        assert len(created) == 1
        assert created[0]["request_id"] == "req-create"
        assert created[0]["owner_id"] == OWNER_A

    def test_denial_logged_with_intruding_caller(self, manager, json_lines):
        block = make_block(manager, owner_id=OWNER_A)

        with bind_call(request_id="req-deny", owner_id=OWNER_B):
            with pytest.raises(Forbidden):
                manager.delete(block.id, OWNER_B)

        denied = [r for r in json_lines() if r["level"] == "WARNING"]
        assert len(denied) == 1
        assert denied[0]["owner_id"] == OWNER_B
        assert denied[0]["request_id"] == "req-deny"


class TestCorrelationMiddleware:
    @pytest.fixture
    def client(self):
        app = FastAPI()
        app.add_middleware(CorrelationIdMiddleware)

        @app.get("/echo")
        async def echo():
            return {"request_id": get_request_id(), "owner_id": get_caller_owner()}

        return TestClient(app)

    def test_id_visible_to_handler_and_response(self, client):
        response = client.get("/echo")

        rid = response.headers["x-request-id"]
        assert rid.startswith("req-")
        assert response.json() == {"request_id": rid, "owner_id": None}

    def test_incoming_id_reused(self, client):
        response = client.get("/echo", headers={"X-Request-ID": "req-from-proxy"})

        assert response.headers["x-request-id"] == "req-from-proxy"
        assert response.json()["request_id"] == "req-from-proxy"

    def test_owner_header_bound_as_caller(self, client):
        response = client.get("/echo", headers={"X-Owner-Id": "alice"})

        assert response.json()["owner_id"] == "alice"
