"""Domain Model 测试

测试内容：
1. Task 线上格式（createdAt 别名）
2. ChangeEvent 序列化 / 反序列化保持 Task 全部字段
3. ChangeEvent 持有 Task 副本且不可变
"""

import json
from datetime import UTC, datetime

import pytest
from pydantic import ValidationError
from tasksync.core.models import ChangeEvent, ChangeEventType, Task, TaskStatus


def _make_task(**overrides) -> Task:
    fields = {
        "id": 1,
        "title": "Buy milk",
        "status": TaskStatus.TODO.value,
        "created_at": datetime(2026, 10, 19, 8, 30, tzinfo=UTC),
    }
    fields.update(overrides)
    return Task(**fields)


class TestTask:
    def test_default_status_is_todo(self):
        task = Task(id=1, title="x", created_at=datetime.now(UTC))
        assert task.status == "TODO"

    def test_wire_format_uses_created_at_alias(self):
        data = _make_task().to_wire()
        assert set(data) == {"id", "title", "status", "createdAt"}
        assert data["id"] == 1
        assert data["createdAt"].startswith("2026-10-19T08:30:00")

    def test_accepts_alias_on_input(self):
        task = Task.model_validate(
            {"id": 2, "title": "t", "status": "DOING", "createdAt": "2026-10-19T08:30:00Z"}
        )
        assert task.created_at == datetime(2026, 10, 19, 8, 30, tzinfo=UTC)

    def test_status_is_not_restricted_to_enum(self):
        task = _make_task(status="BLOCKED")
        assert task.status == "BLOCKED"


class TestChangeEvent:
    def test_json_payload_shape(self):
        event = ChangeEvent.created(_make_task())
        payload = json.loads(event.to_json())
        assert payload["type"] == "TASK_CREATED"
        assert payload["task"]["id"] == 1
        assert payload["task"]["title"] == "Buy milk"
        assert payload["task"]["status"] == "TODO"
        assert "createdAt" in payload["task"]

    @pytest.mark.parametrize("factory", [ChangeEvent.created, ChangeEvent.updated])
    def test_round_trip_preserves_task(self, factory):
        task = _make_task(status="DONE")
        decoded = ChangeEvent.from_json(factory(task).to_json())
        assert decoded.task == task
        assert decoded.type == factory(task).type

    def test_updated_event_type(self):
        assert ChangeEvent.updated(_make_task()).type == ChangeEventType.TASK_UPDATED

    def test_event_holds_a_copy(self):
        task = _make_task()
        event = ChangeEvent.created(task)
        task.status = "DONE"
        assert event.task.status == "TODO"

    def test_event_is_frozen(self):
        event = ChangeEvent.created(_make_task())
        with pytest.raises(ValidationError):
            event.type = ChangeEventType.TASK_UPDATED

    def test_from_json_rejects_unknown_type(self):
        raw = json.dumps({"type": "TASK_DELETED", "task": _make_task().to_wire()})
        with pytest.raises(ValidationError):
            ChangeEvent.from_json(raw)
