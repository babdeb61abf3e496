import json

import httpx
import pytest

from taskboard.client.api import FixtureTaskApi, HttpTaskApi, get_task_api
from taskboard.errors import TaskApiError
from taskboard.fixtures import sample_tasks

from .factories import make_task


@pytest.fixture()
def api(client):
    return HttpTaskApi(client)


def failing_client(handler):
    return httpx.Client(transport=httpx.MockTransport(handler), base_url="http://tasks.test")


class TestHttpTaskApi:
    def test_create_list_get(self, api):
        created = api.create_task("Buy milk")
        assert created.title == "Buy milk"
        assert created.completed is False
        assert [t.id for t in api.get_tasks()] == [created.id]
        assert api.get_task(created.id) == created

    def test_update_and_delete(self, api):
        created = api.create_task("Read book", "chapter 1")
        updated = api.update_task(created.id, {"completed": True})
        assert updated.completed is True
        assert updated.description == "chapter 1"
        api.delete_task(created.id)
        assert api.get_tasks() == []

    def test_toggle(self, api):
        created = api.create_task("Flip me")
        toggled = api.toggle_task(created.id)
        assert toggled.completed is True
        assert toggled.updated_at > created.updated_at
        assert api.toggle_task(created.id).completed is False

    @pytest.mark.parametrize(
        "call, message",
        [
            (lambda a: a.get_task("missing"), "Failed to fetch task"),
            (lambda a: a.update_task("missing", {"completed": True}), "Failed to update task"),
            (lambda a: a.delete_task("missing"), "Failed to delete task"),
            (lambda a: a.toggle_task("missing"), "Failed to toggle task"),
            (lambda a: a.create_task("ab"), "Failed to create task"),
        ],
    )
    def test_server_errors_become_fixed_messages(self, api, call, message):
        with pytest.raises(TaskApiError) as info:
            call(api)
        assert info.value.message == message

    def test_transport_failure(self, caplog):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with HttpTaskApi(failing_client(handler)) as api:
            with pytest.raises(TaskApiError) as info:
                api.get_tasks()
        assert str(info.value) == "Failed to fetch tasks"
        assert "connection refused" not in str(info.value)
        assert any(r.getMessage() == "Failed to fetch tasks" for r in caplog.records)

    def test_undecodable_body(self):
        api = HttpTaskApi(failing_client(lambda request: httpx.Response(200, text="<html>")))
        with pytest.raises(TaskApiError, match="Failed to fetch tasks"):
            api.get_tasks()

    def test_toggle_lost_race_fails_instead_of_reverting(self):
        task = make_task("7", "Shared", completed=False)
        body = task.model_dump(mode="json", by_alias=True)
        sent = []

        def handler(request):
            if request.method == "GET":
                return httpx.Response(200, json=body)
            sent.append(request.content)
            return httpx.Response(409, json={"error": "Task was modified concurrently"})

        api = HttpTaskApi(failing_client(handler))
        with pytest.raises(TaskApiError, match="Failed to toggle task"):
            api.toggle_task("7")
        assert [json.loads(c) for c in sent] == [{"expectedCompleted": False}]

    def test_task_id_is_escaped_in_path(self):
        paths = []

        def handler(request):
            paths.append(request.url.raw_path)
            return httpx.Response(200, json={"message": "Task deleted successfully"})

        HttpTaskApi(failing_client(handler)).delete_task("a/b c")
        assert paths == [b"/api/tasks/a%2Fb%20c"]


class TestFixtureTaskApi:
    def test_seeded_with_samples(self):
        api = FixtureTaskApi(latency_scale=0)
        assert [t.id for t in api.get_tasks()] == [t.id for t in sample_tasks()]

    def test_crud(self):
        api = FixtureTaskApi(tasks=[], latency_scale=0)
        created = api.create_task("  Water plants ", "  ")
        assert created.title == "Water plants"
        assert created.description is None
        assert api.get_task(created.id) == created
        assert api.update_task(created.id, {"title": "Water the plants"}).title == "Water the plants"
        assert api.toggle_task(created.id).completed is True
        api.delete_task(created.id)
        assert api.get_tasks() == []

    def test_missing_task(self):
        api = FixtureTaskApi(tasks=[], latency_scale=0)
        with pytest.raises(TaskApiError, match="Failed to delete task"):
            api.delete_task("nope")

    def test_invalid_update(self):
        api = FixtureTaskApi(tasks=[make_task("1")], latency_scale=0)
        with pytest.raises(TaskApiError, match="Failed to update task"):
            api.update_task("1", {"completed": "not a bool"})

    def test_latency(self):
        slept = []
        api = FixtureTaskApi(tasks=[], latency_scale=2, sleep=slept.append)
        api.get_tasks()
        created = api.create_task("Timed task")
        api.get_task(created.id)
        api.update_task(created.id, {"title": "Timed again"})
        api.toggle_task(created.id)
        api.delete_task(created.id)
        assert slept == [1.0, 0.6, 0.4, 0.4, 0.4, 0.4]

    def test_factory(self):
        assert isinstance(get_task_api("fixture", latency_scale=0), FixtureTaskApi)
        with pytest.raises(ValueError):
            get_task_api("carrier-pigeon")
