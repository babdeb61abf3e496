import pytest

from taskboard.client.actions import ActionResult
from taskboard.forms import FormState, TaskForm


def filled_form(title="Buy milk", description=""):
    form = TaskForm()
    form.update_field("title", title)
    form.update_field("description", description)
    return form


class TestValidation:
    def test_short_title_blocks_confirmation(self):
        form = filled_form(title="ab")
        result = form.submit()
        assert not result.is_valid
        assert form.errors == ["Title must be at least 3 characters long"]
        assert form.state is FormState.EDITING
        assert form.show_confirm is False

    def test_collects_all_errors(self):
        form = filled_form(title="x" * 101, description="y" * 501)
        form.submit()
        assert form.errors == [
            "Title must be less than 100 characters",
            "Description must be less than 500 characters",
        ]

    def test_blank_title_reports_required_only(self):
        form = filled_form(title="   ")
        form.submit()
        assert form.errors == ["Title is required"]

    def test_typing_clears_errors(self):
        form = filled_form(title="ab")
        form.submit()
        form.update_field("title", "abc")
        assert form.errors == []

    def test_unknown_field(self):
        with pytest.raises(ValueError):
            TaskForm().update_field("priority", "high")


class TestConfirmation:
    def test_valid_submit_opens_confirmation(self):
        form = filled_form()
        assert form.submit().is_valid
        assert form.state is FormState.CONFIRMING
        assert form.show_confirm is True

    def test_success_resets_fields(self):
        form = filled_form(title="Buy milk", description="2 litres")
        form.submit()
        seen = []

        def on_confirm(data):
            seen.append((data.title, data.description))
            assert form.is_submitting
            return ActionResult.ok()

        result = form.confirm(on_confirm)
        assert result.success
        assert seen == [("Buy milk", "2 litres")]
        assert form.state is FormState.EDITING
        assert form.data.title == "" and form.data.description == ""
        assert form.errors == []

    def test_failure_keeps_fields(self):
        form = filled_form()
        form.submit()
        result = form.confirm(lambda data: ActionResult.failed("Failed to create task"))
        assert not result.success
        assert form.state is FormState.CONFIRM_FAILED
        assert form.errors == ["Failed to create task"]
        assert form.data.title == "Buy milk"
        assert form.show_confirm is True

    def test_unexpected_exception(self):
        form = filled_form()
        form.submit()

        def boom(data):
            raise RuntimeError("network down")

        result = form.confirm(boom)
        assert not result.success
        assert form.errors == ["An unexpected error occurred"]
        assert form.state is FormState.CONFIRM_FAILED

    def test_retry_after_failure(self):
        form = filled_form()
        form.submit()
        form.confirm(lambda data: ActionResult.failed("Failed to create task"))
        assert form.confirm(lambda data: ActionResult.ok()).success
        assert form.state is FormState.EDITING

    def test_confirm_requires_submit(self):
        with pytest.raises(RuntimeError):
            filled_form().confirm(lambda data: ActionResult.ok())

    def test_cancel(self):
        form = filled_form()
        form.submit()
        form.cancel()
        assert form.state is FormState.EDITING
        assert form.data.title == "Buy milk"

    def test_reset(self):
        form = filled_form()
        form.submit()
        form.reset()
        assert form.state is FormState.EDITING
        assert form.data.title == ""


class TestCounters:
    def test_lengths_and_limits(self):
        form = filled_form(title="t" * 100, description="d" * 20)
        assert form.title_length == 100
        assert form.title_at_limit is True
        assert form.description_length == 20
        assert form.description_at_limit is False
