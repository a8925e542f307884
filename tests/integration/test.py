"""End-to-end editing scenarios across store, history, validation and layout."""

import pytest

from formengine.editor import EditorSession
from formengine.errors import ElementLockedError
from formengine.schema import FormDefinition
from formengine.validation import equals_rule


@pytest.mark.integration
class TestSignupFormScenario:
    """Build, edit, validate and save a signup form through one session."""

    def test_build_validate_and_save(self):
        session = EditorSession(layout_mode="grid")
        email = session.add("text", content="Email", required=True, pattern=r"^[^@]+@[^@]+$")
        password = session.add("text", content="Password", required=True, min_length=8)
        confirm = session.add("text", content="Confirm password", required=True)
        age = session.add(
            "number", content="Age", custom_validation="value == None or value >= 18"
        )
        session.add("button", content="Sign up")
        session.add_rule(equals_rule(confirm.id, password.id))

        results = session.validate()
        assert [results[e.id].message for e in (email, password, confirm)] == ["required"] * 3
        assert results[age.id].valid

        session.set_value(email.id, "jane@example.com")
        session.set_value(password.id, "correct horse")
        session.set_value(confirm.id, "correct hose")
        session.set_value(age.id, "17")
        results = session.validate()
        assert results[confirm.id].message == "Values do not match"
        assert results[age.id].message == "Custom validation failed"

        session.set_value(confirm.id, "correct horse")
        session.set_value(age.id, "21")
        assert session.is_submit_valid()

        saved = session.export_json()
        assert FormDefinition.from_json(saved) == session.definition

    def test_layout_edits_with_undo(self):
        session = EditorSession(layout_mode="free")
        heading = session.add("heading")
        field = session.add("text", content="Name")
        session.update(heading.id, {"locked": True})

        for _ in range(10):
            session.on_drag_move({"elementId": field.id, "deltaX": 3, "deltaY": 1})
        session.drag_end(field.id)
        with pytest.raises(ElementLockedError):
            session.on_drag_move({"elementId": heading.id, "deltaX": 1, "deltaY": 1})

        session.update(field.id, {"position": {"gridColumn": "1/7", "hideMobile": True}})
        desktop = {item["element"]["id"]: item for item in session.render_payload("grid", "desktop")}
        mobile = {item["element"]["id"]: item for item in session.render_payload("grid", "mobile")}
        assert desktop[field.id]["geometry"]["width"] == "50%"
        assert not mobile[field.id]["geometry"]["visible"]
        assert mobile[heading.id]["geometry"]["visible"]

        session.undo()
        moved = session.definition.get(field.id).position
        assert (moved.x, moved.y) == (30, 10)
        session.undo()
        assert session.definition.get(field.id).position.x == 0


@pytest.mark.integration
class TestAsyncScenario:
    """Asynchronous validation racing with edits."""

    @pytest.mark.asyncio
    async def test_stale_result_never_lands(self):
        session = EditorSession()
        field = session.add("text", required=True, custom_validation="value == 'ok'")

        pending = session.validate_async(field.id)
        session.set_value(field.id, "ok")
        assert await pending is None

        results = await session.validate_async(field.id)
        assert results[field.id].valid
        assert session.get_validation(field.id).valid
