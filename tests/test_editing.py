"""
Tests for copy-on-write flow editing.

Every operation returns a new Flow and leaves its input unchanged.
"""

import pytest

from formflow.editing import (
    PLACEHOLDER_OPTIONS,
    add_field,
    add_step,
    change_field_kind,
    delete_field,
    delete_step,
    generate_field_id,
    move_field,
    new_field,
    new_flow,
    set_navigation_rule,
    update_field,
    update_step,
)
from formflow.errors import FlowEditError
from formflow.model import (
    CheckboxField,
    Condition,
    FieldKind,
    FileField,
    NavigationRule,
    RadioField,
    SelectField,
    TextField,
    TitleField,
)


@pytest.fixture
def flow():
    f = new_flow("Survey")
    f = add_field(f, 0, RadioField(id="color", title="Color", options=["Red", "Blue"]))
    f = add_field(f, 0, TextField(id="shade", title="Shade", depends_on="color", show_when="Red"))
    f = set_navigation_rule(f, 0, NavigationRule(field_id="color", conditions=[Condition("Red", "Page 2")]))
    return f


class TestSteps:
    """Test step operations."""

    def test_new_flow(self):
        f = new_flow()
        assert f.name == "New Form Flow"
        assert len(f.steps) == 1
        step = f.steps[0]
        assert (step.id, step.name, step.action_name) == ("step1", "Page 1", "submitPage1")
        assert step.summary_check_expression == "true"

    def test_add_step(self):
        f = add_step(new_flow())
        assert [s.name for s in f.steps] == ["Page 1", "Page 2"]
        assert f.steps[1].id == "step2"

    def test_add_step_avoids_collision(self):
        f = add_step(new_flow())
        f = delete_step(f, 0)
        f = add_step(f)
        assert [s.name for s in f.steps] == ["Page 2", "Page 3"]

    def test_delete_last_step_refused(self):
        with pytest.raises(FlowEditError):
            delete_step(new_flow(), 0)

    def test_bad_index(self):
        with pytest.raises(FlowEditError):
            update_step(new_flow(), 3, name="X")

    def test_update_step(self):
        original = new_flow()
        f = update_step(original, 0, name="Intro", action_name="submitIntro")
        assert f.steps[0].name == "Intro"
        assert original.steps[0].name == "Page 1"

    def test_update_step_rejects_fields(self):
        with pytest.raises(FlowEditError):
            update_step(new_flow(), 0, fields=())

    def test_update_step_unknown_attribute(self):
        with pytest.raises(FlowEditError):
            update_step(new_flow(), 0, colour="red")

    def test_clear_navigation_rule(self, flow):
        assert set_navigation_rule(flow, 0, None).steps[0].navigation_rule is None


class TestFieldIds:
    """Test id generation."""

    def test_camel_case(self):
        assert generate_field_id("Upload Site Photos!", "file") == "uploadSitePhotos"

    def test_fallback_when_title_empty(self):
        assert generate_field_id("!!!", "radio") == "radioFieldChoice"
        assert generate_field_id("", "title") == "titleField"

    def test_unique(self):
        assert generate_field_id("Name", "text", ["name", "name2"]) == "name3"

    def test_new_field_defaults(self):
        f = new_field(FieldKind.SELECT, ["selectFromList"])
        assert isinstance(f, SelectField)
        assert f.id == "selectFromList2"
        assert f.options == PLACEHOLDER_OPTIONS

    def test_new_file_field(self):
        f = new_field("file")
        assert isinstance(f, FileField)
        assert f.accepted_file_types == ("image/*",)
        assert f.max_file_size == 10


class TestFieldOperations:
    """Test field add/update/delete/move."""

    def test_add_field_does_not_mutate(self, flow):
        f = add_field(flow, 0, TextField(id="extra", title="Extra"), position=0)
        assert f.steps[0].field_ids == ("extra", "color", "shade")
        assert flow.steps[0].field_ids == ("color", "shade")

    def test_add_duplicate_id(self, flow):
        with pytest.raises(FlowEditError):
            add_field(flow, 0, TextField(id="color", title="Again"))

    def test_update_field(self, flow):
        f = update_field(flow, 0, "shade", title="Which shade?", required=True)
        shade = f.steps[0].get_field("shade")
        assert shade.title == "Which shade?"
        assert shade.required

    def test_update_field_illegal_attribute(self, flow):
        with pytest.raises(FlowEditError):
            update_field(flow, 0, "shade", options=["x"])

    def test_rename_onto_existing_id(self, flow):
        with pytest.raises(FlowEditError):
            update_field(flow, 0, "shade", id="color")

    def test_rename_updates_references(self, flow):
        """Dependants and the navigation rule follow a renamed field."""
        f = update_field(flow, 0, "color", id="favouriteColor")
        step = f.steps[0]
        assert step.field_ids == ("favouriteColor", "shade")
        assert step.get_field("shade").depends_on == "favouriteColor"
        assert step.get_field("shade").show_when == "Red"
        assert step.navigation_rule.field_id == "favouriteColor"
        assert flow.steps[0].navigation_rule.field_id == "color"

    def test_unknown_field(self, flow):
        with pytest.raises(FlowEditError):
            update_field(flow, 0, "missing", title="x")

    def test_change_kind_resets_default(self):
        f = CheckboxField(id="tags", title="Tags", options=["a", "b"], default_value=["a"], required=True)
        radio = change_field_kind(f, "radio")
        assert isinstance(radio, RadioField)
        assert radio.options == ("a", "b")
        assert radio.default_value is None
        assert radio.required

    def test_change_kind_to_choice_adds_placeholders(self):
        radio = change_field_kind(TextField(id="a", title="A"), FieldKind.RADIO)
        assert radio.options == PLACEHOLDER_OPTIONS

    def test_change_kind_to_title_drops_inputs(self):
        title = change_field_kind(TextField(id="a", title="A", required=True), "title")
        assert isinstance(title, TitleField)
        assert not title.is_required()

    def test_update_field_kind(self, flow):
        f = update_field(flow, 0, "shade", kind="textarea", placeholder="Describe")
        shade = f.steps[0].get_field("shade")
        assert shade.kind == FieldKind.TEXTAREA
        assert shade.placeholder == "Describe"
        assert shade.depends_on == "color"

    def test_delete_driver_field(self, flow):
        """Deleting a field drops its rule and the dependencies on it."""
        f = delete_field(flow, 0, "color")
        step = f.steps[0]
        assert step.field_ids == ("shade",)
        assert step.navigation_rule is None
        assert step.get_field("shade").depends_on is None
        assert step.get_field("shade").show_when is None
        assert flow.steps[0].navigation_rule is not None

    def test_move_field(self, flow):
        f = move_field(flow, 0, 1, 0)
        assert f.steps[0].field_ids == ("shade", "color")

    def test_move_field_out_of_range(self, flow):
        with pytest.raises(FlowEditError):
            move_field(flow, 0, 0, 5)
