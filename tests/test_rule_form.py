import pytest
from pydantic import ValidationError

from marketplace_admin.schemas import Condition, PriceRule
from marketplace_admin.services.rule_form import RULE_ERROR_KEYS, RuleFormState, default_rule


def _complete_form() -> RuleFormState:
    return RuleFormState(
        edit_mode=True,
        initial_data=PriceRule(
            name="Holiday markup",
            conditions=[Condition(id="1", field="name", operator="contains", value="gift")],
            action_value=5,
        ),
    )


def test_default_rule_has_one_name_condition() -> None:
    rule = default_rule()
    assert rule.match_type == "all"
    assert rule.status == "active"
    assert rule.action_value is None
    assert len(rule.conditions) == 1
    assert rule.conditions[0].field == "name"
    assert rule.conditions[0].value == ""


def test_create_mode_ignores_initial_data() -> None:
    form = RuleFormState(edit_mode=False, initial_data={"name": "ignored"})
    assert form.form_data.name == ""


def test_edit_mode_hydrates_from_initial_rule() -> None:
    form = RuleFormState(
        edit_mode=True,
        initial_data={
            "id": 7,
            "name": "Discount",
            "match_type": "any",
            "conditions": [{"id": 1, "field": "selling_price", "operator": ">", "value": 50}],
            "action_value": "10",
            "action_operator": "-",
            "action_mode": "absolute",
        },
    )
    data = form.form_data
    assert data.id == "7"
    assert data.match_type == "any"
    assert data.conditions[0].value == "50"
    assert data.action_value == 10.0
    assert data.action_operator == "-"
    assert data.action_mode == "absolute"
    assert data.status == "active"


def test_edit_mode_never_has_zero_conditions() -> None:
    form = RuleFormState(edit_mode=True, initial_data=PriceRule(name="Empty", conditions=[]))
    assert len(form.form_data.conditions) == 1
    assert form.form_data.conditions[0].field == "name"


def test_update_form_data_does_not_validate() -> None:
    form = RuleFormState()
    form.update_form_data(name="")
    assert all(message == "" for message in form.errors.values())


@pytest.mark.parametrize("action_value", [0, -3, None])
def test_invalid_action_value(action_value) -> None:
    form = _complete_form()
    form.update_form_data(action_value=action_value)

    assert form.validate_form() is False
    assert form.errors["action_value"]


def test_missing_action_value_message() -> None:
    form = _complete_form()
    form.update_form_data(action_value=None)
    form.validate_form()
    assert form.errors["action_value"] == "Value is required"

    form.update_form_data(action_value=0)
    form.validate_form()
    assert form.errors["action_value"] == "Value must be greater than 0"


def test_name_and_condition_values_required() -> None:
    form = _complete_form()
    form.update_form_data(
        name="   ",
        conditions=[
            Condition(id="1", field="name", operator="=", value="gift"),
            Condition(id="2", field="name", operator="=", value="  "),
        ],
    )

    assert form.validate_form() is False
    assert form.field_errors() == {
        "name": "Name is required",
        "conditions": "Value is required",
    }


def test_mode_required() -> None:
    form = _complete_form()
    form.update_form_data(action_mode="")
    assert form.validate_form() is False
    assert form.errors["action_mode"] == "Mode is required"


def test_valid_form_has_no_errors() -> None:
    form = _complete_form()
    assert form.validate_form() is True
    assert set(form.errors) == set(RULE_ERROR_KEYS)
    assert form.field_errors() == {}


def test_edit_scenario_from_default_rule() -> None:
    form = RuleFormState()
    editor = form.conditions_editor()
    condition_id = form.form_data.conditions[0].id

    editor.edit_condition(condition_id, field="selling_price")
    condition = form.form_data.conditions[0]
    assert condition.operator == "="
    assert condition.value == ""

    editor.edit_condition(condition_id, value="10")
    form.update_form_data(name="Cheap cards", action_value=5, action_mode="percentage", action_operator="+")

    assert form.validate_form() is True


def test_reset_form() -> None:
    form = _complete_form()
    form.update_form_data(name="")
    form.validate_form()

    form.reset_form()

    assert form.form_data.name == ""
    assert len(form.form_data.conditions) == 1
    assert form.field_errors() == {}


def test_payload_omits_id() -> None:
    form = RuleFormState(edit_mode=True, initial_data={"id": 3, "name": "x", "action_value": 1})
    payload = form.to_payload()
    assert "id" not in payload
    assert payload["name"] == "x"
    assert isinstance(payload["conditions"], list)


@pytest.mark.parametrize(
    "key, value, message",
    [
        ("status", "archived", "Status must be active or in_active"),
        ("match_type", "none", "Match type must be all or any"),
        ("action_operator", "*", "Operator must be + or -"),
        ("action_mode", "bogus", "Mode must be percentage or absolute"),
    ],
)
def test_enumerated_fields_are_checked(key: str, value: str, message: str) -> None:
    form = _complete_form()
    form.update_form_data(**{key: value})

    assert form.validate_form() is False
    assert form.field_errors() == {key: message}


def test_in_active_status_and_absolute_decrease_are_valid() -> None:
    form = _complete_form()
    form.update_form_data(status="in_active", match_type="any", action_operator="-", action_mode="absolute")
    assert form.validate_form() is True


def test_update_tolerates_missing_values() -> None:
    form = _complete_form()
    form.update_form_data(action_mode=None, name=None)

    assert form.form_data.action_mode is None
    assert form.validate_form() is False
    assert form.errors["action_mode"] == "Mode is required"
    assert form.errors["name"] == "Name is required"


@pytest.mark.parametrize("action_value", [float("nan"), float("inf"), "inf", "abc"])
def test_non_finite_action_value_rejected(action_value) -> None:
    form = _complete_form()
    form.update_form_data(action_value=action_value)

    assert form.validate_form() is False
    assert form.errors["action_value"] == "Value must be a valid number"


def test_action_value_string_is_parsed_for_payload() -> None:
    form = _complete_form()
    form.update_form_data(action_value=" 12.5 ")

    assert form.validate_form() is True
    assert form.to_payload()["action_value"] == 12.5


def test_schema_rejects_non_finite_action_value() -> None:
    with pytest.raises(ValidationError):
        PriceRule.model_validate({"name": "x", "action_value": "nan"})
