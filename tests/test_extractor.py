import pytest

from locatorscan.extractor import extract_file_locators, find_advisories
from locatorscan.models import FileLocators


def _keys(result: FileLocators) -> list[str]:
    return [record.key for record in result.records]


@pytest.mark.parametrize(
    ("attribute", "value", "locator_type", "selector"),
    [
        ("data-testid", "save", "test-id", '[data-testid="save"]'),
        ("data-test", "save", "test-attr", '[data-test="save"]'),
        ("data-cy", "save", "test-attr", '[data-cy="save"]'),
        ("id", "save", "id", "#save"),
        ("name", "save", "name", '[name="save"]'),
        ("placeholder", "Save", "placeholder", '[placeholder="Save"]'),
        ("aria-label", "Save", "aria-label", '[aria-label="Save"]'),
        ("role", "switch", "role", '[role="switch"]'),
        ("class", "primary", "class", ".primary"),
        ("data-xpath", "//button[@type='submit']", "xpath", "//button[@type='submit']"),
    ],
)
def test_each_attribute_type_yields_one_record(attribute: str, value: str, locator_type: str, selector: str) -> None:
    source = f'<button {attribute}="{value}">Save</button>'
    [record] = extract_file_locators("Form.vue", source).records

    assert record.locator_type == locator_type
    assert record.selector == selector
    assert record.raw_value == value


def test_button_with_test_id_and_classes_yields_one_record() -> None:
    source = '<template>\n  <button data-testid="logout-btn" class="btn btn-primary">Logout</button>\n</template>\n'
    result = extract_file_locators("Dashboard.vue", source)

    assert len(result.records) == 1
    record = result.records[0]
    assert record.key == "logout_btn"
    assert record.selector == '[data-testid="logout-btn"]'
    assert record.locator_type == "test-id"
    assert record.element == "button"
    assert (record.robustness, record.test_relevance) == ("robust", "high")
    assert record.is_dynamic is False
    assert record.warning is None
    assert record.line == 2


@pytest.mark.parametrize(
    "attributes",
    ['v-if="count > 0" data-testid="clear"', '@click="() => clear()" data-testid="clear"'],
)
def test_angle_bracket_in_directive_value_keeps_record(attributes: str) -> None:
    source = f"<template>\n  <div>\n    <button {attributes}>Clear</button>\n  </div>\n</template>\n"
    result = extract_file_locators("Cart.vue", source)

    [record] = result.records
    assert record.selector == '[data-testid="clear"]'
    assert record.element == "button"
    assert record.test_relevance == "high"
    assert result.dropped_low_relevance == 0


def test_attribute_inside_xpath_value_is_not_a_second_record() -> None:
    [record] = extract_file_locators("Search.vue", '<button data-xpath="//input[id=\'q\']">Go</button>').records

    assert record.locator_type == "xpath"
    assert record.selector == "//input[id='q']"


def test_class_only_link_is_fragile_with_warning() -> None:
    result = extract_file_locators("Nav.vue", '<a href="/reports" class="nav-link">Reports</a>')

    [record] = result.records
    assert record.key == "class_nav_link"
    assert record.selector == ".nav-link"
    assert (record.robustness, record.test_relevance) == ("fragile", "high")
    assert record.warning is not None
    assert 'data-testid="nav-link"' in record.warning


def test_loop_template_literal_becomes_prefix_selector() -> None:
    source = """<template>
  <ul>
    <li v-for="u in users" :data-testid="`user-${u.id}`">{{ u.name }}</li>
  </ul>
</template>
"""
    [record] = extract_file_locators("Users.vue", source).records

    assert record.key == "user_dynamic"
    assert record.selector == '[data-testid^="user-"]'
    assert record.raw_value == "user-"
    assert record.partial is True
    assert record.is_dynamic is True
    assert record.is_conditional is False
    assert record.robustness == "robust"


def test_interpolation_without_static_prefix_is_dropped() -> None:
    result = extract_file_locators("Users.vue", '<li v-for="u in users" :data-testid="`${u.id}`"></li>')

    assert result.records == ()
    assert result.dropped_unresolvable == 1


def test_bound_class_objects_are_never_extracted() -> None:
    result = extract_file_locators("Toggle.vue", '<button :class="{ active: on }">Go</button>')

    assert result.records == ()
    assert result.dropped_unresolvable == 1


def test_repeated_values_get_numbered_keys_in_document_order() -> None:
    source = '<button data-testid="save">A</button>\n<button data-testid="save">B</button>\n<button data-testid="save">C</button>'
    result = extract_file_locators("Form.vue", source)

    assert _keys(result) == ["save", "save_1", "save_2"]
    assert [record.line for record in result.records] == [1, 2, 3]


def test_class_is_skipped_when_a_stable_attribute_exists() -> None:
    result = extract_file_locators("Layout.html", '<div id="main" class="layout wide"></div>')

    assert _keys(result) == ["main"]
    assert result.records[0].selector == "#main"
    assert result.records[0].test_relevance == "medium"


def test_decorative_elements_are_dropped_unless_conditional() -> None:
    dropped = extract_file_locators("Icons.html", '<span class="icon"></span>')
    assert dropped.records == ()
    assert dropped.dropped_low_relevance == 1

    kept = extract_file_locators("Icons.vue", '<span v-if="busy" class="icon"></span>')
    [record] = kept.records
    assert record.key == "class_icon_conditional"
    assert record.is_conditional is True
    assert record.warning is None


def test_conditional_parent_marks_nested_element() -> None:
    source = '<div v-if="failed">\n  <button data-testid="retry">Retry</button>\n</div>'
    [record] = extract_file_locators("Status.vue", source).records

    assert record.key == "retry_conditional"
    assert record.is_conditional is True


def test_bound_identifier_resolves_through_constants() -> None:
    source = '<button :data-testid="TEST_IDS.SAVE">Save</button>'

    [record] = extract_file_locators("Save.vue", source, {"TEST_IDS.SAVE": "save-btn"}).records
    assert record.selector == '[data-testid="save-btn"]'
    assert record.key == "save_btn_dynamic"
    assert record.is_dynamic is True

    unresolved = extract_file_locators("Save.vue", source)
    assert unresolved.records == ()
    assert unresolved.dropped_unresolvable == 1


def test_vue_script_block_calls_are_extracted_after_template() -> None:
    source = (
        '<template><div id="app"></div></template>\n'
        "<script>\n"
        "const el = document.createElement('button');\n"
        "el.setAttribute('data-testid', 'late-btn');\n"
        "</script>\n"
    )
    result = extract_file_locators("App.vue", source)

    assert _keys(result) == ["app", "late_btn"]
    assert result.records[1].element == "button"
    assert result.records[1].line == 4


def test_script_file_dom_calls_and_loops() -> None:
    source = """export function createTypedTable(users) {
  const table = document.createElement('table');
  table.setAttribute('data-testid', 'typed-user-table');
  table.className = 'user-table';
  users.forEach((user) => {
    const row = document.createElement('tr');
    row.setAttribute('data-testid', `typed-user-row-${user.id}`);
  });
  return table;
}
"""
    result = extract_file_locators("tables.ts", source)

    assert _keys(result) == ["typed_user_table", "typed_user_row_dynamic"]
    assert [record.selector for record in result.records] == [
        '[data-testid="typed-user-table"]',
        '[data-testid^="typed-user-row-"]',
    ]
    assert [record.element for record in result.records] == ["table", "tr"]


def test_render_function_props_are_extracted() -> None:
    source = """import { h } from 'vue';
export function renderModal() {
  return h('div', { class: 'modal', 'data-testid': 'typed-modal', role: 'dialog' }, [
    h('button', { class: 'btn', 'aria-label': 'Close modal' }, 'x'),
  ]);
}
"""
    result = extract_file_locators("modal.js", source)

    assert _keys(result) == ["typed_modal", "dialog_role", "close_modal"]
    assert result.by_key()["close_modal"].selector == '[aria-label="Close modal"]'
    assert result.by_key()["close_modal"].test_relevance == "high"


def test_markup_inside_template_strings_is_scanned() -> None:
    source = 'export const tpl = `<button data-testid="tpl-save">Save</button>`;\n'
    [record] = extract_file_locators("widget.ts", source).records

    assert record.key == "tpl_save"
    assert record.element == "button"


def test_advisories_for_components_and_spread_bindings() -> None:
    body = '<UserCard :user="u" />\n<UserCard />\n<div v-bind="attrs"></div>\n<router-link to="/">Home</router-link>'
    advisories = find_advisories("List.vue", body)

    assert [(item.line, item.construct) for item in advisories] == [(1, "<UserCard>"), (3, "v-bind")]


def test_unknown_suffix_and_repeat_runs() -> None:
    assert extract_file_locators("README.md", '<button id="x">').records == ()

    source = '<form id="login">\n  <input name="email" placeholder="Email">\n</form>'
    assert extract_file_locators("Login.vue", source) == extract_file_locators("Login.vue", source)
