from locatorscan.attribute_matcher import (
    blank_out,
    find_attribute_matches,
    keep_only,
    line_of,
    strip_comments,
    template_body,
)


def test_find_attribute_matches_reports_type_and_position() -> None:
    body = '<div data-testid="x">'
    matches = find_attribute_matches(body)

    assert [(item.locator_type, item.value, item.bound) for item in matches] == [("test-id", "x", False)]
    assert body[matches[0].position] == "x"


def test_testid_suffix_does_not_count_as_id_attribute() -> None:
    matches = find_attribute_matches('<input data-testid="email" id="email-field" name="email">')
    assert [(item.attribute, item.value) for item in matches] == [
        ("data-testid", "email"),
        ("id", "email-field"),
        ("name", "email"),
    ]


def test_bound_attributes_are_flagged() -> None:
    matches = find_attribute_matches('<li :data-testid="`user-${u.id}`" v-bind:id="rowId">')

    assert [(item.attribute, item.value, item.bound) for item in matches] == [
        ("data-testid", "`user-${u.id}`", True),
        ("id", "rowId", True),
    ]


def test_event_and_slot_shorthands_are_not_matched() -> None:
    assert find_attribute_matches('<button @id="x" #name="y">') == []


def test_attribute_names_inside_other_values_are_ignored() -> None:
    matches = find_attribute_matches('<button data-xpath="//input[id=\'q\']" title="name=\'x\'">')

    assert [(item.attribute, item.value) for item in matches] == [("data-xpath", "//input[id='q']")]


def test_attribute_text_outside_tags_is_ignored() -> None:
    assert find_attribute_matches('<p>Set id="x" on the element</p>') == []


def test_comments_are_blanked_without_moving_offsets() -> None:
    text = '<!-- <button id="hidden"> -->\n<button id="shown">'
    body = strip_comments(text)

    assert len(body) == len(text)
    assert [item.value for item in find_attribute_matches(body)] == ["shown"]
    assert line_of(body, body.index("shown")) == 2


def test_template_body_masks_script_and_style_blocks() -> None:
    text = '<template><p id="keep"></p></template>\n<script>\nconst html = \'id="drop"\';\n</script>'
    body = template_body(text, embedded_blocks=True)

    assert [item.value for item in find_attribute_matches(body)] == ["keep"]
    assert body.count("\n") == text.count("\n")


def test_keep_only_blanks_everything_outside_spans() -> None:
    assert keep_only("abcdef", [(1, 3)]) == " bc   "
    assert blank_out("ab\ncd", [(0, 5)]) == "  \n  "
