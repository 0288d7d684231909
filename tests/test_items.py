import pytest
from rest_framework import serializers

from patientform.complete_form import CompleteForm
from patientform.exceptions import UnknownItemType
from patientform.items import ITEM_HANDLERS, get_item_handler, register_item_handler
from patientform.items.textfield import TextfieldItem
from patientform.responses import parse_responses


def definition_values(form):
    return {field['name']: field['value'] for field in form.definition()}


def round_trip(item):
    """Fill the edit form from the stored item and parse it straight back."""
    handler = get_item_handler(item.typ)
    data = definition_values(handler.build_editform(item, item.patientform))
    form = handler.build_editform(item, item.patientform, data=data)
    assert form.is_valid(), form.errors
    return form.get_data()


def test_unknown_item_type_is_a_configuration_error():
    with pytest.raises(UnknownItemType) as excinfo:
        get_item_handler('slider')
    assert excinfo.value.typ == 'slider'


def test_registered_handler_is_dispatched_by_tag():
    class ShortTextItem(TextfieldItem):
        type = 'shorttext'

    try:
        handler = register_item_handler(ShortTextItem())
        assert get_item_handler('shorttext') is handler
    finally:
        ITEM_HANDLERS.pop('shorttext', None)


@pytest.mark.parametrize('presentation, options', [
    ('r>>>>>A|B', 'h'),
    ('c>>>>>one|two|three<<<<<1', ''),
    ('d>>>>>yes|no', 'ih'),
    ('r>>>>>left|right<<<<<1', 'i'),
])
def test_multichoice_presentation_round_trip(make_form, add_item, presentation, options):
    item = add_item(make_form(), 'multichoice', presentation=presentation, options=options)
    data = round_trip(item)
    assert data['presentation'] == presentation
    assert data['options'] == options


def test_multichoice_blank_lines_collapse(make_form, add_item):
    item = add_item(make_form(), 'multichoice', presentation='r>>>>>A||B')
    assert round_trip(item)['presentation'] == 'r>>>>>A|B'


def test_multichoice_defaults_to_radio_with_hidden_noselect(make_form):
    patientform = make_form()
    form = get_item_handler('multichoice').build_editform(None, patientform, data={'name': 'Pain?', 'values': 'yes\r\nno\n'})
    assert form.is_valid(), form.errors
    data = form.get_data()
    assert data['presentation'] == 'r>>>>>yes|no'
    assert data['options'] == 'h'


def test_multichoice_dropdown_never_gets_horizontal_suffix(make_form):
    form = get_item_handler('multichoice').build_editform(
        None, make_form(), data={'values': 'A\nB', 'subtype': 'd', 'horizontal': 1},
    )
    assert form.is_valid(), form.errors
    assert form.get_data()['presentation'] == 'd>>>>>A|B'


def test_multichoice_definition_describes_fields(make_form, add_item):
    item = add_item(make_form(), 'multichoice', presentation='c>>>>>A|B<<<<<1', options='i')
    fields = {field['name']: field for field in get_item_handler('multichoice').build_editform(item, item.patientform).definition()}
    assert fields['subtype']['value'] == 'c'
    assert fields['subtype']['type'] == 'select'
    assert [choice['value'] for choice in fields['subtype']['choices']] == ['r', 'c', 'd']
    assert fields['horizontal']['value'] == 1
    assert fields['values']['value'] == 'A\nB'
    assert fields['values']['type'] == 'textarea'
    assert fields['hidenoselect']['value'] is False
    assert fields['ignoreempty']['value'] is True


def test_multichoicerated_lines_become_value_pairs(make_form):
    form = get_item_handler('multichoicerated').build_editform(
        None, make_form(), data={'values': '1/bad\n5/good\nunsure'},
    )
    assert form.is_valid(), form.errors
    assert form.get_data()['presentation'] == 'r>>>>>1####bad|5####good|0####unsure'


def test_multichoicerated_round_trip(make_form, add_item):
    item = add_item(make_form(), 'multichoicerated', presentation='r>>>>>0####never|3####sometimes|5####always<<<<<1')
    assert round_trip(item)['presentation'] == item.presentation


def test_multichoicerated_rejects_checkbox_subtype(make_form):
    form = get_item_handler('multichoicerated').build_editform(None, make_form(), data={'values': '1/a', 'subtype': 'c'})
    assert not form.is_valid()
    assert 'subtype' in form.errors


@pytest.mark.parametrize('typ, presentation', [
    ('textfield', '20|100'),
    ('textarea', '60|10'),
    ('numeric', '0|10'),
    ('numeric', '|5.5'),
    ('label', 'Please answer honestly.'),
])
def test_simple_presentation_round_trip(make_form, add_item, typ, presentation):
    item = add_item(make_form(), typ, presentation=presentation)
    assert round_trip(item)['presentation'] == presentation


def test_numeric_range_must_be_ordered(make_form):
    form = get_item_handler('numeric').build_editform(None, make_form(), data={'rangefrom': '10', 'rangeto': '1'})
    assert not form.is_valid()
    assert 'rangeto' in form.errors


def test_dependitem_must_belong_to_the_same_form(make_form, add_item):
    other = add_item(make_form(name='Other'), 'textfield', presentation='30|255')
    form = get_item_handler('textfield').build_editform(None, make_form(), data={'dependitem': other.id, 'dependvalue': 'x'})
    assert not form.is_valid()
    assert 'dependitem' in form.errors


def test_save_item_appends_and_moves(make_form, add_item):
    patientform = make_form()
    first = add_item(patientform, 'textfield', presentation='30|255')
    second = add_item(patientform, 'textfield', presentation='30|255')
    handler = get_item_handler('label')

    form = handler.build_editform(None, patientform, data={'presentation': 'Welcome', 'position': 1})
    assert form.is_valid(), form.errors
    label = handler.save_item(form)

    assert label.hasvalue is False
    positions = list(patientform.items.order_by('position').values_list('id', flat=True))
    assert positions == [label.id, first.id, second.id]


def test_captcha_cannot_be_edited_or_added_twice(make_form, add_item):
    patientform = make_form()
    handler = get_item_handler('captcha')
    form = handler.build_editform(None, patientform)
    assert form.is_valid(), form.errors
    captcha = handler.save_item(form)
    assert captcha.name == 'Captcha'
    assert captcha.required is True

    with pytest.raises(serializers.ValidationError):
        handler.build_editform(captcha, patientform)
    with pytest.raises(serializers.ValidationError):
        handler.build_editform(None, patientform)


def test_captcha_hasvalue_follows_recaptcha_settings(settings):
    handler = get_item_handler('captcha')
    assert handler.get_hasvalue() is False
    settings.RECAPTCHA_PUBLIC_KEY = 'public'
    settings.RECAPTCHA_PRIVATE_KEY = 'private'
    assert handler.get_hasvalue() is True


def test_captcha_reports_nothing(make_form, add_item):
    item = add_item(make_form(), 'captcha')
    handler = get_item_handler('captcha')
    assert handler.get_analysed_for_external(item) == []
    assert handler.get_printval(item, '1') == ''
    assert handler.get_data_for_external(item) is None


def test_pagebreak_placement_rules(make_form, add_item):
    patientform = make_form()
    handler = get_item_handler('pagebreak')
    with pytest.raises(serializers.ValidationError):
        handler.build_editform(None, patientform)

    add_item(patientform, 'textfield', presentation='30|255')
    form = handler.build_editform(None, patientform)
    assert form.is_valid(), form.errors
    handler.save_item(form)

    with pytest.raises(serializers.ValidationError):
        handler.build_editform(None, patientform)


def test_multichoice_checkbox_values_and_printval(make_form, add_item):
    item = add_item(make_form(), 'multichoice', presentation='c>>>>>A|B|C')
    handler = get_item_handler('multichoice')
    values = parse_responses([
        {'name': f'multichoice_{item.id}[1]', 'value': '1'},
        {'name': f'multichoice_{item.id}[3]', 'value': '3'},
    ])
    value = handler.create_value(values[f'multichoice_{item.id}'])
    assert value == '1|3'
    assert handler.get_printval(item, value) == 'A; C'
    assert handler.compare_value(item, value, 'C')
    assert not handler.compare_value(item, value, 'B')


def test_multichoice_analysis(make_form, add_item, make_completed):
    patientform = make_form()
    item = add_item(patientform, 'multichoice', presentation='r>>>>>A|B', options='i')
    for value in ['1', '1', '2', '0']:
        make_completed(patientform, values={item: value})

    analysed = get_item_handler('multichoice').get_analysed(item)
    assert [row['answercount'] for row in analysed] == [2, 1]
    assert analysed[0]['quotient'] == pytest.approx(2 / 3)


def test_multichoicerated_printval_and_analysis(make_form, add_item, make_completed):
    patientform = make_form()
    item = add_item(patientform, 'multichoicerated', presentation='r>>>>>1####bad|5####good')
    make_completed(patientform, values={item: '2'})
    handler = get_item_handler('multichoicerated')
    assert handler.get_printval(item, '2') == '(5) good'
    assert handler.get_analysed(item)[1] == {'value': 5, 'answertext': 'good', 'answercount': 1, 'quotient': 1.0}


def test_numeric_validation_and_average(make_form, add_item, make_completed):
    patientform = make_form()
    item = add_item(patientform, 'numeric', presentation='0|10')
    form = CompleteForm([item])
    name = f'numeric_{item.id}'
    assert name in form.validate({name: '11'})
    assert name in form.validate({name: 'abc'})
    assert form.validate({name: '7,5'}) == {}

    handler = get_item_handler('numeric')
    assert handler.create_value('7,5') == '7.5'
    make_completed(patientform, values={item: '4'})
    make_completed(patientform, values={item: '6'})
    assert handler.get_analysed_for_external(item) == ['4', '6', '{"avg": 5.0}']


@pytest.mark.parametrize('value', ['nan', 'inf', '-Infinity', '1e400', '1_0'])
def test_numeric_rejects_non_finite_numbers(make_form, add_item, value):
    item = add_item(make_form(), 'numeric', presentation='0|10', required=True)
    name = f'numeric_{item.id}'
    assert CompleteForm([item]).validate({name: value}) == {name: 'Invalid number.'}
    assert get_item_handler('numeric').create_value(value) == ''


def test_required_rule_treats_not_selected_as_empty(make_form, add_item):
    item = add_item(make_form(), 'multichoice', presentation='d>>>>>A|B', required=True)
    form = CompleteForm([item])
    name = f'multichoice_{item.id}'
    assert form.validate({name: '0'}) == {name: 'Required'}
    assert form.validate({name: '2'}) == {}
    assert name in form.validate({name: '3'})


def test_parse_responses_groups_indexed_names():
    values = parse_responses([
        {'name': 'textfield_1', 'value': 'hi'},
        {'name': 'multichoice_2[1]', 'value': '1'},
        {'name': 'multichoice_2[2]', 'value': '2'},
    ])
    assert values == {'textfield_1': 'hi', 'multichoice_2': {'1': '1', '2': '2'}}
