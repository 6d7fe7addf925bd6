import json
import math

import pytest

from signalset_editor.exceptions import SerializationError, StructuralError
from signalset_editor.models import Command, SignalSet
from signalset_editor.utils.canonical_format import (
    format_text, is_canonical, parse, serialize,
)

RPM_CANONICAL = (
    '{ "commands": [\n'
    '{ "hdr": "7E0", "freq": 1,\n'
    '  "signals": [\n'
    '    {"id": "RPM", "path": "", "fmt": {"bix": 0, "len": 16, "unit": "rpm"}, "name": "Engine RPM"}\n'
    '  ]}\n'
    ']}\n'
)


def single_command(command_json):
    return serialize(parse('{"commands": [%s]}' % command_json))


def test_serialize_matches_canonical_layout(rpm_text):
    assert serialize(parse(rpm_text)) == RPM_CANONICAL


def test_empty_commands():
    assert serialize(parse('{"commands": []}')) == '{ "commands": [\n\n]}\n'


def test_empty_signals_block():
    assert single_command('{"hdr": "7E0", "signals": []}') == (
        '{ "commands": [\n{ "hdr": "7E0",\n  "signals": [\n\n  ]}\n]}\n')


def test_missing_signals_renders_empty_block():
    assert '"signals": [\n\n  ]}' in single_command('{"hdr": "7E0"}')


def test_command_with_all_properties_filtered_is_still_json():
    text = single_command('{"eax": "", "fcm1": false, "signals": []}')
    assert text == '{ "commands": [\n{ "signals": [\n\n  ]}\n]}\n'
    assert json.loads(text) == {'commands': [{'signals': []}]}


def test_command_properties_keep_order_and_filter(rich_text):
    first_line = serialize(parse(rich_text)).split('\n')[1]
    assert first_line == ('{ "hdr": "7E0", "rax": "7E8", "cmd": {"22":"F40C"}, '
                          '"freq": 0.5, "fcm1": true, "dbg": false,')


def test_empty_string_property_dropped(rich_text):
    text = serialize(parse(rich_text))
    assert '"eax"' not in text
    assert '{ "hdr": "18DA10F1", "rax": "18DAF110", "cmd": {"22":"0101"}, "freq": 5,' in text


def test_unknown_properties_survive():
    text = single_command('{"hdr": "7E0", "dbg": true, "filter": {"from": 1, "to": [2, 3]}, "signals": []}')
    assert '"dbg": true, "filter": {"from":1,"to":[2,3]},' in text


def test_fmt_keeps_zero_and_empty_string():
    text = single_command('{"signals": [{"id": "A", "fmt": {"bix": 0, "unit": ""}, "name": "a"}]}')
    assert '"fmt": {"bix": 0, "unit": ""}' in text


def test_fmt_drops_null():
    text = single_command('{"signals": [{"id": "A", "fmt": {"len": null, "mul": 2}, "name": "a"}]}')
    assert '"fmt": {"mul": 2}' in text


def test_fmt_drops_non_finite_entries():
    doc = parse('{"commands": [{"signals": [{"id": "A", "fmt": {"len": 8}, "name": "a"}]}]}')
    fmt = doc.commands[0].signals[0].fmt
    fmt.set('max', math.nan)
    fmt.set('min', -math.inf)
    fmt.set('mul', math.inf)
    fmt.set('div', 4)
    assert '"fmt": {"len": 8, "div": 4}' in serialize(doc)


@pytest.mark.parametrize('text', [
    '{"commands": [{"freq": NaN, "signals": []}]}',
    '{"commands": [{"hdr": "7E0", "freq": Infinity}]}',
    '{"commands": [{"signals": [{"id": "A", "fmt": {"min": -Infinity}}]}]}',
])
def test_parse_rejects_non_json_number_literals(text):
    with pytest.raises(StructuralError):
        parse(text)


def test_fmt_unknown_keys_in_order():
    text = single_command(
        '{"signals": [{"id": "A", "fmt": {"sign": true, "len": 8, "map": {"0": "off"}}, "name": "a"}]}')
    assert '"fmt": {"sign": true, "len": 8, "map": {"0":"off"}}' in text


def test_signal_defaults():
    text = single_command('{"signals": [{"name": "only name"}]}')
    assert '    {"id": "", "path": "", "fmt": {}, "name": "only name"}' in text


def test_missing_name_renders_null():
    assert '"name": null}' in single_command('{"signals": [{"id": "A"}]}')


def test_suggested_metric_only_when_truthy():
    with_metric = single_command(
        '{"signals": [{"id": "A", "name": "a", "suggestedMetric": "speed"}]}')
    without_metric = single_command(
        '{"signals": [{"id": "A", "name": "a", "suggestedMetric": ""}]}')
    assert with_metric.endswith('"name": "a", "suggestedMetric": "speed"}\n  ]}\n]}\n')
    assert 'suggestedMetric' not in without_metric


def test_non_ascii_kept_verbatim(rich_text):
    assert '"State of charge é"' in serialize(parse(rich_text))


def test_one_line_per_signal(rich_text):
    doc = parse(rich_text)
    lines = serialize(doc).split('\n')
    signal_lines = [line for line in lines if line.startswith('    {"id":')]
    assert len(signal_lines) == doc.signal_count


def test_output_is_valid_json_with_same_content(rich_text):
    doc = parse(rich_text)
    reparsed = json.loads(serialize(doc))
    assert [c['hdr'] for c in reparsed['commands']] == ['7E0', '18DA10F1']
    assert reparsed['commands'][0]['signals'][0]['fmt'] == {
        'bix': 0, 'len': 16, 'mul': 1, 'div': 4, 'unit': 'rpm'}


@pytest.mark.parametrize('align', [False, True])
def test_serialize_is_idempotent(rich_text, align):
    once = serialize(parse(rich_text), align_columns=align)
    assert serialize(parse(once), align_columns=align) == once
    assert is_canonical(once, align_columns=align)


def test_align_columns_lines_up_path_and_fmt(rich_text):
    text = serialize(parse(rich_text), align_columns=True)
    first_command = text.split('"signals": [\n')[1].split('\n  ]}')[0].split(',\n')
    assert len(first_command) == 2
    assert len({line.index('"path"') for line in first_command}) == 1
    assert len({line.index('"fmt"') for line in first_command}) == 1
    # padding sits outside the string literals
    assert '"id": "RPM",  "path": "Engine", "fmt"' in first_command[0]
    assert '"id": "LOAD", "path": "Engine", "fmt"' in first_command[1]


def test_format_text_and_is_canonical(rpm_text):
    assert not is_canonical(rpm_text)
    assert format_text(rpm_text) == RPM_CANONICAL
    assert is_canonical(RPM_CANONICAL)


def test_parse_invalid_json():
    with pytest.raises(StructuralError) as excinfo:
        parse('not json')
    assert 'Expecting value' in str(excinfo.value)
    assert isinstance(excinfo.value.original_error, json.JSONDecodeError)


@pytest.mark.parametrize('text', ['{"foo": 1}', '[]', '{"commands": {}}', '{"commands": null}', '3'])
def test_parse_missing_commands_array(text):
    with pytest.raises(StructuralError) as excinfo:
        parse(text)
    assert 'missing or invalid commands array' in str(excinfo.value)
    assert excinfo.value.location == 'commands'


@pytest.mark.parametrize('text,location', [
    ('{"commands": [1]}', 'commands[0]'),
    ('{"commands": [{"signals": {}}]}', 'commands[0].signals'),
    ('{"commands": [{"signals": ["x"]}]}', 'commands[0].signals[0]'),
    ('{"commands": [{"signals": [{"fmt": [1]}]}]}', 'commands[0].signals[0].fmt'),
])
def test_parse_malformed_elements(text, location):
    with pytest.raises(StructuralError) as excinfo:
        parse(text)
    assert excinfo.value.location == location


def test_parse_accepts_null_fmt_and_signals():
    doc = parse('{"commands": [{"hdr": "7E0", "signals": null}, {"signals": [{"id": "A", "fmt": null}]}]}')
    assert doc.commands[0].signals == []
    assert doc.commands[1].signals[0].fmt is None


def test_parse_accepts_bytes(rpm_text):
    assert serialize(parse(rpm_text.encode('utf-8'))) == RPM_CANONICAL


def test_unrenderable_property_raises_serialization_error():
    doc = SignalSet(commands=[Command(properties={'freq': math.inf})])
    with pytest.raises(SerializationError) as excinfo:
        serialize(doc)
    assert excinfo.value.key == 'freq'

    doc = SignalSet(commands=[Command(properties={'hdr': object()})])
    with pytest.raises(SerializationError):
        serialize(doc)
