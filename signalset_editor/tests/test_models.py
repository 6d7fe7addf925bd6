import math

import pytest

from signalset_editor.exceptions import StructuralError
from signalset_editor.models import (
    Command, FormatValue, FormatValueKind, Signal, SignalFormat, SignalSet,
)
from signalset_editor.utils.canonical_format import parse


def test_format_value_classification():
    assert FormatValue.of(None).kind is FormatValueKind.ABSENT
    assert FormatValue.of(math.nan).kind is FormatValueKind.INVALID_NUMBER
    assert FormatValue.of(-math.inf).kind is FormatValueKind.INVALID_NUMBER
    assert FormatValue.of(math.nan).value is None
    for value in (0, 0.0, '', False, 'rpm', {'0': 'off'}):
        fv = FormatValue.of(value)
        assert fv.kind is FormatValueKind.PRESENT
        assert fv.value == value


def test_format_value_number_excludes_bools_and_strings():
    assert FormatValue.of(8).number == 8
    assert FormatValue.of(2.5).number == 2.5
    assert FormatValue.of(True).number is None
    assert FormatValue.of('8').number is None
    assert FormatValue.of(None).number is None


def test_signal_format_accessors():
    fmt = SignalFormat.from_dict({'bix': 4, 'len': 12, 'add': -40, 'mul': 1, 'div': 4,
                                  'min': 0, 'max': 100, 'unit': 'percent'})
    assert (fmt.bit_offset, fmt.bit_length) == (4, 12)
    assert (fmt.additive_offset, fmt.multiplier, fmt.divisor) == (-40, 1, 4)
    assert (fmt.minimum, fmt.maximum, fmt.unit) == (0, 100, 'percent')


def test_signal_format_set_keeps_position_and_appends():
    fmt = SignalFormat.from_dict({'len': 8, 'unit': 'scalar'})
    fmt.set('len', 16)
    fmt.set('bix', 0)
    assert list(fmt.entries) == ['len', 'unit', 'bix']
    assert fmt.to_dict() == {'len': 16, 'unit': 'scalar', 'bix': 0}


def test_signal_format_invalid_entries_stay_in_model_only():
    fmt = SignalFormat.from_dict({'len': 8})
    fmt.set('max', math.nan)
    fmt.set('min', None)
    assert fmt.get('max').kind is FormatValueKind.INVALID_NUMBER
    assert 'min' in fmt.entries
    assert fmt.to_dict() == {'len': 8}
    fmt.remove('len')
    fmt.remove('not-there')
    assert fmt.to_dict() == {}


def test_signal_format_rejects_non_object():
    with pytest.raises(StructuralError):
        SignalFormat.from_dict([1, 2])


def test_signal_bit_range():
    assert Signal(id='A').bit_range is None
    assert Signal(id='A', fmt=SignalFormat.from_dict({'len': 8})).bit_range == (0, 8)
    assert Signal(id='A', fmt=SignalFormat.from_dict({'bix': 3, 'len': math.nan})).bit_range == (3, 0)


def test_signal_round_trip_dict():
    data = {'id': 'RPM', 'path': 'Engine', 'fmt': {'len': 16}, 'name': 'RPM',
            'suggestedMetric': 'engineSpeed'}
    assert Signal.from_dict(data).to_dict() == data


def test_signal_to_dict_defaults():
    assert Signal(name='x').to_dict() == {'id': '', 'path': '', 'fmt': {}, 'name': 'x'}


def test_command_accessors():
    command = Command.from_dict({'hdr': '7E0', 'rax': '7E8', 'eax': 'F1', 'tst': 'F1',
                                 'freq': 1, 'fcm1': True, 'cmd': {'22': 'F40C'}})
    assert command.header == '7E0'
    assert command.receive_address == '7E8'
    assert command.extended_address == 'F1'
    assert command.tester_address == 'F1'
    assert command.frequency == 1
    assert command.flow_control_flag is True
    assert command.command_code == {'22': 'F40C'}
    assert command.signals == []


def test_command_property_order_and_signals_key():
    command = Command.from_dict({'hdr': '7E0', 'signals': [], 'freq': 1})
    assert list(command.properties) == ['hdr', 'freq']
    command.header = '7DF'
    command.set_property('dbg', True)
    assert list(command.properties) == ['hdr', 'freq', 'dbg']
    assert command.header == '7DF'
    with pytest.raises(ValueError):
        command.set_property('signals', [])
    command.remove_property('dbg')
    assert command.to_dict() == {'hdr': '7DF', 'freq': 1, 'signals': []}


def test_signalset_copy_shares_nothing(rich_text):
    doc = parse(rich_text)
    clone = doc.copy()
    clone.commands[0].signals[0].fmt.set('len', 99)
    clone.commands[0].set_property('hdr', '000')
    assert doc.commands[0].signals[0].fmt.bit_length == 16
    assert doc.commands[0].header == '7E0'


def test_signalset_iteration(rich_text):
    doc = parse(rich_text)
    assert doc.signal_count == 3
    assert [(ci, si, s.id) for ci, si, s in doc.iter_signals()] == [
        (0, 0, 'RPM'), (0, 1, 'LOAD'), (1, 0, 'SOC')]


def test_signalset_to_dict(rpm_text):
    assert SignalSet.from_dict(parse(rpm_text).to_dict()).to_dict() == parse(rpm_text).to_dict()
    assert parse(rpm_text).to_dict()['commands'][0]['fcm1'] is False
