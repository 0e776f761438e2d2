import pytest

from propagarotas.descriptor import FieldFlag, MessageDescriptor
from propagarotas.message import MessageError, RoutingMessage


@pytest.fixture
def descriptor():
    return MessageDescriptor()


@pytest.fixture
def message():
    return RoutingMessage(
        name="PropagacaoInformacao", origin=2, destinations=[0, 2, 5], costs=[0.5, 0.0, 1.25]
    )


def test_supports_only_messages(descriptor, message):
    assert descriptor.supports(message) is True
    assert descriptor.supports(object()) is False


def test_field_names_and_lookup_round_trip(descriptor):
    assert descriptor.field_count() == 3
    for index in range(descriptor.field_count()):
        assert descriptor.find_field(descriptor.field_name(index)) == index
    assert descriptor.field_name(3) is None
    assert descriptor.field_name(-1) is None
    assert descriptor.find_field("missing") is None


def test_field_types(descriptor):
    assert descriptor.field_type(descriptor.find_field("origin")) == "int"
    assert descriptor.field_type(descriptor.find_field("destinations")) == "int"
    assert descriptor.field_type(descriptor.find_field("costs")) == "double"
    assert descriptor.field_type(7) is None


def test_field_flags(descriptor):
    origin = descriptor.find_field("origin")
    costs = descriptor.find_field("costs")
    assert descriptor.field_flags(origin) == FieldFlag.ISEDITABLE
    assert FieldFlag.ISARRAY in descriptor.field_flags(costs)
    assert FieldFlag.ISRESIZABLE in descriptor.field_flags(costs)
    assert descriptor.field_flags(10) == FieldFlag.NONE


def test_array_size(descriptor, message):
    assert descriptor.array_size(message, descriptor.find_field("destinations")) == 3
    assert descriptor.array_size(message, descriptor.find_field("costs")) == 3
    assert descriptor.array_size(message, descriptor.find_field("origin")) == 0
    assert descriptor.array_size(message, 42) == 0


def test_set_array_size_resizes(descriptor, message):
    field = descriptor.find_field("destinations")
    descriptor.set_array_size(message, field, 5)
    assert message.destinations == [0, 2, 5, 0, 0]
    descriptor.set_array_size(message, field, 1)
    assert message.destinations == [0]


def test_set_array_size_of_scalar_fails(descriptor, message):
    with pytest.raises(MessageError):
        descriptor.set_array_size(message, descriptor.find_field("origin"), 2)
    with pytest.raises(MessageError):
        descriptor.set_array_size(message, 9, 2)


def test_get_value(descriptor, message):
    assert descriptor.get_value(message, descriptor.find_field("origin")) == 2
    assert descriptor.get_value(message, descriptor.find_field("destinations"), 2) == 5
    assert descriptor.get_value(message, descriptor.find_field("costs"), 0) == 0.5


def test_get_value_index_out_of_range(descriptor, message):
    with pytest.raises(MessageError, match="Array of size 3 indexed by 3"):
        descriptor.get_value(message, descriptor.find_field("costs"), 3)
    with pytest.raises(MessageError):
        descriptor.get_value(message, 99)


def test_string_round_trip(descriptor, message):
    for name in ("origin", "destinations", "costs"):
        field = descriptor.find_field(name)
        for index in range(max(1, descriptor.array_size(message, field))):
            text = descriptor.get_value_as_string(message, field, index)
            copy = message.dup()
            descriptor.set_value_from_string(copy, field, index, text)
            assert descriptor.get_value(copy, field, index) == descriptor.get_value(
                message, field, index
            )


def test_get_value_as_string_unknown_field_is_empty(descriptor, message):
    assert descriptor.get_value_as_string(message, 17) == ""


def test_set_value_from_string(descriptor, message):
    descriptor.set_value_from_string(message, descriptor.find_field("origin"), 0, "7")
    descriptor.set_value_from_string(message, descriptor.find_field("costs"), 1, "2.5")
    assert message.origin == 7
    assert message.costs == [0.5, 2.5, 1.25]


def test_set_value_from_string_rejects_bad_text(descriptor, message):
    with pytest.raises(MessageError):
        descriptor.set_value_from_string(message, descriptor.find_field("origin"), 0, "abc")
    with pytest.raises(MessageError):
        descriptor.set_value_from_string(message, descriptor.find_field("costs"), 0, "x")
    with pytest.raises(MessageError):
        descriptor.set_value_from_string(message, 5, 0, "1")


def test_set_value(descriptor, message):
    descriptor.set_value(message, descriptor.find_field("destinations"), 0, 4)
    descriptor.set_value(message, descriptor.find_field("costs"), 2, 3)
    assert message.destinations == [4, 2, 5]
    assert message.costs[2] == 3.0


def test_set_value_checks_range_and_type(descriptor, message):
    origin = descriptor.find_field("origin")
    with pytest.raises(MessageError):
        descriptor.set_value(message, origin, 0, 2**31)
    with pytest.raises(MessageError):
        descriptor.set_value(message, origin, 0, 1.5)
    with pytest.raises(MessageError):
        descriptor.set_value(message, descriptor.find_field("costs"), 0, "1.0")
    with pytest.raises(MessageError):
        descriptor.set_value(message, descriptor.find_field("destinations"), 3, 1)
    assert message.origin == 2