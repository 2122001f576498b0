import dataclasses
import struct

import pytest

from lolrofl.exceptions import MissingInitialType, Truncated
from lolrofl.iter.sections import LAYOUTS, SectionDecoder, decode_sections, layout_for
from lolrofl.model.section import TimeEncoding
from rofl_builder import encode_section, expected_size, make_config, two_record_stream

PRIMER = encode_section(make_config(), time=1.0, section_type=0x42, params=5)


@pytest.mark.parametrize("config", range(256))
def test_record_consumes_exactly_its_fields(config: int) -> None:
    payload = bytes(range(9))
    record = encode_section(config, time=3.0, delta=5, section_type=0x99, params=17, data=payload)
    sections = decode_sections(PRIMER + record)

    assert len(sections) == 2
    section = sections[1]
    assert section.offset == len(PRIMER)
    assert section.size == expected_size(config, len(payload)) == len(record)
    assert section.config == config
    assert section.params == 17
    assert section.raw_data() == payload
    assert section.section_type == (0x42 if config & 0x40 else 0x99)
    assert section.type_reused is bool(config & 0x40)
    assert layout_for(config).header_size + len(payload) == len(record)


def test_layout_table_covers_every_configuration_byte() -> None:
    assert len(LAYOUTS) == 256
    assert LAYOUTS[0x00] == (4, 4, 2, 4)
    assert LAYOUTS[0xF0] == (1, 1, 0, 1)
    assert LAYOUTS[0x0F] == LAYOUTS[0x00]


def test_two_record_stream() -> None:
    first, second = decode_sections(two_record_stream())

    assert first.time.encoding is TimeEncoding.ABSOLUTE
    assert first.time.seconds == 12.5
    assert first.time.delta_ms is None
    assert (first.section_type, first.params, first.raw_data()) == (0x25, 7, b"\x01\x02\x03")

    assert second.time.is_relative
    assert second.time.delta_ms == 250
    assert second.time.seconds == pytest.approx(12.75)
    assert (second.section_type, second.params, second.raw_data()) == (0x25, 9, b"\xaa")


def test_relative_times_accumulate() -> None:
    relative = make_config(relative=True, implicit_type=True)
    stream = encode_section(make_config(), time=2.5, section_type=1) + b"".join(
        encode_section(relative, delta=delta) for delta in (100, 100, 50)
    )
    times = [section.time.seconds for section in SectionDecoder(stream)]
    assert times == pytest.approx([2.5, 2.6, 2.7, 2.75])


def test_relative_times_accumulate_as_32_bit_floats() -> None:
    relative = make_config(relative=True, implicit_type=True)
    deltas = [33, 17, 1, 250] * 500
    stream = encode_section(make_config(), time=1234.5, section_type=1) + b"".join(
        encode_section(relative, delta=delta) for delta in deltas
    )

    expected = 1234.5
    for delta in deltas:
        expected = struct.unpack("<f", struct.pack("<f", expected + delta / 1000))[0]

    *_, last = SectionDecoder(stream, with_data=False)
    assert last.time.seconds == expected


def test_relative_time_starts_from_zero() -> None:
    stream = encode_section(make_config(relative=True), delta=40, section_type=2)
    (section,) = decode_sections(stream)
    assert section.time.seconds == pytest.approx(0.04)


def test_absolute_time_resets_running_time() -> None:
    relative = make_config(relative=True, implicit_type=True)
    stream = (
        encode_section(make_config(), time=10.0, section_type=1)
        + encode_section(relative, delta=100)
        + encode_section(make_config(implicit_type=True), time=4.0)
        + encode_section(relative, delta=200)
    )
    times = [section.time.seconds for section in SectionDecoder(stream)]
    assert times == pytest.approx([10.0, 10.1, 4.0, 4.2])


def test_omitted_type_reports_latest_explicit_type() -> None:
    implicit = make_config(implicit_type=True)
    stream = (
        encode_section(make_config(), section_type=7)
        + encode_section(implicit)
        + encode_section(make_config(), section_type=9)
        + encode_section(implicit)
        + encode_section(implicit)
    )
    assert [s.section_type for s in SectionDecoder(stream)] == [7, 7, 9, 9, 9]


def test_first_record_without_type_fails() -> None:
    stream = encode_section(make_config(implicit_type=True), time=1.0)
    with pytest.raises(MissingInitialType) as excinfo:
        decode_sections(stream)
    assert excinfo.value.offset == 0


def test_headers_only_mode_agrees_with_full_mode(keyframe_stream: bytes) -> None:
    full = decode_sections(keyframe_stream)
    headers = decode_sections(keyframe_stream, with_data=False)

    assert all(section.data is None for section in headers)
    assert [dataclasses.replace(s, data=None) for s in full] == headers
    assert full[-1].end == headers[-1].end == len(keyframe_stream)
    assert [s.data_len for s in headers] == [5, 4, 0]


def test_empty_buffer_yields_nothing() -> None:
    assert decode_sections(b"") == []


def test_decoder_is_restartable_with_fresh_state() -> None:
    decoder = SectionDecoder(two_record_stream())
    first_pass = list(decoder)
    second_pass = list(decoder)
    assert first_pass == second_pass
    assert second_pass[1].time.seconds == pytest.approx(12.75)


def test_decoding_is_lazy() -> None:
    stream = PRIMER + encode_section(make_config(), section_type=1, data=b"xyz")[:-1]
    walker = iter(SectionDecoder(stream))
    assert next(walker).section_type == 0x42
    with pytest.raises(Truncated):
        next(walker)


def test_truncation_anywhere_inside_a_record(keyframe_stream: bytes) -> None:
    boundaries = {0}
    for section in decode_sections(keyframe_stream):
        boundaries.add(section.end)

    for cut in range(1, len(keyframe_stream)):
        truncated = keyframe_stream[:cut]
        if cut in boundaries:
            assert decode_sections(truncated)[-1].end == cut
            continue
        for with_data in (True, False):
            with pytest.raises(Truncated):
                decode_sections(truncated, with_data=with_data)


def test_records_before_the_failure_are_yielded() -> None:
    stream = two_record_stream() + b"\x00\x01"
    decoded = []
    with pytest.raises(Truncated) as excinfo:
        for section in SectionDecoder(stream):
            decoded.append(section)
    assert len(decoded) == 2
    assert excinfo.value.offset == len(two_record_stream()) + 1


def test_data_is_a_view_of_the_buffer() -> None:
    stream = two_record_stream()
    first = decode_sections(stream)[0]
    assert isinstance(first.data, memoryview)
    assert first.data.obj is not None


def test_wide_fields_are_little_endian() -> None:
    stream = encode_section(make_config(), time=0.5, section_type=0x1234, params=0xDEADBEEF, data=b"")
    (section,) = decode_sections(stream)
    assert section.section_type == 0x1234
    assert section.params == 0xDEADBEEF
    assert stream[5:9] == b"\x00\x00\x00\x00"
    assert stream[9:11] == b"\x34\x12"
