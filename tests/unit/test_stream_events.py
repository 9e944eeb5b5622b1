"""Unit tests for stream event framing."""
import pytest

from academy.tutor.events import (
    DeltaEvent,
    DoneEvent,
    ErrorEvent,
    decode_line,
    encode_event,
    is_terminal,
)


@pytest.mark.unit
class TestEncodeEvent:
    def test_delta(self):
        assert encode_event(DeltaEvent("Hel")) == 'data: {"text": "Hel"}\n\n'

    def test_done(self):
        assert encode_event(DoneEvent()) == "data: [DONE]\n\n"

    def test_error(self):
        assert encode_event(ErrorEvent("boom")) == 'data: {"error": "boom"}\n\n'

    def test_newlines_and_quotes_stay_inside_one_frame(self):
        frame = encode_event(DeltaEvent('line1\n\nsaid "hi"'))
        assert frame.count("\n\n") == 1
        assert frame.endswith("\n\n")

    def test_non_ascii_kept_readable(self):
        assert "héllo" in encode_event(DeltaEvent("héllo"))

    def test_rejects_other_types(self):
        with pytest.raises(TypeError):
            encode_event("text")


@pytest.mark.unit
class TestDecodeLine:
    def test_round_trip_of_each_kind(self):
        for event in (DeltaEvent(" world"), DoneEvent(), ErrorEvent("bad")):
            assert decode_line(encode_event(event)) == event

    @pytest.mark.parametrize(
        "line",
        ["", "   ", ": keep-alive", "event: ping", "data: {not json", "data: 42", 'data: {"other": 1}', 'data: {"text": 5}'],
    )
    def test_ignores_unparseable_lines(self, line):
        assert decode_line(line) is None

    def test_error_wins_over_text(self):
        assert decode_line('data: {"text": "x", "error": "y"}') == ErrorEvent("y")


@pytest.mark.unit
def test_is_terminal():
    assert is_terminal(DoneEvent())
    assert is_terminal(ErrorEvent("x"))
    assert not is_terminal(DeltaEvent("x"))
