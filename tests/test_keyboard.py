"""Tests for the SkillerProPlus handle using a mock transport."""

from unittest.mock import MagicMock, call, patch

import pytest

from skiller import (
    Color,
    Cycle,
    DeviceNotFound,
    PollingRate,
    Profile,
    Pulsating,
    SkillerProPlus,
    Static,
    TransportError,
)
from skiller.device import Transport


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv("SKILLER_TIMEOUT", raising=False)
    monkeypatch.delenv("SKILLER_BACKEND", raising=False)


@pytest.fixture
def transport():
    t = MagicMock(spec=Transport)
    t.write_control.return_value = 8
    t.timeout = 2.0
    t.backend = "pyusb"
    return t


@pytest.fixture
def kb(transport):
    return SkillerProPlus(transport)


def _sent(transport):
    return [c.args[0] for c in transport.write_control.call_args_list]


# =========================================================================
# Discovery
# =========================================================================

class TestDiscover:

    def test_not_found(self):
        with patch("skiller.keyboard.find_device", return_value=None):
            assert SkillerProPlus.discover(2) is None

    def test_found(self, transport):
        with patch("skiller.keyboard.find_device", return_value=transport) as find:
            kb = SkillerProPlus.discover(1.5, backend="hidapi")
        find.assert_called_once_with(1.5, "hidapi")
        assert kb.timeout == 2.0
        assert kb.backend == "pyusb"

    def test_defaults_from_settings(self, monkeypatch):
        monkeypatch.setenv("SKILLER_TIMEOUT", "0.75")
        monkeypatch.setenv("SKILLER_BACKEND", "hidapi")
        with patch("skiller.keyboard.find_device", return_value=None) as find:
            SkillerProPlus.discover()
        find.assert_called_once_with(0.75, "hidapi")

    @pytest.mark.parametrize("timeout", [0, -3])
    def test_non_positive_timeout_uses_default(self, timeout):
        with patch("skiller.keyboard.find_device", return_value=None) as find:
            assert SkillerProPlus.discover(timeout) is None
        find.assert_called_once_with(2.0, "pyusb")

    @pytest.mark.parametrize("timeout", [0, -1])
    def test_non_positive_timeout_terminates_on_real_scan(self, timeout):
        with patch("usb.core.find", return_value=None):
            assert SkillerProPlus.discover(timeout, backend="pyusb") is None

    def test_open_raises_when_missing(self):
        with patch("skiller.keyboard.find_device", return_value=None):
            with pytest.raises(DeviceNotFound):
                SkillerProPlus.open(2)

    def test_open_as_context_manager(self, transport):
        with patch("skiller.keyboard.find_device", return_value=transport):
            with SkillerProPlus.open(2) as kb:
                kb.set_profile(Profile.P1)
        transport.close.assert_called_once_with()


# =========================================================================
# Commands
# =========================================================================

class TestSetColor:

    @pytest.mark.parametrize("profile", list(Profile))
    @pytest.mark.parametrize("color", list(Color))
    def test_switches_profile_then_sets_color(self, kb, transport, color, profile):
        assert kb.set_color(color, profile) == 16
        switch, payload = _sent(transport)
        assert switch == bytes([0x07, 0x02, profile.value, 0, 0, 0, 0, 0])
        assert len(payload) == 8
        assert payload[2] == profile.value
        assert payload[6] == color.value

    def test_example(self, kb, transport):
        kb.set_color(Color.RED, Profile.P2)
        assert transport.write_control.call_args_list == [
            call(bytes([0x07, 0x02, 0x02, 0x00, 0x00, 0x00, 0x00, 0x00])),
            call(bytes([0x07, 0x0A, 0x02, 0x0A, 0x04, 0x00, 0x00, 0x00])),
        ]


class TestSetBrightness:

    @pytest.mark.parametrize("profile", list(Profile))
    @pytest.mark.parametrize("brightness,mode,color", [
        (Static(4, Color.PURPLE), 4, 3),
        (Pulsating(Color.BLUE), 11, 2),
        (Cycle(), 12, 0),
    ])
    def test_encodes_mode_color_profile(self, kb, transport, brightness, mode, color, profile):
        assert kb.set_brightness(brightness, profile) == 16
        switch, payload = _sent(transport)
        assert switch[1:3] == bytes([0x02, profile.value])
        assert payload == bytes([0x07, 0x0A, profile.value, mode, 0x04, 0x00, color, 0x00])

    def test_transport_error_propagates(self, kb, transport):
        transport.write_control.side_effect = [8, TransportError("timeout")]
        with pytest.raises(TransportError):
            kb.set_brightness(Cycle(), Profile.P1)


class TestOtherSettings:

    def test_set_profile(self, kb, transport):
        assert kb.set_profile(Profile.P3) == 8
        assert _sent(transport) == [bytes([0x07, 0x02, 0x03, 0, 0, 0, 0, 0])]

    def test_set_polling_rate_is_single_frame(self, kb, transport):
        assert kb.set_polling_rate(PollingRate.HZ1000) == 8
        assert _sent(transport) == [bytes([0x07, 0x01, 0x01, 0, 0, 0, 0, 0])]

    @pytest.mark.parametrize("enable,flag", [(True, 0), (False, 1)])
    def test_set_win_key(self, kb, transport, enable, flag):
        assert kb.set_win_key(enable, Profile.P2) == 8
        assert _sent(transport) == [bytes([0x07, 0x0B, 0x02, flag, 0, 0, 0, 0])]

    def test_close(self, kb, transport):
        kb.close()
        transport.close.assert_called_once_with()
