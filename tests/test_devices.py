from hive_chat.capture.devices import is_virtual_device, select_default_device
from hive_chat.models.message import InputDevice


def dev(id, label):
    return InputDevice(id=id, label=label)


def test_prefers_named_device():
    devices = [dev("0", "Built-in Microphone"), dev("1", "Zoom H1n USB Audio")]
    assert select_default_device(devices, prefer_name="zoom").id == "1"


def test_skips_virtual_devices():
    devices = [
        dev("0", "BlackHole 2ch"),
        dev("1", "Background Music"),
        dev("2", "Monitor of Built-in Audio"),
        dev("3", "USB Microphone"),
    ]
    assert select_default_device(devices).id == "3"


def test_falls_back_to_first():
    devices = [dev("0", "Stereo Mix"), dev("1", "Loopback Audio")]
    assert select_default_device(devices).id == "0"


def test_unknown_preference_ignored():
    devices = [dev("0", "Mic A"), dev("1", "Mic B")]
    assert select_default_device(devices, prefer_name="missing").id == "0"


def test_unlabelled_devices_are_skipped():
    devices = [dev("0", ""), dev("1", "Mic")]
    assert select_default_device(devices).id == "1"


def test_empty():
    assert select_default_device([]) is None


def test_is_virtual_device():
    assert is_virtual_device(dev("x", "VB-Audio Virtual Cable"))
    assert not is_virtual_device(dev("y", "MacBook Pro Microphone"))
