import pytest

from zmkcore.usb import Usb, UsbDeviceUnavailableError, UsbStatus


def test_unknown_status_rejects_reports():
    written = []
    usb = Usb(written.append)
    assert usb.status is UsbStatus.UNKNOWN
    with pytest.raises(UsbDeviceUnavailableError):
        usb.send_report(b"\x01\x00")
    assert written == []


@pytest.mark.parametrize(
    "status",
    [UsbStatus.ERROR, UsbStatus.RESET, UsbStatus.DISCONNECTED, UsbStatus.UNKNOWN],
)
def test_unavailable_states(status):
    usb = Usb(lambda report: None)
    usb.status_changed(status)
    with pytest.raises(UsbDeviceUnavailableError):
        usb.send_report(b"\x02")


def test_configured_writes_report():
    written = []
    usb = Usb(written.append)
    usb.status_changed(UsbStatus.CONFIGURED)
    usb.send_report(b"\x01\x02\x03")
    usb.in_ready()
    usb.send_report(bytearray(b"\x02\x00"))
    assert written == [b"\x01\x02\x03", b"\x02\x00"]


def test_suspended_requests_wakeup():
    written = []
    wakeups = []
    usb = Usb(written.append, wakeup=lambda: wakeups.append(True) or "woken")
    usb.status_changed(UsbStatus.SUSPEND)
    assert usb.send_report(b"\x01") == "woken"
    assert wakeups == [True]
    assert written == []


def test_write_failure_propagates_and_frees_endpoint():
    attempts = []

    def failing(report):
        attempts.append(report)
        raise OSError("endpoint busy")

    usb = Usb(failing)
    usb.status_changed(UsbStatus.CONFIGURED)
    with pytest.raises(OSError):
        usb.send_report(b"\x01")
    usb.write = attempts.append
    usb.send_report(b"\x02")
    assert attempts == [b"\x01", b"\x02"]