import pytest
from notifications.device.device import DeviceRole
from notifications.device.management import RegisterStaffDevice
from protean import current_domain


def _register_device(staff_name, push_token, role=DeviceRole.STAFF.value):
    return current_domain.process(
        RegisterStaffDevice(staff_name=staff_name, push_token=push_token, role=role),
        asynchronous=False,
    )


@pytest.fixture()
def register_device():
    return _register_device


@pytest.fixture()
def floor_devices():
    """Two staff phones and one driver phone, keyed by owner."""
    return {
        "Ana": _register_device("Ana", "tok-ana"),
        "Ben": _register_device("Ben", "tok-ben"),
        "Max": _register_device("Max", "tok-max", role=DeviceRole.DRIVER.value),
    }
