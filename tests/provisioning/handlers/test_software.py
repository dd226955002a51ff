import base64
import json
import subprocess

import pytest

from provisioning.handlers.software import (
    SOFTWARE_INSTANCE_FIELDS,
    SOFTWARE_PACKAGE_FIELDS,
    SoftwareInstanceHandler,
    SoftwarePackageHandler,
    encode_payload,
)
from provisioning.models import EntityType, Failure, Success, TaskRow, TaskStatus


def decode(payload):
    return json.loads(base64.b64decode(payload))


@pytest.fixture
def package_row():
    return TaskRow(
        EntityType.SOFTWARE_PACKAGE,
        7,
        "wordpress-6.4.zip",
        TaskStatus.TOADD,
        data={
            "software_id": 7,
            "reseller_id": 2,
            "software_archive": "wordpress-6.4",
            "software_status": "toadd",
            "software_depot": "no",
        },
    )


@pytest.fixture
def package_handler(run_context):
    return SoftwarePackageHandler(EntityType.SOFTWARE_PACKAGE, run_context)


def test_encode_payload_keeps_field_order(package_row):
    assert decode(encode_payload(package_row, SOFTWARE_PACKAGE_FIELDS)) == [
        7, 2, "wordpress-6.4", "toadd", "no",
    ]


def test_encode_payload_fills_missing_fields_with_null():
    row = TaskRow(EntityType.SOFTWARE_INSTANCE, 1, "x", TaskStatus.TOADD, data={"domain_id": 5})
    values = decode(encode_payload(row, SOFTWARE_INSTANCE_FIELDS))
    assert len(values) == len(SOFTWARE_INSTANCE_FIELDS)
    assert values[0] == 5
    assert values[1:] == [None] * (len(SOFTWARE_INSTANCE_FIELDS) - 1)


def test_manager_invoked_with_payload(package_handler, package_row, app_settings, mocker):
    mock_run = mocker.patch(
        "provisioning.handlers.software.run_command",
        return_value=subprocess.CompletedProcess([], 0, "", ""),
    )

    assert package_handler.process(package_row) == Success()

    command = mock_run.call_args[0][0]
    assert command[:-1] == app_settings.software.package_manager_command
    assert decode(command[-1])[2] == "wordpress-6.4"


def test_stderr_output_is_a_failure(package_handler, package_row, mocker):
    mocker.patch(
        "provisioning.handlers.software.run_command",
        return_value=subprocess.CompletedProcess([], 0, "", "archive corrupt\n"),
    )

    assert package_handler.process(package_row) == Failure("archive corrupt")


def test_non_zero_exit_without_message(package_handler, package_row, mocker):
    mocker.patch(
        "provisioning.handlers.software.run_command",
        return_value=subprocess.CompletedProcess([], 1, "", ""),
    )

    assert package_handler.process(package_row) == Failure("Unknown error")


def test_scratch_directory_removed_after_success(package_handler, package_row, app_settings, mocker):
    scratch = app_settings.software.tmp_dir / "sw-wordpress-6.4-7"
    scratch.mkdir(parents=True)
    (scratch / "index.php").write_text("<?php")
    mocker.patch(
        "provisioning.handlers.software.run_command",
        return_value=subprocess.CompletedProcess([], 0, "", ""),
    )

    assert package_handler.process(package_row) == Success()
    assert not scratch.exists()


def test_instance_scratch_dir_uses_domain_and_software_id(run_context, app_settings):
    handler = SoftwareInstanceHandler(EntityType.SOFTWARE_INSTANCE, run_context)
    row = TaskRow(
        EntityType.SOFTWARE_INSTANCE, 3, "blog", TaskStatus.TODELETE,
        data={"domain_id": 5, "software_id": 3},
    )

    assert handler.scratch_dir(row) == app_settings.software.tmp_dir / "sw-5-3"
    assert handler.manager_command() == app_settings.software.instance_manager_command
