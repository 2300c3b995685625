# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2021 John Mille<john@compose-x.io>

"""
Module to test the settings and root properties validation.
"""

from os import path

from pytest import fixture, raises

from fargate_tasks.common.settings import (
    FargateTasksSettings,
    validate_root_properties,
)
from fargate_tasks.exceptions import (
    FargateTasksException,
    InvalidConfiguration,
    MissingRequiredField,
)

HERE = path.abspath(path.dirname(__file__))


def get_content(fargate: dict, **kwargs) -> dict:
    content = {
        "service": "myservice",
        "provider": {"name": "aws", "stage": "test"},
        "custom": {"fargate": fargate},
    }
    content.update(kwargs)
    return content


@fixture()
def fargate_options():
    return {
        "role": "arn:aws:iam::012345678912:role/tasks",
        "environment": {"LOG_LEVEL": "info"},
        "tasks": {"worker": {"image": "nginx"}},
    }


def test_validate_root_properties(fargate_options):
    validate_root_properties(fargate_options)

    with raises(MissingRequiredField) as error:
        validate_root_properties({"tasks": fargate_options["tasks"]})
    assert error.value.field == "role"
    assert error.value.path == "custom.fargate"

    with raises(MissingRequiredField) as error:
        validate_root_properties({"role": fargate_options["role"]})
    assert error.value.field == "tasks"

    with raises(MissingRequiredField) as error:
        validate_root_properties({"role": fargate_options["role"], "tasks": {}})
    assert error.value.field == "tasks"


def test_settings_properties(fargate_options):
    settings = FargateTasksSettings(get_content(fargate_options))
    assert settings.service_name == "myservice"
    assert settings.stage == "test"
    assert settings.family_name == "myservice-test"
    assert settings.role == fargate_options["role"]
    assert settings.environment == {"LOG_LEVEL": "info"}
    assert settings.datadog is None
    assert settings.images_catalog == {}
    assert settings.scan_on_push is False
    assert [task.identifier for task in settings.tasks] == ["worker"]


def test_settings_service_and_stage():
    content = get_content(
        {"role": "abcd", "tasks": {"a": {"image": "nginx"}}},
        service={"name": "fromname"},
        provider={
            "ecr": {"scanOnPush": True, "images": {"app": {"path": "./src"}}},
            "region": "eu-west-1",
        },
    )
    settings = FargateTasksSettings(content)
    assert settings.family_name == "fromname-dev"
    assert settings.region == "eu-west-1"
    assert settings.scan_on_push is True
    assert settings.images_catalog == {"app": {"path": "./src"}}

    settings = FargateTasksSettings(content, stage="prod")
    assert settings.family_name == "fromname-prod"

    with raises(MissingRequiredField):
        FargateTasksSettings({"custom": {"fargate": {}}})


def test_datadog_option():
    fargate = {"role": "abcd", "tasks": {"a": {"image": "nginx"}}}
    for value, expected in [
        (None, None),
        (False, None),
        (True, {}),
        ({}, {}),
        ({"ssm_api_key": "key"}, {"ssm_api_key": "key"}),
    ]:
        settings = FargateTasksSettings(get_content(dict(fargate, datadog=value)))
        assert settings.datadog == expected


def test_schema_validation():
    """
    Types are checked against the JSON schema, required properties are left to validate()
    """
    FargateTasksSettings(get_content({}))
    invalid_cases = [
        {"role": 1},
        {"tasks": []},
        {"tasks": {"worker": {"image": "nginx", "command": "echo hello"}}},
        {"tasks": {"worker": {"image": "nginx", "unknown": True}}},
        {"tasks": {"worker": {"image": {"name": "app", "other": "value"}}}},
        {"datadog": {"ssm_api_key": "key", "cpu": "ten"}},
        {"notanoption": True},
    ]
    for case in invalid_cases:
        with raises(InvalidConfiguration):
            FargateTasksSettings(get_content(case))


def test_settings_validate(fargate_options):
    settings = FargateTasksSettings(get_content(fargate_options))
    settings.validate()

    settings = FargateTasksSettings(get_content({"role": "abcd"}))
    with raises(MissingRequiredField):
        settings.validate()

    duplicates = dict(
        fargate_options,
        tasks={"worker-1": {"image": "nginx"}, "worker1": {"image": "nginx"}},
    )
    settings = FargateTasksSettings(get_content(duplicates))
    with raises(FargateTasksException, match="worker1Task"):
        settings.validate()


def test_from_file():
    settings = FargateTasksSettings.from_file(f"{HERE}/use-cases/serverless.yml")
    assert settings.family_name == "batch-jobs-dev"
    assert [task.identifier for task in settings.tasks] == [
        "importer",
        "report-builder",
        "cleanup",
    ]
    settings = FargateTasksSettings.from_file(
        f"{HERE}/use-cases/serverless.yml", stage="prod"
    )
    assert settings.stage == "prod"


def test_schema_cfn_functions():
    """
    CFN functions are accepted for environment values and roles, other mappings are not
    """
    settings = FargateTasksSettings(
        get_content(
            {
                "role": {"Fn::GetAtt": ["TasksRole", "Arn"]},
                "environment": {"BUCKET": {"Ref": "Bucket"}},
                "tasks": {
                    "worker": {
                        "image": "nginx",
                        "environment": {"QUEUE": {"Fn::GetAtt": ["Queue", "Arn"]}},
                        "override": {"role": {"Ref": "WorkerRoleArn"}},
                    }
                },
            }
        )
    )
    settings.validate()
    assert settings.environment == {"BUCKET": {"Ref": "Bucket"}}

    for case in [
        {"environment": {"BUCKET": {"Name": "bucket"}}},
        {"environment": {"BUCKET": {"Ref": "Bucket", "Fn::Sub": "x"}}},
        {"role": {"Arn": "arn:aws:iam::012345678912:role/tasks"}},
    ]:
        with raises(InvalidConfiguration):
            FargateTasksSettings(get_content(case))
