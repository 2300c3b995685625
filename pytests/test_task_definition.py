# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2021 John Mille<john@compose-x.io>

from pytest import fixture, raises
from troposphere.ecs import ContainerDefinition

from fargate_tasks.common.settings import FargateTasksSettings
from fargate_tasks.ecs.task_definition import build_task_definition
from fargate_tasks.ecs.task_spec import TaskSpec
from fargate_tasks.exceptions import InvalidOverride, MissingRequiredField

ROLE = "arn:aws:iam::012345678912:role/tasks"


@fixture()
def settings():
    return FargateTasksSettings(
        {
            "service": "myservice",
            "provider": {"stage": "test"},
            "custom": {"fargate": {"role": ROLE, "tasks": {}}},
        }
    )


@fixture()
def containers():
    return [ContainerDefinition(Name="app", Image="nginx")]


def test_task_spec():
    task = TaskSpec("report-builder.v2", {"image": "nginx"})
    assert task.title == "reportbuilderv2Task"
    assert task.config_path == "custom.fargate.tasks.report-builder.v2"
    assert task.memory == "2.0GB"
    assert task.cpu == 1024
    assert task.environment is None
    assert task.override.container == {}
    assert task.override.task == {}
    assert task.override.role is None

    with raises(MissingRequiredField) as error:
        TaskSpec("worker", {"command": ["echo"]}).validate()
    assert error.value.identifier == "worker"
    assert error.value.field == "image"

    with raises(MissingRequiredField) as error:
        TaskSpec("worker", None).validate()
    assert error.value.identifier == "worker"

    with raises(MissingRequiredField) as error:
        TaskSpec("worker", {"image": {"path": "./src"}}).validate()
    assert error.value.field == "name"


def test_task_definition(settings, containers):
    task = TaskSpec("worker", {"image": "nginx"})
    task_definition = build_task_definition(settings, task, containers)
    assert task_definition.title == "workerTask"
    assert task_definition.to_dict() == {
        "Type": "AWS::ECS::TaskDefinition",
        "Properties": {
            "ContainerDefinitions": [{"Name": "app", "Image": "nginx"}],
            "Family": "myservice-test",
            "NetworkMode": "awsvpc",
            "ExecutionRoleArn": ROLE,
            "TaskRoleArn": ROLE,
            "RequiresCompatibilities": ["FARGATE"],
            "Memory": "2.0GB",
            "Cpu": 1024,
        },
    }


def test_task_definition_settings(settings, containers):
    task = TaskSpec(
        "worker",
        {
            "image": "nginx",
            "memory": "4GB",
            "cpu": 2048,
            "override": {"role": "arn:aws:iam::012345678912:role/other"},
        },
    )
    properties = build_task_definition(settings, task, containers).to_dict()[
        "Properties"
    ]
    assert properties["Memory"] == "4GB"
    assert properties["Cpu"] == 2048
    assert properties["ExecutionRoleArn"] == "arn:aws:iam::012345678912:role/other"
    assert properties["TaskRoleArn"] == "arn:aws:iam::012345678912:role/other"


def test_task_definition_override(settings, containers):
    """
    Override properties always win, numbers are kept for string properties
    """
    task = TaskSpec(
        "worker",
        {
            "image": "nginx",
            "override": {
                "task": {
                    "Family": "custom-family",
                    "Cpu": 4096,
                    "Memory": "8GB",
                    "EphemeralStorage": {"SizeInGiB": 50},
                    "TaskRoleArn": "arn:aws:iam::012345678912:role/task-only",
                }
            },
        },
    )
    properties = build_task_definition(settings, task, containers).to_dict()[
        "Properties"
    ]
    assert properties["Family"] == "custom-family"
    assert properties["Cpu"] == 4096
    assert properties["Memory"] == "8GB"
    assert properties["EphemeralStorage"] == {"SizeInGiB": 50}
    assert properties["TaskRoleArn"] == "arn:aws:iam::012345678912:role/task-only"
    assert properties["ExecutionRoleArn"] == ROLE


def test_invalid_task_override(settings, containers):
    task = TaskSpec(
        "worker", {"image": "nginx", "override": {"task": {"Unknown": "value"}}}
    )
    with raises(InvalidOverride) as error:
        build_task_definition(settings, task, containers)
    assert error.value.section == "task"
    assert "worker" in str(error.value)


def test_task_definition_cfn_functions(settings, containers):
    """
    CFN functions in override.task and override.role are kept as-is
    """
    task = TaskSpec(
        "worker",
        {
            "image": "nginx",
            "cpu": "1 vCPU",
            "override": {
                "role": {"Fn::GetAtt": ["ExecutionRole", "Arn"]},
                "task": {
                    "TaskRoleArn": {"Fn::GetAtt": ["TaskRole", "Arn"]},
                    "Memory": {"Fn::If": ["IsProd", "8GB", "2GB"]},
                    "EphemeralStorage": {"SizeInGiB": {"Ref": "StorageSize"}},
                },
            },
        },
    )
    properties = build_task_definition(settings, task, containers).to_dict()[
        "Properties"
    ]
    assert properties["ExecutionRoleArn"] == {"Fn::GetAtt": ["ExecutionRole", "Arn"]}
    assert properties["TaskRoleArn"] == {"Fn::GetAtt": ["TaskRole", "Arn"]}
    assert properties["Memory"] == {"Fn::If": ["IsProd", "8GB", "2GB"]}
    assert properties["EphemeralStorage"] == {"SizeInGiB": {"Ref": "StorageSize"}}
    assert properties["Cpu"] == "1 vCPU"
