#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Primary container definition of a task.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fargate_tasks.common.settings import FargateTasksSettings
    from fargate_tasks.ecs.task_spec import TaskSpec

from troposphere import GenericHelperFn, Ref, Region
from troposphere.ecs import ContainerDefinition, Environment, LogConfiguration

from fargate_tasks.ecs.ecs_params import LOG_DRIVER, LOG_GROUP_T, LOG_STREAM_PREFIX
from fargate_tasks.ecs.helpers import is_intrinsic, merge_override


def env_value_to_string(value) -> str:
    """
    Environment values are strings for ECS. Booleans follow YAML/JSON casing.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


def env_value(value):
    """CFN functions, i.e. {"Ref": "Bucket"}, are kept as-is"""
    if is_intrinsic(value):
        return GenericHelperFn(value)
    return env_value_to_string(value)


def define_environment(task: TaskSpec, global_environment: dict) -> list[Environment]:
    """
    Environment variables of the container. The global environment is only used when the task
    declares an environment section, and task variables take precedence.

    :param TaskSpec task:
    :param dict global_environment: custom.fargate.environment
    :rtype: list[troposphere.ecs.Environment]
    """
    if task.environment is None:
        return []
    environment = dict(global_environment) if global_environment else {}
    environment.update(task.environment)
    return [
        Environment(Name=str(name), Value=env_value(value))
        for name, value in environment.items()
    ]


def define_log_configuration() -> LogConfiguration:
    return LogConfiguration(
        LogDriver=LOG_DRIVER,
        Options={
            "awslogs-region": Region,
            "awslogs-group": Ref(LOG_GROUP_T),
            "awslogs-stream-prefix": LOG_STREAM_PREFIX,
        },
    )


def build_container_definition(
    settings: FargateTasksSettings, task: TaskSpec, image: str
) -> ContainerDefinition:
    """
    Builds the task main container definition, with override.container applied last.

    :param FargateTasksSettings settings:
    :param TaskSpec task:
    :param str image: the resolved image
    :rtype: troposphere.ecs.ContainerDefinition
    """
    props = {
        "Name": task.name if task.name else f"{settings.family_name}-{task.identifier}",
        "Image": image,
        "Environment": define_environment(task, settings.environment),
        "LogConfiguration": define_log_configuration(),
    }
    if task.command is not None:
        props["Command"] = task.command
    props = merge_override(
        ContainerDefinition,
        task.identifier,
        "container",
        props,
        task.override.container,
    )
    return ContainerDefinition(**props)
