#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fargate_tasks.common.settings import FargateTasksSettings
    from fargate_tasks.ecs.task_spec import TaskSpec

from troposphere import GenericHelperFn
from troposphere.ecs import ContainerDefinition, TaskDefinition

from fargate_tasks.ecs.ecs_params import FARGATE_PROVIDER, NETWORK_MODE
from fargate_tasks.ecs.helpers import as_property_value, keeps_number, merge_override


def task_size_value(value):
    """Memory and Cpu are kept as declared, 1024 or "1 vCPU" """
    if keeps_number(str, value):
        return GenericHelperFn(value)
    return value


def build_task_definition(
    settings: FargateTasksSettings,
    task: TaskSpec,
    container_definitions: list[ContainerDefinition],
) -> TaskDefinition:
    """
    Builds the Fargate task definition, with override.task applied last.
    All tasks share the same family unless overridden.
    The same role is used for execution and for the task, override.role taking precedence.

    :param FargateTasksSettings settings:
    :param TaskSpec task:
    :param list container_definitions:
    :rtype: troposphere.ecs.TaskDefinition
    """
    role = as_property_value(
        task.override.role if task.override.role else settings.role
    )
    props = {
        "ContainerDefinitions": container_definitions,
        "Family": settings.family_name,
        "NetworkMode": NETWORK_MODE,
        "ExecutionRoleArn": role,
        "TaskRoleArn": role,
        "RequiresCompatibilities": [FARGATE_PROVIDER],
        "Memory": task_size_value(task.memory),
        "Cpu": task_size_value(task.cpu),
    }
    props = merge_override(
        TaskDefinition, task.identifier, "task", props, task.override.task
    )
    return TaskDefinition(task.title, **props)
