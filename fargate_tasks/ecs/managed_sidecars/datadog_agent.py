#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Datadog agent sidecar, added to every task when custom.fargate.datadog is set.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fargate_tasks.common.settings import FargateTasksSettings

from compose_x_common.compose_x_common import keyisset, set_else_none
from troposphere.ecs import ContainerDefinition, Environment, Secret

from fargate_tasks.common.logging import LOG
from fargate_tasks.ecs.container_definition import env_value_to_string
from fargate_tasks.ecs.ecs_params import (
    DATADOG_AGENT_CPU,
    DATADOG_AGENT_ESSENTIAL,
    DATADOG_AGENT_IMAGE,
    DATADOG_AGENT_MEMORY_RESERVATION,
    DATADOG_AGENT_NAME_SUFFIX,
)
from fargate_tasks.exceptions import MissingRequiredField

DATADOG_PATH = "custom.fargate.datadog"


class DatadogAgent:
    """
    The Datadog agent container for a service.

    :ivar str api_key: SSM parameter / Secret ARN the agent API key is read from
    """

    def __init__(self, family_name: str, options: dict):
        if not keyisset("ssm_api_key", options):
            raise MissingRequiredField("ssm_api_key", DATADOG_PATH)
        self.name = f"{family_name}-{DATADOG_AGENT_NAME_SUFFIX}"
        self.api_key = options["ssm_api_key"]
        self.essential = set_else_none("essential", options, DATADOG_AGENT_ESSENTIAL)
        self.cpu = set_else_none("cpu", options, DATADOG_AGENT_CPU)
        self.memory = set_else_none("memory", options, DATADOG_AGENT_MEMORY_RESERVATION)
        self.statsd_enabled = keyisset("statsd_enabled", options)

    def container_definition(self) -> ContainerDefinition:
        return ContainerDefinition(
            Name=self.name,
            Image=DATADOG_AGENT_IMAGE,
            Essential=self.essential,
            Cpu=self.cpu,
            MemoryReservation=self.memory,
            Environment=[
                Environment(Name="ECS_FARGATE", Value=env_value_to_string(True)),
                Environment(
                    Name="DD_DOGSTATSD_NON_LOCAL_TRAFFIC",
                    Value=env_value_to_string(self.statsd_enabled),
                ),
            ],
            Secrets=[Secret(Name="DD_API_KEY", ValueFrom=self.api_key)],
        )


def inject_datadog_agent(
    settings: FargateTasksSettings, definitions: list[ContainerDefinition]
) -> list[ContainerDefinition]:
    """
    Returns the container definitions with the agent appended when datadog is enabled.
    The input list is not modified.

    :raises MissingRequiredField: when datadog is enabled without ssm_api_key
    """
    if settings.datadog is None:
        return definitions
    agent = DatadogAgent(settings.family_name, settings.datadog)
    LOG.debug(f"Adding {agent.name} sidecar")
    return definitions + [agent.container_definition()]
