# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Shared resources for all the tasks: the ECS Cluster and the CloudWatch log group.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from troposphere import Template
    from fargate_tasks.common.settings import FargateTasksSettings

from troposphere.ecs import Cluster
from troposphere.logs import LogGroup

from fargate_tasks.common import add_resource
from fargate_tasks.common.logging import LOG
from fargate_tasks.ecs.ecs_params import CLUSTER_T, FARGATE_PROVIDER, LOG_GROUP_T


def add_ecs_cluster(settings: FargateTasksSettings, template: Template) -> Cluster:
    """
    Adds the Fargate only ECS Cluster the tasks run into.

    :param FargateTasksSettings settings:
    :param troposphere.Template template:
    :rtype: troposphere.ecs.Cluster
    """
    cluster = Cluster(
        CLUSTER_T,
        CapacityProviders=[FARGATE_PROVIDER],
        ClusterName=settings.family_name,
    )
    LOG.debug(f"Adding ECS Cluster {settings.family_name}")
    return add_resource(template, cluster)


def add_log_group(settings: FargateTasksSettings, template: Template) -> LogGroup:
    """
    Adds the log group all containers send their logs to.

    :param FargateTasksSettings settings:
    :param troposphere.Template template:
    :rtype: troposphere.logs.LogGroup
    """
    log_group = LogGroup(LOG_GROUP_T, LogGroupName=f"ecs/{settings.family_name}")
    return add_resource(template, log_group)
