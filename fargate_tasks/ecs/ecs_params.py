# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Titles and default values bound to fargate_tasks.ecs
All the titles, marked `_T`, are the resource names used in the template. The task definitions
titles are derived from the task identifiers, suffixed with TASK_T_SUFFIX.

You can change the names *values* so you like so long as you keep it [a-zA-Z0-9]
"""

CLUSTER_T = "FargateTasksCluster"
LOG_GROUP_T = "FargateTasksLogGroup"
TASK_T_SUFFIX = "Task"

FARGATE_PROVIDER = "FARGATE"
NETWORK_MODE = "awsvpc"

DEFAULT_TASK_MEMORY = "2.0GB"
DEFAULT_TASK_CPU = 1024

LOG_DRIVER = "awslogs"
LOG_STREAM_PREFIX = "fargate"

DATADOG_AGENT_IMAGE = "datadog/agent:latest"
DATADOG_AGENT_NAME_SUFFIX = "datadog-agent"
DATADOG_AGENT_ESSENTIAL = False
DATADOG_AGENT_CPU = 10
DATADOG_AGENT_MEMORY_RESERVATION = 256
