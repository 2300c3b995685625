# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
ECS resources of the Fargate tasks: cluster, log group, container and task definitions.
"""
