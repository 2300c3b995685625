# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Main module to generate the template with the ECS Cluster, the log group and the task definitions
of all the tasks declared in custom.fargate.tasks.
"""

from __future__ import annotations

from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fargate_tasks.common.settings import FargateTasksSettings
    from fargate_tasks.ecs.task_spec import TaskSpec

from troposphere import Template
from troposphere.ecs import TaskDefinition

from fargate_tasks.common import add_resource, build_template
from fargate_tasks.common.logging import LOG
from fargate_tasks.ecr.image_resolver import ImageResolver
from fargate_tasks.ecs.container_definition import build_container_definition
from fargate_tasks.ecs.ecs_cluster import add_ecs_cluster, add_log_group
from fargate_tasks.ecs.managed_sidecars.datadog_agent import inject_datadog_agent
from fargate_tasks.ecs.task_definition import build_task_definition


def synthesize_task(
    settings: FargateTasksSettings, task: TaskSpec, image_resolver: ImageResolver
) -> TaskDefinition:
    """
    Creates the task definition for one task. Nothing is written to the template.

    :param FargateTasksSettings settings:
    :param TaskSpec task:
    :param ImageResolver image_resolver:
    :rtype: troposphere.ecs.TaskDefinition
    """
    LOG.info(f"{task.identifier} - Processing task")
    task.validate()
    image = image_resolver.resolve(task.image)
    LOG.info(f"{task.identifier} - Using image {image}")
    definitions = [build_container_definition(settings, task, image)]
    definitions = inject_datadog_agent(settings, definitions)
    return build_task_definition(settings, task, definitions)


def synthesize_tasks(
    settings: FargateTasksSettings,
    image_resolver: ImageResolver,
    max_workers: int = None,
) -> list[TaskDefinition]:
    """
    Synthesizes all the tasks in parallel, one future per task.

    On the first failure, the tasks not started yet are cancelled and the ones running are
    left to finish, then the error of the first failed task (in declaration order) is raised.

    :param FargateTasksSettings settings:
    :param ImageResolver image_resolver:
    :param int max_workers: number of threads. Defaults to the ThreadPoolExecutor default.
    :return: the task definitions, in declaration order
    :rtype: list[troposphere.ecs.TaskDefinition]
    """
    tasks = settings.tasks
    with ThreadPoolExecutor(
        max_workers=max_workers, thread_name_prefix="fargate-tasks"
    ) as pool:
        futures = {
            pool.submit(synthesize_task, settings, task, image_resolver): task
            for task in tasks
        }
        done, not_done = wait(futures, return_when=FIRST_EXCEPTION)
        failed = [
            future
            for future in futures
            if future in done and future.exception() is not None
        ]
        if failed:
            for future in not_done:
                future.cancel()
            for future in failed:
                LOG.error(f"{futures[future].identifier} - {future.exception()}")
            raise failed[0].exception()
    return [future.result() for future in futures]


def generate_template(
    settings: FargateTasksSettings,
    template: Template = None,
    image_builder=None,
    max_workers: int = None,
) -> Template:
    """
    Adds the cluster, the log group and one task definition per task to the template.
    Task definitions are only added once all tasks were synthesized successfully.

    :param FargateTasksSettings settings:
    :param troposphere.Template template: template to add the resources to. New one if not set.
    :param image_builder: object with build_and_resolve, used for images that need building
    :param int max_workers:
    :rtype: troposphere.Template
    """
    settings.validate()
    if template is None:
        template = build_template(f"Fargate tasks for {settings.family_name}")
    add_ecs_cluster(settings, template)
    add_log_group(settings, template)
    image_resolver = ImageResolver(
        images_catalog=settings.images_catalog,
        scan_on_push=settings.scan_on_push,
        image_builder=image_builder,
    )
    for task_definition in synthesize_tasks(settings, image_resolver, max_workers):
        add_resource(template, task_definition)
        LOG.debug(f"Added {task_definition.title} to template")
    return template
