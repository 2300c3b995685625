#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Module for the FargateTasksSettings class, which holds everything the synthesis needs out of
the service definition.
"""

from __future__ import annotations

from copy import deepcopy
from importlib.resources import files as pkg_files
from json import loads

import jsonschema
import yaml

try:
    from yaml import CLoader as Loader
except ImportError:
    from yaml import Loader

from compose_x_common.compose_x_common import keyisset, set_else_none

from fargate_tasks.common.logging import LOG
from fargate_tasks.ecs.task_spec import TaskSpec
from fargate_tasks.exceptions import (
    FargateTasksException,
    InvalidConfiguration,
    MissingRequiredField,
)

FARGATE_PATH = "custom.fargate"


def validate_root_properties(options: dict) -> None:
    """
    Checks the properties that all tasks need are set.

    :param dict options: the custom.fargate section
    :raises MissingRequiredField: if role or tasks is not set
    """
    if not keyisset("role", options):
        raise MissingRequiredField("role", FARGATE_PATH)
    if not keyisset("tasks", options):
        raise MissingRequiredField("tasks", FARGATE_PATH)


def get_service_name(content: dict) -> str:
    """The service name can be set as a string or as a mapping with name"""
    service = set_else_none("service", content)
    if isinstance(service, dict):
        service = set_else_none("name", service)
    if not service:
        raise MissingRequiredField("service", "service")
    return service


class FargateTasksSettings:
    """
    Class to hold the settings for the synthesis of the Fargate tasks.

    :ivar str service_name: name of the service, used as prefix for all resource names
    :ivar str stage: the deployment stage
    :ivar dict options: the custom.fargate section
    :ivar dict images_catalog: provider.ecr.images
    :ivar bool scan_on_push: provider.ecr.scanOnPush
    """

    input_file_arg = "ServiceFile"
    stage_arg = "Stage"
    region_arg = "RegionName"
    format_arg = "TemplateFormat"
    output_file_arg = "OutputFile"
    no_build_arg = "NoBuild"

    default_stage = "dev"
    allowed_formats = ["json", "yaml"]
    default_format = "json"
    schema_path = "specs/fargate.spec.json"

    def __init__(
        self, content: dict, stage: str = None, service_name: str = None
    ):
        self.service_content = deepcopy(content) if content else {}
        self.service_name = (
            service_name if service_name else get_service_name(self.service_content)
        )
        provider = set_else_none("provider", self.service_content, alt_value={})
        self.stage = stage if stage else set_else_none("stage", provider, self.default_stage)
        self.region = set_else_none("region", provider)
        ecr = set_else_none("ecr", provider, alt_value={})
        self.images_catalog = set_else_none("images", ecr, alt_value={})
        self.scan_on_push = keyisset("scanOnPush", ecr)
        custom = set_else_none("custom", self.service_content, alt_value={})
        self.options = set_else_none("fargate", custom, alt_value={})
        self.validate_schema(self.options)

    @classmethod
    def from_file(cls, file_path: str, **kwargs) -> FargateTasksSettings:
        """
        Loads the service definition from a YAML file

        :param str file_path:
        :param kwargs: passed on to the class constructor
        """
        with open(file_path) as service_fd:
            content = yaml.load(service_fd.read(), Loader=Loader)
        LOG.debug(f"Loaded service definition from {file_path}")
        return cls(content, **kwargs)

    def validate_schema(self, options: dict) -> None:
        """
        JSON Validation of the custom.fargate section

        :raises InvalidConfiguration: when the section is not conform to the schema
        """
        source = pkg_files("fargate_tasks").joinpath(self.schema_path)
        LOG.debug(f"Validating {FARGATE_PATH} against input schema {source}")
        try:
            jsonschema.validate(options, loads(source.read_text()))
        except jsonschema.exceptions.ValidationError as error:
            LOG.error(f"{FARGATE_PATH} - Definition is not conform to schema.")
            location = ".".join(str(part) for part in error.absolute_path)
            raise InvalidConfiguration(
                f"{FARGATE_PATH}.{location}: {error.message}"
                if location
                else f"{FARGATE_PATH}: {error.message}"
            ) from error

    @property
    def family_name(self) -> str:
        """Name shared by the cluster, the log group and the task definitions families"""
        return f"{self.service_name}-{self.stage}"

    @property
    def role(self) -> str:
        return set_else_none("role", self.options)

    @property
    def environment(self) -> dict:
        return set_else_none("environment", self.options, alt_value={})

    @property
    def datadog(self):
        """
        The datadog section. Any value other than null or false enables the agent sidecar.
        """
        datadog = self.options.get("datadog")
        if datadog is None or datadog is False:
            return None
        return datadog if isinstance(datadog, dict) else {}

    @property
    def tasks(self) -> list[TaskSpec]:
        """The tasks, in declaration order"""
        return [
            TaskSpec(identifier, definition)
            for identifier, definition in set_else_none(
                "tasks", self.options, alt_value={}
            ).items()
        ]

    def validate(self) -> None:
        """
        Validates root properties, and that no two tasks share the same resource name.

        :raises MissingRequiredField:
        :raises FargateTasksException: when two identifiers give the same resource name
        """
        validate_root_properties(self.options)
        titles = {}
        for task in self.tasks:
            if task.title in titles:
                raise FargateTasksException(
                    f"Tasks {titles[task.title]} and {task.identifier} both "
                    f"result in resource {task.title}"
                )
            titles[task.title] = task.identifier
