#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Custom exceptions for fargate-tasks
"""


class FargateTasksException(Exception):
    """
    Top class for Fargate Tasks Exceptions
    """

    def __init__(self, msg, *args):
        super().__init__(msg, *args)


class MissingRequiredField(FargateTasksException):
    """
    Exception when a property the synthesis cannot do without is not set.

    :ivar str field: the name of the missing property
    :ivar str path: where in the configuration it was expected
    :ivar str identifier: the task identifier, when the property is task specific
    """

    def __init__(self, field: str, path: str, identifier: str = None):
        self.field = field
        self.path = path
        self.identifier = identifier
        super().__init__(f"Required property '{field}' missing from '{path}'")


class InvalidOverride(FargateTasksException):
    """
    Exception when a task override sets a property that does not exist or has the wrong type
    """

    def __init__(self, identifier: str, section: str, error: Exception):
        self.identifier = identifier
        self.section = section
        super().__init__(
            f"Invalid override.{section} for task '{identifier}' - {error}"
        )


class InvalidConfiguration(FargateTasksException):
    """
    Exception when custom.fargate does not validate against the JSON schema
    """


class ImageBuildFailure(FargateTasksException):
    """
    Exception when an image could not be built, pushed or resolved
    """
