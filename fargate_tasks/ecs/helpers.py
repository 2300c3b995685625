#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Helpers to merge the user overrides into the ECS properties computed for a task.
"""

from __future__ import annotations

import re
from typing import Type

from troposphere import (
    AWSObject,
    BaseAWSObject,
    GenericHelperFn,
    is_aws_object_subclass,
)

from fargate_tasks.exceptions import InvalidOverride

INTRINSIC_KEY_RE = re.compile(r"^(Ref|Condition|Fn::[A-Za-z0-9]+)$")


def is_intrinsic(value) -> bool:
    """
    Whether the value is a CFN function mapping, i.e. {"Ref": "Bucket"} or {"Fn::GetAtt": [...]}
    """
    return (
        isinstance(value, dict)
        and len(value) == 1
        and bool(INTRINSIC_KEY_RE.match(str(next(iter(value)))))
    )


def as_property_value(value):
    """
    Returns the value as troposphere sets it without type check when it is a CFN function.
    """
    if is_intrinsic(value):
        return GenericHelperFn(value)
    return value


def keeps_number(expected_type, value) -> bool:
    """Numbers for string properties are kept as set by the user, i.e. Cpu: 2048"""
    return (
        expected_type is str
        and isinstance(value, (int, float))
        and not isinstance(value, bool)
    )


def override_to_object(
    object_class: Type[BaseAWSObject], title, properties: dict
) -> BaseAWSObject:
    """
    Creates the troposphere object for the override properties.
    Plain values go through troposphere from_dict. CFN functions, and numbers for string
    properties, are set afterwards as GenericHelperFn, which troposphere does not type check.
    Nested properties are done the same way.

    :param object_class: the troposphere class the properties are for
    :param str title: the resource title, None for properties
    :param dict properties:
    :raises AttributeError: for properties the object does not have
    :raises (TypeError, ValueError): for values of the wrong type
    """
    plain = {}
    helpers = {}
    for name, value in properties.items():
        expected_type = (
            object_class.props[name][0] if name in object_class.props else None
        )
        if is_intrinsic(value) or keeps_number(expected_type, value):
            helpers[name] = GenericHelperFn(value)
        elif is_aws_object_subclass(expected_type) and isinstance(value, dict):
            helpers[name] = override_to_object(expected_type, None, value)
        elif (
            isinstance(expected_type, list)
            and expected_type
            and is_aws_object_subclass(expected_type[0])
            and isinstance(value, list)
        ):
            helpers[name] = [
                override_to_object(expected_type[0], None, item)
                if isinstance(item, dict) and not is_intrinsic(item)
                else as_property_value(item)
                for item in value
            ]
        else:
            plain[name] = value
    override_object = object_class.from_dict(title, plain)
    for name, value in helpers.items():
        setattr(override_object, name, value)
    return override_object


def merge_override(
    object_class: Type[BaseAWSObject],
    identifier: str,
    section: str,
    computed: dict,
    override: dict,
) -> dict:
    """
    Merges the override properties on top of the computed ones. The override always wins.
    Override properties go through troposphere first, so only properties of the ECS object
    with the right type are accepted and nested mappings are turned into their AWSProperty.
    CFN functions are accepted for any property.

    :param object_class: troposphere class of the object being overridden
    :param str identifier: the task identifier
    :param str section: container or task
    :param dict computed: the properties the engine computed
    :param dict override: the user properties
    :return: the merged properties
    :rtype: dict
    :raises InvalidOverride:
    """
    merged = dict(computed)
    if not override:
        return merged
    try:
        overridden = override_to_object(
            object_class,
            "Override" if issubclass(object_class, AWSObject) else None,
            override,
        )
    except (AttributeError, TypeError, ValueError) as error:
        raise InvalidOverride(identifier, section, error) from error
    merged.update(overridden.properties)
    return merged
