# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Most commonly used functions shared across all modules.
"""

from __future__ import annotations

import re

from troposphere import AWSObject, Template

NONALPHANUM = re.compile(r"([^a-zA-Z\d]+)")


def alphanumeric_only(name: str) -> str:
    """
    Strips every character that is not a letter or a digit, so the value can be used as a
    CFN resource title.

    :param str name:
    :rtype: str
    """
    return NONALPHANUM.sub("", name)


def build_template(description: str = None) -> Template:
    """Returns a new template with the version and description set"""
    template = Template()
    template.set_version()
    if description:
        template.set_description(description)
    return template


def add_resource(template: Template, resource: AWSObject) -> AWSObject:
    """
    Adds the resource to the template. The template raises ValueError if the title is already taken.

    :param troposphere.Template template:
    :param troposphere.AWSObject resource:
    """
    return template.add_resource(resource)
