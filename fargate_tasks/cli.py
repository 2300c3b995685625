# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Console script for fargate_tasks.
"""

import argparse
import logging
import sys

from boto3.session import Session

from fargate_tasks.common.logging import LOG
from fargate_tasks.common.settings import FargateTasksSettings
from fargate_tasks.ecr.image_builder import EcrImageBuilder
from fargate_tasks.exceptions import FargateTasksException
from fargate_tasks.fargate_tasks import generate_template

VALID_LOG_LEVELS = ["FATAL", "CRITICAL", "ERROR", "WARNING", "WARN", "INFO", "DEBUG"]


def main_parser():
    """
    Console script for fargate_tasks.
    """
    parser = argparse.ArgumentParser(
        description="Renders the CloudFormation template for the Fargate tasks of a service"
    )
    parser.add_argument(
        "-f",
        "--service-file",
        dest=FargateTasksSettings.input_file_arg,
        required=True,
        help="Path to the service definition file",
    )
    parser.add_argument(
        "-s",
        "--stage",
        dest=FargateTasksSettings.stage_arg,
        required=False,
        help="Stage to render for. Defaults to provider.stage, or dev",
    )
    parser.add_argument(
        "--region",
        required=False,
        dest=FargateTasksSettings.region_arg,
        help="Region to build images for. Defaults to provider.region, "
        "or the default region from config or environment vars",
    )
    parser.add_argument(
        "--format",
        help="Defines the format you want to use.",
        type=str,
        dest=FargateTasksSettings.format_arg,
        choices=FargateTasksSettings.allowed_formats,
        default=FargateTasksSettings.default_format,
    )
    parser.add_argument(
        "-o",
        "--output-file",
        dest=FargateTasksSettings.output_file_arg,
        required=False,
        help="File to write the template to. Prints to stdout when not set.",
    )
    parser.add_argument(
        "--no-build",
        dest=FargateTasksSettings.no_build_arg,
        action="store_true",
        default=False,
        help="Fail instead of building images defined with a path in provider.ecr.images",
    )
    parser.add_argument(
        "--loglevel", type=str, help="Log level. Defaults to INFO", required=False
    )
    return parser


def set_log_level(loglevel: str) -> None:
    if loglevel.upper() in VALID_LOG_LEVELS:
        LOG.setLevel(logging.getLevelName(loglevel.upper()))
    else:
        LOG.warning(
            f"Log level value {loglevel} is invalid. Must me one of {VALID_LOG_LEVELS}"
        )


def render_template(settings: FargateTasksSettings, args: dict) -> str:
    """
    Generates the template and returns it in the requested format

    :param FargateTasksSettings settings:
    :param dict args: the parsed CLI arguments
    :rtype: str
    """
    image_builder = None
    if not args[FargateTasksSettings.no_build_arg]:
        region = args[FargateTasksSettings.region_arg] or settings.region
        image_builder = EcrImageBuilder(
            settings.service_name,
            settings.stage,
            session=Session(region_name=region) if region else None,
        )
    template = generate_template(settings, image_builder=image_builder)
    if args[FargateTasksSettings.format_arg] == "yaml":
        return template.to_yaml()
    return template.to_json()


def main(argv: list = None):
    """
    Main entry point for CLI
    :return: status code
    """
    parser = main_parser()
    args = vars(parser.parse_args(argv))
    if args["loglevel"]:
        set_log_level(args["loglevel"])
    LOG.debug(args)
    try:
        settings = FargateTasksSettings.from_file(
            args[FargateTasksSettings.input_file_arg],
            stage=args[FargateTasksSettings.stage_arg],
        )
        content = render_template(settings, args)
    except FargateTasksException as error:
        LOG.error(error)
        return 1
    output_file = args[FargateTasksSettings.output_file_arg]
    if output_file:
        with open(output_file, "w") as template_fd:
            template_fd.write(content)
        LOG.info(f"Template written to {output_file}")
    else:
        print(content)
    return 0


if __name__ == "__main__":
    sys.exit(main())  # pragma: no cover
