#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Resolution of the tasks image to a reference the container definition can use.

An image is either

* a registry URI (private ECR or pinned by digest), used as-is
* a name, looked up in provider.ecr.images. Names not in the catalog are pulled as they are,
  i.e. public images such as ``nginx``
* a name which catalog entry is a build descriptor, in which case the image is built, pushed
  and the resulting URI is used
"""

from __future__ import annotations

import re
from typing import Union

from compose_x_common.compose_x_common import keyisset, set_else_none

from fargate_tasks.common.logging import LOG
from fargate_tasks.exceptions import ImageBuildFailure

REGISTRY_URI_RE = re.compile(
    r"^\d+\.dkr\.ecr\.[a-z0-9-]+\.amazonaws\.com/[^@]+"
    r"|[^@:]+@sha256:[a-f0-9]{64}$"
)

DEFAULT_DOCKERFILE = "Dockerfile"
DEFAULT_PLATFORM = ""


def is_registry_uri(image: str) -> bool:
    """
    Whether the string is an ECR repository URI or a reference pinned to a sha256 digest

    :param str image:
    :rtype: bool
    """
    return isinstance(image, str) and bool(REGISTRY_URI_RE.search(image))


def resolve_image_uri_or_name(image: Union[str, dict]) -> tuple:
    """
    Splits the image definition into (uri, name). Only one of the two is set.
    For a mapping, uri takes precedence over name.

    :param image: the task image definition
    :return: (uri, name)
    :rtype: tuple
    """
    if isinstance(image, str):
        if is_registry_uri(image):
            return image, None
        return None, image
    if keyisset("uri", image):
        return image["uri"], None
    return None, set_else_none("name", image)


class ImageResolver:
    """
    Resolves tasks images. The catalog is only read, so a single resolver is shared by all the
    tasks synthesized in parallel.

    :ivar dict images_catalog: provider.ecr.images
    :ivar bool scan_on_push: provider.ecr.scanOnPush, given to the builder
    :ivar image_builder: object with a build_and_resolve method. Without it, images that need
        building cannot be resolved.
    """

    def __init__(
        self,
        images_catalog: dict = None,
        scan_on_push: bool = False,
        image_builder=None,
    ):
        self.images_catalog = images_catalog or {}
        self.scan_on_push = scan_on_push
        self.image_builder = image_builder

    def resolve(self, image: Union[str, dict]) -> str:
        """
        Returns the image reference to use in the container definition.

        :param image: the task image definition
        :rtype: str
        """
        image_uri, image_name = resolve_image_uri_or_name(image)
        if image_uri:
            LOG.debug(f"Image {image_uri} is a registry URI. Using as-is")
            return image_uri

        catalog_entry = set_else_none(image_name, self.images_catalog)
        if not catalog_entry:
            LOG.debug(f"Image {image_name} not defined in provider.ecr.images")
            return image_name

        if isinstance(catalog_entry, str):
            if is_registry_uri(catalog_entry):
                return catalog_entry
            return self.build(image_name, catalog_entry, {})
        return self.build(image_name, set_else_none("path", catalog_entry), catalog_entry)

    def build(self, image_name: str, image_path: str, descriptor: dict) -> str:
        """
        Hands the build descriptor to the image builder, with defaults for the unset properties.

        :param str image_name:
        :param str image_path: build context
        :param dict descriptor: the provider.ecr.images entry
        :return: the URI of the pushed image
        :rtype: str
        """
        if self.image_builder is None:
            raise ImageBuildFailure(
                f"Image {image_name} must be built from {image_path} "
                "but no image builder is available"
            )
        LOG.info(f"Building image {image_name} from {image_path}")
        return self.image_builder.build_and_resolve(
            image_name=image_name,
            image_path=image_path,
            image_filename=set_else_none("file", descriptor, DEFAULT_DOCKERFILE),
            build_args=set_else_none("buildArgs", descriptor, alt_value={}),
            cache_from=set_else_none("cacheFrom", descriptor, alt_value=[]),
            platform=set_else_none("platform", descriptor, DEFAULT_PLATFORM),
            scan_on_push=self.scan_on_push,
        )
