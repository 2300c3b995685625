#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Builds the images declared in provider.ecr.images and pushes them to the service ECR repository.
"""

from __future__ import annotations

import base64
import threading

import docker
from boto3.session import Session
from compose_x_common.aws import get_session

from fargate_tasks.common.logging import LOG
from fargate_tasks.exceptions import ImageBuildFailure


def get_repository_name(service_name: str, stage: str) -> str:
    return f"serverless-{service_name}-{stage}".lower()


class EcrImageBuilder:
    """
    Image builder using the local docker engine and AWS ECR.
    One repository per service and stage; each image is pushed with its name as tag.

    The repository is created on first use. Safe to share across the synthesis threads.
    """

    def __init__(
        self,
        service_name: str,
        stage: str,
        session: Session = None,
        docker_client: docker.DockerClient = None,
    ):
        self.session = get_session(session)
        self.repository_name = get_repository_name(service_name, stage)
        self._docker_client = docker_client
        self._ecr_client = None
        self._repository_uri = None
        self._lock = threading.Lock()

    @property
    def docker_client(self) -> docker.DockerClient:
        with self._lock:
            if self._docker_client is None:
                try:
                    self._docker_client = docker.from_env()
                except docker.errors.DockerException as error:
                    raise ImageBuildFailure(
                        "Failed to connect to any docker engine."
                    ) from error
            return self._docker_client

    @property
    def ecr_client(self):
        with self._lock:
            if self._ecr_client is None:
                self._ecr_client = self.session.client("ecr")
            return self._ecr_client

    def ensure_repository(self, scan_on_push: bool = False) -> str:
        """
        Returns the URI of the repository, creating it when it does not exist yet.

        :param bool scan_on_push: set on the repository when it gets created
        :return: the repository URI
        :rtype: str
        """
        client = self.ecr_client
        with self._lock:
            if self._repository_uri:
                return self._repository_uri
            try:
                repository = client.describe_repositories(
                    repositoryNames=[self.repository_name]
                )["repositories"][0]
            except client.exceptions.RepositoryNotFoundException:
                LOG.info(f"Creating ECR repository {self.repository_name}")
                repository = client.create_repository(
                    repositoryName=self.repository_name,
                    imageScanningConfiguration={"scanOnPush": scan_on_push},
                )["repository"]
            self._repository_uri = repository["repositoryUri"]
        return self._repository_uri

    def get_auth_config(self) -> dict:
        """
        Gets the docker credentials for the registry from ECR
        """
        auth_data = self.ecr_client.get_authorization_token()["authorizationData"][0]
        username, password = (
            base64.b64decode(auth_data["authorizationToken"]).decode().split(":", 1)
        )
        return {"username": username, "password": password}

    def build_and_resolve(
        self,
        image_name: str,
        image_path: str,
        image_filename: str = "Dockerfile",
        build_args: dict = None,
        cache_from: list = None,
        platform: str = "",
        scan_on_push: bool = False,
    ) -> str:
        """
        Builds the image, pushes it to the repository and returns the image URI pinned to its digest.

        :param str image_name: used as tag in the repository
        :param str image_path: the build context
        :param str image_filename: the Dockerfile, relative to the build context
        :param dict build_args:
        :param list cache_from:
        :param str platform: target platform, i.e. linux/arm64. Engine default when empty.
        :param bool scan_on_push:
        :return: <repository_uri>@sha256:<digest>
        :rtype: str
        """
        if not image_path:
            raise ImageBuildFailure(f"No build path defined for image {image_name}")
        repository_uri = self.ensure_repository(scan_on_push)
        image_tag = f"{repository_uri}:{image_name}"
        client = self.docker_client
        try:
            client.images.build(
                path=image_path,
                dockerfile=image_filename,
                tag=image_tag,
                buildargs=build_args or {},
                cache_from=cache_from or [],
                platform=platform or None,
                rm=True,
            )
            LOG.info(f"Built {image_tag}. Pushing to {repository_uri}")
            for line in client.images.push(
                repository_uri,
                tag=image_name,
                auth_config=self.get_auth_config(),
                stream=True,
                decode=True,
            ):
                if "error" in line:
                    raise ImageBuildFailure(
                        f"Failed to push {image_tag}: {line['error']}"
                    )
            image = client.images.get(image_tag)
        except docker.errors.DockerException as error:
            raise ImageBuildFailure(
                f"Failed to build {image_name} from {image_path}: {error}"
            ) from error
        for repo_digest in image.attrs.get("RepoDigests", []):
            if repo_digest.startswith(f"{repository_uri}@"):
                LOG.info(f"Image {image_name} resolved to {repo_digest}")
                return repo_digest
        raise ImageBuildFailure(
            f"No digest found for {image_tag} in {repository_uri} after push"
        )
