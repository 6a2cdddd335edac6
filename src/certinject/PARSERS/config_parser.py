# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Parser for certinject YAML configuration files.
"""
import logging
import os
from typing import Dict, Optional

import yaml
from dotenv import dotenv_values
from pydantic import ValidationError

from ..MODELS.cert_config import CertificateConfig
from ..UTILS.string_interpolation import EnvironmentInterpolator
from .dockerfile_parser import DockerfileParser

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "certinject.yml"

ENV_BASE_IMAGE = "CERTINJECT_BASE_IMAGE"
ENV_CERTIFICATES = "CERTINJECT_CERTIFICATES"


class ConfigParser:
    """
    Parser for certinject.yml files.
    """
    def __init__(self, context: Optional[Dict[str, str]] = None):
        """
        Initializes the parser with an optional environment context for
        interpolation and overrides.

        :param context: Environment variables; defaults to the process environment.
        """
        self.context = dict(os.environ) if context is None else context

    def parse(self, config_path: str) -> CertificateConfig:
        """
        Parses a config file from a path.

        Variables from a .env file next to the config fill in whatever the
        context does not define.

        :param config_path: Path to the config file.
        :return: Parsed configuration, with a relative dockerfile path resolved
                 against the config file's directory.
        """
        base_dir = os.path.dirname(os.path.abspath(config_path))
        env_file = os.path.join(base_dir, ".env")
        context = self.context
        if os.path.exists(env_file):
            dotenv = {k: v for k, v in dotenv_values(env_file).items() if v is not None}
            context = {**dotenv, **self.context}
            logger.info("Loaded %d variables from %s", len(dotenv), env_file)

        with open(config_path, 'r') as f:
            content = f.read()
        config = self._parse(content, context)

        if config.dockerfile and not os.path.isabs(config.dockerfile):
            config.dockerfile = os.path.join(base_dir, config.dockerfile)
        return config

    def parse_from_string(self, content: str) -> CertificateConfig:
        """
        Parses a config file from a string.

        :param content: YAML content of the config file.
        :return: Parsed configuration.
        :raises ValueError: If the content is not a valid certinject config.
        """
        return self._parse(content, self.context)

    def _parse(self, content: str, context: Dict[str, str]) -> CertificateConfig:
        try:
            content = EnvironmentInterpolator.interpolate(content, context)
        except KeyError as e:
            raise ValueError(f"Cannot interpolate config: {e.args[0]}") from e

        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in config: {e}") from e
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError("Config must be a mapping")

        if context.get(ENV_BASE_IMAGE):
            data['base_image'] = context[ENV_BASE_IMAGE]
        if context.get(ENV_CERTIFICATES):
            data['certificates'] = [
                p for p in context[ENV_CERTIFICATES].split(os.pathsep) if p
            ]

        try:
            return CertificateConfig.model_validate(data)
        except ValidationError as e:
            raise ValueError(f"Invalid config: {e}") from e


def resolve_base_image(config: CertificateConfig) -> Optional[str]:
    """
    Base image a config targets: base_image if set, else the final stage of its Dockerfile.
    """
    if config.base_image:
        return config.base_image
    if config.dockerfile:
        return DockerfileParser().base_image_from_file(config.dockerfile)
    return None
