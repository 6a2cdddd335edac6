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
Parsers for Dockerfiles, extracting instructions and build stages.
"""
import json
import logging
import re
from typing import Dict, List, Optional
from ..MODELS.dockerfile_ast import BuildStage, Instruction
from ..UTILS.string_interpolation import EnvironmentInterpolator

logger = logging.getLogger(__name__)

INSTRUCTION_PATTERN = re.compile(r'^\s*([A-Za-z]+)\s+(.*)$', re.MULTILINE)

class DockerfileParser:
    """
    Parser for Dockerfile instructions.
    """
    def __init__(self, build_args: Optional[Dict[str, str]] = None):
        """
        :param build_args: Values for ARGs referenced in FROM lines, overriding ARG defaults.
        """
        self.build_args = build_args or {}

    def parse(self, dockerfile_path: str) -> List[Instruction]:
        """
        Parses a Dockerfile from a file path.

        Args:
            dockerfile_path (str): Path to the Dockerfile.

        Returns:
            List[Instruction]: List of parsed instructions.
        """
        with open(dockerfile_path, 'r') as f:
            content = f.read()
        return self.parse_from_string(content)

    def parse_from_string(self, content: str) -> List[Instruction]:
        """
        Parses a Dockerfile from a string content.

        Args:
            content (str): Content of the Dockerfile.

        Returns:
            List[Instruction]: List of parsed instructions.
        """
        instructions = []

        content = re.sub(r'^\s*#.*$', '', content, flags=re.MULTILINE)
        # Line continuations
        content = re.sub(r'\\\s*\n', ' ', content)

        for match in INSTRUCTION_PATTERN.finditer(content):
            inst = match.group(1).upper()
            args_str = match.group(2).strip()

            if args_str.startswith('[') and args_str.endswith(']'):
                try:
                    args = json.loads(args_str)
                except json.JSONDecodeError:
                    args = [args_str]
                if not all(isinstance(a, str) for a in args):
                    args = [args_str]
            elif inst == "FROM":
                args = args_str.split()
            else:
                args = [args_str]

            instructions.append(Instruction(
                instruction=inst,
                arguments=args,
                raw=match.group(0).strip()
            ))

        return instructions

    def parse_stages(self, content: str) -> List[BuildStage]:
        """
        Groups the instructions of a Dockerfile into build stages.

        ARGs declared before the first FROM are expanded in FROM lines.
        Instructions before the first FROM are not part of any stage.
        """
        stages: List[BuildStage] = []
        global_args: Dict[str, str] = {}

        for inst in self.parse_from_string(content):
            if inst.instruction == "FROM":
                stages.append(self._parse_from(inst, {**global_args, **self.build_args}))
            elif not stages:
                if inst.instruction == "ARG" and inst.arguments:
                    name, sep, default = inst.arguments[0].partition('=')
                    if sep:
                        global_args[name.strip()] = default.strip().strip('"\'')
            else:
                stages[-1].instructions.append(inst)

        return stages

    def _parse_from(self, inst: Instruction, args: Dict[str, str]) -> BuildStage:
        platform = None
        words = []
        for word in inst.arguments:
            if word.startswith("--platform="):
                platform = word.split("=", 1)[1]
            elif not word.startswith("--"):
                words.append(word)

        name = None
        if len(words) >= 3 and words[-2].lower() == "as":
            name = words[-1]

        image = words[0] if words else ""
        try:
            image = EnvironmentInterpolator.interpolate(image, args)
        except KeyError as e:
            logger.warning("Cannot expand base image %s: %s", image, e)

        return BuildStage(base_image=image, name=name, platform=platform)

    def base_image(self, content: str) -> Optional[str]:
        """
        Base image of the final build stage.

        A FROM that names an earlier stage resolves to that stage's base image.

        :param content: Content of the Dockerfile.
        :return: The base image, or None when the Dockerfile has no FROM.
        """
        stages = self.parse_stages(content)
        if not stages:
            return None

        by_name = {}
        for stage in stages:
            image = stage.base_image
            if image.lower() in by_name:
                image = by_name[image.lower()]
            if stage.name:
                by_name[stage.name.lower()] = image
        return image

    def base_image_from_file(self, dockerfile_path: str) -> Optional[str]:
        with open(dockerfile_path, 'r') as f:
            return self.base_image(f.read())
