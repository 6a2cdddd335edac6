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
Models describing certificate install plans and the images they target.
"""
from enum import Enum
from typing import List
from pydantic import BaseModel, ConfigDict


class OSFamily(str, Enum):
    """
    Operating system family of a base image, as far as CA trust is concerned.
    """
    ALPINE = "alpine"
    DEBIAN_UBUNTU = "debian-ubuntu"
    REDHAT = "redhat"
    UNKNOWN = "unknown"


class RuntimeKind(str, Enum):
    """
    Runtime shipped by a base image.
    """
    JAVA = "java"
    GENERIC = "generic"


class TrustStoreLayout(BaseModel):
    """
    Where an OS family keeps its trust anchors and how it refreshes them.
    """
    model_config = ConfigDict(frozen=True)

    trust_dir: str
    refresh_command: str


class CopyCertEntry(BaseModel):
    """
    A certificate file to copy into the image during the build.
    """
    model_config = ConfigDict(frozen=True)

    source: str
    destination: str


class CertificatePlan(BaseModel):
    """
    Everything needed to trust a set of certificates inside one image.
    """
    base_image: str
    os_family: OSFamily
    runtime: RuntimeKind
    copy_entries: List[CopyCertEntry] = []
    commands: List[str] = []
