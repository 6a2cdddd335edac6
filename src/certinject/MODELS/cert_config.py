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
Models for the certinject configuration file.
"""
from typing import List, Optional
from pydantic import BaseModel


class CertificateConfig(BaseModel):
    """
    Certificates to inject and the image they go into.

    Either base_image or dockerfile identifies the image; base_image wins
    when both are set.
    """
    base_image: Optional[str] = None
    dockerfile: Optional[str] = None
    certificates: List[str] = []
    user: Optional[str] = None
